"""Geographic primitives shared by matching, camera assignment and tracking"""
from .geo import (
    DIRECTION_BEARINGS,
    angle_diff,
    bearing_between,
    direction_bearing,
    distance_m,
    is_geometry_reversed,
    path_bearing,
    point_to_polyline_m,
    point_to_segment_m,
    points_in_traffic_order,
    polyline_endpoints,
)

__all__ = [
    "DIRECTION_BEARINGS",
    "angle_diff",
    "bearing_between",
    "direction_bearing",
    "distance_m",
    "is_geometry_reversed",
    "path_bearing",
    "point_to_polyline_m",
    "point_to_segment_m",
    "points_in_traffic_order",
    "polyline_endpoints",
]
