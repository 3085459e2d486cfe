"""
Distance and bearing helpers.

Polyline vertices use the feature service axis order, (x=lng, y=lat), the
same order shapely expects. Query points are passed as separate lat, lng
floats. All distances are in metres.
"""
import math
from typing import Optional, Sequence, Tuple

from geopy.distance import geodesic
from shapely.geometry import LineString, Point

Vertex = Sequence[float]        # (lng, lat)
Path = Sequence[Vertex]
Paths = Sequence[Path]

DIRECTION_BEARINGS = {
    "N": 0.0,
    "NE": 45.0,
    "E": 90.0,
    "SE": 135.0,
    "S": 180.0,
    "SW": 225.0,
    "W": 270.0,
    "NW": 315.0,
}


def distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Geodesic (WGS84) distance between two points"""
    return geodesic((lat1, lng1), (lat2, lng2)).meters


def point_to_segment_m(lat: float, lng: float, a: Vertex, b: Vertex) -> float:
    """
    Distance from a point to the segment AB.

    The point is projected onto AB in a local equirectangular plane
    (longitudes scaled by cos(lat)), clamped to the segment ends, and the
    geodesic distance to that closest point is returned.
    """
    if a[0] == b[0] and a[1] == b[1]:
        return distance_m(lat, lng, a[1], a[0])

    k = math.cos(math.radians(lat))
    segment = LineString([(a[0] * k, a[1]), (b[0] * k, b[1])])
    t = segment.project(Point(lng * k, lat), normalized=True)

    closest_lng = a[0] + t * (b[0] - a[0])
    closest_lat = a[1] + t * (b[1] - a[1])
    return distance_m(lat, lng, closest_lat, closest_lng)


def point_to_polyline_m(lat: float, lng: float, paths: Paths) -> float:
    """Minimum distance from a point to any part of a (multi-part) polyline"""
    min_dist = math.inf
    for path in paths:
        if len(path) == 1:
            min_dist = min(min_dist, distance_m(lat, lng, path[0][1], path[0][0]))
            continue
        for i in range(len(path) - 1):
            dist = point_to_segment_m(lat, lng, path[i], path[i + 1])
            if dist < min_dist:
                min_dist = dist
    return min_dist


def bearing_between(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2, in [0, 360)"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lng = math.radians(lng2 - lng1)

    y = math.sin(d_lng) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lng)
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 can round to 360.0
    return 0.0 if bearing >= 360.0 else bearing


def angle_diff(a: float, b: float) -> float:
    """Shortest absolute angular difference between two bearings (0..180)"""
    diff = abs(a - b) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def direction_bearing(direction: Optional[str]) -> Optional[float]:
    """Bearing of a compass direction code, None for two-way/unknown"""
    if not direction:
        return None
    return DIRECTION_BEARINGS.get(direction)


def polyline_endpoints(paths: Paths) -> Optional[Tuple[Vertex, Vertex]]:
    """First vertex of the first part and last vertex of the last part"""
    if not paths or not paths[0] or not paths[-1]:
        return None
    return paths[0][0], paths[-1][-1]


def path_bearing(paths: Paths) -> Optional[float]:
    """Bearing from the polyline's first vertex to its last vertex"""
    ends = polyline_endpoints(paths)
    if ends is None:
        return None
    first, last = ends
    if first[0] == last[0] and first[1] == last[1]:
        return None
    return bearing_between(first[1], first[0], last[1], last[0])


def is_geometry_reversed(direction: Optional[str], paths: Paths) -> bool:
    """True when the vertex order runs against the signed traffic direction"""
    expected = direction_bearing(direction)
    if expected is None:
        return False
    geo_bearing = path_bearing(paths)
    if geo_bearing is None:
        return False
    return angle_diff(geo_bearing, expected) > 90.0


def points_in_traffic_order(direction: Optional[str], paths: Paths) -> list:
    """All vertices as (lat, lng), ordered the way vehicles drive"""
    points = [(v[1], v[0]) for path in paths for v in path]
    if is_geometry_reversed(direction, paths):
        points.reverse()
    return points
