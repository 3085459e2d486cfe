from .route_builder import (
    DrivingSimulator,
    RouteItem,
    build_route_path,
    cumulative_distances,
    fetch_connectors,
    interpolate_on_path,
)

__all__ = [
    "DrivingSimulator",
    "RouteItem",
    "build_route_path",
    "cumulative_distances",
    "fetch_connectors",
    "interpolate_on_path",
]
