"""Fetchers for the municipal GIS layers and the routing service"""
from .arcgis_fetcher import ArcGISLayerFetcher
from .base_fetcher import BaseFetcher
from .buslanes_fetcher import BusLanesFetcher
from .cameras_fetcher import CamerasFetcher
from .route_fetcher import RouteFetcher

__all__ = [
    "ArcGISLayerFetcher",
    "BaseFetcher",
    "BusLanesFetcher",
    "CamerasFetcher",
    "RouteFetcher",
]
