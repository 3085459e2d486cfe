"""Fetcher for bus lane enforcement cameras, GIS layer 949"""
from config import CAMERAS_LAYER
from .arcgis_fetcher import ArcGISLayerFetcher


class CamerasFetcher(ArcGISLayerFetcher):
    """Camera points with t_rechov1 (street), ms_bayit1 (house number), ms_atar and status"""

    layer_id = CAMERAS_LAYER
    label = "cameras"
