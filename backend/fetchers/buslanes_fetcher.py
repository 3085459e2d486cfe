"""Fetcher for bus lane segments (נת"צ), GIS layer 611"""
from config import BUS_LANES_LAYER
from .arcgis_fetcher import ArcGISLayerFetcher


class BusLanesFetcher(ArcGISLayerFetcher):
    """
    Bus lane segments with street_name, from_street, to_street,
    direction_name (N, NE, ... NW), status and polyline paths.
    """

    layer_id = BUS_LANES_LAYER
    label = "bus lanes"
