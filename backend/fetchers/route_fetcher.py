"""Road-following connector paths from an OSRM-compatible routing service"""
import logging
from typing import List, Tuple

import aiohttp

from config import OSRM_BASE_URL
from .base_fetcher import BaseFetcher

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]


class RouteFetcher(BaseFetcher):
    """Driving route between two points, used to join simulator route items"""

    def __init__(self, base_url: str = OSRM_BASE_URL, session=None):
        super().__init__(session)
        self.base_url = base_url.rstrip("/")

    def get_source_name(self) -> str:
        return f"Routing service ({self.base_url})"

    def route_url(self, start: LatLng, end: LatLng) -> str:
        # OSRM expects lng,lat
        return (
            f"{self.base_url}/route/v1/driving/"
            f"{start[1]},{start[0]};{end[1]},{end[0]}"
        )

    async def fetch(self, start: LatLng = None, end: LatLng = None) -> List[LatLng]:
        """Route points as (lat, lng); empty when there is no route"""
        if start is None or end is None:
            raise ValueError("RouteFetcher.fetch needs a start and an end point")

        params = {"overview": "full", "geometries": "geojson"}
        try:
            data = await self.fetch_with_retry(self.route_url(start, end), params=params)
        except aiohttp.ClientError as e:
            logger.warning(f"Routing failed between {start} and {end}: {e}")
            return []

        routes = data.get("routes") or []
        if data.get("code") != "Ok" or not routes:
            logger.info(f"No route between {start} and {end} (code={data.get('code')})")
            return []

        coordinates = (routes[0].get("geometry") or {}).get("coordinates") or []
        return [(c[1], c[0]) for c in coordinates if len(c) >= 2]
