"""Paginated queries against the municipal ArcGIS MapServer"""
import logging
from typing import Any, Dict, List

from config import ARCGIS_BASE_URL, ARCGIS_PAGE_SIZE
from errors import FeatureServiceError
from .base_fetcher import BaseFetcher

logger = logging.getLogger(__name__)


class ArcGISLayerFetcher(BaseFetcher):
    """Fetches every feature of one MapServer layer, page by page"""

    layer_id: str = ""
    label: str = "features"

    def __init__(self, layer_id: str = None, base_url: str = ARCGIS_BASE_URL,
                 page_size: int = ARCGIS_PAGE_SIZE, session=None):
        super().__init__(session)
        if layer_id is not None:
            self.layer_id = layer_id
        self.page_size = page_size
        self.base_url = f"{base_url}/{self.layer_id}/query"

    def get_source_name(self) -> str:
        return f"Tel Aviv GIS layer {self.layer_id} ({self.label})"

    def _query_params(self, offset: int = 0, count: int = None) -> Dict[str, Any]:
        return {
            "where": "1=1",
            "outFields": "*",
            "returnGeometry": "true",
            "outSR": "4326",  # WGS84 lat/lng
            "f": "json",
            "resultOffset": offset,
            "resultRecordCount": count or self.page_size,
        }

    async def _query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.fetch_with_retry(self.base_url, params=params)
        error = response.get("error")
        if error:
            raise FeatureServiceError(
                f"{self.get_source_name()}: {error.get('message', 'query failed')}",
                code=error.get("code"),
            )
        return response

    async def fetch(self) -> List[Dict[str, Any]]:
        logger.info(f"Starting fetch from {self.get_source_name()}")

        all_features = []
        offset = 0

        while True:
            logger.info(f"Fetching {self.label} {offset} to {offset + self.page_size}...")
            response = await self._query(self._query_params(offset))

            features = response.get("features", [])
            if not features:
                break

            all_features.extend(features)
            logger.info(f"Fetched {len(features)} {self.label} (total: {len(all_features)})")

            if not response.get("exceededTransferLimit", False):
                break

            offset += len(features)

        logger.info(f"Completed fetch: {len(all_features)} total {self.label}")
        return all_features

    async def fetch_sample(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Fetch a sample of records for inspection"""
        response = await self._query(self._query_params(0, limit))
        return response.get("features", [])
