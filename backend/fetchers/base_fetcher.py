"""Base fetcher with the shared aiohttp session and retry loop"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from config import MAX_RETRIES, REQUEST_TIMEOUT, RETRY_DELAY

logger = logging.getLogger(__name__)


class BaseFetcher(ABC):
    """
    Abstract base class for all remote sources.

    Use as an async context manager; the session is created on enter and
    closed on exit. A session passed in by the caller is reused and left open.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def fetch_with_retry(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """GET a JSON document, retrying client errors with exponential backoff"""
        last_error = None

        for attempt in range(MAX_RETRIES):
            try:
                async with self.session.get(url, params=params, headers=headers) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                if attempt == MAX_RETRIES - 1:
                    break
                wait_time = RETRY_DELAY * (2 ** attempt)
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{MAX_RETRIES}): {e}. "
                    f"Retrying in {wait_time}s..."
                )
                await asyncio.sleep(wait_time)

        logger.error(f"Giving up on {url} after {MAX_RETRIES} attempts: {last_error}")
        if isinstance(last_error, aiohttp.ClientError):
            raise last_error
        raise aiohttp.ClientError(f"Failed to fetch {url}: {last_error}")

    @abstractmethod
    async def fetch(self) -> Any:
        """Fetch everything this source provides"""

    @abstractmethod
    def get_source_name(self) -> str:
        """Human readable name for logs"""
