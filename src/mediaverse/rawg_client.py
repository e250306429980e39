"""RAWG client for video games."""

import logging
from typing import Optional

import requests

from .base_client import BaseAPIClient
from .constants import DEFAULT_HTTP_TIMEOUT_SECONDS, RAWG_BASE_URL
from .models import LookupResult

logger = logging.getLogger(__name__)


class RawgClient(BaseAPIClient):
    """Client for the RAWG games API."""

    SERVICE_NAME = "RAWG"
    BASE_URL = RAWG_BASE_URL

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url=self.BASE_URL, api_key=api_key, timeout=timeout, session=session)

    def lookup(self, title: str) -> LookupResult:
        """Search games by name."""
        query = (title or "").strip()
        if not query:
            return LookupResult.not_found()
        if not self.is_configured:
            return self._missing_key()

        # Search results already carry image, rating and genres
        params = {"key": self.api_key, "search": query, "page_size": 1}
        logger.debug(f"RAWG lookup: {query}")
        return self._query_first("/games", params, "results")

    def search(self, title: str) -> Optional[dict]:
        return self.lookup(title).candidate
