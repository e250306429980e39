"""Google Books client."""

import logging
from typing import Optional

import requests

from .base_client import BaseAPIClient
from .constants import DEFAULT_HTTP_TIMEOUT_SECONDS, GOOGLE_BOOKS_BASE_URL
from .models import LookupResult

logger = logging.getLogger(__name__)


class GoogleBooksClient(BaseAPIClient):
    """Client for the Google Books volumes API.

    The API answers anonymous requests, so the key is optional and only sent
    when configured.
    """

    SERVICE_NAME = "Google Books"
    BASE_URL = GOOGLE_BOOKS_BASE_URL
    REQUIRES_API_KEY = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        lang_restrict: Optional[str] = "es",
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url=self.BASE_URL, api_key=api_key, timeout=timeout, session=session)
        self.lang_restrict = lang_restrict

    def lookup(self, title: str) -> LookupResult:
        """Search volumes by title."""
        query = (title or "").strip()
        if not query:
            return LookupResult.not_found()

        params = {"q": f"intitle:{query}", "maxResults": 1}
        if self.lang_restrict:
            params["langRestrict"] = self.lang_restrict
        if self.api_key:
            params["key"] = self.api_key

        logger.debug(f"Google Books lookup: {query}")
        return self._query_first("/volumes", params, "items")

    def search(self, title: str) -> Optional[dict]:
        return self.lookup(title).candidate
