"""Base API client with common functionality."""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import DEFAULT_HTTP_TIMEOUT_SECONDS, HTTP_TOO_MANY_REQUESTS
from .models import LookupResult

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """Base class for metadata provider clients with common request handling."""

    SERVICE_NAME = "provider"
    REQUIRES_API_KEY = True

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize API client with an optional API key."""
        self.base_url = base_url.rstrip("/")
        self.api_key = (api_key or "").strip() or None
        self.timeout = timeout
        self.session = session or requests.Session()

        if session is None:
            # Configure retry strategy for rate limits (429)
            retry_strategy = Retry(
                total=3,
                backoff_factor=1,
                status_forcelist=[HTTP_TOO_MANY_REQUESTS],
                allowed_methods=["GET"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

        self.session.headers.update({"Accept": "application/json"})

    @property
    def is_configured(self) -> bool:
        """True when the client can issue requests."""
        return self.api_key is not None or not self.REQUIRES_API_KEY

    def _get(self, path: str, params: Optional[dict] = None) -> dict[str, Any]:
        """GET a JSON object from the provider, raising on HTTP errors."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        if not response.ok:
            logger.error(f"{self.SERVICE_NAME} API error: {response.status_code}")
            logger.debug(f"Response: {response.text[:400]}")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"{self.SERVICE_NAME} returned unexpected JSON shape")
        return data

    def _missing_key(self) -> LookupResult:
        message = f"{self.SERVICE_NAME} API key missing"
        logger.warning(message)
        return LookupResult.not_configured(message)

    def _query_first(self, path: str, params: dict, results_key: str) -> LookupResult:
        """Run a search expecting at most one result and tag the outcome."""
        try:
            data = self._get(path, params)
        except Exception as e:
            logger.error(f"Error searching {self.SERVICE_NAME}: {e}")
            return LookupResult.provider_error(str(e))

        results = data.get(results_key) or []
        if results:
            return LookupResult.found(results[0])
        return LookupResult.not_found()
