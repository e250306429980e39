"""TMDB client for movies, series and anime."""

import logging
from typing import Any, Optional, Union

import requests

from .base_client import BaseAPIClient
from .categories import parse_category
from .constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_LANGUAGE,
    DEFAULT_REGION,
    TMDB_BASE_URL,
    TMDB_IMAGE_BASE_URL,
    YOUTUBE_WATCH_URL,
    ItemCategory,
)
from .models import LookupResult

logger = logging.getLogger(__name__)

TV_CATEGORIES = (ItemCategory.SERIES, ItemCategory.ANIME)


def media_type_for(category: Union[str, ItemCategory, None]) -> str:
    """Return the TMDB sub-resource ("tv" or "movie") for a category."""
    return "tv" if parse_category(category) in TV_CATEGORIES else "movie"


def image_url(path: Optional[str]) -> Optional[str]:
    """Build an absolute poster/backdrop URL from a TMDB relative path."""
    if not path:
        return None
    return f"{TMDB_IMAGE_BASE_URL}{path}"


def trailer_url(videos: Optional[dict]) -> Optional[str]:
    """Pick the YouTube trailer, preferring official ones."""
    results = (videos or {}).get("results") or []
    youtube_trailers = [v for v in results if v.get("site") == "YouTube" and v.get("type") == "Trailer"]
    official = [v for v in youtube_trailers if v.get("official")]

    chosen = (official or youtube_trailers or [None])[0]
    if not chosen or not chosen.get("key"):
        return None
    return f"{YOUTUBE_WATCH_URL}{chosen['key']}"


def streaming_platforms(providers: Optional[dict], region: str = DEFAULT_REGION) -> list[str]:
    """Names of subscription ("flatrate") providers in a region, deduplicated."""
    regional = ((providers or {}).get("results") or {}).get(region) or {}
    names: list[str] = []
    for provider in regional.get("flatrate") or []:
        name = provider.get("provider_name")
        if name and name not in names:
            names.append(name)
    return names


class TMDBClient(BaseAPIClient):
    """Client for the TMDB v3 REST API."""

    SERVICE_NAME = "TMDB"
    BASE_URL = TMDB_BASE_URL

    def __init__(
        self,
        api_key: Optional[str],
        language: str = DEFAULT_LANGUAGE,
        region: str = DEFAULT_REGION,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize TMDB client with an API key."""
        super().__init__(base_url=self.BASE_URL, api_key=api_key, timeout=timeout, session=session)
        self.language = language
        self.region = region

    def lookup(self, title: str, category: Union[str, ItemCategory] = ItemCategory.MOVIE) -> LookupResult:
        """Search for the best movie or tv match for a title."""
        query = (title or "").strip()
        if not query:
            return LookupResult.not_found()
        if not self.is_configured:
            return self._missing_key()

        media_type = media_type_for(category)
        params = {
            "api_key": self.api_key,
            "query": query,
            "language": self.language,
            "page": 1,
        }
        result = self._query_first(f"/search/{media_type}", params, "results")
        if result.is_found:
            result.candidate["media_type"] = media_type
        return result

    def search(self, title: str, category: Union[str, ItemCategory] = ItemCategory.MOVIE) -> Optional[dict]:
        """Return the first match for a title, or None."""
        return self.lookup(title, category).candidate

    def lookup_details(self, tmdb_id: int, category: Union[str, ItemCategory] = ItemCategory.MOVIE) -> LookupResult:
        """Fetch extended details with cast, videos and providers in one call."""
        if not self.is_configured:
            return self._missing_key()

        media_type = media_type_for(category)
        params = {
            "api_key": self.api_key,
            "language": self.language,
            "append_to_response": "videos,credits,watch/providers",
        }
        try:
            data = self._get(f"/{media_type}/{tmdb_id}", params)
        except Exception as e:
            logger.error(f"Error fetching TMDB details for {media_type}/{tmdb_id}: {e}")
            return LookupResult.provider_error(str(e))

        data["media_type"] = media_type
        return LookupResult.found(data)

    def details(self, tmdb_id: int, category: Union[str, ItemCategory] = ItemCategory.MOVIE) -> Optional[dict]:
        """Return the detailed record, or None."""
        return self.lookup_details(tmdb_id, category).candidate

    def streaming_platforms(self, details: dict[str, Any]) -> list[str]:
        """Streaming platforms for this client's region."""
        return streaming_platforms(details.get("watch/providers"), self.region)
