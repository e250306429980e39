"""Turn provider responses into item field updates.

Updates may carry fields the remote items table has no column for, such as
``release_date`` and most adaptive metadata. The local store keeps them; the
remote backend drops them when the row is mapped (see ``field_mapper``).
"""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from .categories import parse_category
from .constants import DEFAULT_REGION, TOP_CAST_SIZE, ItemCategory
from .tmdb_client import TV_CATEGORIES, image_url, streaming_platforms, trailer_url

logger = logging.getLogger(__name__)

PROVIDER_RATING_MAX = 10
INTERNAL_RATING_MAX = 5


def rescale_rating(value: Any) -> Optional[int]:
    """Map a 0-10 provider rating to the 0-5 internal scale.

    Rounds half up (7.5 -> 4). Missing, zero, non-numeric and out of range
    values return None so the existing rating is kept.
    """
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(rating) or rating <= 0 or rating > PROVIDER_RATING_MAX:
        return None
    return int(math.floor(rating / 2 + 0.5))


def parse_provider_date(value: Optional[str]) -> Optional[datetime]:
    """Parse YYYY, YYYY-MM or YYYY-MM-DD dates."""
    if not value:
        return None
    text = str(value).strip()
    if len(text) == 4:
        text += "-01-01"
    elif len(text) == 7:
        text += "-01"
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d")
    except ValueError:
        logger.debug(f"Ignoring unparseable provider date: {value}")
        return None


def _names(entries: Optional[list], key: str = "name") -> list[str]:
    return [e[key] for e in entries or [] if isinstance(e, dict) and e.get(key)]


def tmdb_updates(
    data: dict[str, Any],
    category: Any,
    fallback_title: str,
    region: str = DEFAULT_REGION,
) -> dict[str, Any]:
    """Field updates from a TMDB search hit or detail record."""
    updates: dict[str, Any] = {
        "title": data.get("title") or data.get("name") or fallback_title,
    }

    if data.get("overview"):
        updates["description"] = data["overview"]
    poster = image_url(data.get("poster_path"))
    if poster:
        updates["image"] = poster
    backdrop = image_url(data.get("backdrop_path"))
    if backdrop:
        updates["backdrop_image"] = backdrop

    rating = rescale_rating(data.get("vote_average"))
    if rating is not None:
        updates["rating"] = rating

    if data.get("tagline"):
        updates["tagline"] = data["tagline"]

    genres = _names(data.get("genres"))
    if genres:
        updates["genres"] = genres

    if data.get("runtime"):
        updates["duration"] = data["runtime"]
    elif data.get("episode_run_time"):
        updates["duration"] = data["episode_run_time"][0]

    if parse_category(category) in TV_CATEGORIES:
        if data.get("number_of_seasons") is not None:
            updates["number_of_seasons"] = data["number_of_seasons"]
        if data.get("number_of_episodes") is not None:
            updates["number_of_episodes"] = data["number_of_episodes"]

    cast = _names((data.get("credits") or {}).get("cast"))[:TOP_CAST_SIZE]
    if cast:
        updates["cast"] = cast

    trailer = trailer_url(data.get("videos"))
    if trailer:
        updates["trailer"] = trailer

    platforms = streaming_platforms(data.get("watch/providers"), region)
    if platforms:
        updates["streaming_platforms"] = platforms

    released = parse_provider_date(data.get("release_date") or data.get("first_air_date"))
    if released:
        updates["release_date"] = released

    return updates


def book_updates(volume: dict[str, Any], fallback_title: str) -> dict[str, Any]:
    """Field updates from a Google Books volume."""
    info = volume.get("volumeInfo") or {}
    updates: dict[str, Any] = {"title": info.get("title") or fallback_title}

    if info.get("description"):
        updates["description"] = info["description"]
    if info.get("authors"):
        updates["author"] = ", ".join(info["authors"])
    if info.get("publisher"):
        updates["publisher"] = info["publisher"]
    if info.get("pageCount"):
        updates["duration"] = info["pageCount"]

    links = info.get("imageLinks") or {}
    thumbnail = links.get("thumbnail") or links.get("smallThumbnail")
    if thumbnail:
        updates["image"] = thumbnail

    if info.get("categories"):
        updates["genres"] = list(info["categories"])

    published = parse_provider_date(info.get("publishedDate"))
    if published:
        updates["release_date"] = published

    return updates


def game_updates(game: dict[str, Any], fallback_title: str) -> dict[str, Any]:
    """Field updates from a RAWG game."""
    updates: dict[str, Any] = {"title": game.get("name") or fallback_title}

    if game.get("description_raw"):
        updates["description"] = game["description_raw"]
    if game.get("background_image"):
        updates["image"] = game["background_image"]

    # RAWG already rates on a 0-5 scale
    try:
        rating = float(game.get("rating") or 0)
    except (TypeError, ValueError):
        rating = 0
    if 0 < rating <= 5:
        updates["rating"] = round(rating, 1)

    genres = _names(game.get("genres"))
    if genres:
        updates["genres"] = genres

    platforms = [p["platform"]["name"] for p in game.get("platforms") or [] if (p.get("platform") or {}).get("name")]
    if platforms:
        updates["platform"] = ", ".join(platforms)

    developers = _names(game.get("developers"))
    if developers:
        updates["developer"] = ", ".join(developers)

    released = parse_provider_date(game.get("released"))
    if released:
        updates["release_date"] = released

    return updates


def provider_for(category: Any) -> Optional[str]:
    """Name of the provider that enriches a category, if any."""
    parsed = parse_category(category)
    if parsed in (ItemCategory.MOVIE, ItemCategory.SERIES, ItemCategory.ANIME):
        return "tmdb"
    if parsed == ItemCategory.BOOK:
        return "books"
    if parsed == ItemCategory.VIDEOGAME:
        return "rawg"
    return None
