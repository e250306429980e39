"""Enrichment engines that fill item metadata from external providers."""

import logging
from typing import Any, Callable, Iterable, Optional

from .categories import parse_category
from .constants import ItemCategory
from .google_books_client import GoogleBooksClient
from .models import EnrichmentSummary, Item
from .normalize import book_updates, game_updates, tmdb_updates
from .rate_limit import FixedDelayLimiter
from .rawg_client import RawgClient
from .storage import ItemStorage
from .tmdb_client import TMDBClient, media_type_for

logger = logging.getLogger(__name__)


class EnrichmentEngine:
    """Base engine: eligibility check, lookup, update through storage."""

    CATEGORIES: tuple[ItemCategory, ...] = ()
    PROVIDER_NAME = "provider"

    def __init__(
        self,
        storage: ItemStorage,
        limiter: Optional[FixedDelayLimiter] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ):
        """Initialize engine with item storage and request pacing."""
        self.storage = storage
        self.limiter = limiter or FixedDelayLimiter(0.3)
        self.on_progress = on_progress
        self.errors: list[str] = []
        self.progress = 0
        self.total = 0
        self.is_running = False

    @staticmethod
    def _safe_title(title: str) -> str:
        """Return a console-safe title string (avoid encoding errors on Windows)."""
        if not title:
            return ""
        return title.encode("ascii", "replace").decode("ascii")

    def accepts(self, category: Optional[str]) -> bool:
        """Check whether this engine enriches the given category."""
        return parse_category(category) in self.CATEGORIES

    def build_updates(self, item: Item) -> Optional[dict[str, Any]]:
        """Look the item up and return its field updates, or None on a miss."""
        raise NotImplementedError

    def enrich_one(self, item: Item) -> bool:
        """Enrich a single item and save the changes.

        Returns False without side effects for items of other categories.
        """
        if not self.accepts(item.category):
            return False

        try:
            updates = self.build_updates(item)
            if updates is None:
                return False
            self.storage.update(item.id, updates)
            logger.info(f"Enriched {self._safe_title(item.title)} from {self.PROVIDER_NAME}")
            return True
        except Exception as e:
            logger.error(f"Error enriching {self._safe_title(item.title)}: {e}")
            self.errors.append(f"{item.title}: enrichment failed ({e})")
            return False

    def enrich_many(self, items: Iterable[Item]) -> EnrichmentSummary:
        """Enrich items one at a time, pausing between each."""
        items = list(items)
        self.is_running = True
        self.progress = 0
        self.total = len(items)
        self.errors = []
        success = 0

        try:
            for item in items:
                if self.enrich_one(item):
                    success += 1
                self.progress += 1
                if self.on_progress:
                    self.on_progress(self.progress, self.total)
                self.limiter.wait()
        finally:
            self.is_running = False

        summary = EnrichmentSummary(
            total=self.total,
            success=success,
            failed=self.total - success,
            errors=list(self.errors),
        )
        logger.info(
            f"Summary: provider={self.PROVIDER_NAME}, total={summary.total}, "
            f"success={summary.success}, failed={summary.failed}"
        )
        return summary

    def _not_found(self, item: Item) -> None:
        logger.warning(f"No {self.PROVIDER_NAME} match for {self._safe_title(item.title)}")
        self.errors.append(f'"{item.title}" not found in {self.PROVIDER_NAME}')


class MovieEnrichmentEngine(EnrichmentEngine):
    """Enriches movies, series and anime from TMDB."""

    CATEGORIES = (ItemCategory.MOVIE, ItemCategory.SERIES, ItemCategory.ANIME)
    PROVIDER_NAME = "TMDB"

    def __init__(self, storage: ItemStorage, tmdb: TMDBClient, **kwargs):
        super().__init__(storage, **kwargs)
        self.tmdb = tmdb

    def build_updates(self, item: Item) -> Optional[dict[str, Any]]:
        category = parse_category(item.category)
        match = self.tmdb.search(item.title, category)
        if not match:
            self._not_found(item)
            return None

        details = self.tmdb.details(match["id"], category)
        if not details:
            self.errors.append(f'Could not fetch details for "{item.title}"')
            return None

        logger.debug(f"Matched {self._safe_title(item.title)} to TMDB {media_type_for(category)}/{match['id']}")
        return tmdb_updates(details, category, item.title, self.tmdb.region)


class BookEnrichmentEngine(EnrichmentEngine):
    """Enriches books from Google Books."""

    CATEGORIES = (ItemCategory.BOOK,)
    PROVIDER_NAME = "Google Books"

    def __init__(self, storage: ItemStorage, books: GoogleBooksClient, **kwargs):
        super().__init__(storage, **kwargs)
        self.books = books

    def build_updates(self, item: Item) -> Optional[dict[str, Any]]:
        volume = self.books.search(item.title)
        if not volume:
            self._not_found(item)
            return None
        return book_updates(volume, item.title)


class GameEnrichmentEngine(EnrichmentEngine):
    """Enriches video games from RAWG."""

    CATEGORIES = (ItemCategory.VIDEOGAME,)
    PROVIDER_NAME = "RAWG"

    def __init__(self, storage: ItemStorage, rawg: RawgClient, **kwargs):
        super().__init__(storage, **kwargs)
        self.rawg = rawg

    def build_updates(self, item: Item) -> Optional[dict[str, Any]]:
        game = self.rawg.search(item.title)
        if not game:
            self._not_found(item)
            return None
        return game_updates(game, item.title)
