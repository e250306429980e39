"""Wiring of stores, clients and engines from settings."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .bulk_import import BulkImporter
from .categories import parse_category
from .config import Settings, get_settings
from .constants import ItemCategory
from .enrichment import BookEnrichmentEngine, EnrichmentEngine, GameEnrichmentEngine, MovieEnrichmentEngine
from .google_books_client import GoogleBooksClient
from .local_store import LocalStore
from .rate_limit import FixedDelayLimiter
from .rawg_client import RawgClient
from .remote_store import RemoteStore
from .session import LocalSession, SessionState, SupabaseSession
from .storage import CategoryStorage, ItemStorage, NoteStorage
from .tmdb_client import TMDBClient

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the CLI and web layer need."""

    settings: Settings
    session: SessionState
    local: LocalStore
    remote: RemoteStore
    items: ItemStorage
    notes: NoteStorage
    categories: CategoryStorage
    tmdb: TMDBClient
    books: GoogleBooksClient
    rawg: RawgClient

    def importer(self) -> BulkImporter:
        """A fresh importer (progress and errors are per run)."""
        return BulkImporter(
            self.tmdb,
            self.books,
            self.rawg,
            limiter=FixedDelayLimiter.from_milliseconds(self.settings.import_pacing_ms),
        )

    def engine_for(self, category: Any) -> Optional[EnrichmentEngine]:
        """The enrichment engine for a category, or None if none applies."""
        limiter = FixedDelayLimiter.from_milliseconds(self.settings.enrichment_pacing_ms)
        parsed = parse_category(category)
        if parsed in MovieEnrichmentEngine.CATEGORIES:
            return MovieEnrichmentEngine(self.items, self.tmdb, limiter=limiter)
        if parsed == ItemCategory.BOOK:
            return BookEnrichmentEngine(self.items, self.books, limiter=limiter)
        if parsed == ItemCategory.VIDEOGAME:
            return GameEnrichmentEngine(self.items, self.rawg, limiter=limiter)
        return None


def create_supabase_client(settings: Settings) -> Optional[Any]:
    """Create a Supabase client, or None when it is not configured."""
    if not settings.supabase_configured:
        logger.info("Supabase not configured, using the local store only")
        return None
    from supabase import create_client

    return create_client(settings.supabase_url, settings.supabase_key)


def build_session(settings: Settings, client: Optional[Any] = None) -> SessionState:
    """Build the session, signing in when credentials are configured."""
    if client is None:
        return LocalSession()

    session = SupabaseSession(client)
    if settings.supabase_email and settings.supabase_password:
        try:
            session.sign_in(settings.supabase_email, settings.supabase_password)
        except Exception as e:
            logger.error(f"Supabase sign-in failed, falling back to the local store: {e}")
    return session


def build_services(settings: Optional[Settings] = None, supabase_client: Optional[Any] = None) -> Services:
    """Create stores, routers and provider clients from settings."""
    if settings is None:
        settings = get_settings()

    client = supabase_client if supabase_client is not None else create_supabase_client(settings)
    session = build_session(settings, client)
    local = LocalStore(settings.database_path)
    remote = RemoteStore(client, session)

    return Services(
        settings=settings,
        session=session,
        local=local,
        remote=remote,
        items=ItemStorage(session, local, remote),
        notes=NoteStorage(session, local, remote),
        categories=CategoryStorage(session, local, remote),
        tmdb=TMDBClient(
            settings.tmdb_api_key,
            language=settings.tmdb_language,
            region=settings.tmdb_region,
            timeout=settings.http_timeout,
        ),
        books=GoogleBooksClient(
            settings.google_books_api_key,
            lang_restrict=settings.google_books_lang_restrict,
            timeout=settings.http_timeout,
        ),
        rawg=RawgClient(settings.rawg_api_key, timeout=settings.http_timeout),
    )
