"""Shared fixtures: in-memory stores, fake HTTP sessions and fake Supabase clients."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from mediaverse.google_books_client import GoogleBooksClient
from mediaverse.local_store import LocalStore
from mediaverse.rawg_client import RawgClient
from mediaverse.remote_store import RemoteStore
from mediaverse.services import Services
from mediaverse.session import LocalSession
from mediaverse.storage import CategoryStorage, ItemStorage, NoteStorage
from mediaverse.tmdb_client import TMDBClient


def json_response(payload, status_code=200):
    """A requests.Response stand-in returning payload from .json()."""
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.text = str(payload)
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def http_session(*payloads):
    """Fake requests.Session whose get() answers with payloads in order.

    An Exception instance in payloads is raised instead of returned.
    """
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = [p if isinstance(p, Exception) else json_response(p) for p in payloads]
    return session


def supabase_response(data=None, error=None):
    return MagicMock(data=data, error=error)


@pytest.fixture
def local_store():
    store = LocalStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def local_items(local_store):
    """Item storage with no signed-in session."""
    return ItemStorage(LocalSession(), local_store, RemoteStore(None, LocalSession()))


@pytest.fixture
def remote_session():
    session = MagicMock()
    session.is_authenticated.return_value = True
    session.is_remote_available.return_value = True
    session.user_id.return_value = "user-1"
    return session


@pytest.fixture
def services(local_store):
    """Services wired to the local store with offline provider clients."""
    session = LocalSession()
    remote = RemoteStore(None, session)
    return Services(
        settings=SimpleNamespace(import_pacing_ms=0, enrichment_pacing_ms=0),
        session=session,
        local=local_store,
        remote=remote,
        items=ItemStorage(session, local_store, remote),
        notes=NoteStorage(session, local_store, remote),
        categories=CategoryStorage(session, local_store, remote),
        tmdb=TMDBClient("tmdb-key", session=http_session()),
        books=GoogleBooksClient(session=http_session()),
        rawg=RawgClient("rawg-key", session=http_session()),
    )


@pytest.fixture
def fake_http():
    """Factory for fake requests sessions, see http_session."""
    return http_session


@pytest.fixture
def fake_supabase_response():
    """Factory for Supabase execute() results."""
    return supabase_response


@pytest.fixture
def fake_response():
    """Factory for single fake HTTP responses, see json_response."""
    return json_response
