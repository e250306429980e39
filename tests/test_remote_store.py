"""Tests for the Supabase-backed store using a mocked client."""

from unittest.mock import MagicMock

import pytest
from mediaverse.constants import DEFAULT_USER_CATEGORIES
from mediaverse.exceptions import ConfigurationError, NotAuthenticatedError, NotFoundError, RemoteStoreError
from mediaverse.models import CategoryDraft, ItemDraft, NoteDraft
from mediaverse.remote_store import RemoteStore

ITEM_ROW = {
    "id": "r1",
    "user_id": "user-1",
    "tipo": "movie",
    "titulo": "Matrix",
    "estado": "pending",
    "fecha_creacion": "2024-01-01T00:00:00Z",
}


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(client, remote_session):
    return RemoteStore(client, remote_session)


def test_list_items(store, client, fake_supabase_response):
    chain = client.table.return_value.select.return_value.order.return_value
    chain.execute.return_value = fake_supabase_response([ITEM_ROW])

    items = store.list_items()

    client.table.assert_called_with("items")
    client.table.return_value.select.return_value.order.assert_called_with("fecha_creacion", desc=True)
    assert [i.title for i in items] == ["Matrix"]


def test_get_item_missing(store, client, fake_supabase_response):
    chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
    chain.execute.return_value = fake_supabase_response([])

    assert store.get_item("nope") is None


def test_create_item_attaches_user(store, client, fake_supabase_response):
    client.table.return_value.insert.return_value.execute.return_value = fake_supabase_response([ITEM_ROW])

    item = store.create_item(ItemDraft(category="movie", title="Matrix", genres=["Action"]))

    record = client.table.return_value.insert.call_args[0][0]
    assert record["user_id"] == "user-1"
    assert record["titulo"] == "Matrix"
    assert "genres" not in record
    assert item.id == "r1"


def test_create_item_requires_user(client, remote_session):
    remote_session.user_id.return_value = None
    store = RemoteStore(client, remote_session)

    with pytest.raises(NotAuthenticatedError):
        store.create_item(ItemDraft(category="movie", title="Matrix"))
    client.table.assert_not_called()


def test_error_payload_raises(store, client, fake_supabase_response):
    chain = client.table.return_value.select.return_value.order.return_value
    chain.execute.return_value = fake_supabase_response(None, error="permission denied")

    with pytest.raises(RemoteStoreError):
        store.list_items()


def test_update_item_not_found(store, client, fake_supabase_response):
    client.table.return_value.update.return_value.eq.return_value.execute.return_value = fake_supabase_response([])

    with pytest.raises(NotFoundError):
        store.update_item("nope", {"title": "Ghost"})


def test_update_item_sends_mapped_columns(store, client, fake_supabase_response):
    updated_row = {**ITEM_ROW, "estado": "completed"}
    client.table.return_value.update.return_value.eq.return_value.execute.return_value = fake_supabase_response(
        [updated_row]
    )

    item = store.update_item("r1", {"status": "completed", "id": "other"})

    client.table.return_value.update.assert_called_with({"estado": "completed"})
    assert item.status.value == "completed"


def test_update_with_only_local_fields_returns_existing(store, client, fake_supabase_response):
    """Fields the remote schema lacks are dropped, so nothing is written."""
    chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
    chain.execute.return_value = fake_supabase_response([ITEM_ROW])

    item = store.update_item("r1", {"genres": ["Action"]})

    client.table.return_value.update.assert_not_called()
    assert item.title == "Matrix"


def test_unconfigured_client(remote_session):
    store = RemoteStore(None, remote_session)
    with pytest.raises(ConfigurationError):
        store.list_items()


def test_notes(store, client, fake_supabase_response):
    note_row = {"id": "n1", "item_id": "r1", "contenido": "Wow", "es_spoiler": True, "created_at": "2024-01-01T00:00:00Z"}
    client.table.return_value.insert.return_value.execute.return_value = fake_supabase_response([note_row])
    chain = client.table.return_value.select.return_value.eq.return_value.order.return_value
    chain.execute.return_value = fake_supabase_response([note_row])

    created = store.create_note(NoteDraft(item_id="r1", content="Wow", is_spoiler=True))
    notes = store.list_notes("r1")

    assert created.is_spoiler is True
    assert [n.content for n in notes] == ["Wow"]
    client.table.assert_any_call("notes")


def test_seed_default_categories(store, client, fake_supabase_response):
    client.table.return_value.insert.return_value.execute.return_value = fake_supabase_response(
        [{"id": "c", "nombre": "x"}]
    )
    client.table.return_value.select.return_value.order.return_value.execute.return_value = fake_supabase_response(
        [{"id": "c1", "nombre": "Libros"}]
    )

    categories = store.seed_default_categories()

    assert client.table.return_value.insert.call_count == len(DEFAULT_USER_CATEGORIES)
    assert [c.name for c in categories] == ["Libros"]


def test_create_category(store, client, fake_supabase_response):
    client.table.return_value.insert.return_value.execute.return_value = fake_supabase_response(
        [{"id": "c1", "user_id": "user-1", "nombre": "Podcasts", "visible": True}]
    )

    category = store.create_category(CategoryDraft(name="Podcasts"))

    record = client.table.return_value.insert.call_args[0][0]
    assert record == {"nombre": "Podcasts", "visible": True, "user_id": "user-1"}
    assert category.id == "c1"
