"""Supabase-backed record store for signed-in users."""

import logging
from typing import Any, Mapping, Optional

from .constants import CATEGORIES_TABLE, DEFAULT_USER_CATEGORIES, ITEMS_TABLE, NOTES_TABLE
from .exceptions import ConfigurationError, NotAuthenticatedError, NotFoundError, RemoteStoreError
from .field_mapper import (
    category_from_remote,
    category_to_remote,
    category_updates_to_remote,
    item_from_remote,
    item_to_remote,
    item_updates_to_remote,
    note_from_remote,
    note_to_remote,
    note_updates_to_remote,
)
from .models import CategoryDraft, CategoryRecord, Item, ItemDraft, Note, NoteDraft
from .session import SessionState

logger = logging.getLogger(__name__)


def _raise_for_supabase_error(response: Any, context: str) -> None:
    error = getattr(response, "error", None)
    if error:
        raise RemoteStoreError(f"Supabase error during {context}: {error}")


def _rows(response: Any) -> list[dict[str, Any]]:
    data = getattr(response, "data", None) or []
    if isinstance(data, dict):
        return [data]
    return list(data)


class RemoteStore:
    """Item, note and category queries against Supabase tables.

    Backend exceptions are not caught here; callers see them unchanged.
    """

    def __init__(self, client: Optional[Any], session: SessionState):
        """Initialize with a Supabase client (None if not configured)."""
        self.client = client
        self.session = session

    def _table(self, name: str):
        if self.client is None:
            raise ConfigurationError("Supabase not configured")
        return self.client.table(name)

    def _require_user(self) -> str:
        user_id = self.session.user_id()
        if not user_id:
            raise NotAuthenticatedError("User not authenticated")
        return user_id

    # Items

    def list_items(self) -> list[Item]:
        response = self._table(ITEMS_TABLE).select("*").order("fecha_creacion", desc=True).execute()
        _raise_for_supabase_error(response, "listing items")
        return [item_from_remote(row) for row in _rows(response)]

    def get_item(self, item_id: str) -> Optional[Item]:
        response = self._table(ITEMS_TABLE).select("*").eq("id", item_id).limit(1).execute()
        _raise_for_supabase_error(response, "fetching item")
        rows = _rows(response)
        return item_from_remote(rows[0]) if rows else None

    def create_item(self, draft: ItemDraft) -> Item:
        user_id = self._require_user()
        record = item_to_remote(draft)
        record["user_id"] = user_id
        response = self._table(ITEMS_TABLE).insert(record).execute()
        _raise_for_supabase_error(response, "creating item")
        rows = _rows(response)
        if not rows:
            raise RemoteStoreError("Supabase returned no row for created item")
        logger.info(f"Created remote item: {draft.title}")
        return item_from_remote(rows[0])

    def update_item(self, item_id: str, updates: Mapping[str, Any]) -> Item:
        self._require_user()
        record = item_updates_to_remote(updates)
        record.pop("id", None)
        if not record:
            # Nothing the remote schema stores changed
            existing = self.get_item(item_id)
            if existing is None:
                raise NotFoundError("Item", item_id)
            return existing
        response = self._table(ITEMS_TABLE).update(record).eq("id", item_id).execute()
        _raise_for_supabase_error(response, "updating item")
        rows = _rows(response)
        if not rows:
            raise NotFoundError("Item", item_id)
        return item_from_remote(rows[0])

    def delete_item(self, item_id: str) -> None:
        response = self._table(ITEMS_TABLE).delete().eq("id", item_id).execute()
        _raise_for_supabase_error(response, "deleting item")

    # Notes

    def list_notes(self, item_id: str) -> list[Note]:
        response = (
            self._table(NOTES_TABLE)
            .select("*")
            .eq("item_id", item_id)
            .order("created_at", desc=True)
            .execute()
        )
        _raise_for_supabase_error(response, "listing notes")
        return [note_from_remote(row) for row in _rows(response)]

    def get_note(self, note_id: str) -> Optional[Note]:
        response = self._table(NOTES_TABLE).select("*").eq("id", note_id).limit(1).execute()
        _raise_for_supabase_error(response, "fetching note")
        rows = _rows(response)
        return note_from_remote(rows[0]) if rows else None

    def create_note(self, draft: NoteDraft) -> Note:
        user_id = self._require_user()
        record = note_to_remote(draft)
        record["user_id"] = user_id
        response = self._table(NOTES_TABLE).insert(record).execute()
        _raise_for_supabase_error(response, "creating note")
        rows = _rows(response)
        if not rows:
            raise RemoteStoreError("Supabase returned no row for created note")
        return note_from_remote(rows[0])

    def update_note(self, note_id: str, updates: Mapping[str, Any]) -> Note:
        self._require_user()
        record = note_updates_to_remote(updates)
        record.pop("id", None)
        if not record:
            existing = self.get_note(note_id)
            if existing is None:
                raise NotFoundError("Note", note_id)
            return existing
        response = self._table(NOTES_TABLE).update(record).eq("id", note_id).execute()
        _raise_for_supabase_error(response, "updating note")
        rows = _rows(response)
        if not rows:
            raise NotFoundError("Note", note_id)
        return note_from_remote(rows[0])

    def delete_note(self, note_id: str) -> None:
        response = self._table(NOTES_TABLE).delete().eq("id", note_id).execute()
        _raise_for_supabase_error(response, "deleting note")

    # Categories

    def list_categories(self) -> list[CategoryRecord]:
        response = self._table(CATEGORIES_TABLE).select("*").order("nombre").execute()
        _raise_for_supabase_error(response, "listing categories")
        return [category_from_remote(row) for row in _rows(response)]

    def create_category(self, draft: CategoryDraft) -> CategoryRecord:
        user_id = self._require_user()
        record = category_to_remote(draft)
        record["user_id"] = user_id
        response = self._table(CATEGORIES_TABLE).insert(record).execute()
        _raise_for_supabase_error(response, "creating category")
        rows = _rows(response)
        if not rows:
            raise RemoteStoreError("Supabase returned no row for created category")
        return category_from_remote(rows[0])

    def update_category(self, category_id: str, updates: Mapping[str, Any]) -> CategoryRecord:
        self._require_user()
        record = category_updates_to_remote(updates)
        for column in ("id", "user_id"):
            record.pop(column, None)
        response = self._table(CATEGORIES_TABLE).update(record).eq("id", category_id).execute()
        _raise_for_supabase_error(response, "updating category")
        rows = _rows(response)
        if not rows:
            raise NotFoundError("Category", category_id)
        return category_from_remote(rows[0])

    def delete_category(self, category_id: str) -> None:
        response = self._table(CATEGORIES_TABLE).delete().eq("id", category_id).execute()
        _raise_for_supabase_error(response, "deleting category")

    def seed_default_categories(self) -> list[CategoryRecord]:
        """Create the default categories for a user that has none."""
        logger.info("No categories found, seeding defaults...")
        for entry in DEFAULT_USER_CATEGORIES:
            self.create_category(CategoryDraft(**entry))
        return self.list_categories()
