"""Storage router: one CRUD surface over the remote and local stores.

Every call asks the session whether to go remote; nothing is cached, so a
sign-out takes effect on the next call.
"""

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from .categories import parse_category
from .constants import ItemStatus
from .exceptions import ConfigurationError, NotFoundError
from .local_store import LocalStore
from .models import (
    BacklogPicks,
    CategoryDraft,
    CategoryRecord,
    DashboardStats,
    Item,
    ItemDraft,
    Note,
    NoteDraft,
)
from .remote_store import RemoteStore
from .session import SessionState

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id",)
TOP_RATED_SIZE = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _clean_updates(updates: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS}


class _Router:
    def __init__(self, session: SessionState, local: LocalStore, remote: RemoteStore):
        self.session = session
        self.local = local
        self.remote = remote

    def use_remote(self) -> bool:
        """Route to the remote store when signed in and it is configured."""
        return self.session.is_authenticated() and self.session.is_remote_available()


class ItemStorage(_Router):
    """Item persistence routed by session state."""

    def list(self) -> list[Item]:
        if self.use_remote():
            return self.remote.list_items()
        return self.local.all_items()

    def get(self, item_id: str) -> Optional[Item]:
        if self.use_remote():
            return self.remote.get_item(item_id)
        return self.local.get_item(item_id)

    def create(self, draft: ItemDraft) -> Item:
        if self.use_remote():
            return self.remote.create_item(draft)

        item = Item(id=_new_id(), created_at=_now(), **draft.model_dump())
        if item.status == ItemStatus.IN_PROGRESS and item.started_at is None:
            item.started_at = _now()
        if item.status == ItemStatus.COMPLETED and item.completed_at is None:
            item.completed_at = _now()

        self.local.add_item(item)
        logger.debug(f"Created local item {item.id}: {item.title}")
        return item

    def update(self, item_id: str, updates: Mapping[str, Any]) -> Item:
        """Shallow-merge updates into an existing item."""
        updates = _clean_updates(updates)
        if self.use_remote():
            return self.remote.update_item(item_id, updates)

        existing = self.local.get_item(item_id)
        if existing is None:
            raise NotFoundError("Item", item_id)

        merged = Item.model_validate({**existing.model_dump(), **updates})
        self.local.put_item(merged)
        return merged

    def delete(self, item_id: str) -> None:
        if self.use_remote():
            self.remote.delete_item(item_id)
            return
        self.local.delete_item(item_id)

    def change_status(self, item_id: str, status: ItemStatus) -> Item:
        """Move an item to a new status, stamping start/finish dates."""
        status = ItemStatus(status)
        updates: dict[str, Any] = {"status": status}

        if status == ItemStatus.IN_PROGRESS:
            item = self.get(item_id)
            if item is None:
                raise NotFoundError("Item", item_id)
            if item.started_at is None:
                updates["started_at"] = _now()

        if status == ItemStatus.COMPLETED:
            updates["completed_at"] = _now()

        return self.update(item_id, updates)


class NoteStorage(_Router):
    """Note persistence routed by session state."""

    def list(self, item_id: str) -> list[Note]:
        if self.use_remote():
            return self.remote.list_notes(item_id)
        return self.local.notes_for_item(item_id)

    def get(self, note_id: str) -> Optional[Note]:
        if self.use_remote():
            return self.remote.get_note(note_id)
        return self.local.get_note(note_id)

    def create(self, draft: NoteDraft) -> Note:
        if self.use_remote():
            return self.remote.create_note(draft)

        note = Note(id=_new_id(), created_at=_now(), **draft.model_dump())
        self.local.add_note(note)
        return note

    def update(self, note_id: str, updates: Mapping[str, Any]) -> Note:
        updates = _clean_updates(updates)
        if self.use_remote():
            return self.remote.update_note(note_id, updates)

        existing = self.local.get_note(note_id)
        if existing is None:
            raise NotFoundError("Note", note_id)

        merged = Note.model_validate({**existing.model_dump(), **updates})
        self.local.put_note(merged)
        return merged

    def delete(self, note_id: str) -> None:
        if self.use_remote():
            self.remote.delete_note(note_id)
            return
        self.local.delete_note(note_id)


class CategoryStorage(_Router):
    """User categories; these only exist on the remote backend."""

    def _require_remote(self) -> None:
        if not self.use_remote():
            raise ConfigurationError("Categories require a signed-in Supabase session")

    def list(self, seed_defaults: bool = True) -> list[CategoryRecord]:
        self._require_remote()
        categories = self.remote.list_categories()
        if not categories and seed_defaults:
            categories = self.remote.seed_default_categories()
        return categories

    def create(self, draft: CategoryDraft) -> CategoryRecord:
        self._require_remote()
        return self.remote.create_category(draft)

    def update(self, category_id: str, updates: Mapping[str, Any]) -> CategoryRecord:
        self._require_remote()
        return self.remote.update_category(category_id, _clean_updates(updates))

    def delete(self, category_id: str) -> None:
        self._require_remote()
        self.remote.delete_category(category_id)


def filter_items(
    items: Iterable[Item],
    category: Optional[str] = None,
    status: Optional[ItemStatus] = None,
    search: Optional[str] = None,
) -> list[Item]:
    """Filter items by category, status and a free-text search."""
    filtered = list(items)

    if category:
        wanted = parse_category(category)
        if wanted is None:
            return []
        filtered = [i for i in filtered if parse_category(i.category) == wanted]

    if status:
        wanted_status = ItemStatus(status)
        filtered = [i for i in filtered if i.status == wanted_status]

    if search:
        needle = search.lower()
        filtered = [
            i
            for i in filtered
            if needle in i.title.lower()
            or (i.description and needle in i.description.lower())
            or any(needle in tag.lower() for tag in (i.tags or []))
        ]

    return filtered


def _rating_key(item: Item) -> float:
    return item.rating or 0


def stats(
    items: Iterable[Item],
    category: Optional[str] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> DashboardStats:
    """Summarise a collection: status counts, this year's completions and backlog picks."""
    now = now or _now()
    rng = rng or random.Random()
    items = filter_items(items, category=category)

    by_status = {status: 0 for status in ItemStatus}
    for item in items:
        by_status[item.status] += 1

    completed = [i for i in items if i.status == ItemStatus.COMPLETED]
    pending = [i for i in items if i.status == ItemStatus.PENDING]
    this_year = [i for i in completed if i.completed_at and i.completed_at.year == now.year]

    by_month = [0] * 12
    for item in this_year:
        by_month[item.completed_at.month - 1] += 1

    rated = [i.rating for i in completed if i.rating]
    average = round(sum(rated) / len(rated), 1) if rated else 0.0

    backlog = BacklogPicks()
    if pending:
        # Mixed naive/aware timestamps only compare as epoch seconds
        backlog.oldest = min(pending, key=lambda i: i.created_at.timestamp())
        backlog.best_rated = max(pending, key=_rating_key)
        backlog.random = rng.choice(pending)

    return DashboardStats(
        total=len(items),
        by_status=by_status,
        completed_this_year=len(this_year),
        average_rating=average,
        completions_by_month=by_month,
        top_rated=sorted(completed, key=_rating_key, reverse=True)[:TOP_RATED_SIZE],
        backlog=backlog,
    )
