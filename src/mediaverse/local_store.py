"""Embedded SQLite store used when no remote session is available."""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .models import Item, Note

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    category TEXT NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    payload JSON NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_items_category ON items(category);
CREATE INDEX IF NOT EXISTS idx_items_status ON items(status);

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    item_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    payload JSON NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_notes_item ON notes(item_id);
"""


class LocalStore:
    """Keyed record store for items and notes backed by SQLite."""

    def __init__(self, path: Union[str, Path] = ":memory:"):
        """Open (and create if needed) the database at path."""
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA)
        self._conn.commit()
        logger.debug(f"Opened local store at {self.path}")

    def close(self) -> None:
        self._conn.close()

    # Items

    def all_items(self) -> list[Item]:
        rows = self._conn.execute("SELECT payload FROM items ORDER BY created_at DESC").fetchall()
        return [Item.model_validate_json(row["payload"]) for row in rows]

    def get_item(self, item_id: str) -> Optional[Item]:
        row = self._conn.execute("SELECT payload FROM items WHERE id = ?", (item_id,)).fetchone()
        if row is None:
            return None
        return Item.model_validate_json(row["payload"])

    def items_by_category(self, category: str) -> list[Item]:
        rows = self._conn.execute(
            "SELECT payload FROM items WHERE category = ? ORDER BY created_at DESC", (category,)
        ).fetchall()
        return [Item.model_validate_json(row["payload"]) for row in rows]

    def items_by_status(self, status: str) -> list[Item]:
        rows = self._conn.execute(
            "SELECT payload FROM items WHERE status = ? ORDER BY created_at DESC", (status,)
        ).fetchall()
        return [Item.model_validate_json(row["payload"]) for row in rows]

    def add_item(self, item: Item) -> str:
        """Insert a new item; fails if the id already exists."""
        self._conn.execute(
            "INSERT INTO items (id, category, status, created_at, payload) VALUES (?, ?, ?, ?, ?)",
            self._item_row(item),
        )
        self._conn.commit()
        return item.id

    def put_item(self, item: Item) -> str:
        """Insert or replace an item."""
        self._conn.execute(
            "INSERT OR REPLACE INTO items (id, category, status, created_at, payload) VALUES (?, ?, ?, ?, ?)",
            self._item_row(item),
        )
        self._conn.commit()
        return item.id

    def delete_item(self, item_id: str) -> None:
        self._conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
        self._conn.commit()

    @staticmethod
    def _item_row(item: Item) -> tuple:
        return (
            item.id,
            item.category,
            item.status.value,
            item.created_at.isoformat(),
            item.model_dump_json(exclude_none=True),
        )

    # Notes

    def all_notes(self) -> list[Note]:
        rows = self._conn.execute("SELECT payload FROM notes ORDER BY created_at DESC").fetchall()
        return [Note.model_validate_json(row["payload"]) for row in rows]

    def notes_for_item(self, item_id: str) -> list[Note]:
        rows = self._conn.execute(
            "SELECT payload FROM notes WHERE item_id = ? ORDER BY created_at DESC", (item_id,)
        ).fetchall()
        return [Note.model_validate_json(row["payload"]) for row in rows]

    def get_note(self, note_id: str) -> Optional[Note]:
        row = self._conn.execute("SELECT payload FROM notes WHERE id = ?", (note_id,)).fetchone()
        if row is None:
            return None
        return Note.model_validate_json(row["payload"])

    def add_note(self, note: Note) -> str:
        self._conn.execute(
            "INSERT INTO notes (id, item_id, created_at, payload) VALUES (?, ?, ?, ?)",
            self._note_row(note),
        )
        self._conn.commit()
        return note.id

    def put_note(self, note: Note) -> str:
        self._conn.execute(
            "INSERT OR REPLACE INTO notes (id, item_id, created_at, payload) VALUES (?, ?, ?, ?)",
            self._note_row(note),
        )
        self._conn.commit()
        return note.id

    def delete_note(self, note_id: str) -> None:
        self._conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        self._conn.commit()

    @staticmethod
    def _note_row(note: Note) -> tuple:
        return (
            note.id,
            note.item_id,
            note.created_at.isoformat(),
            note.model_dump_json(exclude_none=True),
        )
