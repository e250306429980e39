"""Translation between internal models and the remote table schema.

The remote tables use Spanish snake_case column names and only declare a
subset of the item fields. Fields outside that subset are dropped on the way
out; absent fields are omitted rather than defaulted. Timestamps travel as ISO
8601 strings.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from .models import CategoryRecord, Item, Note

# internal field -> remote column
ITEM_COLUMNS = {
    "id": "id",
    "category": "tipo",
    "title": "titulo",
    "status": "estado",
    "priority": "prioridad",
    "rating": "rating",
    "description": "descripcion",
    "tags": "tags",
    "created_at": "fecha_creacion",
    "started_at": "fecha_inicio",
    "completed_at": "fecha_fin",
}

NOTE_COLUMNS = {
    "id": "id",
    "item_id": "item_id",
    "content": "contenido",
    "is_spoiler": "es_spoiler",
    "created_at": "created_at",
}

CATEGORY_COLUMNS = {
    "id": "id",
    "user_id": "user_id",
    "name": "nombre",
    "icon": "icono",
    "color": "color",
    "visible": "visible",
    "created_at": "created_at",
    "updated_at": "updated_at",
}

TIMESTAMP_FIELDS = {"created_at", "started_at", "completed_at", "updated_at"}

Record = Union[BaseModel, Mapping[str, Any]]


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp to ISO 8601."""
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp, accepting a trailing Z."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_dict(record: Record) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(exclude_none=True)
    return {k: v for k, v in record.items() if v is not None}


def _to_remote(record: Record, columns: Mapping[str, str]) -> dict[str, Any]:
    data = _as_dict(record)
    remote: dict[str, Any] = {}
    for field, column in columns.items():
        if field not in data:
            continue
        value = data[field]
        if field in TIMESTAMP_FIELDS:
            value = format_timestamp(value)
        elif hasattr(value, "value"):
            value = value.value
        remote[column] = value
    return remote


def _from_remote(record: Mapping[str, Any], columns: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for field, column in columns.items():
        value = record.get(column)
        if value is None:
            continue
        if field in TIMESTAMP_FIELDS:
            value = parse_timestamp(value)
        data[field] = value
    return data


def item_to_remote(item: Record) -> dict[str, Any]:
    """Convert an item (or a partial item dict) to a remote row."""
    return _to_remote(item, ITEM_COLUMNS)


def item_from_remote(record: Mapping[str, Any]) -> Item:
    """Convert a remote row to an Item."""
    return Item(**_from_remote(record, ITEM_COLUMNS))


def item_updates_to_remote(updates: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a partial item update, keeping explicit None values."""
    remote = item_to_remote(updates)
    for field, value in updates.items():
        if value is None and field in ITEM_COLUMNS:
            remote[ITEM_COLUMNS[field]] = None
    return remote


def note_to_remote(note: Record) -> dict[str, Any]:
    return _to_remote(note, NOTE_COLUMNS)


def note_from_remote(record: Mapping[str, Any]) -> Note:
    data = _from_remote(record, NOTE_COLUMNS)
    data.setdefault("is_spoiler", False)
    return Note(**data)


def note_updates_to_remote(updates: Mapping[str, Any]) -> dict[str, Any]:
    return note_to_remote(updates)


def category_to_remote(category: Record) -> dict[str, Any]:
    return _to_remote(category, CATEGORY_COLUMNS)


def category_from_remote(record: Mapping[str, Any]) -> CategoryRecord:
    return CategoryRecord(**_from_remote(record, CATEGORY_COLUMNS))


def category_updates_to_remote(updates: Mapping[str, Any]) -> dict[str, Any]:
    return category_to_remote(updates)
