"""CSV export of stored items."""

import logging
from datetime import date
from typing import Any, Iterable, Optional

import pandas as pd

from .models import Item, ItemFields

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["id", "created_at", *ItemFields.model_fields]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return value


def export_items(items: Iterable[Item], today: Optional[date] = None) -> tuple[str, str]:
    """Return (filename, csv text) with one row per item.

    Enums are written as their values, dates in ISO format and lists as
    comma separated text. An empty collection still gets the header row.
    """
    rows = [{k: _cell(v) for k, v in item.model_dump(mode="json").items()} for item in items]
    frame = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    content = frame.to_csv(index=False, lineterminator="\n")
    stamp = (today or date.today()).isoformat()
    logger.info(f"Exported {len(rows)} items")
    return f"mediaverse_export_{stamp}.csv", content
