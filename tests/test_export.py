"""Tests for the CSV export."""

import io
from datetime import date, datetime, timezone

import pandas as pd
from mediaverse.constants import ItemStatus
from mediaverse.export import EXPORT_COLUMNS, export_items
from mediaverse.models import Item


def test_export_items():
    item = Item(
        id="1",
        category="movie",
        title="Matrix, The",
        status=ItemStatus.COMPLETED,
        rating=4.5,
        genres=["Action", "Sci-Fi"],
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )

    filename, content = export_items([item], today=date(2025, 8, 1))

    assert filename == "mediaverse_export_2025-08-01.csv"
    frame = pd.read_csv(io.StringIO(content), dtype=str, keep_default_na=False)
    assert list(frame.columns) == EXPORT_COLUMNS
    row = frame.iloc[0]
    assert row["id"] == "1"
    assert row["title"] == "Matrix, The"
    assert row["status"] == "completed"
    assert row["rating"] == "4.5"
    assert row["genres"] == "Action, Sci-Fi"
    assert row["created_at"].startswith("2024-01-02T00:00:00")
    assert row["description"] == ""


def test_export_empty_collection_keeps_header():
    _, content = export_items([])
    assert content.splitlines() == [",".join(EXPORT_COLUMNS)]
