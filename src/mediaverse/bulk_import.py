"""Bulk import: spreadsheet rows to enriched draft items."""

import csv
import io
import logging
import math
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pandas as pd

from .categories import parse_category
from .constants import ItemCategory, ItemStatus, MatchConfidence
from .exceptions import ConfigurationError
from .google_books_client import GoogleBooksClient
from .models import EnrichedItem, ImportedRow
from .normalize import book_updates, game_updates, provider_for, tmdb_updates
from .rate_limit import FixedDelayLimiter
from .rawg_client import RawgClient
from .tmdb_client import TMDBClient

logger = logging.getLogger(__name__)

# Checked in this order; the first keyword found wins
IN_PROGRESS_KEYWORDS = ("viendo", "jugando", "leyendo", "progreso", "watching", "playing", "reading", "in progress")
COMPLETED_KEYWORDS = ("visto", "terminado", "acabado", "completado", "watched", "finished", "done", "completed")

# "no visto" or "not finished" must not count as a keyword hit
NEGATED_WORD = re.compile(r"\b(?:not|no|sin|never|nunca)\s+\w+")

IMPORT_COLUMNS = 3

TEMPLATE_HEADER = ["Titulo", "Estado (Pendiente/Progreso/Completado)", "Nota (1-5)"]
TEMPLATE_EXAMPLES = [
    ["Matrix", "Completado", "5"],
    ["Inception", "Pendiente", ""],
    ["Interstellar", "Progreso", "4"],
]

PARSE_ERROR_MESSAGE = "Could not read the file. Use the import template (.csv or .xlsx)."


def _has_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    return any(re.search(rf"\b{re.escape(k)}\b", text) for k in keywords)


def map_status(text: Optional[str]) -> ItemStatus:
    """Map free-text status to pending, in_progress or completed.

    Keywords match whole words only, so "Abandoned" is not read as "done".
    Anything unrecognised is pending.
    """
    if not text:
        return ItemStatus.PENDING
    lowered = NEGATED_WORD.sub(" ", str(text).lower())
    if _has_keyword(lowered, IN_PROGRESS_KEYWORDS):
        return ItemStatus.IN_PROGRESS
    if _has_keyword(lowered, COMPLETED_KEYWORDS):
        return ItemStatus.COMPLETED
    return ItemStatus.PENDING


def _cell_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    return text if text.strip() else None


def _cell_number(value: Any) -> Optional[float]:
    text = _cell_text(value)
    if text is None:
        return None
    # Non-numeric text becomes NaN and is treated as absent
    number = pd.to_numeric(text.strip(), errors="coerce")
    if pd.isna(number):
        return None
    return float(number)


def rows_from_frame(frame: pd.DataFrame) -> list[ImportedRow]:
    """Map a header-less frame positionally, dropping the header row."""
    rows: list[ImportedRow] = []
    for values in frame.iloc[1:].itertuples(index=False):
        values = list(values) + [None] * IMPORT_COLUMNS
        title = _cell_text(values[0])
        if not title or not title.strip():
            continue
        rows.append(
            ImportedRow(
                title=title.strip(),
                status_text=_cell_text(values[1]),
                note=_cell_number(values[2]),
            )
        )
    return rows


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Spreadsheet exports on Windows are usually Latin-1
        return raw.decode("latin-1")


def read_csv_frame(raw: bytes) -> pd.DataFrame:
    """Read CSV bytes into a header-less frame, tolerating ragged rows.

    The frame is as wide as the widest line (at least three columns), so
    extra trailing cells and a header narrower than the data both parse.
    """
    text = _decode(raw)
    width = max((len(fields) for fields in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return pd.DataFrame()
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(max(width, IMPORT_COLUMNS))),
        engine="python",
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=True,
    )


def build_template(category: Union[str, ItemCategory]) -> tuple[str, str]:
    """Return (filename, csv text) of the downloadable import template."""
    parsed = parse_category(category)
    name = parsed.value if parsed else str(category)
    frame = pd.DataFrame(TEMPLATE_EXAMPLES, columns=TEMPLATE_HEADER)
    content = frame.to_csv(index=False, lineterminator="\n")
    return f"plantilla_importacion_{name}.csv", content


class BulkImporter:
    """Parses an import file and enriches each row into a draft item.

    Nothing is persisted here; callers save the drafts they accept.
    """

    def __init__(
        self,
        tmdb: TMDBClient,
        books: GoogleBooksClient,
        rawg: RawgClient,
        limiter: Optional[FixedDelayLimiter] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ):
        self.tmdb = tmdb
        self.books = books
        self.rawg = rawg
        self.limiter = limiter or FixedDelayLimiter(0.2)
        self.on_progress = on_progress

        self.is_processing = False
        self.progress = 0
        self.items: list[EnrichedItem] = []
        self.error: Optional[str] = None

    def parse_file(self, filename: str, content: Optional[bytes] = None) -> list[ImportedRow]:
        """Read rows from a .csv file or a spreadsheet.

        On a malformed file the error slot is set and no rows are returned.
        """
        self.error = None
        try:
            raw = content if content is not None else Path(filename).read_bytes()
            if filename.lower().endswith(".csv"):
                frame = read_csv_frame(raw)
            else:
                frame = pd.read_excel(io.BytesIO(raw), header=None, dtype=object)
        except pd.errors.EmptyDataError:
            return []
        except Exception as e:
            logger.error(f"Failed to parse import file {filename}: {e}")
            self.error = PARSE_ERROR_MESSAGE
            return []

        rows = rows_from_frame(frame)
        logger.info(f"Parsed {len(rows)} rows from {filename}")
        return rows

    def _client_for(self, category: Any):
        provider = provider_for(category)
        if provider == "tmdb":
            return self.tmdb
        if provider == "books":
            return self.books
        if provider == "rawg":
            return self.rawg
        return None

    def check_credentials(self, category: Any) -> None:
        """Raise ConfigurationError if the category's provider has no key."""
        client = self._client_for(category)
        if client is not None and not client.is_configured:
            message = f"{client.SERVICE_NAME} API key missing; cannot import {category}"
            self.error = message
            raise ConfigurationError(message)

    def draft_from_row(self, row: ImportedRow, category: str) -> EnrichedItem:
        """Build the unenriched draft for a row."""
        rating = row.note
        if rating is not None and not 0 <= rating <= 5:
            logger.debug(f"Ignoring out of range note {rating} for {row.title}")
            rating = None
        return EnrichedItem(
            id=str(uuid.uuid4()),
            category=category,
            title=row.title,
            original_title=row.title,
            status=map_status(row.status_text),
            rating=rating,
            created_at=datetime.now(timezone.utc),
            found=False,
            match_confidence=MatchConfidence.NONE,
        )

    def enrich_draft(self, draft: EnrichedItem) -> EnrichedItem:
        """Apply provider data to a draft; keep defaults when nothing matches."""
        provider = provider_for(draft.category)
        updates: Optional[dict[str, Any]] = None
        confidence = MatchConfidence.HIGH

        if provider == "tmdb":
            category = parse_category(draft.category)
            match = self.tmdb.search(draft.original_title, category)
            if match:
                details = self.tmdb.details(match["id"], category)
                if details:
                    updates = tmdb_updates(details, category, draft.original_title, self.tmdb.region)
                else:
                    updates = tmdb_updates(match, category, draft.original_title, self.tmdb.region)
                    confidence = MatchConfidence.LOW
        elif provider == "books":
            volume = self.books.search(draft.original_title)
            if volume:
                updates = book_updates(volume, draft.original_title)
        elif provider == "rawg":
            game = self.rawg.search(draft.original_title)
            if game:
                updates = game_updates(game, draft.original_title)

        if updates is None:
            logger.debug(f"No match for imported row {draft.original_title}")
            return draft

        return draft.model_copy(update={**updates, "found": True, "match_confidence": confidence})

    def enrich_rows(self, rows: list[ImportedRow], category: Union[str, ItemCategory]) -> list[EnrichedItem]:
        """Enrich rows in order, pausing between rows and tracking progress."""
        category_value = category.value if isinstance(category, ItemCategory) else str(category)
        self.is_processing = True
        self.progress = 0
        total = len(rows)
        results: list[EnrichedItem] = []

        try:
            for i, row in enumerate(rows):
                draft = self.draft_from_row(row, category_value)
                try:
                    draft = self.enrich_draft(draft)
                except Exception as e:
                    logger.error(f"Error enriching imported row {row.title}: {e}")
                results.append(draft)

                self.progress = round((i + 1) / total * 100)
                if self.on_progress:
                    self.on_progress(self.progress)
                self.limiter.wait()
        finally:
            self.is_processing = False

        self.items = results
        found = sum(1 for r in results if r.found)
        logger.info(f"Import summary: rows={total}, matched={found}, unmatched={total - found}")
        return results

    def parse_and_enrich(
        self,
        filename: str,
        category: Union[str, ItemCategory],
        content: Optional[bytes] = None,
    ) -> list[EnrichedItem]:
        """Parse an import file and enrich every row.

        Raises ConfigurationError before any parsing or network call when the
        category's provider key is missing.
        """
        self.error = None
        self.items = []
        self.check_credentials(category)

        self.is_processing = True
        rows = self.parse_file(filename, content)
        if not rows:
            self.is_processing = False
            return []
        return self.enrich_rows(rows, category)
