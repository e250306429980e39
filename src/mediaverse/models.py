"""Data models for tracked media, notes and import results."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import ItemStatus, MatchConfidence, MilestoneType, Priority


class ItemFields(BaseModel):
    """Fields shared by stored items and creation drafts."""

    # Kept as free text: legacy rows hold values like "Película" or "serie"
    category: str
    title: str
    status: ItemStatus = ItemStatus.PENDING
    priority: Optional[Priority] = None

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    tags: Optional[list[str]] = None
    image: Optional[str] = None
    description: Optional[str] = None

    # Adaptive metadata
    duration: Optional[int] = None  # minutes, or pages for books
    season_progress: Optional[str] = None  # e.g. "S02/05"
    reading_progress: Optional[str] = None  # e.g. "120/350"
    platform: Optional[str] = None
    director: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    genres: Optional[list[str]] = None
    cast: Optional[list[str]] = None
    developer: Optional[str] = None
    estimated_time: Optional[str] = None
    trailer: Optional[str] = None
    streaming_platforms: Optional[list[str]] = None
    backdrop_image: Optional[str] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    tagline: Optional[str] = None
    release_date: Optional[datetime] = None

    # Personal use
    times_consumed: Optional[int] = Field(None, ge=0)
    last_consumed_at: Optional[datetime] = None
    mini_review: Optional[str] = None
    attachments: Optional[list[str]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        """Reject titles that are empty after trimming."""
        if not v or not v.strip():
            raise ValueError("title must not be empty")
        return v


class ItemDraft(ItemFields):
    """Item data before an id and creation time are assigned."""


class Item(ItemFields):
    """A tracked media entry."""

    id: str
    created_at: datetime


class NoteDraft(BaseModel):
    """Note data before an id and creation time are assigned."""

    item_id: str
    content: str
    is_spoiler: bool = False
    milestone: Optional[MilestoneType] = None


class Note(NoteDraft):
    """Freeform annotation attached to one item."""

    id: str
    created_at: datetime


class CategoryDraft(BaseModel):
    """User-defined grouping before it is stored."""

    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    visible: bool = True


class CategoryRecord(CategoryDraft):
    """User-defined grouping owned by one user."""

    id: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ImportedRow(BaseModel):
    """Raw spreadsheet row during bulk import."""

    title: str
    status_text: Optional[str] = None
    note: Optional[float] = None


class EnrichedItem(Item):
    """Draft item produced by bulk import, not yet persisted."""

    original_title: str
    found: bool = False
    match_confidence: MatchConfidence = MatchConfidence.NONE

    def to_draft(self) -> ItemDraft:
        """Strip import bookkeeping so the item can be saved."""
        data = self.model_dump(
            exclude={"id", "created_at", "original_title", "found", "match_confidence"}
        )
        return ItemDraft(**data)


class EnrichmentSummary(BaseModel):
    """Result of an enrichment batch."""

    total: int = 0
    success: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


class BacklogPicks(BaseModel):
    """Suggestions drawn from pending items."""

    oldest: Optional[Item] = None
    best_rated: Optional[Item] = None
    random: Optional[Item] = None


class DashboardStats(BaseModel):
    """Collection overview for the dashboard."""

    total: int = 0
    by_status: dict[ItemStatus, int] = Field(default_factory=dict)
    completed_this_year: int = 0
    average_rating: float = 0.0
    # January first; only completions in the current year
    completions_by_month: list[int] = Field(default_factory=lambda: [0] * 12)
    top_rated: list[Item] = Field(default_factory=list)
    backlog: BacklogPicks = Field(default_factory=BacklogPicks)


class LookupKind(str, Enum):
    """Outcome of a provider lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    NOT_CONFIGURED = "not_configured"


class LookupResult(BaseModel):
    """Tagged provider result that keeps failure reasons apart."""

    kind: LookupKind
    candidate: Optional[dict[str, Any]] = None
    detail: Optional[str] = None

    @classmethod
    def found(cls, candidate: dict[str, Any]) -> "LookupResult":
        return cls(kind=LookupKind.FOUND, candidate=candidate)

    @classmethod
    def not_found(cls) -> "LookupResult":
        return cls(kind=LookupKind.NOT_FOUND)

    @classmethod
    def provider_error(cls, detail: str) -> "LookupResult":
        return cls(kind=LookupKind.PROVIDER_ERROR, detail=detail)

    @classmethod
    def not_configured(cls, detail: str) -> "LookupResult":
        return cls(kind=LookupKind.NOT_CONFIGURED, detail=detail)

    @property
    def is_found(self) -> bool:
        return self.kind == LookupKind.FOUND
