"""
HTTP API for Mediaverse
Exposes item/note CRUD, enrichment, bulk import, dashboard stats and CSV
export over JSON.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError

from .bulk_import import build_template
from .constants import (
    HTTP_BAD_REQUEST,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
    ItemCategory,
    ItemStatus,
)
from .exceptions import ConfigurationError, ImportFileError, NotAuthenticatedError, NotFoundError
from .export import export_items
from .models import (
    CategoryDraft,
    CategoryRecord,
    DashboardStats,
    EnrichedItem,
    Item,
    ItemDraft,
    Note,
    NoteDraft,
)
from .services import Services
from .storage import filter_items, stats

logger = logging.getLogger(__name__)


class StatusChange(BaseModel):
    """Status change request model"""
    status: ItemStatus


class NoteCreate(BaseModel):
    """Note creation request model (item id comes from the path)"""
    content: str
    is_spoiler: bool = False
    milestone: Optional[str] = None


class EnrichResponse(BaseModel):
    """Single item enrichment response model"""
    enriched: bool
    item: Optional[Item] = None
    errors: list[str] = []


class ImportResponse(BaseModel):
    """Bulk import response model"""
    items: list[EnrichedItem]
    progress: int
    error: Optional[str] = None


def create_app(services: Services) -> FastAPI:
    """Build the API around a set of services."""
    app = FastAPI(title="Mediaverse", version="0.1.0")
    app.state.services = services

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=HTTP_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
        return JSONResponse(status_code=HTTP_UNAUTHORIZED, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError):
        return JSONResponse(status_code=HTTP_SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    @app.exception_handler(ImportFileError)
    async def import_file_handler(request: Request, exc: ImportFileError):
        return JSONResponse(status_code=HTTP_BAD_REQUEST, content={"detail": str(exc)})

    # Raised by model_validate when a PATCH body breaks a field constraint
    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=HTTP_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health():
        """Report which backend requests are routed to"""
        backend = "remote" if services.items.use_remote() else "local"
        return {"status": "ok", "backend": backend}

    # Items

    @app.get("/api/items", response_model=list[Item])
    def list_items(
        category: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
    ):
        return filter_items(services.items.list(), category=category, status=status, search=search)

    @app.get("/api/items/{item_id}", response_model=Item)
    def get_item(item_id: str):
        item = services.items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    @app.post("/api/items", response_model=Item, status_code=201)
    def create_item(draft: ItemDraft):
        return services.items.create(draft)

    @app.patch("/api/items/{item_id}", response_model=Item)
    def update_item(item_id: str, updates: dict[str, Any]):
        return services.items.update(item_id, updates)

    @app.delete("/api/items/{item_id}", status_code=204)
    def delete_item(item_id: str):
        services.items.delete(item_id)

    @app.post("/api/items/{item_id}/status", response_model=Item)
    def change_status(item_id: str, change: StatusChange):
        return services.items.change_status(item_id, change.status)

    @app.post("/api/items/{item_id}/enrich", response_model=EnrichResponse)
    def enrich_item(item_id: str):
        item = services.items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        engine = services.engine_for(item.category)
        if engine is None:
            return EnrichResponse(enriched=False, item=item, errors=[f"No provider for category '{item.category}'"])
        enriched = engine.enrich_one(item)
        return EnrichResponse(enriched=enriched, item=services.items.get(item_id), errors=engine.errors)

    # Notes

    @app.get("/api/items/{item_id}/notes", response_model=list[Note])
    def list_notes(item_id: str):
        return services.notes.list(item_id)

    @app.post("/api/items/{item_id}/notes", response_model=Note, status_code=201)
    def create_note(item_id: str, body: NoteCreate):
        return services.notes.create(NoteDraft(item_id=item_id, **body.model_dump()))

    @app.patch("/api/notes/{note_id}", response_model=Note)
    def update_note(note_id: str, updates: dict[str, Any]):
        return services.notes.update(note_id, updates)

    @app.delete("/api/notes/{note_id}", status_code=204)
    def delete_note(note_id: str):
        services.notes.delete(note_id)

    # Categories

    @app.get("/api/categories", response_model=list[CategoryRecord])
    def list_categories():
        return services.categories.list()

    @app.post("/api/categories", response_model=CategoryRecord, status_code=201)
    def create_category(draft: CategoryDraft):
        return services.categories.create(draft)

    @app.patch("/api/categories/{category_id}", response_model=CategoryRecord)
    def update_category(category_id: str, updates: dict[str, Any]):
        return services.categories.update(category_id, updates)

    @app.delete("/api/categories/{category_id}", status_code=204)
    def delete_category(category_id: str):
        services.categories.delete(category_id)

    # Bulk import

    @app.post("/api/import", response_model=ImportResponse)
    def import_file(file: UploadFile = File(...), category: ItemCategory = Form(...)):
        """Parse and enrich an uploaded file; nothing is saved"""
        importer = services.importer()
        content = file.file.read()
        items = importer.parse_and_enrich(file.filename or "upload.csv", category, content=content)
        if importer.error:
            raise ImportFileError(importer.error)
        return ImportResponse(items=items, progress=importer.progress, error=importer.error)

    @app.get("/api/import/template", response_class=PlainTextResponse)
    def import_template(category: ItemCategory = ItemCategory.MOVIE):
        filename, content = build_template(category)
        return PlainTextResponse(
            content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    # Dashboard and export

    @app.get("/api/stats", response_model=DashboardStats)
    def dashboard_stats(category: Optional[str] = None):
        return stats(services.items.list(), category=category)

    @app.get("/api/export", response_class=PlainTextResponse)
    def export_csv(
        category: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
    ):
        """Download the filtered items as CSV"""
        items = filter_items(services.items.list(), category=category, status=status, search=search)
        filename, content = export_items(items)
        return PlainTextResponse(
            content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
