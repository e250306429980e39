"""Command-line interface for Mediaverse."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .bulk_import import build_template
from .categories import parse_category
from .config import get_settings, validate_credentials
from .constants import DEFAULT_WEB_UI_PORT, ItemCategory, ItemStatus, MilestoneType
from .exceptions import ConfigurationError, MediaverseError
from .export import export_items
from .models import ItemDraft, NoteDraft
from .services import Services, build_services
from .storage import filter_items, stats

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [c.value for c in ItemCategory]
STATUS_CHOICES = [s.value for s in ItemStatus]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level: str):
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def _services(log_level: Optional[str] = None) -> Services:
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    return build_services(settings)


def _echo_item(item) -> None:
    rating = f"{item.rating:g}/5" if item.rating is not None else "-"
    click.echo(f"{item.id}  [{item.category}] {item.title}  ({item.status.value}, {rating})")


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Personal media tracker with metadata enrichment and bulk import."""
    pass


@main.command("list")
@click.option("--category", help="Filter by category (accepts synonyms like 'película')")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Filter by status")
@click.option("--search", help="Search title, description and tags")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="WARNING", help="Logging level")
def list_items(category: Optional[str], status: Optional[str], search: Optional[str], log_level: str):
    """List tracked items."""
    services = _services(log_level)
    items = filter_items(services.items.list(), category=category, status=status, search=search)
    for item in items:
        _echo_item(item)
    click.echo(f"\n{len(items)} item(s)")


@main.command()
@click.argument("title")
@click.option("--category", required=True, help="Item category")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default="pending", help="Initial status")
@click.option("--rating", type=click.FloatRange(0, 5), help="Rating from 0 to 5")
@click.option("--enrich/--no-enrich", default=False, help="Fetch metadata after creating")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="INFO", help="Logging level")
def add(title: str, category: str, status: str, rating: Optional[float], enrich: bool, log_level: str):
    """Add an item."""
    services = _services(log_level)
    parsed = parse_category(category)
    item = services.items.create(
        ItemDraft(
            title=title,
            category=parsed.value if parsed else category,
            status=ItemStatus(status),
            rating=rating,
        )
    )
    _echo_item(item)

    if enrich:
        engine = services.engine_for(item.category)
        if engine is None:
            click.echo(f"No metadata provider for category '{item.category}'")
        elif engine.enrich_one(item):
            _echo_item(services.items.get(item.id))
        else:
            for error in engine.errors:
                click.echo(f"  - {error}", err=True)


@main.command()
@click.argument("item_id")
@click.argument("status", type=click.Choice(STATUS_CHOICES))
def status(item_id: str, status: str):
    """Change an item's status."""
    services = _services("WARNING")
    try:
        item = services.items.change_status(item_id, ItemStatus(status))
    except MediaverseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _echo_item(item)


@main.command()
@click.argument("item_id")
def delete(item_id: str):
    """Delete an item."""
    services = _services("WARNING")
    services.items.delete(item_id)
    click.echo(f"Deleted {item_id}")


@main.group()
def note():
    """Manage notes attached to items."""
    pass


@note.command("add")
@click.argument("item_id")
@click.argument("content")
@click.option("--spoiler", is_flag=True, help="Mark the note as a spoiler")
@click.option("--milestone", type=click.Choice([m.value for m in MilestoneType]), help="Milestone tag")
def note_add(item_id: str, content: str, spoiler: bool, milestone: Optional[str]):
    """Attach a note to an item."""
    services = _services("WARNING")
    created = services.notes.create(
        NoteDraft(
            item_id=item_id,
            content=content,
            is_spoiler=spoiler,
            milestone=MilestoneType(milestone) if milestone else None,
        )
    )
    click.echo(f"Created note {created.id}")


@note.command("list")
@click.argument("item_id")
def note_list(item_id: str):
    """List notes for an item."""
    services = _services("WARNING")
    for n in services.notes.list(item_id):
        flag = " [spoiler]" if n.is_spoiler else ""
        click.echo(f"{n.created_at:%Y-%m-%d}{flag}: {n.content}")


@main.command()
@click.option("--category", help="Only enrich items of this category")
@click.option("--item-id", help="Enrich a single item")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="INFO", help="Logging level")
def enrich(category: Optional[str], item_id: Optional[str], log_level: str):
    """Fill metadata for stored items from TMDB, Google Books and RAWG."""
    services = _services(log_level)

    if item_id:
        item = services.items.get(item_id)
        if item is None:
            click.echo(f"Item not found: {item_id}", err=True)
            sys.exit(1)
        items = [item]
    else:
        items = filter_items(services.items.list(), category=category)

    # Group by engine so each provider gets its own paced batch
    groups: dict[str, list] = {}
    for item in items:
        parsed = parse_category(item.category)
        if parsed is not None:
            groups.setdefault(parsed.value, []).append(item)

    failed = 0
    for group_category, group_items in groups.items():
        engine = services.engine_for(group_category)
        if engine is None:
            continue
        summary = engine.enrich_many(group_items)
        failed += summary.failed
        click.echo(f"\n=== {engine.PROVIDER_NAME} ({group_category}) ===")
        click.echo(f"Total: {summary.total}")
        click.echo(f"Enriched: {summary.success}")
        click.echo(f"Failed: {summary.failed}")
        if summary.errors:
            click.echo(f"\nErrors ({len(summary.errors)}):")
            for error in summary.errors[:10]:  # Show first 10
                click.echo(f"  - {error}")

    sys.exit(0 if failed == 0 else 1)


@main.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), required=True, help="Category of every row")
@click.option("--save", is_flag=True, help="Save the imported items")
@click.option("--only-found", is_flag=True, help="With --save, skip rows without a match")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="INFO", help="Logging level")
def import_file(file: Path, category: str, save: bool, only_found: bool, log_level: str):
    """Import items from a .csv or .xlsx file."""
    services = _services(log_level)
    importer = services.importer()

    try:
        results = importer.parse_and_enrich(str(file), category)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    if importer.error:
        click.echo(f"Error: {importer.error}", err=True)
        sys.exit(1)

    click.echo(f"\n=== Import Results ({len(results)} rows) ===")
    for result in results:
        marker = "+" if result.found else "?"
        click.echo(f"  {marker} {result.original_title} -> {result.title} [{result.match_confidence.value}]")

    if save:
        saved = 0
        for result in results:
            if only_found and not result.found:
                continue
            services.items.create(result.to_draft())
            saved += 1
        click.echo(f"\nSaved {saved} item(s)")


@main.command()
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), default="movie", help="Category in the file name")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the template")
def template(category: str, output: Optional[Path]):
    """Write the bulk import CSV template."""
    filename, content = build_template(category)
    target = output or Path(filename)
    target.write_text(content, encoding="utf-8")
    click.echo(f"Template written to {target}")


@main.command("stats")
@click.option("--category", help="Only count items of this category")
def show_stats(category: Optional[str]):
    """Show collection statistics and backlog picks."""
    services = _services("WARNING")
    summary = stats(services.items.list(), category=category)

    click.echo(f"\n=== Stats ({category or 'all'}) ===")
    click.echo(f"Total: {summary.total}")
    for item_status, count in summary.by_status.items():
        click.echo(f"  {item_status.value}: {count}")
    click.echo(f"Completed this year: {summary.completed_this_year}")
    click.echo(f"Average rating: {summary.average_rating:g}")
    click.echo("By month: " + " ".join(str(count) for count in summary.completions_by_month))

    if summary.top_rated:
        click.echo("\nTop rated:")
        for item in summary.top_rated:
            _echo_item(item)

    picks = [
        ("Oldest pending", summary.backlog.oldest),
        ("Best rated pending", summary.backlog.best_rated),
        ("Random pick", summary.backlog.random),
    ]
    if summary.backlog.oldest:
        click.echo("\nBacklog:")
        for label, item in picks:
            click.echo(f"  {label}: {item.title}")


@main.command("export")
@click.option("--category", help="Only export items of this category")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only export items with this status")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the CSV")
def export_csv(category: Optional[str], status: Optional[str], output: Optional[Path]):
    """Export items to a CSV file."""
    services = _services("WARNING")
    items = filter_items(services.items.list(), category=category, status=status)
    filename, content = export_items(items)
    target = output or Path(filename)
    target.write_text(content, encoding="utf-8")
    click.echo(f"Exported {len(items)} item(s) to {target}")


@main.command()
def check():
    """Report which provider keys are configured."""
    settings = get_settings()
    setup_logging(settings.log_level)
    is_valid, missing = validate_credentials(settings)
    click.echo(f"Supabase: {'configured' if settings.supabase_configured else 'local store only'}")
    if is_valid:
        click.echo("All provider keys configured")
        return
    for var in missing:
        click.echo(f"  - missing {var}")
    sys.exit(1)


@main.command()
@click.option("--port", type=int, default=DEFAULT_WEB_UI_PORT, help="Web API port")
@click.option("--host", type=str, default="127.0.0.1", help="Web API host")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="INFO", help="Logging level")
def web(port: int, host: str, log_level: str):
    """Serve the HTTP API."""
    import uvicorn
    from .web import create_app

    services = _services(log_level)
    logger.info("=" * 60)
    logger.info(f"Mediaverse API: http://{host}:{port}")
    logger.info("=" * 60)
    uvicorn.run(create_app(services), host=host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
