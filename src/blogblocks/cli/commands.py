"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from blogblocks.config import Settings, load_config
from blogblocks.core.pipeline import run_convert, run_feed, run_import, run_update
from blogblocks.crud.database import init_db, make_engine, reset_db
from blogblocks.crud.posts import delete_all_posts, get_all_posts
from blogblocks.log import configure_logging


FEED_FILE = "feed.xml"


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config and set up logging, with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def convert_cmd(
    path: Annotated[str, typer.Argument(help="Export zip, directory, or single HTML file")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--html-parser", help="BeautifulSoup parser name")] = None,
    plain: Annotated[bool, typer.Option("--plain", help="Drop inline formatting outside paragraphs")] = False,
    ):
    """Convert exported HTML posts to staged block JSON."""
    settings = _settings(overrides={
        "staging_dir": staging, "html_parser": parser, "rich_text": False if plain else None,
    })
    if not Path(path).exists():
        _fail(f"Export not found: {path}")
    staging_dir = Path(settings.staging_dir)
    try:
        results = run_convert(path, staging_dir, settings)
    except (RuntimeError, ValueError) as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Converted {len(results)} post(s) to {staging_dir}/")


def import_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    ):
    """Create stored posts from staged JSON."""
    settings = _settings(overrides={"staging_dir": staging})
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        counts, changes = run_import(engine, Path(settings.staging_dir))
    except Exception as e:
        _fail("Import failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'blogblocks convert <path>' first.")
        raise typer.Exit(1)

    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(f"Import complete - {counts['created']} created, {counts['unchanged']} unchanged")


def update_cmd(
    path: Annotated[str, typer.Argument(help="Export zip, directory, or single HTML file")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Match and convert without writing")] = False,
    only: Annotated[Optional[list[str]], typer.Option("--only", help="Restrict to these export file names")] = None,
    batch_size: Annotated[Optional[int], typer.Option("--batch-size", help="Documents converted per batch")] = None,
    apply_partial: Annotated[bool, typer.Option("--apply-partial", help="Apply keyword-only matches")] = False,
    ):
    """Re-convert exported posts and replace the content of matching stored posts."""
    settings = _settings(overrides={
        "batch_size": batch_size, "apply_partial_matches": True if apply_partial else None,
    })
    if not Path(path).exists():
        _fail(f"Export not found: {path}")
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        counts, changes = run_update(engine, path, settings, dry_run=dry_run, only=set(only) if only else None)
    except Exception as e:
        _fail("Update failed", e)

    for status, file_name, result in changes:
        typer.echo(f"  {status}: {file_name} -> {result.record_id} ({result.confidence.value})")
    prefix = "Dry run" if dry_run else "Update"
    typer.echo(
        f"{prefix} complete - "
        f"{counts['updated']} updated, "
        f"{counts['review']} need review, "
        f"{counts['skipped']} skipped, "
        f"{counts['error']} failed"
    )
    if counts['error']:
        raise typer.Exit(1)


def feed_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", help="Max posts in the feed")] = None,
    ):
    """Write an RSS feed of the most recent published posts."""
    settings = _settings(overrides={"output_dir": out, "feed_limit": limit})
    engine = make_engine(settings.db_url)
    init_db(engine)

    with Session(engine) as session:
        if not get_all_posts(session):
            typer.echo("No posts found in database.")
            raise typer.Exit(1)

    output_path = Path(settings.output_dir) / FEED_FILE
    try:
        count = run_feed(engine, output_path, settings)
    except Exception as e:
        _fail("Feed generation failed", e)
    typer.echo(f"Wrote {count} item(s) to {output_path}")


def delete_all_cmd(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
    ):
    """Delete every stored post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    if not yes and not typer.confirm(f"Delete all posts in {settings.db_url}?"):
        typer.echo("Aborted.")
        raise typer.Exit(1)

    with Session(engine) as session:
        count = delete_all_posts(session)
        session.commit()
    typer.echo(f"Deleted {count} post(s).")
