"""Pipeline step functions: convert, import, update, and feed orchestration"""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import Session

from blogblocks.config import Settings
from blogblocks.core.archive import iter_export, load_date_index
from blogblocks.core.extract.blocks import convert_blocks
from blogblocks.core.extract.entities import (
    DEFAULT_TITLE, extract_metadata, read_time, resolve_title, select_content,
)
from blogblocks.core.feed import build_feed
from blogblocks.core.html import HtmlParser, SoupParser
from blogblocks.core.keys import assign_keys
from blogblocks.core.match import (
    MatchResult, RecordIndex, match_record, similar_titles, title_from_export_name,
)
from blogblocks.core.models import Block, ExternalDocument, StagedPost, dump_blocks
from blogblocks.crud.posts import create_post, get_published, list_records, patch_content


COMBINED_FILE = "all-posts.json"


def _parser(settings: Settings) -> HtmlParser:
    return SoupParser(settings.html_parser)


def parse_post(
    doc: ExternalDocument,
    date_index: dict[str, str],
    parser: HtmlParser,
    settings: Settings,
    ) -> StagedPost:
    """Convert one exported HTML post into metadata plus body blocks."""
    soup = parser.parse_document(doc.raw_html)
    blocks = convert_blocks(select_content(soup, settings.content_selectors), parser, settings.rich_text)
    meta = extract_metadata(soup, doc.file_name, date_index, blocks, settings.excerpt_length)
    return StagedPost(
        **meta.model_dump(),
        read_time=read_time(blocks),
        source_file=doc.file_name,
        content=blocks,
    )


def run_convert(export_path: str, staging_dir: Path, settings: Settings) -> list[tuple[str, Path]]:
    """Convert every post in an export to staging JSON. Returns (source_file, staging_file) pairs."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    parser = _parser(settings)
    date_index = load_date_index(Path(export_path))

    results, posts = [], []
    for doc in iter_export(Path(export_path)):
        try:
            staged = parse_post(doc, date_index, parser, settings)
        except Exception as e:
            raise RuntimeError(f"Failed to convert {doc.file_name}: {e}") from e
        out_file = staging_dir / f"{staged.slug}.json"
        out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
        logger.debug(f"{doc.file_name}: {len(staged.content)} blocks")
        results.append((doc.file_name, out_file))
        posts.append(staged.model_dump(mode="json"))

    if posts:
        (staging_dir / COMBINED_FILE).write_text(json.dumps(posts, indent=2), encoding='utf-8')
    logger.info(f"Converted {len(results)} post(s) into {staging_dir}")
    return results


def _published_datetime(value: str) -> datetime:
    """Naive UTC datetime for storage."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def run_import(engine: Engine, staging_dir: Path) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Create stored posts from staged JSON, keying every block first.

    Returns (counts, changes) where changes lists (status, slug) for created
    posts. Returns ({}, []) when staging_dir holds nothing.
    """
    files = sorted(f for f in staging_dir.glob('*.json') if f.name != COMBINED_FILE) if staging_dir.exists() else []
    if not files:
        return {}, []

    counts = {"created": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for f in files:
            staged = StagedPost.model_validate_json(f.read_text(encoding='utf-8'))
            post, status = create_post(session, {
                "slug": staged.slug,
                "title": staged.title,
                "published_at": _published_datetime(staged.published_at),
                "excerpt": staged.excerpt,
                "image_url": staged.image or None,
                "read_time": staged.read_time,
                "source_file": staged.source_file or None,
                "content": dump_blocks(assign_keys(staged.content)),
            })
            counts[status] += 1
            if status == 'created':
                changes.append((status, post.slug))
        session.commit()
    logger.info(f"Imported {counts['created']} post(s), {counts['unchanged']} already present")
    return counts, changes


def _prepare(doc: ExternalDocument, index: RecordIndex, parser: HtmlParser, settings: Settings):
    """Match and convert one document; runs on worker threads, touches no shared state."""
    soup = parser.parse_document(doc.raw_html)
    title = resolve_title(soup)
    if title == DEFAULT_TITLE:
        title = title_from_export_name(doc.file_name)
    result = match_record(doc, title, index)
    if not result.found:
        return doc, title, result, None
    blocks = convert_blocks(select_content(soup, settings.content_selectors), parser, settings.rich_text)
    return doc, title, result, assign_keys(blocks)


def _report_unmatched(doc: ExternalDocument, title: str, index: RecordIndex) -> None:
    logger.info(f"Skipped {doc.file_name}: no stored post for title {title!r}")
    for similar in similar_titles(title, index):
        logger.info(f"  similar: {similar!r}")


def run_update(
    engine: Engine,
    export_path: str,
    settings: Settings,
    dry_run: bool = False,
    only: set[str] | None = None,
    ) -> tuple[dict[str, int], list[tuple[str, str, MatchResult]]]:
    """Re-convert exported posts and replace the content of their matching stored posts.

    The record index is read once. Documents are matched and converted in
    batches of settings.batch_size on worker threads; writes happen on the
    calling thread, with settings.batch_delay seconds between batches.
    Partial (keyword) matches are reported as 'review' and left untouched
    unless settings.apply_partial_matches is set.
    """
    parser = _parser(settings)
    counts = {"updated": 0, "skipped": 0, "review": 0, "error": 0}
    changes: list[tuple[str, str, MatchResult]] = []
    docs = list(iter_export(Path(export_path), only))

    with Session(engine) as session:
        index = RecordIndex.from_records(list_records(session))
        logger.info(f"Matching {len(docs)} document(s) against {len(index.by_slug)} stored post(s)")

        with ThreadPoolExecutor(max_workers=settings.batch_size) as pool:
            for start in range(0, len(docs), settings.batch_size):
                batch = docs[start:start + settings.batch_size]
                futures = [pool.submit(_prepare, d, index, parser, settings) for d in batch]
                for doc, future in zip(batch, futures):
                    try:
                        doc, title, result, blocks = future.result()
                    except Exception as e:
                        logger.error(f"Error converting {doc.file_name}: {e}")
                        counts["error"] += 1
                        continue

                    if not result.found:
                        _report_unmatched(doc, title, index)
                        counts["skipped"] += 1
                        continue
                    if result.needs_review and not settings.apply_partial_matches:
                        logger.warning(f"{doc.file_name}: keyword-only match {result.record_id}; review before applying")
                        counts["review"] += 1
                        changes.append(("review", doc.file_name, result))
                        continue
                    if result.needs_review:
                        logger.warning(f"{doc.file_name}: applying keyword-only match {result.record_id}")

                    try:
                        if not dry_run:
                            patch_content(session, result.record_id, dump_blocks(blocks))
                            session.commit()
                    except Exception as e:
                        session.rollback()
                        logger.error(f"Error updating {result.record_id} from {doc.file_name}: {e}")
                        counts["error"] += 1
                        continue
                    counts["updated"] += 1
                    changes.append(("updated", doc.file_name, result))

                if not dry_run and start + settings.batch_size < len(docs):
                    time.sleep(settings.batch_delay)

    return counts, changes


def run_feed(engine: Engine, output_path: Path, settings: Settings) -> int:
    """Write the RSS feed for the most recent published posts. Returns the item count."""
    with Session(engine) as session:
        posts = get_published(session, settings.feed_limit)
        xml = build_feed(
            posts, settings.base_url, settings.site_title,
            settings.site_description, settings.description_length,
        )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(xml, encoding='utf-8')
    logger.info(f"Wrote feed with {len(posts)} item(s) to {output_path}")
    return len(posts)
