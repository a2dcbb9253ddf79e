"""Export discovery: HTML posts from a zip or directory, and the posts.csv date index"""

import csv
import io
import zipfile
from pathlib import Path
from typing import Iterator

from loguru import logger

from blogblocks.core.models import ExternalDocument


HTML_SUFFIXES = {'.html', '.htm'}
DATE_CSV = "posts.csv"


def _is_html(name: str) -> bool:
    return Path(name).suffix.lower() in HTML_SUFFIXES


def iter_export(path: Path, only: set[str] | None = None) -> Iterator[ExternalDocument]:
    """Yield every HTML document in an export zip or directory, in name order.

    Zip entries keep their archive path as file_name; directory files use the
    path relative to the directory. `only` restricts to those file names.
    """
    path = Path(path)
    if path.is_file() and zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as zf:
            for name in sorted(zf.namelist()):
                if _is_html(name) and (only is None or name in only):
                    raw = zf.read(name).decode('utf-8', errors='replace')
                    yield ExternalDocument(file_name=name, raw_html=raw)
    elif path.is_dir():
        for p in sorted(path.rglob('*')):
            name = p.relative_to(path).as_posix()
            if p.is_file() and _is_html(name) and (only is None or name in only):
                yield ExternalDocument(file_name=name, raw_html=p.read_text(encoding='utf-8', errors='replace'))
    elif path.is_file() and _is_html(path.name):
        yield ExternalDocument(file_name=path.name, raw_html=path.read_text(encoding='utf-8', errors='replace'))


def parse_date_csv(text: str) -> dict[str, str]:
    """Map post ids ("176682678.language-is-leverage") and their slug parts to raw dates.

    The first row is a header; rows need at least an id and a date column.
    """
    index: dict[str, str] = {}
    rows = csv.reader(io.StringIO(text))
    next(rows, None)
    for fields in rows:
        if len(fields) < 2:
            continue
        post_id, post_date = fields[0].strip(), fields[1].strip()
        if not post_id or not post_date:
            continue
        index[post_id] = post_date
        if slug_part := '.'.join(post_id.split('.')[1:]):
            index[slug_part] = post_date
    return index


def _csv_candidates(path: Path) -> list[Path]:
    base = path.parent if path.is_file() else path
    return [
        base / DATE_CSV,
        base / path.stem / DATE_CSV,
        base / "substack-export" / DATE_CSV,
    ]


def load_date_index(path: Path) -> dict[str, str]:
    """Find and parse posts.csv next to, named after, or inside the export; {} if absent."""
    path = Path(path)
    try:
        for candidate in _csv_candidates(path):
            if candidate.is_file():
                index = parse_date_csv(candidate.read_text(encoding='utf-8'))
                logger.info(f"Loaded {len(index)} publish dates from {candidate}")
                return index
        if path.is_file() and zipfile.is_zipfile(path):
            with zipfile.ZipFile(path) as zf:
                member = next((n for n in zf.namelist() if Path(n).name == DATE_CSV), None)
                if member:
                    index = parse_date_csv(zf.read(member).decode('utf-8'))
                    logger.info(f"Loaded {len(index)} publish dates from {path}:{member}")
                    return index
    except (OSError, UnicodeDecodeError, csv.Error, zipfile.BadZipFile) as e:
        logger.warning(f"Could not load {DATE_CSV}: {e}")
    return {}
