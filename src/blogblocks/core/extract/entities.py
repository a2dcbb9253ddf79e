"""Post metadata extraction: title, slug, publish date, excerpt, hero image

Every field resolves through an ordered cascade of sources and ends in a
fixed fallback, so extraction always returns a complete PostMetadata.
"""

import json
import math
import re
from datetime import datetime, timezone
from pathlib import PurePosixPath

from bs4.element import Tag
from loguru import logger

from blogblocks.core.html import decode_entities, text_of
from blogblocks.core.models import Block, PostMetadata, TextBlock
from blogblocks.core.utils.dates import date_from_filename, now_iso, parse_date
from blogblocks.core.utils.slug import clean_title, slugify, title_from_filename


DEFAULT_TITLE = "Untitled Post"
WORDS_PER_MINUTE = 200

META_TITLE_SELECTORS = [
    'meta[property="og:title"]',
    'meta[name="twitter:title"]',
    'meta[property="article:title"]',
    'meta[name="title"]',
]
TITLE_SELECTORS = [
    'h1.post-title',
    'h1.entry-title',
    'h1.title',
    '.post-title',
    '.entry-title',
    'article h1',
    'main h1',
    '.content h1',
    'h1',
    'h2.post-title',
    'h2.entry-title',
    'title',
]
DATE_SELECTORS = [
    'meta[property="article:published_time"]',
    'meta[name="article:published_time"]',
    'meta[property="og:published_time"]',
    'meta[name="publish_date"]',
    'meta[property="publish_date"]',
    'meta[name="date"]',
    'meta[property="date"]',
    'time[datetime]',
    'time.publish-date',
    'time.date',
    'time[itemprop="datePublished"]',
    '.publish-date',
    '.publishDate',
    '.date',
    '.post-date',
    '.entry-date',
    '[datetime]',
    '[itemprop="datePublished"]',
    'time',
]
DATE_ATTRIBUTES = ['datetime', 'content', 'data-date', 'pubdate']
TEXT_DATE_PATTERNS = [
    re.compile(r'\b\d{4}-\d{2}-\d{2}\b'),
    re.compile(r'\b[A-Za-z]+\s+\d{1,2},\s+\d{4}\b'),
    re.compile(r'\b\d{1,2}/\d{1,2}/\d{4}\b'),
]
EXCERPT_SELECTORS = [
    'meta[name="description"]',
    'meta[property="og:description"]',
    '.excerpt',
    '.summary',
]
IMAGE_SELECTORS = [
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
    'img[src]',
]
SITE_SUFFIX_RE = re.compile(r'\s*\|\s*.*$')
LEADING_DIGITS_RE = re.compile(r'^\d+')


def _stem(file_name: str) -> str:
    return PurePosixPath(file_name).stem


def resolve_title(soup: Tag, file_name: str = "") -> str:
    """Raw (uncleaned) title from meta tags, then page elements, then the filename."""
    for selector in META_TITLE_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and (title := decode_entities(el.get('content') or '').strip()):
            return title

    for selector in TITLE_SELECTORS:
        if title := SITE_SUFFIX_RE.sub('', text_of(soup.select_one(selector))).strip():
            return title

    if file_name and (title := title_from_filename(file_name)):
        logger.debug(f"Title for {file_name} derived from filename")
        return title
    return DEFAULT_TITLE


def _first_heading(blocks: list[Block]) -> str:
    for b in blocks:
        if isinstance(b, TextBlock) and b.style.value in ('h1', 'h2', 'h3', 'h4') and b.children:
            return b.plain_text.strip()
    return ""


def _date_index_lookup(file_name: str, date_index: dict[str, str]) -> str | None:
    """Try the basename, the basename without its numeric ID, then "<id>.<rest>"."""
    base = _stem(file_name)
    candidates = [base, LEADING_DIGITS_RE.sub('', base)]
    if m := re.match(r'^(\d+)(.+)$', base):
        candidates.append(f"{m.group(1)}.{m.group(2)}")
    for key in candidates:
        if key and key in date_index and (parsed := parse_date(date_index[key])):
            return parsed
    return None


def _json_ld_dates(soup: Tag):
    for script in soup.select('script[type="application/ld+json"]'):
        try:
            data = json.loads(script.string or script.get_text() or "")
        except (ValueError, TypeError):
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            for node in [item] + [g for g in item.get('@graph') or [] if isinstance(g, dict)]:
                value = node.get('datePublished')
                if isinstance(value, list):
                    value = value[0] if value else None
                if value:
                    yield str(value)


def _selector_dates(soup: Tag):
    for selector in DATE_SELECTORS:
        for el in soup.select(selector):
            value = next((el.get(a) for a in DATE_ATTRIBUTES if el.get(a)), None) or text_of(el)
            if value:
                yield value


def _text_date(soup: Tag) -> str | None:
    """Scan visible text for date-shaped strings between 2000-01-01 and now."""
    body = soup.find('body') or soup
    text = body.get_text(" ")
    lower = datetime(2000, 1, 1, tzinfo=timezone.utc)
    upper = datetime.now(timezone.utc)
    for pattern in TEXT_DATE_PATTERNS:
        m = pattern.search(text)
        if m and (parsed := parse_date(m.group(0))):
            value = datetime.fromisoformat(parsed.replace("Z", "+00:00"))
            if lower <= value <= upper:
                return parsed
    return None


def resolve_published_at(soup: Tag, file_name: str = "", date_index: dict[str, str] | None = None) -> str:
    """Publish date as canonical UTC ISO-8601; falls back to the current instant."""
    if file_name and date_index:
        if found := _date_index_lookup(file_name, date_index):
            return found

    if found := date_from_filename(file_name):
        return found

    for value in _json_ld_dates(soup):
        if found := parse_date(value):
            return found

    for value in _selector_dates(soup):
        if found := parse_date(value):
            return found

    if found := _text_date(soup):
        return found

    logger.debug(f"No publish date found for {file_name or 'document'}; using now")
    return now_iso()


def resolve_excerpt(soup: Tag, blocks: list[Block], length: int = 200) -> str:
    for selector in EXCERPT_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and (excerpt := (el.get('content') or text_of(el)).strip()):
            return excerpt[:length]
    first = next((b for b in blocks if isinstance(b, TextBlock) and b.children), None)
    return first.plain_text.strip()[:length] if first else ""


def resolve_image(soup: Tag) -> str:
    for selector in IMAGE_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and (url := el.get('content') or el.get('src')):
            return url
    return ""


def read_time(blocks: list[Block]) -> str:
    """Estimated reading time at 200 words per minute, at least one minute."""
    words = sum(len(s.text.split()) for b in blocks if isinstance(b, TextBlock) for s in b.children)
    return f"{max(1, math.ceil(words / WORDS_PER_MINUTE))} min"


def select_content(soup: Tag, selectors: list[str]) -> Tag:
    """First matching content-area element, else <body>, else the whole document."""
    for selector in selectors:
        el = soup.select_one(selector)
        if el is not None:
            return el
    return soup.find('body') or soup


def extract_metadata(
    soup: Tag,
    file_name: str = "",
    date_index: dict[str, str] | None = None,
    blocks: list[Block] | None = None,
    excerpt_length: int = 200,
    ) -> PostMetadata:
    """Resolve every metadata field of a parsed post; never raises on odd markup."""
    blocks = blocks or []
    title = resolve_title(soup, file_name)
    if title == DEFAULT_TITLE:
        title = _first_heading(blocks) or title
    if title != DEFAULT_TITLE:
        title = clean_title(title) or DEFAULT_TITLE
    return PostMetadata(
        title=title,
        slug=slugify(title),
        published_at=resolve_published_at(soup, file_name, date_index),
        excerpt=resolve_excerpt(soup, blocks, excerpt_length),
        image=resolve_image(soup),
    )
