"""Map an exported document to an existing stored record"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable, Optional

from pydantic import BaseModel

from blogblocks.core.models import ExternalDocument
from blogblocks.core.utils.slug import normalize_title


EXPORT_NAME_RE = re.compile(r'^(\d+)\.(.+)$')
LEADING_DIGITS_RE = re.compile(r'^\d+')
LEADING_NUMBER_WORD_RE = re.compile(r'^\d+\s+')
KEYWORD_COUNT = 3


class MatchStrategy(str, Enum):
    """Cascade steps, in the order they are tried"""
    slug = "slug"
    slug_without_id = "slug_without_id"
    title = "title"
    partial = "partial"
    title_without_number = "title_without_number"


class MatchConfidence(str, Enum):
    exact = "exact"
    slug = "slug"
    title = "title"
    partial = "partial"


CONFIDENCE = {
    MatchStrategy.slug:                 MatchConfidence.exact,
    MatchStrategy.slug_without_id:      MatchConfidence.slug,
    MatchStrategy.title:                MatchConfidence.title,
    MatchStrategy.title_without_number: MatchConfidence.title,
    MatchStrategy.partial:              MatchConfidence.partial,
}


class MatchResult(BaseModel):
    """Resolved record id and the strategy that found it; both None when not found."""
    record_id: Optional[str] = None
    strategy: Optional[MatchStrategy] = None

    @property
    def found(self) -> bool:
        return self.record_id is not None

    @property
    def confidence(self) -> Optional[MatchConfidence]:
        return CONFIDENCE[self.strategy] if self.strategy else None

    @property
    def needs_review(self) -> bool:
        """Keyword-only matches can pick the wrong post when titles share words."""
        return self.strategy == MatchStrategy.partial


@dataclass
class RecordIndex:
    """In-memory slug and title lookups, built once per bulk run."""
    by_slug: dict[str, str] = field(default_factory=dict)
    by_title: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[tuple[str, str | None, str | None]]) -> "RecordIndex":
        """Build from (record_id, slug, title) rows; the first record wins on duplicates."""
        index = cls()
        for record_id, slug, title in records:
            if slug:
                index.by_slug.setdefault(slug.lower(), record_id)
            if title:
                index.by_title.setdefault(normalize_title(title), record_id)
        return index


def slug_from_filename(file_name: str) -> str:
    """Stored slug for an export file: "148808966.trying-vs-doing" -> "148808966trying-vs-doing"."""
    base = PurePosixPath(file_name).stem
    if m := EXPORT_NAME_RE.match(base):
        return m.group(1) + m.group(2)
    return base


def title_from_export_name(file_name: str) -> str:
    """Title words of an export filename with the numeric id dropped: "12.three-ways" -> "three ways"."""
    base = PurePosixPath(file_name).stem
    if m := EXPORT_NAME_RE.match(base):
        base = m.group(2)
    return re.sub(r'[-_]+', ' ', base).strip()


def title_keywords(normalized: str) -> list[str]:
    """First three words longer than two characters that are not bare numbers."""
    words = [w for w in normalized.split() if len(w) > 2 and not w.isdigit()]
    return words[:KEYWORD_COUNT]


def match_record(doc: ExternalDocument, title: str | None, index: RecordIndex) -> MatchResult:
    """Find the stored record for doc, trying slug, id-less slug, title, keywords, numberless title."""
    slug = slug_from_filename(doc.file_name).lower()
    if record_id := index.by_slug.get(slug):
        return MatchResult(record_id=record_id, strategy=MatchStrategy.slug)

    bare = LEADING_DIGITS_RE.sub('', slug)
    if bare != slug and (record_id := index.by_slug.get(bare)):
        return MatchResult(record_id=record_id, strategy=MatchStrategy.slug_without_id)

    if not title:
        return MatchResult()
    normalized = normalize_title(title)
    if record_id := index.by_title.get(normalized):
        return MatchResult(record_id=record_id, strategy=MatchStrategy.title)

    if keywords := title_keywords(normalized):
        for candidate, record_id in index.by_title.items():
            if all(word in candidate for word in keywords):
                return MatchResult(record_id=record_id, strategy=MatchStrategy.partial)

    numberless = LEADING_NUMBER_WORD_RE.sub('', normalized)
    if numberless != normalized and (record_id := index.by_title.get(numberless)):
        return MatchResult(record_id=record_id, strategy=MatchStrategy.title_without_number)

    return MatchResult()


def similar_titles(title: str, index: RecordIndex, limit: int = 3) -> list[str]:
    """Stored titles sharing either of the first two keywords; shown when nothing matched."""
    terms = [t for t in normalize_title(title).split() if len(t) > 2][:2]
    return [t for t in index.by_title if any(term in t for term in terms)][:limit]
