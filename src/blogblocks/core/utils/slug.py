"""Slug and title normalization for post identifiers"""

import re
from pathlib import PurePosixPath
from urllib.parse import unquote

from blogblocks.core.html import decode_entities


ID_PREFIX_RE = re.compile(r'^\d+[.\-_:]?\s*')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower().strip()
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'[^\w-]+', '', text)
    return re.sub(r'-{2,}', '-', text).strip('-')


def normalize_title(title: str) -> str:
    """Lowercase and collapse whitespace; the key used for title lookups."""
    return re.sub(r'\s+', ' ', title.lower().strip())


def capitalize_word(word: str) -> str:
    """Upper-case the first character only ("it's" -> "It's", never "It'S")."""
    return word[:1].upper() + word[1:].lower()


def clean_title(title: str) -> str:
    """Drop an export's numeric post-ID prefix and sentence-case the rest.

    "148862681.years-ago-when-i-worked" -> "Years ago when i worked"
    """
    title = decode_entities(title)
    stripped = ID_PREFIX_RE.sub('', title, count=1)
    if stripped != title and not re.search(r'\s', stripped.strip()):
        stripped = stripped.replace('-', ' ')
    words = stripped.split()
    if not words:
        return ''
    return ' '.join([capitalize_word(words[0])] + [w.lower() for w in words[1:]])


def title_from_filename(file_name: str) -> str:
    """Readable title from an export filename: decoded, separators as spaces, words capitalized."""
    stem = PurePosixPath(file_name).stem
    text = re.sub(r'[-_]', ' ', unquote(stem)).strip()
    return ' '.join(capitalize_word(w) for w in text.split(' ') if w)
