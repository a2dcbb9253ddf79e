"""HTML parsing capability injected into the extract, convert and match steps"""

import html
from typing import Protocol

from bs4 import BeautifulSoup, Tag


class HtmlParser(Protocol):
    """Anything that turns markup into a BeautifulSoup-compatible tree."""

    def parse_fragment(self, markup: str) -> Tag: ...

    def parse_document(self, markup: str) -> Tag: ...


class SoupParser:
    """BeautifulSoup-backed parser; `features` is any installed tree builder name."""

    def __init__(self, features: str = "html.parser"):
        self.features = features

    def parse_fragment(self, markup: str) -> Tag:
        # lxml and html5lib wrap fragments in <html><body>
        soup = BeautifulSoup(markup or "", self.features)
        return soup.body or soup

    def parse_document(self, markup: str) -> Tag:
        return BeautifulSoup(markup or "", self.features)


DEFAULT_PARSER = SoupParser()


def decode_entities(text: str | None) -> str:
    """Decode HTML entities (&amp;, &#39;, &apos; ...) without building a tree."""
    return html.unescape(text) if text else ""


def text_of(element: Tag | None) -> str:
    """Trimmed text content of an element, '' for None."""
    if element is None:
        return ""
    return element.get_text().strip()
