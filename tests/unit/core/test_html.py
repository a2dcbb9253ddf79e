"""Unit tests for core/html.py"""

from blogblocks.core.extract.blocks import convert_blocks
from blogblocks.core.html import SoupParser, decode_entities, text_of


class RecordingParser(SoupParser):
    """Counts calls so tests can see the injected parser is the one used."""

    def __init__(self):
        super().__init__("html.parser")
        self.calls = []

    def parse_fragment(self, markup):
        self.calls.append(markup)
        return super().parse_fragment(markup)


def test_convert_blocks_uses_injected_parser():
    parser = RecordingParser()
    convert_blocks("<p>x</p>", parser)
    assert parser.calls == ["<p>x</p>"]


def test_parse_fragment_returns_top_level_elements(parser):
    root = parser.parse_fragment("<p>a</p><p>b</p>")
    assert [el.name for el in root.find_all(recursive=False)] == ["p", "p"]


def test_parse_document_handles_empty_input(parser):
    assert parser.parse_document("").get_text() == ""


def test_decode_entities():
    assert decode_entities("Tom &amp; Jerry &#39;s &apos;x&apos;") == "Tom & Jerry 's 'x'"
    assert decode_entities(None) == ""


def test_text_of(parser):
    soup = parser.parse_document("<h1>  Title  </h1>")
    assert text_of(soup.h1) == "Title"
    assert text_of(None) == ""
