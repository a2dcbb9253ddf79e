"""Top-level element to content Block conversion"""

import re

from bs4.element import Tag

from blogblocks.core.extract.inline import parse_inline
from blogblocks.core.html import DEFAULT_PARSER, HtmlParser
from blogblocks.core.models import (
    Block, BlockStyle, CodeBlock, CodeContent, ImageBlock, InlineRun, ListItem, Span, TextBlock,
)


HEADING_STYLES: dict[str, BlockStyle] = {
    'h1': BlockStyle.h1,
    'h2': BlockStyle.h2,
    'h3': BlockStyle.h3,
    'h4': BlockStyle.h4,
}
LIST_TYPES: dict[str, ListItem] = {
    'ul': ListItem.bullet,
    'ol': ListItem.number,
}
LANGUAGE_RE = re.compile(r'language-(\w+)')


def _plain_run(element: Tag) -> InlineRun:
    """Single unmarked span of the element's trimmed text (plain-text mode)."""
    text = element.get_text().strip()
    return InlineRun(spans=[Span(text=text)] if text else [])


def _text_block(run: InlineRun, style: BlockStyle, list_item: ListItem | None = None) -> TextBlock | None:
    if not run.spans:
        return None
    return TextBlock(style=style, list_item=list_item, children=run.spans, mark_defs=run.mark_defs)


def _code_block(element: Tag) -> CodeBlock | None:
    code_el = element.find('code')
    if code_el is None:
        return None
    code = code_el.get_text()
    if not code.strip():
        return None
    match = LANGUAGE_RE.search(" ".join(code_el.get('class') or []))
    return CodeBlock(code=CodeContent(code=code, language=match.group(1) if match else "text"))


def _image_block(element: Tag) -> ImageBlock | None:
    src = element.get('src') or element.get('data-src')
    if not src:
        return None
    return ImageBlock(image_url=src, alt=element.get('alt') or "")


def element_to_blocks(element: Tag, rich_text: bool = True) -> list[Block]:
    """Convert one top-level element into zero or more Blocks."""
    inline = parse_inline if rich_text else _plain_run
    name = element.name

    if name in HEADING_STYLES:
        block = _text_block(inline(element), HEADING_STYLES[name])
    elif name == 'blockquote':
        block = _text_block(inline(element), BlockStyle.blockquote)
    elif name in LIST_TYPES:
        items = (_text_block(inline(li), BlockStyle.normal, LIST_TYPES[name]) for li in element.find_all('li'))
        return [b for b in items if b is not None]
    elif name == 'img':
        block = _image_block(element)
    elif name in ('p', 'div'):
        block = _text_block(parse_inline(element), BlockStyle.normal)
    elif name == 'pre':
        block = _code_block(element)
    else:
        return []
    return [block] if block is not None else []


def convert_blocks(container: str | Tag, parser: HtmlParser = DEFAULT_PARSER, rich_text: bool = True) -> list[Block]:
    """Convert the direct children of a content container into an ordered Block list.

    Only direct children are classified; anything nested is handled by the
    inline walk of its top-level ancestor. When no child yields a block, the
    whole container is parsed as one inline run and emitted as a single
    normal paragraph if it has text.
    """
    root = parser.parse_fragment(container) if isinstance(container, str) else container

    blocks: list[Block] = []
    for child in root.children:
        if isinstance(child, Tag):
            blocks.extend(element_to_blocks(child, rich_text))

    if not blocks:
        fallback = _text_block(parse_inline(root), BlockStyle.normal)
        if fallback is not None:
            blocks.append(fallback)
    return blocks
