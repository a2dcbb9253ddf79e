"""Block-to-markup rendering for feed content, descriptions, and excerpts"""

import re

from blogblocks.core.models import (
    Block, BlockStyle, CodeBlock, ImageBlock, LinkMark, ListItem, Span, StyleMark, TextBlock,
)


BARE_AMP_RE = re.compile(r'&(?!amp;|lt;|gt;|quot;|apos;|#\d+;|#x[0-9a-fA-F]+;)')
ABSOLUTE_URL_RE = re.compile(r'^https?://[^/\s]+\.[^/\s]+', re.IGNORECASE)
# a leading "name:" that is not a host:port pair
SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.\-]*:(?!\d)', re.IGNORECASE)
LOCAL_PREFIXES = ('/', '#', 'mailto:')

STYLE_TAGS = {'strong': 'strong', 'em': 'em', 'code': 'code'}
BLOCK_TAGS = {
    BlockStyle.normal:     'p',
    BlockStyle.h1:         'h1',
    BlockStyle.h2:         'h2',
    BlockStyle.h3:         'h3',
    BlockStyle.h4:         'h4',
    BlockStyle.blockquote: 'blockquote',
}
LIST_TAGS = {ListItem.bullet: 'ul', ListItem.number: 'ol'}


def escape_text(text: str) -> str:
    """Escape markup characters, leaving already-escaped entities intact."""
    return BARE_AMP_RE.sub('&amp;', text or '').replace('<', '&lt;').replace('>', '&gt;')


def escape_attr(value: str) -> str:
    return escape_text(value).replace('"', '&quot;')


def escape_xml(text: str) -> str:
    """Full XML escaping for plain text nodes."""
    return (str(text or '')
            .replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')
            .replace('"', '&quot;').replace("'", '&apos;'))


def wrap_cdata(text: str) -> str:
    """Embed text in a CDATA section, splitting any `]]>` it contains."""
    return f"<![CDATA[{text.replace(']]>', ']]]]><![CDATA[>')}]]>"


def normalize_href(href: str | None) -> str | None:
    """Return an href safe to emit, or None when the link should be dropped.

    Absolute http(s) URLs need a dotted host; site-relative, fragment and
    mailto links pass as-is; scheme-less hosts get https://. Anything else
    (e.g. "http://Manus", "javascript:...") is rejected.
    """
    href = (href or '').strip()
    if not href:
        return None
    if ABSOLUTE_URL_RE.match(href) or href.startswith(LOCAL_PREFIXES):
        return href
    if not SCHEME_RE.match(href):
        return f"https://{href}"
    return None


def _link_href(span: Span, block: TextBlock) -> str | None:
    """href of the first link mark on span that resolves to a valid URL."""
    links = {d.key: d.href for d in block.mark_defs if d.type == 'link'}
    for mark in span.marks:
        if isinstance(mark, LinkMark) and mark.key in links:
            if href := normalize_href(links[mark.key]):
                return href
    return None


def render_span(span: Span, block: TextBlock) -> str:
    if not span.text:
        return ''
    html = escape_text(span.text)
    for mark in span.marks:
        if isinstance(mark, StyleMark) and mark.name in STYLE_TAGS:
            tag = STYLE_TAGS[mark.name]
            html = f"<{tag}>{html}</{tag}>"
    if href := _link_href(span, block):
        html = f'<a href="{escape_attr(href)}">{html}</a>'
    return html


def _render_image(block: ImageBlock) -> str:
    src = block.src
    if not src:
        return ''
    return f'<img src="{escape_attr(src)}" alt="{escape_attr(block.alt)}" />'


def _render_code(block: CodeBlock) -> str:
    code = escape_text(block.code.code)
    if not code:
        return ''
    language = f' class="language-{escape_attr(block.code.language)}"' if block.code.language else ''
    return f"<pre><code{language}>{code}</code></pre>"


def render_html(blocks: list[Block]) -> str:
    """Render blocks as an HTML fragment, grouping consecutive list items into one list."""
    parts: list[str] = []
    open_list: ListItem | None = None

    def close_list():
        nonlocal open_list
        if open_list is not None:
            parts.append(f"</{LIST_TAGS[open_list]}>")
            open_list = None

    for block in blocks:
        if isinstance(block, TextBlock) and block.list_item is not None:
            if block.list_item != open_list:
                close_list()
                open_list = block.list_item
                parts.append(f"<{LIST_TAGS[open_list]}>")
            inner = ''.join(render_span(s, block) for s in block.children)
            if inner:
                parts.append(f"<li>{inner}</li>")
            continue

        close_list()
        if isinstance(block, TextBlock):
            inner = ''.join(render_span(s, block) for s in block.children)
            tag = BLOCK_TAGS.get(block.style)
            if inner and tag:
                parts.append(f"<{tag}>{inner}</{tag}>")
        elif isinstance(block, ImageBlock):
            if html := _render_image(block):
                parts.append(html)
        elif isinstance(block, CodeBlock):
            if html := _render_code(block):
                parts.append(html)

    close_list()
    return "\n".join(parts)


def render_plain_text(blocks: list[Block]) -> str:
    """Text of all text blocks with marks dropped; valid links kept as anchors."""
    texts = []
    for block in blocks:
        if not isinstance(block, TextBlock):
            continue
        pieces = []
        for span in block.children:
            if not span.text:
                continue
            text = escape_text(span.text)
            if href := _link_href(span, block):
                text = f'<a href="{escape_attr(href)}">{text}</a>'
            pieces.append(text)
        if pieces:
            texts.append(''.join(pieces).strip())
    return ' '.join(t for t in texts if t)


def truncate_markup(text: str, limit: int = 300) -> str:
    """Shorten rendered text to at most limit chars without leaving a tag open.

    Prefers ending right after a complete </a> near the end of the window;
    otherwise cuts before any dangling tag, open anchor or partial entity
    and appends an ellipsis.
    """
    if len(text) <= limit:
        return text
    cut = text[:limit - 3]
    closing = cut.rfind('</a>')
    if closing > limit - 50:
        return cut[:closing + 4]

    opening = cut.rfind('<a ')
    if opening > cut.rfind('</a>'):
        cut = cut[:opening]
    elif cut.rfind('<') > cut.rfind('>'):
        cut = cut[:cut.rfind('<')]
    if cut.rfind('&') > cut.rfind(';'):
        cut = cut[:cut.rfind('&')]
    return cut.rstrip() + '...'
