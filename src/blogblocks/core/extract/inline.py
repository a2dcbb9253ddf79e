"""Inline DOM walk: text runs, style marks, and link mark definitions for one element"""

from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from blogblocks.core.models import InlineRun, LinkMark, Mark, MarkDef, Span, StyleMark


STYLE_TAGS: dict[str, str] = {
    'strong': 'strong',
    'b':      'strong',
    'em':     'em',
    'i':      'em',
    'code':   'code',
}


def _is_anchor(node: PageElement | None) -> bool:
    return isinstance(node, Tag) and node.name == 'a'


def _trim(text: str, first: bool, last: bool, prev: PageElement | None, nxt: PageElement | None) -> str:
    """Apply the edge-trimming policy; text touching an anchor keeps its spacing."""
    if first and last:
        return text.strip()
    if first and not _is_anchor(nxt):
        return text.lstrip()
    if last and not _is_anchor(prev):
        return text.rstrip()
    return text


class _InlineWalker:
    def __init__(self):
        self.spans: list[Span] = []
        self.mark_defs: list[MarkDef] = []

    def walk_children(self, element: Tag, marks: list[Mark]) -> None:
        nodes = list(element.children)
        for i, node in enumerate(nodes):
            self.walk(
                node, marks,
                first=i == 0,
                last=i == len(nodes) - 1,
                prev=nodes[i - 1] if i > 0 else None,
                nxt=nodes[i + 1] if i < len(nodes) - 1 else None,
            )

    def walk(self, node, marks, first, last, prev, nxt) -> None:
        if isinstance(node, PreformattedString):
            return  # comments, CDATA, doctypes
        if isinstance(node, NavigableString):
            text = _trim(str(node), first, last, prev, nxt)
            if text:
                self.spans.append(Span(text=text, marks=list(marks)))
            return
        if not isinstance(node, Tag):
            return

        current = list(marks)
        style = STYLE_TAGS.get(node.name)
        if style and StyleMark(style) not in current:
            current.append(StyleMark(style))

        if node.name == 'a' and node.get('href'):
            if not node.get_text().strip():
                return
            key = f"link-{len(self.mark_defs)}"
            self.mark_defs.append(MarkDef(key=key, href=node['href']))
            current.append(LinkMark(key))
        elif node.name == 'br' and not node.contents:
            self.spans.append(Span(text="\n", marks=[]))
            return

        self.walk_children(node, current)


def parse_inline(element: Tag) -> InlineRun:
    """Convert the subtree under element into ordered spans plus link definitions."""
    walker = _InlineWalker()
    walker.walk_children(element, [])
    return InlineRun(spans=walker.spans, mark_defs=walker.mark_defs)
