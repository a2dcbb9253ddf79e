"""Unit tests for core/extract/inline.py"""

from blogblocks.core.extract.inline import parse_inline
from blogblocks.core.models import LinkMark, StyleMark


def _texts(run):
    return [s.text for s in run.spans]


def test_parse_inline_link_keeps_surrounding_spaces(fragment):
    """Text touching an anchor keeps its spacing; the anchor text carries the link mark."""
    run = parse_inline(fragment('<p>Hello <a href="https://x.com">world</a>!</p>'))
    assert _texts(run) == ["Hello ", "world", "!"]
    assert run.spans[0].marks == []
    assert run.spans[1].marks == [LinkMark("link-0")]
    assert run.spans[2].marks == []
    assert [(d.key, d.href) for d in run.mark_defs] == [("link-0", "https://x.com")]


def test_parse_inline_sole_child_fully_trimmed(fragment):
    run = parse_inline(fragment('<p>   padded text   </p>'))
    assert _texts(run) == ["padded text"]


def test_parse_inline_first_and_last_children_trimmed(fragment):
    """First child loses leading space, last child loses trailing space."""
    run = parse_inline(fragment('<p>  start <em>mid</em> end  </p>'))
    assert _texts(run) == ["start ", "mid", " end"]


def test_parse_inline_marks_accumulate(fragment):
    run = parse_inline(fragment('<p><strong>bold <em>both</em></strong> tail</p>'))
    assert _texts(run) == ["bold ", "both", " tail"]
    assert run.spans[0].marks == [StyleMark("strong")]
    assert run.spans[1].marks == [StyleMark("strong"), StyleMark("em")]
    assert run.spans[2].marks == []


def test_parse_inline_equivalent_tags_do_not_duplicate_marks(fragment):
    """<b><strong> both map to strong and yield a single mark."""
    run = parse_inline(fragment('<p><b><strong>x</strong></b></p>'))
    assert run.spans[0].marks == [StyleMark("strong")]


def test_parse_inline_code_and_italic(fragment):
    run = parse_inline(fragment('<p><i>a</i> and <code>b()</code></p>'))
    assert run.spans[0].marks == [StyleMark("em")]
    assert run.spans[-1].marks == [StyleMark("code")]


def test_parse_inline_link_keys_numbered_per_call(fragment):
    run = parse_inline(fragment('<p><a href="/a">one</a> <a href="/b">two</a></p>'))
    assert [d.key for d in run.mark_defs] == ["link-0", "link-1"]
    assert run.spans[-1].marks == [LinkMark("link-1")]

    again = parse_inline(fragment('<p><a href="/c">three</a></p>'))
    assert again.mark_defs[0].key == "link-0"


def test_parse_inline_styled_text_inside_link(fragment):
    run = parse_inline(fragment('<p><a href="https://x.com"><strong>bold link</strong></a></p>'))
    assert run.spans[0].marks == [LinkMark("link-0"), StyleMark("strong")]


def test_parse_inline_empty_anchor_produces_nothing(fragment):
    """An anchor with no text yields neither a span nor a mark definition."""
    run = parse_inline(fragment('<p>a <a href="/x"> </a>b</p>'))
    assert _texts(run) == ["a ", "b"]
    assert run.mark_defs == []


def test_parse_inline_anchor_without_href_is_transparent(fragment):
    run = parse_inline(fragment('<p><a name="top">plain</a></p>'))
    assert _texts(run) == ["plain"]
    assert run.spans[0].marks == []
    assert run.mark_defs == []


def test_parse_inline_br_emits_newline(fragment):
    run = parse_inline(fragment('<p>line<br>next</p>'))
    assert _texts(run) == ["line", "\n", "next"]
    assert run.spans[1].marks == []


def test_parse_inline_unknown_elements_are_transparent(fragment):
    run = parse_inline(fragment('<p><span class="x">in <u>span</u></span></p>'))
    assert "".join(_texts(run)) == "in span"


def test_parse_inline_ignores_comments(fragment):
    run = parse_inline(fragment('<p>text<!-- hidden --></p>'))
    assert _texts(run) == ["text"]


def test_parse_inline_empty_element(fragment):
    run = parse_inline(fragment('<p></p>'))
    assert run.spans == []
    assert run.mark_defs == []
