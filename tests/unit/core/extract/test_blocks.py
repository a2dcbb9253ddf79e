"""Unit tests for core/extract/blocks.py"""

import pytest

from blogblocks.core.extract.blocks import convert_blocks
from blogblocks.core.models import BlockStyle, CodeBlock, ImageBlock, ListItem, StyleMark, TextBlock
from blogblocks.core.render import render_html


def test_convert_blocks_headings_and_paragraphs(parser):
    blocks = convert_blocks("<h1>Top</h1><h4>Small</h4><p>Body</p>", parser)
    assert [b.style for b in blocks] == [BlockStyle.h1, BlockStyle.h4, BlockStyle.normal]
    assert [b.plain_text for b in blocks] == ["Top", "Small", "Body"]


def test_convert_blocks_blockquote(parser):
    blocks = convert_blocks("<blockquote>Quoted <em>line</em></blockquote>", parser)
    assert len(blocks) == 1
    assert blocks[0].style == BlockStyle.blockquote
    assert blocks[0].children[-1].marks == [StyleMark("em")]


def test_convert_blocks_lists_flatten_to_items(parser):
    blocks = convert_blocks("<ul><li>a</li><li>b</li></ul><ol><li>c</li></ol>", parser)
    assert [(b.plain_text, b.list_item) for b in blocks] == [
        ("a", ListItem.bullet), ("b", ListItem.bullet), ("c", ListItem.number),
    ]
    assert all(b.style == BlockStyle.normal for b in blocks)


def test_convert_blocks_nested_list_items_are_flat(parser):
    """Every li descendant becomes its own block; nesting depth is not kept."""
    blocks = convert_blocks("<ul><li>outer<ul><li>inner</li></ul></li></ul>", parser)
    assert [b.list_item for b in blocks] == [ListItem.bullet, ListItem.bullet]
    assert blocks[1].plain_text == "inner"


def test_convert_blocks_image_src_and_data_src(parser):
    blocks = convert_blocks('<img src="a.png" alt="A"><img data-src="b.png"><img alt="none">', parser)
    assert [type(b) for b in blocks] == [ImageBlock, ImageBlock]
    assert blocks[0].image_url == "a.png" and blocks[0].alt == "A"
    assert blocks[1].image_url == "b.png" and blocks[1].alt == ""


@pytest.mark.parametrize("markup,language", [
    ('<pre><code class="language-python">x = 1</code></pre>', "python"),
    ('<pre><code class="hljs language-js">let x</code></pre>', "js"),
    ('<pre><code>plain</code></pre>', "text"),
])
def test_convert_blocks_code_language(parser, markup, language):
    blocks = convert_blocks(markup, parser)
    assert isinstance(blocks[0], CodeBlock)
    assert blocks[0].code.language == language


def test_convert_blocks_drops_empty_code_and_pre_without_code(parser):
    assert convert_blocks("<pre><code>   </code></pre><pre>no code element</pre><p>kept</p>", parser)[0].plain_text == "kept"


def test_convert_blocks_drops_empty_paragraphs(parser):
    blocks = convert_blocks("<p>  </p><div></div><p>text</p>", parser)
    assert [b.plain_text for b in blocks] == ["text"]


def test_convert_blocks_unknown_container_falls_back_to_inline(parser):
    """When no direct child is recognized the whole container becomes one paragraph."""
    blocks = convert_blocks("<section>loose <strong>text</strong></section>", parser)
    assert len(blocks) == 1
    assert blocks[0].style == BlockStyle.normal
    assert blocks[0].plain_text == "loose text"


def test_convert_blocks_bare_text(parser):
    blocks = convert_blocks("just text", parser)
    assert [b.plain_text for b in blocks] == ["just text"]


def test_convert_blocks_empty_input(parser):
    assert convert_blocks("", parser) == []
    assert convert_blocks("<p> </p>", parser) == []


def test_convert_blocks_accepts_parsed_element(sample_soup):
    container = sample_soup.select_one(".available-content")
    blocks = convert_blocks(container)
    assert [type(b).__name__ for b in blocks] == [
        "TextBlock", "TextBlock", "TextBlock", "TextBlock", "CodeBlock", "ImageBlock",
    ]


def test_convert_blocks_plain_text_mode(parser):
    """rich_text=False collapses headings and list items to one unmarked span; paragraphs keep marks."""
    blocks = convert_blocks("<h2>The <em>diff</em></h2><ul><li><b>x</b> y</li></ul><p><em>kept</em></p>", parser, rich_text=False)
    assert [s.text for s in blocks[0].children] == ["The diff"]
    assert blocks[0].children[0].marks == []
    assert [s.text for s in blocks[1].children] == ["x y"]
    assert blocks[2].children[0].marks == [StyleMark("em")]


@pytest.mark.parametrize("markup", [
    "<p></p><h2> </h2><blockquote></blockquote><ul><li> </li></ul>",
    "<div><p></p></div>",
    '<p><a href="/x"></a></p>',
    "<h3><br></h3>",
])
def test_convert_blocks_never_emits_empty_text_blocks(parser, markup):
    for block in convert_blocks(markup, parser):
        if isinstance(block, TextBlock):
            assert block.children


def test_render_then_convert_preserves_structure_and_text(parser, sample_soup):
    """Rendering blocks to HTML and converting that HTML back keeps block kinds, styles and text."""
    original = convert_blocks(sample_soup.select_one(".available-content"), parser)
    reparsed = convert_blocks(render_html(original), parser)

    def shape(blocks):
        return [
            (type(b).__name__, getattr(b, "style", None), getattr(b, "list_item", None),
             b.plain_text if isinstance(b, TextBlock) else None)
            for b in blocks
        ]

    assert shape(reparsed) == shape(original)
    assert reparsed[4].code.code == original[4].code.code
    assert reparsed[5].image_url == original[5].image_url
