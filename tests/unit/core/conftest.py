"""Shared fixtures for core unit tests"""

import pytest

from blogblocks.core.html import SoupParser


SAMPLE_POST = """\
<html>
<head>
  <title>Trying vs Doing | Brendan's Blog</title>
  <meta property="og:title" content="Trying vs Doing">
  <meta name="description" content="Why effort is not output.">
  <meta property="og:image" content="https://cdn.example.com/hero.png">
  <meta property="article:published_time" content="2024-03-05T10:00:00Z">
</head>
<body>
  <div class="available-content">
    <h2>The <em>difference</em></h2>
    <p>Hello <a href="https://x.com">world</a>!</p>
    <ul><li>one</li><li><strong>two</strong></li></ul>
    <pre><code class="language-python">print("hi")</code></pre>
    <img src="https://cdn.example.com/a.jpg" alt="A chart">
  </div>
</body>
</html>
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return SoupParser("html.parser")


@pytest.fixture(name="sample_soup")
def sample_soup_fixture(parser):
    return parser.parse_document(SAMPLE_POST)


@pytest.fixture(name="fragment")
def fragment_fixture(parser):
    """Parse markup and return its first top-level element."""
    def _fragment(markup: str):
        return next(iter(parser.parse_fragment(markup).find_all(recursive=False)))
    return _fragment
