"""Shared fixtures for integration tests: a small two-post export"""

import pytest
from loguru import logger


POST_ONE = """\
<html>
<head>
  <title>148808966.trying-vs-doing</title>
  <meta property="og:title" content="Trying vs Doing">
</head>
<body>
  <div class="available-content">
    <h2>The difference</h2>
    <p>Hello <a href="https://x.com">world</a>!</p>
    <ul><li>one</li><li>two</li></ul>
  </div>
</body>
</html>
"""

POST_TWO = """\
<html>
<head><meta property="og:title" content="Language Is Leverage"></head>
<body>
  <div class="available-content">
    <p>Words <strong>compound</strong>.</p>
    <img src="https://cdn.example.com/chart.png" alt="Chart">
  </div>
</body>
</html>
"""

POSTS_CSV = (
    "post_id,post_date,is_published\n"
    "148808966.trying-vs-doing,2024-03-05T10:00:00.000Z,true\n"
    "176682678.language-is-leverage,2025-01-10T08:00:00.000Z,true\n"
)


@pytest.fixture(name="export_dir")
def export_dir_fixture(tmp_path):
    """Directory export with two posts and a posts.csv date index."""
    root = tmp_path / "export"
    (root / "posts").mkdir(parents=True)
    (root / "posts" / "148808966.trying-vs-doing.html").write_text(POST_ONE)
    (root / "posts" / "176682678.language-is-leverage.html").write_text(POST_TWO)
    (root / "posts.csv").write_text(POSTS_CSV)
    return root


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop sinks bound to streams that a CliRunner has since closed."""
    yield
    logger.remove()
