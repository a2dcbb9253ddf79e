"""Unit tests for core/utils/slug.py"""

import pytest

from blogblocks.core.utils.slug import clean_title, normalize_title, slugify, title_from_filename


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my_file_name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("It's a Post", "its-a-post"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to a lowercase hyphenated slug."""
    assert slugify(text) == expected


def test_slugify_strips_leading_trailing_hyphens():
    assert slugify("!leading - trailing!") == "leading-trailing"


@pytest.mark.parametrize("title,expected", [
    ("148862681.years-ago-when-i-worked", "Years ago when i worked"),
    ("148862681. What it's like", "What it's like"),
    ("it's TIME to GO", "It's time to go"),
    ("12: The Plan", "The plan"),
    ("Trying vs Doing", "Trying vs doing"),
    ("Tom &amp; Jerry", "Tom & jerry"),
    ("well-known words", "Well-known words"),
    ("   ", ""),
])
def test_clean_title(title, expected):
    assert clean_title(title) == expected


def test_normalize_title():
    assert normalize_title("  My   Post\tTitle ") == "my post title"


def test_title_from_filename():
    assert title_from_filename("dir/my-great_post.html") == "My Great Post"
    assert title_from_filename("caf%C3%A9-notes.html") == "Café Notes"
