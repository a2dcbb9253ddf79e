"""RSS 2.0 feed assembly from stored posts"""

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import urlparse

from blogblocks.core.models import load_blocks
from blogblocks.core.render import (
    escape_xml, render_html, render_plain_text, truncate_markup, wrap_cdata,
)


MIME_TYPES = {
    'jpg':  'image/jpeg',
    'jpeg': 'image/jpeg',
    'png':  'image/png',
    'gif':  'image/gif',
    'webp': 'image/webp',
    'svg':  'image/svg+xml',
}


class FeedPost(Protocol):
    slug: str
    title: str
    excerpt: str
    image_url: str | None
    published_at: datetime
    content: list[dict]


def guess_mime_type(url: str | None) -> str:
    if not url:
        return 'application/octet-stream'
    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip('.').lower()
    return MIME_TYPES.get(suffix, 'image/*')


def rfc822(dt: datetime | None) -> str:
    dt = dt or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def describe(post: FeedPost, site_title: str, limit: int = 300) -> str:
    """<description> element: the excerpt, else rendered text (links kept), else a stock line."""
    if post.excerpt:
        return f"<description>{escape_xml(post.excerpt)}</description>"
    text = truncate_markup(render_plain_text(load_blocks(post.content)), limit)
    if not text:
        return f"<description>{escape_xml(f'Read {post.title} on {site_title}')}</description>"
    if '<a ' in text:
        return f"<description>{wrap_cdata(text)}</description>"
    # already escaped by the renderer
    return f"<description>{text}</description>"


def build_item(post: FeedPost, base_url: str, site_title: str, description_length: int = 300) -> str:
    url = f"{base_url}/posts/{post.slug}"
    lines = [
        "  <item>",
        f"    <title>{escape_xml(post.title)}</title>",
        f"    <link>{url}</link>",
        f'    <guid isPermaLink="true">{url}</guid>',
        f"    <pubDate>{rfc822(post.published_at)}</pubDate>",
        f"    {describe(post, site_title, description_length)}",
    ]
    if post.image_url:
        lines.append(
            f'    <enclosure url="{escape_xml(post.image_url)}" type="{guess_mime_type(post.image_url)}" />'
        )
    if html := render_html(load_blocks(post.content)):
        lines.append(f"    <content:encoded>{wrap_cdata(html)}</content:encoded>")
    lines.append("  </item>")
    return "\n".join(lines)


def build_feed(
    posts: list[FeedPost],
    base_url: str,
    site_title: str,
    site_description: str,
    description_length: int = 300,
    now: datetime | None = None,
    ) -> str:
    """Return a complete RSS 2.0 document for posts (already ordered newest first)."""
    base_url = base_url.rstrip('/')
    built = rfc822(now)
    items = "\n".join(build_item(p, base_url, site_title, description_length) for p in posts)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>{escape_xml(site_title)}</title>
    <link>{base_url}</link>
    <description>{escape_xml(site_description)}</description>
    <language>en-us</language>
    <lastBuildDate>{built}</lastBuildDate>
    <ttl>60</ttl>
    <atom:link href="{base_url}/feed.xml" rel="self" type="application/rss+xml" />
{items}
  </channel>
</rss>
"""
