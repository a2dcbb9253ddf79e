"""Post persistence: slug lookup, record listing, create, and content patch"""

from datetime import datetime, timezone

from sqlmodel import Session, col, select

from blogblocks.crud.models import Post


def get_by_slug(session: Session, slug: str) -> Post | None:
    """Return the Post with the given slug, or None if not found."""
    return session.exec(select(Post).where(Post.slug == slug)).first()


def get_all_posts(session: Session) -> list[Post]:
    return list(session.exec(select(Post)).all())


def list_records(session: Session) -> list[tuple[str, str, str]]:
    """(id, slug, title) for every post, oldest first; fetched once per bulk run for matching."""
    rows = session.exec(select(Post.id, Post.slug, Post.title).order_by(col(Post.created_at).asc())).all()
    return [tuple(r) for r in rows]


def get_published(session: Session, limit: int = 50, now: datetime | None = None) -> list[Post]:
    """Posts published at or before now, newest first; future-dated posts stay hidden."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    stmt = (
        select(Post)
        .where(Post.published_at <= now)
        .order_by(col(Post.published_at).desc())
        .limit(limit)
    )
    return list(session.exec(stmt).all())


def create_post(session: Session, data: dict) -> tuple[Post, str]:
    """Insert a post unless its slug exists.

    Returns (post, status) where status is 'created' or 'unchanged'.
    Flushes but does not commit; the caller controls the transaction.
    """
    existing = get_by_slug(session, data['slug'])
    if existing:
        return existing, 'unchanged'
    post = Post(**data)
    session.add(post)
    session.flush()
    return post, 'created'


def patch_content(session: Session, post_id: str, content: list[dict]) -> Post:
    """Replace only the content field of a stored post. Raises ValueError if it does not exist."""
    post = session.get(Post, post_id)
    if post is None:
        raise ValueError(f"Post {post_id} not found")
    post.content = content
    post.updated_at = datetime.now()
    session.add(post)
    session.flush()
    return post


def delete_all_posts(session: Session) -> int:
    """Delete every post; returns the number removed."""
    posts = session.exec(select(Post)).all()
    for post in posts:
        session.delete(post)
    session.flush()
    return len(posts)
