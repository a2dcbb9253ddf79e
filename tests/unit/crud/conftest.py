"""Shared fixtures for crud unit tests"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from blogblocks.crud.models import Post


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="post_data")
def post_data_fixture():
    """Factory for minimal create_post payloads."""
    def _data(slug: str = "test-post", title: str = "Test post", published_at: datetime = datetime(2024, 1, 1), **kwargs) -> dict:
        return {
            "slug": slug,
            "title": title,
            "published_at": published_at,
            "content": [{"_type": "block", "style": "normal", "children": [{"_type": "span", "text": "x"}], "markDefs": []}],
            **kwargs,
        }
    return _data


@pytest.fixture(name="post")
def post_fixture(session, post_data):
    """A minimal Post persisted to the session."""
    p = Post(**post_data())
    session.add(p)
    session.flush()
    return p
