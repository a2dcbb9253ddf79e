"""Engine construction and schema management"""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from blogblocks.crud.models import Post  # noqa: F401  (registers the table)


def make_engine(db_url: str) -> Engine:
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    """Create all tables if they do not exist."""
    SQLModel.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """Drop and recreate all tables."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
