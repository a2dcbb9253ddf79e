"""Database table definitions for stored posts"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Text
from sqlmodel import Field, SQLModel


def _post_id() -> str:
    return f"post-{uuid4().hex}"


class Post(SQLModel, table=True):
    """A published blog post; `content` holds the structured block list as JSON"""
    __tablename__ = "posts"
    id: str = Field(default_factory=_post_id, primary_key=True)
    slug: str = Field(..., index=True, unique=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    published_at: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
    excerpt: str = Field(default="", sa_column=Column(Text, nullable=False))
    image_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    read_time: str = Field(default="1 min", nullable=False)
    source_file: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    content: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
