"""
SQLAlchemy table definitions for the article store.
Uses SQLAlchemy 2.0 async patterns.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""
    pass


class DBArticle(Base):
    """Stored article, unique by source URL and (when present) external id."""
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Source-native content
    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")
    categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # NULLs never collide under a unique constraint, so this is a sparse unique key
    external_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    source_name: Mapped[str] = mapped_column(String(50), nullable=False)
    popularity_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_read_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Translation state
    title_translated: Mapped[Optional[str]] = mapped_column(Text)
    summary_translated: Mapped[Optional[str]] = mapped_column(Text)
    is_translated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    translated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_articles_is_translated", "is_translated"),
        Index("ix_articles_source_translated", "source_name", "is_translated"),
    )


# Declared outside the class so the column expression can carry DESC
Index("ix_articles_published_at", DBArticle.published_at.desc())
