"""
SQLAlchemy Models

Defines the two cache tables, both keyed by canonical article title:
- class_cache: instance-of class ids fetched from Wikidata
- category_cache: resolved top-level category (never "Unclassified")
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import (
    String,
    Text,
    DateTime,
    Index,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Class Cache Model
# ---------------------------------------------------------------------

class ClassCacheEntry(Base):
    """
    Ordered instance-of class ids of the entity behind a canonical title.

    An empty list is a valid, cacheable fact (entity with no classes).
    """
    __tablename__ = "class_cache"

    title: Mapped[str] = mapped_column(Text, primary_key=True)
    class_ids: Mapped[List[str]] = mapped_column(JSONB, nullable=False, default=list)
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_class_cache_fetched", "fetched_at"),
    )


# ---------------------------------------------------------------------
# Category Cache Model
# ---------------------------------------------------------------------

class CategoryCacheEntry(Base):
    """
    Resolved category for a canonical title.
    """
    __tablename__ = "category_cache"

    title: Mapped[str] = mapped_column(Text, primary_key=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_category_cache_checked", "checked_at"),
    )
