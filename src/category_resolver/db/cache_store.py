"""
Cache Store

Postgres-backed class and category caches with TTL reads and upsert writes.

A cache that cannot be reached behaves as an empty cache: reads return
nothing and writes are dropped after logging. Classification must never fail
because of the cache.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..core.categories import Category
from .models import CategoryCacheEntry, ClassCacheEntry

logger = logging.getLogger("resolver.cache")

CACHE_ERRORS = (SQLAlchemyError, OSError)


class CacheStore:
    """
    Title-keyed cache tables for class id lists and resolved categories.
    """

    def __init__(
        self,
        session: AsyncSession,
        class_ttl: Optional[timedelta] = None,
        category_ttl: Optional[timedelta] = None,
    ) -> None:
        """
        Parameters
        ----------
        session : AsyncSession
            SQLAlchemy async session for database operations.

        class_ttl, category_ttl : Optional[timedelta]
            Entry lifetimes. Default to the configured day counts.
        """
        self._session = session
        self._class_ttl = class_ttl or timedelta(days=settings.class_cache_ttl_days)
        self._category_ttl = category_ttl or timedelta(days=settings.category_cache_ttl_days)

    # ------------------------------------------------------------------
    # Class cache
    # ------------------------------------------------------------------

    async def get_classes(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        """
        Return unexpired class id lists for the given canonical titles.
        Titles with no live entry are absent from the result.
        """
        if not titles:
            return {}

        cutoff = _now() - self._class_ttl
        try:
            result = await self._session.execute(
                select(ClassCacheEntry.title, ClassCacheEntry.class_ids).where(
                    ClassCacheEntry.title.in_(list(titles)),
                    ClassCacheEntry.fetched_at >= cutoff,
                )
            )
            rows = result.all()
        except CACHE_ERRORS as exc:
            await self._recover("class cache read", exc)
            return {}

        return {row.title: list(row.class_ids or []) for row in rows}

    async def put_classes(self, entries: Mapping[str, Sequence[str]]) -> None:
        """
        Upsert class id lists (empty lists included) keyed by canonical title.
        """
        if not entries:
            return

        now = _now()
        stmt = pg_insert(ClassCacheEntry).values([
            {"title": title, "class_ids": list(class_ids), "fetched_at": now}
            for title, class_ids in entries.items()
        ])
        stmt = stmt.on_conflict_do_update(
            index_elements=[ClassCacheEntry.title],
            set_={
                "class_ids": stmt.excluded.class_ids,
                "fetched_at": stmt.excluded.fetched_at,
            },
        )
        await self._write(stmt, "class cache write", len(entries))

    # ------------------------------------------------------------------
    # Category cache
    # ------------------------------------------------------------------

    async def get_categories(self, titles: Sequence[str]) -> Dict[str, Category]:
        """
        Return unexpired categories for the given canonical titles.
        """
        if not titles:
            return {}

        cutoff = _now() - self._category_ttl
        try:
            result = await self._session.execute(
                select(CategoryCacheEntry.title, CategoryCacheEntry.category).where(
                    CategoryCacheEntry.title.in_(list(titles)),
                    CategoryCacheEntry.checked_at >= cutoff,
                )
            )
            rows = result.all()
        except CACHE_ERRORS as exc:
            await self._recover("category cache read", exc)
            return {}

        categories: Dict[str, Category] = {}
        for row in rows:
            try:
                category = Category(row.category)
            except ValueError:
                logger.warning("Ignoring cached unknown category %r for %s", row.category, row.title)
                continue
            if category is not Category.UNCLASSIFIED:
                categories[row.title] = category
        return categories

    async def put_categories(self, entries: Mapping[str, Optional[Category]]) -> None:
        """
        Upsert resolved categories. `None` and `Unclassified` are never
        persisted: a negative result must be recomputed on the next request.
        """
        rows = [
            {"title": title, "category": category.value}
            for title, category in entries.items()
            if category is not None and category is not Category.UNCLASSIFIED
        ]
        if not rows:
            return

        now = _now()
        for row in rows:
            row["checked_at"] = now

        stmt = pg_insert(CategoryCacheEntry).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CategoryCacheEntry.title],
            set_={
                "category": stmt.excluded.category,
                "checked_at": stmt.excluded.checked_at,
            },
        )
        await self._write(stmt, "category cache write", len(rows))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self, classes: bool = True, categories: bool = True) -> Dict[str, int]:
        """
        Delete every row of the selected tables. Unlike the request path,
        failures here propagate to the operator.
        """
        removed: Dict[str, int] = {}
        if classes:
            result = await self._session.execute(delete(ClassCacheEntry))
            removed["class_cache"] = result.rowcount or 0
        if categories:
            result = await self._session.execute(delete(CategoryCacheEntry))
            removed["category_cache"] = result.rowcount or 0
        await self._session.commit()
        return removed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _write(self, stmt, what: str, count: int) -> None:
        try:
            await self._session.execute(stmt)
            await self._session.commit()
        except CACHE_ERRORS as exc:
            await self._recover(what, exc)
            return
        logger.debug("%s: %d rows", what, count)

    async def _recover(self, what: str, exc: Exception) -> None:
        logger.warning("%s failed, continuing uncached (%s)", what, type(exc).__name__)
        try:
            await self._session.rollback()
        except CACHE_ERRORS:
            logger.debug("Rollback after %s failed", what)


def _now() -> datetime:
    return datetime.now(timezone.utc)
