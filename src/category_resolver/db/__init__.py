"""
Database Package

Provides SQLAlchemy async session management, the cache table models and
the CacheStore used by the resolution pipeline.
"""

from .session import get_async_session, async_engine, AsyncSessionLocal, create_tables
from .models import Base, ClassCacheEntry, CategoryCacheEntry
from .cache_store import CacheStore

__all__ = [
    "get_async_session",
    "async_engine",
    "AsyncSessionLocal",
    "create_tables",
    "Base",
    "ClassCacheEntry",
    "CategoryCacheEntry",
    "CacheStore",
]
