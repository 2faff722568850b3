"""
Cache Store Tests

Runs CacheStore against a mocked AsyncSession:
- TTL reads and row decoding
- Upsert statements for both tables
- Negative results never written
- Database failures degrade to an empty cache
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from category_resolver.core.categories import Category
from category_resolver.db import CacheStore, CategoryCacheEntry, ClassCacheEntry


class MockRow:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


def result_with(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


@pytest.fixture
def mock_db_session():
    return AsyncMock()


@pytest.fixture
def store(mock_db_session):
    return CacheStore(mock_db_session, class_ttl=timedelta(days=30), category_ttl=timedelta(days=30))


def compiled(call):
    stmt = call.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestModels:

    def test_class_cache_entry(self):
        entry = ClassCacheEntry(title="Saint Peter", class_ids=["Q5"])
        assert entry.title == "Saint Peter"
        assert entry.class_ids == ["Q5"]

    def test_category_cache_entry(self):
        entry = CategoryCacheEntry(title="Paris", category="Geography")
        assert entry.category == "Geography"


class TestReads:

    @pytest.mark.asyncio
    async def test_get_classes(self, store, mock_db_session):
        mock_db_session.execute.return_value = result_with([
            MockRow(title="Saint Peter", class_ids=["Q5"]),
            MockRow(title="Stub", class_ids=[]),
        ])

        classes = await store.get_classes(["Saint Peter", "Stub", "Unknown"])

        assert classes == {"Saint Peter": ["Q5"], "Stub": []}

    @pytest.mark.asyncio
    async def test_get_categories_ignores_unusable_rows(self, store, mock_db_session):
        mock_db_session.execute.return_value = result_with([
            MockRow(title="Paris", category="Geography"),
            MockRow(title="Legacy", category="Unclassified"),
            MockRow(title="Old", category="Sports"),
        ])

        categories = await store.get_categories(["Paris", "Legacy", "Old"])

        assert categories == {"Paris": Category.GEOGRAPHY}

    @pytest.mark.asyncio
    async def test_empty_input_skips_query(self, store, mock_db_session):
        assert await store.get_classes([]) == {}
        assert await store.get_categories([]) == {}
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_read_failure_behaves_as_miss(self, store, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        assert await store.get_classes(["Paris"]) == {}
        assert await store.get_categories(["Paris"]) == {}
        assert mock_db_session.rollback.await_count == 2


class TestWrites:

    @pytest.mark.asyncio
    async def test_put_classes_upserts_including_empty_lists(self, store, mock_db_session):
        await store.put_classes({"Saint Peter": ["Q5"], "Stub": []})

        mock_db_session.execute.assert_awaited_once()
        sql = compiled(mock_db_session.execute.await_args)
        assert "INSERT INTO class_cache" in sql
        assert "ON CONFLICT (title) DO UPDATE" in sql
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_put_categories_never_writes_negatives(self, store, mock_db_session):
        await store.put_categories({"Nothing": None, "Legacy": Category.UNCLASSIFIED})

        mock_db_session.execute.assert_not_called()
        mock_db_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_put_categories_writes_real_categories(self, store, mock_db_session):
        await store.put_categories({"Paris": Category.GEOGRAPHY, "Nothing": None})

        stmt = mock_db_session.execute.await_args.args[0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert "Paris" in params.values()
        assert "Nothing" not in params.values()
        assert "INSERT INTO category_cache" in compiled(mock_db_session.execute.await_args)

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed_and_rolled_back(self, store, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("down"))

        await store.put_classes({"Paris": ["Q515"]})

        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_clear_reports_removed_rows(self, store, mock_db_session):
        mock_db_session.execute.side_effect = [MagicMock(rowcount=3), MagicMock(rowcount=5)]

        removed = await store.clear()

        assert removed == {"class_cache": 3, "category_cache": 5}
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_clear_single_table(self, store, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=2)

        removed = await store.clear(classes=False)

        assert removed == {"category_cache": 2}
