"""Tests for the read-only query engine."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoindex.config import IndexSettings
from repoindex.indexer import index_repository
from repoindex.query import QueryEngine, RecordPage
from repoindex.store import RecordStore


@pytest.fixture()
def engine(settings: IndexSettings, store: RecordStore) -> QueryEngine:
    index_repository(settings, store=store)
    return QueryEngine(store)


class TestListRecords:
    def test_first_page(self, engine: QueryEngine) -> None:
        page = engine.list_records(per_page=5)
        assert page.total == 12
        assert len(page.items) == 5
        assert page.page == 1
        assert page.last_page == 3
        assert page.items[0].type.value == "config"

    def test_last_page_partial(self, engine: QueryEngine) -> None:
        page = engine.list_records(page=3, per_page=5)
        assert len(page.items) == 2

    def test_page_below_one_is_clamped(self, engine: QueryEngine) -> None:
        assert engine.list_records(page=0).page == 1

    def test_type_and_category_filters(self, engine: QueryEngine) -> None:
        page = engine.list_records(type="database", category="model")
        assert page.total == 1
        assert page.items[0].name == "User"

    def test_filters_combine_with_search(self, engine: QueryEngine) -> None:
        page = engine.list_records(type="file", search="models/user")
        assert [r.path for r in page.items] == ["app/Models/User.php"]

    def test_empty_page(self) -> None:
        assert RecordPage().last_page == 1


class TestSearch:
    def test_match_on_path_only(self, engine: QueryEngine) -> None:
        results = engine.search("views/")
        assert [r.name for r in results] == ["welcome.blade.php"]

    def test_limit(self, engine: QueryEngine) -> None:
        assert len(engine.search("php", limit=3)) == 3

    def test_no_match(self, engine: QueryEngine) -> None:
        assert engine.search("no-such-thing-anywhere") == []


class TestGetRecordAndStats:
    def test_get_record(self, engine: QueryEngine) -> None:
        (config,) = engine.list_records(type="config").items
        fetched = engine.get_record(config.id)
        assert fetched is not None
        assert fetched.name == "app"

    def test_get_missing_record(self, engine: QueryEngine) -> None:
        assert engine.get_record("missing") is None

    def test_stats(self, engine: QueryEngine) -> None:
        stats = engine.stats()
        assert stats["total_items"] == 12
        assert stats["by_type"]["file"] == 6
        assert stats["by_category"]["app"] == 2
        assert "meta" in stats["by_category"]
        assert stats["total_size"] > 0
        assert stats["total_size_human"].endswith(" B") or stats["total_size_human"].endswith("KB")

    def test_stats_on_empty_store(self, store: RecordStore) -> None:
        stats = QueryEngine(store).stats()
        assert stats == {
            "total_items": 0,
            "by_type": {},
            "by_category": {},
            "total_size": 0,
            "total_size_human": "0 B",
        }


class TestLongLivedEngine:
    def test_engine_created_before_first_index(
        self, settings: IndexSettings, tmp_path: Path
    ) -> None:
        db = tmp_path / "shared"
        engine = QueryEngine(RecordStore(index_dir=db))
        assert engine.stats()["total_items"] == 0

        index_repository(settings, store=RecordStore(index_dir=db))
        assert engine.stats()["total_items"] == 12
        assert len(engine.search("views/")) == 1

    def test_engine_sees_rebuild_and_additive_runs(
        self, settings: IndexSettings, tmp_path: Path
    ) -> None:
        db = tmp_path / "shared"
        index_repository(settings, store=RecordStore(index_dir=db))
        engine = QueryEngine(RecordStore(index_dir=db))
        assert engine.stats()["total_items"] == 12

        index_repository(settings, rebuild=True, store=RecordStore(index_dir=db))
        index_repository(settings, store=RecordStore(index_dir=db))
        assert engine.stats()["total_items"] == 24
        assert engine.stats()["by_type"]["summary"] == 2
