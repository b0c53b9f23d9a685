"""Tests for the LanceDB record store."""

from __future__ import annotations

from pathlib import Path

from repoindex.records import ConfigMetadata, FileMetadata, IndexRecord, RecordType
from repoindex.store import RecordStore


def _file(name: str, path: str, category: str = "app", size: int = 100, **kw: object) -> IndexRecord:
    return IndexRecord(
        type=RecordType.FILE,
        category=category,
        name=name,
        path=path,
        description="PHP source file",
        metadata=FileMetadata(extension="php", size_human=f"{size} B"),
        content_preview=kw.get("preview", "<?php"),
        size=size,
        last_modified="2024-01-01T00:00:00",
    )


def _config(name: str) -> IndexRecord:
    return IndexRecord(
        type=RecordType.CONFIG,
        category="application",
        name=name,
        path=f"config/{name}.php",
        description=f"Configuration for {name}",
        metadata=ConfigMetadata(keys=["driver"]),
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_new_store_is_empty(self, store: RecordStore) -> None:
        assert not store.exists
        assert store.count() == 0
        assert store.select() == ([], 0)
        assert store.grouped_counts("type") == {}
        assert store.total_size() == 0

    def test_ensure_table_creates_once(self, store: RecordStore) -> None:
        store.ensure_table()
        store.ensure_table()
        assert store.exists
        assert store.count() == 0

    def test_truncate_on_missing_table_is_noop(self, store: RecordStore) -> None:
        store.truncate()
        assert not store.exists

    def test_truncate_removes_everything(self, store: RecordStore) -> None:
        store.insert_many([_file("A.php", "app/A.php"), _config("app")])
        store.truncate()
        assert store.count() == 0
        assert store.exists

    def test_reopen_sees_existing_records(self, tmp_path: Path) -> None:
        first = RecordStore(index_dir=tmp_path / "db")
        first.insert_many([_config("cache")])
        second = RecordStore(index_dir=tmp_path / "db")
        assert second.exists
        assert second.count() == 1


# ---------------------------------------------------------------------------
# Long-lived readers
# ---------------------------------------------------------------------------


class TestReaderHandle:
    def test_reader_opened_before_table_exists(self, tmp_path: Path) -> None:
        reader = RecordStore(index_dir=tmp_path / "db")
        assert not reader.exists

        writer = RecordStore(index_dir=tmp_path / "db")
        writer.insert_many([_config("app"), _config("mail")])

        assert reader.exists
        assert reader.count() == 2
        assert reader.select()[1] == 2

    def test_reader_sees_later_writes(self, tmp_path: Path) -> None:
        writer = RecordStore(index_dir=tmp_path / "db")
        writer.insert_many([_config("app")])
        reader = RecordStore(index_dir=tmp_path / "db")
        assert reader.count() == 1

        (new_id,) = writer.insert_many([_config("mail")])
        assert reader.count() == 2
        fetched = reader.get(new_id)
        assert fetched is not None
        assert fetched.name == "mail"

    def test_reader_sees_truncate_by_other_handle(self, tmp_path: Path) -> None:
        writer = RecordStore(index_dir=tmp_path / "db")
        writer.insert_many([_config("app"), _config("mail")])
        reader = RecordStore(index_dir=tmp_path / "db")
        assert reader.count() == 2

        other = RecordStore(index_dir=tmp_path / "db")
        other.truncate()
        other.insert_many([_config("cache")])
        assert reader.count() == 1
        assert reader.grouped_counts("type") == {"config": 1}


# ---------------------------------------------------------------------------
# Writes / reads
# ---------------------------------------------------------------------------


class TestInsertAndGet:
    def test_insert_assigns_ids_and_timestamps(self, store: RecordStore) -> None:
        record = _file("A.php", "app/A.php")
        ids = store.insert_many([record])
        assert len(ids) == 1
        assert record.id == ids[0]
        assert record.created_at is not None
        assert record.created_at == record.updated_at

    def test_get_round_trips_metadata(self, store: RecordStore) -> None:
        (record_id,) = store.insert_many([_file("A.php", "app/A.php", size=2048)])
        fetched = store.get(record_id)
        assert fetched is not None
        assert fetched.name == "A.php"
        assert fetched.size == 2048
        assert isinstance(fetched.metadata, FileMetadata)
        assert fetched.metadata.size_human == "2048 B"

    def test_get_missing_returns_none(self, store: RecordStore) -> None:
        store.insert_many([_config("app")])
        assert store.get("does-not-exist") is None

    def test_insert_nothing(self, store: RecordStore) -> None:
        assert store.insert_many([]) == []
        assert not store.exists


class TestSelect:
    def test_filters_and_ordering(self, store: RecordStore) -> None:
        store.insert_many(
            [
                _file("Zeta.php", "app/Zeta.php"),
                _file("Alpha.php", "app/Alpha.php"),
                _file("routes.php", "tests/routes.php", category="tests"),
                _config("mail"),
            ]
        )
        records, total = store.select(type="file")
        assert total == 3
        assert [r.name for r in records] == ["Alpha.php", "Zeta.php", "routes.php"]

        records, total = store.select(type="file", category="tests")
        assert total == 1
        assert records[0].path == "tests/routes.php"

        records, _ = store.select()
        assert [r.type for r in records][0] == RecordType.CONFIG

    def test_search_is_case_insensitive_and_covers_path(self, store: RecordStore) -> None:
        store.insert_many(
            [
                _file("A.php", "app/Billing/A.php", preview="nothing here"),
                _file("B.php", "app/B.php", preview="class Invoice"),
            ]
        )
        records, total = store.select(search="billing")
        assert total == 1
        assert records[0].name == "A.php"

        records, total = store.select(search="INVOICE")
        assert total == 1
        assert records[0].name == "B.php"

    def test_search_treats_query_literally(self, store: RecordStore) -> None:
        store.insert_many([_file("A.php", "app/A.php")])
        assert store.select(search="A.*")[1] == 0

    def test_offset_and_limit(self, store: RecordStore) -> None:
        store.insert_many([_file(f"F{i}.php", f"app/F{i}.php") for i in range(5)])
        records, total = store.select(offset=2, limit=2)
        assert total == 5
        assert [r.name for r in records] == ["F2.php", "F3.php"]


class TestAggregates:
    def test_grouped_counts_and_total_size(self, store: RecordStore) -> None:
        store.insert_many(
            [
                _file("A.php", "app/A.php", size=100),
                _file("B.php", "app/B.php", size=50),
                _config("app"),
                IndexRecord(type=RecordType.SUMMARY, name="Index Summary", category=None),
            ]
        )
        assert store.grouped_counts("type") == {"file": 2, "config": 1, "summary": 1}
        assert store.grouped_counts("category") == {"app": 2, "application": 1}
        assert store.total_size() == 150
        assert store.count() == 4
