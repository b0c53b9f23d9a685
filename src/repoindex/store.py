"""LanceDB-backed record store.

All records live in a single table. Writes go through LanceDB directly;
reads load the table into a pandas DataFrame and filter, group and page there,
which keeps every query expressible without a vector search.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import lancedb
import pandas as pd
import pyarrow as pa

from repoindex.config import LANCEDB_DIR, TABLE_NAME
from repoindex.records import IndexRecord

logger = logging.getLogger(__name__)

RECORD_SCHEMA = pa.schema(
    [
        pa.field("id", pa.string()),
        pa.field("type", pa.string()),
        pa.field("category", pa.string()),
        pa.field("name", pa.string()),
        pa.field("path", pa.string()),
        pa.field("description", pa.string()),
        pa.field("metadata", pa.string()),
        pa.field("content_preview", pa.string()),
        pa.field("size", pa.int64()),
        pa.field("last_modified", pa.string()),
        pa.field("created_at", pa.string()),
        pa.field("updated_at", pa.string()),
    ]
)

# Columns searched by substring queries (any one matching is enough)
SEARCH_COLUMNS: tuple[str, ...] = ("name", "description", "content_preview", "path")

# Result ordering for listings
SORT_COLUMNS: list[str] = ["type", "category", "name"]


def _try_open_table(
    db: lancedb.DBConnection,
    table_name: str,
) -> lancedb.table.Table | None:
    """Try to open an existing LanceDB table, return None if missing."""
    try:
        return db.open_table(table_name)
    except Exception:
        return None


def _clean(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a frame to row dicts with nulls (NaN) mapped to None."""
    if frame.empty:
        return []
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict("records")


class RecordStore:
    """Append-only, truncatable store of ``IndexRecord`` rows.

    The table is created on first use; ``truncate`` recreates it empty.
    Reads check out the latest table version, so a long-lived handle sees
    writes made through other handles.
    """

    def __init__(self, index_dir: Path | None = None, table_name: str = TABLE_NAME):
        """Connect to (or create) the LanceDB database at *index_dir*.

        Args:
            index_dir: LanceDB directory (default: configured LANCEDB_DIR)
            table_name: Table holding the records
        """
        self.index_dir = Path(index_dir or LANCEDB_DIR)
        self.index_dir.mkdir(parents=True, exist_ok=True)
        self.table_name = table_name
        self._db = lancedb.connect(str(self.index_dir))
        self._table = _try_open_table(self._db, table_name)

    # ------------------------------------------------------------------
    # Schema / lifecycle
    # ------------------------------------------------------------------

    @property
    def exists(self) -> bool:
        self._refresh()
        return self._table is not None

    def _refresh(self) -> None:
        """Pick up the table (or its latest version) written by other handles."""
        if self._table is None:
            self._table = _try_open_table(self._db, self.table_name)
        else:
            self._table.checkout_latest()

    def ensure_table(self) -> None:
        """Create the records table if it does not exist yet."""
        if self._table is None:
            self._table = _try_open_table(self._db, self.table_name)
        if self._table is None:
            logger.debug("Creating table %s in %s", self.table_name, self.index_dir)
            self._table = self._db.create_table(self.table_name, schema=RECORD_SCHEMA)

    def truncate(self) -> None:
        """Remove every record (no-op if the table was never created)."""
        self._refresh()
        if self._table is None:
            return
        self._table = self._db.create_table(
            self.table_name, schema=RECORD_SCHEMA, mode="overwrite"
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_many(self, records: list[IndexRecord]) -> list[str]:
        """Insert records, assigning ids and timestamps. Returns the new ids."""
        if not records:
            return []
        self.ensure_table()

        now = datetime.now(UTC).isoformat()
        rows: list[dict[str, Any]] = []
        for record in records:
            record.id = uuid.uuid4().hex
            record.created_at = now
            record.updated_at = now
            rows.append(record.to_row())

        self._table.add(pa.Table.from_pylist(rows, schema=RECORD_SCHEMA))
        return [r["id"] for r in rows]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _frame(self) -> pd.DataFrame:
        self._refresh()
        if self._table is None:
            return RECORD_SCHEMA.empty_table().to_pandas()
        return self._table.to_pandas()

    def count(self) -> int:
        self._refresh()
        if self._table is None:
            return 0
        return self._table.count_rows()

    def get(self, record_id: str) -> IndexRecord | None:
        df = self._frame()
        rows = _clean(df[df["id"] == record_id])
        return IndexRecord.from_row(rows[0]) if rows else None

    def select(
        self,
        type: str | None = None,
        category: str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[IndexRecord], int]:
        """Filter, sort and page the records.

        Args:
            type: Exact record type
            category: Exact category
            search: Case-insensitive substring matched against name,
                description, content preview or path (any of them)
            offset: Number of matching records to skip
            limit: Maximum number of records to return (None = all)

        Returns:
            (records for the requested page, total number of matches)
        """
        df = self._frame()

        if type:
            df = df[df["type"] == type]
        if category:
            df = df[df["category"] == category]
        if search:
            mask = pd.Series(False, index=df.index)
            for column in SEARCH_COLUMNS:
                mask |= df[column].fillna("").astype(str).str.contains(
                    search, case=False, regex=False
                )
            df = df[mask]

        total = len(df)
        df = df.sort_values(SORT_COLUMNS, na_position="first", kind="mergesort")
        end = None if limit is None else offset + limit
        page = df.iloc[offset:end]
        return [IndexRecord.from_row(row) for row in _clean(page)], total

    def grouped_counts(self, column: str) -> dict[str, int]:
        """Count records per non-null value of *column*."""
        df = self._frame()
        counts = df.groupby(column, dropna=True).size()
        return {str(key): int(value) for key, value in counts.items()}

    def total_size(self) -> int:
        df = self._frame()
        if df.empty:
            return 0
        return int(df["size"].sum(skipna=True))
