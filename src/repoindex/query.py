"""Query engine over the repository index.

Thin read-only layer on top of ``RecordStore``: filtered listings, paging,
substring search and aggregate statistics.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from repoindex.config import PAGE_SIZE, SEARCH_LIMIT
from repoindex.records import IndexRecord, format_bytes
from repoindex.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class RecordPage:
    """One page of a filtered record listing."""

    items: list[IndexRecord] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = PAGE_SIZE

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))


class QueryEngine:
    """Read access to indexed records."""

    def __init__(self, store: RecordStore | None = None):
        """Initialize the query engine.

        Args:
            store: Record store to read from (default: the configured one)
        """
        self.store = store or RecordStore()

    def list_records(
        self,
        type: str | None = None,
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = PAGE_SIZE,
    ) -> RecordPage:
        """List records matching all given filters, one page at a time.

        Args:
            type: Exact record type (e.g. "file", "route")
            category: Exact category (e.g. "app", "migration")
            search: Case-insensitive substring of name, description,
                content preview or path
            page: 1-based page number
            per_page: Records per page

        Returns:
            RecordPage with the page's records and the total match count
        """
        page = max(page, 1)
        per_page = max(per_page, 1)
        items, total = self.store.select(
            type=type,
            category=category,
            search=search,
            offset=(page - 1) * per_page,
            limit=per_page,
        )
        return RecordPage(items=items, total=total, page=page, per_page=per_page)

    def search(
        self,
        query: str,
        type: str | None = None,
        category: str | None = None,
        limit: int = SEARCH_LIMIT,
    ) -> list[IndexRecord]:
        """Return up to *limit* records whose text fields contain *query*."""
        logger.debug("Searching for %r (type=%s, category=%s)", query, type, category)
        items, _total = self.store.select(
            type=type, category=category, search=query, limit=limit
        )
        return items

    def get_record(self, record_id: str) -> IndexRecord | None:
        return self.store.get(record_id)

    def stats(self) -> dict:
        """Aggregate counts and sizes over the whole index."""
        total_size = self.store.total_size()
        return {
            "total_items": self.store.count(),
            "by_type": self.store.grouped_counts("type"),
            "by_category": self.store.grouped_counts("category"),
            "total_size": total_size,
            "total_size_human": format_bytes(total_size),
        }
