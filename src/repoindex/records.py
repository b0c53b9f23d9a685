"""Index records and their per-type metadata.

An ``IndexRecord`` is the only thing the store persists. Its ``metadata`` is
one of several dataclasses, chosen by the record's ``type`` (and, for database
records, its ``category``). In the store the metadata is kept as a JSON object;
optional fields that are unset are omitted rather than written as null.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# Preview stand-ins for files whose content was not read
LARGE_FILE_PREVIEW = "Large file - content not indexed"
UNREADABLE_PREVIEW = "Binary file or read error"
PREVIEW_MARKER = "..."


class RecordType(str, Enum):
    """Kind of artifact a record describes."""

    STRUCTURE = "structure"
    FILE = "file"
    DATABASE = "database"
    ROUTE = "route"
    CONFIG = "config"
    SUMMARY = "summary"


# ---------------------------------------------------------------------------
# Metadata variants
# ---------------------------------------------------------------------------


@dataclass
class StructureMetadata:
    tree: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return self.tree

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StructureMetadata:
        return cls(tree=data)


@dataclass
class FileMetadata:
    """Metadata of a swept source file.

    ``lines``, ``classes`` and ``functions`` are derived from content and stay
    ``None`` when the file was too large or could not be decoded.
    """

    extension: str
    size_human: str
    lines: int | None = None
    type: str | None = None
    classes: list[str] | None = None
    functions: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"extension": self.extension, "size_human": self.size_human}
        for key in ("lines", "type", "classes", "functions"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileMetadata:
        return cls(
            extension=data.get("extension", ""),
            size_human=data.get("size_human", ""),
            lines=data.get("lines"),
            type=data.get("type"),
            classes=data.get("classes"),
            functions=data.get("functions"),
        )


def _present(**fields: Any) -> dict[str, Any]:
    """Keep only the fields that were set (content-derived fields may be None)."""
    return {key: value for key, value in fields.items() if value is not None}


@dataclass
class MigrationMetadata:
    """Tables and operations of a migration; both None when it was not read."""

    tables: list[str] | None = None
    operations: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _present(tables=self.tables, operations=self.operations)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationMetadata:
        return cls(tables=data.get("tables"), operations=data.get("operations"))


@dataclass
class ModelMetadata:
    class_name: str
    relationships: dict[str, list[str]] | None = None
    fillable: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            **_present(relationships=self.relationships, fillable=self.fillable),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModelMetadata:
        return cls(
            class_name=data.get("class", ""),
            relationships=data.get("relationships"),
            fillable=data.get("fillable"),
        )


@dataclass
class RouteMetadata:
    routes: list[dict[str, str]] | None = None

    @property
    def count(self) -> int | None:
        return None if self.routes is None else len(self.routes)

    def to_dict(self) -> dict[str, Any]:
        return _present(routes=self.routes, count=self.count)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteMetadata:
        return cls(routes=data.get("routes"))


@dataclass
class ConfigMetadata:
    keys: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _present(keys=self.keys)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigMetadata:
        return cls(keys=data.get("keys"))


@dataclass
class SummaryMetadata:
    total_items: int
    by_type: dict[str, int]
    by_category: dict[str, int]
    generated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_items": self.total_items,
            "by_type": self.by_type,
            "by_category": self.by_category,
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SummaryMetadata:
        return cls(
            total_items=int(data.get("total_items", 0)),
            by_type=dict(data.get("by_type", {})),
            by_category=dict(data.get("by_category", {})),
            generated_at=str(data.get("generated_at", "")),
        )


RecordMetadata = Union[
    StructureMetadata,
    FileMetadata,
    MigrationMetadata,
    ModelMetadata,
    RouteMetadata,
    ConfigMetadata,
    SummaryMetadata,
]


def _metadata_class(record_type: RecordType, category: str | None) -> type:
    if record_type is RecordType.DATABASE:
        return ModelMetadata if category == "model" else MigrationMetadata
    return {
        RecordType.STRUCTURE: StructureMetadata,
        RecordType.FILE: FileMetadata,
        RecordType.ROUTE: RouteMetadata,
        RecordType.CONFIG: ConfigMetadata,
        RecordType.SUMMARY: SummaryMetadata,
    }[record_type]


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass
class IndexRecord:
    """One persisted fact about a repository artifact.

    Attributes:
        type: Kind of artifact
        name: Display name (file name, model name or a synthetic label)
        category: Free-form bucket (e.g. "app", "migration", "web")
        path: Repository-relative path, None for synthetic records
        description: Short human-readable description
        metadata: Type-specific metadata variant
        content_preview: Leading content snippet or a sentinel
        size: Size in bytes (file records only)
        last_modified: ISO-8601 modification time (file records only)
        id: Store-assigned identifier (None until inserted)
        created_at: Store-managed insertion timestamp
        updated_at: Store-managed update timestamp
    """

    type: RecordType
    name: str
    category: str | None = None
    path: str | None = None
    description: str = ""
    metadata: RecordMetadata | None = None
    content_preview: str | None = None
    size: int | None = None
    last_modified: str | None = None
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def metadata_dict(self) -> dict[str, Any]:
        return self.metadata.to_dict() if self.metadata is not None else {}

    def to_row(self) -> dict[str, Any]:
        """Flatten into a store row (metadata serialized as JSON)."""
        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category,
            "name": self.name,
            "path": self.path,
            "description": self.description,
            "metadata": json.dumps(self.metadata_dict(), ensure_ascii=True),
            "content_preview": self.content_preview,
            "size": self.size,
            "last_modified": self.last_modified,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation with metadata expanded."""
        data = self.to_row()
        data["metadata"] = self.metadata_dict()
        return data

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> IndexRecord:
        """Rebuild a record from a store row, picking the metadata variant by type."""
        record_type = RecordType(row["type"])
        category = row.get("category")
        raw_meta = row.get("metadata")
        meta_data = json.loads(raw_meta) if raw_meta else {}
        size = row.get("size")
        return cls(
            type=record_type,
            name=row.get("name") or "",
            category=category,
            path=row.get("path"),
            description=row.get("description") or "",
            metadata=_metadata_class(record_type, category).from_dict(meta_data),
            content_preview=row.get("content_preview"),
            size=int(size) if size is not None else None,
            last_modified=row.get("last_modified"),
            id=row.get("id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_preview(content: str, length: int = 500) -> str:
    """Return the first *length* characters, marked with ``...`` when cut."""
    if len(content) > length:
        return content[:length] + PREVIEW_MARKER
    return content


def format_bytes(size: int | float | None) -> str:
    """Format a byte count with binary units, e.g. 1536 -> "1.5 KB".

    Scales through B, KB, MB and GB (capped) and rounds to two decimals.
    """
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    number = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{number} {units[unit]}"
