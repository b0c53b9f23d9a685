"""Database schema facts from migrations and model classes.

Migrations are recognized by their ``Schema::`` facade calls, models by
Eloquent-style relationship calls and the ``$fillable`` property.
"""

from __future__ import annotations

import re

_CREATE_TABLE_RE = re.compile(r"Schema::create\(['\"](\w+)['\"]")

# Operation kind -> substring that marks it. Order is the reporting order.
_MIGRATION_OPERATIONS: dict[str, str] = {
    "create": "Schema::create",
    "modify": "Schema::table",
    "drop": "Schema::drop",
}

# Relationship kind (the method name) -> pattern capturing the target entity.
# The argument may be quoted ('Post') or bare (Post::class).
RELATIONSHIP_KINDS: dict[str, re.Pattern[str]] = {
    "hasOne": re.compile(r"hasOne\(['\"]?(\w+)['\"]?"),
    "hasMany": re.compile(r"hasMany\(['\"]?(\w+)['\"]?"),
    "belongsTo": re.compile(r"belongsTo\(['\"]?(\w+)['\"]?"),
    "belongsToMany": re.compile(r"belongsToMany\(['\"]?(\w+)['\"]?"),
}

_FILLABLE_RE = re.compile(r"\$fillable\s*=\s*\[(.*?)\]", re.DOTALL)


def extract_table_names(text: str) -> list[str]:
    """Return table names passed to ``Schema::create``, in order."""
    return _CREATE_TABLE_RE.findall(text)


def extract_migration_operations(text: str) -> list[str]:
    """Return which of create/modify/drop a migration performs.

    Presence only: each kind appears at most once, always in the order
    create, modify, drop.
    """
    return [kind for kind, marker in _MIGRATION_OPERATIONS.items() if marker in text]


def extract_relationships(text: str) -> dict[str, list[str]]:
    """Return relationship targets grouped by kind.

    Kinds without a single match are left out of the mapping entirely.
    """
    relationships: dict[str, list[str]] = {}
    for kind, pattern in RELATIONSHIP_KINDS.items():
        targets = pattern.findall(text)
        if targets:
            relationships[kind] = targets
    return relationships


def extract_fillable_fields(text: str) -> list[str]:
    """Return the elements of the first ``$fillable = [...]`` assignment.

    Later assignments in the same file are ignored.
    """
    match = _FILLABLE_RE.search(text)
    if match is None:
        return []
    fields = (raw.replace("'", "").replace('"', "").strip() for raw in match.group(1).split(","))
    return [f for f in fields if f]
