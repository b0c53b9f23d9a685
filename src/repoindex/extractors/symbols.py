"""Class and function declarations in PHP-style source files."""

from __future__ import annotations

import re

_CLASS_RE = re.compile(r"\bclass\s+(\w+)")
_FUNCTION_RE = re.compile(r"\bfunction\s+(\w+)")


def extract_class_names(text: str) -> list[str]:
    """Return identifiers following the ``class`` keyword, in declaration order.

    Duplicates are kept, so a file declaring the same name twice reports it twice.
    """
    return _CLASS_RE.findall(text)


def extract_function_names(text: str) -> list[str]:
    """Return identifiers following the ``function`` keyword, in declaration order."""
    return _FUNCTION_RE.findall(text)
