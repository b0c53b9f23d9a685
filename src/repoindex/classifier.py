"""File classification by extension and repository area.

Decides, for each file found during the source sweep, which category bucket it
lands in, the human-readable description stored with its record, and whether
symbol extraction (classes/functions) applies.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Multi-part extensions checked before the plain suffix.
COMPOUND_EXTENSIONS: tuple[str, ...] = ("blade.php",)

DESCRIPTIONS: dict[str, str] = {
    "php": "PHP source file",
    "js": "JavaScript file",
    "css": "Stylesheet file",
    "json": "JSON configuration file",
    "md": "Markdown documentation",
    "blade.php": "Blade template file",
    "xml": "XML configuration file",
}
DEFAULT_DESCRIPTION = "File"

LANGUAGES: dict[str, str] = {
    "php": "PHP",
    "js": "JavaScript",
    "css": "CSS",
    "blade.php": "Blade Template",
}

# Extensions whose content goes through class/function extraction.
SYMBOL_EXTENSIONS: frozenset[str] = frozenset({"php"})


@dataclass(frozen=True)
class FileClass:
    """Classification result for one file."""

    category: str
    description: str
    extension: str
    language: str | None = None
    extract_symbols: bool = False


def file_extension(path: Path | str) -> str:
    """Return the lower-cased extension without the dot ("" if none)."""
    name = Path(path).name.lower()
    for compound in COMPOUND_EXTENSIONS:
        if name.endswith("." + compound):
            return compound
    return Path(name).suffix.lstrip(".")


def describe_extension(extension: str) -> str:
    return DESCRIPTIONS.get(extension, DEFAULT_DESCRIPTION)


def classify(path: Path | str, area: str) -> FileClass:
    """Classify a file found under the top-level *area* directory.

    Args:
        path: File path (only the name is inspected)
        area: Top-level area the file was found in (e.g. "app"); used as category

    Returns:
        FileClass with category, description and extractor selection
    """
    extension = file_extension(path)
    return FileClass(
        category=area,
        description=describe_extension(extension),
        extension=extension,
        language=LANGUAGES.get(extension),
        extract_symbols=extension in SYMBOL_EXTENSIONS,
    )
