"""Configuration for the RepoIndex repository catalog.

Configuration is loaded from ~/.config/repoindex/config.yaml
Environment variables can override config file settings.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Config file location
CONFIG_DIR = Path.home() / ".config" / "repoindex"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

_DEFAULTS: dict = {
    "repository": {
        "root": ".",
    },
    "data": {
        "directory": None,  # None = XDG default (~/.local/share/repoindex)
    },
    "index": {
        "directory": "lancedb",
        "table": "repository_index",
    },
    "indexing": {
        "max_file_size": 1024 * 1024,
        "preview_length": 500,
        "structure_depth": 3,
        "skip_dirs": [".git", "vendor", "node_modules", ".env"],
        "areas": {
            "app": "Application Logic",
            "resources": "Resources (Views, Assets)",
            "routes": "Route Definitions",
            "config": "Configuration Files",
            "database": "Database Files",
            "tests": "Test Files",
        },
        "migrations_dir": "database/migrations",
        "models_dir": "app/Models",
        "route_files": ["web.php", "api.php", "console.php"],
        "routes_dir": "routes",
        "config_dir": "config",
    },
    "search": {
        "limit": 10,
    },
    "api": {
        "limit": 20,
        "per_page": 50,
    },
}


def load_config() -> dict:
    """Load configuration from YAML file, with defaults as fallback."""
    config = copy.deepcopy(_DEFAULTS)

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            user_config = yaml.safe_load(f) or {}

        # Deep merge user config into defaults
        for section, values in user_config.items():
            if section in config and isinstance(values, dict):
                config[section].update(values)
            else:
                config[section] = values

    return config


def get_config_path() -> Path:
    """Return the config file path."""
    return CONFIG_FILE


# Load config on module import
_config = load_config()

# Repository to index (defaults to the working directory)
REPOSITORY_ROOT = Path(
    os.environ.get("REPOINDEX_ROOT", str(_config["repository"]["root"]))
)

# Data directory (separate from the indexed repository)
_data_dir_override = os.environ.get("REPOINDEX_DATA_DIR") or _config.get("data", {}).get("directory")
if _data_dir_override:
    DATA_DIR = Path(_data_dir_override)
else:
    _xdg = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    DATA_DIR = Path(_xdg) / "repoindex"

# LanceDB index location (relative to data directory)
LANCEDB_DIR = DATA_DIR / _config["index"]["directory"]
TABLE_NAME: str = _config["index"]["table"]

# Indexing settings
_indexing = _config["indexing"]
MAX_FILE_SIZE: int = _indexing["max_file_size"]
PREVIEW_LENGTH: int = _indexing["preview_length"]
STRUCTURE_DEPTH: int = _indexing["structure_depth"]
SKIP_DIRS: tuple[str, ...] = tuple(_indexing["skip_dirs"])
SOURCE_AREAS: dict[str, str] = dict(_indexing["areas"])
MIGRATIONS_DIR: str = _indexing["migrations_dir"]
MODELS_DIR: str = _indexing["models_dir"]
ROUTES_DIR: str = _indexing["routes_dir"]
ROUTE_FILES: tuple[str, ...] = tuple(_indexing["route_files"])
CONFIG_SOURCE_DIR: str = _indexing["config_dir"]

# Query settings
SEARCH_LIMIT: int = _config["search"]["limit"]
API_LIMIT: int = _config["api"]["limit"]
PAGE_SIZE: int = _config["api"]["per_page"]


# ---------------------------------------------------------------------------
# Per-run settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexSettings:
    """Everything one indexing run needs to know about the repository layout.

    Defaults come from the loaded configuration; tests and the CLI override
    ``root`` (and anything else) per run.
    """

    root: Path = REPOSITORY_ROOT
    max_file_size: int = MAX_FILE_SIZE
    preview_length: int = PREVIEW_LENGTH
    structure_depth: int = STRUCTURE_DEPTH
    skip_dirs: tuple[str, ...] = SKIP_DIRS
    areas: dict[str, str] = field(default_factory=lambda: dict(SOURCE_AREAS))
    migrations_dir: str = MIGRATIONS_DIR
    models_dir: str = MODELS_DIR
    routes_dir: str = ROUTES_DIR
    route_files: tuple[str, ...] = ROUTE_FILES
    config_dir: str = CONFIG_SOURCE_DIR

    @property
    def resolved_root(self) -> Path:
        return Path(self.root).expanduser().resolve()
