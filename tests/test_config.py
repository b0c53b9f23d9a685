"""Tests for configuration loading and per-run settings."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import yaml

from repoindex.config import IndexSettings, get_config_path, load_config

# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        with patch("repoindex.config.CONFIG_FILE", tmp_path / "missing.yaml"):
            config = load_config()
        assert config["indexing"]["max_file_size"] == 1024 * 1024
        assert config["indexing"]["preview_length"] == 500
        assert config["index"]["table"] == "repository_index"
        assert config["api"]["per_page"] == 50

    def test_user_values_merged_per_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump({"indexing": {"structure_depth": 5}, "repository": {"root": "/srv/app"}})
        )
        with patch("repoindex.config.CONFIG_FILE", config_file):
            config = load_config()
        assert config["indexing"]["structure_depth"] == 5
        # Untouched keys of the same section keep their defaults
        assert config["indexing"]["route_files"] == ["web.php", "api.php", "console.php"]
        assert config["repository"]["root"] == "/srv/app"

    def test_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        with patch("repoindex.config.CONFIG_FILE", config_file):
            config = load_config()
        assert config["search"]["limit"] == 10

    def test_defaults_not_mutated(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"search": {"limit": 99}}))
        with patch("repoindex.config.CONFIG_FILE", config_file):
            load_config()
        with patch("repoindex.config.CONFIG_FILE", tmp_path / "missing.yaml"):
            assert load_config()["search"]["limit"] == 10

    def test_config_path(self) -> None:
        assert get_config_path().name == "config.yaml"


# ---------------------------------------------------------------------------
# IndexSettings
# ---------------------------------------------------------------------------


class TestIndexSettings:
    def test_defaults(self) -> None:
        settings = IndexSettings(root=Path("/srv/app"))
        assert settings.max_file_size == 1024 * 1024
        assert settings.migrations_dir == "database/migrations"
        assert settings.models_dir == "app/Models"
        assert list(settings.areas) == [
            "app",
            "resources",
            "routes",
            "config",
            "database",
            "tests",
        ]
        assert ".git" in settings.skip_dirs

    def test_resolved_root_is_absolute(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert IndexSettings(root=Path(".")).resolved_root == tmp_path.resolve()

    def test_areas_not_shared_between_instances(self) -> None:
        a = IndexSettings()
        b = IndexSettings()
        a.areas["extra"] = "Extra"
        assert "extra" not in b.areas
