"""Tests for VFilesConfig."""

from pathlib import Path

import pytest

from vfiles.config import VFilesConfig


class TestDefaults:
    def test_defaults(self, monkeypatch):
        for var in (
            "VFILES_DATABASE_FILENAME",
            "VFILES_SEARCH_THRESHOLD",
            "VFILES_FAILURE_HISTORY_SIZE",
            "VFILES_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)

        config = VFilesConfig()
        assert config.database_filename == "files.duckdb"
        assert config.search_threshold == 0.2
        assert config.search_keys == ["name", "contents"]
        assert config.default_file_name == "Untitled"
        assert config.default_directory_name == "New Folder"
        assert config.failure_history_size == 100

    def test_search_keys_not_shared(self):
        """Mutating one config's keys must not leak into others."""
        first = VFilesConfig()
        first.search_keys.append("id")
        assert VFilesConfig().search_keys == ["name", "contents"]


class TestOverrides:
    def test_kwargs_override(self):
        config = VFilesConfig(search_threshold=0.5, default_file_name="new.txt")
        assert config.search_threshold == 0.5
        assert config.default_file_name == "new.txt"

    def test_unknown_option_raises(self):
        with pytest.raises(ValueError, match="Unknown configuration option"):
            VFilesConfig(llm_model="gpt")

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("VFILES_SEARCH_THRESHOLD", "0.35")
        monkeypatch.setenv("VFILES_DATABASE_FILENAME", "tree.duckdb")
        monkeypatch.setenv("VFILES_LOG_LEVEL", "debug")

        config = VFilesConfig()
        assert config.search_threshold == 0.35
        assert config.database_filename == "tree.duckdb"
        assert config.log_level == "DEBUG"

    def test_kwargs_beat_environment(self, monkeypatch):
        monkeypatch.setenv("VFILES_SEARCH_THRESHOLD", "0.35")
        assert VFilesConfig(search_threshold=0.1).search_threshold == 0.1

    def test_with_overrides_copies(self):
        base = VFilesConfig()
        derived = base.with_overrides(search_threshold=0.9)
        assert derived.search_threshold == 0.9
        assert base.search_threshold == 0.2
        assert derived.database_filename == base.database_filename


class TestConfigFile:
    def test_from_file_sections(self, tmp_path: Path):
        path = tmp_path / "vfiles.toml"
        path.write_text(
            "[search]\n"
            "threshold = 0.3\n"
            'keys = ["name"]\n'
            "\n"
            "[storage]\n"
            'database_filename = "tree.duckdb"\n'
            "\n"
            "[naming]\n"
            'default_file_name = "untitled.md"\n'
        )

        config = VFilesConfig.from_file(path)
        assert config.search_threshold == 0.3
        assert config.search_keys == ["name"]
        assert config.database_filename == "tree.duckdb"
        assert config.default_file_name == "untitled.md"

    def test_from_file_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            VFilesConfig.from_file(tmp_path / "missing.toml")

    def test_to_file_readable_by_from_file(self, tmp_path: Path):
        path = tmp_path / "out" / "vfiles.toml"
        VFilesConfig(search_threshold=0.4, search_keys=["contents"]).to_file(path)

        loaded = VFilesConfig.from_file(path)
        assert loaded.search_threshold == 0.4
        assert loaded.search_keys == ["contents"]
