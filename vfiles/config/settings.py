"""
VFilesConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> manager = FileManager("./store")

    >>> # Explicit configuration
    >>> config = VFilesConfig(search_threshold=0.3)
    >>> manager = FileManager("./store", config=config)

    >>> # From config file
    >>> config = VFilesConfig.from_file("./vfiles.toml")

Environment Variables:
    VFILES_DATABASE_FILENAME - DuckDB file name inside the store directory
    VFILES_SEARCH_THRESHOLD - Maximum fuzzy distance for a search hit
    VFILES_FAILURE_HISTORY_SIZE - Persistence failures kept in memory
    VFILES_LOG_LEVEL - Log level used by the CLI
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

# TOML support: tomllib is built-in for Python 3.11+, use tomli for 3.10
try:
    import tomllib

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomllib.load(f))

except ImportError:
    import tomli

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomli.load(f))


class VFilesConfig:
    """Configuration for vfiles."""

    # === Storage Configuration ===

    database_filename: str = "files.duckdb"
    """DuckDB database file, relative to the store directory"""

    lock_timeout: float = 30.0
    """Seconds to wait for the backup file lock"""

    backup_indent: int = 2
    """JSON indentation for backup files"""

    # === Search Configuration ===

    search_threshold: float = 0.2
    """Maximum distance (0 = exact, 1 = unrelated) for a fuzzy search hit"""

    search_keys: list[str] = ["name", "contents"]
    """Node fields matched by fuzzy search"""

    # === Naming Configuration ===

    default_file_name: str = "Untitled"
    """Name given to files created without one"""

    default_directory_name: str = "New Folder"
    """Name given to directories created without one"""

    # === Reporting Configuration ===

    failure_history_size: int = 100
    """Persistence failures retained by the error reporter"""

    log_level: str = "WARNING"
    """Log level applied by the CLI"""

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option
        """
        self.search_keys = list(type(self).search_keys)

        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        import os

        if filename := os.getenv("VFILES_DATABASE_FILENAME"):
            self.database_filename = filename
        if threshold := os.getenv("VFILES_SEARCH_THRESHOLD"):
            self.search_threshold = float(threshold)
        if size := os.getenv("VFILES_FAILURE_HISTORY_SIZE"):
            self.failure_history_size = int(size)
        if level := os.getenv("VFILES_LOG_LEVEL"):
            self.log_level = level.upper()

    @classmethod
    def from_file(cls, path: str | Path) -> VFilesConfig:
        """
        Load configuration from TOML file.

        Nested sections are flattened with a per-section prefix.

        Example TOML:
            [search]
            threshold = 0.3
            keys = ["name"]

            [storage]
            database_filename = "tree.duckdb"

            [naming]
            default_file_name = "untitled.txt"

        Args:
            path: Path to TOML configuration file

        Returns:
            VFilesConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = _load_toml(path)

        flat_config: dict[str, Any] = {}

        section_mapping = {
            "search": "search_",
            "storage": "",
            "naming": "",
            "logging": "",
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    flat_config[f"{prefix}{key}"] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if key not in section_mapping and not isinstance(value, dict):
                flat_config[key] = value

        return cls(**flat_config)

    @classmethod
    def from_env(cls) -> VFilesConfig:
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, Any]] = {
            "search": {
                "threshold": self.search_threshold,
                "keys": self.search_keys,
            },
            "storage": {
                "database_filename": self.database_filename,
                "lock_timeout": self.lock_timeout,
                "backup_indent": self.backup_indent,
            },
            "naming": {
                "default_file_name": self.default_file_name,
                "default_directory_name": self.default_directory_name,
            },
            "logging": {
                "failure_history_size": self.failure_history_size,
                "log_level": self.log_level,
            },
        }

        # Build TOML string manually (avoids extra dependency)
        lines = ["# vfiles configuration", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                lines.append(f"{key} = {_toml_value(value)}")
            lines.append("")

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> VFilesConfig:
        """Return new config with specified overrides."""
        new_config = VFilesConfig.__new__(VFilesConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                setattr(new_config, key, getattr(self, key))
        new_config.search_keys = list(self.search_keys)
        for key, value in kwargs.items():
            setattr(new_config, key, value)
        return new_config


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    return f'"{value}"'
