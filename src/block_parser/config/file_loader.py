"""File-based configuration loading with profile support.

Configuration can live in the project's ``pyproject.toml`` under
``[tool.block_parser]`` and in a home file (``~/.config/block_parser.toml``).
Both support named profiles: ``[tool.block_parser.profiles.<name>]`` and
``[profiles.<name>]`` respectively.
"""

import os
from pathlib import Path
import tomllib
from typing import Any


class ConfigFileError(Exception):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause."""
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


def _select_profile(
    section: dict[str, Any], profile: str | None, path: Path
) -> dict[str, Any]:
    if profile:
        profiles = section.get("profiles", {})
        if profile not in profiles:
            available = list(profiles.keys()) if profiles else []
            raise ConfigFileError(
                path,
                f"Profile '{profile}' not found. Available profiles: {available}",
            )
        return dict(profiles[profile])
    config = dict(section)
    config.pop("profiles", None)
    return config


class FileConfigLoader:
    """Loads configuration from TOML files with profile support."""

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Load configuration from the project's pyproject.toml.

        Args:
            project_root: Directory to search for pyproject.toml. If None,
                searches the current directory and its parents.
            profile: Optional profile name under ``[tool.block_parser.profiles]``.

        Returns:
            Configuration values; empty if there is no file or no section.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed, or the
                requested profile is missing.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        data = self._read_toml(pyproject_path)
        section = data.get("tool", {}).get("block_parser", {})
        if not section:
            return {}
        return _select_profile(section, profile, pyproject_path)

    def load_home_config(self, profile: str | None = None) -> dict[str, Any]:
        """Load configuration from the home configuration file.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed, or the
                requested profile is missing.
        """
        home_config_path = self._get_home_config_path()
        if not home_config_path.exists():
            return {}
        return _select_profile(
            self._read_toml(home_config_path), profile, home_config_path
        )

    def _read_toml(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(mode="rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree.

        ``BLOCK_PARSER_PYPROJECT_PATH`` pins the file explicitly.
        """
        override = os.getenv("BLOCK_PARSER_PYPROJECT_PATH")
        if override:
            path = Path(override)
            return path if path.exists() else None

        current = Path(start_dir or Path.cwd()).resolve()
        while current != current.parent:
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            current = current.parent
        return None

    def _get_home_config_path(self) -> Path:
        """Return the home config path, honoring ``BLOCK_PARSER_CONFIG_HOME``."""
        override = os.getenv("BLOCK_PARSER_CONFIG_HOME")
        if override:
            return Path(override)
        return Path.home() / ".config" / "block_parser.toml"
