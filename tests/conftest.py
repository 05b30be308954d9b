"""
Global test configuration: environment isolation, markers and shared registries.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
import logging
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from block_parser.config import FrozenConfig
from block_parser.core.sources import html
from block_parser.core.types import AttributeType, BlockType, FieldSpec
from block_parser.registry import BlockTypeRegistry
from block_parser.telemetry import SimpleReporter


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_block_parser_env(request, monkeypatch, tmp_path):
    """Ensure a clean BLOCK_PARSER_* environment and neutral config files.

    - Removes all BLOCK_PARSER_* variables before each test
    - Points the home and project config paths at files that do not exist,
      so a developer's real configuration never leaks into a test

    Escape hatch: @pytest.mark.allow_env_pollution keeps the environment.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("BLOCK_PARSER_"):
            monkeypatch.delenv(key, raising=False)

    isolated = tmp_path / "config_isolated"
    isolated.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("BLOCK_PARSER_CONFIG_HOME", str(isolated / "block_parser.toml"))
    monkeypatch.setenv("BLOCK_PARSER_PYPROJECT_PATH", str(isolated / "pyproject.toml"))


@pytest.fixture
def isolated_config_sources(tmp_path):
    """Set up specific config sources for a single resolution.

    Returns a context manager taking pyproject/home TOML content and
    environment variables (BLOCK_PARSER_ prefix added automatically).
    """

    @contextmanager
    def _setup(
        *,
        pyproject_content: str = "",
        home_content: str = "",
        env_vars: dict[str, str] | None = None,
    ) -> Generator[None]:
        clean_env = {
            k: v for k, v in os.environ.items() if not k.startswith("BLOCK_PARSER_")
        }
        for key, value in (env_vars or {}).items():
            if not key.startswith("BLOCK_PARSER_"):
                key = f"BLOCK_PARSER_{key.upper()}"
            clean_env[key] = value

        project_dir = tmp_path / "project"
        project_dir.mkdir(exist_ok=True)
        pyproject_path = project_dir / "pyproject.toml"
        home_dir = tmp_path / "home"
        home_dir.mkdir(exist_ok=True)
        home_config_path = home_dir / "block_parser.toml"

        if pyproject_content:
            pyproject_path.write_text(pyproject_content)
        if home_content:
            home_config_path.write_text(home_content)

        clean_env["BLOCK_PARSER_PYPROJECT_PATH"] = str(pyproject_path)
        clean_env["BLOCK_PARSER_CONFIG_HOME"] = str(home_config_path)

        with patch.dict(os.environ, clean_env, clear=True):
            yield

    return _setup


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("bs4").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Tests spanning the grammar, registry and parser together",
        "contract: Behavioral guarantees of the parser as a whole",
        "allow_env_pollution: Skip BLOCK_PARSER_* environment isolation",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


def _save_freeform(attributes: Mapping[str, Any]) -> str:
    return attributes.get("content", "")


def _save_note(attributes: Mapping[str, Any]) -> str:
    tone = attributes.get("tone", "info")
    return f'<aside data-tone="{tone}">{attributes.get("body", "")}</aside>'


@pytest.fixture
def freeform_type() -> BlockType:
    """Fallback type that keeps its content verbatim."""
    return BlockType(
        name="test/freeform",
        save=_save_freeform,
        attributes={"content": FieldSpec(type=AttributeType.STRING, source=html())},
    )


@pytest.fixture
def note_type() -> BlockType:
    """A block with one sourced field and one inline field with a default."""
    return BlockType(
        name="test/note",
        save=_save_note,
        attributes={
            "body": FieldSpec(type=AttributeType.STRING, source=html("aside")),
            "tone": FieldSpec(type=AttributeType.STRING, default="info"),
            "pinned": FieldSpec(type=AttributeType.BOOLEAN),
        },
    )


@pytest.fixture
def registry(freeform_type, note_type) -> BlockTypeRegistry:
    """A synthetic, unfrozen registry with a fallback and one real type."""
    return BlockTypeRegistry(
        [freeform_type, note_type], unknown_type_handler="test/freeform"
    )


@pytest.fixture
def frozen_config() -> FrozenConfig:
    """Configuration matching the synthetic registry."""
    return FrozenConfig(
        unknown_type_handler="test/freeform",
        migrations={"test/memo": "test/note"},
    )


@pytest.fixture
def reporter() -> SimpleReporter:
    """In-memory telemetry reporter."""
    return SimpleReporter()


@pytest.fixture
def tmp_pyproject(tmp_path, monkeypatch):
    """Write a pyproject.toml and point config resolution at it."""

    def _write(content: str) -> Path:
        path = tmp_path / "pyproject.toml"
        path.write_text(content)
        monkeypatch.setenv("BLOCK_PARSER_PYPROJECT_PATH", str(path))
        return path

    return _write
