"""Block construction."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .core.types import Block


def create_block(name: str, attributes: Mapping[str, Any] | None = None) -> Block:
    """Return an unvalidated block for `name` with a read-only copy of `attributes`."""
    return Block(name=name, attributes=dict(attributes or {}))
