"""Default grammar: segments a document into delimited regions.

Blocks are delimited by HTML comments::

    <!-- block:core/paragraph {"align":"left"} --><p>hi</p><!-- /block -->
    <!-- block:core/separator /-->

A closer may repeat the block name (``<!-- /block:core/paragraph -->``), in
which case it must match the open block. Text between blocks becomes a
freeform region with no name. Comments that do not match the delimiter
syntax are ordinary content. Blocks do not nest.
"""

from __future__ import annotations

import dataclasses
import json
import re
from typing import Any

from .core.types import RegionNode
from .exceptions import GrammarError

_NAME = r"[a-z][a-z0-9-]*/[a-z][a-z0-9-]*"

_DELIMITER = re.compile(
    r"<!--\s+(?P<closer>/)?block(?::(?P<name>" + _NAME + r"))?"
    r"\s+(?:(?P<attrs>[{\[].*?[}\]])\s*)?(?P<void>/)?-->",
    re.DOTALL,
)

BLOCK_NAME_PATTERN = re.compile(_NAME)


@dataclasses.dataclass(frozen=True, slots=True)
class _OpenBlock:
    name: str
    attrs: dict[str, Any]
    content_start: int
    offset: int


def _parse_attrs(raw: str | None, offset: int) -> dict[str, Any]:
    if raw is None:
        return {}
    try:
        attrs = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GrammarError(f"Invalid block attributes: {e.msg}", offset) from e
    except (ValueError, RecursionError) as e:
        # Oversized integer literals and excessive nesting
        raise GrammarError(f"Invalid block attributes: {e}", offset) from e
    if not isinstance(attrs, dict):
        raise GrammarError("Block attributes must be a JSON object", offset)
    return attrs


def _freeform(nodes: list[RegionNode], content: str) -> None:
    if content.strip():
        nodes.append(RegionNode(name=None, raw_content=content))


def tokenize(text: str) -> tuple[RegionNode, ...]:
    """Split `text` into region nodes in document order.

    Raises:
        GrammarError: If the delimiters are unbalanced, nested, mismatched
            or carry attributes that are not a JSON object.
    """
    if not isinstance(text, str):
        raise TypeError(f"document must be str, got {type(text).__name__}")

    nodes: list[RegionNode] = []
    open_block: _OpenBlock | None = None
    cursor = 0

    for match in _DELIMITER.finditer(text):
        name = match["name"]

        if match["closer"]:
            if open_block is None:
                raise GrammarError("Closing delimiter without an open block", match.start())
            if match["attrs"] is not None or match["void"]:
                raise GrammarError("Closing delimiter cannot carry attributes", match.start())
            if name is not None and name != open_block.name:
                raise GrammarError(
                    f"Closing delimiter for '{name}' does not match open block "
                    f"'{open_block.name}'",
                    match.start(),
                )
            nodes.append(
                RegionNode(
                    name=open_block.name,
                    raw_content=text[open_block.content_start : match.start()],
                    attrs=open_block.attrs,
                )
            )
            open_block = None
            cursor = match.end()
            continue

        if open_block is not None:
            raise GrammarError(
                f"Nested block inside '{open_block.name}' is not supported",
                match.start(),
            )
        if name is None:
            raise GrammarError("Opening delimiter without a block name", match.start())

        attrs = _parse_attrs(match["attrs"], match.start())
        _freeform(nodes, text[cursor : match.start()])

        if match["void"]:
            nodes.append(RegionNode(name=name, raw_content="", attrs=attrs))
            cursor = match.end()
        else:
            open_block = _OpenBlock(name, attrs, match.end(), match.start())

    if open_block is not None:
        raise GrammarError(f"Unclosed block '{open_block.name}'", open_block.offset)

    _freeform(nodes, text[cursor:])
    return tuple(nodes)
