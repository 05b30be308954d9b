"""Round-trip validation of parsed blocks.

A block is valid when serializing its resolved attributes reproduces the
markup it was parsed from. Comparison is insensitive to whitespace between
tags, whitespace runs, attribute order and attribute quoting. Markup that the
HTML parser has to repair (stray end tags, unclosed elements) is never
equivalent to anything but itself, since the repaired tree no longer holds
the author's text.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from .core.types import BlockType
from .serialization import get_save_content

logger = logging.getLogger(__name__)

_BETWEEN_TAGS = re.compile(r">\s+<")
_WHITESPACE = re.compile(r"\s+")
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG = re.compile(r"<(/?)([a-zA-Z][^\s/>]*)")


def _tag_sequence(markup: str) -> list[tuple[bool, str]]:
    return [
        (bool(closing), name.lower())
        for closing, name in _TAG.findall(_COMMENT.sub("", markup))
    ]


def _parse(markup: str) -> tuple[BeautifulSoup, bool]:
    """Parse `markup`, reporting whether the parser left every tag in place."""
    soup = BeautifulSoup(markup, "html.parser")
    return soup, _tag_sequence(str(soup)) == _tag_sequence(markup)


def is_well_formed(markup: str) -> bool:
    """Return True when parsing `markup` drops or adds no start or end tags."""
    return _parse(markup)[1]


def _canonical(soup: BeautifulSoup) -> str:
    for tag in soup.find_all(True):
        if isinstance(tag, Tag) and tag.attrs:
            tag.attrs = dict(sorted(tag.attrs.items()))
    rendered = _BETWEEN_TAGS.sub("><", str(soup))
    return _WHITESPACE.sub(" ", rendered).strip()


def normalize_markup(markup: str) -> str:
    """Return a canonical rendering of `markup` for equivalence checks."""
    return _canonical(BeautifulSoup(markup, "html.parser"))


def is_equivalent_markup(actual: str, expected: str) -> bool:
    """Return True when two markup strings are equivalent after normalization.

    Only identical strings compare equal when either side needs repair.
    """
    if actual == expected:
        return True
    actual_soup, actual_intact = _parse(actual)
    expected_soup, expected_intact = _parse(expected)
    if not (actual_intact and expected_intact):
        return False
    return _canonical(actual_soup) == _canonical(expected_soup)


def is_valid_block(
    raw_content: str, block_type: BlockType, attributes: Mapping[str, Any]
) -> bool:
    """Return True if `attributes` reserialize to markup equivalent to `raw_content`.

    A save function that raises counts as a mismatch; the error is logged
    and never propagates.
    """
    try:
        saved = get_save_content(block_type, attributes)
    except Exception:
        logger.error(
            "Save function of block '%s' failed during validation",
            block_type.name,
            exc_info=True,
        )
        return False

    if is_equivalent_markup(saved, raw_content):
        return True

    logger.debug(
        "Block '%s' failed round-trip validation; expected %r, got %r",
        block_type.name,
        raw_content,
        saved,
    )
    return False
