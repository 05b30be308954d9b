"""Extraction rules: tagged functions that pull attribute values from content.

A rule receives the parsed content tree of a region and returns a raw value,
or None when nothing matched. Only `ExtractionRule` instances count as
sources; an ordinary callable placed in a schema's ``source`` slot is ignored
rather than guessed at. Rules are built with the factories below or by
tagging a function with `extraction_rule`.

The tree is a BeautifulSoup document parsed with the stdlib ``html.parser``
backend. Rules should treat it as a generic tree to query and should not
depend on parser-specific details.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, overload

from bs4 import BeautifulSoup, Tag

type ContentNode = Tag


class ExtractionRule:
    """A function tagged as a valid attribute source."""

    __slots__ = ("_fn", "description")

    def __init__(self, fn: Callable[[ContentNode], Any], description: str) -> None:
        if not callable(fn):
            raise TypeError("extraction rule must wrap a callable")
        self._fn = fn
        self.description = description

    def __call__(self, node: ContentNode) -> Any:
        return self._fn(node)

    def __repr__(self) -> str:
        return f"ExtractionRule({self.description})"


def is_valid_source(candidate: object) -> bool:
    """Return True only for values built as extraction rules.

    This is a capability check, not a shape check: plain functions, lambdas
    and other callables are never treated as sources.
    """
    return isinstance(candidate, ExtractionRule)


@overload
def extraction_rule(fn: Callable[[ContentNode], Any], /) -> ExtractionRule: ...
@overload
def extraction_rule(
    *, description: str | None = None
) -> Callable[[Callable[[ContentNode], Any]], ExtractionRule]: ...


def extraction_rule(
    fn: Callable[[ContentNode], Any] | None = None,
    /,
    *,
    description: str | None = None,
) -> ExtractionRule | Callable[[Callable[[ContentNode], Any]], ExtractionRule]:
    """Tag a function as an extraction rule.

    Usable bare (``@extraction_rule``) or with a description
    (``@extraction_rule(description="first link")``).
    """

    def _wrap(func: Callable[[ContentNode], Any]) -> ExtractionRule:
        label = description or getattr(func, "__name__", repr(func))
        return ExtractionRule(func, label)

    if fn is not None:
        return _wrap(fn)
    return _wrap


def parse_content_tree(raw_content: str) -> BeautifulSoup:
    """Parse region content into the tree extraction rules run against."""
    return BeautifulSoup(raw_content, "html.parser")


def _check_selector(selector: str | None) -> str | None:
    # Invalid selectors fail here, when the block type is declared.
    if selector is not None:
        try:
            BeautifulSoup("", "html.parser").select_one(selector)
        except Exception as e:
            raise ValueError(f"Invalid CSS selector {selector!r}: {e}") from e
    return selector


def _match(node: ContentNode, selector: str | None) -> ContentNode | None:
    if selector is None:
        return node
    return node.select_one(selector)


def html(selector: str | None = None) -> ExtractionRule:
    """Inner markup of the first element matching `selector` (or of the root)."""
    _check_selector(selector)

    def _html(node: ContentNode) -> str | None:
        match = _match(node, selector)
        return None if match is None else match.decode_contents()

    return ExtractionRule(_html, f"html({selector!r})")


def text(selector: str | None = None) -> ExtractionRule:
    """Text content of the first element matching `selector` (or of the root)."""
    _check_selector(selector)

    def _text(node: ContentNode) -> str | None:
        match = _match(node, selector)
        return None if match is None else match.get_text()

    return ExtractionRule(_text, f"text({selector!r})")


def attr(selector: str | None, name: str) -> ExtractionRule:
    """Value of attribute `name` on the first element matching `selector`.

    Multi-valued attributes such as ``class`` are joined with single spaces.
    """
    _check_selector(selector)

    def _attr(node: ContentNode) -> str | None:
        match = _match(node, selector)
        if match is None:
            return None
        value = match.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    return ExtractionRule(_attr, f"attr({selector!r}, {name!r})")


def query(
    selector: str,
    rule: ExtractionRule | Mapping[str, ExtractionRule],
) -> ExtractionRule:
    """Apply `rule` to every element matching `selector`, in document order.

    `rule` may be a single extraction rule, giving a list of values, or a
    mapping of rules, giving a list of dicts.
    """
    _check_selector(selector)
    if isinstance(rule, Mapping):
        for key, inner in rule.items():
            if not is_valid_source(inner):
                raise TypeError(f"query rule {key!r} is not an extraction rule")
    elif not is_valid_source(rule):
        raise TypeError("query rule is not an extraction rule")

    def _apply(element: ContentNode) -> Any:
        if isinstance(rule, Mapping):
            return {
                key: value
                for key, inner in rule.items()
                if (value := inner(element)) is not None
            }
        return rule(element)

    def _query(node: ContentNode) -> list[Any]:
        return [_apply(element) for element in node.select(selector)]

    return ExtractionRule(_query, f"query({selector!r})")
