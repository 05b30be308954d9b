"""Core data types that flow through the parser.

Region nodes come out of the grammar, block types come out of the registry and
blocks come out of the materializer. All of them are immutable once built;
a block only changes by being replaced with its validated copy.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import dataclasses
from enum import StrEnum
from types import MappingProxyType
import typing

T = typing.TypeVar("T")


def _freeze_mapping(m: Mapping[str, T] | None) -> Mapping[str, T]:
    """Return an immutable mapping view, empty when `m` is None."""
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m or {}))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


class _Missing:
    """Marker for a field spec without a declared default."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: typing.Final = _Missing()


class AttributeType(StrEnum):
    """Declared attribute types understood by the coercion pass."""

    STRING = "string"
    BOOLEAN = "boolean"
    OBJECT = "object"
    NULL = "null"
    ARRAY = "array"
    INTEGER = "integer"
    NUMBER = "number"


@dataclasses.dataclass(frozen=True, slots=True)
class RegionNode:
    """One delimited segment of a document, as emitted by the grammar.

    Attributes:
        name: Declared block name, or None for freeform text between blocks.
        raw_content: Untrimmed text between the region delimiters.
        attrs: Inline attributes parsed from the opening delimiter.
    """

    name: str | None
    raw_content: str
    attrs: Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate types and freeze the inline attributes."""
        _require(
            condition=self.name is None or isinstance(self.name, str),
            message="must be str or None",
            field_name="name",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.raw_content, str),
            message="must be str",
            field_name="raw_content",
            exc=TypeError,
        )
        object.__setattr__(self, "attrs", _freeze_mapping(self.attrs))


@dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declaration of a single block attribute.

    Attributes:
        type: One of the `AttributeType` values. Any other value, including
            None, disables coercion for the field.
        default: Value used when neither inline nor sourced data assigns one.
            `MISSING` means the field has no default and is omitted instead.
        source: Optional extraction rule pulling the value out of content.
    """

    type: AttributeType | str | None = None
    default: typing.Any = MISSING
    source: typing.Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @classmethod
    def from_dict(cls, spec: Mapping[str, typing.Any]) -> FieldSpec:
        """Build a spec from the plain-dict form used in block type settings."""
        return cls(
            type=spec.get("type"),
            default=spec.get("default", MISSING),
            source=spec.get("source"),
        )


type AttributeSchema = Mapping[str, FieldSpec]


def _to_schema(
    attributes: Mapping[str, FieldSpec | Mapping[str, typing.Any]] | None,
) -> AttributeSchema:
    schema: dict[str, FieldSpec] = {}
    for key, spec in (attributes or {}).items():
        if isinstance(spec, FieldSpec):
            schema[key] = spec
        elif isinstance(spec, Mapping):
            schema[key] = FieldSpec.from_dict(spec)
        else:
            raise TypeError(
                f"attributes.{key}: must be a FieldSpec or mapping, got {type(spec).__name__}"
            )
    return MappingProxyType(schema)


@dataclasses.dataclass(frozen=True, slots=True)
class BlockType:
    """A registered block type: its attribute schema and its serializer.

    `save` renders resolved attributes back into block content. The round-trip
    validator compares that output to the original region content.
    """

    name: str
    save: Callable[[Mapping[str, typing.Any]], str]
    attributes: AttributeSchema = dataclasses.field(default_factory=dict)
    title: str | None = None

    def __post_init__(self) -> None:
        """Validate the serializer and normalize the attribute schema."""
        _require(
            condition=isinstance(self.name, str) and bool(self.name),
            message="must be a non-empty str",
            field_name="name",
            exc=TypeError,
        )
        _require(
            condition=callable(self.save),
            message="must be callable",
            field_name="save",
            exc=TypeError,
        )
        object.__setattr__(self, "attributes", _to_schema(self.attributes))


@dataclasses.dataclass(frozen=True, slots=True)
class Block:
    """A typed, attribute-bearing record resolved from one region.

    `is_valid` is None until the round-trip validator has run. An invalid
    block keeps the untouched region content in `original_content`; a valid
    or unvalidated block never carries it.
    """

    name: str
    attributes: Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    is_valid: bool | None = None
    original_content: str | None = None

    def __post_init__(self) -> None:
        """Freeze attributes and enforce the original-content invariant."""
        object.__setattr__(self, "attributes", _freeze_mapping(self.attributes))
        if self.is_valid is False:
            _require(
                condition=isinstance(self.original_content, str),
                message="must be set when the block is invalid",
                field_name="original_content",
            )
        else:
            _require(
                condition=self.original_content is None,
                message="must be absent unless the block is invalid",
                field_name="original_content",
            )

    def validated(self, *, is_valid: bool, original_content: str) -> Block:
        """Return a copy carrying the round-trip verdict.

        `original_content` is only kept when the verdict is negative.
        """
        return dataclasses.replace(
            self,
            is_valid=is_valid,
            original_content=None if is_valid else original_content,
        )
