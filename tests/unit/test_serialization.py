"""Serialization of blocks back into delimited markup."""

import pytest

from block_parser.core.sources import extraction_rule
from block_parser.core.types import AttributeType, Block, BlockType, FieldSpec
from block_parser.exceptions import BlockParserError
from block_parser.grammar import tokenize
from block_parser.serialization import (
    get_comment_attributes,
    get_save_content,
    serialize,
    serialize_block,
)

pytestmark = pytest.mark.unit


def test_sourced_and_default_values_stay_out_of_the_delimiter(registry):
    block = Block(
        name="test/note", attributes={"body": "hi", "tone": "info"}, is_valid=True
    )
    assert serialize_block(block, registry) == (
        '<!-- block:test/note --><aside data-tone="info">hi</aside><!-- /block -->'
    )


def test_non_default_inline_values_are_written_in_schema_order(registry, note_type):
    attributes = {"pinned": True, "tone": "warn", "body": "hi"}
    assert get_comment_attributes(note_type, attributes) == {
        "tone": "warn",
        "pinned": True,
    }
    block = Block(name="test/note", attributes=attributes, is_valid=True)
    assert serialize_block(block, registry).startswith(
        '<!-- block:test/note {"tone":"warn","pinned":true} -->'
    )


def test_attribute_json_cannot_close_the_comment(registry):
    block = Block(name="test/note", attributes={"body": "x", "tone": "a-->b<c>"})
    serialized = serialize_block(block, registry)
    opener = serialized.split("-->", 1)[0]
    assert "<c>" not in opener
    assert "\\u002d\\u002d" in opener

    (node,) = tokenize(serialized)
    assert node.attrs["tone"] == "a-->b<c>"


def test_invalid_block_writes_original_content(registry):
    block = Block(
        name="test/note",
        attributes={"body": "changed"},
        is_valid=False,
        original_content="<aside>original</aside>",
    )
    assert serialize_block(block, registry) == (
        "<!-- block:test/note --><aside>original</aside><!-- /block -->"
    )


def test_unknown_type_handler_is_written_without_delimiters(registry):
    block = Block(name="test/freeform", attributes={"content": "<p>loose</p>"})
    assert serialize_block(block, registry) == "<p>loose</p>"


def test_empty_content_is_written_as_void_block(registry):
    registry.register(
        BlockType(
            name="test/spacer",
            save=lambda attributes: "",
            attributes={"height": FieldSpec(type=AttributeType.INTEGER, default=20)},
        )
    )
    assert serialize_block(Block(name="test/spacer", attributes={"height": 40}), registry) == (
        '<!-- block:test/spacer {"height":40} /-->'
    )
    assert serialize_block(Block(name="test/spacer", attributes={"height": 20}), registry) == (
        "<!-- block:test/spacer /-->"
    )


def test_unregistered_block_cannot_be_serialized(registry):
    with pytest.raises(BlockParserError, match="unregistered"):
        serialize_block(Block(name="test/unknown"), registry)


def test_save_must_return_a_string():
    block_type = BlockType(name="test/broken", save=lambda attributes: None)
    with pytest.raises(TypeError, match="expected str"):
        get_save_content(block_type, {})


def test_save_receives_a_mutable_copy():
    seen = []
    block_type = BlockType(
        name="test/spy",
        save=lambda attributes: seen.append(type(attributes)) or "",
    )
    get_save_content(block_type, Block(name="test/spy", attributes={"a": 1}).attributes)
    assert seen == [dict]


def test_document_joins_blocks_with_blank_lines(registry):
    blocks = [
        Block(name="test/freeform", attributes={"content": "<p>intro</p>"}),
        Block(name="test/note", attributes={"body": "hi", "tone": "info"}),
    ]
    assert serialize(blocks, registry) == (
        "<p>intro</p>\n\n"
        '<!-- block:test/note --><aside data-tone="info">hi</aside><!-- /block -->'
    )


def test_adjacent_handler_blocks_keep_a_boundary(registry):
    blocks = [
        Block(name="test/freeform", attributes={"content": "x"}),
        Block(name="test/freeform", attributes={"content": "y"}),
        Block(name="test/freeform", attributes={"content": "z"}),
        Block(name="test/note", attributes={"body": "hi", "tone": "info"}),
        Block(name="test/freeform", attributes={"content": "w"}),
    ]
    assert serialize(blocks, registry) == (
        "x\n\n"
        "<!-- block:test/freeform -->y<!-- /block -->\n\n"
        "z\n\n"
        '<!-- block:test/note --><aside data-tone="info">hi</aside><!-- /block -->\n\n'
        "w"
    )


def test_handler_block_can_be_delimited_explicitly(registry):
    block = Block(name="test/freeform", attributes={"content": "<p>loose</p>"})
    assert serialize_block(block, registry, delimit=True) == (
        "<!-- block:test/freeform --><p>loose</p><!-- /block -->"
    )


def test_sourced_value_missing_from_content_stays_in_delimiter(note_type):
    attributes = {"body": "kept", "tone": "info"}
    assert get_comment_attributes(note_type, attributes, "<p>no aside</p>") == {
        "body": "kept"
    }
    assert get_comment_attributes(note_type, attributes, "<aside>kept</aside>") == {}


def test_failing_rule_counts_as_unrecoverable():
    @extraction_rule
    def broken(node):
        raise LookupError("no figure")

    block_type = BlockType(
        name="test/figure",
        save=lambda attributes: "<figure></figure>",
        attributes={"caption": FieldSpec(type=AttributeType.STRING, source=broken)},
    )
    assert get_comment_attributes(block_type, {"caption": "Hi"}, "<figure></figure>") == {
        "caption": "Hi"
    }
