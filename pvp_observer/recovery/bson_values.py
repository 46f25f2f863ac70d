"""
BSON Value Decoding

Decodes a single typed field value at a cursor inside a document. Every read
is checked against the end of the enclosing document; a read that would cross
it raises DecodeOverrun, which the document decoder turns into an invalid result.
"""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Tuple

from pvp_observer.recovery.timestamps import parse_timestamp


class DecodeOverrun(Exception):
    """A field or length would read past the end of its document or buffer."""


class BsonType(IntEnum):
    """Type tags understood by the decoder."""
    DOUBLE = 0x01
    STRING = 0x02
    DOCUMENT = 0x03
    ARRAY = 0x04
    BOOLEAN = 0x08
    DATETIME = 0x09
    NULL = 0x0A
    INT32 = 0x10
    INT64 = 0x12
    UNRECOGNIZED = 0xFF


FIXED_WIDTHS = {
    BsonType.DOUBLE: 8,
    BsonType.BOOLEAN: 1,
    BsonType.DATETIME: 8,
    BsonType.NULL: 0,
    BsonType.INT32: 4,
    BsonType.INT64: 8,
}

KNOWN_TAGS = {int(t) for t in BsonType if t is not BsonType.UNRECOGNIZED}


@dataclass(frozen=True)
class DecodedValue:
    """
    A decoded field value tagged with its type.

    DOCUMENT and ARRAY carry a Document; arrays keep their positional keys but
    callers read them in order. DATETIME carries milliseconds since the epoch.
    UNRECOGNIZED carries None and remembers the tag it was read from.
    """
    type: BsonType
    value: Any
    raw_tag: Optional[int] = field(default=None, compare=False)

    @property
    def is_document(self) -> bool:
        return self.type in (BsonType.DOCUMENT, BsonType.ARRAY)

    def to_python(self) -> Any:
        """Convert to plain Python values (dict, list, datetime, ...)."""
        if self.type == BsonType.DOCUMENT:
            return self.value.to_dict()
        if self.type == BsonType.ARRAY:
            return [item.to_python() for item in self.value.fields.values()]
        if self.type == BsonType.DATETIME:
            return parse_timestamp(self.value)
        return self.value


def _require(pos: int, width: int, doc_end: int) -> None:
    if pos < 0 or pos + width > doc_end:
        raise DecodeOverrun(f"{width} bytes at {pos} cross document end {doc_end}")


def decode_value(buffer: bytes, type_tag: int, pos: int, doc_end: int,
                 depth: int = 0) -> Tuple[DecodedValue, int]:
    """
    Decode one value and advance the cursor.

    Args:
        buffer: Whole input buffer
        type_tag: Type byte that preceded the field name
        pos: Offset of the first value byte
        doc_end: Offset of the enclosing document's terminator; no value may reach it
        depth: Nesting depth of the enclosing document

    Returns:
        Tuple of (DecodedValue, new cursor position)

    Raises:
        DecodeOverrun: If the value does not fit inside the document
    """
    if type_tag not in KNOWN_TAGS:
        # Lossy: the real width is unknown, so the rest of this document may be misread
        return DecodedValue(BsonType.UNRECOGNIZED, None, raw_tag=type_tag), pos + 1

    value_type = BsonType(type_tag)

    if value_type in FIXED_WIDTHS:
        width = FIXED_WIDTHS[value_type]
        _require(pos, width, doc_end)

        if value_type == BsonType.DOUBLE:
            value = struct.unpack_from('<d', buffer, pos)[0]
        elif value_type == BsonType.BOOLEAN:
            value = buffer[pos] == 1
        elif value_type == BsonType.INT32:
            value = struct.unpack_from('<i', buffer, pos)[0]
        elif value_type in (BsonType.INT64, BsonType.DATETIME):
            value = struct.unpack_from('<q', buffer, pos)[0]
        else:
            value = None

        return DecodedValue(value_type, value), pos + width

    if value_type == BsonType.STRING:
        _require(pos, 4, doc_end)
        str_len = struct.unpack_from('<i', buffer, pos)[0]
        if str_len < 1:
            raise DecodeOverrun(f"Invalid string length {str_len} at {pos}")
        _require(pos + 4, str_len, doc_end)
        text = bytes(buffer[pos + 4:pos + 4 + str_len - 1]).decode('utf-8', errors='replace')
        return DecodedValue(value_type, text), pos + 4 + str_len

    # Embedded document or array
    from pvp_observer.recovery.document_decoder import decode_embedded
    document = decode_embedded(buffer, pos, doc_end, depth + 1)
    return DecodedValue(value_type, document), pos + document.length
