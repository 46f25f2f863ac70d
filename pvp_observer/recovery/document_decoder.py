"""
Document Decoder Module

Decodes one length-prefixed BSON document at a given offset. A document that
cannot be decoded completely is reported as invalid (None); partial results are
never returned.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from pvp_observer.config.recovery_config import RecoveryConfig, MARKER_FIELDS
from pvp_observer.recovery.bson_values import BsonType, DecodedValue, DecodeOverrun, decode_value
from pvp_observer.recovery.byte_scanner import read_int32_le

logger = logging.getLogger('pvp_observer.recovery')


@dataclass
class Document:
    """A decoded document: ordered field mapping plus its position in the buffer."""
    start: int
    length: int
    fields: Dict[str, DecodedValue] = field(default_factory=dict)
    unreliable: Set[str] = field(default_factory=set)  # Fields decoded after an unrecognized type tag

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def names(self) -> List[str]:
        return list(self.fields.keys())

    @property
    def is_desynchronized(self) -> bool:
        return bool(self.unreliable)

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        """Get a field as a plain Python value."""
        if name not in self.fields:
            return default
        return self.fields[name].to_python()

    def get_value(self, name: str) -> Optional[DecodedValue]:
        return self.fields.get(name)

    def is_reliable(self, name: str) -> bool:
        return name in self.fields and name not in self.unreliable

    def to_dict(self) -> Dict[str, Any]:
        return {name: value.to_python() for name, value in self.fields.items()}


def _decode(buffer: bytes, offset: int, limit: int, depth: int) -> Document:
    if depth > RecoveryConfig.MAX_NESTING_DEPTH:
        raise DecodeOverrun(f"Nesting deeper than {RecoveryConfig.MAX_NESTING_DEPTH} at {offset}")

    doc_length = read_int32_le(buffer, offset)
    if doc_length is None:
        raise DecodeOverrun(f"No length prefix at {offset}")

    # Smallest possible document is the length prefix plus the terminator
    if doc_length < 5 or doc_length > RecoveryConfig.MAX_DOC_SIZE:
        raise DecodeOverrun(f"Implausible document length {doc_length} at {offset}")

    if offset + doc_length > limit:
        raise DecodeOverrun(f"Document at {offset} ({doc_length} bytes) exceeds limit {limit}")

    end_pos = offset + doc_length - 1
    if buffer[end_pos] != 0:
        raise DecodeOverrun(f"Missing terminator at {end_pos}")

    document = Document(start=offset, length=doc_length)
    desynchronized = False
    pos = offset + 4

    while pos < end_pos:
        type_tag = buffer[pos]
        pos += 1
        if type_tag == 0:
            break

        name_end = buffer.find(b'\x00', pos, end_pos)
        if name_end == -1:
            raise DecodeOverrun(f"Unterminated field name at {pos}")
        name = bytes(buffer[pos:name_end]).decode('utf-8', errors='replace')
        pos = name_end + 1

        value, pos = decode_value(buffer, type_tag, pos, end_pos, depth)

        if value.type == BsonType.UNRECOGNIZED:
            if not desynchronized:
                logger.debug(f"Unrecognized type tag 0x{type_tag:02x} for '{name}' at {name_end}")
            desynchronized = True

        # Last write wins for duplicate names
        document.fields[name] = value
        if desynchronized:
            document.unreliable.add(name)
        else:
            document.unreliable.discard(name)

    return document


def decode_document(buffer: bytes, offset: int) -> Optional[Document]:
    """
    Decode a top-level document.

    Args:
        buffer: Whole input buffer
        offset: Offset of the 4-byte length prefix

    Returns:
        Document, or None if the bytes at offset are not a complete document
    """
    if offset < 0 or offset >= len(buffer):
        return None

    try:
        return _decode(buffer, offset, len(buffer), 0)
    except DecodeOverrun as e:
        logger.debug(f"Invalid document at {offset}: {e}")
        return None


def decode_embedded(buffer: bytes, offset: int, limit: int, depth: int) -> Document:
    """
    Decode a document nested inside another one.

    Raises:
        DecodeOverrun: If the nested document does not fit before limit
    """
    return _decode(buffer, offset, limit, depth)


def is_valid_match_document(document: Optional[Document]) -> bool:
    """Check that a decoded document carries at least one match marker field."""
    if document is None:
        return False
    return any(name in document.fields for name in MARKER_FIELDS)
