"""
Byte Scanner Module

Exact byte-pattern search over an in-memory buffer, plus bounds-checked
little-endian integer reads used by the field-level extractors.
"""

import struct
from typing import Optional, Sequence, Tuple

NOT_FOUND = -1


def find(buffer: bytes, pattern: bytes, start: int = 0, end: Optional[int] = None) -> int:
    """
    Find the leftmost occurrence of a pattern starting inside [start, end).

    The window end is clamped so that a match never extends past the buffer.

    Args:
        buffer: Bytes to search
        pattern: Exact byte sequence to look for
        start: First candidate offset
        end: Candidate offsets must be below this (defaults to the buffer length)

    Returns:
        Offset of the match, or NOT_FOUND
    """
    size = len(pattern)
    if size == 0:
        return NOT_FOUND

    start = max(0, start)
    last_start = len(buffer) - size + 1
    if end is None or end > last_start:
        end = last_start
    if start >= end:
        return NOT_FOUND

    # bytes.find needs the whole match inside the slice
    return buffer.find(pattern, start, end + size - 1)


def find_any(buffer: bytes, patterns: Sequence[bytes], start: int = 0,
             end: Optional[int] = None) -> Tuple[int, Optional[bytes]]:
    """
    Find the leftmost occurrence of any of several patterns.

    Ties at the same offset go to the pattern listed first.

    Returns:
        Tuple of (offset, pattern), or (NOT_FOUND, None)
    """
    best_offset = NOT_FOUND
    best_pattern = None
    for pattern in patterns:
        # Nothing past the current best can win
        window_end = end if best_offset == NOT_FOUND else best_offset
        offset = find(buffer, pattern, start, window_end)
        if offset != NOT_FOUND:
            best_offset = offset
            best_pattern = pattern
    return best_offset, best_pattern


def read_int32_le(buffer: bytes, offset: int) -> Optional[int]:
    """Read a signed 32-bit little-endian integer, or None if out of bounds."""
    if offset < 0 or offset + 4 > len(buffer):
        return None
    return struct.unpack_from('<i', buffer, offset)[0]


def read_int64_le(buffer: bytes, offset: int) -> Optional[int]:
    """Read a signed 64-bit little-endian integer, or None if out of bounds."""
    if offset < 0 or offset + 8 > len(buffer):
        return None
    return struct.unpack_from('<q', buffer, offset)[0]
