"""
Boundary recovery: map a field found inside a document back to the document start.

There is no index to consult, so the search walks backwards from the marker and
accepts the first offset whose 4-byte length prefix and first type tag look
plausible. The result is the closest plausible start, not necessarily the true one;
the document decoder and the marker check decide whether it was right.
"""

import logging

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.byte_scanner import read_int32_le

logger = logging.getLogger('pvp_observer.recovery')


def is_plausible_start(buffer: bytes, offset: int) -> bool:
    """Check the length prefix and first type tag at a candidate document start."""
    if offset < 0 or offset + 5 > len(buffer):
        return False

    potential_length = read_int32_le(buffer, offset)
    if not RecoveryConfig.MIN_DOC_LENGTH < potential_length < RecoveryConfig.MAX_DOC_LENGTH:
        return False

    first_tag = buffer[offset + 4]
    return RecoveryConfig.MIN_TYPE_TAG <= first_tag <= RecoveryConfig.MAX_TYPE_TAG


def locate_document_start(buffer: bytes, marker_offset: int) -> int:
    """
    Find a plausible document start preceding a marker field.

    Args:
        buffer: Whole input buffer
        marker_offset: Offset of the marker field name inside the document

    Returns:
        Closest plausible start within BACKTRACK_WINDOW bytes before the marker,
        or marker_offset - FALLBACK_BACKOFF when there is none (may be negative)
    """
    lowest = max(0, marker_offset - RecoveryConfig.BACKTRACK_WINDOW)

    for offset in range(marker_offset - 1, lowest - 1, -1):
        if is_plausible_start(buffer, offset):
            return offset

    logger.debug(f"No plausible document start before marker at {marker_offset}, using fallback")
    return marker_offset - RecoveryConfig.FALLBACK_BACKOFF
