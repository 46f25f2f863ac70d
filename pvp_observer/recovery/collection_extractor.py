"""
Collection extraction: scan -> locate -> decode -> validate -> emit.

Walks the whole buffer looking for marker field names, maps each hit back to a
candidate document start, decodes it and keeps it only if it passes the marker
check. Failed candidates resync one byte past the marker that produced them, so
every iteration moves the cursor forward.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.boundary import locate_document_start
from pvp_observer.recovery.byte_scanner import NOT_FOUND, find_any
from pvp_observer.recovery.document_decoder import Document, decode_document, is_valid_match_document

logger = logging.getLogger('pvp_observer.recovery')


@dataclass
class ExtractionStats:
    """Counters for one extraction run."""
    markers_seen: int = 0
    emitted: int = 0
    decode_failures: int = 0
    validation_failures: int = 0
    overlaps: int = 0
    cap_reached: bool = False


def extract_documents(
    buffer: bytes,
    markers: Optional[Sequence[bytes]] = None,
    max_documents: int = RecoveryConfig.MAX_DOCUMENTS,
    stats: Optional[ExtractionStats] = None
) -> List[Document]:
    """
    Recover every valid match document from a buffer.

    Args:
        buffer: Whole input buffer
        markers: Byte patterns used to find candidate documents
                 (defaults to RecoveryConfig.marker_patterns())
        max_documents: Stop after this many documents have been emitted
        stats: Optional counters filled in during the run

    Returns:
        Documents in strictly increasing start-offset order
    """
    if markers is None:
        markers = RecoveryConfig.marker_patterns()
    if stats is None:
        stats = ExtractionStats()

    documents = []
    offset = 0
    last_end = 0

    while offset < len(buffer):
        if len(documents) >= max_documents:
            stats.cap_reached = True
            logger.debug(f"Document cap of {max_documents} reached at offset {offset}")
            break

        # Searching
        marker_offset, _ = find_any(buffer, markers, offset)
        if marker_offset == NOT_FOUND:
            break
        stats.markers_seen += 1

        # Locating, Decoding
        start = locate_document_start(buffer, marker_offset)
        document = decode_document(buffer, start)

        # Validating
        if document is None:
            stats.decode_failures += 1
        elif not is_valid_match_document(document):
            stats.validation_failures += 1
        elif start < last_end:
            # Candidate overlaps a document that was already emitted
            stats.overlaps += 1
        else:
            # Emitting
            documents.append(document)
            stats.emitted += 1
            last_end = document.end
            offset = max(document.end, marker_offset + 1)
            continue

        # Skipping
        offset = marker_offset + 1

    logger.debug(
        f"Extraction finished: {stats.emitted} documents from {stats.markers_seen} markers "
        f"({stats.decode_failures} undecodable, {stats.validation_failures} invalid)"
    )
    return documents
