"""
LiteDB Parser Module

Recovers match collections from a LiteDB v5 data file without reading its
page index. Documents are found by scanning for marker field names and decoded
in place; when that yields no usable matches, matches are rebuilt field by field.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.collection_extractor import ExtractionStats, extract_documents
from pvp_observer.recovery.fallback_extractor import extract_matches_from_binary
from pvp_observer.recovery.records import MatchRecord, match_from_document

logger = logging.getLogger('pvp_observer.recovery')

# LiteDB v5 header page layout
HEADER_INFO = b'** This is a LiteDB file **'
HEADER_INFO_OFFSET = 32
FILE_VERSION_OFFSET = 59
FILE_VERSION = 2


@dataclass
class FileHeader:
    """Signature information read from the start of the file."""
    signature: str
    file_size: int
    is_litedb: bool
    file_version: Optional[int] = None


@dataclass
class ParseResult:
    """Result of parsing a database file or a JSON export."""
    success: bool
    collections: Dict[str, List[MatchRecord]]
    match_count: int
    header: Optional[FileHeader] = None
    used_fallback: bool = False
    extraction_stats: Optional[ExtractionStats] = None
    error: Optional[str] = None

    @property
    def matches(self) -> List[MatchRecord]:
        return self.collections.get(RecoveryConfig.DEFAULT_COLLECTION, [])


class LiteDBParser:
    """
    Index-free parser for LiteDB data files.

    Each call to parse() is independent; no state is kept between calls.

    Example:
        >>> parser = LiteDBParser()
        >>> result = parser.parse(Path('data.db').read_bytes())
        >>> for match in result.collections['flmatch']:
        ...     print(match.start_time, len(match.players))
    """

    def __init__(self, collection_name: str = RecoveryConfig.DEFAULT_COLLECTION):
        """
        Initialize the parser.

        Args:
            collection_name: Collection to recover

        Raises:
            ValueError: If the collection is not supported
        """
        RecoveryConfig.validate_collection(collection_name)
        self.collection_name = collection_name

    def parse(self, buffer: Any) -> ParseResult:
        """
        Parse a whole database file held in memory.

        Args:
            buffer: File contents (bytes, bytearray or memoryview)

        Returns:
            ParseResult; success is False only if the buffer itself is unusable
        """
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            return ParseResult(
                success=False,
                collections={},
                match_count=0,
                error=f"Expected a bytes-like buffer, got {type(buffer).__name__}"
            )

        data = bytes(buffer)
        header = self.read_header(data)
        if not header.is_litedb:
            logger.warning(
                f"Unexpected file signature {header.signature!r} "
                f"({header.file_size} bytes), scanning anyway"
            )

        stats = ExtractionStats()
        matches = self.find_collection(data, stats)

        used_fallback = False
        if not any(match.players for match in matches):
            logger.info("No complete match documents decoded, falling back to field extraction")
            extracted = extract_matches_from_binary(data)
            if extracted:
                matches = extracted
                used_fallback = True

        logger.info(f"Recovered {len(matches)} matches from {header.file_size} bytes")

        return ParseResult(
            success=True,
            collections={self.collection_name: matches},
            match_count=len(matches),
            header=header,
            used_fallback=used_fallback,
            extraction_stats=stats
        )

    def read_header(self, data: bytes) -> FileHeader:
        """
        Read the file signature.

        LiteDB v5 stores a fixed text at offset 32 of the header page and the
        file format version at offset 59.
        """
        signature = data[:4].decode('latin-1')
        info_end = HEADER_INFO_OFFSET + len(HEADER_INFO)
        is_litedb = data[HEADER_INFO_OFFSET:info_end] == HEADER_INFO

        file_version = None
        if len(data) > FILE_VERSION_OFFSET:
            file_version = data[FILE_VERSION_OFFSET]
        if is_litedb and file_version != FILE_VERSION:
            logger.warning(f"LiteDB file version {file_version}, expected {FILE_VERSION}")

        return FileHeader(
            signature=signature,
            file_size=len(data),
            is_litedb=is_litedb,
            file_version=file_version
        )

    def find_collection(self, data: bytes, stats: Optional[ExtractionStats] = None) -> List[MatchRecord]:
        """
        Decode every match document in the buffer and project it into a MatchRecord.

        Args:
            data: File contents
            stats: Optional counters filled in during extraction

        Returns:
            Matches in file order
        """
        documents = extract_documents(
            data,
            RecoveryConfig.marker_patterns(),
            RecoveryConfig.MAX_DOCUMENTS,
            stats
        )
        return [match_from_document(document) for document in documents]
