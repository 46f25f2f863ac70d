"""
Recovery Module - Index-free document recovery from LiteDB files

Recovers match and player records from a raw LiteDB data file using only byte
patterns inside the file. The page index is never consulted.

Components, leaves first:
    byte_scanner          - exact byte-pattern search and bounded integer reads
    bson_values           - typed value decoding at a cursor
    document_decoder      - length-prefixed document decoding
    boundary              - backward search for a document start near a marker
    collection_extractor  - scan -> locate -> decode -> validate -> emit
    fallback_extractor    - field-level player reconstruction
    timestamps            - match time normalization
    records               - MatchRecord / PlayerRecord projections
    litedb_parser         - entry point

## Quick Start
```python
from pathlib import Path
from pvp_observer.recovery import LiteDBParser

result = LiteDBParser().parse(Path('./data.db').read_bytes())
for match in result.collections['flmatch']:
    print(match.start_time, len(match.players))
```
"""

from pvp_observer.recovery.byte_scanner import NOT_FOUND, find, find_any
from pvp_observer.recovery.bson_values import BsonType, DecodedValue, DecodeOverrun, decode_value
from pvp_observer.recovery.document_decoder import Document, decode_document, is_valid_match_document
from pvp_observer.recovery.boundary import locate_document_start
from pvp_observer.recovery.collection_extractor import ExtractionStats, extract_documents
from pvp_observer.recovery.fallback_extractor import extract_players, extract_matches_from_binary
from pvp_observer.recovery.timestamps import EPOCH, parse_timestamp
from pvp_observer.recovery.records import (
    MatchRecord,
    PlayerRecord,
    match_from_document,
    normalize_team,
    split_player_key
)
from pvp_observer.recovery.litedb_parser import LiteDBParser, ParseResult, FileHeader

__all__ = [
    # Scanning and decoding
    'NOT_FOUND',
    'find',
    'find_any',
    'BsonType',
    'DecodedValue',
    'DecodeOverrun',
    'decode_value',
    'Document',
    'decode_document',
    'is_valid_match_document',

    # Recovery strategies
    'locate_document_start',
    'ExtractionStats',
    'extract_documents',
    'extract_players',
    'extract_matches_from_binary',

    # Records
    'EPOCH',
    'parse_timestamp',
    'MatchRecord',
    'PlayerRecord',
    'match_from_document',
    'normalize_team',
    'split_player_key',

    # Entry point
    'LiteDBParser',
    'ParseResult',
    'FileHeader',
]
