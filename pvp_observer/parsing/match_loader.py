"""
Match Loader

Loads matches from a database file or a JSON export and picks the right parser
for each. Coordinates input acquisition with LiteDBParser and JsonDataParser.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from pvp_observer.parsing.json_normalizer import JsonDataParser
from pvp_observer.parsing.loader import DataLoadError, load_buffer, source_name
from pvp_observer.recovery.litedb_parser import LiteDBParser, ParseResult
from pvp_observer.recovery.records import MatchRecord

logger = logging.getLogger('pvp_observer.parsing')

EXPORT_HINT = (
    "Could not recover matches from the database file directly. "
    "Export it to JSON and load the JSON file instead."
)


@dataclass
class LoadResult:
    """Result of loading matches from one source."""
    success: bool
    source_path: str
    source_type: str  # 'json' or 'litedb'
    matches: List[MatchRecord] = field(default_factory=list)
    parse_result: Optional[ParseResult] = None
    error: Optional[str] = None

    @property
    def match_count(self) -> int:
        return len(self.matches)


class MatchLoader:
    """
    Load matches from a file or URL.

    Example:
        >>> loader = MatchLoader()
        >>> result = loader.load('./data.db')
        >>> if result.success:
        ...     print(f"Loaded {result.match_count} matches")
        ... else:
        ...     print(result.error)
    """

    def __init__(self,
                 litedb_parser: Optional[LiteDBParser] = None,
                 json_parser: Optional[JsonDataParser] = None):
        self.litedb_parser = litedb_parser or LiteDBParser()
        self.json_parser = json_parser or JsonDataParser()

    def load(self, source: Union[str, Path]) -> LoadResult:
        """
        Load matches, choosing the parser from the file extension.

        Args:
            source: Path or URL of a .json export or a LiteDB file

        Returns:
            LoadResult with matches or a diagnostic message
        """
        source_path = str(source)
        is_json = source_name(source).lower().endswith('.json')
        source_type = 'json' if is_json else 'litedb'

        try:
            data = load_buffer(source)
        except DataLoadError as e:
            logger.error(f"Failed to load {source_path}: {e}")
            return LoadResult(
                success=False,
                source_path=source_path,
                source_type=source_type,
                error=str(e)
            )

        if is_json:
            parse_result = self.json_parser.parse(data)
        else:
            parse_result = self.litedb_parser.parse(data)

        if not parse_result.success:
            return LoadResult(
                success=False,
                source_path=source_path,
                source_type=source_type,
                parse_result=parse_result,
                error=parse_result.error
            )

        if not is_json and parse_result.match_count == 0:
            return LoadResult(
                success=False,
                source_path=source_path,
                source_type=source_type,
                parse_result=parse_result,
                error=EXPORT_HINT
            )

        return LoadResult(
            success=True,
            source_path=source_path,
            source_type=source_type,
            matches=parse_result.matches,
            parse_result=parse_result
        )
