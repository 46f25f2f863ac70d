"""
JSON Normalizer Module

Normalizes pre-exported match data (one entry per match) into MatchRecords.
This path bypasses the binary recovery engine entirely.

Expected input:
    {"flmatch": [
        {"MatchStartTime": "...",
         "Players": [{"key": "Name Server", "kills": 3, "deaths": 1, "assists": 9,
                      "damage": 123456, "job": "...", "team": 1, "alliance": 1}]}
    ]}
"""

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Union

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.litedb_parser import ParseResult
from pvp_observer.recovery.records import MatchRecord, PlayerRecord, normalize_team, split_player_key
from pvp_observer.recovery.timestamps import parse_timestamp

logger = logging.getLogger('pvp_observer.parsing')


def _as_number(value: Any) -> Union[int, float]:
    """Numeric stat, or 0 for anything missing, non-numeric, non-finite or negative."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0.0, value) if math.isfinite(value) else 0
    return 0


def normalize_player(entry: Mapping[str, Any]) -> PlayerRecord:
    """Normalize one exported scoreboard line."""
    name, server = split_player_key(entry.get('key'))
    job = entry.get('job')

    known = {'key', 'kills', 'deaths', 'assists', 'damage', 'job', 'team', 'alliance'}
    extras = {k: v for k, v in entry.items() if k not in known}

    return PlayerRecord(
        name=name,
        server=server,
        kills=_as_number(entry.get('kills')),
        deaths=_as_number(entry.get('deaths')),
        assists=_as_number(entry.get('assists')),
        damage=_as_number(entry.get('damage')),
        job=job or None,
        team=normalize_team(entry.get('team'), entry.get('alliance')),
        extras=extras,
    )


def normalize_json_matches(entries: List[Mapping[str, Any]]) -> List[MatchRecord]:
    """
    Normalize exported match entries into MatchRecords.

    Args:
        entries: List of {MatchStartTime, Players: [...]} mappings

    Returns:
        List of MatchRecords in input order
    """
    matches = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping non-object match entry: {type(entry).__name__}")
            continue

        players = [
            normalize_player(player)
            for player in (entry.get('Players') or [])
            if isinstance(player, Mapping)
        ]
        extras = {k: v for k, v in entry.items() if k not in ('MatchStartTime', 'Players')}

        matches.append(MatchRecord(
            start_time=parse_timestamp(entry.get('MatchStartTime')),
            players=players,
            extras=extras,
        ))
    return matches


class JsonDataParser:
    """Parser for JSON exports of the match database."""

    def __init__(self, collection_name: str = RecoveryConfig.DEFAULT_COLLECTION):
        RecoveryConfig.validate_collection(collection_name)
        self.collection_name = collection_name

    def parse(self, json_data: Union[str, bytes, Dict[str, Any]]) -> ParseResult:
        """
        Parse exported JSON.

        Args:
            json_data: JSON text or an already decoded mapping

        Returns:
            ParseResult with normalized matches, or an error if the data has no match list
        """
        if isinstance(json_data, (str, bytes)):
            try:
                json_data = json.loads(json_data)
            except ValueError as e:
                return ParseResult(
                    success=False,
                    collections={},
                    match_count=0,
                    error=f"Invalid JSON: {e}"
                )

        entries = json_data.get(self.collection_name) if isinstance(json_data, Mapping) else None
        if not isinstance(entries, list):
            return ParseResult(
                success=False,
                collections={},
                match_count=0,
                error=f"Invalid JSON format: missing '{self.collection_name}' list"
            )

        matches = normalize_json_matches(entries)
        logger.info(f"Normalized {len(matches)} matches from JSON")

        return ParseResult(
            success=True,
            collections={self.collection_name: matches},
            match_count=len(matches)
        )
