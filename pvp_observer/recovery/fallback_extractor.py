"""
Field-level fallback extraction.

When no complete document can be decoded, player lines are rebuilt straight
from the stat field names in the raw bytes. Values are read with a fixed layout:
the value of a field starts two bytes after the end of its name (the name's NUL
terminator and one type byte are skipped). Player names are recovered by
matching the text just before the "Kills" field against the known world names.

This path is lossy: it only emits players whose name, world,
kills and deaths could all be read.
"""

import logging
import re
from typing import List, Optional, Tuple

from pvp_observer.config.recovery_config import RecoveryConfig, SERVER_NAMES, STAT_FIELDS
from pvp_observer.recovery.byte_scanner import NOT_FOUND, find, read_int32_le, read_int64_le
from pvp_observer.recovery.records import MatchRecord, PlayerRecord
from pvp_observer.recovery.timestamps import parse_timestamp

logger = logging.getLogger('pvp_observer.recovery')

KILLS = STAT_FIELDS['kills'].encode('utf-8')
DEATHS = STAT_FIELDS['deaths'].encode('utf-8')
ASSISTS = STAT_FIELDS['assists'].encode('utf-8')
DAMAGE = STAT_FIELDS['damage'].encode('utf-8')
MATCH_START_TIME = b'MatchStartTime'
PLAYER_SCOREBOARDS = b'PlayerScoreboards'

# One pattern per world, tried in table order
SERVER_PATTERNS = [
    re.compile(rf"([A-Za-z']+)\s+({re.escape(server)})", re.IGNORECASE)
    for server in SERVER_NAMES
]


def field_value_offset(field_offset: int, field_name: bytes) -> int:
    """Offset of a field's value under the fixed name + NUL + type byte layout."""
    return field_offset + len(field_name) + 2


def read_int32_at_field(buffer: bytes, field_offset: int, field_name: bytes) -> Optional[int]:
    return read_int32_le(buffer, field_value_offset(field_offset, field_name))


def read_int64_at_field(buffer: bytes, field_offset: int, field_name: bytes) -> Optional[int]:
    return read_int64_le(buffer, field_value_offset(field_offset, field_name))


def extract_player_name(buffer: bytes, field_offset: int) -> Optional[Tuple[str, str]]:
    """
    Recover "<name> <world>" from the bytes preceding a stat field.

    Args:
        buffer: Whole input buffer
        field_offset: Offset of the "Kills" field name

    Returns:
        Tuple of (name, server), or None if no known world name matches
    """
    search_start = max(0, field_offset - RecoveryConfig.NAME_LOOKBACK)
    text = bytes(buffer[search_start:field_offset]).decode('utf-8', errors='replace')

    # First world in table order wins, even if another world appears closer to the field
    for pattern in SERVER_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1), match.group(2)

    return None


def bucket_key(offset: int) -> int:
    """Coarse key used to process each scoreboard entry only once."""
    return (offset // RecoveryConfig.BUCKET_SIZE) * RecoveryConfig.BUCKET_SIZE


def extract_players(buffer: bytes, region_start: int, region_end: Optional[int] = None) -> List[PlayerRecord]:
    """
    Rebuild player records from stat fields inside a region.

    Args:
        buffer: Whole input buffer
        region_start: First offset searched for "Kills"
        region_end: End of the region (clamped to REGION_SPAN bytes and the buffer)

    Returns:
        Up to MAX_PLAYERS_PER_MATCH players in ascending "Kills" offset order
    """
    region_start = max(0, region_start)
    limit = min(len(buffer), region_start + RecoveryConfig.REGION_SPAN)
    end = limit if region_end is None else min(region_end, limit)

    players = []
    seen_buckets = set()
    pos = region_start

    while pos < end and len(players) < RecoveryConfig.MAX_PLAYERS_PER_MATCH:
        kills_pos = find(buffer, KILLS, pos, end)
        if kills_pos == NOT_FOUND:
            break

        region_key = bucket_key(kills_pos)
        if region_key in seen_buckets:
            pos = kills_pos + RecoveryConfig.KILLS_SKIP
            continue
        seen_buckets.add(region_key)
        pos = kills_pos + RecoveryConfig.RECORD_SKIP

        companion_end = kills_pos + RecoveryConfig.COMPANION_WINDOW
        deaths_pos = find(buffer, DEATHS, kills_pos, companion_end)
        assists_pos = find(buffer, ASSISTS, kills_pos, companion_end)
        if deaths_pos == NOT_FOUND or assists_pos == NOT_FOUND:
            continue

        kills = read_int32_at_field(buffer, kills_pos, KILLS)
        deaths = read_int32_at_field(buffer, deaths_pos, DEATHS)
        assists = read_int32_at_field(buffer, assists_pos, ASSISTS)
        if kills is None or deaths is None or assists is None:
            continue

        damage = 0
        damage_pos = find(buffer, DAMAGE, kills_pos, kills_pos + RecoveryConfig.DAMAGE_WINDOW)
        if damage_pos != NOT_FOUND:
            damage = read_int64_at_field(buffer, damage_pos, DAMAGE) or 0

        player_name = extract_player_name(buffer, kills_pos)
        if player_name is None or kills < 0 or deaths < 0:
            continue

        name, server = player_name
        players.append(PlayerRecord(
            name=name,
            server=server,
            kills=kills,
            deaths=deaths,
            assists=max(0, assists),
            damage=max(0, damage),
        ))

    if len(players) >= RecoveryConfig.MAX_PLAYERS_PER_MATCH:
        logger.debug(f"Player cap reached in region starting at {region_start}")

    return players


def extract_single_match(buffer: bytes, time_pos: int, scoreboard_pos: int) -> Optional[MatchRecord]:
    """Rebuild one match from its MatchStartTime and PlayerScoreboards field offsets."""
    millis = read_int64_at_field(buffer, time_pos, MATCH_START_TIME)
    players = extract_players(buffer, scoreboard_pos)
    if not players:
        return None

    return MatchRecord(
        start_time=parse_timestamp(millis),
        players=players,
        extracted=True,
    )


def extract_matches_from_binary(buffer: bytes) -> List[MatchRecord]:
    """
    Rebuild matches from raw field markers, without decoding any document.

    Each MatchStartTime hit is paired with a PlayerScoreboards hit close to it;
    players are then extracted field by field from the scoreboard onwards.

    Returns:
        Up to MAX_MATCHES matches that have at least one player
    """
    matches = []
    search_pos = 0

    while search_pos < len(buffer) and len(matches) < RecoveryConfig.MAX_MATCHES:
        time_pos = find(buffer, MATCH_START_TIME, search_pos)
        if time_pos == NOT_FOUND:
            break

        scoreboard_pos = find(
            buffer,
            PLAYER_SCOREBOARDS,
            max(0, time_pos - RecoveryConfig.SCOREBOARD_LOOKBEHIND),
            time_pos + RecoveryConfig.SCOREBOARD_LOOKAHEAD
        )

        if scoreboard_pos != NOT_FOUND:
            match = extract_single_match(buffer, time_pos, scoreboard_pos)
            if match is not None:
                matches.append(match)

        search_pos = time_pos + RecoveryConfig.MATCH_SKIP

    logger.info(f"Fallback extraction rebuilt {len(matches)} matches")
    return matches
