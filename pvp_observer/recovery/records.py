"""
Match and player records.

Typed projections of decoded documents. Unknown fields are kept in `extras`
so nothing read from the file is silently dropped.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.bson_values import DecodedValue
from pvp_observer.recovery.document_decoder import Document
from pvp_observer.recovery.timestamps import EPOCH, parse_timestamp

logger = logging.getLogger('pvp_observer.recovery')

UNKNOWN = 'Unknown'

# Accepted spellings for each player attribute, in lookup order
PLAYER_FIELD_ALIASES = {
    'kills': ('Kills', 'kills'),
    'deaths': ('Deaths', 'deaths'),
    'assists': ('Assists', 'assists'),
    'damage': ('DamageDealt', 'Damage', 'damage'),
    'job': ('Job', 'ClassJob', 'job'),
    'team': ('Team', 'team'),
    'alliance': ('Alliance', 'alliance'),
    'name': ('Name', 'PlayerName', 'name'),
    'server': ('Server', 'HomeWorld', 'World', 'server'),
    'key': ('Key', 'key'),
}

STAT_ATTRIBUTES = ('kills', 'deaths', 'assists', 'damage')

PLAYER_LIST_FIELDS = ('PlayerScoreboards', 'Players')


@dataclass
class PlayerRecord:
    """One player's line on a match scoreboard."""
    name: str
    server: str
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    damage: int = 0
    job: Optional[str] = None
    team: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.name}@{self.server or UNKNOWN}"

    @property
    def kda(self) -> float:
        if self.deaths > 0:
            return (self.kills + self.assists) / self.deaths
        return float(self.kills + self.assists)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'server': self.server,
            'kills': self.kills,
            'deaths': self.deaths,
            'assists': self.assists,
            'damage': self.damage,
            'job': self.job,
            'team': self.team,
        }


@dataclass
class MatchRecord:
    """A recovered match with its scoreboard."""
    start_time: datetime = EPOCH
    players: List[PlayerRecord] = field(default_factory=list)
    extracted: bool = False         # True when rebuilt by field-level fallback extraction
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_start_time(self) -> bool:
        return self.start_time != EPOCH

    def to_dict(self) -> Dict[str, Any]:
        return {
            'MatchStartTime': self.start_time.isoformat(),
            'PlayerScoreboards': [player.to_dict() for player in self.players],
        }


def split_player_key(key: Optional[str]) -> Tuple[str, str]:
    """
    Split a "<name> <server>" key.

    The last whitespace-separated token is the server; everything before it,
    joined by single spaces, is the name.

    Example:
        >>> split_player_key("Foo Bar Gungnir")
        ('Foo Bar', 'Gungnir')
    """
    parts = (key or '').split()
    if not parts:
        return UNKNOWN, UNKNOWN
    name = ' '.join(parts[:-1]) or parts[0]
    return name, parts[-1]


def normalize_team(team: Any, alliance: Any = None) -> Any:
    """
    Map a team code or English team name to its localized name.

    The numeric code is taken from `team`, falling back to `alliance`.
    Unrecognized values pass through unchanged; a missing team becomes "".
    """
    team_lookup = RecoveryConfig.team_lookup()

    code = None
    for candidate in (team, alliance):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            code = candidate
            break

    if code in team_lookup:
        return team_lookup[code]
    if isinstance(team, str) and team in team_lookup:
        return team_lookup[team]

    return team if team is not None else ''


def _lookup(document: Document, attribute: str) -> Tuple[Optional[str], Any]:
    for name in PLAYER_FIELD_ALIASES[attribute]:
        if name in document:
            return name, document.get(name)
    return None, None


def _as_count(value: Any) -> Optional[int]:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def player_from_document(document: Document) -> Optional[PlayerRecord]:
    """
    Project a scoreboard entry into a PlayerRecord.

    Returns:
        PlayerRecord, or None if a stat is unreliable, non-numeric or negative
    """
    found = {attribute: _lookup(document, attribute) for attribute in PLAYER_FIELD_ALIASES}
    used = {field_name for field_name, _ in found.values() if field_name is not None}

    stats = {}
    for attribute in STAT_ATTRIBUTES:
        field_name, value = found[attribute]
        if field_name is not None and not document.is_reliable(field_name):
            return None
        count = _as_count(value)
        if count is None or count < 0:
            return None
        stats[attribute] = count

    name = found['name'][1]
    server = found['server'][1]
    key = found['key'][1]
    if not name and isinstance(key, str):
        name, key_server = split_player_key(key)
        server = server or key_server

    job = found['job'][1]
    team = None
    if found['team'][0] is not None or found['alliance'][0] is not None:
        team = normalize_team(found['team'][1], found['alliance'][1]) or None

    extras = {
        field_name: value.to_python()
        for field_name, value in document.fields.items()
        if field_name not in used
    }

    return PlayerRecord(
        name=str(name) if name else UNKNOWN,
        server=str(server) if server else UNKNOWN,
        kills=stats['kills'],
        deaths=stats['deaths'],
        assists=stats['assists'],
        damage=stats['damage'],
        job=str(job) if job is not None else None,
        team=team,
        extras=extras,
    )


def _scoreboard_entries(value: DecodedValue) -> List[Document]:
    if not value.is_document:
        return []

    container = value.value
    if 'Kills' in container or 'kills' in container:
        # A single scoreboard entry stored directly
        return [container]

    if container.is_desynchronized:
        logger.debug(f"Skipping scoreboard entries decoded after an unrecognized tag: {sorted(container.unreliable)}")

    return [
        item.value
        for key, item in container.fields.items()
        if item.is_document and container.is_reliable(key)
    ]


def match_from_document(document: Document) -> MatchRecord:
    """
    Project a validated match document into a MatchRecord.

    Args:
        document: Document that passed is_valid_match_document

    Returns:
        MatchRecord (possibly without players)
    """
    start_time = EPOCH
    if document.is_reliable('MatchStartTime'):
        start_time = parse_timestamp(document.get('MatchStartTime'))

    players = []
    used = {'MatchStartTime'}
    for list_field in PLAYER_LIST_FIELDS:
        value = document.get_value(list_field)
        if value is None:
            continue
        used.add(list_field)
        if players or not document.is_reliable(list_field):
            continue
        for entry in _scoreboard_entries(value):
            player = player_from_document(entry)
            if player is not None:
                players.append(player)

    extras = {
        name: value.to_python()
        for name, value in document.fields.items()
        if name not in used and document.is_reliable(name)
    }

    return MatchRecord(start_time=start_time, players=players, extras=extras)
