"""
Player statistics over recovered matches.

Functions for turning MatchRecords into per-player statistics:
- Flattening matches into a scoreboard DataFrame
- Aggregating totals, KDA and average damage per player
- Grouping recent matches by date
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from pvp_observer.config.recovery_config import RecoveryConfig
from pvp_observer.recovery.records import MatchRecord, UNKNOWN
from pvp_observer.recovery.timestamps import parse_timestamp

logger = logging.getLogger('pvp_observer.analysis')

UNKNOWN_JOB = '未知'

SCOREBOARD_COLUMNS = [
    'match_index', 'start_time', 'full_name', 'name', 'server',
    'kills', 'deaths', 'assists', 'damage', 'job', 'team',
]

PLAYER_STAT_COLUMNS = [
    'full_name', 'name', 'server', 'matches',
    'total_kills', 'total_deaths', 'total_assists', 'total_damage',
    'kda', 'avg_damage', 'most_played_job',
]


# =============================================================================
# Scoreboards
# =============================================================================

def matches_to_frame(matches: List[MatchRecord]) -> pd.DataFrame:
    """
    Flatten matches into one row per (match, player).

    Args:
        matches: Recovered or normalized matches

    Returns:
        DataFrame with SCOREBOARD_COLUMNS; match_index refers to the input list
    """
    rows = []
    for match_index, match in enumerate(matches):
        for player in match.players:
            if not player.name:
                continue
            rows.append({
                'match_index': match_index,
                'start_time': match.start_time,
                'full_name': player.full_name,
                'name': player.name,
                'server': player.server or UNKNOWN,
                'kills': player.kills,
                'deaths': player.deaths,
                'assists': player.assists,
                'damage': player.damage,
                'job': player.job,
                'team': player.team,
            })

    return pd.DataFrame(rows, columns=SCOREBOARD_COLUMNS)


def recent_matches(matches: List[MatchRecord], limit: int = RecoveryConfig.MAX_MATCHES) -> List[MatchRecord]:
    """Matches with a known start time, newest first, at most `limit` of them."""
    dated = [match for match in matches if match.has_start_time]
    dated.sort(key=lambda match: match.start_time, reverse=True)
    return dated[:limit]


# =============================================================================
# Aggregation
# =============================================================================

def _most_played_job(jobs: pd.Series) -> str:
    counts = Counter(job for job in jobs if job)
    if not counts:
        return UNKNOWN_JOB
    return counts.most_common(1)[0][0]


def aggregate_players(matches: List[MatchRecord], limit: int = RecoveryConfig.MAX_MATCHES) -> pd.DataFrame:
    """
    Aggregate per-player statistics over the most recent matches.

    Args:
        matches: Recovered or normalized matches
        limit: Number of most recent matches to include

    Returns:
        DataFrame with PLAYER_STAT_COLUMNS, one row per name@server,
        in order of first appearance
    """
    scoreboard = matches_to_frame(recent_matches(matches, limit))
    if scoreboard.empty:
        return pd.DataFrame(columns=PLAYER_STAT_COLUMNS)

    grouped = scoreboard.groupby('full_name', sort=False)
    stats = grouped.agg(
        name=('name', 'first'),
        server=('server', 'first'),
        matches=('match_index', 'size'),
        total_kills=('kills', 'sum'),
        total_deaths=('deaths', 'sum'),
        total_assists=('assists', 'sum'),
        total_damage=('damage', 'sum'),
        most_played_job=('job', _most_played_job),
    ).reset_index()

    takedowns = stats['total_kills'] + stats['total_assists']
    deaths = stats['total_deaths']
    stats['kda'] = np.where(deaths > 0, takedowns / deaths.where(deaths > 0, 1), takedowns).astype(float)
    stats['avg_damage'] = stats['total_damage'] / stats['matches']

    logger.info(f"Aggregated {len(stats)} players from {scoreboard['match_index'].nunique()} matches")
    return stats[PLAYER_STAT_COLUMNS]


# =============================================================================
# Match grouping
# =============================================================================

def group_matches_by_date(
    matches: List[MatchRecord],
    days: int = 10,
    now: Optional[datetime] = None
) -> List[Tuple[str, List[MatchRecord]]]:
    """
    Group recent matches by calendar date (UTC).

    Args:
        matches: Matches to group
        days: Only matches newer than this many days are kept
        now: Reference time (defaults to the current time)

    Returns:
        List of (YYYY-MM-DD, matches) pairs, newest date first; matches in a
        group are newest first
    """
    # Naive reference times are taken as UTC
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)

    groups: Dict[str, List[MatchRecord]] = {}
    for match in recent_matches(matches, limit=len(matches)):
        if match.start_time < cutoff:
            continue
        date_key = match.start_time.strftime('%Y-%m-%d')
        groups.setdefault(date_key, []).append(match)

    return sorted(groups.items(), key=lambda item: item[0], reverse=True)
