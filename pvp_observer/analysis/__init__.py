"""
Analysis Module - Player statistics and tiers

Turns loaded matches into per-player statistics and tier rankings.

Main interfaces:
    aggregate_players: per-player totals, KDA and average damage
    group_matches_by_date: recent matches grouped by day
    TierCalculator: percentile-based tier scores
"""

from pvp_observer.analysis.player_stats import (
    aggregate_players,
    group_matches_by_date,
    matches_to_frame,
    recent_matches
)
from pvp_observer.analysis.tiers import TierCalculator, sort_players

__all__ = [
    'aggregate_players',
    'group_matches_by_date',
    'matches_to_frame',
    'recent_matches',
    'TierCalculator',
    'sort_players',
]
