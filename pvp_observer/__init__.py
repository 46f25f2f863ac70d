"""
PvP Observer - Frontline match recovery and player statistics

A library for recovering match scoreboards from a LiteDB match database
(or a JSON export of it) and ranking players by KDA and damage.

Main interfaces:
    MatchLoader: Load matches from a .db or .json file
    LiteDBParser: Index-free recovery of match documents from raw bytes
    aggregate_players: Per-player statistics over recent matches
    TierCalculator: Percentile-based tier scoring
"""

from pvp_observer.recovery import LiteDBParser, MatchRecord, PlayerRecord
from pvp_observer.parsing import MatchLoader, LoadResult
from pvp_observer.analysis import aggregate_players, TierCalculator

__all__ = [
    'LiteDBParser',
    'MatchRecord',
    'PlayerRecord',
    'MatchLoader',
    'LoadResult',
    'aggregate_players',
    'TierCalculator',
]
