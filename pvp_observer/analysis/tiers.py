"""
Tier Calculator

Scores players on KDA and average damage percentiles and assigns tiers T0-T5.
Scores are pulled towards the average for players with few matches.
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger('pvp_observer.analysis')

# Score cutoffs, best tier first
TIER_CUTOFFS = [
    ('T0', 95),
    ('T1', 90),
    ('T2', 75),
    ('T3', 50),
    ('T4', 25),
    ('T5', 0),
]

TIER_ORDER = {tier: index for index, (tier, _) in enumerate(TIER_CUTOFFS)}
NO_TIER = 99


class TierCalculator:
    """Percentile-based tier scoring for aggregated player statistics."""

    def __init__(self,
                 min_matches: int = 1,
                 target_matches: int = 3,
                 weights: Optional[Dict[str, float]] = None,
                 average_score: float = 50.0):
        """
        Initialize the calculator.

        Args:
            min_matches: Matches needed before a player receives a tier
            target_matches: Matches needed for full confidence in the score
            weights: Weights for 'kda' and 'damage' percentiles (default 0.5 each)
            average_score: Score that low-confidence players are pulled towards
        """
        self.min_matches = min_matches
        self.target_matches = target_matches
        self.weights = weights or {'kda': 0.50, 'damage': 0.50}
        self.average_score = average_score

    @staticmethod
    def get_percentile(value: float, sorted_values: Sequence[float]) -> float:
        """
        Fraction of values less than or equal to `value`.

        Returns:
            Percentile in [0, 1]; 0.5 when there are no values
        """
        if len(sorted_values) == 0:
            return 0.5
        rank = np.searchsorted(np.asarray(sorted_values, dtype=float), value, side='right')
        return float(rank) / len(sorted_values)

    @staticmethod
    def get_tier_from_score(score: float) -> str:
        for tier, cutoff in TIER_CUTOFFS:
            if score >= cutoff:
                return tier
        return TIER_CUTOFFS[-1][0]

    def get_value_class(self, value: float, all_values: Sequence[float]) -> str:
        """Classify a value as 'high', 'mid' or 'low' against its peers ('' without peers)."""
        if len(all_values) == 0:
            return ''
        percentile = self.get_percentile(value, np.sort(np.asarray(all_values, dtype=float)))
        if percentile >= 0.7:
            return 'high'
        if percentile >= 0.4:
            return 'mid'
        return 'low'

    def calculate_tiers(self, players: pd.DataFrame) -> pd.DataFrame:
        """
        Score and tier every qualified player.

        Args:
            players: DataFrame with 'matches', 'kda' and 'avg_damage' columns

        Returns:
            Copy of players with 'tier_score', 'tier' and 'tier_rank' columns;
            players below min_matches get score 0 and no tier
        """
        result = players.copy()
        result['tier_score'] = 0.0
        result['tier'] = None
        result['tier_rank'] = None

        qualified = result['matches'] >= self.min_matches
        if not qualified.any():
            return result

        kda = result.loc[qualified, 'kda'].to_numpy(dtype=float)
        damage = result.loc[qualified, 'avg_damage'].to_numpy(dtype=float)
        matches = result.loc[qualified, 'matches'].to_numpy(dtype=float)

        kda_percentile = np.searchsorted(np.sort(kda), kda, side='right') / len(kda)
        damage_percentile = np.searchsorted(np.sort(damage), damage, side='right') / len(damage)

        raw_score = (
            kda_percentile * self.weights['kda'] +
            damage_percentile * self.weights['damage']
        ) * 100

        confidence = np.minimum(matches / self.target_matches, 1.0)
        tier_score = raw_score * confidence + self.average_score * (1 - confidence)

        result.loc[qualified, 'tier_score'] = tier_score
        result.loc[qualified, 'tier'] = [self.get_tier_from_score(score) for score in tier_score]

        order = result.loc[qualified, 'tier_score'].sort_values(ascending=False, kind='stable').index
        result.loc[order, 'tier_rank'] = list(range(1, len(order) + 1))

        logger.info(f"Assigned tiers to {int(qualified.sum())} of {len(result)} players")
        return result


def sort_players(players: pd.DataFrame) -> pd.DataFrame:
    """Order tiered players best tier first, then by number of matches."""
    tier_order = players['tier'].map(lambda tier: TIER_ORDER.get(tier, NO_TIER))
    return (
        players.assign(_tier_order=tier_order)
        .sort_values(['_tier_order', 'matches'], ascending=[True, False], kind='stable')
        .drop(columns='_tier_order')
        .reset_index(drop=True)
    )
