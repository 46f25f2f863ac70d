"""
Configuration management for the observer.

Centralizes environment variable loading for runtime settings.
Supports both environment-based and programmatic configuration for testing.
"""

from dotenv import load_dotenv
import os
from typing import Optional
from dataclasses import dataclass


@dataclass
class ObserverConfig:
    """
    Runtime configuration for loading matches and computing player statistics.

    Attributes:
        data_path: Default database (.db) or export (.json) to load
        player_limit: Max players shown in the overall ranking
        recent_days: Days of matches grouped by date
        stats_match_limit: Most recent matches used for player statistics
        min_tier_matches: Matches needed before a player receives a tier
        target_matches: Matches needed for full confidence in a tier score
        log_level: Logging level name for scripts
    """

    data_path: Optional[str] = None
    player_limit: int = 1000
    recent_days: int = 10
    stats_match_limit: int = 200
    min_tier_matches: int = 1
    target_matches: int = 3
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'ObserverConfig':
        """
        Load configuration from environment variables (.env file).

        Optional environment variables:
            - PVP_OBSERVER_DATA_PATH: Default input file
            - PVP_OBSERVER_PLAYER_LIMIT
            - PVP_OBSERVER_RECENT_DAYS
            - PVP_OBSERVER_STATS_MATCH_LIMIT
            - PVP_OBSERVER_MIN_TIER_MATCHES
            - PVP_OBSERVER_TARGET_MATCHES
            - PVP_OBSERVER_LOG_LEVEL

        Returns:
            ObserverConfig instance

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        load_dotenv()

        values = {}

        data_path = os.environ.get("PVP_OBSERVER_DATA_PATH")
        if data_path:
            values['data_path'] = data_path

        numeric_vars = {
            'player_limit': "PVP_OBSERVER_PLAYER_LIMIT",
            'recent_days': "PVP_OBSERVER_RECENT_DAYS",
            'stats_match_limit': "PVP_OBSERVER_STATS_MATCH_LIMIT",
            'min_tier_matches': "PVP_OBSERVER_MIN_TIER_MATCHES",
            'target_matches': "PVP_OBSERVER_TARGET_MATCHES",
        }
        for field_name, env_var in numeric_vars.items():
            raw = os.environ.get(env_var)
            if raw is None or raw == "":
                continue
            try:
                values[field_name] = int(raw)
            except ValueError:
                raise ValueError(
                    f"{env_var} must be an integer, got '{raw}'"
                )

        log_level = os.environ.get("PVP_OBSERVER_LOG_LEVEL")
        if log_level:
            values['log_level'] = log_level.upper()

        return cls(**values)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'ObserverConfig':
        """
        Create configuration from a dictionary.

        Useful for testing or programmatic configuration.

        Example:
            >>> config = ObserverConfig.from_dict({
            ...     'data_path': './data.db',
            ...     'recent_days': 7
            ... })
        """
        return cls(**config_dict)

    def __repr__(self) -> str:
        return (
            f"ObserverConfig(\n"
            f"  data_path={self.data_path},\n"
            f"  player_limit={self.player_limit},\n"
            f"  recent_days={self.recent_days},\n"
            f"  stats_match_limit={self.stats_match_limit},\n"
            f"  tiers=min {self.min_tier_matches} / target {self.target_matches} matches,\n"
            f"  log_level={self.log_level}\n"
            f")"
        )
