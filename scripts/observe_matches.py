"""
Script to load a Frontline match database (or its JSON export), recover the matches
and print a tier ranking of the players found in the most recent matches.

Usage:
    python scripts/observe_matches.py ./data.db
    python scripts/observe_matches.py ./data.json --top 50
    python scripts/observe_matches.py ./data.db --export players.csv
"""

import argparse
import logging
import sys

from pvp_observer.analysis import TierCalculator, aggregate_players, group_matches_by_date, sort_players
from pvp_observer.config.observer_config import ObserverConfig
from pvp_observer.parsing import MatchLoader


def print_recovery_summary(result):
    """Print what was recovered from the input file."""
    print("=" * 60)
    print("MATCH RECOVERY")
    print("=" * 60)
    print(f"Source: {result.source_path} ({result.source_type})")
    print(f"Matches: {result.match_count}")

    parse_result = result.parse_result
    if parse_result and parse_result.header:
        header = parse_result.header
        print(f"File size: {header.file_size:,} bytes")
        print(f"LiteDB header: {'yes' if header.is_litedb else 'no'}")
    if parse_result and parse_result.used_fallback:
        print("Recovered with field-level fallback extraction")
    if parse_result and parse_result.extraction_stats:
        stats = parse_result.extraction_stats
        print(f"Markers scanned: {stats.markers_seen}, documents: {stats.emitted}, "
              f"undecodable: {stats.decode_failures}, invalid: {stats.validation_failures}")
    print()


def print_players(players, top: int, calculator: TierCalculator):
    """Print the top rows of the tier ranking, marking KDA and damage as high, mid or low."""
    print("=" * 60)
    print("PLAYER TIERS")
    print("=" * 60)
    print(f"{'Tier':<5} {'Player':<32} {'Matches':>7} {'KDA':>6} {'':<4} {'Avg dmg':>10} {'':<4}  Job")
    print("-" * 76)
    all_kda = players['kda'].tolist()
    all_damage = players['avg_damage'].tolist()
    for row in players.head(top).itertuples(index=False):
        tier = row.tier if isinstance(row.tier, str) else '-'
        kda_class = calculator.get_value_class(row.kda, all_kda)
        damage_class = calculator.get_value_class(row.avg_damage, all_damage)
        print(f"{tier:<5} {row.full_name:<32} {row.matches:>7} {row.kda:>6.1f} {kda_class:<4} "
              f"{row.avg_damage:>10,.0f} {damage_class:<4}  {row.most_played_job}")
    print()


def main(argv=None) -> int:
    config = ObserverConfig.from_env()

    parser = argparse.ArgumentParser(description="Recover Frontline matches and rank players")
    parser.add_argument('source', nargs='?', default=config.data_path,
                        help="Path or URL of a LiteDB file or JSON export")
    parser.add_argument('--top', type=int, default=20, help="Number of players to print")
    parser.add_argument('--export', help="Write the full player table to this CSV file")
    parser.add_argument('--log-level', default=config.log_level, help="Logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format='%(levelname)s %(name)s: %(message)s')

    if not args.source:
        parser.error("No input file given and PVP_OBSERVER_DATA_PATH is not set")

    result = MatchLoader().load(args.source)
    if not result.success:
        print(f"✗ {result.error}")
        return 1

    print_recovery_summary(result)

    by_date = group_matches_by_date(result.matches, days=config.recent_days)
    if by_date:
        print(f"Recent days: {', '.join(f'{date} ({len(matches)})' for date, matches in by_date)}")
        print()

    stats = aggregate_players(result.matches, limit=config.stats_match_limit)
    calculator = TierCalculator(
        min_matches=config.min_tier_matches,
        target_matches=config.target_matches
    )
    players = sort_players(calculator.calculate_tiers(stats)).head(config.player_limit)

    print_players(players, args.top, calculator)

    if args.export:
        players.to_csv(args.export, index=False)
        print(f"✓ Player table written to {args.export}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
