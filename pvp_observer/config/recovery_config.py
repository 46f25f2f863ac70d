"""
Configuration for binary document recovery.
Purpose: fixed limits and lookup tables used by the recovery engine when scanning a database file.
"""

from typing import Dict, List

# Field names whose presence marks a document as a match document.
MARKER_FIELDS = [
    'PlayerScoreboards',
    'MatchStartTime',
    'DutyId',
    'Players',
]

# Field names searched for in the raw bytes to find candidate documents.
# 'Players' is too common as a substring to be a useful scan anchor, so it is only
# used for validation.
SCAN_MARKERS = [
    'PlayerScoreboards',
    'MatchStartTime',
    'DutyId',
]

# Stat fields read by the field-level fallback extractor.
STAT_FIELDS = {
    'kills': 'Kills',
    'deaths': 'Deaths',
    'assists': 'Assists',
    'damage': 'DamageDealt',
}

# Known world names, in lookup order. The first entry that matches a name
# fragment wins; the order carries no meaning beyond that.
SERVER_NAMES = [
    'Moogle', 'Chocobo', 'Tonberry', 'Alexander', 'Bahamut', 'Titan',
    'Carbuncle', 'Fenrir', 'Ultima', 'Kujata', 'Typhon', 'Garuda',
    'Atomos', 'Ixion', 'Ramuh', 'Mandragora', 'Asura', 'Pandaemonium',
    'Shinryu', 'Gungnir', 'Masamune', 'Hades', 'Anima', 'Valefor',
    'Yojimbo', 'Zeromus', 'Ridill', 'Durandal', 'Aegis', 'Tiamat',
    'Unicorn', 'Belias', 'Ifrit',
]

# Grand Company teams: numeric code -> (english name, localized name)
TEAM_NAMES = {
    0: ('Maelstrom', '黑渦團'),
    1: ('Adders', '雙蛇黨'),
    2: ('Flames', '恆輝隊'),
}

# Collections the engine knows how to recover. Only Frontline matches are implemented.
COLLECTIONS = {
    'flmatch': 'Frontline matches',
}


class RecoveryConfig:
    """Limits and constants for index-free document recovery."""

    # Document decoding
    MAX_DOC_SIZE = 500000           # Hard upper bound on a declared document length
    MAX_NESTING_DEPTH = 64          # Embedded documents deeper than this are rejected

    # Boundary recovery plausibility checks
    MIN_DOC_LENGTH = 100            # Exclusive lower bound on a candidate length prefix
    MAX_DOC_LENGTH = 100000         # Exclusive upper bound on a candidate length prefix
    MIN_TYPE_TAG = 1
    MAX_TYPE_TAG = 20
    BACKTRACK_WINDOW = 1000         # Bytes searched backwards from a marker
    FALLBACK_BACKOFF = 50           # Used when no plausible start is found

    # Resource caps
    MAX_DOCUMENTS = 500
    MAX_MATCHES = 200
    MAX_PLAYERS_PER_MATCH = 72      # Frontline player cap

    # Field-level fallback extraction
    REGION_SPAN = 50000
    NAME_LOOKBACK = 200
    COMPANION_WINDOW = 100          # Deaths/Assists must follow Kills within this many bytes
    DAMAGE_WINDOW = 150
    BUCKET_SIZE = 100
    KILLS_SKIP = 10                 # Advance after a duplicate bucket hit
    RECORD_SKIP = 50                # Advance after a processed Kills hit
    MATCH_SKIP = 100                # Advance after a processed MatchStartTime hit
    SCOREBOARD_LOOKBEHIND = 1000
    SCOREBOARD_LOOKAHEAD = 5000

    DEFAULT_COLLECTION = 'flmatch'

    @classmethod
    def marker_patterns(cls, names: List[str] = None) -> List[bytes]:
        """Get UTF-8 byte patterns for the scan markers.

        Args:
            names: Field names to encode (defaults to SCAN_MARKERS)

        Returns:
            List of byte patterns in the same order
        """
        return [name.encode('utf-8') for name in (names or SCAN_MARKERS)]

    @classmethod
    def validate_collection(cls, collection_name: str) -> None:
        """Check that a collection can be recovered.

        Raises:
            ValueError: If the collection is not supported
        """
        if collection_name not in COLLECTIONS:
            raise ValueError(
                f"Unknown collection '{collection_name}'. "
                f"Available: {sorted(COLLECTIONS.keys())}"
            )

    @classmethod
    def team_lookup(cls) -> Dict[object, str]:
        """Map both numeric codes and English team names to localized names."""
        lookup = {}
        for code, (english, localized) in TEAM_NAMES.items():
            lookup[code] = localized
            lookup[english] = localized
        return lookup
