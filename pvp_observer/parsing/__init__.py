"""
Parsing Module - Loading match data

Loads match data from either source the observer accepts:
    - a LiteDB data file, recovered with pvp_observer.recovery
    - a JSON export with one entry per match

## Quick Start

### Load a file of either kind
```python
from pvp_observer.parsing import MatchLoader

result = MatchLoader().load('./data.db')
print(result.match_count, result.error)
```

### Normalize an already decoded export
```python
from pvp_observer.parsing import JsonDataParser

result = JsonDataParser().parse({'flmatch': [...]})
matches = result.collections['flmatch']
```
"""

from pvp_observer.parsing.json_normalizer import (
    JsonDataParser,
    normalize_json_matches,
    normalize_player
)
from pvp_observer.parsing.loader import DataLoadError, load_buffer
from pvp_observer.parsing.match_loader import MatchLoader, LoadResult

__all__ = [
    # JSON path
    'JsonDataParser',
    'normalize_json_matches',
    'normalize_player',

    # Acquisition
    'DataLoadError',
    'load_buffer',

    # Loader
    'MatchLoader',
    'LoadResult',
]
