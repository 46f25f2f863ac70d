"""
Timestamp parsing for match start times.

Match times show up in several encodings depending on where they came from:
    - BSON DateTime values (milliseconds since the epoch)
    - ISO-8601 strings: "2025-12-07T06:48:01Z"
    - LiteDB's JSON serialization: '{"$date":"2025-12-07T06:48:01.6530000Z"}'

All of them are normalized to a timezone-aware UTC datetime. Anything that
cannot be parsed becomes EPOCH instead of raising.
"""

import math
import numbers
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

import pandas as pd

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

WRAPPED_DATE_PATTERN = re.compile(r'"?\$date"?\s*:\s*"([^"]+)"')


def _from_iso(text: str) -> datetime:
    # pandas accepts the 7-digit fractional seconds LiteDB writes
    parsed = pd.to_datetime(text.strip(), utc=True)
    if pd.isna(parsed):
        return EPOCH
    return parsed.to_pydatetime(warn=False)


def _from_millis(millis: numbers.Real) -> datetime:
    millis = float(millis)
    if not math.isfinite(millis):
        return EPOCH
    return EPOCH + timedelta(milliseconds=millis)


def parse_timestamp(raw: Any) -> datetime:
    """
    Normalize a raw match time into a UTC datetime.

    Encodings are tried in order: a '$date' wrapper (as text or as a decoded
    mapping), a plain ISO-8601 string, then a native datetime or a number of
    milliseconds since the epoch.

    Args:
        raw: Value read from a document or a JSON export

    Returns:
        Timezone-aware datetime, or EPOCH if raw is missing or unparseable
    """
    if raw is None or raw == '' or isinstance(raw, bool):
        return EPOCH

    try:
        if isinstance(raw, Mapping):
            return parse_timestamp(raw.get('$date'))

        if isinstance(raw, str):
            if '$date' in raw:
                match = WRAPPED_DATE_PATTERN.search(raw)
                if match:
                    return _from_iso(match.group(1))
            return _from_iso(raw)

        if isinstance(raw, datetime):
            if raw.tzinfo is None:
                return raw.replace(tzinfo=timezone.utc)
            return raw.astimezone(timezone.utc)

        if isinstance(raw, numbers.Real):
            return _from_millis(raw)

    except (ValueError, TypeError, OverflowError):
        return EPOCH

    return EPOCH
