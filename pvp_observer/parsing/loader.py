"""
Input acquisition.

Reads a whole input file into memory from a local path or an HTTP(S) URL.
This is the only place that performs I/O; the recovery engine works on the
returned bytes.
"""

import logging
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

import requests

logger = logging.getLogger('pvp_observer.parsing')

DEFAULT_TIMEOUT = 30


class DataLoadError(Exception):
    """The input could not be acquired or read."""


def is_url(source: Union[str, Path]) -> bool:
    return isinstance(source, str) and urlparse(source).scheme in ('http', 'https')


def load_buffer(source: Union[str, Path], timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Load an input file into memory.

    Args:
        source: Local path or http(s) URL
        timeout: Request timeout in seconds for URLs

    Returns:
        File contents

    Raises:
        DataLoadError: If the file is missing, unreadable or the download fails
    """
    if is_url(source):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DataLoadError(f"Failed to fetch {source}: {e}") from e
        logger.info(f"Fetched {len(response.content)} bytes from {source}")
        return response.content

    path = Path(source)
    if not path.exists():
        raise DataLoadError(f"File not found: {path}")
    if not path.is_file():
        raise DataLoadError(f"Not a file: {path}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise DataLoadError(f"Failed to read {path}: {e}") from e

    logger.info(f"Loaded {len(data)} bytes from {path}")
    return data


def source_name(source: Union[str, Path]) -> str:
    """File name of a path or URL, used to pick a parser."""
    if is_url(source):
        return Path(urlparse(source).path).name
    return Path(source).name
