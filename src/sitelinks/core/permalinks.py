"""Permalink table loading.

The table is produced by the site build as a JSON object mapping content
paths to absolute permalinks:

    {
        "pages/about.md": "https://example.com/about/",
        "posts/hello.md": "https://example.com/posts/hello/"
    }
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType

from sitelinks.core.types import PermalinkTable

logger = logging.getLogger(__name__)


def load_permalinks(path: Path) -> PermalinkTable:
    """Load a permalink table from a JSON file.

    Args:
        path: Path to JSON file

    Returns:
        Read-only mapping of content path to permalink

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object of strings
    """
    if not path.exists():
        raise FileNotFoundError(f"Permalinks file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in permalinks file {path}: {e}") from e

    table = parse_permalinks(data)
    logger.debug(f"Loaded {len(table)} permalinks from {path}")
    return table


def parse_permalinks(data: object) -> PermalinkTable:
    """Validate raw decoded data as a permalink table.

    Args:
        data: Decoded JSON value

    Returns:
        Read-only mapping of content path to permalink

    Raises:
        ValueError: If data is not a mapping of strings to strings
    """
    if not isinstance(data, dict):
        raise ValueError("Permalinks must be a JSON object")

    table: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"Permalink for {key!r} must be a string")
        if "#" in value:
            logger.warning(f"Permalink for {key!r} contains an anchor: {value}")
        table[key] = value

    return MappingProxyType(table)
