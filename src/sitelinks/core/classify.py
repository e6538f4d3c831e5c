"""Link classification.

Decides which kind of link an author wrote and splits links into the
pieces the resolver and canonicalizer work with.
"""

from enum import Enum
from urllib.parse import unquote

RESERVED_PREFIX = "@/"

PROTOCOL_PREFIXES = ("http://", "https://", "mailto:", "ftp://", "file://")


class LinkKind(Enum):
    """Kind of link found in markdown content."""

    INTERNAL = "internal"
    PROTOCOL = "protocol"
    ANCHOR = "anchor"
    RELATIVE = "relative"


def link_has_protocol_or_reserved_prefix(link: str) -> bool:
    """Check whether a link is external or an explicit internal link.

    Plain case-sensitive prefix test, no normalization.
    """
    return link.startswith((*PROTOCOL_PREFIXES, RESERVED_PREFIX))


def classify_link(link: str) -> LinkKind:
    """Classify a link string.

    Args:
        link: Link target as written in markdown

    Returns:
        LinkKind for the link
    """
    if link.startswith(RESERVED_PREFIX):
        return LinkKind.INTERNAL
    if link.startswith(PROTOCOL_PREFIXES):
        return LinkKind.PROTOCOL
    if link.startswith("#"):
        return LinkKind.ANCHOR
    return LinkKind.RELATIVE


def extract_anchor(link: str) -> tuple[str, str | None]:
    """Split a link at its first ``#``.

    Args:
        link: Link target, e.g. "some/path#anchor"

    Returns:
        Tuple of (base, anchor). Anchor is None when there is no ``#`` and
        may be an empty string for a trailing ``#``.
    """
    base, sep, anchor = link.partition("#")
    if not sep:
        return link, None
    return base, anchor


def get_permalink_key_from_link(link: str) -> tuple[str, str | None]:
    """Convert a link into the key used for permalink table lookups.

    Strips the reserved prefix if present, removes the anchor and
    percent-decodes what is left. Invalid UTF-8 is replaced, so this
    never fails.

    Args:
        link: Link target, with or without the reserved prefix

    Returns:
        Tuple of (decoded key, anchor)
    """
    clean_link = link.removeprefix(RESERVED_PREFIX)
    base, anchor = extract_anchor(clean_link)
    decoded = unquote(base, encoding="utf-8", errors="replace")
    return decoded, anchor
