"""Relative path canonicalization.

Normalizes relative links (``./img.png``, ``../guide/setup.md``) against
the path of the page that contains them. Resolution is purely lexical:
the linked file does not need to exist, since authors often link to
pages before writing them.
"""

import logging
from pathlib import Path

from sitelinks.core.classify import link_has_protocol_or_reserved_prefix

logger = logging.getLogger(__name__)

CONTENT_SUFFIX = ".md"


def canonicalize_relative_path(
    link: str,
    current_page_path: str | None = None,
    *,
    resolve_symlinks: bool = False,
) -> str:
    """Normalize a relative or absolute link against the current page.

    External links and explicit internal (``@/``) links are returned
    untouched.

    Args:
        link: Link target as written in markdown
        current_page_path: Path of the page containing the link. For
            markdown files the containing directory is used as the base.
        resolve_symlinks: Try filesystem canonicalization first and fall
            back to lexical normalization when it fails

    Returns:
        Canonical path, or the original link if it cannot be rendered as text
    """
    if link_has_protocol_or_reserved_prefix(link):
        return link

    base = _base_directory(current_page_path)
    if link.startswith("/") or not base:
        combined = link
    else:
        combined = f"{base}/{link}"

    canonical = None
    if resolve_symlinks:
        canonical = _resolve_on_disk(combined)
    if canonical is None:
        canonical = normalize_segments(combined)

    try:
        canonical.encode("utf-8")
    except UnicodeEncodeError:
        logger.debug(f"Canonical path for {link!r} is not valid text, keeping link")
        return link
    return canonical


def normalize_segments(path: str) -> str:
    """Collapse ``.`` and ``..`` segments without touching the filesystem.

    Empty segments are dropped, so repeated and trailing slashes disappear.
    A ``..`` with nothing left to remove is ignored and never climbs above
    the root.

    Args:
        path: Slash-separated path

    Returns:
        Normalized path, absolute if the input was absolute
    """
    resolved: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if resolved:
                resolved.pop()
            continue
        resolved.append(segment)

    joined = "/".join(resolved)
    return f"/{joined}" if path.startswith("/") else joined


def _base_directory(current_page_path: str | None) -> str:
    """Directory that relative links on the page are resolved against."""
    if current_page_path is None:
        return ""
    if current_page_path.endswith(CONTENT_SUFFIX):
        head, sep, _ = current_page_path.rpartition("/")
        return head if sep else current_page_path
    return current_page_path


def _resolve_on_disk(path: str) -> str | None:
    """Canonicalize against the filesystem, or None if the target is missing."""
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError) as e:
        logger.debug(f"Filesystem canonicalization failed for {path}: {e}")
        return None
