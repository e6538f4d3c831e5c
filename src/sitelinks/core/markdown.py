"""Link fixing for markdown documents.

Finds link and image targets in markdown using the mistune AST and
rewrites each one according to its kind:

- ``@/path.md#anchor`` internal links become absolute permalinks
- ``#anchor`` links point at the current page's permalink
- relative paths are canonicalized against the current page
- external links are left as written
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from re import Match
from typing import Any

import mistune
from mistune.core import BlockState, InlineState
from mistune.helpers import unescape_char
from mistune.util import escape_url, unikey

from sitelinks.core.classify import LinkKind, classify_link
from sitelinks.core.paths import canonicalize_relative_path
from sitelinks.core.resolver import LinkNotFoundError, combine_anchor, resolve_internal_link
from sitelinks.core.types import PermalinkTable

logger = logging.getLogger(__name__)

LINK_TOKEN_TYPES = frozenset({"link", "image"})

# Token key holding the link target exactly as written
SOURCE_URL_KEY = "source_url"


class LinkCheckLevel(Enum):
    """How broken internal links are handled."""

    ERROR = "error"
    WARN = "warn"


@dataclass
class LinkContext:
    """Page-level information needed to fix links."""

    permalinks: PermalinkTable
    current_page_path: str | None = None
    current_page_permalink: str | None = None
    internal_level: LinkCheckLevel = LinkCheckLevel.ERROR
    resolve_symlinks: bool = False


@dataclass
class LinkReport:
    """Links seen while fixing a document."""

    internal_links: list[tuple[str, str | None]] = field(default_factory=list)
    external_links: list[str] = field(default_factory=list)
    broken_links: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.broken_links


def extract_links(markdown_text: str) -> list[str]:
    """Extract link and image targets from markdown.

    Targets are returned as written in the source. mistune percent-encodes
    link URLs, so the original text is kept on each token by the parsers
    below and preferred over the encoded URL.

    Args:
        markdown_text: Markdown source

    Returns:
        Link targets in document order
    """
    parse = mistune.Markdown(
        renderer=None,
        block=SourceBlockParser(),
        inline=SourceInlineParser(),
    )
    tokens = parse(markdown_text)
    return list(_iter_link_targets(tokens))


def _iter_link_targets(tokens: list[dict[str, Any]]) -> Iterator[str]:
    for token in tokens:
        if token.get("type") in LINK_TOKEN_TYPES:
            url = token.get(SOURCE_URL_KEY) or (token.get("attrs") or {}).get("url")
            if url:
                yield url
        children = token.get("children")
        if isinstance(children, list):
            yield from _iter_link_targets(children)


class SourceInlineParser(mistune.InlineParser):
    """Inline parser that keeps link targets as written in the source."""

    def parse_link(self, m: Match[str], state: InlineState) -> int | None:
        count = len(state.tokens)
        end_pos = super().parse_link(m, state)
        token = _new_link_token(state, count)
        if end_pos is not None and token is not None and SOURCE_URL_KEY not in token:
            source_url = _inline_source_url(token, state, state.src[m.start() : end_pos])
            if source_url is not None:
                token[SOURCE_URL_KEY] = source_url
        return end_pos

    def parse_auto_link(self, m: Match[str], state: InlineState) -> int:
        count = len(state.tokens)
        end_pos = super().parse_auto_link(m, state)
        token = _new_link_token(state, count)
        if token is not None:
            token[SOURCE_URL_KEY] = m.group(0)[1:-1]
        return end_pos

    def parse_auto_email(self, m: Match[str], state: InlineState) -> int:
        count = len(state.tokens)
        end_pos = super().parse_auto_email(m, state)
        token = _new_link_token(state, count)
        if token is not None:
            token[SOURCE_URL_KEY] = "mailto:" + m.group(0)[1:-1]
        return end_pos


class SourceBlockParser(mistune.BlockParser):
    """Block parser that keeps reference definition targets as written."""

    def parse_ref_link(self, m: Match[str], state: BlockState) -> int | None:
        end_pos = super().parse_ref_link(m, state)
        if end_pos is not None:
            _keep_definition_source(state, state.src[m.start() : end_pos])
        return end_pos


def _new_link_token(state: InlineState, count: int) -> dict[str, Any] | None:
    """Link token appended since the token list had ``count`` entries."""
    if len(state.tokens) <= count:
        return None
    token = state.tokens[-1]
    return token if token.get("type") in LINK_TOKEN_TYPES else None


def _inline_source_url(token: dict[str, Any], state: InlineState, span: str) -> str | None:
    """Find the destination in ``[text](dest "title")`` matching the token URL."""
    ref = token.get("ref")
    if ref is not None:
        definition = state.env.get("ref_links", {}).get(ref, {})
        return definition.get(SOURCE_URL_KEY)

    url = (token.get("attrs") or {}).get("url")
    if url is None or not span.endswith(")"):
        return None

    # Destination follows the last "](" whose target encodes to the parsed URL
    start = span.rfind("](")
    while start != -1:
        destination = _split_destination(span[start + 2 : -1])
        if destination is not None and escape_url(destination) == url:
            return destination
        start = span.rfind("](", 0, start)
    return None


def _keep_definition_source(state: BlockState, span: str) -> None:
    label, sep, rest = span.strip().partition("]:")
    if not sep or not label.startswith("["):
        return
    definition = state.env.get("ref_links", {}).get(unikey(label[1:]))
    if definition is None or SOURCE_URL_KEY in definition:
        return
    destination = _split_destination(rest)
    if destination is not None and escape_url(destination) == definition.get("url"):
        definition[SOURCE_URL_KEY] = destination


def _split_destination(text: str) -> str | None:
    """Link destination from the text after ``(`` or ``]:``, title dropped."""
    text = text.strip()
    if text.startswith("<"):
        end = text.find(">")
        return unescape_char(text[1:end]) if end != -1 else None
    parts = text.split(maxsplit=1)
    return unescape_char(parts[0]) if parts else None


def fix_link(link: str, context: LinkContext, report: LinkReport | None = None) -> str:
    """Rewrite a single link target for output.

    Args:
        link: Link target as written in markdown
        context: Page context with the permalink table
        report: Optional report that collects internal, external and broken links

    Returns:
        Link target to put in the rendered output

    Raises:
        LinkNotFoundError: If an internal link is broken and the check level is ERROR
    """
    kind = classify_link(link)

    if kind is LinkKind.INTERNAL:
        try:
            resolved = resolve_internal_link(link, context.permalinks)
        except LinkNotFoundError:
            if context.internal_level is LinkCheckLevel.ERROR:
                raise
            page = context.current_page_path or "unknown"
            logger.warning(f"Broken internal link `{link}` in {page}")
            if report is not None:
                report.broken_links.append(link)
            return link
        if report is not None:
            report.internal_links.append((resolved.md_path, resolved.anchor))
        return resolved.permalink

    if kind is LinkKind.PROTOCOL:
        if report is not None:
            report.external_links.append(link)
        return link

    if kind is LinkKind.ANCHOR:
        anchor = link[1:]
        page_path = context.current_page_path
        page_permalink = context.current_page_permalink
        if not anchor or page_path is None or page_permalink is None:
            return link
        if report is not None:
            report.internal_links.append((page_path, anchor))
        return combine_anchor(page_permalink, anchor)

    return canonicalize_relative_path(
        link,
        context.current_page_path,
        resolve_symlinks=context.resolve_symlinks,
    )


def check_markdown(markdown_text: str, context: LinkContext) -> LinkReport:
    """Fix every link in a document and report what was found.

    Unlike fix_link, broken internal links never stop the check; all of
    them end up in the report.

    Args:
        markdown_text: Markdown source
        context: Page context with the permalink table

    Returns:
        LinkReport for the document
    """
    report = LinkReport()
    for link in extract_links(markdown_text):
        try:
            fix_link(link, context, report)
        except LinkNotFoundError as e:
            logger.debug(f"Broken internal link `{e.link}` in {context.current_page_path}")
            report.broken_links.append(e.link)
    return report
