"""Internal link resolution.

Turns ``@/path/to/page.md#anchor`` links into absolute permalinks using the
permalink table built by the site. Anchors are carried through but not
verified; that happens once the whole site has been rendered.
"""

from dataclasses import dataclass

from sitelinks.core.classify import get_permalink_key_from_link
from sitelinks.core.types import PermalinkTable


class LinkNotFoundError(LookupError):
    """Raised when an internal link has no entry in the permalink table.

    Attributes:
        link: The link exactly as the author wrote it
    """

    def __init__(self, link: str) -> None:
        super().__init__(f"Relative link {link} not found.")
        self.link = link


@dataclass(frozen=True)
class ResolvedInternalLink:
    """Result of a successful internal link resolution."""

    permalink: str
    md_path: str
    anchor: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {
            "permalink": self.permalink,
            "md_path": self.md_path,
            "anchor": self.anchor,
        }


def resolve_internal_link(link: str, permalinks: PermalinkTable) -> ResolvedInternalLink:
    """Resolve an internal link to its absolute permalink.

    Args:
        link: Internal link, e.g. "@/posts/something.md#hey"
        permalinks: Content path to permalink table

    Returns:
        ResolvedInternalLink with permalink, content path and anchor

    Raises:
        LinkNotFoundError: If the decoded path is not in the table
    """
    decoded, anchor = get_permalink_key_from_link(link)
    target = permalinks.get(decoded)
    if target is None:
        raise LinkNotFoundError(link)

    return ResolvedInternalLink(
        permalink=combine_anchor(target, anchor),
        md_path=decoded,
        anchor=anchor,
    )


def is_link_internal_page(link: str, permalinks: PermalinkTable) -> bool:
    """Check whether a link points to a page in the permalink table."""
    key, _ = get_permalink_key_from_link(link)
    return key in permalinks


def combine_anchor(link: str, anchor: str | None) -> str:
    """Append ``#anchor`` to a link when an anchor is present."""
    if anchor is None:
        return link
    return f"{link}#{anchor}"
