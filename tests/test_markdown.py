"""Tests for markdown link fixing."""

import pytest
from sitelinks.core.markdown import (
    LinkCheckLevel,
    LinkContext,
    LinkReport,
    check_markdown,
    extract_links,
    fix_link,
)
from sitelinks.core.resolver import LinkNotFoundError


@pytest.fixture
def context(permalinks: dict[str, str]) -> LinkContext:
    return LinkContext(
        permalinks=permalinks,
        current_page_path="posts/hello.md",
        current_page_permalink="https://example.com/posts/hello/",
    )


class TestExtractLinks:
    """Tests for extract_links()."""

    def test__links_and_images__in_document_order(self) -> None:
        markdown = """# Title

See [about](@/pages/about.md#team) and [docs](https://example.com/docs).

![logo](../images/logo.png)

- [nested](./child/page.md)
"""

        links = extract_links(markdown)

        assert links == [
            "@/pages/about.md#team",
            "https://example.com/docs",
            "../images/logo.png",
            "./child/page.md",
        ]

    def test__no_links__returns_empty(self) -> None:
        """Text without links yields nothing."""
        assert extract_links("Just text.") == []

    def test__links_in_code__are_ignored(self) -> None:
        """Links inside code spans and blocks are not links."""
        markdown = "Use `[x](@/missing.md)` inline.\n\n```\n[y](@/missing.md)\n```\n"

        assert extract_links(markdown) == []

    def test__non_ascii_and_quote__kept_as_written(self) -> None:
        """Targets are not percent-encoded."""
        assert extract_links("[b](#café) [c](../img/l'a.png)") == ["#café", "../img/l'a.png"]

    def test__percent_escapes__kept_as_written(self) -> None:
        """Escapes typed by the author are not decoded or encoded again."""
        assert extract_links("[a](@/pages/about%20space.md)") == ["@/pages/about%20space.md"]

    def test__title__is_dropped(self) -> None:
        """Only the destination is returned, not the link title."""
        assert extract_links('[a](@/pages/naïve.md "Naïve page")') == ["@/pages/naïve.md"]

    def test__angle_destination__returns_inner_text(self) -> None:
        """A destination in angle brackets may contain spaces."""
        assert extract_links("[a](<../my file.png>)") == ["../my file.png"]

    def test__reference_link__returns_definition_target(self) -> None:
        """Reference links resolve to the target of their definition."""
        markdown = "[x][ref] and [y][ref]\n\n[ref]: @/blog/naïve.md#café\n"

        assert extract_links(markdown) == ["@/blog/naïve.md#café", "@/blog/naïve.md#café"]

    def test__autolink__kept_as_written(self) -> None:
        """Autolinks keep their non-ASCII characters."""
        assert extract_links("Go to <https://example.com/ï>.") == ["https://example.com/ï"]

    def test__autolink_email__gets_mailto(self) -> None:
        """Email autolinks become mailto: targets."""
        assert extract_links("Mail <me@example.com>.") == ["mailto:me@example.com"]


class TestFixLink:
    """Tests for fix_link()."""

    def test__internal_link__returns_permalink(self, context: LinkContext) -> None:
        """Internal links become permalinks and are recorded."""
        report = LinkReport()

        result = fix_link("@/pages/about.md#team", context, report)

        assert result == "https://example.com/about/#team"
        assert report.internal_links == [("pages/about.md", "team")]

    def test__broken_internal_link__error_level__raises(self, context: LinkContext) -> None:
        """At error level a broken link raises."""
        with pytest.raises(LinkNotFoundError) as exc_info:
            fix_link("@/pages/missing.md", context)

        assert exc_info.value.link == "@/pages/missing.md"

    def test__broken_internal_link__warn_level__keeps_link(
        self,
        context: LinkContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """At warn level a broken link is kept, logged and recorded."""
        context.internal_level = LinkCheckLevel.WARN
        report = LinkReport()

        result = fix_link("@/pages/missing.md", context, report)

        assert result == "@/pages/missing.md"
        assert report.broken_links == ["@/pages/missing.md"]
        assert "Broken internal link `@/pages/missing.md` in posts/hello.md" in caplog.text

    def test__external_link__unchanged_and_recorded(self, context: LinkContext) -> None:
        """External links are recorded and left alone."""
        report = LinkReport()

        result = fix_link("https://example.com/a/../b", context, report)

        assert result == "https://example.com/a/../b"
        assert report.external_links == ["https://example.com/a/../b"]

    def test__local_anchor__points_at_current_page(self, context: LinkContext) -> None:
        """Anchors point at the current page's permalink."""
        report = LinkReport()

        result = fix_link("#intro", context, report)

        assert result == "https://example.com/posts/hello/#intro"
        assert report.internal_links == [("posts/hello.md", "intro")]

    def test__bare_hash__unchanged(self, context: LinkContext) -> None:
        """A bare hash is left alone."""
        assert fix_link("#", context) == "#"

    def test__local_anchor_without_page__unchanged(self, permalinks: dict[str, str]) -> None:
        """Anchors stay as written without a current page."""
        context = LinkContext(permalinks=permalinks)

        assert fix_link("#intro", context) == "#intro"

    def test__relative_link__canonicalized_against_page(self, context: LinkContext) -> None:
        """Relative links are normalized against the page."""
        assert fix_link("../images/./a.png", context) == "images/a.png"


class TestCheckMarkdown:
    """Tests for check_markdown()."""

    def test__all_links_valid__report_ok(self, context: LinkContext) -> None:
        """Valid links give an ok report."""
        markdown = "[about](@/pages/about.md) and [top](#top) and [ext](https://example.com)"

        report = check_markdown(markdown, context)

        assert report.ok
        assert report.internal_links == [("pages/about.md", None), ("posts/hello.md", "top")]
        assert report.external_links == ["https://example.com"]

    def test__broken_links__all_collected(self, context: LinkContext) -> None:
        """Checking continues past the first broken link."""
        markdown = "[a](@/missing-one.md) then [b](@/pages/about.md) then [c](@/missing-two.md#x)"

        report = check_markdown(markdown, context)

        assert not report.ok
        assert report.broken_links == ["@/missing-one.md", "@/missing-two.md#x"]
        assert report.internal_links == [("pages/about.md", None)]

    def test__warn_level__collects_broken_links(self, context: LinkContext) -> None:
        """At warn level broken links are still collected."""
        context.internal_level = LinkCheckLevel.WARN

        report = check_markdown("[a](@/missing.md)", context)

        assert report.broken_links == ["@/missing.md"]

    def test__non_ascii_broken_link__reported_as_written(self, context: LinkContext) -> None:
        """Broken links are reported with the text from the source."""
        report = check_markdown("[x](@/blog/naïve.md#café)", context)

        assert report.broken_links == ["@/blog/naïve.md#café"]

    def test__non_ascii_anchor__recorded_as_written(self, context: LinkContext) -> None:
        """Local anchors keep their non-ASCII characters."""
        report = check_markdown("[t](#café)", context)

        assert report.ok
        assert report.internal_links == [("posts/hello.md", "café")]

    def test__escaped_internal_link__resolves(self, context: LinkContext) -> None:
        """Percent escapes in internal links are decoded once before lookup."""
        report = check_markdown("[a](@/pages/about%20space.md)", context)

        assert report.ok
        assert report.internal_links == [("pages/about space.md", None)]
