"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
from sitelinks.config import Config, LinkCheckerConfig, LinksConfig, ServerConfig


@pytest.fixture
def permalinks() -> dict[str, str]:
    """Small permalink table as produced by a site build."""
    return {
        "pages/about.md": "https://example.com/about/",
        "pages/about space.md": "https://example.com/about%20space/",
        "posts/hello.md": "https://example.com/posts/hello/",
        "_index.md": "https://example.com/",
    }


@pytest.fixture
def permalinks_file(tmp_path: Path, permalinks: dict[str, str]) -> Path:
    """Write the permalink table to a JSON file."""
    path = tmp_path / "permalinks.json"
    path.write_text(json.dumps(permalinks))
    return path


@pytest.fixture
def test_config(tmp_path: Path, permalinks_file: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates content_dir and returns a Config instance suitable for testing.
    """
    content_dir = tmp_path / "content"
    content_dir.mkdir(exist_ok=True)

    return Config(
        server=ServerConfig(),
        links=LinksConfig(content_dir=content_dir, permalinks_file=permalinks_file),
        link_checker=LinkCheckerConfig(),
    )
