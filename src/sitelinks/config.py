"""Configuration management for Sitelinks.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from sitelinks.core.markdown import LinkCheckLevel

CONFIG_FILENAME = "sitelinks.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LinksConfig:
    """Content and permalink table locations."""

    content_dir: Path = field(default_factory=lambda: Path("content"))
    permalinks_file: Path = field(default_factory=lambda: Path("permalinks.json"))
    resolve_symlinks: bool = False


@dataclass
class LinkCheckerConfig:
    """Link checker configuration."""

    internal_level: LinkCheckLevel = LinkCheckLevel.ERROR


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    links: LinksConfig
    link_checker: LinkCheckerConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for sitelinks.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            links=LinksConfig(),
            link_checker=LinkCheckerConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            links=cls._parse_links(data.get("links"), config_dir),
            link_checker=cls._parse_link_checker(data.get("link_checker")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section."""
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_links(cls, data: object, config_dir: Path) -> LinksConfig:
        """Parse links configuration section.

        Args:
            data: Raw links section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            LinksConfig instance
        """
        if data is None:
            return LinksConfig(
                content_dir=config_dir / "content",
                permalinks_file=config_dir / "permalinks.json",
            )

        if not isinstance(data, dict):
            raise ValueError("links section must be a dictionary")

        content_dir = data.get("content_dir", "content")
        if not isinstance(content_dir, str):
            raise ValueError("links.content_dir must be a string")

        permalinks_file = data.get("permalinks_file", "permalinks.json")
        if not isinstance(permalinks_file, str):
            raise ValueError("links.permalinks_file must be a string")

        resolve_symlinks = data.get("resolve_symlinks", False)
        if not isinstance(resolve_symlinks, bool):
            raise ValueError("links.resolve_symlinks must be a boolean")

        return LinksConfig(
            content_dir=config_dir / content_dir,
            permalinks_file=config_dir / permalinks_file,
            resolve_symlinks=resolve_symlinks,
        )

    @classmethod
    def _parse_link_checker(cls, data: object) -> LinkCheckerConfig:
        """Parse link_checker configuration section."""
        if data is None:
            return LinkCheckerConfig()

        if not isinstance(data, dict):
            raise ValueError("link_checker section must be a dictionary")

        internal_level = data.get("internal_level", "error")
        try:
            level = LinkCheckLevel(internal_level)
        except ValueError:
            raise ValueError(
                'link_checker.internal_level must be "error" or "warn"',
            ) from None

        return LinkCheckerConfig(internal_level=level)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        content_dir: Path | None = None,
        permalinks_file: Path | None = None,
        resolve_symlinks: bool | None = None,
        internal_level: LinkCheckLevel | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            content_dir: Override links.content_dir
            permalinks_file: Override links.permalinks_file
            resolve_symlinks: Override links.resolve_symlinks
            internal_level: Override link_checker.internal_level

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        links = self.links
        if content_dir is not None:
            links = replace(links, content_dir=content_dir)
        if permalinks_file is not None:
            links = replace(links, permalinks_file=permalinks_file)
        if resolve_symlinks is not None:
            links = replace(links, resolve_symlinks=resolve_symlinks)

        link_checker = self.link_checker
        if internal_level is not None:
            link_checker = replace(self.link_checker, internal_level=internal_level)

        return replace(self, server=server, links=links, link_checker=link_checker)
