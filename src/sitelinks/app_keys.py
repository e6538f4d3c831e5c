"""Application keys for type-safe app configuration access."""

from collections.abc import Mapping

from aiohttp import web

from sitelinks.config import LinksConfig

permalinks_key = web.AppKey("permalinks", Mapping)
links_config_key = web.AppKey("links_config", LinksConfig)
