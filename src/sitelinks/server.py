"""aiohttp server for Sitelinks.

Application factory and route registration for standalone server mode.
"""

import logging

from aiohttp import web

from sitelinks.api.links import create_links_routes
from sitelinks.app_keys import links_config_key, permalinks_key
from sitelinks.config import Config
from sitelinks.core.permalinks import load_permalinks
from sitelinks.core.types import PermalinkTable

logger = logging.getLogger(__name__)


def create_app(config: Config, *, permalinks: PermalinkTable | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        permalinks: Permalink table to serve. Loaded from
            config.links.permalinks_file when not given.

    Returns:
        Configured aiohttp application

    Raises:
        FileNotFoundError: If the permalinks file doesn't exist
        ValueError: If the permalinks file is invalid
    """
    if permalinks is None:
        permalinks = load_permalinks(config.links.permalinks_file)

    app = web.Application()
    app[permalinks_key] = permalinks
    app[links_config_key] = config.links

    app.router.add_routes(create_links_routes())

    logger.info(f"Serving {len(permalinks)} permalinks")
    return app


def run_server(config: Config, *, permalinks: PermalinkTable | None = None) -> None:
    """Run the server.

    Args:
        config: Application configuration
        permalinks: Already loaded permalink table, if any
    """
    app = create_app(config, permalinks=permalinks)
    web.run_app(app, host=config.server.host, port=config.server.port)
