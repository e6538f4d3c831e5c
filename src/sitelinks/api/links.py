"""Links API endpoints.

Exposes link resolution and canonicalization over JSON for editors and
preview tooling.
"""

from aiohttp import web

from sitelinks.app_keys import links_config_key, permalinks_key
from sitelinks.core.classify import classify_link
from sitelinks.core.paths import canonicalize_relative_path
from sitelinks.core.resolver import LinkNotFoundError, is_link_internal_page, resolve_internal_link


def create_links_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/links/resolve", resolve_link),
        web.get("/api/links/exists", link_exists),
        web.get("/api/links/canonicalize", canonicalize_link),
        web.get("/api/links/classify", classify),
    ]


async def resolve_link(request: web.Request) -> web.Response:
    link = _require_link(request)
    try:
        resolved = resolve_internal_link(link, request.app[permalinks_key])
    except LinkNotFoundError:
        return web.json_response(
            {"error": "Link not found", "link": link},
            status=404,
        )
    return web.json_response(resolved.to_dict())


async def link_exists(request: web.Request) -> web.Response:
    link = _require_link(request)
    exists = is_link_internal_page(link, request.app[permalinks_key])
    return web.json_response({"link": link, "exists": exists})


async def canonicalize_link(request: web.Request) -> web.Response:
    link = _require_link(request)
    page = request.query.get("page")
    canonical = canonicalize_relative_path(
        link,
        page,
        resolve_symlinks=request.app[links_config_key].resolve_symlinks,
    )
    return web.json_response({"link": link, "canonical": canonical})


async def classify(request: web.Request) -> web.Response:
    link = _require_link(request)
    return web.json_response({"link": link, "kind": classify_link(link).value})


def _require_link(request: web.Request) -> str:
    link = request.query.get("link")
    if not link:
        raise web.HTTPBadRequest(
            text='{"error": "Missing link parameter"}',
            content_type="application/json",
        )
    return link
