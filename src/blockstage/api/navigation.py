"""Navigation and search API endpoints."""

from aiohttp import web

from blockstage.app_keys import runtime_key
from blockstage.core.navigation import build_navigation


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/search", get_search_data),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    website = request.app[runtime_key].website
    nav_items = build_navigation(website)
    return web.json_response(
        {
            "items": [item.to_dict() for item in nav_items],
            "active": website.active_route,
        }
    )


async def get_search_data(request: web.Request) -> web.Response:
    website = request.app[runtime_key].website
    return web.json_response({"pages": website.get_search_data()})
