"""Config API endpoint."""

from aiohttp import web

from blockstage.app_keys import live_reload_enabled_key, runtime_key
from blockstage.core.theme import build_theme_styles


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    website = request.app[runtime_key].website
    return web.json_response(
        {
            "languages": [language.to_dict() for language in website.languages],
            "defaultLanguage": website.default_language,
            "activeLanguage": website.active_language,
            "themeCss": build_theme_styles(website.theme),
            "liveReloadEnabled": request.app[live_reload_enabled_key],
        }
    )
