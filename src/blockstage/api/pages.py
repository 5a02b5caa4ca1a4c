"""Pages API endpoint.

Composes a page and returns its areas as prepared section props.
"""

import json
import logging
from hashlib import md5

from aiohttp import web

from blockstage.app_keys import runtime_key, verbose_key

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{route:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    route = "/" + request.match_info["route"].strip("/")
    runtime = request.app[runtime_key]
    website = runtime.website

    page = website.get_page(route)
    if page is None:
        return web.json_response(
            {"error": "Page not found", "route": route},
            status=404,
        )

    # Language is chosen per request
    language = website.resolve_language(request.query.get("lang"))

    composed = runtime.compose(page)
    if request.query.get("wait") in ("1", "true"):
        await runtime.settle()
        composed = runtime.compose(page)

    if request.app[verbose_key]:
        for sections in composed.areas.values():
            for section in sections:
                if section.error:
                    logger.warning(f"{route}: section {section.id}: {section.error}")

    response_data = {
        "meta": {
            "title": website.localize(page.title, lang=language),
            "route": page.route,
            "description": website.localize(page.description, lang=language),
            "language": language,
        },
        **composed.to_dict(),
    }

    etag = _compute_etag(json.dumps(response_data, sort_keys=True, default=str))
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    return web.json_response(
        response_data,
        dumps=lambda data: json.dumps(data, default=str),
        headers={
            "ETag": etag,
            "Cache-Control": "private, max-age=60",
        },
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
