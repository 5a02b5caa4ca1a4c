"""Application keys for type-safe app configuration access."""

from aiohttp import web

from blockstage.core.runtime import Runtime

runtime_key = web.AppKey("runtime", Runtime)
verbose_key = web.AppKey("verbose", bool)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
