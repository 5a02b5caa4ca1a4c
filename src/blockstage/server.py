"""aiohttp server for Blockstage.

Application factory and route registration for standalone server mode.
"""

import logging

from aiohttp import web

from blockstage.api.config import create_config_routes
from blockstage.api.navigation import create_navigation_routes
from blockstage.api.pages import create_pages_routes
from blockstage.app_keys import live_reload_enabled_key, runtime_key, verbose_key
from blockstage.config import Config
from blockstage.core.components import StaticComponentLibrary
from blockstage.core.fetcher import DataFetcher
from blockstage.core.loader import load_site_content
from blockstage.core.runtime import Runtime
from blockstage.live.reload import LiveReloadManager, create_live_reload_routes

logger = logging.getLogger(__name__)

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


def create_runtime(config: Config) -> Runtime:
    """Build a runtime from configuration and load the site content.

    Args:
        config: Application configuration

    Returns:
        Runtime holding the current website

    Raises:
        FileNotFoundError: If the configured components manifest doesn't exist
        ValueError: If the components manifest is malformed
        ContentLoadError: If the content file can't be decoded
    """
    library = (
        StaticComponentLibrary.load(config.site.components_file)
        if config.site.components_file is not None
        else StaticComponentLibrary()
    )
    fetcher = DataFetcher(
        public_dir=config.site.public_dir if config.site.public_dir.exists() else None,
        base_url=config.site.base_url,
        timeout=config.fetch.timeout,
    )
    runtime = Runtime(library, fetcher=fetcher)
    runtime.rebuild(load_site_content(config.site.content_file))
    return runtime


def create_app(
    config: Config,
    *,
    runtime: Runtime | None = None,
    verbose: bool = False,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        runtime: Runtime to serve (built from config if None)
        verbose: Log section render errors per request

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    runtime = runtime or create_runtime(config)

    app[runtime_key] = runtime
    app[verbose_key] = verbose
    app[live_reload_enabled_key] = config.live_reload.enabled

    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_config_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(
            config.site.content_file,
            runtime,
            watch_patterns=config.live_reload.watch_patterns,
        )
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.on_cleanup.append(_close_runtime)

    return app


async def _start_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].stop()


async def _close_runtime(app: web.Application) -> None:
    await app[runtime_key].aclose()


def run_server(config: Config, *, verbose: bool = False) -> None:
    """Run the server.

    Args:
        config: Application configuration
        verbose: Log section render errors per request
    """
    app = create_app(config, verbose=verbose)
    logger.info(f"Serving {config.site.content_file} on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)
