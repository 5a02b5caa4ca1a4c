"""WebSocket-based live reload for development mode.

Watches the site content file, rebuilds the website when it changes and
notifies connected clients via WebSocket.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from blockstage.core.errors import ContentLoadError
from blockstage.core.loader import load_site_content
from blockstage.core.runtime import Runtime

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and content watching for live reload.

    Each content change produces a brand-new website swapped into the
    runtime; content that fails to load leaves the current website in place.
    """

    def __init__(
        self,
        content_file: Path,
        runtime: Runtime,
        watch_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            content_file: Site content file to watch and reload
            runtime: Runtime whose website is rebuilt on change
            watch_patterns: Glob patterns, relative to the content file's
                            directory, that trigger a reload (default: the
                            content file itself)
        """
        self._content_file = content_file
        self._watch_dir = content_file.resolve().parent
        self._runtime = runtime
        self._watch_patterns = watch_patterns or [content_file.name]
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        if not self._watch_dir.exists():
            logger.warning(f"Live reload disabled: {self._watch_dir} does not exist")
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def reload(self) -> bool:
        """Reload content and notify clients.

        Returns:
            True if the website was rebuilt
        """
        try:
            content = load_site_content(self._content_file)
        except ContentLoadError as e:
            logger.warning(f"Keeping current content: {e}")
            return False

        website = self._runtime.rebuild(content)
        logger.info(f"Reloaded {self._content_file} ({len(website.pages)} pages)")
        await self._broadcast_reload(website.active_route)
        return True

    async def _watch_files(self) -> None:
        async for changes in awatch(self._watch_dir):
            if any(
                change_type != Change.deleted and self._matches_patterns(Path(path_str))
                for change_type, path_str in changes
            ):
                await self.reload()

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern.

        Args:
            path: Path to check

        Returns:
            True if path matches any pattern
        """
        try:
            relative = path.relative_to(self._watch_dir)
        except ValueError:
            return False

        return any(relative.match(pattern) for pattern in self._watch_patterns)

    async def _broadcast_reload(self, route: str | None) -> None:
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "route": route})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get("/ws/live-reload", manager.handle_websocket)]
