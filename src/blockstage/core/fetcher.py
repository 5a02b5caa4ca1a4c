"""Entity data retrieval.

Fetches the data a fetch descriptor points at: a file under the site's
public directory, a path on the site's base URL, or a remote URL.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import httpx

from blockstage.core.cache import FetchResult
from blockstage.core.section import FetchDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class Fetcher(Protocol):
    """Performs the retrieval described by a fetch descriptor."""

    async def fetch(self, descriptor: FetchDescriptor) -> FetchResult: ...


class DataFetcher:
    """Fetcher for local files and HTTP sources."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        public_dir: Path | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize fetcher.

        Args:
            client: HTTP client to use (created and owned by the fetcher if None)
            public_dir: Directory local ``path`` sources are read from
            base_url: Site URL ``path`` sources are requested from when there
                      is no public directory
            timeout: HTTP request timeout in seconds
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._public_dir = public_dir.resolve() if public_dir is not None else None
        self._base_url = base_url.rstrip("/") if base_url else None

    async def fetch(self, descriptor: FetchDescriptor) -> FetchResult:
        """Retrieve and extract the data for a descriptor.

        Returns:
            FetchResult with data, or with an error message on failure
        """
        # Path wins over url, matching the source the cache key is built from
        try:
            if descriptor.path:
                data = await self._fetch_path(descriptor.path)
            elif descriptor.url:
                data = await self._fetch_url(descriptor.url)
            else:
                return FetchResult(error="No path or url specified")
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.warning(f"Fetch failed for {descriptor.source}: {e}")
            return FetchResult(error=str(e) or type(e).__name__)

        if descriptor.transform:
            data = get_nested_value(data, descriptor.transform)

        logger.debug(f"Fetched {descriptor.cache_key}")
        return FetchResult(data=[] if data is None else data)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _fetch_url(self, url: str) -> Any:
        response = await self._client.get(url)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            return response.json()
        return _parse_text(response.text)

    async def _fetch_path(self, path: str) -> Any:
        if self._public_dir is not None:
            return await _read_file(self._public_dir, path)
        if self._base_url:
            return await self._fetch_url(f"{self._base_url}/{path.lstrip('/')}")
        raise ValueError(f"Cannot resolve local path: {path}")


async def _read_file(public_dir: Path, path: str) -> Any:
    file_path = (public_dir / path.lstrip("/")).resolve()
    if not file_path.is_relative_to(public_dir):
        raise ValueError(f"Path escapes public directory: {path}")

    text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
    if file_path.suffix == ".json":
        return json.loads(text)
    return _parse_text(text)


def _parse_text(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def get_nested_value(data: Any, path: str) -> Any:
    """Extract a value by dotted path (``results.items``, ``rows.0.name``).

    Returns:
        The value at the path, or None if any segment is missing
    """
    current = data
    for segment in path.split("."):
        if not segment:
            continue
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return None
    return current


def merge_into_data(current: Any, fetched: Any, merge: bool) -> Any:
    """Combine fetched data with the value already stored under a schema key.

    With ``merge`` two lists concatenate and two mappings shallow-merge
    (fetched keys win); any other combination, or no ``merge``, replaces.
    A None fetched value leaves the current value alone.
    """
    if fetched is None:
        return current
    if not merge or current is None:
        return fetched
    if isinstance(current, list) and isinstance(fetched, list):
        return [*current, *fetched]
    if isinstance(current, Mapping) and isinstance(fetched, Mapping):
        return {**current, **fetched}
    return fetched
