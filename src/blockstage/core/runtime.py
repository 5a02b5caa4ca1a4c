"""Runtime context.

Holds everything one site session needs: the current website snapshot,
the component library, the entity cache and the fetcher. Passed
explicitly to whatever serves or renders the site.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from blockstage.core.cache import EntityCache, FetchResult
from blockstage.core.components import ComponentLibrary, StaticComponentLibrary
from blockstage.core.fetcher import DataFetcher, Fetcher
from blockstage.core.layout import ComposedPage, LayoutComposer
from blockstage.core.page import Page
from blockstage.core.parser import DocumentParser
from blockstage.core.renderer import SectionRenderer
from blockstage.core.resolver import EntityResolver
from blockstage.core.section import Section
from blockstage.core.website import Website, build_website

logger = logging.getLogger(__name__)


class Runtime:
    """One site session: website snapshot plus shared services."""

    def __init__(
        self,
        library: ComponentLibrary | None = None,
        *,
        parser: DocumentParser | None = None,
        fetcher: Fetcher | None = None,
        cache: EntityCache | None = None,
    ) -> None:
        """Initialize runtime with an empty website.

        Args:
            library: Component library (empty library if None)
            parser: Parser for document-tree content
            fetcher: Entity fetcher (a DataFetcher with no local root if None)
            cache: Entity cache shared across rebuilds
        """
        self.library = library or StaticComponentLibrary()
        self.parser = parser
        self.fetcher = fetcher or DataFetcher()
        self.cache = cache or EntityCache()
        self.resolver = EntityResolver(self.cache, self.fetcher)
        self.website: Website = build_website(None)
        self._tasks: set[asyncio.Task[FetchResult | None]] = set()

    def rebuild(self, config: Mapping[str, Any] | None) -> Website:
        """Replace the website with one built from new content.

        The active route survives when the new content still has it. The
        swap is a single assignment, so readers see the old or the new
        website, never a mix.
        """
        previous_route = self.website.active_route
        website = build_website(config, parser=self.parser)
        self.cache.populate(website.fetched_data)
        if previous_route is not None:
            website.set_active_page(previous_route)
        self.website = website
        return website

    def is_current(self, section: Section) -> bool:
        """Check that a section still belongs to the current website."""
        return any(candidate is section for candidate in self.website.iter_sections())

    def compose(self, page: Page) -> ComposedPage:
        """Compose a page, scheduling fetches for pending entity data."""
        renderer = SectionRenderer(self.resolver, on_pending=self._schedule_fetch)
        return LayoutComposer(self.library, renderer).compose(page, self.website)

    async def fetch_if_current(self, section: Section) -> FetchResult | None:
        """Fetch a section's entity data and report it only if still relevant.

        Returns:
            FetchResult, or None when the section was replaced meanwhile
        """
        result = await self.resolver.fetch(section, section.descriptor)
        if not self.is_current(section):
            logger.debug(f"Discarding stale fetch result for section {section.id}")
            return None
        return result

    async def settle(self) -> None:
        """Wait for every scheduled fetch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        await self.settle()
        if isinstance(self.fetcher, DataFetcher):
            await self.fetcher.aclose()

    def _schedule_fetch(self, section: Section) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No event loop, not fetching data for section {section.id}")
            return

        task = loop.create_task(self.fetch_if_current(section))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
