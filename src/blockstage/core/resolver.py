"""Bridges sections to the entity cache.

``resolve`` never blocks: it answers from the cache or reports that a
fetch is pending. ``fetch`` performs the retrieval through the cache, so
concurrent requests for one key share a single load.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from blockstage.core.cache import EntityCache, FetchResult
from blockstage.core.components import ComponentDescriptor
from blockstage.core.fetcher import Fetcher, merge_into_data
from blockstage.core.section import FetchDescriptor, Section
from blockstage.core.types import FetchStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Result of a synchronous resolve."""

    status: FetchStatus
    data: Any = None
    descriptor: FetchDescriptor | None = None
    inherited: bool = False

    @property
    def entities(self) -> dict[str, Any]:
        """Resolved data keyed by schema (empty unless ready)."""
        if self.status is not FetchStatus.READY or self.descriptor is None:
            return {}
        return {self.descriptor.schema: self.data}


class EntityResolver:
    """Resolves a section's entity data from cache or by fetching it."""

    def __init__(self, cache: EntityCache, fetcher: Fetcher) -> None:
        self.cache = cache
        self.fetcher = fetcher

    def descriptor_for(
        self,
        section: Section,
        meta: ComponentDescriptor | None,
    ) -> tuple[FetchDescriptor | None, bool]:
        """Pick the fetch descriptor that applies to a section.

        The section's own descriptor wins. A page-level descriptor applies
        only when the component lists its schema in ``inherits``.

        Returns:
            Descriptor (or None) and whether it was inherited
        """
        if section.fetch is not None:
            return section.fetch, False
        inherited = section.inherited_fetch
        if inherited is not None and meta is not None and inherited.schema in meta.inherits:
            return inherited, True
        return None, False

    def resolve(self, section: Section, meta: ComponentDescriptor | None) -> Resolution:
        """Return cached data, or mark a fetch pending.

        Build-time (``prerender``) descriptors are never fetched at runtime:
        without a cache entry their data is absent.
        """
        descriptor, inherited = self.descriptor_for(section, meta)
        if descriptor is None:
            return Resolution(FetchStatus.ABSENT)

        entry = self.cache.get(descriptor.cache_key)
        if entry.status is FetchStatus.READY:
            section.data_loading = False
            return Resolution(FetchStatus.READY, entry.data, descriptor, inherited)

        if descriptor.prerender:
            return Resolution(FetchStatus.ABSENT, None, descriptor, inherited)

        self.cache.mark_pending(descriptor.cache_key)
        section.data_loading = True
        return Resolution(FetchStatus.PENDING, None, descriptor, inherited)

    async def fetch(self, section: Section, meta: ComponentDescriptor | None) -> FetchResult:
        """Retrieve a section's entity data through the cache.

        Returns:
            FetchResult; failures come back as an error value
        """
        descriptor, _ = self.descriptor_for(section, meta)
        if descriptor is None:
            return FetchResult(error="No fetch configuration")

        section.data_loading = True
        try:
            result = await self.cache.load(
                descriptor.cache_key,
                lambda: self.fetcher.fetch(descriptor),
            )
        finally:
            section.data_loading = False

        if not result.ok:
            logger.warning(f"Entity data unavailable for section {section.id}: {result.error}")
        return result


def apply_resolution(content_data: Mapping[str, Any], resolution: Resolution) -> dict[str, Any]:
    """Merge resolved entity data into a section's content ``data`` map.

    Data from the section's own descriptor replaces (or, in merge mode,
    combines with) the authored value. Inherited data only fills gaps:
    keys the section authored itself are kept.
    """
    data = dict(content_data)
    if (
        resolution.status is not FetchStatus.READY
        or resolution.descriptor is None
        or resolution.data is None
    ):
        return data

    schema = resolution.descriptor.schema
    if resolution.inherited:
        if schema not in data:
            data[schema] = resolution.data
        return data

    data[schema] = merge_into_data(data.get(schema), resolution.data, resolution.descriptor.merge)
    return data
