"""Layout composition.

Groups a page's sections into named areas and renders them in two phases:
every section in every area is initialized before any section is rendered,
so sibling queries during render always see initialized neighbours.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from blockstage.core.components import (
    DEFAULT_AREAS,
    ComponentLibrary,
    LayoutDescriptor,
    MemoizedLibrary,
)
from blockstage.core.content import apply_defaults
from blockstage.core.page import Page
from blockstage.core.renderer import RenderedSection, SectionRenderer

if TYPE_CHECKING:
    from blockstage.core.website import Website

logger = logging.getLogger(__name__)


@dataclass
class ComposedPage:
    """A page with every area rendered.

    Attributes:
        page: Page that was composed
        layout: Name of the custom layout used, or None for the default
        params: Layout params with layout defaults applied
        areas: Rendered sections per area name
        output: Layout output; the ordered section list for the default layout
    """

    page: Page
    layout: str | None
    params: dict[str, Any] = field(default_factory=dict)
    areas: dict[str, list[RenderedSection]] = field(default_factory=dict)
    output: Any = None

    def to_dict(self) -> dict[str, Any]:
        output = self.output
        if isinstance(output, list) and all(isinstance(s, RenderedSection) for s in output):
            output = [section.to_dict() for section in output]
        return {
            "route": self.page.route,
            "title": self.page.title,
            "description": self.page.description,
            "layout": self.layout,
            "params": self.params,
            "areas": {
                name: [section.to_dict() for section in sections]
                for name, sections in self.areas.items()
            },
            "output": output,
        }


class LayoutComposer:
    """Assembles a page's areas into the tree handed to the UI renderer."""

    def __init__(self, library: ComponentLibrary, renderer: SectionRenderer) -> None:
        self._library = library
        self._renderer = renderer

    def compose(self, page: Page, website: "Website | None" = None) -> ComposedPage:
        """Initialize, then render, every section of a page.

        Args:
            page: Page to compose
            website: Website the page belongs to, passed to custom layouts

        Returns:
            ComposedPage
        """
        areas = page.get_areas()

        # Phase 1: resolve components and capture default state everywhere
        library = MemoizedLibrary(self._library)
        for sections in areas.values():
            for section in sections:
                for nested in section.iter_sections():
                    nested.init_component(library)

        # Phase 2: render
        rendered = {
            name: [self._renderer.render(section) for section in sections]
            for name, sections in areas.items()
        }

        layout = self._get_layout(page)
        params = apply_defaults(page.layout_params, layout.defaults if layout else None)

        if layout is not None and layout.render is not None:
            output = layout.render(page=page, website=website, params=params, areas=rendered)
        else:
            order = layout.areas if layout is not None else DEFAULT_AREAS
            output = [section for name in order for section in rendered.get(name, [])]

        return ComposedPage(
            page=page,
            layout=layout.name if layout else None,
            params=params,
            areas=rendered,
            output=output,
        )

    def _get_layout(self, page: Page) -> LayoutDescriptor | None:
        if page.layout_name is None:
            return None
        layout = self._library.get_layout(page.layout_name)
        if layout is None:
            logger.warning(f"Layout not found: {page.layout_name} (page {page.route}), using default")
        return layout
