"""Pages: one route each, with body sections and layout areas."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from blockstage.core.parser import DocumentParser
from blockstage.core.section import FetchDescriptor, Section, build_sections
from blockstage.core.types import Route

BODY_AREA = "body"
STANDARD_AREAS = ("header", "body", "footer", "left", "right")


class Page:
    """A single page: body sections plus references to shared areas.

    Body sections and page-declared areas belong to the page. Shared areas
    (``/@header``, ``/@footer``, ...) belong to the website and are only
    referenced here.
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        page_id: str,
        *,
        shared_areas: Mapping[str, list[Section]] | None = None,
        parser: DocumentParser | None = None,
    ) -> None:
        """Initialize page.

        Args:
            data: Page configuration (``route``, ``title``, ``description``,
                  ``order``, ``sections``, ``layout``, ``areas``, ``fetch``, ``id``)
            page_id: Positional identifier, used unless ``id`` is declared
            shared_areas: Website-owned sections keyed by area name
            parser: Parser for document-tree content
        """
        declared_id = data.get("id")
        self.id = str(declared_id) if declared_id not in (None, "") else page_id
        self.route = Route(str(data.get("route", "")))
        self.description = str(data.get("description") or "")
        self.order = data.get("order")

        self.body = build_sections(data.get("sections"), None, parser=parser)
        # Untitled pages take the title of their first section
        self.title = str(data.get("title") or "") or (self.body[0].title if self.body else "")
        self.own_areas: dict[str, list[Section]] = {}
        areas = data.get("areas")
        if isinstance(areas, Mapping):
            for name, items in areas.items():
                if name != BODY_AREA:
                    self.own_areas[str(name)] = build_sections(items, str(name), parser=parser)

        self.shared_areas: Mapping[str, list[Section]] = shared_areas or {}

        self.layout_name, self.layout_params, self.hidden_areas = _parse_layout(
            data.get("layout")
        )

        self.fetch = FetchDescriptor.from_config(data.get("fetch"))
        for section in self.body:
            section.set_inherited_fetch(self.fetch)
        for sections in self.own_areas.values():
            for section in sections:
                section.set_inherited_fetch(self.fetch)

        self.scroll_offset = 0.0

    def __repr__(self) -> str:
        return f"Page(route={self.route!r}, title={self.title!r})"

    def get_body(self) -> list[Section]:
        return self.body

    def get_header(self) -> list[Section]:
        return self.get_area("header")

    def get_footer(self) -> list[Section]:
        return self.get_area("footer")

    def get_area(self, name: str) -> list[Section]:
        """Get the sections placed in an area.

        Page-declared areas take precedence over shared ones; hidden shared
        areas are empty on this page.
        """
        if name == BODY_AREA:
            return self.body
        if name in self.own_areas:
            return self.own_areas[name]
        if name in self.hidden_areas:
            return []
        return self.shared_areas.get(name, [])

    def area_names(self) -> list[str]:
        """All area names with content on this page, standard areas first."""
        names = set(self.own_areas) | {
            name for name in self.shared_areas if name not in self.hidden_areas
        }
        names.add(BODY_AREA)
        ordered = [name for name in STANDARD_AREAS if name in names]
        ordered.extend(sorted(names - set(STANDARD_AREAS)))
        return ordered

    def get_areas(self) -> dict[str, list[Section]]:
        return {name: self.get_area(name) for name in self.area_names()}

    def get_page_sections(self) -> list[Section]:
        """Header, body and footer sections as one flat list."""
        return [*self.get_header(), *self.body, *self.get_footer()]

    def iter_sections(self) -> Iterator[Section]:
        """Yield every section on the page, nested ones included."""
        for sections in self.get_areas().values():
            for section in sections:
                yield from section.iter_sections()

    def iter_body_and_own_sections(self) -> Iterator[Section]:
        """Yield the sections this page owns, skipping shared areas."""
        for section in self.body:
            yield from section.iter_sections()
        for sections in self.own_areas.values():
            for section in sections:
                yield from section.iter_sections()

    def remember_scroll(self, offset: float) -> None:
        self.scroll_offset = max(0.0, float(offset))


def _parse_layout(value: object) -> tuple[str | None, dict[str, Any], frozenset[str]]:
    """Parse a page's layout setting.

    Accepts a layout name or a mapping with ``name``, ``params`` and ``hide``.
    """
    if isinstance(value, str):
        return value or None, {}, frozenset()
    if not isinstance(value, Mapping):
        return None, {}, frozenset()

    name = value.get("name")
    params = value.get("params")
    hide = value.get("hide")
    return (
        name if isinstance(name, str) and name else None,
        dict(params) if isinstance(params, Mapping) else {},
        frozenset(str(area) for area in hide) if isinstance(hide, list) else frozenset(),
    )
