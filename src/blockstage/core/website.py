"""Website: the root of the content tree.

Built once per content load from the site configuration and never patched
field by field: a content edit produces a new Website. Holds the pages,
the shared area sections, theme data and navigation state (active page
and active language).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from blockstage.core.page import Page
from blockstage.core.parser import DocumentParser
from blockstage.core.section import Section, build_sections
from blockstage.core.types import Route

logger = logging.getLogger(__name__)

AREA_ROUTE_PREFIX = "/@"
HOME_ROUTES = ("/", "/index")
DEFAULT_ORDER = 999


@dataclass(frozen=True)
class Language:
    """Language option offered by the site."""

    label: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


DEFAULT_LANGUAGES = (
    Language(label="English", value="en"),
    Language(label="français", value="fr"),
)


class Website:
    """Pages, shared areas, theme and navigation state of one site."""

    def __init__(
        self,
        pages: list[Page],
        *,
        shared_areas: Mapping[str, list[Section]] | None = None,
        theme: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        languages: list[Language] | None = None,
        default_language: str | None = None,
        fetched_data: list[Any] | None = None,
    ) -> None:
        self.pages = pages
        self.shared_areas: Mapping[str, list[Section]] = shared_areas or {}
        self.theme: Mapping[str, Any] = theme or {}
        self.config: Mapping[str, Any] = config or {}
        self.languages = languages or list(DEFAULT_LANGUAGES)
        self.default_language = default_language or self.languages[0].value
        self.active_language = self.default_language
        self.fetched_data = fetched_data or []

        self._route_index = {page.route: page for page in pages}
        self.active_page: Page | None = self._initial_page()

    def __repr__(self) -> str:
        return f"Website(pages={len(self.pages)}, active={self.active_route!r})"

    @property
    def page_routes(self) -> list[Route]:
        return [page.route for page in self.pages]

    @property
    def active_route(self) -> Route | None:
        return self.active_page.route if self.active_page else None

    @property
    def is_empty(self) -> bool:
        return not self.pages

    def get_page(self, route: str) -> Page | None:
        """Get page by exact route."""
        return self._route_index.get(Route(route))

    def set_active_page(self, route: str) -> None:
        """Make the page at ``route`` active; unknown routes are ignored."""
        page = self.get_page(route)
        if page is not None:
            self.active_page = page

    def get_languages(self) -> list[Language]:
        return self.languages

    def get_language(self) -> str:
        return self.active_language

    def set_language(self, lang: str) -> None:
        """Switch the active language; codes not offered by the site are ignored."""
        if any(language.value == lang for language in self.languages):
            self.active_language = lang

    def resolve_language(self, lang: str | None) -> str:
        """Language to serve for a requested code, without switching the site's own."""
        if lang and any(language.value == lang for language in self.languages):
            return lang
        return self.active_language

    def localize(
        self,
        value: object,
        default: str = "",
        lang: str | None = None,
        fallback_to_default_lang: bool = False,
    ) -> Any:
        """Pick the value for a language from a localized value.

        Args:
            value: Plain string, mapping of language code to value, or the
                   JSON encoding of such a mapping
            default: Returned when no value is found
            lang: Language code (default: active language)
            fallback_to_default_lang: Try the site's default language before
                                      returning ``default``

        Returns:
            Localized value; strings that aren't localized come back unchanged
        """
        lang = lang or self.active_language

        if isinstance(value, Mapping):
            return self._pick(value, lang, default, fallback_to_default_lang)

        if isinstance(value, str):
            if not value.startswith(("{", '"')):
                return value
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return value
            if isinstance(decoded, Mapping):
                return self._pick(decoded, lang, default, fallback_to_default_lang)
            return decoded

        return default

    def make_href(self, href: str) -> str:
        return href

    def iter_sections(self) -> Iterator[Section]:
        """Yield every section in the tree, shared areas included, once each."""
        for sections in self.shared_areas.values():
            for section in sections:
                yield from section.iter_sections()
        for page in self.pages:
            yield from page.iter_body_and_own_sections()

    def get_search_data(self) -> list[dict[str, Any]]:
        """Per-page search entries with the titles of their sections."""
        return [
            {
                "id": page.id,
                "title": page.title,
                "href": page.route,
                "route": page.route,
                "description": page.description,
                "content": "\n".join(
                    title for section in page.get_page_sections() if (title := section.title)
                ),
            }
            for page in self.pages
        ]

    def _initial_page(self) -> Page | None:
        for route in HOME_ROUTES:
            page = self.get_page(route)
            if page is not None:
                return page
        return self.pages[0] if self.pages else None

    def _pick(
        self,
        values: Mapping[str, Any],
        lang: str,
        default: str,
        fallback_to_default_lang: bool,
    ) -> Any:
        if values.get(lang):
            return values[lang]
        if fallback_to_default_lang and values.get(self.default_language):
            return values[self.default_language]
        return default


def build_website(
    config: Mapping[str, Any] | None,
    *,
    parser: DocumentParser | None = None,
) -> Website:
    """Build the content tree from site configuration.

    Pages routed ``/@<name>`` become shared areas (``/@header`` -> ``header``).
    Top-level ``header`` and ``footer`` page entries are accepted as well.
    Remaining pages are ordered by ``order`` (stable) and indexed by route;
    when two pages share a route the first one wins.

    Missing content is not an error: without ``pages`` the result is an
    empty website with no active page.

    Args:
        config: Site configuration (``pages``, ``theme``, ``config``,
                ``header``, ``footer``, ``fetched_data``)
        parser: Parser for document-tree content

    Returns:
        Website
    """
    if not isinstance(config, Mapping) or not isinstance(config.get("pages"), list):
        logger.info("No pages in site configuration, building empty website")
        site_config = config.get("config") if isinstance(config, Mapping) else None
        return Website([], **_site_options(site_config))

    area_pages: dict[str, Mapping[str, Any]] = {}
    for name in ("header", "footer"):
        entry = config.get(name)
        if isinstance(entry, Mapping):
            area_pages[name] = entry

    regular: list[Mapping[str, Any]] = []
    for entry in config["pages"]:
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping page entry that is not a mapping: {entry!r}")
            continue
        route = entry.get("route")
        if not isinstance(route, str) or not route:
            logger.warning(f"Skipping page without route: {entry.get('title', '')!r}")
            continue
        if route.startswith(AREA_ROUTE_PREFIX):
            area_pages.setdefault(route[len(AREA_ROUTE_PREFIX):], entry)
        else:
            regular.append(entry)

    shared_areas = {
        name: build_sections(entry.get("sections"), name, parser=parser)
        for name, entry in area_pages.items()
    }

    regular.sort(key=_page_order)

    pages: list[Page] = []
    seen: set[str] = set()
    for entry in regular:
        route = entry["route"]
        if route in seen:
            logger.warning(f"Duplicate route {route}, keeping the first page")
            continue
        seen.add(route)
        pages.append(
            Page(entry, str(len(pages)), shared_areas=shared_areas, parser=parser)
        )

    fetched = config.get("fetched_data")
    website = Website(
        pages,
        shared_areas=shared_areas,
        theme=config.get("theme") if isinstance(config.get("theme"), Mapping) else None,
        fetched_data=fetched if isinstance(fetched, list) else None,
        **_site_options(config.get("config")),
    )
    logger.info(f"Built website with {len(pages)} pages")
    return website


def _page_order(entry: Mapping[str, Any]) -> float:
    order = entry.get("order")
    if isinstance(order, (int, float)) and not isinstance(order, bool):
        return float(order)
    return float(DEFAULT_ORDER)


def _site_options(site_config: object) -> dict[str, Any]:
    if not isinstance(site_config, Mapping):
        return {}

    languages = _parse_languages(site_config.get("languages"))
    default_language = site_config.get("defaultLanguage")
    return {
        "config": site_config,
        "languages": languages,
        "default_language": default_language if isinstance(default_language, str) else None,
    }


def _parse_languages(value: object) -> list[Language] | None:
    if not isinstance(value, list):
        return None

    languages: list[Language] = []
    for item in value:
        if isinstance(item, str):
            languages.append(Language(label=item, value=item))
        elif isinstance(item, Mapping) and isinstance(item.get("value"), str):
            languages.append(Language(label=str(item.get("label", item["value"])), value=item["value"]))
    return languages or None
