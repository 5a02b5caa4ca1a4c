"""Sections: the renderable units of page content.

A section holds its raw and parsed content, its params, nested child
sections, a resettable local state container and an optional fetch
descriptor. Child sections are built before anything else so positional
identifiers are assigned depth-first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from copy import deepcopy
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from blockstage.core.content import NormalizedProps, normalize
from blockstage.core.parser import DocumentParser, parse_content

if TYPE_CHECKING:
    from blockstage.core.components import ComponentDescriptor, ComponentLibrary

logger = logging.getLogger(__name__)

DEFAULT_COMPONENT = "Section"
DEFAULT_THEME = "light"


@dataclass(frozen=True)
class FetchDescriptor:
    """Where a section's entity data comes from.

    Attributes:
        schema: Key the data is stored under in ``content["data"]``
        path: Local path relative to the site root
        url: Remote URL
        transform: Dotted path extracted from the response
        merge: Combine with existing data instead of replacing it
        prerender: Data is expected to be pre-populated at build time
    """

    schema: str
    path: str | None = None
    url: str | None = None
    transform: str | None = None
    merge: bool = False
    prerender: bool = True

    @property
    def source(self) -> str | None:
        return self.path or self.url

    @property
    def cache_key(self) -> str:
        """Entity cache key: schema, source and transform."""
        key = f"{self.schema}:{self.source or ''}"
        if self.transform:
            key = f"{key}#{self.transform}"
        return key

    @classmethod
    def from_config(cls, data: object) -> FetchDescriptor | None:
        """Build a descriptor from section or page configuration.

        Accepts a bare path/URL string or a mapping with ``path``, ``url``,
        ``schema``, ``transform``, ``merge`` and ``prerender``. The schema
        defaults to the file stem of the source (``/data/team.json`` -> ``team``).

        Returns:
            FetchDescriptor, or None when no schema can be determined
        """
        if isinstance(data, str):
            data = {"url": data} if _is_remote(data) else {"path": data}
        if not isinstance(data, Mapping):
            return None

        path = data.get("path")
        url = data.get("url")
        path = path if isinstance(path, str) and path else None
        url = url if isinstance(url, str) and url else None

        schema = data.get("schema")
        if not isinstance(schema, str) or not schema:
            schema = _schema_from_source(path or url)
        if not schema:
            logger.warning(f"Ignoring fetch configuration without schema: {data!r}")
            return None

        transform = data.get("transform")
        return cls(
            schema=schema,
            path=path,
            url=url,
            transform=transform if isinstance(transform, str) and transform else None,
            merge=bool(data.get("merge", False)),
            prerender=bool(data.get("prerender", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "schema": self.schema,
            "merge": self.merge,
            "prerender": self.prerender,
        }
        if self.path:
            result["path"] = self.path
        if self.url:
            result["url"] = self.url
        if self.transform:
            result["transform"] = self.transform
        return result


def _is_remote(source: str) -> bool:
    return urlsplit(source).scheme in ("http", "https")


def _schema_from_source(source: str | None) -> str | None:
    if not source:
        return None
    stem = PurePosixPath(urlsplit(source).path).stem
    return stem or None


class SectionState:
    """Resettable local UI state of a section.

    The start state is captured once, from the component's declared
    defaults, and serves as both the initial value and the reset target.
    Renderers subscribe to be told about changes.
    """

    __slots__ = ("_captured", "_listeners", "_start", "_value")

    def __init__(self) -> None:
        self._start: Any = None
        self._value: Any = None
        self._captured = False
        self._listeners: list[Callable[[Any], None]] = []

    @property
    def start(self) -> Any:
        return deepcopy(self._start)

    @property
    def captured(self) -> bool:
        return self._captured

    def capture(self, start: Any) -> bool:
        """Record the start state; later calls are ignored.

        Returns:
            True if this call captured the start state
        """
        if self._captured:
            return False
        self._captured = True
        self._start = deepcopy(start)
        self._value = deepcopy(start)
        return True

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value
        self._notify()

    def reset(self) -> None:
        self._value = deepcopy(self._start)
        self._notify()

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._value)


class Section:
    """One renderable unit of page content."""

    def __init__(
        self,
        data: Mapping[str, Any],
        section_id: str,
        *,
        parser: DocumentParser | None = None,
        parent: Section | None = None,
    ) -> None:
        """Build a section and, recursively, its children.

        Args:
            data: Section configuration (``component``, ``preset``, ``input``,
                  ``params``, ``content``, ``subsections``, ``fetch``, ``id``)
            section_id: Positional identifier
            parser: Parser for document-tree content
            parent: Enclosing section for nested subsections
        """
        self.id = section_id
        self.parent = parent

        # Children first: ids are assigned depth-first before parsing
        subsections = data.get("subsections") or []
        self.children = [
            Section(child, f"{section_id}_{i}", parser=parser, parent=self)
            for i, child in enumerate(subsections)
            if isinstance(child, Mapping)
        ]
        _link_siblings(self.children)

        stable_id = data.get("id", data.get("stableId"))
        self.stable_id = str(stable_id) if stable_id not in (None, "") else None
        self.component = str(data.get("component") or DEFAULT_COMPONENT)
        self.preset = data.get("preset")
        self.input = data.get("input")

        self.raw_content = data.get("content") or {}
        self.parsed_content = parse_content(self.raw_content, parser)

        params = data.get("params") or {}
        if not isinstance(params, Mapping):
            params = {}
        standard_options = params.get("standardOptions") or {}
        self.properties: dict[str, Any] = {
            k: v for k, v in params.items() if k != "standardOptions"
        }
        self.theme = str(params.get("theme") or DEFAULT_THEME)
        background = params.get("background") or standard_options.get("background") or {}
        self.background: dict[str, Any] = dict(background) if isinstance(background, Mapping) else {}

        self.fetch = FetchDescriptor.from_config(data.get("fetch"))
        self.inherited_fetch: FetchDescriptor | None = None

        self.state = SectionState()
        self.descriptor: ComponentDescriptor | None = None
        self.initialized = False
        self.data_loading = False

        self._siblings: list[Section] = [self]

    def __repr__(self) -> str:
        return f"Section(id={self.id!r}, component={self.component!r})"

    @property
    def dom_id(self) -> str:
        """Stable identifier when declared, positional otherwise."""
        return self.stable_id or self.id

    @property
    def title(self) -> str:
        return normalize(self.parsed_content).content["title"]

    def init_component(self, library: ComponentLibrary) -> ComponentDescriptor | None:
        """Resolve this section's component and capture its default state.

        Runs once; later calls return the descriptor resolved the first time.

        Returns:
            ComponentDescriptor, or None if the library doesn't know the component
        """
        if self.initialized:
            return self.descriptor

        self.initialized = True
        self.descriptor = library.resolve(self.component)
        if self.descriptor is None:
            logger.warning(f"Component not found: {self.component} (section {self.id})")
            return None

        self.state.capture(self.descriptor.state)
        return self.descriptor

    def prepare(self) -> NormalizedProps:
        """Normalize content and params against the resolved component schema."""
        schema = self.descriptor.schema if self.descriptor is not None else None
        return normalize(self.parsed_content, schema, self.properties)

    def iter_sections(self) -> Iterator[Section]:
        """Yield this section and all nested sections, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_sections()

    @property
    def index(self) -> int:
        return next(i for i, s in enumerate(self._siblings) if s is self)

    def previous_sibling(self) -> Section | None:
        idx = self.index
        return self._siblings[idx - 1] if idx > 0 else None

    def next_sibling(self) -> Section | None:
        idx = self.index
        return self._siblings[idx + 1] if idx + 1 < len(self._siblings) else None

    def get_links(
        self,
        *,
        nested: bool = False,
        make_href: Callable[[str], str] | None = None,
    ) -> list[dict[str, Any]]:
        """Return the section's links.

        Args:
            nested: Build a link tree from the first list instead of the flat links
            make_href: Route transformation applied to each href

        Returns:
            Flat ``{route, label}`` links, or nested ``{label, route, child_items,
            has_data}`` entries
        """
        href = make_href or (lambda value: value)
        content = normalize(self.parsed_content).content

        if nested:
            lists = content["lists"]
            return parse_nested_links(lists[0] if lists else [], href)

        return [
            {"route": href(str(link.get("href", ""))), "label": link.get("label", "")}
            for link in content["links"]
            if isinstance(link, Mapping)
        ]

    def set_inherited_fetch(self, descriptor: FetchDescriptor | None) -> None:
        for section in self.iter_sections():
            section.inherited_fetch = descriptor

    def _set_siblings(self, siblings: list[Section]) -> None:
        self._siblings = siblings


def build_sections(
    items: object,
    prefix: str | None,
    *,
    parser: DocumentParser | None = None,
) -> list[Section]:
    """Build a sibling list of sections from configuration.

    Args:
        items: List of section mappings (anything else yields no sections)
        prefix: Id prefix (``header`` -> ``header_0``); None for plain indices
        parser: Parser for document-tree content

    Returns:
        Sections linked as siblings, in configuration order
    """
    if not isinstance(items, list):
        return []
    sections = [
        Section(item, f"{prefix}_{i}" if prefix else str(i), parser=parser)
        for i, item in enumerate(items)
        if isinstance(item, Mapping)
    ]
    _link_siblings(sections)
    return sections


def parse_nested_links(
    items: object,
    make_href: Callable[[str], str],
) -> list[dict[str, Any]]:
    """Parse a nested list of links into a link tree.

    Each list item contributes its first link (or first paragraph as an
    unlinked label) and recurses into its first nested list.
    """
    if not isinstance(items, list):
        return []

    parsed: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        links = item.get("links") or []
        lists = item.get("lists") or []
        paragraphs = item.get("paragraphs") or []

        link = links[0] if links and isinstance(links[0], Mapping) else None
        nested = lists[0] if lists else None
        child_items = parse_nested_links(nested, make_href) if nested else []

        if link is not None:
            parsed.append(
                {
                    "label": link.get("label", ""),
                    "route": make_href(str(link.get("href", ""))),
                    "child_items": child_items,
                    "has_data": True,
                }
            )
        else:
            parsed.append(
                {
                    "label": paragraphs[0] if paragraphs else "",
                    "route": make_href(""),
                    "child_items": child_items,
                    "has_data": False,
                }
            )

    return parsed


def _link_siblings(sections: list[Section]) -> None:
    for section in sections:
        section._set_siblings(sections)
