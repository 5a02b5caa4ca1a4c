"""Component library interface.

The visual components themselves live outside Blockstage. The core only
needs each component's declared metadata: its schema, default local state,
wrapper tag and class name. A component library resolves names to that
metadata; an unresolved name is an explicit ``None``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from blockstage.core.content import ComponentSchema

logger = logging.getLogger(__name__)

DEFAULT_AREAS = ("header", "body", "footer")


@dataclass(frozen=True)
class ComponentDescriptor:
    """Declared metadata for one component."""

    name: str
    schema: ComponentSchema = field(default_factory=ComponentSchema)
    state: Any = None
    as_: str | None = None
    class_name: str = ""
    background: str | None = None
    inherits: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> ComponentDescriptor:
        """Build a descriptor from a manifest entry.

        Args:
            name: Component name
            data: Manifest entry (``defaults``, ``schemas``, ``state``, ``as``,
                  ``className``, ``background``, ``inherits``)

        Returns:
            ComponentDescriptor

        Raises:
            ValueError: If a field has the wrong type
        """
        defaults = data.get("defaults", {})
        if not isinstance(defaults, Mapping):
            raise ValueError(f"components.{name}.defaults must be a mapping")

        schemas = data.get("schemas", {})
        if not isinstance(schemas, Mapping):
            raise ValueError(f"components.{name}.schemas must be a mapping")

        as_ = data.get("as")
        if as_ is not None and not isinstance(as_, str):
            raise ValueError(f"components.{name}.as must be a string")

        inherits = data.get("inherits", [])
        if isinstance(inherits, str):
            inherits = [inherits]
        if not isinstance(inherits, list):
            raise ValueError(f"components.{name}.inherits must be a list")

        return cls(
            name=name,
            schema=ComponentSchema(defaults=dict(defaults), data=dict(schemas)),
            state=data.get("state"),
            as_=as_,
            class_name=str(data.get("className", "")),
            background=data.get("background"),
            inherits=tuple(str(item) for item in inherits),
        )


@dataclass(frozen=True)
class LayoutDescriptor:
    """Declared metadata for a custom page layout.

    Attributes:
        name: Layout name pages refer to
        defaults: Layout param defaults
        areas: Area names the layout places, in order
        render: Optional callable receiving the pre-rendered areas
    """

    name: str
    defaults: Mapping[str, Any] = field(default_factory=dict)
    areas: tuple[str, ...] = DEFAULT_AREAS
    render: Callable[..., Any] | None = None

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> LayoutDescriptor:
        defaults = data.get("defaults", {})
        if not isinstance(defaults, Mapping):
            raise ValueError(f"layouts.{name}.defaults must be a mapping")

        areas = data.get("areas", list(DEFAULT_AREAS))
        if not isinstance(areas, list) or not all(isinstance(a, str) for a in areas):
            raise ValueError(f"layouts.{name}.areas must be a list of strings")

        return cls(name=name, defaults=dict(defaults), areas=tuple(areas))


class ComponentLibrary(Protocol):
    """Resolves component and layout names to their declared metadata."""

    def resolve(self, name: str) -> ComponentDescriptor | None: ...

    def get_layout(self, name: str) -> LayoutDescriptor | None: ...


class StaticComponentLibrary:
    """In-memory component library."""

    def __init__(
        self,
        components: Iterable[ComponentDescriptor] = (),
        layouts: Iterable[LayoutDescriptor] = (),
    ) -> None:
        self._components = {c.name: c for c in components}
        self._layouts = {layout.name: layout for layout in layouts}

    def resolve(self, name: str) -> ComponentDescriptor | None:
        return self._components.get(name)

    def get_layout(self, name: str) -> LayoutDescriptor | None:
        return self._layouts.get(name)

    def list_components(self) -> list[str]:
        return sorted(self._components)

    @classmethod
    def from_manifest(cls, data: object) -> StaticComponentLibrary:
        """Build a library from a manifest mapping.

        Manifest format::

            {"components": {"Hero": {...}}, "layouts": {"Docs": {...}}}

        Raises:
            ValueError: If the manifest is malformed
        """
        if not isinstance(data, Mapping):
            raise ValueError("Component manifest must be a mapping")

        components_raw = data.get("components", {})
        layouts_raw = data.get("layouts", {})
        if not isinstance(components_raw, Mapping):
            raise ValueError("components section must be a mapping")
        if not isinstance(layouts_raw, Mapping):
            raise ValueError("layouts section must be a mapping")

        components = [
            ComponentDescriptor.from_dict(name, entry if isinstance(entry, Mapping) else {})
            for name, entry in components_raw.items()
        ]
        layouts = [
            LayoutDescriptor.from_dict(name, entry if isinstance(entry, Mapping) else {})
            for name, entry in layouts_raw.items()
        ]
        return cls(components, layouts)

    @classmethod
    def load(cls, path: Path) -> StaticComponentLibrary:
        """Load a library from a JSON manifest file.

        Raises:
            FileNotFoundError: If the manifest doesn't exist
            ValueError: If the manifest is malformed
        """
        if not path.exists():
            raise FileNotFoundError(f"Component manifest not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid component manifest {path}: {e}") from e

        library = cls.from_manifest(data)
        logger.info(f"Loaded {len(library.list_components())} components from {path}")
        return library


class MemoizedLibrary:
    """Wraps a library so each name is resolved at most once.

    One instance lives for a single render pass.
    """

    def __init__(self, library: ComponentLibrary) -> None:
        self._library = library
        self._resolved: dict[str, ComponentDescriptor | None] = {}

    def resolve(self, name: str) -> ComponentDescriptor | None:
        if name not in self._resolved:
            self._resolved[name] = self._library.resolve(name)
        return self._resolved[name]

    def get_layout(self, name: str) -> LayoutDescriptor | None:
        return self._library.get_layout(name)
