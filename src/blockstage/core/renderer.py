"""Section rendering.

Turns an initialized section into the prepared props handed to the UI
renderer: normalized content with entity data merged in, params with
component defaults applied, and the wrapper element's attributes.
Failures are isolated per section and become placeholders.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from blockstage.core.content import apply_data_schemas
from blockstage.core.errors import SectionNotInitializedError
from blockstage.core.resolver import EntityResolver, Resolution, apply_resolution
from blockstage.core.section import Section
from blockstage.core.types import FetchStatus

logger = logging.getLogger(__name__)

CONTEXT_THEMES = ("light", "medium", "dark")
DEFAULT_TAG = "section"
PLACEHOLDER_COMPONENT = "Placeholder"


@dataclass
class RenderedSection:
    """Prepared output for one section."""

    id: str
    dom_id: str
    component: str
    content: dict[str, Any] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    state: Any = None
    tag: str = DEFAULT_TAG
    class_name: str = ""
    background: dict[str, Any] | None = None
    loading: bool = False
    fetch: dict[str, Any] | None = None
    children: list["RenderedSection"] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "domId": self.dom_id,
            "component": self.component,
            "content": self.content,
            "params": self.params,
            "state": self.state,
            "tag": self.tag,
            "className": self.class_name,
            "background": self.background,
            "loading": self.loading,
            "fetch": self.fetch,
            "children": [child.to_dict() for child in self.children],
        }
        if self.error is not None:
            result["error"] = self.error
        return result


class SectionRenderer:
    """Prepares sections for the UI renderer."""

    def __init__(
        self,
        resolver: EntityResolver,
        on_pending: Callable[[Section], None] | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            resolver: Entity resolver consulted for each section
            on_pending: Called with sections whose entity data must be fetched
        """
        self._resolver = resolver
        self._on_pending = on_pending

    def render(self, section: Section) -> RenderedSection:
        """Render one section and its children.

        Never raises: an uninitialized section, a missing component or an
        unexpected error renders as a placeholder carrying the error.
        """
        try:
            return self._render(section)
        except SectionNotInitializedError as e:
            logger.error(str(e))
            return _placeholder(section, str(e))
        except Exception as e:
            logger.exception(f"Failed to render section {section.id}")
            return _placeholder(section, f"Render failed: {e}")

    def _render(self, section: Section) -> RenderedSection:
        if not section.initialized:
            raise SectionNotInitializedError(section.id)

        meta = section.descriptor
        if meta is None:
            return _placeholder(section, f"Component not found: {section.component}")

        resolution = self._resolver.resolve(section, meta)
        if resolution.status is FetchStatus.PENDING and self._on_pending is not None:
            self._on_pending(section)

        props = section.prepare()
        content = props.content
        content["data"] = apply_resolution(content["data"], resolution)
        if resolution.status is FetchStatus.READY and meta.schema.data:
            # Fetched entities get the same field defaults as authored data
            content["data"] = apply_data_schemas(content["data"], meta.schema.data)

        background = section.background
        has_background = bool(background.get("mode")) and meta.background != "self"

        return RenderedSection(
            id=section.id,
            dom_id=f"section-{section.dom_id}",
            component=section.component,
            content=content,
            params=props.params,
            state=section.state.get(),
            tag=meta.as_ or DEFAULT_TAG,
            class_name=_class_name(section, meta.class_name),
            background=dict(background) if has_background else None,
            loading=section.data_loading,
            fetch=_fetch_dict(resolution),
            children=[self.render(child) for child in section.children],
        )


def _class_name(section: Section, component_class: str) -> str:
    """Context class, then state class, then the component's static class."""
    classes = []
    if section.theme in CONTEXT_THEMES:
        classes.append(f"context-{section.theme}")

    state = section.state.get()
    if isinstance(state, Mapping) and state.get("className"):
        classes.append(str(state["className"]))

    if component_class:
        classes.append(component_class)
    return " ".join(classes)


def _fetch_dict(resolution: Resolution) -> dict[str, Any] | None:
    if resolution.descriptor is None:
        return None
    return {**resolution.descriptor.to_dict(), "status": str(resolution.status)}


def _placeholder(section: Section, error: str) -> RenderedSection:
    return RenderedSection(
        id=section.id,
        dom_id=f"section-{section.dom_id}",
        component=PLACEHOLDER_COMPONENT,
        tag="div",
        class_name="block-error",
        error=error,
    )
