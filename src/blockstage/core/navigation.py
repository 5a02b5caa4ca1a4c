"""Navigation tree builder.

Builds a navigation tree from the website's page routes. A page nests
under the closest page whose route is a path prefix of its own
(``/docs/intro`` under ``/docs``); pages with no such ancestor are roots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict

from blockstage.core.page import Page
from blockstage.core.types import Route
from blockstage.core.website import Website


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    route: str
    children: list[NavItemDict]


@dataclass
class NavItem:
    """Navigation item with children for UI tree."""

    title: str
    route: Route
    children: list[NavItem] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "route": self.route}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def build_navigation(website: Website) -> list[NavItem]:
    """Build navigation tree from the website's pages, in page order.

    Args:
        website: Website to build navigation from

    Returns:
        List of NavItem trees for navigation UI
    """
    items = {page.route: NavItem(title=page.title, route=page.route) for page in website.pages}

    roots: list[NavItem] = []
    for page in website.pages:
        parent = _find_parent(page, items)
        if parent is None:
            roots.append(items[page.route])
        else:
            parent.children.append(items[page.route])
    return roots


def _find_parent(page: Page, items: dict[Route, NavItem]) -> NavItem | None:
    segments = [segment for segment in page.route.split("/") if segment]
    while len(segments) > 1:
        segments.pop()
        candidate = Route("/" + "/".join(segments))
        if candidate in items:
            return items[candidate]
    return None
