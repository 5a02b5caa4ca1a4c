"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest
from blockstage.config import (
    Config,
    FetchConfig,
    LiveReloadConfig,
    ServerConfig,
    SiteConfig,
)
from blockstage.core.components import (
    ComponentDescriptor,
    LayoutDescriptor,
    StaticComponentLibrary,
)
from blockstage.core.content import ComponentSchema


@pytest.fixture
def library() -> StaticComponentLibrary:
    """Component library with a few typical components."""
    return StaticComponentLibrary(
        [
            ComponentDescriptor(
                name="Hero",
                schema=ComponentSchema(defaults={"align": "center", "size": "lg"}),
                state={"expanded": False},
                as_="header",
                class_name="hero",
            ),
            ComponentDescriptor(name="Section"),
            ComponentDescriptor(
                name="TeamGrid",
                schema=ComponentSchema(
                    data={"team": {"role": {"default": "member"}}},
                ),
                inherits=("team",),
            ),
            ComponentDescriptor(name="Nav", as_="nav", background="self"),
        ],
        [
            LayoutDescriptor(
                name="Docs",
                defaults={"sidebar": "left", "width": "wide"},
                areas=("header", "left", "body", "footer"),
            ),
        ],
    )


@pytest.fixture
def site_data() -> dict[str, Any]:
    """Small site with shared header/footer and two pages."""
    return {
        "pages": [
            {"route": "/@header", "sections": [{"component": "Nav", "content": {"title": "Menu"}}]},
            {"route": "/@footer", "sections": [{"component": "Section", "content": {"title": "Footer"}}]},
            {
                "route": "/about",
                "title": "About",
                "order": 2,
                "sections": [{"component": "Section", "content": {"title": "About us"}}],
            },
            {
                "route": "/",
                "title": "Home",
                "order": 1,
                "sections": [
                    {"component": "Hero", "content": {"title": "Welcome"}},
                    {"component": "Section", "content": {"title": "Intro"}},
                ],
            },
        ],
        "theme": {"contexts": {"light": {"colors": {"bg": "#fff"}}}},
        "config": {"defaultLanguage": "en", "languages": ["en", "fr"]},
    }


@pytest.fixture
def content_file(tmp_path: Path, site_data: dict[str, Any]) -> Path:
    """Site content file written to tmp_path."""
    path = tmp_path / "site.json"
    path.write_text(json.dumps(site_data))
    return path


@pytest.fixture
def test_config(tmp_path: Path, content_file: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Live reload is disabled so the app doesn't start a file watcher.
    """
    public_dir = tmp_path / "public"
    public_dir.mkdir(exist_ok=True)

    return Config(
        server=ServerConfig(),
        site=SiteConfig(content_file=content_file, public_dir=public_dir),
        fetch=FetchConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
