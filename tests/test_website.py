"""Tests for Website and build_website()."""

from typing import Any

import pytest
from blockstage.core.website import Language, Website, build_website


class TestBuildWebsite:
    """Tests for build_website()."""

    @pytest.mark.parametrize("config", [None, {}, {"pages": None}, {"pages": "nope"}])
    def test__no_pages__returns_empty_website(self, config) -> None:
        """Build an empty, navigable website when content is absent."""
        website = build_website(config)

        assert website.pages == []
        assert website.is_empty
        assert website.active_page is None
        assert website.get_page("/") is None

    def test__area_routes__become_shared_areas(self, site_data: dict[str, Any]) -> None:
        """Partition /@name pages into shared areas."""
        website = build_website(site_data)

        assert website.page_routes == ["/", "/about"]
        assert set(website.shared_areas) == {"header", "footer"}
        assert website.shared_areas["header"][0].id == "header_0"

    def test__shared_area__same_sections_on_every_page(self, site_data: dict[str, Any]) -> None:
        """Reference shared sections from every page."""
        website = build_website(site_data)

        home = website.get_page("/")
        about = website.get_page("/about")

        assert home is not None and about is not None
        assert home.get_header()[0] is about.get_header()[0]

    def test__top_level_header_footer__accepted(self) -> None:
        """Accept header and footer declared beside the page list."""
        website = build_website(
            {
                "pages": [{"route": "/"}],
                "header": {"sections": [{"component": "Nav"}]},
            }
        )

        assert [s.component for s in website.shared_areas["header"]] == ["Nav"]

    def test__pages__sorted_by_order_stably(self) -> None:
        """Order pages by their order field, unordered pages last."""
        website = build_website(
            {
                "pages": [
                    {"route": "/c"},
                    {"route": "/b", "order": 2},
                    {"route": "/d"},
                    {"route": "/a", "order": 1},
                ]
            }
        )

        assert website.page_routes == ["/a", "/b", "/c", "/d"]

    def test__duplicate_route__first_wins(self) -> None:
        """Keep the first page when two pages share a route."""
        website = build_website(
            {
                "pages": [
                    {"route": "/about", "title": "First"},
                    {"route": "/about", "title": "Second"},
                ]
            }
        )

        assert len(website.pages) == 1
        page = website.get_page("/about")
        assert page is not None
        assert page.title == "First"

    def test__page_without_route__skipped(self) -> None:
        """Skip page entries with no route."""
        website = build_website({"pages": [{"title": "Orphan"}, {"route": "/"}]})

        assert website.page_routes == ["/"]

    def test__active_page__defaults_to_root(self, site_data: dict[str, Any]) -> None:
        """Activate the / page initially."""
        website = build_website(site_data)

        assert website.active_route == "/"

    def test__active_page__falls_back_to_first(self) -> None:
        """Activate the first page when there is no / route."""
        website = build_website({"pages": [{"route": "/b", "order": 2}, {"route": "/a", "order": 1}]})

        assert website.active_route == "/a"

    def test__hero_title__reflected_after_normalization(self) -> None:
        """Expose the hero title on an untitled page."""
        website = build_website(
            {"pages": [{"route": "/", "sections": [{"component": "Hero", "content": {"title": "Welcome"}}]}]}
        )

        page = website.get_page("/")

        assert page is not None
        assert page.title == "Welcome"
        assert page.body[0].prepare().content["subtitle"] == ""


class TestNavigationState:
    """Tests for active page and language switching."""

    def test__get_page__exact_match_only(self, site_data: dict[str, Any]) -> None:
        """Match routes exactly, without normalization."""
        website = build_website(site_data)

        assert website.get_page("/about") is not None
        assert website.get_page("/about/") is None
        assert website.get_page("about") is None

    def test__set_active_page__switches(self, site_data: dict[str, Any]) -> None:
        """Switch the active page."""
        website = build_website(site_data)

        website.set_active_page("/about")
        website.set_active_page("/about")

        assert website.active_route == "/about"

    def test__set_active_page__unknown_route__no_op(self, site_data: dict[str, Any]) -> None:
        """Ignore unknown routes."""
        website = build_website(site_data)

        website.set_active_page("/missing")

        assert website.active_route == "/"

    def test__languages__from_config(self, site_data: dict[str, Any]) -> None:
        """Read languages and default language from site config."""
        website = build_website(site_data)

        assert [lang.value for lang in website.languages] == ["en", "fr"]
        assert website.default_language == "en"
        assert website.active_language == "en"

    def test__languages__default_list(self) -> None:
        """Offer English and French when none are configured."""
        website = Website([])

        assert website.languages == [
            Language(label="English", value="en"),
            Language(label="français", value="fr"),
        ]

    def test__set_language__unknown_code__ignored(self, site_data: dict[str, Any]) -> None:
        """Ignore language codes the site doesn't offer."""
        website = build_website(site_data)

        website.set_language("de")
        assert website.active_language == "en"

        website.set_language("fr")
        assert website.active_language == "fr"

    def test__resolve_language__offered_or_active(self, site_data: dict[str, Any]) -> None:
        """Resolve a requested code without switching the active language."""
        website = build_website(site_data)

        assert website.resolve_language("fr") == "fr"
        assert website.resolve_language("de") == "en"
        assert website.resolve_language(None) == "en"
        assert website.active_language == "en"


class TestLocalize:
    """Tests for Website.localize()."""

    @pytest.fixture
    def website(self) -> Website:
        return Website(
            [],
            languages=[Language("English", "en"), Language("français", "fr"), Language("Deutsch", "de")],
            default_language="en",
        )

    def test__active_language__picked(self, website: Website) -> None:
        """Return the value for the active language."""
        website.set_language("fr")

        assert website.localize({"en": "Hello", "fr": "Bonjour"}) == "Bonjour"

    def test__missing_language__returns_default_value(self, website: Website) -> None:
        """Return the caller's default without the fallback flag."""
        website.set_language("de")

        assert website.localize({"en": "Hello", "fr": "Bonjour"}, "?") == "?"

    def test__fallback_to_default_lang(self, website: Website) -> None:
        """Use the site's default language when asked to."""
        website.set_language("de")

        result = website.localize({"en": "Hello", "fr": "Bonjour"}, "", fallback_to_default_lang=True)

        assert result == "Hello"

    def test__explicit_lang__overrides_active(self, website: Website) -> None:
        """Honor an explicitly requested language."""
        assert website.localize({"en": "Hello", "fr": "Bonjour"}, lang="fr") == "Bonjour"

    def test__plain_string__unchanged(self, website: Website) -> None:
        """Return plain strings as they are."""
        assert website.localize("Just text") == "Just text"

    def test__json_string__decoded(self, website: Website) -> None:
        """Decode the JSON encoding of a localized mapping."""
        website.set_language("fr")

        assert website.localize('{"en": "Hello", "fr": "Bonjour"}') == "Bonjour"

    def test__malformed_json__treated_as_literal(self, website: Website) -> None:
        """Return a value that fails to decode as a literal string."""
        assert website.localize("{not json") == "{not json"

    def test__non_string__returns_default(self, website: Website) -> None:
        """Return the default for values that can't be localized."""
        assert website.localize(None, "fallback") == "fallback"


class TestSearchData:
    """Tests for Website.get_search_data()."""

    def test__entries_per_page(self, site_data: dict[str, Any]) -> None:
        """Return one entry per page with its section titles."""
        website = build_website(site_data)

        data = website.get_search_data()

        assert [entry["route"] for entry in data] == ["/", "/about"]
        assert data[0]["title"] == "Home"
        assert data[0]["content"] == "Menu\nWelcome\nIntro\nFooter"
