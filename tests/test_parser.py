"""Tests for document parsing."""

from collections.abc import Mapping
from typing import Any

from blockstage.core.parser import FallbackDocumentParser, is_document, parse_content


def _heading(level: int, text: str) -> dict[str, Any]:
    return {"type": "heading", "attrs": {"level": level}, "content": [{"type": "text", "text": text}]}


def _paragraph(text: str) -> dict[str, Any]:
    return {"type": "paragraph", "content": [{"type": "text", "text": text}]}


class BrokenParser:
    def parse(self, document: Mapping[str, Any]) -> dict[str, Any]:
        raise KeyError("content")


class UpperParser:
    def parse(self, document: Mapping[str, Any]) -> dict[str, Any]:
        return {"title": "FROM PARSER"}


class TestFallbackDocumentParser:
    """Tests for FallbackDocumentParser."""

    def test__headings__mapped_by_level(self) -> None:
        """Map heading levels to pretitle, title and subtitle."""
        document = {
            "type": "doc",
            "content": [
                _heading(3, "Eyebrow"),
                _heading(1, "Title"),
                _heading(2, "Subtitle"),
                _heading(3, "Later"),
                _paragraph("Body text"),
                _paragraph(""),
            ],
        }

        result = FallbackDocumentParser().parse(document)

        assert result["pretitle"] == "Eyebrow"
        assert result["title"] == "Title"
        assert result["subtitle"] == "Subtitle"
        assert result["headings"] == ["Later"]
        assert result["paragraphs"] == ["Body text"]

    def test__images__collected(self) -> None:
        """Collect block and inline images."""
        document = {
            "type": "doc",
            "content": [
                {"type": "image", "attrs": {"src": "a.png", "alt": "A"}},
                {"type": "paragraph", "content": [{"type": "image", "attrs": {"src": "b.png"}}]},
            ],
        }

        result = FallbackDocumentParser().parse(document)

        assert result["images"] == [{"src": "a.png", "alt": "A"}, {"src": "b.png", "alt": ""}]


class TestParseContent:
    """Tests for parse_content()."""

    def test__non_document__passed_through(self) -> None:
        """Return flat content unchanged."""
        raw = {"title": "Flat"}

        assert parse_content(raw, None) is raw
        assert not is_document(raw)

    def test__document__uses_given_parser(self) -> None:
        """Run documents through the supplied parser."""
        result = parse_content({"type": "doc", "content": []}, UpperParser())

        assert result == {"title": "FROM PARSER"}

    def test__parser_failure__falls_back(self) -> None:
        """Fall back to the minimal parser when the parser fails."""
        result = parse_content({"type": "doc", "content": [_heading(1, "Saved")]}, BrokenParser())

        assert isinstance(result, dict)
        assert result["title"] == "Saved"
