"""Document parser interface.

Sections may carry a ProseMirror-style document tree as raw content. The
hosting application supplies a parser that turns such a tree into the flat
content shape; ``FallbackDocumentParser`` covers headings, paragraphs and
images when no richer parser is available.
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DocumentParser(Protocol):
    """Turns a document tree into flat parsed content."""

    def parse(self, document: Mapping[str, Any]) -> dict[str, Any]: ...


def is_document(raw: object) -> bool:
    """Check whether raw content is a document tree."""
    return isinstance(raw, Mapping) and raw.get("type") == "doc"


class FallbackDocumentParser:
    """Minimal document parser.

    Level 1 heading becomes the title, level 2 the subtitle, and a level 3
    heading seen before the title becomes the pretitle. Remaining headings
    are collected in ``headings``.
    """

    def parse(self, document: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {
            "title": "",
            "pretitle": "",
            "subtitle": "",
            "paragraphs": [],
            "images": [],
            "headings": [],
        }

        for node in _children(document):
            node_type = node.get("type")
            if node_type == "heading":
                self._add_heading(result, node)
            elif node_type == "paragraph":
                self._add_paragraph(result, node)
            elif node_type == "image":
                result["images"].append(_image(node))

        return result

    def _add_heading(self, result: dict[str, Any], node: Mapping[str, Any]) -> None:
        level = _mapping(node.get("attrs")).get("level")
        text = extract_text(node)

        if level == 1 and not result["title"]:
            result["title"] = text
        elif level == 2 and not result["subtitle"]:
            result["subtitle"] = text
        elif level == 3 and not result["title"] and not result["pretitle"]:
            result["pretitle"] = text
        else:
            result["headings"].append(text)

    def _add_paragraph(self, result: dict[str, Any], node: Mapping[str, Any]) -> None:
        images = [_image(child) for child in _children(node) if child.get("type") == "image"]
        if images:
            result["images"].extend(images)
        text = extract_text(node)
        if text:
            result["paragraphs"].append(text)


def extract_text(node: Mapping[str, Any]) -> str:
    """Concatenate the text children of a node."""
    return "".join(
        child.get("text", "") for child in _children(node) if child.get("type") == "text"
    )


def parse_content(raw: object, parser: DocumentParser | None) -> object:
    """Run document trees through the parser; pass other content through.

    A parser failure falls back to ``FallbackDocumentParser`` so one bad
    document cannot take down the section.
    """
    if not isinstance(raw, Mapping) or not is_document(raw):
        return raw

    if parser is None:
        return FallbackDocumentParser().parse(raw)

    try:
        return parser.parse(raw)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning(f"Document parser failed, using fallback: {e}")
        return FallbackDocumentParser().parse(raw)


def _children(node: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    content = node.get("content")
    if not isinstance(content, list):
        return []
    return [child for child in content if isinstance(child, Mapping)]


def _image(node: Mapping[str, Any]) -> dict[str, Any]:
    attrs = _mapping(node.get("attrs"))
    return {"src": attrs.get("src", ""), "alt": attrs.get("alt", "")}


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
