"""Content normalization for component props.

Turns a section's parsed content plus its component's declared schema into
a content object with every standard field present and type-correct, and a
params object with the component's defaults applied. Components can read
any standard field without checking for missing values.

Raw content arrives in one of three shapes, each normalized separately:

- Empty: nothing usable (missing, not a mapping, or an empty mapping)
- Flat: parser output keyed directly by field (``title``, ``paragraphs``, ...)
- Legacy: grouped output (``{"main": {"header": ..., "body": ...}, "items": [...]}``,
  optionally wrapped in ``{"groups": ...}``)
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from blockstage.core.schema import apply_schema

STRING_FIELDS = ("title", "pretitle", "subtitle", "description")
SEQUENCE_FIELDS = (
    "paragraphs",
    "links",
    "images",
    "lists",
    "icons",
    "videos",
    "buttons",
    "cards",
    "documents",
    "forms",
    "quotes",
    "headings",
    "items",
    "sequence",
)
MAPPING_FIELDS = ("data",)

GUARANTEED_FIELDS = frozenset(STRING_FIELDS + SEQUENCE_FIELDS + MAPPING_FIELDS)

# Legacy body keys that map onto a differently named flat field
_LEGACY_BODY_ALIASES = {"imgs": "images"}


@dataclass(frozen=True)
class ComponentSchema:
    """Schema a component declares for its props.

    Attributes:
        defaults: Param defaults, overridden by page-declared params
        data: Typed sub-schemas for fields of the structured ``data`` map
    """

    defaults: Mapping[str, Any] = field(default_factory=dict)
    data: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass
class NormalizedProps:
    """Content and params ready to hand to a component."""

    content: dict[str, Any]
    params: dict[str, Any]


@dataclass(frozen=True)
class EmptyContent:
    """Raw content with nothing usable in it."""


@dataclass(frozen=True)
class FlatContent:
    """Parser output keyed directly by field name."""

    fields: Mapping[str, Any]


@dataclass(frozen=True)
class LegacyContent:
    """Grouped content with a main group and item groups."""

    main: Mapping[str, Any]
    items: Sequence[Any]
    extra: Mapping[str, Any]


RawContent = EmptyContent | FlatContent | LegacyContent


def classify(raw: object) -> RawContent:
    """Tag raw parsed content with its shape."""
    if not isinstance(raw, Mapping) or not raw:
        return EmptyContent()

    groups = raw.get("groups")
    if isinstance(groups, Mapping):
        extra = {k: v for k, v in raw.items() if k != "groups"}
        return LegacyContent(
            main=_mapping(groups.get("main")),
            items=_sequence(groups.get("items")),
            extra=extra,
        )

    if isinstance(raw.get("main"), Mapping):
        extra = {k: v for k, v in raw.items() if k not in ("main", "items")}
        return LegacyContent(
            main=raw["main"],
            items=_sequence(raw.get("items")),
            extra=extra,
        )

    return FlatContent(fields=raw)


def normalize(
    raw: object,
    schema: ComponentSchema | None = None,
    params: Mapping[str, Any] | None = None,
) -> NormalizedProps:
    """Normalize raw parsed content and params for a component.

    Pure: the same inputs always give equal outputs and nothing is mutated.

    Args:
        raw: Parsed section content in any supported shape
        schema: Component schema, or None when the component declares nothing
        params: Page-declared params (frontmatter)

    Returns:
        NormalizedProps with guaranteed content fields and merged params
    """
    schema = schema or ComponentSchema()
    content = normalize_content(raw)
    if schema.data:
        content["data"] = apply_data_schemas(content["data"], schema.data)
    return NormalizedProps(
        content=content,
        params=apply_defaults(params, schema.defaults),
    )


def normalize_content(raw: object) -> dict[str, Any]:
    """Return content with every standard field present."""
    match classify(raw):
        case EmptyContent():
            return _normalize_flat({})
        case FlatContent(fields=fields):
            return _normalize_flat(fields)
        case LegacyContent(main=main, items=items, extra=extra):
            return _normalize_legacy(main, items, extra)


def apply_defaults(
    params: Mapping[str, Any] | None,
    defaults: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Shallow-merge page params over declared defaults (params win)."""
    return {**(defaults or {}), **(params or {})}


def _normalize_flat(fields: Mapping[str, Any]) -> dict[str, Any]:
    content = _guarantee(fields)
    content["items"] = [_normalize_item(item) for item in content["items"]]
    return content


def _normalize_legacy(
    main: Mapping[str, Any],
    items: Sequence[Any],
    extra: Mapping[str, Any],
) -> dict[str, Any]:
    flat = {**extra, **_flatten_group(main)}
    flat["items"] = [
        _flatten_group(item) if _is_group(item) else item for item in items
    ]
    return _normalize_flat(flat)


def _normalize_item(item: Any) -> dict[str, Any]:
    """Guarantee flat fields on one item (no deeper recursion)."""
    if _is_group(item):
        item = _flatten_group(item)
    if not isinstance(item, Mapping):
        item = {}
    return _guarantee(item)


def _guarantee(fields: Mapping[str, Any]) -> dict[str, Any]:
    content = {k: v for k, v in fields.items() if k not in GUARANTEED_FIELDS}
    for name in STRING_FIELDS:
        content[name] = _string(fields.get(name))
    for name in SEQUENCE_FIELDS:
        content[name] = list(_sequence(fields.get(name)))
    for name in MAPPING_FIELDS:
        content[name] = dict(_mapping(fields.get(name)))
    return content


def _is_group(value: Any) -> bool:
    return isinstance(value, Mapping) and (
        isinstance(value.get("header"), Mapping) or isinstance(value.get("body"), Mapping)
    )


def _flatten_group(group: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a legacy ``{header, body, banner}`` group into flat fields."""
    header = _mapping(group.get("header"))
    body = _mapping(group.get("body"))

    flat: dict[str, Any] = {k: v for k, v in group.items() if k not in ("header", "body")}
    flat.update(header)
    for key, value in body.items():
        if key == "propertyBlocks":
            blocks = _sequence(value)
            if blocks and isinstance(blocks[0], Mapping):
                flat.setdefault("data", blocks[0])
            continue
        flat[_LEGACY_BODY_ALIASES.get(key, key)] = value
    return flat


def apply_data_schemas(
    data: Mapping[str, Any],
    schemas: Mapping[str, Mapping[str, Any]],
) -> dict[str, Any]:
    """Run each declared data key through its typed sub-schema."""
    result = dict(data)
    for key, fields in schemas.items():
        if key in result:
            result[key] = apply_schema(result[key], fields)
    return result


def _string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _sequence(value: Any) -> Sequence[Any]:
    if isinstance(value, (list, tuple)):
        return value
    if isinstance(value, str) and value:
        return [value]
    return []


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
