"""Schema defaulting for structured section data.

Components declare typed sub-schemas for fields of a section's structured
``data`` map. Applying a schema is additive: declared fields that are missing
receive their default, one-of fields holding an unknown option are reset,
nested objects and arrays recurse, and undeclared fields pass through.

Field definition format::

    {
        "type": "string" | "number" | "boolean" | "object" | "array" | ...,
        "default": <value>,
        "options": [<value> | {"value": <value>, "label": ...}, ...],
        "schema": {<field>: <definition>, ...},   # for type "object"
        "of": {<field>: <definition>, ...},       # for type "array" of objects
    }

A bare non-mapping value is shorthand for ``{"default": value}``. A mapping
is a field definition when its ``type`` is a string or when one of the
definition keys holds a non-mapping value; any other mapping is an inline
object schema, so fields named ``label`` or ``description`` nest as expected.
Object defaults therefore need an explicit ``type``.
"""

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

_DEFINITION_KEYS = frozenset({"type", "default", "options", "schema", "of", "label", "description"})


def apply_schema(value: Any, fields: Mapping[str, Any]) -> Any:
    """Apply field defaults to an object, or to each element of a list.

    Args:
        value: Data value stored under one key of the ``data`` map
        fields: Field definitions keyed by field name

    Returns:
        New value with defaults applied; non-object values are returned as-is
    """
    if isinstance(value, list):
        return [_apply_to_object(item, fields) for item in value]
    return _apply_to_object(value, fields)


def _apply_to_object(obj: Any, fields: Mapping[str, Any]) -> Any:
    if not isinstance(obj, Mapping):
        return obj

    result = dict(obj)
    for name, raw_definition in fields.items():
        definition = _field_definition(raw_definition)
        current = result.get(name)

        if current is None:
            if "default" in definition:
                result[name] = deepcopy(definition["default"])
            elif definition.get("type") == "object" and isinstance(definition.get("schema"), Mapping):
                result[name] = _apply_to_object({}, definition["schema"])
            continue

        options = _option_values(definition)
        if options is not None and current not in options:
            result[name] = _reset_value(definition, options, current)
            continue

        if definition.get("type") == "object" and isinstance(definition.get("schema"), Mapping):
            result[name] = apply_schema(current, definition["schema"])
        elif definition.get("type") == "array" and isinstance(definition.get("of"), Mapping):
            if isinstance(current, list):
                result[name] = [_apply_to_object(item, definition["of"]) for item in current]

    return result


def _field_definition(raw_definition: Any) -> Mapping[str, Any]:
    """Expand shorthand definitions into a mapping."""
    if not isinstance(raw_definition, Mapping):
        return {"default": raw_definition}
    if isinstance(raw_definition.get("type"), str) or any(
        key in _DEFINITION_KEYS and not isinstance(value, Mapping)
        for key, value in raw_definition.items()
    ):
        return raw_definition
    # Otherwise the mapping lists the fields of an inline object
    return {"type": "object", "schema": raw_definition}


def _option_values(definition: Mapping[str, Any]) -> list[Any] | None:
    options = definition.get("options")
    if not isinstance(options, list):
        return None
    return [
        option["value"] if isinstance(option, Mapping) and "value" in option else option
        for option in options
    ]


def _reset_value(definition: Mapping[str, Any], options: list[Any], current: Any) -> Any:
    if "default" in definition:
        return deepcopy(definition["default"])
    if options:
        return deepcopy(options[0])
    return current
