"""Tests for content normalization."""

import pytest
from blockstage.core.content import (
    MAPPING_FIELDS,
    SEQUENCE_FIELDS,
    STRING_FIELDS,
    ComponentSchema,
    EmptyContent,
    FlatContent,
    LegacyContent,
    apply_defaults,
    classify,
    normalize,
)


def _assert_guaranteed(content: dict) -> None:
    for name in STRING_FIELDS:
        assert isinstance(content[name], str), name
    for name in SEQUENCE_FIELDS:
        assert isinstance(content[name], list), name
    for name in MAPPING_FIELDS:
        assert isinstance(content[name], dict), name


class TestClassify:
    """Tests for raw content classification."""

    @pytest.mark.parametrize("raw", [None, {}, [], "text", 42])
    def test__unusable__is_empty(self, raw) -> None:
        """Classify missing or non-mapping content as empty."""
        assert isinstance(classify(raw), EmptyContent)

    def test__field_keys__is_flat(self) -> None:
        """Classify parser output keyed by field as flat."""
        result = classify({"title": "Hi"})

        assert isinstance(result, FlatContent)
        assert result.fields == {"title": "Hi"}

    def test__main_group__is_legacy(self) -> None:
        """Classify grouped content as legacy."""
        result = classify({"main": {"header": {"title": "Hi"}}, "items": [{"title": "A"}]})

        assert isinstance(result, LegacyContent)
        assert result.items == [{"title": "A"}]

    def test__groups_wrapper__is_legacy(self) -> None:
        """Classify content wrapped in groups as legacy."""
        result = classify({"groups": {"main": {"header": {"title": "Hi"}}}, "extra": 1})

        assert isinstance(result, LegacyContent)
        assert result.main == {"header": {"title": "Hi"}}
        assert result.extra == {"extra": 1}


class TestNormalize:
    """Tests for normalize()."""

    @pytest.mark.parametrize("raw", [None, {}, "text", [1, 2], {"title": None}])
    def test__any_input__every_field_present(self, raw) -> None:
        """Guarantee every standard field for any input."""
        props = normalize(raw)

        _assert_guaranteed(props.content)

    def test__flat_content__keeps_values_and_fills_gaps(self) -> None:
        """Keep provided fields and default the rest."""
        props = normalize({"title": "Welcome", "paragraphs": ["One"]})

        assert props.content["title"] == "Welcome"
        assert props.content["subtitle"] == ""
        assert props.content["paragraphs"] == ["One"]
        assert props.content["links"] == []
        assert props.content["data"] == {}

    def test__wrong_types__are_coerced(self) -> None:
        """Coerce wrongly typed fields to their empty defaults."""
        props = normalize({"title": ["x"], "links": {"a": 1}, "data": "x", "subtitle": 3})

        assert props.content["title"] == ""
        assert props.content["links"] == []
        assert props.content["data"] == {}
        assert props.content["subtitle"] == "3"

    def test__single_string__becomes_sequence(self) -> None:
        """Wrap a lone string in a sequence field."""
        props = normalize({"paragraphs": "Only one"})

        assert props.content["paragraphs"] == ["Only one"]

    def test__unknown_fields__pass_through(self) -> None:
        """Keep fields outside the standard set."""
        props = normalize({"title": "T", "custom": {"x": 1}})

        assert props.content["custom"] == {"x": 1}

    def test__items__get_flat_guarantee_one_level_deep(self) -> None:
        """Guarantee fields on each item but not on items of items."""
        props = normalize({"items": [{"title": "A", "items": [{"title": "B"}]}, "junk"]})

        first, second = props.content["items"]
        _assert_guaranteed(first)
        _assert_guaranteed(second)
        assert first["items"] == [{"title": "B"}]
        assert second["title"] == ""

    def test__legacy_groups__are_flattened(self) -> None:
        """Flatten legacy header/body groups into flat fields."""
        raw = {
            "main": {
                "header": {"title": "Main", "pretitle": "Pre"},
                "body": {
                    "paragraphs": ["P"],
                    "imgs": [{"src": "a.png"}],
                    "propertyBlocks": [{"price": 10}],
                },
            },
            "items": [{"header": {"title": "Item"}, "body": {"links": [{"href": "/x"}]}}],
        }

        props = normalize(raw)

        assert props.content["title"] == "Main"
        assert props.content["pretitle"] == "Pre"
        assert props.content["images"] == [{"src": "a.png"}]
        assert props.content["data"] == {"price": 10}
        assert props.content["items"][0]["title"] == "Item"
        assert props.content["items"][0]["links"] == [{"href": "/x"}]

    def test__schema_defaults__page_params_win(self) -> None:
        """Merge page params over component defaults."""
        schema = ComponentSchema(defaults={"align": "center", "size": "lg"})

        props = normalize({}, schema, {"align": "left"})

        assert props.params == {"align": "left", "size": "lg"}

    def test__params__never_overlay_content(self) -> None:
        """Keep params out of the content object."""
        props = normalize({"title": "Content"}, None, {"title": "Param"})

        assert props.content["title"] == "Content"
        assert props.params == {"title": "Param"}

    def test__data_schema__applied_to_declared_key(self) -> None:
        """Apply typed sub-schemas to declared data keys only."""
        schema = ComponentSchema(
            data={"team": {"role": {"default": "member"}}},
        )
        raw = {"data": {"team": [{"name": "Ann"}], "other": [{"name": "Bo"}]}}

        props = normalize(raw, schema)

        assert props.content["data"]["team"] == [{"name": "Ann", "role": "member"}]
        assert props.content["data"]["other"] == [{"name": "Bo"}]

    def test__input__is_not_mutated(self) -> None:
        """Leave the raw content untouched."""
        raw = {"title": "T", "data": {"team": [{"name": "Ann"}]}}
        schema = ComponentSchema(data={"team": {"role": {"default": "member"}}})

        normalize(raw, schema)

        assert raw == {"title": "T", "data": {"team": [{"name": "Ann"}]}}

    def test__normalizing_twice__is_idempotent(self) -> None:
        """Return equal output when normalizing normalized content."""
        schema = ComponentSchema(data={"team": {"role": {"default": "member"}}})
        raw = {"title": "T", "items": [{"title": "I"}], "data": {"team": [{"name": "A"}]}}

        once = normalize(raw, schema)
        twice = normalize(once.content, schema)

        assert twice.content == once.content


class TestApplyDefaults:
    """Tests for apply_defaults()."""

    def test__none_inputs__returns_empty(self) -> None:
        """Return empty params when nothing is declared."""
        assert apply_defaults(None, None) == {}

    def test__merge_is_shallow(self) -> None:
        """Replace nested mappings wholesale rather than merging them."""
        result = apply_defaults({"style": {"color": "red"}}, {"style": {"size": 1}, "x": 1})

        assert result == {"style": {"color": "red"}, "x": 1}
