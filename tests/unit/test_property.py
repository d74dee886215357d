"""Tests for properties, property drawers and value restrictions."""

import pytest

from org_outline.document import Document
from org_outline.errors import InvalidPropertyValueError, NotValueRestrictionError
from org_outline.models.property import Property, PropertyDrawer
from tests.unit.builders import find

COLORS = Property("Color_All", 'red green "light blue"')


def test_restriction_values_respect_quotes() -> None:
    assert COLORS.is_value_restriction
    assert COLORS.restriction_key == "Color"
    assert COLORS.restriction_values() == ["red", "green", "light blue"]


def test_restriction_suffix_is_case_insensitive() -> None:
    assert Property("color_all", "a b").is_value_restriction
    assert Property("COLOR_ALL", "a b").restriction_values() == ["a", "b"]


def test_bare_suffix_is_not_a_restriction() -> None:
    assert not Property("_ALL", "a").is_value_restriction
    assert not Property("Color", "red").is_value_restriction
    assert Property("Color", "red").restriction_values() == []


def test_validate_accepts_allowed_value() -> None:
    COLORS.validate(Property("Color", "red"))
    COLORS.validate(Property("Color", "light blue"))


def test_validate_rejects_other_values() -> None:
    with pytest.raises(InvalidPropertyValueError) as exc_info:
        COLORS.validate(Property("Color", "purple"))

    err = exc_info.value
    assert err.property == "Color"
    assert err.property_value == "purple"
    assert err.allowed == ("red", "green", "light blue")
    assert "Color" in str(err)
    assert "light blue" in str(err)
    assert isinstance(err, ValueError)


def test_validate_on_plain_property_raises() -> None:
    with pytest.raises(NotValueRestrictionError):
        Property("Color", "red").validate(Property("Color", "red"))


def test_drawer_updates_return_new_drawers() -> None:
    drawer = PropertyDrawer.from_mapping({"Effort": "1:00", "Owner": "ann"})

    updated = drawer.add(Property("effort", "2:00"))
    removed = updated.remove("OWNER")

    assert drawer.get("Effort") == Property("Effort", "1:00")
    assert updated.get("EFFORT") == Property("effort", "2:00")
    assert len(updated) == 2
    assert "Owner" not in removed
    assert [p.key for p in removed] == ["effort"]


def test_heritable_keeps_restrictions_regardless_of_toggle() -> None:
    drawer = PropertyDrawer.from_mapping({"Owner": "ann", "Color_All": "red", "Team": "ops"})

    assert [p.key for p in drawer.heritable(False)] == ["Color_All"]
    assert [p.key for p in drawer.heritable(["team"])] == ["Color_All", "Team"]
    assert drawer.heritable(True) == drawer


def test_drawer_renders_properties_block() -> None:
    drawer = PropertyDrawer.from_mapping({"Effort": "0:30", "Flag": ""})
    assert drawer.render_lines() == [":PROPERTIES:", ":Effort: 0:30", ":Flag:", ":END:"]
    assert PropertyDrawer().render_lines() == []


def test_properties_for_without_inheritance(sample_document: Document) -> None:
    water = find(sample_document, "Water plants")
    props = sample_document.properties_for(water)

    # Restrictions always come down; the parent's Color does not.
    assert props.get("Color_All") is not None
    assert props.get("Color") is None


def test_properties_for_with_inheritance(sample_document: Document) -> None:
    water = find(sample_document, "Water plants")
    prune = find(sample_document, "Prune roses")

    sample_document.settings.property_inheritance = True
    assert sample_document.properties_for(water).get("Color") == Property("Color", "green")
    assert sample_document.properties_for(prune).get("Color") == Property("Color", "red")

    sample_document.settings.property_inheritance = ("color",)
    assert sample_document.properties_for(water).get("Color") == Property("Color", "green")


def test_nearest_restriction_wins(sample_document: Document) -> None:
    garden = find(sample_document, "Garden")
    water = find(sample_document, "Water plants")
    garden.properties = garden.properties.add(Property("Color_ALL", "green brown"))

    restriction = sample_document.value_restriction_for(water, "color")

    assert restriction is not None
    assert restriction.restriction_values() == ["green", "brown"]


def test_validate_properties_uses_inherited_restriction(sample_document: Document) -> None:
    prune = find(sample_document, "Prune roses")
    sample_document.validate_properties(prune)

    prune.properties = prune.properties.add(Property("Color", "purple"))
    with pytest.raises(InvalidPropertyValueError):
        sample_document.validate_properties(prune)


def test_find_by_properties_on_document(sample_document: Document) -> None:
    found = sample_document.find_by_properties({"Color": {"red", "green"}})
    assert [n.heading.text for n in found] == ["Garden", "Prune roses"]
