"""Tests for heading priorities and priority settings."""

import pytest

from org_outline.document import Document
from org_outline.errors import InvalidPrioritySettingsError, OrgValueError, PriorityOutOfRangeError
from org_outline.models.priority import (
    DEFAULT_PRIORITY_SETTINGS,
    HIGHEST,
    LOWEST,
    UNSET,
    HeadingPriority,
    PriorityKind,
    PrioritySettings,
)

A = HeadingPriority.alpha("A")
B = HeadingPriority.alpha("B")
C = HeadingPriority.alpha("C")


def test_earlier_letter_is_more_significant() -> None:
    assert A.is_higher_than(C)
    assert not C.is_higher_than(A)
    assert sorted([C, A, B]) == [A, B, C]


def test_lower_number_is_more_significant() -> None:
    one, five = HeadingPriority.integer(1), HeadingPriority.integer(5)
    assert one.is_higher_than(five)
    assert one < five


def test_extremes_work_without_settings() -> None:
    assert HIGHEST.is_higher_than(A)
    assert A.is_higher_than(LOWEST)
    assert sorted([LOWEST, C, HIGHEST]) == [HIGHEST, C, LOWEST]


def test_unset_ranks_as_the_default() -> None:
    assert DEFAULT_PRIORITY_SETTINGS.compare(UNSET, B) == 0
    assert DEFAULT_PRIORITY_SETTINGS.compare(A, UNSET) == -1

    numeric = PrioritySettings.from_values("1", "9", "5")
    assert numeric.compare(UNSET, HeadingPriority.integer(3)) == 1


def test_unset_and_default_letter_order_as_equals() -> None:
    assert not UNSET > B
    assert not B > UNSET
    assert not UNSET < B
    assert UNSET <= B
    assert B <= UNSET
    assert UNSET >= B
    assert A < UNSET < C
    assert max(A, UNSET) is UNSET


def test_parse_accepts_cookie_and_bare_values() -> None:
    assert HeadingPriority.parse("[#A]") == A
    assert HeadingPriority.parse("b") == B
    assert HeadingPriority.parse("7") == HeadingPriority.integer(7)
    assert HeadingPriority.parse("") is UNSET


def test_render() -> None:
    assert A.render() == "[#A]"
    assert HeadingPriority.integer(5).render() == "[#5]"
    assert UNSET.render() == ""


def test_invalid_values_raise() -> None:
    with pytest.raises(OrgValueError):
        HeadingPriority.alpha("AB")
    with pytest.raises(OrgValueError):
        HeadingPriority.integer(65)


def test_settings_reject_mixed_kinds() -> None:
    with pytest.raises(InvalidPrioritySettingsError):
        PrioritySettings(highest=A, lowest=HeadingPriority.integer(5), default=B)


def test_settings_reject_inverted_range() -> None:
    with pytest.raises(InvalidPrioritySettingsError):
        PrioritySettings.from_values("C", "A", "B")


def test_settings_contain_and_resolve() -> None:
    settings = PrioritySettings.from_values("A", "E", "C")

    assert settings.kind is PriorityKind.ALPHA
    assert settings.contains(HeadingPriority.alpha("D"))
    assert not settings.contains(HeadingPriority.alpha("F"))
    assert not settings.contains(HeadingPriority.integer(1))
    assert settings.contains(UNSET)
    assert settings.resolve(UNSET) == HeadingPriority.alpha("C")
    assert settings.resolve(LOWEST) == HeadingPriority.alpha("E")


def test_add_heading_rejects_priority_outside_range() -> None:
    document = Document()
    with pytest.raises(PriorityOutOfRangeError):
        document.add_heading(1, "Too low", priority="D")


def test_add_heading_resolves_extremes() -> None:
    document = Document()
    node = document.add_heading(1, "Urgent", priority=HIGHEST)
    assert node.heading.priority == A


def test_document_compares_node_priorities() -> None:
    document = Document()
    urgent = document.add_heading(1, "Urgent", priority="A")
    plain = document.add_heading(1, "Plain")
    later = document.add_heading(1, "Later", priority="C")

    assert document.compare_priority(urgent, plain) == -1
    assert document.compare_priority(plain, B) == 0
    assert document.compare_priority(later, plain) == 1
