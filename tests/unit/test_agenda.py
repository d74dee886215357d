"""Tests for repeat-aware agenda window queries."""

from datetime import date, datetime

from org_outline.core.temporal.agenda import occurrences, planning_in_window, repeat_in_window
from org_outline.document import Document
from org_outline.models.planning import Planning, PlanningKind
from org_outline.models.timestamp import DiarySexp, Repeat, Timestamp, TimestampRange
from tests.unit.builders import find

WEEKLY = Timestamp(datetime(2023, 1, 2, 8, 0), repeat=Repeat.from_cookie("+1w"))


def test_occurrences_expand_repeats_inside_window() -> None:
    found = list(occurrences(WEEKLY, datetime(2023, 1, 1), datetime(2023, 1, 31)))
    assert [o.start.day for o in found] == [2, 9, 16, 23, 30]


def test_occurrences_window_start_is_inclusive() -> None:
    found = list(occurrences(WEEKLY, datetime(2023, 1, 9, 8, 0), datetime(2023, 1, 10)))
    assert [o.start for o in found] == [datetime(2023, 1, 9, 8, 0)]


def test_occurrences_window_end_is_exclusive() -> None:
    assert list(occurrences(WEEKLY, datetime(2023, 1, 3), datetime(2023, 1, 9, 8, 0))) == []


def test_occurrences_of_plain_stamp() -> None:
    stamp = Timestamp(datetime(2023, 1, 5))
    assert list(occurrences(stamp, datetime(2023, 1, 1), datetime(2023, 2, 1))) == [stamp]
    assert list(occurrences(stamp, datetime(2023, 2, 1), datetime(2023, 3, 1))) == []


def test_repeat_in_window_sees_later_occurrences() -> None:
    window = (datetime(2023, 6, 1), datetime(2023, 6, 3))
    assert not WEEKLY.in_window(*window)
    # 2023-06-05 is the nearest Monday after the window.
    assert not repeat_in_window(WEEKLY, *window)
    assert repeat_in_window(WEEKLY, datetime(2023, 6, 5), datetime(2023, 6, 6))


def test_repeat_in_window_counts_running_occurrence() -> None:
    stamp = Timestamp(
        datetime(2023, 1, 2, 8, 0),
        end=datetime(2023, 1, 2, 10, 0),
        repeat=Repeat.from_cookie("+1d"),
    )
    assert repeat_in_window(stamp, datetime(2023, 3, 1, 9, 0), datetime(2023, 3, 1, 9, 30))


def test_repeat_in_window_handles_ranges_and_sexps() -> None:
    rng = TimestampRange(Timestamp(datetime(2023, 1, 1)), Timestamp(datetime(2023, 1, 3)))
    assert repeat_in_window(rng, datetime(2023, 1, 2), datetime(2023, 1, 4))

    fridays = DiarySexp("(weekly-friday)", matches=lambda d: d.weekday() == 4)
    assert repeat_in_window(fridays, datetime(2023, 1, 2), datetime(2023, 1, 9))
    assert fridays.matches is not None and fridays.matches(date(2023, 1, 6))


def test_planning_in_window_filters_kinds(sample_document: Document) -> None:
    water = find(sample_document, "Water plants")
    window = (datetime(2023, 1, 1), datetime(2023, 1, 15))

    assert [p.kind for p in planning_in_window(water, *window)] == [PlanningKind.SCHEDULED]
    assert planning_in_window(water, *window, kinds={PlanningKind.DEADLINE}) == []


def test_yearly_deadline_shows_in_later_years(sample_document: Document) -> None:
    taxes = find(sample_document, "Taxes")
    visible = planning_in_window(taxes, datetime(2025, 4, 1), datetime(2025, 5, 1))
    assert len(visible) == 1
    assert isinstance(visible[0], Planning)
