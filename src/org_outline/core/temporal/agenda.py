"""Repeat-aware agenda window queries."""

from collections.abc import Collection, Iterator
from datetime import datetime

from org_outline.config import DEFAULT_REPEAT_CONFIG, RepeatConfig
from org_outline.core.temporal.repeat import shift_n, shift_until
from org_outline.models.node import Node
from org_outline.models.planning import Planning, PlanningKind
from org_outline.models.timestamp import Timestamp, TimestampLike, TimestampRange


def occurrences(
    stamp: Timestamp,
    start: datetime,
    end: datetime,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> Iterator[Timestamp]:
    """Yield every occurrence of ``stamp`` whose start lies in [start, end).

    A stamp without a repeat yields at most itself. Occurrences are projected
    with plain interval steps regardless of the repeat kind.
    """
    if stamp.repeat is None:
        if start <= stamp.start < end:
            yield stamp
        return

    current = shift_until(stamp, start, config=config)
    if current.start < start:
        current = shift_n(current, 1, config=config)

    while current.start < end:
        yield current
        current = shift_n(current, 1, config=config)


def repeat_in_window(
    value: TimestampLike,
    start: datetime,
    end: datetime,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> bool:
    """Does any occurrence of ``value`` touch the window?

    Unlike ``in_window`` on the value types, repeats are expanded. An
    occurrence that started before the window but is still running inside it
    counts too.
    """
    if isinstance(value, TimestampRange):
        if value.in_window(start, end):
            return True
        stamp = value.start
    elif isinstance(value, Timestamp):
        stamp = value
    else:
        return value.in_window(start, end)

    if stamp.in_window(start, end):
        return True
    if stamp.repeat is None:
        return False

    if next(occurrences(stamp, start, end, config=config), None) is not None:
        return True
    # The last occurrence before the window may still be running.
    last = shift_until(stamp, start, config=config)
    return last.end is not None and last.start <= start < last.end


def planning_in_window(
    node: Node,
    start: datetime,
    end: datetime,
    *,
    kinds: Collection[PlanningKind] | None = None,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> list[Planning]:
    """Return the node's planning entries visible in the window.

    Args:
        node: Node whose planning entries are checked.
        start: Window start (inclusive).
        end: Window end (exclusive).
        kinds: Restrict to these planning kinds (None = all).
        config: Month-shift policy used to expand repeats.
    """
    return [
        planning
        for planning in node.planning
        if (kinds is None or planning.kind in kinds)
        and repeat_in_window(planning.timestamp, start, end, config=config)
    ]
