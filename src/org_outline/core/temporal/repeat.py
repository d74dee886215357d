"""Repeat-shift engine: advance timestamps by their repeat directive.

Every function returns a new Timestamp; the input is never modified.
Month steps follow the policy in ``RepeatConfig`` and are applied one month
at a time, because month lengths make them non-linear.
"""

import calendar
from dataclasses import replace
from datetime import datetime, timedelta

from loguru import logger

from org_outline.config import DEFAULT_REPEAT_CONFIG, RepeatConfig
from org_outline.errors import InvalidRepeatConfigError, MissingRepeatError
from org_outline.models.timestamp import Repeat, RepeatInterval, RepeatKind, Timestamp


def _require_repeat(stamp: Timestamp) -> Repeat:
    if stamp.repeat is None:
        raise MissingRepeatError()
    return stamp.repeat


def _now_like(dt: datetime) -> datetime:
    return datetime.now(tz=dt.tzinfo)


def shift(
    stamp: Timestamp,
    reference: datetime | None = None,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> Timestamp:
    """Shift a timestamp once, as marking its task done would.

    Args:
        stamp: Timestamp carrying a repeat directive.
        reference: Time the future-seeking kinds measure against. Defaults to
            now.
        config: Month-shift policy.

    Returns:
        The next occurrence.
    """
    repeat = _require_repeat(stamp)

    if repeat.kind is RepeatKind.SHIFT:
        return shift_n(stamp, 1, config=config)

    if reference is None:
        reference = _now_like(stamp.start)

    if repeat.kind is RepeatKind.FUTURE_FIXED:
        return shift_until_after(stamp, reference, config=config)

    # FUTURE_RELATIVE: restart from the reference, keeping only the duration.
    start = reference
    if stamp.date_only:
        start = stamp.start.replace(
            year=reference.year, month=reference.month, day=reference.day
        )
    end = None
    if stamp.end is not None:
        end = start + (stamp.end - stamp.start)
    return shift_n(replace(stamp, start=start, end=end), 1, config=config)


def shift_n(
    stamp: Timestamp,
    n: int,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> Timestamp:
    """Apply the repeat interval ``n`` times."""
    repeat = _require_repeat(stamp)
    if n < 0:
        msg = f"Cannot shift by a negative count: {n!r}"
        raise ValueError(msg)
    if n == 0:
        return stamp

    units = repeat.amount * n
    match repeat.interval:
        case RepeatInterval.HOUR:
            return _shift_hours(stamp, units)
        case RepeatInterval.DAY:
            return _shift_delta(stamp, timedelta(days=units))
        case RepeatInterval.WEEK:
            return _shift_delta(stamp, timedelta(weeks=units))
        case RepeatInterval.MONTH:
            return _shift_months(stamp, units, config)
        case RepeatInterval.YEAR:
            return _shift_years(stamp, units)


def shift_until(
    stamp: Timestamp,
    target: datetime,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> Timestamp:
    """Return the latest occurrence that starts no later than ``target``.

    If the stamp already starts after ``target`` it is returned unchanged.
    The step count is estimated from one interval's length, bisected down
    when it overshoots, and the search continues from the best occurrence
    found until the next single step would pass ``target``.
    """
    if stamp.start > target:
        return stamp

    current = stamp
    while True:
        step = shift_n(current, 1, config=config)
        if step.start > target:
            return current

        delta = step.start - current.start
        estimate = int((target - current.start) / delta)

        candidate = step
        while estimate > 1:
            trial = shift_n(current, estimate, config=config)
            if trial.start <= target:
                candidate = trial
                break
            estimate //= 2

        current = candidate


def shift_until_after(
    stamp: Timestamp,
    target: datetime,
    *,
    config: RepeatConfig = DEFAULT_REPEAT_CONFIG,
) -> Timestamp:
    """Return the first occurrence that starts strictly after ``target``.

    At least one interval is always applied.
    """
    after = shift_n(shift_until(stamp, target, config=config), 1, config=config)
    while after.start <= target:
        after = shift_n(after, 1, config=config)
    return after


def _shift_delta(stamp: Timestamp, delta: timedelta) -> Timestamp:
    end = stamp.end + delta if stamp.end is not None else None
    return replace(stamp, start=stamp.start + delta, end=end)


def _shift_hours(stamp: Timestamp, hours: int) -> Timestamp:
    # A date-only stamp with an hourly repeat counts from midnight.
    if stamp.date_only:
        midnight = stamp.start.replace(hour=0, minute=0, second=0, microsecond=0)
        stamp = replace(stamp, start=midnight, date_only=False)
    return _shift_delta(stamp, timedelta(hours=hours))


def _add_years(dt: datetime, years: int) -> datetime:
    year = dt.year + years
    day = min(dt.day, calendar.monthrange(year, dt.month)[1])
    return dt.replace(year=year, day=day)


def _shift_years(stamp: Timestamp, years: int) -> Timestamp:
    end = _add_years(stamp.end, years) if stamp.end is not None else None
    return replace(stamp, start=_add_years(stamp.start, years), end=end)


def _shift_months(stamp: Timestamp, months: int, config: RepeatConfig) -> Timestamp:
    start, end = stamp.start, stamp.end
    for _ in range(months):
        start, end = _month_step(start, end, config)
    logger.debug("Shifted {} by {} month(s) to {}", stamp.start, months, start)
    return replace(stamp, start=start, end=end)


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def _month_index(dt: datetime) -> int:
    return dt.year * 12 + dt.month


def _end_of_next_month(dt: datetime) -> datetime:
    year, month = _next_month(dt.year, dt.month)
    return dt.replace(year=year, month=month, day=_days_in_month(year, month))


def _on_date(clock: datetime, day: datetime) -> datetime:
    """Put the clock time of ``clock`` on the calendar date of ``day``."""
    return clock.replace(year=day.year, month=day.month, day=day.day)


def _localize(dt: datetime | None, config: RepeatConfig) -> datetime | None:
    if dt is None or config.tz is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(config.tz)


def _month_step(
    start: datetime,
    end: datetime | None,
    config: RepeatConfig,
) -> tuple[datetime, datetime | None]:
    if config.shift_by_days and config.fixed_date:
        raise InvalidRepeatConfigError()

    start = _localize(start, config)
    end = _localize(end, config)

    if config.clamp_to_end_of_month:
        if config.shift_by_days:
            new_start = start + timedelta(days=30)
            if _month_index(new_start) - _month_index(start) > 1:
                new_start = _end_of_next_month(start)
            return new_start, _on_date(end, new_start) if end is not None else None

        if config.fixed_date:
            return _fixed_date_step(start, end, clamp=True)

        new_end = _end_of_next_month(end) if end is not None else None
        return _end_of_next_month(start), new_end

    if config.shift_by_days:
        delta = timedelta(days=30)
        return start + delta, end + delta if end is not None else None

    if config.fixed_date:
        return _fixed_date_step(start, end, clamp=False)

    # No policy selected: plain calendar month, clamped to the month's end.
    return _fixed_date_step(start, end, clamp=True)


def _fixed_date_step(
    start: datetime,
    end: datetime | None,
    *,
    clamp: bool,
) -> tuple[datetime, datetime | None]:
    year, month = _next_month(start.year, start.month)
    day = start.day

    if clamp:
        # The clamped day is the reference for every later step.
        day = min(day, _days_in_month(year, month))
    else:
        while _days_in_month(year, month) < day:
            year, month = _next_month(year, month)

    new_start = start.replace(year=year, month=month, day=day)
    return new_start, _on_date(end, new_start) if end is not None else None
