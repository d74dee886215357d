"""Timestamp value types: timestamps, ranges, diary expressions and repeats.

All types here are frozen. Operations that change a timestamp (shifting,
toggling activity) return a new value, so callers can keep the original for
history.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import StrEnum

from org_outline.errors import (
    InvalidCookieError,
    NilStartTimeError,
    NilTimestampsError,
    OrgValueError,
    StartAfterEndError,
)


class TimestampKind(StrEnum):
    TIMESTAMP = "timestamp"
    RANGE = "range"
    SEXP = "sexp"


class RepeatKind(StrEnum):
    """How a repeating timestamp moves when it is shifted."""

    # Add the interval once.
    SHIFT = "+"
    # Add whole intervals until the date is in the future, keeping alignment.
    FUTURE_FIXED = "++"
    # Restart from the reference time, then add one interval.
    FUTURE_RELATIVE = ".+"


class RepeatInterval(StrEnum):
    HOUR = "h"
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"


# Approximate lengths, only used for agenda warning windows.
_WINDOW_UNITS: dict[str, timedelta] = {
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "m": timedelta(days=30),
    "y": timedelta(days=365),
}

_COOKIE_RE = re.compile(
    r"^(?P<kind>\+\+|\.\+|\+)(?P<amount>\d+)(?P<interval>[hdwmy])"
    r"(?:\s+--?(?P<window>\d+)(?P<window_unit>[hdwmy]))?$"
)


def _format_window(window: timedelta, unit: RepeatInterval | None = None) -> str:
    if unit is not None and window % _WINDOW_UNITS[unit] == timedelta(0):
        return f"{window // _WINDOW_UNITS[unit]}{unit}"
    if window % timedelta(weeks=1) == timedelta(0):
        return f"{window // timedelta(weeks=1)}w"
    if window % timedelta(days=1) == timedelta(0):
        return f"{window.days}d"
    return f"{window // timedelta(hours=1)}h"


@dataclass(frozen=True)
class Repeat:
    """A repeat directive (cookie) such as ``+1m`` or ``++2w -3d``.

    ``agenda_window`` is how far ahead of a deadline a warning shows, or how
    long a scheduled item is delayed, depending on the planning keyword.
    """

    kind: RepeatKind
    interval: RepeatInterval
    amount: int = 1
    agenda_window: timedelta = timedelta(0)
    # Unit the window was written in; None renders the largest exact unit.
    window_unit: RepeatInterval | None = None

    def __post_init__(self) -> None:
        if self.amount < 1:
            msg = f"Repeat amount must be positive, got {self.amount!r}"
            raise OrgValueError(msg)

    @classmethod
    def from_cookie(cls, cookie: str) -> "Repeat":
        """Build a Repeat from cookie text, e.g. ``.+1d`` or ``+1w -2d``."""
        m = _COOKIE_RE.match(cookie.strip())
        if m is None:
            raise InvalidCookieError(cookie)

        window = timedelta(0)
        window_unit = None
        if m["window"]:
            window = int(m["window"]) * _WINDOW_UNITS[m["window_unit"]]
            window_unit = RepeatInterval(m["window_unit"])

        return cls(
            kind=RepeatKind(m["kind"]),
            interval=RepeatInterval(m["interval"]),
            amount=int(m["amount"]),
            agenda_window=window,
            window_unit=window_unit,
        )

    @property
    def cookie(self) -> str:
        out = f"{self.kind}{self.amount}{self.interval}"
        if self.agenda_window:
            out += f" -{_format_window(self.agenda_window, self.window_unit)}"
        return out

    def __str__(self) -> str:
        return self.cookie


@dataclass(frozen=True)
class DurationCheck:
    """Duration of a range plus whether the range is well ordered.

    An end before the start gives a negative duration, ``valid=False`` and the
    error, so callers can decide whether to tolerate it.
    """

    duration: timedelta
    valid: bool
    error: StartAfterEndError | None = None


def _check_duration(start: datetime, end: datetime) -> DurationCheck:
    duration = end - start
    if start > end:
        return DurationCheck(duration, False, StartAfterEndError(start, end))
    return DurationCheck(duration, True)


def _clock(dt: datetime) -> tuple[int, int, int]:
    return dt.hour, dt.minute, dt.second


@dataclass(frozen=True)
class Timestamp:
    """A point in time, optionally with a same-day end time and a repeat.

    ``raw_cookie`` keeps the repeat cookie exactly as it was written, so a
    writer can reproduce the source even when ``repeat`` is also set.
    """

    start: datetime
    end: datetime | None = None
    date_only: bool = False
    active: bool = True
    repeat: Repeat | None = None
    raw_cookie: str = ""

    def __post_init__(self) -> None:
        if self.start is None:
            raise NilStartTimeError()
        if self.repeat is not None and not self.raw_cookie:
            object.__setattr__(self, "raw_cookie", self.repeat.cookie)

    @property
    def kind(self) -> TimestampKind:
        return TimestampKind.TIMESTAMP

    @property
    def is_range(self) -> bool:
        return self.end is not None

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def day(self) -> int:
        return self.start.day

    @property
    def weekday(self) -> str:
        """Three-letter day name as written inside org timestamps."""
        return self.start.strftime("%a")

    @property
    def cookie(self) -> str:
        if self.repeat is None:
            return ""
        return self.raw_cookie or self.repeat.cookie

    def time(self) -> tuple[int, int, int]:
        """Clock time of the start, or zeros for a date-only timestamp."""
        if self.date_only:
            return 0, 0, 0
        return _clock(self.start)

    def end_time(self) -> tuple[int, int, int]:
        """Clock time of the end, or zeros when there is no time range."""
        if self.date_only or self.end is None:
            return 0, 0, 0
        return _clock(self.end)

    def duration(self) -> DurationCheck:
        """Return the range duration; zero and not valid when not a range."""
        if self.end is None:
            return DurationCheck(timedelta(0), False)
        return _check_duration(self.start, self.end)

    def in_window(self, start: datetime, end: datetime) -> bool:
        """True if this timestamp's start or end falls within [start, end).

        Only this occurrence is considered. Repeats are expanded by
        ``org_outline.core.temporal.agenda``.
        """
        if start <= self.start < end:
            return True
        return self.end is not None and start <= self.end < end

    def with_active(self, active: bool) -> "Timestamp":
        return replace(self, active=active)

    def render(self) -> str:
        out = self.start.strftime("%Y-%m-%d %a")
        if not self.date_only:
            out += self.start.strftime(" %H:%M")
            if self.end is not None:
                out += self.end.strftime("-%H:%M")
        if self.cookie:
            out += f" {self.cookie}"
        return f"<{out}>" if self.active else f"[{out}]"

    def render_lines(self) -> list[str]:
        return [self.render()]

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class TimestampRange:
    """Two timestamps linked across days: ``<...>--<...>``.

    When both ends carry a time range (``<... 10:00-12:00>--<... 10:00-12:00>``)
    the range describes the same daily window on every day in between.
    ``compatibility`` enables handling of ranges written by clients that do
    not follow the reference syntax exactly.
    """

    start: Timestamp
    end: Timestamp
    compatibility: bool = False

    def __post_init__(self) -> None:
        if self.start is None:
            if self.end is None:
                raise NilTimestampsError()
            raise NilStartTimeError()
        if self.end is None:
            raise NilTimestampsError()

    @property
    def kind(self) -> TimestampKind:
        return TimestampKind.RANGE

    @property
    def is_date_time_range(self) -> bool:
        return self.start.is_range and self.end.is_range

    @property
    def is_repeating(self) -> bool:
        return self.start.repeat is not None

    @property
    def active(self) -> bool:
        return self.start.active

    def time(self) -> tuple[int, int, int]:
        return self.start.time()

    def end_time(self) -> tuple[int, int, int]:
        if self.end.is_range:
            return self.end.end_time()

        if self.compatibility:
            # Clients sometimes write <date time>--<date time> or leave the
            # end without a time; the latter runs to the end of that day.
            if not self.end.date_only:
                return self.end.time()
            return 23, 59, 59

        return self.start.end_time()

    def duration(self) -> DurationCheck:
        """Duration from the first start to the last end instant."""
        last = self.end.end if self.end.end is not None else self.end.start
        return _check_duration(self.start.start, last)

    def in_window(self, start: datetime, end: datetime) -> bool:
        """Does either end of the range fall within the window?

        Active/inactive status and agenda delays are not considered; those
        are filtering decisions for the caller.
        """
        return self.start.in_window(start, end) or self.end.in_window(start, end)

    def toggle_active(self) -> "TimestampRange":
        active = not self.start.active
        return replace(
            self,
            start=self.start.with_active(active),
            end=self.end.with_active(active),
        )

    def render(self) -> str:
        return f"{self.start.render()}--{self.end.render()}"

    def render_lines(self) -> list[str]:
        return [self.render()]

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class DiarySexp:
    """A diary S-expression timestamp such as ``<%%(diary-float t 4 2)>``.

    The expression itself is not evaluated here. ``matches`` may supply a day
    predicate so that window queries can be answered; without it the entry
    never matches a window.
    """

    expression: str
    matches: Callable[[date], bool] | None = field(default=None, compare=False)
    start_time: time | None = None
    end_time_of_day: time | None = None
    active: bool = True

    @property
    def kind(self) -> TimestampKind:
        return TimestampKind.SEXP

    def time(self) -> tuple[int, int, int]:
        if self.start_time is None:
            return 0, 0, 0
        return self.start_time.hour, self.start_time.minute, self.start_time.second

    def end_time(self) -> tuple[int, int, int]:
        if self.end_time_of_day is None:
            return 0, 0, 0
        t = self.end_time_of_day
        return t.hour, t.minute, t.second

    def in_window(self, start: datetime, end: datetime) -> bool:
        if self.matches is None:
            return False

        day = start.date()
        while day <= end.date():
            instant = datetime.combine(day, self.start_time or time(), tzinfo=start.tzinfo)
            if start <= instant < end and self.matches(day):
                return True
            day += timedelta(days=1)
        return False

    def render(self) -> str:
        out = f"%%{self.expression}"
        if self.start_time is not None:
            out += self.start_time.strftime(" %H:%M")
            if self.end_time_of_day is not None:
                out += self.end_time_of_day.strftime("-%H:%M")
        return f"<{out}>"

    def render_lines(self) -> list[str]:
        return [self.render()]

    def __str__(self) -> str:
        return self.render()


TimestampLike = Timestamp | TimestampRange | DiarySexp
