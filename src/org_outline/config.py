"""Configuration constants and defaults for org-outline."""

from dataclasses import dataclass
from datetime import tzinfo

# Property keys ending with this suffix (any case) restrict the values of the
# property named by the rest of the key.
VALUE_RESTRICTION_SUFFIX: str = "_ALL"

# Todo sequence used when a buffer declares none.
DEFAULT_TODO_KEYWORDS: tuple[str, ...] = ("TODO", "|", "DONE")

# Highest, lowest and default heading priority when a buffer declares none.
DEFAULT_PRIORITIES: tuple[str, str, str] = ("A", "C", "B")

# Whether ordinary properties are inherited down the tree. Value restriction
# properties are inherited regardless.
DEFAULT_PROPERTY_INHERITANCE: bool = False

# Heading keyword that comments out a whole subtree.
COMMENT_KEYWORD: str = "COMMENT"


@dataclass(frozen=True)
class RepeatConfig:
    """Month-shift policy for repeating timestamps.

    - clamp_to_end_of_month only: every month step lands on the last day of
      the following month.
    - clamp_to_end_of_month + shift_by_days: add 30 days, but never skip past
      the end of the following month.
    - clamp_to_end_of_month + fixed_date: same day next month, clamped to the
      month's last day. The clamped day becomes the new reference day.
    - shift_by_days alone: always exactly 30 days.
    - fixed_date alone: same day next month, skipping months that lack it.

    shift_by_days and fixed_date are mutually exclusive. That is checked when
    a month shift runs, not here.
    """

    clamp_to_end_of_month: bool = False
    shift_by_days: bool = False
    fixed_date: bool = True
    # Zone applied to dates built by month steps. None keeps the stamp's own.
    tz: tzinfo | None = None


DEFAULT_REPEAT_CONFIG = RepeatConfig()
