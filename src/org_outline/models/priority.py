"""Heading priorities and the priority range of a buffer.

Priorities compare by significance. A letter ranks as its character code and
an integer as itself, so ``[#A]`` (65) outranks ``[#C]`` (67) and ``[#1]``
outranks ``[#5]``: a lower rank is more significant. ``HIGHEST`` and
``LOWEST`` are context-free extremes that sit outside every range.
"""

import math
from dataclasses import dataclass
from enum import StrEnum

from org_outline.config import DEFAULT_PRIORITIES
from org_outline.errors import InvalidPrioritySettingsError, OrgValueError


class PriorityKind(StrEnum):
    INTEGER = "integer"
    ALPHA = "alpha"
    UNSET = "unset"
    HIGHEST = "highest"
    LOWEST = "lowest"


@dataclass(frozen=True, eq=True)
class HeadingPriority:
    """A heading priority cookie value.

    Sorting a list of priorities puts the most significant first.
    """

    kind: PriorityKind
    value: int | str | None = None

    def __post_init__(self) -> None:
        if self.kind is PriorityKind.ALPHA:
            if not (isinstance(self.value, str) and len(self.value) == 1 and self.value.isalpha()):
                msg = f"Alpha priority must be a single letter, got {self.value!r}"
                raise OrgValueError(msg)
            object.__setattr__(self, "value", self.value.upper())
        elif self.kind is PriorityKind.INTEGER:
            if not (isinstance(self.value, int) and 0 <= self.value < 65):
                msg = f"Integer priority must be within 0..64, got {self.value!r}"
                raise OrgValueError(msg)

    @classmethod
    def alpha(cls, letter: str) -> "HeadingPriority":
        return cls(PriorityKind.ALPHA, letter)

    @classmethod
    def integer(cls, number: int) -> "HeadingPriority":
        return cls(PriorityKind.INTEGER, number)

    @classmethod
    def parse(cls, text: str) -> "HeadingPriority":
        """Read ``A``, ``5``, ``[#A]`` or an empty string (unset)."""
        text = text.strip().removeprefix("[#").removesuffix("]")
        if not text:
            return UNSET
        if text.isdigit():
            return cls.integer(int(text))
        return cls.alpha(text)

    def rank(self, settings: "PrioritySettings | None" = None) -> float:
        """Numeric significance; lower is more significant."""
        match self.kind:
            case PriorityKind.HIGHEST:
                return -math.inf
            case PriorityKind.LOWEST:
                return math.inf
            case PriorityKind.UNSET:
                return (settings or DEFAULT_PRIORITY_SETTINGS).default.rank()
            case PriorityKind.ALPHA:
                return ord(str(self.value))
            case _:
                return int(self.value)  # type: ignore[arg-type]

    def is_higher_than(
        self,
        other: "HeadingPriority",
        settings: "PrioritySettings | None" = None,
    ) -> bool:
        return self.rank(settings) < other.rank(settings)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, HeadingPriority):
            return NotImplemented
        return self.rank() < other.rank()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, HeadingPriority):
            return NotImplemented
        return self.rank() <= other.rank()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, HeadingPriority):
            return NotImplemented
        return self.rank() > other.rank()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, HeadingPriority):
            return NotImplemented
        return self.rank() >= other.rank()

    def render(self) -> str:
        if self.kind in (PriorityKind.ALPHA, PriorityKind.INTEGER):
            return f"[#{self.value}]"
        return ""

    def __str__(self) -> str:
        return self.render()


UNSET = HeadingPriority(PriorityKind.UNSET)
HIGHEST = HeadingPriority(PriorityKind.HIGHEST)
LOWEST = HeadingPriority(PriorityKind.LOWEST)


@dataclass(frozen=True)
class PrioritySettings:
    """Highest, lowest and default priority of a buffer (``#+PRIORITIES``)."""

    highest: HeadingPriority
    lowest: HeadingPriority
    default: HeadingPriority

    def __post_init__(self) -> None:
        kinds = {self.highest.kind, self.lowest.kind, self.default.kind}
        if len(kinds) != 1 or not kinds <= {PriorityKind.ALPHA, PriorityKind.INTEGER}:
            msg = f"Priority settings must use one concrete kind, got {sorted(kinds)!r}"
            raise InvalidPrioritySettingsError(msg)
        if not self.highest.rank() <= self.default.rank() <= self.lowest.rank():
            msg = (
                f"Priority default {self.default} must lie between "
                f"{self.highest} and {self.lowest}"
            )
            raise InvalidPrioritySettingsError(msg)

    @classmethod
    def from_values(cls, highest: str, lowest: str, default: str) -> "PrioritySettings":
        return cls(
            highest=HeadingPriority.parse(highest),
            lowest=HeadingPriority.parse(lowest),
            default=HeadingPriority.parse(default),
        )

    @property
    def kind(self) -> PriorityKind:
        return self.highest.kind

    def contains(self, priority: HeadingPriority) -> bool:
        """Can a heading carry this priority under these settings?"""
        if priority.kind is PriorityKind.UNSET:
            return True
        if priority.kind is not self.kind:
            return False
        return self.highest.rank() <= priority.rank() <= self.lowest.rank()

    def resolve(self, priority: HeadingPriority) -> HeadingPriority:
        """Map unset and extreme values onto this range."""
        match priority.kind:
            case PriorityKind.UNSET:
                return self.default
            case PriorityKind.HIGHEST:
                return self.highest
            case PriorityKind.LOWEST:
                return self.lowest
            case _:
                return priority

    def compare(self, a: HeadingPriority, b: HeadingPriority) -> int:
        """Return -1 if ``a`` is more significant than ``b``, 1 if less, else 0."""
        ra, rb = a.rank(self), b.rank(self)
        return (ra > rb) - (ra < rb)


DEFAULT_PRIORITY_SETTINGS = PrioritySettings.from_values(*DEFAULT_PRIORITIES)
