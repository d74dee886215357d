"""Exception hierarchy for the org outline model."""

from collections.abc import Sequence
from datetime import datetime


class OrgOutlineError(Exception):
    """Base class for recoverable errors raised by this package."""


# --- Structural errors ---


class StructuralError(OrgOutlineError):
    """The heading sequence or tree operation is malformed."""


class InvalidLevelError(StructuralError):
    def __init__(self, level: int | None, reason: str = "levels start at 1") -> None:
        self.level = level
        super().__init__(f"Invalid heading level {level!r}: {reason}")


class UnknownInsertError(StructuralError):
    def __init__(self, level: int) -> None:
        self.level = level
        super().__init__(f"Unable to place a level {level} heading: no ancestor found")


class PositionNotFoundError(StructuralError):
    def __init__(self, position_id: int) -> None:
        self.position_id = position_id
        super().__init__(f"Tree position {position_id!r} does not exist")


class InconsistentTreeError(RuntimeError):
    """The tree invariant was already broken; not recoverable."""


# --- Configuration errors ---


class ConfigurationError(OrgOutlineError):
    """Buffer settings or repeat configuration are inconsistent."""


class InvalidRepeatConfigError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__(
            "Invalid repeat config: shift_by_days and fixed_date cannot both be set"
        )


class TodoSequenceKindError(ConfigurationError):
    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unknown todo sequence kind: {kind!r}")


class TodoKeywordCollisionError(ConfigurationError):
    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        super().__init__(f"Todo keyword collision: {keyword} is used in another sequence")


class FastAccessKeyCollisionError(ConfigurationError):
    def __init__(self, key: str, keyword: str) -> None:
        self.key = key
        self.keyword = keyword
        super().__init__(
            f"Fast access key {key!r} of {keyword} is already bound to another keyword"
        )


class UnknownTodoKeywordError(ConfigurationError):
    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        super().__init__(f"Todo keyword {keyword!r} is not defined in any sequence")


class InvalidPrioritySettingsError(ConfigurationError):
    pass


class PriorityOutOfRangeError(ConfigurationError):
    def __init__(self, priority: object, highest: object, lowest: object) -> None:
        self.priority = priority
        super().__init__(f"Priority {priority} is outside the range {highest}..{lowest}")


# --- Value errors ---


class OrgValueError(OrgOutlineError, ValueError):
    """A value does not satisfy the model's constraints."""


class NotValueRestrictionError(OrgValueError):
    def __init__(self, key: str) -> None:
        self.property = key
        super().__init__(f"Property {key} does not implement value restrictions or is misnamed")


class InvalidPropertyValueError(OrgValueError):
    def __init__(
        self,
        key: str,
        value: str,
        restrictor: str,
        allowed: Sequence[str],
    ) -> None:
        self.property = key
        self.property_value = value
        self.restrictor = restrictor
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid property value for property {key}: {value}. "
            f"{restrictor} restricts values to: {', '.join(self.allowed)}"
        )


class NilStartTimeError(OrgValueError):
    def __init__(self) -> None:
        super().__init__("A timestamp requires a start time")


class NilTimestampsError(OrgValueError):
    def __init__(self) -> None:
        super().__init__("A timestamp range requires both a start and an end timestamp")


class MissingRepeatError(OrgValueError):
    def __init__(self) -> None:
        super().__init__("Timestamp has no repeat directive to shift by")


class InvalidCookieError(OrgValueError):
    def __init__(self, cookie: str) -> None:
        self.cookie = cookie
        super().__init__(f"Cannot read repeat cookie {cookie!r}")


class InvalidElementError(OrgValueError):
    pass


# --- Temporal invariants ---


class TemporalInvariantError(OrgOutlineError):
    """A temporal value violates ordering; reported, not raised."""


class StartAfterEndError(TemporalInvariantError):
    def __init__(self, start: datetime, end: datetime) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f"Start time [{start:%Y-%m-%d %H:%M:%S}] occurs after end time "
            f"[{end:%Y-%m-%d %H:%M:%S}]"
        )
