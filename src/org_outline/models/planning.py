"""Planning entries: timestamps attached to a node under a role."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from org_outline.models.timestamp import TimestampLike


class PlanningKind(StrEnum):
    # A bare active timestamp in the entry: a plain event.
    EVENT = ""
    SCHEDULED = "SCHEDULED"
    DEADLINE = "DEADLINE"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class Planning:
    kind: PlanningKind
    timestamp: TimestampLike

    def in_window(self, start: datetime, end: datetime) -> bool:
        return self.timestamp.in_window(start, end)

    def render(self) -> str:
        if self.kind is PlanningKind.EVENT:
            return self.timestamp.render()
        return f"{self.kind}: {self.timestamp.render()}"


def planning_line(entries: Iterable[Planning]) -> str | None:
    """Join the keyword entries into the line that follows a heading.

    Plain events are not part of the planning line; they belong to the body.
    """
    keyworded = [p.render() for p in entries if p.kind is not PlanningKind.EVENT]
    return " ".join(keyworded) if keyworded else None
