"""Section content: the elements between a heading and the next one."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

from org_outline.errors import InvalidElementError
from org_outline.models.timestamp import Timestamp


class ElementKind(StrEnum):
    HEADING = "heading"
    DRAWER = "drawer"
    PROPERTY_DRAWER = "property drawer"
    PLANNING = "planning"
    CLOCK = "clock"
    PARAGRAPH = "paragraph"
    NODE_PROPERTY = "node property"


@dataclass
class Paragraph:
    lines: list[str] = field(default_factory=list)

    @property
    def kind(self) -> ElementKind:
        return ElementKind.PARAGRAPH

    def render_lines(self) -> list[str]:
        return list(self.lines)


@dataclass
class ClockEntry:
    """A ``CLOCK:`` line; ``end`` is None while the clock is running."""

    start: datetime
    end: datetime | None = None

    @property
    def kind(self) -> ElementKind:
        return ElementKind.CLOCK

    def duration(self) -> timedelta:
        if self.end is None:
            return timedelta(0)
        return self.end - self.start

    def render_lines(self) -> list[str]:
        line = f"CLOCK: {Timestamp(self.start, active=False)}"
        if self.end is not None:
            minutes = int(self.duration().total_seconds()) // 60
            line += f"--{Timestamp(self.end, active=False)} => {minutes // 60:2d}:{minutes % 60:02d}"
        return [line]


# Elements that may not be nested inside a drawer.
_NOT_IN_DRAWER = {ElementKind.HEADING, ElementKind.DRAWER, ElementKind.PROPERTY_DRAWER}


@dataclass
class Drawer:
    """A named drawer such as ``:LOGBOOK:``."""

    name: str
    elements: list["Element"] = field(default_factory=list)

    @property
    def kind(self) -> ElementKind:
        return ElementKind.DRAWER

    def add(self, element: "Element") -> "Drawer":
        if element.kind in _NOT_IN_DRAWER:
            msg = f"A {element.kind} cannot be placed inside drawer {self.name!r}"
            raise InvalidElementError(msg)
        self.elements.append(element)
        return self

    def render_lines(self) -> list[str]:
        out = [f":{self.name.upper()}:"]
        for element in self.elements:
            out.extend(element.render_lines())
        out.append(":END:")
        return out


Element = Paragraph | ClockEntry | Drawer


@dataclass
class Section:
    """Ordered elements owned by a heading.

    ``raw`` may hold the source text the section was read from; it is not
    used for rendering.
    """

    elements: list[Element] = field(default_factory=list)
    raw: str = ""

    def append(self, element: Element) -> "Section":
        self.elements.append(element)
        return self

    def render_lines(self) -> list[str]:
        out: list[str] = []
        for element in self.elements:
            out.extend(element.render_lines())
        return out
