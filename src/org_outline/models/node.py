"""The node: a heading with its section, properties and planning."""

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from org_outline.models.heading import Heading
from org_outline.models.planning import Planning, PlanningKind, planning_line
from org_outline.models.property import PropertyDrawer
from org_outline.models.section import Section

if TYPE_CHECKING:
    from org_outline.document import Document


@dataclass(eq=False)
class Node:
    """A single node of the outline.

    Only the synthetic root of a tree has no heading. ``position_id`` is the
    id of the tree position that owns the node; the document is held through
    a weak reference so nodes never keep their document alive.
    """

    heading: Heading | None = None
    section: Section | None = None
    properties: PropertyDrawer = field(default_factory=PropertyDrawer)
    planning: list[Planning] = field(default_factory=list)
    position_id: int | None = None
    _document: "weakref.ref[Document] | None" = field(default=None, repr=False)

    @property
    def document(self) -> "Document | None":
        return self._document() if self._document is not None else None

    def attach(self, document: "Document") -> None:
        self._document = weakref.ref(document)

    @property
    def level(self) -> int:
        return self.heading.level if self.heading is not None else 0

    @property
    def tags(self) -> list[str]:
        """Tags declared on this heading only."""
        return list(self.heading.tags) if self.heading is not None else []

    def render_lines(self) -> list[str]:
        out: list[str] = []
        if self.heading is not None:
            out.append(self.heading.render())
        if line := planning_line(self.planning):
            out.append(line)
        out.extend(self.properties.render_lines())
        out.extend(p.render() for p in self.planning if p.kind is PlanningKind.EVENT)
        if self.section is not None:
            out.extend(self.section.render_lines())
        return out
