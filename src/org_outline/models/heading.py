"""Heading lines of the outline."""

from dataclasses import dataclass, field

from org_outline.config import COMMENT_KEYWORD
from org_outline.models.priority import UNSET, HeadingPriority


@dataclass
class Heading:
    """A titled entry at a given depth.

    ``level`` is the number of stars and is at least 1; level 0 belongs to the
    synthetic document root, which has no heading. The level is checked when
    the heading is inserted into a tree.
    """

    text: str
    level: int = 1
    priority: HeadingPriority = UNSET
    todo: str | None = None
    is_comment: bool = False
    tags: list[str] = field(default_factory=list)

    def render(self) -> str:
        """Return the heading line, e.g. ``** TODO [#A] Title :work:``."""
        parts = ["*" * self.level]
        if self.todo:
            parts.append(self.todo)
        if priority := self.priority.render():
            parts.append(priority)
        if self.is_comment:
            parts.append(COMMENT_KEYWORD)
        if self.text:
            parts.append(self.text)
        line = " ".join(parts)
        if self.tags:
            line += f" :{':'.join(self.tags)}:"
        return line
