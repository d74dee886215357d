"""Outline documents: depth-nested headings, inheritance and repeating timestamps."""

from org_outline.config import DEFAULT_REPEAT_CONFIG, RepeatConfig
from org_outline.core.tree.outline import OutlineTree, TreePosition
from org_outline.document import Document
from org_outline.models.heading import Heading
from org_outline.models.node import Node
from org_outline.models.timestamp import Repeat, Timestamp, TimestampRange
from org_outline.settings import BufferSettings

__all__ = [
    "DEFAULT_REPEAT_CONFIG",
    "BufferSettings",
    "Document",
    "Heading",
    "Node",
    "OutlineTree",
    "Repeat",
    "RepeatConfig",
    "Timestamp",
    "TimestampRange",
    "TreePosition",
]
