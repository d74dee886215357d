"""Build documents from JSON outline files.

The JSON format mirrors a parsed outline: buffer settings at the top level and
a flat ``headings`` list in document order. Nesting comes from each heading's
``level``, exactly as with outline text.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from org_outline.document import Document
from org_outline.errors import OrgValueError
from org_outline.models.planning import Planning, PlanningKind
from org_outline.models.priority import PrioritySettings
from org_outline.models.property import PropertyDrawer
from org_outline.models.section import Paragraph, Section
from org_outline.models.timestamp import Repeat, Timestamp, TimestampLike, TimestampRange
from org_outline.settings import BufferSettings, TodoSettings


def _parse_settings(data: dict[str, Any]) -> BufferSettings:
    settings = BufferSettings(
        title=data.get("title", ""),
        file_tags=list(data.get("file_tags", [])),
        properties=PropertyDrawer.from_mapping(data.get("properties", {})),
        category=data.get("category", ""),
        archive=data.get("archive", ""),
    )
    if todo := data.get("todo"):
        settings.todo = TodoSettings.from_lines(todo)
    if priorities := data.get("priorities"):
        settings.priorities = PrioritySettings.from_values(*priorities)
    if (inheritance := data.get("property_inheritance")) is not None:
        settings.property_inheritance = (
            inheritance if isinstance(inheritance, bool) else tuple(inheritance)
        )
    return settings


def _parse_instant(value: str) -> tuple[datetime, bool]:
    """Read an ISO date or date-time; the flag tells whether it was date only."""
    return datetime.fromisoformat(value), len(value) == len("2020-01-01")


def parse_timestamp(raw: dict[str, Any]) -> TimestampLike:
    """Build a timestamp, or a range when start and end fall on different days.

    Raises:
        OrgValueError: A field holds an unreadable value.
        ValueError: A date is not in ISO format.
    """
    if not raw.get("start"):
        msg = "Planning entry has no start"
        raise OrgValueError(msg)

    start, date_only = _parse_instant(raw["start"])
    date_only = raw.get("date_only", date_only)
    active = raw.get("active", True)
    cookie = raw.get("repeat") or ""
    repeat = Repeat.from_cookie(cookie) if cookie else None

    end = None
    if raw.get("end"):
        end, end_date_only = _parse_instant(raw["end"])
        if end.date() != start.date():
            return TimestampRange(
                start=Timestamp(start, date_only=date_only, active=active, repeat=repeat,
                                raw_cookie=cookie),
                end=Timestamp(end, date_only=end_date_only, active=active),
            )

    return Timestamp(start, end, date_only=date_only, active=active, repeat=repeat,
                     raw_cookie=cookie)


def _parse_planning(raw: dict[str, Any]) -> Planning:
    kind = PlanningKind(raw.get("kind", "").upper().removesuffix(":").replace("EVENT", ""))
    return Planning(kind=kind, timestamp=parse_timestamp(raw))


def parse_outline_data(data: dict[str, Any], *, source: str = "<data>") -> Document:
    """Parse an outline dict into a Document.

    Args:
        data: Raw outline data (as from a JSON outline file).
        source: Name used in log messages.

    Returns:
        The document with every heading inserted in order.

    Raises:
        OrgOutlineError: A heading cannot be placed, or its todo keyword or
            priority is not allowed by the document settings.
    """
    document = Document(_parse_settings(data))
    if preamble := data.get("preamble"):
        document.root.section = Section([Paragraph(list(preamble))])

    skipped = 0
    for index, raw in enumerate(data.get("headings", [])):
        node = document.add_heading(
            raw["level"],
            raw.get("text", ""),
            priority=raw.get("priority") or "",
            tags=raw.get("tags", []),
            todo=raw.get("todo"),
            is_comment=raw.get("comment", False),
        )
        node.properties = PropertyDrawer.from_mapping(raw.get("properties", {}))
        if body := raw.get("body"):
            node.section = Section([Paragraph(list(body))])

        for entry in raw.get("planning", []):
            try:
                node.planning.append(_parse_planning(entry))
            except ValueError as exc:
                skipped += 1
                logger.warning("{}: skipping planning entry of heading {}: {}", source, index, exc)

    logger.debug("Read {} heading(s) from {} ({} entries skipped)", len(document), source, skipped)
    return document


def load_outline_file(path: Path) -> Document:
    """Read a JSON outline file from disk."""
    data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    return parse_outline_data(data, source=path.name)
