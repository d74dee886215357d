"""Render outline trees and documents back to outline text."""

import io
from typing import TYPE_CHECKING

from org_outline.core.tree.outline import OutlineTree, TreePosition
from org_outline.models.priority import DEFAULT_PRIORITY_SETTINGS
from org_outline.settings import BufferSettings, TodoSettings

if TYPE_CHECKING:
    from org_outline.document import Document

# Appended to a heading line whose children were cut off by max_depth.
FOLDED_MARKER = " ..."


def render_outline(
    tree: OutlineTree,
    *,
    position: TreePosition | None = None,
    max_depth: int | None = None,
    include_sections: bool = True,
) -> str:
    """Render the headings below ``position`` as outline text.

    Args:
        tree: The tree to render.
        position: Render this heading and its descendants (None = whole tree).
        max_depth: Max tree levels below the start to include (None =
            unlimited). Headings with hidden children end with `` ...``.
        include_sections: Whether to include planning, properties and body.

    Returns:
        Outline text, one line per heading or body line.
    """
    if position is None:
        start = [(p, 1) for p in tree.children(tree.root)]
    else:
        start = [(position, 1)]

    out = io.StringIO()
    stack = list(reversed(start))
    while stack:
        current, depth = stack.pop()
        lines = current.node.render_lines() if include_sections else []
        if not lines:
            lines = [current.node.heading.render()] if current.node.heading else []

        folded = max_depth is not None and depth >= max_depth and current.children
        if folded and lines:
            lines[0] += FOLDED_MARKER
        for line in lines:
            out.write(f"{line}\n")

        if not folded:
            stack.extend((child, depth + 1) for child in reversed(tree.children(current)))

    return out.getvalue()


def render_settings(settings: BufferSettings) -> list[str]:
    """Header keyword lines for settings that differ from the defaults."""
    lines: list[str] = []
    if settings.title:
        lines.append(f"#+TITLE: {settings.title}")
    if settings.file_tags:
        lines.append(f"#+FILETAGS: :{':'.join(settings.file_tags)}:")
    if settings.category:
        lines.append(f"#+CATEGORY: {settings.category}")
    if settings.archive:
        lines.append(f"#+ARCHIVE: {settings.archive}")
    if settings.todo != TodoSettings.default():
        lines.extend(f"#+TODO: {seq.render()}" for seq in settings.todo.sequences)
    if settings.priorities != DEFAULT_PRIORITY_SETTINGS:
        p = settings.priorities
        lines.append(f"#+PRIORITIES: {p.highest.value} {p.lowest.value} {p.default.value}")
    lines.extend(f"#+PROPERTY: {prop.key} {prop.value}".rstrip() for prop in settings.properties)
    return lines


def render_document(document: "Document", *, max_depth: int | None = None) -> str:
    """Render a whole document: header keywords, preamble, then the outline."""
    out = io.StringIO()
    header = render_settings(document.settings)
    for line in header:
        out.write(f"{line}\n")

    root = document.root
    if root.section is not None:
        for line in root.section.render_lines():
            out.write(f"{line}\n")
    elif header and len(document):
        out.write("\n")

    out.write(render_outline(document.tree, max_depth=max_depth))
    return out.getvalue()
