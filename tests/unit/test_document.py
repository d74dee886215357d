"""Tests for document-level operations."""

from datetime import datetime

import pytest

from org_outline.document import Document
from org_outline.errors import StructuralError
from org_outline.models.planning import Planning, PlanningKind
from org_outline.models.timestamp import Timestamp
from tests.unit.builders import find


def _titles(document: Document) -> list[str]:
    return [n.heading.text for n in document.nodes()]


def test_new_document_defaults() -> None:
    document = Document()
    assert len(document) == 0
    assert document.root.heading is None
    assert document.root.document is document
    assert document.settings.todo.keywords == ["TODO", "DONE"]


def test_add_heading_attaches_node() -> None:
    document = Document()
    node = document.add_heading(1, "Inbox", tags=["a"], is_comment=True)

    assert node.document is document
    assert node.heading.tags == ["a"]
    assert node.heading.is_comment
    assert document.position_of(node).parent_id == document.tree.root.id


def test_end_nodes(sample_document: Document) -> None:
    leaves = [n.heading.text for n in sample_document.end_nodes()]
    assert leaves == ["Water plants", "Prune roses", "Receipts", "Old notes"]

    garden = find(sample_document, "Garden")
    assert [n.heading.text for n in sample_document.end_nodes(garden)] == [
        "Water plants",
        "Prune roses",
    ]


def test_commented_subtree(sample_document: Document) -> None:
    assert sample_document.is_commented(find(sample_document, "Archive"))
    assert sample_document.is_commented(find(sample_document, "Old notes"))
    assert not sample_document.is_commented(find(sample_document, "Garden"))


def test_find_by_todo(sample_document: Document) -> None:
    found = sample_document.find_by_todo("TODO", "WAITING")
    assert [n.heading.text for n in found] == ["Water plants", "Prune roses"]


def test_splice_document_after_node(sample_document: Document) -> None:
    other = Document()
    other.add_heading(2, "Mulch")
    other.add_heading(3, "Order bark")

    garden = find(sample_document, "Garden")
    sample_document.splice(garden, other)

    assert _titles(sample_document)[:5] == [
        "Garden",
        "Mulch",
        "Order bark",
        "Water plants",
        "Prune roses",
    ]
    mulch = find(sample_document, "Mulch")
    assert mulch.document is sample_document
    assert sample_document.parent_of(mulch) is garden
    assert len(other) == 0


def test_refile_moves_subtree_under_anchor(sample_document: Document) -> None:
    garden = find(sample_document, "Garden")
    taxes = find(sample_document, "Taxes")

    sample_document.refile(garden, taxes)

    assert _titles(sample_document) == [
        "Taxes",
        "Receipts",
        "Garden",
        "Water plants",
        "Prune roses",
        "Archive",
        "Old notes",
    ]
    assert garden.heading.level == 2
    assert find(sample_document, "Water plants").heading.level == 3
    assert sample_document.parent_of(garden) is taxes
    assert sample_document.children_of(taxes) == [find(sample_document, "Receipts"), garden]


def test_refile_to_top_level_keeps_levels() -> None:
    document = Document()
    document.add_heading(1, "A")
    b = document.add_heading(2, "B")
    document.add_heading(1, "C")

    document.refile(b, None, adjust_levels=False)

    assert _titles(document) == ["A", "C", "B"]
    assert document.parent_of(b) is find(document, "C")


def test_refile_under_own_subtree_raises(sample_document: Document) -> None:
    garden = find(sample_document, "Garden")
    with pytest.raises(StructuralError):
        sample_document.refile(garden, find(sample_document, "Water plants"))


def test_advance_repeats_replaces_planning(sample_document: Document) -> None:
    water = find(sample_document, "Water plants")
    water.planning.append(Planning(PlanningKind.CLOSED, Timestamp(datetime(2023, 1, 1), active=False)))

    previous = sample_document.advance_repeats(water)

    assert previous[0].timestamp.start == datetime(2023, 1, 2, 8, 0)
    assert water.planning[0].timestamp.start == datetime(2023, 1, 9, 8, 0)
    assert water.planning[1] == previous[1]


def test_advance_future_fixed_against_reference(sample_document: Document) -> None:
    taxes = find(sample_document, "Taxes")
    sample_document.advance_repeats(taxes, datetime(2026, 10, 19))
    assert taxes.planning[0].timestamp.start == datetime(2027, 4, 15)
