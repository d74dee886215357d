"""Shared test fixtures."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from org_outline.core.importer.json_reader import parse_outline_data
from org_outline.document import Document

OUTLINE_DATA: dict[str, Any] = {
    "title": "Projects",
    "file_tags": ["home"],
    "properties": {"Color_All": 'red green "light blue"'},
    "todo": [
        ["TODO(t)", "NEXT(n)", "|", "DONE(d)"],
        ["WAITING(w)", "|", "CANCELLED(c)"],
    ],
    "priorities": ["A", "C", "B"],
    "headings": [
        {
            "level": 1,
            "text": "Garden",
            "tags": ["outdoor"],
            "properties": {"Color": "green"},
        },
        {
            "level": 2,
            "text": "Water plants",
            "todo": "TODO",
            "priority": "A",
            "tags": ["chore"],
            "planning": [
                {"kind": "SCHEDULED", "start": "2023-01-02T08:00", "repeat": "+1w"},
            ],
        },
        {
            "level": 2,
            "text": "Prune roses",
            "todo": "WAITING",
            "properties": {"Color": "red"},
        },
        {
            "level": 1,
            "text": "Taxes",
            "tags": ["finance"],
            "body": ["File before the deadline."],
            "planning": [
                {"kind": "DEADLINE", "start": "2023-04-15", "repeat": "++1y"},
            ],
        },
        {"level": 3, "text": "Receipts"},
        {"level": 1, "text": "Archive", "comment": True},
        {"level": 2, "text": "Old notes"},
    ],
}


@pytest.fixture
def outline_data() -> dict[str, Any]:
    """A fresh copy of the sample outline, safe to modify."""
    return copy.deepcopy(OUTLINE_DATA)


@pytest.fixture
def sample_document(outline_data: dict[str, Any]) -> Document:
    """The sample outline parsed into a Document."""
    return parse_outline_data(outline_data, source="sample")


@pytest.fixture
def outline_file(tmp_path: Path, outline_data: dict[str, Any]) -> Path:
    """The sample outline written to a JSON file."""
    path = tmp_path / "projects.json"
    path.write_text(json.dumps(outline_data))
    return path
