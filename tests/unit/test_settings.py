"""Tests for todo sequences and buffer settings."""

import pytest

from org_outline.document import Document
from org_outline.errors import (
    FastAccessKeyCollisionError,
    TodoKeywordCollisionError,
    TodoSequenceKindError,
    UnknownTodoKeywordError,
)
from org_outline.settings import BufferSettings, TodoSequence, TodoSequenceKind, TodoSettings


def test_sequence_splits_at_bar() -> None:
    seq = TodoSequence.from_string("TODO(t) NEXT | DONE(d) CANCELLED")

    assert seq.process_keywords == ("TODO", "NEXT")
    assert seq.done_keywords == ("DONE", "CANCELLED")
    assert seq.fast_key("TODO") == "t"
    assert seq.fast_key("NEXT") is None
    assert seq.kind is TodoSequenceKind.STATE


def test_sequence_without_bar_ends_in_done_keyword() -> None:
    seq = TodoSequence.from_keywords(["OPEN", "REVIEW", "CLOSED"])
    assert seq.process_keywords == ("OPEN", "REVIEW")
    assert seq.done_keywords == ("CLOSED",)


def test_fast_key_ignores_logging_flags() -> None:
    seq = TodoSequence.from_keywords(["WAIT(w@/!)", "|", "DONE(@)"])
    assert seq.fast_key("WAIT") == "w"
    assert seq.fast_key("DONE") is None


def test_default_settings() -> None:
    settings = TodoSettings.default()
    assert settings.keywords == ["TODO", "DONE"]
    assert settings.is_todo("TODO")
    assert settings.is_done("DONE")
    assert BufferSettings().todo == settings


def test_add_returns_new_settings() -> None:
    base = TodoSettings.default()
    extended = base.add(TodoSequence.from_string("WAITING | CANCELLED"))

    assert "WAITING" in extended
    assert "WAITING" not in base


def test_keyword_collision_raises() -> None:
    settings = TodoSettings.default()
    with pytest.raises(TodoKeywordCollisionError) as exc_info:
        settings.add(TodoSequence.from_string("IDEA | DONE"))
    assert exc_info.value.keyword == "DONE"


def test_fast_key_collision_raises() -> None:
    settings = TodoSettings.from_lines([["TODO(t)", "|", "DONE(d)"]])
    with pytest.raises(FastAccessKeyCollisionError):
        settings.add(TodoSequence.from_string("TASK(t) | FINISHED(f)"))


def test_unknown_sequence_kind_raises() -> None:
    with pytest.raises(TodoSequenceKindError):
        TodoSequence.from_string("A | B", kind="checklist")

    bogus = TodoSequence(("A",), ("B",), kind="checklist")  # type: ignore[arg-type]
    with pytest.raises(TodoSequenceKindError):
        TodoSettings().add(bogus)


def test_kind_accepts_plain_strings() -> None:
    seq = TodoSequence.from_string("BUG FEATURE | FIXED", kind="type")
    assert seq.kind is TodoSequenceKind.TYPE
    assert TodoSettings().add(seq).sequences[0].kind is TodoSequenceKind.TYPE


def test_lookups_across_sequences() -> None:
    settings = TodoSettings.from_lines([
        ["TODO(t)", "NEXT", "|", "DONE"],
        ["WAITING(w)", "|", "CANCELLED"],
    ])

    assert settings.sequence_for("CANCELLED").keywords == ("WAITING", "CANCELLED")
    assert settings.keyword_for_key("w") == "WAITING"
    assert settings.is_done("CANCELLED")
    assert not settings.is_todo("CANCELLED")
    with pytest.raises(UnknownTodoKeywordError):
        settings.sequence_for("MAYBE")


def test_next_keyword_cycles_through_sequence() -> None:
    settings = TodoSettings.from_lines([["TODO", "NEXT", "|", "DONE"]])

    assert settings.next_keyword(None) == "TODO"
    assert settings.next_keyword("TODO") == "NEXT"
    assert settings.next_keyword("NEXT") == "DONE"
    assert settings.next_keyword("DONE") is None


def test_sequence_renders_keyword_line() -> None:
    seq = TodoSequence.from_string("TODO(t) | DONE(d)")
    assert seq.render() == "TODO(t) | DONE(d)"


def test_add_heading_rejects_unknown_todo() -> None:
    document = Document()
    with pytest.raises(UnknownTodoKeywordError):
        document.add_heading(1, "Task", todo="MAYBE")

    node = document.add_heading(1, "Task", todo="TODO")
    assert node.heading.todo == "TODO"
