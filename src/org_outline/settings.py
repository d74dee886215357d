"""Buffer settings: per-document keywords that steer how the outline is read.

Todo keywords come in sequences, e.g. ``#+TODO: TODO(t) NEXT | DONE(d)``.
Keywords after ``|`` are done states; without a ``|`` the last keyword is the
done state. A keyword may appear in only one sequence of a document, and a
fast-access key (the letter in parentheses) may be bound to only one keyword.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum

from org_outline.config import (
    DEFAULT_PROPERTY_INHERITANCE,
    DEFAULT_REPEAT_CONFIG,
    DEFAULT_TODO_KEYWORDS,
    RepeatConfig,
)
from org_outline.errors import (
    ConfigurationError,
    FastAccessKeyCollisionError,
    TodoKeywordCollisionError,
    TodoSequenceKindError,
    UnknownTodoKeywordError,
)
from org_outline.models.priority import DEFAULT_PRIORITY_SETTINGS, PrioritySettings
from org_outline.models.property import PropertyDrawer

DONE_SEPARATOR = "|"

# "TODO", "TODO(t)", "DONE(d@/!)", "WAIT(@/!)"
_KEYWORD_RE = re.compile(r"^(?P<keyword>[^\s()]+)(?:\((?P<key>[^@/!)]?)[^)]*\))?$")


class TodoSequenceKind(StrEnum):
    # Keywords name an assignee or category rather than a workflow step.
    TYPE = "type"
    STATE = "state"


def parse_todo_keyword(token: str) -> tuple[str, str | None]:
    """Split ``TODO(t)`` into the keyword and its fast-access key."""
    match = _KEYWORD_RE.match(token)
    if match is None:
        msg = f"Cannot read todo keyword {token!r}"
        raise ConfigurationError(msg)
    return match["keyword"], match["key"] or None


@dataclass(frozen=True)
class TodoSequence:
    """One todo workflow, split into process and done keywords."""

    process_keywords: tuple[str, ...]
    done_keywords: tuple[str, ...]
    kind: TodoSequenceKind = TodoSequenceKind.STATE
    fast_keys: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_keywords(
        cls,
        tokens: Sequence[str],
        kind: TodoSequenceKind | str = TodoSequenceKind.STATE,
    ) -> "TodoSequence":
        """Build a sequence from tokens such as ``["TODO(t)", "|", "DONE"]``."""
        parsed: list[str] = []
        fast_keys: list[tuple[str, str]] = []
        split_at: int | None = None
        for token in tokens:
            if token == DONE_SEPARATOR:
                split_at = len(parsed)
                continue
            keyword, key = parse_todo_keyword(token)
            parsed.append(keyword)
            if key is not None:
                fast_keys.append((keyword, key))

        if not parsed:
            msg = "A todo sequence needs at least one keyword"
            raise ConfigurationError(msg)
        if split_at is None:
            split_at = len(parsed) - 1

        return cls(
            process_keywords=tuple(parsed[:split_at]),
            done_keywords=tuple(parsed[split_at:]),
            kind=_coerce_kind(kind),
            fast_keys=tuple(fast_keys),
        )

    @classmethod
    def from_string(
        cls,
        line: str,
        kind: TodoSequenceKind | str = TodoSequenceKind.STATE,
    ) -> "TodoSequence":
        return cls.from_keywords(line.split(), kind)

    @property
    def keywords(self) -> tuple[str, ...]:
        return self.process_keywords + self.done_keywords

    def fast_key(self, keyword: str) -> str | None:
        return dict(self.fast_keys).get(keyword)

    def render(self) -> str:
        def token(keyword: str) -> str:
            key = self.fast_key(keyword)
            return f"{keyword}({key})" if key else keyword

        parts = [token(k) for k in self.process_keywords]
        parts.append(DONE_SEPARATOR)
        parts.extend(token(k) for k in self.done_keywords)
        return " ".join(parts)


def _coerce_kind(kind: object) -> TodoSequenceKind:
    if isinstance(kind, TodoSequenceKind):
        return kind
    try:
        return TodoSequenceKind(str(kind).lower())
    except ValueError:
        raise TodoSequenceKindError(kind) from None


@dataclass(frozen=True)
class TodoSettings:
    """The todo sequences of a document. ``add`` returns a new value."""

    sequences: tuple[TodoSequence, ...] = ()

    @classmethod
    def default(cls) -> "TodoSettings":
        return cls().add(TodoSequence.from_keywords(DEFAULT_TODO_KEYWORDS))

    @classmethod
    def from_lines(cls, lines: Iterable[Sequence[str]]) -> "TodoSettings":
        settings = cls()
        for tokens in lines:
            settings = settings.add(TodoSequence.from_keywords(tokens))
        return settings

    def add(self, sequence: TodoSequence) -> "TodoSettings":
        """Return settings with ``sequence`` appended.

        Raises:
            TodoSequenceKindError: The sequence kind is not a known kind.
            TodoKeywordCollisionError: A keyword is already used.
            FastAccessKeyCollisionError: A fast-access key is already bound.
        """
        sequence = replace(sequence, kind=_coerce_kind(sequence.kind))

        known = set(self.keywords)
        seen: set[str] = set()
        for keyword in sequence.keywords:
            if keyword in known or keyword in seen:
                raise TodoKeywordCollisionError(keyword)
            seen.add(keyword)

        bound = dict(self.fast_keys)
        for keyword, key in sequence.fast_keys:
            if key in bound:
                raise FastAccessKeyCollisionError(key, keyword)
            bound[key] = keyword

        return TodoSettings((*self.sequences, sequence))

    @property
    def keywords(self) -> list[str]:
        return [k for seq in self.sequences for k in seq.keywords]

    @property
    def fast_keys(self) -> list[tuple[str, str]]:
        """``(key, keyword)`` pairs across all sequences."""
        return [(key, keyword) for seq in self.sequences for keyword, key in seq.fast_keys]

    def __contains__(self, keyword: object) -> bool:
        return keyword in self.keywords

    def is_todo(self, keyword: str) -> bool:
        return any(keyword in seq.process_keywords for seq in self.sequences)

    def is_done(self, keyword: str) -> bool:
        return any(keyword in seq.done_keywords for seq in self.sequences)

    def sequence_for(self, keyword: str) -> TodoSequence:
        for seq in self.sequences:
            if keyword in seq.keywords:
                return seq
        raise UnknownTodoKeywordError(keyword)

    def keyword_for_key(self, key: str) -> str | None:
        return dict(self.fast_keys).get(key)

    def next_keyword(self, keyword: str | None) -> str | None:
        """Cycle a heading's state: none -> first -> ... -> last -> none.

        With no keyword the cycle enters the first sequence.
        """
        if keyword is None:
            return self.sequences[0].keywords[0] if self.sequences else None
        keywords = self.sequence_for(keyword).keywords
        index = keywords.index(keyword)
        return keywords[index + 1] if index + 1 < len(keywords) else None


@dataclass(frozen=True)
class TagInheritance:
    """Which ancestor tags a node inherits.

    With ``include_all`` every tag not in ``exclude`` is inherited;
    otherwise only the tags in ``include``.
    """

    include_all: bool = True
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()


@dataclass
class BufferSettings:
    """Document-wide settings (``#+TITLE``, ``#+FILETAGS``, ``#+TODO``, ...)."""

    title: str = ""
    file_tags: list[str] = field(default_factory=list)
    properties: PropertyDrawer = field(default_factory=PropertyDrawer)
    priorities: PrioritySettings = DEFAULT_PRIORITY_SETTINGS
    todo: TodoSettings = field(default_factory=TodoSettings.default)
    tag_inheritance: TagInheritance = field(default_factory=TagInheritance)
    # True, False, or the keys whose values pass down the tree.
    property_inheritance: bool | tuple[str, ...] = DEFAULT_PROPERTY_INHERITANCE
    repeat_config: RepeatConfig = DEFAULT_REPEAT_CONFIG
    category: str = ""
    archive: str = ""


__all__ = [
    "DEFAULT_PRIORITY_SETTINGS",
    "BufferSettings",
    "PrioritySettings",
    "TagInheritance",
    "TodoSequence",
    "TodoSequenceKind",
    "TodoSettings",
    "parse_todo_keyword",
]
