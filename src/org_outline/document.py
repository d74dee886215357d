"""The document: one outline tree plus its buffer settings."""

from collections.abc import Collection, Iterable, Mapping
from dataclasses import replace
from datetime import datetime

from loguru import logger

from org_outline.core.temporal import repeat
from org_outline.core.tree.outline import OutlineTree, TreePosition
from org_outline.core.tree.render import render_document
from org_outline.errors import (
    PriorityOutOfRangeError,
    StructuralError,
    UnknownTodoKeywordError,
)
from org_outline.models.heading import Heading
from org_outline.models.node import Node
from org_outline.models.planning import Planning
from org_outline.models.priority import UNSET, HeadingPriority, PriorityKind
from org_outline.models.property import Property, PropertyDrawer
from org_outline.models.timestamp import Timestamp
from org_outline.settings import BufferSettings


class Document:
    """An outline document.

    Headings are appended in document order with ``add_heading``; the tree
    nests them by level. Inheritance queries combine the tree with the
    buffer settings (file tags, document properties, inheritance toggles).
    """

    def __init__(self, settings: BufferSettings | None = None) -> None:
        self.settings = settings if settings is not None else BufferSettings()
        self.tree = OutlineTree()
        self.tree.root.node.attach(self)

    @property
    def title(self) -> str:
        return self.settings.title

    @property
    def root(self) -> Node:
        return self.tree.root.node

    def __len__(self) -> int:
        return len(self.tree)

    # --- Building ---

    def _resolve_priority(self, priority: HeadingPriority | str) -> HeadingPriority:
        if isinstance(priority, str):
            priority = HeadingPriority.parse(priority)
        settings = self.settings.priorities
        if priority.kind in (PriorityKind.HIGHEST, PriorityKind.LOWEST):
            return settings.resolve(priority)
        if not settings.contains(priority):
            raise PriorityOutOfRangeError(priority, settings.highest, settings.lowest)
        return priority

    def add_heading(
        self,
        level: int,
        text: str,
        *,
        priority: HeadingPriority | str = UNSET,
        tags: Iterable[str] = (),
        todo: str | None = None,
        is_comment: bool = False,
    ) -> Node:
        """Append a heading after the last node and return its new node.

        The node has no section, properties or planning yet; callers fill
        those in on the returned node.

        Raises:
            InvalidLevelError: ``level`` is below 1.
            UnknownTodoKeywordError: ``todo`` is not a keyword of this document.
            PriorityOutOfRangeError: ``priority`` lies outside the document range.
        """
        if todo is not None and todo not in self.settings.todo:
            raise UnknownTodoKeywordError(todo)

        heading = Heading(
            text=text,
            level=level,
            priority=self._resolve_priority(priority),
            todo=todo,
            is_comment=is_comment,
            tags=list(tags),
        )
        node = Node(heading=heading)
        self.insert_node(node)
        return node

    def insert_node(self, node: Node) -> TreePosition:
        """Append an already built heading node."""
        position = self.tree.insert_heading(node.level, node)
        node.attach(self)
        return position

    def position_of(self, node: Node) -> TreePosition:
        return self.tree.position_of(node)

    def splice(self, anchor: Node | None, subtree: "OutlineTree | Document") -> None:
        """Insert another tree's headings right after ``anchor`` (None: at the top)."""
        source = subtree.tree if isinstance(subtree, Document) else subtree
        incoming = source.nodes()
        position = self.tree.root if anchor is None else self.position_of(anchor)
        self.tree.splice_subtree(position, source)
        for node in incoming:
            node.attach(self)

    def refile(self, node: Node, anchor: Node | None, *, adjust_levels: bool = True) -> None:
        """Move ``node`` and its subtree to the end of ``anchor``'s subtree.

        ``anchor=None`` moves it to the end of the document. With
        ``adjust_levels`` the moved headings are re-leveled so that ``node``
        becomes the last child of ``anchor`` (a top-level heading for None).

        Raises:
            StructuralError: ``anchor`` is ``node`` or one of its descendants.
        """
        position = self.position_of(node)
        target = self.tree.root if anchor is None else self.position_of(anchor)
        if target is position or position in self.tree.ancestors(target):
            msg = "Cannot refile a subtree under itself"
            raise StructuralError(msg)

        detached = self.tree.detach(position)
        if adjust_levels:
            offset = self.tree.level_of(target) + 1 - node.level
            moved = detached.nodes()
            for each in moved:
                each.heading.level += offset  # type: ignore[union-attr]
            detached = _rebuild(moved)

        after = self.tree.flatten(target, include_self=True)[-1]
        logger.debug("Refiling position {} after position {}", position.id, after.id)
        self.tree.splice_subtree(after, detached)

    # --- Queries ---

    def nodes(self) -> list[Node]:
        return self.tree.nodes()

    def end_nodes(self, node: Node | None = None) -> list[Node]:
        position = None if node is None else self.position_of(node)
        return [p.node for p in self.tree.end_nodes(position)]

    def parent_of(self, node: Node) -> Node | None:
        parent = self.tree.parent(self.position_of(node))
        return parent.node if parent is not None else None

    def children_of(self, node: Node) -> list[Node]:
        return [p.node for p in self.tree.children(self.position_of(node))]

    def find_by_properties(self, wanted: Mapping[str, Collection[str]]) -> list[Node]:
        return self.tree.find_by_properties(wanted)

    def find_by_todo(self, *keywords: str) -> list[Node]:
        return [n for n in self.nodes() if n.heading is not None and n.heading.todo in keywords]

    def tags_for(self, node: Node, *, inherit: bool = True) -> list[str]:
        """All tags that apply to ``node``: file tags, inherited tags, own tags.

        Duplicates are dropped, keeping the first occurrence.
        """
        if not inherit:
            return list(dict.fromkeys(node.tags))

        position = self.position_of(node)
        options = self.settings.tag_inheritance
        inherited = self.tree.inherit_tags(
            position,
            include=options.include,
            exclude=options.exclude,
            include_all=options.include_all,
        )
        ordered = [t for n in self.tree.parent_nodes(position) for t in n.tags if t in inherited]
        return list(dict.fromkeys([*self.settings.file_tags, *ordered, *node.tags]))

    def properties_for(self, node: Node) -> PropertyDrawer:
        """Properties in effect for ``node``.

        Document properties, then ancestors from the top down, then the node
        itself; nearer values win. Only heritable properties are taken from
        above the node, and value restrictions always are.
        """
        inherit = self.settings.property_inheritance
        merged = self.settings.properties.heritable(inherit)
        for ancestor in self.tree.parent_nodes(self.position_of(node)):
            merged = ancestor.properties.heritable(inherit).merged_over(merged)
        return node.properties.merged_over(merged)

    def value_restriction_for(self, node: Node, key: str) -> Property | None:
        """The nearest restriction governing ``key``: own, ancestors, document."""
        if (found := node.properties.restriction_for(key)) is not None:
            return found
        for ancestor in reversed(self.tree.parent_nodes(self.position_of(node))):
            if (found := ancestor.properties.restriction_for(key)) is not None:
                return found
        return self.settings.properties.restriction_for(key)

    def validate_properties(self, node: Node) -> None:
        """Check the node's properties against their value restrictions.

        Raises:
            InvalidPropertyValueError: A property has a value its restriction
                does not allow.
        """
        for prop in node.properties:
            if prop.is_value_restriction:
                continue
            restriction = self.value_restriction_for(node, prop.key)
            if restriction is not None:
                restriction.validate(prop)

    def compare_priority(self, a: Node | HeadingPriority, b: Node | HeadingPriority) -> int:
        """-1 if ``a`` is more significant than ``b``, 1 if less, 0 if equal."""

        def priority(value: Node | HeadingPriority) -> HeadingPriority:
            if isinstance(value, HeadingPriority):
                return value
            return value.heading.priority if value.heading is not None else UNSET

        return self.settings.priorities.compare(priority(a), priority(b))

    def is_commented(self, node: Node) -> bool:
        """A node is commented out when it or any ancestor has COMMENT."""
        position = self.position_of(node)
        nodes = [node, *self.tree.parent_nodes(position)]
        return any(n.heading is not None and n.heading.is_comment for n in nodes)

    # --- Scheduling ---

    def advance_repeats(self, node: Node, reference: datetime | None = None) -> list[Planning]:
        """Shift every repeating planning timestamp of ``node`` once.

        The node's planning entries are replaced with the shifted values and
        the previous entries are returned.
        """
        previous = list(node.planning)
        shifted: list[Planning] = []
        for planning in previous:
            stamp = planning.timestamp
            if isinstance(stamp, Timestamp) and stamp.repeat is not None:
                stamp = repeat.shift(stamp, reference, config=self.settings.repeat_config)
                planning = replace(planning, timestamp=stamp)
            shifted.append(planning)
        node.planning = shifted
        return previous

    def render(self) -> str:
        return render_document(self)


def _rebuild(nodes: list[Node]) -> OutlineTree:
    tree = OutlineTree()
    for node in nodes:
        tree.insert_heading(node.level, node)
    return tree
