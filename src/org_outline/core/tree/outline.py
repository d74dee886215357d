"""Outline tree: a depth-keyed hierarchy of nodes built from a heading stream.

Heading level is the only structural signal. A heading becomes the child of
the nearest preceding heading with a lower level, exactly as in flat outline
text. Positions live in an arena keyed by integer id; a position owns its
children and refers to its parent by id only.
"""

from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass, field

from loguru import logger

from org_outline.errors import (
    InconsistentTreeError,
    InvalidLevelError,
    PositionNotFoundError,
    StructuralError,
    UnknownInsertError,
)
from org_outline.models.node import Node

ROOT_ID = 0


@dataclass(eq=False)
class TreePosition:
    """A node's place in the tree."""

    id: int
    node: Node
    parent_id: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class OutlineTree:
    """Arena of tree positions rooted at a synthetic level-0 node."""

    def __init__(self, root: Node | None = None) -> None:
        self._positions: dict[int, TreePosition] = {}
        self._next_id = ROOT_ID
        root_node = root if root is not None else Node()
        if root_node.heading is not None:
            msg = "The root node of an outline tree cannot have a heading"
            raise StructuralError(msg)
        self.root = self._new_position(root_node, parent_id=None)

    # --- Lookup ---

    def __len__(self) -> int:
        """Number of heading positions (the root is not counted)."""
        return len(self._positions) - 1

    def __iter__(self) -> Iterator[TreePosition]:
        return iter(self.flatten())

    def __contains__(self, position: object) -> bool:
        return (
            isinstance(position, TreePosition)
            and self._positions.get(position.id) is position
        )

    def position(self, position_id: int) -> TreePosition:
        try:
            return self._positions[position_id]
        except KeyError:
            raise PositionNotFoundError(position_id) from None

    def position_of(self, node: Node) -> TreePosition:
        if node.position_id is None:
            msg = "Node is not placed in any tree"
            raise StructuralError(msg)
        position = self.position(node.position_id)
        if position.node is not node:
            raise PositionNotFoundError(node.position_id)
        return position

    def _require(self, position: TreePosition) -> TreePosition:
        if position not in self:
            raise PositionNotFoundError(position.id)
        return position

    def parent(self, position: TreePosition) -> TreePosition | None:
        if position.parent_id is None:
            return None
        return self._positions[position.parent_id]

    def children(self, position: TreePosition) -> list[TreePosition]:
        return [self._positions[cid] for cid in position.children]

    def level_of(self, position: TreePosition) -> int:
        if position.parent_id is None:
            return 0
        heading = position.node.heading
        if heading is None:
            msg = f"Position {position.id} below the root has no heading"
            raise InconsistentTreeError(msg)
        return heading.level

    def ancestors(self, position: TreePosition) -> list[TreePosition]:
        """Ancestors from the parent up to and including the root."""
        out: list[TreePosition] = []
        current = self.parent(position)
        while current is not None:
            out.append(current)
            current = self.parent(current)
        return out

    def parent_nodes(self, position: TreePosition) -> list[Node]:
        """Nodes of the heading ancestors, outermost first."""
        return [p.node for p in reversed(self.ancestors(position)) if not p.is_root]

    def flatten(
        self,
        position: TreePosition | None = None,
        *,
        include_self: bool = False,
    ) -> list[TreePosition]:
        """Positions below ``position`` (default: the root) in pre-order."""
        start = self.root if position is None else self._require(position)
        out: list[TreePosition] = []
        stack = [start] if include_self else [self._positions[c] for c in reversed(start.children)]
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(self._positions[c] for c in reversed(current.children))
        return out

    def nodes(self) -> list[Node]:
        return [p.node for p in self.flatten()]

    def end_nodes(self, position: TreePosition | None = None) -> list[TreePosition]:
        """Leaf positions below ``position``; a childless position is its own leaf."""
        start = self.root if position is None else self._require(position)
        leaves = [p for p in self.flatten(start) if not p.children]
        return leaves or [start]

    def walk_back_to_level(self, position: TreePosition, target: int) -> TreePosition | None:
        """Climb from ``position`` (inclusive) to the first level <= ``target``."""
        current: TreePosition | None = position
        while current is not None:
            if self.level_of(current) <= target:
                return current
            current = self.parent(current)
        return None

    # --- Construction ---

    def _new_position(self, node: Node, *, parent_id: int | None) -> TreePosition:
        position = TreePosition(id=self._next_id, node=node, parent_id=parent_id)
        self._next_id += 1
        self._positions[position.id] = position
        node.position_id = position.id
        return position

    def _last_leaf(self) -> TreePosition:
        current = self.root
        while current.children:
            current = self._positions[current.children[-1]]
        return current

    def _placement_parent(self, level: int) -> TreePosition:
        leaf = self._last_leaf()
        if self.level_of(leaf) < level:
            return leaf
        parent = self.walk_back_to_level(leaf, level - 1)
        if parent is None:
            raise UnknownInsertError(level)
        return parent

    @staticmethod
    def _check_level(level: int, node: Node) -> None:
        if level < 1:
            raise InvalidLevelError(level)
        if node.heading is None:
            raise InvalidLevelError(level, "a heading node is required")
        if node.heading.level != level:
            raise InvalidLevelError(
                level, f"the node's heading is at level {node.heading.level}"
            )

    def insert_heading(self, level: int, node: Node) -> TreePosition:
        """Append a heading node after the last node in document order.

        The node becomes a child of the last leaf when that leaf has a lower
        level, otherwise of the nearest ancestor whose level is below
        ``level``. Gaps in levels are allowed.

        Raises:
            InvalidLevelError: ``level`` is below 1 or disagrees with the node.
            UnknownInsertError: No ancestor can take the node.
        """
        self._check_level(level, node)
        parent = self._placement_parent(level)
        position = self._new_position(node, parent_id=parent.id)
        parent.children.append(position.id)
        return position

    def _replace_after(self, anchor: TreePosition, incoming: list[Node]) -> list[TreePosition]:
        """Insert ``incoming`` after ``anchor`` and replay everything following it."""
        sequence = self.flatten()
        index = -1 if anchor.is_root else sequence.index(anchor)
        tail = sequence[index + 1 :]
        tail_ids = {p.id for p in tail}

        for position in (self.root, *sequence[: index + 1]):
            position.children = [c for c in position.children if c not in tail_ids]
        for position in tail:
            position.children = []

        placed: list[TreePosition] = []
        for node in incoming:
            parent = self._placement_parent(node.level)
            position = self._new_position(node, parent_id=parent.id)
            parent.children.append(position.id)
            placed.append(position)

        for position in tail:
            parent = self._placement_parent(self.level_of(position))
            position.parent_id = parent.id
            parent.children.append(position.id)

        return placed

    def splice_subtree(self, anchor: TreePosition, subtree: "OutlineTree") -> "OutlineTree":
        """Insert ``subtree`` immediately after ``anchor`` and re-nest what follows.

        The subtree's headings are placed right after the anchor in document
        order. Every position that followed the anchor is then re-placed by
        level, as if the headings had been typed into flat text: following
        headings deeper than a spliced heading end up inside it, shallower
        ones climb out. Existing positions keep their ids. The spliced tree
        is emptied, since its nodes now belong here.

        Returns:
            This tree, modified in place.
        """
        self._require(anchor)
        incoming = subtree.nodes()
        for node in incoming:
            self._check_level(node.level, node)

        placed = self._replace_after(anchor, incoming)
        subtree._clear()
        logger.debug("Spliced {} node(s) after position {}", len(placed), anchor.id)
        return self

    def detach(self, position: TreePosition) -> "OutlineTree":
        """Remove ``position`` and its descendants, returning them as a new tree."""
        self._require(position)
        if position.is_root:
            msg = "The root position cannot be detached"
            raise StructuralError(msg)

        moved = self.flatten(position, include_self=True)
        parent = self._positions[position.parent_id]  # type: ignore[index]
        parent.children.remove(position.id)
        for p in moved:
            del self._positions[p.id]

        detached = OutlineTree()
        for p in moved:
            detached.insert_heading(self.level_of(p), p.node)
        logger.debug("Detached {} node(s) from position {}", len(moved), parent.id)
        return detached

    def _clear(self) -> None:
        self._positions = {self.root.id: self.root}
        self.root.children = []

    # --- Queries ---

    def inherit_tags(
        self,
        position: TreePosition,
        include: Collection[str] = (),
        exclude: Collection[str] = (),
        include_all: bool = False,
    ) -> set[str]:
        """Collect tags this position inherits from its ancestors.

        Ancestors are visited outermost first. With ``include_all`` every tag
        not in ``exclude`` is inherited; otherwise only tags in ``include``.
        The position's own tags are not part of the result.
        """
        if not include and not include_all:
            return set()

        include_set, exclude_set = set(include), set(exclude)
        inherited: set[str] = set()
        for node in self.parent_nodes(self._require(position)):
            for tag in node.tags:
                if include_all and tag in exclude_set:
                    continue
                if not include_all and tag not in include_set:
                    continue
                inherited.add(tag)
        return inherited

    def find_by_properties(self, wanted: Mapping[str, Collection[str]]) -> list[Node]:
        """Nodes (pre-order) owning a property whose value is listed for its key."""
        found: list[Node] = []
        for position in self.flatten(include_self=True):
            node = position.node
            if any(
                prop.key in wanted and prop.value in wanted[prop.key]
                for prop in node.properties
            ):
                found.append(node)
        return found
