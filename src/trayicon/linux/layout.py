"""Serving an annotated menu tree through the ``com.canonical.dbusmenu`` layout.

The adapter keeps one immutable :class:`MenuSnapshot` per revision. Queries
take the current snapshot under the lock and serialize it after releasing the
lock, so a response is always built from a single tree generation. Writers
never modify a published snapshot; they build a new one and swap it in.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from dbus_fast import Variant

from ..errors import LayoutNotFoundError, MenuItemNotFoundError
from ..menu import find_path, match_event, replace_at_path
from .ids import ROOT_ID, AnnotatedNode, IdTable, NodeKind

LOGGER = logging.getLogger("trayicon.dbusmenu")

LAYOUT_SIGNATURE = "(ia{sv}av)"
UINT32_MAX = 0xFFFFFFFF

PROPERTY_SIGNATURES: Dict[str, str] = {
    "type": "s",
    "label": "s",
    "enabled": "b",
    "toggle-type": "s",
    "toggle-state": "i",
    "children-display": "s",
}


@dataclass(frozen=True)
class MenuSnapshot:
    """One generation of the served tree plus its lookup tables."""

    revision: int
    root: AnnotatedNode
    table: IdTable
    index: Dict[int, AnnotatedNode]
    parents: Dict[int, int]

    @classmethod
    def build(
        cls, revision: int, roots: Sequence[AnnotatedNode], table: IdTable
    ) -> "MenuSnapshot":
        root = AnnotatedNode(ROOT_ID, NodeKind.SUBMENU, children=tuple(roots))
        index: Dict[int, AnnotatedNode] = {}
        parents: Dict[int, int] = {}
        stack = [root]
        while stack:
            node = stack.pop()
            index[node.wire_id] = node
            for child in node.children:
                parents[child.wire_id] = node.wire_id
                stack.append(child)
        return cls(revision, root, dict(table), index, parents)

    @property
    def roots(self) -> Tuple[AnnotatedNode, ...]:
        return self.root.children

    def node(self, wire_id: int) -> AnnotatedNode:
        try:
            return self.index[wire_id]
        except KeyError:
            raise LayoutNotFoundError(f"Menu id {wire_id} not found") from None

    def children_of(self, parent_id: int) -> Tuple[AnnotatedNode, ...]:
        return self.node(parent_id).children


def node_properties(node: AnnotatedNode, names: Iterable[str] = ()) -> Dict[str, Any]:
    """Return the plain property bag of a node.

    ``names`` restricts the result to the requested properties; an empty
    selection means every property.
    """
    props: Dict[str, Any] = {}
    if node.wire_id == ROOT_ID:
        if node.children:
            props["children-display"] = "submenu"
    elif node.kind is NodeKind.SEPARATOR:
        props["type"] = "separator"
    else:
        props["label"] = node.label
        # Hosts do not assume a default, so enabled is always sent.
        props["enabled"] = not node.disabled
        if node.kind is NodeKind.CHECKABLE:
            props["toggle-type"] = "checkbox"
            props["toggle-state"] = 1 if node.checked else 0
        if node.children:
            props["children-display"] = "submenu"
    wanted = set(names)
    if wanted:
        props = {key: value for key, value in props.items() if key in wanted}
    return props


def to_variants(props: Dict[str, Any]) -> Dict[str, Variant]:
    return {key: Variant(PROPERTY_SIGNATURES[key], value) for key, value in props.items()}


def serialize_layout(
    node: AnnotatedNode, recursion_depth: int = -1, names: Iterable[str] = ()
) -> list:
    """Serialize ``node`` to the ``(ia{sv}av)`` layout structure.

    Args:
        node: Subtree root.
        recursion_depth: -1 for the whole subtree, 0 for the node alone, n to
            include n levels of children.
        names: Property names to include; empty means all.
    """
    names = tuple(names)
    # frame: [node, remaining depth, collected child variants, child iterator]
    frames: List[list] = [[node, recursion_depth, [], iter(node.children)]]
    result: list = []
    while frames:
        frame = frames[-1]
        current, depth, collected, children = frame
        child = next(children, None) if depth != 0 else None
        if child is not None:
            frames.append([child, depth - 1 if depth > 0 else -1, [], iter(child.children)])
            continue
        frames.pop()
        entry = [current.wire_id, to_variants(node_properties(current, names)), collected]
        if frames:
            frames[-1][2].append(Variant(LAYOUT_SIGNATURE, entry))
        else:
            result = entry
    return result


class MenuProtocolAdapter:
    """Lock-protected holder of the served menu snapshot."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = MenuSnapshot.build(0, (), {})

    @property
    def snapshot(self) -> MenuSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def revision(self) -> int:
        return self.snapshot.revision

    def replace(self, roots: Sequence[AnnotatedNode], table: IdTable) -> int:
        """Swap in a whole new tree and return its revision."""
        with self._lock:
            revision = _next_revision(self._snapshot.revision)
            self._snapshot = MenuSnapshot.build(revision, roots, table)
        LOGGER.debug("Menu replaced (revision=%d, nodes=%d)", revision, len(table))
        return revision

    def children_of(self, parent_id: int) -> Tuple[AnnotatedNode, ...]:
        """Return the children of ``parent_id`` (0 is the root)."""
        return self.snapshot.children_of(parent_id)

    def get_layout(
        self,
        parent_id: int,
        recursion_depth: int = -1,
        property_names: Iterable[str] = (),
    ) -> Tuple[int, list]:
        """Answer a ``GetLayout`` query.

        Raises:
            LayoutNotFoundError: If ``parent_id`` is not in the current tree.
        """
        snapshot = self.snapshot
        node = snapshot.node(parent_id)
        return snapshot.revision, serialize_layout(node, recursion_depth, property_names)

    def group_properties(
        self, ids: Iterable[int], property_names: Iterable[str] = ()
    ) -> List[list]:
        """Answer ``GetGroupProperties``; unknown ids are skipped."""
        snapshot = self.snapshot
        names = tuple(property_names)
        wanted = list(ids) or [
            wire_id for wire_id in sorted(snapshot.index) if wire_id != ROOT_ID
        ]
        result = []
        for wire_id in wanted:
            node = snapshot.index.get(wire_id)
            if node is None:
                continue
            result.append([wire_id, to_variants(node_properties(node, names))])
        return result

    def property_of(self, wire_id: int, name: str) -> Variant:
        """Answer ``GetProperty``.

        Raises:
            LayoutNotFoundError: If the node or the property does not exist.
        """
        props = node_properties(self.snapshot.node(wire_id))
        if name not in props:
            raise LayoutNotFoundError(f"Property {name!r} for id {wire_id} not found")
        return Variant(PROPERTY_SIGNATURES[name], props[name])

    def resolve(self, wire_id: int) -> Optional[Any]:
        """Map a wire id to its event identifier, ``None`` if unknown."""
        return self.snapshot.table.get(wire_id)

    def contains(self, wire_id: int) -> bool:
        return wire_id in self.snapshot.index

    def set_checked(self, event_id: Any, checked: bool) -> Tuple[int, AnnotatedNode, int]:
        def update(node: AnnotatedNode) -> AnnotatedNode:
            if node.kind is not NodeKind.CHECKABLE:
                raise MenuItemNotFoundError(f"No checkable menu item for {event_id!r}")
            return replace(node, checked=checked)

        return self.mutate(event_id, update)

    def set_disabled(self, event_id: Any, disabled: bool) -> Tuple[int, AnnotatedNode, int]:
        return self.mutate(event_id, lambda node: replace(node, disabled=disabled))

    def mutate(
        self, event_id: Any, update: Callable[[AnnotatedNode], AnnotatedNode]
    ) -> Tuple[int, AnnotatedNode, int]:
        """Apply ``update`` to the first node carrying ``event_id``.

        Returns:
            The new revision, the updated node and the id of its parent.

        Raises:
            MenuItemNotFoundError: If nothing matches; the tree is unchanged.
        """
        with self._lock:
            current = self._snapshot
            path = find_path(current.roots, match_event(event_id))
            if path is None:
                raise MenuItemNotFoundError(f"No menu item for {event_id!r}")
            roots = replace_at_path(current.roots, path, update)
            revision = _next_revision(current.revision)
            self._snapshot = MenuSnapshot.build(revision, roots, current.table)
            snapshot = self._snapshot
        wire_id = _wire_id_at(current, path)
        return revision, snapshot.index[wire_id], snapshot.parents[wire_id]


def _wire_id_at(snapshot: MenuSnapshot, path: Tuple[int, ...]) -> int:
    node = snapshot.root
    for index in path:
        node = node.children[index]
    return node.wire_id


def _next_revision(revision: int) -> int:
    return 1 if revision >= UINT32_MAX else revision + 1
