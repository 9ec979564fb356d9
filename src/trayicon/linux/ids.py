"""Wire id assignment for menu trees.

Every node, separators included, receives an integer id from a single
pre-order counter. Id 0 is reserved for the synthetic root the host queries
first and is never given to a real node.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from ..menu import Checkable, Item, MenuNode, Separator, Submenu

ROOT_ID = 0

# wire id -> application event identifier
IdTable = Dict[int, Any]

_DONE = object()


class NodeKind(str, Enum):
    SEPARATOR = "separator"
    ITEM = "item"
    CHECKABLE = "checkable"
    SUBMENU = "submenu"


@dataclass(frozen=True)
class AnnotatedNode:
    """Shadow copy of a menu node carrying its wire id."""

    wire_id: int
    kind: NodeKind
    label: str = ""
    event_id: Any = None
    checked: bool = False
    disabled: bool = False
    children: Tuple["AnnotatedNode", ...] = field(default_factory=tuple)


class IdAssigner:
    """Hands out wire ids from a monotonically increasing counter.

    A single assigner shared across menu generations gives every generation a
    disjoint id range, so an activation aimed at a torn-down tree cannot
    resolve to a node of its replacement.
    """

    def __init__(self, first_id: int = 1) -> None:
        if first_id <= ROOT_ID:
            raise ValueError("Wire ids must start above the root id")
        self._next_id = first_id
        self._lock = threading.Lock()

    @property
    def next_id(self) -> int:
        return self._next_id

    def assign(
        self, items: Iterable[MenuNode]
    ) -> Tuple[Tuple[AnnotatedNode, ...], IdTable]:
        """Annotate ``items`` with wire ids.

        A container is numbered before its children and siblings keep their
        append order. The walk uses an explicit frame stack rather than
        recursion.

        Returns:
            The annotated top-level nodes and the id table of every node that
            carries an event identifier.
        """
        table: IdTable = {}
        top: List[AnnotatedNode] = []
        # frame: [source submenu, wire id, collected children, child iterator]
        frames: List[list] = [[None, ROOT_ID, top, iter(tuple(items))]]
        with self._lock:
            counter = self._next_id
            while frames:
                frame = frames[-1]
                child = next(frame[3], _DONE)
                if child is _DONE:
                    frames.pop()
                    if frame[0] is not None:
                        frames[-1][2].append(
                            _annotate(frame[0], frame[1], tuple(frame[2]))
                        )
                    continue
                wire_id = counter
                counter += 1
                if child.event_id is not None:
                    table[wire_id] = child.event_id
                if isinstance(child, Submenu):
                    frames.append([child, wire_id, [], iter(child.children)])
                else:
                    frame[2].append(_annotate(child, wire_id, ()))
            self._next_id = counter
        return tuple(top), table


def assign(items: Iterable[MenuNode]) -> Tuple[Tuple[AnnotatedNode, ...], IdTable]:
    """Annotate ``items`` with a fresh counter starting at 1."""
    return IdAssigner().assign(items)


def _annotate(
    node: MenuNode, wire_id: int, children: Tuple[AnnotatedNode, ...]
) -> AnnotatedNode:
    if isinstance(node, Separator):
        return AnnotatedNode(wire_id, NodeKind.SEPARATOR)
    if isinstance(node, Checkable):
        return AnnotatedNode(
            wire_id,
            NodeKind.CHECKABLE,
            node.label,
            node.event_id,
            checked=node.checked,
            disabled=node.disabled,
        )
    if isinstance(node, Item):
        return AnnotatedNode(
            wire_id, NodeKind.ITEM, node.label, node.event_id, disabled=node.disabled
        )
    return AnnotatedNode(
        wire_id,
        NodeKind.SUBMENU,
        node.label,
        node.event_id,
        disabled=node.disabled,
        children=children,
    )
