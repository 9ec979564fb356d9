"""Typed menu tree built by application code.

The tree is made of frozen node dataclasses accumulated in order by a
:class:`MenuBuilder`. Event identifiers are opaque application values that are
only ever compared for equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, Tuple, Union

from .errors import MenuItemNotFoundError

TreePath = Tuple[int, ...]


@dataclass(frozen=True)
class Separator:
    """Horizontal separator line; never carries an event identifier."""

    @property
    def event_id(self) -> None:
        return None


@dataclass(frozen=True)
class Item:
    """Plain clickable entry."""

    label: str
    event_id: Any
    disabled: bool = False


@dataclass(frozen=True)
class Checkable:
    """Entry with a check mark toggled by the application."""

    label: str
    event_id: Any
    checked: bool = False
    disabled: bool = False


@dataclass(frozen=True)
class Submenu:
    """Nested menu; ``event_id`` is optional and ``None`` when absent."""

    label: str
    children: Tuple["MenuNode", ...] = field(default_factory=tuple)
    disabled: bool = False
    event_id: Any = None


MenuNode = Union[Separator, Item, Checkable, Submenu]


def children_of(node: Any) -> Sequence[Any]:
    """Return the child sequence of a node, empty for leaves."""
    return getattr(node, "children", ())


def iter_nodes(roots: Sequence[Any]) -> Iterator[Any]:
    """Yield every node in depth-first pre-order."""
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children_of(node)))


def find_path(roots: Sequence[Any], predicate: Callable[[Any], bool]) -> Optional[TreePath]:
    """Locate the first depth-first node matching ``predicate``.

    An explicit stack is used so adversarially deep trees cannot exhaust the
    interpreter's recursion limit.

    Returns:
        The index path from the roots to the node, or ``None`` if no node
        matched.
    """
    stack: list[tuple[TreePath, Any]] = [
        ((index,), roots[index]) for index in range(len(roots) - 1, -1, -1)
    ]
    while stack:
        path, node = stack.pop()
        if predicate(node):
            return path
        children = children_of(node)
        for index in range(len(children) - 1, -1, -1):
            stack.append((path + (index,), children[index]))
    return None


def node_at(roots: Sequence[Any], path: TreePath) -> Any:
    """Return the node addressed by ``path``."""
    if not path:
        raise ValueError("Empty tree path")
    siblings = roots
    node = None
    for index in path:
        node = siblings[index]
        siblings = children_of(node)
    return node


def replace_at_path(
    roots: Sequence[Any], path: TreePath, update: Callable[[Any], Any]
) -> Tuple[Any, ...]:
    """Return new roots with the node at ``path`` replaced by ``update(node)``.

    Only the addressed node and its ancestors are copied; untouched subtrees
    are shared with the original roots.
    """
    if not path:
        raise ValueError("Empty tree path")
    levels: list[tuple[Tuple[Any, ...], int]] = []
    siblings = tuple(roots)
    for depth, index in enumerate(path):
        levels.append((siblings, index))
        if depth < len(path) - 1:
            siblings = tuple(children_of(siblings[index]))

    siblings, index = levels[-1]
    node = update(siblings[index])
    for level in range(len(levels) - 1, -1, -1):
        siblings, index = levels[level]
        rebuilt = siblings[:index] + (node,) + siblings[index + 1 :]
        if level == 0:
            return rebuilt
        parent_siblings, parent_index = levels[level - 1]
        node = replace(parent_siblings[parent_index], children=rebuilt)
    raise AssertionError("unreachable")


def match_event(event_id: Any) -> Callable[[Any], bool]:
    """Build a predicate matching nodes that carry ``event_id``."""

    def predicate(node: Any) -> bool:
        node_event = getattr(node, "event_id", None)
        return node_event is not None and node_event == event_id

    return predicate


class MenuBuilder:
    """Order-preserving accumulator for a menu tree.

    Every append returns the builder so calls can be chained::

        menu = (
            MenuBuilder()
            .item("Open", Events.OPEN)
            .separator()
            .checkable("Enabled", True, Events.TOGGLE)
        )
    """

    def __init__(self, items: Iterable[MenuNode] = ()) -> None:
        self._items: Tuple[MenuNode, ...] = tuple(items)

    @property
    def items(self) -> Tuple[MenuNode, ...]:
        """Return the top-level nodes in display order."""
        return self._items

    def __iter__(self) -> Iterator[MenuNode]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MenuBuilder):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"MenuBuilder({list(self._items)!r})"

    def copy(self) -> "MenuBuilder":
        """Return an independent builder with the same nodes."""
        return MenuBuilder(self._items)

    def when(self, fn: Callable[["MenuBuilder"], "MenuBuilder"]) -> "MenuBuilder":
        """Conditionally compose items: returns ``fn(self)``."""
        return fn(self)

    def with_item(self, node: MenuNode) -> "MenuBuilder":
        self._items = self._items + (node,)
        return self

    def separator(self) -> "MenuBuilder":
        return self.with_item(Separator())

    def item(self, label: str, event_id: Any, *, disabled: bool = False) -> "MenuBuilder":
        return self.with_item(Item(label, event_id, disabled))

    def checkable(
        self, label: str, checked: bool, event_id: Any, *, disabled: bool = False
    ) -> "MenuBuilder":
        return self.with_item(Checkable(label, event_id, checked, disabled))

    def submenu(
        self,
        label: str,
        menu: "MenuBuilder",
        *,
        disabled: bool = False,
        event_id: Any = None,
    ) -> "MenuBuilder":
        return self.with_item(Submenu(label, menu.items, disabled, event_id))

    def get_checkable(self, event_id: Any) -> Optional[bool]:
        """Return the checked state of the first node carrying ``event_id``.

        Returns ``None`` when nothing matches or the match is not checkable.
        """
        path = find_path(self._items, match_event(event_id))
        if path is None:
            return None
        node = node_at(self._items, path)
        if isinstance(node, Checkable):
            return node.checked
        return None

    def set_checkable(self, event_id: Any, checked: bool) -> None:
        """Set the checked state of the first node carrying ``event_id``."""

        def update(node: MenuNode) -> MenuNode:
            if not isinstance(node, Checkable):
                raise MenuItemNotFoundError(f"No checkable menu item for {event_id!r}")
            return replace(node, checked=checked)

        self._mutate(event_id, update)

    def set_disabled(self, event_id: Any, disabled: bool) -> None:
        """Set the disabled state of the first node carrying ``event_id``."""

        def update(node: MenuNode) -> MenuNode:
            if isinstance(node, Separator):
                raise MenuItemNotFoundError(f"No menu item for {event_id!r}")
            return replace(node, disabled=disabled)

        self._mutate(event_id, update)

    def _mutate(self, event_id: Any, update: Callable[[MenuNode], MenuNode]) -> None:
        path = find_path(self._items, match_event(event_id))
        if path is None:
            raise MenuItemNotFoundError(f"No menu item for {event_id!r}")
        self._items = replace_at_path(self._items, path, update)
