"""Path- and id-addressed mutations over a jar.

Every function here takes the current root tuple and returns a complete
replacement; the input tree is never modified.  Untouched subtrees are shared
between the old and new tree, which is safe because nodes are frozen.

``scope`` arguments are navigation breadcrumbs: the ids of the containers
from the root down to the one being edited.  A scope that does not lead to a
container reads as empty and makes writes a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from data_jar.errors import InvalidEditError
from data_jar.result import SetOutcome
from data_jar.tree.nodes import (
    Dictionary,
    List,
    Node,
    NodeKind,
    Payload,
    make_payload,
)
from data_jar.tree.path import children_of, split_path

__all__ = [
    "add_node",
    "deep_set",
    "deep_set_with_outcome",
    "delete",
    "scope_nodes",
    "scope_parent",
    "update_value",
]

logger = logging.getLogger(__name__)

Root = tuple[Node, ...]


# ---------------------------------------------------------------------------
# Deep-set
# ---------------------------------------------------------------------------


def deep_set(
    root: Sequence[Node], path: str, value: Any, kind: NodeKind | str = NodeKind.TEXT
) -> Root:
    """Upsert ``value`` as ``kind`` at ``path``, creating missing Dictionaries.

    Segments match by name only.  If an intermediate segment names a leaf the
    tree is returned unchanged.  Applying the same call twice gives a tree
    equal to applying it once.

    Raises:
        InvalidPathError: If ``path`` has an empty or invalid segment.
        InvalidEditError: If ``value`` cannot be coerced to ``kind``.
    """
    new_root, _ = deep_set_with_outcome(root, path, value, kind)
    return new_root


def deep_set_with_outcome(
    root: Sequence[Node], path: str, value: Any, kind: NodeKind | str = NodeKind.TEXT
) -> tuple[Root, SetOutcome]:
    """Like ``deep_set`` but also report what happened (see ``SetOutcome``)."""
    segments = split_path(path)
    payload = make_payload(kind, value)
    new_root, outcome = _set_in(tuple(root), segments, payload)
    if outcome is SetOutcome.BLOCKED:
        logger.debug("deep_set blocked by a leaf along %r", path)
    return new_root, outcome


def _set_in(
    nodes: Root, segments: list[str], payload: Payload
) -> tuple[Root, SetOutcome]:
    key, rest = segments[0], segments[1:]
    index = next((i for i, node in enumerate(nodes) if node.name == key), None)

    if index is None:
        if not rest:
            return (*nodes, Node(name=key, payload=payload)), SetOutcome.CREATED
        children, outcome = _set_in((), rest, payload)
        intermediate = Node(name=key, payload=Dictionary(children))
        return (*nodes, intermediate), outcome

    node = nodes[index]
    if not rest:
        if node.payload == payload:
            return nodes, SetOutcome.UNCHANGED
        updated = replace(node, payload=payload)
        outcome = SetOutcome.UPDATED
    else:
        children = children_of(node)
        if children is None:
            return nodes, SetOutcome.BLOCKED
        new_children, outcome = _set_in(children, rest, payload)
        if not outcome.changed:
            return nodes, outcome
        updated = replace(node, payload=replace(node.payload, children=new_children))

    return (*nodes[:index], updated, *nodes[index + 1 :]), outcome


# ---------------------------------------------------------------------------
# Scoped edits
# ---------------------------------------------------------------------------


def scope_parent(root: Sequence[Node], scope: Sequence[str]) -> Node | None:
    """Return the container addressed by ``scope``; None for the root or a miss."""
    parent: Node | None = None
    current: Sequence[Node] = root
    for step in scope:
        parent = next((n for n in current if n.id == step), None)
        if parent is None:
            return None
        children = children_of(parent)
        if children is None:
            return None
        current = children
    return parent


def scope_nodes(root: Sequence[Node], scope: Sequence[str]) -> Root:
    """Return the ordered children visible at ``scope``."""
    if not scope:
        return tuple(root)
    parent = scope_parent(root, scope)
    if parent is None:
        return ()
    return children_of(parent) or ()


def _update_scope(
    nodes: Root, scope: Sequence[str], update: Callable[[Root], Root]
) -> Root:
    if not scope:
        return update(nodes)
    step, rest = scope[0], scope[1:]
    result = []
    for node in nodes:
        children = children_of(node)
        if node.id == step and children is not None:
            new_children = _update_scope(children, rest, update)
            node = replace(node, payload=replace(node.payload, children=new_children))
        result.append(node)
    return tuple(result)


def add_node(
    root: Sequence[Node],
    name: str,
    kind: NodeKind | str,
    value: Any = None,
    scope: Sequence[str] = (),
) -> Root:
    """Append a new node with a fresh id to the container at ``scope``.

    Under a List parent the name is the current child count and ``name`` is
    ignored.  Under a Dictionary (or the root) an existing child with the same
    name is replaced in place.

    Raises:
        InvalidEditError: If a Dictionary child has a blank name or ``value``
            cannot be coerced to ``kind``.
    """
    parent = scope_parent(root, scope)
    in_list = parent is not None and isinstance(parent.payload, List)
    if in_list:
        name = str(len(scope_nodes(root, scope)))
    elif not name.strip():
        raise InvalidEditError("A name is required outside of a list")

    new_node = Node(name=name, payload=make_payload(kind, value))

    def append(nodes: Root) -> Root:
        if not in_list:
            for i, node in enumerate(nodes):
                if node.name == name:
                    return (*nodes[:i], new_node, *nodes[i + 1 :])
        return (*nodes, new_node)

    return _update_scope(tuple(root), scope, append)


def update_value(
    root: Sequence[Node], node_id: str, new_value: Any, scope: Sequence[str] = ()
) -> Root:
    """Replace the payload of the node ``node_id`` at ``scope``, keeping its kind.

    No-op if the id is absent.

    Raises:
        InvalidEditError: If the node is a container, or ``new_value`` cannot
            be coerced to the node's kind.
    """

    def edit(nodes: Root) -> Root:
        result = []
        for node in nodes:
            if node.id == node_id:
                if node.is_container:
                    msg = f"Cannot edit the value of {node.kind} {node.name!r}"
                    raise InvalidEditError(msg)
                node = replace(node, payload=make_payload(node.kind, new_value))
            result.append(node)
        return tuple(result)

    return _update_scope(tuple(root), scope, edit)


def delete(root: Sequence[Node], node_id: str, scope: Sequence[str] = ()) -> Root:
    """Remove the node ``node_id`` at ``scope``; siblings keep order and names."""
    return _update_scope(
        tuple(root), scope, lambda nodes: tuple(n for n in nodes if n.id != node_id)
    )
