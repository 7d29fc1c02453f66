"""Dotted-path addressing over a jar.

A path is a ``.``-separated sequence of ``[A-Za-z0-9_]+`` segments, e.g.
``config.theme`` or ``users.0.name``.  Each segment matches a child by name
first and, failing that, by zero-based position.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from data_jar.errors import InvalidPathError
from data_jar.tree.nodes import Dictionary, List, Node

__all__ = ["children_of", "find_child", "resolve", "scope_for_path", "split_path"]

_SEGMENT = re.compile(r"[A-Za-z0-9_]+")
_INDEX = re.compile(r"\d+")


def split_path(path: str) -> list[str]:
    """Tokenize a dotted path into segments.

    Raises:
        InvalidPathError: If any segment is empty or contains characters
            outside ``[A-Za-z0-9_]``.
    """
    segments = path.split(".")
    for segment in segments:
        if not _SEGMENT.fullmatch(segment):
            msg = f"Invalid path {path!r}: bad segment {segment!r}"
            raise InvalidPathError(msg)
    return segments


def children_of(node: Node) -> tuple[Node, ...] | None:
    """Return a container's children, or None for a leaf."""
    if isinstance(node.payload, (Dictionary, List)):
        return node.payload.children
    return None


def find_child(
    nodes: Sequence[Node], segment: str, *, positional: bool = True
) -> Node | None:
    """Find the child addressed by ``segment`` in one ordered sequence.

    Name matches win.  With ``positional`` set, an all-digit segment that
    matches no name is used as an index into ``nodes``.
    """
    for node in nodes:
        if node.name == segment:
            return node
    if positional and _INDEX.fullmatch(segment):
        index = int(segment)
        if index < len(nodes):
            return nodes[index]
    return None


def resolve(root: Sequence[Node], path: str) -> Node | None:
    """Look up ``path`` starting from ``root``.

    Returns the matched Node itself (not its payload), or None on any miss:
    an unknown segment, an invalid path, or a non-final segment that lands on
    a leaf.  A miss is not an error; callers decide whether it is fatal.
    """
    try:
        segments = split_path(path)
    except InvalidPathError:
        return None

    current: Sequence[Node] = root
    found: Node | None = None
    for depth, segment in enumerate(segments):
        found = find_child(current, segment)
        if found is None:
            return None
        if depth < len(segments) - 1:
            children = children_of(found)
            if children is None:
                return None
            current = children
    return found


def scope_for_path(root: Sequence[Node], path: str) -> tuple[str, ...] | None:
    """Translate a dotted path naming a container into a navigation scope.

    The scope is the tuple of container ids from the root down to and
    including the addressed container.  An empty path is the root scope.
    Returns None if the path misses or ends on a leaf.
    """
    if not path:
        return ()
    try:
        segments = split_path(path)
    except InvalidPathError:
        return None

    scope: list[str] = []
    current: Sequence[Node] = root
    for segment in segments:
        found = find_child(current, segment)
        if found is None:
            return None
        children = children_of(found)
        if children is None:
            return None
        scope.append(found.id)
        current = children
    return tuple(scope)
