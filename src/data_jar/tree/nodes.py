"""Node dataclass, payload variants and the NodeKind StrEnum.

A jar is an ordered tuple of ``Node``.  Each node carries exactly one payload
variant, and the variant decides the node's kind, so a node can never hold,
say, a number kind with a child sequence.  Nodes and payloads are frozen:
every mutation builds a new tree (see ``data_jar.tree.mutator``).
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any, ClassVar

from data_jar.errors import InvalidEditError

__all__ = [
    "Boolean",
    "Container",
    "Dictionary",
    "Expression",
    "List",
    "Node",
    "NodeKind",
    "Number",
    "Payload",
    "Text",
    "format_number",
    "make_payload",
    "new_id",
]


class NodeKind(StrEnum):
    """The six node kinds.

    StrEnum values are the lowercased member names, which double as the
    ``type`` strings used by the persisted document and the trigger interface:
    "text", "number", "boolean", "dictionary", "list", "expression".
    """

    TEXT = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    DICTIONARY = auto()
    LIST = auto()
    EXPRESSION = auto()


CONTAINER_KINDS = frozenset({NodeKind.DICTIONARY, NodeKind.LIST})


def new_id() -> str:
    """Return a fresh node id, unique for the process lifetime and across merges."""
    return uuid.uuid4().hex


def format_number(value: float) -> str:
    """Render a float the way the jar displays and substitutes numbers.

    Integral values drop the fractional part ("100" rather than "100.0") and
    non-finite values use "Infinity", "-Infinity" and "NaN".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


@dataclass(frozen=True, slots=True)
class Text:
    value: str = ""

    kind: ClassVar[NodeKind] = NodeKind.TEXT


@dataclass(frozen=True, slots=True)
class Number:
    value: float = 0.0

    kind: ClassVar[NodeKind] = NodeKind.NUMBER

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True, slots=True)
class Boolean:
    value: bool = False

    kind: ClassVar[NodeKind] = NodeKind.BOOLEAN


@dataclass(frozen=True, slots=True)
class Expression:
    """A formula evaluated against the whole jar at display time."""

    formula: str = ""

    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION


@dataclass(frozen=True, slots=True)
class Dictionary:
    """Container whose children are addressed by unique name."""

    children: tuple[Node, ...] = ()

    kind: ClassVar[NodeKind] = NodeKind.DICTIONARY

    @classmethod
    def of(cls, nodes: Iterable[Node]) -> Dictionary:
        """Build a Dictionary, collapsing duplicate names (last write wins).

        The surviving node keeps the position of the first occurrence.
        """
        by_name: dict[str, Node] = {}
        for node in nodes:
            by_name[node.name] = node
        return cls(children=tuple(by_name.values()))


@dataclass(frozen=True, slots=True)
class List:
    """Container whose children are addressed by position.

    Child names are the decimal creation index and are purely cosmetic: they
    are never renumbered after a delete.
    """

    children: tuple[Node, ...] = ()

    kind: ClassVar[NodeKind] = NodeKind.LIST

    @classmethod
    def of(cls, nodes: Iterable[Node]) -> List:
        return cls(children=tuple(nodes))


Payload = Text | Number | Boolean | Dictionary | List | Expression
Container = Dictionary | List


@dataclass(frozen=True, slots=True)
class Node:
    """A single element of the jar.

    Attributes:
        name:    Key under a Dictionary parent; stringified creation index under
                 a List parent; ignored for the meaning of the root sequence.
        payload: The kind-specific data (see ``Payload``).
        id:      Opaque identity used only for structural targeting
                 (update/delete by id, navigation scope), never for paths.
                 Excluded from equality so ``==`` compares structure.
    """

    name: str
    payload: Payload
    id: str = field(default_factory=new_id, compare=False)

    @property
    def kind(self) -> NodeKind:
        return self.payload.kind

    @property
    def is_container(self) -> bool:
        return isinstance(self.payload, (Dictionary, List))


def make_payload(kind: NodeKind | str, value: Any = None) -> Payload:
    """Coerce a raw value into the payload variant for ``kind``.

    Container kinds accept a sequence of ``Node`` (or nothing, for an empty
    container).  Boolean accepts a bool or the exact string "true".

    Raises:
        InvalidEditError: If ``value`` cannot be represented as ``kind``.
    """
    try:
        kind = NodeKind(kind)
    except ValueError:
        raise InvalidEditError(f"Unknown node kind: {kind!r}") from None

    if kind in CONTAINER_KINDS:
        children = _as_children(value)
        if kind is NodeKind.DICTIONARY:
            return Dictionary.of(children)
        return List.of(children)

    if kind is NodeKind.NUMBER:
        if isinstance(value, bool):
            return Number(1.0 if value else 0.0)
        try:
            return Number(float(value if value is not None else 0.0))
        except (TypeError, ValueError, OverflowError):
            raise InvalidEditError(f"Not a number: {value!r}") from None

    if kind is NodeKind.BOOLEAN:
        if isinstance(value, str):
            return Boolean(value == "true")
        return Boolean(bool(value))

    text = "" if value is None else str(value)
    if kind is NodeKind.EXPRESSION:
        return Expression(text)
    return Text(text)


def _as_children(value: Any) -> tuple[Node, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, Sequence) and not isinstance(value, str):
        if all(isinstance(item, Node) for item in value):
            return tuple(value)
    raise InvalidEditError(f"Container value must be a sequence of nodes: {value!r}")
