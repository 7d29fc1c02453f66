"""JSON codec: maps a jar to plain JSON values and back.

The mapping is lossy:

- Export drops node ids and List child names (array order is the only
  positional information kept) and writes Expression leaves as their raw
  formula text, not the computed value.  NaN and infinities export as
  null, so the output is always standard JSON.
- Import infers each node's kind from the JSON value's runtime type.  An
  object or array nested directly inside an array element is always tagged
  Dictionary, so arrays of arrays come back as index-keyed objects.

Every imported node receives a fresh id.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from data_jar.errors import ImportFormatError
from data_jar.tree.nodes import (
    Boolean,
    Dictionary,
    Expression,
    List,
    Node,
    Number,
    Payload,
    Text,
)

__all__ = ["JsonImporter", "dumps", "export_tree", "export_value", "import_tree", "loads"]

logger = logging.getLogger(__name__)

# Type alias for plain JSON values
JsonValue = dict[str, Any] | list[Any] | str | int | float | bool | None


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_tree(root: Sequence[Node]) -> dict[str, JsonValue]:
    """Export a jar (or any Dictionary's children) as a JSON object."""
    return {node.name: export_value(node.payload) for node in root}


def export_value(payload: Payload) -> JsonValue:
    """Export one payload; containers recurse."""
    if isinstance(payload, Dictionary):
        return export_tree(payload.children)
    if isinstance(payload, List):
        return [export_value(child.payload) for child in payload.children]
    if isinstance(payload, Number):
        value = payload.value
        if not math.isfinite(value):
            return None
        # 100.0 exports as 100
        if value.is_integer():
            return int(value)
        return value
    if isinstance(payload, Expression):
        return payload.formula
    return payload.value


def dumps(root: Sequence[Node], indent: int | None = 2) -> str:
    """Export a jar to JSON text."""
    return json.dumps(
        export_tree(root), indent=indent, ensure_ascii=False, allow_nan=False
    )


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


@dataclass
class JsonImporter:
    """Converts a top-level JSON object into a jar.

    The dispatch order matters: bool MUST be checked before int because bool
    is a subclass of int in Python (isinstance(True, int) is True).

    Example::
        importer = JsonImporter()
        jar = importer.build({"config": {"theme": "dark"}, "tags": ["a", "b"]})
        # jar: (Node("config", Dictionary(...)), Node("tags", List(...)))
    """

    def build(self, document: Any) -> tuple[Node, ...]:
        """Convert a JSON object into a jar.

        Raises:
            ImportFormatError: If ``document`` is not a JSON object, or holds a
                value with no JSON counterpart.
        """
        if not isinstance(document, Mapping):
            msg = f"Top-level JSON value must be an object, got {type(document).__name__}"
            raise ImportFormatError(msg)
        return tuple(self._build_member(str(key), val) for key, val in document.items())

    def _build_member(self, name: str, value: Any) -> Node:
        if isinstance(value, Mapping):
            return Node(name=name, payload=Dictionary(self.build(value)))
        if isinstance(value, list):
            elements = (self._build_element(idx, item) for idx, item in enumerate(value))
            return Node(name=name, payload=List.of(elements))
        return Node(name=name, payload=self._build_leaf(name, value))

    def _build_element(self, idx: int, item: Any) -> Node:
        """Build a List child named by its position.

        Nested objects and arrays are both tagged Dictionary; an array's
        elements become index-named children of that Dictionary.
        """
        name = str(idx)
        if isinstance(item, Mapping):
            return Node(name=name, payload=Dictionary(self.build(item)))
        if isinstance(item, list):
            children = tuple(self._build_element(i, sub) for i, sub in enumerate(item))
            return Node(name=name, payload=Dictionary(children))
        return Node(name=name, payload=self._build_leaf(name, item))

    def _build_leaf(self, name: str, value: Any) -> Payload:
        # bool before int: isinstance(True, int) is True
        if isinstance(value, bool):
            return Boolean(value)
        if isinstance(value, (int, float)):
            try:
                return Number(float(value))
            except OverflowError:
                msg = f"Number out of range for {name!r}"
                raise ImportFormatError(msg) from None
        if isinstance(value, str):
            return Text(value)
        if value is None:
            logger.debug("Importing null at %r as empty text", name)
            return Text("")
        msg = f"Unsupported JSON value for {name!r}: {type(value).__name__}"
        raise ImportFormatError(msg)


_importer = JsonImporter()


def import_tree(document: Any) -> tuple[Node, ...]:
    """Import a parsed JSON object as a fresh jar (see ``JsonImporter``)."""
    try:
        return _importer.build(document)
    except RecursionError:
        raise ImportFormatError("JSON document is nested too deeply") from None


def loads(text: str | bytes) -> tuple[Node, ...]:
    """Parse JSON text and import it.

    Raises:
        ImportFormatError: If the text is not valid JSON or not an object.
    """
    try:
        document = json.loads(text)
    except ValueError as exc:
        # JSONDecodeError, UnicodeDecodeError and the int digit limit
        raise ImportFormatError(f"Invalid JSON: {exc}") from exc
    except RecursionError:
        raise ImportFormatError("JSON document is nested too deeply") from None
    return import_tree(document)
