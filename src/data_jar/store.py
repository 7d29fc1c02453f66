"""JarStore: persists the whole jar as one JSON document.

The document is a list of node records, each ``{"id", "name", "type",
"value"}``, where container records hold their child records in ``value``.
Unlike the export format, this keeps ids, kinds and Expression formulas
exactly, so a save/load round trip restores the jar unchanged.

Loading never fails: a missing or undecodable document falls back to the
built-in default jar.  Saving writes a temporary file next to the target and
swaps it into place, so a crash mid-write never leaves a torn document.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from data_jar.codec import export_value
from data_jar.errors import InvalidEditError, PersistFormatError
from data_jar.tree.nodes import (
    Dictionary,
    Expression,
    List,
    Node,
    NodeKind,
    Number,
    Text,
    make_payload,
)

__all__ = ["JarStore", "decode_document", "default_tree", "encode_document"]

logger = logging.getLogger(__name__)

_RECORD_FIELDS = ("id", "name", "type", "value")


def default_tree() -> tuple[Node, ...]:
    """The jar a first-time user starts with."""
    return (
        Node(name="greeting", payload=Text("Hello World")),
        Node(
            name="config",
            payload=Dictionary(
                (
                    Node(name="theme", payload=Text("dark")),
                    Node(name="fontSize", payload=Number(14)),
                )
            ),
        ),
        Node(name="price", payload=Number(100)),
        Node(name="tax_rate", payload=Number(0.2)),
        Node(
            name="total_cost",
            payload=Expression("{{price}} * (1 + {{tax_rate}})"),
        ),
    )


# ---------------------------------------------------------------------------
# Document encoding
# ---------------------------------------------------------------------------


def encode_document(root: Sequence[Node]) -> list[dict[str, Any]]:
    """Encode a jar as a list of node records."""
    return [_encode_node(node) for node in root]


def _encode_node(node: Node) -> dict[str, Any]:
    payload = node.payload
    value: Any
    if isinstance(payload, (Dictionary, List)):
        value = [_encode_node(child) for child in payload.children]
    elif isinstance(payload, Number) and not math.isfinite(payload.value):
        # Kept as NaN/Infinity literals, which json reads back.
        value = payload.value
    else:
        value = export_value(payload)
    return {"id": node.id, "name": node.name, "type": str(node.kind), "value": value}


def decode_document(document: Any) -> tuple[Node, ...]:
    """Decode a list of node records into a jar.

    Raises:
        PersistFormatError: If the document does not have the record shape.
    """
    if not isinstance(document, list):
        msg = f"Persisted jar must be a list of nodes, got {type(document).__name__}"
        raise PersistFormatError(msg)
    return tuple(_decode_node(record) for record in document)


def _decode_node(record: Any) -> Node:
    if not isinstance(record, dict) or any(f not in record for f in _RECORD_FIELDS):
        raise PersistFormatError(f"Malformed node record: {record!r}")
    try:
        kind = NodeKind(record["type"])
    except ValueError:
        raise PersistFormatError(f"Unknown node type: {record['type']!r}") from None

    value = record["value"]
    if kind in (NodeKind.DICTIONARY, NodeKind.LIST):
        if not isinstance(value, list):
            raise PersistFormatError(f"Container {record['name']!r} has no child list")
        value = [_decode_node(child) for child in value]
    try:
        payload = make_payload(kind, value)
    except InvalidEditError as exc:
        raise PersistFormatError(str(exc)) from exc
    return Node(name=str(record["name"]), payload=payload, id=str(record["id"]))


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class JarStore:
    """File-backed persistence slot for a single jar.

    Args:
        path: The JSON file that holds the jar.
        default_factory: Builds the jar used when the file is missing or
            cannot be decoded.  Defaults to ``default_tree``.
    """

    def __init__(
        self,
        path: Path | str,
        default_factory: Callable[[], tuple[Node, ...]] = default_tree,
    ) -> None:
        self._path = Path(path)
        self._default_factory = default_factory

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> tuple[Node, ...]:
        """Read the jar, falling back to the default jar on any failure."""
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("No jar at %s, starting from the default jar", self._path)
            return self._default_factory()

        try:
            return self.decode(data)
        except PersistFormatError as exc:
            logger.warning("Failed to load jar from %s: %s", self._path, exc)
            return self._default_factory()

    @staticmethod
    def decode(text: str | bytes) -> tuple[Node, ...]:
        """Decode persisted JSON text.

        Raises:
            PersistFormatError: If the text is not a valid persisted jar.
        """
        try:
            document = json.loads(text)
        except ValueError as exc:
            # JSONDecodeError, UnicodeDecodeError and the int digit limit
            raise PersistFormatError(f"Invalid JSON: {exc}") from exc
        except RecursionError:
            raise PersistFormatError("Persisted jar is nested too deeply") from None
        try:
            return decode_document(document)
        except RecursionError:
            raise PersistFormatError("Persisted jar is nested too deeply") from None

    def save(self, root: Sequence[Node]) -> None:
        """Write the whole jar, replacing the previous document atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(encode_document(root), ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved %d top-level nodes to %s", len(root), self._path)
