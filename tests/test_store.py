"""Tests for JarStore persistence and the record document format."""

from __future__ import annotations

import json
import math
from pathlib import Path

import pytest

from data_jar.errors import PersistFormatError
from data_jar.store import JarStore, decode_document, default_tree, encode_document
from data_jar.tree.nodes import (
    Dictionary,
    Expression,
    List,
    Node,
    NodeKind,
    Number,
    Text,
)


@pytest.fixture
def store(tmp_path: Path) -> JarStore:
    return JarStore(tmp_path / "jar.json")


def _ids(nodes: tuple[Node, ...]) -> list[str]:
    out: list[str] = []
    for node in nodes:
        out.append(node.id)
        children = getattr(node.payload, "children", None)
        if children is not None:
            out.extend(_ids(children))
    return out


class TestDefaultTree:
    def test_contents(self) -> None:
        root = default_tree()
        assert [n.name for n in root] == [
            "greeting",
            "config",
            "price",
            "tax_rate",
            "total_cost",
        ]
        assert root[4].payload == Expression("{{price}} * (1 + {{tax_rate}})")

    def test_fresh_ids_each_call(self) -> None:
        assert default_tree()[0].id != default_tree()[0].id


class TestDocument:
    def test_record_shape(self) -> None:
        node = Node(name="price", payload=Number(100), id="n1")
        assert encode_document((node,)) == [
            {"id": "n1", "name": "price", "type": "number", "value": 100}
        ]

    def test_containers_hold_child_records(self) -> None:
        child = Node(name="theme", payload=Text("dark"), id="c1")
        parent = Node(name="config", payload=Dictionary((child,)), id="p1")
        [record] = encode_document((parent,))
        assert record["type"] == "dictionary"
        assert record["value"] == [
            {"id": "c1", "name": "theme", "type": "text", "value": "dark"}
        ]

    def test_expression_keeps_kind(self) -> None:
        root = (Node(name="e", payload=Expression("{{a}}")),)
        assert decode_document(encode_document(root))[0].kind is NodeKind.EXPRESSION

    def test_round_trip_keeps_ids_and_names(self) -> None:
        tags = List((Node(name="1", payload=Text("b")),))
        root = (*default_tree(), Node(name="tags", payload=tags))
        decoded = decode_document(encode_document(root))
        assert decoded == root
        assert _ids(decoded) == _ids(root)

    @pytest.mark.parametrize(
        "document",
        [
            {"id": "x"},
            [{"id": "x", "name": "a", "type": "text"}],
            [{"id": "x", "name": "a", "type": "date", "value": ""}],
            [{"id": "x", "name": "a", "type": "list", "value": "nope"}],
            [{"id": "x", "name": "a", "type": "number", "value": "abc"}],
            ["not a record"],
        ],
    )
    def test_malformed_documents(self, document: object) -> None:
        with pytest.raises(PersistFormatError):
            decode_document(document)


class TestJarStore:
    def test_missing_file_gives_default(self, store: JarStore) -> None:
        assert store.load() == default_tree()

    def test_save_then_load(self, store: JarStore) -> None:
        root = (
            Node(name="a", payload=Number(1.5)),
            Node(name="b", payload=Dictionary((Node(name="c", payload=Text("x")),))),
        )
        store.save(root)
        loaded = store.load()
        assert loaded == root
        assert _ids(loaded) == _ids(root)

    def test_save_creates_parent_dirs(self, tmp_path: Path) -> None:
        store = JarStore(tmp_path / "deep" / "dir" / "jar.json")
        store.save(default_tree())
        assert store.path.exists()

    def test_save_writes_records(self, store: JarStore) -> None:
        store.save((Node(name="a", payload=Text("x"), id="i"),))
        assert json.loads(store.path.read_text(encoding="utf-8")) == [
            {"id": "i", "name": "a", "type": "text", "value": "x"}
        ]

    def test_save_leaves_no_temp_files(self, store: JarStore) -> None:
        store.save(default_tree())
        store.save(default_tree())
        assert [p.name for p in store.path.parent.iterdir()] == ["jar.json"]

    def test_corrupt_file_falls_back(
        self, store: JarStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        store.path.write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING", logger="data_jar.store"):
            root = store.load()
        assert root == default_tree()
        assert "Failed to load jar" in caplog.text

    def test_wrong_shape_falls_back(self, store: JarStore) -> None:
        store.path.write_text('{"greeting": "hi"}', encoding="utf-8")
        assert store.load() == default_tree()

    def test_custom_default_factory(self, tmp_path: Path) -> None:
        store = JarStore(tmp_path / "jar.json", default_factory=tuple)
        assert store.load() == ()

    def test_decode_raises(self) -> None:
        with pytest.raises(PersistFormatError, match="Invalid JSON"):
            JarStore.decode("")

    def test_invalid_utf8_falls_back(self, store: JarStore) -> None:
        store.path.write_bytes(b'[{"id": "i", "name": "a", "type": "text", "value": "\xff"}]')
        assert store.load() == default_tree()

    def test_overflowing_number_falls_back(self, store: JarStore) -> None:
        digits = "9" * 400
        record = f'[{{"id": "i", "name": "n", "type": "number", "value": {digits}}}]'
        store.path.write_text(record, encoding="utf-8")
        assert store.load() == default_tree()

    def test_deeply_nested_document_falls_back(self, store: JarStore) -> None:
        store.path.write_text("[" * 100_000, encoding="utf-8")
        assert store.load() == default_tree()

    def test_non_finite_numbers_survive(self, store: JarStore) -> None:
        store.save(
            (
                Node(name="nan", payload=Number(math.nan)),
                Node(name="inf", payload=Number(-math.inf)),
            )
        )
        nan, inf = store.load()
        assert math.isnan(nan.payload.value)  # type: ignore[union-attr]
        assert inf.payload == Number(-math.inf)
