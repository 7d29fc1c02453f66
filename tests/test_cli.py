"""Tests for the data-jar command line interface."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from data_jar.cli import main
from data_jar.store import JarStore

Invoke = Callable[..., Result]


@pytest.fixture
def jar_path(tmp_path: Path) -> Path:
    return tmp_path / "jar.json"


@pytest.fixture
def invoke(jar_path: Path) -> Invoke:
    runner = CliRunner()

    def _invoke(*args: str, input: str | None = None) -> Result:
        return runner.invoke(main, ["--path", str(jar_path), *args], input=input)

    return _invoke


class TestReadCommands:
    def test_show(self, invoke: Invoke) -> None:
        result = invoke("show")
        assert result.exit_code == 0, result.output
        assert "greeting" in result.output
        assert "Hello World" in result.output
        assert "120" in result.output

    def test_show_container(self, invoke: Invoke) -> None:
        result = invoke("show", "config")
        assert result.exit_code == 0, result.output
        assert "theme" in result.output
        assert "greeting" not in result.output

    def test_show_leaf(self, invoke: Invoke) -> None:
        result = invoke("show", "total_cost")
        assert result.output.strip() == "120"

    def test_get_expression(self, invoke: Invoke) -> None:
        result = invoke("get", "total_cost")
        assert result.exit_code == 0
        assert result.output.strip() == "120"

    def test_get_text(self, invoke: Invoke) -> None:
        assert invoke("get", "config.theme").output.strip() == "dark"

    def test_get_missing(self, invoke: Invoke) -> None:
        result = invoke("get", "missing")
        assert result.exit_code == 1
        assert "ERR: Key not found: missing" in result.output

    def test_eval(self, invoke: Invoke) -> None:
        assert invoke("eval", "{{price}} * 2").output.strip() == "200"
        assert invoke("eval", "Hi {{greeting}}").output.strip() == "Hi Hello World"


class TestWriteCommands:
    def test_set_persists(self, invoke: Invoke, jar_path: Path) -> None:
        result = invoke("set", "config.theme", "light")
        assert result.exit_code == 0, result.output
        assert 'Updated key "config.theme"' in result.output
        assert invoke("get", "config.theme").output.strip() == "light"
        assert jar_path.exists()

    def test_set_number(self, invoke: Invoke) -> None:
        invoke("set", "price", "200", "--type", "number")
        assert invoke("get", "total_cost").output.strip() == "240"

    def test_set_blocked(self, invoke: Invoke) -> None:
        result = invoke("set", "price.currency", "EUR")
        assert result.exit_code == 1
        assert "blocked" in result.output

    def test_set_bad_number(self, invoke: Invoke) -> None:
        result = invoke("set", "price", "lots", "-t", "number")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_set_bad_path(self, invoke: Invoke) -> None:
        assert invoke("set", "a..b", "x").exit_code == 1

    def test_add_expression(self, invoke: Invoke) -> None:
        result = invoke("add", "double", "-t", "expression", "--value", "{{price}} * 2")
        assert 'Added "double" (expression)' in result.output
        assert invoke("get", "double").output.strip() == "200"

    def test_add_into_container(self, invoke: Invoke) -> None:
        invoke("add", "accent", "--value", "blue", "--in", "config")
        assert invoke("get", "config.accent").output.strip() == "blue"

    def test_add_into_list(self, invoke: Invoke) -> None:
        invoke("set", "tags", "-t", "list")
        result = invoke("add", "--value", "a", "--in", "tags")
        assert 'Added "0" (text)' in result.output

    def test_add_without_name(self, invoke: Invoke) -> None:
        result = invoke("add", "--value", "x")
        assert result.exit_code == 1

    def test_edit_keeps_type(self, invoke: Invoke) -> None:
        result = invoke("edit", "config.fontSize", "16")
        assert result.exit_code == 0, result.output
        assert invoke("get", "config.fontSize").output.strip() == "16"

    def test_edit_rejects_bad_number(self, invoke: Invoke) -> None:
        assert invoke("edit", "price", "lots").exit_code == 1

    def test_delete(self, invoke: Invoke) -> None:
        assert 'Deleted "greeting"' in invoke("delete", "greeting").output
        assert invoke("get", "greeting").exit_code == 1

    def test_delete_missing(self, invoke: Invoke) -> None:
        result = invoke("delete", "nope")
        assert result.exit_code == 1
        assert "Key not found: nope" in result.output


class TestTransferCommands:
    def test_export_stdout(self, invoke: Invoke) -> None:
        result = invoke("export", "--stdout")
        assert json.loads(result.output)["config"] == {"theme": "dark", "fontSize": 14}

    def test_export_file(self, invoke: Invoke, tmp_path: Path) -> None:
        target = tmp_path / "out.json"
        result = invoke("export", "-o", str(target))
        assert "Exported to" in result.output
        assert json.loads(target.read_text(encoding="utf-8"))["price"] == 100

    def test_import_stdin(self, invoke: Invoke, jar_path: Path) -> None:
        result = invoke("import", "-", input='{"a": {"b": 1}}')
        assert result.exit_code == 0, result.output
        assert "Imported jar" in result.output
        assert [n.name for n in JarStore(jar_path).load()] == ["a"]

    def test_import_invalid(self, invoke: Invoke) -> None:
        result = invoke("import", "-", input="[1, 2]")
        assert result.exit_code == 1
        assert "must be an object" in result.output
        assert invoke("get", "greeting").output.strip() == "Hello World"

    def test_trigger(self, invoke: Invoke) -> None:
        result = invoke("trigger", "http://localhost/?key=config.theme&value=light")
        assert 'Updated key "config.theme"' in result.output
        assert invoke("get", "config.theme").output.strip() == "light"

    def test_trigger_bad_type(self, invoke: Invoke) -> None:
        result = invoke("trigger", "http://localhost/?key=a&type=date")
        assert result.exit_code == 1
        assert "Unsupported trigger type" in result.output

    def test_url(self, invoke: Invoke) -> None:
        result = invoke("url", "price", "250", "-t", "number")
        assert result.output.strip() == (
            "http://localhost/?key=price&value=250&type=number&action=set"
        )

    def test_url_rejects_expression_type(self, invoke: Invoke) -> None:
        assert invoke("url", "x", "y", "-t", "expression").exit_code == 2
