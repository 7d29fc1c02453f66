"""
data-jar CLI - Main entry point.

Every command opens the jar persisted at ``--path`` (or ``DATA_JAR_PATH``),
applies its operation, and lets the jar persist the result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from data_jar.config import ENV_STORAGE_PATH, JarConfig
from data_jar.errors import JarError
from data_jar.jar import DataJar
from data_jar.result import ERROR_SENTINEL, EvaluationResult, SetOutcome
from data_jar.tree.nodes import CONTAINER_KINDS, Expression, Node, NodeKind, format_number
from data_jar.tree.path import children_of
from data_jar.trigger import TRIGGER_KINDS, build_trigger_url

console = Console()

_KIND_CHOICE = click.Choice([str(kind) for kind in NodeKind])
_TRIGGER_KIND_CHOICE = click.Choice([str(kind) for kind in NodeKind if kind in TRIGGER_KINDS])
_KIND_STYLE = {
    NodeKind.TEXT: "white",
    NodeKind.NUMBER: "cyan",
    NodeKind.BOOLEAN: "yellow",
    NodeKind.DICTIONARY: "blue",
    NodeKind.LIST: "blue",
    NodeKind.EXPRESSION: "magenta",
}


# --- Helpers ---


def _jar(ctx: click.Context) -> DataJar:
    return ctx.ensure_object(dict)["jar"]


def _raw_value(kind: NodeKind, value: str) -> str | None:
    # Containers are always created empty.
    return None if kind in CONTAINER_KINDS else value


def _render(result: EvaluationResult) -> str:
    if not result.ok:
        raise click.ClickException(f"{ERROR_SENTINEL}: {result.error}")
    value = result.result
    return format_number(value) if isinstance(value, float) else value


def _locate(jar: DataJar, path: str) -> Node:
    """Resolve ``path`` and move the jar's scope to its parent container."""
    node = jar.get(path)
    if node is None:
        raise click.ClickException(f"Key not found: {path}")
    parent, _, _ = path.rpartition(".")
    jar.navigate(parent)
    return node


def _add_branch(tree: Tree, node: Node, jar: DataJar) -> None:
    style = _KIND_STYLE[node.kind]
    name = escape(node.name)
    children = children_of(node)
    if children is not None:
        label = f"[bold {style}]{name}[/] [dim]({node.kind}, {len(children)} items)[/]"
        branch = tree.add(label)
        for child in children:
            _add_branch(branch, child, jar)
        return
    shown = escape(jar.display(node))
    if isinstance(node.payload, Expression):
        tree.add(f"[{style}]{name}[/] = {shown} [dim]{escape(node.payload.formula)}[/]")
    else:
        tree.add(f"[{style}]{name}[/] = {shown}")


# --- Commands ---


@click.group()
@click.version_option(package_name="data-jar")
@click.option(
    "--path",
    "storage_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=ENV_STORAGE_PATH,
    default=None,
    help="JSON file holding the jar.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, storage_path: Path | None, verbose: bool) -> None:
    """data-jar: a hierarchical typed key/value store.

    \b
    Quick Start:
      data-jar set config.theme dark
      data-jar set price 100 --type number
      data-jar add total --type expression --value "{{price}} * 2"
      data-jar show
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = JarConfig(storage_path=storage_path) if storage_path else JarConfig()
    ctx.ensure_object(dict)["jar"] = DataJar.open(config)


@main.command()
@click.argument("path", default="")
@click.pass_context
def show(ctx: click.Context, path: str) -> None:
    """Show the jar (or the container at PATH) with computed values."""
    jar = _jar(ctx)
    nodes: tuple[Node, ...] | None = jar.root
    if path:
        node = jar.get(path)
        if node is None:
            raise click.ClickException(f"Key not found: {path}")
        nodes = children_of(node)
        if nodes is None:
            click.echo(jar.display(node))
            return

    tree = Tree(f"[bold]{escape(path) if path else 'Jar'}[/]")
    for node in nodes:
        _add_branch(tree, node, jar)
    console.print(tree)


@main.command()
@click.argument("path")
@click.pass_context
def get(ctx: click.Context, path: str) -> None:
    """Print the value at PATH (computed for expressions)."""
    click.echo(_render(_jar(ctx).evaluate(path)))


@main.command(name="eval")
@click.argument("formula")
@click.pass_context
def eval_formula(ctx: click.Context, formula: str) -> None:
    """Evaluate FORMULA against the jar, e.g. "{{price}} * 2"."""
    click.echo(_render(_jar(ctx).evaluate_formula(formula)))


@main.command(name="set")
@click.argument("path")
@click.argument("value", default="")
@click.option("-t", "--type", "kind", type=_KIND_CHOICE, default="text", show_default=True)
@click.pass_context
def set_value(ctx: click.Context, path: str, value: str, kind: str) -> None:
    """Upsert VALUE at dotted PATH, creating missing dictionaries."""
    node_kind = NodeKind(kind)
    try:
        outcome = _jar(ctx).set(path, _raw_value(node_kind, value), node_kind)
    except JarError as exc:
        raise click.ClickException(str(exc)) from exc
    if outcome is SetOutcome.BLOCKED:
        raise click.ClickException(f'Key "{path}" is blocked by an existing value')
    click.echo(click.style(f'Updated key "{path}"', fg="green"))


@main.command()
@click.argument("name", default="")
@click.option("-t", "--type", "kind", type=_KIND_CHOICE, default="text", show_default=True)
@click.option("--value", default="", help="Initial value (ignored for containers).")
@click.option("--in", "parent", default="", help="Dotted path of the parent container.")
@click.pass_context
def add(ctx: click.Context, name: str, kind: str, value: str, parent: str) -> None:
    """Add NAME to the jar (or to the container given by --in).

    Inside a list the name is ignored and the item is named by its position.
    """
    jar = _jar(ctx)
    node_kind = NodeKind(kind)
    try:
        jar.navigate(parent)
        node = jar.add(name, node_kind, _raw_value(node_kind, value))
    except JarError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(click.style(f'Added "{node.name}" ({node.kind})', fg="green"))


@main.command()
@click.argument("path")
@click.argument("value")
@click.pass_context
def edit(ctx: click.Context, path: str, value: str) -> None:
    """Replace the value at PATH, keeping its type."""
    jar = _jar(ctx)
    try:
        node = _locate(jar, path)
        jar.edit(node.id, value)
    except JarError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(click.style(f'Updated key "{path}"', fg="green"))


@main.command()
@click.argument("path")
@click.pass_context
def delete(ctx: click.Context, path: str) -> None:
    """Delete the node at PATH. List siblings keep their names."""
    jar = _jar(ctx)
    node = _locate(jar, path)
    jar.remove(node.id)
    click.echo(click.style(f'Deleted "{path}"', fg="green"))


@main.command(name="export")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Target file (defaults to the configured export file name).")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print instead of writing a file.")
@click.pass_context
def export_jar(ctx: click.Context, output: Path | None, to_stdout: bool) -> None:
    """Export the jar as plain JSON. Expressions export as formula text."""
    jar = _jar(ctx)
    if to_stdout:
        click.echo(jar.export_json())
        return
    target = jar.export_to(output)
    click.echo(click.style(f"Exported to {target}", fg="green"))


@main.command(name="import")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def import_jar(ctx: click.Context, source: IO[str]) -> None:
    """Replace the whole jar with the JSON object in SOURCE ("-" for stdin)."""
    try:
        _jar(ctx).import_json(source.read())
    except JarError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(click.style("Imported jar", fg="green"))


@main.command()
@click.argument("url")
@click.pass_context
def trigger(ctx: click.Context, url: str) -> None:
    """Apply a trigger URL (?key=...&value=...&type=...)."""
    try:
        result = _jar(ctx).trigger(url)
    except JarError as exc:
        raise click.ClickException(str(exc)) from exc
    if result.message:
        click.echo(result.message)


@main.command()
@click.argument("key")
@click.argument("value", default="")
@click.option("-t", "--type", "kind", type=_TRIGGER_KIND_CHOICE, default="text", show_default=True)
@click.option("--base", "base_url", default="http://localhost/", show_default=True,
              help="Address the jar is served from.")
def url(key: str, value: str, kind: str, base_url: str) -> None:
    """Print a trigger URL that sets KEY to VALUE."""
    click.echo(str(build_trigger_url(base_url, key, value, kind)))


if __name__ == "__main__":
    main()
