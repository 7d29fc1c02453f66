"""DataJar: orchestrator that owns the current tree, its store and evaluator.

This is the wiring layer between the pure tree operations and the outside
world.  Every mutation goes through ``_commit``, which swaps in the new tree
and persists it, so the stored document always matches the in-memory jar.

Architecture:
- The jar is an immutable tuple of nodes.  Mutations produce a replacement
  tree; a failed mutation raises before ``_commit`` and leaves state as-is.
- ``scope`` is the navigation breadcrumb (container ids from the root) that
  in-place edits (add/edit/delete) apply to.  Path-addressed operations
  (get/set/evaluate/trigger) always work on the whole jar.
- Without a store the jar lives in memory only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

import httpx

from data_jar import codec
from data_jar.config import JarConfig
from data_jar.errors import InvalidPathError
from data_jar.expression import ExpressionEvaluator
from data_jar.result import EvaluationResult, SetOutcome
from data_jar.store import JarStore, default_tree
from data_jar.tree.mutator import (
    add_node,
    deep_set_with_outcome,
    delete,
    scope_nodes,
    scope_parent,
    update_value,
)
from data_jar.tree.nodes import Expression, Node, NodeKind
from data_jar.tree.path import children_of, resolve, scope_for_path
from data_jar.trigger import TriggerResult, apply_trigger, parse_trigger_url

__all__ = ["DataJar"]

logger = logging.getLogger(__name__)


class DataJar:
    """A hierarchical typed key/value store addressed by dotted paths.

    Example::

        from data_jar import DataJar

        jar = DataJar()                      # in-memory, default contents
        jar.set("config.theme", "light")
        jar.evaluate("total_cost").result    # 120.0
        jar.export_json()                    # '{"greeting": "Hello World", ...}'
    """

    def __init__(
        self,
        root: Sequence[Node] | None = None,
        *,
        store: JarStore | None = None,
        config: JarConfig | None = None,
    ) -> None:
        """Initialise the jar.

        Args:
            root:   Initial tree.  When None, loaded from ``store`` if given,
                    otherwise the default jar.
            store:  Persistence slot written after every mutation.  None keeps
                    the jar in memory only.
            config: Runtime settings.  Defaults to ``JarConfig()``.
        """
        self._config: JarConfig = config if config is not None else JarConfig()
        self._store = store
        if root is not None:
            self._root: tuple[Node, ...] = tuple(root)
        elif store is not None:
            self._root = store.load()
        else:
            self._root = default_tree()
        self._scope: tuple[str, ...] = ()
        self._evaluator = ExpressionEvaluator(
            max_cache_size=self._config.evaluation_cache_size
        )

    @classmethod
    def open(cls, config: JarConfig | None = None) -> DataJar:
        """Open the jar persisted at ``config.storage_path``."""
        config = config if config is not None else JarConfig()
        return cls(store=JarStore(config.storage_path), config=config)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def root(self) -> tuple[Node, ...]:
        return self._root

    @property
    def config(self) -> JarConfig:
        return self._config

    @property
    def scope(self) -> tuple[str, ...]:
        return self._scope

    @property
    def nodes(self) -> tuple[Node, ...]:
        """The children visible at the current scope."""
        return scope_nodes(self._root, self._scope)

    def _commit(self, new_root: tuple[Node, ...]) -> None:
        if new_root is self._root:
            return
        self._root = new_root
        if self._store is not None:
            self._store.save(new_root)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def enter(self, node_id: str) -> None:
        """Descend into the container ``node_id`` at the current scope.

        Raises:
            KeyError: If no such child exists at the current scope.
            InvalidPathError: If the child is not a container.
        """
        node = next((n for n in self.nodes if n.id == node_id), None)
        if node is None:
            raise KeyError(node_id)
        if not node.is_container:
            raise InvalidPathError(f"{node.name!r} is not a container")
        self._scope = (*self._scope, node_id)

    def navigate(self, path: str) -> None:
        """Set the scope to the container at dotted ``path`` ("" for the root).

        Raises:
            InvalidPathError: If ``path`` does not name a container.
        """
        scope = scope_for_path(self._root, path)
        if scope is None:
            raise InvalidPathError(f"No container at {path!r}")
        self._scope = scope

    def up(self, levels: int = 1) -> None:
        """Move the scope ``levels`` containers towards the root."""
        self._scope = self._scope[: max(0, len(self._scope) - levels)]

    def breadcrumbs(self) -> list[str]:
        """Names of the containers on the current scope, root first."""
        names = []
        current: Sequence[Node] = self._root
        for step in self._scope:
            node = next((n for n in current if n.id == step), None)
            if node is None:
                break
            names.append(node.name)
            current = children_of(node) or ()
        return names

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: str) -> Node | None:
        """Resolve ``path`` against the whole jar."""
        return resolve(self._root, path)

    def evaluate(self, path: str) -> EvaluationResult:
        """Evaluate the node at ``path``; a miss is reported like a bad reference."""
        node = self.get(path)
        if node is None:
            return EvaluationResult.failure(f"Key not found: {path}")
        if isinstance(node.payload, Expression):
            return self._evaluator.evaluate(node.payload.formula, self._root)
        return EvaluationResult(result=self._evaluator.display(node, self._root))

    def evaluate_formula(self, formula: str) -> EvaluationResult:
        return self._evaluator.evaluate(formula, self._root)

    def display(self, node: Node) -> str:
        return self._evaluator.display(node, self._root)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(
        self, path: str, value: Any, kind: NodeKind | str = NodeKind.TEXT
    ) -> SetOutcome:
        """Deep-set ``value`` at ``path`` on the whole jar."""
        new_root, outcome = deep_set_with_outcome(self._root, path, value, kind)
        self._commit(new_root)
        return outcome

    def add(self, name: str, kind: NodeKind | str, value: Any = None) -> Node:
        """Add a node at the current scope and return it.

        Raises:
            InvalidPathError: If the scope no longer leads to a container,
                e.g. after the container was replaced by a leaf.
            InvalidEditError: If the name is blank or the value cannot be
                coerced to ``kind``.
        """
        if self._scope and self.current_container() is None:
            raise InvalidPathError("The current scope no longer names a container")
        before = {n.id for n in self.nodes}
        new_root = add_node(self._root, name, kind, value, self._scope)
        node = next(n for n in scope_nodes(new_root, self._scope) if n.id not in before)
        self._commit(new_root)
        return node

    def edit(self, node_id: str, value: Any) -> None:
        """Replace the value of ``node_id`` at the current scope."""
        self._commit(update_value(self._root, node_id, value, self._scope))

    def remove(self, node_id: str) -> None:
        """Delete ``node_id`` at the current scope."""
        self._commit(delete(self._root, node_id, self._scope))

    def trigger(self, request: MutableMapping[str, str] | str | httpx.URL) -> TriggerResult:
        """Apply a trigger given as a parameter mapping or a URL.

        A mapping is consumed in place.  For a URL, the URL without the
        trigger parameters is returned as ``entry_point``.
        """
        cleaned: httpx.URL | None = None
        if isinstance(request, (str, httpx.URL)):
            params, cleaned = parse_trigger_url(request)
            logger.debug("Consumed trigger parameters; entry point is now %s", cleaned)
        else:
            params = request
        result = replace(apply_trigger(self._root, params), entry_point=cleaned)
        self._commit(result.root)
        if result.message:
            logger.info(result.message)
        return result

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_data(self) -> dict[str, Any]:
        return codec.export_tree(self._root)

    def export_json(self) -> str:
        return codec.dumps(self._root, indent=self._config.export_indent)

    def export_to(self, path: Path | str | None = None) -> Path:
        """Write the export document, by default to ``config.export_filename``."""
        target = Path(path) if path is not None else Path(self._config.export_filename)
        target.write_text(self.export_json() + "\n", encoding="utf-8")
        return target

    def import_json(self, text: str | bytes) -> None:
        """Replace the whole jar with an imported JSON document.

        Raises:
            ImportFormatError: If ``text`` is not a JSON object.  The jar is
                left untouched.
        """
        self._replace(codec.loads(text))

    def import_data(self, document: Mapping[str, Any]) -> None:
        """Replace the whole jar with an already-parsed JSON object."""
        self._replace(codec.import_tree(document))

    def _replace(self, root: tuple[Node, ...]) -> None:
        self._commit(root)
        # The old scope's ids no longer exist.
        self._scope = ()

    def current_container(self) -> Node | None:
        return scope_parent(self._root, self._scope)
