"""Public API functions for data-jar.

Stateless conveniences over the core modules.  ``evaluate`` creates a fresh
``ExpressionEvaluator`` per call to guarantee zero global state between calls;
hold an evaluator (or a ``DataJar``) to reuse its parse cache.
"""

from __future__ import annotations

from collections.abc import Sequence

from data_jar.codec import dumps, loads
from data_jar.expression import ExpressionEvaluator
from data_jar.result import EvaluationResult
from data_jar.tree.nodes import Node

__all__ = ["display_value", "evaluate", "export_json", "import_json"]


def evaluate(formula: str, root: Sequence[Node]) -> EvaluationResult:
    """Evaluate ``formula`` against the jar ``root``.

    Args:
        formula: Text with optional ``{{path}}`` references, e.g.
                 ``"{{price}} * (1 + {{tax_rate}})"``.
        root:    The whole jar; references always resolve from here.

    Returns:
        An ``EvaluationResult``: a float when arithmetic ran, text otherwise,
        or ``"ERR"`` with an error message on a missing reference or
        malformed arithmetic.
    """
    return ExpressionEvaluator().evaluate(formula, root)


def display_value(node: Node, root: Sequence[Node]) -> str:
    """Return the text a viewer shows for ``node`` (computed for expressions)."""
    return ExpressionEvaluator().display(node, root)


def export_json(root: Sequence[Node], indent: int | None = 2) -> str:
    """Export ``root`` as JSON text (expressions as formula text)."""
    return dumps(root, indent=indent)


def import_json(text: str | bytes) -> tuple[Node, ...]:
    """Import JSON text as a fresh jar.

    Raises:
        ImportFormatError: If ``text`` is not valid JSON or not an object.
    """
    return loads(text)
