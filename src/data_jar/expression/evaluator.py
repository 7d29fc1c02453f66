"""ExpressionEvaluator: resolves ``{{path}}`` references and runs arithmetic.

Evaluation of one formula:

1. Find every ``{{path}}`` token.  With none, the formula is returned as-is.
2. Resolve each path against the whole jar and substitute the node's value.
   An Expression node contributes its raw formula text: references are only
   followed one level deep, so no cycle can arise.  A miss fails the whole
   formula with ``ReferenceNotFound``.
3. Arithmetic is attempted only when a reference was substituted and the text
   contains an operator or parenthesis, or is itself a number.
4. The text must then consist solely of digits, ``+ - * / ( ) .`` and
   whitespace; anything else (letters from substituted text, for instance)
   means the text is returned unchanged.
5. Otherwise the text is parsed and evaluated (see ``arithmetic``).

Failures never propagate: they come back as an ``EvaluationResult`` holding
the ``"ERR"`` sentinel and a message, so one bad formula cannot affect any
other node.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence

from data_jar.codec import export_value
from data_jar.errors import ArithmeticEvaluationError, ReferenceNotFound
from data_jar.expression.cache import ProgramCache
from data_jar.result import EvaluationResult
from data_jar.tree.nodes import (
    Boolean,
    Dictionary,
    Expression,
    List,
    Node,
    Number,
    Payload,
    format_number,
)
from data_jar.tree.path import resolve

__all__ = ["REFERENCE_PATTERN", "ExpressionEvaluator", "render_payload"]

logger = logging.getLogger(__name__)

REFERENCE_PATTERN = re.compile(r"\{\{([A-Za-z0-9_.]+)\}\}")

# Any of these marks substituted text as a candidate for arithmetic.
_ARITHMETIC_HINT = re.compile(r"[+\-*/%()]")

# Only these characters may reach the arithmetic parser.
_STRICT_ARITHMETIC = re.compile(r"[0-9+\-*/().\s]+")


def render_payload(payload: Payload) -> str:
    """Render a payload as the text substituted for a reference to it."""
    if isinstance(payload, Expression):
        return payload.formula
    if isinstance(payload, Number):
        return format_number(payload.value)
    if isinstance(payload, Boolean):
        return "true" if payload.value else "false"
    if isinstance(payload, (Dictionary, List)):
        return json.dumps(export_value(payload), separators=(",", ":"))
    return payload.value


def _looks_numeric(text: str) -> bool:
    # Blank text counts as numeric, matching how the jar's host coerces it.
    if not text.strip():
        return True
    try:
        float(text)
    except ValueError:
        return False
    return True


class ExpressionEvaluator:
    """Evaluates formulas against a jar.

    Each instance keeps its own ``ProgramCache`` of parsed arithmetic; the
    cache is a performance detail and never changes results.

    Example::

        evaluator = ExpressionEvaluator()
        evaluator.evaluate("{{price}} * (1 + {{tax_rate}})", jar).result   # 120.0
        evaluator.evaluate("Hello {{name}}", jar).result                    # "Hello World"
    """

    def __init__(self, max_cache_size: int = 256) -> None:
        self._programs = ProgramCache(max_size=max_cache_size)

    @property
    def cache(self) -> ProgramCache:
        return self._programs

    def evaluate(self, formula: str, root: Sequence[Node]) -> EvaluationResult:
        """Evaluate ``formula`` against the whole jar ``root``."""
        if not formula:
            return EvaluationResult(result="")

        try:
            substituted, count = self._substitute(formula, root)
        except ReferenceNotFound as exc:
            logger.debug("Formula %r: %s", formula, exc)
            return EvaluationResult.failure(str(exc))

        if count == 0:
            return EvaluationResult(result=formula)

        if not (_ARITHMETIC_HINT.search(substituted) or _looks_numeric(substituted)):
            return EvaluationResult(result=substituted)

        if not _STRICT_ARITHMETIC.fullmatch(substituted):
            return EvaluationResult(result=substituted)

        try:
            value = self._programs.evaluate(substituted)
        except ArithmeticEvaluationError as exc:
            logger.debug("Formula %r: %s", formula, exc)
            return EvaluationResult.failure(str(exc))
        return EvaluationResult(result=value)

    def display(self, node: Node, root: Sequence[Node]) -> str:
        """Return the text shown for ``node``: computed for expressions."""
        payload = node.payload
        if isinstance(payload, Expression):
            result = self.evaluate(payload.formula, root).result
            if isinstance(result, float):
                return format_number(result)
            return result
        if isinstance(payload, (Dictionary, List)):
            return f"{len(payload.children)} items"
        return render_payload(payload)

    @staticmethod
    def _substitute(formula: str, root: Sequence[Node]) -> tuple[str, int]:
        def replace(match: re.Match[str]) -> str:
            path = match.group(1)
            node = resolve(root, path)
            if node is None:
                raise ReferenceNotFound(path)
            return render_payload(node.payload)

        return REFERENCE_PATTERN.subn(replace, formula)
