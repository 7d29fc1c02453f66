"""Expression subpackage: reference substitution and arithmetic.

Re-exports the public API for the expression module:
- ExpressionEvaluator: evaluates ``{{path}}`` formulas against a jar
- ProgramCache: LRU cache of parsed arithmetic programs
- parse / tokenize: the arithmetic front end
"""

from data_jar.expression.arithmetic import parse, tokenize
from data_jar.expression.cache import ProgramCache
from data_jar.expression.evaluator import (
    REFERENCE_PATTERN,
    ExpressionEvaluator,
    render_payload,
)

__all__ = [
    "REFERENCE_PATTERN",
    "ExpressionEvaluator",
    "ProgramCache",
    "parse",
    "render_payload",
    "tokenize",
]
