"""Tokenizer and recursive-descent evaluator for jar arithmetic.

Grammar (usual precedence, left-associative within a level)::

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/" | "%") unary)*
    unary   := ("-" | "+") unary | primary
    primary := NUMBER | "(" expr ")"
    NUMBER  := \\d+ ("." \\d*)? | "." \\d+

All numbers are floats.  Division by zero yields a signed infinity (or NaN
for 0/0) and ``%`` is the truncated remainder, so ``-7 % 2 == -1``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from data_jar.errors import ArithmeticEvaluationError

__all__ = ["BinaryOp", "Literal", "Negate", "Program", "parse", "tokenize"]

_TOKEN = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(\S))")
_OPERATORS = frozenset("+-*/%()")


@dataclass(frozen=True, slots=True)
class Token:
    text: str
    is_number: bool
    position: int


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into number and operator tokens.

    Raises:
        ArithmeticEvaluationError: On any character outside the grammar.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN.match(source, pos)
        if match is None:
            # Only trailing whitespace is left.
            break
        number, symbol = match.groups()
        if number is not None:
            tokens.append(Token(number, True, match.start(1)))
        elif symbol is not None:
            if symbol not in _OPERATORS:
                msg = f"Unexpected character {symbol!r} at position {match.start(2)}"
                raise ArithmeticEvaluationError(msg)
            tokens.append(Token(symbol, False, match.start(2)))
        pos = match.end()
    return tokens


# ---------------------------------------------------------------------------
# Syntax tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Literal:
    value: float

    def evaluate(self) -> float:
        return self.value


@dataclass(frozen=True, slots=True)
class Negate:
    operand: Program

    def evaluate(self) -> float:
        return -self.operand.evaluate()


@dataclass(frozen=True, slots=True)
class BinaryOp:
    op: str
    left: Program
    right: Program

    def evaluate(self) -> float:
        a = self.left.evaluate()
        b = self.right.evaluate()
        if self.op == "+":
            return a + b
        if self.op == "-":
            return a - b
        if self.op == "*":
            return a * b
        if self.op == "/":
            return _divide(a, b)
        return _remainder(a, b)


Program = Literal | Negate | BinaryOp


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    return math.fmod(a, b)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise ArithmeticEvaluationError("Unexpected end of expression")
        self._pos += 1
        return token

    def _at(self, *symbols: str) -> bool:
        token = self._peek()
        return token is not None and not token.is_number and token.text in symbols

    def parse(self) -> Program:
        if not self._tokens:
            raise ArithmeticEvaluationError("Empty expression")
        program = self._expr()
        trailing = self._peek()
        if trailing is not None:
            msg = f"Unexpected {trailing.text!r} at position {trailing.position}"
            raise ArithmeticEvaluationError(msg)
        return program

    def _expr(self) -> Program:
        node = self._term()
        while self._at("+", "-"):
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Program:
        node = self._unary()
        while self._at("*", "/", "%"):
            op = self._advance().text
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Program:
        if self._at("-"):
            self._advance()
            return Negate(self._unary())
        if self._at("+"):
            self._advance()
            return self._unary()
        return self._primary()

    def _primary(self) -> Program:
        token = self._advance()
        if token.is_number:
            return Literal(float(token.text))
        if token.text == "(":
            node = self._expr()
            if not self._at(")"):
                msg = f"Unbalanced parentheses: '(' at position {token.position}"
                raise ArithmeticEvaluationError(msg)
            self._advance()
            return node
        msg = f"Unexpected {token.text!r} at position {token.position}"
        raise ArithmeticEvaluationError(msg)


def parse(source: str) -> Program:
    """Parse ``source`` into an evaluable syntax tree.

    Raises:
        ArithmeticEvaluationError: If ``source`` is empty or malformed.
    """
    try:
        return _Parser(tokenize(source)).parse()
    except RecursionError:
        raise ArithmeticEvaluationError("Expression is nested too deeply") from None
