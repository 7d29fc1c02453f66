"""ProgramCache: LRU cache of parsed arithmetic programs.

Display logic re-evaluates every expression node on each render, and the
substituted text of a formula rarely changes between renders.  The cache maps
substituted source text to its parsed syntax tree so repeated evaluations skip
tokenizing and parsing.  LRU eviction is silent.

Each ``ProgramCache`` instance maintains its own ``LRUCache``; there is no
class-level shared state.  Parse failures are not cached.

Example::

    from data_jar.expression.cache import ProgramCache

    cache = ProgramCache(max_size=128)
    cache.evaluate("100 * (1 + 0.2)")   # parses, caches, returns 120.0
    cache.evaluate("100 * (1 + 0.2)")   # served from the cache
"""

from __future__ import annotations

from cachetools import LRUCache

from data_jar.errors import ArithmeticEvaluationError
from data_jar.expression.arithmetic import Program, parse

__all__ = ["ProgramCache"]


class ProgramCache:
    """LRU-backed store of parsed arithmetic programs keyed by source text.

    Args:
        max_size: Maximum number of programs to hold.  Defaults to 256.
    """

    def __init__(self, max_size: int = 256) -> None:
        self._cache: LRUCache[str, Program] = LRUCache(maxsize=max_size)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        """The maximum number of programs this cache can hold."""
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        """The current number of programs stored in the cache."""
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, source: object) -> bool:
        return source in self._cache

    def program(self, source: str) -> Program:
        """Return the parsed program for ``source``, parsing on a miss.

        Raises:
            ArithmeticEvaluationError: If ``source`` is malformed.
        """
        program = self._cache.get(source)
        if program is None:
            program = parse(source)
            self._cache[source] = program
        return program

    def evaluate(self, source: str) -> float:
        """Parse (or fetch) and evaluate ``source``.

        Raises:
            ArithmeticEvaluationError: If ``source`` is malformed.
        """
        program = self.program(source)
        try:
            return program.evaluate()
        except RecursionError:
            raise ArithmeticEvaluationError("Expression is nested too deeply") from None
