"""Exception hierarchy for data-jar.

Every error raised by the package derives from ``JarError`` and also from the
closest built-in exception, so callers can catch either.  None of these abort
a larger batch: each expression, import field and trigger is handled where it
occurs.
"""

from __future__ import annotations

__all__ = [
    "ArithmeticEvaluationError",
    "ImportFormatError",
    "InvalidEditError",
    "InvalidPathError",
    "InvalidTriggerError",
    "JarError",
    "PersistFormatError",
    "ReferenceNotFound",
]


class JarError(Exception):
    """Base class for all data-jar errors."""


class PersistFormatError(JarError, ValueError):
    """The persisted document could not be decoded into a tree."""


class ImportFormatError(JarError, ValueError):
    """JSON supplied to import is malformed or not a top-level object."""


class ReferenceNotFound(JarError, LookupError):
    """A ``{{path}}`` reference did not resolve to any node."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Key not found: {path}")
        self.path = path


class ArithmeticEvaluationError(JarError, ArithmeticError):
    """Substituted text does not form a valid arithmetic expression."""


class InvalidPathError(JarError, ValueError):
    """A dotted path contains an empty or invalid segment."""


class InvalidEditError(JarError, TypeError):
    """An add or value edit was rejected (container edit, blank name, bad value)."""


class InvalidTriggerError(JarError, ValueError):
    """A trigger request named a type outside text|number|boolean|dictionary|list."""
