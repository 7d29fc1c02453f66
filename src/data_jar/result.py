"""Result types returned by evaluation and deep-set calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto

__all__ = ["ERROR_SENTINEL", "EvaluationResult", "SetOutcome"]

# Displayed in place of a value whose formula failed to evaluate.
ERROR_SENTINEL = "ERR"


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating one formula.

    Attributes:
        result: The substituted text, or a float when arithmetic ran.  Equals
            ``ERROR_SENTINEL`` when evaluation failed.
        error:  None on success; otherwise a message naming the missing
            reference or describing the arithmetic fault.
    """

    result: str | float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> EvaluationResult:
        return cls(result=ERROR_SENTINEL, error=message)


class SetOutcome(StrEnum):
    """What a deep-set did to the tree.

    - CREATED:   The final node (and possibly intermediates) was appended.
    - UPDATED:   An existing node's payload was replaced.
    - UNCHANGED: The node already held exactly this payload.
    - BLOCKED:   An intermediate segment named a leaf; nothing changed.
    """

    CREATED = auto()
    UPDATED = auto()
    UNCHANGED = auto()
    BLOCKED = auto()

    @property
    def changed(self) -> bool:
        return self in (SetOutcome.CREATED, SetOutcome.UPDATED)
