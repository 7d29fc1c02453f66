"""Tests for EvaluationResult and SetOutcome.

Covers:
- Construction and defaults
- Frozen (immutable) enforcement
- The failure() constructor and the ERR sentinel
- SetOutcome values and the changed flag
- __all__ export
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from data_jar import result as result_module
from data_jar.result import ERROR_SENTINEL, EvaluationResult, SetOutcome

# ---------------------------------------------------------------------------
# EvaluationResult
# ---------------------------------------------------------------------------


class TestEvaluationResult:
    def test_success_defaults(self) -> None:
        result = EvaluationResult(result=120.0)
        assert result.error is None
        assert result.ok

    def test_text_result(self) -> None:
        assert EvaluationResult(result="Hello").result == "Hello"

    def test_failure(self) -> None:
        result = EvaluationResult.failure("Key not found: x")
        assert result.result == ERROR_SENTINEL == "ERR"
        assert result.error == "Key not found: x"
        assert not result.ok

    def test_frozen(self) -> None:
        result = EvaluationResult(result=1.0)
        with pytest.raises(FrozenInstanceError):
            result.result = 2.0  # type: ignore[misc]

    def test_equality(self) -> None:
        assert EvaluationResult(result="a") == EvaluationResult(result="a")
        assert EvaluationResult(result="a") != EvaluationResult.failure("a")


# ---------------------------------------------------------------------------
# SetOutcome
# ---------------------------------------------------------------------------


class TestSetOutcome:
    def test_values(self) -> None:
        assert [str(o) for o in SetOutcome] == ["created", "updated", "unchanged", "blocked"]

    def test_changed(self) -> None:
        assert {o for o in SetOutcome if o.changed} == {SetOutcome.CREATED, SetOutcome.UPDATED}


def test_all_exports() -> None:
    assert set(result_module.__all__) == {"ERROR_SENTINEL", "EvaluationResult", "SetOutcome"}
