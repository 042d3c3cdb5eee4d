"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default warnings tuple
    - has_warning(), method and converged accessors
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyglm.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _result(**overrides):
    kwargs = dict(
        params=FakeParams(value=42.0),
        info={"method": "test"},
        timing={"total_seconds": 0.01},
        backend_name="cpu_lu",
    )
    kwargs.update(overrides)
    return Result(**kwargs)


class TestResultConstruction:

    def test_basic_creation(self):
        result = _result()
        assert result.params.value == 42.0
        assert result.info["method"] == "test"
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu_lu"

    def test_timing_none(self):
        assert _result(timing=None).timing is None

    def test_warnings_default_empty(self):
        assert _result().warnings == ()


class TestResultImmutability:

    def test_cannot_set_params(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(value=0.0)

    def test_cannot_set_warnings(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ("x",)


class TestHasWarning:

    def test_substring_match(self):
        result = _result(warnings=("IRLS did not converge in 100 iterations",))
        assert result.has_warning("did not converge")

    def test_no_match(self):
        result = _result(warnings=("something else",))
        assert not result.has_warning("converge")

    def test_no_warnings(self):
        assert not _result().has_warning("anything")


class TestResultMetadata:

    def test_method(self):
        assert _result().method == "test"
        assert _result(info={}).method is None

    def test_direct_solve_counts_as_converged(self):
        assert _result().converged

    def test_iterative_not_converged(self):
        result = _result(info={"method": "irls_wls", "converged": False, "iterations": 100})
        assert not result.converged
