"""
Tests for the pyglm exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyGLMError)
    - DomainError is also a ValueError
    - Diagnostic attributes and their None defaults
"""

import pytest

from pyglm.core.exceptions import (
    DimensionError,
    DomainError,
    NumericalError,
    PyGLMError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyGLMError."""

    @pytest.mark.parametrize("exc_type", [
        ValidationError, DimensionError, DomainError,
        NumericalError, SingularMatrixError,
    ])
    def test_catchable_as_base(self, exc_type):
        with pytest.raises(PyGLMError):
            raise exc_type("failure")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_domain_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DomainError("out of range")

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise DomainError("out of range")

    def test_singular_matrix_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise SingularMatrixError("singular")

    def test_singular_is_not_validation_error(self):
        assert not isinstance(SingularMatrixError("s"), ValidationError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestDimensionError:

    def test_attributes(self):
        err = DimensionError("bad", expected=(3, 3), actual=(3, 2))
        assert err.expected == (3, 3)
        assert err.actual == (3, 2)
        assert str(err) == "bad"

    def test_defaults_none(self):
        err = DimensionError("bad")
        assert err.expected is None
        assert err.actual is None


class TestDomainError:

    def test_attributes(self):
        err = DomainError("x out of range", name='x', value=171,
                          valid_range="[0, 170]")
        assert err.name == 'x'
        assert err.value == 171
        assert err.valid_range == "[0, 170]"

    def test_defaults_none(self):
        err = DomainError("bad")
        assert err.name is None
        assert err.value is None
        assert err.valid_range is None


class TestSingularMatrixError:

    def test_attributes(self):
        err = SingularMatrixError(
            "singular", matrix_name='X', column=2, rank=2, expected_rank=3
        )
        assert err.matrix_name == 'X'
        assert err.column == 2
        assert err.rank == 2
        assert err.expected_rank == 3

    def test_defaults_none(self):
        err = SingularMatrixError("singular")
        assert err.matrix_name is None
        assert err.column is None
        assert err.rank is None
        assert err.expected_rank is None
