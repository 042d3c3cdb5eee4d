"""
Tests for LU decomposition with partial pivoting.

Validates:
    - PA = LU reconstruction and unit lower triangle
    - Pivot choice (largest magnitude, earliest row on ties) and parity
    - solve/invert round trips on random well-conditioned matrices
    - Determinant against numpy
    - Singular and non-square inputs
"""

import numpy as np
import pytest

from pyglm.core.exceptions import DimensionError, SingularMatrixError
from pyglm.core.compute.linalg.lu import (
    decompose_lu, determinant, invert_lu, solve_lu,
)
from pyglm.core.compute.tolerances import KERNEL_FP64


def _well_conditioned(rng, n):
    return rng.standard_normal((n, n)) + n * np.eye(n)


# ═══════════════════════════════════════════════════════════════════════
# Decomposition
# ═══════════════════════════════════════════════════════════════════════


class TestDecomposeLU:

    @pytest.mark.parametrize("n", [1, 2, 5, 20])
    def test_reconstruction(self, rng, n):
        A = _well_conditioned(rng, n)
        lu = decompose_lu(A)
        np.testing.assert_allclose(
            lu.lower() @ lu.upper(), A[lu.permutation],
            rtol=KERNEL_FP64.rtol, atol=KERNEL_FP64.atol,
        )

    def test_lower_has_unit_diagonal(self, rng):
        lu = decompose_lu(_well_conditioned(rng, 4))
        np.testing.assert_array_equal(np.diag(lu.lower()), np.ones(4))

    def test_multipliers_bounded_by_one(self, rng):
        lu = decompose_lu(rng.standard_normal((8, 8)))
        assert np.all(np.abs(np.tril(lu.lu, k=-1)) <= 1.0)

    def test_pivot_picks_largest_magnitude(self):
        A = np.array([[1.0, 2.0], [-4.0, 1.0]])
        lu = decompose_lu(A)
        np.testing.assert_array_equal(lu.permutation, [1, 0])
        assert lu.sign == -1

    def test_tie_keeps_earliest_row(self):
        A = np.array([[2.0, 1.0], [-2.0, 3.0]])
        lu = decompose_lu(A)
        np.testing.assert_array_equal(lu.permutation, [0, 1])
        assert lu.sign == 1

    def test_identity(self):
        lu = decompose_lu(np.eye(3))
        np.testing.assert_array_equal(lu.lu, np.eye(3))
        assert lu.sign == 1

    def test_singular_raises(self):
        A = np.array([[1.0, 2.0], [2.0, 4.0]])
        with pytest.raises(SingularMatrixError) as exc_info:
            decompose_lu(A)
        assert exc_info.value.column == 1

    def test_zero_column_raises(self):
        A = np.array([[0.0, 1.0], [0.0, 2.0]])
        with pytest.raises(SingularMatrixError) as exc_info:
            decompose_lu(A)
        assert exc_info.value.column == 0

    def test_small_interior_pivot_raises(self):
        # the second column is a copy of the first, so it eliminates to zero
        A = np.array([[1.0, 1.0, 0.0], [2.0, 2.0, 1.0], [3.0, 3.0, 1.0]])
        with pytest.raises(SingularMatrixError) as exc_info:
            decompose_lu(A)
        assert exc_info.value.column == 1

    def test_non_square_raises(self):
        with pytest.raises(DimensionError):
            decompose_lu(np.ones((3, 2)))


# ═══════════════════════════════════════════════════════════════════════
# Solve / invert / determinant
# ═══════════════════════════════════════════════════════════════════════


class TestSolveLU:

    @pytest.mark.parametrize("n", [1, 3, 10, 30])
    def test_round_trip(self, rng, n):
        A = _well_conditioned(rng, n)
        x = rng.standard_normal(n)
        lu = decompose_lu(A)
        x_hat = solve_lu(lu.lu, lu.permutation, A @ x)
        np.testing.assert_allclose(x_hat, x, rtol=1e-10, atol=1e-12)

    def test_method_matches_function(self, rng):
        A = _well_conditioned(rng, 4)
        b = rng.standard_normal(4)
        lu = decompose_lu(A)
        np.testing.assert_array_equal(lu.solve(b), solve_lu(lu.lu, lu.permutation, b))

    def test_matrix_right_hand_side(self, rng):
        A = _well_conditioned(rng, 4)
        X = rng.standard_normal((4, 3))
        lu = decompose_lu(A)
        np.testing.assert_allclose(lu.solve(A @ X), X, rtol=1e-10, atol=1e-12)

    def test_wrong_rhs_length(self, rng):
        lu = decompose_lu(_well_conditioned(rng, 3))
        with pytest.raises(DimensionError, match="Conformability"):
            solve_lu(lu.lu, lu.permutation, np.ones(4))

    def test_wrong_permutation_length(self, rng):
        lu = decompose_lu(_well_conditioned(rng, 3))
        with pytest.raises(DimensionError):
            solve_lu(lu.lu, np.arange(2), np.ones(3))


class TestInvertLU:

    @pytest.mark.parametrize("n", [1, 2, 6, 25])
    def test_product_is_identity(self, rng, n):
        A = _well_conditioned(rng, n)
        np.testing.assert_allclose(A @ invert_lu(A), np.eye(n), atol=1e-10)

    def test_matches_numpy(self, rng):
        A = _well_conditioned(rng, 5)
        np.testing.assert_allclose(
            invert_lu(A), np.linalg.inv(A),
            rtol=KERNEL_FP64.rtol, atol=KERNEL_FP64.atol,
        )

    def test_singular_raises(self):
        with pytest.raises(SingularMatrixError):
            invert_lu(np.ones((3, 3)))


class TestDeterminant:

    def test_matches_numpy(self, rng):
        A = rng.standard_normal((6, 6))
        assert determinant(A) == pytest.approx(np.linalg.det(A), rel=1e-10)

    def test_sign_from_swap(self):
        assert determinant([[0.0, 1.0], [1.0, 0.0]]) == pytest.approx(-1.0)

    def test_singular_is_zero(self):
        assert determinant([[1.0, 2.0], [2.0, 4.0]]) == 0.0

    def test_property_on_result(self):
        A = np.array([[4.0, 3.0], [6.0, 3.0]])
        assert decompose_lu(A).determinant == pytest.approx(-6.0)
