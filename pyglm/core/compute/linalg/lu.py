"""
LU decomposition with partial pivoting.

Doolittle's algorithm: PA = LU with L unit lower triangular and U upper
triangular, both stored in a single combined matrix. Used for solving
square systems, inverting X'X for least squares, and determinants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular, LinAlgError

from pyglm.core.exceptions import DimensionError, SingularMatrixError
from pyglm.core.validation import check_array, check_square
from pyglm.core.compute.tolerances import LU_PIVOT_TOLERANCE
from pyglm.core.compute.linalg.matrix import as_matrix


@dataclass(frozen=True)
class LUResult:
    """
    Result of LU decomposition.

    Attributes:
        lu: Combined factor matrix (n x n). Strictly below the diagonal
            holds L (unit diagonal implied), on and above holds U.
        permutation: Row indices such that A[permutation] == L @ U
        sign: Row-swap parity, +1 or -1
    """
    lu: NDArray[np.floating[Any]]
    permutation: NDArray[np.intp]
    sign: int

    @property
    def n(self) -> int:
        return self.lu.shape[0]

    @property
    def determinant(self) -> float:
        """det(A) = sign * prod(diag(U))."""
        return float(self.sign * np.prod(np.diag(self.lu)))

    def lower(self) -> NDArray[np.floating[Any]]:
        """Unit lower triangular factor L."""
        return np.tril(self.lu, k=-1) + np.eye(self.n)

    def upper(self) -> NDArray[np.floating[Any]]:
        """Upper triangular factor U."""
        return np.triu(self.lu)

    def solve(self, b: ArrayLike) -> NDArray[np.floating[Any]]:
        """Solve A x = b using this factorization."""
        return solve_lu(self.lu, self.permutation, b)


def _swap_rows(work: NDArray, permutation: NDArray, i: int, j: int) -> None:
    work[[i, j]] = work[[j, i]]
    permutation[[i, j]] = permutation[[j, i]]


def decompose_lu(
    a: ArrayLike,
    tol: float = LU_PIVOT_TOLERANCE,
) -> LUResult:
    """
    LU decomposition with partial (maximum magnitude) pivoting.

    Algorithm, for each column i < n-1:
        1. Pick the row in i..n-1 with the largest |a[j, i]|; the earliest
           row wins ties. Swap it into position i.
        2. If |a[i, i]| is still below tol, swap in the last row below i
           whose entry exceeds tol. If there is none, the matrix is
           singular.
        3. Store multipliers a[j, i] /= a[i, i] and subtract the scaled
           pivot row from every row below.

    Args:
        a: Square matrix (n x n). Not modified.
        tol: Pivot magnitude below which a column is treated as zero

    Returns:
        LUResult with the combined factor, permutation and swap parity

    Raises:
        DimensionError: If a is not square
        SingularMatrixError: If no usable pivot exists for some column
    """
    A = as_matrix(a, 'a')
    check_square(A, 'a')

    work = np.array(A, dtype=np.float64, copy=True)
    n = work.shape[0]
    permutation = np.arange(n, dtype=np.intp)
    sign = 1

    for i in range(n - 1):
        pivot_row = i + int(np.argmax(np.abs(work[i:, i])))
        if pivot_row != i:
            _swap_rows(work, permutation, pivot_row, i)
            sign = -sign

        # with the max-|a| pivot in place no row below can exceed tol here,
        # so a small pivot always ends in SingularMatrixError
        if abs(work[i, i]) < tol:
            candidates = np.nonzero(np.abs(work[i + 1:, i]) > tol)[0]
            if candidates.size == 0:
                raise SingularMatrixError(
                    f"No suitable pivot in column {i}: matrix is singular "
                    f"or numerically unstable (|pivot| < {tol:g})",
                    matrix_name='a',
                    column=i,
                )
            _swap_rows(work, permutation, i + 1 + int(candidates[-1]), i)
            sign = -sign

        work[i + 1:, i] /= work[i, i]
        work[i + 1:, i + 1:] -= np.outer(work[i + 1:, i], work[i, i + 1:])

    # the last pivot has no rows below to swap with
    if abs(work[n - 1, n - 1]) < tol:
        raise SingularMatrixError(
            f"No suitable pivot in column {n - 1}: matrix is singular "
            f"or numerically unstable (|pivot| < {tol:g})",
            matrix_name='a',
            column=n - 1,
        )

    return LUResult(lu=work, permutation=permutation, sign=sign)


def solve_lu(
    lu: ArrayLike,
    permutation: ArrayLike,
    b: ArrayLike,
) -> NDArray[np.floating[Any]]:
    """
    Solve A x = b given the combined LU factor of A.

    Applies the permutation to b, forward-substitutes through the unit
    lower triangle, then back-substitutes through the upper triangle.

    Args:
        lu: Combined factor from decompose_lu (n x n)
        permutation: Row permutation from decompose_lu (n,)
        b: Right-hand side, (n,) or (n, m) for m systems at once

    Returns:
        Solution x with the same shape as b

    Raises:
        DimensionError: If shapes are not conformable
        SingularMatrixError: If U has a zero on its diagonal
    """
    LU = as_matrix(lu, 'lu')
    check_square(LU, 'lu')
    perm = np.asarray(permutation, dtype=np.intp)
    rhs = check_array(b, 'b').astype(np.float64, copy=False)
    n = LU.shape[0]

    if perm.shape != (n,):
        raise DimensionError(
            f"Conformability: lu[{n}][{n}], permutation{list(perm.shape)}",
            expected=(n,),
            actual=perm.shape,
        )
    if rhs.ndim not in (1, 2) or rhs.shape[0] != n:
        raise DimensionError(
            f"Conformability: lu[{n}][{n}], b{list(rhs.shape)}",
            expected=(n,),
            actual=rhs.shape,
        )

    try:
        y = solve_triangular(LU, rhs[perm], lower=True, unit_diagonal=True)
        x = solve_triangular(LU, y, lower=False)
    except LinAlgError as e:
        raise SingularMatrixError(
            f"Upper factor is singular: {e}",
            matrix_name='lu',
        ) from e
    return x


def invert_lu(a: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Matrix inverse via one LU factorization and n solves.

    Column i of the inverse solves A x = e_i; all n right-hand sides are
    solved against the same factor, O(n^3) overall.

    Raises:
        DimensionError: If a is not square
        SingularMatrixError: If a is singular
    """
    result = decompose_lu(a)
    return solve_lu(result.lu, result.permutation, np.eye(result.n))


def determinant(a: ArrayLike) -> float:
    """
    Determinant via LU: sign * prod(diag(U)).

    A matrix the pivot search finds singular has determinant 0.0.
    """
    try:
        result = decompose_lu(a)
    except SingularMatrixError:
        return 0.0
    return result.determinant
