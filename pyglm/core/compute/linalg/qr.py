"""
QR decomposition via Householder reflections.

Provides the conditioning-safe least squares path: X = QR, then
β = R⁻¹ Q'y by back substitution, never forming X'X.
"""

from dataclasses import dataclass
from typing import Any
import math
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyglm.core.exceptions import DimensionError, SingularMatrixError
from pyglm.core.validation import check_consistent_length, check_square
from pyglm.core.compute.linalg.matrix import as_matrix, as_vector

_ROOT2 = math.sqrt(2.0)


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x n), Q'Q = I
        R: Upper triangular matrix (n x p), zero below the diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]

    @property
    def rank(self) -> int:
        """Numerical rank determined from the R diagonal."""
        diag_R = np.abs(np.diag(self.R))
        if len(diag_R) == 0 or diag_R.max() == 0.0:
            return 0
        # Tolerance based on matrix size and machine epsilon
        tol = max(self.R.shape) * np.finfo(np.float64).eps * diag_R.max()
        return int(np.sum(diag_R > tol))


def _householder_column(work: NDArray, i: int) -> NDArray:
    """
    Build the reflector that zeroes work[i+1:, i] and write the new
    diagonal entry into work[i, i].

    The reflector v is normalized so that H = I - v v' (i.e. ||v||² = 2).
    A zero sub-column, or the final row, degenerates to a sign flip.
    """
    x = work[i:, i].copy()
    work[i:, i] = 0.0
    norm = float(np.sqrt(x @ x))

    if i == work.shape[0] - 1 or norm == 0.0:
        work[i, i] = -x[0]
        v = np.zeros_like(x)
        v[0] = _ROOT2
        return v

    scale = -1.0 / norm if x[0] < 0.0 else 1.0 / norm
    work[i, i] = -1.0 / scale

    v = x * scale
    v[0] += 1.0
    v *= math.sqrt(1.0 / v[0])
    return v


def _reflect(active: NDArray, v: NDArray, row: int, col_start: int) -> None:
    """Apply H = I - v v' in place to active[row:, col_start:]."""
    block = active[row:, col_start:]
    block -= np.outer(v, v @ block)


def decompose_qr(a: ArrayLike) -> QRResult:
    """
    Householder QR decomposition.

    One reflector per column reduces a working copy of A to R; the same
    reflectors applied in reverse order to the identity accumulate Q.

    Args:
        a: Matrix to decompose (n x p), n >= p. Not modified.

    Returns:
        QRResult with square orthonormal Q and upper-triangular R, A = QR

    Raises:
        DimensionError: If a has fewer rows than columns
    """
    A = as_matrix(a, 'a')
    n, p = A.shape
    if n < p or p == 0:
        raise DimensionError(
            f"a: QR requires rows >= columns > 0, got shape {A.shape}",
            expected=(p, p),
            actual=A.shape,
        )

    R = np.array(A, dtype=np.float64, copy=True)
    reflectors = []
    for i in range(min(n, p)):
        v = _householder_column(R, i)
        _reflect(R, v, i, i + 1)
        reflectors.append(v)

    Q = np.eye(n)
    for i in reversed(range(len(reflectors))):
        _reflect(Q, reflectors[i], i, i)

    return QRResult(Q=Q, R=R)


def invert_upper(u: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Inverse of an upper-triangular matrix by back substitution.

    Only the upper triangle of u is read.

    Raises:
        DimensionError: If u is not square
        SingularMatrixError: If u has a zero on its diagonal
    """
    U = as_matrix(u, 'u')
    check_square(U, 'u')
    diag = np.diag(U)
    if np.any(diag == 0.0):
        raise SingularMatrixError(
            "Upper-triangular matrix has a zero diagonal entry",
            matrix_name='u',
            column=int(np.flatnonzero(diag == 0.0)[0]),
        )
    return solve_triangular(U, np.eye(U.shape[0]), lower=False)


def qr_solve(
    X: ArrayLike,
    y: ArrayLike,
) -> tuple[NDArray[np.floating[Any]], QRResult]:
    """
    Solve least squares via QR decomposition.

    Solves: min_β ||y - Xβ||² via
        X = QR
        β = R⁻¹ Q'y

    Args:
        X: Design matrix (n x p), must have n >= p
        y: Response vector (n,)

    Returns:
        Tuple of (coefficient vector β (p,), QRResult)

    Raises:
        DimensionError: If X and y disagree or n < p
        SingularMatrixError: If R has a zero on its diagonal
    """
    X_arr = as_matrix(X, 'X')
    y_arr = as_vector(y, 'y')
    check_consistent_length(X_arr, y_arr, names=('X', 'y'))

    p = X_arr.shape[1]
    qr_result = decompose_qr(X_arr)

    R = qr_result.R[:p, :p]
    rank = qr_result.rank
    if rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={rank}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=rank,
            expected_rank=p,
        )

    # Compute Q'y first, then solve the triangular system
    Qty = qr_result.Q.T @ y_arr
    beta = solve_triangular(R, Qty[:p], lower=False)

    return beta, qr_result
