"""
Least-squares kernels.

    regress_ols:  β = (X'X)⁻¹ X'y          normal equations, LU inverse
    regress_wls:  rows scaled by √(w/Σw), then regress_ols
    regress_qr:   β = R⁻¹ Q'y              Householder QR, X'X never formed

The backends call normal_equations, weighted_normal_equations and
qr_least_squares, which also hand back the (X'X)⁻¹ of the system actually
solved so standard errors need no second inversion.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.validation import check_consistent_length, check_finite, check_weights
from pyglm.core.compute.linalg.lu import invert_lu
from pyglm.core.compute.linalg.matrix import as_matrix, as_vector, multiply, transpose
from pyglm.core.compute.linalg.qr import qr_solve, invert_upper


def normal_equations(
    X: NDArray, y: NDArray
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """(β, (X'X)⁻¹) by the normal equations."""
    Xt = transpose(X)
    xtx_inverse = invert_lu(multiply(Xt, X))
    beta = multiply(xtx_inverse, multiply(Xt, y))
    return beta, xtx_inverse


def wls_row_scale(w: NDArray) -> NDArray[np.floating[Any]]:
    """Per-row scale √(w_i / Σw)."""
    return np.sqrt(w / np.sum(w))


def weighted_normal_equations(
    X: NDArray, y: NDArray, w: NDArray
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """(β, (X̃'X̃)⁻¹) for the row-scaled system X̃ = diag(√(w/Σw)) X."""
    scale = wls_row_scale(w)
    return normal_equations(X * scale[:, np.newaxis], y * scale)


def qr_least_squares(
    X: NDArray, y: NDArray
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], int]:
    """(β, (X'X)⁻¹, rank) via QR; (X'X)⁻¹ = R⁻¹ R⁻ᵀ."""
    beta, qr_result = qr_solve(X, y)
    p = X.shape[1]
    R_inv = invert_upper(qr_result.R[:p, :p])
    return beta, R_inv @ R_inv.T, qr_result.rank


def regress_ols(X: ArrayLike, y: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Ordinary least squares by the normal equations.

    Args:
        X: Design matrix (n x p), n >= p
        y: Response vector (n,)

    Returns:
        Coefficient vector (p,)

    Raises:
        DimensionError: If X and y disagree in length
        SingularMatrixError: If X'X is singular (X rank-deficient)
    """
    X_arr = as_matrix(X, 'X')
    y_arr = as_vector(y, 'y')
    check_consistent_length(X_arr, y_arr, names=('X', 'y'))
    beta, _ = normal_equations(X_arr, y_arr)
    return beta


def regress_wls(
    X: ArrayLike, y: ArrayLike, weights: ArrayLike
) -> NDArray[np.floating[Any]]:
    """
    Weighted least squares: minimise Σ w_i (y_i - x_i β)².

    Weights are normalised to sum to one and their square roots scale
    the rows of X and y; the rescaled system is solved by regress_ols.

    Raises:
        DimensionError: If X, y and weights disagree in length
        DomainError: If any weight is negative or all weights are zero
        SingularMatrixError: If the weighted X'X is singular
    """
    X_arr = as_matrix(X, 'X')
    y_arr = as_vector(y, 'y')
    w_arr = as_vector(weights, 'weights')
    check_consistent_length(X_arr, y_arr, w_arr, names=('X', 'y', 'weights'))
    check_finite(w_arr, 'weights')
    check_weights(w_arr, 'weights')
    beta, _ = weighted_normal_equations(X_arr, y_arr, w_arr)
    return beta


def regress_qr(X: ArrayLike, y: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Least squares via Householder QR.

    Better conditioned than regress_ols: the condition number of X, not
    of X'X, governs the error.

    Raises:
        DimensionError: If X and y disagree in length or n < p
        SingularMatrixError: If X is rank-deficient
    """
    beta, _ = qr_solve(X, y)
    return beta
