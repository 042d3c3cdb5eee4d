"""
Coefficient covariance estimators.

Three estimators of Var(β̂) for a linear model with squared residuals e²:

    ols:  (X'X)⁻¹ · Σe² / (n - p)
    hc0:  (X'X)⁻¹ X' diag(e²) X (X'X)⁻¹            (White, 1980)
    hc1:  hc0 · n / (n - p)                          (MacKinnon & White, 1985)

References:
    White, H. (1980). A heteroskedasticity-consistent covariance matrix
        estimator and a direct test for heteroskedasticity. Econometrica.
    MacKinnon, J. G., & White, H. (1985). Some heteroskedasticity-consistent
        covariance matrix estimators with improved finite sample properties.
"""

from __future__ import annotations

from typing import Any, Literal
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.exceptions import DimensionError
from pyglm.core.validation import check_consistent_length
from pyglm.core.compute.linalg.lu import invert_lu
from pyglm.core.compute.linalg.matrix import as_matrix, as_vector

CovarianceType = Literal['ols', 'hc0', 'hc1']

_KINDS = ('ols', 'hc0', 'hc1')


def squared_errors(y: ArrayLike, fitted: ArrayLike) -> NDArray[np.floating[Any]]:
    """Element-wise (y - fitted)²."""
    y_arr = as_vector(y, 'y')
    f_arr = as_vector(fitted, 'fitted')
    check_consistent_length(y_arr, f_arr, names=('y', 'fitted'))
    return (y_arr - f_arr) ** 2


def covariance(
    X: ArrayLike,
    squared_errors: ArrayLike,
    kind: CovarianceType = 'ols',
    xtx_inverse: NDArray | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Coefficient covariance matrix (p x p).

    Args:
        X: Design matrix (n x p)
        squared_errors: Squared residuals (n,)
        kind: 'ols', 'hc0' or 'hc1'
        xtx_inverse: Precomputed (X'X)⁻¹. Computed by LU inversion when
            omitted.

    Returns:
        The p x p covariance. For 'ols' and 'hc1' it is all NaN when
        n <= p, as there are no residual degrees of freedom.

    Raises:
        DimensionError: If X and squared_errors disagree in length or X
            is empty
        ValueError: If kind is not recognized
        SingularMatrixError: If X'X is singular
    """
    if kind not in _KINDS:
        raise ValueError(
            f"Unknown covariance kind: {kind!r}. Valid kinds: {', '.join(_KINDS)}"
        )

    X_arr = as_matrix(X, 'X')
    e2 = as_vector(squared_errors, 'squared_errors')
    check_consistent_length(X_arr, e2, names=('X', 'squared_errors'))
    n, p = X_arr.shape
    if n == 0:
        raise DimensionError("X: covariance requires at least one observation",
                             expected=1, actual=0)
    if kind != 'hc0' and n <= p:
        # ols and hc1 scale by n - p
        return np.full((p, p), np.nan, dtype=np.float64)

    bread = invert_lu(X_arr.T @ X_arr) if xtx_inverse is None else xtx_inverse

    if kind == 'ols':
        return bread * (float(np.sum(e2)) / (n - p))

    # X' diag(e²) X without materialising the diagonal
    meat = (X_arr * e2[:, None]).T @ X_arr
    if kind == 'hc1':
        meat = meat * (n / (n - p))
    return bread @ meat @ bread


def standard_errors(
    X: ArrayLike,
    squared_errors: ArrayLike,
    kind: CovarianceType = 'ols',
    xtx_inverse: NDArray | None = None,
) -> NDArray[np.floating[Any]]:
    """Square roots of the diagonal of covariance()."""
    return np.sqrt(np.diag(covariance(X, squared_errors, kind, xtx_inverse)))
