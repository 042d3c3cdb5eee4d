"""
Solver dispatch for regression.

This module provides the fit() function (public API), the functional
solver entry points fit_irls() and fit_newton(), and backend selection.
"""

import warnings
from typing import Callable, Literal
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit

from pyglm.core.result import Result
from pyglm.core.compute.tolerances import (
    IRLS_MAX_ITER, IRLS_ATOL, IRLS_RTOL,
    NEWTON_MAX_ITER, NEWTON_EXPANSIONS, NEWTON_SPEED_LIMIT, NEWTON_TOL,
)
from pyglm.core.exceptions import ValidationError
from pyglm.regression.design import Design
from pyglm.regression.families import Distribution, resolve_family
from pyglm.regression.links import Link
from pyglm.regression.least_squares import regress_ols, regress_wls, regress_qr
from pyglm.regression.solution import (
    GLMParams, GLMSolution, LinearSolution, NewtonParams,
)
from pyglm.regression.backends.cpu import CPULUBackend, CPUQRBackend
from pyglm.regression.backends.cpu_glm import CPUIRLSBackend, CPUNewtonBackend


# Type alias for solver selection
MethodChoice = Literal['lu', 'qr']


def _check_iteration_controls(max_iter: int, atol: float, rtol: float) -> None:
    if max_iter < 1:
        raise ValidationError(f"max_iter: must be at least 1, got {max_iter}")
    if atol < 0 or rtol < 0:
        raise ValidationError(
            f"atol and rtol must be non-negative, got atol={atol}, rtol={rtol}"
        )


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    weights: ArrayLike | None = None,
    family: str | Distribution | None = None,
    link: str | Link | None = None,
    method: MethodChoice = 'lu',
    max_iter: int = IRLS_MAX_ITER,
    atol: float = IRLS_ATOL,
    rtol: float = IRLS_RTOL,
) -> LinearSolution | GLMSolution:
    """
    Fit a linear model or GLM.

    Without a family this solves (weighted) least squares:
        min_β Σ w_i (y_i - x_i β)²

    With a family it fits a GLM by IRLS. Gaussian with the identity link
    is solved directly by least squares.

    This is the primary public API for regression. All input validation,
    backend selection, and result wrapping happens here.

    Args:
        X: Design matrix (n x p). Can be any array-like.
        y: Response vector (n,). Can be any array-like.
        weights: Non-negative observation weights (n,). None means unit
            weights.
        family: None for a linear model, or 'gaussian', 'poisson' or a
            Distribution instance.
        link: Link for a family given by name; the family default when
            None. Ignored for Distribution instances.
        method: Linear models only: 'lu' (normal equations) or 'qr'.
        max_iter: Maximum IRLS iterations.
        atol: Absolute convergence tolerance on IRLS residuals.
        rtol: Relative convergence tolerance on IRLS residuals.

    Returns:
        LinearSolution when family is None, GLMSolution otherwise.

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        DomainError: If weights are negative or sum to zero
        SingularMatrixError: If X is rank-deficient

    Warns:
        RuntimeWarning: If IRLS reaches max_iter without converging

    Example:
        >>> import numpy as np
        >>> from pyglm.regression import fit
        >>>
        >>> X = np.column_stack([np.ones(100), np.random.randn(100, 2)])
        >>> y = X @ [1, 2, 3] + np.random.randn(100) * 0.1
        >>>
        >>> result = fit(X, y)
        >>> print(result.coefficients)
        >>> print(result.summary())
    """
    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = Design.from_arrays(X, y, weights)

    if family is None:
        if link is not None:
            raise ValueError("link requires a family")
        backend_impl = _get_backend(method)
        result = backend_impl.solve(design)
        return LinearSolution(_result=result, _design=design)

    if method != 'lu':
        raise ValueError(f"method={method!r} applies to linear models only")
    _check_iteration_controls(max_iter, atol, rtol)

    distribution = resolve_family(family, link)
    result = CPUIRLSBackend().solve(design, distribution, max_iter, atol, rtol)

    for message in result.warnings:
        warnings.warn(message, RuntimeWarning, stacklevel=2)

    return GLMSolution(_result=result, _design=design, _family=distribution)


def fit_irls(
    X: ArrayLike,
    y: ArrayLike,
    weights: ArrayLike | None,
    distribution: Distribution,
    max_iter: int = IRLS_MAX_ITER,
    atol: float = IRLS_ATOL,
    rtol: float = IRLS_RTOL,
) -> Result[GLMParams]:
    """
    Fit a GLM by IRLS and return the raw Result envelope.

    Convergence: the residual vector η - y is compared component-wise
    with the previous iteration's (zeros before the first), converged when
    |r_prev - r| <= atol + rtol |r| everywhere. The defaults amount to an
    exact-match criterion.

    Non-convergence is not an error: the last coefficients are returned
    with converged=False and a message in Result.warnings.
    """
    _check_iteration_controls(max_iter, atol, rtol)
    design = Design.from_arrays(X, y, weights)
    return CPUIRLSBackend().solve(design, distribution, max_iter, atol, rtol)


def fit_newton(
    X: ArrayLike,
    y: ArrayLike,
    inverse_link: Callable[[NDArray], NDArray] = expit,
    max_iter: int = NEWTON_MAX_ITER,
    expansions: int = NEWTON_EXPANSIONS,
    speed_limit: float = NEWTON_SPEED_LIMIT,
    tol: float = NEWTON_TOL,
) -> Result[NewtonParams]:
    """
    Fit a response probability model p = inverse_link(Xβ) by
    Newton-Raphson, starting from β = 0.

    The iteration stops, returning the best β seen, when no coefficient
    moves more than tol, when a coefficient's relative change exceeds
    speed_limit, when more than `expansions` consecutive steps fail to
    improve the mean squared error, when X'WX is singular, or after
    max_iter steps. info['stop_reason'] records which. A tolerance stop
    reached at a halved step that is not the best β is reported as
    'best_mse' and is not converged.
    """
    if max_iter < 1:
        raise ValidationError(f"max_iter: must be at least 1, got {max_iter}")
    if expansions < 0:
        raise ValidationError(f"expansions: must be non-negative, got {expansions}")
    design = Design.from_arrays(X, y)
    return CPUNewtonBackend().solve(
        design, inverse_link, max_iter, expansions, speed_limit, tol
    )


def _get_backend(choice: MethodChoice):
    """
    Select and instantiate the linear least squares backend.

    Raises:
        ValueError: If unknown method specified
    """
    if choice == 'lu':
        return CPULUBackend()
    elif choice == 'qr':
        return CPUQRBackend()
    else:
        raise ValueError(f"Unknown method: {choice!r}")


__all__ = [
    "fit",
    "fit_irls",
    "fit_newton",
    "regress_ols",
    "regress_wls",
    "regress_qr",
]
