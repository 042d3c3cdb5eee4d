"""
CPU backends for linear regression.

Two direct solvers over a validated Design:
    CPULUBackend: normal equations, (X'X)⁻¹ by LU with partial pivoting
    CPUQRBackend: Householder QR, X'X never formed

Weighted designs are solved on the row-scaled system
X̃ = diag(√(w/Σw)) X, ỹ = diag(√(w/Σw)) y in both backends.
"""

from typing import Any
import numpy as np

from pyglm.core.result import Result
from pyglm.core.compute.timing import Timer
from pyglm.regression.design import Design
from pyglm.regression.least_squares import (
    normal_equations, qr_least_squares, weighted_normal_equations, wls_row_scale,
)
from pyglm.regression.solution import LinearParams


def _linear_params(
    design: Design,
    coefficients: np.ndarray,
    xtx_inverse: np.ndarray,
    rank: int,
    timer: Timer,
) -> LinearParams:
    X, y = design.X, design.y
    with timer.section('residuals'):
        fitted_values = X @ coefficients
        residuals = y - fitted_values
        if design.weighted:
            working_weights = wls_row_scale(design.weights) ** 2
            sse = float(np.sum(design.weights * residuals ** 2))
        else:
            working_weights = np.ones(design.n)
            sse = float(residuals @ residuals)

    return LinearParams(
        coefficients=coefficients,
        residuals=residuals,
        fitted_values=fitted_values,
        sse=sse,
        rank=rank,
        df_residual=design.n - rank,
        xtx_inverse=xtx_inverse,
        working_weights=working_weights,
    )


class CPULUBackend:
    """
    CPU backend using the normal equations.

    β = (X'X)⁻¹ X'y with (X'X)⁻¹ from one LU factorisation. Fast and
    exact on well-conditioned designs; squares the condition number.
    """

    @property
    def name(self) -> str:
        return 'cpu_lu'

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Solve OLS (or WLS for weighted designs) via LU.

        Raises:
            SingularMatrixError: If X'X is singular
        """
        timer = Timer()
        timer.start()

        with timer.section('lu_solve'):
            if design.weighted:
                coefficients, xtx_inverse = weighted_normal_equations(
                    design.X, design.y, design.weights
                )
            else:
                coefficients, xtx_inverse = normal_equations(design.X, design.y)

        params = _linear_params(design, coefficients, xtx_inverse, design.p, timer)
        timer.stop()

        info: dict[str, Any] = {
            'method': 'wls_lu' if design.weighted else 'ols_lu',
            'rank': design.p,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class CPUQRBackend:
    """
    CPU backend using Householder QR decomposition.

    Algorithm:
        1. X = QR
        2. β = R⁻¹ Q'y
        3. (X'X)⁻¹ = R⁻¹ R⁻ᵀ for standard errors
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Solve OLS (or WLS for weighted designs) via QR.

        Raises:
            SingularMatrixError: If X is rank-deficient
        """
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        if design.weighted:
            scale = wls_row_scale(design.weights)
            X, y = X * scale[:, np.newaxis], y * scale

        with timer.section('qr_solve'):
            coefficients, xtx_inverse, rank = qr_least_squares(X, y)

        params = _linear_params(design, coefficients, xtx_inverse, rank, timer)
        timer.stop()

        info: dict[str, Any] = {
            'method': 'wls_qr' if design.weighted else 'ols_qr',
            'rank': rank,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
