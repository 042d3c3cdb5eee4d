"""
Regression solution types.

Contains the parameter payloads produced by backends and the user-facing
solution wrappers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.result import Result
from pyglm.core.compute.linalg.matrix import as_matrix
from pyglm.core.exceptions import DimensionError
from pyglm.regression.covariance import CovarianceType, covariance

if TYPE_CHECKING:
    from pyglm.regression.design import Design
    from pyglm.regression.families import Distribution


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends. `xtx_inverse` and
    `working_weights` describe the system actually solved: for weighted
    fits X'X is X'WX.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    sse: float
    rank: int
    df_residual: int
    xtx_inverse: NDArray[np.floating[Any]]
    working_weights: NDArray[np.floating[Any]]


@dataclass(frozen=True)
class GLMParams:
    """
    Parameter payload for GLM fits via IRLS.

    residuals are on the response scale (y - μ). working_response and
    working_weights are those of the final IRLS iteration.
    """
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    linear_predictor: NDArray[np.floating[Any]]
    working_response: NDArray[np.floating[Any]]
    working_weights: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    sse: float
    deviance: float
    rank: int
    df_residual: int
    n_iter: int
    converged: bool
    family_name: str
    link_name: str
    xtx_inverse: NDArray[np.floating[Any]]


@dataclass(frozen=True)
class NewtonParams:
    """Parameter payload for the Newton-Raphson probability-model fit."""
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    mse: float
    n_iter: int
    converged: bool
    stop_reason: str


class _SolutionBase(ABC):
    """Accessors shared by linear and GLM solutions."""

    _result: Result
    _design: 'Design'

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def sse(self) -> float:
        """Sum of squared response residuals."""
        return self._result.params.sse

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def mse(self) -> float:
        """sse / df_residual; NaN when there are no residual degrees of freedom."""
        df = self.df_residual
        if df <= 0:
            return float('nan')
        return self.sse / df

    @property
    def rmse(self) -> float:
        return float(np.sqrt(self.mse))

    # === Covariance ===

    @abstractmethod
    def _working_residuals(self) -> NDArray[np.floating[Any]]:
        """Residuals on the working scale of the solved system."""

    def variance(self, kind: CovarianceType = 'ols') -> NDArray[np.floating[Any]]:
        """
        Coefficient covariance matrix.

        Computed on the system the backend solved: rows of X and the
        working residuals are scaled by √(working weight), so weighted
        and GLM fits get their weighted covariance.

        Args:
            kind: 'ols', 'hc0' or 'hc1'
        """
        p = len(self.coefficients)
        if self.df_residual <= 0:
            return np.full((p, p), np.nan, dtype=np.float64)

        sw = np.sqrt(self._result.params.working_weights)
        X_eff = self._design.X * sw[:, np.newaxis]
        e_eff = self._working_residuals() * sw
        return covariance(X_eff, e_eff ** 2, kind, self._result.params.xtx_inverse)

    @property
    def variance_ols(self) -> NDArray[np.floating[Any]]:
        return self.variance('ols')

    @property
    def variance_hc0(self) -> NDArray[np.floating[Any]]:
        return self.variance('hc0')

    @property
    def variance_hc1(self) -> NDArray[np.floating[Any]]:
        return self.variance('hc1')

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """SE(β) = sqrt(diag(σ² (X'X)⁻¹))."""
        return np.sqrt(np.diag(self.variance_ols))

    @property
    def standard_errors_hc0(self) -> NDArray[np.floating[Any]]:
        """White heteroscedasticity-consistent standard errors."""
        return np.sqrt(np.diag(self.variance_hc0))

    @property
    def standard_errors_hc1(self) -> NDArray[np.floating[Any]]:
        """HC0 with the n / (n - p) small-sample correction."""
        return np.sqrt(np.diag(self.variance_hc1))

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients."""
        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
            t = np.where(np.isfinite(t), t, np.nan)
        return t

    # === Prediction ===

    def _linear_predictor(self, X_new: ArrayLike) -> NDArray[np.floating[Any]]:
        X_arr = as_matrix(np.atleast_2d(np.asarray(X_new, dtype=np.float64)), 'X_new')
        p = len(self.coefficients)
        if X_arr.shape[1] != p:
            raise DimensionError(
                f"X_new: expected {p} columns, got {X_arr.shape[1]}",
                expected=p,
                actual=X_arr.shape[1],
            )
        return X_arr @ self.coefficients

    # === Envelope ===

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def _coefficient_table(self) -> list[str]:
        lines = [
            "Coefficients:",
            "-" * 60,
            f"{'Index':<8} {'Estimate':>14} {'Std.Error':>12} {'t value':>10}",
            "-" * 60,
        ]
        for i, (coef, se, t) in enumerate(zip(
            self.coefficients, self.standard_errors, self.t_statistics
        )):
            se_str = f"{se:12.6f}" if not np.isnan(se) else "          NA"
            t_str = f"{t:10.3f}" if not np.isnan(t) else "        NA"
            lines.append(f"  β[{i}]: {coef:14.6f} {se_str} {t_str}")
        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name} ({self._result.method})")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return lines


@dataclass
class LinearSolution(_SolutionBase):
    """
    User-facing linear regression results.

    Wraps the backend Result and provides convenient accessors
    for all regression outputs including standard errors.
    """
    _result: Result[LinearParams]
    _design: 'Design'

    def _working_residuals(self) -> NDArray[np.floating[Any]]:
        return self.residuals

    def predict(self, X_new: ArrayLike) -> NDArray[np.floating[Any]]:
        """Predicted responses X_new β."""
        return self._linear_predictor(X_new)

    def summary(self) -> str:
        """Generate summary output."""
        lines = [
            "Linear Regression Results",
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Predictors: {self._design.p}",
            f"Weighted: {'yes' if self._design.weighted else 'no'}",
            f"SSE: {self.sse:.6f}",
            f"RMSE: {self.rmse:.6f} on {self.df_residual} DF",
            "",
        ]
        lines.extend(self._coefficient_table())
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"sse={self.sse:.4g})"
        )


@dataclass
class GLMSolution(_SolutionBase):
    """User-facing GLM results."""
    _result: Result[GLMParams]
    _design: 'Design'
    _family: 'Distribution'

    def _working_residuals(self) -> NDArray[np.floating[Any]]:
        params = self._result.params
        return params.working_response - params.linear_predictor

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        return self._result.params.linear_predictor

    @property
    def working_response(self) -> NDArray[np.floating[Any]]:
        return self._result.params.working_response

    @property
    def deviance(self) -> float:
        return self._result.params.deviance

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def family(self) -> 'Distribution':
        return self._family

    @property
    def log_likelihood(self) -> float:
        return self._family.log_likelihood(
            self._design.y, self.fitted_values, self._design.weights
        )

    def predict(
        self, X_new: ArrayLike, scale: str = 'response'
    ) -> NDArray[np.floating[Any]]:
        """
        Predictions for new rows.

        Args:
            X_new: Rows of the design (m x p)
            scale: 'response' for μ = g⁻¹(Xβ), 'link' for η = Xβ
        """
        eta = self._linear_predictor(X_new)
        if scale == 'link':
            return eta
        if scale == 'response':
            return self._family.fit(eta)
        raise ValueError(f"scale must be 'response' or 'link', got {scale!r}")

    def summary(self) -> str:
        """Generate summary output."""
        params = self._result.params
        status = "converged" if self.converged else "NOT converged"
        lines = [
            "Generalized Linear Model Results",
            "=" * 60,
            f"Family: {params.family_name}    Link: {params.link_name}",
            f"Observations: {self._design.n}",
            f"Predictors: {self._design.p}",
            f"Deviance: {self.deviance:.6f} on {self.df_residual} DF",
            f"Log-likelihood: {self.log_likelihood:.6f}",
            f"IRLS iterations: {self.n_iter} ({status})",
            "",
        ]
        lines.extend(self._coefficient_table())
        return "\n".join(lines)

    def __repr__(self) -> str:
        params = self._result.params
        return (
            f"GLMSolution(family={params.family_name!r}, link={params.link_name!r}, "
            f"n={self._design.n}, p={self._design.p}, deviance={self.deviance:.4g}, "
            f"converged={self.converged})"
        )
