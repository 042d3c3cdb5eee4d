"""
CPU backends for Generalized Linear Models.

CPUIRLSBackend: Iteratively Reweighted Least Squares. Each iteration
solves a weighted least squares problem on the normal equations with the
distribution's variance weights.

Algorithm:
    Initialize: μ = distribution.initial_mean(y), η = g(μ), r_prev = 0
    For iteration 1..max_iter:
        w = prior_w * distribution.weight(μ)     # 1 / (g'(μ)² V(μ))
        z = η + g'(μ) (y - μ)                    # working response
        β = WLS(X, z, w)
        η = X β
        μ = g⁻¹(η)
        r = η - y
        Check: |r_prev - r| <= atol + rtol |r| for every component

CPUNewtonBackend: Newton-Raphson maximum likelihood for a response
probability model p = f(Xβ), with step-halving when the mean squared
error gets worse.
"""

import logging
from typing import Callable
import numpy as np
from numpy.typing import NDArray
from scipy.special import expit

from pyglm.core.exceptions import SingularMatrixError
from pyglm.core.result import Result
from pyglm.core.compute.timing import Timer
from pyglm.core.compute.linalg.lu import invert_lu
from pyglm.core.compute.tolerances import (
    IRLS_MAX_ITER, IRLS_ATOL, IRLS_RTOL,
    NEWTON_MAX_ITER, NEWTON_EXPANSIONS, NEWTON_SPEED_LIMIT, NEWTON_TOL,
)
from pyglm.regression.design import Design
from pyglm.regression.families import Distribution
from pyglm.regression.least_squares import (
    normal_equations, weighted_normal_equations, wls_row_scale,
)
from pyglm.regression.solution import GLMParams, NewtonParams

logger = logging.getLogger(__name__)


def is_identity_gaussian(distribution: Distribution) -> bool:
    """Gaussian with identity link: IRLS is a fixed point at the OLS solution."""
    return distribution.name == 'gaussian' and distribution.link.name == 'identity'


class CPUIRLSBackend:
    """CPU backend using IRLS with LU-based weighted least squares."""

    @property
    def name(self) -> str:
        return 'cpu_irls'

    def solve(
        self,
        design: Design,
        distribution: Distribution,
        max_iter: int = IRLS_MAX_ITER,
        atol: float = IRLS_ATOL,
        rtol: float = IRLS_RTOL,
    ) -> Result[GLMParams]:
        """Run IRLS to fit the GLM.

        Args:
            design: Design object with X, y and prior weights
            distribution: GLM distribution (carries its link)
            max_iter: Maximum IRLS iterations
            atol: Absolute tolerance on successive residual vectors
            rtol: Relative tolerance on successive residual vectors

        Returns:
            Result[GLMParams]. Non-convergence is reported in
            Result.warnings, not raised.

        Raises:
            SingularMatrixError: If a weighted X'X is singular
        """
        timer = Timer()
        timer.start()

        if is_identity_gaussian(distribution):
            return self._solve_direct(design, distribution, timer)

        X, y, prior_w = design.X, design.y, design.weights
        n, p = design.n, design.p
        link = distribution.link

        warnings_list: list[str] = []

        with timer.section('initialize'):
            mu = distribution.initial_mean(y)
            eta = distribution.predict(mu)
            residuals_prev = np.zeros(n)

        converged = False
        n_iter = 0
        coefficients = np.zeros(p)
        xtx_inverse = np.full((p, p), np.nan)
        working_response = y.copy()
        w = prior_w.copy()

        with timer.section('irls'):
            for iteration in range(1, max_iter + 1):
                n_iter = iteration

                w = prior_w * distribution.weight(mu)
                working_response = eta + link.first_derivative(mu) * (y - mu)

                coefficients, xtx_inverse = weighted_normal_equations(
                    X, working_response, w
                )

                eta = X @ coefficients
                mu = distribution.fit(eta)

                residuals = eta - y
                delta = np.abs(residuals_prev - residuals)
                logger.debug(
                    "IRLS iteration %d: max |delta residual| = %.3e",
                    iteration, float(np.max(delta)),
                )
                if np.all(delta <= atol + rtol * np.abs(residuals)):
                    converged = True
                    break
                residuals_prev = residuals

        if not converged:
            warnings_list.append(
                f"IRLS did not converge in {max_iter} iterations "
                f"(atol={atol:g}, rtol={rtol:g})"
            )
            logger.debug("IRLS stopped without converging after %d iterations", n_iter)

        with timer.section('deviance'):
            deviance = distribution.deviance(y, mu, prior_w)
            response_residuals = y - mu
            sse = float(np.sum(prior_w * response_residuals ** 2))

        timer.stop()

        params = GLMParams(
            coefficients=coefficients,
            fitted_values=mu,
            linear_predictor=eta,
            working_response=working_response,
            working_weights=wls_row_scale(w) ** 2,
            residuals=response_residuals,
            sse=sse,
            deviance=deviance,
            rank=p,
            df_residual=n - p,
            n_iter=n_iter,
            converged=converged,
            family_name=distribution.name,
            link_name=link.name,
            xtx_inverse=xtx_inverse,
        )

        return Result(
            params=params,
            info={
                'method': 'irls_wls',
                'converged': converged,
                'iterations': n_iter,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    def _solve_direct(
        self, design: Design, distribution: Distribution, timer: Timer
    ) -> Result[GLMParams]:
        """Gaussian/identity: least squares directly, zero iterations."""
        X, y, prior_w = design.X, design.y, design.weights

        with timer.section('least_squares'):
            if design.weighted:
                coefficients, xtx_inverse = weighted_normal_equations(X, y, prior_w)
                working_weights = wls_row_scale(prior_w) ** 2
            else:
                coefficients, xtx_inverse = normal_equations(X, y)
                working_weights = np.ones(design.n)

        with timer.section('deviance'):
            eta = X @ coefficients
            mu = distribution.fit(eta)
            response_residuals = y - mu
            deviance = distribution.deviance(y, mu, prior_w)
            sse = float(np.sum(prior_w * response_residuals ** 2))

        timer.stop()

        params = GLMParams(
            coefficients=coefficients,
            fitted_values=mu,
            linear_predictor=eta,
            working_response=y.copy(),
            working_weights=working_weights,
            residuals=response_residuals,
            sse=sse,
            deviance=deviance,
            rank=design.p,
            df_residual=design.n - design.p,
            n_iter=0,
            converged=True,
            family_name=distribution.name,
            link_name=distribution.link.name,
            xtx_inverse=xtx_inverse,
        )

        return Result(
            params=params,
            info={'method': 'direct_ls', 'converged': True, 'iterations': 0},
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class CPUNewtonBackend:
    """
    Newton-Raphson for a response probability model.

    β ← β + (X'WX)⁻¹ X'(y - p),  W = diag(p(1 - p))

    W is never materialised: rows of X are scaled by p(1 - p) directly.
    A step that increases the mean squared error of p against y is halved
    toward the previous β and retried; the best β seen is what is
    returned, whatever stops the iteration.
    """

    @property
    def name(self) -> str:
        return 'cpu_newton'

    def solve(
        self,
        design: Design,
        inverse_link: Callable[[NDArray], NDArray] = expit,
        max_iter: int = NEWTON_MAX_ITER,
        expansions: int = NEWTON_EXPANSIONS,
        speed_limit: float = NEWTON_SPEED_LIMIT,
        tol: float = NEWTON_TOL,
    ) -> Result[NewtonParams]:
        """
        Args:
            design: Design object with X and y (y typically in [0, 1])
            inverse_link: Maps the linear predictor to probabilities
            max_iter: Maximum Newton steps
            expansions: Consecutive non-improving steps tolerated
            speed_limit: Stop when any |Δβ_j| / |β_j| exceeds this
            tol: Stop when no |Δβ_j| exceeds this

        Returns:
            Result[NewtonParams]; info['stop_reason'] says what ended it.
        """
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        p = design.p

        beta = np.zeros(p)
        best_beta = beta.copy()
        prob = inverse_link(X @ beta)
        mse = float(np.mean((prob - y) ** 2))
        worse = 0
        stop_reason = 'max_iter'
        n_iter = 0

        with timer.section('newton'):
            for iteration in range(1, max_iter + 1):
                n_iter = iteration

                wx = X * (prob * (1.0 - prob))[:, np.newaxis]
                try:
                    step = invert_lu(X.T @ wx) @ (X.T @ (y - prob))
                except SingularMatrixError as e:
                    logger.debug("Newton step %d: X'WX singular (%s)", iteration, e)
                    stop_reason = 'singular'
                    break
                new_beta = beta + step

                change = np.abs(new_beta - beta)
                if not np.any(change > tol):
                    stop_reason = 'tolerance'
                    break
                nonzero = beta != 0.0
                if np.any(change[nonzero] / np.abs(beta[nonzero]) > speed_limit):
                    stop_reason = 'speed_limit'
                    break

                new_prob = inverse_link(X @ new_beta)
                new_mse = float(np.mean((new_prob - y) ** 2))
                logger.debug("Newton step %d: mse = %.6e", iteration, new_mse)

                if new_mse > mse:
                    worse += 1
                    if worse > expansions:
                        stop_reason = 'expansions'
                        break
                    beta = 0.5 * (beta + new_beta)
                    prob = inverse_link(X @ beta)
                    continue

                beta = new_beta
                best_beta = new_beta.copy()
                prob = new_prob
                mse = new_mse
                worse = 0

        if stop_reason == 'tolerance' and not np.array_equal(beta, best_beta):
            # tolerance met at a halved step; the best-MSE iterate is what is returned
            stop_reason = 'best_mse'
        converged = stop_reason == 'tolerance'
        warnings_list: list[str] = []
        if not converged:
            warnings_list.append(
                f"Newton-Raphson stopped before converging ({stop_reason}) "
                f"after {n_iter} iterations"
            )

        timer.stop()

        params = NewtonParams(
            coefficients=best_beta,
            fitted_values=inverse_link(X @ best_beta),
            mse=mse,
            n_iter=n_iter,
            converged=converged,
            stop_reason=stop_reason,
        )

        return Result(
            params=params,
            info={
                'method': 'newton_raphson',
                'converged': converged,
                'iterations': n_iter,
                'stop_reason': stop_reason,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
