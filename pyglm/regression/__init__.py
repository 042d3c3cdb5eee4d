"""
Linear and generalized linear models.

Public API:
    fit(X, y, ...) -> LinearSolution | GLMSolution

The fit() function is the main entry point. It handles:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Lower-level entry points return coefficients or a raw Result:
    regress_ols, regress_wls, regress_qr, fit_irls, fit_newton

Example:
    >>> from pyglm.regression import fit
    >>> result = fit(X, y, family='poisson')
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from pyglm.regression.design import Design
from pyglm.regression.links import (
    Link, IdentityLink, LogLink, LogitLink, PowerLink, resolve_link,
)
from pyglm.regression.families import (
    Distribution, Gaussian, Poisson, resolve_family,
)
from pyglm.regression.covariance import covariance, standard_errors
from pyglm.regression.solution import (
    LinearSolution, LinearParams, GLMSolution, GLMParams, NewtonParams,
)
from pyglm.regression.solvers import (
    fit, fit_irls, fit_newton, regress_ols, regress_wls, regress_qr,
)

__all__ = [
    "fit",
    "fit_irls",
    "fit_newton",
    "regress_ols",
    "regress_wls",
    "regress_qr",
    "Design",
    "Link",
    "IdentityLink",
    "LogLink",
    "LogitLink",
    "PowerLink",
    "resolve_link",
    "Distribution",
    "Gaussian",
    "Poisson",
    "resolve_family",
    "covariance",
    "standard_errors",
    "LinearSolution",
    "LinearParams",
    "GLMSolution",
    "GLMParams",
    "NewtonParams",
]
