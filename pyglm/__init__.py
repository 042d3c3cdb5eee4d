"""
pyglm: dense linear algebra and generalized linear models for Python.

LU and Householder QR kernels, ordinary and weighted least squares, GLM
fitting by IRLS over pluggable distributions and links, a Newton-Raphson
probability-model solver, and Poisson/Gaussian variate samplers.

Submodules:
    core: Result envelope, exceptions, validation, linear algebra kernels
    special: Factorial and log-factorial tables
    regression: Linear models and GLMs
    sampling: Poisson and Gaussian samplers
"""

__version__ = "0.1.0"

from pyglm import core
from pyglm import special
from pyglm import regression
from pyglm import sampling
from pyglm.regression import fit

__all__ = [
    "__version__",
    "core",
    "special",
    "regression",
    "sampling",
    "fit",
]
