"""
GLM distributions.

Each Distribution defines:
- A variance function V(μ) and the IRLS weight 1 / (g'(μ)² V(μ))
- A default link function g(μ) mapping the mean to the linear predictor
- A deviance function for assessing model fit
- A log-likelihood function
- An initialization function for IRLS starting values

A Distribution is also a concrete probability distribution with fixed
parameters (its own mean, and standard deviation for the Gaussian): it
reports moments, evaluates its density, and draws variates from a
seeded numpy Generator.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import math
import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln

from pyglm.core.exceptions import DomainError
from pyglm.core.validation import check_positive
from pyglm.regression.links import Link, IdentityLink, LogLink, resolve_link
from pyglm.sampling._common import as_generator
from pyglm.sampling.gaussian import GaussianSampler
from pyglm.sampling.poisson import poisson_sampler
from pyglm.special.factorial import FACTORIAL_MAX, log_factorial


# =====================================================================
# Distribution base class
# =====================================================================

class Distribution(ABC):
    """
    GLM distribution specification.

    Defines the relationship between the mean and variance of the
    response distribution, along with a link function.
    """

    def __init__(
        self,
        link: str | Link | None = None,
        rng: np.random.Generator | int | None = None,
    ):
        self._link = resolve_link(link, self._default_link())
        self._rng = as_generator(rng)

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def _default_link(self) -> Link:
        ...

    @property
    def link(self) -> Link:
        return self._link

    # -----------------------------------------------------------------
    # GLM callbacks
    # -----------------------------------------------------------------

    @abstractmethod
    def variance_function(self, mu: NDArray) -> NDArray:
        """Variance function V(μ)."""
        ...

    def initial_mean(self, y: NDArray) -> NDArray:
        """IRLS starting values: halfway between each y and the mean of y."""
        y = np.asarray(y, dtype=np.float64)
        return 0.5 * (y + np.mean(y))

    def predict(self, mu: NDArray) -> NDArray:
        """Linear predictor η = g(μ)."""
        return self._link.evaluate(mu)

    def fit(self, eta: NDArray) -> NDArray:
        """Mean response μ = g⁻¹(η)."""
        return self._link.inverse(eta)

    def weight(self, mu: NDArray) -> NDArray:
        """IRLS variance weight 1 / (g'(μ)² V(μ))."""
        derivative = self._link.first_derivative(mu)
        return 1.0 / (derivative * derivative * self.variance_function(mu))

    @abstractmethod
    def deviance(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        """Total (scaled) deviance of the fitted means μ against y."""
        ...

    @abstractmethod
    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        ...

    # -----------------------------------------------------------------
    # Distribution with fixed parameters
    # -----------------------------------------------------------------

    @property
    @abstractmethod
    def mean(self) -> float:
        ...

    @property
    @abstractmethod
    def variance(self) -> float:
        ...

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    @property
    @abstractmethod
    def entropy(self) -> float:
        ...

    @property
    @abstractmethod
    def skewness(self) -> float:
        ...

    @property
    @abstractmethod
    def kurtosis(self) -> float:
        """Excess kurtosis."""
        ...

    @property
    @abstractmethod
    def mode(self) -> float:
        ...

    @property
    @abstractmethod
    def median(self) -> float:
        ...

    @property
    @abstractmethod
    def minimum(self) -> float:
        ...

    @property
    @abstractmethod
    def maximum(self) -> float:
        ...

    @abstractmethod
    def log_probability(self, x: float) -> float:
        ...

    def probability(self, x: float) -> float:
        return math.exp(self.log_probability(x))

    @abstractmethod
    def draw(self, count: int | None = None):
        """One variate, or an array of `count` variates."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(link={self._link.name!r})"


# =====================================================================
# Concrete distributions
# =====================================================================

class Gaussian(Distribution):
    """Gaussian (Normal) distribution. Default link: identity.

    V(μ) = σ²
    Deviance = Σ wt_i * (y_i - μ_i)² / scale  (= RSS for identity link)
    """

    def __init__(
        self,
        link: str | Link | None = None,
        mean: float = 0.0,
        standard_deviation: float = 1.0,
        rng: np.random.Generator | int | None = None,
    ):
        check_positive(standard_deviation, 'standard_deviation')
        super().__init__(link, rng)
        self._mean = float(mean)
        self._sd = float(standard_deviation)
        self._sampler = GaussianSampler(self._mean, self._sd, self._rng)

    @property
    def name(self) -> str:
        return 'gaussian'

    def _default_link(self) -> Link:
        return IdentityLink()

    def variance_function(self, mu: NDArray) -> NDArray:
        return np.full_like(np.asarray(mu, dtype=np.float64), self.variance)

    def deviance(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        return float(np.sum(wt * (y - mu) ** 2)) / scale

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        # Σ -0.5 * wt_i * ((y_i - μ_i)² / scale + log(2π scale))
        common = math.log(2.0 * math.pi * scale)
        return float(-0.5 * np.sum(wt * ((y - mu) ** 2 / scale + common)))

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        return self._sd * self._sd

    @property
    def standard_deviation(self) -> float:
        return self._sd

    @property
    def entropy(self) -> float:
        return 0.5 * (1.0 + math.log(2.0 * math.pi * self.variance))

    @property
    def skewness(self) -> float:
        return 0.0

    @property
    def kurtosis(self) -> float:
        return 0.0

    @property
    def mode(self) -> float:
        return self._mean

    @property
    def median(self) -> float:
        return self._mean

    @property
    def minimum(self) -> float:
        return -math.inf

    @property
    def maximum(self) -> float:
        return math.inf

    def log_probability(self, x: float) -> float:
        z = (x - self._mean) / self._sd
        return -0.5 * z * z - math.log(self._sd) - 0.5 * math.log(2.0 * math.pi)

    def draw(self, count: int | None = None):
        if count is None:
            return next(self._sampler)
        return self._sampler.draw(count)

    def __repr__(self) -> str:
        return (
            f"Gaussian(link={self._link.name!r}, mean={self._mean}, "
            f"standard_deviation={self._sd})"
        )


class Poisson(Distribution):
    """Poisson distribution. Default link: log.

    V(μ) = |μ|
    Deviance = 2 * Σ wt_i * [y_i log(y_i/μ_i) - (y_i - μ_i)] / scale
    """

    def __init__(
        self,
        link: str | Link | None = None,
        mean: float = 1.0,
        rng: np.random.Generator | int | None = None,
    ):
        check_positive(mean, 'mean')
        super().__init__(link, rng)
        self._mean = float(mean)
        # Knuth below the PA threshold, PA at or above it
        self._sampler = poisson_sampler(self._mean, self._rng)

    @property
    def name(self) -> str:
        return 'poisson'

    def _default_link(self) -> Link:
        return LogLink()

    def variance_function(self, mu: NDArray) -> NDArray:
        return np.abs(mu)

    def weight(self, mu: NDArray) -> NDArray:
        # g' is evaluated at |μ| so negative IRLS excursions keep a valid weight
        abs_mu = np.abs(mu)
        derivative = self._link.first_derivative(abs_mu)
        return 1.0 / (derivative * derivative * abs_mu)

    def deviance(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        # Unit deviance: 2 * [y*log(y/mu) - (y - mu)]
        # with 0*log(0) = 0
        with np.errstate(divide='ignore', invalid='ignore'):
            term = np.where(y > 0, y * np.log(y / mu), 0.0)
        return 2.0 * float(np.sum(wt * (term - (y - mu)))) / scale

    def log_likelihood(
        self, y: NDArray, mu: NDArray, wt: NDArray, scale: float = 1.0
    ) -> float:
        # Σ wt_i * [y_i * log(μ_i) - μ_i - log(y_i!)]
        with np.errstate(divide='ignore', invalid='ignore'):
            term = np.where(y > 0, y * np.log(mu), 0.0)
        return float(np.sum(wt * (term - mu - gammaln(y + 1)))) / scale

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        return self._mean

    @property
    def entropy(self) -> float:
        lam = self._mean
        return (
            0.5 * math.log(2.0 * math.pi * math.e * lam)
            - 1.0 / (12.0 * lam)
            - 1.0 / (24.0 * lam ** 2)
            - 19.0 / (360.0 * lam ** 3)
        )

    @property
    def skewness(self) -> float:
        return 1.0 / self.standard_deviation

    @property
    def kurtosis(self) -> float:
        return 1.0 / self._mean

    @property
    def mode(self) -> float:
        return float(math.floor(self._mean))

    @property
    def median(self) -> float:
        return float(math.floor(self._mean + 1.0 / 3.0 - 0.02 / self._mean))

    @property
    def minimum(self) -> float:
        return 0.0

    @property
    def maximum(self) -> float:
        return math.inf

    def log_probability(self, x: float) -> float:
        """
        log P(X = x) = x log(mean) - log(x!) - mean, with x truncated to
        an integer.

        Raises:
            DomainError: If x lies outside [0, 170]
        """
        if not 0 <= x <= FACTORIAL_MAX:
            raise DomainError(
                f"x: must lie in [0, {FACTORIAL_MAX}], got {x}",
                name='x',
                value=x,
                valid_range=f"[0, {FACTORIAL_MAX}]",
            )
        k = int(x)
        return k * math.log(self._mean) - log_factorial(k) - self._mean

    def draw(self, count: int | None = None):
        if count is None:
            return next(self._sampler)
        return self._sampler.draw(count)

    def __repr__(self) -> str:
        return f"Poisson(link={self._link.name!r}, mean={self._mean})"


# =====================================================================
# Distribution name → class mapping + resolver
# =====================================================================

_FAMILY_CLASSES: dict[str, type[Distribution]] = {
    'gaussian': Gaussian,
    'normal': Gaussian,
    'poisson': Poisson,
}


def resolve_family(
    family: str | Distribution,
    link: str | Link | None = None,
) -> Distribution:
    """Resolve a family argument to a Distribution instance.

    Args:
        family: Either a string name ('gaussian', 'poisson') or a
                Distribution instance (passed through).
        link: Link for a family given by name; ignored for instances.

    Returns:
        Distribution instance.

    Raises:
        ValueError: If string name is not recognized.
        TypeError: If argument is neither string nor Distribution.
    """
    if isinstance(family, Distribution):
        return family
    if isinstance(family, str):
        cls = _FAMILY_CLASSES.get(family.lower())
        if cls is None:
            valid = ', '.join(
                sorted(k for k in _FAMILY_CLASSES.keys() if k != 'normal')
            )
            raise ValueError(
                f"Unknown family: {family!r}. Valid families: {valid}"
            )
        return cls(link=link)
    raise TypeError(
        f"family must be str or Distribution, got {type(family).__name__}"
    )
