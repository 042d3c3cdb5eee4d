"""
GLM link functions.

Each Link defines:
- g(μ) → η  (evaluate)
- g⁻¹(η) → μ  (inverse)
- g'(μ)  (first_derivative, used for the IRLS working response and weights)
- g''(μ)  (second_derivative)

All methods are vectorised over numpy arrays and return new arrays.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import numpy as np
from numpy.typing import NDArray

from pyglm.core.exceptions import DomainError

# Smallest positive subnormal double. The log link clamps its argument
# here so log(0) stays finite.
TINY = 5e-324


class Link(ABC):
    """Abstract link function g(μ) mapping mean to linear predictor."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def evaluate(self, mu: NDArray) -> NDArray:
        """g(μ) → η."""
        ...

    @abstractmethod
    def inverse(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) → μ."""
        ...

    @abstractmethod
    def first_derivative(self, mu: NDArray) -> NDArray:
        """g'(μ) = dη/dμ."""
        ...

    @abstractmethod
    def second_derivative(self, mu: NDArray) -> NDArray:
        """g''(μ)."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class IdentityLink(Link):
    """Identity link: g(μ) = μ. Default for the Gaussian distribution."""

    @property
    def name(self) -> str:
        return 'identity'

    def evaluate(self, mu: NDArray) -> NDArray:
        return np.array(mu, dtype=np.float64, copy=True)

    def inverse(self, eta: NDArray) -> NDArray:
        return np.array(eta, dtype=np.float64, copy=True)

    def first_derivative(self, mu: NDArray) -> NDArray:
        return np.ones_like(np.asarray(mu, dtype=np.float64))

    def second_derivative(self, mu: NDArray) -> NDArray:
        return np.zeros_like(np.asarray(mu, dtype=np.float64))


class LogLink(Link):
    """Log link: g(μ) = log(μ). Default for the Poisson distribution."""

    @property
    def name(self) -> str:
        return 'log'

    def evaluate(self, mu: NDArray) -> NDArray:
        return np.log(np.maximum(mu, TINY))

    def inverse(self, eta: NDArray) -> NDArray:
        return np.exp(np.asarray(eta, dtype=np.float64))

    def first_derivative(self, mu: NDArray) -> NDArray:
        return 1.0 / np.maximum(mu, TINY)

    def second_derivative(self, mu: NDArray) -> NDArray:
        # TINY**2 underflows to zero, so divide twice instead of squaring
        clamped = np.maximum(mu, TINY)
        return -1.0 / clamped / clamped


class LogitLink(Link):
    """
    Generalised logit link.

    g(μ) = (log(μ/(1-μ)) - intercept) / slope
    g⁻¹(η) = 1 / (1 + exp(-(slope·η + intercept)))

    With the defaults (slope 1, intercept 0) this is the ordinary logit.
    """

    def __init__(self, slope: float = 1.0, intercept: float = 0.0):
        if slope == 0:
            raise DomainError(
                "slope: must be nonzero",
                name='slope',
                value=slope,
                valid_range="(-inf, 0) U (0, inf)",
            )
        self.slope = float(slope)
        self.intercept = float(intercept)

    @property
    def name(self) -> str:
        return 'logit'

    def evaluate(self, mu: NDArray) -> NDArray:
        mu = np.asarray(mu, dtype=np.float64)
        return (np.log(mu / (1.0 - mu)) - self.intercept) / self.slope

    def inverse(self, eta: NDArray) -> NDArray:
        eta = np.asarray(eta, dtype=np.float64)
        # Clip to prevent overflow in exp
        a = np.clip(self.slope * eta + self.intercept, -500, 500)
        return 1.0 / (1.0 + np.exp(-a))

    def first_derivative(self, mu: NDArray) -> NDArray:
        mu = np.asarray(mu, dtype=np.float64)
        return 1.0 / (self.slope * mu * (1.0 - mu))

    def second_derivative(self, mu: NDArray) -> NDArray:
        mu = np.asarray(mu, dtype=np.float64)
        return (2.0 * mu - 1.0) / (self.slope * mu ** 2 * (1.0 - mu) ** 2)

    def __repr__(self) -> str:
        return f"LogitLink(slope={self.slope}, intercept={self.intercept})"


class PowerLink(Link):
    """
    Power link: g(μ) = μ^p.

    p = 1 is the identity. p = 0 is the limit that defines the log link
    and is rejected here; use LogLink instead.
    """

    def __init__(self, power: float = 1.0):
        if power == 0:
            raise DomainError(
                "power: must be nonzero (power 0 is the log link)",
                name='power',
                value=power,
                valid_range="(-inf, 0) U (0, inf)",
            )
        self.power = float(power)

    @property
    def name(self) -> str:
        return 'power'

    def evaluate(self, mu: NDArray) -> NDArray:
        return np.power(np.asarray(mu, dtype=np.float64), self.power)

    def inverse(self, eta: NDArray) -> NDArray:
        return np.power(np.asarray(eta, dtype=np.float64), 1.0 / self.power)

    def first_derivative(self, mu: NDArray) -> NDArray:
        p = self.power
        return p * np.power(np.asarray(mu, dtype=np.float64), p - 1.0)

    def second_derivative(self, mu: NDArray) -> NDArray:
        p = self.power
        return p * (p - 1.0) * np.power(np.asarray(mu, dtype=np.float64), p - 2.0)

    def __repr__(self) -> str:
        return f"PowerLink(power={self.power})"


# =====================================================================
# Link name → class mapping
# =====================================================================

_LINK_CLASSES: dict[str, type[Link]] = {
    'identity': IdentityLink,
    'log': LogLink,
    'logit': LogitLink,
    'power': PowerLink,
}


def resolve_link(link: str | Link | None, default: Link) -> Link:
    """
    Resolve a link argument to a Link instance.

    Args:
        link: Link name, Link instance (passed through), or None
        default: Returned when link is None

    Raises:
        ValueError: If the name is not recognized
        TypeError: If the argument is neither str nor Link
    """
    if link is None:
        return default
    if isinstance(link, Link):
        return link
    if isinstance(link, str):
        cls = _LINK_CLASSES.get(link.lower())
        if cls is None:
            valid = ', '.join(sorted(_LINK_CLASSES.keys()))
            raise ValueError(f"Unknown link: {link!r}. Valid links: {valid}")
        return cls()
    raise TypeError(f"link must be str or Link, got {type(link).__name__}")
