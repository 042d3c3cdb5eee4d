"""
Poisson variate samplers.

Two generators with different cost profiles:
- Knuth's multiplication method: O(mean) uniforms per draw, exact,
  used for small means.
- Atkinson's PA method (ratio-of-uniforms style rejection against a
  logistic envelope): roughly constant cost, requires mean >= 30.

References:
    Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2 (3rd ed.)
    Atkinson, A. C. (1979). The computer generation of Poisson random
        variables. Applied Statistics 28(1), 29-35.
"""

import math

import numpy as np
from scipy.special import gammaln

from pyglm.core.compute.tolerances import POISSON_PA_THRESHOLD
from pyglm.core.exceptions import DomainError
from pyglm.core.validation import check_positive
from pyglm.sampling._common import Sampler
from pyglm.special.factorial import FACTORIAL_MAX, log_factorial


def _log_factorial(n: int) -> float:
    # The PA method can propose n past the factorial table for large means
    if n <= FACTORIAL_MAX:
        return log_factorial(n)
    return float(gammaln(n + 1.0))


class KnuthPoissonSampler(Sampler):
    """
    Knuth's method: multiply uniforms until the running product falls
    below exp(-mean); the number of factors before that is the variate.
    """

    dtype = np.int64

    def __init__(self, mean: float, rng: np.random.Generator | int | None = None):
        check_positive(mean, 'mean')
        super().__init__(rng)
        self.mean = float(mean)
        self._limit = math.exp(-self.mean)

    def __next__(self) -> int:
        count = 0
        product = self._rng.random()
        while product >= self._limit:
            count += 1
            product *= self._rng.random()
        return count

    def __repr__(self) -> str:
        return f"KnuthPoissonSampler(mean={self.mean})"


class RatioOfUniformsPoissonSampler(Sampler):
    """
    Atkinson's PA rejection sampler.

    Proposals come from a logistic distribution matched to the Poisson
    mean and variance; the acceptance test compares against the exact
    Poisson log-density.
    """

    dtype = np.int64

    def __init__(self, mean: float, rng: np.random.Generator | int | None = None):
        check_positive(mean, 'mean')
        if mean < POISSON_PA_THRESHOLD:
            raise DomainError(
                f"mean: PA sampler requires mean >= {POISSON_PA_THRESHOLD:g}, "
                f"got {mean}",
                name='mean',
                value=mean,
                valid_range=f"[{POISSON_PA_THRESHOLD:g}, inf)",
            )
        super().__init__(rng)
        self.mean = float(mean)
        self._beta = math.pi / math.sqrt(3.0 * self.mean)
        self._alpha = self._beta * self.mean
        self._k = math.log(0.767 - 3.36 / self.mean) - self.mean - math.log(self._beta)
        self._log_mean = math.log(self.mean)

    def __next__(self) -> int:
        while True:
            u = self._rng.random()
            if u == 0.0:
                continue
            x = (self._alpha - math.log((1.0 - u) / u)) / self._beta
            if x < -0.5:
                continue

            n = int(math.floor(x + 0.5))
            y = self._alpha - self._beta * x
            v = self._rng.random()
            if v == 0.0:
                return n

            # y + log(v / (1 + e^y)^2), without overflowing e^y
            left = y + math.log(v) - 2.0 * float(np.logaddexp(0.0, y))
            right = self._k + n * self._log_mean - _log_factorial(n)
            if left <= right:
                return n

    def __repr__(self) -> str:
        return f"RatioOfUniformsPoissonSampler(mean={self.mean})"


def poisson_sampler(
    mean: float,
    rng: np.random.Generator | int | None = None,
) -> Sampler:
    """Knuth below the PA threshold, PA at or above it."""
    if mean < POISSON_PA_THRESHOLD:
        return KnuthPoissonSampler(mean, rng)
    return RatioOfUniformsPoissonSampler(mean, rng)
