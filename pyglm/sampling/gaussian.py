"""Box-Muller Gaussian sampler."""

import math

import numpy as np

from pyglm.core.validation import check_positive
from pyglm.sampling._common import Sampler


class GaussianSampler(Sampler):
    """
    One normal variate per pair of uniforms:

        mean + sd * sqrt(-2 log(1 - u1)) * cos(2π (1 - u2))

    Uniforms lie in [0, 1), so 1 - u is in (0, 1] and the log is finite.
    """

    def __init__(
        self,
        mean: float = 0.0,
        standard_deviation: float = 1.0,
        rng: np.random.Generator | int | None = None,
    ):
        check_positive(standard_deviation, 'standard_deviation')
        super().__init__(rng)
        self.mean = float(mean)
        self.standard_deviation = float(standard_deviation)

    def __next__(self) -> float:
        u1 = 1.0 - self._rng.random()
        u2 = 1.0 - self._rng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return self.mean + self.standard_deviation * z

    def __repr__(self) -> str:
        return (
            f"GaussianSampler(mean={self.mean}, "
            f"standard_deviation={self.standard_deviation})"
        )
