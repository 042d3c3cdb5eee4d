"""
Shared sampler machinery.

A sampler is an explicit, infinite, non-restartable state machine over a
numpy Generator: every call to next() consumes uniforms and advances the
state. Independent samplers never share a Generator unless the caller
passes the same one in.
"""

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray


def as_generator(rng: np.random.Generator | int | None) -> np.random.Generator:
    """Accept a Generator (used as-is), a seed, or None (fresh entropy)."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


class Sampler(ABC):
    """Infinite iterator of variates."""

    dtype: type = np.float64

    def __init__(self, rng: np.random.Generator | int | None = None):
        self._rng = as_generator(rng)

    @abstractmethod
    def __next__(self) -> float:
        ...

    def __iter__(self):
        return self

    def draw(self, count: int) -> NDArray:
        """The next `count` variates as an array."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        return np.array([next(self) for _ in range(count)], dtype=self.dtype)
