"""
Variate samplers.

Samplers are infinite iterators over a numpy Generator:
    KnuthPoissonSampler: Poisson, small means
    RatioOfUniformsPoissonSampler: Poisson, mean >= 30 (Atkinson's PA)
    GaussianSampler: Normal, Box-Muller
"""

from pyglm.sampling._common import Sampler
from pyglm.sampling.poisson import (
    KnuthPoissonSampler,
    RatioOfUniformsPoissonSampler,
    poisson_sampler,
)
from pyglm.sampling.gaussian import GaussianSampler

__all__ = [
    "Sampler",
    "KnuthPoissonSampler",
    "RatioOfUniformsPoissonSampler",
    "poisson_sampler",
    "GaussianSampler",
]
