"""
Numerical constants and tolerance tiers.

Solver defaults live here so every backend and the public API agree on
them. The ToleranceTier values are what the test suite compares against:
- exact kernels (LU/QR on well-conditioned input): near machine precision
- iterative solvers (IRLS, Newton-Raphson): relaxed
- Monte Carlo checks on samplers: statistical
"""

from dataclasses import dataclass


# Pivot magnitude below which LU treats a column as numerically zero.
LU_PIVOT_TOLERANCE = 1e-15

# IRLS defaults. rtol=0 with atol=1e-15 is effectively exact-match
# convergence of successive residual vectors.
IRLS_MAX_ITER = 100
IRLS_ATOL = 1e-15
IRLS_RTOL = 0.0

# Newton-Raphson defaults.
NEWTON_MAX_ITER = 100
NEWTON_EXPANSIONS = 100
NEWTON_SPEED_LIMIT = 1e3
NEWTON_TOL = 1e-15

# Poisson sampler switches from Knuth's method to the PA method here.
POISSON_PA_THRESHOLD = 30.0


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


KERNEL_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='kernel_fp64',
    description='Direct factorizations on well-conditioned input',
)

KERNEL_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='kernel_fp64_ill_conditioned',
    description='Direct factorizations, ill-conditioned (cond > 1e4)',
)

ITERATIVE_FP64 = ToleranceTier(
    rtol=1e-6,
    atol=1e-8,
    name='iterative_fp64',
    description='IRLS / Newton-Raphson fixed points',
)

MONTE_CARLO = ToleranceTier(
    rtol=5e-2,
    atol=5e-3,
    name='monte_carlo',
    description='Sample statistics from seeded samplers',
)


def select_tolerance(
    method: str,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select appropriate tolerance tier for a given solver method."""
    if method.startswith(('irls', 'newton')):
        return ITERATIVE_FP64
    if method.startswith('sample'):
        return MONTE_CARLO
    if is_ill_conditioned:
        return KERNEL_FP64_ILL_CONDITIONED
    return KERNEL_FP64
