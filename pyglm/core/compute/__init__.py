"""
Shared compute infrastructure for pyglm.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Solver defaults and tolerance tiers
    linalg: Linear algebra kernels (LU, QR, products)
"""

from pyglm.core.compute.timing import Timer, timed

__all__ = [
    # Timing
    "Timer",
    "timed",
]
