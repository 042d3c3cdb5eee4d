"""Special functions."""

from pyglm.special.factorial import FACTORIAL_MAX, factorial, log_factorial

__all__ = [
    "FACTORIAL_MAX",
    "factorial",
    "log_factorial",
]
