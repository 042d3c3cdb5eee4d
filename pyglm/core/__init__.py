"""
Core infrastructure for pyglm.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances and linear algebra kernels
"""

from pyglm.core.result import Result
from pyglm.core.exceptions import (
    PyGLMError,
    ValidationError,
    DimensionError,
    DomainError,
    NumericalError,
    SingularMatrixError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyGLMError",
    "ValidationError",
    "DimensionError",
    "DomainError",
    "NumericalError",
    "SingularMatrixError",
]
