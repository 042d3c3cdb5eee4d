"""
Linear algebra kernels for pyglm.

All functions follow these conventions:
    - Inputs are never modified; outputs are freshly allocated
    - Shapes are checked before any arithmetic
    - Each factorization returns a structured result dataclass
    - Errors are raised immediately with clear messages

Submodules:
    matrix: Conversion, copy, transpose and product
    lu: LU decomposition with partial pivoting, solve, inverse, determinant
    qr: Householder QR decomposition and least squares solve
"""

from pyglm.core.compute.linalg.matrix import (
    as_matrix,
    as_vector,
    clone,
    transpose,
    multiply,
)
from pyglm.core.compute.linalg.lu import (
    LUResult,
    decompose_lu,
    solve_lu,
    invert_lu,
    determinant,
)
from pyglm.core.compute.linalg.qr import (
    QRResult,
    decompose_qr,
    invert_upper,
    qr_solve,
)

__all__ = [
    # Matrix primitives
    "as_matrix",
    "as_vector",
    "clone",
    "transpose",
    "multiply",
    # LU decomposition
    "LUResult",
    "decompose_lu",
    "solve_lu",
    "invert_lu",
    "determinant",
    # QR decomposition
    "QRResult",
    "decompose_qr",
    "invert_upper",
    "qr_solve",
]
