"""
Dense matrix primitives.

Every function here treats its inputs as read-only and returns a freshly
allocated array: callers own their inputs, the kernel owns its outputs,
and no output ever aliases input storage.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.exceptions import DimensionError
from pyglm.core.validation import check_array, check_2d


def as_matrix(a: ArrayLike, name: str = 'a') -> NDArray[np.floating[Any]]:
    """
    Convert a matrix-like input to a 2D float64 array.

    Enforces the rectangular invariant: ragged row sequences and arrays
    that are not 2D are rejected.

    Raises:
        DimensionError: If the input is ragged or not 2D
        ValidationError: If the input is not numeric
    """
    arr = check_array(a, name)
    check_2d(arr, name)
    return arr.astype(np.float64, copy=False)


def as_vector(b: ArrayLike, name: str = 'b') -> NDArray[np.floating[Any]]:
    """Convert a vector-like input to a 1D float64 array."""
    arr = check_array(b, name)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D array, got shape {arr.shape}",
            expected=1,
            actual=arr.ndim,
        )
    return arr.astype(np.float64, copy=False)


def clone(a: ArrayLike) -> NDArray[np.floating[Any]]:
    """Deep copy of a matrix; the result never shares memory with `a`."""
    return np.array(as_matrix(a), dtype=np.float64, copy=True)


def transpose(a: ArrayLike) -> NDArray[np.floating[Any]]:
    """Transpose into a new contiguous array (not a view)."""
    return np.ascontiguousarray(as_matrix(a).T)


def multiply(a: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Matrix-matrix or matrix-vector product.

    Args:
        a: Left operand, shape (n, k)
        b: Right operand, shape (k, m) or (k,)

    Returns:
        Product of shape (n, m) or (n,)

    Raises:
        DimensionError: If the inner dimensions disagree. Checked before
            any arithmetic is done.
    """
    A = as_matrix(a, 'a')
    B = check_array(b, 'b').astype(np.float64, copy=False)
    if B.ndim not in (1, 2):
        raise DimensionError(
            f"b: expected 1D or 2D array, got {B.ndim}D",
            expected=2,
            actual=B.ndim,
        )
    if A.shape[1] != B.shape[0]:
        raise DimensionError(
            f"Conformability: a{list(A.shape)}, b{list(B.shape)}",
            expected=(A.shape[1],),
            actual=B.shape,
        )
    return A @ B
