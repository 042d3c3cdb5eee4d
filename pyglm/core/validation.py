"""
Boundary validators.

Every public entry point runs its inputs through these before any
arithmetic. A failed check raises immediately; nothing is clipped,
defaulted or reshaped behind the caller's back. Each helper checks one
property and names the offending argument in its message.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.exceptions import ValidationError, DimensionError, DomainError


def check_array(array: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Convert an array-like to a floating-point ndarray.

    Integer and boolean input is promoted to float64; float input keeps
    its precision.

    Raises:
        DimensionError: For ragged nested sequences
        ValidationError: For object, string or other non-numeric data
    """
    try:
        converted = np.asarray(array)
    except (ValueError, TypeError) as e:
        # recent numpy raises instead of building an object array
        if 'inhomogeneous' in str(e):
            raise DimensionError(f"{name}: rows have unequal lengths") from e
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if converted.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )
    if converted.dtype == np.bool_:
        return converted.astype(np.float64)
    if not np.issubdtype(converted.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {converted.dtype}, expected numeric data"
        )
    if not np.issubdtype(converted.dtype, np.floating):
        converted = converted.astype(np.float64)
    return converted


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Reject NaN and ±Inf, reporting how many of each were found."""
    finite = np.isfinite(array)
    if finite.all():
        return
    n_nan = int(np.isnan(array).sum())
    n_inf = int(np.isinf(array).sum())
    raise ValidationError(
        f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
    )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}",
            expected=ndim,
            actual=array.ndim,
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 2, name)


def check_square(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Require a non-empty n x n matrix, as every factorisation kernel does.

    Raises:
        DimensionError: If the array is not 2D, has no rows, or is not square
    """
    check_2d(array, name)
    rows, cols = array.shape
    if rows == 0 or rows != cols:
        raise DimensionError(
            f"{name}: expected a non-empty square matrix, got shape {array.shape}",
            expected=(rows, rows),
            actual=array.shape,
        )


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Require every array to have the same number of rows.

    The message lists each name with its length, e.g.
    "Inconsistent lengths: X=100, y=99".

    Raises:
        ValueError: If names and arrays differ in number (a caller bug)
        DimensionError: If the lengths disagree
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )
    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) <= 1:
        return
    details = ", ".join(f"{n}={length}" for n, length in zip(names, lengths))
    raise DimensionError(
        f"Inconsistent lengths: {details}",
        expected=lengths[0],
        actual=tuple(lengths),
    )


def check_min_samples(array: NDArray[np.floating[Any]], min_samples: int, name: str) -> None:
    """A design with fewer rows than columns has no unique least-squares solution."""
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_weights(weights: NDArray[np.floating[Any]], name: str) -> None:
    """
    Observation weights must be non-negative and not all zero.

    Zero weights are allowed and drop their rows from the fit.

    Raises:
        DomainError: On any negative weight, or a zero total
    """
    negative = weights < 0
    if negative.any():
        raise DomainError(
            f"{name}: {int(negative.sum())} negative weight(s); weights must be non-negative",
            name=name,
            value=float(weights.min()),
            valid_range="[0, inf)",
        )
    if not weights.sum() > 0:
        raise DomainError(
            f"{name}: weights sum to zero",
            name=name,
            value=0.0,
            valid_range="sum > 0",
        )


def check_positive(value: float, name: str) -> None:
    """Strictly positive scalar; NaN fails too."""
    if not value > 0:
        raise DomainError(
            f"{name}: must be greater than zero, got {value}",
            name=name,
            value=value,
            valid_range="(0, inf)",
        )
