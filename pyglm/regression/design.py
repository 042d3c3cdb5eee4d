"""
Regression Design.

Design holds the validated inputs of a fit: the design matrix X, the
response y and the observation weights. Every check on the inputs happens
here, once, so backends can assume well-formed data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyglm.core.validation import (
    check_array, check_finite, check_2d, check_1d,
    check_consistent_length, check_min_samples, check_weights,
)


@dataclass(frozen=True)
class Design:
    """
    Regression design specification.

    Immutable after construction. X and y are private copies; mutating
    the caller's arrays afterwards does not affect the design.

    Construction:
        Design.from_arrays(X, y)                  # unit weights
        Design.from_arrays(X, y, weights=w)       # observation weights
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _weights: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _weighted: bool = False

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        weights: ArrayLike | None = None,
    ) -> Design:
        """Build Design directly from arrays."""
        X_arr = np.array(check_array(X, 'X'), dtype=np.float64, copy=True)
        y_arr = np.array(check_array(y, 'y'), dtype=np.float64, copy=True)

        # Ensure correct shapes
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        # Validate
        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_finite(X_arr, 'X')
        check_finite(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))

        n, p = X_arr.shape
        check_min_samples(X_arr, p, 'X')

        if weights is None:
            w_arr = np.ones(n)
            weighted = False
        else:
            w_arr = np.array(check_array(weights, 'weights'), dtype=np.float64, copy=True)
            check_1d(w_arr, 'weights')
            check_finite(w_arr, 'weights')
            check_consistent_length(X_arr, w_arr, names=('X', 'weights'))
            check_weights(w_arr, 'weights')
            weighted = True

        return cls(_X=X_arr, _y=y_arr, _weights=w_arr, _n=n, _p=p, _weighted=weighted)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        """Observation weights (n,); all ones when none were given."""
        return self._weights

    @property
    def weighted(self) -> bool:
        """Whether explicit weights were supplied."""
        return self._weighted

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of predictors."""
        return self._p

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X."""
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self._X.T @ self._y
