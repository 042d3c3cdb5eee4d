"""
Tests for the factorial and log-factorial tables.
"""

import importlib
import math
import threading

import numpy as np
import pytest

from pyglm.core.exceptions import DomainError
from pyglm.special.factorial import FACTORIAL_MAX, factorial, log_factorial

# the package re-exports the function under the module name
factorial_module = importlib.import_module("pyglm.special.factorial")


class TestFactorial:

    def test_zero(self):
        assert factorial(0) == 1.0

    @pytest.mark.parametrize("n, expected", [
        (1, 1.0), (2, 2.0), (5, 120.0), (10, 3628800.0),
    ])
    def test_small_values(self, n, expected):
        assert factorial(n) == expected

    def test_matches_math(self):
        for n in (20, 50, 100, FACTORIAL_MAX):
            np.testing.assert_allclose(factorial(n), float(math.factorial(n)), rtol=1e-12)

    def test_largest_is_finite(self):
        assert math.isfinite(factorial(FACTORIAL_MAX))

    def test_numpy_integer_accepted(self):
        assert factorial(np.int64(4)) == 24.0

    @pytest.mark.parametrize("bad", [-1, FACTORIAL_MAX + 1, 2.5, float('inf'), 'three'])
    def test_domain(self, bad):
        with pytest.raises(DomainError) as exc_info:
            factorial(bad)
        assert exc_info.value.name == 'n'

    def test_entries_never_change(self):
        first = factorial(30)
        factorial(FACTORIAL_MAX)
        assert factorial(30) == first
        assert factorial_module._factorial[30] == first


class TestLogFactorial:

    def test_zero(self):
        assert log_factorial(0) == 0.0

    def test_consistent_with_factorial(self):
        for n in (1, 3, 10, 60, 120):
            np.testing.assert_allclose(
                log_factorial(n), math.log(factorial(n)), rtol=1e-12
            )

    def test_matches_lgamma(self):
        np.testing.assert_allclose(
            log_factorial(FACTORIAL_MAX), math.lgamma(FACTORIAL_MAX + 1), rtol=1e-12
        )

    @pytest.mark.parametrize("bad", [-3, 171, 0.5])
    def test_domain(self, bad):
        with pytest.raises(DomainError):
            log_factorial(bad)

    def test_concurrent_first_access(self):
        results: list[float] = []
        errors: list[BaseException] = []

        def worker():
            try:
                results.append(log_factorial(150))
            except BaseException as e:  # surfaced by the assert below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(set(results)) == 1
        assert len(factorial_module._log_factorial) >= 151
        np.testing.assert_allclose(results[0], math.lgamma(151), rtol=1e-12)
