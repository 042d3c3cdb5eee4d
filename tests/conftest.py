"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Simple regression dataset for basic tests."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def three_point_line():
    """[[1,1],[1,2],[1,3]] against [2, 2.9, 4.1]: intercept 0.9, slope 1.05."""
    X = np.array([[1.0, 1.0], [1.0, 2.0], [1.0, 3.0]])
    y = np.array([2.0, 2.9, 4.1])
    return X, y


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def poisson_data(rng):
    """Counts from log(μ) = 0.5 + 0.8 x with an intercept column."""
    n = 200
    x = rng.uniform(-1.0, 1.0, n)
    X = np.column_stack([np.ones(n), x])
    beta_true = np.array([0.5, 0.8])
    y = rng.poisson(np.exp(X @ beta_true)).astype(np.float64)
    return X, y, beta_true


@pytest.fixture
def logistic_data(rng):
    """Binary responses from logit(p) = -0.5 + 1.5 x."""
    n = 500
    x = rng.standard_normal(n)
    X = np.column_stack([np.ones(n), x])
    beta_true = np.array([-0.5, 1.5])
    p = 1.0 / (1.0 + np.exp(-(X @ beta_true)))
    y = (rng.uniform(size=n) < p).astype(np.float64)
    return X, y, beta_true
