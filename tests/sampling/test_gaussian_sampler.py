"""
Box-Muller sampler tests.
"""

import numpy as np
import pytest
from scipy import stats

from pyglm.core.exceptions import DomainError
from pyglm.sampling import GaussianSampler


class TestGaussianSampler:

    def test_standard_moments(self):
        sample = GaussianSampler(rng=42).draw(50_000)
        assert abs(np.mean(sample)) < 0.02
        assert np.std(sample) == pytest.approx(1.0, rel=0.02)
        assert abs(stats.skew(sample)) < 0.05
        assert abs(stats.kurtosis(sample)) < 0.1

    def test_location_and_scale(self):
        sample = GaussianSampler(mean=10.0, standard_deviation=0.5, rng=1).draw(20_000)
        assert np.mean(sample) == pytest.approx(10.0, abs=0.02)
        assert np.std(sample) == pytest.approx(0.5, rel=0.03)

    def test_distribution(self):
        sample = GaussianSampler(rng=8).draw(5_000)
        assert stats.kstest(sample, 'norm').pvalue > 0.001

    def test_finite(self):
        sample = GaussianSampler(rng=2).draw(10_000)
        assert np.all(np.isfinite(sample))
        assert sample.dtype == np.float64

    @pytest.mark.parametrize("sd", [0.0, -1.0])
    def test_scale_must_be_positive(self, sd):
        with pytest.raises(DomainError):
            GaussianSampler(standard_deviation=sd)

    def test_repr(self):
        assert repr(GaussianSampler(1.0, 2.0)) == (
            "GaussianSampler(mean=1.0, standard_deviation=2.0)"
        )
