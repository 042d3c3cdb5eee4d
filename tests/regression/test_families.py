"""
Distribution tests: GLM callbacks (variance, weights, deviance,
log-likelihood), fixed-parameter moments and densities, draws, and
family resolution.
"""

import math

import numpy as np
import pytest
from scipy import stats

from pyglm.core.exceptions import DomainError
from pyglm.regression.families import Gaussian, Poisson, resolve_family
from pyglm.regression.links import IdentityLink, LogLink
from pyglm.sampling.poisson import KnuthPoissonSampler, RatioOfUniformsPoissonSampler


# =====================================================================
# GLM callbacks
# =====================================================================

class TestGLMCallbacks:

    def test_default_links(self):
        assert isinstance(Gaussian().link, IdentityLink)
        assert isinstance(Poisson().link, LogLink)

    def test_link_override(self):
        assert Poisson(link='identity').link.name == 'identity'

    def test_initial_mean(self):
        np.testing.assert_allclose(Poisson().initial_mean(np.array([0.0, 2.0])), [0.5, 1.5])

    def test_gaussian_variance_function(self):
        fam = Gaussian(standard_deviation=2.0)
        np.testing.assert_array_equal(fam.variance_function(np.array([1.0, 5.0])), [4.0, 4.0])

    def test_gaussian_identity_weight(self):
        mu = np.array([-1.0, 0.0, 2.0])
        np.testing.assert_allclose(Gaussian().weight(mu), np.ones(3))

    def test_poisson_log_weight_is_mean(self):
        mu = np.array([0.5, 1.0, 4.0])
        np.testing.assert_allclose(Poisson().weight(mu), mu, rtol=1e-12)

    def test_poisson_weight_uses_absolute_mean(self):
        np.testing.assert_allclose(Poisson().weight(np.array([-2.0])), [2.0], rtol=1e-12)

    def test_predict_and_fit_are_link_maps(self):
        fam = Poisson()
        mu = np.array([0.5, 2.0])
        np.testing.assert_allclose(fam.predict(mu), np.log(mu))
        np.testing.assert_allclose(fam.fit(np.log(mu)), mu)


class TestDeviance:

    def test_gaussian_is_weighted_rss(self):
        y = np.array([1.0, 2.0, 4.0])
        mu = np.array([1.5, 1.5, 3.0])
        wt = np.array([1.0, 2.0, 1.0])
        assert Gaussian().deviance(y, mu, wt) == pytest.approx(0.25 + 0.5 + 1.0)
        assert Gaussian().deviance(y, mu, wt, scale=2.0) == pytest.approx(0.875)

    def test_poisson_with_zero_counts(self):
        y = np.array([0.0, 1.0, 3.0])
        mu = np.array([0.5, 1.5, 2.0])
        wt = np.ones(3)
        expected = 2.0 * ((0.0 - (0.0 - 0.5))
                          + (1.0 * np.log(1.0 / 1.5) - (1.0 - 1.5))
                          + (3.0 * np.log(3.0 / 2.0) - (3.0 - 2.0)))
        assert Poisson().deviance(y, mu, wt) == pytest.approx(expected, rel=1e-12)

    def test_perfect_fit_has_zero_deviance(self):
        y = np.array([0.0, 2.0, 5.0])
        mu = np.where(y > 0, y, 1e-300)
        assert Poisson().deviance(y, mu, np.ones(3)) == pytest.approx(0.0, abs=1e-12)


class TestLogLikelihood:

    def test_gaussian_matches_scipy(self, rng):
        y = rng.standard_normal(20)
        mu = rng.standard_normal(20)
        expected = stats.norm.logpdf(y, loc=mu, scale=1.0).sum()
        assert Gaussian().log_likelihood(y, mu, np.ones(20)) == pytest.approx(expected)

    def test_poisson_matches_scipy(self, rng):
        y = rng.poisson(3.0, 30).astype(np.float64)
        mu = rng.uniform(1.0, 5.0, 30)
        expected = stats.poisson.logpmf(y, mu).sum()
        assert Poisson().log_likelihood(y, mu, np.ones(30)) == pytest.approx(expected)


# =====================================================================
# Fixed-parameter distributions
# =====================================================================

class TestPoissonDistribution:

    def test_probability_of_zero_at_unit_mean(self):
        fam = Poisson(mean=1.0)
        assert fam.log_probability(0) == pytest.approx(-1.0)
        assert fam.probability(0) == pytest.approx(math.exp(-1.0))

    def test_pmf_matches_scipy(self):
        fam = Poisson(mean=4.5)
        for k in range(0, 20):
            assert fam.log_probability(k) == pytest.approx(
                stats.poisson.logpmf(k, 4.5), rel=1e-10
            )

    def test_argument_is_truncated(self):
        fam = Poisson(mean=2.0)
        assert fam.log_probability(3.7) == fam.log_probability(3)

    @pytest.mark.parametrize("x", [-1, -0.5, 171, 1e6])
    def test_argument_domain(self, x):
        with pytest.raises(DomainError):
            Poisson(mean=2.0).log_probability(x)

    def test_upper_edge_accepted(self):
        assert math.isfinite(Poisson(mean=100.0).log_probability(170))

    def test_moments(self):
        fam = Poisson(mean=4.0)
        assert fam.mean == 4.0
        assert fam.variance == 4.0
        assert fam.standard_deviation == 2.0
        assert fam.skewness == pytest.approx(0.5)
        assert fam.kurtosis == pytest.approx(0.25)
        assert fam.mode == 4.0
        assert fam.median == 4.0
        assert fam.minimum == 0.0
        assert fam.maximum == math.inf

    def test_entropy_close_to_exact(self):
        lam = 20.0
        ks = np.arange(0, 200)
        pmf = stats.poisson.pmf(ks, lam)
        exact = -np.sum(pmf[pmf > 0] * np.log(pmf[pmf > 0]))
        assert Poisson(mean=lam).entropy == pytest.approx(exact, rel=1e-4)

    @pytest.mark.parametrize("mean", [0.0, -1.0])
    def test_mean_must_be_positive(self, mean):
        with pytest.raises(DomainError):
            Poisson(mean=mean)


class TestGaussianDistribution:

    def test_density_matches_scipy(self):
        fam = Gaussian(mean=1.0, standard_deviation=2.0)
        for x in (-3.0, 0.0, 1.0, 4.5):
            assert fam.log_probability(x) == pytest.approx(
                stats.norm.logpdf(x, loc=1.0, scale=2.0)
            )
        assert fam.probability(1.0) == pytest.approx(stats.norm.pdf(1.0, 1.0, 2.0))

    def test_moments(self):
        fam = Gaussian(mean=-2.0, standard_deviation=3.0)
        assert fam.variance == 9.0
        assert fam.standard_deviation == 3.0
        assert fam.skewness == 0.0
        assert fam.kurtosis == 0.0
        assert fam.mode == fam.median == -2.0
        assert fam.minimum == -math.inf
        assert fam.maximum == math.inf
        assert fam.entropy == pytest.approx(stats.norm(scale=3.0).entropy())

    @pytest.mark.parametrize("sd", [0.0, -1.0])
    def test_standard_deviation_must_be_positive(self, sd):
        with pytest.raises(DomainError):
            Gaussian(standard_deviation=sd)


class TestDraws:

    def test_poisson_draw_types(self):
        fam = Poisson(mean=3.0, rng=0)
        assert isinstance(fam.draw(), int)
        sample = fam.draw(10)
        assert sample.shape == (10,)
        assert sample.dtype == np.int64

    def test_same_seed_same_draws(self):
        a = Poisson(mean=3.0, rng=7).draw(50)
        b = Poisson(mean=3.0, rng=7).draw(50)
        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("mean", [3.0, 45.0])
    def test_poisson_sample_mean(self, mean):
        sample = Poisson(mean=mean, rng=11).draw(5000)
        assert np.mean(sample) == pytest.approx(mean, rel=0.05)
        assert np.all(sample >= 0)

    @pytest.mark.parametrize("mean, sampler_type", [
        (3.0, KnuthPoissonSampler),
        (29.5, KnuthPoissonSampler),
        (30.0, RatioOfUniformsPoissonSampler),
        (45.0, RatioOfUniformsPoissonSampler),
    ])
    def test_poisson_keeps_only_the_sampler_it_draws_from(self, mean, sampler_type):
        fam = Poisson(mean=mean, rng=0)
        assert type(fam._sampler) is sampler_type

    def test_gaussian_sample_moments(self):
        sample = Gaussian(mean=5.0, standard_deviation=2.0, rng=3).draw(5000)
        assert np.mean(sample) == pytest.approx(5.0, abs=0.15)
        assert np.std(sample) == pytest.approx(2.0, rel=0.05)

    def test_shared_generator(self):
        gen = np.random.default_rng(1)
        fam = Gaussian(rng=gen)
        fam.draw(3)
        assert gen.bit_generator.state != np.random.default_rng(1).bit_generator.state


# =====================================================================
# Resolution
# =====================================================================

class TestResolveFamily:

    @pytest.mark.parametrize("name, cls", [
        ('gaussian', Gaussian), ('normal', Gaussian),
        ('Poisson', Poisson), ('poisson', Poisson),
    ])
    def test_by_name(self, name, cls):
        assert isinstance(resolve_family(name), cls)

    def test_link_by_name(self):
        assert resolve_family('gaussian', 'log').link.name == 'log'

    def test_instance_passes_through(self):
        fam = Poisson(mean=2.0)
        assert resolve_family(fam) is fam

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown family"):
            resolve_family('binomial')

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            resolve_family(42)
