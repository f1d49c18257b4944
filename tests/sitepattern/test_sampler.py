"""
Tests for the multinomial frequency sampler.
"""

import numpy as np
import pytest

from msctau.core.exceptions import DimensionError, ValidationError
from msctau.sitepattern import sample_frequencies


class TestSampleFrequencies:

    @pytest.mark.parametrize("n_sites", [1, 2, 17, 1000, 100_000])
    def test_sums_to_one(self, rng, reference_probabilities, n_sites):
        f = sample_frequencies(reference_probabilities, n_sites, rng)
        assert f.shape == (5,)
        assert f.sum() == pytest.approx(1.0, abs=1e-12)
        assert np.all(f >= 0.0)

    def test_frequencies_are_counts_over_n(self, rng, reference_probabilities):
        n_sites = 250
        f = sample_frequencies(reference_probabilities, n_sites, rng)
        counts = f * n_sites
        np.testing.assert_allclose(counts, np.round(counts), atol=1e-9)

    def test_single_site_is_a_vertex(self, rng, reference_probabilities):
        f = sample_frequencies(reference_probabilities, 1, rng)
        assert sorted(f.tolist()) == [0.0, 0.0, 0.0, 0.0, 1.0]

    def test_same_seed_same_draw(self, reference_probabilities):
        a = sample_frequencies(reference_probabilities, 1000, np.random.default_rng(7))
        b = sample_frequencies(reference_probabilities, 1000, np.random.default_rng(7))
        np.testing.assert_array_equal(a, b)

    def test_advances_stream(self):
        rng = np.random.default_rng(7)
        p = np.full(5, 0.2)
        a = sample_frequencies(p, 1000, rng)
        b = sample_frequencies(p, 1000, rng)
        assert not np.array_equal(a, b)

    def test_large_n_close_to_probabilities(self, rng, reference_probabilities):
        f = sample_frequencies(reference_probabilities, 10_000_000, rng)
        np.testing.assert_allclose(f, reference_probabilities, atol=1e-3)

    def test_tolerates_rounding_in_probabilities(self, rng):
        p = np.array([0.2, 0.2, 0.2, 0.2, 0.2 + 1e-12])
        f = sample_frequencies(p, 100, rng)
        assert f.sum() == pytest.approx(1.0)


class TestSampleFrequenciesValidation:

    def test_bad_sum(self, rng):
        with pytest.raises(ValidationError, match="sum to 1"):
            sample_frequencies([0.2, 0.2, 0.2, 0.2, 0.1], 100, rng)

    def test_negative_probability(self, rng):
        with pytest.raises(ValidationError, match="non-negative"):
            sample_frequencies([-0.2, 0.4, 0.2, 0.2, 0.4], 100, rng)

    def test_wrong_length(self, rng):
        with pytest.raises(DimensionError):
            sample_frequencies([0.5, 0.5], 100, rng)

    @pytest.mark.parametrize("n_sites", [0, -5])
    def test_non_positive_n(self, rng, reference_probabilities, n_sites):
        with pytest.raises(ValidationError, match="n_sites"):
            sample_frequencies(reference_probabilities, n_sites, rng)

    def test_nan_probability(self, rng):
        with pytest.raises(ValidationError, match="non-finite"):
            sample_frequencies([np.nan, 0.25, 0.25, 0.25, 0.25], 100, rng)
