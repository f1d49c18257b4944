"""
Tests for the closed-form site-pattern model.

Validates:
    - Probabilities sum to one and lie in [0, 1] on the valid domain
    - p2 == p3 exactly
    - Reference scenario: p0 is the largest entry
    - ModelParameters validation and helpers
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from msctau.core.compute.tolerances import CLOSED_FORM
from msctau.core.exceptions import ValidationError
from msctau.sitepattern import ModelParameters, site_probabilities
from msctau.sitepattern._common import (
    contrast_constant,
    exp_transform,
    scale_factor,
    tau_from_transform,
)

# Valid (tau0, tau1, theta) triples spanning shallow to deep trees
VALID_TRIPLES = [
    (0.002, 0.001, 0.001),
    (0.001, 0.001, 0.005),
    (0.5, 0.1, 0.01),
    (2.0, 1.5, 0.1),
    (5.0, 0.0, 1.0),
    (0.01, 1e-6, 10.0),
]


# ═══════════════════════════════════════════════════════════════════════
# site_probabilities
# ═══════════════════════════════════════════════════════════════════════


class TestSiteProbabilities:

    @pytest.mark.parametrize("tau0, tau1, theta", VALID_TRIPLES)
    def test_sums_to_one(self, tau0, tau1, theta):
        p = site_probabilities(tau0, tau1, theta)
        assert p.shape == (5,)
        assert abs(p.sum() - 1.0) < CLOSED_FORM.atol

    @pytest.mark.parametrize("tau0, tau1, theta", VALID_TRIPLES)
    def test_p2_equals_p3_exactly(self, tau0, tau1, theta):
        p = site_probabilities(tau0, tau1, theta)
        assert p[2] == p[3]

    @pytest.mark.parametrize("tau0, tau1, theta", VALID_TRIPLES)
    def test_entries_are_probabilities(self, tau0, tau1, theta):
        p = site_probabilities(tau0, tau1, theta)
        assert np.all(p >= 0.0)
        assert np.all(p <= 1.0)

    def test_reference_scenario_p0_largest(self, reference_probabilities):
        p = reference_probabilities
        assert np.argmax(p) == 0
        assert np.all(p[0] > p[1:])

    def test_accepts_model_parameters(self):
        params = ModelParameters(0.002, 0.001, 0.001)
        np.testing.assert_array_equal(
            site_probabilities(params),
            site_probabilities(0.002, 0.001, 0.001),
        )

    def test_model_parameters_with_extra_args(self):
        with pytest.raises(TypeError):
            site_probabilities(ModelParameters(0.002, 0.001, 0.001), 0.001)

    def test_unordered_still_sums_to_one(self):
        # tau1 > tau0: numerically defined, no evolutionary meaning
        p = site_probabilities(0.001, 0.01, 0.005)
        assert np.all(np.isfinite(p))
        assert abs(p.sum() - 1.0) < CLOSED_FORM.atol

    def test_deep_tree_approaches_uniform_patterns(self):
        # As tau -> inf, a0, a1 -> 0 and p -> (1, 3, 3, 3, 6) / 16
        p = site_probabilities(50.0, 40.0, 0.01)
        np.testing.assert_allclose(p, np.array([1, 3, 3, 3, 6]) / 16.0, atol=1e-12)

    def test_is_deterministic(self):
        a = site_probabilities(0.3, 0.2, 0.05)
        b = site_probabilities(0.3, 0.2, 0.05)
        np.testing.assert_array_equal(a, b)

    def test_rejects_negative_tau(self):
        with pytest.raises(ValidationError, match="tau1"):
            site_probabilities(0.002, -0.001, 0.001)

    def test_rejects_zero_theta(self):
        with pytest.raises(ValidationError, match="theta"):
            site_probabilities(0.002, 0.001, 0.0)


# ═══════════════════════════════════════════════════════════════════════
# ModelParameters and shared transform
# ═══════════════════════════════════════════════════════════════════════


class TestModelParameters:

    def test_coerces_to_float(self):
        params = ModelParameters(1, 0, 2)
        assert isinstance(params.tau0, float)
        assert params.tau1 == 0.0

    def test_frozen(self):
        params = ModelParameters(0.002, 0.001, 0.001)
        with pytest.raises(FrozenInstanceError):
            params.tau0 = 0.1

    def test_is_ordered(self):
        assert ModelParameters(0.002, 0.001, 0.001).is_ordered
        assert ModelParameters(0.001, 0.001, 0.001).is_ordered
        assert not ModelParameters(0.001, 0.002, 0.001).is_ordered

    def test_true_value(self):
        params = ModelParameters(0.002, 0.001, 0.001)
        assert params.true_value("tau0") == 0.002
        assert params.true_value("tau1") == 0.001

    def test_true_value_bad_name(self):
        with pytest.raises(ValidationError, match="parameter must be one of"):
            ModelParameters(0.002, 0.001, 0.001).true_value("theta")

    def test_rejects_nan(self):
        with pytest.raises(ValidationError, match="finite"):
            ModelParameters(float("nan"), 0.001, 0.001)


class TestTransform:

    def test_inverse(self):
        tau = np.array([0.0, 0.001, 0.5, 3.0])
        np.testing.assert_allclose(tau_from_transform(exp_transform(tau)), tau, atol=1e-15)

    def test_contrast_constant(self):
        theta = 0.01
        assert contrast_constant(theta) == pytest.approx(4.0 / 3.0 + 16.0 * theta / 9.0)
        assert scale_factor(theta) == pytest.approx(3.04)
