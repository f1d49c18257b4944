"""
Tests for Wald intervals on the exp(-8*tau/3) scale.

Validates:
    - Endpoint order is corrected after the decreasing back-transform
    - Intervals contain the point estimate
    - Undefined intervals raise UndefinedIntervalError with diagnostics,
      including the zero-variance case
"""

import numpy as np
import pytest

from msctau.core.exceptions import UndefinedIntervalError, ValidationError
from msctau.sitepattern import (
    back_transform_interval,
    critical_value,
    exp_transform,
    transform_interval,
    wald_interval,
)


class TestCriticalValue:

    def test_95(self):
        assert critical_value(0.95) == pytest.approx(1.959964, abs=1e-6)

    def test_99(self):
        assert critical_value(0.99) == pytest.approx(2.575829, abs=1e-6)

    def test_rejects_invalid_level(self):
        with pytest.raises(ValidationError, match="conf_level"):
            critical_value(1.0)


class TestWaldInterval:

    @pytest.mark.parametrize("tau_hat, variance", [
        (0.001, 1e-8),
        (0.002, 4e-6),
        (0.5, 1e-3),
        (-0.0005, 1e-6),
    ])
    def test_lower_below_upper(self, tau_hat, variance):
        lo, hi = wald_interval(tau_hat, variance)
        assert lo < hi

    def test_contains_estimate(self):
        lo, hi = wald_interval(0.002, 1e-6)
        assert lo < 0.002 < hi

    def test_endpoints_swap_under_back_transform(self):
        tau_hat, variance = 0.01, 1e-5
        x_lo, x_hi = transform_interval(tau_hat, variance)
        lo, hi = wald_interval(tau_hat, variance)
        # Upper transform endpoint maps to the lower tau bound
        assert float(exp_transform(lo)) == pytest.approx(x_hi, rel=1e-12)
        assert float(exp_transform(hi)) == pytest.approx(x_lo, rel=1e-12)

    def test_transform_interval_symmetric(self):
        x_lo, x_hi = transform_interval(0.01, 1e-5)
        center = float(exp_transform(0.01))
        assert center - x_lo == pytest.approx(x_hi - center)
        assert x_hi - x_lo == pytest.approx(2 * critical_value(0.95) * np.sqrt(1e-5))

    def test_wider_at_higher_confidence(self):
        lo95, hi95 = wald_interval(0.002, 1e-6, conf_level=0.95)
        lo99, hi99 = wald_interval(0.002, 1e-6, conf_level=0.99)
        assert lo99 < lo95 and hi95 < hi99

    def test_precomputed_z_matches(self):
        assert back_transform_interval(0.002, 1e-6, critical_value(0.9)) == \
            wald_interval(0.002, 1e-6, conf_level=0.9)


class TestUndefinedInterval:

    def test_negative_lower_transform(self):
        with pytest.raises(UndefinedIntervalError) as excinfo:
            wald_interval(1.0, 1.0, parameter="tau0")
        err = excinfo.value
        assert err.parameter == "tau0"
        assert err.lower_transform < 0.0 < err.upper_transform

    def test_zero_variance_undefined(self):
        with pytest.raises(UndefinedIntervalError, match="zero standard error") as excinfo:
            wald_interval(0.002, 0.0, parameter="tau1")
        err = excinfo.value
        assert err.parameter == "tau1"
        assert err.lower_transform == err.upper_transform

    def test_negative_variance_rejected(self):
        with pytest.raises(ValidationError, match="variance"):
            wald_interval(0.002, -1e-6)

    def test_nan_variance_rejected(self):
        with pytest.raises(ValidationError, match="variance"):
            wald_interval(0.002, float("nan"))
