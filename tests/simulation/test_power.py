"""
Tests for the Wald test of H0: tau1 = 0 and power curves.

Validates:
    - Statistic, p-value and rejection bookkeeping
    - Exclusion of undefined statistics
    - Power curve structure and shared-stream reproducibility
    - Type-I error control and power monotonicity (slow)
"""

import numpy as np
import pytest

from msctau.core.compute.tolerances import MONTE_CARLO
from msctau.core.exceptions import ValidationError
from msctau.simulation import (
    PowerCurveSolution,
    PowerDesign,
    PowerSolution,
    ReplicateStage,
    TestStatisticRecord,
    power_curve,
    power_test,
)
from msctau.sitepattern import (
    estimate_tau,
    exp_transform,
    sample_frequencies,
    site_probabilities,
    transform_variance,
)


@pytest.fixture(scope="module")
def null_run():
    return power_test(0.0, 0.005, n_sites=100_000, n_replicates=400, seed=8)


# ═══════════════════════════════════════════════════════════════════════
# Single power test
# ═══════════════════════════════════════════════════════════════════════


class TestPowerTest:

    def test_returns_solution(self, null_run):
        assert isinstance(null_run, PowerSolution)
        assert null_run.R == 400
        assert null_run.statistics.shape == (400,)
        assert null_run.backend_name == "cpu_power"

    def test_data_generated_at_reference_tau0(self, null_run):
        assert null_run.true_params.tau0 == 0.001
        assert null_run.true_params.tau1 == 0.0

    def test_rejection_rule(self, null_run):
        np.testing.assert_array_equal(
            null_run.rejected, np.abs(null_run.statistics) > null_run.critical_value,
        )
        assert null_run.power == pytest.approx(null_run.rejected.mean())

    def test_p_values(self, null_run):
        p = null_run.p_values
        assert np.all((p > 0.0) & (p <= 1.0))
        np.testing.assert_array_equal(p < 0.05, null_run.rejected)

    def test_statistic_definition(self):
        result = power_test(0.0005, 0.005, n_sites=1000, n_replicates=5, seed=2)
        freqs = sample_frequencies(
            site_probabilities(0.001, 0.0005, 0.005), 1000, np.random.default_rng(2),
        )
        tau1_hat = estimate_tau(freqs, 0.005, "tau1")
        var = transform_variance(freqs, 1000, 0.005, "tau1")
        z = (float(exp_transform(tau1_hat)) - 1.0) / np.sqrt(var)
        assert result.statistics[0] == pytest.approx(z, rel=1e-10)
        assert result.tau1_estimates[0] == pytest.approx(tau1_hat, rel=1e-12)

    def test_null_rejection_rate_plausible(self, null_run):
        # 400 replicates: binomial sd about 0.011
        assert 0.0 <= null_run.power < 0.12

    def test_record(self, null_run):
        record = null_run.record(0)
        assert isinstance(record, TestStatisticRecord)
        assert record.statistic == null_run.statistics[0]
        assert record.rejected == bool(null_run.rejected[0])

    def test_summary_text(self, null_run):
        text = null_run.summary()
        assert "WALD TEST OF tau1 = 0" in text
        assert "type-I error rate" in text

    def test_prebuilt_design(self):
        design = PowerDesign.for_power_test(0.0002, 0.005, n_replicates=10, seed=3)
        a = power_test(design)
        b = power_test(0.0002, 0.005, n_replicates=10, seed=3)
        np.testing.assert_array_equal(a.statistics, b.statistics)


class TestPowerExclusions:

    def test_single_site_excludes_everything(self):
        # Vertices give zero variance or an undefined estimate
        result = power_test(0.0, 0.005, n_sites=1, n_replicates=30, seed=1)
        assert result.n_usable == 0
        assert result.n_excluded == 30
        assert np.isnan(result.power)
        assert result.power_conservative == 0.0
        assert np.all(np.isnan(result.statistics))
        assert not np.any(result.rejected)
        assert all(e.stage is ReplicateStage.ESTIMATING for e in result.exclusions)
        assert result._result.has_warning("excluded")

    def test_excluded_record(self):
        result = power_test(0.0, 0.005, n_sites=1, n_replicates=3, seed=1)
        assert result.record(0) == TestStatisticRecord(None, None)


# ═══════════════════════════════════════════════════════════════════════
# Power curve
# ═══════════════════════════════════════════════════════════════════════


class TestPowerCurve:

    def test_structure(self):
        grid = [0.0, 0.0002, 0.0008]
        curve = power_curve(grid, 0.005, n_replicates=50, seed=4)
        assert isinstance(curve, PowerCurveSolution)
        assert len(curve) == 3
        np.testing.assert_array_equal(curve.tau1_grid, grid)
        assert curve.power.shape == (3,)
        assert curve.statistics.shape == (3, 50)
        assert curve[1].true_params.tau1 == 0.0002
        assert "POWER CURVE" in curve.summary()

    def test_shared_stream_continues_across_grid(self):
        curve = power_curve([0.0, 0.0], 0.005, n_replicates=20, seed=6)
        assert not np.array_equal(curve[0].statistics, curve[1].statistics)
        again = power_curve([0.0, 0.0], 0.005, n_replicates=20, seed=6)
        np.testing.assert_array_equal(curve.statistics, again.statistics)

    def test_spawned_reproducible(self):
        a = power_curve([0.0, 0.0004], 0.005, n_replicates=20, seed=6, streams="spawned")
        b = power_curve([0.0, 0.0004], 0.005, n_replicates=20, seed=6,
                        streams="spawned", n_jobs=2)
        np.testing.assert_array_equal(a.statistics, b.statistics)

    def test_empty_grid(self):
        with pytest.raises(ValidationError, match="tau1_grid"):
            power_curve([], 0.005)

    def test_non_finite_grid(self):
        with pytest.raises(ValidationError, match="tau1_grid"):
            power_curve([0.0, np.inf], 0.005)


# ═══════════════════════════════════════════════════════════════════════
# Size and power
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.slow
class TestSizeAndPower:

    def test_type_one_error(self):
        result = power_test(0.0, 0.005, n_sites=100_000, n_replicates=10_000, seed=77)
        assert result.power == pytest.approx(0.05, abs=MONTE_CARLO.atol)

    def test_power_non_decreasing(self):
        grid = [0.0, 0.0001, 0.0002, 0.0004, 0.0008]
        curve = power_curve(grid, 0.005, n_sites=100_000, n_replicates=2000, seed=31)
        assert np.all(np.diff(curve.power) >= 0.0)
        assert curve.power[-1] > 0.9
