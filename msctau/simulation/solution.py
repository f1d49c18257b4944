"""
Solution wrappers for simulation results.

CoverageSolution, PowerSolution and PowerCurveSolution wrap Result[P] and
provide convenient accessors and a printable summary. These are the
arrays and scalars handed to plotting and reporting code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from msctau.core.result import Result
from msctau.simulation._common import (
    CoverageParams,
    EstimateRecord,
    Exclusion,
    ParameterSummary,
    PowerParams,
    TestStatisticRecord,
)
from msctau.sitepattern._common import validate_parameter

if TYPE_CHECKING:
    from msctau.simulation.design import PowerDesign, SimulationDesign


def _interval_or_none(row: NDArray) -> tuple[float, float] | None:
    if np.isnan(row[0]):
        return None
    return float(row[0]), float(row[1])


def _float_or_none(value: float) -> float | None:
    return None if np.isnan(value) else float(value)


@dataclass
class CoverageSolution:
    """
    User-facing coverage simulation results.

    Per-replicate arrays are aligned with replicate index. A NaN estimate
    means the estimate was undefined; a NaN interval row means the
    interval was undefined. Summary statistics read only usable replicates.
    """
    _result: Result[CoverageParams]
    _design: 'SimulationDesign'

    # --- Per-replicate outputs ---

    @property
    def frequencies(self) -> NDArray[np.floating[Any]]:
        """Observed site-pattern frequencies, shape (R, 5)."""
        return self._result.params.frequencies

    @property
    def tau0_estimates(self) -> NDArray[np.floating[Any]]:
        """tau0 estimates, shape (R,)."""
        return self._result.params.tau0_hat

    @property
    def tau1_estimates(self) -> NDArray[np.floating[Any]]:
        """tau1 estimates, shape (R,)."""
        return self._result.params.tau1_hat

    @property
    def tau0_variances(self) -> NDArray[np.floating[Any]]:
        """Delta-method variances of exp(-8*tau0_hat/3), shape (R,)."""
        return self._result.params.tau0_variance

    @property
    def tau1_variances(self) -> NDArray[np.floating[Any]]:
        """Delta-method variances of exp(-8*tau1_hat/3), shape (R,)."""
        return self._result.params.tau1_variance

    @property
    def tau0_intervals(self) -> NDArray[np.floating[Any]]:
        """tau0 confidence intervals, shape (R, 2), columns (lower, upper)."""
        return self._result.params.tau0_interval

    @property
    def tau1_intervals(self) -> NDArray[np.floating[Any]]:
        """tau1 confidence intervals, shape (R, 2), columns (lower, upper)."""
        return self._result.params.tau1_interval

    @property
    def covered_tau0(self) -> NDArray[np.bool_]:
        """True where the tau0 interval strictly contains the true tau0."""
        return self._result.params.covered_tau0

    @property
    def covered_tau1(self) -> NDArray[np.bool_]:
        """True where the tau1 interval strictly contains the true tau1."""
        return self._result.params.covered_tau1

    def usable(self, parameter: str) -> NDArray[np.bool_]:
        """Mask of replicates with a defined estimate and interval."""
        return getattr(self._result.params, f'usable_{validate_parameter(parameter)}')

    def record(self, replicate: int) -> EstimateRecord:
        """Rebuild the EstimateRecord of one replicate."""
        p = self._result.params
        return EstimateRecord(
            tau0_hat=_float_or_none(p.tau0_hat[replicate]),
            tau1_hat=_float_or_none(p.tau1_hat[replicate]),
            tau0_variance=float(p.tau0_variance[replicate]),
            tau1_variance=float(p.tau1_variance[replicate]),
            tau0_interval=_interval_or_none(p.tau0_interval[replicate]),
            tau1_interval=_interval_or_none(p.tau1_interval[replicate]),
        )

    # --- Aggregates ---

    @property
    def coverage_tau0(self) -> float:
        """Fraction of usable replicates whose tau0 interval covers tau0."""
        return self._result.params.coverage_tau0

    @property
    def coverage_tau1(self) -> float:
        """Fraction of usable replicates whose tau1 interval covers tau1."""
        return self._result.params.coverage_tau1

    @property
    def summaries(self) -> dict[str, ParameterSummary]:
        """Monte Carlo summary per parameter, keyed 'tau0' and 'tau1'."""
        return self._result.params.summaries

    @property
    def exclusions(self) -> tuple[Exclusion, ...]:
        """Every replicate/parameter pair left out, with the reason."""
        return self._result.params.exclusions

    def n_usable(self, parameter: str) -> int:
        return self.summaries[validate_parameter(parameter)].n_usable

    def n_excluded(self, parameter: str) -> int:
        return self.summaries[validate_parameter(parameter)].n_excluded

    @property
    def R(self) -> int:
        """Number of replicates."""
        return self._result.params.R

    # --- Metadata ---

    @property
    def true_params(self):
        """ModelParameters that generated the data."""
        return self._design.params

    @property
    def n_sites(self) -> int:
        return self._design.n_sites

    @property
    def conf_level(self) -> float:
        return self._design.conf_level

    @property
    def seed(self):
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """
        Printable study summary.

        Produces:
            COVERAGE SIMULATION

            True values: tau0=0.002, tau1=0.001, theta=0.001
            Sites per replicate: 100000   Replicates: 10000

                      true        mean        bias     std. dev    coverage   usable
            tau0   0.00200     0.00200    1.2e-07     1.1e-04      0.9512    10000
            tau1   0.00100     0.00100   -3.4e-08     5.6e-05      0.9489    10000
        """
        p = self.true_params
        conf_pct = int(round(self.conf_level * 100))
        lines = [
            "\nCOVERAGE SIMULATION\n",
            f"True values: tau0={p.tau0:g}, tau1={p.tau1:g}, theta={p.theta:g}",
            f"Sites per replicate: {self.n_sites}   Replicates: {self.R}",
            f"{conf_pct}% Wald intervals on the exp(-8*tau/3) scale",
            "",
            f"{'':>6s} {'true':>11s} {'mean':>11s} {'bias':>11s} "
            f"{'std. dev':>11s} {'coverage':>9s} {'usable':>8s}",
        ]
        for name, s in self.summaries.items():
            lines.append(
                f"{name:>6s} {s.true_value:11.5g} {s.mean:11.5g} {s.bias:11.3g} "
                f"{np.sqrt(s.variance):11.3g} {s.coverage:9.4f} {s.n_usable:8d}"
            )
        if self.exclusions:
            lines.append("")
            lines.append(f"Excluded replicate/parameter pairs: {len(self.exclusions)}")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CoverageSolution(R={self.R}, "
            f"coverage_tau0={self.coverage_tau0:.4g}, "
            f"coverage_tau1={self.coverage_tau1:.4g}, "
            f"excluded={len(self.exclusions)})"
        )


@dataclass
class PowerSolution:
    """
    User-facing results of the Wald test of H0: tau1 = 0.

    `power` is the rejection rate over usable replicates: power when the
    true tau1 > 0, type-I error rate when it is 0.
    """
    _result: Result[PowerParams]
    _design: 'PowerDesign'

    @property
    def statistics(self) -> NDArray[np.floating[Any]]:
        """Wald statistics, shape (R,), NaN where excluded."""
        return self._result.params.statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided normal p-values, shape (R,), NaN where excluded."""
        return self._result.params.p_values

    @property
    def rejected(self) -> NDArray[np.bool_]:
        """Rejection indicators, shape (R,), False where excluded."""
        return self._result.params.rejected

    @property
    def usable(self) -> NDArray[np.bool_]:
        return self._result.params.usable

    @property
    def tau1_estimates(self) -> NDArray[np.floating[Any]]:
        """tau1 estimates, shape (R,), NaN where undefined."""
        return self._result.params.tau1_hat

    @property
    def power(self) -> float:
        """Rejections / usable replicates."""
        return self._result.params.power

    @property
    def power_conservative(self) -> float:
        """Rejections / all replicates."""
        return self._result.params.power_conservative

    @property
    def critical_value(self) -> float:
        return self._result.params.critical_value

    @property
    def exclusions(self) -> tuple[Exclusion, ...]:
        return self._result.params.exclusions

    @property
    def n_usable(self) -> int:
        return int(self.usable.sum())

    @property
    def n_excluded(self) -> int:
        return self.R - self.n_usable

    @property
    def R(self) -> int:
        return self._result.params.R

    def record(self, replicate: int) -> TestStatisticRecord:
        """Rebuild the TestStatisticRecord of one replicate."""
        if not self.usable[replicate]:
            return TestStatisticRecord(None, None)
        return TestStatisticRecord(
            float(self.statistics[replicate]), bool(self.rejected[replicate]),
        )

    # --- Metadata ---

    @property
    def true_params(self):
        return self._design.params

    @property
    def alpha(self) -> float:
        return self._design.alpha

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Wald test simulation summary."""
        p = self.true_params
        label = "type-I error rate" if p.tau1 == 0.0 else "power"
        lines = [
            "\nWALD TEST OF tau1 = 0",
            "",
            f"True values: tau0={p.tau0:g}, tau1={p.tau1:g}, theta={p.theta:g}",
            f"Replicates: {self.R} ({self.n_excluded} excluded)",
            f"Critical value: {self.critical_value:.4f} (alpha={self.alpha:.3g})",
            f"Mean statistic: {np.nanmean(self.statistics):.4g}"
            if self.n_usable else "Mean statistic: undefined",
            f"Estimated {label}: {self.power:.4f}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PowerSolution(R={self.R}, tau1={self.true_params.tau1:g}, "
            f"power={self.power:.4g})"
        )


@dataclass
class PowerCurveSolution:
    """Power of the tau1 = 0 test over a grid of true tau1 values."""
    tau1_grid: NDArray[np.floating[Any]]
    solutions: tuple[PowerSolution, ...]

    @property
    def power(self) -> NDArray[np.floating[Any]]:
        """Power at each grid point, shape (len(grid),)."""
        return np.array([s.power for s in self.solutions])

    @property
    def statistics(self) -> NDArray[np.floating[Any]]:
        """Wald statistics, shape (len(grid), R)."""
        return np.vstack([s.statistics for s in self.solutions])

    def __len__(self) -> int:
        return len(self.solutions)

    def __getitem__(self, i: int) -> PowerSolution:
        return self.solutions[i]

    def summary(self) -> str:
        lines = ["\nPOWER CURVE FOR THE WALD TEST OF tau1 = 0", ""]
        lines.append(f"{'tau1':>12s} {'power':>8s} {'excluded':>9s}")
        for tau1, s in zip(self.tau1_grid, self.solutions):
            lines.append(f"{tau1:12.5g} {s.power:8.4f} {s.n_excluded:9d}")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"PowerCurveSolution(points={len(self)})"
