"""
Common data structures for the simulation driver.

EstimateRecord and TestStatisticRecord are per-replicate outputs.
CoverageParams and PowerParams are the payloads wrapped by Result[P]
and exposed through the Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray


VALID_STREAMS = ("shared", "spawned")


class ReplicateStage(Enum):
    """Stages a replicate moves through, in order."""
    SAMPLING = "sampling"
    ESTIMATING = "estimating"
    INTERVAL_BUILDING = "interval_building"
    ACCUMULATING = "accumulating"


@dataclass(frozen=True)
class Exclusion:
    """
    A replicate left out of one parameter's statistics.

    - replicate: zero-based replicate index
    - parameter: 'tau0' or 'tau1'
    - stage: where the replicate failed
    - reason: human-readable cause
    - value: the offending number (log argument, lower transform endpoint,
      or standard error)
    """
    replicate: int
    parameter: str
    stage: ReplicateStage
    reason: str
    value: float | None = None


@dataclass(frozen=True)
class EstimateRecord:
    """
    One replicate of the coverage simulation.

    Estimates and intervals are None where undefined; variances are always
    defined because they depend only on the frequencies.
    """
    tau0_hat: float | None
    tau1_hat: float | None
    tau0_variance: float
    tau1_variance: float
    tau0_interval: tuple[float, float] | None
    tau1_interval: tuple[float, float] | None


@dataclass(frozen=True)
class TestStatisticRecord:
    """One replicate of the tau1 = 0 Wald test. None fields mean excluded."""
    __test__ = False  # not a pytest class
    statistic: float | None
    rejected: bool | None


@dataclass(frozen=True)
class ParameterSummary:
    """
    Monte Carlo behaviour of one estimator over its usable replicates.

    - mean, bias, variance (ddof=1), rmse of the tau estimates
    - mean_transform_variance: average delta-method variance of exp(-8*tau/3)
    - empirical_transform_variance: Monte Carlo variance of exp(-8*tau_hat/3)
    - coverage: covered / n_usable
    - coverage_conservative: covered / n_replicates (exclusions are misses)
    - coverage_se: sqrt(c (1 - c) / n_usable)
    """
    parameter: str
    true_value: float
    n_usable: int
    n_excluded: int
    mean: float
    bias: float
    variance: float
    rmse: float
    mean_transform_variance: float
    empirical_transform_variance: float
    coverage: float
    coverage_conservative: float
    coverage_se: float


@dataclass(frozen=True)
class CoverageParams:
    """
    Parameter payload for a coverage simulation.

    Arrays are aligned with replicate index. Slots that are undefined hold
    NaN and are False in the matching `usable_*` mask.
    """
    frequencies: NDArray[np.floating[Any]]       # shape (R, 5)
    tau0_hat: NDArray[np.floating[Any]]          # shape (R,)
    tau1_hat: NDArray[np.floating[Any]]          # shape (R,)
    tau0_variance: NDArray[np.floating[Any]]     # shape (R,)
    tau1_variance: NDArray[np.floating[Any]]     # shape (R,)
    tau0_interval: NDArray[np.floating[Any]]     # shape (R, 2)
    tau1_interval: NDArray[np.floating[Any]]     # shape (R, 2)
    covered_tau0: NDArray[np.bool_]              # shape (R,)
    covered_tau1: NDArray[np.bool_]              # shape (R,)
    usable_tau0: NDArray[np.bool_]               # shape (R,)
    usable_tau1: NDArray[np.bool_]               # shape (R,)
    coverage_tau0: float
    coverage_tau1: float
    summaries: dict[str, ParameterSummary]
    exclusions: tuple[Exclusion, ...]
    R: int


@dataclass(frozen=True)
class PowerParams:
    """
    Parameter payload for the tau1 = 0 Wald test simulation.

    - statistics: Z per replicate, NaN where excluded
    - power: rejections / n_usable
    - power_conservative: rejections / R
    """
    tau1_hat: NDArray[np.floating[Any]]          # shape (R,)
    statistics: NDArray[np.floating[Any]]        # shape (R,)
    p_values: NDArray[np.floating[Any]]          # shape (R,)
    rejected: NDArray[np.bool_]                  # shape (R,)
    usable: NDArray[np.bool_]                    # shape (R,)
    power: float
    power_conservative: float
    critical_value: float
    exclusions: tuple[Exclusion, ...]
    R: int
