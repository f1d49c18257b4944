"""
msctau simulation driver.

Repeats sample -> estimate -> variance -> interval over many replicates to
measure bias, variance, interval coverage and the power of the Wald test
of tau1 = 0.

Usage:
    from msctau.simulation import simulate_coverage, power_test, power_curve

    # Coverage of the tau0/tau1 intervals
    result = simulate_coverage(0.002, 0.001, 0.001, seed=42)
    result.coverage_tau0

    # Type-I error rate and power
    power_test(0.0, theta=0.005, seed=42).power
    power_curve([0.0, 0.0005, 0.001], theta=0.005, seed=42).power
"""

from msctau.simulation.solvers import simulate_coverage, power_test, power_curve
from msctau.simulation.design import SimulationDesign, PowerDesign
from msctau.simulation.solution import (
    CoverageSolution,
    PowerSolution,
    PowerCurveSolution,
)
from msctau.simulation._common import (
    EstimateRecord,
    Exclusion,
    ParameterSummary,
    ReplicateStage,
    TestStatisticRecord,
)

__all__ = [
    "simulate_coverage",
    "power_test",
    "power_curve",
    "SimulationDesign",
    "PowerDesign",
    "CoverageSolution",
    "PowerSolution",
    "PowerCurveSolution",
    "EstimateRecord",
    "Exclusion",
    "ParameterSummary",
    "ReplicateStage",
    "TestStatisticRecord",
]
