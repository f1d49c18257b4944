"""
Solver dispatch for the simulation driver.

Public functions:
    simulate_coverage(tau0, tau1, theta)  - estimates, variances, intervals, coverage
    power_test(tau1, theta)               - Wald test of H0: tau1 = 0
    power_curve(tau1_grid, theta)         - power_test over a grid of true tau1
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike

from msctau.core.exceptions import ValidationError
from msctau.core.validation import check_array, check_finite
from msctau.simulation.backends.cpu import CPUCoverageBackend, CPUPowerBackend
from msctau.simulation.design import PowerDesign, SeedLike, SimulationDesign
from msctau.simulation.solution import (
    CoverageSolution,
    PowerCurveSolution,
    PowerSolution,
)
from msctau.sitepattern._common import REFERENCE_TAU0

logger = logging.getLogger(__name__)


def _get_backend(backend: str, kind: str):
    """Select the backend for a simulation mode. Only 'cpu' exists."""
    if backend in ('cpu', 'auto'):
        return CPUCoverageBackend() if kind == 'coverage' else CPUPowerBackend()
    raise ValidationError(f"Unknown backend: {backend!r}. Use 'cpu'.")


def simulate_coverage(
    tau0: float | SimulationDesign,
    tau1: float | None = None,
    theta: float | None = None,
    *,
    n_sites: int = 100_000,
    n_replicates: int = 10_000,
    conf_level: float = 0.95,
    seed: SeedLike = None,
    streams: str = "shared",
    n_jobs: int = 1,
    backend: str = 'cpu',
) -> CoverageSolution:
    """
    Monte Carlo study of the tau0/tau1 estimators and their Wald intervals.

    Each replicate draws site-pattern frequencies from n_sites sites,
    estimates tau0 and tau1, computes the delta-method variances of
    exp(-8*tau/3), builds intervals and records whether they strictly
    contain the true values.

    Parameters
    ----------
    tau0, tau1, theta : float or SimulationDesign
        True parameters, or a pre-built SimulationDesign as `tau0`.
    n_sites : int
        Sites per replicate. Default 100000.
    n_replicates : int
        Number of replicates. Default 10000.
    conf_level : float
        Interval confidence level. Default 0.95.
    seed : int, SeedSequence, Generator or None
        Source of the random stream.
    streams : str
        'shared' (default, bit-for-bit reproducible in replicate order) or
        'spawned' (independent child stream per replicate).
    n_jobs : int
        Worker threads; > 1 requires streams='spawned'.
    backend : str
        'cpu' (default).

    Returns
    -------
    CoverageSolution
        Per-replicate arrays, coverage frequencies and exclusions.
    """
    if isinstance(tau0, SimulationDesign):
        design = tau0
    else:
        design = SimulationDesign.for_coverage(
            tau0, tau1, theta,
            n_sites=n_sites,
            n_replicates=n_replicates,
            conf_level=conf_level,
            seed=seed,
            streams=streams,
            n_jobs=n_jobs,
        )

    logger.debug(
        "coverage run: %r, n_sites=%d, R=%d, streams=%s",
        design.params, design.n_sites, design.n_replicates, design.streams,
    )
    result = _get_backend(backend, 'coverage').solve(design)
    logger.debug(
        "coverage run done: tau0 %.4f (%d excluded), tau1 %.4f (%d excluded)",
        result.params.coverage_tau0, result.info['n_excluded_tau0'],
        result.params.coverage_tau1, result.info['n_excluded_tau1'],
    )
    return CoverageSolution(_result=result, _design=design)


def power_test(
    tau1: float | PowerDesign,
    theta: float | None = None,
    *,
    tau0: float = REFERENCE_TAU0,
    n_sites: int = 100_000,
    n_replicates: int = 10_000,
    conf_level: float = 0.95,
    seed: SeedLike = None,
    streams: str = "shared",
    n_jobs: int = 1,
    backend: str = 'cpu',
) -> PowerSolution:
    """
    Simulated rejection rate of the Wald test of H0: tau1 = 0.

    Data are generated under (tau0, tau1, theta); each replicate computes
    Z = (exp(-8*tau1_hat/3) - 1) / sqrt(var) and rejects when |Z| exceeds
    the two-sided critical value for `conf_level` (1.96 at 0.95).

    Parameters
    ----------
    tau1 : float or PowerDesign
        True tau1 (0 measures the type-I error rate), or a PowerDesign.
    theta : float
        Known population-size parameter.
    tau0 : float
        Reference deeper speciation time. Default 0.001.

    Other parameters are as for simulate_coverage().

    Returns
    -------
    PowerSolution
        Wald statistics, rejection indicators and the rejection rate.
    """
    if isinstance(tau1, PowerDesign):
        design = tau1
    else:
        design = PowerDesign.for_power_test(
            tau1, theta,
            tau0=tau0,
            n_sites=n_sites,
            n_replicates=n_replicates,
            conf_level=conf_level,
            seed=seed,
            streams=streams,
            n_jobs=n_jobs,
        )

    result = _get_backend(backend, 'power').solve(design)
    logger.debug(
        "power run: tau1=%g, power=%.4f, %d excluded",
        design.params.tau1, result.params.power, result.info['n_excluded'],
    )
    return PowerSolution(_result=result, _design=design)


def power_curve(
    tau1_grid: ArrayLike,
    theta: float,
    *,
    tau0: float = REFERENCE_TAU0,
    n_sites: int = 100_000,
    n_replicates: int = 10_000,
    conf_level: float = 0.95,
    seed: SeedLike = None,
    streams: str = "shared",
    n_jobs: int = 1,
    backend: str = 'cpu',
) -> PowerCurveSolution:
    """
    power_test() at every true tau1 in `tau1_grid`.

    With streams='shared' every grid point continues one random stream in
    grid order. With streams='spawned' each grid point gets a child of the
    seed, and each of its replicates a child of that.

    Returns
    -------
    PowerCurveSolution
        Grid, power per grid point and the per-point solutions.
    """
    grid = check_array(tau1_grid, 'tau1_grid').ravel()
    check_finite(grid, 'tau1_grid')
    if grid.size == 0:
        raise ValidationError("tau1_grid: must contain at least one value")

    if streams == "shared":
        seeds = [np.random.default_rng(seed)] * grid.size
    elif isinstance(seed, np.random.Generator):
        seeds = seed.spawn(grid.size)
    else:
        parent = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
        seeds = parent.spawn(grid.size)

    solutions = tuple(
        power_test(
            float(tau1), theta,
            tau0=tau0,
            n_sites=n_sites,
            n_replicates=n_replicates,
            conf_level=conf_level,
            seed=point_seed,
            streams=streams,
            n_jobs=n_jobs,
            backend=backend,
        )
        for tau1, point_seed in zip(grid, seeds)
    )
    return PowerCurveSolution(tau1_grid=grid, solutions=solutions)
