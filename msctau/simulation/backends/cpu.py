"""
CPU backends for the coverage and power simulations.

CPUCoverageBackend: sample -> estimate -> variance -> interval, per replicate.
CPUPowerBackend: Wald test of H0: tau1 = 0, per replicate.

Both draw from an explicit random stream built from the design. With
streams='shared' one Generator is consumed in replicate order; with
streams='spawned' each replicate gets its own child stream, so results do
not depend on n_jobs.
"""

from __future__ import annotations

import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from msctau.core.compute.timing import Timer
from msctau.core.exceptions import (
    DegenerateVarianceWarning,
    UndefinedEstimateError,
    UndefinedIntervalError,
)
from msctau.core.result import Result
from msctau.simulation._common import (
    CoverageParams,
    EstimateRecord,
    Exclusion,
    ParameterSummary,
    PowerParams,
    ReplicateStage,
    TestStatisticRecord,
)
from msctau.simulation.design import PowerDesign, SeedLike, SimulationDesign
from msctau.sitepattern._common import VALID_PARAMETERS, exp_transform
from msctau.sitepattern.covariance import (
    contrast_vector,
    multinomial_covariance,
    quadratic_form,
)
from msctau.sitepattern.estimator import estimate_tau
from msctau.sitepattern.interval import back_transform_interval, critical_value
from msctau.sitepattern.model import site_probabilities
from msctau.sitepattern.sampler import sample_frequencies

T = TypeVar('T')


def replicate_streams(
    seed: SeedLike,
    streams: str,
    n_replicates: int,
) -> np.random.Generator | list[np.random.Generator]:
    """
    Random streams for a run.

    Returns one Generator for streams='shared', or a list of
    `n_replicates` independent child Generators for streams='spawned'.
    A Generator passed as seed is used (or spawned from) directly, so
    successive runs sharing it continue one deterministic stream.
    """
    if streams == "shared":
        return np.random.default_rng(seed)
    if isinstance(seed, np.random.Generator):
        return seed.spawn(n_replicates)
    if not isinstance(seed, np.random.SeedSequence):
        seed = np.random.SeedSequence(seed)
    return [np.random.default_rng(child) for child in seed.spawn(n_replicates)]


def run_replicates(
    replicate: Callable[[int, np.random.Generator], T],
    n_replicates: int,
    rngs: np.random.Generator | Sequence[np.random.Generator],
    n_jobs: int,
) -> list[T]:
    """Run `replicate(index, rng)` for every index, preserving order."""
    if isinstance(rngs, np.random.Generator):
        return [replicate(b, rngs) for b in range(n_replicates)]
    if n_jobs == 1:
        return [replicate(b, rngs[b]) for b in range(n_replicates)]
    with ThreadPoolExecutor(max_workers=n_jobs) as executor:
        return list(executor.map(replicate, range(n_replicates), rngs))


def _clamp_warning(n_clamped: int, warnings_list: list[str]) -> None:
    if n_clamped == 0:
        return
    message = (
        f"{n_clamped} transform variance(s) were negative through rounding "
        f"and clamped to 0"
    )
    warnings_list.append(message)
    warnings.warn(message, DegenerateVarianceWarning, stacklevel=3)


def _summarize(
    parameter: str,
    true_value: float,
    tau_hat: NDArray,
    variance: NDArray,
    covered: NDArray,
    usable: NDArray,
) -> ParameterSummary:
    """Monte Carlo summary over the usable replicates of one parameter."""
    R = len(usable)
    m = int(usable.sum())
    n_covered = int(covered.sum())
    if m == 0:
        nan = float('nan')
        return ParameterSummary(
            parameter=parameter, true_value=true_value, n_usable=0,
            n_excluded=R, mean=nan, bias=nan, variance=nan, rmse=nan,
            mean_transform_variance=nan, empirical_transform_variance=nan,
            coverage=nan, coverage_conservative=0.0, coverage_se=nan,
        )

    t = tau_hat[usable]
    x = exp_transform(t)
    mean = float(np.mean(t))
    coverage = n_covered / m
    return ParameterSummary(
        parameter=parameter,
        true_value=true_value,
        n_usable=m,
        n_excluded=R - m,
        mean=mean,
        bias=mean - true_value,
        variance=float(np.var(t, ddof=1)) if m > 1 else float('nan'),
        rmse=float(np.sqrt(np.mean((t - true_value) ** 2))),
        mean_transform_variance=float(np.mean(variance[usable])),
        empirical_transform_variance=float(np.var(x, ddof=1)) if m > 1 else float('nan'),
        coverage=coverage,
        coverage_conservative=n_covered / R,
        coverage_se=float(np.sqrt(coverage * (1.0 - coverage) / m)),
    )


class CPUCoverageBackend:
    """
    CPU backend for the coverage simulation.

    A replicate that yields an undefined estimate or interval for one
    parameter is excluded from that parameter's statistics only and
    recorded as an Exclusion; the run continues.
    """

    @property
    def name(self) -> str:
        return 'cpu_coverage'

    def solve(self, design: SimulationDesign) -> Result[CoverageParams]:
        """Run the coverage simulation and return Result[CoverageParams]."""
        timer = Timer()
        timer.start()

        params = design.params
        R = design.n_replicates
        n_sites = design.n_sites
        theta = params.theta
        probs = site_probabilities(params)
        z = critical_value(design.conf_level)
        contrasts = {p: contrast_vector(theta, p) for p in VALID_PARAMETERS}

        def replicate(b: int, rng: np.random.Generator):
            exclusions: list[Exclusion] = []
            n_clamped = 0
            freqs = sample_frequencies(probs, n_sites, rng)
            cov = multinomial_covariance(freqs, n_sites)
            fields = {}
            for parameter in VALID_PARAMETERS:
                variance, clamped = quadratic_form(cov, contrasts[parameter])
                n_clamped += clamped
                tau_hat = interval = None
                try:
                    tau_hat = estimate_tau(freqs, theta, parameter)
                    interval = back_transform_interval(tau_hat, variance, z, parameter)
                except UndefinedEstimateError as e:
                    exclusions.append(Exclusion(
                        b, parameter, ReplicateStage.ESTIMATING, str(e),
                        e.log_argument,
                    ))
                except UndefinedIntervalError as e:
                    exclusions.append(Exclusion(
                        b, parameter, ReplicateStage.INTERVAL_BUILDING, str(e),
                        e.lower_transform,
                    ))
                fields[f'{parameter}_hat'] = tau_hat
                fields[f'{parameter}_variance'] = variance
                fields[f'{parameter}_interval'] = interval
            return freqs, EstimateRecord(**fields), exclusions, n_clamped

        with timer.section('replicates'):
            rngs = replicate_streams(design.seed, design.streams, R)
            outcomes = run_replicates(replicate, R, rngs, design.n_jobs)

        with timer.section('summary_statistics'):
            frequencies = np.array([o[0] for o in outcomes])
            records = [o[1] for o in outcomes]
            exclusions = tuple(e for o in outcomes for e in o[2])
            n_clamped = sum(o[3] for o in outcomes)

            arrays = {}
            summaries = {}
            for parameter in VALID_PARAMETERS:
                true_value = params.true_value(parameter)
                tau_hat = np.array([
                    np.nan if r is None else r
                    for r in (getattr(rec, f'{parameter}_hat') for rec in records)
                ])
                variance = np.array([getattr(rec, f'{parameter}_variance') for rec in records])
                interval = np.full((R, 2), np.nan)
                usable = np.zeros(R, dtype=bool)
                for b, rec in enumerate(records):
                    bounds = getattr(rec, f'{parameter}_interval')
                    if bounds is not None:
                        interval[b] = bounds
                        usable[b] = True
                covered = np.zeros(R, dtype=bool)
                covered[usable] = (
                    (interval[usable, 0] < true_value)
                    & (true_value < interval[usable, 1])
                )
                arrays[parameter] = (tau_hat, variance, interval, covered, usable)
                summaries[parameter] = _summarize(
                    parameter, true_value, tau_hat, variance, covered, usable,
                )

        warnings_list: list[str] = []
        _clamp_warning(n_clamped, warnings_list)
        for parameter, summary in summaries.items():
            if summary.n_excluded:
                warnings_list.append(
                    f"{parameter}: {summary.n_excluded} of {R} replicates excluded "
                    f"(undefined estimate or interval)"
                )
        if not params.is_ordered:
            warnings_list.append(
                f"tau0={params.tau0:g} < tau1={params.tau1:g}: outside the "
                f"model's topological ordering"
            )

        timer.stop()

        result_params = CoverageParams(
            frequencies=frequencies,
            tau0_hat=arrays['tau0'][0],
            tau1_hat=arrays['tau1'][0],
            tau0_variance=arrays['tau0'][1],
            tau1_variance=arrays['tau1'][1],
            tau0_interval=arrays['tau0'][2],
            tau1_interval=arrays['tau1'][2],
            covered_tau0=arrays['tau0'][3],
            covered_tau1=arrays['tau1'][3],
            usable_tau0=arrays['tau0'][4],
            usable_tau1=arrays['tau1'][4],
            coverage_tau0=summaries['tau0'].coverage,
            coverage_tau1=summaries['tau1'].coverage,
            summaries=summaries,
            exclusions=exclusions,
            R=R,
        )

        return Result(
            params=result_params,
            info={
                'n_sites': n_sites,
                'n_replicates': R,
                'conf_level': design.conf_level,
                'critical_value': z,
                'streams': design.streams,
                'n_jobs': design.n_jobs,
                'ordered': params.is_ordered,
                'n_usable_tau0': summaries['tau0'].n_usable,
                'n_usable_tau1': summaries['tau1'].n_usable,
                'n_excluded_tau0': summaries['tau0'].n_excluded,
                'n_excluded_tau1': summaries['tau1'].n_excluded,
                'n_variance_clamped': n_clamped,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class CPUPowerBackend:
    """
    CPU backend for the Wald test of H0: tau1 = 0.

    Z = (exp(-8*tau1_hat/3) - 1) / sqrt(var), rejecting when |Z| exceeds
    the two-sided critical value. Replicates with an undefined estimate or
    a zero standard error are excluded.
    """

    @property
    def name(self) -> str:
        return 'cpu_power'

    def solve(self, design: PowerDesign) -> Result[PowerParams]:
        """Run the power simulation and return Result[PowerParams]."""
        timer = Timer()
        timer.start()

        params = design.params
        R = design.n_replicates
        n_sites = design.n_sites
        theta = params.theta
        probs = site_probabilities(params)
        z = critical_value(design.conf_level)
        contrast = contrast_vector(theta, "tau1")

        def replicate(b: int, rng: np.random.Generator):
            freqs = sample_frequencies(probs, n_sites, rng)
            variance, clamped = quadratic_form(
                multinomial_covariance(freqs, n_sites), contrast,
            )
            try:
                tau1_hat = estimate_tau(freqs, theta, "tau1")
            except UndefinedEstimateError as e:
                exclusion = Exclusion(
                    b, "tau1", ReplicateStage.ESTIMATING, str(e), e.log_argument,
                )
                return None, TestStatisticRecord(None, None), exclusion, clamped
            if variance == 0.0:
                exclusion = Exclusion(
                    b, "tau1", ReplicateStage.ESTIMATING,
                    "tau1 Wald statistic undefined: zero standard error", 0.0,
                )
                return tau1_hat, TestStatisticRecord(None, None), exclusion, clamped
            statistic = (float(exp_transform(tau1_hat)) - 1.0) / np.sqrt(variance)
            record = TestStatisticRecord(float(statistic), bool(abs(statistic) > z))
            return tau1_hat, record, None, clamped

        with timer.section('replicates'):
            rngs = replicate_streams(design.seed, design.streams, R)
            outcomes = run_replicates(replicate, R, rngs, design.n_jobs)

        with timer.section('summary_statistics'):
            tau1_hat = np.array([np.nan if o[0] is None else o[0] for o in outcomes])
            records = [o[1] for o in outcomes]
            exclusions = tuple(o[2] for o in outcomes if o[2] is not None)
            n_clamped = sum(o[3] for o in outcomes)

            usable = np.array([rec.statistic is not None for rec in records], dtype=bool)
            statistics = np.array([
                np.nan if rec.statistic is None else rec.statistic for rec in records
            ])
            rejected = np.array([bool(rec.rejected) for rec in records], dtype=bool)
            p_values = np.full(R, np.nan)
            p_values[usable] = 2.0 * sp_stats.norm.sf(np.abs(statistics[usable]))

            m = int(usable.sum())
            n_rejected = int(rejected.sum())
            power = n_rejected / m if m else float('nan')

        warnings_list: list[str] = []
        _clamp_warning(n_clamped, warnings_list)
        if exclusions:
            warnings_list.append(
                f"tau1: {len(exclusions)} of {R} replicates excluded "
                f"(undefined estimate or zero standard error)"
            )

        timer.stop()

        result_params = PowerParams(
            tau1_hat=tau1_hat,
            statistics=statistics,
            p_values=p_values,
            rejected=rejected,
            usable=usable,
            power=power,
            power_conservative=n_rejected / R,
            critical_value=z,
            exclusions=exclusions,
            R=R,
        )

        return Result(
            params=result_params,
            info={
                'n_sites': n_sites,
                'n_replicates': R,
                'conf_level': design.conf_level,
                'alpha': design.alpha,
                'critical_value': z,
                'streams': design.streams,
                'n_jobs': design.n_jobs,
                'n_usable': m,
                'n_excluded': R - m,
                'n_variance_clamped': n_clamped,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
