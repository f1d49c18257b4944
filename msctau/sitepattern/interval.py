"""
Wald confidence intervals for tau built on the exp(-8*tau/3) scale.

The interval x_hat +/- z*sqrt(var) is symmetric on the transform scale.
Mapping back with tau = -3*ln(x)/8 reverses the order: the upper
transform endpoint becomes the lower tau bound.
"""

from __future__ import annotations

import numpy as np
from scipy import stats as sp_stats

from msctau.core.exceptions import UndefinedIntervalError, ValidationError
from msctau.core.validation import check_conf_level
from msctau.sitepattern._common import exp_transform, tau_from_transform


def critical_value(conf_level: float = 0.95) -> float:
    """Two-sided standard normal quantile; 1.959964 for 0.95."""
    conf_level = check_conf_level(conf_level)
    return float(sp_stats.norm.ppf(1.0 - (1.0 - conf_level) / 2.0))


def _transform_endpoints(tau_hat: float, variance: float, z: float) -> tuple[float, float]:
    if not np.isfinite(variance) or variance < 0.0:
        raise ValidationError(f"variance: must be finite and >= 0, got {variance}")
    center = float(exp_transform(tau_hat))
    half_width = z * float(np.sqrt(variance))
    return center - half_width, center + half_width


def back_transform_interval(
    tau_hat: float,
    variance: float,
    z: float,
    parameter: str = "tau",
) -> tuple[float, float]:
    """
    Interval for tau from a precomputed critical value `z`.

    Used by the simulation backends, which compute `z` once per run.
    See `wald_interval` for the contract.
    """
    x_lo, x_hi = _transform_endpoints(tau_hat, variance, z)
    if not x_lo < x_hi:
        raise UndefinedIntervalError(
            f"{parameter} interval undefined: zero standard error "
            f"(variance {variance:.6g})",
            parameter=parameter,
            lower_transform=x_lo,
            upper_transform=x_hi,
        )
    if not x_lo > 0.0:
        raise UndefinedIntervalError(
            f"{parameter} interval undefined: transform endpoints "
            f"({x_lo:.6g}, {x_hi:.6g}) not both positive",
            parameter=parameter,
            lower_transform=x_lo,
            upper_transform=x_hi,
        )
    # Decreasing back-transform swaps the endpoints
    return float(tau_from_transform(x_hi)), float(tau_from_transform(x_lo))


def transform_interval(
    tau_hat: float,
    variance: float,
    conf_level: float = 0.95,
) -> tuple[float, float]:
    """
    Wald interval on the exp(-8*tau/3) scale, (lower, upper).

    Raises:
        ValidationError: If variance is negative or non-finite.
    """
    return _transform_endpoints(tau_hat, variance, critical_value(conf_level))


def wald_interval(
    tau_hat: float,
    variance: float,
    conf_level: float = 0.95,
    parameter: str = "tau",
) -> tuple[float, float]:
    """
    Confidence interval for tau, (lower, upper) with lower < upper.

    Args:
        tau_hat: Point estimate of tau.
        variance: Variance of the exp(-8*tau/3) estimate.
        conf_level: Confidence level, default 0.95.
        parameter: Name used in error messages.

    Raises:
        UndefinedIntervalError: If the variance is zero, so the interval
            collapses to a point, or if the lower transform endpoint is
            <= 0, so that its logarithm does not exist.
        ValidationError: If variance is negative or non-finite.
    """
    return back_transform_interval(
        tau_hat, variance, critical_value(conf_level), parameter,
    )
