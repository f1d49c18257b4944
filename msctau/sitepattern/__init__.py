"""
Site-pattern model for a 3-taxon species tree.

Closed-form forward model, multinomial sampler, moment estimators,
delta-method variances and Wald intervals.

Usage:
    from msctau.sitepattern import (
        site_probabilities, sample_frequencies, estimate_taus,
        transform_variance, wald_interval,
    )

    p = site_probabilities(0.002, 0.001, 0.001)
    f = sample_frequencies(p, 100_000, np.random.default_rng(1))
    tau0_hat, tau1_hat = estimate_taus(f, theta=0.001)
    var0 = transform_variance(f, 100_000, 0.001, "tau0")
    lo, hi = wald_interval(tau0_hat, var0)
"""

from msctau.sitepattern._common import (
    ModelParameters,
    N_PATTERNS,
    PROBABILITY_ATOL,
    REFERENCE_TAU0,
    exp_transform,
    tau_from_transform,
)
from msctau.sitepattern.model import site_probabilities
from msctau.sitepattern.sampler import sample_frequencies
from msctau.sitepattern.estimator import (
    estimate_tau,
    estimate_taus,
    transform_estimate,
)
from msctau.sitepattern.covariance import (
    multinomial_covariance,
    contrast_vector,
    transform_variance,
)
from msctau.sitepattern.interval import (
    back_transform_interval,
    critical_value,
    transform_interval,
    wald_interval,
)

__all__ = [
    "ModelParameters",
    "N_PATTERNS",
    "PROBABILITY_ATOL",
    "REFERENCE_TAU0",
    "exp_transform",
    "tau_from_transform",
    "site_probabilities",
    "sample_frequencies",
    "estimate_tau",
    "estimate_taus",
    "transform_estimate",
    "multinomial_covariance",
    "contrast_vector",
    "transform_variance",
    "back_transform_interval",
    "critical_value",
    "transform_interval",
    "wald_interval",
]
