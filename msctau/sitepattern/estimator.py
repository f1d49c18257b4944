"""
Closed-form moment estimators for tau0 and tau1.

Inverts the site-pattern model given a known theta:

    exp(-8*tau0/3) = (3 + 4*theta) * (4*f0 + 2*f2 + 2*f3 - 1) / 9
    exp(-8*tau1/3) = (3 + 4*theta) * (4*f0 + 4*f1 - 1) / 9

The right-hand sides are linear in the frequencies; their gradients are
the contrast vectors used by the covariance module.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from msctau.core.exceptions import UndefinedEstimateError
from msctau.core.validation import (
    check_array,
    check_finite,
    check_length,
    check_positive_scalar,
    check_simplex,
)
from msctau.sitepattern._common import (
    N_PATTERNS,
    PROBABILITY_ATOL,
    scale_factor,
    tau_from_transform,
    validate_parameter,
)

# Linear combinations of f0..f4 that isolate 1 + 9*a0 and 1 + 9*a1
_PATTERN_WEIGHTS = {
    "tau0": np.array([4.0, 0.0, 2.0, 2.0, 0.0]),
    "tau1": np.array([4.0, 4.0, 0.0, 0.0, 0.0]),
}


def validate_frequencies(frequencies: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Convert and validate an observed frequency vector.

    Raises:
        ValidationError: If the vector is non-finite, negative or does not
            sum to one.
        DimensionError: If the vector does not have five entries.
    """
    f = check_array(frequencies, 'frequencies')
    check_length(f, N_PATTERNS, 'frequencies')
    check_finite(f, 'frequencies')
    check_simplex(f, 'frequencies', PROBABILITY_ATOL)
    return f


def transform_estimate(
    frequencies: ArrayLike,
    theta: float,
    parameter: str,
) -> float:
    """
    Moment estimate of exp(-8*tau/3) for tau0 or tau1.

    This is the logarithm argument of `estimate_tau`; it may be zero or
    negative for noisy frequencies.
    """
    f = validate_frequencies(frequencies)
    theta = check_positive_scalar(theta, 'theta')
    weights = _PATTERN_WEIGHTS[validate_parameter(parameter)]
    return scale_factor(theta) * (float(weights @ f) - 1.0) / 9.0


def estimate_tau(
    frequencies: ArrayLike,
    theta: float,
    parameter: str,
) -> float:
    """
    Moment estimate of tau0 or tau1.

    Args:
        frequencies: Observed site-pattern frequencies, shape (5,).
        theta: Known population-size parameter, > 0.
        parameter: 'tau0' or 'tau1'.

    Returns:
        The point estimate. It can be negative when sampling noise makes
        the transform exceed one; that is still a real number.

    Raises:
        UndefinedEstimateError: If the logarithm argument is <= 0.
        ValidationError: If the inputs are malformed.
    """
    x = transform_estimate(frequencies, theta, parameter)
    if not x > 0.0:
        raise UndefinedEstimateError(
            f"{parameter} estimate undefined: log argument {x:.6g} <= 0",
            parameter=parameter,
            log_argument=x,
        )
    return float(tau_from_transform(x))


def estimate_taus(
    frequencies: ArrayLike,
    theta: float,
) -> tuple[float, float]:
    """
    Estimate (tau0, tau1) together.

    Raises:
        UndefinedEstimateError: If either estimate is undefined; the
            exception's `parameter` names the first one that failed.
    """
    return (
        estimate_tau(frequencies, theta, "tau0"),
        estimate_tau(frequencies, theta, "tau1"),
    )
