"""
Delta-method variance of the exp(-8*tau/3) estimators.

The frequency vector of a multinomial draw of n sites has covariance

    M[i, i] = f_i (1 - f_i) / n,    M[i, j] = -f_i f_j / n,

evaluated here at the observed frequencies. The transform estimators are
linear in f, so v' M v is their variance with v the gradient:

    v0 = (k, 0, k/2, k/2, 0),    v1 = (k, k, 0, 0, 0),    k = 4/3 + 16*theta/9.

Every row of M sums to zero, so M is only meaningful against contrasts
like v0 and v1, not as a general covariance estimate.
"""

from __future__ import annotations

import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from msctau.core.exceptions import (
    DegenerateVarianceWarning,
    DimensionError,
    NumericalError,
)
from msctau.core.validation import check_positive_int, check_positive_scalar
from msctau.sitepattern._common import (
    N_PATTERNS,
    contrast_constant,
    validate_parameter,
)
from msctau.sitepattern.estimator import validate_frequencies

# Negative quadratic forms within this multiple of the form's magnitude
# are rounding error and get clamped to zero.
_CLAMP_RTOL = 1e-10


def multinomial_covariance(
    frequencies: ArrayLike,
    n_sites: int,
) -> NDArray[np.floating[Any]]:
    """
    Multinomial covariance of the frequency vector, shape (5, 5).

    Raises:
        ValidationError: If frequencies are malformed or n_sites < 1.
    """
    f = validate_frequencies(frequencies)
    n_sites = check_positive_int(n_sites, 'n_sites')
    return (np.diag(f) - np.outer(f, f)) / n_sites


def contrast_vector(theta: float, parameter: str) -> NDArray[np.floating[Any]]:
    """
    Gradient of the exp(-8*tau/3) estimator with respect to f.

    Returns v0 for 'tau0' and v1 for 'tau1'.
    """
    k = contrast_constant(check_positive_scalar(theta, 'theta'))
    if validate_parameter(parameter) == "tau0":
        return np.array([k, 0.0, k / 2.0, k / 2.0, 0.0])
    return np.array([k, k, 0.0, 0.0, 0.0])


def quadratic_form(
    covariance: NDArray[np.floating[Any]],
    contrast: NDArray[np.floating[Any]],
) -> tuple[float, bool]:
    """
    v' M v, clamped at zero when rounding makes it slightly negative.

    Returns:
        (value, clamped) where clamped is True if a negative value was
        replaced by zero.

    Raises:
        DimensionError: If shapes do not agree.
        NumericalError: If the form is negative beyond rounding error,
            which means `covariance` is not a covariance matrix.
    """
    if covariance.shape != (N_PATTERNS, N_PATTERNS) or contrast.shape != (N_PATTERNS,):
        raise DimensionError(
            f"expected covariance (5, 5) and contrast (5,), got "
            f"{covariance.shape} and {contrast.shape}"
        )
    value = float(contrast @ covariance @ contrast)
    if value >= 0.0:
        return value, False

    magnitude = float(np.abs(contrast) @ np.abs(covariance) @ np.abs(contrast))
    if -value <= _CLAMP_RTOL * magnitude:
        return 0.0, True
    raise NumericalError(
        f"quadratic form is negative ({value:.6g}) beyond rounding error "
        f"(magnitude {magnitude:.6g}); covariance is not positive semidefinite"
    )


def transform_variance(
    frequencies: ArrayLike,
    n_sites: int,
    theta: float,
    parameter: str,
) -> float:
    """
    Delta-method variance of the exp(-8*tau/3) estimate.

    Args:
        frequencies: Observed frequencies, shape (5,).
        n_sites: Number of sites the frequencies were computed from.
        theta: Known population-size parameter.
        parameter: 'tau0' or 'tau1'.

    Returns:
        Non-negative variance. Zero when the frequencies sit on a vertex
        of the simplex.

    Warns:
        DegenerateVarianceWarning: If rounding made the form negative and
            it was clamped to zero.
    """
    value, clamped = quadratic_form(
        multinomial_covariance(frequencies, n_sites),
        contrast_vector(theta, parameter),
    )
    if clamped:
        warnings.warn(
            f"{parameter} transform variance was negative through rounding; "
            f"clamped to 0",
            DegenerateVarianceWarning,
            stacklevel=2,
        )
    return value
