"""
Multinomial frequency sampler.

Draws n_sites independent sites from the site-pattern distribution and
returns the observed frequencies. The random stream is always passed in;
nothing here touches global random state.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from msctau.core.validation import (
    check_array,
    check_finite,
    check_length,
    check_positive_int,
    check_simplex,
)
from msctau.sitepattern._common import N_PATTERNS, PROBABILITY_ATOL


def validate_probabilities(probabilities: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Convert and validate a site-pattern probability vector.

    Raises:
        ValidationError: If the vector is non-finite, has negative entries
            or does not sum to one within PROBABILITY_ATOL.
        DimensionError: If the vector does not have five entries.
    """
    p = check_array(probabilities, 'probabilities')
    check_length(p, N_PATTERNS, 'probabilities')
    check_finite(p, 'probabilities')
    check_simplex(p, 'probabilities', PROBABILITY_ATOL)
    return p


def sample_frequencies(
    probabilities: ArrayLike,
    n_sites: int,
    rng: np.random.Generator,
) -> NDArray[np.floating[Any]]:
    """
    One multinomial draw, normalised to frequencies.

    Args:
        probabilities: Site-pattern probabilities, shape (5,).
        n_sites: Number of independent sites (multinomial trials), >= 1.
        rng: Generator to draw from. Its state advances by one draw.

    Returns:
        Frequency vector, shape (5,), summing to one.

    Raises:
        ValidationError: If probabilities are malformed or n_sites < 1.
    """
    p = validate_probabilities(probabilities)
    n_sites = check_positive_int(n_sites, 'n_sites')
    # Rounding can leave tiny negatives or a total a hair off one
    p = np.clip(p, 0.0, None)
    p = p / p.sum()
    counts = rng.multinomial(n_sites, p)
    return counts / float(n_sites)
