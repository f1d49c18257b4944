"""
Closed-form site-pattern probabilities.

Maps (tau0, tau1, theta) to the five aggregated site-pattern
probabilities of a 3-taxon species tree. Pure and deterministic.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from msctau.sitepattern._common import (
    ModelParameters,
    N_PATTERNS,
    exp_transform,
    scale_factor,
)


def site_probabilities(
    tau0: float | ModelParameters,
    tau1: float | None = None,
    theta: float | None = None,
) -> NDArray[np.floating[Any]]:
    """
    True site-pattern probabilities p0..p4.

    Args:
        tau0: Deeper speciation time, or a ModelParameters instance (in
            which case tau1 and theta must be omitted).
        tau1: Shallower speciation time.
        theta: Mutation-scaled population size.

    Returns:
        Array of shape (5,). Entries sum to one and p2 == p3 exactly.
        Entries lie in [0, 1] on the valid domain tau0 >= tau1 >= 0,
        theta > 0; outside it they are still finite but carry no
        probabilistic meaning.

    Raises:
        ValidationError: If a parameter is negative, non-finite or
            theta is not positive.
    """
    if isinstance(tau0, ModelParameters):
        if tau1 is not None or theta is not None:
            raise TypeError(
                "site_probabilities() takes either a ModelParameters or "
                "(tau0, tau1, theta), not both"
            )
        params = tau0
    else:
        params = ModelParameters(tau0=tau0, tau1=tau1, theta=theta)

    scale = scale_factor(params.theta)
    a0 = float(exp_transform(params.tau0)) / scale
    a1 = float(exp_transform(params.tau1)) / scale
    b = np.exp(-4.0 * params.tau1 / 3.0) / (3.0 + 2.0 * params.theta)

    p = np.empty(N_PATTERNS, dtype=np.float64)
    p[0] = (1.0 + 18.0 * a0 + 54.0 * a0 * b + 9.0 * a1) / 16.0
    p[1] = 3.0 * (1.0 - 6.0 * a0 - 18.0 * a0 * b + 9.0 * a1) / 16.0
    p[2] = 3.0 * (1.0 + 6.0 * a0 - 18.0 * a0 * b - 3.0 * a1) / 16.0
    p[3] = p[2]
    p[4] = 6.0 * (1.0 - 6.0 * a0 + 18.0 * a0 * b - 3.0 * a1) / 16.0
    return p
