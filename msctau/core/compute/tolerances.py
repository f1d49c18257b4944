"""
Tolerance tiers for numerical validation.

Defines precision expectations for the closed-form paths and for the
Monte Carlo properties checked by the test suite.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Absolute and relative tolerances for one kind of comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Closed-form identities (probabilities sum to one, p2 == p3)
CLOSED_FORM = ToleranceTier(
    rtol=1e-12,
    atol=1e-9,
    name='closed_form',
    description='Exact algebraic identities evaluated in double precision',
)

# Estimator applied to the true probability vector
ROUND_TRIP = ToleranceTier(
    rtol=1e-6,
    atol=1e-6,
    name='round_trip',
    description='Estimator recovering tau from noiseless probabilities',
)

# Coverage and rejection rates from 10 000 replicates
MONTE_CARLO = ToleranceTier(
    rtol=0.0,
    atol=0.02,
    name='monte_carlo',
    description='Statistical tolerance on Monte Carlo frequencies',
)
