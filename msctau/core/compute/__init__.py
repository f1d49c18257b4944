"""
Compute utilities shared by the simulation backends.

    timing: Timer, timed
    tolerances: Tolerance tiers for numerical comparison
"""

from msctau.core.compute.timing import Timer, timed
from msctau.core.compute.tolerances import (
    ToleranceTier,
    CLOSED_FORM,
    ROUND_TRIP,
    MONTE_CARLO,
)

__all__ = [
    "Timer",
    "timed",
    "ToleranceTier",
    "CLOSED_FORM",
    "ROUND_TRIP",
    "MONTE_CARLO",
]
