"""
Common types and the shared tau <-> probability transform.

ModelParameters is the frozen (tau0, tau1, theta) triple. The transform
helpers are the single home of the 8/3 exponent and the 3 + 4*theta
scale, used by the forward model, the estimator, the covariance
contrasts and the interval back-transform alike.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from msctau.core.exceptions import ValidationError
from msctau.core.validation import check_nonnegative_scalar, check_positive_scalar


N_PATTERNS = 5                  # p0..p4
PROBABILITY_ATOL = 1e-9         # simplex tolerance for probability vectors
REFERENCE_TAU0 = 0.001          # nominal tau0 used by the tau1 = 0 test
VALID_PARAMETERS = ("tau0", "tau1")


def validate_parameter(parameter: str) -> str:
    """Validate and return a speciation-time selector ('tau0' or 'tau1')."""
    if parameter not in VALID_PARAMETERS:
        raise ValidationError(
            f"parameter must be one of {VALID_PARAMETERS}, got {parameter!r}"
        )
    return parameter


def exp_transform(tau):
    """exp(-8*tau/3), the scale on which estimators are linear in frequencies."""
    return np.exp(-8.0 * np.asarray(tau, dtype=np.float64) / 3.0)


def tau_from_transform(x):
    """Inverse of exp_transform: -3*ln(x)/8. Caller guarantees x > 0."""
    return -3.0 * np.log(x) / 8.0


def scale_factor(theta: float) -> float:
    """3 + 4*theta, the denominator shared by a0 and a1."""
    return 3.0 + 4.0 * theta


def contrast_constant(theta: float) -> float:
    """k = (3 + 4*theta) * 4/9 = 4/3 + 16*theta/9."""
    return 4.0 * scale_factor(theta) / 9.0


@dataclass(frozen=True)
class ModelParameters:
    """
    Parameters of the 3-taxon multispecies coalescent model.

    Attributes:
        tau0: Deeper speciation time, coalescent units, >= 0.
        tau1: Shallower speciation time, coalescent units, >= 0.
        theta: Mutation-scaled population size, > 0.

    The evolutionary reading of the model requires tau0 >= tau1; that
    ordering is reported by `is_ordered` but not enforced. Simulation
    designs instead reject triples whose site-pattern probabilities
    leave [0, 1].
    """
    tau0: float
    tau1: float
    theta: float

    def __post_init__(self):
        object.__setattr__(self, 'tau0', check_nonnegative_scalar(self.tau0, 'tau0'))
        object.__setattr__(self, 'tau1', check_nonnegative_scalar(self.tau1, 'tau1'))
        object.__setattr__(self, 'theta', check_positive_scalar(self.theta, 'theta'))

    @property
    def is_ordered(self) -> bool:
        """True when tau0 >= tau1 (the valid topological ordering)."""
        return self.tau0 >= self.tau1

    def true_value(self, parameter: str) -> float:
        """Return tau0 or tau1 by name."""
        return getattr(self, validate_parameter(parameter))

    def __repr__(self) -> str:
        return (
            f"ModelParameters(tau0={self.tau0:g}, tau1={self.tau1:g}, "
            f"theta={self.theta:g})"
        )
