"""
Exception hierarchy for msctau.

All exceptions inherit from MscTauError so callers can catch any
library-specific error. Undefined point estimates and intervals are
NumericalError subclasses carrying the offending values, so the
simulation driver can record why a replicate was excluded.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages show actual vs expected values
    - Never catch and re-raise with less information
"""


class MscTauError(Exception):
    """Base exception for all msctau errors."""
    pass


class ValidationError(MscTauError):
    """
    Input validation failed.

    Raised when caller-provided inputs fail validation checks: malformed
    probability vectors, non-positive trial or replicate counts, negative
    speciation times, and so on. Fatal to the call that raised it.
    """
    pass


# The name used for malformed caller input throughout the documentation.
InvalidParameter = ValidationError


class DimensionError(ValidationError):
    """
    Array has the wrong shape.

    Raised when a site-pattern vector does not have exactly five entries,
    or a contrast does not match the covariance matrix.
    """
    pass


class NumericalError(MscTauError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class UndefinedEstimateError(NumericalError):
    """
    Point estimate is undefined.

    Raised when the argument of the logarithm in the moment estimator is
    not positive, which happens when sampling noise pushes the observed
    frequencies outside the region reachable by any parameter triple.

    Attributes:
        parameter: Which speciation time was being estimated ('tau0' or 'tau1')
        log_argument: The non-positive value passed to the logarithm
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        log_argument: float | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.log_argument = log_argument


class UndefinedIntervalError(NumericalError):
    """
    Confidence interval cannot be back-transformed.

    Raised when an endpoint of the Wald interval on the exp(-8*tau/3)
    scale is not positive, so its logarithm does not exist.

    Attributes:
        parameter: Which speciation time the interval is for
        lower_transform: Lower endpoint on the transform scale
        upper_transform: Upper endpoint on the transform scale
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        lower_transform: float | None = None,
        upper_transform: float | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.lower_transform = lower_transform
        self.upper_transform = upper_transform


class DegenerateVarianceWarning(RuntimeWarning):
    """
    Delta-method variance came out negative through rounding.

    The quadratic form is clamped to zero. Issued through the warnings
    module; never fatal.
    """
    pass
