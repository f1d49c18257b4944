"""
Core infrastructure for msctau.

This module provides shared abstractions and utilities used by the
site-pattern model and the simulation driver.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing and tolerance tiers
"""

from msctau.core.protocols import Backend
from msctau.core.result import Result
from msctau.core.exceptions import (
    MscTauError,
    ValidationError,
    InvalidParameter,
    DimensionError,
    NumericalError,
    UndefinedEstimateError,
    UndefinedIntervalError,
    DegenerateVarianceWarning,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "MscTauError",
    "ValidationError",
    "InvalidParameter",
    "DimensionError",
    "NumericalError",
    "UndefinedEstimateError",
    "UndefinedIntervalError",
    "DegenerateVarianceWarning",
]
