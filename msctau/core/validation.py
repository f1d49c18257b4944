"""
Input validation utilities for msctau.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about caller intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numbers

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from msctau.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to numpy array.

    Accepts any array-like and converts to a float64 numpy array. Rejects
    inputs that result in object dtype (indicating mixed types or
    non-numeric data).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_length(array: NDArray[np.floating[Any]], length: int, name: str) -> None:
    """
    Verify array is 1-dimensional with exactly `length` entries.

    Raises:
        DimensionError: If array is not 1D or has the wrong length
    """
    if array.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D array, got {array.ndim}D with shape {array.shape}"
        )
    if array.shape[0] != length:
        raise DimensionError(
            f"{name}: expected {length} entries, got {array.shape[0]}"
        )


def check_simplex(
    array: NDArray[np.floating[Any]],
    name: str,
    atol: float,
) -> None:
    """
    Verify array is a probability vector.

    Entries must be non-negative (within atol) and sum to one (within atol).

    Raises:
        ValidationError: If any entry is negative or the total is not 1
    """
    if np.any(array < -atol):
        raise ValidationError(
            f"{name}: entries must be non-negative, got min {array.min():.6g}"
        )
    total = float(np.sum(array))
    if abs(total - 1.0) > atol:
        raise ValidationError(
            f"{name}: entries must sum to 1 (atol={atol:g}), got {total:.12g}"
        )


def check_positive_int(value: Any, name: str) -> int:
    """
    Verify value is an integer >= 1 and return it as int.

    Booleans are rejected even though they are ints.

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValidationError(
            f"{name}: expected a positive integer, got {value!r}"
        )
    if value < 1:
        raise ValidationError(f"{name}: must be >= 1, got {value}")
    return int(value)


def check_nonnegative_scalar(value: Any, name: str) -> float:
    """
    Verify value is a finite real >= 0 and return it as float.

    Raises:
        ValidationError: If value is not a finite non-negative number
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name}: expected a real number, got {value!r}")
    value = float(value)
    if not np.isfinite(value):
        raise ValidationError(f"{name}: must be finite, got {value}")
    if value < 0.0:
        raise ValidationError(f"{name}: must be >= 0, got {value}")
    return value


def check_positive_scalar(value: Any, name: str) -> float:
    """
    Verify value is a finite real > 0 and return it as float.

    Raises:
        ValidationError: If value is not a finite positive number
    """
    value = check_nonnegative_scalar(value, name)
    if value == 0.0:
        raise ValidationError(f"{name}: must be > 0, got {value}")
    return value


def check_conf_level(conf_level: Any) -> float:
    """
    Verify confidence level is in (0, 1).

    Raises:
        ValidationError: If conf_level is outside (0, 1)
    """
    if isinstance(conf_level, bool) or not isinstance(conf_level, numbers.Real):
        raise ValidationError(f"conf_level: expected a real number, got {conf_level!r}")
    if not (0.0 < conf_level < 1.0):
        raise ValidationError(f"conf_level must be in (0, 1), got {conf_level}")
    return float(conf_level)
