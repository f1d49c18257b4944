"""
Generic result container for all msctau computations.

The Result class provides a standardized envelope that all domain-specific
results use. This enables shared tooling for timing, diagnostics and
reproducibility while allowing each simulation mode to define its own
parameter payload.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (exclusion counts, stream mode)
    - timing is optional (don't burden unit tests)
    - provenance records library versions so a run can be reproduced
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

import numpy as np
import scipy

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Versions of the packages that determine numerical output."""
    from msctau import __version__
    return {
        'msctau_version': __version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for simulation runs.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (estimates, intervals, statistics)
        info: Structured metadata (n_usable, n_excluded, streams, ...)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions at the time of computation

    Examples:
        >>> Result(
        ...     params=CoverageParams(...),
        ...     info={'n_usable_tau0': 9998, 'n_excluded_tau0': 2},
        ...     timing={'total_seconds': 1.2},
        ...     backend_name='cpu_coverage'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
