"""
Core protocols for msctau.

Backends are matched structurally: any object with a `name` and a
`solve(design)` returning a Result qualifies.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from msctau.core.result import Result

D = TypeVar('D', contravariant=True)  # Design type
P = TypeVar('P', covariant=True)      # Parameter payload type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for simulation backends.

    Each backend takes a frozen design and produces a parameter payload
    wrapped in a Result. Backends are stateless: the seed, stream mode and
    worker count all travel on the design.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{mode}', e.g. 'cpu_coverage', 'cpu_power'.
        """
        ...

    def solve(self, design: D) -> Result[P]:
        """
        Run the simulation described by `design`.

        Raises:
            ValidationError: If design is invalid for this backend
            NumericalError: If a variance is negative beyond rounding
        """
        ...
