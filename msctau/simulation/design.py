"""
Design classes for the simulation driver.

SimulationDesign and PowerDesign encapsulate all inputs needed by the
backends to run a study. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from msctau.core.exceptions import ValidationError
from msctau.core.validation import (
    check_conf_level,
    check_nonnegative_scalar,
    check_positive_int,
)
from msctau.simulation._common import VALID_STREAMS
from msctau.sitepattern._common import ModelParameters, REFERENCE_TAU0
from msctau.sitepattern.model import site_probabilities
from msctau.sitepattern.sampler import validate_probabilities

SeedLike = int | np.random.SeedSequence | np.random.Generator | None


def _validate_run_settings(
    n_sites: Any,
    n_replicates: Any,
    conf_level: Any,
    seed: Any,
    streams: Any,
    n_jobs: Any,
) -> tuple[int, int, float, SeedLike, str, int]:
    """Shared checks for the settings every simulation mode takes."""
    n_sites = check_positive_int(n_sites, 'n_sites')
    n_replicates = check_positive_int(n_replicates, 'n_replicates')
    conf_level = check_conf_level(conf_level)
    n_jobs = check_positive_int(n_jobs, 'n_jobs')

    if streams not in VALID_STREAMS:
        raise ValidationError(
            f"streams must be one of {VALID_STREAMS}, got {streams!r}"
        )
    if streams == "shared" and n_jobs > 1:
        raise ValidationError(
            f"n_jobs={n_jobs} requires streams='spawned'; a shared stream "
            f"must be consumed in replicate order"
        )

    if seed is not None and not isinstance(
        seed, (int, np.integer, np.random.SeedSequence, np.random.Generator)
    ):
        raise ValidationError(
            f"seed must be an int, SeedSequence, Generator or None, "
            f"got {type(seed).__name__}"
        )
    if isinstance(seed, bool) or (isinstance(seed, (int, np.integer)) and seed < 0):
        raise ValidationError(f"seed must be a non-negative integer, got {seed!r}")

    return n_sites, n_replicates, conf_level, seed, streams, n_jobs


def _check_model_domain(params: ModelParameters) -> None:
    """Reject triples whose closed-form probabilities cannot be sampled."""
    try:
        validate_probabilities(site_probabilities(params))
    except ValidationError as e:
        raise ValidationError(
            f"{params!r} does not give valid site-pattern probabilities: {e}"
        ) from e


@dataclass(frozen=True)
class SimulationDesign:
    """
    Frozen design for a coverage simulation.

    Attributes:
        params: True (tau0, tau1, theta) generating the data.
        n_sites: Sites per replicate (multinomial trials).
        n_replicates: Number of independent replicates.
        conf_level: Confidence level of the Wald intervals.
        seed: Seed, SeedSequence or Generator for the random stream.
        streams: 'shared' (one stream in replicate order) or 'spawned'
            (one child stream per replicate).
        n_jobs: Worker threads; > 1 only with streams='spawned'.
    """
    params: ModelParameters
    n_sites: int
    n_replicates: int
    conf_level: float
    seed: SeedLike
    streams: str
    n_jobs: int

    @classmethod
    def for_coverage(
        cls,
        tau0: float,
        tau1: float,
        theta: float,
        *,
        n_sites: int = 100_000,
        n_replicates: int = 10_000,
        conf_level: float = 0.95,
        seed: SeedLike = None,
        streams: str = "shared",
        n_jobs: int = 1,
    ) -> SimulationDesign:
        """
        Create a coverage design with validation.

        Raises:
            ValidationError: If any input is invalid.
        """
        params = ModelParameters(tau0=tau0, tau1=tau1, theta=theta)
        _check_model_domain(params)
        settings = _validate_run_settings(
            n_sites, n_replicates, conf_level, seed, streams, n_jobs,
        )
        return cls(params, *settings)


@dataclass(frozen=True)
class PowerDesign:
    """
    Frozen design for the Wald test of H0: tau1 = 0.

    Data are generated under (tau0, tau1, theta) where tau1 is the true
    value under study and tau0 is the nominal reference. Same run settings
    as SimulationDesign.
    """
    params: ModelParameters
    n_sites: int
    n_replicates: int
    conf_level: float
    seed: SeedLike
    streams: str
    n_jobs: int

    @property
    def alpha(self) -> float:
        """Nominal size of the test."""
        return 1.0 - self.conf_level

    @classmethod
    def for_power_test(
        cls,
        tau1: float,
        theta: float,
        *,
        tau0: float = REFERENCE_TAU0,
        n_sites: int = 100_000,
        n_replicates: int = 10_000,
        conf_level: float = 0.95,
        seed: SeedLike = None,
        streams: str = "shared",
        n_jobs: int = 1,
    ) -> PowerDesign:
        """
        Create a power-test design with validation.

        Args:
            tau1: True shallower speciation time (0 for type-I error).
            theta: Known population-size parameter.
            tau0: Reference deeper speciation time, default 0.001.

        Raises:
            ValidationError: If any input is invalid.
        """
        tau1 = check_nonnegative_scalar(tau1, 'tau1')
        params = ModelParameters(tau0=tau0, tau1=tau1, theta=theta)
        _check_model_domain(params)
        settings = _validate_run_settings(
            n_sites, n_replicates, conf_level, seed, streams, n_jobs,
        )
        return cls(params, *settings)
