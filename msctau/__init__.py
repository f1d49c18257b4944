"""
msctau: moment estimators for speciation times under the multispecies coalescent.

Closed-form estimators of tau0 and tau1 for a 3-taxon species tree from
site-pattern frequencies, with delta-method variances, Wald intervals and
a Monte Carlo driver to study their bias, coverage and power.

Submodules:
    sitepattern: Forward model, sampler, estimators, variances, intervals
    simulation: Coverage and power studies
    core: Result envelope, exceptions, validation, timing
"""

__version__ = "0.1.0"

from msctau import sitepattern
from msctau import simulation
from msctau.simulation import simulate_coverage, power_test, power_curve

__all__ = [
    "__version__",
    "sitepattern",
    "simulation",
    "simulate_coverage",
    "power_test",
    "power_curve",
]
