"""Simulation backends. CPU only."""

from msctau.simulation.backends.cpu import CPUCoverageBackend, CPUPowerBackend

__all__ = ["CPUCoverageBackend", "CPUPowerBackend"]
