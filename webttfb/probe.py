"""Probe abstraction for webttfb timing sources."""

import random
from typing import Protocol

from webttfb.errors import ProbeFailure
from webttfb.models import Measurement


class Probe(Protocol):
    """Protocol defining the interface for timing probes.

    Implementations enforce their own timeout and signal failure by raising,
    preferably ProbeFailure.
    """

    def measure(self, domain: str, vantage_id: str, private: bool = False) -> Measurement:
        """Run one timing test against domain from the given vantage point."""
        ...


class FakeProbe:
    """Generates simulated timings for testing and offline use."""

    def __init__(self, seed: int | None = None, failure_probability: float = 0.05):
        """Initialize with optional random seed for deterministic behavior."""
        # Isolated random instance, workers call measure() concurrently
        self._random = random.Random(seed)

        # Simulation parameters (seconds)
        self.base_connect = 0.15
        self.base_first_byte = 0.45
        self.transfer = 0.20
        self.variance = 0.08
        self.spike_probability = 0.05
        self.spike_multiplier = 3.0
        self.failure_probability = failure_probability

    def measure(self, domain: str, vantage_id: str, private: bool = False) -> Measurement:
        """Generate a single simulated measurement."""
        if not domain or not domain.strip():
            raise ValueError("Domain cannot be empty")

        if self._random.random() < self.failure_probability:
            raise ProbeFailure(vantage_id, "simulated probe failure")

        factor = 1.0
        if self._random.random() < self.spike_probability:
            factor = self.spike_multiplier

        connect = max(0.001, factor * self.base_connect + self._random.gauss(0, self.variance / 4))
        first_byte = connect + max(0.001, factor * self.base_first_byte + self._random.gauss(0, self.variance))
        total = first_byte + max(0.001, self.transfer + self._random.gauss(0, self.variance / 2))

        return Measurement(
            connect_time=round(connect, 3),
            first_byte_time=round(first_byte, 3),
            total_time=round(total, 3),
        )
