"""Data models for webttfb runs."""

import math
from dataclasses import dataclass, field
from enum import Enum


class Metric(Enum):
    """Timing fields reported by every probe."""

    CONNECT = "conn"
    FIRST_BYTE = "ttfb"
    TOTAL = "ttl"


class Criterion(Enum):
    """Ranking criteria accepted by the report."""

    STATUS = "status"
    CONNECT = "conn"
    FIRST_BYTE = "ttfb"
    TOTAL = "ttl"

    @property
    def metric(self) -> Metric | None:
        """Metric this criterion sorts by, or None for STATUS."""
        if self is Criterion.STATUS:
            return None
        return Metric(self.value)


@dataclass(frozen=True)
class VantagePoint:
    """A named network location from which a probe is issued."""

    id: str
    label: str


@dataclass(frozen=True)
class Measurement:
    """Timing triple in seconds.

    download_speed (bytes per second) is only reported by local probes.
    """

    connect_time: float = 0.0
    first_byte_time: float = 0.0
    total_time: float = 0.0
    download_speed: float | None = None

    def __post_init__(self):
        """Reject negative or non-finite values."""
        for name in ("connect_time", "first_byte_time", "total_time", "download_speed"):
            value = getattr(self, name)
            if value is None:
                continue
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
            if value < 0:
                raise ValueError(f"{name} must be >= 0")

    def value(self, metric: Metric) -> float:
        if metric is Metric.CONNECT:
            return self.connect_time
        if metric is Metric.FIRST_BYTE:
            return self.first_byte_time
        return self.total_time


# Placeholder for probes that did not produce a measurement
ZERO_MEASUREMENT = Measurement()


@dataclass
class ProbeResult:
    """Outcome of one dispatched probe, successful or not."""

    vantage: VantagePoint
    measurement: Measurement
    succeeded: bool
    sort_key: float = 0.0  # written by ranking.rank()

    def __post_init__(self):
        """Failed probes always carry the zero measurement."""
        if not self.succeeded:
            self.measurement = ZERO_MEASUREMENT

    @classmethod
    def placeholder(cls, vantage: VantagePoint) -> "ProbeResult":
        return cls(vantage=vantage, measurement=ZERO_MEASUREMENT, succeeded=False)


@dataclass(frozen=True)
class ProbeError:
    """Error log entry: which vantage point failed and why."""

    vantage_id: str
    cause: str

    def __str__(self):
        return f"{self.vantage_id}: {self.cause}"


@dataclass
class RunOutcome:
    """Result set and error log of a single orchestrator run."""

    results: list[ProbeResult] = field(default_factory=list)
    errors: list[ProbeError] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.errors)
