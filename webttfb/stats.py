"""Trimmed-mean statistics over a result set."""

from typing import Iterable

from webttfb.models import Metric, ProbeResult

MIN_SAMPLES = 3


def trimmed_mean(values: Iterable[float]) -> float:
    """Mean after dropping the single lowest and highest value.

    Returns 0.0 when fewer than 3 values are given, since nothing would be
    left after trimming. With exactly 3 values this is the median.

    Examples:
        >>> trimmed_mean([3.0, 0.4, 0.6])
        0.6
        >>> trimmed_mean([1.0, 2.0])
        0.0
    """
    ordered = sorted(values)
    if len(ordered) < MIN_SAMPLES:
        return 0.0

    kept = ordered[1:-1]
    return sum(kept) / len(kept)


def average(results: Iterable[ProbeResult], metric: Metric) -> float:
    """Trimmed-mean of one metric across all results.

    Failed probes are included with their zero placeholder value, so one
    failure is trimmed away as the low outlier.
    """
    return trimmed_mean(result.measurement.value(metric) for result in results)
