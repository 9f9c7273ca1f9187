"""Deterministic ranking of probe results."""

from typing import Callable, Iterable

from webttfb.models import Criterion, ProbeResult

STATUS_SUCCESS_KEY = 1.0
STATUS_FAILURE_KEY = 2.0


def _status_key(result: ProbeResult) -> float:
    return STATUS_SUCCESS_KEY if result.succeeded else STATUS_FAILURE_KEY


def key_function(criterion: Criterion) -> Callable[[ProbeResult], float]:
    """Return the sort key function for a ranking criterion."""
    metric = criterion.metric
    if metric is None:
        return _status_key
    return lambda result: result.measurement.value(metric)


def rank(results: Iterable[ProbeResult], criterion: Criterion = Criterion.STATUS) -> list[ProbeResult]:
    """Order results by criterion, failed probes always last.

    Updates sort_key on every result and returns a new list; the sort is
    stable, so ties keep their input order. Ranking the same results again
    with another criterion only rewrites sort_key.
    """
    key = key_function(criterion)
    ranked = list(results)

    for result in ranked:
        result.sort_key = key(result)

    ranked.sort(key=lambda result: (not result.succeeded, result.sort_key))
    return ranked
