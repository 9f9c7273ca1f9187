"""Concurrent probe fan-out with a barrier join."""

import logging
from typing import Callable, Iterable

from PySide6.QtCore import QMutex, QMutexLocker, QThreadPool

from webttfb.errors import ConfigurationError
from webttfb.models import ProbeError, ProbeResult, RunOutcome, VantagePoint
from webttfb.probe import Probe
from webttfb.workers import ProbeSlot, ProbeWorker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class Orchestrator:
    """Dispatches one probe per vantage point and waits for all of them.

    Key features:
    - Full fan-out: the pool is sized to the vantage count, nothing queues
    - Per-probe failure isolation: a failed probe yields a placeholder result
      and an error log entry, siblings keep running
    - Slot array indexed by dispatch order: workers never share result state
    - Barrier: run() returns only after every worker has finished

    There is no global deadline; each probe enforces its own timeout.
    """

    def __init__(
        self,
        domain: str,
        private: bool = False,
        progress: ProgressCallback | None = None,
    ):
        """Initialize orchestrator.

        Args:
            domain: Target domain passed to every probe
            private: Ask probes to hide results from public listings
            progress: Optional callback receiving (done, total) after each
                completed probe
        """
        domain = (domain or "").strip()
        if not domain:
            raise ConfigurationError("Domain is invalid")

        self.domain = domain
        self.private = private
        self.progress = progress

        self._mutex = QMutex()
        self._done = 0
        self._total = 0

    def run(self, vantage_points: Iterable[VantagePoint], probe: Probe) -> RunOutcome:
        """Probe the domain from every vantage point concurrently.

        Returns:
            RunOutcome with one result per vantage point, in dispatch order,
            and the error log in the same order.

        Raises:
            ConfigurationError: on an empty vantage set or duplicate ids,
                before any probe is dispatched.
        """
        points = list(vantage_points)
        self._validate(points)

        total = len(points)
        slots = [ProbeSlot() for _ in points]

        self._done = 0
        self._total = total

        pool = QThreadPool()
        pool.setMaxThreadCount(total)

        logger.info("Dispatching %d probes: domain=%s", total, self.domain)

        for point, slot in zip(points, slots):
            worker = ProbeWorker(
                probe,
                self.domain,
                point,
                self.private,
                slot,
                on_done=self._on_worker_done,
            )
            pool.start(worker)

        pool.waitForDone()

        outcome = RunOutcome()
        for point, slot in zip(points, slots):
            if slot.result is None:
                # Worker died without recording anything
                logger.error("No result recorded: vantage=%s", point.id)
                slot.result = ProbeResult.placeholder(point)
                slot.error = ProbeError(point.id, "probe did not complete")
            outcome.results.append(slot.result)
            if slot.error is not None:
                outcome.errors.append(slot.error)

        logger.info(
            "Run complete: domain=%s, succeeded=%d, failed=%d",
            self.domain,
            total - outcome.failure_count,
            outcome.failure_count,
        )
        return outcome

    def _validate(self, points: list[VantagePoint]):
        if not points:
            raise ConfigurationError("Testing server list is empty")

        seen = set()
        for point in points:
            if point.id in seen:
                raise ConfigurationError(f"Duplicate vantage id: {point.id}")
            seen.add(point.id)

    def _on_worker_done(self):
        """Count a finished worker and report progress (worker thread).

        Only the counter is locked. The callback runs after the lock is
        released, so calls from different workers may arrive out of order.
        """
        with QMutexLocker(self._mutex):
            self._done += 1
            done = self._done

        if self.progress is not None:
            self.progress(done, self._total)

        logger.debug("Worker finished (%d/%d)", done, self._total)
