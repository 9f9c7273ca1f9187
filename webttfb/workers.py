"""Worker classes for background probe tasks."""

import logging
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, Signal

from webttfb.errors import ProbeFailure
from webttfb.models import ProbeError, ProbeResult, VantagePoint
from webttfb.probe import Probe

logger = logging.getLogger(__name__)


class ProbeSlot:
    """Result slot owned by exactly one worker."""

    __slots__ = ("result", "error")

    def __init__(self):
        self.result: ProbeResult | None = None
        self.error: ProbeError | None = None


class ProbeWorker(QRunnable):
    """Worker that executes probe.measure() for one vantage point.

    Writes its outcome into its own slot and never touches another worker's
    state. Every exception raised by the probe is recorded as a failure.
    """

    def __init__(
        self,
        probe: Probe,
        domain: str,
        vantage: VantagePoint,
        private: bool,
        slot: ProbeSlot,
        on_done: Callable[[], None] | None = None,
    ):
        super().__init__()
        self.probe = probe
        self.domain = domain
        self.vantage = vantage
        self.private = private
        self.slot = slot
        self.on_done = on_done

    def run(self):
        """Execute the probe in a background thread."""
        try:
            logger.debug("Worker starting: vantage=%s, domain=%s", self.vantage.id, self.domain)

            measurement = self.probe.measure(self.domain, self.vantage.id, self.private)

            self.slot.result = ProbeResult(
                vantage=self.vantage, measurement=measurement, succeeded=True
            )

            logger.debug(
                "Worker completed: vantage=%s, total=%.3fs",
                self.vantage.id,
                measurement.total_time,
            )

        except ProbeFailure as e:
            logger.debug("Probe failed: vantage=%s, reason=%s", self.vantage.id, e.reason)
            self._record_failure(e.reason)

        except Exception as e:
            logger.exception(
                "Worker exception: vantage=%s, error=%s",
                self.vantage.id,
                str(e),
            )
            self._record_failure(str(e) or type(e).__name__)

        finally:
            if self.on_done is not None:
                self.on_done()

    def _record_failure(self, cause: str):
        self.slot.result = ProbeResult.placeholder(self.vantage)
        self.slot.error = ProbeError(vantage_id=self.vantage.id, cause=cause)


class RunSignals(QObject):
    """Signals for communicating a whole run back to the GUI thread."""

    progress = Signal(int, int)  # Emits (done, total)
    outcome_ready = Signal(object)  # Emits RunOutcome
    error = Signal(str)  # Emits error message
    finished = Signal()  # Emits when worker completes


class RunWorker(QRunnable):
    """Worker that performs a complete run off the GUI thread."""

    def __init__(self, run: Callable[[Callable[[int, int], None]], object]):
        """Initialize with a callable taking a progress callback and returning a RunOutcome."""
        super().__init__()
        self._run = run
        self.signals = RunSignals()

    def run(self):
        try:
            outcome = self._run(self.signals.progress.emit)
            self.signals.outcome_ready.emit(outcome)
        except Exception as e:
            logger.exception("Run failed: %s", str(e))
            self.signals.error.emit(str(e))
        finally:
            self.signals.finished.emit()
