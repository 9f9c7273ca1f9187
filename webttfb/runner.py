"""Run assembly shared by the command line and the desktop window."""

import logging

from webttfb.directory import LOCAL_LABEL, load_directory
from webttfb.errors import ConfigurationError
from webttfb.models import Criterion, RunOutcome, VantagePoint
from webttfb.orchestrator import Orchestrator, ProgressCallback
from webttfb.probe import FakeProbe, Probe
from webttfb.report import Report, build_report

logger = logging.getLogger(__name__)

PROBE_MODES = ("remote", "local", "fake")


def select_probe(mode: str, timeout: float = 30.0) -> tuple[Probe, bool]:
    """Pick the probe implementation for a run mode.

    Returns:
        (probe, local) where local is True when every test runs from this
        machine and rows should be labelled as local.

    Raises:
        ConfigurationError: unknown mode, or curl missing for local mode.
    """
    if mode == "fake":
        logger.info("Using FakeProbe")
        return FakeProbe(), False

    if mode == "local":
        from webttfb.probe_local import CurlProbe

        if not CurlProbe.available():
            raise ConfigurationError("curl command not available for local tests")
        logger.info("Using CurlProbe")
        return CurlProbe(timeout=timeout), True

    if mode == "remote":
        from webttfb.probe_remote import RemoteProbe

        logger.info("Using RemoteProbe")
        return RemoteProbe(timeout=timeout), False

    raise ConfigurationError(f"Unknown probe mode: {mode}")


def collect(
    domain: str,
    mode: str = "remote",
    private: bool = False,
    config: str | None = None,
    timeout: float = 30.0,
    progress: ProgressCallback | None = None,
) -> RunOutcome:
    """Load vantage points and probe the domain from all of them."""
    orchestrator = Orchestrator(domain, private=private, progress=progress)
    probe, local = select_probe(mode, timeout)

    points = load_directory(config).require_points()
    if local:
        # One curl run per configured server, all from this machine
        points = [VantagePoint(id=point.id, label=LOCAL_LABEL) for point in points]

    return orchestrator.run(points, probe)


def run_report(
    domain: str,
    criterion: Criterion = Criterion.STATUS,
    mode: str = "remote",
    private: bool = False,
    config: str | None = None,
    timeout: float = 30.0,
    progress: ProgressCallback | None = None,
) -> Report:
    """Collect results and build the ranked report."""
    outcome = collect(domain, mode, private, config, timeout, progress)
    return build_report(domain.strip(), outcome, criterion)
