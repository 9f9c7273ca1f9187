"""Shared fixtures for webttfb tests."""

import os

# Qt widgets need a platform plugin; tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from webttfb.models import Measurement, ProbeResult, VantagePoint


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def make_result(vantage_id: str, total: float, connect: float | None = None,
                first_byte: float | None = None, succeeded: bool = True) -> ProbeResult:
    """Build a ProbeResult with derived timings when only total is given."""
    if connect is None:
        connect = round(total / 4, 3)
    if first_byte is None:
        first_byte = round(total / 2, 3)
    return ProbeResult(
        vantage=VantagePoint(id=vantage_id, label=f"Location {vantage_id}"),
        measurement=Measurement(connect_time=connect, first_byte_time=first_byte, total_time=total),
        succeeded=succeeded,
    )


@pytest.fixture
def result_factory():
    return make_result
