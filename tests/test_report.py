"""Tests for report assembly and CSV export."""

import csv

import pytest

from webttfb.classify import Band
from webttfb.models import Criterion, Measurement, Metric, ProbeError, ProbeResult, RunOutcome, VantagePoint
from webttfb.report import CSV_HEADER, build_report, write_csv


@pytest.fixture
def outcome(result_factory):
    """Three successes and one failure."""
    return RunOutcome(
        results=[
            result_factory("loc0001", 0.0, succeeded=False),
            result_factory("loc0002", 1.6, connect=0.8, first_byte=1.3),
            result_factory("loc0003", 0.4, connect=0.1, first_byte=0.3),
            result_factory("loc0004", 0.9, connect=0.3, first_byte=0.6),
        ],
        errors=[ProbeError("loc0001", "timed out")],
    )


class TestBuildReport:
    """Test build_report() wiring of ranking, stats and classification."""

    def test_rows_ranked(self, outcome):
        report = build_report("example.com", outcome, Criterion.TOTAL)

        assert [row.vantage_id for row in report.rows] == ["loc0003", "loc0004", "loc0002", "loc0001"]
        assert report.criterion is Criterion.TOTAL
        assert report.domain == "example.com"

    def test_row_fields(self, outcome):
        report = build_report("example.com", outcome, Criterion.TOTAL)
        row = report.rows[0]

        assert row.label == "Location loc0003"
        assert row.succeeded is True
        assert (row.connect_time, row.first_byte_time, row.total_time) == (0.1, 0.3, 0.4)

    def test_bands_per_metric(self, outcome):
        report = build_report("example.com", outcome, Criterion.TOTAL)
        fast, _, slow, failed = report.rows

        assert fast.bands == {Metric.CONNECT: Band.GOOD, Metric.FIRST_BYTE: Band.GOOD, Metric.TOTAL: Band.GOOD}
        assert slow.bands == {Metric.CONNECT: Band.DANGER, Metric.FIRST_BYTE: Band.DANGER, Metric.TOTAL: Band.DANGER}
        assert set(failed.bands.values()) == {Band.NEUTRAL}

    def test_summary(self, outcome):
        """Test averages include the failed placeholder and grade uses them."""
        summary = build_report("example.com", outcome).summary

        # totals [0.0, 0.4, 0.9, 1.6] -> mean of 0.4 and 0.9
        assert summary.avg_total == pytest.approx(0.65)
        assert summary.avg_connect == pytest.approx(0.2)
        assert summary.avg_first_byte == pytest.approx(0.45)
        assert summary.failures == 1
        assert summary.grade.letter == "A"

    def test_errors_kept_separate(self, outcome):
        report = build_report("example.com", outcome)

        assert [str(e) for e in report.errors] == ["loc0001: timed out"]

    def test_empty_outcome(self):
        report = build_report("example.com", RunOutcome())

        assert report.rows == []
        assert report.summary.avg_total == 0.0
        assert report.summary.grade.letter == "F"

    def test_label_includes_download_speed(self):
        """Test local rows show the measured download speed."""
        local = VantagePoint("usfrmnt", "Local")
        outcome = RunOutcome(
            results=[
                ProbeResult(local, Measurement(0.1, 0.2, 0.3, download_speed=51234.0), succeeded=True),
                ProbeResult.placeholder(VantagePoint("usdalas", "Local")),
            ],
            errors=[ProbeError("usdalas", "HTTP status 503")],
        )

        report = build_report("example.com", outcome)

        assert [row.label for row in report.rows] == ["Local 51.23 kB/s", "Local"]


class TestWriteCsv:
    """Test CSV export."""

    def test_write_csv(self, outcome, tmp_path):
        report = build_report("example.com", outcome, Criterion.TOTAL)

        path = write_csv(report, tmp_path / "report.csv")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[0] == CSV_HEADER
        assert rows[1] == ["loc0003", "Location loc0003", "True", "0.100", "0.300", "0.400"]
        assert rows[-1] == ["loc0001", "Location loc0001", "False", "", "", ""]
        assert len(rows) == 5

    def test_adds_extension(self, outcome, tmp_path):
        report = build_report("example.com", outcome)

        path = write_csv(report, tmp_path / "report")

        assert path.name == "report.csv"
        assert path.exists()
