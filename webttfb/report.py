"""Report assembly: ranking, averages, bands and grade in one place."""

import csv
from dataclasses import dataclass, field
from pathlib import Path

from webttfb.classify import Band, GradeBand, classify, grade
from webttfb.models import Criterion, Metric, ProbeError, ProbeResult, RunOutcome
from webttfb.ranking import rank
from webttfb.stats import average


@dataclass(frozen=True)
class ReportRow:
    vantage_id: str
    label: str
    succeeded: bool
    connect_time: float
    first_byte_time: float
    total_time: float
    bands: dict[Metric, Band] = field(default_factory=dict)

    def value(self, metric: Metric) -> float:
        if metric is Metric.CONNECT:
            return self.connect_time
        if metric is Metric.FIRST_BYTE:
            return self.first_byte_time
        return self.total_time


@dataclass(frozen=True)
class Summary:
    avg_connect: float
    avg_first_byte: float
    avg_total: float
    grade: GradeBand
    failures: int

    def value(self, metric: Metric) -> float:
        if metric is Metric.CONNECT:
            return self.avg_connect
        if metric is Metric.FIRST_BYTE:
            return self.avg_first_byte
        return self.avg_total


@dataclass(frozen=True)
class Report:
    domain: str
    criterion: Criterion
    rows: list[ReportRow]
    summary: Summary
    errors: list[ProbeError]


def row_label(result: ProbeResult) -> str:
    """Vantage label, followed by the download speed when the probe reported one."""
    speed = result.measurement.download_speed
    if speed is None:
        return result.vantage.label
    return f"{result.vantage.label} {speed / 1000:.2f} kB/s"


def build_report(domain: str, outcome: RunOutcome, criterion: Criterion = Criterion.STATUS) -> Report:
    """Rank the outcome and attach averages, bands and the grade."""
    rows = []
    for result in rank(outcome.results, criterion):
        m = result.measurement
        rows.append(
            ReportRow(
                vantage_id=result.vantage.id,
                label=row_label(result),
                succeeded=result.succeeded,
                connect_time=m.connect_time,
                first_byte_time=m.first_byte_time,
                total_time=m.total_time,
                bands={metric: classify(metric, m.value(metric)) for metric in Metric},
            )
        )

    avg_total = average(outcome.results, Metric.TOTAL)
    summary = Summary(
        avg_connect=average(outcome.results, Metric.CONNECT),
        avg_first_byte=average(outcome.results, Metric.FIRST_BYTE),
        avg_total=avg_total,
        grade=grade(avg_total, outcome.failure_count),
        failures=outcome.failure_count,
    )

    return Report(
        domain=domain,
        criterion=criterion,
        rows=rows,
        summary=summary,
        errors=list(outcome.errors),
    )


CSV_HEADER = ["vantage_id", "label", "succeeded", "connect_time", "firstbyte_time", "total_time"]


def write_csv(report: Report, path: Path | str) -> Path:
    """Export report rows in ranked order.

    Timings are written with millisecond precision; failed rows keep empty
    timing cells.
    """
    path = Path(path)
    if path.suffix.lower() != ".csv":
        path = path.with_name(path.name + ".csv")

    with open(path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(CSV_HEADER)

        for row in report.rows:
            if row.succeeded:
                timings = [f"{row.value(metric):.3f}" for metric in Metric]
            else:
                timings = ["", "", ""]
            writer.writerow([row.vantage_id, row.label, row.succeeded, *timings])

    return path
