"""Terminal rendering of a report as a box-drawn table."""

from webttfb.classify import BAND_STYLES, Band
from webttfb.models import Metric
from webttfb.report import Report

RESET = "\033[0m"
LABEL_WIDTH = 18
GRADE_WIDTH = 3


def pad(text: str, length: int) -> str:
    """Left-align text in a fixed width, truncating with an ellipsis."""
    if len(text) > length:
        return text[: length - 1] + "…"
    return text + " " * (length - len(text))


def paint(text: str, ansi: str | None, color: bool = True) -> str:
    if not color or not ansi:
        return text
    return f"\033[{ansi}m{text}{RESET}"


def format_cell(value: float, band: Band, color: bool = True) -> str:
    return paint(f"{value:.3f}", BAND_STYLES[band].ansi, color)


def render_report(report: Report, color: bool = True) -> str:
    """Render rows, the average line with the grade, then the error log."""
    ok = paint("✔", "0;32", color)
    failed = paint("✘", "0;31", color)

    lines = [
        "    ┌─────────┬───────┬───────┬───────┬────────────────────┐",
        "    │ Server  │ Conn  │ TTFB  │ TTL   │ Location           │",
        "┌───┼─────────┼───────┼───────┼───────┼────────────────────┤",
    ]

    for row in report.rows:
        cells = [format_cell(row.value(metric), row.bands[metric], color) for metric in Metric]
        lines.append(
            "│ {icon} │ {vid} │ {conn} │ {ttfb} │ {ttl} │ {label} │".format(
                icon=ok if row.succeeded else failed,
                vid=paint(pad(row.vantage_id, 7), "0;2", color),
                conn=cells[0],
                ttfb=cells[1],
                ttl=cells[2],
                label=pad(row.label, LABEL_WIDTH),
            )
        )

    summary = report.summary
    grade_text = f" Performance: {pad(summary.grade.letter, GRADE_WIDTH)} "

    lines.append(
        "└───┼─────────┼───────┼───────┼───────┼────────────────────┤"
    )
    lines.append(
        "    │ Average │ {:.3f} │ {:.3f} │ {:.3f} │ {} │".format(
            summary.avg_connect,
            summary.avg_first_byte,
            summary.avg_total,
            paint(grade_text, summary.grade.ansi, color),
        )
    )
    lines.append(
        "    └─────────┴───────┴───────┴───────┴────────────────────┘"
    )

    bullet = paint("•", "0;94", color)
    for error in report.errors:
        lines.append(f"{bullet} {error}")

    return "\n".join(lines)
