"""Band and grade classification of timing values.

Per-cell bands follow the colorization thresholds of the load-time testing
service; the grade reflects the trimmed-mean total time of a whole run.
"""

from dataclasses import dataclass
from enum import Enum

from webttfb.models import Metric


class Band(Enum):
    """Classification of a single timing value."""

    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class BandStyle:
    ansi: str | None  # SGR parameters without the leading ESC[
    color: str | None  # background, RGB hex


BAND_STYLES = {
    Band.GOOD: BandStyle(ansi="38;5;255;48;5;034", color="#00af00"),
    Band.WARNING: BandStyle(ansi="38;5;008;48;5;226", color="#ffff00"),
    Band.DANGER: BandStyle(ansi="38;5;255;48;5;009", color="#ff0000"),
    Band.NEUTRAL: BandStyle(ansi=None, color=None),
}


@dataclass(frozen=True)
class Thresholds:
    """Ceilings for one metric, in seconds.

    Values above danger are DANGER, above warning are WARNING, below
    success are GOOD; anything else is NEUTRAL.
    """

    success: float
    warning: float
    danger: float

    def __post_init__(self):
        if not (self.success <= self.warning <= self.danger):
            raise ValueError("thresholds must be ascending: success <= warning <= danger")

    def band(self, value: float) -> Band:
        if value > self.danger:
            return Band.DANGER
        if value > self.warning:
            return Band.WARNING
        if value < self.success:
            return Band.GOOD
        return Band.NEUTRAL


METRIC_THRESHOLDS = {
    Metric.CONNECT: Thresholds(success=0.18, warning=0.55, danger=0.70),
    Metric.FIRST_BYTE: Thresholds(success=0.40, warning=0.99, danger=1.28),
    Metric.TOTAL: Thresholds(success=0.55, warning=1.15, danger=1.45),
}


def classify(metric: Metric, value: float) -> Band:
    """Classify one timing value.

    Zero means the test did not run, and is never colored.
    """
    if value == 0.0:
        return Band.NEUTRAL
    return METRIC_THRESHOLDS[metric].band(value)


@dataclass(frozen=True)
class GradeBand:
    letter: str
    ansi: str
    color: str


GRADE_F = GradeBand("F", ansi="38;5;000;48;5;007", color="#c0c0c0")
GRADE_OFF_SCALE = GradeBand("~", ansi="38;5;008;48;5;007", color="#c0c0c0")


@dataclass(frozen=True)
class GradeScale:
    """Ascending total-time ceilings mapped to letter grades.

    perfect < excellent < good < bad < awful < worst
    """

    perfect: float = 0.510
    excellent: float = 0.850
    good: float = 1.150
    bad: float = 1.550
    awful: float = 1.950
    worst: float = 2.500
    max_failures: int = 4

    def __post_init__(self):
        ceilings = self.ceilings()
        if any(a >= b for a, b in zip(ceilings, ceilings[1:])):
            raise ValueError("grade ceilings must be strictly ascending")

    def ceilings(self) -> list[float]:
        return [self.perfect, self.excellent, self.good, self.bad, self.awful, self.worst]

    def bands(self) -> list[tuple[float, GradeBand]]:
        return list(zip(self.ceilings(), GRADE_BANDS))


GRADE_BANDS = (
    GradeBand("A+", ansi="38;5;255;48;5;038", color="#00afd7"),
    GradeBand("A", ansi="38;5;255;48;5;034", color="#00af00"),
    GradeBand("B", ansi="38;5;008;48;5;226", color="#ffff00"),
    GradeBand("C", ansi="38;5;255;48;5;009", color="#ff0000"),
    GradeBand("D", ansi="38;5;255;48;5;196", color="#ff0000"),
    GradeBand("E", ansi="38;5;255;48;5;124", color="#af0000"),
)

DEFAULT_SCALE = GradeScale()


def grade(average_total_time: float, failure_count: int, scale: GradeScale = DEFAULT_SCALE) -> GradeBand:
    """Grade a run from its average total time and number of failed probes.

    Too many failures, or no usable average at all, is an F. Averages beyond
    the worst ceiling are off the scale.
    """
    if failure_count > scale.max_failures or average_total_time <= 0:
        return GRADE_F

    for ceiling, band in scale.bands():
        if average_total_time <= ceiling:
            return band

    return GRADE_OFF_SCALE
