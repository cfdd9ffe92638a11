"""Derived statistics over a sensor series.

Everything here is a pure function of its inputs. Divisions guard their
denominators and report ``None`` instead of producing NaN or infinity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from models.records import DataPoint, Metric

HISTOGRAM_BINS = 15
DAY_START_HOUR = 6
NIGHT_START_HOUR = 18

SNAPSHOT_PRECISION: Dict[Metric, int] = {
    Metric.temperature: 1,
    Metric.humidity: 0,
    Metric.light: 0,
    Metric.air_quality: 0,
}


@dataclass(frozen=True)
class ThresholdRange:
    """Inclusive plausibility range for a metric."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class AnomalyThresholds:
    temperature: Optional[ThresholdRange] = ThresholdRange(0.0, 35.0)
    humidity: Optional[ThresholdRange] = ThresholdRange(20.0, 80.0)
    light: Optional[ThresholdRange] = None
    air_quality: Optional[ThresholdRange] = ThresholdRange(0.0, 100.0)

    def for_metric(self, metric: Metric) -> Optional[ThresholdRange]:
        return getattr(self, metric.value)


DEFAULT_THRESHOLDS = AnomalyThresholds()


@dataclass
class MetricSummary:
    """Computed statistics for one metric across a series."""

    count: int = 0
    min_value: float | None = None
    max_value: float | None = None
    mean_value: float | None = None


@dataclass(frozen=True)
class MetricSnapshot:
    """Latest reading of a metric, formatted for display."""

    value: str
    change: Optional[str]
    anomalies: int
    is_anomaly: bool
    anomaly_percent: int


@dataclass(frozen=True)
class DayNightRow:
    metric: Metric
    day: Optional[float]
    night: Optional[float]

    @property
    def difference(self) -> Optional[float]:
        if self.day is None or self.night is None:
            return None
        return self.day - self.night


@dataclass(frozen=True)
class Histogram:
    """Equal-width frequency bins for one metric."""

    metric: Metric
    bins: List[int]
    min_value: float
    max_value: float
    bin_size: float
    edges: List[tuple[float, float]] = field(default_factory=list)

    @property
    def max_frequency(self) -> int:
        return max(self.bins) if self.bins else 0


def metric_values(series: Iterable[DataPoint], metric: Metric) -> list[float]:
    return [value for value in (point.value(metric) for point in series) if value is not None]


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def moving_average(values: Sequence[float], window: int) -> list[float]:
    """Trailing mean over ``window`` elements; the window shrinks at the start."""
    if window <= 0:
        return list(values)

    smoothed: list[float] = []
    for index in range(len(values)):
        chunk = values[max(0, index - window + 1) : index + 1]
        smoothed.append(sum(chunk) / len(chunk))
    return smoothed


def is_anomalous(
    metric: Metric,
    value: Optional[float],
    thresholds: AnomalyThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    if value is None:
        return False
    limits = thresholds.for_metric(metric)
    if limits is None:
        return False
    return not limits.contains(value)


def count_anomalies(
    series: Iterable[DataPoint],
    metric: Metric,
    thresholds: AnomalyThresholds = DEFAULT_THRESHOLDS,
) -> int:
    return sum(1 for point in series if is_anomalous(metric, point.value(metric), thresholds))


def latest_delta(series: Sequence[DataPoint], metric: Metric) -> Optional[float]:
    """Change of ``metric`` between the last two points, zero for a single point."""
    if not series:
        return None
    latest = series[-1].value(metric)
    previous = series[-2].value(metric) if len(series) > 1 else latest
    if latest is None or previous is None:
        return None
    return latest - previous


def _format(value: float, precision: int) -> str:
    return f"{value:.{precision}f}"


def _percent(count: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.floor(count / total * 100 + 0.5)


def metric_snapshot(
    series: Sequence[DataPoint],
    metric: Metric,
    thresholds: AnomalyThresholds = DEFAULT_THRESHOLDS,
) -> Optional[MetricSnapshot]:
    """Snapshot for the latest point, or ``None`` if it lacks ``metric``."""
    if not series:
        return None
    latest = series[-1].value(metric)
    if latest is None:
        return None

    precision = SNAPSHOT_PRECISION[metric]
    delta = latest_delta(series, metric)
    anomalies = count_anomalies(series, metric, thresholds)
    return MetricSnapshot(
        value=_format(latest, precision),
        change=None if delta is None else _format(delta, precision),
        anomalies=anomalies,
        is_anomaly=is_anomalous(metric, latest, thresholds),
        anomaly_percent=_percent(anomalies, len(series)),
    )


def latest_metrics(
    series: Sequence[DataPoint],
    thresholds: AnomalyThresholds = DEFAULT_THRESHOLDS,
) -> dict[Metric, Optional[MetricSnapshot]]:
    return {metric: metric_snapshot(series, metric, thresholds) for metric in Metric}


def is_daytime(timestamp: datetime, tz: tzinfo = timezone.utc) -> bool:
    hour = timestamp.astimezone(tz).hour
    return DAY_START_HOUR <= hour < NIGHT_START_HOUR


def day_night_averages(
    series: Iterable[DataPoint], tz: tzinfo = timezone.utc
) -> list[DayNightRow]:
    day: dict[Metric, list[float]] = {metric: [] for metric in Metric}
    night: dict[Metric, list[float]] = {metric: [] for metric in Metric}

    for point in series:
        bucket = day if is_daytime(point.timestamp, tz) else night
        for metric in Metric:
            value = point.value(metric)
            if value is not None:
                bucket[metric].append(value)

    return [
        DayNightRow(metric=metric, day=mean(day[metric]), night=mean(night[metric]))
        for metric in Metric
    ]


def histogram(
    series: Iterable[DataPoint], metric: Metric, bin_count: int = HISTOGRAM_BINS
) -> Optional[Histogram]:
    """Bin the defined values of ``metric``; ``None`` for fewer than two values."""
    values = metric_values(series, metric)
    if len(values) < 2 or bin_count <= 0:
        return None

    low = min(values)
    high = max(values)
    bin_size = (high - low) / bin_count or 1.0
    bins = [0] * bin_count
    for value in values:
        index = min(math.floor((value - low) / bin_size), bin_count - 1)
        bins[index] += 1

    edges = [(low + i * bin_size, low + (i + 1) * bin_size) for i in range(bin_count)]
    return Histogram(
        metric=metric,
        bins=bins,
        min_value=low,
        max_value=high,
        bin_size=bin_size,
        edges=edges,
    )


class StatisticsEngine:
    """Bundles the statistics functions with a fixed threshold set and timezone."""

    def __init__(
        self,
        thresholds: AnomalyThresholds = DEFAULT_THRESHOLDS,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.thresholds = thresholds
        self.tz = tz

    def summarize(self, series: Iterable[DataPoint], metric: Metric) -> MetricSummary:
        summary = MetricSummary()
        total = 0.0

        for value in metric_values(series, metric):
            summary.count += 1
            total += value

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

        if summary.count:
            summary.mean_value = total / summary.count

        return summary

    def snapshots(self, series: Sequence[DataPoint]) -> dict[Metric, Optional[MetricSnapshot]]:
        return latest_metrics(series, self.thresholds)

    def day_night(self, series: Iterable[DataPoint]) -> list[DayNightRow]:
        return day_night_averages(series, self.tz)

    def histograms(self, series: Sequence[DataPoint]) -> dict[Metric, Optional[Histogram]]:
        return {metric: histogram(series, metric) for metric in Metric}
