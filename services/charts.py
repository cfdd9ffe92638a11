"""SVG path data for the trend chart."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from models.records import DataPoint, Metric
from services.statistics import metric_values, moving_average

VIEWBOX_SIZE = 100.0


@dataclass(frozen=True)
class ChartLine:
    metric: Metric
    raw: str
    smoothed: str


def chart_path(
    series: Sequence[DataPoint], metric: Metric, smoothing_window: int = 0
) -> str:
    """Build an SVG ``d`` attribute scaled into a 100x100 viewbox.

    The x axis is the point's position in the series, the y axis is the value
    normalised against the raw min/max of the metric. Returns an empty string
    when fewer than two values are defined.
    """
    positions = [index for index, point in enumerate(series) if point.value(metric) is not None]
    values = metric_values(series, metric)
    if len(values) < 2 or len(series) < 2:
        return ""

    low, high = min(values), max(values)
    span = (high - low) or 1.0
    plotted = moving_average(values, smoothing_window) if smoothing_window > 0 else values
    last_index = len(series) - 1

    commands = []
    for order, (position, value) in enumerate(zip(positions, plotted)):
        x = position / last_index * VIEWBOX_SIZE
        y = VIEWBOX_SIZE - (value - low) / span * VIEWBOX_SIZE
        commands.append(f"{'M' if order == 0 else 'L'} {x:.2f} {y:.2f}")
    return " ".join(commands)


def chart_lines(series: Sequence[DataPoint], smoothing_window: int) -> list[ChartLine]:
    return [
        ChartLine(
            metric=metric,
            raw=chart_path(series, metric),
            smoothed=chart_path(series, metric, smoothing_window),
        )
        for metric in Metric
    ]
