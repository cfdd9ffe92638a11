"""Plain-text digest of a series for the insight generator."""

from __future__ import annotations

from typing import Optional

from models.records import DataPoint, FileType, Metric, SensorType

_PRECISION = {
    Metric.temperature: 1,
    Metric.humidity: 1,
    Metric.light: 0,
    Metric.air_quality: 0,
}

_UNIT_SEPARATOR = {
    Metric.temperature: "",
    Metric.humidity: "",
    Metric.light: " ",
    Metric.air_quality: " ",
}


def format_reading(metric: Metric, value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{_PRECISION[metric]}f}{_UNIT_SEPARATOR[metric]}{metric.unit}"


def build_insight_summary(
    file_name: str,
    file_type: FileType,
    sensor_type: SensorType,
    observed_count: int,
    point_count: int,
    latest: Optional[DataPoint],
) -> str:
    lines = [
        f"File: {file_name} ({file_type.value}, {sensor_type.value})",
        f"Data points: {point_count} ({observed_count} observed)",
        "Latest readings:",
    ]
    for metric in Metric:
        value = latest.value(metric) if latest is not None else None
        lines.append(f"- {metric.label}: {format_reading(metric, value)}")
    return "\n".join(lines)
