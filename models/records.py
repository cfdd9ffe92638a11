"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Metric(str, Enum):
    """Numeric fields a sensor reading can carry."""

    temperature = "temperature"
    humidity = "humidity"
    light = "light"
    air_quality = "air_quality"

    @property
    def label(self) -> str:
        return METRIC_LABELS[self]

    @property
    def unit(self) -> str:
        return METRIC_UNITS[self]


METRIC_LABELS = {
    Metric.temperature: "Temperature",
    Metric.humidity: "Humidity",
    Metric.light: "Light",
    Metric.air_quality: "Air Quality",
}

METRIC_UNITS = {
    Metric.temperature: "°C",
    Metric.humidity: "%",
    Metric.light: "lux",
    Metric.air_quality: "AQI",
}


class SensorType(str, Enum):
    """Hardware family a data file most likely came from."""

    dht22 = "DHT22"
    ldr = "LDR"
    mq135 = "MQ135"
    rain = "Rain Sensor"
    soil = "Soil Moisture"
    none = "None"


class FileType(str, Enum):
    """Stored file formats recognised by the dashboard."""

    csv = "CSV"
    json = "JSON"
    txt = "Text"
    pdf = "PDF"
    png = "PNG"


@dataclass(frozen=True, slots=True)
class DataPoint:
    """A single timestamped observation.

    ``None`` for a metric means it was not measured, which is different from a
    measured ``0.0``.
    """

    timestamp: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    light: Optional[float] = None
    air_quality: Optional[float] = None

    def value(self, metric: Metric) -> Optional[float]:
        return getattr(self, metric.value)

    def has_metrics(self) -> bool:
        return any(self.value(metric) is not None for metric in Metric)


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Zero-based header positions for each semantic field, ``-1`` if absent."""

    timestamp: int = -1
    temperature: int = -1
    humidity: int = -1
    light: int = -1
    air_quality: int = -1

    def index_of(self, metric: Metric) -> int:
        return getattr(self, metric.value)

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp > -1
