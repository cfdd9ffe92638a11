"""File and sensor type tagging for stored files."""

from __future__ import annotations

from pathlib import PurePosixPath

from models.records import FileType, SensorType

CONTENT_SNIFF_LENGTH = 200

_EXTENSIONS = {
    "pdf": FileType.pdf,
    "png": FileType.png,
    "csv": FileType.csv,
    "json": FileType.json,
    "txt": FileType.txt,
}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def file_type_from_name(name: str) -> FileType:
    extension = PurePosixPath(name).suffix.lstrip(".").lower()
    return _EXTENSIONS.get(extension, FileType.txt)


def infer_sensor_type(text: str) -> SensorType:
    """Guess the sensor family from keywords in a file name or header."""
    lowered = text.lower()
    if "temp" in lowered and "hum" in lowered:
        return SensorType.dht22
    if any(key in lowered for key in ("light", "ldr", "intensity")):
        return SensorType.ldr
    if any(key in lowered for key in ("air", "aqi", "mq135")):
        return SensorType.mq135
    if "rain" in lowered:
        return SensorType.rain
    if "soil" in lowered or "moisture" in lowered:
        return SensorType.soil
    return SensorType.none


def infer_sensor_type_from_content(content: str) -> SensorType:
    return infer_sensor_type(content[:CONTENT_SNIFF_LENGTH])


def format_bytes(size: int, decimals: int = 2) -> str:
    if size <= 0:
        return "0 Bytes"
    precision = max(decimals, 0)
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"
