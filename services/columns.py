"""Header-based column inference for heterogeneous sensor CSV layouts."""

from __future__ import annotations

from typing import Sequence

from models.records import ColumnMapping

# Earlier keys win, and the order is part of the contract: changing it changes
# which column is picked for ambiguous headers.
COLUMN_KEYS: dict[str, tuple[str, ...]] = {
    "timestamp": ("timestamp", "date", "time"),
    "temperature": ("temp",),
    "humidity": ("hum",),
    "light": ("light", "lux", "intensity"),
    "air_quality": ("air", "aqi", "quality"),
}


def normalize_header(line: str) -> list[str]:
    """Split a raw header line into lower-cased, trimmed, unquoted names."""
    return [cell.strip().replace('"', "") for cell in line.lower().split(",")]


def find_column(header: Sequence[str], keys: Sequence[str]) -> int:
    for key in keys:
        for index, name in enumerate(header):
            if key in name:
                return index
    return -1


def infer_columns(header: Sequence[str]) -> ColumnMapping:
    """Map each semantic field to the first header cell matching one of its keys."""
    return ColumnMapping(
        **{field: find_column(header, keys) for field, keys in COLUMN_KEYS.items()}
    )
