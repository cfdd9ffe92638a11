"""Unit tests for header normalisation and column inference."""

from __future__ import annotations

from models.records import ColumnMapping
from services.columns import infer_columns, normalize_header


def test_normalize_header_lowercases_trims_and_strips_quotes() -> None:
    header = normalize_header(' "Timestamp" , Temperature (C) ,"Humidity"\r')

    assert header == ["timestamp", "temperature (c)", "humidity"]


def test_infer_columns_maps_all_fields() -> None:
    header = ["timestamp", "temperature", "humidity", "light", "air_quality"]

    mapping = infer_columns(header)

    assert mapping == ColumnMapping(
        timestamp=0, temperature=1, humidity=2, light=3, air_quality=4
    )


def test_infer_columns_marks_missing_fields_absent() -> None:
    mapping = infer_columns(["time", "temp"])

    assert mapping.timestamp == 0
    assert mapping.temperature == 1
    assert mapping.humidity == -1
    assert mapping.light == -1
    assert mapping.air_quality == -1


def test_timestamp_key_priority_prefers_timestamp_over_date_and_time() -> None:
    mapping = infer_columns(["time", "date", "timestamp", "temp"])

    assert mapping.timestamp == 2


def test_date_wins_over_time_when_no_timestamp_column() -> None:
    mapping = infer_columns(["time of day", "reading date", "temp"])

    assert mapping.timestamp == 1


def test_light_and_air_quality_alternate_keys() -> None:
    mapping = infer_columns(["date", "lux level", "aqi"])

    assert mapping.light == 1
    assert mapping.air_quality == 2

    mapping = infer_columns(["date", "intensity", "quality index"])

    assert mapping.light == 1
    assert mapping.air_quality == 2


def test_temp_and_hum_substrings_are_always_mapped() -> None:
    for header in (
        ["date", "temp", "hum"],
        ["hum_pct", "ts_date", "temp_c"],
        ["date", "temp_and_hum"],
    ):
        mapping = infer_columns(header)

        assert mapping.temperature > -1
        assert mapping.humidity > -1


def test_missing_timestamp_column_is_reported() -> None:
    mapping = infer_columns(["temp", "hum"])

    assert mapping.has_timestamp is False
