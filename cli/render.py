from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

METRIC_LABELS = {
    "temperature": ("Temperature", "°C"),
    "humidity": ("Humidity", "%"),
    "light": ("Light", "lux"),
    "air_quality": ("Air Quality", "AQI"),
}

LEVEL_COLORS = {
    "critical": typer.colors.RED,
    "warning": typer.colors.YELLOW,
    "info": typer.colors.BLUE,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Any, precision: int = 1) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{precision}f}"


def render_file(payload: Dict[str, Any]) -> None:
    echo_key_values(
        [
            ("id", payload.get("id")),
            ("name", payload.get("name")),
            ("size", payload.get("size")),
            ("file_type", payload.get("file_type")),
            ("sensor_type", payload.get("sensor_type")),
            ("uploaded_at", payload.get("uploaded_at")),
        ]
    )


def render_file_list(files: List[Dict[str, Any]]) -> None:
    echo_heading("Files")
    if not files:
        typer.echo("No files stored.")
        return
    for item in files:
        typer.echo(
            f"  - {item.get('id')}  {item.get('name')}  "
            f"({item.get('file_type')}, {item.get('sensor_type')}, {item.get('size')} bytes)"
        )


def render_insights(insights: List[Dict[str, Any]]) -> None:
    echo_heading("Insights")
    if not insights:
        typer.echo("No insights generated.")
        return
    for insight in insights:
        level = str(insight.get("level", "info"))
        typer.secho(
            f"[{level}] {insight.get('title')}",
            fg=LEVEL_COLORS.get(level),
        )
        typer.echo(f"  {insight.get('description')}")
        typer.echo(f"  -> {insight.get('recommendation')}")


def render_dashboard(payload: Dict[str, Any]) -> None:
    file_info = payload.get("file") or {}
    echo_heading("Dashboard")
    echo_key_values(
        [
            ("file_id", file_info.get("id")),
            ("name", file_info.get("name")),
            ("sensor_type", file_info.get("sensor_type")),
            ("data_points", payload.get("point_count")),
            ("observed_points", payload.get("observed_count")),
        ]
    )
    if payload.get("missing_timestamp"):
        typer.secho("No timestamp column found in file.", fg=typer.colors.YELLOW)

    typer.echo()
    echo_heading("Latest Readings")
    snapshots = payload.get("snapshots") or {}
    for key, (label, unit) in METRIC_LABELS.items():
        snapshot = snapshots.get(key)
        if not snapshot:
            typer.echo(f"{label}: no data")
            continue
        flag = " (anomaly)" if snapshot.get("is_anomaly") else ""
        change = snapshot.get("change")
        typer.echo(
            f"{label}: {snapshot.get('value')} {unit}{flag}, change {change if change is not None else 'N/A'}, "
            f"{snapshot.get('anomalies')} anomalies ({snapshot.get('anomaly_percent')}%)"
        )

    typer.echo()
    echo_heading("Day vs. Night Averages")
    for row in payload.get("day_night") or []:
        if row.get("day") is None and row.get("night") is None:
            continue
        label, unit = METRIC_LABELS.get(row.get("metric"), (row.get("metric"), ""))
        typer.echo(f"{label}: day {_fmt(row.get('day'))} {unit} | night {_fmt(row.get('night'))} {unit}")

    issues = payload.get("issues") or []
    typer.echo()
    echo_heading("Skipped Rows")
    if issues:
        for issue in issues:
            typer.echo(f"  - row {issue.get('row_number')}: {issue.get('reason')}")
    else:
        typer.echo("No rows skipped.")
