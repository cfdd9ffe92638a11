"""Parse uploaded CSV text into a sparse time series."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from models.records import ColumnMapping, DataPoint, Metric
from services.columns import infer_columns, normalize_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RowIssue:
    """A data row that was dropped or only partially parsed."""

    row_number: int
    reason: str


@dataclass
class ParseReport:
    """Points recovered from a CSV file together with per-row diagnostics."""

    points: list[DataPoint] = field(default_factory=list)
    issues: list[RowIssue] = field(default_factory=list)
    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    row_count: int = 0

    @property
    def missing_timestamp(self) -> bool:
        return not self.mapping.has_timestamp


def parse_timestamp(value: str) -> datetime:
    candidate = value.strip().strip('"')
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def parse_number(value: Optional[str]) -> Optional[float]:
    """Return a finite float, or ``None`` for empty and malformed cells."""
    if value is None:
        return None
    candidate = value.strip().strip('"')
    if not candidate:
        return None
    try:
        parsed = float(candidate)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _cell(values: list[str], index: int) -> Optional[str]:
    if index < 0 or index >= len(values):
        return None
    return values[index]


def parse_csv_report(text: str, file_id: Optional[str] = None) -> ParseReport:
    """Parse CSV text, collecting the reason for every row that was dropped."""
    lines = text.strip().splitlines()
    if not lines:
        return ParseReport()

    mapping = infer_columns(normalize_header(lines[0]))
    report = ParseReport(mapping=mapping)
    if not mapping.has_timestamp:
        logger.warning(
            "No timestamp column found in CSV header",
            extra={"file_id": file_id, "reason": "missing timestamp column"},
        )
        return report

    metrics = [metric for metric in Metric if mapping.index_of(metric) > -1]

    for row_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        report.row_count += 1
        values = line.split(",")

        timestamp_raw = _cell(values, mapping.timestamp)
        try:
            timestamp = parse_timestamp(timestamp_raw or "")
        except ValueError:
            _record_issue(report, file_id, row_number, "invalid timestamp")
            continue

        readings: dict[str, Optional[float]] = {}
        malformed: list[str] = []
        for metric in metrics:
            raw = _cell(values, mapping.index_of(metric))
            number = parse_number(raw)
            if number is None and raw is not None and raw.strip():
                malformed.append(metric.value)
            readings[metric.value] = number

        point = DataPoint(timestamp=timestamp, **readings)
        if not point.has_metrics():
            _record_issue(report, file_id, row_number, "no numeric readings")
            continue

        if malformed:
            _record_issue(
                report,
                file_id,
                row_number,
                f"invalid numeric value for {', '.join(malformed)}",
                dropped=False,
            )
        report.points.append(point)

    return report


def parse_csv(text: str, file_id: Optional[str] = None) -> list[DataPoint]:
    """Parse CSV text into data points in file order."""
    return parse_csv_report(text, file_id=file_id).points


def _record_issue(
    report: ParseReport,
    file_id: Optional[str],
    row_number: int,
    reason: str,
    dropped: bool = True,
) -> None:
    report.issues.append(RowIssue(row_number=row_number, reason=reason))
    logger.warning(
        "Skipping row %d: %s" if dropped else "Keeping partial row %d: %s",
        row_number,
        reason,
        extra={"file_id": file_id, "row_number": row_number, "reason": reason},
    )
