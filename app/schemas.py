"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from models.records import FileType, Metric, SensorType


class InsightLevel(str, Enum):
    """Severity attached to a generated insight."""

    critical = "critical"
    warning = "warning"
    info = "info"


class FileMetadata(BaseModel):
    """Stored file as exposed by the storage layer."""

    id: str = Field(..., description="Generated identifier for the stored file.")
    name: str
    size: int = Field(..., ge=0, description="Size of the stored object in bytes.")
    uploaded_at: datetime
    modified_at: datetime
    file_type: FileType
    sensor_type: SensorType = SensorType.none
    url: Optional[str] = None


class FileRenameRequest(BaseModel):
    name: str = Field(..., min_length=1)


class DeleteResponse(BaseModel):
    deleted: bool


class Insight(BaseModel):
    """A generated observation about the data, rendered read-only."""

    level: InsightLevel
    title: str
    description: str
    recommendation: str


class InsightsResponse(BaseModel):
    file_id: str
    insights: List[Insight] = Field(default_factory=list)
    fallback: bool = Field(
        default=False, description="True when the generator failed and placeholders were returned."
    )


class AnalysisRequest(BaseModel):
    question: str = Field(..., min_length=1)


class AnalysisResponse(BaseModel):
    file_id: str
    answer: str


class DataPointOut(BaseModel):
    timestamp: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    light: Optional[float] = None
    air_quality: Optional[float] = None


class MetricSnapshotOut(BaseModel):
    value: str
    change: Optional[str] = None
    anomalies: int = Field(..., ge=0)
    is_anomaly: bool
    anomaly_percent: int = Field(..., ge=0)


class MetricSummaryOut(BaseModel):
    count: int = Field(..., ge=0)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    mean_value: Optional[float] = None


class DayNightRowOut(BaseModel):
    metric: Metric
    day: Optional[float] = None
    night: Optional[float] = None
    difference: Optional[float] = None


class HistogramOut(BaseModel):
    bins: List[int]
    min_value: float
    max_value: float
    bin_size: float
    peak: int = Field(..., ge=0, description="Largest bin count.")
    edges: List[Tuple[float, float]] = Field(default_factory=list)


class ChartLineOut(BaseModel):
    raw: str
    smoothed: str


class RowIssueOut(BaseModel):
    """Details about a row that failed validation or parsing."""

    row_number: int = Field(..., ge=1)
    reason: str


class DashboardResponse(BaseModel):
    """Everything the dashboard view renders for one file."""

    file: FileMetadata
    observed_count: int = Field(..., ge=0)
    point_count: int = Field(..., ge=0)
    missing_timestamp: bool = False
    points: List[DataPointOut] = Field(default_factory=list)
    snapshots: Dict[Metric, Optional[MetricSnapshotOut]] = Field(default_factory=dict)
    summaries: Dict[Metric, MetricSummaryOut] = Field(default_factory=dict)
    day_night: List[DayNightRowOut] = Field(default_factory=list)
    histograms: Dict[Metric, Optional[HistogramOut]] = Field(default_factory=dict)
    charts: Dict[Metric, ChartLineOut] = Field(default_factory=dict)
    issues: List[RowIssueOut] = Field(default_factory=list)
    digest: str = ""
