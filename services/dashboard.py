"""Dashboard orchestration: storage, parsing, statistics and insights."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.schemas import (
    AnalysisResponse,
    ChartLineOut,
    DashboardResponse,
    DataPointOut,
    DayNightRowOut,
    FileMetadata,
    HistogramOut,
    Insight,
    InsightsResponse,
    MetricSnapshotOut,
    MetricSummaryOut,
    RowIssueOut,
)
from models.records import DataPoint, FileType, Metric
from services.charts import chart_lines
from services.files import FileService, build_default_file_service
from services.insights import InsightService, build_default_insight_service
from services.parser import ParseReport, parse_csv_report
from services.statistics import MetricSummary, StatisticsEngine
from services.summary import build_insight_summary
from services.synthesizer import DEFAULT_TARGET_POINTS, synthesize_series
from settings import get_settings

logger = logging.getLogger(__name__)


class DashboardService:
    """Builds dashboard views and keeps the latest insights per file."""

    def __init__(
        self,
        files: FileService,
        insights: InsightService,
        engine: Optional[StatisticsEngine] = None,
        target_points: int = DEFAULT_TARGET_POINTS,
        smoothing_window: int = 5,
        rng_factory: Callable[[], random.Random] = random.Random,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.files = files
        self.insights = insights
        self.engine = engine or StatisticsEngine()
        self.target_points = target_points
        self.smoothing_window = smoothing_window
        self.rng_factory = rng_factory
        self.clock = clock
        self._insights: Dict[str, List[Insight]] = {}
        self._insights_lock = Lock()
        # Padded series keyed by (file id, file type).
        self._series: Dict[tuple[str, FileType], tuple[ParseReport, list[DataPoint]]] = {}
        self._series_lock = Lock()

    def load_series(self, file_id: str) -> tuple[FileMetadata, ParseReport, list[DataPoint]]:
        """Return the file metadata, its parse report and the padded series.

        The series is synthesized once per file and reused afterwards.
        """
        metadata = self.files.get(file_id)
        key = (file_id, metadata.file_type)
        with self._series_lock:
            cached = self._series.get(key)
        if cached is not None:
            report, series = cached
            return metadata, report, series

        if metadata.file_type is FileType.csv:
            report = parse_csv_report(self.files.read_text(file_id), file_id=file_id)
        else:
            report = ParseReport()

        now = self.clock() if self.clock else None
        series = synthesize_series(
            report.points, self.target_points, rng=self.rng_factory(), now=now
        )
        logger.info(
            "Built series",
            extra={
                "file_id": file_id,
                "observed_count": len(report.points),
                "point_count": len(series),
                "issue_count": len(report.issues),
            },
        )
        with self._series_lock:
            report, series = self._series.setdefault(key, (report, series))
        return metadata, report, series

    def build_dashboard(self, file_id: str) -> DashboardResponse:
        metadata, report, series = self.load_series(file_id)
        return DashboardResponse(
            file=metadata,
            observed_count=len(report.points),
            point_count=len(series),
            missing_timestamp=metadata.file_type is FileType.csv and report.missing_timestamp,
            points=[_point_out(point) for point in series],
            snapshots={
                metric: None if snapshot is None else MetricSnapshotOut(
                    value=snapshot.value,
                    change=snapshot.change,
                    anomalies=snapshot.anomalies,
                    is_anomaly=snapshot.is_anomaly,
                    anomaly_percent=snapshot.anomaly_percent,
                )
                for metric, snapshot in self.engine.snapshots(series).items()
            },
            summaries={
                metric: _summary_out(self.engine.summarize(series, metric))
                for metric in Metric
            },
            day_night=[
                DayNightRowOut(
                    metric=row.metric,
                    day=row.day,
                    night=row.night,
                    difference=row.difference,
                )
                for row in self.engine.day_night(series)
            ],
            histograms={
                metric: None if hist is None else HistogramOut(
                    bins=list(hist.bins),
                    min_value=hist.min_value,
                    max_value=hist.max_value,
                    bin_size=hist.bin_size,
                    peak=hist.max_frequency,
                    edges=list(hist.edges),
                )
                for metric, hist in self.engine.histograms(series).items()
            },
            charts={
                line.metric: ChartLineOut(raw=line.raw, smoothed=line.smoothed)
                for line in chart_lines(series, self.smoothing_window)
            },
            issues=[
                RowIssueOut(row_number=issue.row_number, reason=issue.reason)
                for issue in report.issues
            ],
            digest=self._digest(metadata, len(report.points), series),
        )

    async def refresh_insights(self, file_id: str) -> InsightsResponse:
        """Request fresh insights; the last completed request replaces earlier ones."""
        metadata, report, series = self.load_series(file_id)
        if not series:
            self._store_insights(file_id, [])
            return InsightsResponse(file_id=file_id, insights=[])

        digest = self._digest(metadata, len(report.points), series)
        insights, used_fallback = await self.insights.generate_insights(digest)
        self._store_insights(file_id, insights)
        return InsightsResponse(file_id=file_id, insights=insights, fallback=used_fallback)

    def latest_insights(self, file_id: str) -> InsightsResponse:
        self.files.get(file_id)
        with self._insights_lock:
            insights = [insight.model_copy() for insight in self._insights.get(file_id, [])]
        return InsightsResponse(file_id=file_id, insights=insights)

    async def analyze(self, file_id: str, question: str) -> AnalysisResponse:
        if not question.strip():
            raise ValueError("Question must not be empty.")
        metadata = self.files.get(file_id)
        content = self.files.read_text(file_id)
        answer = await self.insights.analyze(metadata.name, content, question)
        return AnalysisResponse(file_id=file_id, answer=answer)

    def forget(self, file_id: str) -> None:
        with self._insights_lock:
            self._insights.pop(file_id, None)
        with self._series_lock:
            for key in [key for key in self._series if key[0] == file_id]:
                del self._series[key]

    def _store_insights(self, file_id: str, insights: Sequence[Insight]) -> None:
        with self._insights_lock:
            self._insights[file_id] = list(insights)

    @staticmethod
    def _digest(metadata: FileMetadata, observed: int, series: Sequence[DataPoint]) -> str:
        return build_insight_summary(
            file_name=metadata.name,
            file_type=metadata.file_type,
            sensor_type=metadata.sensor_type,
            observed_count=observed,
            point_count=len(series),
            latest=series[-1] if series else None,
        )


def _summary_out(summary: MetricSummary) -> MetricSummaryOut:
    return MetricSummaryOut(
        count=summary.count,
        min_value=summary.min_value,
        max_value=summary.max_value,
        mean_value=summary.mean_value,
    )


def _point_out(point: DataPoint) -> DataPointOut:
    return DataPointOut(
        timestamp=point.timestamp,
        temperature=point.temperature,
        humidity=point.humidity,
        light=point.light,
        air_quality=point.air_quality,
    )


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return timezone.utc


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard with the configured collaborators."""
    settings = get_settings()
    seed = settings.synthesis_seed

    def rng_factory() -> random.Random:
        return random.Random(seed)

    return DashboardService(
        files=build_default_file_service(),
        insights=build_default_insight_service(),
        engine=StatisticsEngine(tz=_resolve_timezone(settings.display_timezone)),
        target_points=settings.synthesis_target_points,
        smoothing_window=settings.smoothing_window,
        rng_factory=rng_factory,
    )
