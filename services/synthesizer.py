"""Pad sparse sensor series so charts have something to draw.

The synthetic points come from a bounded random walk seeded with the first
observed value of each metric. This is a presentation filler only: the padded
series must not be treated as a reconstruction of the real signal.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from models.records import DataPoint, Metric

DEFAULT_TARGET_POINTS = 140


@dataclass(frozen=True)
class WalkProfile:
    """Random walk parameters for one metric."""

    default: float
    min_value: float
    max_value: float
    amplitude: float
    bias: float = 0.5

    def step(self, value: float, rng: random.Random) -> float:
        value += (rng.random() - self.bias) * self.amplitude
        return max(self.min_value, min(self.max_value, value))


WALK_PROFILES: dict[Metric, WalkProfile] = {
    Metric.temperature: WalkProfile(default=20.0, min_value=-10.0, max_value=40.0, amplitude=2.0),
    Metric.humidity: WalkProfile(default=50.0, min_value=0.0, max_value=100.0, amplitude=5.0),
    # Light drifts slightly upwards.
    Metric.light: WalkProfile(
        default=500.0, min_value=0.0, max_value=1000.0, amplitude=50.0, bias=0.45
    ),
    Metric.air_quality: WalkProfile(default=40.0, min_value=0.0, max_value=200.0, amplitude=3.0),
}


def first_observation(points: Sequence[DataPoint], metric: Metric) -> Optional[float]:
    for point in points:
        value = point.value(metric)
        if value is not None:
            return value
    return None


def synthesize_series(
    points: Sequence[DataPoint],
    target_count: int = DEFAULT_TARGET_POINTS,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> list[DataPoint]:
    """Return ``points`` padded to ``target_count`` entries, sorted by time.

    Original points are kept unchanged. Synthetic points are spaced evenly
    from the first observation towards ``now``.
    """
    if not points:
        return []

    rng = rng or random.Random()
    end = now or datetime.now(timezone.utc)
    start = points[0].timestamp
    step: timedelta = (end - start) / target_count if target_count > 0 else timedelta(0)

    current: dict[Metric, float] = {}
    for metric, profile in WALK_PROFILES.items():
        observed = first_observation(points, metric)
        current[metric] = profile.default if observed is None else observed

    generated = list(points)
    for index in range(len(points), target_count):
        for metric, profile in WALK_PROFILES.items():
            current[metric] = profile.step(current[metric], rng)
        generated.append(
            DataPoint(
                timestamp=start + step * index,
                **{metric.value: value for metric, value in current.items()},
            )
        )

    generated.sort(key=lambda point: point.timestamp)
    return generated
