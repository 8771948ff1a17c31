# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Metrics collection.

Derives metric points from telemetry events into bounded per-metric
buffers and aggregates them over time windows. The gateway is the only
writer; readers always work on snapshots of the buffers.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from puretrans.core.models import utc_now
from puretrans.monitoring.events import EventType, TranslationEvent
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

MAX_POINTS_PER_METRIC = 50000
MAX_EVENTS = 10000
DEFAULT_WINDOW = timedelta(hours=24)

METRIC_NAMES = (
    "translation_count",
    "purity_score",
    "processing_time",
    "quality_score",
    "failure_count",
    "method_usage",
    "method_attempts",
    "user_satisfaction",
    "cache_hits",
    "cache_misses",
    "fallback_count",
    "purity_violations",
)

CRITICAL_PURITY_RATE = 90.0
WARNING_PURITY_RATE = 95.0
WARNING_FAILURE_RATE = 5.0


@dataclass(frozen=True)
class MetricPoint:
    """One timestamped metric value."""

    timestamp: datetime
    value: float
    tags: dict[str, Any] = field(default_factory=dict)


class MethodEffectiveness(BaseModel):
    """How one translation method performed in a window."""

    method: str
    usage_count: int = 0
    success_rate: float = 0.0
    average_quality: float = 0.0
    average_processing_time_ms: float = 0.0


class TranslationMetrics(BaseModel):
    """Aggregated pipeline metrics over a time window. Rates are percentages."""

    window_start: datetime
    window_end: datetime
    total_translations: int = 0
    pure_translations: int = 0
    purity_rate: float = 0.0
    average_purity_score: float = 0.0
    average_quality_score: float = 0.0
    failure_rate: float = 0.0
    average_processing_time_ms: float = 0.0
    user_satisfaction: float | None = None
    issues_by_type: dict[str, int] = Field(default_factory=dict)
    method_effectiveness: dict[str, MethodEffectiveness] = Field(default_factory=dict)
    attempts_by_method: dict[str, int] = Field(default_factory=dict)
    rejected_attempts: int = 0
    cache_hit_rate: float = 0.0
    fallback_rate: float = 0.0


class HealthStatus(str, Enum):
    """Overall system health verdict."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class SystemHealth(BaseModel):
    """Health verdict with the reasons behind it."""

    status: HealthStatus
    issues: list[str] = Field(default_factory=list)
    metrics: TranslationMetrics


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _rate(part: float, whole: float) -> float:
    return round(100.0 * part / whole, 2) if whole else 0.0


class MetricsCollector:
    """Collects telemetry events and aggregates pipeline metrics.

    Example:
        >>> collector = MetricsCollector()
        >>> collector.record(TranslationEvent(event_type=EventType.CACHE_HIT))
        >>> collector.get_metrics().cache_hit_rate
        100.0
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        max_points: int = MAX_POINTS_PER_METRIC,
        max_events: int = MAX_EVENTS,
    ) -> None:
        """Initialize collector.

        Args:
            settings: Source of the processing time ceiling
            max_points: Capacity of each metric buffer
            max_events: Capacity of the event log
        """
        self.settings = settings or get_settings()
        self.max_points = max_points
        self._events: deque[TranslationEvent] = deque(maxlen=max_events)
        self._points: dict[str, deque[MetricPoint]] = {
            name: deque(maxlen=max_points) for name in METRIC_NAMES
        }

    def record(self, event: TranslationEvent) -> None:
        """Append an event and derive its metric points."""
        self._events.append(event)
        ts = event.timestamp
        payload = event.payload

        if event.event_type is EventType.TRANSLATION_COMPLETED:
            self._add("translation_count", ts, 1.0)
            self._add("purity_score", ts, float(payload.get("purity_score", 0.0)))
            self._add("processing_time", ts, float(payload.get("processing_time_ms", 0.0)))
            if payload.get("quality_score") is not None:
                self._add("quality_score", ts, float(payload["quality_score"]))
            self._add(
                "method_usage",
                ts,
                1.0,
                method=payload.get("method", "unknown"),
                pure=bool(payload.get("pure", False)),
                quality=payload.get("quality_score"),
                processing_time_ms=float(payload.get("processing_time_ms", 0.0)),
            )
        elif event.event_type is EventType.ATTEMPT_COMPLETED:
            self._add(
                "method_attempts",
                ts,
                1.0,
                method=payload.get("method", "unknown"),
                accepted=bool(payload.get("accepted", False)),
            )
        elif event.event_type is EventType.TRANSLATION_FAILED:
            self._add("failure_count", ts, 1.0, reason=payload.get("reason", ""))
        elif event.event_type is EventType.PURITY_VIOLATION:
            for violation_type in payload.get("violation_types", ()):
                self._add("purity_violations", ts, 1.0, type=violation_type)
        elif event.event_type is EventType.FALLBACK_TRIGGERED:
            self._add("fallback_count", ts, 1.0, method=payload.get("method", ""))
        elif event.event_type is EventType.CACHE_HIT:
            self._add("cache_hits", ts, 1.0)
        elif event.event_type is EventType.CACHE_MISS:
            self._add("cache_misses", ts, 1.0)
        elif event.event_type is EventType.USER_FEEDBACK_RECEIVED:
            self._add("user_satisfaction", ts, float(payload.get("rating", 0.0)))

    def _add(self, name: str, timestamp: datetime, value: float, **tags: Any) -> None:
        self._points[name].append(MetricPoint(timestamp, value, tags))

    def _window(self, name: str, start: datetime, end: datetime) -> list[MetricPoint]:
        return [p for p in list(self._points[name]) if start <= p.timestamp <= end]

    def get_metrics(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> TranslationMetrics:
        """Aggregate metrics over a window (default: the last 24 hours).

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive, default now)

        Returns:
            TranslationMetrics for the window
        """
        end = end or utc_now()
        start = start or end - DEFAULT_WINDOW

        translations = self._window("translation_count", start, end)
        purity = [p.value for p in self._window("purity_score", start, end)]
        times = [p.value for p in self._window("processing_time", start, end)]
        quality = [p.value for p in self._window("quality_score", start, end)]
        failures = self._window("failure_count", start, end)
        satisfaction = [p.value for p in self._window("user_satisfaction", start, end)]
        hits = len(self._window("cache_hits", start, end))
        misses = len(self._window("cache_misses", start, end))
        fallbacks = len(self._window("fallback_count", start, end))
        violations = self._window("purity_violations", start, end)
        attempts = self._window("method_attempts", start, end)

        total = len(translations)
        pure = sum(1 for v in purity if v >= 100.0)

        return TranslationMetrics(
            window_start=start,
            window_end=end,
            total_translations=total,
            pure_translations=pure,
            purity_rate=_rate(pure, total),
            average_purity_score=round(_mean(purity), 2),
            average_quality_score=round(_mean(quality), 2),
            failure_rate=_rate(len(failures), total),
            average_processing_time_ms=round(_mean(times), 2),
            user_satisfaction=round(_mean(satisfaction), 2) if satisfaction else None,
            issues_by_type=dict(Counter(str(p.tags.get("type")) for p in violations)),
            method_effectiveness=self._method_effectiveness(start, end),
            attempts_by_method=dict(Counter(str(p.tags.get("method")) for p in attempts)),
            rejected_attempts=sum(1 for p in attempts if not p.tags.get("accepted")),
            cache_hit_rate=_rate(hits, hits + misses),
            fallback_rate=_rate(fallbacks, total),
        )

    def _method_effectiveness(
        self, start: datetime, end: datetime
    ) -> dict[str, MethodEffectiveness]:
        by_method: dict[str, list[MetricPoint]] = {}
        for point in self._window("method_usage", start, end):
            by_method.setdefault(str(point.tags.get("method")), []).append(point)

        result = {}
        for method, points in by_method.items():
            qualities = [p.tags["quality"] for p in points if p.tags.get("quality") is not None]
            result[method] = MethodEffectiveness(
                method=method,
                usage_count=len(points),
                success_rate=_rate(sum(1 for p in points if p.tags.get("pure")), len(points)),
                average_quality=round(_mean(qualities), 2),
                average_processing_time_ms=round(
                    _mean([p.tags.get("processing_time_ms", 0.0) for p in points]), 2
                ),
            )
        return result

    def get_system_health(self) -> SystemHealth:
        """Classify system health from the last 24 hours of metrics.

        CRITICAL below a 90% purity rate; WARNING below 95%, above a 5%
        failure rate, or above the processing time ceiling.
        """
        metrics = self.get_metrics()
        if metrics.total_translations == 0:
            return SystemHealth(status=HealthStatus.HEALTHY, metrics=metrics)

        issues: list[str] = []
        status = HealthStatus.HEALTHY
        ceiling = self.settings.max_processing_time_ceiling_ms

        if metrics.purity_rate < CRITICAL_PURITY_RATE:
            status = HealthStatus.CRITICAL
            issues.append(f"Purity rate {metrics.purity_rate:.2f}% is critically low")
        elif metrics.purity_rate < WARNING_PURITY_RATE:
            status = HealthStatus.WARNING
            issues.append(f"Purity rate {metrics.purity_rate:.2f}% is below target")

        if metrics.failure_rate > WARNING_FAILURE_RATE:
            if status is HealthStatus.HEALTHY:
                status = HealthStatus.WARNING
            issues.append(f"Failure rate {metrics.failure_rate:.2f}% is high")

        if metrics.average_processing_time_ms > ceiling:
            if status is HealthStatus.HEALTHY:
                status = HealthStatus.WARNING
            issues.append(
                f"Average processing time {metrics.average_processing_time_ms:.0f}ms "
                f"exceeds {ceiling}ms"
            )

        return SystemHealth(status=status, issues=issues, metrics=metrics)

    def get_events(
        self, event_type: EventType | None = None, limit: int = 100
    ) -> list[TranslationEvent]:
        """Most recent events, oldest first."""
        events = [e for e in list(self._events) if event_type is None or e.event_type is event_type]
        return events[-limit:] if limit > 0 else []

    def export_metrics(self) -> dict[str, Any]:
        """JSON-serialisable snapshot of metrics and health."""
        health = self.get_system_health()
        return {
            "exported_at": utc_now().isoformat(),
            "metrics": health.metrics.model_dump(mode="json"),
            "health": {"status": health.status.value, "issues": health.issues},
            "buffer_sizes": {name: len(points) for name, points in self._points.items()},
            "event_count": len(self._events),
        }

    def reset(self) -> None:
        """Drop all events and metric points."""
        self._events.clear()
        for points in self._points.values():
            points.clear()
        logger.info("Metrics collector reset")
