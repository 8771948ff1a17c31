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

"""Real-time quality monitoring loop.

A background task that periodically turns collected metrics into
threshold checks, trend analysis and a health verdict.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from puretrans.core.models import Severity, utc_now
from puretrans.monitoring.alerts import AlertManager, AlertType, QualityAlert
from puretrans.monitoring.metrics import HealthStatus, MetricsCollector, SystemHealth
from puretrans.monitoring.quality import QualityMonitor, QualityTrend, TrendDirection
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

RECENT_REPORTS = 100


@dataclass
class TickResult:
    """Outcome of one monitoring pass."""

    alerts: list[QualityAlert] = field(default_factory=list)
    health: SystemHealth | None = None
    trends: dict[str, QualityTrend] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)


class RealTimeQualityMonitor:
    """Periodic threshold, trend and health checks.

    Example:
        >>> monitor = RealTimeQualityMonitor(collector, quality, alerts)
        >>> await monitor.start()
        >>> ...
        >>> await monitor.stop()
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        quality: QualityMonitor,
        alerts: AlertManager,
        settings: PipelineSettings | None = None,
    ) -> None:
        """Initialize monitor.

        Args:
            metrics: Source of aggregated metrics
            quality: Source of quality history and trends
            alerts: Threshold evaluation and alert log
            settings: Source of the monitoring interval
        """
        self.settings = settings or get_settings()
        self.metrics = metrics
        self.quality = quality
        self.alerts = alerts
        self.interval = self.settings.monitoring_interval_seconds
        self.total_ticks = 0
        self.last_tick: TickResult | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Whether the background task is alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop (no-op when already running)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="puretrans-monitor")
        logger.info("Real-time monitoring started (interval %.1fs)", self.interval)

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Real-time monitoring stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error("Monitoring pass failed: %s", e)
            await asyncio.sleep(self.interval)

    def _current_values(self) -> dict[str, float | None]:
        metrics = self.metrics.get_metrics()
        reports = self.quality.get_history(RECENT_REPORTS)
        has_traffic = metrics.total_translations > 0

        def recent_mean(name: str) -> float | None:
            if not reports:
                return None
            return sum(getattr(r.metrics, name) for r in reports) / len(reports)

        return {
            "purity_rate": metrics.purity_rate if has_traffic else None,
            "overall_quality": metrics.average_quality_score if has_traffic else None,
            "error_rate": metrics.failure_rate if has_traffic else None,
            "processing_time": metrics.average_processing_time_ms if has_traffic else None,
            "terminology_accuracy": recent_mean("terminology_accuracy"),
            "contextual_relevance": recent_mean("contextual_relevance"),
            "readability_score": recent_mean("readability_score"),
            "user_satisfaction": metrics.user_satisfaction,
        }

    async def tick(self) -> TickResult:
        """Run one monitoring pass.

        Returns:
            Alerts raised, health verdict and trends of this pass
        """
        alerts = await self.alerts.check_thresholds(self._current_values())

        trends = self.quality.get_trends()
        overall = trends.get("overall_score")
        if overall is not None and overall.direction is TrendDirection.DECLINING:
            alerts.append(
                await self.alerts.create_alert(
                    AlertType.QUALITY_DEGRADATION,
                    Severity.MEDIUM,
                    f"Quality declining: {overall.previous_mean:.2f} -> {overall.recent_mean:.2f}",
                    data={"change_percent": overall.change_percent},
                    metric="overall_score",
                    value=overall.recent_mean,
                )
            )

        health = self.metrics.get_system_health()
        if health.status is HealthStatus.HEALTHY:
            logger.debug("System health: %s", health.status.value)
        else:
            logger.warning("System health %s: %s", health.status.value, "; ".join(health.issues))

        self.total_ticks += 1
        self.last_tick = TickResult(alerts=alerts, health=health, trends=trends)
        return self.last_tick

    def get_system_health_metrics(self) -> dict[str, Any]:
        """Snapshot of health, alerts and monitoring state."""
        health = self.metrics.get_system_health()
        return {
            "status": health.status.value,
            "issues": health.issues,
            "running": self.is_running,
            "total_ticks": self.total_ticks,
            "last_tick": self.last_tick.timestamp.isoformat() if self.last_tick else None,
            "active_alerts": len(self.alerts.get_active_alerts()),
            "alert_stats": self.alerts.get_stats(),
            "purity_rate": health.metrics.purity_rate,
            "total_translations": health.metrics.total_translations,
        }
