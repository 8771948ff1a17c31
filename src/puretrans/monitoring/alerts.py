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

"""Threshold checks and alerts.

Thresholds come from ``PipelineSettings.quality_thresholds``, the same set
the quality monitor uses for per-result issues. Every threshold breach
produces an alert; nothing is deduplicated or suppressed. Alerts move from
unacknowledged to acknowledged or resolved and are only dropped by
retention, oldest acknowledged first.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections import Counter
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from puretrans.core.models import Severity, utc_now
from puretrans.utils.config import (
    PipelineSettings,
    QualityThreshold,
    get_settings,
)

logger = logging.getLogger(__name__)

MAX_RETAINED_ALERTS = 1000


class AlertType(str, Enum):
    """What caused an alert."""

    THRESHOLD_BREACH = "threshold_breach"
    QUALITY_DEGRADATION = "quality_degradation"
    ANOMALY = "anomaly"
    USER_COMPLAINT = "user_complaint"


def _alert_id() -> str:
    return f"alert_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class QualityAlert(BaseModel):
    """An alert raised by the monitoring layer."""

    id: str = Field(default_factory=_alert_id)
    alert_type: AlertType
    severity: Severity
    message: str
    metric: str | None = None
    value: float | None = None
    threshold: QualityThreshold | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    data: dict[str, Any] = Field(default_factory=dict)
    acknowledged: bool = False
    acknowledged_at: datetime | None = None
    resolved: bool = False
    resolved_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Neither acknowledged nor resolved."""
        return not (self.acknowledged or self.resolved)


AlertSink = Callable[[QualityAlert], Any]


class AlertManager:
    """Evaluates thresholds and keeps the alert log.

    Example:
        >>> manager = AlertManager()
        >>> alerts = await manager.check_thresholds({"purity_rate": 98.0})
        >>> alerts[0].severity
        <Severity.CRITICAL: 'critical'>
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        max_alerts: int = MAX_RETAINED_ALERTS,
    ) -> None:
        """Initialize alert manager.

        Args:
            settings: Source of the quality thresholds
            max_alerts: Number of alerts retained
        """
        self.settings = settings or get_settings()
        self.thresholds: dict[str, QualityThreshold] = {
            t.metric: t for t in self.settings.quality_thresholds
        }
        self.max_alerts = max_alerts
        self.alerts: list[QualityAlert] = []
        self.sinks: list[AlertSink] = []
        self.stats: Counter[str] = Counter()

    def reconfigure(self, settings: PipelineSettings) -> None:
        """Replace the configured thresholds.

        Thresholds added at runtime for metrics outside the settings are kept.
        """
        configured = {t.metric for t in self.settings.quality_thresholds}
        extra = {m: t for m, t in self.thresholds.items() if m not in configured}
        self.settings = settings
        self.thresholds = {**extra, **{t.metric: t for t in settings.quality_thresholds}}
        logger.info("Alert thresholds reloaded (%d metrics)", len(self.thresholds))

    def add_threshold(self, threshold: QualityThreshold) -> None:
        """Add or replace the threshold for a metric until the next reload."""
        self.thresholds[threshold.metric] = threshold
        logger.info("Registered threshold for %s", threshold.metric)

    def update_threshold(self, metric: str, **changes: Any) -> bool:
        """Update fields of an existing threshold.

        Args:
            metric: Metric whose threshold changes
            **changes: New field values

        Returns:
            True if the threshold was updated, False if the metric is unknown

        Raises:
            ValueError: If the updated threshold is invalid
        """
        current = self.thresholds.get(metric)
        if current is None:
            logger.warning("No threshold for metric %s", metric)
            return False
        merged = {**current.model_dump(), **changes, "metric": metric}
        self.thresholds[metric] = QualityThreshold.model_validate(merged)
        logger.info("Updated threshold for %s: %s", metric, changes)
        return True

    def register_sink(self, sink: AlertSink) -> None:
        """Register a callable receiving every new alert.

        Args:
            sink: Sync or async callable taking the alert
        """
        self.sinks.append(sink)
        logger.debug("Registered alert sink %r", sink)

    async def check_thresholds(self, values: dict[str, float | None]) -> list[QualityAlert]:
        """Check metric values against every enabled threshold.

        Args:
            values: Metric values by name; missing or None values are skipped

        Returns:
            One alert per breached threshold
        """
        self.stats["total_checks"] += 1
        raised = []
        for metric, threshold in self.thresholds.items():
            value = values.get(metric)
            if not threshold.enabled or value is None or not threshold.is_breached(value):
                continue
            self.stats["threshold_breaches"] += 1
            alert = await self.create_alert(
                AlertType.THRESHOLD_BREACH,
                threshold.severity,
                f"{metric} is {value:.2f} (threshold {threshold.bound:.2f})",
                metric=metric,
                value=value,
                threshold=threshold,
            )
            raised.append(alert)
        return raised

    async def create_alert(
        self,
        alert_type: AlertType,
        severity: Severity,
        message: str,
        data: dict[str, Any] | None = None,
        metric: str | None = None,
        value: float | None = None,
        threshold: QualityThreshold | None = None,
    ) -> QualityAlert:
        """Record a new alert and hand it to every sink.

        Returns:
            The created alert
        """
        alert = QualityAlert(
            alert_type=alert_type,
            severity=severity,
            message=message,
            metric=metric,
            value=value,
            threshold=threshold,
            data=data or {},
        )
        self.alerts.append(alert)
        self.stats["alerts_generated"] += 1
        self._enforce_retention()

        log = logger.error if severity in (Severity.HIGH, Severity.CRITICAL) else logger.warning
        log("Quality alert [%s] %s: %s", severity.value, alert_type.value, message)

        await self._dispatch(alert)
        return alert

    async def _dispatch(self, alert: QualityAlert) -> None:
        for sink in self.sinks:
            try:
                # Handle both sync and async sinks
                result = sink(alert)
                if hasattr(result, "__await__"):
                    await result
            except Exception as e:
                logger.error("Alert sink %r failed for %s: %s", sink, alert.id, e)

    def _enforce_retention(self) -> None:
        while len(self.alerts) > self.max_alerts:
            victim = next((a for a in self.alerts if not a.is_active), self.alerts[0])
            self.alerts.remove(victim)

    def get_alert(self, alert_id: str) -> QualityAlert | None:
        """Find an alert by ID."""
        return next((a for a in self.alerts if a.id == alert_id), None)

    def acknowledge(self, alert_id: str) -> bool:
        """Mark an alert acknowledged.

        Returns:
            True if the alert exists
        """
        alert = self.get_alert(alert_id)
        if alert is None:
            return False
        if not alert.acknowledged:
            alert.acknowledged = True
            alert.acknowledged_at = utc_now()
            logger.info("Acknowledged alert %s", alert_id)
        return True

    def resolve(self, alert_id: str) -> bool:
        """Mark an alert resolved (and acknowledged).

        Returns:
            True if the alert exists
        """
        alert = self.get_alert(alert_id)
        if alert is None:
            return False
        self.acknowledge(alert_id)
        if not alert.resolved:
            alert.resolved = True
            alert.resolved_at = utc_now()
            logger.info("Resolved alert %s", alert_id)
        return True

    def get_active_alerts(self, severity: Severity | None = None) -> list[QualityAlert]:
        """Unacknowledged alerts, newest first."""
        active = [
            a for a in self.alerts if a.is_active and (severity is None or a.severity is severity)
        ]
        return active[::-1]

    def get_stats(self) -> dict[str, int]:
        """Alert counters."""
        return {
            "total_checks": self.stats["total_checks"],
            "alerts_generated": self.stats["alerts_generated"],
            "threshold_breaches": self.stats["threshold_breaches"],
            "active_alerts": len(self.get_active_alerts()),
            "retained_alerts": len(self.alerts),
        }
