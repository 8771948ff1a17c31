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

"""Quality monitoring, alerting and telemetry."""

from puretrans.monitoring.alerts import AlertManager, AlertType, QualityAlert
from puretrans.monitoring.events import EventType, TranslationEvent
from puretrans.monitoring.metrics import (
    HealthStatus,
    MethodEffectiveness,
    MetricsCollector,
    SystemHealth,
    TranslationMetrics,
)
from puretrans.monitoring.quality import QualityMonitor, QualityTrend, TrendDirection
from puretrans.monitoring.realtime import RealTimeQualityMonitor, TickResult
from puretrans.utils.config import DEFAULT_THRESHOLDS, QualityThreshold

__all__ = [
    "DEFAULT_THRESHOLDS",
    "AlertManager",
    "AlertType",
    "EventType",
    "HealthStatus",
    "MethodEffectiveness",
    "MetricsCollector",
    "QualityAlert",
    "QualityMonitor",
    "QualityThreshold",
    "QualityTrend",
    "RealTimeQualityMonitor",
    "SystemHealth",
    "TickResult",
    "TranslationEvent",
    "TranslationMetrics",
    "TrendDirection",
]
