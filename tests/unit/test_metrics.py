"""Unit tests for metrics collection and system health."""

from datetime import timedelta

import pytest

from puretrans.core.models import utc_now
from puretrans.monitoring.events import EventType, TranslationEvent
from puretrans.monitoring.metrics import HealthStatus, MetricsCollector
from puretrans.utils.config import PipelineSettings


def completed(purity: float, time_ms: float = 100.0, method: str = "primary", **extra):
    return TranslationEvent(
        event_type=EventType.TRANSLATION_COMPLETED,
        payload={
            "purity_score": purity,
            "processing_time_ms": time_ms,
            "method": method,
            "pure": purity == 100.0,
            **extra,
        },
    )


@pytest.fixture
def collector(settings: PipelineSettings) -> MetricsCollector:
    return MetricsCollector(settings)


@pytest.mark.unit
class TestMetricsAggregation:
    """Test metric aggregation."""

    def test_empty_metrics(self, collector: MetricsCollector) -> None:
        """Test a fresh collector reports zeros."""
        metrics = collector.get_metrics()

        assert metrics.total_translations == 0
        assert metrics.purity_rate == 0.0
        assert metrics.user_satisfaction is None

    def test_purity_and_failure_rates(self, collector: MetricsCollector) -> None:
        """Test rates are percentages of completed translations."""
        for _ in range(3):
            collector.record(completed(100.0, quality_score=90.0))
        collector.record(completed(80.0, quality_score=50.0))
        collector.record(TranslationEvent(event_type=EventType.TRANSLATION_FAILED))

        metrics = collector.get_metrics()

        assert metrics.total_translations == 4
        assert metrics.pure_translations == 3
        assert metrics.purity_rate == 75.0
        assert metrics.average_purity_score == 95.0
        assert metrics.average_quality_score == 80.0
        assert metrics.failure_rate == 25.0

    def test_cache_and_fallback_rates(self, collector: MetricsCollector) -> None:
        """Test cache hit and fallback rates."""
        collector.record(TranslationEvent(event_type=EventType.CACHE_HIT))
        collector.record(TranslationEvent(event_type=EventType.CACHE_MISS))
        collector.record(completed(100.0))
        collector.record(
            TranslationEvent(event_type=EventType.FALLBACK_TRIGGERED, payload={"method": "x"})
        )

        metrics = collector.get_metrics()

        assert metrics.cache_hit_rate == 50.0
        assert metrics.fallback_rate == 100.0

    def test_issues_by_type(self, collector: MetricsCollector) -> None:
        """Test violations are counted by type."""
        collector.record(
            TranslationEvent(
                event_type=EventType.PURITY_VIOLATION,
                payload={"violation_types": ["ui_artifact", "foreign_fragment", "ui_artifact"]},
            )
        )
        assert collector.get_metrics().issues_by_type == {
            "ui_artifact": 2,
            "foreign_fragment": 1,
        }

    def test_method_effectiveness(self, collector: MetricsCollector) -> None:
        """Test per-method success rates."""
        collector.record(completed(100.0, method="primary", quality_score=90.0))
        collector.record(completed(50.0, method="primary", quality_score=70.0))
        collector.record(completed(100.0, method="template"))

        methods = collector.get_metrics().method_effectiveness

        assert methods["primary"].usage_count == 2
        assert methods["primary"].success_rate == 50.0
        assert methods["primary"].average_quality == 80.0
        assert methods["template"].average_quality == 0.0

    def test_user_satisfaction(self, collector: MetricsCollector) -> None:
        """Test ratings are averaged."""
        for rating in (80.0, 100.0):
            collector.record(
                TranslationEvent(
                    event_type=EventType.USER_FEEDBACK_RECEIVED, payload={"rating": rating}
                )
            )
        assert collector.get_metrics().user_satisfaction == 90.0

    def test_window_excludes_old_points(self, collector: MetricsCollector) -> None:
        """Test points outside the window are ignored."""
        old = completed(100.0).model_copy(update={"timestamp": utc_now() - timedelta(days=2)})
        collector.record(old)
        collector.record(completed(100.0))

        assert collector.get_metrics().total_translations == 1
        assert (
            collector.get_metrics(start=utc_now() - timedelta(days=3)).total_translations == 2
        )

    def test_buffers_are_bounded(self, settings: PipelineSettings) -> None:
        """Test metric buffers drop the oldest points."""
        collector = MetricsCollector(settings, max_points=5, max_events=3)
        for _ in range(10):
            collector.record(completed(100.0))

        assert collector.get_metrics().total_translations == 5
        assert len(collector.get_events()) == 3


@pytest.mark.unit
class TestSystemHealth:
    """Test health classification."""

    def test_no_traffic_is_healthy(self, collector: MetricsCollector) -> None:
        """Test an idle system is healthy."""
        assert collector.get_system_health().status is HealthStatus.HEALTHY

    def test_critical_purity_rate(self, collector: MetricsCollector) -> None:
        """Test an 85% purity rate is critical."""
        for i in range(100):
            collector.record(completed(100.0 if i < 85 else 60.0))

        health = collector.get_system_health()

        assert health.metrics.purity_rate == 85.0
        assert health.status is HealthStatus.CRITICAL
        assert "critically low" in health.issues[0]

    def test_warning_purity_rate(self, collector: MetricsCollector) -> None:
        """Test a 92% purity rate is a warning."""
        for i in range(100):
            collector.record(completed(100.0 if i < 92 else 60.0))
        assert collector.get_system_health().status is HealthStatus.WARNING

    def test_high_failure_rate(self, collector: MetricsCollector) -> None:
        """Test failures above 5% are a warning."""
        for _ in range(10):
            collector.record(completed(100.0))
        collector.record(TranslationEvent(event_type=EventType.TRANSLATION_FAILED))

        health = collector.get_system_health()

        assert health.status is HealthStatus.WARNING
        assert "Failure rate" in health.issues[0]

    def test_slow_processing(self, collector: MetricsCollector) -> None:
        """Test averages above the ceiling are a warning."""
        collector.record(completed(100.0, time_ms=20000.0))

        health = collector.get_system_health()

        assert health.status is HealthStatus.WARNING
        assert "processing time" in health.issues[0]


@pytest.mark.unit
class TestEventsAndExport:
    """Test event access and export."""

    def test_get_events_filtered(self, collector: MetricsCollector) -> None:
        """Test filtering events by type."""
        collector.record(TranslationEvent(event_type=EventType.CACHE_HIT))
        collector.record(completed(100.0))

        events = collector.get_events(EventType.CACHE_HIT)

        assert len(events) == 1
        assert collector.get_events(limit=0) == []

    def test_export_metrics(self, collector: MetricsCollector) -> None:
        """Test the export is JSON compatible."""
        collector.record(completed(100.0))

        export = collector.export_metrics()

        assert export["health"]["status"] == "healthy"
        assert export["metrics"]["total_translations"] == 1
        assert export["event_count"] == 1
        assert export["buffer_sizes"]["translation_count"] == 1

    def test_reset(self, collector: MetricsCollector) -> None:
        """Test reset drops everything."""
        collector.record(completed(100.0))
        collector.reset()

        assert collector.get_metrics().total_translations == 0
        assert collector.get_events() == []
