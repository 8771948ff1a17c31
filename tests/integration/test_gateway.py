"""Integration tests for the translation gateway.

Runs complete requests through cleaning, translation, validation,
fallback, caching and monitoring with fake backends where outputs must
be predictable.
"""

import re

import pytest

from puretrans.core.gateway import TranslationGateway
from puretrans.core.models import Language, TranslationMethod, UserIssueReport
from puretrans.monitoring.alerts import AlertType
from puretrans.monitoring.events import EventType
from puretrans.utils.config import ConfigurationError, PipelineSettings

CYRILLIC = re.compile(r"[\u0400-\u04ff]")
BACKEND_METHODS = (TranslationMethod.PRIMARY, TranslationMethod.SECONDARY)


@pytest.mark.integration
class TestContaminatedInput:
    """Test contaminated input never leaks into output."""

    @pytest.mark.asyncio
    async def test_ui_artifacts_removed(self, gateway: TranslationGateway, request_factory) -> None:
        """Test interface fragments glued to Arabic text are gone."""
        request = request_factory("محامي دي زادمتصلمحاميProتحليلملفاتV2AUTO-TRANSLATE")

        result = await gateway.translate(request)

        assert result.purity_score == 100.0
        for token in ("Pro", "V2", "AUTO-TRANSLATE"):
            assert token not in result.translated_text

    @pytest.mark.asyncio
    async def test_cyrillic_and_markers_removed(
        self, gateway: TranslationGateway, request_factory
    ) -> None:
        """Test Cyrillic fragments and leftover markers are gone."""
        request = request_factory(
            "الشهود Defined في المادة 1 من قانون الإجراءات الجنائية ال процедة"
        )

        result = await gateway.translate(request)

        assert result.purity_score == 100.0
        assert not CYRILLIC.search(result.translated_text)
        assert "Defined" not in result.translated_text


@pytest.mark.integration
class TestMethodCascade:
    """Test the method sequence and fallback."""

    @pytest.mark.asyncio
    async def test_first_pure_method_accepted(
        self, fixed_backend_class, settings: PipelineSettings, arabic_request
    ) -> None:
        """Test a pure primary answer is returned as is."""
        gateway = TranslationGateway(
            settings, primary_backend=fixed_backend_class("Le tribunal décide")
        )

        result = await gateway.translate(arabic_request)

        assert result.translated_text == "Le tribunal décide"
        assert result.method is TranslationMethod.PRIMARY
        assert result.is_pure
        assert result.metadata.attempts == 1
        assert not result.metadata.fallback_used
        assert "cleaning" in result.metadata.step_durations_ms
        assert result.metadata.extra["quality_score"] > 0

    @pytest.mark.asyncio
    async def test_impure_primary_rejected(
        self, fixed_backend_class, settings: PipelineSettings, arabic_request
    ) -> None:
        """Test a mixed-script primary answer moves on to the next method."""
        gateway = TranslationGateway(
            settings,
            primary_backend=fixed_backend_class("Le tribunal محكمة"),
            secondary_backend=fixed_backend_class("Le tribunal décide"),
        )

        result = await gateway.translate(arabic_request)

        assert result.method is TranslationMethod.SECONDARY
        assert result.metadata.methods_tried == BACKEND_METHODS
        assert gateway.get_metrics().issues_by_type["foreign_fragment"] >= 1

    @pytest.mark.asyncio
    async def test_fallback_when_every_method_fails(
        self, fixed_backend_class, request_factory
    ) -> None:
        """Test generated content replaces impure translations."""
        settings = PipelineSettings(monitoring_enabled=False, method_order=BACKEND_METHODS)
        gateway = TranslationGateway(
            settings,
            primary_backend=fixed_backend_class("Le tribunal محكمة"),
            secondary_backend=fixed_backend_class("Le Pro tribunal"),
        )

        result = await gateway.translate(request_factory("عقد"))

        assert result.method is TranslationMethod.FALLBACK_GENERATED
        assert result.is_pure
        assert result.metadata.fallback_used
        assert result.metadata.attempts == 2
        assert "Translation replaced by generated content" in result.warnings
        assert gateway.get_metrics().fallback_rate == 100.0

    @pytest.mark.asyncio
    async def test_backend_errors_reported(
        self, failing_backend, fixed_backend_class, settings: PipelineSettings, arabic_request
    ) -> None:
        """Test unreachable backends show up as warnings."""
        gateway = TranslationGateway(
            settings,
            primary_backend=failing_backend,
            secondary_backend=fixed_backend_class("Le tribunal décide"),
        )

        result = await gateway.translate(arabic_request)

        assert result.method is TranslationMethod.SECONDARY
        assert "primary: service unreachable" in result.warnings

    @pytest.mark.asyncio
    async def test_failed_attempts_emit_events(
        self, failing_backend, arabic_request
    ) -> None:
        """Test every backend failure is recorded as an attempt event."""
        gateway = TranslationGateway(
            PipelineSettings(
                monitoring_enabled=False, method_order=BACKEND_METHODS, max_retry_attempts=2
            ),
            primary_backend=failing_backend,
            secondary_backend=failing_backend,
        )

        result = await gateway.translate(arabic_request)

        events = gateway.metrics.get_events(EventType.ATTEMPT_COMPLETED)
        assert [e.payload["method"] for e in events] == [
            m.value for m in result.metadata.methods_tried
        ]
        assert len(events) == 2
        for event in events:
            assert event.request_id == arabic_request.request_id
            assert not event.payload["succeeded"]
            assert event.payload["errors"] == ["service unreachable"]
            assert event.payload["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_accepted_attempt_emits_event(
        self, fixed_backend_class, settings: PipelineSettings, arabic_request
    ) -> None:
        """Test rejected and accepted attempts are both recorded."""
        gateway = TranslationGateway(
            settings,
            primary_backend=fixed_backend_class("Le tribunal محكمة"),
            secondary_backend=fixed_backend_class("Le tribunal décide"),
        )

        await gateway.translate(arabic_request)

        events = gateway.metrics.get_events(EventType.ATTEMPT_COMPLETED)
        assert [(e.payload["method"], e.payload["accepted"]) for e in events] == [
            ("primary", False),
            ("secondary", True),
        ]
        assert events[0].payload["purity_score"] < 100.0
        assert events[1].payload["purity_score"] == 100.0
        metrics = gateway.get_metrics()
        assert metrics.attempts_by_method == {"primary": 1, "secondary": 1}
        assert metrics.rejected_attempts == 1

    @pytest.mark.asyncio
    async def test_fallback_disabled(self, failing_backend, arabic_request) -> None:
        """Test emergency content when fallback generation is off."""
        settings = PipelineSettings(
            monitoring_enabled=False, method_order=BACKEND_METHODS, fallback_enabled=False
        )
        gateway = TranslationGateway(
            settings, primary_backend=failing_backend, secondary_backend=failing_backend
        )

        result = await gateway.translate(arabic_request)

        assert result.method is TranslationMethod.EMERGENCY_GENERIC
        assert result.metadata.extra["failure_reason"] == "fallback disabled"
        assert result.translated_text == "Contenu juridique disponible en français"


@pytest.mark.integration
class TestNeverRaises:
    """Test the gateway answers every request."""

    @pytest.mark.asyncio
    async def test_empty_input(self, gateway: TranslationGateway, request_factory) -> None:
        """Test empty text gets pure fallback content."""
        result = await gateway.translate(request_factory(""))

        assert result.method.is_fallback
        assert result.is_pure
        assert "No translatable content after cleaning" in result.warnings

    @pytest.mark.asyncio
    async def test_oversized_input(self, request_factory) -> None:
        """Test long text is truncated with a warning."""
        gateway = TranslationGateway(
            PipelineSettings(monitoring_enabled=False, max_text_length=100)
        )

        result = await gateway.translate(request_factory("عقد " * 100))

        assert "Input truncated from 400 to 100 characters" in result.warnings
        assert result.is_pure

    @pytest.mark.asyncio
    async def test_timeout(self, slow_backend_class, arabic_request) -> None:
        """Test slow backends end in emergency content."""
        settings = PipelineSettings(
            monitoring_enabled=False, processing_timeout_ms=1000, method_order=BACKEND_METHODS
        )
        gateway = TranslationGateway(
            settings,
            primary_backend=slow_backend_class("Le tribunal décide", delay=5.0),
            secondary_backend=slow_backend_class("Le tribunal décide", delay=5.0),
        )

        result = await gateway.translate(arabic_request)

        assert result.method is TranslationMethod.EMERGENCY_GENERIC
        assert result.metadata.extra["failure_reason"] == "processing timeout"
        assert result.processing_time_ms < 5000

    @pytest.mark.asyncio
    async def test_system_error(
        self, crashing_backend, settings: PipelineSettings, arabic_request
    ) -> None:
        """Test a backend bug ends in emergency content."""
        gateway = TranslationGateway(settings, primary_backend=crashing_backend)

        result = await gateway.translate(arabic_request)

        assert result.method is TranslationMethod.EMERGENCY_GENERIC
        assert result.metadata.extra["failure_reason"] == "system error: RuntimeError"
        assert gateway.get_metrics().failure_rate == 100.0

    @pytest.mark.asyncio
    async def test_arabic_target(self, gateway: TranslationGateway, request_factory) -> None:
        """Test French to Arabic requests are answered in Arabic script."""
        request = request_factory(
            "Le contrat est nul.", source=Language.FRENCH, target=Language.ARABIC
        )

        result = await gateway.translate(request)

        assert result.is_pure
        assert not re.search(r"[A-Za-z]", result.translated_text)


@pytest.mark.integration
class TestCaching:
    """Test result caching."""

    @pytest.mark.asyncio
    async def test_repeat_request_hits_cache(
        self, fixed_backend_class, settings: PipelineSettings, request_factory
    ) -> None:
        """Test an identical request is served from the cache."""
        backend = fixed_backend_class("Le tribunal décide")
        gateway = TranslationGateway(settings, primary_backend=backend)

        first = await gateway.translate(request_factory("محكمة"))
        second = await gateway.translate(request_factory("محكمة"))

        assert not first.metadata.cache_hit
        assert second.metadata.cache_hit
        assert second.translated_text == first.translated_text
        assert second.metadata.request_id != first.metadata.request_id
        assert len(backend.calls) == 1
        assert second.method is TranslationMethod.CACHED
        assert second.metadata.extra["cached_method"] == "primary"
        assert second.metadata.methods_tried == (TranslationMethod.PRIMARY,)

    @pytest.mark.asyncio
    async def test_caching_disabled(self, fixed_backend_class, request_factory) -> None:
        """Test nothing is cached when caching is off."""
        backend = fixed_backend_class("Le tribunal décide")
        gateway = TranslationGateway(
            PipelineSettings(monitoring_enabled=False, caching_enabled=False),
            primary_backend=backend,
        )

        await gateway.translate(request_factory("محكمة"))
        second = await gateway.translate(request_factory("محكمة"))

        assert not second.metadata.cache_hit
        assert len(backend.calls) == 2

    @pytest.mark.asyncio
    async def test_emergency_not_cached(self, crashing_backend, settings, arabic_request) -> None:
        """Test emergency content is never cached."""
        gateway = TranslationGateway(settings, primary_backend=crashing_backend)

        await gateway.translate(arabic_request)

        assert len(gateway.cache) == 0

    @pytest.mark.asyncio
    async def test_warm_cache(
        self, fixed_backend_class, settings: PipelineSettings, request_factory
    ) -> None:
        """Test warmed requests are answered from the cache."""
        backend = fixed_backend_class("Le tribunal décide")
        gateway = TranslationGateway(settings, primary_backend=backend)
        requests = [request_factory("محكمة"), request_factory("قاضي")]

        assert await gateway.warm_cache(requests) == 2
        assert await gateway.warm_cache(requests) == 0
        result = await gateway.translate(request_factory("محكمة"))

        assert result.metadata.cache_hit
        assert len(backend.calls) == 2

    @pytest.mark.asyncio
    async def test_warm_cache_disabled(self, fixed_backend_class, request_factory) -> None:
        """Test warm-up does nothing when caching is off."""
        backend = fixed_backend_class("Le tribunal décide")
        gateway = TranslationGateway(
            PipelineSettings(monitoring_enabled=False, caching_enabled=False),
            primary_backend=backend,
        )

        assert await gateway.warm_cache([request_factory("محكمة")]) == 0
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_invalidate_cache(
        self, fixed_backend_class, settings: PipelineSettings, request_factory
    ) -> None:
        """Test cached results matching a pattern are translated again."""
        backend = fixed_backend_class("Le tribunal décide")
        gateway = TranslationGateway(settings, primary_backend=backend)
        await gateway.warm_cache([request_factory("محكمة"), request_factory("قاضي")])

        assert gateway.invalidate_cache("محكمة") == 1
        result = await gateway.translate(request_factory("محكمة"))

        assert not result.metadata.cache_hit
        assert len(backend.calls) == 3

    @pytest.mark.asyncio
    async def test_raised_quality_minimum_clears_cache(
        self, fixed_backend_class, settings: PipelineSettings, request_factory
    ) -> None:
        """Test raising the minimum drops entries that no longer qualify."""
        # Very short output loses contextual relevance
        backend = fixed_backend_class("Tribunal.")
        gateway = TranslationGateway(settings, primary_backend=backend)
        result = await gateway.translate(request_factory("محكمة"))
        assert result.metadata.extra["quality_score"] < 99.0
        assert len(gateway.cache) == 1

        gateway.update_settings(cache_min_quality=99.0)

        assert len(gateway.cache) == 0


@pytest.mark.integration
class TestBatchAndFeedback:
    """Test batches, user feedback and configuration updates."""

    @pytest.mark.asyncio
    async def test_batch_keeps_order(self, gateway: TranslationGateway, request_factory) -> None:
        """Test batch results follow the input order."""
        requests = [request_factory(text) for text in ("عقد", "محكمة", "", "قانون")]

        results = await gateway.translate_batch(requests)

        assert [r.metadata.request_id for r in results] == [r.request_id for r in requests]
        assert all(r.is_pure for r in results)

    @pytest.mark.asyncio
    async def test_report_issue(
        self, fixed_backend_class, settings: PipelineSettings, request_factory
    ) -> None:
        """Test a reported fragment becomes a cleaning rule and raises an alert."""
        gateway = TranslationGateway(
            settings, primary_backend=fixed_backend_class("Le tribunal décide")
        )
        await gateway.translate(request_factory("محكمة"))
        assert len(gateway.cache) == 1

        await gateway.report_issue(
            UserIssueReport(description="Saw junk", problematic_text="QXZJUNK")
        )
        await gateway.drain_feedback()

        complaints = [
            a for a in gateway.alerts.alerts if a.alert_type is AlertType.USER_COMPLAINT
        ]
        assert complaints[0].message == "Saw junk"
        assert "QXZJUNK" not in gateway.cleaner.clean("Le QXZJUNK tribunal").cleaned_text
        assert len(gateway.cache) == 0
        await gateway.shutdown()

    @pytest.mark.asyncio
    async def test_record_feedback(self, gateway: TranslationGateway, arabic_request) -> None:
        """Test satisfaction ratings reach the metrics."""
        result = await gateway.translate(arabic_request)

        gateway.record_feedback(result.metadata.request_id, 80.0)

        assert gateway.get_metrics().user_satisfaction == 80.0
        with pytest.raises(ValueError):
            gateway.record_feedback(result.metadata.request_id, 120.0)

    @pytest.mark.asyncio
    async def test_update_settings(
        self, fixed_backend_class, arabic_request, request_factory
    ) -> None:
        """Test new custom literals apply to later requests."""
        gateway = TranslationGateway(
            PipelineSettings(monitoring_enabled=False, method_order=BACKEND_METHODS),
            primary_backend=fixed_backend_class("Le tribunal MAGIQUE"),
            secondary_backend=fixed_backend_class("Le tribunal MAGIQUE"),
        )
        before = await gateway.translate(arabic_request)
        assert before.method is TranslationMethod.PRIMARY

        literals = (*gateway.settings.custom_literals, "MAGIQUE")
        gateway.update_settings(custom_literals=literals)
        after = await gateway.translate(request_factory(arabic_request.text))

        assert not after.metadata.cache_hit
        assert after.method.is_fallback
        assert "MAGIQUE" not in after.translated_text

    @pytest.mark.asyncio
    async def test_invalid_update_rejected(self, gateway: TranslationGateway) -> None:
        """Test invalid settings leave the gateway unchanged."""
        with pytest.raises(ConfigurationError):
            gateway.update_settings(max_retry_attempts=0)

        assert gateway.settings.max_retry_attempts == 3

    @pytest.mark.asyncio
    async def test_invalid_pattern_leaves_settings_untouched(
        self, gateway: TranslationGateway
    ) -> None:
        """Test a bad cleaning pattern rejects the whole update."""
        before = gateway.settings

        with pytest.raises(ConfigurationError) as exc_info:
            gateway.update_settings(custom_patterns=("([unclosed",), max_retry_attempts=1)

        assert any(e.startswith("custom_patterns:") for e in exc_info.value.errors)
        assert gateway.settings is before
        assert gateway.engine.settings is before
        assert gateway.validator.settings is before
        assert gateway.alerts.settings is before
        assert "([unclosed" not in gateway.settings.custom_patterns

    @pytest.mark.asyncio
    async def test_threshold_update_reaches_monitors(self, gateway: TranslationGateway) -> None:
        """Test reloaded thresholds drive alerts and per-result issues alike."""
        gateway.update_settings(
            quality_thresholds={"terminology_accuracy": {"min_value": 99.0}}
        )

        assert gateway.alerts.thresholds["terminology_accuracy"].min_value == 99.0
        assert gateway.quality.settings.threshold("terminology_accuracy").min_value == 99.0
        alerts = await gateway.alerts.check_thresholds({"terminology_accuracy": 98.0})
        assert [a.metric for a in alerts] == ["terminology_accuracy"]

    @pytest.mark.asyncio
    async def test_validate_quality(self, gateway: TranslationGateway) -> None:
        """Test probing an existing text."""
        report = gateway.validate_quality("Le tribunal Pro décide", Language.FRENCH)

        assert report.metrics.purity_score < 100.0
        assert not report.passed
        assert report.recommendations

    @pytest.mark.asyncio
    async def test_monitoring_lifecycle(self) -> None:
        """Test the context manager starts and stops monitoring."""
        settings = PipelineSettings(monitoring_interval_seconds=0.01)

        async with TranslationGateway(settings) as gateway:
            assert gateway.monitor.is_running

        assert not gateway.monitor.is_running
