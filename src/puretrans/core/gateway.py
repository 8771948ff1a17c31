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

"""Translation gateway.

Single entry point of the pipeline. A request is cleaned once, then
each configured method is tried and validated in turn; the first pure
candidate is accepted. When every method fails the gate, fallback
content is generated and validated; when that fails too, or the request
runs out of time, emergency content is returned. The gateway never
raises to its caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any

from puretrans.cleaning.cleaner import ContentCleaner
from puretrans.core.cache import TranslationCache, make_cache_key
from puretrans.core.models import (
    Language,
    PurityValidationResult,
    PureTranslationResult,
    QualityReport,
    ResultMetadata,
    TranslationAttempt,
    TranslationMethod,
    TranslationRequest,
    UserIssueReport,
    utc_now,
)
from puretrans.engine.engine import TranslationEngine
from puretrans.engine.fallback import FallbackContent, FallbackGenerator
from puretrans.monitoring.alerts import AlertManager, AlertType
from puretrans.monitoring.events import EventType, TranslationEvent
from puretrans.monitoring.metrics import MetricsCollector, SystemHealth, TranslationMetrics
from puretrans.monitoring.quality import QualityMonitor
from puretrans.monitoring.realtime import RealTimeQualityMonitor
from puretrans.mt.base import BaseTranslationBackend
from puretrans.purity.validator import PurityValidator
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Stage of a request inside the pipeline."""

    CLEANING = "cleaning"
    TRYING = "trying"
    VALIDATING = "validating"
    NEXT_METHOD = "next_method"
    FALLBACK = "fallback"
    ACCEPT = "accept"


class TranslationGateway:
    """Zero-tolerance translation pipeline.

    Example:
        >>> async with TranslationGateway() as gateway:
        ...     result = await gateway.translate(
        ...         TranslationRequest(
        ...             text="عقد",
        ...             source_language=Language.ARABIC,
        ...             target_language=Language.FRENCH,
        ...         )
        ...     )
        >>> result.purity_score
        100.0
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        *,
        primary_backend: BaseTranslationBackend | None = None,
        secondary_backend: BaseTranslationBackend | None = None,
        terminology: LegalTerminologyManager | None = None,
        cleaner: ContentCleaner | None = None,
        cache: TranslationCache | None = None,
        metrics: MetricsCollector | None = None,
        alerts: AlertManager | None = None,
    ) -> None:
        """Initialize gateway.

        Args:
            settings: Immutable pipeline settings (process defaults when omitted)
            primary_backend: Backend for the primary method
            secondary_backend: Backend for the secondary method
            terminology: Shared terminology manager
            cleaner: Content cleaner
            cache: Result cache
            metrics: Telemetry collector
            alerts: Alert manager
        """
        self.settings = settings or get_settings()
        self.terminology = terminology or LegalTerminologyManager(settings=self.settings)
        self.cleaner = cleaner or ContentCleaner(self.settings)
        self.engine = TranslationEngine(
            primary_backend=primary_backend,
            secondary_backend=secondary_backend,
            terminology=self.terminology,
            settings=self.settings,
        )
        self.validator = PurityValidator(self.cleaner, self.terminology, self.settings)
        self.fallback = FallbackGenerator(self.terminology)
        self.cache = cache or TranslationCache(
            max_entries=self.settings.cache_max_entries,
            ttl_seconds=self.settings.cache_ttl_seconds,
            min_quality=self.settings.cache_min_quality,
        )
        self.metrics = metrics or MetricsCollector(self.settings)
        self.alerts = alerts or AlertManager(self.settings)
        self.quality = QualityMonitor(self.terminology, self.settings)
        self.monitor = RealTimeQualityMonitor(
            self.metrics, self.quality, self.alerts, self.settings
        )

        self._semaphore = asyncio.Semaphore(self.settings.concurrent_request_limit)
        self._feedback: asyncio.Queue[UserIssueReport] = asyncio.Queue()
        self._feedback_task: asyncio.Task[None] | None = None

        logger.info(
            "Translation gateway ready (methods: %s, concurrency: %d)",
            ", ".join(m.value for m in self.engine.methods_for()),
            self.settings.concurrent_request_limit,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TranslationGateway:
        await self.start_monitoring()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    async def start_monitoring(self) -> None:
        """Start the monitoring loop (when enabled) and the feedback worker."""
        if self.settings.monitoring_enabled:
            await self.monitor.start()
        self._ensure_feedback_worker()

    async def shutdown(self) -> None:
        """Drain queued feedback and stop background tasks."""
        if self._feedback_task is not None and not self._feedback_task.done():
            await self._feedback.join()
            self._feedback_task.cancel()
            try:
                await self._feedback_task
            except asyncio.CancelledError:
                logger.debug("Feedback worker stopped")
        self._feedback_task = None
        await self.monitor.stop()
        logger.info("Translation gateway shut down")

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    async def translate(self, request: TranslationRequest) -> PureTranslationResult:
        """Translate a request under the zero-tolerance policy.

        Never raises: timeouts produce emergency content, system errors
        produce a cached result when one exists and emergency content
        otherwise.

        Args:
            request: Translation request

        Returns:
            Result whose purity score is 100, or emergency content
        """
        started = time.perf_counter()
        try:
            return await asyncio.wait_for(
                self._run_limited(request, started),
                timeout=self.settings.processing_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Request %s exceeded %dms, returning emergency content",
                request.request_id,
                self.settings.processing_timeout_ms,
            )
            return self._emergency_result(request, started, "processing timeout", [])
        except Exception as e:
            logger.exception("System error while translating %s", request.request_id)
            return self._degraded_result(request, started, f"system error: {type(e).__name__}")

    async def translate_batch(
        self, requests: Iterable[TranslationRequest]
    ) -> list[PureTranslationResult]:
        """Translate requests concurrently; results keep the input order."""
        return list(await asyncio.gather(*(self.translate(r) for r in requests)))

    async def warm_cache(self, requests: Iterable[TranslationRequest]) -> int:
        """Translate frequently requested texts ahead of time.

        Requests already cached are skipped. Results go through the full
        pipeline, so only pure results of sufficient quality are stored.

        Args:
            requests: Requests to translate and cache

        Returns:
            Number of requests newly cached
        """
        if not self.settings.caching_enabled:
            logger.info("Caching disabled, cache warm-up skipped")
            return 0
        pending = [r for r in requests if self._cache_key(r) not in self.cache]
        await self.translate_batch(pending)
        warmed = sum(1 for r in pending if self._cache_key(r) in self.cache)
        logger.info("Cache warm-up stored %d of %d requests", warmed, len(pending))
        return warmed

    def invalidate_cache(self, pattern: str) -> int:
        """Drop cached results whose source or translated text matches a regex.

        Raises:
            re.error: If the pattern does not compile
        """
        return self.cache.invalidate_matching(pattern)

    async def _run_limited(
        self, request: TranslationRequest, started: float
    ) -> PureTranslationResult:
        async with self._semaphore:
            return await self._process(request, started)

    async def _process(self, request: TranslationRequest, started: float) -> PureTranslationResult:
        self._emit(EventType.TRANSLATION_STARTED, request.request_id)
        key = self._cache_key(request)

        if self.settings.caching_enabled:
            cached = self.cache.get(key)
            if cached is not None:
                self._emit(EventType.CACHE_HIT, request.request_id)
                return self._from_cache(request, cached, started)
            self._emit(EventType.CACHE_MISS, request.request_id)

        steps: dict[str, float] = {}
        warnings: list[str] = []
        text = request.text
        if len(text) > self.settings.max_text_length:
            warnings.append(
                f"Input truncated from {len(text)} to {self.settings.max_text_length} characters"
            )
            text = text[: self.settings.max_text_length]

        state = PipelineState.CLEANING
        step = time.perf_counter()
        cleaned = self.cleaner.clean(text, request.source_language)
        steps["cleaning"] = _elapsed_ms(step)
        if cleaned.had_problems:
            warnings.append(f"Removed {len(cleaned.removed_elements)} contaminating elements")

        domain = request.context.legal_domain if request.context else None
        attempts: list[TranslationAttempt] = []
        accepted: TranslationAttempt | None = None

        if cleaned.cleaned_text.strip():
            for method in self.engine.methods_for():
                state = PipelineState.TRYING
                step = time.perf_counter()
                attempt = await self.engine.attempt(cleaned, request, method)
                if attempt.succeeded:
                    state = PipelineState.VALIDATING
                    validation = self.validator.validate(
                        attempt.text, request.target_language, domain
                    )
                    attempt = attempt.model_copy(update={"validation": validation})
                steps[f"attempt_{method.value}"] = _elapsed_ms(step)
                attempts.append(attempt)
                warnings.extend(f"{method.value}: {error}" for error in attempt.errors)
                self._emit(
                    EventType.ATTEMPT_COMPLETED,
                    request.request_id,
                    method=method.value,
                    succeeded=attempt.succeeded,
                    accepted=attempt.accepted,
                    errors=list(attempt.errors),
                    duration_ms=steps[f"attempt_{method.value}"],
                    purity_score=(
                        attempt.validation.score.overall if attempt.validation else None
                    ),
                )

                if attempt.accepted:
                    state = PipelineState.ACCEPT
                    accepted = attempt
                    break
                state = PipelineState.NEXT_METHOD
                if attempt.validation is not None:
                    self._emit(
                        EventType.PURITY_VIOLATION,
                        request.request_id,
                        method=method.value,
                        violation_types=sorted(
                            {v.violation_type.value for v in attempt.validation.violations}
                        ),
                    )
                logger.debug(
                    "Request %s: %s rejected (%s)", request.request_id, method.value, state.value
                )
        else:
            warnings.append("No translatable content after cleaning")

        if accepted is None:
            if not self.settings.fallback_enabled:
                return self._emergency_result(request, started, "fallback disabled", attempts)
            state = PipelineState.FALLBACK
            step = time.perf_counter()
            content = self.fallback.generate(request, reason="no pure translation")
            validation = self.validator.validate(content.content, request.target_language, domain)
            steps["fallback"] = _elapsed_ms(step)
            self._emit(
                EventType.FALLBACK_TRIGGERED,
                request.request_id,
                method=content.method.value,
                reason="no pure translation",
            )
            if not validation.is_pure:
                logger.error(
                    "Fallback content for %s failed validation (%.2f)",
                    request.request_id,
                    validation.score.overall,
                )
                return self._emergency_result(
                    request, started, "fallback failed validation", attempts
                )
            warnings.append("Translation replaced by generated content")
            accepted = TranslationAttempt(
                text=content.content,
                method=content.method,
                confidence=content.confidence,
                validation=validation,
            )
            logger.warning(
                "Request %s answered with %s content", request.request_id, content.method.value
            )

        result = self._finish(
            request,
            accepted,
            started,
            steps=steps,
            warnings=warnings,
            attempts=attempts,
            fallback_used=accepted.method.is_fallback,
            extra={"removed_elements": len(cleaned.removed_elements)},
        )
        if self.settings.caching_enabled:
            self.cache.put(key, result, request.text)
        return result

    # ------------------------------------------------------------------
    # Result assembly
    # ------------------------------------------------------------------

    def _cache_key(self, request: TranslationRequest) -> str:
        return make_cache_key(
            request.text, request.source_language, request.target_language, request.content_type
        )

    def _finish(
        self,
        request: TranslationRequest,
        accepted: TranslationAttempt,
        started: float,
        *,
        steps: dict[str, float],
        warnings: list[str],
        attempts: list[TranslationAttempt],
        fallback_used: bool,
        extra: dict[str, Any] | None = None,
    ) -> PureTranslationResult:
        validation = accepted.validation
        purity = validation.score.overall if validation is not None else 0.0

        step = time.perf_counter()
        processing_ms = _elapsed_ms(started)
        report = self.quality.measure(request, accepted.text, purity, processing_ms)
        steps["quality"] = _elapsed_ms(step)

        result = PureTranslationResult(
            translated_text=accepted.text,
            purity_score=purity,
            quality_metrics=report.metrics,
            method=accepted.method,
            confidence=accepted.confidence,
            processing_time_ms=_elapsed_ms(started),
            warnings=tuple(warnings),
            metadata=ResultMetadata(
                request_id=request.request_id,
                step_durations_ms=steps,
                fallback_used=fallback_used,
                attempts=len(attempts),
                methods_tried=tuple(a.method for a in attempts),
                extra={"quality_score": report.overall_score, **(extra or {})},
            ),
        )
        self._emit(
            EventType.TRANSLATION_COMPLETED,
            request.request_id,
            purity_score=purity,
            processing_time_ms=result.processing_time_ms,
            quality_score=report.overall_score,
            method=accepted.method.value,
            pure=result.is_pure,
        )
        return result

    def _from_cache(
        self, request: TranslationRequest, cached: PureTranslationResult, started: float
    ) -> PureTranslationResult:
        processing_ms = _elapsed_ms(started)
        metadata = cached.metadata.model_copy(
            update={
                "request_id": request.request_id,
                "timestamp": utc_now(),
                "cache_hit": True,
                "extra": {**cached.metadata.extra, "cached_method": cached.method.value},
            }
        )
        result = cached.model_copy(
            update={
                "metadata": metadata,
                "processing_time_ms": processing_ms,
                "method": TranslationMethod.CACHED,
            }
        )
        self._emit(
            EventType.TRANSLATION_COMPLETED,
            request.request_id,
            purity_score=result.purity_score,
            processing_time_ms=processing_ms,
            quality_score=cached.metadata.extra.get("quality_score"),
            method=TranslationMethod.CACHED.value,
            pure=result.is_pure,
        )
        return result

    def _degraded_result(
        self, request: TranslationRequest, started: float, reason: str
    ) -> PureTranslationResult:
        if self.settings.caching_enabled:
            cached = self.cache.get(self._cache_key(request))
            if cached is not None:
                logger.warning("Serving cached result for %s after %s", request.request_id, reason)
                return self._from_cache(request, cached, started)
        return self._emergency_result(request, started, reason, [])

    def _emergency_result(
        self,
        request: TranslationRequest,
        started: float,
        reason: str,
        attempts: list[TranslationAttempt],
    ) -> PureTranslationResult:
        content: FallbackContent = self.fallback.emergency(request.target_language, reason)
        validation: PurityValidationResult = self.validator.validate(
            content.content, request.target_language
        )
        self._emit(EventType.FALLBACK_TRIGGERED, request.request_id, method=content.method.value)
        self._emit(EventType.TRANSLATION_FAILED, request.request_id, reason=reason)
        return self._finish(
            request,
            TranslationAttempt(
                text=content.content,
                method=content.method,
                confidence=content.confidence,
                validation=validation,
            ),
            started,
            steps={},
            warnings=["Translation unavailable, generic content returned"],
            attempts=attempts,
            fallback_used=True,
            extra={"failure_reason": reason},
        )

    def _emit(self, event_type: EventType, request_id: str, **payload: Any) -> None:
        self.metrics.record(
            TranslationEvent(event_type=event_type, request_id=request_id, payload=payload)
        )

    # ------------------------------------------------------------------
    # Quality checks and feedback
    # ------------------------------------------------------------------

    def validate_quality(self, text: str, language: Language) -> QualityReport:
        """Check the purity and quality of a text without translating it."""
        validation = self.validator.validate(text, language)
        report = self.quality.assess_text(text, language, validation.score.overall)
        return report.model_copy(
            update={"recommendations": validation.recommendations + report.recommendations}
        )

    async def report_issue(self, issue: UserIssueReport) -> None:
        """Queue a user-reported problem for the feedback worker."""
        self._ensure_feedback_worker()
        await self._feedback.put(issue)
        logger.info("Queued user issue for %s", issue.request_id or "unknown request")

    def record_feedback(self, request_id: str, rating: float) -> None:
        """Record a user satisfaction rating (0-100) for a delivered result.

        Raises:
            ValueError: If the rating is outside 0-100
        """
        self.quality.record_user_feedback(request_id, rating)
        self._emit(EventType.USER_FEEDBACK_RECEIVED, request_id, rating=rating)

    def _ensure_feedback_worker(self) -> None:
        if self._feedback_task is None or self._feedback_task.done():
            self._feedback_task = asyncio.create_task(
                self._feedback_worker(), name="puretrans-feedback"
            )

    async def _feedback_worker(self) -> None:
        while True:
            issue = await self._feedback.get()
            try:
                await self._handle_issue(issue)
            except Exception as e:
                logger.error("Failed to process user issue: %s", e)
            finally:
                self._feedback.task_done()

    async def _handle_issue(self, issue: UserIssueReport) -> None:
        await self.alerts.create_alert(
            AlertType.USER_COMPLAINT,
            issue.severity,
            issue.description,
            data={
                "request_id": issue.request_id,
                "user_id": issue.user_id,
                "problematic_text": issue.problematic_text,
            },
        )
        if issue.problematic_text:
            added = self.cleaner.add_patterns_from_feedback([issue.problematic_text])
            if added:
                # Cached results were validated without the new rules
                self.cache.clear()

    async def drain_feedback(self) -> None:
        """Wait until every queued user issue has been processed."""
        if self._feedback_task is not None:
            await self._feedback.join()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_system_health(self) -> SystemHealth:
        """Current health verdict."""
        return self.metrics.get_system_health()

    def get_metrics(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> TranslationMetrics:
        """Aggregated metrics over a window (default: the last 24 hours)."""
        return self.metrics.get_metrics(start, end)

    def update_settings(self, **changes: Any) -> PipelineSettings:
        """Validate and apply new settings to every component.

        Args:
            **changes: Settings fields to change

        Returns:
            The new settings

        Raises:
            ConfigurationError: If any value is invalid; nothing is applied
        """
        new = self.settings.with_updates(**changes)
        old = self.settings
        # Nothing is swapped until the cleaner rules build
        self.cleaner.reconfigure(new)
        self.settings = new

        self.alerts.reconfigure(new)
        self.terminology.set_confidence_threshold(new.terminology_confidence_threshold)
        for component in (self.engine, self.validator, self.quality, self.metrics, self.monitor):
            component.settings = new
        self.monitor.interval = new.monitoring_interval_seconds
        self.cache.max_entries = new.cache_max_entries
        self.cache.ttl_seconds = new.cache_ttl_seconds
        self.cache.min_quality = new.cache_min_quality
        if new.cache_min_quality > old.cache_min_quality:
            self.cache.cleanup_low_quality()
        if new.concurrent_request_limit != old.concurrent_request_limit:
            self._semaphore = asyncio.Semaphore(new.concurrent_request_limit)
        if new.custom_literals != old.custom_literals or new.custom_patterns != old.custom_patterns:
            self.cache.clear()
        return new


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000
