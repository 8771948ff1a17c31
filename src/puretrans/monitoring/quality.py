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

"""Quality assessment of delivered translations.

Purity is a gate; quality is a measurement. Every delivered result is
scored on six weighted dimensions, checked against the configured
thresholds, and kept in a bounded history used for trend analysis.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from puretrans.core.models import (
    ContentType,
    Language,
    LegalDomain,
    PureTranslationResult,
    QualityIssue,
    QualityIssueType,
    QualityMetrics,
    QualityRecommendation,
    QualityReport,
    RecommendationType,
    Severity,
    TranslationRequest,
)
from puretrans.helpers.detection import validate_encoding
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

METRIC_WEIGHTS: dict[str, float] = {
    "purity_score": 0.40,
    "terminology_accuracy": 0.20,
    "contextual_relevance": 0.15,
    "readability_score": 0.10,
    "professionalism_score": 0.10,
    "encoding_integrity": 0.05,
}

MAX_HISTORY = 10000
PASSING_OVERALL_SCORE = 85.0
PROFESSIONALISM_THRESHOLD = 80.0

_INFORMAL_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (r"\b(?:ok|okay)\b", r"\b(?:yeah|yep)\b", r"\b(?:gonna|wanna)\b", r"!!", r"\?\?")
)
_SENTENCE_END_RE = re.compile(r"[.!?؟]+")
_ARABIC_PUNCTUATION_RE = re.compile(r"[،؛؟]")

_RECOMMENDATIONS: dict[QualityIssueType, tuple[RecommendationType, str]] = {
    QualityIssueType.LANGUAGE_MIXING: (
        RecommendationType.CONTENT_CLEANING,
        "Strengthen cleaning of foreign fragments",
    ),
    QualityIssueType.UI_CONTAMINATION: (
        RecommendationType.CONTENT_CLEANING,
        "Add cleaning rules for the reported interface artifacts",
    ),
    QualityIssueType.POOR_TERMINOLOGY: (
        RecommendationType.TERMINOLOGY_UPDATE,
        "Review legal terminology renderings",
    ),
    QualityIssueType.ENCODING_ERROR: (
        RecommendationType.ENCODING_FIX,
        "Repair character encoding before translation",
    ),
    QualityIssueType.CORRUPTED_CHARACTERS: (
        RecommendationType.ENCODING_FIX,
        "Repair corrupted characters",
    ),
    QualityIssueType.CONTEXT_LOSS: (
        RecommendationType.CONTEXT_ENHANCEMENT,
        "Provide the legal domain and document type with requests",
    ),
    QualityIssueType.READABILITY: (
        RecommendationType.CONTEXT_ENHANCEMENT,
        "Shorten sentences and use a formal register",
    ),
}


class TrendDirection(str, Enum):
    """Direction of a metric between two windows."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass
class QualityTrend:
    """Comparison of a metric's recent mean against the preceding window."""

    metric: str
    direction: TrendDirection
    recent_mean: float
    previous_mean: float

    @property
    def change(self) -> float:
        """Absolute change between the windows."""
        return round(self.recent_mean - self.previous_mean, 2)

    @property
    def change_percent(self) -> float:
        """Relative change, in percent of the previous mean."""
        if self.previous_mean == 0:
            return 0.0
        return round(100.0 * self.change / self.previous_mean, 2)


def weighted_overall(metrics: QualityMetrics) -> float:
    """Weighted overall quality score (all-100 metrics give exactly 100.0)."""
    total = sum(weight * getattr(metrics, name) for name, weight in METRIC_WEIGHTS.items())
    return round(min(100.0, total), 2)


def readability_score(text: str, language: Language) -> float:
    """Score sentence length and punctuation (0-100)."""
    score = 100.0
    sentences = [s for s in _SENTENCE_END_RE.split(text) if s.strip()]
    if sentences:
        words_per_sentence = sum(len(s.split()) for s in sentences) / len(sentences)
        if words_per_sentence > 25:
            score -= 20
        elif words_per_sentence > 20:
            score -= 10
    if len(text) > 50 and not _SENTENCE_END_RE.search(text):
        score -= 15
    if (
        language is Language.ARABIC
        and len(text) > 100
        and not _ARABIC_PUNCTUATION_RE.search(text)
    ):
        score -= 10
    return max(0.0, score)


class QualityMonitor:
    """Scores delivered translations and tracks quality over time.

    Example:
        >>> monitor = QualityMonitor()
        >>> report = monitor.assess(request, result)
        >>> report.overall_score
        100.0
    """

    def __init__(
        self,
        terminology: LegalTerminologyManager | None = None,
        settings: PipelineSettings | None = None,
        max_history: int = MAX_HISTORY,
    ) -> None:
        """Initialize monitor.

        Args:
            terminology: Terminology manager for accuracy checks
            settings: Source of the quality thresholds
            max_history: Number of reports kept (oldest evicted)
        """
        self.settings = settings or get_settings()
        self.terminology = terminology or LegalTerminologyManager(settings=self.settings)
        self.history: deque[QualityReport] = deque(maxlen=max_history)
        self.user_feedback: dict[str, float] = {}

    def assess(self, request: TranslationRequest, result: PureTranslationResult) -> QualityReport:
        """Assess a delivered result and record it in the history.

        Args:
            request: Original request
            result: Delivered result

        Returns:
            QualityReport with metrics, issues and recommendations
        """
        return self.measure(
            request, result.translated_text, result.purity_score, result.processing_time_ms
        )

    def measure(
        self,
        request: TranslationRequest,
        text: str,
        purity_score: float,
        processing_time_ms: float = 0.0,
    ) -> QualityReport:
        """Assess a translated text before it is packaged as a result.

        Recorded in the history like :meth:`assess`.
        """
        domain = request.context.legal_domain if request.context else None
        report = self._evaluate(
            request_id=request.request_id,
            text=text,
            language=request.target_language,
            purity_score=purity_score,
            source_text=request.text,
            source_language=request.source_language,
            domain=domain,
            content_type=request.content_type,
            processing_time_ms=processing_time_ms,
        )
        self.history.append(report)
        logger.debug(
            "Quality %.2f for %s (%d issues)",
            report.overall_score,
            request.request_id,
            len(report.issues),
        )
        return report

    def assess_text(
        self,
        text: str,
        language: Language,
        purity_score: float,
        content_type: ContentType = ContentType.LEGAL_DOCUMENT,
        request_id: str = "adhoc",
    ) -> QualityReport:
        """Assess a text without a translation request. Not recorded in history."""
        return self._evaluate(
            request_id=request_id,
            text=text,
            language=language,
            purity_score=purity_score,
            content_type=content_type,
        )

    def _evaluate(
        self,
        request_id: str,
        text: str,
        language: Language,
        purity_score: float,
        source_text: str | None = None,
        source_language: Language | None = None,
        domain: LegalDomain | None = None,
        content_type: ContentType = ContentType.LEGAL_DOCUMENT,
        processing_time_ms: float = 0.0,
    ) -> QualityReport:
        target_terms = self.terminology.extract_terms(text, language)
        encoding_issues = validate_encoding(text)

        metrics = QualityMetrics(
            purity_score=purity_score,
            terminology_accuracy=self._terminology_accuracy(
                source_text, source_language, {m.entry.french for m in target_terms}
            ),
            contextual_relevance=self._contextual_relevance(text, language, domain),
            readability_score=readability_score(text, language),
            professionalism_score=self._professionalism(
                text, content_type, has_legal_terms=bool(target_terms)
            ),
            encoding_integrity=max(0.0, 100.0 - 10.0 * len(encoding_issues)),
            user_satisfaction=self.user_feedback.get(request_id),
        )
        overall = weighted_overall(metrics)
        issues = self._issues(metrics, processing_time_ms)

        return QualityReport(
            request_id=request_id,
            overall_score=overall,
            metrics=metrics,
            issues=tuple(issues),
            recommendations=tuple(self._recommendations(issues)),
            passed=purity_score == 100.0 and overall >= PASSING_OVERALL_SCORE,
        )

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _terminology_accuracy(
        self,
        source_text: str | None,
        source_language: Language | None,
        rendered: set[str],
    ) -> float:
        if not source_text or source_language is None:
            return 100.0
        expected = {
            m.entry.french for m in self.terminology.extract_terms(source_text, source_language)
        }
        if not expected:
            return 100.0
        return round(100.0 * len(expected & rendered) / len(expected), 2)

    def _contextual_relevance(
        self, text: str, language: Language, domain: LegalDomain | None
    ) -> float:
        score = 100.0
        if domain is not None and not self.terminology.extract_terms(text, language, domain):
            score -= 20
        if len(text.strip()) <= 10:
            score -= 15
        return score

    @staticmethod
    def _professionalism(text: str, content_type: ContentType, has_legal_terms: bool) -> float:
        score = 100.0
        for pattern in _INFORMAL_PATTERNS:
            if pattern.search(text):
                score -= 10
        if content_type.is_legal and len(text) > 50 and not has_legal_terms:
            score -= 15
        return max(0.0, score)

    # ------------------------------------------------------------------
    # Issues and recommendations
    # ------------------------------------------------------------------

    def _issues(self, metrics: QualityMetrics, processing_time_ms: float) -> list[QualityIssue]:
        terminology = self.settings.threshold("terminology_accuracy")
        relevance = self.settings.threshold("contextual_relevance")
        readability = self.settings.threshold("readability_score")
        processing = self.settings.threshold("processing_time")
        issues: list[QualityIssue] = []

        if metrics.purity_score < 100.0:
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.LANGUAGE_MIXING,
                    severity=Severity.CRITICAL,
                    description=f"Purity score {metrics.purity_score:.2f} is below 100",
                    suggested_fix="Remove foreign fragments",
                )
            )
        if terminology and terminology.is_breached(metrics.terminology_accuracy):
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.POOR_TERMINOLOGY,
                    severity=Severity.HIGH,
                    description=(
                        f"Terminology accuracy {metrics.terminology_accuracy:.2f} "
                        "is below threshold"
                    ),
                    suggested_fix="Use canonical legal terms",
                )
            )
        if relevance and relevance.is_breached(metrics.contextual_relevance):
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.CONTEXT_LOSS,
                    severity=Severity.MEDIUM,
                    description=(
                        f"Contextual relevance {metrics.contextual_relevance:.2f} "
                        "is below threshold"
                    ),
                )
            )
        if readability and readability.is_breached(metrics.readability_score):
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.READABILITY,
                    severity=Severity.LOW,
                    description=f"Readability {metrics.readability_score:.2f} is below threshold",
                )
            )
        if metrics.professionalism_score < PROFESSIONALISM_THRESHOLD:
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.READABILITY,
                    severity=Severity.MEDIUM,
                    description="Informal register in legal content",
                )
            )
        if metrics.encoding_integrity < 100.0:
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.ENCODING_ERROR,
                    severity=Severity.HIGH,
                    description="Encoding problems in delivered text",
                )
            )
        if processing and processing.is_breached(processing_time_ms):
            issues.append(
                QualityIssue(
                    issue_type=QualityIssueType.PROCESSING_TIME,
                    severity=Severity.MEDIUM,
                    description=(
                        f"Processing took {processing_time_ms:.0f}ms "
                        f"(limit {processing.bound:.0f}ms)"
                    ),
                )
            )
        return issues

    @staticmethod
    def _recommendations(issues: list[QualityIssue]) -> list[QualityRecommendation]:
        grouped: dict[RecommendationType, list[QualityIssue]] = {}
        for issue in issues:
            if issue.issue_type in _RECOMMENDATIONS:
                kind = _RECOMMENDATIONS[issue.issue_type][0]
                grouped.setdefault(kind, []).append(issue)

        severity_order = list(Severity)
        return [
            QualityRecommendation(
                recommendation_type=kind,
                priority=max((i.severity for i in found), key=severity_order.index),
                description=_RECOMMENDATIONS[found[0].issue_type][1],
                issue_types=tuple(dict.fromkeys(i.issue_type.value for i in found)),
            )
            for kind, found in grouped.items()
        ]

    # ------------------------------------------------------------------
    # History and trends
    # ------------------------------------------------------------------

    def get_trends(self, window: int = 50, margin: float = 2.0) -> dict[str, QualityTrend]:
        """Compare the last ``window`` reports with the ``window`` before them.

        Args:
            window: Number of reports per window
            margin: Mean difference below which a metric is stable

        Returns:
            Trend per metric plus ``overall_score``
        """
        reports = list(self.history)
        recent = reports[-window:]
        previous = reports[-2 * window : -window] if len(reports) > window else []

        trends: dict[str, QualityTrend] = {}
        for name in [*METRIC_WEIGHTS, "overall_score"]:
            recent_mean = self._mean_of(recent, name)
            previous_mean = self._mean_of(previous, name) if previous else recent_mean
            delta = recent_mean - previous_mean
            if delta > margin:
                direction = TrendDirection.IMPROVING
            elif delta < -margin:
                direction = TrendDirection.DECLINING
            else:
                direction = TrendDirection.STABLE
            trends[name] = QualityTrend(
                name, direction, round(recent_mean, 2), round(previous_mean, 2)
            )
        return trends

    @staticmethod
    def _mean_of(reports: list[QualityReport], name: str) -> float:
        if not reports:
            return 0.0
        if name == "overall_score":
            values = [r.overall_score for r in reports]
        else:
            values = [getattr(r.metrics, name) for r in reports]
        return sum(values) / len(values)

    def get_history(self, limit: int = 100) -> list[QualityReport]:
        """Most recent reports, oldest first."""
        reports = list(self.history)
        return reports[-limit:] if limit > 0 else []

    def get_average_score(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> float:
        """Mean overall score of the reports in a time range (0.0 when none)."""
        scores = [
            r.overall_score
            for r in list(self.history)
            if (start is None or r.timestamp >= start) and (end is None or r.timestamp <= end)
        ]
        return round(sum(scores) / len(scores), 2) if scores else 0.0

    def record_user_feedback(self, request_id: str, score: float) -> None:
        """Record a user satisfaction score (0-100) for a delivered result.

        Raises:
            ValueError: If the score is outside 0-100
        """
        if not 0.0 <= score <= 100.0:
            raise ValueError(f"Satisfaction score must be within 0-100, got {score}")
        self.user_feedback[request_id] = score
        logger.info("Recorded user satisfaction %.1f for %s", score, request_id)
