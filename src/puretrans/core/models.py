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

"""Core data models for the zero-tolerance translation pipeline.

This module defines the data structures that flow through the pipeline:
- Languages, content types, and translation methods
- Translation requests and cleaned content
- Translation attempts and purity scores
- Quality metrics, issues, and final results
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Language(str, Enum):
    """Languages supported by the pipeline."""

    FRENCH = "fr"
    ARABIC = "ar"

    @property
    def other(self) -> Language:
        """Return the other language of the pair."""
        return Language.ARABIC if self is Language.FRENCH else Language.FRENCH


class ContentType(str, Enum):
    """Category of the submitted content."""

    LEGAL_DOCUMENT = "legal_document"
    LEGAL_FORM = "legal_form"
    CHAT_MESSAGE = "chat_message"
    UI_TEXT = "ui_text"
    NOTIFICATION = "notification"
    GENERAL = "general"

    @property
    def is_legal(self) -> bool:
        """Whether the content is expected to carry legal terminology."""
        return self.value.startswith("legal")


class Priority(str, Enum):
    """Request priority."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class LegalDomain(str, Enum):
    """Areas of Algerian law covered by the terminology dictionaries."""

    CIVIL = "civil"
    CRIMINAL = "criminal"
    COMMERCIAL = "commercial"
    ADMINISTRATIVE = "administrative"
    FAMILY = "family"
    PROCEDURAL = "procedural"
    GENERAL = "general"


class TranslationMethod(str, Enum):
    """Strategy that produced a translation candidate."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    RULE_BASED = "rule_based"
    HYBRID = "hybrid"
    FALLBACK_GENERATED = "fallback_generated"
    CACHED = "cached"
    DICTIONARY = "dictionary"
    TEMPLATE = "template"
    EMERGENCY_GENERIC = "emergency_generic"

    @property
    def is_fallback(self) -> bool:
        """Whether the method synthesizes content instead of translating."""
        return self in _FALLBACK_METHODS


_FALLBACK_METHODS = frozenset(
    {
        TranslationMethod.FALLBACK_GENERATED,
        TranslationMethod.DICTIONARY,
        TranslationMethod.TEMPLATE,
        TranslationMethod.EMERGENCY_GENERIC,
    }
)


class Severity(str, Enum):
    """Severity shared by purity violations, quality issues, and alerts."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PatternType(str, Enum):
    """Kind of element removed by the content cleaner."""

    ENCODING = "encoding"
    UI_ARTIFACT = "ui_artifact"
    VERSION_NUMBER = "version_number"
    CUSTOM = "custom"
    FOREIGN_SCRIPT = "foreign_script"
    FOREIGN_FRAGMENT = "foreign_fragment"


class TranslationContext(BaseModel):
    """Optional context attached to a request."""

    model_config = ConfigDict(frozen=True)

    legal_domain: LegalDomain | None = Field(default=None, description="Area of law")
    document_type: str | None = Field(default=None, description="Kind of source document")
    previous_translations: tuple[str, ...] = Field(
        default=(), description="Earlier translations from the same conversation"
    )


class TranslationRequest(BaseModel):
    """A text submitted for translation. Immutable once created."""

    text: str = Field(..., description="Text to translate (may be empty)")
    source_language: Language = Field(..., description="Language of the submitted text")
    target_language: Language = Field(..., description="Requested output language")
    content_type: ContentType = Field(default=ContentType.LEGAL_DOCUMENT)
    priority: Priority = Field(default=Priority.NORMAL)
    context: TranslationContext | None = Field(default=None)
    user_id: str | None = Field(default=None)
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:16]}")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "text": "وفقا للقانون المدني",
                "source_language": "ar",
                "target_language": "fr",
                "content_type": "legal_document",
                "priority": "normal",
            }
        },
    )


class RemovedElement(BaseModel):
    """An element stripped by the cleaner, kept for auditing."""

    model_config = ConfigDict(frozen=True)

    element_type: PatternType
    content: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    reason: str


class CleaningAction(BaseModel):
    """A single step applied by the cleaner."""

    model_config = ConfigDict(frozen=True)

    action: str = Field(..., description="remove, normalize, or collapse")
    rule: str = Field(..., description="Name of the rule that fired")
    start: int = Field(default=0, ge=0)
    end: int = Field(default=0, ge=0)
    reason: str = ""


class CleanedContent(BaseModel):
    """Result of cleaning a text. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    original_text: str
    cleaned_text: str
    removed_elements: tuple[RemovedElement, ...] = ()
    actions: tuple[CleaningAction, ...] = ()
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    processing_time_ms: float = Field(default=0.0, ge=0.0)

    @property
    def had_problems(self) -> bool:
        """Whether anything was removed."""
        return bool(self.removed_elements)


class PurityScore(BaseModel):
    """Purity of a candidate text across five dimensions (0-100 each)."""

    model_config = ConfigDict(frozen=True)

    overall: float = Field(..., ge=0.0, le=100.0)
    script_purity: float = Field(..., ge=0.0, le=100.0)
    terminology_consistency: float = Field(..., ge=0.0, le=100.0)
    encoding_integrity: float = Field(..., ge=0.0, le=100.0)
    contextual_coherence: float = Field(..., ge=0.0, le=100.0)
    ui_artifact_removal: float = Field(..., ge=0.0, le=100.0)

    @property
    def passes(self) -> bool:
        """Only an overall score of exactly 100 satisfies the gate."""
        return self.overall == 100.0


class ViolationType(str, Enum):
    """Kind of purity violation."""

    MIXED_SCRIPTS = "mixed_scripts"
    FOREIGN_FRAGMENT = "foreign_fragment"
    CORRUPTED_CHARACTER = "corrupted_character"
    ENCODING_ERROR = "encoding_error"
    UI_ARTIFACT = "ui_artifact"
    TERMINOLOGY = "terminology"


class PurityViolation(BaseModel):
    """A located purity problem in a candidate text."""

    model_config = ConfigDict(frozen=True)

    violation_type: ViolationType
    start: int = Field(default=0, ge=0)
    end: int = Field(default=0, ge=0)
    content: str = ""
    severity: Severity = Severity.HIGH
    suggested_fix: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class RecommendationType(str, Enum):
    """Remedy families for purity and quality findings."""

    CONTENT_CLEANING = "content_cleaning"
    TERMINOLOGY_UPDATE = "terminology_update"
    ENCODING_FIX = "encoding_fix"
    CONTEXT_ENHANCEMENT = "context_enhancement"


class QualityRecommendation(BaseModel):
    """Suggested remedy for one or more findings."""

    model_config = ConfigDict(frozen=True)

    recommendation_type: RecommendationType
    priority: Severity = Severity.MEDIUM
    description: str
    issue_types: tuple[str, ...] = ()


class PurityValidationResult(BaseModel):
    """Outcome of validating a candidate text."""

    model_config = ConfigDict(frozen=True)

    score: PurityScore
    violations: tuple[PurityViolation, ...] = ()
    recommendations: tuple[QualityRecommendation, ...] = ()
    target_language: Language

    @property
    def is_pure(self) -> bool:
        """Pure means an overall score of 100 and no recorded violation."""
        return self.score.passes and not self.violations


class TranslationAttempt(BaseModel):
    """One candidate produced by one method during a request."""

    model_config = ConfigDict(frozen=True)

    text: str
    method: TranslationMethod
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    processing_time_ms: float = Field(default=0.0, ge=0.0)
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    validation: PurityValidationResult | None = None

    @property
    def succeeded(self) -> bool:
        """Whether the method produced text without errors."""
        return bool(self.text) and not self.errors

    @property
    def accepted(self) -> bool:
        """Whether the attempt was validated as pure."""
        return self.validation is not None and self.validation.is_pure


class QualityMetrics(BaseModel):
    """Independently computed quality dimensions (0-100 each)."""

    model_config = ConfigDict(frozen=True)

    purity_score: float = Field(..., ge=0.0, le=100.0)
    terminology_accuracy: float = Field(..., ge=0.0, le=100.0)
    contextual_relevance: float = Field(..., ge=0.0, le=100.0)
    readability_score: float = Field(..., ge=0.0, le=100.0)
    professionalism_score: float = Field(..., ge=0.0, le=100.0)
    encoding_integrity: float = Field(..., ge=0.0, le=100.0)
    user_satisfaction: float | None = Field(default=None, ge=0.0, le=100.0)


class QualityIssueType(str, Enum):
    """Kind of quality finding."""

    LANGUAGE_MIXING = "language_mixing"
    CORRUPTED_CHARACTERS = "corrupted_characters"
    POOR_TERMINOLOGY = "poor_terminology"
    CONTEXT_LOSS = "context_loss"
    ENCODING_ERROR = "encoding_error"
    READABILITY = "readability"
    UI_CONTAMINATION = "ui_contamination"
    PROCESSING_TIME = "processing_time"


class QualityIssue(BaseModel):
    """A quality finding for one result."""

    model_config = ConfigDict(frozen=True)

    issue_type: QualityIssueType
    severity: Severity
    description: str
    location: tuple[int, int] | None = None
    suggested_fix: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class QualityReport(BaseModel):
    """Quality assessment of one result."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    overall_score: float = Field(..., ge=0.0, le=100.0)
    metrics: QualityMetrics
    issues: tuple[QualityIssue, ...] = ()
    recommendations: tuple[QualityRecommendation, ...] = ()
    passed: bool = False
    timestamp: datetime = Field(default_factory=utc_now)


class ResultMetadata(BaseModel):
    """Bookkeeping attached to every result."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    timestamp: datetime = Field(default_factory=utc_now)
    step_durations_ms: dict[str, float] = Field(default_factory=dict)
    fallback_used: bool = False
    cache_hit: bool = False
    attempts: int = 0
    methods_tried: tuple[TranslationMethod, ...] = ()
    extra: dict[str, Any] = Field(default_factory=dict)


class PureTranslationResult(BaseModel):
    """Final answer for one request. Immutable."""

    model_config = ConfigDict(frozen=True)

    translated_text: str
    purity_score: float = Field(..., ge=0.0, le=100.0)
    quality_metrics: QualityMetrics
    method: TranslationMethod
    confidence: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: float = Field(default=0.0, ge=0.0)
    warnings: tuple[str, ...] = ()
    metadata: ResultMetadata

    @property
    def is_pure(self) -> bool:
        """Whether the result passed the zero-tolerance gate."""
        return self.purity_score == 100.0


class UserIssueReport(BaseModel):
    """A problem reported by a user about a delivered translation."""

    model_config = ConfigDict(frozen=True)

    request_id: str | None = None
    description: str
    problematic_text: str | None = Field(
        default=None, description="Fragment the user saw in the output"
    )
    severity: Severity = Severity.MEDIUM
    user_id: str | None = None
    reported_at: datetime = Field(default_factory=utc_now)
