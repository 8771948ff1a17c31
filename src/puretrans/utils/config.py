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

"""Configuration management for the translation pipeline.

Handles purity policy, retry and concurrency limits, quality thresholds,
and custom cleaning rules using Pydantic Settings.
Supports environment variables and .env files.

Settings are immutable. Hot reloads go through
:meth:`PipelineSettings.with_updates`, which validates the changes and
returns a new instance.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from puretrans.core.models import Severity, TranslationMethod

logger = logging.getLogger(__name__)

# Zero tolerance means nothing short of a perfect score ships
REQUIRED_PURITY_SCORE = 100.0

DEFAULT_METHOD_ORDER: tuple[TranslationMethod, ...] = (
    TranslationMethod.PRIMARY,
    TranslationMethod.SECONDARY,
    TranslationMethod.RULE_BASED,
    TranslationMethod.HYBRID,
)

TRANSLATION_METHODS = frozenset(DEFAULT_METHOD_ORDER)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Strings users have reported seeing in delivered translations
DEFAULT_CUSTOM_LITERALS: tuple[str, ...] = (
    "процедة",
    "[object Object]",
    "JuristDZ",
)

DEFAULT_CUSTOM_PATTERNS: tuple[str, ...] = (
    r"\bv\d+\.\d+(?:\.\d+)*\b",
    r"(?i)\bversion\s*\d+(?:\.\d+)*\b",
    r"(?i)\bbuild\s*\d+\b",
)


class QualityThreshold(BaseModel):
    """Bound on one monitored metric.

    The same set drives per-result quality issues and the alerts raised
    by the monitoring loop.

    Attributes:
        metric: Metric name (e.g. purity_rate, error_rate)
        min_value: Lowest acceptable value
        max_value: Highest acceptable value
        severity: Severity of the alert raised on breach
        enabled: Whether the threshold is checked
        description: Human-readable purpose
    """

    model_config = ConfigDict(frozen=True)

    metric: str = Field(..., min_length=1)
    min_value: float | None = None
    max_value: float | None = None
    severity: Severity = Severity.MEDIUM
    enabled: bool = True
    description: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> QualityThreshold:
        if self.min_value is None and self.max_value is None:
            raise ValueError(f"Threshold {self.metric} needs min_value or max_value")
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ValueError(f"Threshold {self.metric}: min_value exceeds max_value")
        return self

    def is_breached(self, value: float) -> bool:
        """Whether value falls outside the bounds."""
        if self.min_value is not None and value < self.min_value:
            return True
        return self.max_value is not None and value > self.max_value

    @property
    def bound(self) -> float | None:
        """Bound reported in alert messages (min_value when both are set)."""
        return self.min_value if self.min_value is not None else self.max_value


DEFAULT_THRESHOLDS: tuple[QualityThreshold, ...] = (
    QualityThreshold(
        metric="purity_rate",
        min_value=100.0,
        severity=Severity.CRITICAL,
        description="Every delivered translation must be pure",
    ),
    QualityThreshold(
        metric="overall_quality",
        min_value=85.0,
        severity=Severity.HIGH,
        description="Average quality score",
    ),
    QualityThreshold(
        metric="terminology_accuracy",
        min_value=90.0,
        severity=Severity.HIGH,
        description="Legal terminology accuracy",
    ),
    QualityThreshold(
        metric="error_rate",
        max_value=5.0,
        severity=Severity.HIGH,
        description="Share of requests ending in emergency content",
    ),
    QualityThreshold(
        metric="processing_time",
        max_value=30000.0,
        severity=Severity.MEDIUM,
        description="Processing time in milliseconds",
    ),
    QualityThreshold(
        metric="contextual_relevance",
        min_value=80.0,
        severity=Severity.MEDIUM,
        description="Contextual relevance of translations",
    ),
    QualityThreshold(
        metric="readability_score",
        min_value=80.0,
        severity=Severity.LOW,
        description="Sentence length and punctuation of delivered text",
    ),
    QualityThreshold(
        metric="user_satisfaction",
        min_value=80.0,
        severity=Severity.MEDIUM,
        description="Average user satisfaction",
    ),
)


class PipelineSettings(BaseSettings):
    """Pipeline settings.

    Loads configuration from environment variables or .env file.
    All settings can be overridden via environment variables with the
    PURETRANS_ prefix; list values such as quality thresholds are JSON.

    Example .env file:
        PURETRANS_MAX_RETRY_ATTEMPTS=2
        PURETRANS_CONCURRENT_REQUEST_LIMIT=20
        PURETRANS_QUALITY_THRESHOLDS='[{"metric": "purity_rate", "min_value": 100}]'

    Example usage:
        >>> settings = PipelineSettings()
        >>> settings.minimum_purity_score
        100.0
    """

    # Purity policy
    zero_tolerance_enabled: bool = Field(
        default=True,
        description="Enforce the exact-100 purity gate (should stay enabled)",
    )

    minimum_purity_score: float = Field(
        default=REQUIRED_PURITY_SCORE,
        description="Purity floor; always clamped back to 100",
        ge=0.0,
        le=100.0,
    )

    # Retry and fallback
    max_retry_attempts: int = Field(
        default=3,
        description="Number of translation methods tried before falling back",
        ge=1,
    )

    method_order: tuple[TranslationMethod, ...] = Field(
        default=DEFAULT_METHOD_ORDER,
        description="Priority order of translation methods",
    )

    fallback_enabled: bool = Field(default=True, description="Allow synthesized fallback content")

    # Caching
    caching_enabled: bool = Field(default=True, description="Cache pure results")
    cache_ttl_seconds: float = Field(default=3600.0, description="Cache validity window", gt=0)
    cache_max_entries: int = Field(default=10000, description="Cache capacity", ge=1)
    cache_min_quality: float = Field(
        default=70.0,
        description="Lowest overall quality score a result may have to be cached",
        ge=0.0,
        le=100.0,
    )

    # Concurrency and limits
    concurrent_request_limit: int = Field(
        default=10,
        description="Requests processed at once; the rest wait",
        ge=1,
    )

    processing_timeout_ms: float = Field(
        default=30000.0,
        description="Upper bound on total request latency (milliseconds)",
        ge=1000.0,
    )

    max_text_length: int = Field(
        default=50000,
        description="Longer input is truncated before cleaning",
        ge=1,
    )

    # Monitoring
    monitoring_enabled: bool = Field(default=True, description="Run the background monitor")
    monitoring_interval_seconds: float = Field(
        default=5.0,
        description="Seconds between background quality checks",
        gt=0,
    )
    max_processing_time_ceiling_ms: float = Field(
        default=10000.0,
        description="Average processing time above which health degrades",
        gt=0,
    )

    quality_thresholds: tuple[QualityThreshold, ...] = Field(
        default=DEFAULT_THRESHOLDS,
        description="Bounds checked per result and by the monitoring loop",
    )

    # Terminology
    terminology_confidence_threshold: float = Field(
        default=0.9,
        description="Minimum confidence for a term to be enforced",
        ge=0.0,
        le=1.0,
    )

    # Cleaning
    custom_literals: tuple[str, ...] = Field(
        default=DEFAULT_CUSTOM_LITERALS,
        description="Literal strings always stripped from input and rejected in output",
    )
    custom_patterns: tuple[str, ...] = Field(
        default=DEFAULT_CUSTOM_PATTERNS,
        description="Regular expressions always stripped from input and rejected in output",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PURETRANS_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("custom_patterns")
    @classmethod
    def _check_custom_patterns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Imported here: the cleaning package depends on this module
        from puretrans.cleaning.rules import CleaningRuleError, PatternRule

        problems = []
        for pattern in value:
            try:
                PatternRule(pattern)
            except CleaningRuleError as e:
                problems.append(str(e))
        if problems:
            raise ValueError("; ".join(problems))
        return value

    @field_validator("quality_thresholds")
    @classmethod
    def _check_unique_thresholds(
        cls, value: tuple[QualityThreshold, ...]
    ) -> tuple[QualityThreshold, ...]:
        metrics = [t.metric for t in value]
        duplicates = sorted({m for m in metrics if metrics.count(m) > 1})
        if duplicates:
            raise ValueError(f"duplicate thresholds for: {', '.join(duplicates)}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _enforce_zero_tolerance(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        enabled = data.get("zero_tolerance_enabled", True)
        if isinstance(enabled, str):
            enabled = enabled.strip().lower() not in {"0", "false", "no", "off"}
        if not enabled:
            logger.warning(
                "Zero tolerance cannot be disabled; purity floor stays at %.0f",
                REQUIRED_PURITY_SCORE,
            )

        floor = data.get("minimum_purity_score")
        if floor is not None:
            try:
                value = float(floor)
            except (TypeError, ValueError):
                return data
            if 0.0 <= value < REQUIRED_PURITY_SCORE:
                logger.warning(
                    "Purity floor %.2f clamped to %.0f", value, REQUIRED_PURITY_SCORE
                )
                data = {**data, "minimum_purity_score": REQUIRED_PURITY_SCORE}
        return data

    @model_validator(mode="after")
    def _check_method_order(self) -> PipelineSettings:
        unknown = [m for m in self.method_order if m not in TRANSLATION_METHODS]
        if unknown:
            names = ", ".join(m.value for m in unknown)
            raise ValueError(f"method_order may only contain translation methods, got: {names}")
        if not self.method_order:
            raise ValueError("method_order must not be empty")
        return self

    @property
    def processing_timeout_seconds(self) -> float:
        """Processing timeout in seconds."""
        return self.processing_timeout_ms / 1000.0

    def threshold(self, metric: str) -> QualityThreshold | None:
        """The enabled threshold for a metric, if any."""
        found = next((t for t in self.quality_thresholds if t.metric == metric), None)
        return found if found is not None and found.enabled else None

    def with_updates(self, **changes: Any) -> PipelineSettings:
        """Return a validated copy with ``changes`` applied.

        Args:
            **changes: Field values to replace. ``quality_thresholds`` may be
                given as a mapping of metric name to changed fields; unnamed
                thresholds are kept and new metric names are added.

        Returns:
            New settings instance

        Raises:
            ConfigurationError: If any change is unknown or invalid. Every
                problem is listed, nothing is applied.

        Example:
            >>> settings = PipelineSettings().with_updates(max_retry_attempts=2)
            >>> settings.max_retry_attempts
            2
        """
        unknown = sorted(set(changes) - set(type(self).model_fields))
        if unknown:
            raise ConfigurationError([f"unknown setting: {name}" for name in unknown])

        merged = self.model_dump()
        for name, value in changes.items():
            if name == "quality_thresholds" and isinstance(value, dict):
                merged[name] = _merge_thresholds(merged[name], value)
            elif isinstance(value, BaseModel):
                merged[name] = value.model_dump()
            else:
                merged[name] = value

        try:
            updated = type(self)(**merged)
        except ValidationError as e:
            errors = []
            for err in e.errors():
                location = ".".join(str(part) for part in err["loc"]) or "settings"
                errors.append(f"{location}: {err['msg']}")
            raise ConfigurationError(errors) from e

        logger.info("Configuration updated: %s", ", ".join(sorted(changes)))
        return updated


def _merge_thresholds(
    current: list[dict[str, Any]], changes: dict[str, dict[str, Any]]
) -> list[dict[str, Any]]:
    merged = {t["metric"]: t for t in current}
    for metric, fields in changes.items():
        merged[metric] = {**merged.get(metric, {}), **fields, "metric": metric}
    return list(merged.values())


# Global settings instance
_settings: PipelineSettings | None = None


def get_settings() -> PipelineSettings:
    """Get the process default settings instance.

    Returns:
        PipelineSettings instance

    Example:
        >>> settings = get_settings()
        >>> settings.max_retry_attempts
        3
    """
    global _settings
    if _settings is None:
        _settings = PipelineSettings()
    return _settings


class ConfigurationError(ValueError):
    """Raised when a configuration update is rejected.

    Attributes:
        errors: Every validation problem found
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))
