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

"""Core data models, result cache and the translation gateway."""

from puretrans.core.models import (
    CleanedContent,
    ContentType,
    Language,
    LegalDomain,
    Priority,
    PureTranslationResult,
    PurityScore,
    PurityValidationResult,
    PurityViolation,
    QualityMetrics,
    QualityReport,
    ResultMetadata,
    Severity,
    TranslationAttempt,
    TranslationContext,
    TranslationMethod,
    TranslationRequest,
    UserIssueReport,
)
from puretrans.core.cache import CacheStats, TranslationCache, make_cache_key
from puretrans.core.gateway import PipelineState, TranslationGateway

__all__ = [
    "CacheStats",
    "CleanedContent",
    "ContentType",
    "Language",
    "LegalDomain",
    "PipelineState",
    "Priority",
    "PureTranslationResult",
    "PurityScore",
    "PurityValidationResult",
    "PurityViolation",
    "QualityMetrics",
    "QualityReport",
    "ResultMetadata",
    "Severity",
    "TranslationAttempt",
    "TranslationCache",
    "TranslationContext",
    "TranslationGateway",
    "TranslationMethod",
    "TranslationRequest",
    "UserIssueReport",
    "make_cache_key",
]
