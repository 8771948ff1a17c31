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

"""Translation engine.

Runs one translation method over cleaned content and reports the
outcome as a :class:`TranslationAttempt`. Method selection, validation
and fallback belong to the gateway; the engine only knows how to run a
method and how good each method is expected to be.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from puretrans.core.models import (
    CleanedContent,
    Language,
    LegalDomain,
    TranslationAttempt,
    TranslationMethod,
    TranslationRequest,
)
from puretrans.engine.rules import RuleBasedTranslator
from puretrans.helpers.detection import analyze_scripts
from puretrans.mt.base import BackendResult, BaseTranslationBackend, TranslationBackendError
from puretrans.mt.lexicon import PRIMARY_LEXICON, SECONDARY_LEXICON, LexiconBackend
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodCapabilities:
    """Expected accuracy and input limit of a translation method."""

    method: TranslationMethod
    accuracy: float
    max_length: int
    description: str


METHOD_CAPABILITIES: dict[TranslationMethod, MethodCapabilities] = {
    TranslationMethod.PRIMARY: MethodCapabilities(
        TranslationMethod.PRIMARY, 0.85, 10000, "Primary backend"
    ),
    TranslationMethod.SECONDARY: MethodCapabilities(
        TranslationMethod.SECONDARY, 0.8, 10000, "Secondary backend"
    ),
    TranslationMethod.RULE_BASED: MethodCapabilities(
        TranslationMethod.RULE_BASED, 0.75, 5000, "Phrase rules and legal dictionaries"
    ),
    TranslationMethod.HYBRID: MethodCapabilities(
        TranslationMethod.HYBRID, 0.8, 10000, "Best of primary and rule-based"
    ),
}


class TranslationEngine:
    """Runs translation methods against their backends.

    Example:
        >>> engine = TranslationEngine()
        >>> attempt = await engine.attempt(cleaned, request, TranslationMethod.PRIMARY)
        >>> attempt.succeeded
        True
    """

    def __init__(
        self,
        primary_backend: BaseTranslationBackend | None = None,
        secondary_backend: BaseTranslationBackend | None = None,
        terminology: LegalTerminologyManager | None = None,
        settings: PipelineSettings | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            primary_backend: Backend for PRIMARY (built-in primary lexicon by default)
            secondary_backend: Backend for SECONDARY (built-in secondary lexicon by default)
            terminology: Terminology manager used by the rule-based method
            settings: Pipeline settings (method order)
        """
        self.settings = settings or get_settings()
        self.terminology = terminology or LegalTerminologyManager(settings=self.settings)
        self.primary_backend = primary_backend or LexiconBackend(PRIMARY_LEXICON, name="primary")
        self.secondary_backend = secondary_backend or LexiconBackend(
            SECONDARY_LEXICON, name="secondary"
        )
        self.rule_translator = RuleBasedTranslator(self.terminology)

    def methods_for(self, attempts: int | None = None) -> list[TranslationMethod]:
        """First ``attempts`` methods of the configured order."""
        if attempts is None:
            attempts = self.settings.max_retry_attempts
        return list(self.settings.method_order[:attempts])

    def get_method_capabilities(self, method: TranslationMethod) -> MethodCapabilities:
        """Capabilities of a translation method.

        Raises:
            ValueError: If the method is not run by the engine
        """
        try:
            return METHOD_CAPABILITIES[method]
        except KeyError:
            raise ValueError(f"Method {method.value} is not an engine method") from None

    async def attempt(
        self,
        cleaned: CleanedContent,
        request: TranslationRequest,
        method: TranslationMethod,
    ) -> TranslationAttempt:
        """Run one method over cleaned content.

        Backend failures are reported in ``attempt.errors`` instead of
        being raised, so the caller can move on to the next method.

        Args:
            cleaned: Output of the content cleaner
            request: Original translation request
            method: Method to run

        Returns:
            TranslationAttempt without validation
        """
        capabilities = self.get_method_capabilities(method)
        start = time.perf_counter()
        text = cleaned.cleaned_text
        warnings: list[str] = []

        if len(text) > capabilities.max_length:
            warnings.append(
                f"Input clamped from {len(text)} to {capabilities.max_length} characters"
            )
            logger.warning(
                "Clamping %d characters to %d for %s",
                len(text),
                capabilities.max_length,
                method.value,
            )
            text = text[: capabilities.max_length]

        domain = request.context.legal_domain if request.context else None

        try:
            result = await self._run(method, text, request, domain)
        except TranslationBackendError as e:
            logger.warning("Method %s failed for %s: %s", method.value, request.request_id, e)
            return TranslationAttempt(
                text="",
                method=method,
                confidence=0.0,
                processing_time_ms=(time.perf_counter() - start) * 1000,
                errors=(str(e),),
                warnings=tuple(warnings),
            )

        warnings.extend(result.warnings)
        return TranslationAttempt(
            text=result.text,
            method=method,
            confidence=round(max(0.0, min(1.0, result.confidence)), 4),
            processing_time_ms=(time.perf_counter() - start) * 1000,
            warnings=tuple(warnings),
        )

    async def _run(
        self,
        method: TranslationMethod,
        text: str,
        request: TranslationRequest,
        domain: LegalDomain | None,
    ) -> BackendResult:
        args = (text, request.source_language, request.target_language, domain)
        if method is TranslationMethod.PRIMARY:
            return await self.primary_backend.translate(*args)
        if method is TranslationMethod.SECONDARY:
            return await self.secondary_backend.translate(*args)
        if method is TranslationMethod.RULE_BASED:
            return await self.rule_translator.translate(*args)
        return await self._hybrid(*args)

    async def _hybrid(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None,
    ) -> BackendResult:
        """Run primary and rule-based together and keep the purer candidate."""
        args = (text, source_language, target_language, domain)
        outcomes = await asyncio.gather(
            self.primary_backend.translate(*args),
            self.rule_translator.translate(*args),
            return_exceptions=True,
        )
        errors = [r for r in outcomes if isinstance(r, BaseException)]
        for error in errors:
            if not isinstance(error, TranslationBackendError):
                raise error
        candidates = [r for r in outcomes if isinstance(r, BackendResult)]
        if not candidates:
            raise TranslationBackendError("; ".join(str(e) for e in errors))

        def rank(result: BackendResult) -> tuple[float, float]:
            return analyze_scripts(result.text).percentage_for(target_language), result.confidence

        return max(candidates, key=rank)
