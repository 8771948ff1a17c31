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

"""Base abstract class for translation backends.

Defines the interface every backend used by the translation engine must
implement. Backends are the pipeline's suspension points: calls to
external translation services happen here.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from puretrans.core.models import Language, LegalDomain


@dataclass
class BackendResult:
    """Result of a backend translation.

    Attributes:
        text: Translated text
        source_language: Language of the input
        target_language: Language of the output
        confidence: Backend confidence (0.0-1.0)
        terms_translated: Number of known terms or phrases rendered
        untranslated: Words the backend could not render
        characters: Number of characters translated (for usage tracking)
        warnings: Non-fatal remarks
    """

    text: str
    source_language: Language
    target_language: Language
    confidence: float = 0.0
    terms_translated: int = 0
    untranslated: list[str] = field(default_factory=list)
    characters: int = 0
    warnings: list[str] = field(default_factory=list)


class BaseTranslationBackend(ABC):
    """Abstract base class for translation backends.

    Attributes:
        name: Backend name used in logs and metrics
        total_characters: Total characters translated (for usage tracking)
        total_requests: Number of translate calls served
    """

    name = "backend"

    def __init__(self) -> None:
        """Initialize backend with usage tracking."""
        self.total_characters = 0
        self.total_requests = 0

    @abstractmethod
    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        """Translate text.

        Args:
            text: Cleaned text to translate
            source_language: Language of ``text``
            target_language: Requested output language
            domain: Legal domain hint

        Returns:
            BackendResult with translated text and confidence

        Raises:
            TranslationBackendError: If translation fails
            BackendUnavailableError: If the backend cannot be reached
        """
        ...

    async def translate_batch(
        self,
        texts: list[str],
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> list[BackendResult]:
        """Translate several texts, preserving order.

        Raises:
            TranslationBackendError: If any translation fails
        """
        return list(
            await asyncio.gather(
                *(self.translate(t, source_language, target_language, domain) for t in texts)
            )
        )

    def get_usage(self) -> dict[str, int]:
        """Get usage statistics.

        Returns:
            Dictionary with request and character counts
        """
        return {"requests": self.total_requests, "characters": self.total_characters}

    def _track(self, text: str) -> None:
        self.total_requests += 1
        self.total_characters += len(text)


class TranslationBackendError(Exception):
    """Base exception for translation backend errors."""


class BackendUnavailableError(TranslationBackendError):
    """Raised when a backend cannot be reached."""
