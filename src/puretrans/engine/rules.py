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

"""Rule-based translation.

Applies fixed legal phrase patterns, then renders dictionary terms from
the terminology manager, then function words. Works without any
backend and is the last automatic method before fallback generation.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass

from puretrans.core.models import Language, LegalDomain
from puretrans.mt.base import BackendResult, BaseTranslationBackend
from puretrans.mt.lexicon import (
    AR_FR_FUNCTION_WORDS,
    FR_AR_FUNCTION_WORDS,
    estimate_confidence,
    render_words,
)
from puretrans.terminology.manager import LegalTerminologyManager, normalize_term

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhraseRule:
    """Regex phrase pattern with its rendering template."""

    pattern: re.Pattern[str]
    template: str

    def apply(self, text: str) -> tuple[str, int]:
        return self.pattern.subn(lambda m: f" {m.expand(self.template)} ", text)


def _rules(pairs: list[tuple[str, str]], flags: int = 0) -> tuple[PhraseRule, ...]:
    return tuple(PhraseRule(re.compile(p, flags), t) for p, t in pairs)


PHRASE_RULES: dict[Language, tuple[PhraseRule, ...]] = {
    Language.ARABIC: _rules(
        [
            (r"وفقا\s+لأحكام\s+المادة\s+(\d+)", r"conformément aux dispositions de l'article \1"),
            (r"بموجب\s+المادة\s+(\d+)", r"en vertu de l'article \1"),
            (r"تقرر\s+المحكمة", "le tribunal décide"),
            (r"حكمت\s+المحكمة", "le tribunal a jugé"),
            (r"(?<!\w)(?:ال)?فقرة\s+(\d+)", r"alinéa \1"),
            (r"(?<!\w)(?:ال)?مادة\s+(\d+)", r"article \1"),
        ]
    ),
    Language.FRENCH: _rules(
        [
            (
                r"conformément\s+aux\s+dispositions\s+de\s+l['’]article\s+(\d+)",
                r"وفقا لأحكام المادة \1",
            ),
            (r"en\s+vertu\s+de\s+l['’]article\s+(\d+)", r"بموجب المادة \1"),
            (r"le\s+tribunal\s+décide", "تقرر المحكمة"),
            (r"le\s+tribunal\s+a\s+jugé", "حكمت المحكمة"),
            (r"(?<!\w)alinéa\s+(\d+)", r"الفقرة \1"),
            (r"(?<!\w)(?:l['’])?article\s+(\d+)", r"المادة \1"),
        ],
        re.IGNORECASE,
    ),
}

FUNCTION_WORDS: dict[Language, dict[str, str]] = {
    Language.ARABIC: AR_FR_FUNCTION_WORDS,
    Language.FRENCH: FR_AR_FUNCTION_WORDS,
}


class RuleBasedTranslator(BaseTranslationBackend):
    """Translator built from phrase rules and the legal dictionaries."""

    name = "rule_based"

    def __init__(self, terminology: LegalTerminologyManager) -> None:
        super().__init__()
        self.terminology = terminology

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        """Translate text with phrase rules, dictionary terms and function words."""
        self._track(text)
        await asyncio.sleep(0)

        if source_language is target_language:
            return BackendResult(text, source_language, target_language, confidence=1.0)

        output = text
        rendered = 0
        for rule in PHRASE_RULES[source_language]:
            output, n = rule.apply(output)
            rendered += n

        # Multi-word dictionary terms, replaced from the end so spans stay valid
        for match in reversed(self.terminology.extract_terms(output, source_language, domain)):
            if " " not in match.matched.strip():
                continue
            target = match.entry.term(target_language)
            output = f"{output[: match.start]} {target} {output[match.end :]}"
            rendered += 1

        function_words = FUNCTION_WORDS[source_language]

        def lookup(word: str) -> str | None:
            hit = self.terminology.lookup(word, source_language, target_language, domain)
            if hit is not None:
                return hit.target_term
            return function_words.get(normalize_term(word, source_language))

        output, words, untranslated = render_words(output, source_language, lookup)
        rendered += words

        result = BackendResult(
            text=output,
            source_language=source_language,
            target_language=target_language,
            confidence=estimate_confidence(text, output, rendered, len(untranslated)),
            terms_translated=rendered,
            untranslated=untranslated,
            characters=len(text),
        )
        if untranslated:
            result.warnings.append(f"{len(untranslated)} words left untranslated")
        logger.debug("Rule-based translation rendered %d items", rendered)
        return result
