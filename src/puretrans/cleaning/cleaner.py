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

"""Content cleaner that strips contamination before translation.

Stages, applied in order and repeated until the text stops changing:
1. Encoding normalization (NFC, replacement/control characters, mojibake)
2. Interface artifacts, version numbers, and configured custom rules
3. Foreign-script runs, plus fragments in the other language of the pair
4. Whitespace collapse

Because the stages repeat until a fixpoint, cleaning is idempotent.
"""

from __future__ import annotations

import logging
import re
import time
import unicodedata
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from puretrans.cleaning.rules import (
    CleaningRule,
    LiteralRule,
    custom_rules,
    foreign_script_rules,
    ui_artifact_rules,
    version_rules,
)
from puretrans.core.models import (
    CleanedContent,
    CleaningAction,
    Language,
    PatternType,
    RemovedElement,
)
from puretrans.helpers.detection import (
    LANGUAGE_SCRIPTS,
    DominantScript,
    ScriptClass,
    analyze_scripts,
    iter_script_runs,
    validate_encoding,
)
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

# Encoding issues whose characters are deleted outright
_REMOVABLE_ENCODING_ISSUES = frozenset(
    {
        "replacement_character",
        "byte_order_mark",
        "unpaired_surrogate",
        "private_use",
        "control_character",
        "mojibake",
    }
)
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\u2060]+")

_HORIZONTAL_SPACE_RE = re.compile("[ \t\u00a0\u202f]+")
_LINE_EDGE_RE = re.compile(r" *\n *")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_SPACE_BEFORE_PUNCT_RE = re.compile(r" +([.,;:!?،؛؟])")

_DOMINANT_TO_FOREIGN: dict[DominantScript, ScriptClass] = {
    DominantScript.ARABIC: ScriptClass.LATIN,
    DominantScript.LATIN: ScriptClass.ARABIC,
}


@dataclass
class CleaningStats:
    """Running statistics for a cleaner instance."""

    total_cleanings: int = 0
    cleanings_with_problems: int = 0
    total_processing_time_ms: float = 0.0
    removed_by_type: Counter[str] = field(default_factory=Counter)

    @property
    def average_processing_time_ms(self) -> float:
        """Average time spent per cleaning."""
        if self.total_cleanings == 0:
            return 0.0
        return self.total_processing_time_ms / self.total_cleanings

    def to_dict(self) -> dict[str, Any]:
        """Export statistics as a plain dictionary."""
        return {
            "total_cleanings": self.total_cleanings,
            "cleanings_with_problems": self.cleanings_with_problems,
            "average_processing_time_ms": round(self.average_processing_time_ms, 3),
            "removed_by_type": dict(self.removed_by_type),
        }


@dataclass
class _PassResult:
    text: str
    removed: list[RemovedElement] = field(default_factory=list)
    actions: list[CleaningAction] = field(default_factory=list)


def _merge_spans(spans: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _cut(text: str, spans: list[tuple[int, int]], replacement: str) -> str:
    parts: list[str] = []
    last = 0
    for start, end in spans:
        parts.append(text[last:start])
        parts.append(replacement)
        last = end
    parts.append(text[last:])
    return "".join(parts)


def collapse_whitespace(text: str) -> str:
    """Collapse spaces, trim lines, and drop spaces before punctuation.

    Example:
        >>> collapse_whitespace("  le   tribunal ,  décide  ")
        'le tribunal, décide'
    """
    text = _HORIZONTAL_SPACE_RE.sub(" ", text)
    text = _LINE_EDGE_RE.sub("\n", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
    return text.strip()


class ContentCleaner:
    """Strips foreign scripts, interface artifacts, and encoding garbage.

    Every removal is recorded as a :class:`RemovedElement` whose span is
    relative to the text as it stood when the rule fired.

    Example:
        >>> cleaner = ContentCleaner()
        >>> result = cleaner.clean("محامي Pro تحليل V2", Language.ARABIC)
        >>> result.cleaned_text
        'محامي تحليل'
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        extra_rules: Iterable[CleaningRule] | None = None,
    ) -> None:
        """Initialize cleaner.

        Args:
            settings: Source of custom literals and patterns (defaults to
                the process settings)
            extra_rules: Additional rules applied with the custom rules
        """
        settings = settings or get_settings()
        self._custom_rules: list[CleaningRule] = custom_rules(
            settings.custom_literals, settings.custom_patterns
        )
        self._learned_rules: list[CleaningRule] = list(extra_rules or ())
        self._ui_rules = ui_artifact_rules()
        self._version_rules = version_rules()
        self._script_rules = foreign_script_rules()
        self.stats = CleaningStats()

    @property
    def artifact_rules(self) -> list[CleaningRule]:
        """Rules that must never match delivered output."""
        return [*self._custom_rules, *self._learned_rules, *self._ui_rules, *self._version_rules]

    def add_rule(self, rule: CleaningRule) -> None:
        """Add a custom rule applied from the next cleaning on.

        Args:
            rule: Literal, pattern, or script range rule
        """
        self._learned_rules.append(rule)
        logger.info("Added cleaning rule: %s", rule.name)

    def reconfigure(self, settings: PipelineSettings) -> None:
        """Rebuild the configured custom rules; added rules are kept."""
        self._custom_rules = custom_rules(settings.custom_literals, settings.custom_patterns)
        logger.info("Cleaner reconfigured with %d custom rules", len(self._custom_rules))

    def add_patterns_from_feedback(self, patterns: Iterable[str]) -> int:
        """Turn user-reported fragments into literal rules.

        Args:
            patterns: Fragments users saw in delivered text

        Returns:
            Number of new rules added (duplicates and blanks are skipped)
        """
        known = {r.text for r in self.artifact_rules if isinstance(r, LiteralRule)}
        added = 0
        for pattern in patterns:
            fragment = pattern.strip()
            if not fragment or fragment in known:
                continue
            self.add_rule(LiteralRule(fragment, reason="Reported by a user"))
            known.add(fragment)
            added += 1
        return added

    def get_stats(self) -> dict[str, Any]:
        """Get cleaning statistics.

        Returns:
            Dictionary with cleaning counts, removals by type, and timing
        """
        custom = len(self._custom_rules) + len(self._learned_rules)
        return {**self.stats.to_dict(), "custom_rules": custom}

    def clean(self, text: str, source_language: Language | None = None) -> CleanedContent:
        """Clean text before translation.

        Args:
            text: Raw text
            source_language: Language of the text. When omitted, the
                dominant script decides which fragments are foreign.

        Returns:
            CleanedContent with the cleaned text and an audit trail
        """
        started = time.perf_counter()
        removed: list[RemovedElement] = []
        actions: list[CleaningAction] = []

        current = text
        while True:
            result = self._clean_once(current, source_language)
            removed.extend(result.removed)
            actions.extend(result.actions)
            if result.text == current:
                break
            current = result.text

        elapsed_ms = (time.perf_counter() - started) * 1000
        confidence = self._confidence(removed, len(text))

        self.stats.total_cleanings += 1
        self.stats.total_processing_time_ms += elapsed_ms
        if removed:
            self.stats.cleanings_with_problems += 1
            self.stats.removed_by_type.update(e.element_type.value for e in removed)
            logger.debug(
                "Removed %d elements (%d chars left of %d)",
                len(removed),
                len(current),
                len(text),
            )

        return CleanedContent(
            original_text=text,
            cleaned_text=current,
            removed_elements=tuple(removed),
            actions=tuple(actions),
            confidence=confidence,
            processing_time_ms=elapsed_ms,
        )

    def _clean_once(self, text: str, source_language: Language | None) -> _PassResult:
        result = _PassResult(text)

        self._normalize_encoding(result)

        for rule in self.artifact_rules:
            self._apply(result, rule.find(result.text), rule.element_type, rule.reason, rule.name)

        for rule in self._script_rules:
            self._apply(result, rule.find(result.text), rule.element_type, rule.reason, rule.name)
        self._remove_foreign_runs(result, source_language)

        collapsed = collapse_whitespace(result.text)
        if collapsed != result.text:
            result.actions.append(
                CleaningAction(action="collapse", rule="whitespace", reason="Collapse whitespace")
            )
            result.text = collapsed
        return result

    def _normalize_encoding(self, result: _PassResult) -> None:
        normalized = unicodedata.normalize("NFC", result.text.replace("\r\n", "\n"))
        normalized = normalized.replace("\r", "\n")
        if normalized != result.text:
            result.actions.append(
                CleaningAction(action="normalize", rule="nfc", reason="Unicode NFC normalization")
            )
            result.text = normalized

        spans = [
            (issue.start, issue.end)
            for issue in validate_encoding(result.text)
            if issue.issue_type in _REMOVABLE_ENCODING_ISSUES
        ]
        spans.extend(m.span() for m in _ZERO_WIDTH_RE.finditer(result.text))
        self._apply(
            result,
            spans,
            PatternType.ENCODING,
            "Corrupted or invisible characters",
            "encoding",
            replacement="",
        )

    def _remove_foreign_runs(self, result: _PassResult, source_language: Language | None) -> None:
        if source_language is not None:
            fragment_script: ScriptClass | None = LANGUAGE_SCRIPTS[source_language.other]
        else:
            dominant = analyze_scripts(result.text).dominant_script
            fragment_script = _DOMINANT_TO_FOREIGN.get(dominant)

        runs = iter_script_runs(result.text)
        other = [
            (r.start, r.end)
            for r in runs
            if r.script in (ScriptClass.CYRILLIC, ScriptClass.OTHER_LETTER)
        ]
        self._apply(
            result,
            other,
            PatternType.FOREIGN_SCRIPT,
            "Script outside French and Arabic",
            "script:other",
        )

        if fragment_script is not None:
            fragments = [
                (r.start, r.end)
                for r in iter_script_runs(result.text)
                if r.script is fragment_script
            ]
            self._apply(
                result,
                fragments,
                PatternType.FOREIGN_FRAGMENT,
                f"{fragment_script.value.capitalize()} fragment in a text of the other language",
                f"fragment:{fragment_script.value}",
            )

    @staticmethod
    def _apply(
        result: _PassResult,
        spans: Iterable[tuple[int, int]],
        element_type: PatternType,
        reason: str,
        rule_name: str,
        replacement: str = " ",
    ) -> None:
        merged = _merge_spans(span for span in spans if span[1] > span[0])
        if not merged:
            return
        text = result.text
        for start, end in merged:
            result.removed.append(
                RemovedElement(
                    element_type=element_type,
                    content=text[start:end],
                    start=start,
                    end=end,
                    reason=reason,
                )
            )
            result.actions.append(
                CleaningAction(
                    action="remove", rule=rule_name, start=start, end=end, reason=reason
                )
            )
        result.text = _cut(text, merged, replacement)

    @staticmethod
    def _confidence(removed: list[RemovedElement], original_length: int) -> float:
        if not removed:
            return 1.0
        ratio = sum(e.end - e.start for e in removed) / max(1, original_length)
        if ratio > 0.5:
            return 0.6
        if ratio > 0.2:
            return 0.8
        return 0.95
