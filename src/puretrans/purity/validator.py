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

"""Zero-tolerance purity validation.

Scores a candidate text on five dimensions and records every located
violation. The gate is binary: only an overall score of exactly 100
with no violation passes, whatever the configuration says.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from puretrans.cleaning.cleaner import ContentCleaner
from puretrans.core.models import (
    Language,
    LegalDomain,
    PurityScore,
    PurityValidationResult,
    PurityViolation,
    QualityRecommendation,
    RecommendationType,
    Severity,
    ViolationType,
)
from puretrans.helpers.detection import (
    LANGUAGE_SCRIPTS,
    ScriptClass,
    analyze_scripts,
    iter_script_runs,
    validate_encoding,
)
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import REQUIRED_PURITY_SCORE, PipelineSettings, get_settings

logger = logging.getLogger(__name__)

DIMENSION_WEIGHTS: dict[str, float] = {
    "script_purity": 0.35,
    "terminology_consistency": 0.25,
    "encoding_integrity": 0.15,
    "contextual_coherence": 0.15,
    "ui_artifact_removal": 0.10,
}

MINIMUM_TARGET_SHARE = 80.0
MAXIMUM_FOREIGN_SHARE = 20.0
ENCODING_ISSUE_PENALTY = 25.0

# Highest score a text with any imperfect dimension can reach
_IMPERFECT_CEILING = 99.99

_CORRUPTION_TYPES = frozenset({"replacement_character", "private_use", "mojibake", "broken_word"})


@dataclass
class _Dimension:
    score: float
    violations: list[PurityViolation]


def overall_score(dimensions: dict[str, float]) -> float:
    """Weighted overall purity score.

    Any dimension below 100 keeps the result strictly below 100, so
    rounding can never turn an imperfect text into a passing one.

    Example:
        >>> overall_score(dict.fromkeys(DIMENSION_WEIGHTS, 100.0))
        100.0
    """
    total = round(sum(DIMENSION_WEIGHTS[name] * value for name, value in dimensions.items()), 2)
    if any(value < REQUIRED_PURITY_SCORE for value in dimensions.values()):
        total = min(total, _IMPERFECT_CEILING)
    return max(0.0, min(REQUIRED_PURITY_SCORE, total))


class PurityValidator:
    """Validates that a text is entirely in its target language.

    Example:
        >>> validator = PurityValidator()
        >>> validator.validate("Le tribunal décide", Language.FRENCH).is_pure
        True
        >>> validator.validate("Le tribunal محكمة", Language.FRENCH).is_pure
        False
    """

    def __init__(
        self,
        cleaner: ContentCleaner | None = None,
        terminology: LegalTerminologyManager | None = None,
        settings: PipelineSettings | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            cleaner: Source of the artifact rules output must not match
            terminology: Terminology manager for consistency checks
            settings: Pipeline settings
        """
        self.settings = settings or get_settings()
        self.cleaner = cleaner or ContentCleaner(self.settings)
        self.terminology = terminology or LegalTerminologyManager(settings=self.settings)
        self.total_validations = 0
        self.passed_validations = 0

    def validate(
        self,
        text: str,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> PurityValidationResult:
        """Score text against the zero-tolerance purity standard.

        Args:
            text: Candidate text
            target_language: Language the text must be written in
            domain: Legal domain for terminology checks

        Returns:
            PurityValidationResult; ``is_pure`` only for a perfect text
        """
        dimensions = {
            "script_purity": self._script_purity(text, target_language),
            "terminology_consistency": self._terminology(text, target_language, domain),
            "encoding_integrity": self._encoding(text),
            "contextual_coherence": self._coherence(text),
            "ui_artifact_removal": self._ui_artifacts(text),
        }
        scores = {name: round(d.score, 2) for name, d in dimensions.items()}
        violations = tuple(v for d in dimensions.values() for v in d.violations)

        score = PurityScore(overall=overall_score(scores), **scores)
        result = PurityValidationResult(
            score=score,
            violations=violations,
            recommendations=tuple(self._recommendations(violations)),
            target_language=target_language,
        )

        self.total_validations += 1
        if result.is_pure:
            self.passed_validations += 1
        else:
            logger.debug(
                "Purity %.2f with %d violations (%s)",
                score.overall,
                len(violations),
                target_language.value,
            )
        return result

    def get_stats(self) -> dict[str, float]:
        """Validation counters."""
        rate = (
            100.0 * self.passed_validations / self.total_validations
            if self.total_validations
            else 0.0
        )
        return {
            "total_validations": self.total_validations,
            "passed_validations": self.passed_validations,
            "pass_rate": round(rate, 2),
        }

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------

    def _script_purity(self, text: str, target_language: Language) -> _Dimension:
        analysis = analyze_scripts(text)
        if analysis.total_letters == 0:
            return _Dimension(
                0.0,
                [
                    PurityViolation(
                        violation_type=ViolationType.FOREIGN_FRAGMENT,
                        end=len(text),
                        content=text,
                        severity=Severity.CRITICAL,
                        suggested_fix="Provide text in the target language",
                    )
                ],
            )

        target_script = LANGUAGE_SCRIPTS[target_language]
        violations = [
            PurityViolation(
                violation_type=(
                    ViolationType.FOREIGN_FRAGMENT
                    if run.script in (ScriptClass.ARABIC, ScriptClass.LATIN)
                    else ViolationType.MIXED_SCRIPTS
                ),
                start=run.start,
                end=run.end,
                content=run.text,
                severity=Severity.CRITICAL,
                suggested_fix="Remove or translate the foreign fragment",
            )
            for run in iter_script_runs(text)
            if run.script is not target_script
        ]

        target_share = analysis.percentage_for(target_language)
        foreign_share = analysis.foreign_percentage(target_language)
        if analysis.other_count:
            score = 0.0
        elif target_share < MINIMUM_TARGET_SHARE and foreign_share > MAXIMUM_FOREIGN_SHARE:
            score = 0.0
        else:
            target_count = (
                analysis.arabic_count
                if target_language is Language.ARABIC
                else analysis.latin_count
            )
            score = 100.0 * target_count / analysis.total_letters
            if violations:
                score = min(score, _IMPERFECT_CEILING)
        return _Dimension(score, violations)

    def _terminology(
        self, text: str, target_language: Language, domain: LegalDomain | None
    ) -> _Dimension:
        validation = self.terminology.validate_consistency(text, target_language, domain)
        violations = [
            PurityViolation(
                violation_type=ViolationType.TERMINOLOGY,
                start=finding.start,
                end=finding.end,
                content=finding.found,
                severity=Severity.MEDIUM,
                suggested_fix=finding.canonical,
                confidence=finding.confidence,
            )
            for finding in validation.inconsistencies
        ]
        return _Dimension(100.0 * validation.score, violations)

    def _encoding(self, text: str) -> _Dimension:
        issues = validate_encoding(text)
        violations = [
            PurityViolation(
                violation_type=(
                    ViolationType.CORRUPTED_CHARACTER
                    if issue.issue_type in _CORRUPTION_TYPES
                    else ViolationType.ENCODING_ERROR
                ),
                start=issue.start,
                end=issue.end,
                content=issue.content,
                severity=Severity.HIGH,
                suggested_fix=f"Fix {issue.issue_type.replace('_', ' ')}",
            )
            for issue in issues
        ]
        return _Dimension(max(0.0, 100.0 - ENCODING_ISSUE_PENALTY * len(issues)), violations)

    def _coherence(self, text: str) -> _Dimension:
        runs = [
            r for r in iter_script_runs(text) if r.script in (ScriptClass.ARABIC, ScriptClass.LATIN)
        ]
        violations = [
            PurityViolation(
                violation_type=ViolationType.MIXED_SCRIPTS,
                start=middle.start,
                end=middle.end,
                content=middle.text,
                severity=Severity.HIGH,
                suggested_fix="Rewrite the sentence in one language",
            )
            for before, middle, after in zip(runs, runs[1:], runs[2:])
            if before.script is after.script and middle.script is not before.script
        ]
        return _Dimension(0.0 if violations else 100.0, violations)

    def _ui_artifacts(self, text: str) -> _Dimension:
        violations = [
            PurityViolation(
                violation_type=ViolationType.UI_ARTIFACT,
                start=start,
                end=end,
                content=text[start:end],
                severity=Severity.CRITICAL,
                suggested_fix="Remove interface artifact",
            )
            for rule in self.cleaner.artifact_rules
            for start, end in rule.find(text)
        ]
        return _Dimension(0.0 if violations else 100.0, violations)

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    @staticmethod
    def _recommendations(
        violations: tuple[PurityViolation, ...],
    ) -> list[QualityRecommendation]:
        found = {v.violation_type for v in violations}
        recommendations = []

        cleaning = found & {
            ViolationType.MIXED_SCRIPTS,
            ViolationType.FOREIGN_FRAGMENT,
            ViolationType.UI_ARTIFACT,
        }
        if cleaning:
            recommendations.append(
                QualityRecommendation(
                    recommendation_type=RecommendationType.CONTENT_CLEANING,
                    priority=Severity.CRITICAL,
                    description="Remove foreign fragments and interface artifacts",
                    issue_types=tuple(sorted(t.value for t in cleaning)),
                )
            )
        encoding = found & {ViolationType.ENCODING_ERROR, ViolationType.CORRUPTED_CHARACTER}
        if encoding:
            recommendations.append(
                QualityRecommendation(
                    recommendation_type=RecommendationType.ENCODING_FIX,
                    priority=Severity.HIGH,
                    description="Repair character encoding",
                    issue_types=tuple(sorted(t.value for t in encoding)),
                )
            )
        if ViolationType.TERMINOLOGY in found:
            recommendations.append(
                QualityRecommendation(
                    recommendation_type=RecommendationType.TERMINOLOGY_UPDATE,
                    priority=Severity.MEDIUM,
                    description="Use canonical legal terminology",
                    issue_types=(ViolationType.TERMINOLOGY.value,),
                )
            )
        return recommendations
