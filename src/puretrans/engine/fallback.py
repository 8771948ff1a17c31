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

"""Fallback content generation.

When no translation method yields pure text, the pipeline still has to
answer in the target language. The generator infers what the source text
is about (legal domain, key concepts, complexity, audience) and produces
a professional statement from target-language templates. It never
copies source text and never reports failures in its output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from puretrans.core.models import Language, LegalDomain, TranslationMethod, TranslationRequest
from puretrans.helpers.detection import LANGUAGE_SCRIPTS, classify_char
from puretrans.terminology.manager import LegalTerminologyManager

logger = logging.getLogger(__name__)


class ComplexityLevel(str, Enum):
    """How demanding the source text is."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    EXPERT = "expert"


class AudienceType(str, Enum):
    """Who the source text appears to address."""

    GENERAL_PUBLIC = "general_public"
    LEGAL_PROFESSIONAL = "legal_professional"
    LAWYER = "lawyer"


@dataclass(frozen=True)
class LegalConcept:
    """A legal keyword found in the source text."""

    term: str
    domain: LegalDomain
    language: Language


@dataclass
class ContentIntent:
    """What a source text is about."""

    category: LegalDomain
    concepts: list[LegalConcept] = field(default_factory=list)
    complexity: ComplexityLevel = ComplexityLevel.SIMPLE
    audience: AudienceType = AudienceType.GENERAL_PUBLIC
    confidence: float = 0.3


@dataclass
class FallbackContent:
    """Generated replacement for a translation.

    Attributes:
        content: Target-language statement
        confidence: Confidence in the statement (0.3-0.9)
        method: FALLBACK_GENERATED, TEMPLATE or EMERGENCY_GENERIC
        intent: Intent the statement was built from
        alternatives: Other acceptable statements
        metadata: Generation details
    """

    content: str
    confidence: float
    method: TranslationMethod
    intent: ContentIntent
    alternatives: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


# Templates per domain, ordered SIMPLE, MODERATE, COMPLEX, EXPERT
FRENCH_TEMPLATES: dict[LegalDomain, tuple[str, ...]] = {
    LegalDomain.CIVIL: (
        "Ce contenu concerne les dispositions du code civil algérien",
        "Conformément au code civil, les obligations contractuelles doivent être respectées",
        "Dans le cadre du droit civil algérien, les dispositions pertinentes s'appliquent",
        "Cette matière est soumise aux dispositions du code civil et aux textes complémentaires",
    ),
    LegalDomain.CRIMINAL: (
        "Ce contenu concerne les dispositions du code pénal algérien",
        "Conformément au code de procédure pénale, les dispositions prévues s'appliquent",
        "Dans le cadre du droit pénal algérien, les garanties légales doivent être respectées",
        "Cette matière est soumise aux dispositions du code pénal et aux lois spéciales",
    ),
    LegalDomain.COMMERCIAL: (
        "Ce contenu concerne les dispositions du code de commerce algérien",
        "Conformément au code de commerce, les dispositions relatives aux activités "
        "commerciales s'appliquent",
        "Dans le cadre de la législation commerciale algérienne, les obligations "
        "professionnelles doivent être respectées",
        "Cette matière est soumise aux dispositions du code de commerce et aux règlements "
        "complémentaires",
    ),
    LegalDomain.ADMINISTRATIVE: (
        "Ce contenu concerne les dispositions du droit administratif algérien",
        "Conformément au droit administratif, les dispositions relatives à l'administration "
        "publique s'appliquent",
        "Dans le cadre de la législation administrative algérienne, les principes généraux "
        "doivent être respectés",
        "Cette matière est soumise aux dispositions du droit administratif et aux règlements "
        "d'exécution",
    ),
    LegalDomain.FAMILY: (
        "Ce contenu concerne les dispositions du code de la famille algérien",
        "Conformément au code de la famille, les dispositions relatives au statut personnel "
        "s'appliquent",
        "Dans le cadre du code de la famille algérien, l'intérêt supérieur de la famille "
        "doit être pris en compte",
        "Cette matière est soumise aux dispositions du code de la famille et aux textes connexes",
    ),
    LegalDomain.PROCEDURAL: (
        "Ce contenu concerne les dispositions du code de procédure civile et administrative",
        "Conformément au code de procédure, les garanties procédurales doivent être respectées",
        "Dans le cadre du droit procédural algérien, les règles de procédure s'appliquent",
        "Cette matière est soumise aux dispositions des codes de procédure et aux règlements "
        "complémentaires",
    ),
}

ARABIC_TEMPLATES: dict[LegalDomain, tuple[str, ...]] = {
    LegalDomain.CIVIL: (
        "يتعلق هذا المحتوى بأحكام القانون المدني الجزائري",
        "وفقاً لأحكام القانون المدني، يجب مراعاة الالتزامات التعاقدية",
        "في إطار القانون المدني الجزائري، تطبق الأحكام ذات الصلة",
        "يخضع هذا الموضوع لأحكام القانون المدني والتشريعات المكملة له",
    ),
    LegalDomain.CRIMINAL: (
        "يتعلق هذا المحتوى بأحكام قانون العقوبات الجزائري",
        "وفقاً لقانون الإجراءات الجزائية، تطبق الأحكام المنصوص عليها",
        "في إطار القانون الجزائي الجزائري، يجب احترام الضمانات القانونية",
        "يخضع هذا الموضوع لأحكام قانون العقوبات والقوانين الخاصة",
    ),
    LegalDomain.COMMERCIAL: (
        "يتعلق هذا المحتوى بأحكام القانون التجاري الجزائري",
        "وفقاً للقانون التجاري، تطبق الأحكام المتعلقة بالأنشطة التجارية",
        "في إطار التشريع التجاري الجزائري، يجب مراعاة الالتزامات المهنية",
        "يخضع هذا الموضوع لأحكام القانون التجاري والتنظيمات المكملة",
    ),
    LegalDomain.ADMINISTRATIVE: (
        "يتعلق هذا المحتوى بأحكام القانون الإداري الجزائري",
        "وفقاً للقانون الإداري، تطبق الأحكام المتعلقة بالإدارة العمومية",
        "في إطار التشريع الإداري الجزائري، يجب احترام المبادئ العامة",
        "يخضع هذا الموضوع لأحكام القانون الإداري والتنظيمات التنفيذية",
    ),
    LegalDomain.FAMILY: (
        "يتعلق هذا المحتوى بأحكام قانون الأسرة الجزائري",
        "وفقاً لقانون الأسرة، تطبق الأحكام المتعلقة بالأحوال الشخصية",
        "في إطار قانون الأسرة الجزائري، يجب مراعاة المصلحة العليا للأسرة",
        "يخضع هذا الموضوع لأحكام قانون الأسرة والتشريعات ذات الصلة",
    ),
    LegalDomain.PROCEDURAL: (
        "يتعلق هذا المحتوى بأحكام قانون الإجراءات المدنية والإدارية",
        "وفقاً لقانون الإجراءات، يجب احترام الضمانات الإجرائية",
        "في إطار قانون الإجراءات الجزائري، تطبق القواعد الإجرائية",
        "يخضع هذا الموضوع لأحكام قوانين الإجراءات والتنظيمات المكملة",
    ),
}

TEMPLATES: dict[Language, dict[LegalDomain, tuple[str, ...]]] = {
    Language.FRENCH: FRENCH_TEMPLATES,
    Language.ARABIC: ARABIC_TEMPLATES,
}

GENERIC_TEMPLATES: dict[Language, str] = {
    Language.FRENCH: "Contenu juridique professionnel conforme au droit algérien",
    Language.ARABIC: "هذا محتوى قانوني مهني وفقاً للقانون الجزائري",
}

CONCEPT_SUFFIXES: dict[Language, str] = {
    Language.FRENCH: " et concerne particulièrement {term}.",
    Language.ARABIC: " ويتعلق بشكل خاص بـ{term}.",
}

EMERGENCY_CONTENT: dict[Language, tuple[str, ...]] = {
    Language.FRENCH: (
        "Contenu juridique disponible en français",
        "Veuillez vous référer aux textes légaux originaux",
        "Pour des informations précises, veuillez consulter un spécialiste juridique",
        "Ce contenu est soumis au droit algérien",
    ),
    Language.ARABIC: (
        "المحتوى القانوني متاح باللغة العربية",
        "يرجى الرجوع إلى النصوص القانونية الأصلية",
        "للحصول على معلومات دقيقة، يرجى استشارة مختص قانوني",
        "هذا المحتوى يخضع للقانون الجزائري",
    ),
}

LEGAL_CONCEPT_KEYWORDS: dict[LegalDomain, tuple[str, ...]] = {
    LegalDomain.CIVIL: (
        "عقد", "التزام", "مسؤولية", "ضرر", "تعويض", "ملكية", "حق عيني",
        "contrat", "obligation", "responsabilité", "dommage", "indemnisation",
        "propriété", "droit réel",
    ),  # fmt: skip
    LegalDomain.CRIMINAL: (
        "جريمة", "جنحة", "مخالفة", "عقوبة", "متهم", "ضحية", "محاكمة",
        "crime", "délit", "contravention", "peine", "accusé", "victime", "procès",
    ),  # fmt: skip
    LegalDomain.COMMERCIAL: (
        "شركة", "تاجر", "إفلاس", "سجل تجاري", "عمل تجاري", "منافسة",
        "société", "commerçant", "faillite", "registre de commerce",
        "acte de commerce", "concurrence",
    ),  # fmt: skip
    LegalDomain.ADMINISTRATIVE: (
        "قرار إداري", "طعن", "مجلس الدولة", "إدارة", "خدمة عمومية",
        "décision administrative", "recours", "conseil d'état", "administration",
        "service public",
    ),  # fmt: skip
    LegalDomain.FAMILY: (
        "زواج", "طلاق", "نفقة", "حضانة", "ميراث", "وصية",
        "mariage", "divorce", "pension alimentaire", "garde", "succession", "testament",
    ),  # fmt: skip
    LegalDomain.PROCEDURAL: (
        "دعوى", "حكم", "قرار", "استئناف", "نقض", "تنفيذ", "إجراءات",
        "action", "jugement", "arrêt", "appel", "cassation", "exécution", "procédure",
    ),  # fmt: skip
}

_COMPLEXITY_ORDER = list(ComplexityLevel)


def _keyword_regex(keyword: str) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(w) for w in keyword.split())
    if classify_char(keyword[0]) is LANGUAGE_SCRIPTS[Language.ARABIC]:
        # Arabic keywords may carry an attached article or conjunction
        return re.compile(rf"(?<!\w)(?:وال|بال|لل|ال|و|ب|ل)?{body}(?!\w)")
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


_KEYWORD_PATTERNS: list[tuple[LegalDomain, str, Language, re.Pattern[str]]] = [
    (
        domain,
        keyword,
        Language.ARABIC
        if classify_char(keyword[0]) is LANGUAGE_SCRIPTS[Language.ARABIC]
        else Language.FRENCH,
        _keyword_regex(keyword),
    )
    for domain, keywords in LEGAL_CONCEPT_KEYWORDS.items()
    for keyword in keywords
]


def determine_complexity(text: str, concept_count: int) -> ComplexityLevel:
    """Classify text complexity by length and concept count."""
    length = len(text)
    if length < 50 and concept_count <= 1:
        return ComplexityLevel.SIMPLE
    if length < 200 and concept_count <= 3:
        return ComplexityLevel.MODERATE
    if length < 500 and concept_count <= 5:
        return ComplexityLevel.COMPLEX
    return ComplexityLevel.EXPERT


def determine_audience(concept_count: int) -> AudienceType:
    """Guess the audience from terminology density."""
    if concept_count == 0:
        return AudienceType.GENERAL_PUBLIC
    if concept_count <= 2:
        return AudienceType.LEGAL_PROFESSIONAL
    return AudienceType.LAWYER


class FallbackGenerator:
    """Produces target-language content when translation fails.

    Example:
        >>> generator = FallbackGenerator()
        >>> content = generator.emergency(Language.FRENCH)
        >>> content.content
        'Contenu juridique disponible en français'
    """

    def __init__(self, terminology: LegalTerminologyManager | None = None) -> None:
        """Initialize generator.

        Args:
            terminology: Used to render detected concepts in the target language
        """
        self.terminology = terminology or LegalTerminologyManager()

    def analyze_intent(self, text: str, source_language: Language | None = None) -> ContentIntent:
        """Infer the legal domain and concepts of a text.

        Args:
            text: Source text (cleaned or not)
            source_language: Restrict keyword matching to this language

        Returns:
            ContentIntent; GENERAL with confidence 0.3 when no keyword matches
        """
        concepts: list[LegalConcept] = []
        scores: dict[LegalDomain, int] = {}
        for domain, keyword, language, regex in _KEYWORD_PATTERNS:
            if source_language is not None and language is not source_language:
                continue
            if regex.search(text):
                concepts.append(LegalConcept(keyword, domain, language))
                scores[domain] = scores.get(domain, 0) + 1

        if scores:
            # Ties go to the domain listed first
            category = max(scores, key=lambda d: scores[d])
            confidence = min(0.9, 0.5 + 0.1 * scores[category])
            # Concepts of the winning domain first
            concepts.sort(key=lambda c: c.domain is not category)
        else:
            category = LegalDomain.GENERAL
            confidence = 0.3

        return ContentIntent(
            category=category,
            concepts=concepts,
            complexity=determine_complexity(text, len(concepts)),
            audience=determine_audience(len(concepts)),
            confidence=confidence,
        )

    def generate(self, request: TranslationRequest, reason: str = "") -> FallbackContent:
        """Generate fallback content for a failed request.

        Args:
            request: Request whose translation failed
            reason: Failure reason, kept in metadata only

        Returns:
            FallbackContent in the request's target language
        """
        target = request.target_language
        intent = self.analyze_intent(request.text, request.source_language)
        if intent.category is LegalDomain.GENERAL and request.context is not None:
            hinted = request.context.legal_domain
            if hinted is not None and hinted in TEMPLATES[target]:
                intent.category = hinted

        templates = TEMPLATES[target].get(intent.category)
        if templates:
            index = min(_COMPLEXITY_ORDER.index(intent.complexity), len(templates) - 1)
            content = templates[index]
            alternatives = [t for t in templates if t != content][:3]
        else:
            content = GENERIC_TEMPLATES[target]
            alternatives = []

        term = self._render_concept(intent, request.source_language, target)
        if term:
            content = content + CONCEPT_SUFFIXES[target].format(term=term)
            method = TranslationMethod.FALLBACK_GENERATED
        else:
            method = TranslationMethod.TEMPLATE

        confidence = intent.confidence
        if len(request.text) < 10:
            confidence -= 0.2
        if intent.concepts:
            confidence += min(0.2, 0.05 * len(intent.concepts))
        else:
            confidence -= 0.1

        logger.info(
            "Generated %s fallback for %s (%s, %s)",
            method.value,
            request.request_id,
            intent.category.value,
            intent.complexity.value,
        )
        return FallbackContent(
            content=content,
            confidence=round(max(0.3, min(0.9, confidence)), 4),
            method=method,
            intent=intent,
            alternatives=alternatives,
            metadata={
                "original_length": len(request.text),
                "failure_reason": reason or "unknown",
                "intent_detected": intent.category.value,
            },
        )

    def generate_professional_content(self, domain: LegalDomain, target_language: Language) -> str:
        """Standard statement for a legal domain."""
        templates = TEMPLATES[target_language].get(domain)
        return templates[0] if templates else GENERIC_TEMPLATES[target_language]

    def emergency(self, target_language: Language, reason: str = "") -> FallbackContent:
        """Domain-neutral content for unrecoverable failures."""
        texts = EMERGENCY_CONTENT[target_language]
        logger.warning("Emergency content produced for %s", target_language.value)
        return FallbackContent(
            content=texts[0],
            confidence=0.3,
            method=TranslationMethod.EMERGENCY_GENERIC,
            intent=ContentIntent(category=LegalDomain.GENERAL),
            alternatives=list(texts[1:]),
            metadata={"emergency": True, "failure_reason": reason or "critical failure"},
        )

    def _render_concept(
        self, intent: ContentIntent, source: Language, target: Language
    ) -> str | None:
        for concept in intent.concepts:
            if concept.language is target:
                return concept.term
            hit = self.terminology.lookup(concept.term, source, target, concept.domain)
            if hit is not None and not hit.is_suggestion:
                return hit.target_term
        return None
