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

"""Script and word analysis for French/Arabic text.

Character-range heuristics that classify every character by script and
score words by language affinity. Everything here is a pure function
without external dependencies.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum

from puretrans.core.models import Language

logger = logging.getLogger(__name__)

ARABIC_RANGES: tuple[tuple[int, int], ...] = (
    (0x0600, 0x06FF),
    (0x0750, 0x077F),
    (0x08A0, 0x08FF),
    (0xFB50, 0xFDFF),
    (0xFE70, 0xFEFF),
)

LATIN_RANGES: tuple[tuple[int, int], ...] = (
    (0x0041, 0x005A),
    (0x0061, 0x007A),
    (0x00C0, 0x00FF),
    (0x0100, 0x017F),
    (0x0180, 0x024F),
    (0x1E00, 0x1EFF),
)

CYRILLIC_RANGES: tuple[tuple[int, int], ...] = (
    (0x0400, 0x04FF),
    (0x0500, 0x052F),
    (0x2DE0, 0x2DFF),
    (0xA640, 0xA69F),
)

# Arabic comma, semicolon, question mark, and percent/decimal signs
_ARABIC_PUNCTUATION = frozenset("،؛؟٪٫٬٭۔")
_LATIN_EXCLUDED = frozenset("×÷")
_BOM = "\ufeff"

ARABIC_INDICATORS: frozenset[str] = frozenset(
    {
        "في", "من", "إلى", "على", "هذا", "هذه", "التي", "الذي", "كان", "كانت",
        "يكون", "تكون", "قانون", "مادة", "فقرة", "باب", "فصل", "محكمة", "قاضي",
        "محامي", "دعوى", "حكم", "قرار", "نص", "أحكام", "إجراءات", "جنائية", "مدنية",
    }
)  # fmt: skip

FRENCH_INDICATORS: frozenset[str] = frozenset(
    {
        "le", "la", "les", "de", "du", "des", "un", "une", "dans", "sur", "avec",
        "pour", "par", "est", "sont", "était", "étaient", "loi", "article", "code",
        "tribunal", "juge", "avocat", "procédure", "civil", "pénal", "droit",
        "justice", "juridique", "légal", "règlement", "décision",
    }
)  # fmt: skip

# Prefixes glued to Arabic words: conjunctions, prepositions, the article
_ARABIC_PREFIXES: tuple[str, ...] = ("وال", "بال", "فال", "كال", "لل", "ال", "و", "ب", "ل", "ف")

_WORD_RE = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")
_MOJIBAKE_RE = re.compile("[\u00c3\u00c2\u00d8\u00d9][\u0080-\u00bf]|\u00e2\u20ac")
_BROKEN_WORD_RE = re.compile(r"(?<=[^\W\d_])\?(?=[^\W\d_])")


class ScriptClass(str, Enum):
    """Script class of a single character."""

    ARABIC = "arabic"
    LATIN = "latin"
    CYRILLIC = "cyrillic"
    OTHER_LETTER = "other_letter"
    DIGIT = "digit"
    COMMON = "common"

    @property
    def is_letter(self) -> bool:
        """Whether the class counts toward script percentages."""
        return self in (
            ScriptClass.ARABIC,
            ScriptClass.LATIN,
            ScriptClass.CYRILLIC,
            ScriptClass.OTHER_LETTER,
        )


class DominantScript(str, Enum):
    """Overall script verdict for a text."""

    ARABIC = "arabic"
    LATIN = "latin"
    MIXED = "mixed"
    UNKNOWN = "unknown"
    NONE = "none"


LANGUAGE_SCRIPTS: dict[Language, ScriptClass] = {
    Language.ARABIC: ScriptClass.ARABIC,
    Language.FRENCH: ScriptClass.LATIN,
}


def _in_ranges(code: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(start <= code <= end for start, end in ranges)


def classify_char(ch: str) -> ScriptClass:
    """Classify a single character by script.

    Args:
        ch: One character

    Returns:
        ScriptClass of the character

    Example:
        >>> classify_char("ب")
        <ScriptClass.ARABIC: 'arabic'>
        >>> classify_char("é")
        <ScriptClass.LATIN: 'latin'>
    """
    code = ord(ch)
    category = unicodedata.category(ch)

    if category == "Nd":
        return ScriptClass.DIGIT
    if _in_ranges(code, ARABIC_RANGES):
        if ch in _ARABIC_PUNCTUATION or category[0] in "PSZC":
            return ScriptClass.COMMON
        return ScriptClass.ARABIC
    if _in_ranges(code, LATIN_RANGES) and ch not in _LATIN_EXCLUDED:
        return ScriptClass.LATIN
    if _in_ranges(code, CYRILLIC_RANGES):
        return ScriptClass.CYRILLIC
    if category.startswith("L"):
        return ScriptClass.OTHER_LETTER
    return ScriptClass.COMMON


@dataclass(frozen=True)
class ScriptRun:
    """A maximal run of letters sharing one script.

    Attributes:
        script: Script class of the run
        start: Start offset (inclusive)
        end: End offset (exclusive)
        text: Run content
    """

    script: ScriptClass
    start: int
    end: int
    text: str


def iter_script_runs(text: str) -> list[ScriptRun]:
    """Split text into maximal same-script letter runs.

    Combining marks stay attached to the run they follow; digits,
    punctuation, and whitespace end a run.

    Args:
        text: Text to split

    Returns:
        Runs in text order
    """
    runs: list[ScriptRun] = []
    current: ScriptClass | None = None
    start = 0

    for i, ch in enumerate(text):
        cls = classify_char(ch)
        if not cls.is_letter and current is not None and unicodedata.category(ch) == "Mn":
            continue
        if cls.is_letter:
            if cls != current:
                if current is not None:
                    runs.append(ScriptRun(current, start, i, text[start:i]))
                current = cls
                start = i
        elif current is not None:
            runs.append(ScriptRun(current, start, i, text[start:i]))
            current = None

    if current is not None:
        runs.append(ScriptRun(current, start, len(text), text[start:]))
    return runs


@dataclass
class ScriptAnalysis:
    """Per-script character statistics of a text."""

    total_characters: int = 0
    total_letters: int = 0
    arabic_count: int = 0
    latin_count: int = 0
    cyrillic_count: int = 0
    other_count: int = 0
    arabic_percentage: float = 0.0
    latin_percentage: float = 0.0
    other_percentage: float = 0.0
    dominant_script: DominantScript = DominantScript.NONE
    mixed_spans: list[ScriptRun] = field(default_factory=list)
    script_change_count: int = 0
    is_pure_script: bool = False

    def percentage_for(self, language: Language) -> float:
        """Share of letters written in ``language``'s script."""
        if language is Language.ARABIC:
            return self.arabic_percentage
        return self.latin_percentage

    def foreign_percentage(self, language: Language) -> float:
        """Share of letters written in any other script."""
        return round(100.0 - self.percentage_for(language), 2) if self.total_letters else 0.0


def analyze_scripts(text: str) -> ScriptAnalysis:
    """Compute script statistics for text.

    Non-Latin, non-Arabic letters (Cyrillic included) count toward the
    "other" share.

    Args:
        text: Text to analyze

    Returns:
        ScriptAnalysis; zeroed for empty input

    Example:
        >>> analysis = analyze_scripts("عقد البيع Contrat")
        >>> analysis.dominant_script
        <DominantScript.MIXED: 'mixed'>
    """
    analysis = ScriptAnalysis(total_characters=len(text))
    if not text:
        return analysis

    runs = iter_script_runs(text)
    for run in runs:
        letters = sum(1 for ch in run.text if unicodedata.category(ch) != "Mn")
        if run.script is ScriptClass.ARABIC:
            analysis.arabic_count += letters
        elif run.script is ScriptClass.LATIN:
            analysis.latin_count += letters
        elif run.script is ScriptClass.CYRILLIC:
            analysis.cyrillic_count += letters
            analysis.other_count += letters
        else:
            analysis.other_count += letters

    total = analysis.arabic_count + analysis.latin_count + analysis.other_count
    analysis.total_letters = total
    if total == 0:
        return analysis

    analysis.arabic_percentage = round(100.0 * analysis.arabic_count / total, 2)
    analysis.latin_percentage = round(100.0 * analysis.latin_count / total, 2)
    analysis.other_percentage = round(100.0 * analysis.other_count / total, 2)

    if analysis.arabic_percentage > 70:
        analysis.dominant_script = DominantScript.ARABIC
    elif analysis.latin_percentage > 70:
        analysis.dominant_script = DominantScript.LATIN
    elif analysis.arabic_percentage > 30 and analysis.latin_percentage > 30:
        analysis.dominant_script = DominantScript.MIXED
    else:
        analysis.dominant_script = DominantScript.UNKNOWN

    if analysis.dominant_script is DominantScript.ARABIC:
        main = ScriptClass.ARABIC
    elif analysis.dominant_script is DominantScript.LATIN:
        main = ScriptClass.LATIN
    else:
        main = (
            ScriptClass.ARABIC
            if analysis.arabic_count >= analysis.latin_count
            else ScriptClass.LATIN
        )
    analysis.mixed_spans = [run for run in runs if run.script is not main]
    analysis.script_change_count = sum(
        1 for prev, cur in zip(runs, runs[1:]) if prev.script is not cur.script
    )
    analysis.is_pure_script = (
        analysis.script_change_count == 0 and analysis.other_percentage < 5
    )
    return analysis


def arabic_word_forms(word: str) -> list[str]:
    """Return the word and its forms without common attached prefixes.

    Example:
        >>> arabic_word_forms("والقانون")
        ['والقانون', 'قانون', 'القانون']
    """
    forms = [word]
    for prefix in _ARABIC_PREFIXES:
        if word.startswith(prefix) and len(word) - len(prefix) >= 2:
            stem = word[len(prefix) :]
            if stem not in forms:
                forms.append(stem)
            if prefix.endswith("ال") and prefix != "ال" and "ال" + stem not in forms:
                forms.append("ال" + stem)
    return forms


def tokenize_words(text: str) -> list[str]:
    """Split text into letter words (digits and punctuation dropped)."""
    return _WORD_RE.findall(text)


@dataclass
class WordAnalysis:
    """Word-level language affinity.

    Attributes:
        word_count: Number of words found
        french_score: +2 per French indicator word
        arabic_score: +2 per Arabic indicator word
        recognized_ratio: Indicator words over all words
        confidence: Confidence in the word-level verdict (0.0-1.0)
    """

    word_count: int = 0
    french_score: int = 0
    arabic_score: int = 0
    recognized_ratio: float = 0.0
    confidence: float = 0.0

    def score_for(self, language: Language) -> int:
        """Affinity score for ``language``."""
        return self.arabic_score if language is Language.ARABIC else self.french_score


def analyze_words(text: str) -> WordAnalysis:
    """Score words by language affinity using indicator lists.

    Args:
        text: Text to analyze

    Returns:
        WordAnalysis; zeroed for empty input
    """
    words = tokenize_words(text)
    analysis = WordAnalysis(word_count=len(words))
    if not words:
        return analysis

    recognized = 0
    for word in words:
        lowered = word.lower()
        if lowered in FRENCH_INDICATORS:
            analysis.french_score += 2
            recognized += 1
        elif any(form in ARABIC_INDICATORS for form in arabic_word_forms(word)):
            analysis.arabic_score += 2
            recognized += 1

    analysis.recognized_ratio = round(recognized / len(words), 4)
    if recognized:
        analysis.confidence = round(min(1.0, 0.5 + analysis.recognized_ratio), 4)
    return analysis


@dataclass
class LanguageDetection:
    """Combined script and word verdict.

    Attributes:
        language: Detected language, None when mixed or unknown
        label: "fr", "ar", "mixed", or "unknown"
        confidence: Confidence (0.1-1.0)
        scripts: Underlying script analysis
        words: Underlying word analysis
    """

    language: Language | None
    label: str
    confidence: float
    scripts: ScriptAnalysis
    words: WordAnalysis


# Weights for combining script share and word affinity
SCRIPT_WEIGHT = 0.7
WORD_WEIGHT = 0.3
DETECTION_THRESHOLD = 30.0


def detect_language(text: str) -> LanguageDetection:
    """Detect whether text is French, Arabic, mixed, or unknown.

    Combines the script share (weight 0.7) and the word affinity score
    (weight 0.3). A language wins when its combined score exceeds 30.

    Args:
        text: Text to analyze

    Returns:
        LanguageDetection

    Example:
        >>> detect_language("Le tribunal a rendu sa décision.").label
        'fr'
        >>> detect_language("قررت المحكمة").label
        'ar'
    """
    scripts = analyze_scripts(text)
    words = analyze_words(text)

    if scripts.total_letters == 0:
        return LanguageDetection(None, "unknown", 0.1, scripts, words)

    combined = {
        lang: SCRIPT_WEIGHT * scripts.percentage_for(lang) + WORD_WEIGHT * words.score_for(lang)
        for lang in Language
    }

    if scripts.dominant_script is DominantScript.MIXED:
        language: Language | None = None
        label = "mixed"
    else:
        best = max(combined, key=lambda lang: combined[lang])
        if combined[best] > DETECTION_THRESHOLD:
            language = best
            label = best.value
        else:
            language = None
            label = "unknown"

    reference = language or max(combined, key=lambda lang: combined[lang])
    confidence = 0.5
    confidence += min(0.4, scripts.percentage_for(reference) / 100)
    confidence += min(0.1, words.score_for(reference) / 20)
    confidence -= min(0.3, 0.05 * len(scripts.mixed_spans))
    if len(text.strip()) < 10:
        confidence -= 0.2
    confidence = round(max(0.1, min(1.0, confidence)), 4)

    logger.debug("Detected %s (confidence %.2f)", label, confidence)
    return LanguageDetection(language, label, confidence, scripts, words)


@dataclass(frozen=True)
class EncodingIssue:
    """An encoding problem found in text.

    Attributes:
        issue_type: replacement_character, control_character,
            byte_order_mark, unpaired_surrogate, private_use,
            not_normalized, mojibake, or broken_word
        start: Start offset
        end: End offset
        content: Offending characters
    """

    issue_type: str
    start: int
    end: int
    content: str


def validate_encoding(text: str) -> list[EncodingIssue]:
    """Find encoding problems in text.

    Args:
        text: Text to check

    Returns:
        Issues in text order (``not_normalized`` reported once, last)
    """
    issues: list[EncodingIssue] = []

    for i, ch in enumerate(text):
        code = ord(ch)
        if ch == "\ufffd":
            issues.append(EncodingIssue("replacement_character", i, i + 1, ch))
        elif ch == _BOM:
            issues.append(EncodingIssue("byte_order_mark", i, i + 1, ch))
        elif 0xD800 <= code <= 0xDFFF:
            issues.append(EncodingIssue("unpaired_surrogate", i, i + 1, ch))
        elif 0xE000 <= code <= 0xF8FF:
            issues.append(EncodingIssue("private_use", i, i + 1, ch))
        elif unicodedata.category(ch) == "Cc" and ch not in "\t\n\r":
            issues.append(EncodingIssue("control_character", i, i + 1, ch))

    for match in _MOJIBAKE_RE.finditer(text):
        issues.append(EncodingIssue("mojibake", match.start(), match.end(), match.group()))
    for match in _BROKEN_WORD_RE.finditer(text):
        issues.append(EncodingIssue("broken_word", match.start(), match.end(), match.group()))

    issues.sort(key=lambda issue: issue.start)

    has_surrogate = any(issue.issue_type == "unpaired_surrogate" for issue in issues)
    if not has_surrogate and unicodedata.normalize("NFC", text) != text:
        issues.append(EncodingIssue("not_normalized", 0, len(text), ""))
    return issues
