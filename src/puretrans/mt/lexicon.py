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

"""Lexicon-driven translation backend.

Translates legal text offline by rendering known phrases first (longest
first), then single words. Arabic words are matched with and without
their attached prefixes; French elisions are split before lookup.
Words the lexicon does not know are left untouched and reported, so a
partial rendering is visible to the purity gate instead of hidden.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache

from puretrans.cleaning.cleaner import collapse_whitespace
from puretrans.core.models import Language, LegalDomain
from puretrans.helpers.detection import LANGUAGE_SCRIPTS, classify_char
from puretrans.mt.base import BackendResult, BaseTranslationBackend
from puretrans.terminology.manager import normalize_term

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")

# Attached Arabic prefixes and their French rendering, longest first
_ARABIC_PREFIX_RENDERINGS: tuple[tuple[str, str], ...] = (
    ("وال", "et"),
    ("بال", "par"),
    ("فال", ""),
    ("كال", "comme"),
    ("لل", "pour"),
    ("ال", ""),
    ("و", "et"),
    ("ب", "par"),
    ("ل", "pour"),
    ("ف", ""),
)

# Elided French particles and their Arabic rendering
_FRENCH_ELISIONS: dict[str, str] = {
    "l": "",
    "d": "من",
    "qu": "",
    "n": "",
    "s": "",
    "j": "",
    "c": "",
}

AR_FR_PRIMARY: dict[str, str] = {
    # Phrases
    "وفقا للقانون": "conformément à la loi",
    "بموجب هذا القانون": "en vertu de la présente loi",
    "في إطار القانون": "dans le cadre de la loi",
    "حسب المادة": "selon l'article",
    "المحكمة العليا": "la cour suprême",
    "مجلس الدولة": "le conseil d'état",
    "الجريدة الرسمية": "le journal officiel",
    "القانون المدني": "code civil",
    "قانون العقوبات": "code pénal",
    "قانون الأسرة": "code de la famille",
    "قانون الإجراءات الجزائية": "code de procédure pénale",
    "قانون الإجراءات الجنائية": "code de procédure pénale",
    "قانون الإجراءات المدنية والإدارية": "code de procédure civile et administrative",
    # Terms
    "عقد": "contrat",
    "التزام": "obligation",
    "ضرر": "dommage",
    "تعويض": "indemnisation",
    "مسؤولية": "responsabilité",
    "جريمة": "infraction",
    "جناية": "crime",
    "جنحة": "délit",
    "مخالفة": "contravention",
    "عقوبة": "peine",
    "إجراءات": "procédure",
    "دعوى": "action en justice",
    "استئناف": "appel",
    "نقض": "cassation",
    "تنفيذ": "exécution",
    "حكم": "jugement",
    "قرار": "décision",
    "شركة": "société",
    "إفلاس": "faillite",
    "تاجر": "commerçant",
    "زواج": "mariage",
    "طلاق": "divorce",
    "نفقة": "pension alimentaire",
    "حضانة": "garde des enfants",
    "ميراث": "succession",
    "دستور": "constitution",
}

AR_FR_SECONDARY: dict[str, str] = {
    "محكمة": "tribunal",
    "قاضي": "juge",
    "محامي": "avocat",
    "شاهد": "témoin",
    "شهود": "témoins",
    "متهم": "accusé",
    "ضحية": "victime",
    "قانون": "loi",
    "مادة": "article",
    "فقرة": "alinéa",
    "باب": "titre",
    "فصل": "chapitre",
    "نص": "texte",
    "جلسة": "audience",
    "ملف": "dossier",
    "ملفات": "dossiers",
    "تحليل": "analyse",
    "وثيقة": "document",
    "طلب": "demande",
    "حق": "droit",
    "دولة": "état",
    "جمهورية": "république",
    "شكوى": "plainte",
    "دليل": "preuve",
    "خبرة": "expertise",
    "أحكام": "dispositions",
    "جزائية": "pénale",
    "جنائية": "pénale",
    "مدنية": "civile",
    "تجارية": "commerciale",
    "إدارية": "administrative",
    "يقرر": "décide",
    "تقرر": "décide",
    "قررت": "a décidé",
}

AR_FR_FUNCTION_WORDS: dict[str, str] = {
    "ال": "",
    "في": "dans",
    "من": "de",
    "إلى": "à",
    "على": "sur",
    "عن": "sur",
    "مع": "avec",
    "هذا": "ce",
    "هذه": "cette",
    "التي": "qui",
    "الذي": "qui",
    "كل": "tout",
    "أو": "ou",
    "ثم": "puis",
    "كان": "était",
    "كانت": "était",
    "يجب": "doit",
    "يمكن": "peut",
    "وفقا": "conformément",
    "حسب": "selon",
}

FR_AR_FUNCTION_WORDS: dict[str, str] = {
    "le": "",
    "la": "",
    "les": "",
    "un": "",
    "une": "",
    "de": "من",
    "du": "من",
    "des": "من",
    "dans": "في",
    "sur": "على",
    "à": "إلى",
    "au": "إلى",
    "aux": "إلى",
    "avec": "مع",
    "ou": "أو",
    "et": "و",
    "qui": "الذي",
    "ce": "هذا",
    "cette": "هذه",
    "est": "هو",
    "tout": "كل",
    "selon": "حسب",
    "pour": "من أجل",
    "par": "من طرف",
    "conformément": "وفقا",
    "décide": "تقرر",
}


@dataclass
class Lexicon:
    """Bilingual phrase and word tables keyed by source language.

    Attributes:
        phrases: Multi-word entries per source language
        words: Single-word entries per source language
    """

    phrases: dict[Language, dict[str, str]] = field(default_factory=dict)
    words: dict[Language, dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_pairs(
        cls,
        *arabic_french: Mapping[str, str],
        french_arabic: Mapping[str, str] | None = None,
    ) -> Lexicon:
        """Build a lexicon from Arabic-to-French tables.

        The French-to-Arabic direction is derived by inversion (first
        rendering wins), then ``french_arabic`` entries are added.

        Args:
            *arabic_french: Arabic to French tables, earlier tables win
            french_arabic: Extra French to Arabic entries

        Returns:
            Lexicon covering both directions
        """
        lexicon = cls(
            phrases={lang: {} for lang in Language},
            words={lang: {} for lang in Language},
        )
        for table in arabic_french:
            for arabic, french in table.items():
                lexicon.add(Language.ARABIC, arabic, french)
                if french:
                    lexicon.add(Language.FRENCH, french, arabic)
        for french, arabic in (french_arabic or {}).items():
            lexicon.add(Language.FRENCH, french, arabic, replace=True)
        return lexicon

    def add(self, source: Language, term: str, rendering: str, replace: bool = False) -> None:
        """Add one entry; multi-word terms go to the phrase table."""
        key = normalize_term(term, source)
        table = self.phrases[source] if " " in key else self.words[source]
        if replace or key not in table:
            table[key] = rendering

    def word(self, source: Language, word: str) -> str | None:
        """Look up a single word."""
        return self.words[source].get(normalize_term(word, source))


def render_words(
    text: str,
    source: Language,
    lookup: Callable[[str], str | None],
) -> tuple[str, int, list[str]]:
    """Render every source-script word of text through ``lookup``.

    Args:
        text: Text with phrases already rendered
        source: Language of the words to render
        lookup: Returns the rendering of a bare word, or None

    Returns:
        Tuple of (rendered text, words rendered, words left untranslated)
    """
    script = LANGUAGE_SCRIPTS[source]
    rendered = 0
    untranslated: list[str] = []

    def replace(match: re.Match[str]) -> str:
        nonlocal rendered
        word = match.group()
        if classify_char(word[0]) is not script:
            return word
        if source is Language.ARABIC:
            hit = _lookup_arabic(word, lookup)
        else:
            hit = _lookup_french(word, lookup)
        if hit is None:
            untranslated.append(word)
            return word
        rendered += 1
        return f" {hit} " if hit else " "

    output = _WORD_RE.sub(replace, text)
    return collapse_whitespace(output), rendered, untranslated


def _lookup_arabic(word: str, lookup: Callable[[str], str | None]) -> str | None:
    hit = lookup(word)
    if hit is not None:
        return hit
    for prefix, prefix_rendering in _ARABIC_PREFIX_RENDERINGS:
        if word.startswith(prefix) and len(word) - len(prefix) >= 2:
            stem = word[len(prefix) :]
            hit = lookup(stem)
            if hit is None and not prefix.endswith("ال"):
                hit = lookup("ال" + stem)
            if hit is not None:
                return f"{prefix_rendering} {hit}".strip()
    return None


def _lookup_french(word: str, lookup: Callable[[str], str | None]) -> str | None:
    hit = lookup(word)
    if hit is not None:
        return hit
    head, sep, tail = word.replace("’", "'").partition("'")
    if sep and head.lower() in _FRENCH_ELISIONS:
        hit = lookup(tail)
        if hit is not None:
            return f"{_FRENCH_ELISIONS[head.lower()]} {hit}".strip()
    return None


@lru_cache(maxsize=4096)
def _phrase_regex(phrase: str, flags: int) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(w) for w in phrase.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", flags)


def render_phrases(text: str, source: Language, phrases: Mapping[str, str]) -> tuple[str, int]:
    """Replace known phrases, longest first.

    Returns:
        Tuple of (text, phrases rendered)
    """
    count = 0
    flags = re.IGNORECASE if source is Language.FRENCH else 0
    for phrase in sorted(phrases, key=len, reverse=True):
        rendering = f" {phrases[phrase]} "
        text, n = _phrase_regex(phrase, flags).subn(lambda _m, r=rendering: r, text)
        count += n
    return text, count


def estimate_confidence(
    source_text: str, output: str, rendered: int, untranslated: int
) -> float:
    """Heuristic confidence of a lexicon rendering.

    Base 0.8; short (< 10 chars) input -0.2; long (> 1000 chars) input
    -0.1; +0.02 per rendered term up to +0.1; -0.3 when the output is
    shorter than half the input; minus up to 0.3 for untranslated words.
    """
    if not output.strip():
        return 0.0
    confidence = 0.8
    if len(source_text) < 10:
        confidence -= 0.2
    if len(source_text) > 1000:
        confidence -= 0.1
    confidence += min(0.1, 0.02 * rendered)
    if len(output) < len(source_text) * 0.5:
        confidence -= 0.3
    total = rendered + untranslated
    if total:
        confidence -= 0.3 * untranslated / total
    return round(max(0.0, min(1.0, confidence)), 4)


class LexiconBackend(BaseTranslationBackend):
    """Offline backend rendering text through a :class:`Lexicon`.

    Example:
        >>> backend = LexiconBackend(PRIMARY_LEXICON, name="primary")
        >>> result = await backend.translate("عقد", Language.ARABIC, Language.FRENCH)
        >>> result.text
        'contrat'
    """

    def __init__(self, lexicon: Lexicon, name: str = "lexicon") -> None:
        """Initialize backend.

        Args:
            lexicon: Phrase and word tables
            name: Backend name used in logs
        """
        super().__init__()
        self.lexicon = lexicon
        self.name = name

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        """Render text phrase by phrase, then word by word."""
        self._track(text)
        # Yield to the event loop like any other backend call
        await asyncio.sleep(0)

        if source_language is target_language:
            return BackendResult(text, source_language, target_language, confidence=1.0)

        output, phrases = render_phrases(
            text, source_language, self.lexicon.phrases[source_language]
        )
        output, words, untranslated = render_words(
            output, source_language, lambda w: self.lexicon.word(source_language, w)
        )

        result = BackendResult(
            text=output,
            source_language=source_language,
            target_language=target_language,
            confidence=estimate_confidence(text, output, phrases + words, len(untranslated)),
            terms_translated=phrases + words,
            untranslated=untranslated,
            characters=len(text),
        )
        if untranslated:
            result.warnings.append(f"{len(untranslated)} words left untranslated")
            logger.debug("%s left %d words untranslated", self.name, len(untranslated))
        return result


PRIMARY_LEXICON = Lexicon.from_pairs(
    AR_FR_PRIMARY, AR_FR_FUNCTION_WORDS, french_arabic=FR_AR_FUNCTION_WORDS
)

SECONDARY_LEXICON = Lexicon.from_pairs(
    AR_FR_PRIMARY,
    AR_FR_SECONDARY,
    AR_FR_FUNCTION_WORDS,
    french_arabic=FR_AR_FUNCTION_WORDS,
)
