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

"""Legal terminology manager.

Domain-scoped bilingual lookup and consistency validation backed by
versioned legal dictionaries. Unknown terms never raise: they are
counted as no-matches and the caller passes the term through.
"""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from collections import Counter
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from typing import Any

from puretrans.core.models import Language, LegalDomain, utc_now
from puretrans.helpers.detection import arabic_word_forms
from puretrans.terminology.models import (
    DEFAULT_AUTHORITY,
    LegalDictionary,
    LegalTermEntry,
    LegalTermTranslation,
    TermInconsistency,
    TerminologyValidation,
    TermMatch,
)
from puretrans.utils.config import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

VALIDITY_THRESHOLD = 0.8

_ARABIC_PREFIX_GROUP = "(?:وال|بال|فال|كال|لل|ال|و|ب|ل|ف)?"
_SPACES_RE = re.compile(r"\s+")

_CacheKey = tuple[str, Language, Language, LegalDomain | None]


def load_dictionaries(path: str | Path) -> list[LegalDictionary]:
    """Load legal dictionaries from a JSON file.

    The file holds a ``metadata`` object (version, authority,
    last_updated) and a ``dictionaries`` object mapping domain names to
    lists of term entries.

    Args:
        path: JSON file path

    Returns:
        One dictionary per domain

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is invalid JSON
    """
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return _parse_dictionaries(data)


def load_builtin_dictionaries() -> list[LegalDictionary]:
    """Load the dictionaries shipped with the package."""
    source = resources.files("puretrans.terminology") / "data" / "legal_dictionaries.json"
    data: dict[str, Any] = json.loads(source.read_text(encoding="utf-8"))
    return _parse_dictionaries(data)


def _parse_dictionaries(data: dict[str, Any]) -> list[LegalDictionary]:
    metadata = data.get("metadata", {})
    dictionaries = []
    for domain_name, entries in data.get("dictionaries", {}).items():
        domain = LegalDomain(domain_name)
        dictionaries.append(
            LegalDictionary(
                domain=domain,
                version=metadata.get("version", "1.0.0"),
                authority=metadata.get("authority", DEFAULT_AUTHORITY),
                last_updated=metadata.get("last_updated") or utc_now(),
                entries=[LegalTermEntry(domain=domain, **entry) for entry in entries],
            )
        )
    return dictionaries


def normalize_term(term: str, language: Language) -> str:
    """Normalize a term for lookup.

    French terms are lowercased; Arabic terms lose diacritics and tatweel.

    Example:
        >>> normalize_term("  Code   Civil ", Language.FRENCH)
        'code civil'
    """
    term = _SPACES_RE.sub(" ", unicodedata.normalize("NFC", term)).strip()
    if language is Language.FRENCH:
        return term.lower()
    return "".join(ch for ch in term if unicodedata.category(ch) != "Mn" and ch != "ـ")


def _term_regex(term: str, language: Language) -> re.Pattern[str]:
    words = term.split()
    if language is Language.FRENCH:
        body = r"\s+".join(re.escape(w) for w in words)
        return re.compile(rf"(?<![\w-]){body}(?![\w-])", re.IGNORECASE)

    first = words[0][2:] if words[0].startswith("ال") and len(words[0]) > 3 else words[0]
    body = r"\s+".join([re.escape(first), *(re.escape(w) for w in words[1:])])
    return re.compile(rf"(?<!\w){_ARABIC_PREFIX_GROUP}{body}(?!\w)")


class LegalTerminologyManager:
    """Bilingual legal term lookup and validation.

    Example:
        >>> manager = LegalTerminologyManager()
        >>> hit = manager.lookup("عقد", Language.ARABIC, Language.FRENCH)
        >>> hit.target_term
        'contrat'
    """

    def __init__(
        self,
        dictionaries: Iterable[LegalDictionary] | None = None,
        settings: PipelineSettings | None = None,
    ) -> None:
        """Initialize terminology manager.

        Args:
            dictionaries: Dictionaries to serve (defaults to the built-in set)
            settings: Source of the confidence threshold
        """
        settings = settings or get_settings()
        self.confidence_threshold = settings.terminology_confidence_threshold
        if dictionaries is None:
            dictionaries = load_builtin_dictionaries()
        self._dictionaries: dict[LegalDomain, LegalDictionary] = {
            d.domain: d for d in dictionaries
        }
        self._cache: dict[_CacheKey, LegalTermTranslation | None] = {}
        self._index: dict[tuple[Language, str], list[tuple[LegalTermEntry, bool]]] = {}
        self._patterns: dict[Language, list[tuple[LegalTermEntry, bool, re.Pattern[str]]]] = {}
        self.no_matches: Counter[str] = Counter()
        self._rebuild()

        logger.info(
            "Loaded %d legal dictionaries (%d terms)",
            len(self._dictionaries),
            sum(len(d.entries) for d in self._dictionaries.values()),
        )

    # ------------------------------------------------------------------
    # Index maintenance
    # ------------------------------------------------------------------

    def _rebuild(self) -> None:
        self._index.clear()
        self._patterns.clear()
        self._cache.clear()
        for entry in self.entries():
            for language in Language:
                forms = [(entry.term(language), False)]
                forms.extend((variant, True) for variant in entry.variants(language))
                for form, is_variant in forms:
                    key = normalize_term(form, language)
                    self._index.setdefault((language, key), []).append((entry, is_variant))
                    if language is Language.ARABIC and key.startswith("ال"):
                        self._index.setdefault((language, key[2:]), []).append(
                            (entry, is_variant)
                        )

    def _compiled(self, language: Language) -> list[tuple[LegalTermEntry, bool, re.Pattern[str]]]:
        if language not in self._patterns:
            compiled = []
            for entry in self.entries():
                compiled.append((entry, False, _term_regex(entry.term(language), language)))
                compiled.extend(
                    (entry, True, _term_regex(variant, language))
                    for variant in entry.variants(language)
                )
            self._patterns[language] = compiled
        return self._patterns[language]

    def entries(self, domain: LegalDomain | None = None) -> Iterator[LegalTermEntry]:
        """Iterate over entries, optionally for one domain."""
        for dictionary in self._dictionaries.values():
            if domain is None or dictionary.domain is domain:
                yield from dictionary.entries

    def set_confidence_threshold(self, threshold: float) -> None:
        """Change the suggestion threshold and drop cached lookups."""
        self.confidence_threshold = threshold
        self._cache.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(
        self,
        term: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> LegalTermTranslation | None:
        """Translate a legal term.

        Searches the requested domain first, then every dictionary.

        Args:
            term: Term in the source language
            source_language: Language of ``term``
            target_language: Language of the rendering
            domain: Preferred legal domain

        Returns:
            LegalTermTranslation, or None when the term is unknown
        """
        normalized = normalize_term(term, source_language)
        key = (normalized, source_language, target_language, domain)
        if key in self._cache:
            return self._cache[key]

        candidates = self._candidates(normalized, source_language)
        if not candidates:
            self.no_matches[normalized] += 1
            logger.debug("No terminology match for %r", term)
            self._cache[key] = None
            return None

        scoped = [c for c in candidates if domain is not None and c[0].domain is domain]
        entry, is_variant = max(scoped or candidates, key=lambda c: (not c[1], c[0].confidence))
        confidence = entry.confidence * (0.9 if is_variant else 1.0)
        result = LegalTermTranslation(
            source_term=term,
            target_term=entry.term(target_language),
            source_language=source_language,
            target_language=target_language,
            domain=entry.domain,
            definition=entry.definition,
            confidence=round(confidence, 4),
            is_suggestion=confidence < self.confidence_threshold,
        )
        self._cache[key] = result
        return result

    def _candidates(
        self, normalized: str, language: Language
    ) -> list[tuple[LegalTermEntry, bool]]:
        found = self._index.get((language, normalized))
        if found or language is Language.FRENCH:
            return found or []

        first, _, rest = normalized.partition(" ")
        for form in arabic_word_forms(first):
            key = f"{form} {rest}" if rest else form
            found = self._index.get((language, key))
            if found:
                return found
        return []

    def domain_terms(self, domain: LegalDomain, language: Language) -> list[str]:
        """Canonical terms of one domain in ``language``."""
        return [entry.term(language) for entry in self.entries(domain)]

    # ------------------------------------------------------------------
    # Text scanning and validation
    # ------------------------------------------------------------------

    def extract_terms(
        self,
        text: str,
        language: Language,
        domain: LegalDomain | None = None,
    ) -> list[TermMatch]:
        """Find dictionary terms in text.

        Longer matches win over the shorter terms they contain.

        Args:
            text: Text to scan
            language: Language of the text
            domain: Restrict to one domain

        Returns:
            Non-overlapping matches in text order
        """
        if not text:
            return []

        found: list[TermMatch] = []
        for entry, is_variant, regex in self._compiled(language):
            if domain is not None and entry.domain is not domain:
                continue
            for m in regex.finditer(text):
                found.append(
                    TermMatch(
                        entry=entry,
                        matched=m.group(),
                        start=m.start(),
                        end=m.end(),
                        is_variant=is_variant,
                    )
                )

        found.sort(key=lambda m: (-(m.end - m.start), m.start))
        taken: list[TermMatch] = []
        for match in found:
            if all(match.end <= t.start or match.start >= t.end for t in taken):
                taken.append(match)
        return sorted(taken, key=lambda m: m.start)

    def validate_consistency(
        self,
        text: str,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> TerminologyValidation:
        """Check that legal terms use their canonical renderings.

        Non-canonical renderings of confident entries are inconsistencies.
        Entries below the confidence threshold only produce suggestions.

        Args:
            text: Text in ``target_language``
            target_language: Language of the text
            domain: Restrict to one domain

        Returns:
            TerminologyValidation with a 0-1 score
        """
        consistent: list[str] = []
        inconsistencies: list[TermInconsistency] = []
        suggestions: list[TermInconsistency] = []

        for match in self.extract_terms(text, target_language, domain):
            if not match.is_variant:
                consistent.append(match.entry.term(target_language))
                continue
            finding = TermInconsistency(
                found=match.matched,
                canonical=match.entry.term(target_language),
                start=match.start,
                end=match.end,
                domain=match.entry.domain,
                confidence=match.entry.confidence,
            )
            if match.entry.confidence < self.confidence_threshold:
                suggestions.append(finding)
            else:
                inconsistencies.append(finding)

        checked = len(consistent) + len(inconsistencies)
        score = 1.0 if checked == 0 else round(len(consistent) / checked, 4)
        return TerminologyValidation(
            score=score,
            is_valid=score >= VALIDITY_THRESHOLD,
            matched_terms=tuple(consistent),
            inconsistencies=tuple(inconsistencies),
            suggestions=tuple(suggestions),
        )

    # ------------------------------------------------------------------
    # Dictionary management
    # ------------------------------------------------------------------

    def search_terms(
        self,
        query: str,
        language: Language | None = None,
        domain: LegalDomain | None = None,
    ) -> list[LegalTermEntry]:
        """Search entries whose term or definition contains ``query``.

        Args:
            query: Text to search for
            language: Only search renderings in this language
            domain: Only search this domain

        Returns:
            Matching entries, highest confidence first
        """
        languages = [language] if language else list(Language)
        results = []
        for entry in self.entries(domain):
            haystacks = [normalize_term(entry.term(lang), lang) for lang in languages]
            haystacks.append(entry.definition.lower())
            if any(normalize_term(query, lang) in h for lang in languages for h in haystacks):
                results.append(entry)
        return sorted(results, key=lambda e: e.confidence, reverse=True)

    def add_custom_term(self, entry: LegalTermEntry) -> None:
        """Add or replace a term in its domain dictionary.

        Args:
            entry: Entry to add; an entry with the same French term in the
                same domain is replaced
        """
        dictionary = self._dictionaries.get(entry.domain)
        if dictionary is None:
            dictionary = LegalDictionary(domain=entry.domain)
            self._dictionaries[entry.domain] = dictionary
        dictionary.entries = [e for e in dictionary.entries if e.french != entry.french]
        dictionary.entries.append(entry)
        dictionary.last_updated = utc_now()
        self._rebuild()
        logger.info(
            "Added custom term: %s / %s (%s)", entry.french, entry.arabic, entry.domain.value
        )

    def update_term(self, domain: LegalDomain, french: str, **changes: Any) -> bool:
        """Update fields of an existing entry.

        Args:
            domain: Domain of the entry
            french: Canonical French term identifying the entry
            **changes: Field values to replace

        Returns:
            True if the entry was found and updated
        """
        dictionary = self._dictionaries.get(domain)
        if dictionary is None:
            return False
        for i, entry in enumerate(dictionary.entries):
            if entry.french == french:
                data = {**entry.model_dump(), **changes, "last_verified": utc_now()}
                dictionary.entries[i] = LegalTermEntry(**data)
                dictionary.last_updated = utc_now()
                self._rebuild()
                logger.info("Updated term: %s (%s)", french, ", ".join(sorted(changes)))
                return True
        return False

    def get_dictionary_stats(self) -> dict[str, Any]:
        """Get per-domain dictionary statistics.

        Returns:
            Dictionary with term counts, versions, and lookup counters
        """
        domains = {}
        for domain, dictionary in self._dictionaries.items():
            confidences = [e.confidence for e in dictionary.entries]
            domains[domain.value] = {
                "terms": len(dictionary.entries),
                "version": dictionary.version,
                "authority": dictionary.authority,
                "average_confidence": (
                    round(sum(confidences) / len(confidences), 4) if confidences else 0.0
                ),
            }
        return {
            "domains": domains,
            "total_terms": sum(d["terms"] for d in domains.values()),
            "cache_size": len(self._cache),
            "no_match_count": sum(self.no_matches.values()),
        }

    def export_dictionary(self, domain: LegalDomain) -> dict[str, Any]:
        """Export one dictionary as JSON-compatible data.

        Raises:
            KeyError: If no dictionary exists for ``domain``
        """
        return self._dictionaries[domain].model_dump(mode="json")
