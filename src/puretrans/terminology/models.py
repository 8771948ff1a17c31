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

"""Terminology data models.

Bilingual legal term entries grouped into versioned, per-domain
dictionaries, plus the results of lookups and consistency checks.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from puretrans.core.models import Language, LegalDomain, utc_now

DEFAULT_AUTHORITY = "ALGERIAN_GOVERNMENT"


class LegalTermEntry(BaseModel):
    """Canonical French/Arabic rendering of one legal term."""

    model_config = ConfigDict(frozen=True)

    french: str = Field(..., min_length=1, description="Canonical French rendering")
    arabic: str = Field(..., min_length=1, description="Canonical Arabic rendering")
    definition: str = Field(default="", description="Short definition")
    domain: LegalDomain = Field(default=LegalDomain.GENERAL)
    context: str = Field(default="", description="Usage context")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    last_verified: datetime = Field(default_factory=utc_now)
    french_variants: tuple[str, ...] = Field(
        default=(), description="Non-canonical French renderings"
    )
    arabic_variants: tuple[str, ...] = Field(
        default=(), description="Non-canonical Arabic renderings"
    )

    def term(self, language: Language) -> str:
        """Canonical rendering in ``language``."""
        return self.french if language is Language.FRENCH else self.arabic

    def variants(self, language: Language) -> tuple[str, ...]:
        """Non-canonical renderings in ``language``."""
        return self.french_variants if language is Language.FRENCH else self.arabic_variants


class LegalDictionary(BaseModel):
    """Versioned term dictionary for one legal domain."""

    domain: LegalDomain
    version: str = "1.0.0"
    authority: str = DEFAULT_AUTHORITY
    entries: list[LegalTermEntry] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)


class LegalTermTranslation(BaseModel):
    """Result of a successful lookup."""

    model_config = ConfigDict(frozen=True)

    source_term: str
    target_term: str
    source_language: Language
    target_language: Language
    domain: LegalDomain
    definition: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    is_suggestion: bool = Field(
        default=False,
        description="Low-confidence match offered as a suggestion, not a substitution",
    )


class TermMatch(BaseModel):
    """A dictionary term found in a text."""

    model_config = ConfigDict(frozen=True)

    entry: LegalTermEntry
    matched: str
    start: int
    end: int
    is_variant: bool = False


class TermInconsistency(BaseModel):
    """A non-canonical rendering of a known term."""

    model_config = ConfigDict(frozen=True)

    found: str
    canonical: str
    start: int
    end: int
    domain: LegalDomain
    confidence: float


class TerminologyValidation(BaseModel):
    """Outcome of a terminology consistency check."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0.0, le=1.0)
    is_valid: bool
    matched_terms: tuple[str, ...] = ()
    inconsistencies: tuple[TermInconsistency, ...] = ()
    suggestions: tuple[TermInconsistency, ...] = ()
