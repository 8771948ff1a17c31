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

"""Cleaning rules evaluated by the content cleaner.

A cleaning rule is one of three variants:
- LiteralRule: a fixed string
- PatternRule: a regular expression
- ScriptRangeRule: a run of characters inside a code point range

Every variant answers ``find(text)`` with the spans to remove, so the
cleaner and the purity validator treat them uniformly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from puretrans.core.models import PatternType

# A Latin letter on either side means the match is part of a real word
_LATIN_LETTER = r"A-Za-zÀ-ÖØ-öø-ɏ"


@dataclass(frozen=True)
class LiteralRule:
    """Remove every occurrence of a fixed string.

    Attributes:
        text: String to remove
        reason: Why the string is removed
        element_type: Category recorded for each removal
        case_sensitive: Match case exactly
        latin_boundaries: Only match when not adjacent to a Latin letter
        name: Rule name used in cleaning actions
    """

    text: str
    reason: str = "Reported artifact"
    element_type: PatternType = PatternType.CUSTOM
    case_sensitive: bool = True
    latin_boundaries: bool = False
    name: str = ""
    kind: Literal["literal"] = field(default="literal", init=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.text:
            raise CleaningRuleError("Literal rule text must not be empty")
        body = re.escape(self.text)
        if self.latin_boundaries:
            body = f"(?<![{_LATIN_LETTER}]){body}(?![{_LATIN_LETTER}])"
        flags = 0 if self.case_sensitive else re.IGNORECASE
        object.__setattr__(self, "_regex", re.compile(body, flags))
        if not self.name:
            object.__setattr__(self, "name", f"literal:{self.text}")

    def find(self, text: str) -> list[tuple[int, int]]:
        """Return spans of every occurrence."""
        return [m.span() for m in self._regex.finditer(text)]


@dataclass(frozen=True)
class PatternRule:
    """Remove every match of a regular expression.

    Attributes:
        pattern: Regular expression source
        reason: Why matches are removed
        element_type: Category recorded for each removal
        ignore_case: Compile with re.IGNORECASE
        name: Rule name used in cleaning actions

    Raises:
        CleaningRuleError: If the pattern does not compile or can match
            the empty string
    """

    pattern: str
    reason: str = "Matches a reported pattern"
    element_type: PatternType = PatternType.CUSTOM
    ignore_case: bool = False
    name: str = ""
    kind: Literal["pattern"] = field(default="pattern", init=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            regex = re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)
        except re.error as e:
            raise CleaningRuleError(f"Invalid cleaning pattern {self.pattern!r}: {e}") from e
        if regex.match(""):
            raise CleaningRuleError(f"Cleaning pattern {self.pattern!r} matches empty text")
        object.__setattr__(self, "_regex", regex)
        if not self.name:
            object.__setattr__(self, "name", f"pattern:{self.pattern}")

    def find(self, text: str) -> list[tuple[int, int]]:
        """Return spans of every non-blank match."""
        return [m.span() for m in self._regex.finditer(text) if m.group().strip()]


@dataclass(frozen=True)
class ScriptRangeRule:
    """Remove runs of characters within a code point range.

    Attributes:
        start: First code point (inclusive)
        end: Last code point (inclusive)
        reason: Why the range is removed
        element_type: Category recorded for each removal
        name: Rule name used in cleaning actions
    """

    start: int
    end: int
    reason: str = "Characters outside the supported scripts"
    element_type: PatternType = PatternType.FOREIGN_SCRIPT
    name: str = ""
    kind: Literal["script_range"] = field(default="script_range", init=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end <= 0x10FFFF:
            raise CleaningRuleError(
                f"Invalid script range U+{self.start:04X}-U+{self.end:04X}"
            )
        body = f"[{re.escape(chr(self.start))}-{re.escape(chr(self.end))}]+"
        object.__setattr__(self, "_regex", re.compile(body))
        if not self.name:
            object.__setattr__(self, "name", f"range:U+{self.start:04X}-U+{self.end:04X}")

    def find(self, text: str) -> list[tuple[int, int]]:
        """Return spans of every run inside the range."""
        return [m.span() for m in self._regex.finditer(text)]


CleaningRule = LiteralRule | PatternRule | ScriptRangeRule


# Interface strings that leak into translations from the surrounding UI.
# Longest first so compound artifacts go before their parts.
UI_ARTIFACTS: tuple[str, ...] = (
    "[object Object]",
    "AUTO-TRANSLATE",
    "undefined",
    "JuristDZ",
    "Defined",
    "null",
    "NaN",
    "Pro",
    "V2",
)


def ui_artifact_rules() -> list[CleaningRule]:
    """Build the interface artifact rules."""
    return [
        LiteralRule(
            text,
            reason="Interface artifact",
            element_type=PatternType.UI_ARTIFACT,
            latin_boundaries=True,
            name=f"ui:{text}",
        )
        for text in UI_ARTIFACTS
    ]


def version_rules() -> list[CleaningRule]:
    """Build the version and build number rules."""
    return [
        PatternRule(
            rf"(?<![{_LATIN_LETTER}])[Vv]\d+(?:\.\d+)*(?![\d.]*\d)",
            reason="Version number",
            element_type=PatternType.VERSION_NUMBER,
            name="version:v-number",
        ),
    ]


# Scripts never expected in French or Arabic legal text
FOREIGN_SCRIPT_RANGES: tuple[tuple[int, int, str], ...] = (
    (0x0370, 0x03FF, "Greek"),
    (0x0400, 0x052F, "Cyrillic"),
    (0x0530, 0x058F, "Armenian"),
    (0x0590, 0x05FF, "Hebrew"),
    (0x0900, 0x097F, "Devanagari"),
    (0x0E00, 0x0E7F, "Thai"),
    (0x2DE0, 0x2DFF, "Cyrillic"),
    (0x3040, 0x30FF, "Japanese kana"),
    (0x4E00, 0x9FFF, "CJK"),
    (0xA640, 0xA69F, "Cyrillic"),
    (0xAC00, 0xD7AF, "Hangul"),
)


def foreign_script_rules() -> list[CleaningRule]:
    """Build one range rule per unsupported script block."""
    return [
        ScriptRangeRule(
            start,
            end,
            reason=f"{label} characters are never valid output",
            name=f"script:{label.lower()}:{start:04X}",
        )
        for start, end, label in FOREIGN_SCRIPT_RANGES
    ]


def custom_rules(
    literals: tuple[str, ...] | list[str],
    patterns: tuple[str, ...] | list[str],
) -> list[CleaningRule]:
    """Build rules for configured literal strings and patterns.

    Args:
        literals: Strings to remove verbatim
        patterns: Regular expressions to remove

    Returns:
        Literal rules followed by pattern rules

    Raises:
        CleaningRuleError: If a pattern is invalid
    """
    rules: list[CleaningRule] = [
        LiteralRule(text, reason="Reported artifact") for text in literals if text
    ]
    rules.extend(PatternRule(pattern, reason="Configured pattern") for pattern in patterns)
    return rules


class CleaningRuleError(ValueError):
    """Raised when a cleaning rule cannot be built."""
