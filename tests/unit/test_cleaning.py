"""Unit tests for the content cleaner and cleaning rules."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from puretrans.cleaning.cleaner import ContentCleaner, collapse_whitespace
from puretrans.cleaning.rules import (
    UI_ARTIFACTS,
    CleaningRuleError,
    LiteralRule,
    PatternRule,
    ScriptRangeRule,
    custom_rules,
)
from puretrans.core.models import Language, PatternType
from puretrans.utils.config import PipelineSettings


@pytest.mark.unit
class TestCleaningRules:
    """Test rule construction and matching."""

    def test_literal_rule_spans(self) -> None:
        """Test literal rules report every occurrence."""
        rule = LiteralRule("pro", case_sensitive=False)
        assert rule.find("PRO et pro") == [(0, 3), (7, 10)]
        assert rule.name == "literal:pro"

    def test_literal_rule_latin_boundaries(self) -> None:
        """Test boundary rules skip matches inside words."""
        rule = LiteralRule("Pro", latin_boundaries=True)
        assert rule.find("Problème") == []
        assert rule.find("محامي Pro") == [(6, 9)]

    def test_empty_literal_rejected(self) -> None:
        """Test empty literal rules are invalid."""
        with pytest.raises(CleaningRuleError):
            LiteralRule("")

    def test_invalid_pattern_rejected(self) -> None:
        """Test uncompilable patterns are invalid."""
        with pytest.raises(CleaningRuleError, match="Invalid cleaning pattern"):
            PatternRule("(unclosed")

    def test_empty_matching_pattern_rejected(self) -> None:
        """Test patterns matching empty text are invalid."""
        with pytest.raises(CleaningRuleError, match="matches empty text"):
            PatternRule("a*")

    def test_pattern_rule_ignore_case(self) -> None:
        """Test case-insensitive patterns."""
        rule = PatternRule(r"brouillon", ignore_case=True)
        assert rule.find("BROUILLON final") == [(0, 9)]

    def test_script_range_rule(self) -> None:
        """Test range rules remove whole runs."""
        rule = ScriptRangeRule(0x0400, 0x04FF)
        assert rule.find("Le Привет tribunal") == [(3, 9)]
        assert rule.element_type is PatternType.FOREIGN_SCRIPT

    def test_invalid_script_range(self) -> None:
        """Test reversed ranges are invalid."""
        with pytest.raises(CleaningRuleError):
            ScriptRangeRule(0x0500, 0x0400)

    def test_custom_rules_skip_blank_literals(self) -> None:
        """Test custom rule building."""
        rules = custom_rules(["Brouillon", ""], [r"\bDRAFT\b"])
        assert [rule.kind for rule in rules] == ["literal", "pattern"]

    def test_ui_artifacts_longest_first(self) -> None:
        """Test compound artifacts precede their parts."""
        assert UI_ARTIFACTS.index("[object Object]") < UI_ARTIFACTS.index("null")


@pytest.mark.unit
class TestContentCleaner:
    """Test the cleaning stages."""

    def test_removes_ui_artifacts(self, cleaner: ContentCleaner) -> None:
        """Test interface artifacts are stripped from Arabic text."""
        result = cleaner.clean("محامي Pro تحليل V2", Language.ARABIC)

        assert result.cleaned_text == "محامي تحليل"
        assert result.had_problems
        removed = {e.content: e.element_type for e in result.removed_elements}
        assert removed["Pro"] is PatternType.UI_ARTIFACT

    def test_keeps_words_containing_artifacts(self, cleaner: ContentCleaner) -> None:
        """Test artifact literals inside real words are kept."""
        result = cleaner.clean("Problème juridique", Language.FRENCH)
        assert result.cleaned_text == "Problème juridique"
        assert not result.had_problems

    def test_removes_version_numbers(self, cleaner: ContentCleaner) -> None:
        """Test version markers are stripped."""
        result = cleaner.clean("Le contrat V7 signé", Language.FRENCH)
        assert result.cleaned_text == "Le contrat signé"
        assert result.removed_elements[0].element_type is PatternType.VERSION_NUMBER

    def test_removes_foreign_fragment(self, cleaner: ContentCleaner) -> None:
        """Test Arabic fragments are removed from French text."""
        result = cleaner.clean("Le tribunal محكمة décide", Language.FRENCH)
        assert result.cleaned_text == "Le tribunal décide"
        assert result.removed_elements[0].element_type is PatternType.FOREIGN_FRAGMENT
        assert result.removed_elements[0].content == "محكمة"

    def test_removes_cyrillic(self, cleaner: ContentCleaner) -> None:
        """Test scripts outside the pair are removed."""
        result = cleaner.clean("Le contrat Привет signé", Language.FRENCH)
        assert result.cleaned_text == "Le contrat signé"
        assert result.removed_elements[0].element_type is PatternType.FOREIGN_SCRIPT

    def test_repairs_encoding(self, cleaner: ContentCleaner) -> None:
        """Test corrupted and invisible characters are dropped."""
        result = cleaner.clean("Le\ufffd con\u200btrat", Language.FRENCH)
        assert result.cleaned_text == "Le contrat"
        assert all(e.element_type is PatternType.ENCODING for e in result.removed_elements)

    def test_normalizes_to_nfc(self, cleaner: ContentCleaner) -> None:
        """Test decomposed accents are composed."""
        result = cleaner.clean("de\u0301cision", Language.FRENCH)
        assert result.cleaned_text == "décision"
        assert result.actions[0].action == "normalize"

    def test_detects_language_when_omitted(self, cleaner: ContentCleaner) -> None:
        """Test the dominant script decides what is foreign."""
        result = cleaner.clean("عقد البيع في القانون المدني Contrat")
        assert result.cleaned_text == "عقد البيع في القانون المدني"

    def test_empty_text(self, cleaner: ContentCleaner) -> None:
        """Test empty input is returned untouched."""
        result = cleaner.clean("", Language.ARABIC)
        assert result.cleaned_text == ""
        assert result.confidence == 1.0
        assert result.removed_elements == ()

    def test_confidence_drops_with_removals(self, cleaner: ContentCleaner) -> None:
        """Test heavy cleaning lowers confidence."""
        result = cleaner.clean("Le Привет Здравствуйте Спасибо", Language.FRENCH)
        assert result.cleaned_text == "Le"
        assert result.confidence == 0.6

    def test_collapse_whitespace(self) -> None:
        """Test whitespace collapse."""
        assert collapse_whitespace("  le   tribunal ,  décide  ") == "le tribunal, décide"
        assert collapse_whitespace("a\n\n\n\nb") == "a\n\nb"

    @given(st.text(max_size=200))
    @settings(max_examples=100, deadline=None)
    def test_cleaning_is_idempotent(self, text: str) -> None:
        """Test cleaning cleaned text changes nothing."""
        cleaner = ContentCleaner(PipelineSettings(monitoring_enabled=False))
        once = cleaner.clean(text, Language.FRENCH).cleaned_text
        assert cleaner.clean(once, Language.FRENCH).cleaned_text == once

    @given(st.text(alphabet="ابتثجحخدذرزسشصضطظعغفقكلمنهوي Prov2.", max_size=80))
    @settings(max_examples=50, deadline=None)
    def test_arabic_cleaning_is_idempotent(self, text: str) -> None:
        """Test idempotence on Arabic text with artifacts."""
        cleaner = ContentCleaner(PipelineSettings(monitoring_enabled=False))
        once = cleaner.clean(text, Language.ARABIC)
        twice = cleaner.clean(once.cleaned_text, Language.ARABIC)
        assert twice.cleaned_text == once.cleaned_text
        assert not twice.had_problems


@pytest.mark.unit
class TestCleanerRules:
    """Test adding rules at runtime."""

    def test_add_rule(self, cleaner: ContentCleaner) -> None:
        """Test added rules apply from the next cleaning."""
        text = "Le contrat Brouillon signé"
        assert cleaner.clean(text, Language.FRENCH).cleaned_text == text

        cleaner.add_rule(LiteralRule("Brouillon"))

        assert cleaner.clean(text, Language.FRENCH).cleaned_text == "Le contrat signé"

    def test_feedback_patterns_deduplicated(self, cleaner: ContentCleaner) -> None:
        """Test reported fragments become rules once."""
        before = cleaner.get_stats()["custom_rules"]

        added = cleaner.add_patterns_from_feedback(["XYZ", "XYZ", "  ", "Pro"])

        assert added == 1
        assert cleaner.get_stats()["custom_rules"] == before + 1

    def test_reconfigure_keeps_added_rules(self, cleaner: ContentCleaner) -> None:
        """Test reconfiguring replaces configured rules only."""
        cleaner.add_rule(LiteralRule("XYZ"))
        cleaner.reconfigure(
            PipelineSettings(
                monitoring_enabled=False, custom_literals=("Brouillon",), custom_patterns=()
            )
        )

        result = cleaner.clean("Brouillon Le XYZ contrat", Language.FRENCH)

        assert result.cleaned_text == "Le contrat"
        assert cleaner.get_stats()["custom_rules"] == 2

    def test_stats(self, cleaner: ContentCleaner) -> None:
        """Test statistics tracking."""
        cleaner.clean("Le tribunal", Language.FRENCH)
        cleaner.clean("Le tribunal Pro", Language.FRENCH)

        stats = cleaner.get_stats()

        assert stats["total_cleanings"] == 2
        assert stats["cleanings_with_problems"] == 1
        assert stats["removed_by_type"] == {"ui_artifact": 1}
