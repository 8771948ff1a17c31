"""Unit tests for script and word analysis helpers.

Tests character classification, script statistics, word affinity,
language detection, and encoding validation.
"""

import pytest

from puretrans.core.models import Language
from puretrans.helpers.detection import (
    DominantScript,
    ScriptClass,
    analyze_scripts,
    analyze_words,
    arabic_word_forms,
    classify_char,
    detect_language,
    iter_script_runs,
    tokenize_words,
    validate_encoding,
)


@pytest.mark.unit
class TestClassifyChar:
    """Test single character classification."""

    @pytest.mark.parametrize(
        ("char", "expected"),
        [
            ("ب", ScriptClass.ARABIC),
            ("é", ScriptClass.LATIN),
            ("Z", ScriptClass.LATIN),
            ("Ж", ScriptClass.CYRILLIC),
            ("中", ScriptClass.OTHER_LETTER),
            ("5", ScriptClass.DIGIT),
            ("٣", ScriptClass.DIGIT),
            ("،", ScriptClass.COMMON),
            ("×", ScriptClass.COMMON),
            (" ", ScriptClass.COMMON),
        ],
    )
    def test_classification(self, char: str, expected: ScriptClass) -> None:
        """Test each script class is recognized."""
        assert classify_char(char) is expected

    def test_letter_classes(self) -> None:
        """Test only letter classes count toward percentages."""
        assert ScriptClass.ARABIC.is_letter
        assert ScriptClass.CYRILLIC.is_letter
        assert not ScriptClass.DIGIT.is_letter
        assert not ScriptClass.COMMON.is_letter


@pytest.mark.unit
class TestScriptRuns:
    """Test splitting text into same-script runs."""

    def test_runs_split_on_script_change(self) -> None:
        """Test a change of script starts a new run."""
        runs = iter_script_runs("Le محكمة")
        assert [r.script for r in runs] == [ScriptClass.LATIN, ScriptClass.ARABIC]
        assert runs[1].text == "محكمة"
        assert runs[1].start == 3

    def test_diacritics_stay_in_run(self) -> None:
        """Test Arabic vowel marks do not split a word."""
        runs = iter_script_runs("مُحَمَّد")
        assert len(runs) == 1

    def test_digits_end_run(self) -> None:
        """Test digits and punctuation are outside runs."""
        runs = iter_script_runs("article 12, alinéa")
        assert [r.text for r in runs] == ["article", "alinéa"]

    def test_empty_text(self) -> None:
        """Test empty text has no runs."""
        assert iter_script_runs("") == []


@pytest.mark.unit
class TestAnalyzeScripts:
    """Test script statistics."""

    def test_pure_french(self) -> None:
        """Test French text is pure Latin."""
        analysis = analyze_scripts("Le tribunal décide")
        assert analysis.dominant_script is DominantScript.LATIN
        assert analysis.latin_percentage == 100.0
        assert analysis.is_pure_script
        assert analysis.mixed_spans == []

    def test_pure_arabic(self) -> None:
        """Test Arabic text is pure Arabic."""
        analysis = analyze_scripts("قررت المحكمة")
        assert analysis.dominant_script is DominantScript.ARABIC
        assert analysis.arabic_percentage == 100.0
        assert analysis.is_pure_script

    def test_mixed_text(self) -> None:
        """Test balanced mixing is reported as mixed."""
        analysis = analyze_scripts("عقد البيع Contrat")
        assert analysis.dominant_script is DominantScript.MIXED
        assert analysis.script_change_count == 1
        assert [run.text for run in analysis.mixed_spans] == ["Contrat"]
        assert not analysis.is_pure_script

    def test_cyrillic_counts_as_other(self) -> None:
        """Test Cyrillic letters land in the other share."""
        analysis = analyze_scripts("Le tribunal Привет")
        assert analysis.cyrillic_count == 6
        assert analysis.other_percentage > 0
        assert analysis.foreign_percentage(Language.FRENCH) == pytest.approx(37.5)

    def test_empty_text(self) -> None:
        """Test empty text yields zeroed statistics."""
        analysis = analyze_scripts("")
        assert analysis.total_letters == 0
        assert analysis.dominant_script is DominantScript.NONE
        assert analysis.foreign_percentage(Language.ARABIC) == 0.0

    def test_digits_only(self) -> None:
        """Test text without letters has no dominant script."""
        analysis = analyze_scripts("2024 - 12")
        assert analysis.total_characters == 9
        assert analysis.dominant_script is DominantScript.NONE


@pytest.mark.unit
class TestWordAnalysis:
    """Test word tokenizing and affinity scoring."""

    def test_arabic_word_forms(self) -> None:
        """Test attached prefixes are peeled off."""
        assert arabic_word_forms("والقانون") == ["والقانون", "قانون", "القانون"]
        assert arabic_word_forms("من") == ["من"]

    def test_tokenize_drops_digits(self) -> None:
        """Test digits and punctuation are not words."""
        assert tokenize_words("L'article 5, alinéa 2.") == ["L'article", "alinéa"]

    def test_french_indicators(self) -> None:
        """Test French indicator words raise the French score."""
        analysis = analyze_words("Le tribunal juge")
        assert analysis.french_score == 6
        assert analysis.arabic_score == 0
        assert analysis.recognized_ratio == 1.0
        assert analysis.confidence == 1.0

    def test_arabic_indicators_with_article(self) -> None:
        """Test Arabic indicators match through the definite article."""
        analysis = analyze_words("في المحكمة")
        assert analysis.arabic_score == 4
        assert analysis.score_for(Language.ARABIC) == 4

    def test_unknown_words(self) -> None:
        """Test unrecognized words give zero confidence."""
        analysis = analyze_words("xyzzy plugh")
        assert analysis.word_count == 2
        assert analysis.confidence == 0.0


@pytest.mark.unit
class TestDetectLanguage:
    """Test combined language detection."""

    def test_detect_french(self) -> None:
        """Test French detection."""
        result = detect_language("Le tribunal a rendu sa décision.")
        assert result.language is Language.FRENCH
        assert result.label == "fr"
        assert result.confidence > 0.5

    def test_detect_arabic(self) -> None:
        """Test Arabic detection."""
        result = detect_language("قررت المحكمة")
        assert result.language is Language.ARABIC
        assert result.label == "ar"

    def test_detect_mixed(self) -> None:
        """Test mixed text has no language."""
        result = detect_language("عقد البيع Contrat")
        assert result.language is None
        assert result.label == "mixed"

    def test_detect_empty(self) -> None:
        """Test empty text is unknown with minimum confidence."""
        result = detect_language("")
        assert result.label == "unknown"
        assert result.confidence == 0.1

    def test_detect_punctuation_only(self) -> None:
        """Test text without letters is unknown."""
        assert detect_language("12345 !!!").label == "unknown"

    def test_confidence_bounds(self) -> None:
        """Test confidence stays within 0.1 and 1.0."""
        for text in ("a", "Le", "Le tribunal civil décide sur le code pénal", "ب ج Le"):
            assert 0.1 <= detect_language(text).confidence <= 1.0


@pytest.mark.unit
class TestValidateEncoding:
    """Test encoding problem detection."""

    @pytest.mark.parametrize(
        ("text", "issue_type"),
        [
            ("Le\ufffd tribunal", "replacement_character"),
            ("\ufeffLe tribunal", "byte_order_mark"),
            ("Le\x00tribunal", "control_character"),
            ("Le \ue000 tribunal", "private_use"),
            ("dÃ©cision", "mojibake"),
            ("tribun?l", "broken_word"),
            ("de\u0301cision", "not_normalized"),
        ],
    )
    def test_issue_types(self, text: str, issue_type: str) -> None:
        """Test each kind of encoding problem is found."""
        assert issue_type in [issue.issue_type for issue in validate_encoding(text)]

    def test_clean_text(self) -> None:
        """Test tabs and newlines are not problems."""
        assert validate_encoding("Le\ttribunal\ndécide") == []
        assert validate_encoding("قررت المحكمة") == []

    def test_issue_span(self) -> None:
        """Test issues carry their location."""
        issue = validate_encoding("abc\ufffd")[0]
        assert (issue.start, issue.end) == (3, 4)
        assert issue.content == "\ufffd"

    def test_question_mark_at_end_is_fine(self) -> None:
        """Test a real question mark is not a broken word."""
        assert validate_encoding("Qui décide ?") == []
