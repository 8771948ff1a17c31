"""Unit tests for zero-tolerance purity validation."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from puretrans.core.models import Language, RecommendationType, ViolationType
from puretrans.purity.validator import DIMENSION_WEIGHTS, PurityValidator, overall_score


def violation_types(result) -> set[ViolationType]:
    return {v.violation_type for v in result.violations}


@pytest.mark.unit
class TestOverallScore:
    """Test the weighted overall score."""

    def test_perfect_dimensions(self) -> None:
        """Test only perfect dimensions reach 100."""
        assert overall_score(dict.fromkeys(DIMENSION_WEIGHTS, 100.0)) == 100.0

    def test_rounding_cannot_pass(self) -> None:
        """Test a nearly perfect dimension stays below 100."""
        scores = dict.fromkeys(DIMENSION_WEIGHTS, 100.0)
        scores["ui_artifact_removal"] = 99.999
        assert overall_score(scores) == 99.99

    def test_weights_sum_to_one(self) -> None:
        """Test weights cover the whole score."""
        assert sum(DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)

    @given(
        st.fixed_dictionaries(
            {name: st.floats(min_value=0.0, max_value=100.0) for name in DIMENSION_WEIGHTS}
        )
    )
    @settings(max_examples=200)
    def test_passes_only_when_all_perfect(self, scores: dict[str, float]) -> None:
        """Test the overall score is 100 exactly when every dimension is."""
        total = overall_score(scores)
        assert 0.0 <= total <= 100.0
        assert (total == 100.0) == all(value == 100.0 for value in scores.values())


@pytest.mark.unit
class TestPurityValidator:
    """Test validation of candidate texts."""

    def test_pure_french(self, validator: PurityValidator) -> None:
        """Test clean French passes."""
        result = validator.validate("Le tribunal décide", Language.FRENCH)

        assert result.is_pure
        assert result.score.overall == 100.0
        assert result.violations == ()
        assert result.recommendations == ()

    def test_pure_arabic(self, validator: PurityValidator) -> None:
        """Test clean Arabic passes."""
        result = validator.validate("بموجب المادة 5 من القانون المدني", Language.ARABIC)
        assert result.is_pure

    def test_mixed_script_fails(self, validator: PurityValidator) -> None:
        """Test an Arabic word in French text fails."""
        result = validator.validate("Le tribunal محكمة", Language.FRENCH)

        assert not result.is_pure
        assert result.score.script_purity == 0.0
        assert ViolationType.FOREIGN_FRAGMENT in violation_types(result)
        assert result.recommendations[0].recommendation_type is (
            RecommendationType.CONTENT_CLEANING
        )

    def test_small_fragment_fails(self, validator: PurityValidator) -> None:
        """Test a single foreign word in a long text still fails."""
        text = "Le tribunal de première instance rend sa décision sur le litige عقد"
        result = validator.validate(text, Language.FRENCH)

        assert not result.is_pure
        assert 0.0 < result.score.script_purity < 100.0
        assert result.score.overall < 100.0

    def test_sandwiched_fragment_breaks_coherence(self, validator: PurityValidator) -> None:
        """Test a fragment inside a sentence is incoherent."""
        result = validator.validate("Le tribunal محكمة décide", Language.FRENCH)

        assert result.score.contextual_coherence == 0.0
        assert ViolationType.MIXED_SCRIPTS in violation_types(result)

    def test_other_script_fails(self, validator: PurityValidator) -> None:
        """Test scripts outside the pair zero the script dimension."""
        result = validator.validate("Le tribunal Привет", Language.FRENCH)

        assert result.score.script_purity == 0.0
        assert ViolationType.MIXED_SCRIPTS in violation_types(result)

    def test_ui_artifact_fails(self, validator: PurityValidator) -> None:
        """Test interface artifacts fail the gate."""
        result = validator.validate("Le tribunal Pro décide", Language.FRENCH)

        assert not result.is_pure
        assert result.score.ui_artifact_removal == 0.0
        ui = [v for v in result.violations if v.violation_type is ViolationType.UI_ARTIFACT]
        assert ui[0].content == "Pro"

    def test_encoding_issue_fails(self, validator: PurityValidator) -> None:
        """Test corrupted characters fail the gate."""
        result = validator.validate("Le tribunal\ufffd décide", Language.FRENCH)

        assert result.score.encoding_integrity == 75.0
        assert ViolationType.CORRUPTED_CHARACTER in violation_types(result)
        assert RecommendationType.ENCODING_FIX in {
            r.recommendation_type for r in result.recommendations
        }

    def test_terminology_inconsistency_fails(self, validator: PurityValidator) -> None:
        """Test non-canonical legal terms fail the gate."""
        result = validator.validate("Le code criminel s'applique", Language.FRENCH)

        assert not result.is_pure
        assert result.score.terminology_consistency == 0.0
        term = [v for v in result.violations if v.violation_type is ViolationType.TERMINOLOGY]
        assert term[0].suggested_fix == "code pénal"

    def test_empty_text_fails(self, validator: PurityValidator) -> None:
        """Test text without letters is never pure."""
        result = validator.validate("", Language.FRENCH)

        assert not result.is_pure
        assert result.score.script_purity == 0.0

    def test_stats(self, validator: PurityValidator) -> None:
        """Test validation counters."""
        validator.validate("Le tribunal décide", Language.FRENCH)
        validator.validate("Le tribunal محكمة", Language.FRENCH)

        assert validator.get_stats() == {
            "total_validations": 2,
            "passed_validations": 1,
            "pass_rate": 50.0,
        }
