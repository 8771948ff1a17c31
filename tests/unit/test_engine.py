"""Unit tests for the translation engine."""

import pytest

from puretrans.core.models import CleanedContent, TranslationMethod
from puretrans.engine.engine import METHOD_CAPABILITIES, TranslationEngine
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import PipelineSettings


def cleaned(text: str) -> CleanedContent:
    return CleanedContent(original_text=text, cleaned_text=text)


@pytest.mark.unit
class TestMethodSelection:
    """Test method order and capabilities."""

    def test_default_methods(self, terminology: LegalTerminologyManager) -> None:
        """Test the default retry budget picks the first three methods."""
        engine = TranslationEngine(terminology=terminology, settings=PipelineSettings())
        assert engine.methods_for() == [
            TranslationMethod.PRIMARY,
            TranslationMethod.SECONDARY,
            TranslationMethod.RULE_BASED,
        ]
        assert engine.methods_for(4)[-1] is TranslationMethod.HYBRID

    def test_custom_order(self, terminology: LegalTerminologyManager) -> None:
        """Test the configured order is respected."""
        settings = PipelineSettings(
            method_order=(TranslationMethod.RULE_BASED, TranslationMethod.PRIMARY),
            max_retry_attempts=1,
        )
        engine = TranslationEngine(terminology=terminology, settings=settings)
        assert engine.methods_for() == [TranslationMethod.RULE_BASED]

    def test_capabilities(self, terminology: LegalTerminologyManager) -> None:
        """Test capability lookup."""
        engine = TranslationEngine(terminology=terminology)
        assert engine.get_method_capabilities(TranslationMethod.PRIMARY).accuracy == 0.85
        assert METHOD_CAPABILITIES[TranslationMethod.RULE_BASED].max_length == 5000

    def test_fallback_methods_have_no_capabilities(
        self, terminology: LegalTerminologyManager
    ) -> None:
        """Test synthesized methods are not engine methods."""
        engine = TranslationEngine(terminology=terminology)
        with pytest.raises(ValueError, match="not an engine method"):
            engine.get_method_capabilities(TranslationMethod.TEMPLATE)


@pytest.mark.unit
class TestAttempt:
    """Test running a single method."""

    @pytest.mark.asyncio
    async def test_successful_attempt(
        self, fixed_backend_class, terminology, settings, arabic_request
    ) -> None:
        """Test a working backend produces a candidate."""
        backend = fixed_backend_class("en vertu de l'article 5 du code civil", confidence=0.9)
        engine = TranslationEngine(
            primary_backend=backend, terminology=terminology, settings=settings
        )

        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.PRIMARY
        )

        assert attempt.succeeded
        assert attempt.text == "en vertu de l'article 5 du code civil"
        assert attempt.method is TranslationMethod.PRIMARY
        assert attempt.confidence == 0.9
        assert attempt.validation is None
        assert backend.calls == [arabic_request.text]

    @pytest.mark.asyncio
    async def test_backend_failure_reported(
        self, failing_backend, terminology, settings, arabic_request
    ) -> None:
        """Test backend errors are captured, not raised."""
        engine = TranslationEngine(
            secondary_backend=failing_backend, terminology=terminology, settings=settings
        )

        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.SECONDARY
        )

        assert not attempt.succeeded
        assert attempt.text == ""
        assert attempt.errors == ("service unreachable",)

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(
        self, crashing_backend, terminology, settings, arabic_request
    ) -> None:
        """Test programming errors are not mistaken for backend failures."""
        engine = TranslationEngine(
            primary_backend=crashing_backend, terminology=terminology, settings=settings
        )
        with pytest.raises(RuntimeError):
            await engine.attempt(
                cleaned(arabic_request.text), arabic_request, TranslationMethod.PRIMARY
            )

    @pytest.mark.asyncio
    async def test_long_input_clamped(
        self, fixed_backend_class, terminology, settings, request_factory
    ) -> None:
        """Test input beyond the method limit is clamped with a warning."""
        backend = fixed_backend_class("contrat")
        engine = TranslationEngine(
            primary_backend=backend, terminology=terminology, settings=settings
        )
        text = "عقد " * 3000
        request = request_factory(text)

        attempt = await engine.attempt(cleaned(text), request, TranslationMethod.PRIMARY)

        assert len(backend.calls[0]) == 10000
        assert attempt.warnings[0] == "Input clamped from 12000 to 10000 characters"

    @pytest.mark.asyncio
    async def test_confidence_clamped(
        self, fixed_backend_class, terminology, settings, arabic_request
    ) -> None:
        """Test out-of-range backend confidence is clamped."""
        engine = TranslationEngine(
            primary_backend=fixed_backend_class("contrat", confidence=1.5),
            terminology=terminology,
            settings=settings,
        )
        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.PRIMARY
        )
        assert attempt.confidence == 1.0

    @pytest.mark.asyncio
    async def test_rule_based_attempt(self, terminology, settings, arabic_request) -> None:
        """Test the rule-based method needs no backend."""
        engine = TranslationEngine(terminology=terminology, settings=settings)

        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.RULE_BASED
        )

        assert attempt.succeeded
        assert "code civil" in attempt.text


@pytest.mark.unit
class TestHybrid:
    """Test the hybrid method."""

    @pytest.mark.asyncio
    async def test_prefers_target_script(
        self, fixed_backend_class, terminology, settings, arabic_request
    ) -> None:
        """Test the candidate written in the target script wins."""
        engine = TranslationEngine(
            primary_backend=fixed_backend_class("بموجب contrat", confidence=0.99),
            terminology=terminology,
            settings=settings,
        )

        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.HYBRID
        )

        assert attempt.text.startswith("en vertu de l'article 5")

    @pytest.mark.asyncio
    async def test_survives_primary_failure(
        self, failing_backend, terminology, settings, arabic_request
    ) -> None:
        """Test hybrid falls back to the rule-based candidate."""
        engine = TranslationEngine(
            primary_backend=failing_backend, terminology=terminology, settings=settings
        )

        attempt = await engine.attempt(
            cleaned(arabic_request.text), arabic_request, TranslationMethod.HYBRID
        )

        assert attempt.succeeded
        assert "code civil" in attempt.text
