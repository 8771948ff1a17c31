"""Shared pytest fixtures for puretrans tests.

Provides fake translation backends, pipeline components built on
isolated settings, and common request factories.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio
from typer.testing import CliRunner

from puretrans.cleaning.cleaner import ContentCleaner
from puretrans.core.gateway import TranslationGateway
from puretrans.core.models import (
    ContentType,
    Language,
    LegalDomain,
    TranslationContext,
    TranslationRequest,
)
from puretrans.mt.base import (
    BackendResult,
    BaseTranslationBackend,
    BackendUnavailableError,
)
from puretrans.purity.validator import PurityValidator
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.config import PipelineSettings

# ============================================================================
# Fake Backends
# ============================================================================


class FixedBackend(BaseTranslationBackend):
    """Backend that always answers with the same text."""

    name = "fixed"

    def __init__(self, output: str, confidence: float = 0.9) -> None:
        super().__init__()
        self.output = output
        self.confidence = confidence
        self.calls: list[str] = []

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        self._track(text)
        self.calls.append(text)
        return BackendResult(
            text=self.output,
            source_language=source_language,
            target_language=target_language,
            confidence=self.confidence,
        )


class FailingBackend(BaseTranslationBackend):
    """Backend that is never reachable."""

    name = "failing"

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        self._track(text)
        raise BackendUnavailableError("service unreachable")


class SlowBackend(FixedBackend):
    """Backend that answers after a delay."""

    name = "slow"

    def __init__(self, output: str, delay: float) -> None:
        super().__init__(output)
        self.delay = delay

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        await asyncio.sleep(self.delay)
        return await super().translate(text, source_language, target_language, domain)


class CrashingBackend(BaseTranslationBackend):
    """Backend with a programming error."""

    name = "crashing"

    async def translate(
        self,
        text: str,
        source_language: Language,
        target_language: Language,
        domain: LegalDomain | None = None,
    ) -> BackendResult:
        raise RuntimeError("unexpected backend bug")


@pytest.fixture
def fixed_backend_class() -> type[FixedBackend]:
    """Provide FixedBackend for tests that need custom outputs."""
    return FixedBackend


@pytest.fixture
def failing_backend() -> FailingBackend:
    return FailingBackend()


@pytest.fixture
def slow_backend_class() -> type[SlowBackend]:
    return SlowBackend


@pytest.fixture
def crashing_backend() -> CrashingBackend:
    return CrashingBackend()


# ============================================================================
# Pipeline Components
# ============================================================================


@pytest.fixture
def settings() -> PipelineSettings:
    """Settings with background monitoring disabled."""
    return PipelineSettings(monitoring_enabled=False)


@pytest.fixture
def terminology(settings: PipelineSettings) -> LegalTerminologyManager:
    return LegalTerminologyManager(settings=settings)


@pytest.fixture
def cleaner(settings: PipelineSettings) -> ContentCleaner:
    return ContentCleaner(settings)


@pytest.fixture
def validator(
    cleaner: ContentCleaner, terminology: LegalTerminologyManager, settings: PipelineSettings
) -> PurityValidator:
    return PurityValidator(cleaner, terminology, settings)


@pytest_asyncio.fixture
async def gateway(settings: PipelineSettings) -> AsyncIterator[TranslationGateway]:
    """Gateway with the built-in backends; shut down after the test."""
    instance = TranslationGateway(settings)
    yield instance
    await instance.shutdown()


# ============================================================================
# Request Factories
# ============================================================================


def make_request(
    text: str,
    source: Language = Language.ARABIC,
    target: Language = Language.FRENCH,
    domain: LegalDomain | None = None,
    content_type: ContentType = ContentType.LEGAL_DOCUMENT,
) -> TranslationRequest:
    """Build a translation request."""
    return TranslationRequest(
        text=text,
        source_language=source,
        target_language=target,
        content_type=content_type,
        context=TranslationContext(legal_domain=domain) if domain else None,
    )


@pytest.fixture
def request_factory() -> Callable[..., TranslationRequest]:
    """Provide :func:`make_request` for tests that build their own requests."""
    return make_request


@pytest.fixture
def arabic_request() -> TranslationRequest:
    """A clean Arabic legal sentence."""
    return make_request("بموجب المادة 5 من القانون المدني")


# ============================================================================
# CLI Fixtures
# ============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide Typer CLI test runner."""
    return CliRunner()


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Modify test collection to auto-mark tests based on location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests",
    )


def pytest_runtest_setup(item: pytest.Item) -> None:
    """Skip slow tests unless --run-slow is specified."""
    if "slow" in item.keywords and not item.config.getoption("--run-slow"):
        pytest.skip("Slow tests skipped (use --run-slow to run)")
