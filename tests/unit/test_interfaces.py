"""Tests for protocol interfaces."""

from unittest.mock import MagicMock

import pytest

from code_debugger.adapters import AnthropicAdapter, GeminiAdapter, TesseractExtractor
from code_debugger.config.schema import (
    AnthropicConfig,
    CFamilyConfig,
    GeminiConfig,
    OCRConfig,
    PythonLintConfig,
)
from code_debugger.core.dispatcher import AnalysisDispatcher
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.core.strategies.cfamily import CFamilyStrategy
from code_debugger.core.strategies.javascript import JavaScriptStrategy
from code_debugger.core.strategies.python import PythonStrategy
from code_debugger.interfaces import AnalysisStrategy, ExplanationProvider, TextExtractor
from code_debugger.models.analysis import AnalysisResult


class MockExplanationProvider:
    """Mock implementation of ExplanationProvider for testing protocol compliance."""

    @property
    def model_name(self) -> str:
        return "mock-model"

    async def complete(self, prompt: str) -> str:
        return '{"explanation": "E", "suggestion": "S", "fixedCode": null}'

    async def close(self) -> None:
        return None


class MockTextExtractor:
    """Mock implementation of TextExtractor for testing protocol compliance."""

    async def extract_text(self, image: bytes) -> str:
        return "print('hi')"


class MockStrategy:
    """Mock implementation of AnalysisStrategy for testing protocol compliance."""

    @property
    def name(self) -> str:
        return "ruby"

    @property
    def aliases(self) -> tuple[str, ...]:
        return ("rb",)

    async def analyze(self, code: str) -> AnalysisResult:
        return AnalysisResult.completed(code, [])


class TestExplanationProviderProtocol:
    """Test ExplanationProvider protocol."""

    def test_adapters_implement_protocol(self) -> None:
        providers: list[ExplanationProvider] = [
            AnthropicAdapter(AnthropicConfig(api_key="k"), client=MagicMock()),
            GeminiAdapter(GeminiConfig(api_key="k"), client=MagicMock()),
            MockExplanationProvider(),
        ]
        for provider in providers:
            assert isinstance(provider.model_name, str)
            assert hasattr(provider, "complete")

    async def test_augmenter_accepts_provider(self) -> None:
        augmenter = ExplanationAugmenter(MockExplanationProvider())
        response = await augmenter.augment("x = 1", "python", [])
        assert response.explanation == "E"


class TestTextExtractorProtocol:
    """Test TextExtractor protocol."""

    def test_extractors_implement_protocol(self) -> None:
        extractors: list[TextExtractor] = [
            TesseractExtractor(OCRConfig()),
            MockTextExtractor(),
        ]
        for extractor in extractors:
            assert hasattr(extractor, "extract_text")

    async def test_mock_extract(self) -> None:
        assert await MockTextExtractor().extract_text(b"png") == "print('hi')"


class TestAnalysisStrategyProtocol:
    """Test AnalysisStrategy protocol."""

    @pytest.mark.parametrize(
        ("strategy", "name"),
        [
            (JavaScriptStrategy({}, ExplanationAugmenter(None)), "javascript"),
            (PythonStrategy(PythonLintConfig(), ExplanationAugmenter(None)), "python"),
            (CFamilyStrategy(CFamilyConfig(), ExplanationAugmenter(None)), "c++"),
        ],
    )
    def test_strategies_implement_protocol(self, strategy: AnalysisStrategy, name: str) -> None:
        assert strategy.name == name
        assert isinstance(strategy.aliases, tuple)
        assert hasattr(strategy, "analyze")

    async def test_dispatcher_accepts_custom_strategy(self) -> None:
        dispatcher = AnalysisDispatcher([MockStrategy()])
        result = await dispatcher.analyze("puts 1", "RB")
        assert result.success is True
        assert result.fixed_code == "puts 1"
