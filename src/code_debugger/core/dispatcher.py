"""Language dispatch for analysis requests.

The dispatcher owns a lookup table from language tag to strategy, built once
at startup by :func:`create_dispatcher`. Supporting a new language means
registering one more strategy; the dispatch itself never changes.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from code_debugger.config.schema import DebuggerConfig
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.models.analysis import AnalysisResult
from code_debugger.utils.logging import LogEventNames
from code_debugger.utils.security import SecretRedactor

if TYPE_CHECKING:
    from code_debugger.interfaces.llm import ExplanationProvider
    from code_debugger.interfaces.strategy import AnalysisStrategy

log = structlog.get_logger()


def normalize_language(language: str) -> str:
    """Normalize a language tag for lookup."""
    return language.strip().lower()


class AnalysisDispatcher:
    """Routes each request to exactly one analysis strategy.

    Example:
        dispatcher = create_dispatcher(config)
        result = await dispatcher.analyze("print(x)", "Python")
    """

    def __init__(self, strategies: Iterable[AnalysisStrategy]) -> None:
        """Initialize the dispatcher.

        Args:
            strategies: Strategies to register under their name and aliases.

        Raises:
            ValueError: If two strategies claim the same language tag.
        """
        self._strategies: dict[str, AnalysisStrategy] = {}
        for strategy in strategies:
            for tag in (strategy.name, *strategy.aliases):
                key = normalize_language(tag)
                if key in self._strategies:
                    raise ValueError(f"Language tag registered twice: {key}")
                self._strategies[key] = strategy

    @property
    def languages(self) -> tuple[str, ...]:
        """All registered language tags, sorted."""
        return tuple(sorted(self._strategies))

    def strategy_for(self, language: str) -> AnalysisStrategy | None:
        """Return the strategy registered for a tag, if any."""
        return self._strategies.get(normalize_language(language))

    async def analyze(self, code: str, language: str) -> AnalysisResult:
        """Analyze code with the strategy registered for its language.

        Args:
            code: Source code text.
            language: Language tag, matched case-insensitively.

        Returns:
            The strategy's result unchanged, or a failed result for an
            unsupported language. No tool is touched in the latter case.

        Raises:
            ToolSpawnError: If the chosen strategy could not start its tool.
        """
        strategy = self.strategy_for(language)
        if strategy is None:
            log.warning(LogEventNames.UNSUPPORTED_LANGUAGE, language=language)
            return AnalysisResult.failure(f"Unsupported language for debugging: {language}.")

        log.info(LogEventNames.ANALYSIS_STARTED, language=strategy.name, code_length=len(code))
        result = await strategy.analyze(code)
        log.info(
            LogEventNames.ANALYSIS_COMPLETE,
            language=strategy.name,
            success=result.success,
            diagnostics=len(result.diagnostics),
        )
        return result


def create_explanation_provider(config: DebuggerConfig) -> ExplanationProvider | None:
    """Create the explanation provider selected in configuration.

    Args:
        config: Application configuration

    Returns:
        Provider instance, or None when explanations are disabled or the
        selected provider has no API key
    """
    provider = config.llm.provider

    if provider == "anthropic":
        if not config.llm.anthropic or not config.llm.anthropic.api_key:
            return None
        # Import here to avoid loading unnecessary dependencies
        from code_debugger.adapters.llm.anthropic import AnthropicAdapter

        return AnthropicAdapter(config.llm.anthropic)

    if provider == "gemini":
        if not config.llm.gemini or not config.llm.gemini.api_key:
            return None
        from code_debugger.adapters.llm.gemini import GeminiAdapter

        return GeminiAdapter(config.llm.gemini)

    return None


def create_augmenter(config: DebuggerConfig) -> ExplanationAugmenter:
    """Create the explanation augmenter for the configured provider."""
    redactor = SecretRedactor() if config.llm.redact_secrets else None
    return ExplanationAugmenter(
        create_explanation_provider(config),
        timeout=config.llm.timeout,
        redactor=redactor,
    )


def create_dispatcher(
    config: DebuggerConfig,
    augmenter: ExplanationAugmenter | None = None,
    temp_dir: Path | None = None,
) -> AnalysisDispatcher:
    """Factory function to create a dispatcher with all strategies.

    Args:
        config: Application configuration
        augmenter: Explanation augmenter; built from configuration if None
        temp_dir: Directory for temporary artifacts (system default if None)

    Returns:
        Dispatcher for JavaScript, Python and C++
    """
    from code_debugger.core.strategies import CFamilyStrategy, JavaScriptStrategy, PythonStrategy

    if augmenter is None:
        augmenter = create_augmenter(config)

    timeout = config.tools.timeout
    return AnalysisDispatcher(
        [
            JavaScriptStrategy(config.javascript.rules, augmenter),
            PythonStrategy(config.python, augmenter, timeout=timeout, temp_dir=temp_dir),
            CFamilyStrategy(config.cfamily, augmenter, timeout=timeout, temp_dir=temp_dir),
        ]
    )
