"""Abstract interface for the explanation service."""

from typing import Protocol


class ExplanationProvider(Protocol):
    """Abstract interface for LLM integrations.

    Providers only move text; prompt construction and response parsing
    belong to the explanation augmenter.
    """

    @property
    def model_name(self) -> str:
        """
        Return the model identifier being used.

        Examples:
            - "claude-3-5-sonnet-20241022"
            - "gemini-2.5-flash"
        """
        ...

    async def complete(self, prompt: str) -> str:
        """
        Send a single prompt and return the model's text reply.

        Security: The prompt MUST be redacted using SecretRedactor
        before being passed to this method.

        Args:
            prompt: Complete user prompt

        Returns:
            The concatenated text of the model response

        Raises:
            LLMAnalysisError: If the call fails
            RateLimitError: If rate limit exceeded
            TimeoutError: If request times out
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the provider."""
        ...
