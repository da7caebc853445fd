"""Google Gemini explanation adapter.

Talks to the Generative Language REST API directly with httpx:

    POST {base_url}/models/{model}:generateContent
    x-goog-api-key: <key>

    {"contents": [{"role": "user", "parts": [{"text": "..."}]}],
     "generationConfig": {"temperature": 0.3, "maxOutputTokens": 4096}}

The reply text is the concatenation of ``candidates[0].content.parts[*].text``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import GeminiConfig
from ...utils.async_helpers import LLMAnalysisError, RateLimitError, TimeoutError

log = structlog.get_logger()

# Maximum response length in characters
MAX_RESPONSE_LENGTH = 50000


def extract_text(payload: dict[str, Any]) -> str:
    """Pull the reply text out of a generateContent response.

    Raises:
        LLMAnalysisError: If the response has no text candidate.
    """
    candidates = payload.get("candidates") or []
    if not candidates:
        feedback = payload.get("promptFeedback", {})
        raise LLMAnalysisError(f"Gemini returned no candidates: {feedback}")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text:
        reason = candidates[0].get("finishReason", "unknown")
        raise LLMAnalysisError(f"Gemini returned an empty response (finish reason: {reason})")
    return text


class GeminiAdapter:
    """Gemini adapter implementing the ExplanationProvider protocol.

    Example:
        adapter = GeminiAdapter(GeminiConfig(api_key="AIza..."))
        text = await adapter.complete(prompt)
        await adapter.close()
    """

    def __init__(
        self,
        config: GeminiConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Gemini adapter.

        Args:
            config: Gemini-specific configuration.
            client: HTTP client to use. If None, one is created and owned.
        """
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=10.0))

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    @property
    def endpoint(self) -> str:
        """The generateContent URL for the configured model."""
        return f"{self._config.base_url.rstrip('/')}/models/{self._config.model}:generateContent"

    def build_body(self, prompt: str) -> dict[str, Any]:
        """Build the generateContent request body."""
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }

    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the reply text.

        Raises:
            LLMAnalysisError: If the call fails or the reply is unusable.
            RateLimitError: If rate limit exceeded.
            TimeoutError: If request times out.
        """
        headers = {"x-goog-api-key": self._config.api_key or ""}
        try:
            response = await self._client.post(
                self.endpoint, json=self.build_body(prompt), headers=headers
            )
        except httpx.TimeoutException as e:
            log.error("gemini_timeout", error=str(e))
            raise TimeoutError(f"Gemini request timed out: {e}") from e
        except httpx.HTTPError as e:
            log.error("gemini_transport_error", error=str(e))
            raise LLMAnalysisError(f"Gemini request failed: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            log.warning("gemini_rate_limit", retry_after=retry_after)
            raise RateLimitError(
                "Gemini rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code >= 400:
            log.error("gemini_api_error", status=response.status_code)
            raise LLMAnalysisError(
                f"Gemini API error {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise LLMAnalysisError(f"Gemini returned invalid JSON: {e}") from e

        text = extract_text(payload)
        if len(text) > MAX_RESPONSE_LENGTH:
            raise LLMAnalysisError(f"Response exceeds maximum length: {len(text)}")
        return text

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
