"""Best-effort natural-language explanations for analysis results.

The augmenter turns a set of diagnostics into a single prompt, sends it to the
configured explanation provider, and folds whatever comes back into an
ExplanationResponse. It never raises: a disabled provider, a failed call, or
an unusable reply all end in a response whose fields are None or hold the
raw reply text.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from code_debugger.interfaces.llm import ExplanationProvider
from code_debugger.models.analysis import NO_EXPLANATION, ExplanationRequest, ExplanationResponse
from code_debugger.models.diagnostic import Diagnostic
from code_debugger.utils.async_helpers import with_timeout
from code_debugger.utils.logging import LogEventNames
from code_debugger.utils.security import SecretRedactor

log = structlog.get_logger()

UNPARSED_SUGGESTION = "Could not parse AI response into JSON. Check original AI response."

FENCED_JSON_PATTERN = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)

PROMPT_TEMPLATE = """You are an expert code debugger. Analyze the following {language} code \
and its reported issues. Provide a clear, concise explanation of the root cause of the \
error(s) and a specific, actionable suggestion to fix it. If possible, provide the \
complete corrected code.

Code:
```{language}
{code}
```

Reported Issues:
{issues}

Please provide your response in the following JSON format:
{{
  "explanation": "Detailed explanation of the problem.",
  "suggestion": "Specific steps to fix the problem.",
  "fixedCode": "If possible, the complete corrected code block. Otherwise, null."
}}
"""


class ExplanationPayload(BaseModel):
    """Validated JSON object returned by the explanation service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    explanation: str | None = None
    suggestion: str | None = None
    fixed_code: str | None = Field(default=None, alias="fixedCode")


def format_issue(diagnostic: Diagnostic) -> str:
    """Render one diagnostic as a bullet line for the prompt."""
    return (
        f"- Line {diagnostic.line}, Column {diagnostic.column} "
        f"[{diagnostic.severity.value.upper()}]: {diagnostic.message} "
        f"(Rule: {diagnostic.rule_id or 'N/A'})"
    )


def build_prompt(request: ExplanationRequest, redactor: SecretRedactor | None = None) -> str:
    """Build the explanation prompt for one request.

    Args:
        request: Code, language tag and diagnostics to explain.
        redactor: If given, code and diagnostic text are redacted first.

    Returns:
        The complete prompt text.
    """
    code = request.code
    issues = "\n".join(format_issue(d) for d in request.diagnostics)
    if redactor is not None:
        found = redactor.detect(code + "\n" + issues)
        if found:
            log.info("secrets_redacted_from_prompt", kinds=found)
        code = redactor.redact(code)
        issues = redactor.redact(issues)
    return PROMPT_TEMPLATE.format(language=request.language, code=code, issues=issues)


def isolate_json(text: str) -> str | None:
    """Find the JSON object in a free-text reply.

    A fenced ```json block wins; otherwise the span from the first ``{`` to
    the last ``}`` is used.
    """
    match = FENCED_JSON_PATTERN.search(text)
    if match:
        candidate = match.group(1)
    else:
        start = text.find("{")
        end = text.rfind("}")
        candidate = text[start : end + 1] if start != -1 and end > start else ""
    return candidate if candidate.strip() else None


def parse_explanation_response(text: str) -> ExplanationResponse:
    """Parse the service's reply into an ExplanationResponse.

    Replies without a usable JSON object are kept as the explanation, with
    a fixed suggestion pointing at the raw text.
    """
    candidate = isolate_json(text)
    if candidate is not None:
        try:
            payload = ExplanationPayload.model_validate(json.loads(candidate))
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning(LogEventNames.AI_RESPONSE_NOT_JSON, error=str(e)[:200])
        else:
            return ExplanationResponse(
                explanation=payload.explanation,
                suggestion=payload.suggestion,
                fixed_code=payload.fixed_code,
            )
    else:
        log.warning(LogEventNames.AI_RESPONSE_NOT_JSON, response_preview=text[:200])

    return ExplanationResponse(explanation=text, suggestion=UNPARSED_SUGGESTION, fixed_code=None)


class ExplanationAugmenter:
    """Asks the explanation service about a set of diagnostics.

    Example:
        augmenter = ExplanationAugmenter(provider, timeout=60)
        ai = await augmenter.augment(code, "python", diagnostics)
        ai.explanation  # None when the service is disabled or failed
    """

    def __init__(
        self,
        provider: ExplanationProvider | None,
        timeout: float | None = 60.0,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the augmenter.

        Args:
            provider: Explanation provider, or None to disable explanations.
            timeout: Per-call timeout in seconds. None waits indefinitely.
            redactor: Secret redactor applied to prompts. None sends text as is.
        """
        self._provider = provider
        self._timeout = timeout
        self._redactor = redactor
        if provider is None:
            log.warning(LogEventNames.AI_EXPLANATIONS_DISABLED)

    @property
    def enabled(self) -> bool:
        """Whether an explanation provider is configured."""
        return self._provider is not None

    async def augment(
        self,
        code: str,
        language: str,
        diagnostics: Sequence[Diagnostic],
    ) -> ExplanationResponse:
        """Request an explanation, suggestion and fixed code.

        Args:
            code: The analyzed source code.
            language: Language tag of the code.
            diagnostics: Diagnostics produced by the analysis.

        Returns:
            The parsed response; all fields None when disabled or on failure.
        """
        if self._provider is None:
            return NO_EXPLANATION

        request = ExplanationRequest(code=code, language=language, diagnostics=tuple(diagnostics))
        log.info(
            LogEventNames.AI_EXPLANATION_REQUESTED,
            model=self._provider.model_name,
            diagnostics=len(request.diagnostics),
        )

        try:
            prompt = build_prompt(request, self._redactor)
            text = await with_timeout(
                self._provider.complete(prompt),
                self._timeout,
                f"Explanation request timed out after {self._timeout}s",
            )
        except Exception as e:
            log.error(
                LogEventNames.AI_EXPLANATION_FAILED, error=str(e), error_type=type(e).__name__
            )
            return NO_EXPLANATION

        return parse_explanation_response(text)

    async def close(self) -> None:
        """Close the provider, if any."""
        if self._provider is not None:
            await self._provider.close()
