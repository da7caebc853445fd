"""Interface shared by the per-language analysis strategies."""

from typing import Protocol

from ..models.analysis import AnalysisResult


class AnalysisStrategy(Protocol):
    """One way of analyzing source code in a single language.

    Strategies are registered with the dispatcher under their ``name`` and
    every tag in ``aliases``.
    """

    @property
    def name(self) -> str:
        """Canonical lower-case language tag, e.g. ``"python"``."""
        ...

    @property
    def aliases(self) -> tuple[str, ...]:
        """Additional lower-case tags routed to this strategy."""
        ...

    async def analyze(self, code: str) -> AnalysisResult:
        """
        Analyze one in-memory source unit.

        Args:
            code: Source code text as submitted.

        Returns:
            The analysis outcome. Tool-unavailable, tool-execution and
            resource-setup problems are reported as failed results.

        Raises:
            ToolSpawnError: If an external tool process could not be started.
        """
        ...
