"""Core analysis pipeline.

This module exports the main analysis classes:
- AnalysisDispatcher: Routes a request to the strategy for its language
- ExplanationAugmenter: Adds best-effort AI explanations to results
- JavaScriptLinter: In-process linter used for JavaScript
- CodeSubmission: Code and language resolved from an upload or paste
"""

from code_debugger.core.dispatcher import (
    AnalysisDispatcher,
    create_augmenter,
    create_dispatcher,
    create_explanation_provider,
)
from code_debugger.core.explainer import ExplanationAugmenter
from code_debugger.core.ingress import CodeSubmission, resolve_pasted, resolve_upload
from code_debugger.core.js_linter import JavaScriptLinter

__all__ = [
    "AnalysisDispatcher",
    "CodeSubmission",
    "ExplanationAugmenter",
    "JavaScriptLinter",
    "create_augmenter",
    "create_dispatcher",
    "create_explanation_provider",
    "resolve_pasted",
    "resolve_upload",
]
