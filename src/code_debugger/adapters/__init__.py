"""Concrete implementations of provider interfaces."""

from .llm.anthropic import AnthropicAdapter
from .llm.gemini import GeminiAdapter
from .ocr.tesseract import TesseractExtractor

__all__ = [
    "AnthropicAdapter",
    "GeminiAdapter",
    "TesseractExtractor",
]
