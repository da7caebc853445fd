"""Abstract interface for image text extraction."""

from typing import Protocol


class TextExtractor(Protocol):
    """Extracts source code text from an image."""

    async def extract_text(self, image: bytes) -> str:
        """
        Run OCR over an uploaded image.

        Args:
            image: Raw image file content (PNG, JPEG, ...)

        Returns:
            The recognized text, possibly empty

        Raises:
            OCRError: If the image cannot be decoded or OCR fails
        """
        ...
