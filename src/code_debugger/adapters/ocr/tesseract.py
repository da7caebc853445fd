"""Tesseract OCR adapter.

Implements the TextExtractor protocol with pytesseract and Pillow. OCR is
CPU bound and blocking, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import io

import pytesseract
import structlog
from PIL import Image, UnidentifiedImageError

from ...config.schema import OCRConfig
from ...utils.async_helpers import OCRError

log = structlog.get_logger()


class TesseractExtractor:
    """Extracts text from images with the Tesseract engine.

    Example:
        extractor = TesseractExtractor(OCRConfig(language="eng"))
        text = await extractor.extract_text(png_bytes)
    """

    def __init__(self, config: OCRConfig) -> None:
        """Initialize the extractor.

        Args:
            config: OCR language and optional tesseract binary path.
        """
        self._config = config
        if config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_cmd

    def _extract_sync(self, image: bytes) -> str:
        try:
            with Image.open(io.BytesIO(image)) as picture:
                return str(pytesseract.image_to_string(picture, lang=self._config.language))
        except UnidentifiedImageError as e:
            raise OCRError(f"Unsupported or corrupt image: {e}") from e
        except pytesseract.TesseractNotFoundError as e:
            raise OCRError(
                "Tesseract is not installed or not in your system's PATH."
            ) from e
        except (pytesseract.TesseractError, OSError) as e:
            raise OCRError(f"OCR failed: {e}") from e

    async def extract_text(self, image: bytes) -> str:
        """Run OCR over an image.

        Raises:
            OCRError: If the image cannot be read or OCR fails.
        """
        log.debug("ocr_started", size=len(image), language=self._config.language)
        text = await asyncio.to_thread(self._extract_sync, image)
        log.info("ocr_complete", characters=len(text))
        return text
