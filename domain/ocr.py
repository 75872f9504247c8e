"""Text recognition for captured recipe pages.

Tesseract must be installed on the host (e.g. ``apt install tesseract-ocr``).
Recognition runs in a worker thread so the event loop stays responsive.
"""

import io
import logging
from pathlib import Path
from typing import Callable, TypeAlias

from PIL import Image
import pytesseract

from ajolt import jolted_thread


logger = logging.getLogger(__name__)


PageImage: TypeAlias = bytes | str | Path | Image.Image
Recognizer: TypeAlias = Callable[[PageImage], list[str]]


# LSTM engine, automatic page segmentation.
TESSERACT_CONFIG = "--oem 1 --psm 3"


def load_image(image: PageImage) -> Image.Image:
    if isinstance(image, Image.Image):
        return image
    if isinstance(image, (bytes, bytearray)):
        return Image.open(io.BytesIO(image))
    return Image.open(image)


class TesseractRecognizer:
    def __init__(self, lang: str = "eng", config: str = TESSERACT_CONFIG) -> None:
        self.lang = lang
        self.config = config

    def __call__(self, image: PageImage) -> list[str]:
        text: str = pytesseract.image_to_string(
            load_image(image), lang=self.lang, config=self.config
        )
        return [line.strip() for line in text.splitlines() if line.strip()]


class TextExtractor:
    def __init__(self, recognizer: Recognizer | None = None) -> None:
        self.recognizer = TesseractRecognizer() if recognizer is None else recognizer

    async def extract(self, image: PageImage | None) -> list[str]:
        """Recognized lines in reading order, empty when there is nothing to use.

        A missing image (capture cancelled), a recognizer failure and a page
        with no text all come back as an empty list.
        """
        if image is None:
            logger.info("No page captured.")
            return []

        try:
            lines = await jolted_thread(self.recognizer, image)
        except Exception as e:
            logger.warning("Text recognition failed: %r", e)
            return []

        if not lines:
            logger.info("No text recognized.")
            return []

        logger.info("Recognized %d lines of text", len(lines))
        return list(lines)
