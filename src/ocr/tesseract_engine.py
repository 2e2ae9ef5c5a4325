"""Tesseract OCR engine wrapper.

Runs a single recognition pass over a captured image and reports the
recognized text together with the mean word confidence.
"""

import shutil
from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Text recognized by one OCR pass."""

    text: str
    language: str
    confidence: float
    word_count: int
    psm: int


def is_available(tesseract_cmd: str | None = None) -> bool:
    """Return whether the Tesseract executable can be found."""
    return shutil.which(tesseract_cmd or "tesseract") is not None


class TesseractEngine:
    """Wrapper around Tesseract for single-pass text recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        char_whitelist: Optional set of characters Tesseract may emit.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        char_whitelist: str | None = None,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.char_whitelist = char_whitelist

    def _build_config(self, psm: int) -> str:
        config = f"--psm {psm}"
        if self.char_whitelist:
            config += f" -c tessedit_char_whitelist={self.char_whitelist}"
        return config

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int = 6,
    ) -> OCRResult:
        """Recognize the text in an image.

        Args:
            image: Input image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode.

        Returns:
            OCRResult with the full text and average word confidence.

        Raises:
            pytesseract.TesseractError: If Tesseract fails on the image.
        """
        lang = lang or self.default_lang
        config = self._build_config(psm)

        pil_image = Image.fromarray(image)
        text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
        data = pytesseract.image_to_data(
            pil_image,
            lang=lang,
            config=config,
            output_type=pytesseract.Output.DICT,
        )

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        logger.info(
            "OCR pass psm=%d read %d words with average confidence %.2f",
            psm,
            len(confidences),
            avg_conf,
        )
        return OCRResult(
            text=text,
            language=lang,
            confidence=avg_conf,
            word_count=len(confidences),
            psm=psm,
        )
