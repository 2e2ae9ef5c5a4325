"""Capture-to-numbers scanning.

Loads a captured image, runs OCR passes in fallback order, and extracts
the numeric tokens from the first pass that yields any.
"""

import io
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytesseract
from PIL import Image

from src.extraction.number_extractor import CanonicalToken, NumberExtractor
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)


class NoNumbersFoundError(Exception):
    """Raised by callers that treat an empty scan as a failure."""


@dataclass
class ScanResult:
    """Outcome of scanning one capture."""

    source: str
    numbers: list[str]
    tokens: list[CanonicalToken] = field(default_factory=list)
    raw_text: str = ""
    ocr_pass: int | None = None
    confidence: float = 0.0
    scan_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def require_numbers(result: ScanResult) -> ScanResult:
    """Return the result unchanged, or raise if it holds no numbers.

    Raises:
        NoNumbersFoundError: If the scan produced no numeric tokens.
    """
    if not result.numbers:
        raise NoNumbersFoundError(f"No numbers found in {result.source}")
    return result


class NumberScanner:
    """Runs OCR over captures and extracts their numbers.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            char_whitelist=config.ocr.char_whitelist,
        )
        self.extractor = NumberExtractor(config.extraction)

    @property
    def ocr_passes(self) -> list[int]:
        """Page segmentation modes to try, in order."""
        passes = [self.config.ocr.psm]
        fallback = self.config.ocr.fallback_psm
        if fallback is not None and fallback != self.config.ocr.psm:
            passes.append(fallback)
        return passes

    def load_image(self, source: Path | bytes) -> np.ndarray:
        """Load a capture from a file path or raw bytes as an RGB array."""
        if isinstance(source, bytes):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(Path(source))
        return np.array(img.convert("RGB"))

    def scan_text(
        self, text: str, source: str = "text", max_results: int | None = None
    ) -> ScanResult:
        """Extract numbers from already recognized text."""
        tokens = self.extractor.extract_tokens(text, max_results)
        logger.info("Found %d numbers in %s", len(tokens), source)
        return ScanResult(
            source=source,
            numbers=[t.display_text for t in tokens],
            tokens=tokens,
            raw_text=text or "",
        )

    def scan(
        self,
        source: Path | bytes,
        name: str = "capture",
        max_results: int | None = None,
    ) -> ScanResult:
        """Scan a capture, falling back to the next OCR pass on no numbers.

        Args:
            source: Path to an image file, or raw image bytes.
            name: Display name for the capture.
            max_results: Overrides the configured cap for this scan.

        Returns:
            The result of the first pass that found numbers, or the last
            pass attempted when none did.
        """
        logger.info("Scanning %s", name)
        image = self.load_image(source)
        result = ScanResult(source=name, numbers=[])

        for psm in self.ocr_passes:
            try:
                ocr_result = self.ocr_engine.extract_text(image, psm=psm)
            except pytesseract.TesseractError as exc:
                logger.warning("OCR pass psm=%d failed on %s: %s", psm, name, exc)
                continue

            tokens = self.extractor.extract_tokens(ocr_result.text, max_results)
            numbers = [t.display_text for t in tokens]
            result = ScanResult(
                source=name,
                numbers=numbers,
                tokens=tokens,
                raw_text=ocr_result.text,
                ocr_pass=psm,
                confidence=ocr_result.confidence,
            )
            if numbers:
                logger.info(
                    "OCR pass psm=%d found %d numbers in %s", psm, len(numbers), name
                )
                return result
            logger.info("OCR pass psm=%d found no numbers in %s", psm, name)

        return result
