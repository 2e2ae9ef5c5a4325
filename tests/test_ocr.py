"""Tests for the Tesseract OCR engine wrapper."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from src.ocr.tesseract_engine import OCRResult, TesseractEngine, is_available


def _mock_tesseract_data() -> dict:
    """Create mock pytesseract output data."""
    return {
        "text": ["", "Total", "$12.50", "", "42"],
        "conf": [-1, 95, 88, -1, 72],
    }


class TestTesseractEngine:
    """Tests for the TesseractEngine class (mocked)."""

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = "Total $12.50\n42"
        mock_pytesseract.image_to_data.return_value = _mock_tesseract_data()
        mock_pytesseract.Output.DICT = "dict"

        engine = TesseractEngine(default_lang="eng")
        image = np.zeros((100, 200), dtype=np.uint8)
        result = engine.extract_text(image, psm=6)

        assert isinstance(result, OCRResult)
        assert result.text == "Total $12.50\n42"
        assert result.word_count == 3
        assert result.language == "eng"
        assert result.psm == 6
        assert result.confidence == pytest.approx(0.85)

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text_empty_image(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = ""
        mock_pytesseract.image_to_data.return_value = {"text": [], "conf": []}
        mock_pytesseract.Output.DICT = "dict"

        engine = TesseractEngine()
        result = engine.extract_text(np.zeros((100, 200), dtype=np.uint8))

        assert result.text == ""
        assert result.word_count == 0
        assert result.confidence == 0.0

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text_string_confidences(
        self, mock_pytesseract: MagicMock
    ) -> None:
        mock_pytesseract.image_to_string.return_value = "42"
        mock_pytesseract.image_to_data.return_value = {
            "text": ["42", " "],
            "conf": ["90", "-1"],
        }
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().extract_text(np.zeros((10, 10), dtype=np.uint8))
        assert result.word_count == 1
        assert result.confidence == pytest.approx(0.9)

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text_custom_lang_and_psm(
        self, mock_pytesseract: MagicMock
    ) -> None:
        mock_pytesseract.image_to_string.return_value = "Prix 12,50 €"
        mock_pytesseract.image_to_data.return_value = {
            "text": ["Prix", "12,50", "€"],
            "conf": [90, 90, 90],
        }
        mock_pytesseract.Output.DICT = "dict"

        engine = TesseractEngine()
        result = engine.extract_text(
            np.zeros((10, 10), dtype=np.uint8), lang="fra", psm=11
        )

        assert result.language == "fra"
        call = mock_pytesseract.image_to_string.call_args
        assert call.kwargs["lang"] == "fra"
        assert call.kwargs["config"] == "--psm 11"

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_custom_tesseract_cmd(self, mock_pytesseract: MagicMock) -> None:
        TesseractEngine(tesseract_cmd="/opt/bin/tesseract")
        assert mock_pytesseract.pytesseract.tesseract_cmd == "/opt/bin/tesseract"

    def test_build_config_with_whitelist(self) -> None:
        engine = TesseractEngine(char_whitelist="0123456789.,")
        assert engine._build_config(6) == (
            "--psm 6 -c tessedit_char_whitelist=0123456789.,"
        )

    def test_build_config_plain(self) -> None:
        assert TesseractEngine()._build_config(3) == "--psm 3"


class TestIsAvailable:
    """Tests for the Tesseract availability check."""

    @patch("src.ocr.tesseract_engine.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        assert is_available() is False
        mock_which.assert_called_once_with("tesseract")

    @patch(
        "src.ocr.tesseract_engine.shutil.which",
        return_value="/usr/bin/tesseract",
    )
    def test_present_with_custom_cmd(self, mock_which: MagicMock) -> None:
        assert is_available("/usr/bin/tesseract") is True
        mock_which.assert_called_once_with("/usr/bin/tesseract")
