"""Tests for the FastAPI REST endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.extraction.number_extractor import CanonicalToken
from src.ocr.scanner import ScanResult
from src.utils.config import ApiConfig, AppConfig


@pytest.fixture
def client() -> TestClient:
    """Create a FastAPI test client."""
    return TestClient(app)


def _make_scan_result(source: str = "test.png") -> ScanResult:
    """Create a ScanResult as returned by a successful OCR pass."""
    return ScanResult(
        source=source,
        numbers=["$500.00", "500.00"],
        tokens=[
            CanonicalToken("$500.00", 1, 7, 500.0, "currency"),
            CanonicalToken("500.00", 7, 8, 500.0, "decimal"),
        ],
        raw_text="Total: $500.00",
        ocr_pass=6,
        confidence=0.9,
    )


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    @patch("src.api.app.is_available", return_value=True)
    def test_health_returns_ok(self, _: MagicMock, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["tesseract_available"] is True


class TestPatternsEndpoint:
    """Tests for the /patterns endpoint."""

    def test_list_patterns(self, client: TestClient) -> None:
        response = client.get("/patterns")
        assert response.status_code == 200
        patterns = response.json()["patterns"]
        assert len(patterns) == 10
        assert patterns[0] == {"name": "currency", "priority": 1}
        assert patterns[-1] == {"name": "short_whole", "priority": 9}


class TestExtractTextEndpoint:
    """Tests for the /extract/text endpoint."""

    def test_extract_text(self, client: TestClient) -> None:
        response = client.post(
            "/extract/text", json={"text": "Total: 42 items at 15.75% discount"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["numbers"] == ["15.75%", "15.75", "42"]
        assert data["tokens"][0]["pattern"] == "percentage"
        assert data["tokens"][0]["priority"] == 2
        assert data["tokens"][0]["value"] == 15.75
        assert data["ocr_pass"] is None

    def test_extract_text_max_results(self, client: TestClient) -> None:
        response = client.post(
            "/extract/text",
            json={"text": "Total: 42 items at 15.75% discount", "max_results": 1},
        )
        assert response.json()["numbers"] == ["15.75%"]

    def test_extract_empty_text(self, client: TestClient) -> None:
        response = client.post("/extract/text", json={"text": ""})
        assert response.status_code == 200
        assert response.json()["numbers"] == []

    def test_negative_max_results_rejected(self, client: TestClient) -> None:
        response = client.post("/extract/text", json={"text": "42", "max_results": -1})
        assert response.status_code == 422

    def test_missing_text_rejected(self, client: TestClient) -> None:
        response = client.post("/extract/text", json={})
        assert response.status_code == 422

    @patch("src.api.app.load_config")
    def test_text_too_long(self, mock_config: MagicMock, client: TestClient) -> None:
        mock_config.return_value = AppConfig(api=ApiConfig(max_text_length=10))
        response = client.post("/extract/text", json={"text": "12345678901"})
        assert response.status_code == 413


class TestExtractImageEndpoint:
    """Tests for the /extract/image endpoint."""

    @patch("src.api.app._get_scanner")
    def test_extract_success(
        self, mock_scanner: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_scanner.return_value.scan.return_value = _make_scan_result()

        response = client.post(
            "/extract/image",
            files={"file": ("test.png", png_bytes, "image/png")},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["numbers"] == ["$500.00", "500.00"]
        assert data["ocr_pass"] == 6
        assert data["tokens"][1]["pattern"] == "decimal"
        assert "scan_id" in data
        assert "processing_time_ms" in data

    @patch("src.api.app._get_scanner")
    def test_extract_passes_max_results(
        self, mock_scanner: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_scanner.return_value.scan.return_value = _make_scan_result()

        client.post(
            "/extract/image?max_results=3",
            files={"file": ("test.png", png_bytes, "image/png")},
        )
        args = mock_scanner.return_value.scan.call_args.args
        assert args[1] == "test.png"
        assert args[2] == 3

    def test_extract_unsupported_file_type(self, client: TestClient) -> None:
        response = client.post(
            "/extract/image",
            files={"file": ("test.txt", b"plain text", "text/plain")},
        )
        assert response.status_code == 400

    @patch("src.api.app._get_scanner")
    def test_extract_processing_error(
        self, mock_scanner: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_scanner.return_value.scan.side_effect = RuntimeError("OCR failed")

        response = client.post(
            "/extract/image",
            files={"file": ("test.png", png_bytes, "image/png")},
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "OCR failed"


class TestBatchEndpoint:
    """Tests for the /extract/batch endpoint."""

    @patch("src.api.app._get_scanner")
    def test_batch_success(
        self, mock_scanner: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_scanner.return_value.scan.return_value = _make_scan_result()

        response = client.post(
            "/extract/batch",
            files=[
                ("files", ("a.png", png_bytes, "image/png")),
                ("files", ("b.png", png_bytes, "image/png")),
            ],
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_images"] == 2
        assert data["successful"] == 2
        assert data["failed"] == 0

    @patch("src.api.app._get_scanner")
    def test_batch_partial_failure(
        self, mock_scanner: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_scanner.return_value.scan.return_value = _make_scan_result()

        response = client.post(
            "/extract/batch",
            files=[
                ("files", ("a.png", png_bytes, "image/png")),
                ("files", ("notes.txt", b"text", "text/plain")),
            ],
        )
        data = response.json()
        assert data["successful"] == 1
        assert data["failed"] == 1
        assert data["results"][1]["filename"] == "notes.txt"
        assert "Unsupported" in data["results"][1]["error"]
