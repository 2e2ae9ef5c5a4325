"""FastAPI application for the number scanner API.

Provides REST endpoints for extracting numbers from recognized text or
captured images, batch scanning, catalog listing, and health checks.
"""

import time
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src.extraction.patterns import describe_catalog
from src.ocr.scanner import NumberScanner, ScanResult
from src.ocr.tesseract_engine import is_available
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import (
    BatchItemResponse,
    BatchScanResponse,
    HealthResponse,
    PatternInfo,
    PatternsResponse,
    ScanResponse,
    TextExtractionRequest,
    TokenResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Number Scanner API",
    description="Extract ranked numeric values from captured text and images",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_scanner() -> NumberScanner:
    """Build a scanner from the current configuration."""
    return NumberScanner(load_config())


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/webp",
    "application/octet-stream",
}


def _to_response(result: ScanResult, start_time: float) -> ScanResponse:
    return ScanResponse(
        success=True,
        scan_id=result.scan_id,
        timestamp=result.timestamp,
        source=result.source,
        numbers=result.numbers,
        tokens=[
            TokenResponse(
                text=t.display_text,
                value=t.value,
                priority=t.priority,
                pattern=t.pattern_name,
                position=t.first_index,
            )
            for t in result.tokens
        ],
        raw_text=result.raw_text,
        ocr_pass=result.ocr_pass,
        confidence=result.confidence,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    config = load_config()
    return HealthResponse(
        status="healthy",
        version=VERSION,
        tesseract_available=is_available(config.ocr.tesseract_cmd),
    )


@app.get("/patterns", response_model=PatternsResponse)
async def list_patterns() -> PatternsResponse:
    """List the numeric shapes the extractor recognizes, by priority."""
    return PatternsResponse(
        patterns=[
            PatternInfo(name=name, priority=priority)
            for name, priority in describe_catalog()
        ]
    )


@app.post("/extract/text", response_model=ScanResponse)
async def extract_text(request: TextExtractionRequest) -> ScanResponse:
    """Extract ranked numbers from already recognized text.

    Args:
        request: Text and an optional result cap.

    Returns:
        Scan result with the ranked numbers.
    """
    start_time = time.time()
    scanner = _get_scanner()

    if len(request.text) > scanner.config.api.max_text_length:
        raise HTTPException(
            status_code=413,
            detail=f"Text exceeds {scanner.config.api.max_text_length} characters",
        )

    result = scanner.scan_text(request.text, "text", request.max_results)
    return _to_response(result, start_time)


@app.post("/extract/image", response_model=ScanResponse)
async def extract_image(
    file: Annotated[UploadFile, File(...)],
    max_results: Annotated[int | None, Query(ge=0)] = None,
) -> ScanResponse:
    """Run OCR on an uploaded capture and extract its numbers.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, or WebP).
        max_results: Optional cap on the number of returned values.

    Returns:
        Scan result with the ranked numbers and the OCR text.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    try:
        scanner = _get_scanner()
        content = await file.read()
        result = scanner.scan(content, file.filename or "capture", max_results)
        return _to_response(result, start_time)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/extract/batch", response_model=BatchScanResponse)
async def extract_batch(
    files: Annotated[list[UploadFile], File(...)],
) -> BatchScanResponse:
    """Scan multiple uploaded captures.

    Args:
        files: List of uploaded image files.

    Returns:
        Batch results with per-file outcomes.
    """
    results: list[BatchItemResponse] = []
    successful = 0

    for file in files:
        try:
            result = await extract_image(file)
            results.append(
                BatchItemResponse(filename=file.filename or "unknown", result=result)
            )
            successful += 1
        except HTTPException as exc:
            results.append(
                BatchItemResponse(filename=file.filename or "unknown", error=exc.detail)
            )

    return BatchScanResponse(
        success=successful > 0,
        total_images=len(files),
        successful=successful,
        failed=len(files) - successful,
        results=results,
    )
