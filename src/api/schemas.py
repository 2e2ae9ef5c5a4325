"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class TextExtractionRequest(BaseModel):
    """Request body for extracting numbers from recognized text."""

    text: str
    max_results: int | None = Field(default=None, ge=0)


class TokenResponse(BaseModel):
    """A ranked numeric token with the pattern that produced it."""

    text: str
    value: float
    priority: int
    pattern: str
    position: int


class ScanResponse(BaseModel):
    """Response schema for a single scan."""

    success: bool
    scan_id: str
    timestamp: str
    source: str
    numbers: list[str]
    tokens: list[TokenResponse] = []
    raw_text: str
    ocr_pass: int | None = None
    confidence: float = 0.0
    processing_time_ms: float


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch scan."""

    filename: str
    result: ScanResponse | None = None
    error: str | None = None


class BatchScanResponse(BaseModel):
    """Response schema for a batch scan of multiple captures."""

    success: bool
    total_images: int
    successful: int
    failed: int
    results: list[BatchItemResponse]


class PatternInfo(BaseModel):
    """A numeric shape recognized by the extractor."""

    name: str
    priority: int


class PatternsResponse(BaseModel):
    """Response schema listing the pattern catalog."""

    patterns: list[PatternInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
