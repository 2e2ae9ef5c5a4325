"""Configuration management for the number scanner.

Loads and validates YAML configuration with sensible defaults
for number extraction, OCR, and the HTTP API.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ExtractionConfig(BaseModel):
    """Configuration for the numeric-token extraction engine.

    ``noise_priority`` is a priority class: tokens of that class or a
    lower-priority one whose absolute value is at most ``noise_threshold``
    are treated as noise.
    """

    max_results: int = Field(default=20, ge=0)
    noise_threshold: float = 3.0
    noise_priority: int = Field(default=8, ge=1)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR passes."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 6
    fallback_psm: int | None = 11
    char_whitelist: str | None = None


class ApiConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = "0.0.0.0"
    port: int = 8000
    max_text_length: int = 100_000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
