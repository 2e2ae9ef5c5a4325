"""Shared test fixtures for the number scanner test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic RGB capture."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def png_bytes() -> bytes:
    """Encode a small grayscale image as PNG bytes."""
    img = Image.fromarray(np.zeros((100, 200), dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def receipt_text() -> str:
    """OCR text of a small receipt with assorted numeric shapes."""
    return (
        "CORNER MARKET  #0042\n"
        "Milk 2L            $3.49\n"
        "Bread              $2.99\n"
        "Discount 10%      (0.65)\n"
        "TOTAL           $1,205.83\n"
        "Fridge temp 4.5°C\n"
        "Ref 20231115 items 12\n"
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
