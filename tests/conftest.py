"""Shared test fixtures for the ID document scanner test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from fakes import FakeClock
from PIL import Image

from idscan.storage.cache import MemoryStore, ResultCache
from idscan.utils.config import AppConfig, PipelineConfig


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the synthetic image as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(sample_color_image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """Write the synthetic PNG to disk."""
    path = tmp_path / "card.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def app_config() -> AppConfig:
    """Default configuration with the delayed state reset disabled."""
    return AppConfig(pipeline=PipelineConfig(reset_delay_s=0.0))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> ResultCache:
    """In-memory result cache driven by the fake clock."""
    return ResultCache(MemoryStore(), clock=clock)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
