"""Shared fixtures for inkpress tests: small rasters, PNG bytes and styles."""

import io

import pytest
from PIL import Image

from inkpress.config.settings import ConverterSettings
from inkpress.raster import GRAY, RGB, RasterBuffer
from inkpress.styles import AdaptiveThresholdStyle, OrderedDitherStyle


@pytest.fixture
def gray_ramp() -> RasterBuffer:
    """16x16 raster whose pixels run 0..255 in row-major order."""
    return RasterBuffer(16, 16, bytes(range(256)), GRAY)


@pytest.fixture
def mid_gray() -> RasterBuffer:
    """16x16 raster of uniform luminance 128."""
    return RasterBuffer(16, 16, bytes([128]) * 256, GRAY)


@pytest.fixture
def rgb_gradient() -> RasterBuffer:
    """8x4 RGB raster with distinct values per channel."""
    pixels = bytearray()
    for y in range(4):
        for x in range(8):
            pixels += bytes([x * 32, y * 64, 255 - x * 32])
    return RasterBuffer(8, 4, bytes(pixels), RGB)


@pytest.fixture
def ordered_style() -> OrderedDitherStyle:
    return OrderedDitherStyle(
        name="test_dither", contrast=1.0, gamma=1.0, black_min=0.30, black_max=0.70
    )


@pytest.fixture
def threshold_style() -> AdaptiveThresholdStyle:
    return AdaptiveThresholdStyle(
        name="test_threshold",
        contrast=1.0,
        gamma=1.0,
        black_min=0.20,
        black_max=0.40,
        target_black_pct=0.30,
    )


@pytest.fixture
def small_settings() -> ConverterSettings:
    """Settings for a 16x8 display so pipeline tests stay fast."""
    return ConverterSettings(width=16, height=8)


def pil_png_bytes(image: Image.Image) -> bytes:
    """Encode a PIL image to PNG bytes with Pillow's own encoder."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_from_pil():
    """Factory turning a PIL image into PNG bytes."""
    return pil_png_bytes
