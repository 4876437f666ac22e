"""Contrast and gamma tone curve."""

import math
from functools import lru_cache

from ..raster import RasterBuffer


def tone_value(value: int, contrast: float, gamma: float) -> int:
    """Map a single 0-255 value through the contrast/gamma curve."""
    v = (value - 128) * contrast + 128
    v = min(255.0, max(0.0, v))
    out = 255 * math.pow(v / 255, gamma)
    return int(math.floor(min(255.0, max(0.0, out)) + 0.5))


@lru_cache(maxsize=64)
def tone_table(contrast: float, gamma: float) -> bytes:
    """Return the 256-entry lookup table for a contrast/gamma pair."""
    return bytes(tone_value(v, contrast, gamma) for v in range(256))


def apply_tone_curve(pixels: bytearray, contrast: float, gamma: float) -> None:
    """Apply the tone curve to a working buffer in place.

    Args:
        pixels: Mutable pixel buffer; every byte is mapped independently
        contrast: Contrast factor around mid-gray (1.0 = unchanged)
        gamma: Gamma exponent (1.0 = unchanged, <1 lightens, >1 darkens)
    """
    pixels[:] = pixels.translate(tone_table(contrast, gamma))


def tone_mapped(raster: RasterBuffer, contrast: float, gamma: float) -> RasterBuffer:
    """Return a new raster with the tone curve applied; the source is untouched."""
    return raster.with_pixels(raster.pixels.translate(tone_table(contrast, gamma)))
