"""Ordered (Bayer 8x8) and error-diffusion (Floyd-Steinberg) dithering.

Ordered dithering is used for monochrome output because it is spatially
stable: the same image renders to the same dot pattern on every refresh, so a
slow e-Paper panel does not shimmer between updates. Floyd-Steinberg is used
for palette output where fidelity matters more than stability.
"""

import logging
from itertools import cycle
from typing import Sequence

from ..raster import Color

logger = logging.getLogger(__name__)

# Canonical 8x8 Bayer index matrix, values 0-63
BAYER8 = (
    (0, 32, 8, 40, 2, 34, 10, 42),
    (48, 16, 56, 24, 50, 18, 58, 26),
    (12, 44, 4, 36, 14, 46, 6, 38),
    (60, 28, 52, 20, 62, 30, 54, 22),
    (3, 35, 11, 43, 1, 33, 9, 41),
    (51, 19, 59, 27, 49, 17, 57, 25),
    (15, 47, 7, 39, 13, 45, 5, 37),
    (63, 31, 55, 23, 61, 29, 53, 21),
)

# Thresholds scaled into [0, 255)
BAYER8_THRESHOLDS = tuple(tuple(v / 64 * 255 for v in row) for row in BAYER8)


def bayer8_dither(pixels: bytes, width: int, height: int) -> bytes:
    """Binarize luminance with the 8x8 Bayer matrix.

    Pixel (x, y) is compared to the threshold at (y mod 8, x mod 8): brighter
    than the threshold is white (1), otherwise black (0).

    Args:
        pixels: Luminance buffer, row-major
        width: Image width
        height: Image height

    Returns:
        One 0/1 value per pixel
    """
    if len(pixels) != width * height:
        raise ValueError(f"Pixel buffer length {len(pixels)} does not match {width}x{height}")

    bits = bytearray()
    for y in range(height):
        row = pixels[y * width : (y + 1) * width]
        thresholds = cycle(BAYER8_THRESHOLDS[y & 7])
        bits.extend(1 if value > t else 0 for value, t in zip(row, thresholds))
    return bytes(bits)


def find_nearest_color(r: float, g: float, b: float, palette: Sequence[Color]) -> int:
    """Return the index of the palette entry closest in squared RGB distance.

    Ties keep the lowest index.
    """
    best_index = 0
    best_distance = float("inf")
    for index, (pr, pg, pb) in enumerate(palette):
        dr = r - pr
        dg = g - pg
        db = b - pb
        distance = dr * dr + dg * dg + db * db
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def floyd_steinberg_dither(
    rgb: bytes, width: int, height: int, palette: Sequence[Color]
) -> bytes:
    """Dither an RGB image to palette indices with Floyd-Steinberg error diffusion.

    Pixels are visited strictly row by row, left to right. The quantization
    error of each pixel is spread over the unvisited neighbors: 7/16 right,
    3/16 below-left, 5/16 below, 1/16 below-right. Errors accumulate in a
    floating-point copy; the caller's buffer is not modified.

    Args:
        rgb: Three bytes per pixel, row-major
        width: Image width
        height: Image height
        palette: RGB triplets to quantize to

    Returns:
        One palette index per pixel
    """
    if len(rgb) != width * height * 3:
        raise ValueError(f"RGB buffer length {len(rgb)} does not match {width}x{height}x3")
    if not palette:
        raise ValueError("Palette must contain at least one color")

    buf = [float(v) for v in rgb]
    indices = bytearray(width * height)
    row_stride = width * 3

    for y in range(height):
        has_below = y + 1 < height
        for x in range(width):
            i = (y * width + x) * 3
            old_r, old_g, old_b = buf[i], buf[i + 1], buf[i + 2]

            index = find_nearest_color(old_r, old_g, old_b, palette)
            indices[y * width + x] = index

            new_r, new_g, new_b = palette[index]
            err_r = old_r - new_r
            err_g = old_g - new_g
            err_b = old_b - new_b

            if x + 1 < width:
                j = i + 3
                buf[j] += err_r * 7 / 16
                buf[j + 1] += err_g * 7 / 16
                buf[j + 2] += err_b * 7 / 16
            if has_below:
                below = i + row_stride
                if x > 0:
                    j = below - 3
                    buf[j] += err_r * 3 / 16
                    buf[j + 1] += err_g * 3 / 16
                    buf[j + 2] += err_b * 3 / 16
                buf[below] += err_r * 5 / 16
                buf[below + 1] += err_g * 5 / 16
                buf[below + 2] += err_b * 5 / 16
                if x + 1 < width:
                    j = below + 3
                    buf[j] += err_r / 16
                    buf[j + 1] += err_g / 16
                    buf[j + 2] += err_b / 16

    logger.debug(f"Floyd-Steinberg dithered {width}x{height} to {len(palette)} colors")
    return bytes(indices)


def posterize_rgb(pixels: bytearray, levels: int) -> None:
    """Snap every channel value to one of `levels` evenly spaced steps, in place."""
    if levels < 2:
        raise ValueError(f"Posterize needs at least 2 levels, got {levels}")
    step = 255 / (levels - 1)
    table = bytes(int(int(v / step + 0.5) * step + 0.5) for v in range(256))
    pixels[:] = pixels.translate(table)
