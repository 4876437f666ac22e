"""Flat and threshold quantizers plus black-ratio measurement.

Binary outputs use 0 for black and 1 for white, the layout expected by the
1-bit PNG encoder.
"""

import logging
from collections import Counter

logger = logging.getLogger(__name__)

BLACK = 0
WHITE = 1

THRESHOLD_MIN = 100
THRESHOLD_MAX = 220
THRESHOLD_CHECK_TOLERANCE = 0.02

FOUR_LEVEL_VALUES = (0, 85, 170, 255)
_FOUR_LEVEL_TABLE = bytes(FOUR_LEVEL_VALUES[v >> 6] for v in range(256))


def quantize_4level(pixels: bytearray) -> None:
    """Band luminance into four flat levels in place.

    [0,64) -> 0, [64,128) -> 85, [128,192) -> 170, [192,256) -> 255. The output
    levels map to themselves, so applying this twice changes nothing.
    """
    pixels[:] = pixels.translate(_FOUR_LEVEL_TABLE)


def build_histogram(pixels: bytes) -> list[int]:
    """Return a 256-bin luminance histogram."""
    counts = Counter(pixels)
    return [counts.get(value, 0) for value in range(256)]


def threshold_from_histogram(
    pixels: bytes,
    target_black_pct: float,
    check_tolerance: float = THRESHOLD_CHECK_TOLERANCE,
) -> int:
    """Pick a binarization threshold that blackens roughly target_black_pct of pixels.

    Walks the histogram upward from the darkest bin until the accumulated count
    reaches floor(total * target_black_pct). Pixels with luminance <= T are
    black. T is always clamped to [100, 220].

    A uniform 0-255 ramp binarized at T would have (T + 1) / 256 black pixels;
    if that differs from the target by more than check_tolerance a warning is
    logged. The threshold itself is not changed by the check.

    Args:
        pixels: Luminance buffer
        target_black_pct: Desired black fraction in [0, 1]
        check_tolerance: Allowed ramp-check deviation before warning

    Returns:
        Threshold in [100, 220]
    """
    total = len(pixels)
    target_count = int(total * target_black_pct)
    histogram = build_histogram(pixels)

    threshold = 0
    accumulated = 0
    for value, count in enumerate(histogram):
        accumulated += count
        if accumulated >= target_count:
            threshold = value
            break

    threshold = max(THRESHOLD_MIN, min(THRESHOLD_MAX, threshold))

    ramp_black = (threshold + 1) / 256
    if abs(ramp_black - target_black_pct) > check_tolerance:
        logger.warning(
            f"Threshold ramp check: expected ~{target_black_pct:.3f} black, "
            f"ramp gives {ramp_black:.3f} (T={threshold})"
        )

    return threshold


def apply_threshold(pixels: bytes, threshold: int) -> bytes:
    """Binarize luminance: values <= threshold become black (0), others white (1)."""
    table = bytes(BLACK if value <= threshold else WHITE for value in range(256))
    return bytes(pixels).translate(table)


def measure_black_ratio(bits: bytes) -> float:
    """Fraction of black (0) pixels in a binary buffer; 0.0 when empty."""
    if not bits:
        return 0.0
    return bytes(bits).count(BLACK) / len(bits)
