"""Pixel processing stages: resampling, tone mapping, quantization and dithering."""

from .despeckle import despeckle
from .dither import (
    BAYER8,
    bayer8_dither,
    find_nearest_color,
    floyd_steinberg_dither,
    posterize_rgb,
)
from .quantize import (
    apply_threshold,
    measure_black_ratio,
    quantize_4level,
    threshold_from_histogram,
)
from .resample import center_crop, fit_to_size, resize_bilinear
from .tone import apply_tone_curve, tone_mapped

__all__ = [
    "BAYER8",
    "apply_threshold",
    "apply_tone_curve",
    "bayer8_dither",
    "center_crop",
    "despeckle",
    "find_nearest_color",
    "fit_to_size",
    "floyd_steinberg_dither",
    "measure_black_ratio",
    "posterize_rgb",
    "quantize_4level",
    "resize_bilinear",
    "threshold_from_histogram",
    "tone_mapped",
]
