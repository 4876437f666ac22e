"""
Monochrome conversion with a bounded stabilization loop.

Every conversion runs through at most three stages:

1. ATTEMPT: tone curve and quantization with the requested style
2. RETRY: one pass with a style derived from the original
3. GUARDRAIL: the fixed safe preset, only if the best attempt is far off

The black ratio that falls outside a style's band is never an error. It is
logged and resolved here, so callers only see a usable result or a
structural failure raised earlier in the pipeline.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .processing.dither import bayer8_dither
from .processing.quantize import (
    THRESHOLD_CHECK_TOLERANCE,
    apply_threshold,
    measure_black_ratio,
    threshold_from_histogram,
)
from .processing.tone import apply_tone_curve
from .raster import RasterBuffer
from .styles import GUARDRAIL_STYLE, AdaptiveThresholdStyle, StyleSpec, derive_retry_style

logger = logging.getLogger(__name__)

GUARDRAIL_DISTANCE = 0.10


class ConversionStage(str, Enum):
    """Stage that produced a conversion result."""

    ATTEMPT = "attempt"
    RETRY = "retry"
    BEST_OF_TWO = "best_of_two"
    GUARDRAIL = "guardrail"


@dataclass(frozen=True)
class ConversionResult:
    """Binary output of a conversion plus diagnostics for the caller to log.

    Attributes:
        bits: One value per pixel, 0 black and 1 white
        width: Image width
        height: Image height
        black_ratio: Fraction of black pixels in bits
        style_name: Style used, or "original→guardrail" after a fallback
        attempts: Number of quantization passes that ran (1-3)
        stage: Stage that produced the returned bits
    """

    bits: bytes
    width: int
    height: int
    black_ratio: float
    style_name: str
    attempts: int
    stage: ConversionStage

    @property
    def guardrail_used(self) -> bool:
        return self.stage is ConversionStage.GUARDRAIL

    def to_dict(self) -> dict[str, object]:
        """Diagnostic summary without the pixel data."""
        return {
            "width": self.width,
            "height": self.height,
            "black_ratio": round(self.black_ratio, 4),
            "style_name": self.style_name,
            "attempts": self.attempts,
            "stage": self.stage.value,
        }


def quantize_with_style(
    gray: bytes,
    width: int,
    height: int,
    style: StyleSpec,
    check_tolerance: float = THRESHOLD_CHECK_TOLERANCE,
) -> bytes:
    """Quantize an already tone-mapped luminance buffer per the style's mode."""
    if isinstance(style, AdaptiveThresholdStyle):
        threshold = threshold_from_histogram(gray, style.target_black_pct, check_tolerance)
        logger.debug(f"{style.name}: threshold {threshold} for target {style.target_black_pct:.2f}")
        return apply_threshold(gray, threshold)
    return bayer8_dither(gray, width, height)


class OneBitConverter:
    """Convert luminance rasters to 1-bit output inside a style's black-ratio band.

    Args:
        guardrail_style: Preset used when both attempts miss the band badly
        guardrail_distance: Band distance beyond which the guardrail runs
        check_tolerance: Tolerance for the threshold ramp self-check
    """

    def __init__(
        self,
        guardrail_style: StyleSpec = GUARDRAIL_STYLE,
        guardrail_distance: float = GUARDRAIL_DISTANCE,
        check_tolerance: float = THRESHOLD_CHECK_TOLERANCE,
    ) -> None:
        self.guardrail_style = guardrail_style
        self.guardrail_distance = guardrail_distance
        self.check_tolerance = check_tolerance

    def _run(self, source: RasterBuffer, style: StyleSpec) -> tuple[bytes, float]:
        work = source.working_copy()
        apply_tone_curve(work, style.contrast, style.gamma)
        bits = quantize_with_style(
            bytes(work), source.width, source.height, style, self.check_tolerance
        )
        return bits, measure_black_ratio(bits)

    def _result(
        self,
        source: RasterBuffer,
        bits: bytes,
        ratio: float,
        name: str,
        attempts: int,
        stage: ConversionStage,
    ) -> ConversionResult:
        return ConversionResult(
            bits=bits,
            width=source.width,
            height=source.height,
            black_ratio=ratio,
            style_name=name,
            attempts=attempts,
            stage=stage,
        )

    def convert(self, gray: RasterBuffer, style: StyleSpec) -> ConversionResult:
        """Run the attempt, retry and guardrail stages.

        Args:
            gray: Source raster; RGB input is reduced to luminance first
            style: Requested conversion style

        Returns:
            ConversionResult with bits and diagnostics
        """
        source = gray.to_luminance()

        # Stage 1: requested style
        bits, ratio = self._run(source, style)
        if style.in_band(ratio):
            logger.debug(f"{style.name}: attempt 1 black ratio {ratio:.3f} in band")
            return self._result(source, bits, ratio, style.name, 1, ConversionStage.ATTEMPT)

        logger.info(
            f"{style.name}: attempt 1 black ratio {ratio:.3f} outside "
            f"[{style.black_min}, {style.black_max}], retrying"
        )

        # Stage 2: one adjusted pass from the untouched source
        retry_style = derive_retry_style(style, ratio)
        retry_bits, retry_ratio = self._run(source, retry_style)
        if style.in_band(retry_ratio):
            logger.debug(f"{style.name}: retry black ratio {retry_ratio:.3f} in band")
            return self._result(
                source, retry_bits, retry_ratio, style.name, 2, ConversionStage.RETRY
            )

        logger.info(f"{style.name}: retry black ratio {retry_ratio:.3f} still outside band")

        # Stage 3: best of two, or the guardrail preset
        if style.distance_from_band(retry_ratio) < style.distance_from_band(ratio):
            best_bits, best_ratio = retry_bits, retry_ratio
        else:
            best_bits, best_ratio = bits, ratio

        distance = style.distance_from_band(best_ratio)
        if distance > self.guardrail_distance:
            guardrail = self.guardrail_style
            logger.warning(
                f"Guardrail: {style.name} black ratio {best_ratio:.3f} is {distance:.3f} "
                f"outside band, falling back to {guardrail.name}"
            )
            safe_bits, safe_ratio = self._run(source, guardrail)
            name = f"{style.name}→{guardrail.name}"
            logger.warning(f"Guardrail: {name} black ratio {safe_ratio:.3f}")
            return self._result(source, safe_bits, safe_ratio, name, 3, ConversionStage.GUARDRAIL)

        logger.warning(
            f"{style.name}: keeping best attempt with black ratio {best_ratio:.3f} "
            f"({distance:.3f} outside band)"
        )
        return self._result(
            source, best_bits, best_ratio, style.name, 2, ConversionStage.BEST_OF_TWO
        )


def convert_one_bit(gray: RasterBuffer, style: StyleSpec) -> ConversionResult:
    """Convert with the default guardrail settings."""
    return OneBitConverter().convert(gray, style)
