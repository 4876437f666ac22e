"""
Monochrome conversion styles.

A style bundles a tone curve with a quantization mode and the black-ratio band
the result must land in. Two variants exist, discriminated by ``mode``:

- ``OrderedDitherStyle``: Bayer 8x8 dithering after the tone curve
- ``AdaptiveThresholdStyle``: histogram threshold targeting a black percentage

Styles are frozen pydantic models. Adjusting one for a retry produces a new,
validated style; the original is never modified.
"""

import logging
from typing import Annotated, Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ORDERED_DITHER = "ordered_dither"
ADAPTIVE_THRESHOLD = "adaptive_threshold"

RETRY_BLACK_PCT_STEP = 0.04
RETRY_BLACK_PCT_MIN = 0.06
RETRY_BLACK_PCT_MAX = 0.40
RETRY_GAMMA_STEP = 0.06
RETRY_GAMMA_MIN = 0.01


class BaseStyle(BaseModel):
    """Fields shared by every style variant.

    Attributes:
        name: Style name reported in conversion results
        contrast: Contrast factor applied around mid-gray
        gamma: Gamma exponent applied after contrast
        black_min: Lowest acceptable black ratio
        black_max: Highest acceptable black ratio
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Style name")
    contrast: float = Field(gt=0, description="Contrast factor around mid-gray")
    gamma: float = Field(gt=0, description="Gamma exponent")
    black_min: float = Field(ge=0.0, le=1.0, description="Lowest acceptable black ratio")
    black_max: float = Field(ge=0.0, le=1.0, description="Highest acceptable black ratio")

    @model_validator(mode="after")
    def validate_black_band(self) -> "BaseStyle":
        """Reject an inverted black-ratio band.

        Raises:
            ConfigurationError: If black_min > black_max
        """
        if self.black_min > self.black_max:
            raise ConfigurationError(
                f"Style '{self.name}' has an inverted black ratio band",
                field_name="black_min",
                field_value=self.black_min,
                validation_errors=[f"black_min ({self.black_min}) > black_max ({self.black_max})"],
            )
        return self

    def in_band(self, ratio: float) -> bool:
        """Check whether a measured black ratio is acceptable."""
        return self.black_min <= ratio <= self.black_max

    def distance_from_band(self, ratio: float) -> float:
        """Distance of a ratio outside the band; 0.0 inside it."""
        return max(0.0, self.black_min - ratio, ratio - self.black_max)


class OrderedDitherStyle(BaseStyle):
    """Tone curve followed by 8x8 Bayer dithering."""

    mode: Literal["ordered_dither"] = ORDERED_DITHER


class AdaptiveThresholdStyle(BaseStyle):
    """Tone curve followed by a histogram threshold aiming at target_black_pct."""

    mode: Literal["adaptive_threshold"] = ADAPTIVE_THRESHOLD
    target_black_pct: float = Field(
        default=0.30, ge=0.0, le=1.0, description="Starting black percentage for the threshold"
    )


StyleSpec = Annotated[
    Union[OrderedDitherStyle, AdaptiveThresholdStyle], Field(discriminator="mode")
]

_STYLE_ADAPTER = TypeAdapter(StyleSpec)


def style_from_dict(data: dict) -> StyleSpec:
    """Build the right style variant from a plain mapping with a ``mode`` key."""
    return _STYLE_ADAPTER.validate_python(data)


def style_to_dict(style: StyleSpec) -> dict:
    return style.model_dump()


def with_overrides(style: StyleSpec, **changes: object) -> StyleSpec:
    """Return a re-validated copy of style with some fields replaced.

    Raises:
        ConfigurationError: If the changes invert the black ratio band
    """
    return type(style).model_validate({**style.model_dump(), **changes})


def derive_retry_style(style: StyleSpec, measured_ratio: float) -> StyleSpec:
    """Derive the single retry configuration from the original style.

    Threshold styles move target_black_pct by 0.04 toward the band: up when the
    result was too white, down when too black, clamped to [0.06, 0.40].
    Ordered styles move gamma by 0.06: lower (lighter) when the result was too
    dark, higher (darker) when too light.

    Args:
        style: The original, unadjusted style
        measured_ratio: Black ratio measured on the first attempt

    Returns:
        A new style of the same variant
    """
    if isinstance(style, AdaptiveThresholdStyle):
        direction = 1 if measured_ratio < style.black_min else -1
        target = style.target_black_pct + direction * RETRY_BLACK_PCT_STEP
        target = max(RETRY_BLACK_PCT_MIN, min(RETRY_BLACK_PCT_MAX, target))
        update = {"target_black_pct": target}
    else:
        direction = -1 if measured_ratio > style.black_max else 1
        update = {"gamma": max(RETRY_GAMMA_MIN, style.gamma + direction * RETRY_GAMMA_STEP)}

    return with_overrides(style, **update)


BUILTIN_STYLES: tuple[StyleSpec, ...] = (
    OrderedDitherStyle(name="woodcut", contrast=1.20, gamma=0.92, black_min=0.15, black_max=0.65),
    AdaptiveThresholdStyle(
        name="silhouette_poster",
        contrast=1.30,
        gamma=0.88,
        black_min=0.20,
        black_max=0.60,
        target_black_pct=0.35,
    ),
    AdaptiveThresholdStyle(
        name="linocut", contrast=1.25, gamma=0.90, black_min=0.15, black_max=0.58, target_black_pct=0.30
    ),
    AdaptiveThresholdStyle(
        name="bold_ink_noir",
        contrast=1.35,
        gamma=0.85,
        black_min=0.20,
        black_max=0.65,
        target_black_pct=0.38,
    ),
    AdaptiveThresholdStyle(
        name="pen_and_ink",
        contrast=1.15,
        gamma=0.95,
        black_min=0.10,
        black_max=0.55,
        target_black_pct=0.25,
    ),
    AdaptiveThresholdStyle(
        name="charcoal_block",
        contrast=1.10,
        gamma=0.97,
        black_min=0.18,
        black_max=0.55,
        target_black_pct=0.24,
    ),
)

# Last-resort preset; used for every failing style regardless of its mode
GUARDRAIL_STYLE = OrderedDitherStyle(
    name="woodcut", contrast=1.20, gamma=0.92, black_min=0.15, black_max=0.55
)


def simple_hash(text: str) -> int:
    """djb2 string hash truncated to an unsigned 32-bit integer."""
    value = 5381
    for char in text:
        value = ((value << 5) + value + ord(char)) & 0xFFFFFFFF
    return value


def pick_style(seed: str, styles: Sequence[StyleSpec] = BUILTIN_STYLES) -> StyleSpec:
    """Pick a style deterministically from a seed string (e.g. date plus event)."""
    if not styles:
        raise ValueError("No styles to pick from")
    return styles[simple_hash(seed) % len(styles)]


def find_style_by_name(name: str, styles: Sequence[StyleSpec] = BUILTIN_STYLES) -> StyleSpec:
    """Look up a style by name, falling back to the first style."""
    for style in styles:
        if style.name == name:
            return style
    logger.warning(f"Unknown style '{name}', using '{styles[0].name}'")
    return styles[0]
