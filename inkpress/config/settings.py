"""Converter settings using Pydantic for type validation."""

import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConverterSettings(BaseModel):
    """Target geometry and pipeline options for e-Paper image conversion.

    Attributes:
        width: Output width in pixels
        height: Output height in pixels
        gray4_contrast: Contrast used by the 4-level grayscale pipeline
        gray4_gamma: Gamma used by the 4-level grayscale pipeline
        guardrail_distance: Band distance beyond which the guardrail preset runs
        threshold_check_tolerance: Allowed deviation of the threshold ramp check
        despeckle: Run the despeckle filter on monochrome output
        posterize_levels: Posterize RGB before palette dithering (None disables)
        compression_level: zlib level for PNG output

    Example:
        >>> settings = ConverterSettings(width=400, height=300, despeckle=True)
    """

    # Display geometry
    width: int = Field(default=800, ge=1, le=8192, description="Output width in pixels")
    height: int = Field(default=480, ge=1, le=8192, description="Output height in pixels")

    # 4-level grayscale pipeline
    gray4_contrast: float = Field(
        default=1.2, gt=0, description="Contrast for the 4-level grayscale pipeline"
    )
    gray4_gamma: float = Field(
        default=0.95, gt=0, description="Gamma for the 4-level grayscale pipeline"
    )

    # Monochrome pipeline
    guardrail_distance: float = Field(
        default=0.10, ge=0.0, le=1.0, description="Band distance that triggers the guardrail"
    )
    threshold_check_tolerance: float = Field(
        default=0.02, ge=0.0, le=1.0, description="Threshold ramp self-check tolerance"
    )
    despeckle: bool = Field(default=False, description="Despeckle monochrome output")

    # Palette pipeline
    posterize_levels: Optional[int] = Field(
        default=None, description="Posterize levels before palette dithering"
    )

    # Encoding
    compression_level: int = Field(
        default=6, ge=-1, le=9, description="zlib compression level for PNG output"
    )

    @field_validator("posterize_levels")
    @classmethod
    def validate_posterize_levels(cls, v: Optional[int]) -> Optional[int]:
        """Validate the posterize level count.

        Raises:
            ConfigurationError: If the level count is outside 2-256
        """
        if v is not None and not 2 <= v <= 256:
            raise ConfigurationError(
                f"Invalid posterize levels: {v}",
                field_name="posterize_levels",
                field_value=v,
                validation_errors=["Must be between 2 and 256, or null to disable"],
            )
        return v

    @model_validator(mode="after")
    def validate_geometry(self) -> "ConverterSettings":
        """Warn about geometries that cannot be packed into whole bytes.

        Returns:
            The validated settings instance
        """
        if self.width % 8:
            logger.warning(
                f"Output width {self.width} is not a multiple of 8; "
                "1-bit rows will carry padding bits"
            )
        return self

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)
