"""inkpress: image conversion and PNG encoding for e-Paper displays.

This package turns generated raster images into the exact pixel formats
e-Paper panels need:

- PNG decoding and 1-bit / 8-bit gray / indexed encoding
- Center-crop and bilinear resize to the panel geometry
- Tone curve, 4-level banding, histogram threshold, Bayer and
  Floyd-Steinberg dithering, despeckle
- A bounded attempt/retry/guardrail loop keeping monochrome output inside a
  style's black-ratio band
"""

from .codec import DecodedImage, decode_png, encode_png_1bit, encode_png_gray8, encode_png_indexed
from .config import ConverterSettings, load_style_catalog
from .converter import ConversionResult, OneBitConverter, convert_one_bit
from .exceptions import ConfigurationError, FormatError, InkpressError
from .image_processor import ImageProcessor, RenderOutput, raster_from_image, raster_to_image
from .palettes import SPECTRA6_PALETTE
from .raster import Palette, RasterBuffer
from .styles import (
    BUILTIN_STYLES,
    GUARDRAIL_STYLE,
    AdaptiveThresholdStyle,
    OrderedDitherStyle,
    StyleSpec,
    find_style_by_name,
    pick_style,
)

__version__ = "1.0.0"

__all__ = [
    "BUILTIN_STYLES",
    "GUARDRAIL_STYLE",
    "SPECTRA6_PALETTE",
    "AdaptiveThresholdStyle",
    "ConfigurationError",
    "ConversionResult",
    "ConverterSettings",
    "DecodedImage",
    "FormatError",
    "ImageProcessor",
    "InkpressError",
    "OneBitConverter",
    "OrderedDitherStyle",
    "Palette",
    "RasterBuffer",
    "RenderOutput",
    "StyleSpec",
    "convert_one_bit",
    "decode_png",
    "encode_png_1bit",
    "encode_png_gray8",
    "encode_png_indexed",
    "find_style_by_name",
    "load_style_catalog",
    "pick_style",
    "raster_from_image",
    "raster_to_image",
]
