"""Image processor for turning generated images into e-Paper device buffers."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image

from .codec.png_decoder import decode_png
from .codec.png_encoder import encode_png_1bit, encode_png_gray8, encode_png_indexed
from .config.settings import ConverterSettings
from .converter import ConversionResult, OneBitConverter
from .palettes import SPECTRA6_PALETTE, PaletteLike, resolve_palette
from .processing.despeckle import despeckle
from .processing.dither import floyd_steinberg_dither, posterize_rgb
from .processing.quantize import measure_black_ratio, quantize_4level
from .processing.resample import fit_to_size
from .processing.tone import apply_tone_curve
from .raster import GRAY, RGB, RasterBuffer
from .styles import StyleSpec
from .utils.performance import DECODE, ENCODE, QUANTIZE, RESAMPLE, StageTimer

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, RasterBuffer, Image.Image]

ONE_BIT_LUMINANCE = bytes([0, 255]) + bytes(254)


@dataclass(frozen=True)
class RenderOutput:
    """Encoded PNG plus the raw device buffer and diagnostics.

    Attributes:
        png: Complete PNG file bytes
        pixels: Device buffer (0/1 bits, 4-level gray, or palette indices)
        width: Output width
        height: Output height
        black_ratio: Black ratio for monochrome output, otherwise None
        style_name: Style (or fallback chain) used for monochrome output
    """

    png: bytes
    pixels: bytes
    width: int
    height: int
    black_ratio: Optional[float] = None
    style_name: Optional[str] = None


def raster_from_image(image: Image.Image) -> RasterBuffer:
    """Convert a PIL Image to a raster (L stays gray, everything else becomes RGB).

    Args:
        image: PIL Image to convert

    Returns:
        RasterBuffer with 1 or 3 channels
    """
    if image.mode in ("1", "L", "LA", "I", "I;16"):
        gray = image.convert("L")
        return RasterBuffer(gray.width, gray.height, gray.tobytes(), GRAY)

    rgb = image.convert("RGB")
    return RasterBuffer(rgb.width, rgb.height, rgb.tobytes(), RGB)


def raster_to_image(raster: RasterBuffer) -> Image.Image:
    """Convert a raster to a PIL Image in mode L or RGB."""
    mode = "L" if raster.is_gray else "RGB"
    return Image.frombytes(mode, raster.size, raster.pixels)


class ImageProcessor:
    """Image processor for converting generated images to e-Paper formats.

    Handles decoding, cropping and resizing to the display geometry, and the
    three output pipelines: 4-level grayscale, style-driven monochrome, and
    palette dithering for color panels. Stage durations of the latest render
    are kept in ``timer``.
    """

    def __init__(self, settings: Optional[ConverterSettings] = None) -> None:
        """Initialize the image processor.

        Args:
            settings: Converter settings; defaults are used when omitted
        """
        self.settings = settings or ConverterSettings()
        self.timer = StageTimer()
        self.converter = OneBitConverter(
            guardrail_distance=self.settings.guardrail_distance,
            check_tolerance=self.settings.threshold_check_tolerance,
        )
        logger.debug(f"ImageProcessor initialized for {self.settings.width}x{self.settings.height}")

    def load(self, source: ImageSource, color: bool = False) -> RasterBuffer:
        """Turn any supported source into a raster.

        Args:
            source: PNG bytes, a RasterBuffer, or a PIL Image
            color: Return RGB instead of luminance

        Returns:
            RasterBuffer, luminance or RGB as requested

        Raises:
            FormatError: If PNG bytes cannot be decoded
            TypeError: If the source type is unsupported
        """
        if isinstance(source, (bytes, bytearray)):
            with self.timer.measure(DECODE):
                decoded = decode_png(bytes(source))
            gray = decoded.gray
            if decoded.bit_depth == 1:
                # 1-bit samples decode as 0/1
                gray = RasterBuffer(
                    gray.width, gray.height, gray.pixels.translate(ONE_BIT_LUMINANCE), GRAY
                )
            if color:
                return decoded.rgb if decoded.rgb is not None else gray.to_rgb()
            return gray

        if isinstance(source, RasterBuffer):
            raster = source
        elif isinstance(source, Image.Image):
            raster = raster_from_image(source)
        else:
            raise TypeError(f"Unsupported image source: {type(source).__name__}")

        return raster.to_rgb() if color else raster.to_luminance()

    def prepare(self, source: ImageSource, color: bool = False) -> RasterBuffer:
        """Load a source and fit it to the display size."""
        raster = self.load(source, color=color)
        with self.timer.measure(RESAMPLE):
            fitted = fit_to_size(raster, self.settings.width, self.settings.height)
        logger.debug(f"Prepared {raster!r} as {fitted!r}")
        return fitted

    def render_gray4(self, source: ImageSource) -> RenderOutput:
        """Render a 4-level grayscale PNG.

        Args:
            source: Image source

        Returns:
            RenderOutput with an 8-bit gray PNG holding only 0, 85, 170 and 255
        """
        self.timer.reset()
        try:
            gray = self.prepare(source)
            with self.timer.measure(QUANTIZE):
                work = gray.working_copy()
                apply_tone_curve(work, self.settings.gray4_contrast, self.settings.gray4_gamma)
                quantize_4level(work)
            with self.timer.measure(ENCODE):
                png = encode_png_gray8(
                    work, gray.width, gray.height, self.settings.compression_level
                )

            logger.info(f"Rendered 4-level gray image {gray.width}x{gray.height}: {len(png)} bytes")
            logger.debug(f"Timings: {self.timer.describe()}")
            return RenderOutput(png=png, pixels=bytes(work), width=gray.width, height=gray.height)

        except Exception:
            logger.exception("Failed to render 4-level grayscale image")
            raise

    def convert_one_bit(self, source: ImageSource, style: StyleSpec) -> ConversionResult:
        """Fit the source and run the monochrome conversion stages."""
        gray = self.prepare(source)
        with self.timer.measure(QUANTIZE):
            return self.converter.convert(gray, style)

    def render_one_bit(self, source: ImageSource, style: StyleSpec) -> RenderOutput:
        """Render a 1-bit PNG with the given style.

        Args:
            source: Image source
            style: Monochrome conversion style

        Returns:
            RenderOutput with a 1-bit PNG, black ratio and style name
        """
        self.timer.reset()
        try:
            result = self.convert_one_bit(source, style)
            bits = result.bits
            black_ratio = result.black_ratio

            if self.settings.despeckle:
                work = bytearray(bits)
                flipped = despeckle(work, result.width, result.height)
                bits = bytes(work)
                black_ratio = measure_black_ratio(bits)
                logger.debug(f"Despeckle flipped {flipped} pixels")

            with self.timer.measure(ENCODE):
                png = encode_png_1bit(
                    bits, result.width, result.height, self.settings.compression_level
                )

            logger.info(
                f"Rendered 1-bit image {result.width}x{result.height} with {result.style_name}: "
                f"black_ratio={black_ratio:.3f}, attempts={result.attempts}"
            )
            logger.debug(f"Timings: {self.timer.describe()}")
            return RenderOutput(
                png=png,
                pixels=bits,
                width=result.width,
                height=result.height,
                black_ratio=black_ratio,
                style_name=result.style_name,
            )

        except Exception:
            logger.exception("Failed to render 1-bit image")
            raise

    def render_palette(
        self, source: ImageSource, palette: PaletteLike = SPECTRA6_PALETTE
    ) -> RenderOutput:
        """Render a palette-indexed PNG with Floyd-Steinberg dithering.

        Args:
            source: Image source; grayscale sources are expanded to RGB
            palette: Palette name, hex strings, or RGB triplets

        Returns:
            RenderOutput with an indexed PNG and one palette index per pixel
        """
        self.timer.reset()
        try:
            colors = resolve_palette(palette)
            rgb = self.prepare(source, color=True)

            with self.timer.measure(QUANTIZE):
                work = rgb.working_copy()
                if self.settings.posterize_levels:
                    posterize_rgb(work, self.settings.posterize_levels)
                indices = floyd_steinberg_dither(bytes(work), rgb.width, rgb.height, colors)

            with self.timer.measure(ENCODE):
                png = encode_png_indexed(
                    indices, rgb.width, rgb.height, colors, self.settings.compression_level
                )

            logger.info(
                f"Rendered {len(colors)}-color image {rgb.width}x{rgb.height}: {len(png)} bytes"
            )
            logger.debug(f"Timings: {self.timer.describe()}")
            return RenderOutput(png=png, pixels=indices, width=rgb.width, height=rgb.height)

        except Exception:
            logger.exception("Failed to render palette image")
            raise
