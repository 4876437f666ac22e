"""Raster buffer and palette models shared by every processing stage."""

from dataclasses import dataclass
from typing import Any, Sequence

Color = tuple[int, int, int]
Palette = tuple[Color, ...]

GRAY = 1
RGB = 3


@dataclass(frozen=True)
class RasterBuffer:
    """Row-major pixel buffer with one (gray) or three (RGB) bytes per pixel.

    A raster never changes once built. Stages that need to modify pixels take a
    ``working_copy()`` and wrap the result in a new raster.
    """

    width: int
    height: int
    pixels: bytes
    channels: int = GRAY

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {self.width}x{self.height}")
        if self.channels not in (GRAY, RGB):
            raise ValueError(f"Unsupported channel count: {self.channels}")
        if not isinstance(self.pixels, bytes):
            object.__setattr__(self, "pixels", bytes(self.pixels))
        expected = self.width * self.height * self.channels
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel buffer length {len(self.pixels)} does not match "
                f"{self.width}x{self.height}x{self.channels} ({expected})"
            )

    def __repr__(self) -> str:
        return (
            f"RasterBuffer(width={self.width}, height={self.height}, "
            f"channels={self.channels})"
        )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def is_gray(self) -> bool:
        return self.channels == GRAY

    def working_copy(self) -> bytearray:
        """Return a mutable copy of the pixel data."""
        return bytearray(self.pixels)

    def with_pixels(self, pixels: bytes) -> "RasterBuffer":
        """Return a raster with the same geometry and new pixel data."""
        return RasterBuffer(self.width, self.height, bytes(pixels), self.channels)

    def to_luminance(self) -> "RasterBuffer":
        """Return a single-channel luminance raster.

        Returns:
            self if already grayscale, otherwise a new luminance raster
        """
        if self.is_gray:
            return self
        src = self.pixels
        gray = bytes(
            (src[i] * 77 + src[i + 1] * 150 + src[i + 2] * 29) >> 8
            for i in range(0, len(src), 3)
        )
        return RasterBuffer(self.width, self.height, gray, GRAY)

    def to_rgb(self) -> "RasterBuffer":
        """Return a three-channel raster, replicating gray samples if needed."""
        if not self.is_gray:
            return self
        rgb = bytearray(len(self.pixels) * 3)
        rgb[0::3] = self.pixels
        rgb[1::3] = self.pixels
        rgb[2::3] = self.pixels
        return RasterBuffer(self.width, self.height, bytes(rgb), RGB)

    def to_dict(self) -> dict[str, Any]:
        """Describe the raster geometry (pixel data excluded)."""
        return {"width": self.width, "height": self.height, "channels": self.channels}


def make_palette(colors: Sequence[Sequence[int]]) -> Palette:
    """Validate and normalize a sequence of RGB triplets into a palette.

    Args:
        colors: Sequence of (r, g, b) values in 0-255

    Returns:
        Palette tuple

    Raises:
        ValueError: If the palette is empty, too large, or has invalid entries
    """
    if not colors:
        raise ValueError("Palette must contain at least one color")
    if len(colors) > 256:
        raise ValueError(f"Palette has {len(colors)} colors, maximum is 256")

    palette = []
    for index, color in enumerate(colors):
        if len(color) != 3:
            raise ValueError(f"Palette entry {index} is not an RGB triplet: {color!r}")
        if any(not 0 <= int(channel) <= 255 for channel in color):
            raise ValueError(f"Palette entry {index} has out-of-range channel: {color!r}")
        palette.append((int(color[0]), int(color[1]), int(color[2])))
    return tuple(palette)
