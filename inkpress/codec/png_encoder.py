"""PNG encoders for e-Paper device buffers.

Produces 1-bit monochrome, 8-bit grayscale and 8-bit palette-indexed files.
Every scanline uses filter type None; the pixel stream is stored in a single
IDAT chunk.
"""

import logging
import struct
from typing import Sequence

from ..raster import Palette, RasterBuffer, make_palette
from .checksums import crc32
from .deflate import zlib_wrap
from .png_decoder import COLOR_TYPE_GRAY, COLOR_TYPE_PALETTE, PNG_SIGNATURE

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 6


def make_chunk(chunk_type: bytes, data: bytes) -> bytes:
    """Assemble a chunk: length, type, data, CRC32 over type and data."""
    return (
        struct.pack(">I", len(data))
        + chunk_type
        + data
        + struct.pack(">I", crc32(data, crc32(chunk_type)))
    )


def make_header(width: int, height: int, bit_depth: int, color_type: int) -> bytes:
    """Build the IHDR chunk (deflate compression, adaptive filtering, no interlace)."""
    return make_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0))


def _check_size(pixels: Sequence[int], width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if len(pixels) != width * height:
        raise ValueError(
            f"Pixel buffer length {len(pixels)} does not match {width}x{height} ({width * height})"
        )


def pack_1bit_scanlines(bits: Sequence[int], width: int, height: int) -> bytes:
    """Pack one value per pixel into MSB-first 1-bit rows, each prefixed with filter 0.

    Nonzero values become 1 (white), zero stays 0 (black).
    """
    stride = (width + 7) // 8
    raw = bytearray(height * (stride + 1))
    for y in range(height):
        row_offset = y * (stride + 1) + 1
        base = y * width
        for x in range(width):
            if bits[base + x]:
                raw[row_offset + (x >> 3)] |= 0x80 >> (x & 7)
    return bytes(raw)


def pack_8bit_scanlines(samples: bytes, width: int, height: int) -> bytes:
    """Prefix each row of one-byte samples with filter type 0."""
    raw = bytearray()
    for y in range(height):
        raw.append(0)
        raw += samples[y * width : (y + 1) * width]
    return bytes(raw)


def _assemble(header: bytes, raw: bytes, extra_chunks: Sequence[bytes], level: int) -> bytes:
    idat = make_chunk(b"IDAT", zlib_wrap(raw, level))
    return PNG_SIGNATURE + header + b"".join(extra_chunks) + idat + make_chunk(b"IEND", b"")


def encode_png_1bit(
    bits: Sequence[int], width: int, height: int, level: int = DEFAULT_COMPRESSION_LEVEL
) -> bytes:
    """Encode a monochrome buffer as a 1-bit grayscale PNG.

    Args:
        bits: One value per pixel, row-major; 0 is black, nonzero is white
        width: Image width in pixels
        height: Image height in pixels
        level: zlib compression level

    Returns:
        Complete PNG file bytes
    """
    _check_size(bits, width, height)
    raw = pack_1bit_scanlines(bits, width, height)
    png = _assemble(make_header(width, height, 1, COLOR_TYPE_GRAY), raw, (), level)
    logger.debug(f"Encoded 1-bit PNG {width}x{height}: {len(png)} bytes")
    return png


def encode_png_gray8(
    gray: bytes, width: int, height: int, level: int = DEFAULT_COMPRESSION_LEVEL
) -> bytes:
    """Encode a luminance buffer as an 8-bit grayscale PNG.

    Args:
        gray: One byte per pixel, row-major, 0 black to 255 white
        width: Image width in pixels
        height: Image height in pixels
        level: zlib compression level

    Returns:
        Complete PNG file bytes
    """
    _check_size(gray, width, height)
    raw = pack_8bit_scanlines(bytes(gray), width, height)
    png = _assemble(make_header(width, height, 8, COLOR_TYPE_GRAY), raw, (), level)
    logger.debug(f"Encoded 8-bit gray PNG {width}x{height}: {len(png)} bytes")
    return png


def encode_png_indexed(
    indices: bytes,
    width: int,
    height: int,
    palette: Sequence[Sequence[int]],
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> bytes:
    """Encode palette indices as an 8-bit indexed PNG with a PLTE chunk.

    Args:
        indices: One palette index per pixel, row-major
        width: Image width in pixels
        height: Image height in pixels
        palette: RGB triplets in index order (1-256 entries)
        level: zlib compression level

    Returns:
        Complete PNG file bytes

    Raises:
        ValueError: If the palette is invalid or an index falls outside it
    """
    _check_size(indices, width, height)
    colors: Palette = make_palette(palette)
    indices = bytes(indices)
    if indices and max(indices) >= len(colors):
        raise ValueError(f"Palette index {max(indices)} out of range for {len(colors)} colors")

    plte = make_chunk(b"PLTE", bytes(channel for color in colors for channel in color))
    raw = pack_8bit_scanlines(indices, width, height)
    png = _assemble(make_header(width, height, 8, COLOR_TYPE_PALETTE), raw, (plte,), level)
    logger.debug(f"Encoded indexed PNG {width}x{height} with {len(colors)} colors: {len(png)} bytes")
    return png


def encode_raster(raster: RasterBuffer, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """Encode a single-channel raster as an 8-bit grayscale PNG.

    Raises:
        ValueError: If the raster is not single-channel
    """
    if not raster.is_gray:
        raise ValueError("encode_raster only supports single-channel rasters")
    return encode_png_gray8(raster.pixels, raster.width, raster.height, level)
