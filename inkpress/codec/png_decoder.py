"""Minimal PNG decoder producing luminance and RGB rasters.

Handles non-interlaced 8-bit grayscale, truecolor, grayscale+alpha and
truecolor+alpha images. 1-bit grayscale is also accepted so that monochrome
output of the encoder can be read back. Chunk CRCs are not verified.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Optional

from ..exceptions import FormatError
from ..raster import GRAY, RGB, RasterBuffer
from .deflate import zlib_unwrap

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

COLOR_TYPE_GRAY = 0
COLOR_TYPE_RGB = 2
COLOR_TYPE_PALETTE = 3
COLOR_TYPE_GRAY_ALPHA = 4
COLOR_TYPE_RGBA = 6

# Samples per pixel for each decodable color type
CHANNELS_BY_COLOR_TYPE = {
    COLOR_TYPE_GRAY: 1,
    COLOR_TYPE_RGB: 3,
    COLOR_TYPE_GRAY_ALPHA: 2,
    COLOR_TYPE_RGBA: 4,
}

FILTER_NONE = 0
FILTER_SUB = 1
FILTER_UP = 2
FILTER_AVERAGE = 3
FILTER_PAETH = 4


@dataclass(frozen=True)
class PngHeader:
    """Fields of the IHDR chunk."""

    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter_method: int
    interlace: int


@dataclass(frozen=True)
class DecodedImage:
    """Result of decoding a PNG: luminance plus RGB for color sources."""

    width: int
    height: int
    gray: RasterBuffer
    rgb: Optional[RasterBuffer]
    color_type: int
    bit_depth: int

    @property
    def has_color(self) -> bool:
        return self.rgb is not None


def iter_chunks(data: bytes) -> list[tuple[str, bytes]]:
    """Split a PNG byte string into (type, payload) pairs.

    Args:
        data: Complete PNG file bytes

    Returns:
        List of chunk type and payload tuples in file order

    Raises:
        FormatError: If the signature is wrong or a chunk is truncated
    """
    if data[: len(PNG_SIGNATURE)] != PNG_SIGNATURE:
        raise FormatError("Not a PNG file: bad signature")

    chunks = []
    offset = len(PNG_SIGNATURE)
    while offset + 8 <= len(data):
        length, raw_type = struct.unpack(">I4s", data[offset : offset + 8])
        chunk_type = raw_type.decode("latin-1")
        end = offset + 8 + length
        if end + 4 > len(data):
            raise FormatError(
                f"Truncated {chunk_type} chunk",
                chunk_type=chunk_type,
                details={"declared_length": length, "available": len(data) - offset - 8},
            )
        chunks.append((chunk_type, data[offset + 8 : end]))
        offset = end + 4
        if chunk_type == "IEND":
            break
    return chunks


def parse_header(payload: bytes) -> PngHeader:
    """Parse and validate an IHDR payload.

    Raises:
        FormatError: If the header is malformed or describes an unsupported image
    """
    if len(payload) != 13:
        raise FormatError(f"IHDR has length {len(payload)}, expected 13", chunk_type="IHDR")

    header = PngHeader(*struct.unpack(">IIBBBBB", payload))

    if header.width == 0 or header.height == 0:
        raise FormatError(
            f"Invalid image dimensions {header.width}x{header.height}", chunk_type="IHDR"
        )
    if header.color_type not in CHANNELS_BY_COLOR_TYPE:
        raise FormatError(f"Unsupported color type {header.color_type}", chunk_type="IHDR")
    if header.bit_depth != 8 and not (
        header.bit_depth == 1 and header.color_type == COLOR_TYPE_GRAY
    ):
        raise FormatError(f"Unsupported bit depth {header.bit_depth}", chunk_type="IHDR")
    if header.interlace != 0:
        raise FormatError("Interlaced images are not supported", chunk_type="IHDR")

    return header


def paeth_predictor(a: int, b: int, c: int) -> int:
    """Return whichever of left, above, upper-left is closest to a + b - c."""
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def unfilter_scanlines(raw: bytes, stride: int, height: int, bytes_per_pixel: int) -> bytearray:
    """Reverse per-row PNG filtering.

    Args:
        raw: Inflated scanlines, each prefixed with its filter type byte
        stride: Bytes per row excluding the filter byte
        height: Number of rows
        bytes_per_pixel: Distance to the "left" byte, at least 1

    Returns:
        Unfiltered pixel bytes, row-major without filter bytes

    Raises:
        FormatError: If raw holds fewer bytes than the image requires
    """
    expected = height * (stride + 1)
    if len(raw) < expected:
        raise FormatError(
            f"Image data too short: {len(raw)} bytes, expected {expected}",
            chunk_type="IDAT",
        )

    out = bytearray(height * stride)
    prev = bytearray(stride)
    bpp = bytes_per_pixel

    for y in range(height):
        src = y * (stride + 1)
        filter_type = raw[src]
        line = bytearray(raw[src + 1 : src + 1 + stride])

        if filter_type == FILTER_SUB:
            for x in range(bpp, stride):
                line[x] = (line[x] + line[x - bpp]) & 0xFF
        elif filter_type == FILTER_UP:
            for x in range(stride):
                line[x] = (line[x] + prev[x]) & 0xFF
        elif filter_type == FILTER_AVERAGE:
            for x in range(stride):
                left = line[x - bpp] if x >= bpp else 0
                line[x] = (line[x] + ((left + prev[x]) >> 1)) & 0xFF
        elif filter_type == FILTER_PAETH:
            for x in range(stride):
                if x >= bpp:
                    left = line[x - bpp]
                    upper_left = prev[x - bpp]
                else:
                    left = upper_left = 0
                line[x] = (line[x] + paeth_predictor(left, prev[x], upper_left)) & 0xFF
        elif filter_type != FILTER_NONE:
            logger.warning(f"Unknown filter type {filter_type} on row {y}, treating as None")

        out[y * stride : (y + 1) * stride] = line
        prev = line

    return out


def _unpack_1bit(packed: bytes, width: int, height: int) -> bytes:
    """Expand MSB-first packed rows into one 0/1 sample per pixel."""
    stride = (width + 7) // 8
    samples = bytearray(width * height)
    for y in range(height):
        row = packed[y * stride : (y + 1) * stride]
        base = y * width
        for x in range(width):
            samples[base + x] = (row[x >> 3] >> (7 - (x & 7))) & 1
    return bytes(samples)


def _rgb_to_gray(pixels: bytes, channels: int) -> bytes:
    return bytes(
        (pixels[i] * 77 + pixels[i + 1] * 150 + pixels[i + 2] * 29) >> 8
        for i in range(0, len(pixels), channels)
    )


def decode_png(data: bytes) -> DecodedImage:
    """Decode PNG bytes into luminance (and RGB, for color sources) rasters.

    Args:
        data: Complete PNG file bytes

    Returns:
        DecodedImage with a gray raster and, for color types 2 and 6, an RGB raster

    Raises:
        FormatError: If the PNG is malformed or unsupported
    """
    chunks = iter_chunks(data)

    header_payload = next((payload for kind, payload in chunks if kind == "IHDR"), None)
    if header_payload is None:
        raise FormatError("Missing IHDR chunk", chunk_type="IHDR")
    header = parse_header(header_payload)

    idat = b"".join(payload for kind, payload in chunks if kind == "IDAT")
    if not idat:
        raise FormatError("Missing IDAT chunk", chunk_type="IDAT")

    width, height = header.width, header.height
    channels = CHANNELS_BY_COLOR_TYPE[header.color_type]

    if header.bit_depth == 1:
        stride = (width + 7) // 8
        bytes_per_pixel = 1
    else:
        stride = width * channels
        bytes_per_pixel = channels

    raw = zlib_unwrap(idat)
    pixels = bytes(unfilter_scanlines(raw, stride, height, bytes_per_pixel))

    rgb: Optional[RasterBuffer] = None
    if header.bit_depth == 1:
        gray = _unpack_1bit(pixels, width, height)
    elif channels == 1:
        gray = pixels
    elif channels == 2:
        gray = pixels[0::2]
    else:
        gray = _rgb_to_gray(pixels, channels)
        if channels == 3:
            rgb_pixels = pixels
        else:
            stripped = bytearray(width * height * 3)
            stripped[0::3] = pixels[0::4]
            stripped[1::3] = pixels[1::4]
            stripped[2::3] = pixels[2::4]
            rgb_pixels = bytes(stripped)
        rgb = RasterBuffer(width, height, rgb_pixels, RGB)

    logger.debug(
        f"Decoded PNG {width}x{height}, color_type={header.color_type}, "
        f"bit_depth={header.bit_depth}, chunks={len(chunks)}"
    )

    return DecodedImage(
        width=width,
        height=height,
        gray=RasterBuffer(width, height, gray, GRAY),
        rgb=rgb,
        color_type=header.color_type,
        bit_depth=header.bit_depth,
    )
