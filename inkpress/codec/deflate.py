"""zlib container handling around raw DEFLATE streams.

PNG IDAT data is a zlib stream: a two byte header, the DEFLATE payload and a
big-endian Adler32 of the uncompressed data. The container is built and
stripped here by hand; only the DEFLATE bit-stream itself goes through the
standard ``zlib`` module.
"""

import logging
import struct
import zlib

from ..exceptions import FormatError
from .checksums import adler32

logger = logging.getLogger(__name__)

# CMF=0x78 (deflate, 32K window), FLG=0x01 (no preset dictionary, fastest)
ZLIB_HEADER = b"\x78\x01"
ZLIB_TRAILER_SIZE = 4


def deflate_raw(data: bytes, level: int = 6) -> bytes:
    """Compress data into a raw DEFLATE stream with no container.

    Args:
        data: Uncompressed bytes
        level: zlib compression level (-1 for default, 0-9)

    Returns:
        Raw DEFLATE bytes
    """
    compressor = zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def inflate_raw(data: bytes) -> bytes:
    """Decompress a raw DEFLATE stream.

    Args:
        data: Raw DEFLATE bytes

    Returns:
        Decompressed bytes

    Raises:
        FormatError: If the stream is corrupt
    """
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        return decompressor.decompress(data) + decompressor.flush()
    except zlib.error as e:
        raise FormatError(f"Corrupt DEFLATE stream: {e}", chunk_type="IDAT") from e


def zlib_wrap(data: bytes, level: int = 6) -> bytes:
    """Compress data and wrap it in a zlib container.

    The trailing Adler32 is computed over the uncompressed input.

    Args:
        data: Uncompressed bytes
        level: zlib compression level

    Returns:
        zlib stream bytes
    """
    compressed = deflate_raw(data, level)
    return ZLIB_HEADER + compressed + struct.pack(">I", adler32(data))


def zlib_unwrap(data: bytes) -> bytes:
    """Strip the zlib header and trailer and inflate the payload.

    The Adler32 trailer is not verified.

    Args:
        data: zlib stream bytes

    Returns:
        Decompressed bytes

    Raises:
        FormatError: If the stream is too short or corrupt
    """
    if len(data) < len(ZLIB_HEADER) + ZLIB_TRAILER_SIZE:
        raise FormatError(
            "zlib stream too short",
            chunk_type="IDAT",
            details={"length": len(data)},
        )
    payload = data[len(ZLIB_HEADER) : len(data) - ZLIB_TRAILER_SIZE]
    inflated = inflate_raw(payload)
    logger.debug(f"Inflated {len(payload)} bytes to {len(inflated)} bytes")
    return inflated
