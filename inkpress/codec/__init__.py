"""PNG codec: checksums, zlib container handling, decoder and encoders."""

from .checksums import adler32, crc32
from .deflate import deflate_raw, inflate_raw, zlib_unwrap, zlib_wrap
from .png_decoder import DecodedImage, decode_png
from .png_encoder import encode_png_1bit, encode_png_gray8, encode_png_indexed, encode_raster

__all__ = [
    "DecodedImage",
    "adler32",
    "crc32",
    "decode_png",
    "deflate_raw",
    "encode_png_1bit",
    "encode_png_gray8",
    "encode_png_indexed",
    "encode_raster",
    "inflate_raw",
    "zlib_unwrap",
    "zlib_wrap",
]
