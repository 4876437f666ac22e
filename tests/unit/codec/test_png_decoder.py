"""Tests for the PNG decoder."""

import struct
import zlib

import pytest
from PIL import Image

from inkpress.codec.png_decoder import (
    COLOR_TYPE_GRAY,
    COLOR_TYPE_RGB,
    PNG_SIGNATURE,
    decode_png,
    iter_chunks,
    paeth_predictor,
    parse_header,
    unfilter_scanlines,
)
from inkpress.exceptions import FormatError


def _chunk(chunk_type: bytes, data: bytes) -> bytes:
    return (
        struct.pack(">I", len(data))
        + chunk_type
        + data
        + struct.pack(">I", zlib.crc32(chunk_type + data))
    )


def _ihdr(width: int, height: int, bit_depth: int = 8, color_type: int = 0, interlace: int = 0):
    return _chunk(
        b"IHDR", struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, interlace)
    )


def _png(header: bytes, raw: bytes) -> bytes:
    return (
        PNG_SIGNATURE + header + _chunk(b"IDAT", zlib.compress(raw)) + _chunk(b"IEND", b"")
    )


def _filter_rows(rows: list, filter_type: int, bpp: int) -> bytes:
    """Apply one PNG filter type to every row, the way an encoder would."""
    out = bytearray()
    prev = bytes(len(rows[0]))
    for row in rows:
        line = bytearray([filter_type])
        for x, value in enumerate(row):
            left = row[x - bpp] if x >= bpp else 0
            up = prev[x]
            upper_left = prev[x - bpp] if x >= bpp else 0
            if filter_type == 0:
                predicted = 0
            elif filter_type == 1:
                predicted = left
            elif filter_type == 2:
                predicted = up
            elif filter_type == 3:
                predicted = (left + up) >> 1
            else:
                predicted = paeth_predictor(left, up, upper_left)
            line.append((value - predicted) & 0xFF)
        out += line
        prev = row
    return bytes(out)


class TestPaethPredictor:
    """Test cases for paeth_predictor."""

    @pytest.mark.parametrize(
        "a,b,c,expected",
        [
            (10, 20, 10, 20),  # p=20 equals b
            (20, 10, 10, 20),  # p=20 equals a
            (0, 0, 0, 0),
            (100, 100, 255, 100),  # tie between a and b keeps a
            (50, 200, 100, 200),  # pb smallest
            (200, 60, 210, 60),
        ],
    )
    def test_paeth_predictor_when_called_then_picks_nearest(
        self, a: int, b: int, c: int, expected: int
    ) -> None:
        assert paeth_predictor(a, b, c) == expected


class TestUnfilterScanlines:
    """Test cases for unfilter_scanlines."""

    @pytest.mark.parametrize("filter_type", [0, 1, 2, 3, 4])
    def test_unfilter_when_each_filter_type_then_restores_rows(self, filter_type: int) -> None:
        # Arrange
        rows = [bytes((x * 37 + y * 11) & 0xFF for x in range(12)) for y in range(5)]
        raw = _filter_rows(rows, filter_type, bpp=3)

        # Act
        result = unfilter_scanlines(raw, stride=12, height=5, bytes_per_pixel=3)

        # Assert
        assert bytes(result) == b"".join(rows)

    def test_unfilter_when_data_too_short_then_raises_format_error(self) -> None:
        with pytest.raises(FormatError, match="too short"):
            unfilter_scanlines(b"\x00\x01\x02", stride=4, height=2, bytes_per_pixel=1)

    def test_unfilter_when_unknown_filter_then_treats_row_as_none(self, caplog) -> None:
        raw = b"\x07\x01\x02\x03"

        result = unfilter_scanlines(raw, stride=3, height=1, bytes_per_pixel=1)

        assert bytes(result) == b"\x01\x02\x03"
        assert "Unknown filter type 7" in caplog.text


class TestIterChunks:
    """Test cases for iter_chunks and parse_header."""

    def test_iter_chunks_when_bad_signature_then_raises_format_error(self) -> None:
        with pytest.raises(FormatError, match="bad signature"):
            iter_chunks(b"GIF89a" + b"\x00" * 20)

    def test_iter_chunks_when_chunk_truncated_then_raises_format_error(self) -> None:
        data = PNG_SIGNATURE + _ihdr(2, 2)[:-6]

        with pytest.raises(FormatError) as exc_info:
            iter_chunks(data)

        assert exc_info.value.chunk_type == "IHDR"

    def test_iter_chunks_when_valid_then_stops_at_iend(self) -> None:
        data = _png(_ihdr(1, 1), b"\x00\x80") + b"trailing garbage"

        chunks = iter_chunks(data)

        assert [kind for kind, _ in chunks] == ["IHDR", "IDAT", "IEND"]

    def test_parse_header_when_wrong_length_then_raises_format_error(self) -> None:
        with pytest.raises(FormatError, match="expected 13"):
            parse_header(b"\x00" * 12)


class TestDecodePng:
    """Test cases for decode_png."""

    def test_decode_png_when_pillow_grayscale_then_returns_same_pixels(
        self, png_from_pil
    ) -> None:
        # Arrange
        pixels = bytes((x * 7 + y * 13) & 0xFF for y in range(9) for x in range(11))
        image = Image.frombytes("L", (11, 9), pixels)

        # Act
        decoded = decode_png(png_from_pil(image))

        # Assert
        assert decoded.width == 11
        assert decoded.height == 9
        assert decoded.gray.pixels == pixels
        assert decoded.rgb is None
        assert decoded.has_color is False

    def test_decode_png_when_pillow_rgb_then_returns_rgb_and_luminance(
        self, png_from_pil
    ) -> None:
        # Arrange
        image = Image.new("RGB", (3, 2), (200, 100, 50))

        # Act
        decoded = decode_png(png_from_pil(image))

        # Assert
        assert decoded.color_type == COLOR_TYPE_RGB
        assert decoded.rgb.pixels == bytes([200, 100, 50]) * 6
        expected_gray = (200 * 77 + 100 * 150 + 50 * 29) >> 8
        assert decoded.gray.pixels == bytes([expected_gray]) * 6

    def test_decode_png_when_rgba_then_alpha_is_ignored(self, png_from_pil) -> None:
        image = Image.new("RGBA", (4, 4), (255, 0, 0, 0))

        decoded = decode_png(png_from_pil(image))

        assert decoded.rgb.pixels == bytes([255, 0, 0]) * 16
        assert decoded.gray.pixels == bytes([(255 * 77) >> 8]) * 16

    def test_decode_png_when_gray_alpha_then_uses_gray_samples(self, png_from_pil) -> None:
        image = Image.new("LA", (5, 3), (90, 10))

        decoded = decode_png(png_from_pil(image))

        assert decoded.gray.pixels == bytes([90]) * 15
        assert decoded.rgb is None

    def test_decode_png_when_paeth_filtered_rgb_then_restores_pixels(self) -> None:
        # Arrange
        rows = [bytes((x * 29 + y * 53) & 0xFF for x in range(3 * 6)) for y in range(4)]
        data = _png(_ihdr(6, 4, color_type=COLOR_TYPE_RGB), _filter_rows(rows, 4, bpp=3))

        # Act
        decoded = decode_png(data)

        # Assert
        assert decoded.rgb.pixels == b"".join(rows)

    def test_decode_png_when_one_bit_gray_then_unpacks_samples(self) -> None:
        # 10 pixels: 1010101010 packed MSB first into two bytes
        data = _png(_ihdr(10, 1, bit_depth=1, color_type=COLOR_TYPE_GRAY), b"\x00\xaa\x80")

        decoded = decode_png(data)

        assert decoded.gray.pixels == bytes([1, 0, 1, 0, 1, 0, 1, 0, 1, 0])
        assert decoded.bit_depth == 1

    def test_decode_png_when_split_idat_then_concatenates_chunks(self) -> None:
        compressed = zlib.compress(b"\x00\x10\x20\x00\x30\x40")
        data = (
            PNG_SIGNATURE
            + _ihdr(2, 2)
            + _chunk(b"IDAT", compressed[:5])
            + _chunk(b"IDAT", compressed[5:])
            + _chunk(b"IEND", b"")
        )

        assert decode_png(data).gray.pixels == b"\x10\x20\x30\x40"

    def test_decode_png_when_sixteen_bit_then_raises_format_error(self) -> None:
        data = _png(_ihdr(1, 1, bit_depth=16), b"\x00\x00\x00")

        with pytest.raises(FormatError, match="bit depth 16"):
            decode_png(data)

    def test_decode_png_when_interlaced_then_raises_format_error(self) -> None:
        data = _png(_ihdr(1, 1, interlace=1), b"\x00\x00")

        with pytest.raises(FormatError, match="Interlaced"):
            decode_png(data)

    def test_decode_png_when_palette_color_type_then_raises_format_error(self) -> None:
        data = _png(_ihdr(1, 1, color_type=3), b"\x00\x00")

        with pytest.raises(FormatError, match="color type 3"):
            decode_png(data)

    def test_decode_png_when_zero_width_then_raises_format_error(self) -> None:
        data = _png(_ihdr(0, 1), b"\x00")

        with pytest.raises(FormatError, match="dimensions"):
            decode_png(data)

    def test_decode_png_when_idat_missing_then_raises_format_error(self) -> None:
        data = PNG_SIGNATURE + _ihdr(1, 1) + _chunk(b"IEND", b"")

        with pytest.raises(FormatError, match="Missing IDAT"):
            decode_png(data)

    def test_decode_png_when_ihdr_missing_then_raises_format_error(self) -> None:
        data = PNG_SIGNATURE + _chunk(b"IEND", b"")

        with pytest.raises(FormatError, match="Missing IHDR"):
            decode_png(data)

    def test_decode_png_when_pixel_data_short_then_raises_format_error(self) -> None:
        data = _png(_ihdr(4, 4), b"\x00\x01\x02\x03\x04")

        with pytest.raises(FormatError, match="too short"):
            decode_png(data)

    def test_decode_png_when_empty_input_then_raises_format_error(self) -> None:
        with pytest.raises(FormatError):
            decode_png(b"")
