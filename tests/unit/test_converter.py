"""Tests for the monochrome conversion orchestrator."""

from unittest.mock import patch

import pytest

from inkpress import converter as converter_module
from inkpress.converter import (
    ConversionResult,
    ConversionStage,
    OneBitConverter,
    convert_one_bit,
    quantize_with_style,
)
from inkpress.processing.tone import tone_table
from inkpress.raster import RGB, RasterBuffer
from inkpress.styles import GUARDRAIL_STYLE, OrderedDitherStyle, with_overrides


def _bits_with_ratio(black: int, total: int = 100) -> bytes:
    return bytes([0] * black + [1] * (total - black))


@pytest.fixture
def source() -> RasterBuffer:
    return RasterBuffer(10, 10, bytes(range(0, 200, 2)))


class TestQuantizeWithStyle:
    """Test cases for quantize_with_style."""

    def test_quantize_with_style_when_ordered_then_uses_bayer(self, ordered_style) -> None:
        bits = quantize_with_style(bytes([128]) * 64, 8, 8, ordered_style)

        assert bits.count(0) == 31

    def test_quantize_with_style_when_threshold_then_uses_histogram(self, threshold_style) -> None:
        bits = quantize_with_style(bytes([128]) * 64, 8, 8, threshold_style)

        assert bits == bytes(64)


class TestOneBitConverter:
    """Test cases for OneBitConverter.convert."""

    def test_convert_when_first_attempt_in_band_then_returns_after_one_pass(
        self, mid_gray, ordered_style
    ) -> None:
        # Act
        result = OneBitConverter().convert(mid_gray, ordered_style)

        # Assert
        assert result.stage is ConversionStage.ATTEMPT
        assert result.attempts == 1
        assert result.black_ratio == pytest.approx(31 / 64)
        assert result.style_name == "test_dither"
        assert result.guardrail_used is False

    def test_convert_when_retry_in_band_then_returns_retry_bits(
        self, source, ordered_style
    ) -> None:
        # Arrange
        outputs = [_bits_with_ratio(90), _bits_with_ratio(50)]

        # Act
        with patch.object(converter_module, "quantize_with_style", side_effect=outputs) as mock_q:
            result = OneBitConverter().convert(source, ordered_style)

        # Assert
        assert result.stage is ConversionStage.RETRY
        assert result.attempts == 2
        assert result.bits == outputs[1]
        assert result.black_ratio == 0.5
        assert result.style_name == "test_dither"
        retry_style = mock_q.call_args_list[1].args[3]
        assert retry_style.gamma == pytest.approx(0.94)

    def test_convert_when_retry_uses_original_source_then_inputs_match(
        self, source, ordered_style
    ) -> None:
        """The retry tone-maps the untouched source, not the first attempt's buffer."""
        outputs = [_bits_with_ratio(90), _bits_with_ratio(50)]

        with patch.object(converter_module, "quantize_with_style", side_effect=outputs) as mock_q:
            OneBitConverter().convert(source, ordered_style)

        first_input = mock_q.call_args_list[0].args[0]
        second_input, _, _, retry_style = mock_q.call_args_list[1].args[:4]
        assert first_input == source.pixels.translate(tone_table(1.0, 1.0))
        assert second_input == source.pixels.translate(
            tone_table(retry_style.contrast, retry_style.gamma)
        )

    def test_convert_when_both_miss_slightly_then_keeps_closer_first_attempt(
        self, source, ordered_style
    ) -> None:
        # Arrange
        outputs = [_bits_with_ratio(75), _bits_with_ratio(78)]

        # Act
        with patch.object(converter_module, "quantize_with_style", side_effect=outputs):
            result = OneBitConverter().convert(source, ordered_style)

        # Assert
        assert result.stage is ConversionStage.BEST_OF_TWO
        assert result.attempts == 2
        assert result.bits == outputs[0]
        assert result.style_name == "test_dither"

    def test_convert_when_retry_closer_then_keeps_retry(self, source, ordered_style) -> None:
        outputs = [_bits_with_ratio(78), _bits_with_ratio(75)]

        with patch.object(converter_module, "quantize_with_style", side_effect=outputs):
            result = OneBitConverter().convert(source, ordered_style)

        assert result.bits == outputs[1]
        assert result.black_ratio == 0.75

    def test_convert_when_attempts_tie_then_keeps_first_attempt(
        self, source, ordered_style
    ) -> None:
        # Arrange
        # All white and all black are both exactly 0.25 outside [0.25, 0.75]
        style = with_overrides(ordered_style, black_min=0.25, black_max=0.75)
        outputs = [_bits_with_ratio(0), _bits_with_ratio(100)]

        # Act
        with patch.object(converter_module, "quantize_with_style", side_effect=outputs):
            result = OneBitConverter(guardrail_distance=0.30).convert(source, style)

        # Assert
        assert result.stage is ConversionStage.BEST_OF_TWO
        assert result.bits == outputs[0]
        assert result.black_ratio == 0.0

    def test_convert_when_both_far_off_then_runs_guardrail(self, source, ordered_style) -> None:
        # Arrange
        outputs = [_bits_with_ratio(100), _bits_with_ratio(95), _bits_with_ratio(40)]

        # Act
        with patch.object(converter_module, "quantize_with_style", side_effect=outputs) as mock_q:
            result = OneBitConverter().convert(source, ordered_style)

        # Assert
        assert mock_q.call_count == 3
        assert mock_q.call_args_list[2].args[3] is GUARDRAIL_STYLE
        assert result.stage is ConversionStage.GUARDRAIL
        assert result.guardrail_used is True
        assert result.attempts == 3
        assert result.bits == outputs[2]
        assert result.style_name == "test_dither→woodcut"

    def test_convert_when_guardrail_misses_too_then_still_returns_it(
        self, threshold_style, caplog
    ) -> None:
        # Arrange
        black = RasterBuffer(8, 8, bytes(64))

        # Act
        with patch.object(
            converter_module, "quantize_with_style", wraps=quantize_with_style
        ) as mock_q:
            result = OneBitConverter().convert(black, threshold_style)

        # Assert
        assert mock_q.call_count == 3
        assert result.black_ratio == 1.0
        assert result.style_name == "test_threshold→woodcut"
        assert "Guardrail" in caplog.text

    @pytest.mark.parametrize(
        "pixels",
        [bytes(64), bytes([255]) * 64, bytes(range(0, 256, 4)), bytes([128]) * 64],
    )
    def test_convert_when_any_input_then_at_most_three_passes(
        self, pixels: bytes, ordered_style, threshold_style
    ) -> None:
        raster = RasterBuffer(8, 8, pixels)

        for style in (ordered_style, threshold_style):
            with patch.object(
                converter_module, "quantize_with_style", wraps=quantize_with_style
            ) as mock_q:
                result = OneBitConverter().convert(raster, style)

            assert mock_q.call_count == result.attempts
            assert 1 <= result.attempts <= 3

    def test_convert_when_called_then_source_not_mutated(self, gray_ramp, threshold_style) -> None:
        original = gray_ramp.pixels

        OneBitConverter().convert(gray_ramp, threshold_style)

        assert gray_ramp.pixels == original

    def test_convert_when_rgb_source_then_reduces_to_luminance(self, ordered_style) -> None:
        rgb = RasterBuffer(8, 8, bytes([128, 128, 128]) * 64, RGB)

        result = OneBitConverter().convert(rgb, ordered_style)

        assert len(result.bits) == 64
        assert (result.width, result.height) == (8, 8)

    def test_convert_when_custom_guardrail_distance_then_respected(
        self, source, ordered_style
    ) -> None:
        outputs = [_bits_with_ratio(100), _bits_with_ratio(95)]

        with patch.object(converter_module, "quantize_with_style", side_effect=outputs):
            result = OneBitConverter(guardrail_distance=0.5).convert(source, ordered_style)

        assert result.stage is ConversionStage.BEST_OF_TWO
        assert result.black_ratio == 0.95


class TestConversionResult:
    """Test cases for ConversionResult and convert_one_bit."""

    def test_to_dict_when_called_then_excludes_bits(self) -> None:
        result = ConversionResult(
            bits=b"\x00\x01",
            width=2,
            height=1,
            black_ratio=0.5,
            style_name="a→b",
            attempts=3,
            stage=ConversionStage.GUARDRAIL,
        )

        assert result.to_dict() == {
            "width": 2,
            "height": 1,
            "black_ratio": 0.5,
            "style_name": "a→b",
            "attempts": 3,
            "stage": "guardrail",
        }

    def test_convert_one_bit_when_uniform_mid_gray_then_ratio_counts_black(self) -> None:
        # Arrange
        style = OrderedDitherStyle(name="wide", contrast=1.0, gamma=1.0, black_min=0.0, black_max=1.0)
        gray = RasterBuffer(16, 16, bytes([128]) * 256)

        # Act
        result = convert_one_bit(gray, style)

        # Assert
        assert result.black_ratio == result.bits.count(0) / 256
