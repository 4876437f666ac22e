"""Tests for ConverterSettings."""

import logging

import pytest
from pydantic import ValidationError

from inkpress.config.settings import ConverterSettings
from inkpress.exceptions import ConfigurationError


class TestConverterSettings:
    """Test cases for ConverterSettings."""

    def test_init_when_defaults_then_targets_800x480_panel(self) -> None:
        settings = ConverterSettings()

        assert settings.size == (800, 480)
        assert settings.gray4_contrast == 1.2
        assert settings.gray4_gamma == 0.95
        assert settings.guardrail_distance == 0.10
        assert settings.despeckle is False
        assert settings.posterize_levels is None
        assert settings.compression_level == 6

    @pytest.mark.parametrize(
        "field,value",
        [("width", 0), ("height", 9000), ("gray4_gamma", 0), ("compression_level", 10)],
    )
    def test_init_when_out_of_range_then_raises_validation_error(
        self, field: str, value: object
    ) -> None:
        with pytest.raises(ValidationError):
            ConverterSettings(**{field: value})

    @pytest.mark.parametrize("levels", [1, 300])
    def test_init_when_posterize_levels_invalid_then_raises_configuration_error(
        self, levels: int
    ) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ConverterSettings(posterize_levels=levels)

        assert exc_info.value.field_name == "posterize_levels"

    def test_init_when_posterize_levels_valid_then_accepted(self) -> None:
        assert ConverterSettings(posterize_levels=8).posterize_levels == 8

    def test_init_when_width_not_multiple_of_8_then_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            ConverterSettings(width=250, height=122)

        assert "not a multiple of 8" in caplog.text

    def test_init_when_width_multiple_of_8_then_no_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            ConverterSettings(width=296, height=128)

        assert "multiple of 8" not in caplog.text

    def test_model_validate_when_dict_then_builds_settings(self) -> None:
        settings = ConverterSettings.model_validate({"width": 400, "height": 300, "despeckle": True})

        assert settings.size == (400, 300)
        assert settings.despeckle is True
