"""Configuration models and style catalog loading."""

from .catalog import dump_style_catalog, load_style_catalog
from .settings import ConverterSettings

__all__ = ["ConverterSettings", "dump_style_catalog", "load_style_catalog"]
