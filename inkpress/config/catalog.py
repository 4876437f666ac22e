"""Load and save style catalogs as YAML."""

import logging
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from ..styles import StyleSpec, style_from_dict, style_to_dict

logger = logging.getLogger(__name__)


def load_style_catalog(text: str) -> list[StyleSpec]:
    """Parse a YAML style catalog.

    The document is either a list of style mappings or a mapping with a
    ``styles`` key holding that list. Every entry needs a ``mode`` of
    ``ordered_dither`` or ``adaptive_threshold``.

    Args:
        text: YAML document

    Returns:
        Validated styles in document order

    Raises:
        ConfigurationError: If the document is malformed or a style is invalid
    """
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid style catalog YAML: {e}") from e

    if isinstance(data, dict):
        data = data.get("styles")
    if not isinstance(data, list):
        raise ConfigurationError(
            "Style catalog must be a list of styles",
            field_name="styles",
            validation_errors=[f"Got {type(data).__name__}"],
        )

    styles = []
    names = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"Style entry {index} is not a mapping",
                field_name=f"styles[{index}]",
                field_value=entry,
            )
        try:
            style = style_from_dict(entry)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid style entry {index}",
                field_name=f"styles[{index}]",
                validation_errors=[err["msg"] for err in e.errors()],
            ) from e
        if style.name in names:
            raise ConfigurationError(
                f"Duplicate style name: {style.name}",
                field_name="name",
                field_value=style.name,
            )
        names.add(style.name)
        styles.append(style)

    logger.debug(f"Loaded {len(styles)} styles from catalog")
    return styles


def dump_style_catalog(styles: Sequence[StyleSpec]) -> str:
    """Serialize styles to a YAML document readable by load_style_catalog."""
    return yaml.safe_dump(
        {"styles": [style_to_dict(style) for style in styles]}, sort_keys=False
    )
