"""
Color palettes for e-Paper panels.

The Spectra 6 palette holds measured sRGB values of the six ink pigments on an
E Ink Spectra 6 panel. Index order matches the device color codes, so palette
indices produced by the ditherer can be sent to the panel unchanged.
"""

from typing import Sequence, Union

from .raster import Palette, make_palette

BLACK = 0
WHITE = 1
RED = 2
YELLOW = 3
GREEN = 4
BLUE = 5

SPECTRA6_PALETTE: Palette = (
    (0, 0, 0),  # black
    (255, 255, 255),  # white
    (178, 19, 24),  # red
    (239, 222, 68),  # yellow
    (18, 95, 32),  # green
    (33, 87, 186),  # blue
)

SPECTRA6_NAMES = ("black", "white", "red", "yellow", "green", "blue")

MONOCHROME_PALETTE: Palette = ((0, 0, 0), (255, 255, 255))

GRAY4_PALETTE: Palette = ((0, 0, 0), (85, 85, 85), (170, 170, 170), (255, 255, 255))


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert a "#rrggbb" string to an RGB triplet.

    Raises:
        ValueError: If hex_color format is invalid
    """
    if not hex_color.startswith("#") or len(hex_color) != 7:
        raise ValueError(f"Invalid hex color format: {hex_color}")

    try:
        return (int(hex_color[1:3], 16), int(hex_color[3:5], 16), int(hex_color[5:7], 16))
    except ValueError as e:
        raise ValueError(f"Invalid hex color: {hex_color}") from e


def palette_from_hex(colors: Sequence[str]) -> Palette:
    """Build a palette from "#rrggbb" strings, keeping their order."""
    return make_palette([hex_to_rgb(color) for color in colors])


def palette_to_hex(palette: Palette) -> list[str]:
    return [f"#{r:02x}{g:02x}{b:02x}" for r, g, b in palette]


def get_palette(name: str) -> Palette:
    """Look up a named palette.

    Args:
        name: One of "spectra6", "monochrome", "gray4"

    Raises:
        ValueError: If the name is unknown
    """
    palettes: dict[str, Palette] = {
        "spectra6": SPECTRA6_PALETTE,
        "monochrome": MONOCHROME_PALETTE,
        "gray4": GRAY4_PALETTE,
    }
    try:
        return palettes[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown palette: {name}") from None


PaletteLike = Union[str, Sequence[Sequence[int]]]


def resolve_palette(palette: PaletteLike) -> Palette:
    """Accept a palette name, a list of hex strings or a list of RGB triplets."""
    if isinstance(palette, str):
        return get_palette(palette)
    if palette and isinstance(palette[0], str):
        return palette_from_hex(palette)  # type: ignore[arg-type]
    return make_palette(palette)
