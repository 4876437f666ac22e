"""Binary despeckle: remove isolated black dots and fill isolated white holes."""

import logging

from .quantize import BLACK, WHITE

logger = logging.getLogger(__name__)

ISOLATED_MAX_NEIGHBORS = 1
HOLE_MIN_NEIGHBORS = 7


def despeckle(bits: bytearray, width: int, height: int) -> int:
    """Clean up a 0/1 buffer in place.

    Neighbor counts come from a snapshot taken before the pass, so a flip never
    influences another pixel in the same pass. Border pixels are left alone.

    Args:
        bits: Binary buffer, 0 black and 1 white, row-major
        width: Image width
        height: Image height

    Returns:
        Number of pixels flipped
    """
    if len(bits) != width * height:
        raise ValueError(f"Bit buffer length {len(bits)} does not match {width}x{height}")

    snapshot = bytes(bits)
    flipped = 0

    for y in range(1, height - 1):
        above = (y - 1) * width
        row = y * width
        below = (y + 1) * width
        for x in range(1, width - 1):
            black_neighbors = (
                (snapshot[above + x - 1] == BLACK)
                + (snapshot[above + x] == BLACK)
                + (snapshot[above + x + 1] == BLACK)
                + (snapshot[row + x - 1] == BLACK)
                + (snapshot[row + x + 1] == BLACK)
                + (snapshot[below + x - 1] == BLACK)
                + (snapshot[below + x] == BLACK)
                + (snapshot[below + x + 1] == BLACK)
            )
            if snapshot[row + x] == BLACK:
                if black_neighbors <= ISOLATED_MAX_NEIGHBORS:
                    bits[row + x] = WHITE
                    flipped += 1
            elif black_neighbors >= HOLE_MIN_NEIGHBORS:
                bits[row + x] = BLACK
                flipped += 1

    logger.debug(f"Despeckle flipped {flipped} pixels in {width}x{height}")
    return flipped
