"""Center-crop and bilinear resize for grayscale and RGB rasters."""

import logging
import math

from ..raster import RasterBuffer

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def crop_box(
    src_width: int, src_height: int, target_width: int, target_height: int
) -> tuple[int, int, int, int]:
    """Compute the centered crop matching the target aspect ratio.

    Returns:
        Tuple of (offset_x, offset_y, crop_width, crop_height)
    """
    src_aspect = src_width / src_height
    target_aspect = target_width / target_height

    if src_aspect > target_aspect:
        crop_height = src_height
        crop_width = min(src_width, max(1, _round_half_up(src_height * target_aspect)))
        return ((src_width - crop_width) // 2, 0, crop_width, crop_height)

    crop_width = src_width
    crop_height = min(src_height, max(1, _round_half_up(src_width / target_aspect)))
    return (0, (src_height - crop_height) // 2, crop_width, crop_height)


def center_crop(raster: RasterBuffer, target_width: int, target_height: int) -> RasterBuffer:
    """Crop the raster to the target aspect ratio, keeping the center.

    Args:
        raster: Source raster (1 or 3 channels)
        target_width: Width whose aspect ratio should be matched
        target_height: Height whose aspect ratio should be matched

    Returns:
        Cropped raster, or the source itself when no crop is needed
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target dimensions must be positive, got {target_width}x{target_height}")

    offset_x, offset_y, crop_width, crop_height = crop_box(
        raster.width, raster.height, target_width, target_height
    )
    if (crop_width, crop_height) == raster.size:
        return raster

    ch = raster.channels
    src = raster.pixels
    row_bytes = crop_width * ch
    out = bytearray()
    for y in range(offset_y, offset_y + crop_height):
        start = (y * raster.width + offset_x) * ch
        out += src[start : start + row_bytes]

    logger.debug(
        f"Center-cropped {raster.width}x{raster.height} to {crop_width}x{crop_height} "
        f"at ({offset_x}, {offset_y})"
    )
    return RasterBuffer(crop_width, crop_height, bytes(out), ch)


def resize_bilinear(raster: RasterBuffer, width: int, height: int) -> RasterBuffer:
    """Resize with bilinear interpolation, channel by channel.

    Destination (x, y) samples source (x * srcW / dstW, y * srcH / dstH). The
    right and bottom neighbors are clamped to the last row/column.

    Args:
        raster: Source raster (1 or 3 channels)
        width: Destination width
        height: Destination height

    Returns:
        Resized raster
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Target dimensions must be positive, got {width}x{height}")

    src_w, src_h, ch = raster.width, raster.height, raster.channels
    src = raster.pixels
    x_ratio = src_w / width
    y_ratio = src_h / height

    # Horizontal sample positions are shared by every row
    columns = []
    for x in range(width):
        src_x = x * x_ratio
        x0 = int(src_x)
        x1 = min(x0 + 1, src_w - 1)
        columns.append((x0 * ch, x1 * ch, src_x - x0))

    out = bytearray(width * height * ch)
    pos = 0
    for y in range(height):
        src_y = y * y_ratio
        y0 = int(src_y)
        y1 = min(y0 + 1, src_h - 1)
        fy = src_y - y0
        row0 = y0 * src_w * ch
        row1 = y1 * src_w * ch
        for off0, off1, fx in columns:
            w00 = (1 - fx) * (1 - fy)
            w01 = fx * (1 - fy)
            w10 = (1 - fx) * fy
            w11 = fx * fy
            for c in range(ch):
                value = (
                    src[row0 + off0 + c] * w00
                    + src[row0 + off1 + c] * w01
                    + src[row1 + off0 + c] * w10
                    + src[row1 + off1 + c] * w11
                )
                out[pos] = min(255, int(value + 0.5))
                pos += 1

    logger.debug(f"Resized {src_w}x{src_h} to {width}x{height} ({ch} channel(s))")
    return RasterBuffer(width, height, bytes(out), ch)


def fit_to_size(raster: RasterBuffer, width: int, height: int) -> RasterBuffer:
    """Center-crop to the target aspect ratio, then resize if still needed."""
    cropped = center_crop(raster, width, height)
    if cropped.size == (width, height):
        return cropped
    return resize_bilinear(cropped, width, height)
