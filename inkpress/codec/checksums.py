"""CRC32 and Adler32 checksums used by the PNG encoder."""

# Largest block that can be summed before the Adler32 accumulators overflow 32 bits
_ADLER_MOD = 65521
_ADLER_NMAX = 5552


def _build_crc_table() -> tuple[int, ...]:
    """Build the reflected CRC32 lookup table for polynomial 0xEDB88320."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = 0xEDB88320 ^ (c >> 1) if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _build_crc_table()


def crc32(data: bytes, crc: int = 0) -> int:
    """Compute the CRC32 checksum of data.

    Args:
        data: Bytes to checksum
        crc: Running CRC of preceding data, for incremental use

    Returns:
        Unsigned 32-bit CRC
    """
    table = CRC_TABLE
    c = crc ^ 0xFFFFFFFF
    for byte in data:
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


def adler32(data: bytes, value: int = 1) -> int:
    """Compute the Adler32 checksum of data.

    Args:
        data: Bytes to checksum
        value: Running checksum of preceding data, for incremental use

    Returns:
        Unsigned 32-bit Adler32 value
    """
    a = value & 0xFFFF
    b = (value >> 16) & 0xFFFF
    view = memoryview(data)
    for start in range(0, len(view), _ADLER_NMAX):
        for byte in view[start : start + _ADLER_NMAX]:
            a += byte
            b += a
        a %= _ADLER_MOD
        b %= _ADLER_MOD
    return (b << 16) | a
