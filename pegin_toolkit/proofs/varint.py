"""
Bitcoin-style variable length integers (CompactSize).

Layout:
    value < 0xfd         -> 1 byte
    value <= 0xffff      -> 0xfd + uint16 LE
    value <= 0xffffffff  -> 0xfe + uint32 LE
    otherwise            -> 0xff + uint64 LE
"""

from typing import Tuple

MAX_VARINT = (1 << 64) - 1
# Largest integer a double represents exactly (2^53 - 1)
MAX_SAFE_INTEGER = (1 << 53) - 1


class VarintRangeError(ValueError):
    """Value can't be represented as (or narrowed from) a varint."""


def sanitize_varint_value(value: int) -> int:
    """
    Narrow an arbitrary-precision integer to one that consumers reading
    numbers as doubles can hold exactly.

    Raises:
        VarintRangeError: If the value is negative or above 2^53 - 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise VarintRangeError(f"Varint value must be an integer, got {value!r}")
    if value < 0:
        raise VarintRangeError("Negative value is not a valid varint")
    if value > MAX_SAFE_INTEGER:
        raise VarintRangeError("Too large to represent exactly")
    return value


def get_varint_size(value: int) -> int:
    """Number of bytes ``value`` takes once encoded (1, 3, 5 or 9)."""
    if value < 0:
        raise VarintRangeError("Negative numbers are not supported")
    if value > MAX_VARINT:
        raise VarintRangeError("Too large for a Bitcoin-style varint")

    if value < 0xFD:
        return 1
    if value <= 0xFFFF:
        return 3
    if value <= 0xFFFFFFFF:
        return 5
    return 9


_PREFIXES = {3: 0xFD, 5: 0xFE, 9: 0xFF}


def encode_varint(value: int) -> bytes:
    """Encode an unsigned integer below 2^64 as a CompactSize."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise VarintRangeError(f"Varint value must be an integer, got {value!r}")

    size = get_varint_size(value)
    if size == 1:
        return bytes([value])
    return bytes([_PREFIXES[size]]) + value.to_bytes(size - 1, "little")


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Read a CompactSize starting at ``offset``.

    Returns:
        Tuple of (value, offset just past the varint)

    Raises:
        VarintRangeError: If the buffer ends before the varint does
    """
    if offset >= len(data):
        raise VarintRangeError("Buffer too small for varint")

    prefix = data[offset]
    if prefix < 0xFD:
        return prefix, offset + 1

    width = {0xFD: 2, 0xFE: 4, 0xFF: 8}[prefix]
    end = offset + 1 + width
    if end > len(data):
        raise VarintRangeError("Buffer too small for varint")
    return int.from_bytes(data[offset + 1 : end], "little"), end
