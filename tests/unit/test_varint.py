"""
Unit tests for the CompactSize varint codec.
"""

import pytest

from pegin_toolkit.proofs.varint import (
    MAX_SAFE_INTEGER,
    VarintRangeError,
    decode_varint,
    encode_varint,
    get_varint_size,
    sanitize_varint_value,
)


class TestEncodeVarint:
    """Size class boundaries."""

    def test_zero_is_single_byte(self):
        assert encode_varint(0) == b"\x00"

    def test_0xfc_is_single_byte(self):
        assert encode_varint(0xFC) == b"\xfc"

    def test_0xfd_uses_uint16_prefix(self):
        encoded = encode_varint(0xFD)
        assert encoded == b"\xfd\xfd\x00"

    def test_0xffff_is_three_bytes(self):
        assert encode_varint(0xFFFF) == b"\xfd\xff\xff"

    def test_0x10000_uses_uint32_prefix(self):
        encoded = encode_varint(0x10000)
        assert len(encoded) == 5
        assert encoded == b"\xfe\x00\x00\x01\x00"

    def test_0xffffffff_is_five_bytes(self):
        assert encode_varint(0xFFFFFFFF) == b"\xfe\xff\xff\xff\xff"

    def test_0x100000000_uses_uint64_prefix(self):
        encoded = encode_varint(0x100000000)
        assert len(encoded) == 9
        assert encoded[0] == 0xFF
        assert encoded[1:] == (0x100000000).to_bytes(8, "little")

    def test_max_uint64(self):
        assert encode_varint(2**64 - 1) == b"\xff" + b"\xff" * 8

    def test_negative_fails(self):
        with pytest.raises(VarintRangeError):
            encode_varint(-1)

    def test_two_to_the_64_fails(self):
        with pytest.raises(VarintRangeError):
            encode_varint(2**64)

    def test_non_integer_fails(self):
        with pytest.raises(VarintRangeError):
            encode_varint(1.5)

    def test_range_error_is_value_error(self):
        with pytest.raises(ValueError):
            encode_varint(-5)


class TestVarintSize:
    @pytest.mark.parametrize(
        "value,size",
        [(0, 1), (0xFC, 1), (0xFD, 3), (0xFFFF, 3), (0x10000, 5), (0x100000000, 9)],
    )
    def test_sizes(self, value, size):
        assert get_varint_size(value) == size
        assert len(encode_varint(value)) == size


class TestSanitize:
    """Narrowing conversion from arbitrary precision integers."""

    def test_accepts_max_safe_integer(self):
        assert sanitize_varint_value(MAX_SAFE_INTEGER) == MAX_SAFE_INTEGER

    def test_rejects_above_max_safe_integer(self):
        with pytest.raises(VarintRangeError, match="Too large"):
            sanitize_varint_value(MAX_SAFE_INTEGER + 1)

    def test_rejects_negative(self):
        with pytest.raises(VarintRangeError, match="Negative"):
            sanitize_varint_value(-1)

    def test_rejects_bool(self):
        with pytest.raises(VarintRangeError):
            sanitize_varint_value(True)


class TestDecodeVarint:
    def test_decodes_each_size_class(self):
        for value in (0, 0xFC, 0xFD, 0xFFFF, 0x10000, 0x100000000):
            assert decode_varint(encode_varint(value)) == (
                value,
                get_varint_size(value),
            )

    def test_decodes_at_offset(self):
        data = b"\xaa\xbb" + encode_varint(0x1234) + b"\xcc"
        assert decode_varint(data, 2) == (0x1234, 5)

    def test_truncated_fails(self):
        with pytest.raises(VarintRangeError, match="too small"):
            decode_varint(b"\xfe\x01\x02")

    def test_empty_fails(self):
        with pytest.raises(VarintRangeError):
            decode_varint(b"")
