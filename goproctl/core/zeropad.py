"""Fixed-width unsigned integer extraction from short-encoded fields.

The camera encodes most numeric fields in as few bytes as it needs. These
helpers zero-pad such a field to 16, 32 or 64 bits before reading it, so
every field decodes the same way regardless of its encoded width.
"""

from __future__ import annotations

from typing import Literal

from goproctl.core.errors import FieldWidthError

_BIT_SIZES = (16, 32, 64)


def _target_width(data: bytes, bit_size: int) -> int:
    if bit_size not in _BIT_SIZES:
        raise ValueError(f"bit_size must be one of {_BIT_SIZES}, got {bit_size}")
    width = bit_size // 8
    if len(data) > width:
        raise FieldWidthError(
            f"{len(data)}-byte field does not fit in {bit_size} bits: {data.hex()}"
        )
    return width


def pad_big_endian(data: bytes | bytearray | memoryview, bit_size: int = 64) -> bytes:
    """Left-pad ``data`` with zero bytes to ``bit_size`` bits."""
    raw = bytes(data)
    width = _target_width(raw, bit_size)
    return raw.rjust(width, b"\x00")


def pad_little_endian(data: bytes | bytearray | memoryview, bit_size: int = 64) -> bytes:
    """Right-pad ``data`` with zero bytes to ``bit_size`` bits."""
    raw = bytes(data)
    width = _target_width(raw, bit_size)
    return raw.ljust(width, b"\x00")


def to_uint(
    data: bytes | bytearray | memoryview,
    bit_size: int = 64,
    byteorder: Literal["big", "little"] = "big",
) -> int:
    """Read ``data`` as an unsigned integer of ``bit_size`` bits.

    Raises:
        FieldWidthError: ``data`` is wider than ``bit_size``.
        ValueError: ``bit_size`` or ``byteorder`` is not supported.
    """
    if byteorder == "big":
        padded = pad_big_endian(data, bit_size)
    elif byteorder == "little":
        padded = pad_little_endian(data, bit_size)
    else:
        raise ValueError(f"byteorder must be 'big' or 'little', got {byteorder!r}")
    return int.from_bytes(padded, byteorder, signed=False)
