"""
Endian Codec
=============

Fixed-width integer and address decoding for ELF64 fields.  Every other
decoder delegates here; the byte order is chosen solely by the
:class:`~rvelf.core.models.DataEncoding` found in the identification block.

The pure decoders expect exactly 2, 4 or 8 bytes.  :func:`read_field` is
the bounds-checked entry point used by the table parsers.
"""

from __future__ import annotations

import struct
from typing import Optional

from rvelf.core.errors import ParseStage, TruncatedInputError
from rvelf.core.models import Address, DataEncoding

_UNSIGNED_FORMATS: dict[int, str] = {2: "H", 4: "I", 8: "Q"}
_SIGNED_FORMATS: dict[int, str] = {2: "h", 4: "i", 8: "q"}


def decode_uint(raw: bytes, encoding: DataEncoding) -> int:
    """Decode *raw* (2, 4 or 8 bytes) as an unsigned integer."""
    (value,) = struct.unpack(
        encoding.struct_prefix + _UNSIGNED_FORMATS[len(raw)], raw
    )
    return value


def decode_int(raw: bytes, encoding: DataEncoding) -> int:
    """Decode *raw* (2, 4 or 8 bytes) as a two's-complement signed integer."""
    (value,) = struct.unpack(
        encoding.struct_prefix + _SIGNED_FORMATS[len(raw)], raw
    )
    return value


def decode_address(raw: bytes, encoding: DataEncoding) -> Address:
    """Decode an 8-byte field as an :class:`Address`."""
    return Address(value=decode_uint(raw, encoding))


def slice_checked(
    data: bytes,
    start: int,
    length: int,
    *,
    stage: ParseStage,
    index: Optional[int] = None,
    what: str = "field",
) -> bytes:
    """Return ``data[start:start + length]`` or fail if it would overrun.

    Raises:
        TruncatedInputError: If the requested extent ends past the buffer.
    """
    end = start + length
    if start < 0 or length < 0 or end > len(data):
        raise TruncatedInputError(
            f"{what} at [{start:#x}, {end:#x}) exceeds buffer of "
            f"{len(data):#x} bytes",
            stage=stage,
            index=index,
        )
    return data[start:end]


def read_field(
    data: bytes,
    start: int,
    width: int,
    encoding: DataEncoding,
    *,
    stage: ParseStage,
    index: Optional[int] = None,
) -> int:
    """Bounds-checked unsigned read of a *width*-byte field at *start*."""
    raw = slice_checked(data, start, width, stage=stage, index=index)
    return decode_uint(raw, encoding)
