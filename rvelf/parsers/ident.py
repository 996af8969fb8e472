"""
Identification Parser
======================

Decodes and validates the 16-byte ``e_ident`` prefix.  The block is read
field by field; its four load-bearing facts (magic, class, encoding,
version) are checked in that order before anything else in the file is
touched, since every later field depends on them.
"""

from __future__ import annotations

import logging
from typing import Iterable

from rvelf.core.errors import (
    InvalidMagicError,
    ParseStage,
    TruncatedInputError,
    UnsupportedClassError,
    UnsupportedEncodingError,
    UnsupportedVersionError,
)
from rvelf.core.models import DataEncoding, ElfClass, ElfVersion, Identification
from rvelf.parsers.constants import (
    EI_ABIVERSION,
    EI_CLASS,
    EI_DATA,
    EI_OSABI,
    EI_PAD,
    EI_VERSION,
    ELF_MAGIC,
    IDENT_SIZE,
)

logger = logging.getLogger("rvelf.parsers")

_STAGE = ParseStage.IDENTIFICATION


def parse_identification(
    data: bytes,
    *,
    accepted_encodings: Iterable[DataEncoding] = (DataEncoding.LSB,),
) -> Identification:
    """Decode the identification block at the start of *data*.

    Args:
        data: Complete file contents.
        accepted_encodings: Data encodings the caller is prepared to
            handle.  Defaults to little-endian only.

    Returns:
        The validated :class:`Identification`.

    Raises:
        TruncatedInputError: Fewer than 16 bytes are available.
        InvalidMagicError: The first four bytes are not ``\\x7fELF``.
        UnsupportedClassError: The class is not ``ELFCLASS64``.
        UnsupportedEncodingError: The encoding is unknown or not accepted.
        UnsupportedVersionError: The version is not ``EV_CURRENT``.
    """
    if len(data) < IDENT_SIZE:
        raise TruncatedInputError(
            f"need {IDENT_SIZE} identification bytes, got {len(data)}",
            stage=_STAGE,
        )
    ident = bytes(data[:IDENT_SIZE])

    magic = ident[:EI_CLASS]
    if magic != ELF_MAGIC:
        raise InvalidMagicError(
            f"bad magic {magic.hex(' ')}, expected {ELF_MAGIC.hex(' ')}",
            stage=_STAGE,
        )

    raw_class = ident[EI_CLASS]
    if raw_class != ElfClass.ELF64:
        raise UnsupportedClassError(
            f"class {raw_class} is not ELFCLASS64", stage=_STAGE
        )

    raw_data = ident[EI_DATA]
    accepted = {DataEncoding(e) for e in accepted_encodings}
    if raw_data not in accepted:
        raise UnsupportedEncodingError(
            f"data encoding {raw_data} not in "
            f"{sorted(e.name for e in accepted)}",
            stage=_STAGE,
        )

    raw_version = ident[EI_VERSION]
    if raw_version != ElfVersion.CURRENT:
        raise UnsupportedVersionError(
            f"identification version {raw_version} is not EV_CURRENT",
            stage=_STAGE,
        )

    result = Identification(
        magic=magic,
        elf_class=ElfClass(raw_class),
        encoding=DataEncoding(raw_data),
        version=ElfVersion(raw_version),
        os_abi=ident[EI_OSABI],
        abi_version=ident[EI_ABIVERSION],
        padding=ident[EI_PAD:],
    )
    logger.debug(
        "identification: class=%s encoding=%s osabi=%d",
        result.elf_class.name, result.encoding.name, result.os_abi,
    )
    return result
