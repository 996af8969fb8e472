"""
Section Header Parser
======================

Walks the section header table described by the file header and decodes
each ``Elf64_Shdr`` record.  Names stay as offsets here; resolving them is
the string table resolver's job.

The extended-count convention (``e_shnum >= SHN_LORESERVE`` with the real
count stored in section 0) is not supported and fails explicitly.
"""

from __future__ import annotations

import logging

from rvelf.core.errors import (
    ParseStage,
    TruncatedInputError,
    UnsupportedSectionTableOverflowError,
)
from rvelf.core.models import FileHeader, SectionHeader
from rvelf.parsers.codec import decode_address, decode_uint, slice_checked
from rvelf.parsers.constants import SHDR_SIZE, SHN_LORESERVE

logger = logging.getLogger("rvelf.parsers")

_STAGE = ParseStage.SECTION_HEADERS

# (field, start, width) inside one Elf64_Shdr; addr is decoded separately
_SHDR_LAYOUT: tuple[tuple[str, int, int], ...] = (
    ("name", 0, 4),
    ("section_type", 4, 4),
    ("flags", 8, 8),
    ("offset", 24, 8),
    ("size", 32, 8),
    ("link", 40, 4),
    ("info", 44, 4),
    ("addr_align", 48, 8),
    ("entry_size", 56, 8),
)


def parse_section_headers(data: bytes, header: FileHeader) -> list[SectionHeader]:
    """Decode every section header described by *header*.

    Raises:
        UnsupportedSectionTableOverflowError: ``e_shnum >= SHN_LORESERVE``.
        TruncatedInputError: ``e_shentsize`` is below 64 bytes or a record
            runs past the buffer.
    """
    count = header.sh_count
    if count >= SHN_LORESERVE:
        raise UnsupportedSectionTableOverflowError(
            f"e_shnum {count:#x} >= SHN_LORESERVE; extended section "
            f"numbering is not implemented",
            stage=_STAGE,
        )
    if count == 0:
        return []

    entry_size = header.sh_entry_size
    if entry_size < SHDR_SIZE:
        raise TruncatedInputError(
            f"e_shentsize {entry_size} is smaller than the "
            f"{SHDR_SIZE}-byte Elf64_Shdr",
            stage=_STAGE,
        )

    enc = header.ident.encoding
    result: list[SectionHeader] = []

    for i in range(count):
        start = header.sh_offset + i * entry_size
        rec = slice_checked(
            data, start, SHDR_SIZE,
            stage=_STAGE, index=i, what="section header",
        )
        fields = {
            name: decode_uint(rec[off:off + width], enc)
            for name, off, width in _SHDR_LAYOUT
        }
        sh = SectionHeader(addr=decode_address(rec[16:24], enc), **fields)
        logger.debug(
            "shdr %d: %s offset=%#x size=%#x",
            i, sh.type_name, sh.offset, sh.size,
        )
        result.append(sh)

    return result
