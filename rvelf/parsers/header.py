"""
File Header Parser
===================

Decodes the 48 bytes of ``Elf64_Ehdr`` that follow the identification
block, using the byte order the identification established.
"""

from __future__ import annotations

import logging
from typing import Iterable

from rvelf.core.errors import (
    ParseStage,
    TruncatedInputError,
    UnrecognizedFileTypeError,
)
from rvelf.core.models import FileHeader, FileType, Identification
from rvelf.parsers.codec import decode_address, decode_uint
from rvelf.parsers.constants import EHDR_SIZE

logger = logging.getLogger("rvelf.parsers")

_STAGE = ParseStage.FILE_HEADER

# (field, start, width) for every integer field after e_ident
_EHDR_LAYOUT: tuple[tuple[str, int, int], ...] = (
    ("machine", 18, 2),
    ("version", 20, 4),
    ("ph_offset", 32, 8),
    ("sh_offset", 40, 8),
    ("flags", 48, 4),
    ("header_size", 52, 2),
    ("ph_entry_size", 54, 2),
    ("ph_count", 56, 2),
    ("sh_entry_size", 58, 2),
    ("sh_count", 60, 2),
    ("shstrndx", 62, 2),
)


def parse_file_header(
    data: bytes,
    ident: Identification,
    *,
    accepted_types: Iterable[FileType] = (FileType.EXEC,),
) -> FileHeader:
    """Decode the file header of *data*.

    Args:
        data: Complete file contents.
        ident: The already-validated identification block.
        accepted_types: File types the caller accepts.

    Raises:
        TruncatedInputError: The buffer is shorter than 64 bytes.
        UnrecognizedFileTypeError: ``e_type`` is unknown or not accepted.
    """
    if len(data) < EHDR_SIZE:
        raise TruncatedInputError(
            f"need {EHDR_SIZE} header bytes, got {len(data)}", stage=_STAGE
        )
    enc = ident.encoding

    raw_type = decode_uint(data[16:18], enc)
    try:
        file_type = FileType(raw_type)
    except ValueError:
        raise UnrecognizedFileTypeError(
            f"unknown file type {raw_type:#x}", stage=_STAGE
        ) from None
    accepted = {FileType(t) for t in accepted_types}
    if file_type not in accepted:
        raise UnrecognizedFileTypeError(
            f"file type {file_type.name} not in "
            f"{sorted(t.name for t in accepted)}",
            stage=_STAGE,
        )

    fields = {
        name: decode_uint(data[start:start + width], enc)
        for name, start, width in _EHDR_LAYOUT
    }
    header = FileHeader(
        ident=ident,
        file_type=file_type,
        entry=decode_address(data[24:32], enc),
        **fields,
    )
    logger.debug(
        "file header: type=%s machine=%s entry=%s phnum=%d shnum=%d",
        header.file_type.name, header.machine_name, header.entry,
        header.ph_count, header.sh_count,
    )
    return header
