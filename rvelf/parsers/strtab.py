"""
String Table Resolver
======================

Copies every ``SHT_STRTAB`` section out of the file, checks that it is
framed by NUL bytes, tags the section-name table, and resolves name
offsets to text.
"""

from __future__ import annotations

import logging
from typing import Sequence

from rvelf.core.errors import (
    InvalidTextError,
    MalformedStringTableError,
    ParseStage,
    TruncatedInputError,
)
from rvelf.core.models import SectionHeader, StringTable, StringTableKind
from rvelf.parsers.codec import slice_checked
from rvelf.parsers.constants import SHT_STRTAB

logger = logging.getLogger("rvelf.parsers")

_STAGE = ParseStage.STRING_TABLES


def parse_string_tables(
    data: bytes,
    sections: Sequence[SectionHeader],
    shstrndx: int,
) -> list[StringTable]:
    """Copy out and validate every string table section.

    Args:
        data: Complete file contents.
        sections: Decoded section headers, in table order.
        shstrndx: ``e_shstrndx`` from the file header.

    Returns:
        String tables in section order; the one at section index
        *shstrndx* is tagged :attr:`StringTableKind.SECTION_NAMES`.

    Raises:
        TruncatedInputError: A table extends past the buffer.
        MalformedStringTableError: A table is empty or not NUL-framed.
    """
    tables: list[StringTable] = []
    for idx, sh in enumerate(sections):
        if sh.section_type != SHT_STRTAB:
            continue

        raw = slice_checked(
            data, sh.offset, sh.size,
            stage=_STAGE, index=idx, what="string table",
        )
        if not raw or raw[0] != 0 or raw[-1] != 0:
            raise MalformedStringTableError(
                "string table must begin and end with a NUL byte",
                stage=_STAGE,
                index=idx,
            )

        kind = (
            StringTableKind.SECTION_NAMES if idx == shstrndx
            else StringTableKind.ORDINARY
        )
        tables.append(
            StringTable(
                section_index=idx,
                offset=sh.offset,
                size=sh.size,
                data=bytes(raw),
                kind=kind,
            )
        )
        logger.debug("strtab in section %d: %d bytes (%s)", idx, sh.size, kind.value)
    return tables


def resolve_name(table: StringTable, offset: int) -> str:
    """Return the UTF-8 text from *offset* up to the next NUL.

    The end of the buffer terminates the string if no NUL follows.

    Raises:
        TruncatedInputError: *offset* lies outside the table.
        InvalidTextError: The bytes are not valid UTF-8.
    """
    if offset < 0 or offset >= len(table.data):
        raise TruncatedInputError(
            f"name offset {offset:#x} outside string table of "
            f"{len(table.data):#x} bytes",
            stage=_STAGE,
            index=table.section_index,
        )
    end = table.data.find(b"\x00", offset)
    if end == -1:
        end = len(table.data)
    try:
        return table.data[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidTextError(
            f"name at offset {offset:#x} is not valid UTF-8",
            stage=_STAGE,
            index=table.section_index,
        ) from exc


def resolve_section_names(
    sections: Sequence[SectionHeader],
    table: StringTable,
) -> list[str]:
    """Resolve the name of every section header against *table*."""
    return [resolve_name(table, sh.name) for sh in sections]


def find_section_name_table(tables: Sequence[StringTable]) -> int | None:
    """Position of the section-name table within *tables*, if any."""
    for pos, table in enumerate(tables):
        if table.kind is StringTableKind.SECTION_NAMES:
            return pos
    return None
