"""
Program Header / Segment Parser
================================

Walks the program header table described by the file header and, for
each entry, materialises the payload the segment type calls for:

    - ``PT_LOAD``: the segment's process memory image, ``p_memsz`` bytes,
      with the ``p_filesz`` bytes from the file followed by zero fill.
    - ``PT_DYNAMIC``: the ``Elf64_Dyn`` tag/value array, values classified
      as addresses or scalars by tag parity.
    - anything else: no payload.

References:
    - System V ABI, chapter 5 "Program Loading and Dynamic Linking".
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from rvelf.core.errors import (
    MalformedSegmentError,
    ParseStage,
    TruncatedInputError,
    UnrecognizedTypeError,
)
from rvelf.core.models import (
    Address,
    DataEncoding,
    DynamicEntry,
    DynamicTable,
    FileHeader,
    LoadableImage,
    NoPayload,
    ProgramHeader,
    SegmentType,
)
from rvelf.parsers.codec import (
    decode_address,
    decode_int,
    decode_uint,
    slice_checked,
)
from rvelf.parsers.constants import (
    DYN_ENTRY_SIZE,
    PHDR_SIZE,
    PT_HIOS,
    PT_HIPROC,
    PT_LOOS,
    PT_LOPROC,
)

logger = logging.getLogger("rvelf.parsers")

_STAGE = ParseStage.PROGRAM_HEADERS

# Largest memory image materialised for one PT_LOAD segment unless the
# caller chooses otherwise (``loader.max_segment_size``).
DEFAULT_MAX_SEGMENT_SIZE: int = 1 << 30


# ---------------------------------------------------------------------------
# Type and value interpretation
# ---------------------------------------------------------------------------

def segment_type_from_raw(raw: int, *, index: Optional[int] = None) -> SegmentType:
    """Map a raw ``p_type`` to a :class:`SegmentType`.

    Values 0-7 map to their named type.  Reserved ranges fold into four
    buckets::

        [PT_LOOS, PT_HIOS)       -> LOOS
        PT_HIOS                  -> HIOS
        [PT_LOPROC, PT_HIPROC)   -> LOPROC
        >= PT_HIPROC             -> HIPROC

    Raises:
        UnrecognizedTypeError: For values between 8 and ``PT_LOOS``.
    """
    if 0 <= raw <= SegmentType.TLS:
        return SegmentType(raw)
    if PT_LOOS <= raw < PT_HIOS:
        return SegmentType.LOOS
    if raw == PT_HIOS:
        return SegmentType.HIOS
    if PT_LOPROC <= raw < PT_HIPROC:
        return SegmentType.LOPROC
    if raw >= PT_HIPROC:
        return SegmentType.HIPROC
    raise UnrecognizedTypeError(
        f"segment type {raw:#x} is neither defined nor reserved",
        stage=_STAGE,
        index=index,
    )


def interpret_dynamic_value(tag: int, raw: int) -> Union[Address, int]:
    """Classify a dynamic entry's ``d_un`` by its tag's parity.

    Even tags carry ``d_ptr`` (returned as an :class:`Address`), odd tags
    carry ``d_val`` (returned unchanged).  Tags that the gABI exempts from
    this rule are not special-cased.
    """
    if tag % 2 == 0:
        return Address(value=raw)
    return raw


# ---------------------------------------------------------------------------
# Payload materialisation
# ---------------------------------------------------------------------------

def build_load_image(
    data: bytes,
    *,
    offset: int,
    file_size: int,
    mem_size: int,
    index: Optional[int] = None,
    max_mem_size: int = DEFAULT_MAX_SEGMENT_SIZE,
) -> LoadableImage:
    """Reconstruct the memory image of a loadable segment.

    Raises:
        MalformedSegmentError: ``file_size`` exceeds ``mem_size``, or
            ``mem_size`` exceeds *max_mem_size*.
        TruncatedInputError: The file image extends past the buffer.
    """
    if file_size > mem_size:
        raise MalformedSegmentError(
            f"p_filesz {file_size:#x} exceeds p_memsz {mem_size:#x}",
            stage=_STAGE,
            index=index,
        )
    if mem_size > max_mem_size:
        raise MalformedSegmentError(
            f"p_memsz {mem_size:#x} exceeds the {max_mem_size:#x}-byte "
            f"segment size limit",
            stage=_STAGE,
            index=index,
        )
    file_image = slice_checked(
        data, offset, file_size,
        stage=_STAGE, index=index, what="segment file image",
    )
    return LoadableImage(data=bytes(file_image) + bytes(mem_size - file_size))


def decode_dynamic_entries(
    data: bytes,
    encoding: DataEncoding,
    *,
    offset: int,
    file_size: int,
    index: Optional[int] = None,
) -> DynamicTable:
    """Decode every 16-byte ``Elf64_Dyn`` record in the segment's file extent.

    All records are returned, including any following ``DT_NULL``.

    Raises:
        MalformedSegmentError: The extent ends with a partial record.
        TruncatedInputError: The extent runs past the buffer.
    """
    extent = slice_checked(
        data, offset, file_size,
        stage=_STAGE, index=index, what="dynamic segment",
    )
    if len(extent) % DYN_ENTRY_SIZE:
        raise MalformedSegmentError(
            f"dynamic segment size {file_size:#x} is not a multiple of "
            f"{DYN_ENTRY_SIZE}",
            stage=_STAGE,
            index=index,
        )

    entries: list[DynamicEntry] = []
    for pos in range(0, len(extent), DYN_ENTRY_SIZE):
        tag = decode_int(extent[pos:pos + 8], encoding)
        raw = decode_uint(extent[pos + 8:pos + 16], encoding)
        entries.append(
            DynamicEntry(tag=tag, value=interpret_dynamic_value(tag, raw))
        )
    return DynamicTable(entries=entries)


# ---------------------------------------------------------------------------
# Table walk
# ---------------------------------------------------------------------------

def parse_program_headers(
    data: bytes,
    header: FileHeader,
    *,
    max_segment_size: int = DEFAULT_MAX_SEGMENT_SIZE,
) -> list[ProgramHeader]:
    """Decode every program header described by *header*.

    Args:
        data: Complete file contents.
        header: Validated file header supplying ``e_phoff``,
            ``e_phentsize`` and ``e_phnum``.
        max_segment_size: Largest ``p_memsz`` materialised for a
            ``PT_LOAD`` segment.

    Returns:
        Program headers in table order, each owning its payload.
    """
    count = header.ph_count
    if count == 0:
        return []

    entry_size = header.ph_entry_size
    if entry_size < PHDR_SIZE:
        raise TruncatedInputError(
            f"e_phentsize {entry_size} is smaller than the "
            f"{PHDR_SIZE}-byte Elf64_Phdr",
            stage=_STAGE,
        )

    enc = header.ident.encoding
    result: list[ProgramHeader] = []

    for i in range(count):
        start = header.ph_offset + i * entry_size
        rec = slice_checked(
            data, start, PHDR_SIZE,
            stage=_STAGE, index=i, what="program header",
        )

        raw_type = decode_uint(rec[0:4], enc)
        segment_type = segment_type_from_raw(raw_type, index=i)
        offset = decode_uint(rec[8:16], enc)
        file_size = decode_uint(rec[32:40], enc)
        mem_size = decode_uint(rec[40:48], enc)

        payload: Union[LoadableImage, DynamicTable, NoPayload]
        if segment_type is SegmentType.LOAD:
            payload = build_load_image(
                data, offset=offset, file_size=file_size,
                mem_size=mem_size, index=i,
                max_mem_size=max_segment_size,
            )
        elif segment_type is SegmentType.DYNAMIC:
            payload = decode_dynamic_entries(
                data, enc, offset=offset, file_size=file_size, index=i,
            )
        else:
            payload = NoPayload()

        ph = ProgramHeader(
            segment_type=segment_type,
            raw_type=raw_type,
            flags=decode_uint(rec[4:8], enc),
            offset=offset,
            vaddr=decode_address(rec[16:24], enc),
            paddr=decode_address(rec[24:32], enc),
            file_size=file_size,
            mem_size=mem_size,
            align=decode_uint(rec[48:56], enc),
            payload=payload,
        )
        logger.debug(
            "phdr %d: %s vaddr=%s filesz=%#x memsz=%#x",
            i, ph.type_name, ph.vaddr, file_size, mem_size,
        )
        result.append(ph)

    return result
