"""
rvelf Data Models
==================

Pydantic-based, immutable models for every structure the ELF64 decoding
pipeline produces: the identification block, the file header, program
headers with their segment payloads, section headers, string tables, and
the aggregate :class:`ParseResult` handed back to callers.

Enumerations are keyed by the numeric value stored on disk so that a
decoded field and its enum member compare equal.

References:
    - System V Application Binary Interface, Edition 4.1 (gABI).
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rvelf.parsers.constants import (
    DT_ENCODING,
    DT_HIOS,
    DT_LOPROC,
    DT_NAMES,
    EM_NAMES,
    PT_NAMES,
    SHF_ALLOC,
    SHF_EXECINSTR,
    SHF_WRITE,
    SHT_NAMES,
)

_U64_MAX: int = (1 << 64) - 1


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ElfClass(enum.IntEnum):
    """``EI_CLASS``: width of the file's data structures."""
    NONE = 0
    ELF32 = 1
    ELF64 = 2


class DataEncoding(enum.IntEnum):
    """``EI_DATA``: byte order of every multi-byte field after ``e_ident``."""
    LSB = 1
    MSB = 2

    @property
    def struct_prefix(self) -> str:
        """:mod:`struct` byte-order prefix for this encoding."""
        return "<" if self is DataEncoding.LSB else ">"

    @property
    def byteorder(self) -> str:
        return "little" if self is DataEncoding.LSB else "big"


class ElfVersion(enum.IntEnum):
    """``EI_VERSION``."""
    NONE = 0
    CURRENT = 1


class FileType(enum.IntEnum):
    """``e_type``: object file type."""
    NONE = 0
    REL = 1
    EXEC = 2
    DYN = 3
    CORE = 4


class SegmentType(enum.IntEnum):
    """``p_type``.

    The first eight members map one-to-one to their numeric value.  The
    last four are buckets: every raw type inside an OS- or
    processor-reserved range decodes to the member named after the range's
    boundary (see :func:`rvelf.parsers.segments.segment_type_from_raw`).
    """
    NULL = 0
    LOAD = 1
    DYNAMIC = 2
    INTERP = 3
    NOTE = 4
    SHLIB = 5
    PHDR = 6
    TLS = 7
    LOOS = 0x60000000
    HIOS = 0x6FFFFFFF
    LOPROC = 0x70000000
    HIPROC = 0x7FFFFFFF


class SegmentFlags(enum.IntFlag):
    """``p_flags`` permission bits."""
    EXEC = 0x1
    WRITE = 0x2
    READ = 0x4


class StringTableKind(str, enum.Enum):
    """Role of a decoded string table."""
    SECTION_NAMES = "section_names"
    ORDINARY = "ordinary"
    # Recognised for dynamic-symbol string tables; the resolver does not
    # produce it yet.
    DYNAMIC_SYMBOLS = "dynamic_symbols"


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

class Address(BaseModel):
    """A 64-bit virtual or file address.

    Addresses are opaque: they print in hexadecimal and only give their
    integer back through an explicit ``int(address)``.
    """
    model_config = ConfigDict(frozen=True)

    value: int = Field(ge=0, le=_U64_MAX)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"0x{self.value:08x}"

    def __repr__(self) -> str:
        return f"Address({self})"


# ---------------------------------------------------------------------------
# Identification and file header
# ---------------------------------------------------------------------------

class Identification(BaseModel):
    """The 16-byte ``e_ident`` block.

    Attributes:
        magic: Always ``b"\\x7fELF"`` once validated.
        elf_class: File class; only ``ELF64`` survives validation.
        encoding: Byte order driving every later decode.
        version: Identification version; only ``CURRENT`` is valid.
        os_abi: ``EI_OSABI`` byte.
        abi_version: ``EI_ABIVERSION`` byte.
        padding: The seven reserved trailing bytes.
    """
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    magic: bytes
    elf_class: ElfClass
    encoding: DataEncoding
    version: ElfVersion
    os_abi: int = 0
    abi_version: int = 0
    padding: bytes = b"\x00" * 7


class FileHeader(BaseModel):
    """The ELF64 file header (``Elf64_Ehdr``).

    The ``ph_*`` and ``sh_*`` fields are the table geometry consumed by the
    program- and section-header parsers.
    """
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    ident: Identification
    file_type: FileType
    machine: int
    version: int
    entry: Address
    ph_offset: int
    sh_offset: int
    flags: int
    header_size: int
    ph_entry_size: int
    ph_count: int
    sh_entry_size: int
    sh_count: int
    shstrndx: int

    @property
    def machine_name(self) -> str:
        return EM_NAMES.get(self.machine, f"unknown({self.machine})")


# ---------------------------------------------------------------------------
# Segment payloads
# ---------------------------------------------------------------------------

class DynamicEntry(BaseModel):
    """One ``Elf64_Dyn`` record.

    ``value`` is an :class:`Address` for even tags and a plain integer for
    odd tags.
    """
    model_config = ConfigDict(frozen=True)

    tag: int
    value: Union[Address, int]

    @property
    def is_pointer(self) -> bool:
        return isinstance(self.value, Address)

    @property
    def tag_name(self) -> str:
        return DT_NAMES.get(self.tag, f"0x{self.tag:x}")

    @property
    def follows_encoding_rule(self) -> bool:
        """Whether the gABI even/odd encoding rule formally covers this tag.

        Tags below ``DT_ENCODING`` and tags between ``DT_HIOS`` and
        ``DT_LOPROC`` are outside the rule.  Their values are still
        classified by parity; this property only reports the fact.
        """
        return not (
            self.tag < DT_ENCODING or DT_HIOS < self.tag < DT_LOPROC
        )


class LoadableImage(BaseModel):
    """Memory image of a ``PT_LOAD`` segment, ``mem_size`` bytes long."""
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    kind: Literal["load"] = "load"
    data: bytes = b""


class DynamicTable(BaseModel):
    """Decoded ``PT_DYNAMIC`` segment, in file order."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["dynamic"] = "dynamic"
    entries: list[DynamicEntry] = Field(default_factory=list)


class NoPayload(BaseModel):
    """Marker payload for every other segment type."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


SegmentPayload = Annotated[
    Union[LoadableImage, DynamicTable, NoPayload],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Program and section headers
# ---------------------------------------------------------------------------

class ProgramHeader(BaseModel):
    """One program header table entry (``Elf64_Phdr``) and its payload.

    Attributes:
        segment_type: Decoded type (or reserved-range bucket).
        raw_type: The undecoded ``p_type`` value.
        flags: ``p_flags`` bitmask (see :class:`SegmentFlags`).
        offset: File offset of the segment's first byte.
        vaddr: Virtual address of the segment's first byte.
        paddr: Physical address (unspecified for System V executables).
        file_size: Bytes of the segment present in the file.
        mem_size: Bytes of the segment in the process image.
        align: Alignment; 0 and 1 mean none.
        payload: Materialised segment contents.
    """
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    segment_type: SegmentType
    raw_type: int
    flags: int
    offset: int
    vaddr: Address
    paddr: Address
    file_size: int
    mem_size: int
    align: int
    payload: SegmentPayload = Field(default_factory=NoPayload)

    @property
    def permissions(self) -> SegmentFlags:
        return SegmentFlags(self.flags & 0x7)

    @property
    def type_name(self) -> str:
        return PT_NAMES.get(self.raw_type, self.segment_type.name)

    @property
    def flags_str(self) -> str:
        """Permissions as ``"RWX"`` with ``-`` for cleared bits."""
        perms = self.permissions
        return "".join(
            letter if flag in perms else "-"
            for letter, flag in (
                ("R", SegmentFlags.READ),
                ("W", SegmentFlags.WRITE),
                ("X", SegmentFlags.EXEC),
            )
        )


class SectionHeader(BaseModel):
    """One section header table entry (``Elf64_Shdr``).

    ``name`` is still an offset into the section-name string table.
    """
    model_config = ConfigDict(frozen=True)

    name: int
    section_type: int
    flags: int
    addr: Address
    offset: int
    size: int
    link: int
    info: int
    addr_align: int
    entry_size: int

    @property
    def has_subtable(self) -> bool:
        return self.entry_size != 0

    @property
    def has_alignment_constraint(self) -> bool:
        return self.addr_align not in (0, 1)

    @property
    def type_name(self) -> str:
        return SHT_NAMES.get(self.section_type, f"0x{self.section_type:x}")

    @property
    def flags_str(self) -> str:
        parts: list[str] = []
        if self.flags & SHF_WRITE:
            parts.append("W")
        if self.flags & SHF_ALLOC:
            parts.append("A")
        if self.flags & SHF_EXECINSTR:
            parts.append("X")
        return "".join(parts) if parts else "-"


# ---------------------------------------------------------------------------
# String tables
# ---------------------------------------------------------------------------

class StringTable(BaseModel):
    """A NUL-framed string table copied out of the file.

    Attributes:
        section_index: Index of the section header describing the table.
        offset: File offset of the table.
        size: Table size in bytes.
        data: Owned copy of the table bytes.
        kind: Section-name table or ordinary string table.
    """
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    section_index: int
    offset: int
    size: int
    data: bytes
    kind: StringTableKind = StringTableKind.ORDINARY

    def resolve(self, offset: int) -> str:
        """Return the string starting at *offset*."""
        from rvelf.parsers.strtab import resolve_name

        return resolve_name(self, offset)


# ---------------------------------------------------------------------------
# Aggregate result
# ---------------------------------------------------------------------------

class ParseResult(BaseModel):
    """Everything decoded from one ELF64 buffer.

    Attributes:
        header: The file header (owning the identification block).
        program_headers: Program headers in table order.
        section_headers: Section headers in table order.
        section_name_table_index: Position of the section-name table in
            ``string_tables``; ``None`` when the file has none.
        string_tables: Every ``SHT_STRTAB`` section, in table order.
        section_names: Resolved name of each section header; empty strings
            when names were not resolved.
    """
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    header: FileHeader
    program_headers: list[ProgramHeader] = Field(default_factory=list)
    section_headers: list[SectionHeader] = Field(default_factory=list)
    section_name_table_index: Optional[int] = None
    string_tables: list[StringTable] = Field(default_factory=list)
    section_names: list[str] = Field(default_factory=list)

    @property
    def section_name_table(self) -> Optional[StringTable]:
        if self.section_name_table_index is None:
            return None
        return self.string_tables[self.section_name_table_index]

    def section_name(self, index: int) -> str:
        """Name of the section header at *index*, resolved on demand.

        Raises:
            IndexError: *index* does not name a section header.
        """
        if not 0 <= index < len(self.section_headers):
            raise IndexError(
                f"section index {index} out of range "
                f"(0..{len(self.section_headers) - 1})"
            )
        if index < len(self.section_names):
            return self.section_names[index]
        table = self.section_name_table
        if table is None:
            return ""
        return table.resolve(self.section_headers[index].name)

    def loadable_segments(self) -> list[ProgramHeader]:
        return [
            ph for ph in self.program_headers
            if isinstance(ph.payload, LoadableImage)
        ]

    def dynamic_entries(self) -> list[DynamicEntry]:
        """All dynamic entries across every ``PT_DYNAMIC`` segment."""
        entries: list[DynamicEntry] = []
        for ph in self.program_headers:
            if isinstance(ph.payload, DynamicTable):
                entries.extend(ph.payload.entries)
        return entries
