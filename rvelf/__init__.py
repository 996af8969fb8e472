"""
rvelf -- ELF64 Loader Front-End
================================

rvelf decodes 64-bit ELF executables (RISC-V being the intended target)
into validated, immutable models: the identification block, the file
header, program headers with materialised segment payloads, section
headers, and string tables.  The result is the starting point for
process-image construction and further binary analysis.

Usage::

    from rvelf import parse_elf

    result = parse_elf(Path("a.out").read_bytes())
    for segment in result.loadable_segments():
        print(segment.vaddr, len(segment.payload.data))

References:
    - System V Application Binary Interface, Edition 4.1.
    - RISC-V ELF psABI Specification.
    - Linux man page: elf(5).
"""

from rvelf.core.errors import (
    ElfParseError,
    InvalidMagicError,
    InvalidTextError,
    MalformedSegmentError,
    MalformedStringTableError,
    ParseStage,
    TruncatedInputError,
    UnrecognizedFileTypeError,
    UnrecognizedTypeError,
    UnsupportedClassError,
    UnsupportedEncodingError,
    UnsupportedSectionTableOverflowError,
    UnsupportedVersionError,
)
from rvelf.core.models import (
    Address,
    DynamicEntry,
    DynamicTable,
    FileHeader,
    Identification,
    LoadableImage,
    NoPayload,
    ParseResult,
    ProgramHeader,
    SectionHeader,
    StringTable,
    StringTableKind,
)
from rvelf.core.engine import ElfParseEngine, parse_elf

__version__ = "0.3.0"
__all__ = [
    "Address",
    "DynamicEntry",
    "DynamicTable",
    "ElfParseEngine",
    "ElfParseError",
    "FileHeader",
    "Identification",
    "InvalidMagicError",
    "InvalidTextError",
    "LoadableImage",
    "MalformedSegmentError",
    "MalformedStringTableError",
    "NoPayload",
    "ParseResult",
    "ParseStage",
    "ProgramHeader",
    "SectionHeader",
    "StringTable",
    "StringTableKind",
    "TruncatedInputError",
    "UnrecognizedFileTypeError",
    "UnrecognizedTypeError",
    "UnsupportedClassError",
    "UnsupportedEncodingError",
    "UnsupportedSectionTableOverflowError",
    "UnsupportedVersionError",
    "parse_elf",
]
