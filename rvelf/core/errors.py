"""
rvelf Errors
=============

Exception hierarchy raised by the decoding pipeline.  Every failure is
terminal for the parse that raised it; each exception records the stage
that failed and, for table-driven stages, the index of the offending
entry so that callers can print a precise diagnostic.
"""

from __future__ import annotations

import enum
from typing import Optional


class ParseStage(str, enum.Enum):
    """Pipeline stage in which a failure occurred."""
    IDENTIFICATION = "identification"
    FILE_HEADER = "file_header"
    PROGRAM_HEADERS = "program_headers"
    SECTION_HEADERS = "section_headers"
    STRING_TABLES = "string_tables"


class ElfParseError(Exception):
    """Base class for every decoding failure.

    Attributes:
        stage: Pipeline stage that raised the error.
        index: Table entry index, when the failure concerns one entry.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: ParseStage,
        index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.stage = stage
        self.index = index
        super().__init__(str(self))

    def __str__(self) -> str:
        where = self.stage.value
        if self.index is not None:
            where = f"{where} #{self.index}"
        return f"[{where}] {self.message}"


class TruncatedInputError(ElfParseError):
    """The buffer ends before a region the format requires."""


class InvalidMagicError(ElfParseError):
    """The first four bytes are not ``\\x7fELF``."""


class UnsupportedClassError(ElfParseError):
    """The file is not of the 64-bit class."""


class UnsupportedEncodingError(ElfParseError):
    """The data encoding is unknown or not accepted by the loader."""


class UnsupportedVersionError(ElfParseError):
    """The identification version is not ``EV_CURRENT``."""


class UnrecognizedFileTypeError(ElfParseError):
    """``e_type`` is unknown or not accepted by the loader."""


class MalformedSegmentError(ElfParseError):
    """A segment's sizes contradict its payload layout."""


class UnsupportedSectionTableOverflowError(ElfParseError):
    """The section count uses the extended (``SHN_LORESERVE``) convention."""


class MalformedStringTableError(ElfParseError):
    """A string table is not framed by NUL bytes."""


class InvalidTextError(ElfParseError):
    """String-table bytes are not valid UTF-8."""


class UnrecognizedTypeError(ElfParseError):
    """A segment type falls outside every known value and reserved range."""
