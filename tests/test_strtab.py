"""Tests for the string table resolver."""

import pytest

from rvelf.core.errors import (
    InvalidTextError,
    MalformedStringTableError,
    ParseStage,
    TruncatedInputError,
)
from rvelf.core.models import StringTable, StringTableKind
from rvelf.parsers.constants import SHT_NULL, SHT_PROGBITS, SHT_STRTAB
from rvelf.parsers.header import parse_file_header
from rvelf.parsers.ident import parse_identification
from rvelf.parsers.sections import parse_section_headers
from rvelf.parsers.strtab import (
    find_section_name_table,
    parse_string_tables,
    resolve_name,
    resolve_section_names,
)

from conftest import SHSTRTAB_BYTES


def _tables(data):
    header = parse_file_header(data, parse_identification(data))
    sections = parse_section_headers(data, header)
    return sections, parse_string_tables(data, sections, header.shstrndx)


def _table(data: bytes) -> StringTable:
    return StringTable(section_index=1, offset=0, size=len(data), data=data)


@pytest.mark.parametrize("offset, expected", [(0, ""), (1, ".text"), (2, "text"), (7, ".data"), (12, "")])
def test_resolve_returns_text_up_to_nul(offset, expected):
    assert resolve_name(_table(SHSTRTAB_BYTES), offset) == expected


def test_resolve_stops_at_buffer_end():
    assert resolve_name(_table(b"\x00abc"), 1) == "abc"


def test_resolve_decodes_utf8():
    table = _table("\x00séction\x00".encode("utf-8"))
    assert table.resolve(1) == "séction"


def test_resolve_invalid_text():
    with pytest.raises(InvalidTextError) as excinfo:
        resolve_name(_table(b"\x00\xff\xfe\x00"), 1)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
    assert excinfo.value.stage is ParseStage.STRING_TABLES


@pytest.mark.parametrize("offset", [13, 100, -1])
def test_resolve_outside_table(offset):
    with pytest.raises(TruncatedInputError):
        resolve_name(_table(SHSTRTAB_BYTES), offset)


@pytest.mark.parametrize("payload", [b".text\x00", b"\x00.text", b"", b"x"])
def test_framing_is_enforced(elf_factory, payload):
    img = elf_factory()
    img.section(SHT_NULL)
    img.section(SHT_STRTAB, blob=img.blob(payload) if payload else None)
    with pytest.raises(MalformedStringTableError) as excinfo:
        _tables(img.build(shstrndx=1))
    assert excinfo.value.index == 1


def test_kinds_and_filtering(elf_factory):
    img = elf_factory()
    img.section(SHT_NULL)
    img.section(SHT_STRTAB, blob=img.blob(b"\x00main\x00"))
    img.section(SHT_PROGBITS, blob=img.blob(b"\x01\x02\x03\x04"))
    img.section(SHT_STRTAB, blob=img.blob(SHSTRTAB_BYTES))
    _, tables = _tables(img.build(shstrndx=3))

    assert [t.section_index for t in tables] == [1, 3]
    assert [t.kind for t in tables] == [
        StringTableKind.ORDINARY, StringTableKind.SECTION_NAMES,
    ]
    assert tables[1].data == SHSTRTAB_BYTES
    assert tables[1].size == len(SHSTRTAB_BYTES)
    assert find_section_name_table(tables) == 1
    assert all(t.kind is not StringTableKind.DYNAMIC_SYMBOLS for t in tables)


def test_no_section_name_table(elf_factory):
    img = elf_factory()
    img.section(SHT_NULL)
    img.section(SHT_STRTAB, blob=img.blob(b"\x00a\x00"))
    _, tables = _tables(img.build(shstrndx=0))
    assert find_section_name_table(tables) is None


def test_table_past_buffer(elf_factory):
    img = elf_factory()
    img.section(SHT_STRTAB, offset=0x10, size=0x10000)
    with pytest.raises(TruncatedInputError):
        _tables(img.build())


def test_resolve_section_names(elf_factory):
    img = elf_factory()
    names = img.blob(SHSTRTAB_BYTES)
    img.section(SHT_NULL)
    img.section(SHT_PROGBITS, name=1)
    img.section(SHT_PROGBITS, name=7)
    img.section(SHT_STRTAB, name=0, blob=names)
    sections, tables = _tables(img.build(shstrndx=3))
    assert resolve_section_names(sections, tables[0]) == ["", ".text", ".data", ""]
