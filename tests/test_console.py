"""Tests for the Rich console output."""

import io
import struct

import pytest

from shared.console import RvelfConsole

from rvelf.core.engine import ElfParseEngine
from rvelf.output.console import ElfConsoleOutput
from rvelf.parsers.constants import PT_DYNAMIC, PT_LOAD


@pytest.fixture
def console():
    return RvelfConsole(file=io.StringIO(), width=200, record=True)


def test_message_helpers(console):
    console.success("parsed")
    console.warning("careful")
    console.error("broken")
    text = console.export_text()
    assert "SUCCESS: parsed" in text
    assert "WARNING: careful" in text
    assert "ERROR: broken" in text


def test_table(console):
    console.table("Things", ["A", "B"], [(1, "x"), (2, "y")], caption="two rows")
    text = console.export_text()
    assert "Things" in text
    assert "two rows" in text
    assert "x" in text and "y" in text


def test_quiet_console():
    buf = io.StringIO()
    RvelfConsole(quiet=True, file=buf).error("hidden")
    assert buf.getvalue() == ""


def test_display_full_result(console, minimal_elf):
    result = ElfParseEngine().parse(minimal_elf)
    ElfConsoleOutput(console=console).display(result, title="rv64i-test")
    text = console.export_text()

    assert "ELF64 rv64i-test" in text
    assert "Entry Point:  0x00010078" in text
    assert "LOAD" in text and "R-X" in text
    assert "image 0x8 bytes [de ad be ef 00 00 00 00]" in text
    assert ".text" in text and ".data" in text
    assert "PROGBITS" in text and "STRTAB" in text
    assert "section_names" in text
    assert "Dynamic Entries" not in text


def test_display_dynamic_entries(console, elf_factory):
    img = elf_factory()
    img.segment(PT_LOAD, blob=img.blob(b"\x00" * 64), memsz=0x200)
    img.segment(PT_DYNAMIC, blob=img.blob(struct.pack("<qQqQ", 1, 0x7, 4, 0x10200)))
    result = ElfParseEngine().parse(img.build())
    ElfConsoleOutput(console=console).display(result)
    text = console.export_text()

    assert "Dynamic Entries" in text
    assert "NEEDED" in text and "0x7" in text
    assert "HASH" in text and "0x00010200" in text
    assert "2 dynamic entries" in text
    assert " ..." in text
