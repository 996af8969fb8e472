"""Tests for the identification parser."""

import pytest

from rvelf.core.errors import (
    InvalidMagicError,
    ParseStage,
    TruncatedInputError,
    UnsupportedClassError,
    UnsupportedEncodingError,
    UnsupportedVersionError,
)
from rvelf.core.models import DataEncoding, ElfClass, ElfVersion
from rvelf.parsers.ident import parse_identification

BOTH = (DataEncoding.LSB, DataEncoding.MSB)


@pytest.mark.parametrize("encoding", [DataEncoding.LSB, DataEncoding.MSB])
def test_recovers_class_encoding_version(ident_factory, encoding):
    raw = ident_factory(data=int(encoding), os_abi=3, abi_version=1)
    ident = parse_identification(raw + b"\x00" * 48, accepted_encodings=BOTH)
    assert ident.elf_class is ElfClass.ELF64
    assert ident.encoding is encoding
    assert ident.version is ElfVersion.CURRENT
    assert ident.os_abi == 3
    assert ident.abi_version == 1
    assert ident.magic == b"\x7fELF"
    assert len(ident.padding) == 7


def test_big_endian_rejected_by_default(ident_factory):
    with pytest.raises(UnsupportedEncodingError):
        parse_identification(ident_factory(data=2))


@pytest.mark.parametrize("position", range(4))
@pytest.mark.parametrize("flip", [0x01, 0x20, 0xFF])
def test_every_magic_mutation_fails(ident_factory, position, flip):
    raw = bytearray(ident_factory())
    raw[position] ^= flip
    with pytest.raises(InvalidMagicError) as excinfo:
        parse_identification(bytes(raw))
    assert excinfo.value.stage is ParseStage.IDENTIFICATION


@pytest.mark.parametrize("length", [0, 4, 15])
def test_short_buffer(ident_factory, length):
    with pytest.raises(TruncatedInputError):
        parse_identification(ident_factory()[:length])


@pytest.mark.parametrize("elf_class", [0, 1, 3])
def test_non_64_bit_class(ident_factory, elf_class):
    with pytest.raises(UnsupportedClassError):
        parse_identification(ident_factory(elf_class=elf_class))


@pytest.mark.parametrize("data", [0, 3, 0xFF])
def test_unknown_encoding_always_rejected(ident_factory, data):
    with pytest.raises(UnsupportedEncodingError):
        parse_identification(ident_factory(data=data), accepted_encodings=BOTH)


@pytest.mark.parametrize("version", [0, 2])
def test_version_must_be_current(ident_factory, version):
    with pytest.raises(UnsupportedVersionError):
        parse_identification(ident_factory(version=version))


def test_checks_run_in_order(ident_factory):
    # bad magic wins over a bad class, a bad class over a bad version
    with pytest.raises(InvalidMagicError):
        parse_identification(ident_factory(magic=b"\x7fELG", elf_class=1))
    with pytest.raises(UnsupportedClassError):
        parse_identification(ident_factory(elf_class=1, version=0))
