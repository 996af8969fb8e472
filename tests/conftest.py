"""Shared fixtures: a small builder for synthetic ELF64 images."""

from __future__ import annotations

import struct
from typing import Optional

import pytest

from rvelf.parsers.constants import (
    EM_RISCV,
    ET_EXEC,
    PF_R,
    PF_X,
    PT_LOAD,
    SHT_NULL,
    SHT_PROGBITS,
    SHT_STRTAB,
)


def make_ident(
    *,
    magic: bytes = b"\x7fELF",
    elf_class: int = 2,
    data: int = 1,
    version: int = 1,
    os_abi: int = 0,
    abi_version: int = 0,
    padding: bytes = b"\x00" * 7,
) -> bytes:
    return magic + bytes([elf_class, data, version, os_abi, abi_version]) + padding


class ElfImage:
    """Lays out ehdr | phdrs | blobs | shdrs into one buffer.

    Segments and sections refer to blobs by id; their file offsets are
    filled in by :meth:`build`.  Explicit ``offset``/``filesz``/``size``
    arguments override the computed values.
    """

    def __init__(
        self,
        *,
        encoding: str = "<",
        e_type: int = ET_EXEC,
        machine: int = EM_RISCV,
        entry: int = 0x10078,
        flags: int = 0x5,
    ) -> None:
        self.encoding = encoding
        self.e_type = e_type
        self.machine = machine
        self.entry = entry
        self.flags = flags
        self.blobs: list[bytes] = []
        self.segments: list[dict] = []
        self.sections: list[dict] = []

    def blob(self, data: bytes) -> int:
        self.blobs.append(data)
        return len(self.blobs) - 1

    def segment(
        self,
        p_type: int = PT_LOAD,
        *,
        blob: Optional[int] = None,
        flags: int = PF_R | PF_X,
        vaddr: int = 0x10000,
        paddr: Optional[int] = None,
        offset: Optional[int] = None,
        filesz: Optional[int] = None,
        memsz: Optional[int] = None,
        align: int = 0x1000,
    ) -> "ElfImage":
        self.segments.append(dict(
            p_type=p_type, blob=blob, flags=flags, vaddr=vaddr,
            paddr=vaddr if paddr is None else paddr, offset=offset,
            filesz=filesz, memsz=memsz, align=align,
        ))
        return self

    def section(
        self,
        sh_type: int = SHT_PROGBITS,
        *,
        name: int = 0,
        blob: Optional[int] = None,
        offset: Optional[int] = None,
        size: Optional[int] = None,
        flags: int = 0,
        addr: int = 0,
        link: int = 0,
        info: int = 0,
        addralign: int = 1,
        entsize: int = 0,
    ) -> "ElfImage":
        self.sections.append(dict(
            sh_type=sh_type, name=name, blob=blob, offset=offset, size=size,
            flags=flags, addr=addr, link=link, info=info,
            addralign=addralign, entsize=entsize,
        ))
        return self

    def build(
        self,
        *,
        shstrndx: int = 0,
        phentsize: int = 56,
        shentsize: int = 64,
        phnum: Optional[int] = None,
        shnum: Optional[int] = None,
        ident: Optional[bytes] = None,
    ) -> bytes:
        e = self.encoding
        data_off = 64 + phentsize * len(self.segments)

        blob_offsets: list[int] = []
        body = b""
        for b in self.blobs:
            blob_offsets.append(data_off + len(body))
            body += b
        pad = b"\x00" * ((-(data_off + len(body))) % 8)
        sh_off = data_off + len(body) + len(pad) if self.sections else 0

        def extent(entry: dict, size_key: str) -> tuple[int, int]:
            blob = entry["blob"]
            offset = entry["offset"]
            size = entry[size_key]
            if offset is None:
                offset = blob_offsets[blob] if blob is not None else 0
            if size is None:
                size = len(self.blobs[blob]) if blob is not None else 0
            return offset, size

        phdrs = b""
        for seg in self.segments:
            offset, filesz = extent(seg, "filesz")
            memsz = filesz if seg["memsz"] is None else seg["memsz"]
            rec = struct.pack(
                e + "IIQQQQQQ",
                seg["p_type"], seg["flags"], offset, seg["vaddr"],
                seg["paddr"], filesz, memsz, seg["align"],
            )
            phdrs += rec.ljust(phentsize, b"\x00")

        shdrs = b""
        for sec in self.sections:
            offset, size = extent(sec, "size")
            rec = struct.pack(
                e + "IIQQQQIIQQ",
                sec["name"], sec["sh_type"], sec["flags"], sec["addr"],
                offset, size, sec["link"], sec["info"],
                sec["addralign"], sec["entsize"],
            )
            shdrs += rec.ljust(shentsize, b"\x00")

        if ident is None:
            ident = make_ident(data=1 if e == "<" else 2)
        header = ident + struct.pack(
            e + "HHIQQQIHHHHHH",
            self.e_type, self.machine, 1, self.entry,
            64 if self.segments else 0, sh_off, self.flags, 64,
            phentsize, len(self.segments) if phnum is None else phnum,
            shentsize, len(self.sections) if shnum is None else shnum,
            shstrndx,
        )
        return header + phdrs + body + pad + shdrs


SHSTRTAB_BYTES: bytes = b"\x00.text\x00.data\x00"


@pytest.fixture
def elf_factory():
    """The :class:`ElfImage` builder class."""
    return ElfImage


@pytest.fixture
def ident_factory():
    return make_ident


@pytest.fixture
def minimal_elf() -> bytes:
    """One LOAD segment (``DE AD BE EF``, memsz 8) and a section-name table.

    Sections: 0 NULL, 1 ``.text``, 2 ``.data``, 3 the string table.
    """
    img = ElfImage()
    code = img.blob(b"\xde\xad\xbe\xef")
    names = img.blob(SHSTRTAB_BYTES)
    img.segment(PT_LOAD, blob=code, memsz=8)
    img.section(SHT_NULL)
    img.section(SHT_PROGBITS, name=1, blob=code, flags=0x6, addr=0x10000, addralign=4)
    img.section(SHT_PROGBITS, name=7, flags=0x3, addr=0x11000, addralign=8)
    img.section(SHT_STRTAB, name=0, blob=names)
    return img.build(shstrndx=3)
