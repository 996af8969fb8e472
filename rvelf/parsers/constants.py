"""
ELF64 Constants
================

Numeric constants and display-name tables for the parts of the ELF64
format the loader decodes.

References:
    - System V Application Binary Interface, Edition 4.1 (gABI).
    - Linux man page: elf(5).
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Identification block
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
IDENT_SIZE: int = 16

# Byte offsets inside e_ident
EI_CLASS: int = 4
EI_DATA: int = 5
EI_VERSION: int = 6
EI_OSABI: int = 7
EI_ABIVERSION: int = 8
EI_PAD: int = 9


# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

EHDR_SIZE: int = 64

ET_NONE: int = 0
ET_REL: int = 1   # Relocatable
ET_EXEC: int = 2  # Executable
ET_DYN: int = 3   # Shared object / PIE
ET_CORE: int = 4  # Core dump

EM_NONE: int = 0
EM_SPARC: int = 2
EM_386: int = 3
EM_MIPS: int = 8
EM_PPC: int = 20
EM_PPC64: int = 21
EM_ARM: int = 40
EM_X86_64: int = 62
EM_AARCH64: int = 183
EM_RISCV: int = 243

EM_NAMES: dict[int, str] = {
    EM_NONE: "None",
    EM_SPARC: "SPARC",
    EM_386: "x86",
    EM_MIPS: "MIPS",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_ARM: "ARM",
    EM_X86_64: "x86_64",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
}


# ---------------------------------------------------------------------------
# Program headers
# ---------------------------------------------------------------------------

PHDR_SIZE: int = 56

PT_NULL: int = 0
PT_LOAD: int = 1
PT_DYNAMIC: int = 2
PT_INTERP: int = 3
PT_NOTE: int = 4
PT_SHLIB: int = 5
PT_PHDR: int = 6
PT_TLS: int = 7
PT_LOOS: int = 0x60000000
PT_HIOS: int = 0x6FFFFFFF
PT_LOPROC: int = 0x70000000
PT_HIPROC: int = 0x7FFFFFFF

# Well-known OS-specific types, kept for display only
PT_GNU_EH_FRAME: int = 0x6474E550
PT_GNU_STACK: int = 0x6474E551
PT_GNU_RELRO: int = 0x6474E552
PT_RISCV_ATTRIBUTES: int = 0x70000003

PT_NAMES: dict[int, str] = {
    PT_NULL: "NULL",
    PT_LOAD: "LOAD",
    PT_DYNAMIC: "DYNAMIC",
    PT_INTERP: "INTERP",
    PT_NOTE: "NOTE",
    PT_SHLIB: "SHLIB",
    PT_PHDR: "PHDR",
    PT_TLS: "TLS",
    PT_GNU_EH_FRAME: "GNU_EH_FRAME",
    PT_GNU_STACK: "GNU_STACK",
    PT_GNU_RELRO: "GNU_RELRO",
    PT_RISCV_ATTRIBUTES: "RISCV_ATTRIBUTES",
}

PF_X: int = 0x1  # Execute
PF_W: int = 0x2  # Write
PF_R: int = 0x4  # Read


# ---------------------------------------------------------------------------
# Dynamic section
# ---------------------------------------------------------------------------

DYN_ENTRY_SIZE: int = 16

DT_NULL: int = 0
DT_NEEDED: int = 1
DT_PLTRELSZ: int = 2
DT_PLTGOT: int = 3
DT_HASH: int = 4
DT_STRTAB: int = 5
DT_SYMTAB: int = 6
DT_RELA: int = 7
DT_RELASZ: int = 8
DT_RELAENT: int = 9
DT_STRSZ: int = 10
DT_SYMENT: int = 11
DT_INIT: int = 12
DT_FINI: int = 13
DT_SONAME: int = 14
DT_RPATH: int = 15
DT_SYMBOLIC: int = 16
DT_REL: int = 17
DT_RELSZ: int = 18
DT_RELENT: int = 19
DT_PLTREL: int = 20
DT_DEBUG: int = 21
DT_TEXTREL: int = 22
DT_JMPREL: int = 23
DT_BIND_NOW: int = 24
DT_INIT_ARRAY: int = 25
DT_FINI_ARRAY: int = 26
DT_INIT_ARRAYSZ: int = 27
DT_FINI_ARRAYSZ: int = 28
DT_RUNPATH: int = 29
DT_FLAGS: int = 30

# Tags at or above DT_ENCODING follow the even=pointer / odd=value rule,
# except the band between DT_HIOS and DT_LOPROC.
DT_ENCODING: int = 32
DT_HIOS: int = 0x6FFFF000
DT_LOPROC: int = 0x70000000

DT_NAMES: dict[int, str] = {
    DT_NULL: "NULL",
    DT_NEEDED: "NEEDED",
    DT_PLTRELSZ: "PLTRELSZ",
    DT_PLTGOT: "PLTGOT",
    DT_HASH: "HASH",
    DT_STRTAB: "STRTAB",
    DT_SYMTAB: "SYMTAB",
    DT_RELA: "RELA",
    DT_RELASZ: "RELASZ",
    DT_RELAENT: "RELAENT",
    DT_STRSZ: "STRSZ",
    DT_SYMENT: "SYMENT",
    DT_INIT: "INIT",
    DT_FINI: "FINI",
    DT_SONAME: "SONAME",
    DT_RPATH: "RPATH",
    DT_SYMBOLIC: "SYMBOLIC",
    DT_REL: "REL",
    DT_RELSZ: "RELSZ",
    DT_RELENT: "RELENT",
    DT_PLTREL: "PLTREL",
    DT_DEBUG: "DEBUG",
    DT_TEXTREL: "TEXTREL",
    DT_JMPREL: "JMPREL",
    DT_BIND_NOW: "BIND_NOW",
    DT_INIT_ARRAY: "INIT_ARRAY",
    DT_FINI_ARRAY: "FINI_ARRAY",
    DT_INIT_ARRAYSZ: "INIT_ARRAYSZ",
    DT_FINI_ARRAYSZ: "FINI_ARRAYSZ",
    DT_RUNPATH: "RUNPATH",
    DT_FLAGS: "FLAGS",
}


# ---------------------------------------------------------------------------
# Section headers
# ---------------------------------------------------------------------------

SHDR_SIZE: int = 64

# e_shnum at or above this value means the real count lives in the
# sh_size of section 0.
SHN_UNDEF: int = 0
SHN_LORESERVE: int = 0xFF00

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_RELA: int = 4
SHT_HASH: int = 5
SHT_DYNAMIC: int = 6
SHT_NOTE: int = 7
SHT_NOBITS: int = 8
SHT_REL: int = 9
SHT_SHLIB: int = 10
SHT_DYNSYM: int = 11
SHT_INIT_ARRAY: int = 14
SHT_FINI_ARRAY: int = 15
SHT_PREINIT_ARRAY: int = 16
SHT_GROUP: int = 17
SHT_SYMTAB_SHNDX: int = 18
SHT_GNU_HASH: int = 0x6FFFFFF6
SHT_GNU_VERDEF: int = 0x6FFFFFFD
SHT_GNU_VERNEED: int = 0x6FFFFFFE
SHT_GNU_VERSYM: int = 0x6FFFFFFF
SHT_RISCV_ATTRIBUTES: int = 0x70000003

SHT_NAMES: dict[int, str] = {
    SHT_NULL: "NULL",
    SHT_PROGBITS: "PROGBITS",
    SHT_SYMTAB: "SYMTAB",
    SHT_STRTAB: "STRTAB",
    SHT_RELA: "RELA",
    SHT_HASH: "HASH",
    SHT_DYNAMIC: "DYNAMIC",
    SHT_NOTE: "NOTE",
    SHT_NOBITS: "NOBITS",
    SHT_REL: "REL",
    SHT_SHLIB: "SHLIB",
    SHT_DYNSYM: "DYNSYM",
    SHT_INIT_ARRAY: "INIT_ARRAY",
    SHT_FINI_ARRAY: "FINI_ARRAY",
    SHT_PREINIT_ARRAY: "PREINIT_ARRAY",
    SHT_GROUP: "GROUP",
    SHT_SYMTAB_SHNDX: "SYMTAB_SHNDX",
    SHT_GNU_HASH: "GNU_HASH",
    SHT_GNU_VERDEF: "GNU_VERDEF",
    SHT_GNU_VERNEED: "GNU_VERNEED",
    SHT_GNU_VERSYM: "GNU_VERSYM",
    SHT_RISCV_ATTRIBUTES: "RISCV_ATTRIBUTES",
}

SHF_WRITE: int = 0x1
SHF_ALLOC: int = 0x2
SHF_EXECINSTR: int = 0x4
