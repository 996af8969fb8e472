"""
rvelf Console Output
=====================

Rich-powered terminal display for :class:`~rvelf.core.models.ParseResult`:
a file header panel, the program header table with payload summaries,
the dynamic entries, the section header table with resolved names, and
the string tables.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel

from shared.console import RvelfConsole

from rvelf.core.models import (
    DynamicEntry,
    DynamicTable,
    FileHeader,
    LoadableImage,
    ParseResult,
    ProgramHeader,
    SectionHeader,
    StringTable,
)

_PREVIEW_BYTES: int = 8
_STRTAB_PREVIEW: int = 6


def _payload_summary(ph: ProgramHeader) -> str:
    """One-line description of a segment payload."""
    payload = ph.payload
    if isinstance(payload, LoadableImage):
        head = payload.data[:_PREVIEW_BYTES].hex(" ")
        more = " ..." if len(payload.data) > _PREVIEW_BYTES else ""
        return escape(f"image {len(payload.data):#x} bytes [{head}{more}]")
    if isinstance(payload, DynamicTable):
        return f"{len(payload.entries)} dynamic entries"
    return "-"


def _strtab_preview(table: StringTable) -> str:
    names = [n.decode("utf-8", errors="replace") for n in table.data.split(b"\x00") if n]
    shown = ", ".join(names[:_STRTAB_PREVIEW])
    if len(names) > _STRTAB_PREVIEW:
        shown += f", ... (+{len(names) - _STRTAB_PREVIEW})"
    return escape(shown)


# ---------------------------------------------------------------------------
# ElfConsoleOutput
# ---------------------------------------------------------------------------

class ElfConsoleOutput:
    """Rich terminal display for ELF64 parse results.

    Usage::

        output = ElfConsoleOutput()
        output.display(result)
    """

    def __init__(self, console: RvelfConsole | None = None) -> None:
        self._console: RvelfConsole = console or RvelfConsole()

    def display(self, result: ParseResult, *, title: str = "") -> None:
        """Display every part of *result*."""
        self._console.section(f"ELF64 {escape(title)}".strip())

        self.display_header(result.header)

        if result.program_headers:
            self.display_program_headers(result.program_headers)

        dynamic = result.dynamic_entries()
        if dynamic:
            self.display_dynamic(dynamic)

        if result.section_headers:
            self.display_sections(result.section_headers, result.section_names)

        if result.string_tables:
            self.display_string_tables(result.string_tables)

    def display_header(self, header: FileHeader) -> None:
        ident = header.ident
        lines: list[str] = [
            f"[bold]Class:[/bold]        {ident.elf_class.name}",
            f"[bold]Encoding:[/bold]     {ident.encoding.name} ({ident.encoding.byteorder}-endian)",
            f"[bold]OS/ABI:[/bold]       {ident.os_abi} (ABI version {ident.abi_version})",
            f"[bold]Type:[/bold]         {header.file_type.name}",
            f"[bold]Machine:[/bold]      {header.machine_name} ({header.machine})",
            f"[bold]Entry Point:[/bold]  {header.entry}",
            f"[bold]Flags:[/bold]        {header.flags:#x}",
            f"[bold]Program Hdrs:[/bold] {header.ph_count} x {header.ph_entry_size} @ {header.ph_offset:#x}",
            f"[bold]Section Hdrs:[/bold] {header.sh_count} x {header.sh_entry_size} @ {header.sh_offset:#x}",
            f"[bold]Names Index:[/bold]  {header.shstrndx}",
        ]
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]File Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)

    def display_program_headers(self, headers: list[ProgramHeader]) -> None:
        rows = [
            (
                idx,
                ph.type_name,
                ph.flags_str,
                f"{ph.offset:#x}",
                str(ph.vaddr),
                f"{ph.file_size:#x}",
                f"{ph.mem_size:#x}",
                f"{ph.align:#x}",
                _payload_summary(ph),
            )
            for idx, ph in enumerate(headers)
        ]
        self._console.table(
            "Program Headers",
            ["#", "Type", "Flags", "Offset", "VirtAddr", "FileSiz", "MemSiz", "Align", "Payload"],
            rows,
            styles=["dim", "bold bright_white", "yellow", "", "bright_cyan", "", "", "dim", ""],
        )

    def display_dynamic(self, entries: list[DynamicEntry]) -> None:
        rows = [
            (
                entry.tag_name,
                "ptr" if entry.is_pointer else "val",
                str(entry.value) if entry.is_pointer else f"{entry.value:#x}",
            )
            for entry in entries
        ]
        self._console.table(
            "Dynamic Entries",
            ["Tag", "Kind", "Value"],
            rows,
            styles=["bold", "dim", "bright_cyan"],
        )

    def display_sections(
        self,
        sections: list[SectionHeader],
        names: list[str],
    ) -> None:
        rows = []
        for idx, sh in enumerate(sections):
            name = names[idx] if idx < len(names) else f"<{sh.name:#x}>"
            rows.append((
                idx,
                escape(name),
                sh.type_name,
                sh.flags_str,
                str(sh.addr),
                f"{sh.offset:#x}",
                f"{sh.size:#x}",
                f"{sh.entry_size:#x}" if sh.has_subtable else "-",
                f"{sh.addr_align:#x}" if sh.has_alignment_constraint else "-",
            ))
        self._console.table(
            "Section Headers",
            ["#", "Name", "Type", "Flags", "Addr", "Offset", "Size", "EntSize", "Align"],
            rows,
            styles=["dim", "bold bright_white", "", "yellow", "bright_cyan", "", "", "dim", "dim"],
        )

    def display_string_tables(self, tables: list[StringTable]) -> None:
        rows = [
            (
                table.section_index,
                table.kind.value,
                f"{table.offset:#x}",
                f"{table.size:#x}",
                _strtab_preview(table),
            )
            for table in tables
        ]
        self._console.table(
            "String Tables",
            ["Section", "Kind", "Offset", "Size", "Contents"],
            rows,
        )
