"""
rvelf Parse Engine
===================

Orchestrates the ELF64 decoding pipeline over one in-memory buffer.

Each stage is a pure function whose output is the next stage's input;
the engine only sequences them, applies configuration, and logs.

Pipeline:
    1. Identification block (magic, class, encoding, version)
    2. File header (table geometry)
    3. Program headers with segment payloads
    4. Section headers
    5. String tables
    6. Section name resolution

Any stage failure aborts the parse; there is no partial result.
"""

from __future__ import annotations

from typing import Optional

from shared.config import RvelfConfig
from shared.logger import RvelfLogger

from rvelf.core.errors import ElfParseError
from rvelf.core.models import (
    DataEncoding,
    FileType,
    ParseResult,
    SectionHeader,
    StringTable,
)
from rvelf.parsers.header import parse_file_header
from rvelf.parsers.ident import parse_identification
from rvelf.parsers.sections import parse_section_headers
from rvelf.parsers.segments import parse_program_headers
from rvelf.parsers.strtab import (
    find_section_name_table,
    parse_string_tables,
    resolve_section_names,
)


class ElfParseEngine:
    """Sequences the decoding stages and aggregates a :class:`ParseResult`.

    Usage::

        engine = ElfParseEngine()
        result = engine.parse(Path("rv64i-test").read_bytes())
        print(result.header.entry)

    The engine holds configuration only; it keeps no per-parse state, so
    one instance may parse many buffers, from several threads if desired.
    """

    def __init__(
        self,
        config: RvelfConfig | None = None,
        logger: RvelfLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: rvelf configuration.  Defaults are used if not provided.
            logger: Logger instance.  A console-less one is created if not
                provided.
        """
        self._config: RvelfConfig = config or RvelfConfig()
        self._logger: RvelfLogger = logger or RvelfLogger(
            "engine", console_output=False
        )

        loader = self._config.loader
        self._accepted_encodings: tuple[DataEncoding, ...] = tuple(
            DataEncoding[name.upper()] for name in loader.accepted_encodings
        )
        self._accepted_types: tuple[FileType, ...] = tuple(
            FileType[name.upper()] for name in loader.accepted_file_types
        )
        self._resolve_names: bool = loader.resolve_section_names
        self._max_segment_size: int = loader.max_segment_size

    @property
    def config(self) -> RvelfConfig:
        return self._config

    def parse(self, data: bytes) -> ParseResult:
        """Decode *data* into a :class:`ParseResult`.

        Raises:
            ElfParseError: Any decoding failure, unchanged.
        """
        data = bytes(data)
        log = self._logger

        try:
            with log.timed(f"parse {len(data)} bytes"):
                with log.stage("identification"):
                    ident = parse_identification(
                        data, accepted_encodings=self._accepted_encodings
                    )

                with log.stage("file_header"):
                    header = parse_file_header(
                        data, ident, accepted_types=self._accepted_types
                    )

                with log.stage("program_headers"):
                    program_headers = parse_program_headers(
                        data, header, max_segment_size=self._max_segment_size
                    )
                    log.debug("Decoded %d program headers", len(program_headers))

                with log.stage("section_headers"):
                    section_headers = parse_section_headers(data, header)
                    log.debug("Decoded %d section headers", len(section_headers))

                with log.stage("string_tables"):
                    string_tables = parse_string_tables(
                        data, section_headers, header.shstrndx
                    )
                    names_idx = find_section_name_table(string_tables)
                    section_names = self._section_names(
                        section_headers, string_tables, names_idx
                    )
        except ElfParseError as exc:
            log.error(
                "ELF parse failed: %s", exc,
                stage=exc.stage.value, index=exc.index,
            )
            raise

        result = ParseResult(
            header=header,
            program_headers=program_headers,
            section_headers=section_headers,
            section_name_table_index=names_idx,
            string_tables=string_tables,
            section_names=section_names,
        )
        log.info(
            "Parsed %s %s: %d segments, %d sections, %d string tables",
            header.machine_name,
            header.file_type.name,
            len(program_headers),
            len(section_headers),
            len(string_tables),
        )
        return result

    def _section_names(
        self,
        section_headers: list[SectionHeader],
        string_tables: list[StringTable],
        names_idx: Optional[int],
    ) -> list[str]:
        if not self._resolve_names:
            return []
        if names_idx is None:
            if section_headers:
                self._logger.warning(
                    "No section-name string table; section names left empty"
                )
            return ["" for _ in section_headers]
        return resolve_section_names(section_headers, string_tables[names_idx])


def parse_elf(data: bytes, config: RvelfConfig | None = None) -> ParseResult:
    """Parse *data* with a default (or the given) configuration."""
    return ElfParseEngine(config=config).parse(data)
