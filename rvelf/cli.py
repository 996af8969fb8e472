"""
rvelf CLI -- ELF64 Inspector
=============================

Click-based command-line front-end.  It reads a file, hands the bytes to
:class:`~rvelf.core.engine.ElfParseEngine`, and prints the result as Rich
tables or JSON.

Usage::

    # Inspect a RISC-V executable
    rvelf ./out/rv64i-test

    # Machine-readable output
    rvelf ./out/rv64i-test --json

    # Accept shared objects and big-endian input as well
    rvelf libfoo.so --allow-type DYN --allow-big-endian

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape

from shared.config import RvelfConfig
from shared.console import RvelfConsole
from shared.logger import RvelfLogger

from rvelf.core.engine import ElfParseEngine
from rvelf.core.errors import ElfParseError
from rvelf.core.models import FileType
from rvelf.output.console import ElfConsoleOutput


@click.command("rvelf")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--allow-type", "-t",
    "allow_types",
    multiple=True,
    type=click.Choice([t.name for t in FileType], case_sensitive=False),
    help="Additional accepted e_type (repeatable).  Default: EXEC only.",
)
@click.option(
    "--allow-big-endian",
    is_flag=True,
    default=False,
    help="Accept ELFDATA2MSB input.",
)
@click.option(
    "--no-names",
    is_flag=True,
    default=False,
    help="Skip section name resolution.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output the parse result as JSON to stdout.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def rvelf_cli(
    path: str,
    config_path: str | None,
    allow_types: tuple[str, ...],
    allow_big_endian: bool,
    no_names: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Decode and display the ELF64 file at PATH."""
    console = RvelfConsole()

    try:
        config = RvelfConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(escape(f"Cannot load configuration: {exc}"))
        sys.exit(2)

    log_level: str | None = None
    if verbose or config.global_settings.debug:
        log_level = "DEBUG"
    elif json_output:
        # stdout carries the JSON document only
        log_level = "WARNING"
    config = config.with_overrides(
        extra_file_types=allow_types,
        extra_encodings=["MSB"] if allow_big_endian else [],
        resolve_section_names=False if no_names else None,
        log_level=log_level,
    )

    loader = config.loader
    settings = config.global_settings
    logger = RvelfLogger(
        "engine",
        log_level=settings.log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )

    file_path = Path(path)
    size = file_path.stat().st_size
    if size > loader.max_file_size:
        console.error(escape(
            f"{file_path} is {size:,} bytes, above the "
            f"{loader.max_file_size:,}-byte limit")
        )
        sys.exit(1)

    engine = ElfParseEngine(config=config, logger=logger)
    try:
        result = engine.parse(file_path.read_bytes())
    except ElfParseError as exc:
        console.error(escape(f"{file_path}: {exc}"))
        sys.exit(1)

    if json_output:
        click.echo(result.model_dump_json(indent=2))
        return

    ElfConsoleOutput(console=console).display(result, title=file_path.name)
    if result.section_headers and result.section_name_table is None:
        console.warning("no section-name string table; sections are unnamed")
    console.success(escape(
        f"{file_path.name}: {len(result.program_headers)} segments, "
        f"{len(result.section_headers)} sections"
    ))


def main() -> None:
    """Entry point for ``python -m rvelf.cli`` and the ``rvelf`` script."""
    rvelf_cli()


if __name__ == "__main__":
    main()
