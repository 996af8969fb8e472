"""
rvelf Console
==============

Thin facade over :class:`rich.console.Console` giving the CLI one palette
for rules, status lines and tables.
"""

from __future__ import annotations

from typing import IO, Any, Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "rvelf.rule": "bold bright_magenta",
        "rvelf.success": "bold green",
        "rvelf.warning": "bold yellow",
        "rvelf.error": "bold red",
        "rvelf.border": "bright_cyan",
        "rvelf.heading": "bold bright_magenta",
    }
)

# severity -> (glyph, label)
_LEVELS: dict[str, tuple[str, str]] = {
    "success": ("✔", "SUCCESS"),
    "warning": ("⚠", "WARNING"),
    "error": ("✘", "ERROR"),
}


class RvelfConsole:
    """Themed console for rvelf output.

    *file* and *width* pin the destination and layout, which tests use to
    capture rendered tables; *record* enables :meth:`export_text`.
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        file: IO[str] | None = None,
        width: int | None = None,
    ) -> None:
        self._console = Console(
            theme=_THEME,
            quiet=quiet,
            record=record,
            file=file,
            width=width,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        return self._console

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="rvelf.rule")

    def _status(self, level: str, message: str) -> None:
        glyph, label = _LEVELS[level]
        style = f"rvelf.{level}"
        self._console.print(f"[{style}]\\[{glyph}] {label}:[/{style}] {message}")

    def success(self, message: str) -> None:
        self._status("success", message)

    def warning(self, message: str) -> None:
        self._status("warning", message)

    def error(self, message: str) -> None:
        self._status("error", message)

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Print a table; cells are stringified, *styles* apply per column."""
        styles = list(styles or ())
        tbl = Table(
            title=title,
            caption=caption,
            border_style="rvelf.border",
            header_style="rvelf.heading",
            padding=(0, 1),
        )
        for pos, name in enumerate(columns):
            tbl.add_column(name, style=styles[pos] if pos < len(styles) else "")
        for row in rows:
            tbl.add_row(*map(str, row))
        self._console.print(tbl)

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def export_text(self) -> str:
        """Recorded output as plain text; needs ``record=True``."""
        return self._console.export_text()
