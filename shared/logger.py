"""
rvelf Structured Logger
========================

Provides :class:`RvelfLogger`, a logging facade that emits Rich console
output on stderr and, optionally, plain-text or JSON-lines records to a
rotating log file.  Every record is stamped with the emitting component
and the pipeline stage active at the time.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_PASSTHROUGH_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


# ========================== Record context =================================


class _ContextFilter(logging.Filter):
    """Stamp ``component`` and ``stage`` onto every record of one logger.

    The stage is per thread, so concurrent parses sharing one logger each
    report their own.
    """

    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component
        self._local = threading.local()

    @property
    def stage(self) -> str | None:
        return getattr(self._local, "stage", None)

    @stage.setter
    def stage(self, name: str | None) -> None:
        self._local.stage = name

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = self.component
        record.stage = self.stage
        if not hasattr(record, "fields"):
            record.fields = None
        return True


# ========================== JSON Formatter =================================


class _JSONFormatter(logging.Formatter):
    """One JSON object per line::

        {"timestamp": "...", "level": "ERROR", "logger": "rvelf.engine",
         "message": "...", "component": "engine", "stage": "file_header",
         "fields": {"index": 3}}

    ``stage`` and ``fields`` are omitted when unset.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "component": getattr(record, "component", None),
        }
        stage = getattr(record, "stage", None)
        if stage is not None:
            entry["stage"] = stage
        fields = getattr(record, "fields", None)
        if fields:
            entry["fields"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _file_handler(
    path: str | Path,
    level: int,
    *,
    json_logs: bool,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
        )
    return handler


def _console_handler(level: int) -> RichHandler:
    # Parsed names and byte previews can contain brackets
    return RichHandler(
        level=level,
        console=Console(theme=_LOG_THEME, stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


# ========================== RvelfLogger ====================================


class RvelfLogger:
    """Stage-aware logger for one rvelf component.

    Usage::

        log = RvelfLogger("engine", log_file="logs/rvelf.log", json_logs=True)
        with log.stage("section_headers"):
            log.debug("Decoding %d entries", count, offset=0x1000)

    Keyword arguments other than ``exc_info``, ``stack_info`` and
    ``stacklevel`` are collected into the record's ``fields``.

    Args:
        component:       Name of the emitting component (``"engine"``, ``"cli"``).
        log_level:       Minimum severity name.
        log_file:        Rotating log file path; ``None`` disables file logging.
        json_logs:       Write JSON lines instead of plain text to the file.
        max_bytes:       Log file size that triggers rotation.
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        level = getattr(logging, log_level.upper(), logging.INFO)
        self._context = _ContextFilter(component)

        self._logger = logging.getLogger(f"rvelf.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        for old in list(self._logger.handlers):
            self._logger.removeHandler(old)
            old.close()
        for old_filter in list(self._logger.filters):
            self._logger.removeFilter(old_filter)
        self._logger.addFilter(self._context)

        if console_output:
            self._logger.addHandler(_console_handler(level))
        if log_file is not None:
            self._logger.addHandler(
                _file_handler(
                    log_file, level,
                    json_logs=json_logs,
                    max_bytes=max_bytes,
                    backup_count=backup_count,
                )
            )
        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    @property
    def component(self) -> str:
        return self._context.component

    @property
    def current_stage(self) -> str | None:
        return self._context.stage

    @property
    def underlying(self) -> logging.Logger:
        """The stdlib :class:`logging.Logger` behind this facade."""
        return self._logger

    # ------------------------------------------------------------------ #
    #  Context managers
    # ------------------------------------------------------------------ #

    @contextmanager
    def stage(self, name: str) -> Iterator[RvelfLogger]:
        """Tag every record emitted inside the block with ``stage=name``."""
        previous = self._context.stage
        self._context.stage = name
        try:
            yield self
        finally:
            self._context.stage = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log *label* at DEBUG on entry and, if the block succeeds, its duration."""
        start = time.perf_counter()
        self.debug("Started: %s", label)
        yield
        self.debug("Completed: %s (%.3f sec)", label, time.perf_counter() - start)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        fields = {
            key: kwargs.pop(key) for key in list(kwargs)
            if key not in _PASSTHROUGH_KWARGS
        }
        self._logger.log(
            level, msg, *args, extra={"fields": fields or None}, **kwargs
        )

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """ERROR record carrying the active exception's traceback."""
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)
