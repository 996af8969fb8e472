"""
rvelf Configuration
====================

Dataclass configuration tree for the rvelf loader, persisted as TOML.

Lookup order for :meth:`RvelfConfig.load` without an explicit path:
the ``RVELF_CONFIG`` environment variable, then ``rvelf.toml`` at the
project root, then built-in defaults.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Iterable

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

ENV_CONFIG_PATH: str = "RVELF_CONFIG"
_PROJECT_CONFIG: Path = Path(__file__).resolve().parent.parent / "rvelf.toml"

# Member names of rvelf.core.models.FileType / DataEncoding.  Spelled out
# because rvelf.core imports this module; tests/test_config.py keeps the
# two in step.
FILE_TYPE_NAMES: frozenset[str] = frozenset({"NONE", "REL", "EXEC", "DYN", "CORE"})
ENCODING_NAMES: frozenset[str] = frozenset({"LSB", "MSB"})


def _normalise_names(values: Iterable[str], allowed: frozenset[str], key: str) -> list[str]:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"loader.{key} must be a list of names, got {values!r}")
    names: list[str] = []
    for value in values:
        name = str(value).upper()
        if name not in allowed:
            raise ValueError(
                f"loader.{key}: {value!r} is not one of {sorted(allowed)}"
            )
        if name not in names:
            names.append(name)
    if not names:
        raise ValueError(f"loader.{key} must not be empty")
    return names


@dataclass(slots=True)
class LoaderConfig:
    """``[loader]``: what the decoding pipeline accepts.

    The defaults restrict input to little-endian executables, the only
    files the RISC-V process-image builder consumes.
    """

    accepted_file_types: list[str] = field(default_factory=lambda: ["EXEC"])
    accepted_encodings: list[str] = field(default_factory=lambda: ["LSB"])
    resolve_section_names: bool = True
    max_file_size: int = 256 * 1024 * 1024
    max_segment_size: int = 1024 * 1024 * 1024

    def __post_init__(self) -> None:
        self.accepted_file_types = _normalise_names(
            self.accepted_file_types, FILE_TYPE_NAMES, "accepted_file_types"
        )
        self.accepted_encodings = _normalise_names(
            self.accepted_encodings, ENCODING_NAMES, "accepted_encodings"
        )
        for key in ("max_file_size", "max_segment_size"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"loader.{key} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"loader.{key} must be positive")
        if not isinstance(self.resolve_section_names, bool):
            raise ValueError("loader.resolve_section_names must be true or false")


@dataclass(slots=True)
class GlobalConfig:
    """``[global]``: log verbosity and destinations."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    debug: bool = False


@dataclass(slots=True)
class RvelfConfig:
    """Root of the configuration tree.

    Usage::

        config = RvelfConfig.load()                 # env var, rvelf.toml or defaults
        config = RvelfConfig.load("ci.toml")
        config = config.with_overrides(extra_file_types=["DYN"])
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> RvelfConfig:
        """Read configuration from TOML; omitted keys keep their defaults.

        Raises:
            FileNotFoundError: An explicit *path* (or ``RVELF_CONFIG``)
                names a missing file.
            ValueError: The file is not valid TOML or holds invalid values.
        """
        if path is None:
            path = os.environ.get(ENV_CONFIG_PATH) or None
        if path is None:
            if not _PROJECT_CONFIG.is_file():
                return cls()
            config_path = _PROJECT_CONFIG
        else:
            config_path = Path(path)
            if not config_path.is_file():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))
        return cls(
            global_settings=_section(GlobalConfig, raw.get("global", {})),
            loader=_section(LoaderConfig, raw.get("loader", {})),
        )

    def with_overrides(
        self,
        *,
        extra_file_types: Iterable[str] = (),
        extra_encodings: Iterable[str] = (),
        resolve_section_names: bool | None = None,
        log_level: str | None = None,
    ) -> RvelfConfig:
        """Return a copy with command line overrides applied."""
        loader = replace(
            self.loader,
            accepted_file_types=[*self.loader.accepted_file_types, *extra_file_types],
            accepted_encodings=[*self.loader.accepted_encodings, *extra_encodings],
        )
        if resolve_section_names is not None:
            loader.resolve_section_names = resolve_section_names
        global_settings = replace(self.global_settings)
        if log_level is not None:
            global_settings.log_level = log_level
        return RvelfConfig(global_settings=global_settings, loader=loader)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _section(kind: type, data: dict[str, Any]) -> Any:
    """Build dataclass *kind* from the keys of *data* it declares; others are ignored."""
    known = {f.name for f in fields(kind)}
    return kind(**{k: v for k, v in data.items() if k in known})


_cached: RvelfConfig | None = None


def get_config(path: str | Path | None = None) -> RvelfConfig:
    """Process-wide configuration, loaded once; an explicit *path* reloads it."""
    global _cached
    if _cached is None or path is not None:
        _cached = RvelfConfig.load(path)
    return _cached
