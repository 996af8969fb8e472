"""
rvelf Core Module
==================

Data models, error hierarchy, and the parse engine that sequences the
decoding stages.
"""

from rvelf.core.errors import ElfParseError, ParseStage
from rvelf.core.models import ParseResult
from rvelf.core.engine import ElfParseEngine, parse_elf

__all__ = [
    "ElfParseEngine",
    "ElfParseError",
    "ParseResult",
    "ParseStage",
    "parse_elf",
]
