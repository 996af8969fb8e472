"""
rvelf Output Module
====================

Console rendering of parse results.
"""

from rvelf.output.console import ElfConsoleOutput

__all__ = ["ElfConsoleOutput"]
