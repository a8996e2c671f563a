"""
Presentation — Display layer for ai-cli

- Symbols: Visual vocabulary (unicode/ascii), safe printing, warnings
- Formatters: Result rendering, timestamps, help tree
"""

from .symbols import SymbolSet, get_symbols, safe_print, warn, UNICODE, ASCII
from .formatters import (
    convert_timestamps_to_iso, format_result, format_timestamp,
    entry_preview, render_command_tree,
)

__all__ = [
    # Symbols
    "SymbolSet", "get_symbols", "safe_print", "warn", "UNICODE", "ASCII",
    # Formatters
    "convert_timestamps_to_iso", "format_result", "format_timestamp",
    "entry_preview", "render_command_tree",
]
