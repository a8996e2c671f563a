"""
Symbols — Visual vocabulary for operator feedback

Unicode markers when the terminal can show them, ASCII otherwise.
Chosen by the display.symbols setting ("auto" detects).

Output helpers:
- safe_print(): never fails on characters the stream cannot encode
- warn(): one-line non-fatal notice on stderr
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# Replacements tried before falling back to '?'
UNICODE_TO_ASCII = str.maketrans({
    '→': '->',
    '←': '<-',
    '…': '...',
    '–': '-',
    '—': '--',
    '“': '"',
    '”': '"',
    '‘': "'",
    '’': "'",
    '•': '*',
    '·': '.',
    '⚠': '!',
    '✓': '+',
    '✗': 'x',
})

TRUTHY = ('1', 'true', 'yes')
UNICODE_TERMINALS = ('vscode', 'iTerm.app', 'Apple_Terminal', 'Hyper')


def _encodable(text: str, stream) -> str:
    """ASCII look-alikes first, then '?' for whatever the stream still rejects."""
    text = text.translate(UNICODE_TO_ASCII)
    encoding = getattr(stream, 'encoding', None) or 'utf-8'
    return text.encode(encoding, errors='replace').decode(encoding)


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    print() that degrades instead of raising UnicodeEncodeError.

    Remote content (assistant replies, file names) can hold any character;
    a legacy console encoding must not turn a successful command into a crash.
    """
    stream = file if file is not None else sys.stdout
    try:
        print(text, end=end, file=stream)
    except UnicodeEncodeError:
        print(_encodable(text, stream), end=end, file=stream)


@dataclass(frozen=True)
class SymbolSet:
    """Complete set of symbols for CLI feedback."""
    # Status markers
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str

    # Poll progress
    waiting: str

    # Text truncation
    ellipsis: str


UNICODE = SymbolSet(
    check_pass='✓',
    check_warn='⚠',
    check_fail='✗',
    arrow='→',
    waiting='…',
    ellipsis='…',
)

ASCII = SymbolSet(
    check_pass='[OK]',
    check_warn='[!]',
    check_fail='[X]',
    arrow='->',
    waiting='...',
    ellipsis='...',
)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in TRUTHY


def supports_unicode() -> bool:
    """
    Best guess whether stdout can show the Unicode markers.

    AICLI_ASCII_ONLY / AICLI_UNICODE force the answer. Otherwise a
    code-page or latin-1 stdout means no, a UTF-8 locale or a known
    terminal means yes, and anything undecided falls back to ASCII.
    """
    if _env_flag('AICLI_ASCII_ONLY'):
        return False
    if _env_flag('AICLI_UNICODE'):
        return True

    encoding = (getattr(sys.stdout, 'encoding', None) or '').lower()
    normalized = encoding.replace('-', '').replace('_', '')
    if normalized.startswith('cp') or normalized in ('ascii', 'latin1', 'iso88591'):
        return False

    locale = ' '.join(os.environ.get(name, '') for name in ('LC_ALL', 'LANG')).lower()
    if 'utf-8' in locale or 'utf8' in locale:
        return True
    if os.environ.get('TERM_PROGRAM', '') in UNICODE_TERMINALS:
        return True
    return 'utf' in encoding


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII


def warn(message: str, symbols: Optional[SymbolSet] = None) -> None:
    """Surface a non-fatal problem to the operator on stderr."""
    symbols = symbols or get_symbols()
    safe_print(f"{symbols.check_warn} {message}", file=sys.stderr)
