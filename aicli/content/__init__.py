"""
Content — Static text content for CLI display

Separates presentation text from logic.
"""

from .help_text import HELP_HEADER, HELP_FOOTER

__all__ = ['HELP_HEADER', 'HELP_FOOTER']
