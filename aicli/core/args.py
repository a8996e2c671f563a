"""
Argument Parser — Flag tokens to a raw string mapping

Rules, scanned strictly left to right:
- A token starting with FLAG_MARKER opens a key (marker stripped).
- The next non-flag token is its value.
- A flag followed by another flag, or at the end, binds to "".
- Repeated flags: last occurrence wins.
- Stray values with no open key are ignored.

Values stay raw strings. Coercion is the handler's job.

Presence is three-state (see Presence): a flag given with no value is
the operator's way of saying "use the default / the latest", which is
not the same as leaving the flag out.
"""

from enum import Enum
from typing import Iterable, Optional, Sequence

from ..errors import MissingRequiredParameter
from .registry import Parameter


FLAG_MARKER = "--"


class Presence(Enum):
    """How a parameter showed up on the command line."""
    ABSENT = "absent"
    EMPTY = "empty"
    VALUE = "value"


class ParsedArgs(dict):
    """
    Parsed flags: a plain dict of str -> str with presence helpers.

    Kept a dict so it serializes straight into the audit log.
    """

    def presence(self, name: str) -> Presence:
        if name not in self:
            return Presence.ABSENT
        return Presence.EMPTY if self[name] == "" else Presence.VALUE

    def has_value(self, name: str) -> bool:
        return self.presence(name) is Presence.VALUE

    def value_or(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value when given with one; ``default`` when absent or empty."""
        return self[name] if self.has_value(name) else default


def is_flag(token: str) -> bool:
    return token.startswith(FLAG_MARKER)


def scan(tokens: Sequence[str]) -> ParsedArgs:
    """Convert flag tokens to a mapping. Never fails."""
    out = ParsedArgs()
    key = None
    for token in tokens:
        if is_flag(token):
            if key is not None:
                out[key] = ""
            key = token[len(FLAG_MARKER):] or None
        elif key is not None:
            out[key] = token
            key = None
    if key is not None:
        out[key] = ""
    return out


def check_required(args: ParsedArgs, params: Iterable[Parameter]) -> None:
    """
    Every non-optional parameter must be present (empty value counts).

    Raises:
        MissingRequiredParameter: for the first missing one, in declaration order.
    """
    for param in params:
        if not param.optional and param.name not in args:
            raise MissingRequiredParameter(param.name, param.description)


def parse_args(tokens: Sequence[str], params: Iterable[Parameter] = ()) -> ParsedArgs:
    """Scan flags, then validate presence against the declared schema."""
    args = scan(tokens)
    check_required(args, params)
    return args
