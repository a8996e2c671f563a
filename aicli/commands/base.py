"""
BaseCommand — Shared foundation for all command handlers

Provides access to CLI resources via composition, plus the coercion
helpers that turn raw flag strings into API arguments.

Handlers receive ParsedArgs (str -> str). Entity fallbacks have already
been applied by the dispatcher, so an id parameter declared with
``latest=`` always holds a concrete id by the time a handler runs.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..core.args import ParsedArgs
from ..errors import InvalidArgument

if TYPE_CHECKING:
    from ..cli import AiCLI


class BaseCommand:
    """
    Base class for commands with access to shared resources.

    Commands don't build clients or open logs, they reach them via the CLI instance.
    """

    def __init__(self, cli: 'AiCLI'):
        self._cli = cli

    @property
    def client(self):
        """OpenAI SDK client (built on first use)."""
        return self._cli.client

    @property
    def config(self):
        return self._cli.config

    @property
    def log(self):
        """Audit log."""
        return self._cli.log

    @property
    def resolver(self):
        """Entity resolver over the audit log."""
        return self._cli.resolver

    @property
    def poller(self):
        return self._cli.poller

    @property
    def symbols(self):
        return self._cli.symbols


def bind(command_class, method: str) -> Callable[['AiCLI', ParsedArgs], Any]:
    """Handler that instantiates ``command_class`` and calls ``method(args)``."""
    def handler(cli, args):
        return getattr(command_class(cli), method)(args)
    handler.__name__ = f"{command_class.__name__}.{method}"
    return handler


# -----------------------------------------------------------------------------
# Coercion helpers (raw string -> API value)
# -----------------------------------------------------------------------------

def int_arg(args: ParsedArgs, name: str, default: Optional[int] = None) -> Optional[int]:
    raw = args.value_or(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgument(name, f"expected an integer, got {raw!r}") from None


def json_arg(args: ParsedArgs, name: str, default: Any = None, expect: Optional[type] = None) -> Any:
    raw = args.value_or(name)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidArgument(name, f"not valid JSON ({e.msg})") from None
    if expect is not None and not isinstance(value, expect):
        raise InvalidArgument(name, f"expected a JSON {expect.__name__}")
    return value


def list_arg(args: ParsedArgs, name: str) -> Optional[List[str]]:
    """JSON array, or a comma-separated list."""
    raw = args.value_or(name)
    if raw is None:
        return None
    if raw.lstrip().startswith("["):
        values = json_arg(args, name, expect=list)
        return [str(v) for v in values]
    return [part.strip() for part in raw.split(",") if part.strip()]


def pick(args: ParsedArgs, *names: str) -> Dict[str, str]:
    """Subset of args that were given with a value."""
    return {name: args[name] for name in names if args.has_value(name)}
