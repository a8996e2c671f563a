"""
CLI -- Command dispatcher

One command per process:
    tokens -> resolve path -> parse flags -> fill latest ids
           -> run handler -> append to history log -> print result

Exit codes:
    0  success, or help was requested
    1  unknown command, missing/invalid parameter, no recent entity,
       any failure raised by the handler (remote errors included),
       or an unusable configuration
    130 interrupted
"""

import sys
import time
from typing import List, Optional, Sequence

from .commands import build_registry
from .config import ConfigManager
from .content import HELP_FOOTER, HELP_HEADER
from .core.args import ParsedArgs, parse_args
from .core.auditlog import AuditLog
from .core.registry import Command, Namespace, resolve
from .core.resolver import EntityResolver, scoped_to
from .errors import AiCliError, UnknownCommand
from .presentation.formatters import format_result, render_command_tree
from .presentation.symbols import get_symbols, safe_print, warn
from .services.client import Poller, create_client, remote_errors
from . import __version__


PROGRAM = "ai-cli"
HELP_FLAG = "--help"
VERSION_FLAG = "--version"


class AiCLI:
    """Holds shared resources and runs exactly one command."""

    def __init__(self, config_manager: Optional[ConfigManager] = None, client=None,
                 registry: Optional[Namespace] = None, sleep=time.sleep):
        self.config_manager = config_manager or ConfigManager()
        self.config = self.config_manager.load()
        self.symbols = get_symbols(self.config.display.symbols)

        self.log = AuditLog(self.config.log.path, on_warning=self._warn)
        self.resolver = EntityResolver(self.log)
        self.poller = Poller(self.config.poll, sleep=sleep, on_progress=self._progress)

        # Assembled once; read-only for the rest of the process
        self.registry = registry or build_registry()

        self._client = client

    @property
    def client(self):
        """OpenAI client, built on first use so help and local commands need no key."""
        if self._client is None:
            self._client = create_client(self.config.api)
        return self._client

    def _warn(self, message: str):
        warn(message, self.symbols)

    def _progress(self, message: str):
        safe_print(f"{self.symbols.waiting} {message}", file=sys.stderr)

    def _error(self, message: str):
        safe_print(f"Error: {message}", file=sys.stderr)

    # -------------------------------------------------------------------------
    # Help
    # -------------------------------------------------------------------------

    def help_text(self) -> str:
        return HELP_HEADER + render_command_tree(self.registry, PROGRAM) + "\n" + HELP_FOOTER

    def print_help(self):
        safe_print(self.help_text())

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def apply_fallbacks(self, command: Command, args: ParsedArgs) -> ParsedArgs:
        """
        Fill id parameters left absent or empty from the history log.

        Parameters are handled in declaration order, so a scoping
        parameter (thread_id) is concrete before the one it scopes (run_id).

        Raises:
            NoRecentEntity: no live id of the required kind.
        """
        for param in command.params:
            if param.latest is None or args.has_value(param.name):
                continue
            where = None
            scope = None
            if param.scope and args.has_value(param.scope):
                where = scoped_to(param.scope, args[param.scope])
                scope = f"{param.scope} {args[param.scope]}"
            args[param.name] = self.resolver.require(param.latest, where, flag=param.name, scope=scope)
        return args

    def run(self, tokens: Sequence[str]) -> int:
        """Execute one invocation. Returns the process exit code."""
        tokens = list(tokens)

        if not tokens or HELP_FLAG in tokens:
            self.print_help()
            return 0
        if tokens == [VERSION_FLAG]:
            safe_print(f"{PROGRAM} {__version__}")
            return 0

        try:
            resolution = resolve(self.registry, tokens)
        except UnknownCommand as e:
            self._error(e.message)
            self.print_help()
            return 1

        command = resolution.command
        try:
            args = parse_args(resolution.remainder, command.params)
            args = self.apply_fallbacks(command, args)
            with remote_errors():
                result = command.handler(self, args)
        except AiCliError as e:
            self._error(e.message)
            return 1
        except Exception as e:
            self._error(str(e) or type(e).__name__)
            return 1

        if command.audited:
            self.log.append(resolution.dotted, dict(args), result)

        if result is not None:
            safe_print(format_result(result))
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for ai-cli.

    The command tree is built from the declarative tables in commands/.
    """
    tokens = sys.argv[1:] if argv is None else argv
    try:
        cli = AiCLI()
    except AiCliError as e:
        safe_print(f"Error: {e.message}", file=sys.stderr)
        return 1
    try:
        return cli.run(tokens)
    except KeyboardInterrupt:
        safe_print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
