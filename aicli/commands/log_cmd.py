"""
LogCommand — Inspect the history log

log path    Where the log lives
log tail    Most recent entries, with relative time
log latest  Current latest pointer per entity kind (what id fallbacks resolve to)
"""

from ..core.registry import Command, Namespace, Parameter
from ..core.resolver import KINDS
from ..errors import InvalidArgument
from ..presentation.formatters import entry_preview
from .base import BaseCommand, bind, int_arg


COMMAND_NAME = "log"


class LogCommand(BaseCommand):
    """Read-only views over the audit log."""

    def path(self, args):
        return str(self.log.path)

    def tail(self, args):
        limit = int_arg(args, "limit", default=10)
        entries = self.log.tail(limit)
        if not entries:
            return f"No entries in {self.log.path}"
        return "\n".join(entry_preview(e, self.symbols) for e in entries)

    def latest(self, args):
        kind = args.value_or("kind")
        if kind is not None and kind not in KINDS:
            raise InvalidArgument("kind", f"unknown kind '{kind}'. Valid: {', '.join(KINDS)}")

        snapshot = self.resolver.snapshot()
        if kind is not None:
            return snapshot[kind] or f"No recent {KINDS[kind].label}"

        width = max(len(k) for k in snapshot)
        lines = []
        for key, value in snapshot.items():
            lines.append(f"  {key:<{width}}  {value or '-'}")
        return "\n".join(lines)


def register() -> Namespace:
    """Declarative command table for the log namespace."""
    return Namespace.of(
        COMMAND_NAME,
        Command("path", handler=bind(LogCommand, "path"), description="Show the log file location"),
        Command(
            "tail",
            params=(Parameter("limit", optional=True, description="Number of entries (default 10)"),),
            handler=bind(LogCommand, "tail"),
            description="Show recent entries",
        ),
        Command(
            "latest",
            params=(Parameter("kind", optional=True,
                              description=f"One of: {', '.join(KINDS)} (default: all)"),),
            handler=bind(LogCommand, "latest"),
            description="Show the latest live id per kind",
        ),
        description="History log",
    )
