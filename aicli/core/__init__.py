"""
Core — Data layer for ai-cli

- Registry: immutable command tree and path resolution
- Args: --flag parsing with absent/empty/value presence
- Auditlog: append-only JSON-lines history of mutating commands
- Resolver: "latest live id" per entity kind, replayed from the log
"""

from .registry import Parameter, Command, Namespace, Resolution, resolve, suggest, walk
from .args import ParsedArgs, Presence, parse_args, check_required
from .auditlog import AuditLog, LogEntry, truncate_long_strings, MAX_VALUE_LENGTH
from .resolver import (
    EntityKind, EntityResolver, KINDS, get_kind, scoped_to, latest_from,
    ASSISTANTS, THREADS, FILES, VECTORSTORES, RUNS,
)

__all__ = [
    # Registry
    "Parameter", "Command", "Namespace", "Resolution", "resolve", "suggest", "walk",
    # Args
    "ParsedArgs", "Presence", "parse_args", "check_required",
    # Audit log
    "AuditLog", "LogEntry", "truncate_long_strings", "MAX_VALUE_LENGTH",
    # Resolver
    "EntityKind", "EntityResolver", "KINDS", "get_kind", "scoped_to", "latest_from",
    "ASSISTANTS", "THREADS", "FILES", "VECTORSTORES", "RUNS",
]
