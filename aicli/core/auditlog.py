"""
Audit Log — Append-only record of every mutating command

One JSON object per line, UTF-8, oldest first. Entries are never
rewritten. The log is the only source of truth for "latest" pointers;
there is no index or cache beside it.

append() never aborts the invoking command: write failures become a
warning. replay() never aborts either: unreadable files yield nothing
and malformed lines are skipped.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

import orjson

from ..errors import LoggingFailure


MAX_VALUE_LENGTH = 100
TRUNCATION_MARKER = "..."


def truncate_long_strings(value: Any, max_length: int = MAX_VALUE_LENGTH) -> Any:
    """
    Cut string leaves longer than max_length, appending TRUNCATION_MARKER.

    Recurses through lists, tuples and dicts. Anything else (numbers,
    booleans, None) passes through untouched.
    """
    if isinstance(value, str):
        if len(value) > max_length:
            return value[:max_length] + TRUNCATION_MARKER
        return value
    if isinstance(value, (list, tuple)):
        return [truncate_long_strings(item, max_length) for item in value]
    if isinstance(value, dict):
        return {key: truncate_long_strings(item, max_length) for key, item in value.items()}
    return value


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LogEntry:
    command: str
    args: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "command": self.command,
            "args": self.args,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LogEntry':
        """Raises KeyError/TypeError on anything that is not an entry."""
        command = d['command']
        if not isinstance(command, str):
            raise TypeError("command must be a string")
        args = d.get('args') or {}
        if not isinstance(args, dict):
            args = {}
        return cls(
            command=command,
            args=args,
            result=d.get('result'),
            timestamp=str(d.get('timestamp', '')),
        )


class AuditLog:
    """
    Append-only log file shared across CLI invocations.

    No locking: concurrent appends may interleave. The per-line
    parse-or-skip policy in replay() is the only mitigation.
    """

    def __init__(self, path: Path, on_warning: Optional[Callable[[str], None]] = None):
        self.path = Path(path)
        self._on_warning = on_warning

    def append(self, command: str, args: Optional[Dict[str, Any]] = None,
               result: Any = None) -> Optional[LogEntry]:
        """
        Record one entry. Returns it, or None if it could not be written.

        Long string values are truncated before serialization.
        """
        entry = LogEntry(
            command=command,
            args=truncate_long_strings(dict(args or {})),
            result=truncate_long_strings(result),
        )
        try:
            self._write(entry)
        except LoggingFailure as e:
            self._warn(e.message)
            return None
        return entry

    def _write(self, entry: LogEntry) -> None:
        try:
            line = orjson.dumps(entry.to_dict(), default=str) + b"\n"
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'ab') as f:
                f.write(line)
        except (OSError, TypeError) as e:
            raise LoggingFailure(self.path, e) from e

    def _warn(self, message: str) -> None:
        if self._on_warning is not None:
            self._on_warning(message)
        else:
            from ..presentation.symbols import warn
            warn(message)

    def replay(self) -> List[LogEntry]:
        """All entries in file order (oldest first)."""
        return list(self.iter_entries())

    def iter_entries(self) -> Iterator[LogEntry]:
        try:
            raw = self.path.read_bytes()
        except OSError:
            return
        for line in raw.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
                if not isinstance(data, dict):
                    continue
                yield LogEntry.from_dict(data)
            except (orjson.JSONDecodeError, KeyError, TypeError):
                continue  # Skip malformed lines

    def tail(self, limit: int = 10) -> List[LogEntry]:
        """Most recent entries, oldest of them first."""
        if limit <= 0:
            return []
        return self.replay()[-limit:]
