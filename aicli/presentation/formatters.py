"""
Formatters — Data-to-string transformations for consistent output

- Remote results: ISO siblings for UNIX timestamps, pretty JSON
- Audit log entries: one-line previews with relative time
- Command tree: help text listing every resolvable path

Dependency direction: cli/commands → presentation → core
"""

import json
from datetime import datetime, timezone
from typing import Any, List, Optional, TYPE_CHECKING

from .symbols import SymbolSet, get_symbols

if TYPE_CHECKING:
    from ..core.auditlog import LogEntry
    from ..core.registry import Namespace


TIMESTAMP_KEYS = (
    "created_at",
    "expires_at",
    "expires_after",
    "last_active_at",
    "started_at",
    "completed_at",
    "cancelled_at",
    "failed_at",
)

PREVIEW_LENGTH = 60


def convert_timestamps_to_iso(data: Any) -> Any:
    """
    Deep copy of data with a ``<key>_iso`` sibling for each numeric
    UNIX timestamp field.
    """
    if isinstance(data, list):
        return [convert_timestamps_to_iso(item) for item in data]
    if isinstance(data, dict):
        out = {}
        for key, value in data.items():
            out[key] = convert_timestamps_to_iso(value)
            if key in TIMESTAMP_KEYS and isinstance(value, (int, float)) and not isinstance(value, bool):
                out[f"{key}_iso"] = datetime.fromtimestamp(value, tz=timezone.utc).isoformat()
        return out
    return data


def format_result(result: Any) -> str:
    """Strings print verbatim; everything else as indented JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(convert_timestamps_to_iso(result), indent=2, ensure_ascii=False, default=str)


def format_timestamp(iso_str: str) -> str:
    """
    Format ISO timestamp for display.

    Returns:
        - < 1 minute: "just now"
        - < 1 hour:   "23m ago"
        - < 24 hours: "5h ago"
        - < 7 days:   "3d ago"
        - >= 7 days:  "Jan 15"
        - Invalid:    "unknown"
    """
    if not iso_str:
        return "unknown"

    try:
        if iso_str.endswith('Z'):
            iso_str = iso_str[:-1] + '+00:00'
        ts = datetime.fromisoformat(iso_str)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
    except ValueError:
        return "unknown"

    total_seconds = (datetime.now(timezone.utc) - ts).total_seconds()
    if total_seconds < 60:
        return "just now"

    minutes = int(total_seconds // 60)
    hours = int(total_seconds // 3600)
    days = int(total_seconds // 86400)

    if days >= 7:
        return ts.strftime("%b %d")
    if days >= 1:
        return f"{days}d ago"
    if hours >= 1:
        return f"{hours}h ago"
    return f"{minutes}m ago"


def entry_preview(entry: 'LogEntry', symbols: Optional[SymbolSet] = None) -> str:
    """One line: time, command, and the id it created or touched."""
    symbols = symbols or get_symbols()
    result = entry.result
    if isinstance(result, dict) and isinstance(result.get("id"), str):
        target = result["id"]
    elif isinstance(entry.args.get("id"), str):
        target = entry.args["id"]
    elif isinstance(result, str):
        target = result
    else:
        target = ""

    if len(target) > PREVIEW_LENGTH:
        target = target[:PREVIEW_LENGTH] + symbols.ellipsis
    line = f"{format_timestamp(entry.timestamp):>10}  {entry.command}"
    if target:
        line += f" {symbols.arrow} {target}"
    return line


def render_command_tree(root: 'Namespace', program: str) -> str:
    """
    Every resolvable command path with its flags.

    Required flags are shown bare, optional ones in brackets.
    """
    from ..core.registry import walk

    lines: List[str] = []
    current_group = None
    for path, command in walk(root):
        group = path[0]
        if group != current_group:
            if current_group is not None:
                lines.append("")
            current_group = group
        usage = " ".join([program, *path])
        if command.params:
            usage += " " + command.usage
        lines.append(f"  {usage}")
    return "\n".join(lines)
