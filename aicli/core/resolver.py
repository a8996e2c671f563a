"""
Entity Resolver — "Latest" identifiers derived from the audit log

For a kind K, the latest pointer is the id from the most recent
K-create entry whose result carries a string id, excluding any id named
as args.id by a K-delete entry anywhere in the log.

Derived, never stored: every lookup is one full replay. A single forward
pass collects both the create candidates and the deleted ids; the answer
is picked only after the whole log has been seen, so a delete recorded
after a create always wins.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import NoRecentEntity
from .auditlog import AuditLog, LogEntry


CREATE_VERBS = ("create", "createandpoll")
DELETE_VERBS = ("delete",)

EntryFilter = Callable[[LogEntry], bool]


@dataclass(frozen=True)
class EntityKind:
    """A category of remote resource, keyed by its command-path prefix."""
    key: str
    prefix: str
    label: str

    def is_create(self, entry: LogEntry) -> bool:
        return self._matches(entry, CREATE_VERBS)

    def is_delete(self, entry: LogEntry) -> bool:
        return self._matches(entry, DELETE_VERBS)

    def _matches(self, entry: LogEntry, verbs) -> bool:
        head, _, verb = entry.command.rpartition(".")
        return head == self.prefix and verb in verbs


ASSISTANTS = EntityKind("assistants", "assistants", "assistant")
THREADS = EntityKind("threads", "threads", "thread")
FILES = EntityKind("files", "files", "file")
VECTORSTORES = EntityKind("vectorstores", "vectorstores", "vector store")
RUNS = EntityKind("runs", "threads.runs", "run")

KINDS: Dict[str, EntityKind] = {
    kind.key: kind for kind in (ASSISTANTS, THREADS, FILES, VECTORSTORES, RUNS)
}


def get_kind(key: str) -> EntityKind:
    try:
        return KINDS[key]
    except KeyError:
        raise KeyError(f"Unknown entity kind: {key}. Available: {', '.join(KINDS)}") from None


def _string_field(data, name: str) -> Optional[str]:
    if isinstance(data, dict):
        value = data.get(name)
        if isinstance(value, str):
            return value
    return None


def scoped_to(field: str, value: str) -> EntryFilter:
    """
    Match create entries that belong to a parent resource.

    Checks the created object's own field first (e.g. a run's thread_id),
    then the argument of the same name it was created with.
    """
    def matches(entry: LogEntry) -> bool:
        owner = _string_field(entry.result, field) or _string_field(entry.args, field)
        return owner == value
    return matches


def latest_from(entries: Iterable[LogEntry], kind: EntityKind,
                where: Optional[EntryFilter] = None) -> Optional[str]:
    """Pure replay step: latest live id of ``kind`` over ``entries``."""
    deleted = set()
    created: List[str] = []

    for entry in entries:
        if kind.is_delete(entry):
            target = _string_field(entry.args, "id")
            if target is not None:
                deleted.add(target)
        elif kind.is_create(entry):
            if where is not None and not where(entry):
                continue
            new_id = _string_field(entry.result, "id")
            if new_id is not None:
                created.append(new_id)

    for candidate in reversed(created):
        if candidate not in deleted:
            return candidate
    return None


class EntityResolver:
    """Answers "latest live id of kind K" by replaying the audit log."""

    def __init__(self, log: AuditLog):
        self.log = log

    def latest_id(self, kind, where: Optional[EntryFilter] = None) -> Optional[str]:
        """
        Latest live id, or None.

        Args:
            kind: EntityKind or its key ("threads", "runs", ...)
            where: Extra predicate a create entry must satisfy
        """
        if isinstance(kind, str):
            kind = get_kind(kind)
        return latest_from(self.log.replay(), kind, where)

    def require(self, kind, where: Optional[EntryFilter] = None,
                flag: Optional[str] = None, scope: Optional[str] = None) -> str:
        """
        Latest live id, or an actionable error.

        Raises:
            NoRecentEntity: naming the kind (and the flag to pass instead).
        """
        if isinstance(kind, str):
            kind = get_kind(kind)
        found = self.latest_id(kind, where)
        if found is None:
            raise NoRecentEntity(kind.key, label=kind.label, flag=flag, scope=scope)
        return found

    def snapshot(self) -> Dict[str, Optional[str]]:
        """Latest pointer for every kind, from one replay."""
        entries = self.log.replay()
        return {key: latest_from(entries, kind) for key, kind in KINDS.items()}
