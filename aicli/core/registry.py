"""
Command Registry — Immutable command tree and path resolution

The tree is a tagged variant:
- Namespace: internal node, maps segment name -> child node
- Command:   executable leaf, parameter schema + handler

Built once at startup from declarative tables (see commands/).
Read-only thereafter: children are exposed through MappingProxyType.

Resolution is greedy, left to right, exact (case-sensitive) segment match.
The first Command reached terminates path consumption.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Optional, Sequence, Tuple, Union

from rapidfuzz import fuzz, process

from ..errors import UnknownCommand


# Minimum rapidfuzz ratio for a did-you-mean suggestion
SUGGESTION_CUTOFF = 60


@dataclass(frozen=True)
class Parameter:
    """
    One declared flag of a command.

    ``latest`` names an entity kind: when the flag is absent or given
    with an empty value, the dispatcher fills it from the audit log.
    ``scope`` names another parameter whose value narrows that lookup
    (e.g. the latest run *of a given thread*).
    """
    name: str
    optional: bool = False
    description: str = ""
    latest: Optional[str] = None
    scope: Optional[str] = None

    @property
    def usage(self) -> str:
        """Flag as shown in help: --name or [--name]."""
        return f"[--{self.name}]" if self.optional else f"--{self.name}"


@dataclass(frozen=True)
class Command:
    """Executable leaf. ``audited`` commands are appended to the audit log."""
    name: str
    params: Tuple[Parameter, ...] = ()
    handler: Optional[Callable] = None
    description: str = ""
    audited: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'params', tuple(self.params))
        seen = set()
        for param in self.params:
            if param.name in seen:
                raise ValueError(f"Duplicate parameter '{param.name}' in command '{self.name}'")
            seen.add(param.name)
        if self.handler is None:
            raise ValueError(f"Command '{self.name}' has no handler")

    @property
    def usage(self) -> str:
        return " ".join(p.usage for p in self.params)


@dataclass(frozen=True)
class Namespace:
    """Internal node. Has no handler; every child is keyed by its segment name."""
    name: str
    children: Mapping[str, 'CommandNode'] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'children', MappingProxyType(dict(self.children)))

    @classmethod
    def of(cls, name: str, *nodes: 'CommandNode', description: str = "") -> 'Namespace':
        """Build a namespace from child nodes, rejecting duplicate segment names."""
        children = {}
        for node in nodes:
            if node.name in children:
                raise ValueError(f"Duplicate segment '{node.name}' under '{name or '<root>'}'")
            children[node.name] = node
        return cls(name=name, children=children, description=description)


CommandNode = Union[Namespace, Command]


@dataclass(frozen=True)
class Resolution:
    """Outcome of a successful path resolution."""
    path: Tuple[str, ...]
    command: Command
    remainder: Tuple[str, ...]

    @property
    def dotted(self) -> str:
        """Dot-joined path, as recorded in LogEntry.command."""
        return ".".join(self.path)


def suggest(token: str, names: Sequence[str]) -> Optional[str]:
    """Closest known segment to a mistyped one, or None."""
    if not token or not names:
        return None
    match = process.extractOne(token, list(names), scorer=fuzz.ratio,
                               score_cutoff=SUGGESTION_CUTOFF)
    return match[0] if match else None


def resolve(root: Namespace, tokens: Sequence[str]) -> Resolution:
    """
    Map a token sequence to exactly one command.

    Consumes tokens while the current node is a Namespace whose children
    contain the next token. Stops at the first Command.

    Raises:
        UnknownCommand: resolution ended on a Namespace (no tokens left or
            the next token names no child). Carries the consumed segments.
    """
    node: CommandNode = root
    path = []
    index = 0

    while isinstance(node, Namespace):
        if index >= len(tokens):
            raise UnknownCommand(path)
        token = tokens[index]
        child = node.children.get(token)
        if child is None:
            raise UnknownCommand(path, token, suggest(token, list(node.children)))
        path.append(token)
        node = child
        index += 1

    return Resolution(path=tuple(path), command=node, remainder=tuple(tokens[index:]))


def walk(node: CommandNode, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Command]]:
    """Yield (path, command) for every leaf, depth-first, in registration order."""
    if isinstance(node, Command):
        yield prefix, node
        return
    for name, child in node.children.items():
        yield from walk(child, prefix + (name,))
