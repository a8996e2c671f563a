"""
ai-cli — Command-line front end for the OpenAI Assistants API

Every successful create/update/delete is appended to a local history log,
so later commands can leave out ids and get the most recent live one.

Usage:
    ai-cli assistants create --name "Helper"
    ai-cli threads create
    ai-cli threads messages create --role user --content "Hello"
    ai-cli threads runs createandpoll
    ai-cli threads ask --question "What changed?"
    ai-cli vectorstores filebatches uploadandpoll --paths ./docs
    ai-cli log latest
    ai-cli config show
"""

__version__ = "0.1.0"

# Core layer
from .core.registry import Parameter, Command, Namespace, Resolution, resolve, walk
from .core.args import ParsedArgs, Presence, parse_args
from .core.auditlog import AuditLog, LogEntry, truncate_long_strings
from .core.resolver import EntityKind, EntityResolver, KINDS, get_kind

# Services layer
from .services.client import Poller, create_client, to_plain

# Presentation layer
from .presentation.symbols import get_symbols, SymbolSet, UNICODE, ASCII

# Config (stays at root)
from .config import Config, ConfigManager

# Errors
from .errors import (
    AiCliError, UnknownCommand, MissingRequiredParameter, NoRecentEntity,
    InvalidArgument, ExternalOperationFailure, LoggingFailure, ConfigError,
)

__all__ = [
    # Core
    'Parameter', 'Command', 'Namespace', 'Resolution', 'resolve', 'walk',
    'ParsedArgs', 'Presence', 'parse_args',
    'AuditLog', 'LogEntry', 'truncate_long_strings',
    'EntityKind', 'EntityResolver', 'KINDS', 'get_kind',
    # Services
    'Poller', 'create_client', 'to_plain',
    # Presentation
    'get_symbols', 'SymbolSet', 'UNICODE', 'ASCII',
    # Config
    'Config', 'ConfigManager',
    # Errors
    'AiCliError', 'UnknownCommand', 'MissingRequiredParameter', 'NoRecentEntity',
    'InvalidArgument', 'ExternalOperationFailure', 'LoggingFailure', 'ConfigError',
]
