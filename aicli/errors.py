"""
Errors — Failure taxonomy for the dispatcher

Every fatal error carries a single human-readable line in ``message``.
The dispatcher catches AiCliError once, prints the message to stderr,
and exits 1. LoggingFailure is the exception: it is caught inside the
audit log and only ever surfaces as a warning.
"""

from typing import Optional, Sequence


class AiCliError(Exception):
    """Base class for all errors the dispatcher knows how to report."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnknownCommand(AiCliError):
    """
    Raised when a token sequence does not resolve to an executable command.

    Carries the segments consumed before resolution stopped so the
    operator sees how far the path got.
    """

    def __init__(self, partial_path: Sequence[str], token: Optional[str] = None,
                 suggestion: Optional[str] = None):
        self.partial_path = tuple(partial_path)
        self.token = token
        self.suggestion = suggestion
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        shown = list(self.partial_path)
        if self.token is not None:
            shown.append(self.token)
        text = " ".join(shown) if shown else "(none)"
        message = f"Unknown command: {text}"
        if self.suggestion:
            message += f" (did you mean '{self.suggestion}'?)"
        return message


class MissingRequiredParameter(AiCliError):
    """Raised when a required flag is absent from the parsed arguments."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        message = f"Missing required parameter: --{name}"
        if description:
            message += f" ({description})"
        super().__init__(message)


class NoRecentEntity(AiCliError):
    """Raised when the audit log holds no live identifier of the requested kind."""

    def __init__(self, kind: str, label: Optional[str] = None, flag: Optional[str] = None,
                 scope: Optional[str] = None):
        self.kind = kind
        self.label = label or kind
        self.flag = flag
        self.scope = scope
        message = f"No recent {self.label} found in the log"
        if scope:
            message += f" for {scope}"
        if flag:
            message += f"; pass --{flag} <id> explicitly"
        else:
            message += "; pass an explicit id"
        super().__init__(message)


class InvalidArgument(AiCliError):
    """Raised by handlers when a raw string value cannot be coerced."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid value for --{name}: {reason}")


class ExternalOperationFailure(AiCliError):
    """Opaque failure surfaced from the remote API or its poll loop."""


class LoggingFailure(AiCliError):
    """Audit log could not be written. Never escapes AuditLog.append()."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Logging failed ({path}): {cause}")


class ConfigError(AiCliError):
    """Configuration (user file or AICLI_* environment) holds an unusable value."""
