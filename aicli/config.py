"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables
  2. User config (~/.aicli/config.yaml)
  3. Defaults

The API key is NEVER stored in config files.
Only the name of the environment variable that holds it is configurable.
"""

import os
import sys
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .errors import ConfigError


APP_NAME = "ai-cli"
LOG_FILE_NAME = "cli.log"

DEFAULT_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_MODEL = "gpt-4.1"
DEFAULT_INSTRUCTIONS = "You are a helpful assistant."


def default_log_path() -> Path:
    """Platform's per-user log directory for this tool."""
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Logs" / APP_NAME / LOG_FILE_NAME
    if sys.platform.startswith("win"):
        base = os.environ.get("LOCALAPPDATA")
        root = Path(base) if base else home / "AppData" / "Local"
        return root / APP_NAME / "Logs" / LOG_FILE_NAME
    state = os.environ.get("XDG_STATE_HOME")
    root = Path(state) if state else home / ".local" / "state"
    return root / APP_NAME / LOG_FILE_NAME


@dataclass
class ApiConfig:
    """Remote API settings."""
    key_env: str = DEFAULT_KEY_ENV
    base_url: Optional[str] = None
    default_model: str = DEFAULT_MODEL
    default_instructions: str = DEFAULT_INSTRUCTIONS

    @property
    def api_key(self) -> Optional[str]:
        """Get API key from environment. Never stored, never logged."""
        return os.environ.get(self.key_env)

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.key_env:
            return "api.key_env must name an environment variable"
        if not self.default_model:
            return "api.default_model cannot be empty"
        return None


@dataclass
class LogConfig:
    """Audit log location."""
    path: Path = field(default_factory=default_log_path)

    def validate(self) -> Optional[str]:
        if not str(self.path):
            return "log.path cannot be empty"
        return None


@dataclass
class PollConfig:
    """Poll loop pacing for long-running remote operations."""
    interval: float = 1.0
    backoff: float = 1.5
    max_interval: float = 10.0
    max_attempts: int = 120

    def validate(self) -> Optional[str]:
        if self.interval <= 0:
            return f"poll.interval must be positive, got {self.interval}"
        if self.backoff < 1:
            return f"poll.backoff must be >= 1, got {self.backoff}"
        if self.max_interval < self.interval:
            return "poll.max_interval must be >= poll.interval"
        if self.max_attempts < 1:
            return f"poll.max_attempts must be >= 1, got {self.max_attempts}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    api: ApiConfig = field(default_factory=ApiConfig)
    log: LogConfig = field(default_factory=LogConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> Optional[str]:
        for section in (self.api, self.log, self.poll, self.display):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "api": {
                "key_env": self.api.key_env,
                "base_url": self.api.base_url,
                "default_model": self.api.default_model,
                "default_instructions": self.api.default_instructions,
            },
            "log": {
                "path": str(self.log.path),
            },
            "poll": {
                "interval": self.poll.interval,
                "backoff": self.poll.backoff,
                "max_interval": self.poll.max_interval,
                "max_attempts": self.poll.max_attempts,
            },
            "display": {
                "symbols": self.display.symbols,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """
        Create from dictionary.

        Sections that are not mappings are ignored.

        Raises:
            ConfigError: a value cannot be coerced to its setting's type.
        """
        api_data = _section(data, "api")
        log_data = _section(data, "log")
        poll_data = _section(data, "poll")
        display_data = _section(data, "display")

        log_path = _value(log_data, "log.path", str, None)
        base_url = _value(api_data, "api.base_url", str, None)
        return cls(
            api=ApiConfig(
                key_env=_value(api_data, "api.key_env", str, DEFAULT_KEY_ENV),
                base_url=base_url or None,
                default_model=_value(api_data, "api.default_model", str, DEFAULT_MODEL),
                default_instructions=_value(api_data, "api.default_instructions", str, DEFAULT_INSTRUCTIONS),
            ),
            log=LogConfig(
                path=Path(log_path).expanduser() if log_path else default_log_path(),
            ),
            poll=PollConfig(
                interval=_value(poll_data, "poll.interval", float, 1.0),
                backoff=_value(poll_data, "poll.backoff", float, 1.5),
                max_interval=_value(poll_data, "poll.max_interval", float, 10.0),
                max_attempts=_value(poll_data, "poll.max_attempts", int, 120),
            ),
            display=DisplayConfig(
                symbols=_value(display_data, "display.symbols", str, "auto"),
            ),
        )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name)
    return section if isinstance(section, dict) else {}


def _writable_section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """data[name] as a dict, replacing a non-mapping value."""
    if not isinstance(data.get(name), dict):
        data[name] = {}
    return data[name]


def _value(section: Dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """section[setting] coerced to ``kind``; ``default`` when unset."""
    raw = section.get(key.split(".")[1])
    if raw is None:
        return default
    try:
        return kind(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {key}: {raw!r} (expected {kind.__name__})") from None


# Settable keys and the type each raw string is coerced to
SETTABLE_KEYS = {
    "api.key_env": str,
    "api.base_url": str,
    "api.default_model": str,
    "api.default_instructions": str,
    "log.path": str,
    "poll.interval": float,
    "poll.backoff": float,
    "poll.max_interval": float,
    "poll.max_attempts": int,
    "display.symbols": str,
}


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment overrides (AICLI_*)
      2. User config (~/.aicli/config.yaml)
      3. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".aicli"
    USER_CONFIG_FILE = "config.yaml"

    ENV_OVERRIDES = {
        "AICLI_LOG_PATH": ("log", "path"),
        "AICLI_MODEL": ("api", "default_model"),
        "AICLI_POLL_INTERVAL": ("poll", "interval"),
        "AICLI_POLL_MAX_ATTEMPTS": ("poll", "max_attempts"),
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else self.USER_CONFIG_DIR
        self._config: Optional[Config] = None

    @property
    def user_config_path(self) -> Path:
        return self.config_dir / self.USER_CONFIG_FILE

    def _read_user_data(self) -> Dict[str, Any]:
        if not self.user_config_path.exists():
            return {}
        try:
            with open(self.user_config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return {}  # Ignore malformed user config
        return data if isinstance(data, dict) else {}

    def load(self) -> Config:
        """
        Load configuration from all sources.

        Raises:
            ConfigError: a value is of the wrong type or fails validation.
        """
        if self._config is not None:
            return self._config

        config_data = self._read_user_data()

        for env_name, (section, setting) in self.ENV_OVERRIDES.items():
            if os.environ.get(env_name):
                _writable_section(config_data, section)[setting] = os.environ[env_name]

        config = Config.from_dict(config_data)
        error = config.validate()
        if error:
            raise ConfigError(f"{error} (check {self.user_config_path} and AICLI_* variables)")

        self._config = config
        return self._config

    def save(self, config: Config):
        """Save configuration to the user config file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str) -> Optional[str]:
        """
        Set a configuration value in the user config file.

        Args:
            key: Dot-separated key (e.g., "poll.interval")
            value: Raw string value

        Returns:
            Error message or None if successful
        """
        if key not in SETTABLE_KEYS:
            return f"Unknown key: {key}. Valid: {', '.join(SETTABLE_KEYS)}"

        try:
            coerced = SETTABLE_KEYS[key](value)
        except ValueError:
            return f"Invalid value for {key}: {value!r}"

        # Only file-backed values are persisted, not environment overrides
        data = self._read_user_data()
        section, setting = key.split(".")
        _writable_section(data, section)[setting] = coerced
        try:
            config = Config.from_dict(data)
        except ConfigError as e:
            return e.message

        error = config.validate()
        if error:
            return error

        self.save(config)
        return None

    def display(self, symbols=None) -> str:
        """Format config for display."""
        config = self.load()
        if symbols is None:
            from .presentation.symbols import get_symbols
            symbols = get_symbols(config.display.symbols)

        key_status = f"{symbols.check_pass} Set" if config.api.is_available else f"{symbols.check_fail} Missing"
        lines = [
            "Configuration:",
            "",
            "API:",
            f"  Key: {key_status} (${config.api.key_env})",
            f"  Base URL: {config.api.base_url or 'default'}",
            f"  Default model: {config.api.default_model}",
            f"  Default instructions: {config.api.default_instructions}",
            "",
            "Log:",
            f"  Path: {config.log.path}",
            "",
            "Poll:",
            f"  Interval: {config.poll.interval}s (x{config.poll.backoff}, max {config.poll.max_interval}s)",
            f"  Max attempts: {config.poll.max_attempts}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            "",
            "Config file:",
            f"  User: {self.user_config_path}",
        ]
        return "\n".join(lines)
