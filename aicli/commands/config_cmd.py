"""
ConfigCommand — Show and change user configuration

config show                      Effective configuration
config set --key K --value V     Persist one setting to ~/.aicli/config.yaml
"""

from ..config import SETTABLE_KEYS
from ..core.registry import Command, Namespace, Parameter
from ..errors import InvalidArgument
from .base import BaseCommand, bind


COMMAND_NAME = "config"


class ConfigCommand(BaseCommand):
    """User configuration."""

    def show(self, args):
        return self._cli.config_manager.display(self.symbols)

    def set(self, args):
        key, value = args["key"], args["value"]
        error = self._cli.config_manager.set(key, value)
        if error:
            raise InvalidArgument("value" if key in SETTABLE_KEYS else "key", error)
        return f"{self.symbols.check_pass} Set {key} = {value}"


def register() -> Namespace:
    """Declarative command table for the config namespace."""
    return Namespace.of(
        COMMAND_NAME,
        Command("show", handler=bind(ConfigCommand, "show"), description="Show configuration"),
        Command(
            "set",
            params=(
                Parameter("key", description="Setting, e.g. poll.interval"),
                Parameter("value", description="New value"),
            ),
            handler=bind(ConfigCommand, "set"),
            description="Change a setting",
        ),
        description="Configuration",
    )
