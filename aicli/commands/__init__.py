"""
Commands — Declarative command tables, one module per namespace

Each command module:
1. Defines XxxCommand classes (handler implementations)
2. Exports register() returning its Namespace (parameters + handlers)

build_registry() assembles the root once at startup. The result is
immutable; there is no runtime registration.
"""

import importlib

from ..core.registry import Namespace
from .base import BaseCommand

# Command modules that participate in the tree
# Order determines help display order
COMMAND_MODULES = [
    # Entity kinds
    'assistants',
    'threads',
    'files',
    'vectorstores',
    # Local tools
    'log_cmd',
    'config_cmd',
]


def build_registry() -> Namespace:
    """Import every module in COMMAND_MODULES and join their namespaces under one root."""
    namespaces = []
    for module_name in COMMAND_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)
        namespaces.append(module.register())
    return Namespace.of("", *namespaces)


__all__ = ['BaseCommand', 'build_registry', 'COMMAND_MODULES']
