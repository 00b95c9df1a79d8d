"""
Script commands: registry, argument helpers and the built-in command table.
"""

from novel_framework.commands.registry import Command, CommandRegistry
from novel_framework.commands.library import (
    CommandServices,
    LoadChapter,
    build_default_registry,
    default_commands,
)

__all__ = [
    "Command",
    "CommandRegistry",
    "CommandServices",
    "LoadChapter",
    "build_default_registry",
    "default_commands",
]
