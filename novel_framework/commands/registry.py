"""
Command registry - maps script command names to handlers.

Commands are registered explicitly once at startup. Dispatch never raises:
an unknown name or a failing handler is logged and the script carries on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from novel_framework.errors import DuplicateCommandError

logger = logging.getLogger(__name__)


class Command(ABC):
    """
    Base class for script commands.

    Subclasses set ``name`` (the dispatch key) and implement execute(),
    which parses its own argument string.
    """

    name: str = ""

    @abstractmethod
    def execute(self, args: str) -> None:
        """Run the command with its raw argument string."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class CommandRegistry:
    """
    Name to Command catalog.

    Usage:
        registry = CommandRegistry()
        registry.register(PlayMusic(services))
        registry.dispatch("playMusic", "theme")
    """

    def __init__(self, commands: Iterable[Command] = ()):
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        """
        Add a command.

        Raises:
            DuplicateCommandError: If the name is already taken
        """
        if not command.name:
            raise ValueError(f"{command!r} has no name")
        if command.name in self._commands:
            raise DuplicateCommandError(
                f"Command '{command.name}' is already registered "
                f"({self._commands[command.name]!r})"
            )
        self._commands[command.name] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def names(self) -> list[str]:
        return sorted(self._commands)

    def dispatch(self, name: str, args: str = "") -> bool:
        """
        Run the named command.

        Returns:
            True if a command with that name exists and ran
        """
        command = self._commands.get(name)
        if command is None:
            logger.warning(f"Unknown command: {name}({args})")
            return False

        logger.debug(f"Dispatch {name}({args})")
        try:
            command.execute(args)
        except Exception:
            logger.exception(f"Command {name}({args}) failed")
            return False
        return True

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
