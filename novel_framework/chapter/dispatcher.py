"""
Action dispatcher - routes a line's trailing actions.

A few actions touch interpreter state directly and are handled here; every
other name goes to the command registry.
"""

from __future__ import annotations

import logging
from typing import Callable

from novel_framework.chapter.signals import AdvanceSignal
from novel_framework.commands.registry import CommandRegistry
from novel_framework.script.grammar import ActionCall
from novel_framework.state import NovelState

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Built-in actions:
        next()                  request an advance
        saveTempVal(i,value)    write value to scratch slot i (1..9)
        saveTempInput(i)        write the last accepted input to slot i
        savePlayerName()        keep the last accepted input as player name
    """

    def __init__(self, registry: CommandRegistry, state: NovelState, signal: AdvanceSignal):
        self.registry = registry
        self.state = state
        self.signal = signal

        self._builtins: dict[str, Callable[[str], None]] = {
            "next": self._next,
            "saveTempVal": self._save_temp_val,
            "saveTempInput": self._save_temp_input,
            "savePlayerName": self._save_player_name,
        }

    @property
    def builtin_names(self) -> list[str]:
        return list(self._builtins)

    def dispatch(self, call: ActionCall) -> bool:
        """
        Run one action.

        Returns:
            False if the name is unknown or the command failed
        """
        builtin = self._builtins.get(call.name)
        if builtin:
            logger.debug(f"Built-in {call}")
            builtin(call.args)
            return True
        return self.registry.dispatch(call.name, call.args)

    def dispatch_all(self, calls: list[ActionCall]) -> None:
        for call in calls:
            self.dispatch(call)

    def _next(self, args: str) -> None:
        self.signal.request()

    def _save_temp_val(self, args: str) -> None:
        parts = args.split(",")
        if len(parts) < 2:
            logger.warning(f"saveTempVal({args}): expected saveTempVal(index,value)")
            return
        slot = self.state.scratch.write(parts[0], parts[1])
        logger.debug(f"Scratch slot {slot + 1} = {self.state.scratch[slot]!r}")

    def _save_temp_input(self, args: str) -> None:
        slot = self.state.scratch.write(args, self.state.last_input)
        logger.debug(f"Scratch slot {slot + 1} = {self.state.scratch[slot]!r}")

    def _save_player_name(self, args: str) -> None:
        self.state.player_name = self.state.last_input
        logger.info(f"Player name set to {self.state.player_name!r}")
