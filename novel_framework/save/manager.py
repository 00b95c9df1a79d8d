"""
Save/Load - persists chapter progress to JSON slots.

A save holds what is needed to resume a chapter: chapter name, chapter
progress, the cached last speaker and the scratch store, plus the player
name. Files carry a SHA-256 checksum and are validated with pydantic on load.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from novel_engine.core.actions import Action
from novel_engine.core.events import EventBus
from novel_engine.input.handler import InputHandler
from novel_framework.chapter.controller import ChapterSnapshot, NovelController
from novel_framework.state import ScratchStore

logger = logging.getLogger(__name__)


class SaveEvent(Enum):
    """Save system events."""
    SAVE_STARTED = auto()
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_STARTED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()


class GameFile(BaseModel):
    """Contents of one save slot."""

    model_config = ConfigDict(extra='forbid')

    version: str = "1.0"
    name: str = "Save"
    timestamp: str = ""
    chapter_name: str
    chapter_progress: int = Field(default=0, ge=0)
    cached_last_speaker: str = ""
    temp_vals: list[str] = Field(default_factory=lambda: [""] * ScratchStore.SLOTS)
    player_name: str = ""

    @field_validator("temp_vals")
    @classmethod
    def _nine_slots(cls, value: list[str]) -> list[str]:
        if len(value) > ScratchStore.SLOTS:
            raise ValueError(f"at most {ScratchStore.SLOTS} scratch values")
        return value + [""] * (ScratchStore.SLOTS - len(value))

    def to_snapshot(self) -> ChapterSnapshot:
        return ChapterSnapshot(
            chapter_name=self.chapter_name,
            chapter_progress=self.chapter_progress,
            cached_last_speaker=self.cached_last_speaker,
            temp_vals=list(self.temp_vals),
        )


class NovelSaveManager:
    """
    Saves and restores a NovelController.

    Usage:
        saves = NovelSaveManager("game/saves", controller, event_bus)
        saves.save_game(slot=0, name="Before the bridge")
        saves.load_game(slot=0)
    """

    VERSION = "1.0"
    MAX_SLOTS = 10
    QUICK_SLOT = 99

    def __init__(
        self,
        save_path: str | Path,
        controller: NovelController,
        event_bus: Optional[EventBus] = None,
    ):
        self.save_path = Path(save_path)
        self.save_path.mkdir(parents=True, exist_ok=True)
        self.controller = controller
        self.event_bus = event_bus
        self._current_slot: Optional[int] = None

    @property
    def current_slot(self) -> Optional[int]:
        return self._current_slot

    def _get_slot_path(self, slot: int) -> Path:
        return self.save_path / f"save_{slot:02d}.json"

    def has_save(self, slot: int) -> bool:
        return self._get_slot_path(slot).exists()

    def save_game(self, slot: int, name: str = "Save") -> bool:
        """
        Write the controller's current position to a slot.

        Returns:
            True if the file was written
        """
        self._publish(SaveEvent.SAVE_STARTED, slot=slot)

        snapshot = self.controller.snapshot()
        if not snapshot.chapter_name:
            return self._fail(SaveEvent.SAVE_FAILED, slot, "no named chapter is loaded")

        game_file = GameFile(
            version=self.VERSION,
            name=name,
            timestamp=datetime.now().isoformat(),
            chapter_name=snapshot.chapter_name,
            chapter_progress=snapshot.chapter_progress,
            cached_last_speaker=snapshot.cached_last_speaker,
            temp_vals=snapshot.temp_vals,
            player_name=self.controller.state.player_name,
        )

        save_dict = game_file.model_dump(mode="json")
        save_dict['checksum'] = self._calculate_checksum(save_dict)

        try:
            with open(self._get_slot_path(slot), 'w', encoding='utf-8') as f:
                json.dump(save_dict, f, indent=2)
        except OSError as e:
            return self._fail(SaveEvent.SAVE_FAILED, slot, str(e))

        self._current_slot = slot
        logger.info(f"Saved slot {slot}: {game_file.chapter_name} line {game_file.chapter_progress + 1}")
        self._publish(SaveEvent.SAVE_COMPLETED, slot=slot)
        return True

    def read_game(self, slot: int, validate: bool = True) -> Optional[GameFile]:
        """
        Read a slot without applying it.

        Returns:
            The GameFile, or None if missing, corrupted or invalid
        """
        save_path = self._get_slot_path(slot)
        if not save_path.exists():
            return None

        try:
            with open(save_path, 'r', encoding='utf-8') as f:
                save_dict = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Cannot read save slot {slot}: {e}")
            return None

        checksum = save_dict.pop('checksum', None)
        if validate and checksum and checksum != self._calculate_checksum(save_dict):
            logger.error(f"Save slot {slot} corrupted: checksum mismatch")
            return None

        try:
            return GameFile.model_validate(save_dict)
        except ValidationError as e:
            logger.error(f"Save slot {slot} is invalid: {e}")
            return None

    def load_game(self, slot: int, validate: bool = True) -> bool:
        """
        Restore a slot into the controller.

        Returns:
            True if the chapter was resumed
        """
        if not self.has_save(slot):
            return False

        self._publish(SaveEvent.LOAD_STARTED, slot=slot)

        game_file = self.read_game(slot, validate=validate)
        if game_file is None:
            return self._fail(SaveEvent.LOAD_FAILED, slot, "unreadable or corrupted save")

        if not self.controller.resume(game_file.to_snapshot()):
            return self._fail(SaveEvent.LOAD_FAILED, slot, f"chapter '{game_file.chapter_name}' not found")

        self.controller.state.player_name = game_file.player_name
        self._current_slot = slot
        logger.info(f"Loaded slot {slot}: {game_file.chapter_name}")
        self._publish(SaveEvent.LOAD_COMPLETED, slot=slot)
        return True

    def quick_save(self) -> bool:
        return self.save_game(self.QUICK_SLOT, name="Quick Save")

    def quick_load(self) -> bool:
        return self.load_game(self.QUICK_SLOT)

    def handle_input(self, input_handler: InputHandler) -> None:
        """Quick save or quick load on the matching action."""
        if input_handler.is_action_just_pressed(Action.QUICKSAVE):
            self.quick_save()
        elif input_handler.is_action_just_pressed(Action.QUICKLOAD):
            self.quick_load()

    def get_save_slots(self) -> list[Optional[GameFile]]:
        """GameFile (or None) for each regular slot."""
        return [self.read_game(i) for i in range(self.MAX_SLOTS)]

    def delete_save(self, slot: int) -> bool:
        save_path = self._get_slot_path(slot)
        try:
            if save_path.exists():
                save_path.unlink()
            return True
        except OSError as e:
            logger.error(f"Cannot delete save slot {slot}: {e}")
            return False

    def validate_save(self, slot: int) -> bool:
        """True if the slot exists and passes checksum and schema checks."""
        return self.read_game(slot, validate=True) is not None

    def _calculate_checksum(self, data: dict) -> str:
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _fail(self, event_type: SaveEvent, slot: int, error: str) -> bool:
        logger.error(f"{event_type.name.replace('_', ' ').capitalize()} (slot {slot}): {error}")
        self._publish(event_type, slot=slot, error=error)
        return False

    def _publish(self, event_type: SaveEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
