"""
Interpreter configuration.

Paths for story scripts, assets and saves, plus reveal pacing. Can be
loaded from a JSON file:

{
    "story_path": "game/story",
    "asset_path": "game/assets",
    "typewriter_speed": 40,
    "audio_folders": {"music": "audio/music"}
}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


def _default_audio_folders() -> dict[str, str]:
    return {
        "sfx": "audio/sfx",
        "music": "audio/music",
        "ambiance": "audio/ambiance",
    }


class NovelConfig(BaseModel):
    """
    Attributes:
        story_path: Folder holding chapter scripts (<chapter>.txt)
        asset_path: Root folder for textures, transitions and audio
        save_path: Folder for save slots
        typewriter_speed: Characters revealed per second (<= 0 is instant)
        fast_forward_multiplier: Reveal speed factor after the first advance
        texture_folders: Folders searched in order for layer textures
        transition_folder: Folder for transition effect textures
        audio_folders: Folder per audio category (sfx, music, ambiance)
    """

    model_config = ConfigDict(extra='forbid', validate_assignment=True)

    story_path: str = "game/story"
    asset_path: str = "game/assets"
    save_path: str = "game/saves"
    typewriter_speed: float = 30.0
    fast_forward_multiplier: float = Field(default=5.0, gt=0)
    texture_folders: list[str] = Field(default_factory=lambda: [
        "images/backdrops/still",
        "images/backdrops/animated",
    ])
    transition_folder: str = "images/transitions"
    audio_folders: dict[str, str] = Field(default_factory=_default_audio_folders)

    @classmethod
    def load_json(cls, path: str | Path) -> NovelConfig:
        """
        Load configuration from JSON, keeping defaults for missing keys.

        A missing, unreadable or invalid file yields the default configuration.
        """
        config_file = Path(path)
        if not config_file.exists():
            logger.warning(f"Config file not found, using defaults: {config_file}")
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data: Any = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading config {config_file}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.error(f"Config {config_file} must hold a JSON object")
            return cls()

        known = {}
        for key, value in data.items():
            if key not in cls.model_fields:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            known[key] = value

        # Partial audio folder maps keep the other default categories
        if isinstance(known.get("audio_folders"), dict):
            known["audio_folders"] = {**_default_audio_folders(), **known["audio_folders"]}

        try:
            return cls.model_validate(known)
        except ValidationError as e:
            logger.error(f"Invalid config {config_file}, using defaults: {e}")
            return cls()

    def save_json(self, path: str | Path) -> bool:
        """Write the configuration as JSON."""
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.model_dump(mode="json"), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving config {path}: {e}")
            return False
