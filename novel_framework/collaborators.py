"""
Collaborator protocols - the boundary between the interpreter and the game.

Commands never render, play audio or animate on their own; they resolve
names through an AssetLibrary and forward the call to one of these objects.
Any object with matching methods can be plugged in.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Protocol

from novel_framework.config import NovelConfig

logger = logging.getLogger(__name__)


class Layer(Enum):
    """Full-screen image layers, back to front."""
    BACKGROUND = auto()
    CINEMATIC = auto()
    FOREGROUND = auto()


class LayerStage(Protocol):
    """Draws the background, cinematic and foreground layers."""

    def set_texture(self, layer: Layer, texture: Optional[Path], speed: float, smooth: bool) -> None:
        """Cross-fade layer to texture (None clears the layer)."""
        ...

    def transition_layer(
        self,
        layer: Layer,
        texture: Optional[Path],
        transition: Optional[Path],
        speed: float,
        smooth: bool,
    ) -> None:
        """Swap layer texture through a transition mask."""
        ...

    def show_scene(self, show: bool, transition: Optional[Path], speed: float, smooth: bool) -> None:
        """Reveal or cover the whole scene through a transition mask."""
        ...


class Character(Protocol):
    name: str

    def move_to(self, x: float, y: float, speed: float, smooth: bool) -> None: ...

    def set_position(self, x: float, y: float) -> None: ...

    def set_face(self, expression: str, speed: float) -> None: ...

    def set_body(self, expression: str, speed: float) -> None: ...

    def flip(self) -> None: ...

    def face_left(self) -> None: ...

    def face_right(self) -> None: ...

    def fade_in(self, speed: float, smooth: bool) -> None: ...

    def fade_out(self, speed: float, smooth: bool) -> None: ...


class CharacterStage(Protocol):
    def get_character(self, name: str) -> Optional[Character]:
        """Return the named character, or None if it cannot be created."""
        ...

    def stage_position(self, name: str) -> Optional[tuple[float, float]]:
        """Return the (x, y) of a named stage position such as ``left``, or None."""
        ...


class AudioPlayer(Protocol):
    def play_sfx(self, clip: Path) -> None: ...

    def play_song(self, clip: Optional[Path]) -> None:
        """Play clip as the music track; None stops the music."""
        ...

    def play_ambiance(self, clip: Path) -> None: ...

    def stop_ambiance(self, name: Optional[str] = None) -> None:
        """Stop one ambiance track by name, or all of them."""
        ...


class DialogueBox(Protocol):
    def say(self, speaker: str, text: str) -> None:
        """Show text on screen; speaker is "" for narration."""
        ...

    def clear(self) -> None: ...


class ChoicePresenter(Protocol):
    def show(self, title: str, choices: list[str]) -> None: ...

    def hide(self) -> None: ...

    def select(self, index: int) -> None: ...


class InputPresenter(Protocol):
    def show(self, title: str) -> None: ...

    def hide(self) -> None: ...


class AssetLibrary(Protocol):
    def texture(self, name: str) -> Optional[Path]: ...

    def transition(self, name: str) -> Optional[Path]: ...

    def audio(self, category: str, name: str) -> Optional[Path]: ...


class FileAssetLibrary:
    """
    Resolves asset names to files under NovelConfig.asset_path.

    A name matches ``<folder>/<name>`` exactly or ``<folder>/<name>.<ext>``
    for any extension. Textures search texture_folders in order.
    """

    def __init__(self, config: NovelConfig):
        self.root = Path(config.asset_path)
        self.texture_folders = [self.root / folder for folder in config.texture_folders]
        self.transition_folder = self.root / config.transition_folder
        self.audio_folders = {
            category: self.root / folder
            for category, folder in config.audio_folders.items()
        }

    def texture(self, name: str) -> Optional[Path]:
        for folder in self.texture_folders:
            path = self._find(folder, name)
            if path:
                return path
        return None

    def transition(self, name: str) -> Optional[Path]:
        return self._find(self.transition_folder, name)

    def audio(self, category: str, name: str) -> Optional[Path]:
        folder = self.audio_folders.get(category)
        if folder is None:
            logger.warning(f"Unknown audio category: {category}")
            return None
        return self._find(folder, name)

    @staticmethod
    def _find(folder: Path, name: str) -> Optional[Path]:
        if not name or not folder.exists():
            return None

        exact = folder / name
        if exact.is_file():
            return exact

        matches = sorted(folder.glob(f"{name}.*"))
        return matches[0] if matches else None
