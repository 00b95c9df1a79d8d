"""
pygame.mixer backed audio player.

Plays sound effects on free channels, one music track through
pygame.mixer.music, and any number of looping ambiance tracks keyed by file
stem so they can be stopped by name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pygame

logger = logging.getLogger(__name__)


class MixerAudioPlayer:
    """
    Usage:
        audio = MixerAudioPlayer()
        audio.init()
        audio.play_song(Path("assets/audio/music/theme.ogg"))
        audio.play_ambiance(Path("assets/audio/ambiance/rain.ogg"))
        audio.stop_ambiance("rain")
    """

    def __init__(self, fade_ms: int = 1000):
        self.fade_ms = fade_ms
        self.current_song: Optional[Path] = None

        self._sound_cache: dict[Path, pygame.mixer.Sound] = {}
        self._ambiance: dict[str, pygame.mixer.Channel] = {}
        self._initialized = False

    def init(self, frequency: int = 44100, size: int = -16, channels: int = 2, buffer: int = 512) -> None:
        if pygame.mixer.get_init():
            self._initialized = True
            return

        try:
            pygame.mixer.init(frequency=frequency, size=size, channels=channels, buffer=buffer)
            pygame.mixer.set_num_channels(32)
            self._initialized = True
            logger.info("Audio system initialized")
        except pygame.error as e:
            logger.error(f"Failed to initialize audio system: {e}")

    def quit(self) -> None:
        pygame.mixer.quit()
        self._initialized = False
        self._ambiance.clear()

    @property
    def ambiance_tracks(self) -> list[str]:
        return list(self._ambiance)

    def play_sfx(self, clip: Path) -> None:
        sound = self._get_sound(clip)
        if sound:
            sound.play()

    def play_song(self, clip: Optional[Path]) -> None:
        """Play clip on loop; None fades out the current song."""
        if not self._initialized:
            return

        if clip is None:
            pygame.mixer.music.fadeout(self.fade_ms)
            self.current_song = None
            return

        try:
            pygame.mixer.music.load(str(clip))
            pygame.mixer.music.play(loops=-1, fade_ms=self.fade_ms)
            self.current_song = clip
            logger.info(f"Playing music: {clip}")
        except pygame.error as e:
            logger.error(f"Failed to load music '{clip}': {e}")

    def play_ambiance(self, clip: Path) -> None:
        if clip.stem in self._ambiance:
            return
        sound = self._get_sound(clip)
        if not sound:
            return
        channel = sound.play(loops=-1, fade_ms=self.fade_ms)
        if channel:
            self._ambiance[clip.stem] = channel

    def stop_ambiance(self, name: Optional[str] = None) -> None:
        """Stop one ambiance track by name, or all of them."""
        names = [name] if name else list(self._ambiance)
        for key in names:
            channel = self._ambiance.pop(key, None)
            if channel is None:
                logger.warning(f"Ambiance '{key}' is not playing")
                continue
            channel.fadeout(self.fade_ms)

    def _get_sound(self, clip: Path) -> Optional[pygame.mixer.Sound]:
        if not self._initialized:
            return None

        if clip not in self._sound_cache:
            try:
                self._sound_cache[clip] = pygame.mixer.Sound(str(clip))
            except (pygame.error, FileNotFoundError) as e:
                logger.error(f"Failed to load sound {clip}: {e}")
                return None

        return self._sound_cache[clip]
