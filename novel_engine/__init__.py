"""
Novel Engine host layer.

Provides the pieces a visual novel needs around its script interpreter:
a typed event bus, semantic input actions, a pygame input handler, a
pygame.mixer audio player and a fixed timestep host loop.

Quick Start:
    from novel_engine import Game, GameConfig, MixerAudioPlayer
    from novel_framework import NovelConfig, create_novel

    game = Game(GameConfig(title="Prologue"))
    audio = MixerAudioPlayer()
    audio.init()
    novel = create_novel(
        NovelConfig(),
        event_bus=game.event_bus,
        stage=my_stage, characters=my_cast, audio=audio, text_box=my_box,
    )
    game.add_updatable(novel)
    game.on_input(novel.handle_input)
    novel.load_chapter("prologue")
    game.run()
"""

__version__ = "0.1.0"

from novel_engine.core import (
    Game,
    GameConfig,
    EventBus,
    Event,
    NovelEvent,
    HostEvent,
    Action,
)

from novel_engine.input import InputHandler
from novel_engine.audio import MixerAudioPlayer

__all__ = [
    "Game",
    "GameConfig",
    "EventBus",
    "Event",
    "NovelEvent",
    "HostEvent",
    "InputHandler",
    "Action",
    "MixerAudioPlayer",
]
