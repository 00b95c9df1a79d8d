"""
Wiring - builds a ready-to-run NovelController.

    game = Game(GameConfig(title="Prologue"))
    novel = create_novel(
        NovelConfig.load_json("novel.json"),
        event_bus=game.event_bus,
        stage=stage, characters=cast, audio=MixerAudioPlayer(), text_box=box,
    )
    game.add_updatable(novel)
    game.on_input(novel.handle_input)
    game.on_input(NovelSaveManager("game/saves", novel, game.event_bus).handle_input)
    novel.load_chapter("prologue")
    game.run()
"""

from __future__ import annotations

from typing import Optional

from novel_engine.core.events import EventBus
from novel_framework.chapter.controller import NovelController
from novel_framework.collaborators import (
    AssetLibrary,
    AudioPlayer,
    CharacterStage,
    ChoicePresenter,
    DialogueBox,
    FileAssetLibrary,
    InputPresenter,
    LayerStage,
)
from novel_framework.commands.library import CommandServices, LoadChapter, build_default_registry
from novel_framework.config import NovelConfig
from novel_framework.script.loader import ScriptLoader
from novel_framework.state import NovelState


def create_novel(
    config: NovelConfig,
    *,
    stage: LayerStage,
    characters: CharacterStage,
    audio: AudioPlayer,
    event_bus: Optional[EventBus] = None,
    text_box: Optional[DialogueBox] = None,
    choices: Optional[ChoicePresenter] = None,
    inputs: Optional[InputPresenter] = None,
    assets: Optional[AssetLibrary] = None,
    state: Optional[NovelState] = None,
) -> NovelController:
    """Build the command registry and a controller bound to it."""
    services = CommandServices(
        stage=stage,
        characters=characters,
        audio=audio,
        assets=assets or FileAssetLibrary(config),
    )
    registry = build_default_registry(services)

    controller = NovelController(
        registry,
        loader=ScriptLoader(config.story_path),
        state=state,
        event_bus=event_bus,
        text_box=text_box,
        choices=choices,
        inputs=inputs,
        chars_per_second=config.typewriter_speed,
        fast_forward=config.fast_forward_multiplier,
    )
    registry.register(LoadChapter(controller.load_chapter))
    return controller
