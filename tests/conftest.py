import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.mixer'), \
         patch('pygame.joystick'), \
         patch('pygame.key'), \
         patch('pygame.mouse'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)
        pygame.joystick.get_count = MagicMock(return_value=0)

        yield

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from novel_engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def novel_events(event_bus):
    """Every NovelEvent published on event_bus, in order."""
    from novel_engine.core.events import NovelEvent

    received = []
    for event_type in NovelEvent:
        event_bus.subscribe(event_type, received.append, weak=False)
    return received

@pytest.fixture
def stage():
    return MagicMock()

STAGE_POSITIONS = {
    "left": (0.2, 0.0),
    "center": (0.5, 0.0),
    "right": (0.8, 0.0),
}

@pytest.fixture
def characters():
    """Character stage handing out one mock per name; 'ghost' does not exist."""
    stage = MagicMock()
    stage.cast = {}

    def get_character(name):
        if name == "ghost":
            return None
        if name not in stage.cast:
            stage.cast[name] = MagicMock()
        return stage.cast[name]

    stage.get_character.side_effect = get_character
    stage.stage_position.side_effect = STAGE_POSITIONS.get
    return stage

@pytest.fixture
def audio():
    return MagicMock()

@pytest.fixture
def assets():
    """Asset library where any name starting with 'missing' cannot be found."""
    library = MagicMock()

    def resolve(folder):
        def _resolve(name):
            return None if name.startswith("missing") else Path(folder) / name
        return _resolve

    library.texture.side_effect = resolve("textures")
    library.transition.side_effect = resolve("transitions")
    library.audio.side_effect = lambda category, name: resolve(category)(name)
    return library

@pytest.fixture
def services(stage, characters, audio, assets):
    from novel_framework.commands.library import CommandServices
    return CommandServices(stage=stage, characters=characters, audio=audio, assets=assets)

@pytest.fixture
def registry(services):
    from novel_framework.commands.library import build_default_registry
    return build_default_registry(services)

@pytest.fixture
def text_box():
    return MagicMock()

@pytest.fixture
def choice_box():
    return MagicMock()

@pytest.fixture
def input_box():
    return MagicMock()

@pytest.fixture
def recorder():
    """Records (name, args) for every RecordingCommand execution."""
    return []

@pytest.fixture
def recording_command(recorder):
    """Factory for commands that only record their calls."""
    from novel_framework.commands.registry import Command

    class RecordingCommand(Command):
        def __init__(self, name):
            self.name = name

        def execute(self, args):
            recorder.append((self.name, args))

    return RecordingCommand

@pytest.fixture
def story(tmp_path):
    """Writes chapter scripts to a temporary story folder."""
    story_path = tmp_path / "story"
    story_path.mkdir()

    def write(name, lines):
        (story_path / f"{name}.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return story_path

    write.path = story_path
    return write

@pytest.fixture
def make_controller(registry, event_bus, text_box, choice_box, input_box, story):
    """Builds a NovelController with instant text reveal unless told otherwise."""
    from novel_framework.chapter.controller import NovelController
    from novel_framework.commands.library import LoadChapter
    from novel_framework.script.loader import ScriptLoader

    def build(chars_per_second=0, **kwargs):
        controller = NovelController(
            registry,
            loader=ScriptLoader(story.path),
            event_bus=event_bus,
            text_box=text_box,
            choices=choice_box,
            inputs=input_box,
            chars_per_second=chars_per_second,
            **kwargs,
        )
        registry.register(LoadChapter(controller.load_chapter))
        return controller

    return build

def run_ticks(target, count, dt=1 / 60):
    for _ in range(count):
        target.update(dt)

@pytest.fixture
def tick():
    return run_ticks
