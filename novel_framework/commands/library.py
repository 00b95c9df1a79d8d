"""
Built-in script commands.

Each command parses its own argument string with the helpers in args.py and
forwards the result to a collaborator. Families of commands share one class
configured through its constructor (the layer, the audio category, the
character method) instead of a subclass per name.

Failure policy:
- missing resource: warning, nothing happens for that resource
- malformed optional field: the documented default
- malformed required field: warning, nothing happens
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from novel_framework.collaborators import (
    AssetLibrary,
    AudioPlayer,
    Character,
    CharacterStage,
    Layer,
    LayerStage,
)
from novel_framework.commands.args import (
    is_null,
    parse_float,
    probe_options,
    split_fields,
    split_targets,
    try_bool,
    try_float,
)
from novel_framework.commands.registry import Command, CommandRegistry

logger = logging.getLogger(__name__)


@dataclass
class CommandServices:
    """Collaborators the built-in commands talk to."""
    stage: LayerStage
    characters: CharacterStage
    audio: AudioPlayer
    assets: AssetLibrary


class ServiceCommand(Command):
    """A command bound to a name and the shared services."""

    def __init__(self, name: str, services: CommandServices):
        self.name = name
        self.services = services

    def _texture(self, name: str) -> tuple[bool, Optional[Path]]:
        """
        Resolve a texture field.

        Returns:
            (ok, path): ``null`` gives (True, None); a missing file gives
            (False, None)
        """
        if is_null(name):
            return True, None
        path = self.services.assets.texture(name)
        if path is None:
            logger.warning(f"{self.name}: texture '{name}' not found")
            return False, None
        return True, path

    def _transition(self, name: str) -> Optional[Path]:
        path = self.services.assets.transition(name)
        if path is None:
            logger.warning(f"{self.name}: transition '{name}' not found")
        return path

    def _character(self, name: str) -> Optional[Character]:
        character = self.services.characters.get_character(name)
        if character is None:
            logger.warning(f"{self.name}: unknown character '{name}'")
        return character

    def _stage_position(self, name: str) -> Optional[tuple[float, float]]:
        position = self.services.characters.stage_position(name)
        if position is None:
            logger.warning(f"{self.name}: unknown stage position '{name}'")
        return position

    def _position(self, fields: list[str], index: int) -> Optional[tuple[tuple[float, float], list[str]]]:
        """
        Read a position starting at fields[index].

        A number is x, optionally followed by y; anything else names a stage
        position.

        Returns:
            ((x, y), remaining fields), or None if no position resolves
        """
        x = try_float(fields[index])
        if x is None:
            position = self._stage_position(fields[index])
            if position is None:
                return None
            return position, fields[index + 1:]

        y = parse_float(fields[index + 1] if len(fields) > index + 1 else None, 0.0)
        return (x, y), fields[index + 2:]

    def _require(self, fields: list[str], count: int, usage: str) -> bool:
        if len(fields) < count or not all(fields[:count]):
            logger.warning(f"{self.name}: expected {self.name}({usage})")
            return False
        return True


# --- Layers ---

class SetLayerImage(ServiceCommand):
    """``setBackground(texture[,speed][,smooth])`` and friends."""

    def __init__(self, name: str, services: CommandServices, layer: Layer):
        super().__init__(name, services)
        self.layer = layer

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 1, "texture[,speed][,smooth]"):
            return

        ok, texture = self._texture(fields[0])
        if not ok:
            return

        speed, smooth = probe_options(fields[1:], 2.0, False)
        self.services.stage.set_texture(self.layer, texture, speed, smooth)


class TransitionLayer(ServiceCommand):
    """``transBackground(texture,transition[,speed][,smooth])`` and friends."""

    def __init__(self, name: str, services: CommandServices, layer: Layer):
        super().__init__(name, services)
        self.layer = layer

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 2, "texture,transition[,speed][,smooth]"):
            return

        ok, texture = self._texture(fields[0])
        if not ok:
            return
        transition = self._transition(fields[1])
        if transition is None:
            return

        speed, smooth = probe_options(fields[2:], 2.0, False)
        self.services.stage.transition_layer(self.layer, texture, transition, speed, smooth)


class ShowScene(ServiceCommand):
    """``showScene(true|false,transition[,speed][,smooth])``"""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 2, "show,transition[,speed][,smooth]"):
            return

        show = try_bool(fields[0])
        if show is None:
            logger.warning(f"{self.name}: '{fields[0]}' is not true or false")
            return
        transition = self._transition(fields[1])
        if transition is None:
            return

        speed, smooth = probe_options(fields[2:], 2.0, False)
        self.services.stage.show_scene(show, transition, speed, smooth)


# --- Characters ---

class FadeCharacters(ServiceCommand):
    """``enter(a;b[,speed][,smooth])`` / ``exit(...)``"""

    def __init__(self, name: str, services: CommandServices, entering: bool):
        super().__init__(name, services)
        self.entering = entering

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 1, "a;b;c[,speed][,smooth]"):
            return

        speed, smooth = probe_options(fields[1:], 3.0, False)
        for target in split_targets(fields[0]):
            character = self._character(target)
            if character is None:
                continue
            if self.entering:
                character.fade_in(speed, smooth)
            else:
                character.fade_out(speed, smooth)


class MoveCharacter(ServiceCommand):
    """
    ``move(character,x[,y][,speed][,smooth])`` or
    ``move(character,position[,speed][,smooth])`` with a named stage position.
    """

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 2, "character,x[,y][,speed][,smooth]"):
            return

        target = self._position(fields, 1)
        if target is None:
            return
        (x, y), rest = target
        speed = parse_float(rest[0] if rest else None, 7.0)
        smooth = try_bool(rest[1]) if len(rest) > 1 else None

        character = self._character(fields[0])
        if character:
            character.move_to(x, y, speed, True if smooth is None else smooth)


class MoveCharacterBetween(ServiceCommand):
    """``moveTo(character,from,to[,speed][,smooth])`` between named stage positions."""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 3, "character,from,to[,speed][,smooth]"):
            return

        start = self._stage_position(fields[1])
        end = self._stage_position(fields[2])
        if start is None or end is None:
            return
        speed, smooth = probe_options(fields[3:], 2.0, False)

        character = self._character(fields[0])
        if character:
            character.set_position(*start)
            character.move_to(end[0], end[1], speed, smooth)


class SetCharacterPosition(ServiceCommand):
    """``setPosition(character,x[,y])`` or ``setPosition(character,position)``"""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 2, "character,x[,y]"):
            return

        target = self._position(fields, 1)
        if target is None:
            return
        (x, y), _ = target

        character = self._character(fields[0])
        if character:
            character.set_position(x, y)


class SetExpression(ServiceCommand):
    """``setFace(character,expression[,speed])`` / ``setBody(...)``"""

    def __init__(self, name: str, services: CommandServices, part: str):
        super().__init__(name, services)
        self.part = part

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 2, "character,expression[,speed]"):
            return

        speed = parse_float(fields[2] if len(fields) > 2 else None, 3.0)
        _apply_expression(self._character(fields[0]), self.part, fields[1], speed)


class SetRegionExpression(ServiceCommand):
    """``setExpression(character,face|body,expression[,speed])``"""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 3, "character,face|body,expression[,speed]"):
            return

        part = fields[1].lower()
        if part not in EXPRESSION_PARTS:
            logger.warning(f"{self.name}: region '{fields[1]}' must be face or body")
            return

        speed = parse_float(fields[3] if len(fields) > 3 else None, 5.0)
        _apply_expression(self._character(fields[0]), part, fields[2], speed)


EXPRESSION_PARTS = ("face", "body")


def _apply_expression(character: Optional[Character], part: str, expression: str, speed: float) -> None:
    if character is None:
        return
    if part == "face":
        character.set_face(expression, speed)
    else:
        character.set_body(expression, speed)


class TurnCharacters(ServiceCommand):
    """``flip(a;b)``, ``faceLeft(a;b)``, ``faceRight(a;b)``"""

    def __init__(self, name: str, services: CommandServices, turn: Callable[[Character], None]):
        super().__init__(name, services)
        self.turn = turn

    def execute(self, args: str) -> None:
        targets = split_targets(args)
        if not targets:
            logger.warning(f"{self.name}: expected {self.name}(a;b;c)")
            return
        for target in targets:
            character = self._character(target)
            if character:
                self.turn(character)


# --- Audio ---

class PlaySound(ServiceCommand):
    """``playSound(clip)``"""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 1, "clip"):
            return
        clip = self.services.assets.audio("sfx", fields[0])
        if clip is None:
            logger.warning(f"{self.name}: sound '{fields[0]}' not found")
            return
        self.services.audio.play_sfx(clip)


class PlayMusic(ServiceCommand):
    """``playMusic(clip)``; ``playMusic(null)`` stops the music."""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 1, "clip|null"):
            return
        if is_null(fields[0]):
            self.services.audio.play_song(None)
            return
        clip = self.services.assets.audio("music", fields[0])
        if clip is None:
            logger.warning(f"{self.name}: music '{fields[0]}' not found")
            return
        self.services.audio.play_song(clip)


class StopMusic(ServiceCommand):
    def execute(self, args: str) -> None:
        self.services.audio.play_song(None)


class PlayAmbiance(ServiceCommand):
    """``playAmbiance(clip)``"""

    def execute(self, args: str) -> None:
        fields = split_fields(args)
        if not self._require(fields, 1, "clip"):
            return
        clip = self.services.assets.audio("ambiance", fields[0])
        if clip is None:
            logger.warning(f"{self.name}: ambiance '{fields[0]}' not found")
            return
        self.services.audio.play_ambiance(clip)


class StopAmbiance(ServiceCommand):
    """``stopAmbiance(clip)``; no argument stops every ambiance track."""

    def execute(self, args: str) -> None:
        name = args.strip()
        self.services.audio.stop_ambiance(name or None)


# --- Flow ---

class LoadChapter(Command):
    """``load(chapter)`` - replace the running chapter."""

    name = "load"

    def __init__(self, load_chapter: Callable[[str], bool]):
        self.load_chapter = load_chapter

    def execute(self, args: str) -> None:
        chapter = args.strip()
        if not chapter:
            logger.warning("load: expected load(chapter)")
            return
        self.load_chapter(chapter)


def default_commands(services: CommandServices) -> list[Command]:
    """The built-in command table (``load`` is added by the controller owner)."""
    return [
        SetLayerImage("setBackground", services, Layer.BACKGROUND),
        SetLayerImage("setCinematic", services, Layer.CINEMATIC),
        SetLayerImage("setForeground", services, Layer.FOREGROUND),
        TransitionLayer("transBackground", services, Layer.BACKGROUND),
        TransitionLayer("transCinematic", services, Layer.CINEMATIC),
        TransitionLayer("transForeground", services, Layer.FOREGROUND),
        ShowScene("showScene", services),
        FadeCharacters("enter", services, entering=True),
        FadeCharacters("exit", services, entering=False),
        MoveCharacter("move", services),
        MoveCharacterBetween("moveTo", services),
        SetCharacterPosition("setPosition", services),
        SetExpression("setFace", services, part="face"),
        SetExpression("setBody", services, part="body"),
        SetRegionExpression("setExpression", services),
        TurnCharacters("flip", services, lambda c: c.flip()),
        TurnCharacters("faceLeft", services, lambda c: c.face_left()),
        TurnCharacters("faceRight", services, lambda c: c.face_right()),
        PlaySound("playSound", services),
        PlaySound("playSFX", services),
        PlayMusic("playMusic", services),
        StopMusic("stopMusic", services),
        PlayAmbiance("playAmbiance", services),
        StopAmbiance("stopAmbiance", services),
    ]


def build_default_registry(services: CommandServices) -> CommandRegistry:
    registry = CommandRegistry(default_commands(services))
    logger.debug(f"Registered {len(registry)} commands")
    return registry
