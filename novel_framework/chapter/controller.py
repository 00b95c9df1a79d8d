"""
Chapter controller - drives a script line by line.

The controller is an explicit state machine ticked by the host once per
fixed timestep:

    IDLE -> WAITING_FOR_ADVANCE -> PLAYING_LINE -> WAITING_FOR_ADVANCE -> ...
                                -> WAITING_FOR_CHOICE -> PLAYING_LINE
                                -> WAITING_FOR_INPUT
                                -> FINISHED

Every line waits for an advance before it is inspected; loading a chapter
requests the first one automatically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from novel_engine.core.actions import Action
from novel_engine.core.events import EventBus, NovelEvent
from novel_engine.input.handler import InputHandler
from novel_framework.chapter.dispatcher import ActionDispatcher
from novel_framework.chapter.playback import LinePlayer
from novel_framework.chapter.signals import AdvanceSignal, Latch
from novel_framework.collaborators import ChoicePresenter, DialogueBox, InputPresenter
from novel_framework.commands.registry import CommandRegistry
from novel_framework.errors import ScriptMalformedError
from novel_framework.script.blocks import (
    COMMENT_PREFIX,
    ChoiceBlock,
    InputBlock,
    is_choice_line,
    is_input_line,
    parse_choice_block,
    parse_input_line,
)
from novel_framework.script.grammar import parse_line
from novel_framework.script.loader import ScriptLoader
from novel_framework.script.tags import inject_tags
from novel_framework.state import NovelState

logger = logging.getLogger(__name__)


class ChapterState(Enum):
    IDLE = auto()
    WAITING_FOR_ADVANCE = auto()
    PLAYING_LINE = auto()
    WAITING_FOR_CHOICE = auto()
    WAITING_FOR_INPUT = auto()
    FINISHED = auto()


@dataclass
class ChapterSnapshot:
    """The persisted part of a running chapter."""
    chapter_name: str
    chapter_progress: int
    cached_last_speaker: str = ""
    temp_vals: list[str] = field(default_factory=list)


class NovelController:
    """
    Runs chapters.

    Usage:
        controller = NovelController(registry, loader=ScriptLoader("story"))
        controller.load_chapter("prologue")
        # each tick:
        controller.handle_input(input_handler)
        controller.update(dt)
    """

    def __init__(
        self,
        registry: CommandRegistry,
        *,
        loader: Optional[ScriptLoader] = None,
        state: Optional[NovelState] = None,
        event_bus: Optional[EventBus] = None,
        text_box: Optional[DialogueBox] = None,
        choices: Optional[ChoicePresenter] = None,
        inputs: Optional[InputPresenter] = None,
        chars_per_second: float = 30.0,
        fast_forward: float = 5.0,
    ):
        self.registry = registry
        self.loader = loader
        self.state = state or NovelState()
        self.event_bus = event_bus
        self.choices = choices
        self.inputs = inputs

        self.signal = AdvanceSignal()
        self.dispatcher = ActionDispatcher(registry, self.state, self.signal)
        self.player = LinePlayer(
            self.signal,
            self.dispatcher.dispatch,
            text_box=text_box,
            event_bus=event_bus,
            chars_per_second=chars_per_second,
            fast_forward=fast_forward,
        )

        self.chapter_state = ChapterState.IDLE
        self.chapter_name = ""
        self.chapter_progress = 0
        self.script: list[str] = []

        self._choice: Latch[int] = Latch()
        self._input: Latch[str] = Latch()
        self._block: Optional[ChoiceBlock | InputBlock] = None
        self.highlighted = 0
        self._resume_at = 0
        # Bumped whenever the running chapter is replaced or skipped
        self._generation = 0

    # --- Properties ---

    @property
    def is_running(self) -> bool:
        return self.chapter_state not in (ChapterState.IDLE, ChapterState.FINISHED)

    @property
    def is_finished(self) -> bool:
        return self.chapter_state is ChapterState.FINISHED

    @property
    def is_waiting_for_widget(self) -> bool:
        return self.chapter_state in (ChapterState.WAITING_FOR_CHOICE, ChapterState.WAITING_FOR_INPUT)

    # --- Loading ---

    def load_chapter(self, name: str) -> bool:
        """
        Load <story_path>/<name>.txt and start it.

        Returns:
            False if no loader is set or the script cannot be read; the
            current chapter keeps running in that case
        """
        if self.loader is None:
            logger.error(f"Cannot load chapter {name}: no script loader")
            return False

        lines = self.loader.load(name)
        if lines is None:
            self._publish(NovelEvent.SCRIPT_ERROR, message=f"chapter '{name}' not found")
            return False

        self.load_script(lines, name)
        return True

    def load_script(self, lines: list[str], name: str = "") -> None:
        """Start a chapter from lines, cancelling whatever was running."""
        self._cancel()
        self.script = list(lines)
        self.chapter_name = name
        self.chapter_progress = 0
        self.state.cached_last_speaker = ""

        logger.info(f"Chapter started: {name or '<script>'} ({len(self.script)} lines)")
        self._publish(NovelEvent.CHAPTER_STARTED, chapter=name)

        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE
        self.signal.request()

    # --- Inputs ---

    def next(self) -> None:
        """Request an advance (coalesced)."""
        self.signal.request()

    def skip(self) -> None:
        """Jump to the final line without showing or running what is between."""
        if not self.is_running or not self.script:
            return

        self._cancel()
        self.chapter_progress = len(self.script) - 1
        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE
        self.signal.request()
        logger.debug(f"Skipped to line {self.chapter_progress + 1}")

    def choose(self, index: int) -> None:
        """Report the choice picked by the player."""
        if self.chapter_state is not ChapterState.WAITING_FOR_CHOICE:
            logger.warning(f"Choice {index} ignored: no choice is open")
            return
        self._choice.set(index)

    def accept_input(self, value: str) -> bool:
        """
        Report the text entered by the player.

        Returns:
            False if no input is open or value is empty
        """
        if self.chapter_state is not ChapterState.WAITING_FOR_INPUT:
            logger.warning("Input ignored: no input is open")
            return False
        if not value.strip():
            return False
        self._input.set(value)
        return True

    def handle_input(self, input_handler: InputHandler) -> None:
        """
        Map player actions onto the chapter.

        While a choice is open CHOICE_UP/CHOICE_DOWN move the highlight and
        CONFIRM picks it. The text input widget handles its own keys.
        """
        if self.chapter_state is ChapterState.WAITING_FOR_CHOICE:
            self._navigate_choice(input_handler)
            return
        if self.is_waiting_for_widget:
            return
        if input_handler.is_action_just_pressed(Action.SKIP):
            self.skip()
        elif input_handler.is_action_just_pressed(Action.ADVANCE):
            self.next()

    # --- Persistence ---

    def snapshot(self) -> ChapterSnapshot:
        return ChapterSnapshot(
            chapter_name=self.chapter_name,
            chapter_progress=self.chapter_progress,
            cached_last_speaker=self.state.cached_last_speaker,
            temp_vals=self.state.scratch.values(),
        )

    def resume(self, snapshot: ChapterSnapshot) -> bool:
        """
        Reload a chapter at a saved position.

        The chapter then waits for the player instead of starting on its own.
        """
        if self.loader is None:
            logger.error("Cannot resume: no script loader")
            return False

        lines = self.loader.load(snapshot.chapter_name)
        if lines is None:
            self._publish(NovelEvent.SCRIPT_ERROR, message=f"chapter '{snapshot.chapter_name}' not found")
            return False

        self._cancel()
        self.script = lines
        self.chapter_name = snapshot.chapter_name
        self.chapter_progress = max(0, min(len(lines), snapshot.chapter_progress))
        self.state.cached_last_speaker = snapshot.cached_last_speaker
        self.state.scratch.load(snapshot.temp_vals)

        logger.info(f"Chapter resumed: {self.chapter_name} at line {self.chapter_progress + 1}")
        self._publish(NovelEvent.CHAPTER_STARTED, chapter=self.chapter_name, resumed=True)

        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE
        self.signal.clear()
        return True

    # --- Tick ---

    def update(self, dt: float) -> None:
        """Run one logical step."""
        state = self.chapter_state

        if state is ChapterState.WAITING_FOR_ADVANCE:
            if self.chapter_progress >= len(self.script):
                self._finish()
            elif self.signal.consume():
                self._step()

        elif state is ChapterState.PLAYING_LINE:
            generation = self._generation
            self.player.update(dt)
            if generation == self._generation and self.player.is_done:
                self._line_done()

        elif state is ChapterState.WAITING_FOR_CHOICE:
            index = self._choice.take()
            if index is not None:
                self._make_choice(index)

        elif state is ChapterState.WAITING_FOR_INPUT:
            value = self._input.take()
            if value is not None:
                self._accept(value)

    # --- Internals ---

    def _step(self) -> None:
        while self.chapter_progress < len(self.script):
            text = self.script[self.chapter_progress].strip()
            if text and not text.startswith(COMMENT_PREFIX):
                break
            self.chapter_progress += 1

        if self.chapter_progress >= len(self.script):
            self._finish()
            return

        raw = inject_tags(self.script[self.chapter_progress], self.state)
        logger.debug(f"Line {self.chapter_progress + 1}: {raw}")

        if is_choice_line(raw):
            self._open_choice()
        elif is_input_line(raw):
            self._open_input(raw)
        else:
            self._play_line(raw, self.chapter_progress + 1)

    def _play_line(self, raw: str, resume_at: int) -> None:
        generation = self._generation
        line = parse_line(raw, self.state.cached_last_speaker)
        if line.diagnostics:
            self._publish(
                NovelEvent.SCRIPT_ERROR,
                line_index=self.chapter_progress,
                message="; ".join(line.diagnostics),
            )
            if generation != self._generation:
                return
        if line.speaker:
            self.state.cached_last_speaker = line.speaker

        self._resume_at = resume_at
        self.chapter_state = ChapterState.PLAYING_LINE
        self._publish(NovelEvent.LINE_STARTED, line_index=self.chapter_progress, speaker=line.speaker)
        if generation != self._generation:
            # A subscriber skipped or replaced the chapter
            return

        self.player.play(line)
        if generation == self._generation and self.player.is_done:
            self._line_done()

    def _line_done(self) -> None:
        self._publish(NovelEvent.LINE_FINISHED, line_index=self.chapter_progress)
        self.chapter_progress = self._resume_at
        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE
        if self.chapter_progress >= len(self.script):
            self._finish()

    def _open_choice(self) -> None:
        try:
            block = parse_choice_block(self.script, self.chapter_progress)
        except ScriptMalformedError as e:
            end = e.end_index if e.end_index is not None else self.chapter_progress
            self._report(e, resume_at=end + 1)
            return

        self._block = block
        self._choice.clear()
        self.highlighted = 0
        self.chapter_state = ChapterState.WAITING_FOR_CHOICE

        title = inject_tags(block.title, self.state)
        labels = [inject_tags(choice, self.state) for choice in block.choices]
        if self.choices:
            self.choices.show(title, labels)
        self._publish(NovelEvent.CHOICE_PRESENTED, title=title, choices=labels)

    def _navigate_choice(self, input_handler: InputHandler) -> None:
        if not isinstance(self._block, ChoiceBlock):
            return
        if input_handler.is_action_just_pressed(Action.CONFIRM):
            self.choose(self.highlighted)
            return

        step = 0
        if input_handler.is_action_just_pressed(Action.CHOICE_UP):
            step = -1
        elif input_handler.is_action_just_pressed(Action.CHOICE_DOWN):
            step = 1
        if not step:
            return

        last = len(self._block.choices) - 1
        highlighted = max(0, min(last, self.highlighted + step))
        if highlighted != self.highlighted:
            self.highlighted = highlighted
            if self.choices:
                self.choices.select(highlighted)

    def _make_choice(self, index: int) -> None:
        block = self._block
        if not 0 <= index < len(block.choices):
            logger.warning(f"Choice {index} out of range (0..{len(block.choices) - 1})")
            return

        if self.choices:
            self.choices.hide()
        self._publish(NovelEvent.CHOICE_MADE, index=index, choice=block.choices[index])
        self._block = None

        self._play_line(inject_tags(block.actions[index], self.state), block.end + 1)

    def _open_input(self, raw: str) -> None:
        try:
            block = parse_input_line(raw, self.chapter_progress)
        except ScriptMalformedError as e:
            self._report(e, resume_at=self.chapter_progress + 1)
            return

        self._block = block
        self._input.clear()
        self.chapter_state = ChapterState.WAITING_FOR_INPUT

        if self.inputs:
            self.inputs.show(block.title)
        self._publish(NovelEvent.INPUT_REQUESTED, title=block.title)

    def _accept(self, value: str) -> None:
        block = self._block
        self._block = None
        self.state.last_input = value

        if self.inputs:
            self.inputs.hide()
        self._publish(NovelEvent.INPUT_ACCEPTED, value=value)

        self.chapter_progress += 1
        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE

        generation = self._generation
        for call in block.actions:
            if generation != self._generation:
                break
            self.dispatcher.dispatch(call)

        if generation == self._generation and self.chapter_progress >= len(self.script):
            self._finish()

    def _report(self, error: ScriptMalformedError, resume_at: int) -> None:
        """Log a broken construct and step over it."""
        logger.error(f"{self.chapter_name or '<script>'}: {error}")
        self._publish(NovelEvent.SCRIPT_ERROR, line_index=error.line_index, message=str(error))

        self.chapter_progress = resume_at
        self.chapter_state = ChapterState.WAITING_FOR_ADVANCE
        self.signal.request()

    def _finish(self) -> None:
        if self.chapter_state is ChapterState.FINISHED:
            return
        self.chapter_state = ChapterState.FINISHED
        logger.info(f"Chapter finished: {self.chapter_name or '<script>'}")
        self._publish(NovelEvent.CHAPTER_FINISHED, chapter=self.chapter_name)

    def _cancel(self) -> None:
        """Abandon the in-flight line, choice or input."""
        self._generation += 1
        self.player.cancel()

        if self.chapter_state is ChapterState.WAITING_FOR_CHOICE and self.choices:
            self.choices.hide()
        elif self.chapter_state is ChapterState.WAITING_FOR_INPUT and self.inputs:
            self.inputs.hide()

        self._block = None
        self._choice.clear()
        self._input.clear()

    def _publish(self, event_type: NovelEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
