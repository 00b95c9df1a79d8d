"""
Segment playback for a single line.

LinePlayer is a tick-driven state machine:

    WAITING_TRIGGER --(advance or delay elapsed)--> RUNNING
    RUNNING --(revealed or force-finished)--> WAITING_TRIGGER (next segment)
                                          \\--> DONE (after the last segment,
                                                once the actions are dispatched)

Segment 0 starts as soon as play() is called. While a segment is running the
first advance fast-forwards the reveal and the second completes it.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Optional

from novel_engine.core.events import EventBus, NovelEvent
from novel_framework.chapter.signals import AdvanceSignal
from novel_framework.collaborators import DialogueBox
from novel_framework.script.grammar import ActionCall, Line
from novel_framework.script.segment import Segment, Trigger

logger = logging.getLogger(__name__)

# Tolerance for accumulated tick time against an auto delay
_EPSILON = 1e-9


class PlaybackState(Enum):
    IDLE = auto()
    WAITING_TRIGGER = auto()
    RUNNING = auto()
    DONE = auto()


class LinePlayer:
    """
    Plays the segments of one Line, then dispatches its actions.

    Args:
        signal: Shared advance signal
        dispatch: Called with each ActionCall once the line is shown
        text_box: Receives the revealed text whenever it changes
        event_bus: Receives SEGMENT_STARTED notifications
        chars_per_second: Reveal speed (<= 0 shows text at once)
        fast_forward: Reveal speed factor after the first advance
    """

    def __init__(
        self,
        signal: AdvanceSignal,
        dispatch: Callable[[ActionCall], None],
        text_box: Optional[DialogueBox] = None,
        event_bus: Optional[EventBus] = None,
        chars_per_second: float = 30.0,
        fast_forward: float = 5.0,
    ):
        self.signal = signal
        self.dispatch = dispatch
        self.text_box = text_box
        self.event_bus = event_bus
        self.chars_per_second = chars_per_second
        self.fast_forward = fast_forward

        self.state = PlaybackState.IDLE
        self.line: Optional[Line] = None
        self.index = 0
        self._delay_remaining = 0.0
        self._generation = 0

    @property
    def current(self) -> Optional[Segment]:
        if self.line is None or self.state in (PlaybackState.IDLE, PlaybackState.DONE):
            return None
        return self.line.segments[self.index]

    @property
    def is_playing(self) -> bool:
        return self.state in (PlaybackState.WAITING_TRIGGER, PlaybackState.RUNNING)

    @property
    def is_done(self) -> bool:
        return self.state is PlaybackState.DONE

    def play(self, line: Line) -> None:
        """Start a line, abandoning whatever was playing."""
        self.cancel()
        self.line = line
        self.index = 0
        self.signal.clear()
        self.state = PlaybackState.WAITING_TRIGGER
        self._start_segment()

    def cancel(self) -> None:
        """Stop playback without dispatching the line's actions."""
        if self.is_playing:
            logger.debug("Line playback cancelled")
        self._generation += 1
        self.state = PlaybackState.IDLE
        self.line = None
        self.index = 0
        self._delay_remaining = 0.0

    def update(self, dt: float) -> None:
        """Advance playback by one tick."""
        if self.state is PlaybackState.WAITING_TRIGGER:
            self._update_waiting(dt)
        elif self.state is PlaybackState.RUNNING:
            self._update_running(dt)

    def _update_waiting(self, dt: float) -> None:
        segment = self.current
        if self.signal.consume():
            self._start_segment()
            return

        if segment.trigger is Trigger.AUTO_DELAY:
            self._delay_remaining -= dt
            if self._delay_remaining <= _EPSILON:
                self._start_segment()

    def _update_running(self, dt: float) -> None:
        segment = self.current
        before = segment.displayed_text

        if self.signal.consume():
            if segment.skip:
                segment.force_finish()
            else:
                segment.skip = True

        if segment.is_running:
            segment.update(dt)

        if segment.displayed_text != before:
            self._show(segment)

        if not segment.is_running:
            self._segment_finished()

    def _start_segment(self) -> None:
        segment = self.current
        segment.run(self.chars_per_second, self.fast_forward)
        self.state = PlaybackState.RUNNING

        if self.event_bus:
            self.event_bus.publish(
                NovelEvent.SEGMENT_STARTED,
                index=self.index,
                speaker=segment.speaker,
                text=segment.text,
            )
        if not segment.is_silent:
            self._show(segment)

        if not segment.is_running:
            self._segment_finished()

    def _segment_finished(self) -> None:
        if self.index + 1 < len(self.line.segments):
            self.index += 1
            self.signal.clear()
            self.state = PlaybackState.WAITING_TRIGGER
            self._delay_remaining = self.current.auto_delay
            return
        self._finish()

    def _finish(self) -> None:
        line = self.line
        generation = self._generation
        self.state = PlaybackState.DONE

        for call in line.actions:
            # An action may start another line or chapter
            if self._generation != generation:
                logger.debug(f"Chapter changed, dropping {call} and later actions")
                break
            self.dispatch(call)

    def _show(self, segment: Segment) -> None:
        if self.text_box:
            self.text_box.say(segment.speaker, segment.displayed_text)
