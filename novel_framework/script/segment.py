"""
Segments - the displayable pieces of a line, with their reveal state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Trigger(Enum):
    """What gates the start of a segment (segment 0 starts immediately)."""
    ON_PLAYER_ADVANCE = auto()
    AUTO_DELAY = auto()


@dataclass
class Segment:
    """
    One unit of displayable text within a line.

    Attributes:
        text: Text revealed by this segment
        trigger: Wait policy before this segment starts
        auto_delay: Seconds to wait when trigger is AUTO_DELAY
        append: Keep the previous segment's text on screen
        pretext: Text already on screen when this segment starts
        speaker: Display name ("" for narration)

    Runtime attributes (excluded from equality):
        is_running: True while text is being revealed
        skip: Fast-forward requested by the first advance
        is_force_finished: Completed by a second advance
        displayed_text: What is on screen right now
    """
    text: str = ""
    trigger: Trigger = Trigger.ON_PLAYER_ADVANCE
    auto_delay: float = 0.0
    append: bool = False
    pretext: str = ""
    speaker: str = ""

    is_running: bool = field(default=False, compare=False)
    skip: bool = field(default=False, compare=False)
    is_force_finished: bool = field(default=False, compare=False)
    displayed_text: str = field(default="", compare=False)
    _char_index: float = field(default=0.0, compare=False, repr=False)
    _speed: float = field(default=0.0, compare=False, repr=False)
    _fast_forward: float = field(default=1.0, compare=False, repr=False)

    @property
    def full_text(self) -> str:
        return self.pretext + self.text

    @property
    def is_silent(self) -> bool:
        """A silent segment has nothing to show and finishes at once."""
        return not self.text and not self.pretext

    @property
    def is_revealed(self) -> bool:
        return self.displayed_text == self.full_text

    def run(self, chars_per_second: float, fast_forward: float = 5.0) -> None:
        """Begin revealing text."""
        self._speed = chars_per_second
        self._fast_forward = max(1.0, fast_forward)
        self._char_index = 0.0
        self.skip = False
        self.is_force_finished = False
        self.displayed_text = self.pretext
        self.is_running = True

        if self.is_silent or chars_per_second <= 0:
            self.displayed_text = self.full_text
            self.is_running = False

    def update(self, dt: float) -> bool:
        """
        Advance the typewriter effect.

        Returns:
            True if displayed_text changed
        """
        if not self.is_running:
            return False

        speed = self._speed * (self._fast_forward if self.skip else 1.0)
        self._char_index += speed * dt
        idx = min(len(self.text), int(self._char_index))

        previous = self.displayed_text
        self.displayed_text = self.pretext + self.text[:idx]
        if self.is_revealed:
            self.is_running = False

        return self.displayed_text != previous

    def force_finish(self) -> None:
        """Complete immediately, regardless of remaining reveal work."""
        self.displayed_text = self.full_text
        self._char_index = float(len(self.text))
        self.is_force_finished = True
        self.is_running = False
