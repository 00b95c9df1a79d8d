"""
Session state shared by the chapter controller and the action dispatcher.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class ScratchStore:
    """
    Fixed nine-slot string store for script values.

    Scripts address slots 1..9. Out-of-range indices clamp to the nearest
    bound and a non-numeric index falls back to slot 1. Script values cannot
    contain spaces, so ``~`` stands in for a space on write.
    """

    SLOTS = 9

    def __init__(self, values: list[str] | None = None):
        self._values: list[str] = [""] * self.SLOTS
        if values:
            self.load(values)

    def write(self, index: str | int, value: str) -> int:
        """
        Store value at a 1-based slot.

        Returns:
            The 0-based slot actually written
        """
        try:
            slot = int(str(index).strip())
        except ValueError:
            logger.warning(f"Scratch index {index!r} is not an integer, using 1")
            slot = 1
        slot = max(1, min(self.SLOTS, slot))

        self._values[slot - 1] = value.replace("~", " ")
        return slot - 1

    def read(self, index: int) -> str:
        """Read a 1-based slot (clamped like write)."""
        slot = max(1, min(self.SLOTS, index))
        return self._values[slot - 1]

    def values(self) -> list[str]:
        return list(self._values)

    def load(self, values: list[str]) -> None:
        """Replace all slots; missing trailing slots become empty."""
        padded = list(values[:self.SLOTS]) + [""] * (self.SLOTS - len(values))
        self._values = [str(v) for v in padded]

    def clear(self) -> None:
        self._values = [""] * self.SLOTS

    def __getitem__(self, slot: int) -> str:
        return self._values[slot]

    def __len__(self) -> int:
        return self.SLOTS


@dataclass
class NovelState:
    """
    Mutable reader state outside of chapter progress.

    Attributes:
        scratch: Nine-slot value store
        player_name: Name accepted through savePlayerName()
        last_input: Most recent accepted text input
        cached_last_speaker: Fallback speaker for lines that omit one
    """
    scratch: ScratchStore = field(default_factory=ScratchStore)
    player_name: str = ""
    last_input: str = ""
    cached_last_speaker: str = ""
