"""
Chapter playback: signals, segment playback, action dispatch and the
chapter state machine.
"""

from novel_framework.chapter.signals import AdvanceSignal, Latch
from novel_framework.chapter.playback import LinePlayer, PlaybackState
from novel_framework.chapter.dispatcher import ActionDispatcher
from novel_framework.chapter.controller import (
    ChapterSnapshot,
    ChapterState,
    NovelController,
)

__all__ = [
    "AdvanceSignal",
    "Latch",
    "LinePlayer",
    "PlaybackState",
    "ActionDispatcher",
    "ChapterSnapshot",
    "ChapterState",
    "NovelController",
]
