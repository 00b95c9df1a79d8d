"""Input handling module."""

from novel_engine.input.handler import InputHandler, InputState, InputEvent

__all__ = [
    "InputHandler",
    "InputState",
    "InputEvent",
]
