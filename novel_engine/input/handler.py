"""
Input handler with action-based abstraction.

Translates raw pygame events (keyboard, mouse, gamepad) into semantic
Actions, and captures typed text for text-input widgets.

Usage:
    for event in pygame.event.get():
        input.process_event(event)
    input.update()

    if input.is_action_just_pressed(Action.ADVANCE):
        controller.next()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import pygame

from novel_engine.core.actions import (
    Action,
    DEFAULT_KEY_BINDINGS,
    DEFAULT_MOUSE_BINDINGS,
    DEFAULT_GAMEPAD_BINDINGS,
    DEFAULT_GAMEPAD_HAT_BINDINGS,
)
from novel_engine.core.events import EventBus


class InputEvent(Enum):
    """Input-specific events."""
    ACTION_PRESSED = "input.action_pressed"
    ACTION_RELEASED = "input.action_released"
    TEXT_ENTERED = "input.text_entered"


@dataclass
class InputState:
    """Input state for the current frame."""
    actions_pressed: set[Action] = field(default_factory=set)
    actions_just_pressed: set[Action] = field(default_factory=set)
    actions_just_released: set[Action] = field(default_factory=set)

    keys_pressed: set[int] = field(default_factory=set)
    mouse_buttons: set[int] = field(default_factory=set)
    gamepad_buttons: set[int] = field(default_factory=set)
    mouse_pos: tuple[int, int] = (0, 0)


class InputHandler:
    """
    Handles all input processing.

    An action is pressed while any of its bound sources is held; the
    just-pressed set is computed once per update() so a single click counts
    as a single edge no matter how many frames it is held.
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus

        self._state = InputState()
        self._prev_actions: set[Action] = set()

        self._key_bindings = {a: list(k) for a, k in DEFAULT_KEY_BINDINGS.items()}
        self._mouse_bindings = {a: list(b) for a, b in DEFAULT_MOUSE_BINDINGS.items()}
        self._gamepad_bindings = {a: list(b) for a, b in DEFAULT_GAMEPAD_BINDINGS.items()}
        self._hat_bindings = DEFAULT_GAMEPAD_HAT_BINDINGS.copy()
        self._hat_actions: set[Action] = set()

        self._gamepads: dict[int, object] = {}
        pygame.joystick.init()
        self._refresh_gamepads()

        self._text_input_callback: Callable[[str], None] | None = None

    def _refresh_gamepads(self) -> None:
        self._gamepads.clear()
        for i in range(pygame.joystick.get_count()):
            joy = pygame.joystick.Joystick(i)
            joy.init()
            self._gamepads[joy.get_instance_id()] = joy

    # Public API

    def is_action_pressed(self, action: Action) -> bool:
        """Check if an action is currently held down."""
        return action in self._state.actions_pressed

    def is_action_just_pressed(self, action: Action) -> bool:
        """Check if an action was pressed since the previous update()."""
        return action in self._state.actions_just_pressed

    def is_action_just_released(self, action: Action) -> bool:
        return action in self._state.actions_just_released

    @property
    def mouse_pos(self) -> tuple[int, int]:
        return self._state.mouse_pos

    @property
    def is_capturing_text(self) -> bool:
        return self._text_input_callback is not None

    # Key binding management

    def bind_key(self, action: Action, key: int) -> None:
        """Add a key binding for an action."""
        keys = self._key_bindings.setdefault(action, [])
        if key not in keys:
            keys.append(key)

    def unbind_key(self, action: Action, key: int) -> None:
        """Remove a key binding for an action."""
        if key in self._key_bindings.get(action, []):
            self._key_bindings[action].remove(key)

    def get_bindings(self, action: Action) -> list[int]:
        """Get all key bindings for an action."""
        return self._key_bindings.get(action, []).copy()

    # Text input

    def start_text_input(self, callback: Callable[[str], None]) -> None:
        """Start capturing typed text; callback receives each text chunk."""
        self._text_input_callback = callback
        pygame.key.start_text_input()

    def stop_text_input(self) -> None:
        self._text_input_callback = None
        pygame.key.stop_text_input()

    # Frame update

    def process_event(self, event: pygame.event.Event) -> None:
        """Process a pygame event."""
        if event.type == pygame.KEYDOWN:
            self._state.keys_pressed.add(event.key)
        elif event.type == pygame.KEYUP:
            self._state.keys_pressed.discard(event.key)
        elif event.type == pygame.MOUSEMOTION:
            self._state.mouse_pos = (event.pos[0], event.pos[1])
        elif event.type == pygame.MOUSEBUTTONDOWN:
            self._state.mouse_buttons.add(event.button)
        elif event.type == pygame.MOUSEBUTTONUP:
            self._state.mouse_buttons.discard(event.button)
        elif event.type in (pygame.JOYDEVICEADDED, pygame.JOYDEVICEREMOVED):
            self._refresh_gamepads()
        elif event.type == pygame.JOYBUTTONDOWN:
            self._state.gamepad_buttons.add(event.button)
        elif event.type == pygame.JOYBUTTONUP:
            self._state.gamepad_buttons.discard(event.button)
        elif event.type == pygame.JOYHATMOTION:
            hat_action = self._hat_bindings.get(tuple(event.value))
            self._hat_actions = {hat_action} if hat_action else set()
        elif event.type == pygame.TEXTINPUT:
            if self._text_input_callback:
                self._text_input_callback(event.text)
            if self.event_bus:
                self.event_bus.publish(InputEvent.TEXT_ENTERED, text=event.text)

    def update(self) -> None:
        """
        Recompute action states for a new frame.

        Call this at the start of each fixed update.
        """
        pressed = self._collect_actions()
        self._state.actions_pressed = pressed
        self._state.actions_just_pressed = pressed - self._prev_actions
        self._state.actions_just_released = self._prev_actions - pressed

        if self.event_bus:
            for action in self._state.actions_just_pressed:
                self.event_bus.publish(InputEvent.ACTION_PRESSED, action=action)
            for action in self._state.actions_just_released:
                self.event_bus.publish(InputEvent.ACTION_RELEASED, action=action)

        self._prev_actions = pressed.copy()

    def _collect_actions(self) -> set[Action]:
        pressed = set(self._hat_actions)
        for action, keys in self._key_bindings.items():
            if any(k in self._state.keys_pressed for k in keys):
                pressed.add(action)
        for action, buttons in self._mouse_bindings.items():
            if any(b in self._state.mouse_buttons for b in buttons):
                pressed.add(action)
        for action, buttons in self._gamepad_bindings.items():
            if any(b in self._state.gamepad_buttons for b in buttons):
                pressed.add(action)
        return pressed
