"""
Input action definitions.

Actions abstract raw input (keys, mouse buttons, gamepad buttons) into the
few semantic intents a reader has: advance the text, skip the chapter,
move through a choice list, quick save or load, pause.

Usage:
    if input.is_action_just_pressed(Action.ADVANCE):
        controller.next()
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """
    Semantic input actions.

    Each action can be mapped to several input sources.
    """

    # Reading
    ADVANCE = auto()
    SKIP = auto()

    # Choice and input widgets
    CHOICE_UP = auto()
    CHOICE_DOWN = auto()
    CONFIRM = auto()

    # System
    QUICKSAVE = auto()
    QUICKLOAD = auto()
    PAUSE = auto()


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.ADVANCE: [pygame.K_RIGHT, pygame.K_SPACE, pygame.K_RETURN],
    Action.SKIP: [pygame.K_x],
    Action.CHOICE_UP: [pygame.K_UP, pygame.K_w],
    Action.CHOICE_DOWN: [pygame.K_DOWN, pygame.K_s],
    Action.CONFIRM: [pygame.K_RETURN, pygame.K_z],
    Action.QUICKSAVE: [pygame.K_F5],
    Action.QUICKLOAD: [pygame.K_F9],
    Action.PAUSE: [pygame.K_p],
}

# Mouse buttons: 1 left, 2 middle, 3 right
DEFAULT_MOUSE_BINDINGS: dict[Action, list[int]] = {
    Action.ADVANCE: [1],
}

# SDL controller layout
DEFAULT_GAMEPAD_BINDINGS: dict[Action, list[int]] = {
    Action.ADVANCE: [0],    # A button
    Action.CONFIRM: [0],
    Action.SKIP: [3],       # Y button
    Action.PAUSE: [7],      # Start
}

DEFAULT_GAMEPAD_HAT_BINDINGS: dict[tuple[int, int], Action] = {
    (0, 1): Action.CHOICE_UP,
    (0, -1): Action.CHOICE_DOWN,
}
