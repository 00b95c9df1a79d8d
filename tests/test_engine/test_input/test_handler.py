from types import SimpleNamespace
from unittest.mock import MagicMock

import pygame
import pytest

from novel_engine.core.actions import Action
from novel_engine.input.handler import InputEvent, InputHandler


def key_event(event_type, key):
    return SimpleNamespace(type=event_type, key=key)

@pytest.fixture
def handler(event_bus):
    return InputHandler(event_bus)


def test_initial_state(handler):
    assert handler.mouse_pos == (0, 0)
    assert not handler.is_action_pressed(Action.ADVANCE)
    assert not handler.is_capturing_text

def test_action_state(handler):
    handler._state.actions_pressed.add(Action.ADVANCE)

    assert handler.is_action_pressed(Action.ADVANCE)
    assert not handler.is_action_pressed(Action.SKIP)

def test_key_press_is_one_edge(handler):
    handler.process_event(key_event(pygame.KEYDOWN, pygame.K_SPACE))
    handler.update()

    assert handler.is_action_just_pressed(Action.ADVANCE)
    assert handler.is_action_pressed(Action.ADVANCE)

    handler.update()
    assert not handler.is_action_just_pressed(Action.ADVANCE)
    assert handler.is_action_pressed(Action.ADVANCE)

    handler.process_event(key_event(pygame.KEYUP, pygame.K_SPACE))
    handler.update()
    assert handler.is_action_just_released(Action.ADVANCE)
    assert not handler.is_action_pressed(Action.ADVANCE)

def test_mouse_click_advances(handler):
    handler.process_event(SimpleNamespace(type=pygame.MOUSEBUTTONDOWN, button=1))
    handler.process_event(SimpleNamespace(type=pygame.MOUSEMOTION, pos=(40, 30)))
    handler.update()

    assert handler.is_action_just_pressed(Action.ADVANCE)
    assert handler.mouse_pos == (40, 30)

def test_gamepad_hat_maps_choice_navigation(handler):
    handler.process_event(SimpleNamespace(type=pygame.JOYHATMOTION, value=(0, -1)))
    handler.update()
    assert handler.is_action_just_pressed(Action.CHOICE_DOWN)

    handler.process_event(SimpleNamespace(type=pygame.JOYHATMOTION, value=(0, 0)))
    handler.update()
    assert handler.is_action_just_released(Action.CHOICE_DOWN)

def test_action_events_are_published(handler, event_bus):
    pressed = []
    event_bus.subscribe(InputEvent.ACTION_PRESSED, pressed.append, weak=False)

    handler.process_event(key_event(pygame.KEYDOWN, pygame.K_x))
    handler.update()

    assert [event["action"] for event in pressed] == [Action.SKIP]

def test_rebinding(handler):
    handler.bind_key(Action.SKIP, pygame.K_TAB)
    handler.bind_key(Action.SKIP, pygame.K_TAB)
    assert handler.get_bindings(Action.SKIP) == [pygame.K_x, pygame.K_TAB]

    handler.unbind_key(Action.SKIP, pygame.K_x)
    handler.process_event(key_event(pygame.KEYDOWN, pygame.K_x))
    handler.update()

    assert not handler.is_action_pressed(Action.SKIP)

def test_text_input_capture(handler, event_bus):
    typed = []
    entered = []
    event_bus.subscribe(InputEvent.TEXT_ENTERED, entered.append, weak=False)

    handler.start_text_input(typed.append)
    assert handler.is_capturing_text
    pygame.key.start_text_input.assert_called_once()

    handler.process_event(SimpleNamespace(type=pygame.TEXTINPUT, text="A"))
    handler.stop_text_input()
    handler.process_event(SimpleNamespace(type=pygame.TEXTINPUT, text="b"))

    assert typed == ["A"]
    assert [event["text"] for event in entered] == ["A", "b"]

def test_gamepads_refreshed_on_hotplug(handler):
    joystick = MagicMock()
    joystick.get_instance_id.return_value = 7
    pygame.joystick.get_count.return_value = 1
    pygame.joystick.Joystick.return_value = joystick

    handler.process_event(SimpleNamespace(type=pygame.JOYDEVICEADDED))

    assert handler._gamepads == {7: joystick}
