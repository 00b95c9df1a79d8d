"""
Core host module.

Exports:
- Game, GameConfig: Fixed timestep host loop and its configuration
- EventBus, Event, NovelEvent, HostEvent: Event system
- Action: Input actions
"""

from novel_engine.core.game import Game, GameConfig
from novel_engine.core.events import EventBus, Event, NovelEvent, HostEvent
from novel_engine.core.actions import Action

__all__ = [
    "Game",
    "GameConfig",
    "EventBus",
    "Event",
    "NovelEvent",
    "HostEvent",
    "Action",
]
