"""
Host loop with a fixed timestep.

The Game class owns the window, the event bus and the input handler, and
ticks every registered updatable once per fixed timestep. The chapter
interpreter is one such updatable: it advances exactly one logical step per
tick and yields back so the host can collect input between steps.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

import pygame

from novel_engine.core.actions import Action
from novel_engine.core.events import EventBus, HostEvent
from novel_engine.input.handler import InputHandler

logger = logging.getLogger(__name__)


class Updatable(Protocol):
    def update(self, dt: float) -> None: ...


class GameConfig:
    """Configuration for the host loop."""

    def __init__(
        self,
        title: str = "Novel Engine",
        width: int = 1280,
        height: int = 720,
        target_fps: int = 60,
        fixed_timestep: float = 1 / 60,
        max_frame_skip: int = 5,
        fullscreen: bool = False,
        resizable: bool = True,
        headless: bool = False,
    ):
        self.title = title
        self.width = width
        self.height = height
        self.target_fps = target_fps
        self.fixed_timestep = fixed_timestep
        self.max_frame_skip = max_frame_skip
        self.fullscreen = fullscreen
        self.resizable = resizable
        self.headless = headless


class Game:
    """
    Main host class.

    Usage:
        game = Game(GameConfig(title="Prologue"))
        novel = create_novel(NovelConfig(), event_bus=game.event_bus, ...)
        game.add_updatable(novel)
        game.on_input(novel.handle_input)
        game.run()
    """

    def __init__(self, config: GameConfig | None = None):
        self.config = config or GameConfig()
        self._running = False
        self._paused = False

        pygame.init()

        self.screen = None
        if not self.config.headless:
            flags = 0
            if self.config.fullscreen:
                flags |= pygame.FULLSCREEN
            if self.config.resizable:
                flags |= pygame.RESIZABLE
            self.screen = pygame.display.set_mode((self.config.width, self.config.height), flags)
            pygame.display.set_caption(self.config.title)

        self.event_bus = EventBus()
        self.input = InputHandler(self.event_bus)

        self._updatables: list[Updatable] = []
        self._input_hooks: list[Callable[[InputHandler], None]] = []
        self._render_hooks: list[Callable[[float], None]] = []

        self._clock = pygame.time.Clock()
        self._accumulator = 0.0
        self._current_time = time.perf_counter()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    def add_updatable(self, updatable: Updatable) -> None:
        """Tick this object once per fixed timestep."""
        self._updatables.append(updatable)

    def remove_updatable(self, updatable: Updatable) -> None:
        if updatable in self._updatables:
            self._updatables.remove(updatable)

    def on_input(self, hook: Callable[[InputHandler], None]) -> None:
        """Call hook with the input handler after each input update."""
        self._input_hooks.append(hook)

    def on_render(self, hook: Callable[[float], None]) -> None:
        """Call hook with the interpolation alpha once per frame."""
        self._render_hooks.append(hook)

    def run(self) -> None:
        """Run until quit() is called or the window is closed."""
        self._running = True
        self._current_time = time.perf_counter()
        self.event_bus.publish(HostEvent.HOST_STARTED)
        logger.info(f"Host loop started: {self.config.title}")

        while self._running:
            new_time = time.perf_counter()
            frame_time = new_time - self._current_time
            self._current_time = new_time

            self._process_events()
            alpha = self.advance(frame_time)
            self._render(alpha)

            self._clock.tick(self.config.target_fps)

        self._shutdown()

    def advance(self, frame_time: float) -> float:
        """
        Feed elapsed wall time into the fixed timestep accumulator.

        Returns:
            Interpolation alpha (0-1) for rendering
        """
        # Prevent spiral of death
        self._accumulator += min(frame_time, 0.25)

        step = self.config.fixed_timestep
        updates = 0
        while self._accumulator >= step:
            self._fixed_update(step)
            self._accumulator -= step
            updates += 1
            if updates >= self.config.max_frame_skip:
                self._accumulator = 0.0
                break

        return self._accumulator / step

    def quit(self) -> None:
        self._running = False

    def pause(self) -> None:
        """Stop ticking updatables (input is still collected)."""
        self._paused = True
        self.event_bus.publish(HostEvent.HOST_PAUSED)

    def resume(self) -> None:
        self._paused = False
        self.event_bus.publish(HostEvent.HOST_RESUMED)

    def _process_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.quit()
            elif event.type == pygame.VIDEORESIZE:
                self.event_bus.publish(HostEvent.WINDOW_RESIZED, width=event.w, height=event.h)
            else:
                self.input.process_event(event)

    def _fixed_update(self, dt: float) -> None:
        self.input.update()
        if self.input.is_action_just_pressed(Action.PAUSE):
            if self._paused:
                self.resume()
            else:
                self.pause()
        if self._paused:
            return
        for hook in self._input_hooks:
            hook(self.input)
        for updatable in list(self._updatables):
            updatable.update(dt)

    def _render(self, alpha: float) -> None:
        for hook in self._render_hooks:
            hook(alpha)
        if self.screen is not None:
            pygame.display.flip()

    def _shutdown(self) -> None:
        self.event_bus.publish(HostEvent.HOST_QUIT)
        logger.info("Host loop stopped")
        pygame.quit()
