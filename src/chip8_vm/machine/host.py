"""
Host Loop
=========

Drives an Emulator the way an interactive front end does, once per
iteration:

1. refresh the 16-key input latch from the InputSource
2. poll the key wait, or execute one instruction
3. hand the display to the Renderer if it changed
4. age the timers
5. sleep for the configured step delay

Input and output are protocols so the loop runs headless in tests and
under any windowing library a front end chooses. The clock and sleep
function are injectable for deterministic pacing.

Example:
    >>> emu = Emulator()
    >>> emu.load(rom)
    >>> loop = HostLoop(emu, renderer=TextRenderer(), step_delay_ms=2)
    >>> loop.run(max_iterations=10_000)

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
import time
from typing import Callable, Optional, Protocol, Sequence

import click

from .display import Display
from .emulator import Emulator
from .keyboard import KEY_COUNT

logger = logging.getLogger(__name__)


class InputSource(Protocol):
    """Supplies the key latch once per loop iteration."""

    def poll(self) -> Sequence[bool]:
        """Current state of keys 0-F."""
        ...


class Renderer(Protocol):
    """Receives the display whenever an instruction changed it."""

    def render(self, display: Display) -> None:
        ...


class StaticInput:
    """InputSource that always returns the same latch (default: nothing pressed)."""

    def __init__(self, states: Optional[Sequence[bool]] = None):
        self.states = list(states) if states is not None else [False] * KEY_COUNT

    def poll(self) -> Sequence[bool]:
        return self.states


class NullRenderer:
    """Renderer that only counts frames."""

    def __init__(self):
        self.frames = 0

    def render(self, display: Display) -> None:
        self.frames += 1


class TextRenderer:
    """Redraw the display as text in the terminal."""

    def __init__(self, on: str = "#", off: str = " ", clear_screen: bool = True):
        self.on = on
        self.off = off
        self.clear_screen = clear_screen

    def render(self, display: Display) -> None:
        if self.clear_screen:
            click.clear()
        click.echo(display.get_text(self.on, self.off))


class HostLoop:
    """
    Fixed-step driver for an Emulator.

    Attributes:
        emulator: The machine being driven
        step_delay_ms: Sleep after every iteration, in milliseconds
        iterations: Loop iterations completed so far
        frames: Number of times the renderer was called
    """

    def __init__(
        self,
        emulator: Emulator,
        input_source: Optional[InputSource] = None,
        renderer: Optional[Renderer] = None,
        step_delay_ms: float = 2.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if step_delay_ms < 0:
            raise ValueError(f"step_delay_ms must be >= 0, got {step_delay_ms}")
        self.emulator = emulator
        self.input_source: InputSource = input_source or StaticInput()
        self.renderer: Renderer = renderer or NullRenderer()
        self.step_delay_ms = step_delay_ms
        self._sleep = sleep or time.sleep
        self.iterations = 0
        self.frames = 0
        self._stop_requested = False

    def stop(self) -> None:
        """Ask run() to return after the current iteration."""
        self._stop_requested = True

    def iterate(self) -> bool:
        """
        One host iteration.

        Returns:
            True if the display changed
        """
        emu = self.emulator
        emu.set_inputs(self.input_source.poll())
        changed = emu.step()
        if changed:
            self.renderer.render(emu.state.display)
            self.frames += 1
        emu.age_timers()
        self.iterations += 1
        return changed

    def run(
        self,
        max_iterations: Optional[int] = None,
        should_stop: Optional[Callable[[Emulator], bool]] = None,
    ) -> int:
        """
        Iterate until stopped.

        Args:
            max_iterations: Upper bound on iterations (None: unbounded)
            should_stop: Checked before each iteration; True ends the loop

        Returns:
            Number of iterations performed by this call

        Raises:
            OutOfBoundsAccessError: Under the FAULT bounds policy
        """
        self._stop_requested = False
        delay = self.step_delay_ms / 1000.0
        done = 0

        logger.info(f"Host loop started (step delay {self.step_delay_ms} ms)")
        while not self._stop_requested:
            if max_iterations is not None and done >= max_iterations:
                break
            if should_stop is not None and should_stop(self.emulator):
                break
            self.iterate()
            done += 1
            if delay > 0:
                self._sleep(delay)
        logger.info(f"Host loop stopped after {done} iterations")
        return done
