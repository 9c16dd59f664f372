"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the main `Emulator` class that owns one MachineState
and one engine and exposes the host-facing contract:

- load(program_bytes) / load_file(path)
- step() -> display_changed
- set_inputs(16 booleans)
- age_timers(elapsed=None)
- display() -> 32 rows × 64 pixels

plus run control for tests and debugging (run, run_until_pc, breakpoints,
snapshots).

A host drives it once per loop iteration: refresh inputs, then either
poll the key wait or step, render if the display changed, age the timers.
``tick()`` performs the last three in that order; HostLoop in host.py
adds input, rendering and pacing around it.

Example usage:
    >>> from chip8_vm.machine import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=1))
    >>> emu.load(Path("pong.ch8").read_bytes())
    >>> for _ in range(1000):
    ...     emu.tick()
    >>> print(emu.display_text())

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
import os
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple, Union

from ..errors import ConfigError, OutOfBoundsAccessError
from .bounds import BoundsPolicy, default_policy
from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .cpu import Chip8CPU
from .observer import ErrorObserver
from .state import DEFAULT_STACK_DEPTH, MachineSnapshot, MachineState
from .timers import Clock, DEFAULT_TIMER_HZ

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        stack_depth: Call stack capacity. Default 24 (classic CHIP-8 is 16).
        bounds_policy: FAULT, CLIP or WRAP for out-of-range accesses.
                       Default depends on interpreter mode (see bounds.py).
        seed: Seed for the Cxnn random source. None uses OS entropy.
        timer_hz: Delay/sound timer decrement rate.
        clock: Time source in seconds for timer aging. None uses time.monotonic.
        trace: Log every executed instruction at DEBUG level.

    Example:
        >>> config = EmulatorConfig(stack_depth=16, seed=1234)
        >>> config = EmulatorConfig(bounds_policy=BoundsPolicy.WRAP)
    """
    stack_depth: int = DEFAULT_STACK_DEPTH
    bounds_policy: BoundsPolicy = field(default_factory=default_policy)
    seed: Optional[int] = None
    timer_hz: float = DEFAULT_TIMER_HZ
    clock: Optional[Clock] = None
    trace: bool = False

    def __post_init__(self):
        if self.stack_depth < 1:
            raise ConfigError(f"stack_depth must be at least 1, got {self.stack_depth}")
        if self.timer_hz <= 0:
            raise ConfigError(f"timer_hz must be positive, got {self.timer_hz}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_STACK_DEPTH: Call stack capacity
            CHIP8_BOUNDS_POLICY: fault, clip or wrap
            CHIP8_SEED: Integer seed for Cxnn
            CHIP8_TIMER_HZ: Timer rate
            CHIP8_TRACE: 1/true/yes to trace instructions

        Raises:
            ConfigError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        try:
            if "CHIP8_STACK_DEPTH" in env:
                kwargs["stack_depth"] = int(env["CHIP8_STACK_DEPTH"])
            if "CHIP8_BOUNDS_POLICY" in env:
                kwargs["bounds_policy"] = BoundsPolicy.parse(env["CHIP8_BOUNDS_POLICY"])
            if "CHIP8_SEED" in env:
                kwargs["seed"] = int(env["CHIP8_SEED"], 0)
            if "CHIP8_TIMER_HZ" in env:
                kwargs["timer_hz"] = float(env["CHIP8_TIMER_HZ"])
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

        if "CHIP8_TRACE" in env:
            kwargs["trace"] = env["CHIP8_TRACE"].strip().lower() in ("1", "true", "yes", "on")

        return cls(**kwargs)


class Emulator:
    """
    CHIP-8 emulator with instrumentation support.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        state: The MachineState (registers, memory, display, keypad, timers)
        cpu: The instruction engine
        breakpoints: The breakpoint manager

    Example:
        >>> emu = Emulator()
        >>> emu.load(bytes([0x00, 0xE0, 0x12, 0x02]))  # CLS; loop: JP loop
        >>> emu.step()
        True
        >>> event = emu.run(100)
        >>> event.reason
        <BreakReason.MAX_STEPS: 5>
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        observer: Optional[ErrorObserver] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the emulator with given configuration.

        Args:
            config: EmulatorConfig. If None, defaults are used.
            observer: Sink for recovered errors (default: log at WARNING)
            rng: Random source for Cxnn; overrides config.seed
        """
        self.config = config or EmulatorConfig()
        self._observer = observer
        self._rng = rng
        self._program: bytes = b""
        self.breakpoints = BreakpointManager()
        self._build_machine()

    def _build_machine(self) -> None:
        config = self.config
        self.state = MachineState.create(
            stack_depth=config.stack_depth,
            clock=config.clock,
            timer_hz=config.timer_hz,
        )
        rng = self._rng or random.Random(config.seed)
        self.cpu = Chip8CPU(
            self.state,
            bounds_policy=config.bounds_policy,
            rng=rng,
            observer=self._observer,
        )
        self.cpu.on_instruction = self._instruction_hook
        self._total_steps = 0

    def _instruction_hook(self, pc: int, opcode: int) -> bool:
        """
        Internal hook called before each instruction during run().

        Returns:
            True to continue execution, False to stop (breakpoint hit)
        """
        return self.breakpoints.check_instruction(pc, opcode)

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load(self, program: bytes) -> None:
        """
        Load a program image into a freshly reset machine.

        The font is copied to $000 and the program to $200; registers,
        stack, timers, display and key latch start cleared with PC = $200.

        Raises:
            InvalidProgramError: If the image has an odd length or is too large
        """
        program = bytes(program)
        self._build_machine()
        self.state.memory.load_program(program)
        self._program = program
        logger.info(f"Loaded program ({len(program)} bytes)")

    def load_file(self, path: Union[str, Path]) -> None:
        """
        Load a program image from a file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidProgramError: If the image is rejected
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"ROM file not found: {path}")
        self.load(path.read_bytes())

    def reset(self) -> None:
        """Return to the power-on state with the last loaded program."""
        self.load(self._program)
        self.breakpoints.clear_break_request()

    # =========================================================================
    # Host Contract
    # =========================================================================

    def step(self) -> bool:
        """
        One fetch-decode-execute cycle, or a key-wait poll while blocking.

        Breakpoints are not checked. With tracing enabled, the pc and
        opcode of every executed instruction are logged at DEBUG.

        Returns:
            True if the display changed

        Raises:
            OutOfBoundsAccessError: Under the FAULT bounds policy
        """
        waiting = self.state.blocking
        if self.config.trace and not waiting:
            logger.debug(f"${self.state.pc:03X}\t{self.cpu.peek_opcode():04X}")
        changed = self.cpu.step()
        if not waiting:
            self._total_steps += 1
        return changed

    def set_inputs(self, states: Sequence[bool]) -> None:
        """Replace the 16-key input latch."""
        self.state.keypad.set_inputs(states)

    def key_down(self, name: str) -> None:
        """Press the keypad key mapped to a host key name."""
        self.state.keypad.key_down(name)

    def key_up(self, name: str) -> None:
        """Release the keypad key mapped to a host key name."""
        self.state.keypad.key_up(name)

    def age_timers(self, elapsed: Optional[float] = None) -> bool:
        """
        Age the delay and sound timers by at most one step.

        Args:
            elapsed: Seconds since each timer's last set/decrement.
                     If None, measured with the configured clock.

        Returns:
            True if a timer was decremented
        """
        return self.state.timers.age(elapsed)

    def display(self) -> Tuple[Tuple[int, ...], ...]:
        """Read-only snapshot of the 64 × 32 display (32 rows of 64 ints)."""
        return self.state.display.snapshot()

    def display_text(self, on: str = "#", off: str = ".") -> str:
        """Display as text, one line per pixel row."""
        return self.state.display.get_text(on, off)

    def tick(self) -> bool:
        """
        One host iteration after inputs are refreshed.

        Polls the key wait or steps, then ages the timers.

        Returns:
            True if the display changed
        """
        changed = self.step()
        self.age_timers()
        return changed

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def is_waiting_for_key(self) -> bool:
        """True while an Fx0A key wait is pending."""
        return self.state.blocking

    @property
    def total_steps(self) -> int:
        """Instructions executed since load."""
        return self._total_steps

    @property
    def program(self) -> bytes:
        """The last loaded program image."""
        return self._program

    def snapshot(self) -> MachineSnapshot:
        """Immutable copy of registers, stack, timers and wait state."""
        return self.state.snapshot()

    # =========================================================================
    # Execution Control
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        self.breakpoints.add_breakpoint(address)

    def remove_breakpoint(self, address: int) -> bool:
        return self.breakpoints.remove_breakpoint(address)

    def run(self, max_steps: int = 1_000_000) -> BreakEvent:
        """
        Run until a breakpoint, a key wait, a hard fault or max_steps.

        Timers are aged after every instruction using the configured clock.

        Args:
            max_steps: Maximum instructions to execute

        Returns:
            BreakEvent describing why execution stopped
        """
        last = self.breakpoints.last_event
        self.breakpoints.clear_break_request()

        # Resuming from a breakpoint: execute the instruction it stopped at
        skip_breakpoint = (
            last is not None
            and last.reason == BreakReason.PC_BREAKPOINT
            and last.address == self.state.pc
        )

        steps = 0
        try:
            while steps < max_steps:
                if self.state.blocking and not self.cpu.resolve_blocking_wait():
                    return BreakEvent(
                        BreakReason.WAITING_FOR_KEY,
                        address=self.state.pc,
                        message=f"Waiting for key into V{self.state.target_register:X}",
                    )
                if skip_breakpoint:
                    skip_breakpoint = False
                elif not self._instruction_hook(self.state.pc, self.cpu.peek_opcode()):
                    return self.breakpoints.last_event or BreakEvent(BreakReason.NONE)
                self.step()
                steps += 1
                self.age_timers()
        except OutOfBoundsAccessError as e:
            logger.error(f"Hard fault: {e}")
            return BreakEvent(
                BreakReason.ERROR,
                address=e.address,
                opcode=e.opcode,
                message=str(e),
            )

        return BreakEvent(
            BreakReason.MAX_STEPS,
            address=self.state.pc,
            message=f"Reached max steps ({max_steps})",
        )

    def run_until_pc(self, address: int, max_steps: int = 1_000_000) -> bool:
        """
        Run until PC reaches a specific address.

        Returns:
            True if address was reached, False otherwise
        """
        was_set = self.breakpoints.has_breakpoint(address)
        if not was_set:
            self.breakpoints.add_breakpoint(address)

        try:
            event = self.run(max_steps)
            return event.reason == BreakReason.PC_BREAKPOINT and event.address == address
        finally:
            if not was_set:
                self.breakpoints.remove_breakpoint(address)

    def run_until_waiting(self, max_steps: int = 1_000_000) -> bool:
        """
        Run until the program blocks on Fx0A.

        Returns:
            True if the machine is waiting for a key
        """
        event = self.run(max_steps)
        return event.reason == BreakReason.WAITING_FOR_KEY
