"""
Machine State for the CHIP-8 Virtual Machine
============================================

MachineState is the single aggregate the engine mutates: register file,
call stack, blocking-wait sub-state and the memory, display, keypad and
timer components. Each Emulator owns exactly one; nothing is global.

Register file:
    v[0..15]   8-bit general registers (VF doubles as the flag register)
    i          index register (addresses memory)
    pc         program counter, starts at $200
    stack      return addresses, at most ``stack_depth`` entries
    sp         number of occupied stack slots (== len(stack))

Copyright (c) 2026 chip8-vm Contributors
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .display import Display
from .keyboard import Keypad
from .memory import Memory
from .timers import Clock, DEFAULT_TIMER_HZ, Timers


REGISTER_COUNT = 16
FLAG_REGISTER = 0xF

# Classic interpreters use 16; see EmulatorConfig.stack_depth
DEFAULT_STACK_DEPTH = 24


@dataclass
class MachineState:
    """
    Complete CHIP-8 machine state.

    All register values are plain Python ints; the engine masks every
    register write to 8 bits.
    """
    memory: Memory = field(default_factory=Memory)
    display: Display = field(default_factory=Display)
    keypad: Keypad = field(default_factory=Keypad)
    timers: Timers = field(default_factory=Timers)
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    i: int = 0
    pc: int = Memory.PROGRAM_BASE
    stack: List[int] = field(default_factory=list)
    stack_depth: int = DEFAULT_STACK_DEPTH
    blocking: bool = False
    target_register: int = 0

    @classmethod
    def create(
        cls,
        stack_depth: int = DEFAULT_STACK_DEPTH,
        clock: Optional[Clock] = None,
        timer_hz: float = DEFAULT_TIMER_HZ,
    ) -> "MachineState":
        """Fresh power-on state with the font loaded and no program."""
        return cls(timers=Timers(clock=clock, hz=timer_hz), stack_depth=stack_depth)

    @property
    def sp(self) -> int:
        """Stack pointer: number of occupied stack slots."""
        return len(self.stack)

    @property
    def vf(self) -> int:
        """Flag register."""
        return self.v[FLAG_REGISTER]

    def snapshot(self) -> "MachineSnapshot":
        """Immutable copy of registers, stack, timers and wait state."""
        return MachineSnapshot(
            v=tuple(self.v),
            i=self.i,
            pc=self.pc,
            stack=tuple(self.stack),
            delay_timer=self.timers.delay,
            sound_timer=self.timers.sound,
            blocking=self.blocking,
            target_register=self.target_register,
        )


@dataclass(frozen=True)
class MachineSnapshot:
    """
    Point-in-time copy of the register-level machine state.

    Memory and display are not included; use Memory.dump() and
    Display.snapshot() for those.
    """
    v: Tuple[int, ...]
    i: int
    pc: int
    stack: Tuple[int, ...]
    delay_timer: int
    sound_timer: int
    blocking: bool
    target_register: int

    @property
    def sp(self) -> int:
        return len(self.stack)

    def __str__(self) -> str:
        regs = " ".join(f"V{n:X}={value:02X}" for n, value in enumerate(self.v))
        return (
            f"PC=${self.pc:03X} I=${self.i:03X} SP={self.sp} "
            f"DT={self.delay_timer} ST={self.sound_timer}\n{regs}"
        )
