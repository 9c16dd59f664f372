"""
Breakpoint Support for the CHIP-8 Emulator
==========================================

PC breakpoints stop ``Emulator.run()`` before the instruction at a given
address executes. The BreakpointManager is attached to the engine's
instruction hook and records why execution stopped.

Example usage:

    >>> from chip8_vm.machine import Emulator, BreakReason
    >>> emu = Emulator()
    >>> emu.load(rom)
    >>> emu.add_breakpoint(0x20A)
    >>> event = emu.run(10_000)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at ${event.address:03X}")

Copyright (c) 2026 chip8-vm Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Set


class BreakReason(Enum):
    """
    Enumeration of reasons why execution stopped.

    Used in BreakEvent to indicate what triggered the break.
    """
    NONE = auto()             # No specific reason
    PC_BREAKPOINT = auto()    # PC reached a breakpoint address
    STEP = auto()             # Single-step mode
    WAITING_FOR_KEY = auto()  # Fx0A is waiting for host input
    MAX_STEPS = auto()        # Step budget exhausted
    ERROR = auto()            # Hard fault (out-of-bounds under FAULT policy)


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC involved (if applicable)
        opcode: Instruction word at that address (if applicable)
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    opcode: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at ${self.address:03X}" if self.address is not None else "Breakpoint"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.WAITING_FOR_KEY:
                return "Waiting for key"
            case BreakReason.MAX_STEPS:
                return "Maximum steps reached"
            case BreakReason.ERROR:
                return "Runtime error"
            case _:
                return "Unknown"


class BreakpointManager:
    """
    PC breakpoint set with last-event tracking.

    The engine calls ``check_instruction`` before each instruction;
    returning False stops execution and ``last_event`` describes why.
    """

    def __init__(self):
        self._breakpoints: Set[int] = set()
        self._enabled = True
        self.last_event: Optional[BreakEvent] = None

    def add_breakpoint(self, address: int) -> None:
        """Stop before executing the instruction at ``address``."""
        self._breakpoints.add(address & 0xFFFF)

    def remove_breakpoint(self, address: int) -> bool:
        """Remove a breakpoint; returns False if none was set."""
        address &= 0xFFFF
        if address in self._breakpoints:
            self._breakpoints.remove(address)
            return True
        return False

    def has_breakpoint(self, address: int) -> bool:
        return (address & 0xFFFF) in self._breakpoints

    @property
    def breakpoints(self) -> Set[int]:
        """Copy of the active breakpoint addresses."""
        return set(self._breakpoints)

    def clear_all(self) -> None:
        self._breakpoints.clear()
        self.last_event = None

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        """Keep breakpoints but ignore them until enable()."""
        self._enabled = False

    def clear_break_request(self) -> None:
        """Forget the last break event."""
        self.last_event = None

    def check_instruction(self, pc: int, opcode: int) -> bool:
        """
        Instruction hook.

        Returns:
            True to continue execution, False to stop
        """
        if self._enabled and pc in self._breakpoints:
            self.last_event = BreakEvent(BreakReason.PC_BREAKPOINT, address=pc, opcode=opcode)
            return False
        return True
