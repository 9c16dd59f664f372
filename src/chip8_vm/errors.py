"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
VM-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── InvalidProgramError - program image cannot be loaded (fatal, pre-run)
├── ConfigError - invalid emulator configuration
└── VMError (runtime, carries address and opcode)
    ├── UnsupportedOpcodeError - instruction matches no defined form
    ├── StackOverflowError - CALL with a full call stack
    ├── StackUnderflowError - RET with an empty call stack
    └── OutOfBoundsAccessError - memory, display or key access out of range

Recovered vs. Fatal
-------------------
UnsupportedOpcodeError, StackOverflowError and StackUnderflowError are never
raised by the engine. They are constructed and handed to the error observer
(see machine/observer.py), and execution continues.

OutOfBoundsAccessError is raised only under the FAULT bounds policy; under
CLIP it is reported to the observer like the other recovered errors.

InvalidProgramError is raised by Emulator.load() before anything runs.

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

        try:
            emu.load(rom)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


class InvalidProgramError(Chip8Error):
    """
    Program image rejected at load time.

    Raised when the image has an odd byte count (instructions are always
    two bytes) or does not fit between the program base and the end of
    memory.

    Attributes:
        size: Size of the rejected image in bytes
    """

    def __init__(self, message: str, size: Optional[int] = None):
        self.size = size
        super().__init__(message)


class ConfigError(Chip8Error):
    """Invalid emulator configuration value."""
    pass


# =============================================================================
# Runtime Errors
# =============================================================================

class VMError(Chip8Error):
    """
    Base exception for errors detected while executing an instruction.

    Attributes:
        message: The error description
        address: Address of the faulting instruction (optional)
        opcode: The 16-bit instruction word (optional)
    """

    def __init__(
        self,
        message: str,
        address: Optional[int] = None,
        opcode: Optional[int] = None,
    ):
        self.message = message
        self.address = address
        self.opcode = opcode
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format as '$0ADDR [OPCD]: message'.

        Example output:
            $0204 [5121]: unsupported opcode
        """
        parts = []
        if self.address is not None:
            parts.append(f"${self.address:04X}")
        if self.opcode is not None:
            parts.append(f"[{self.opcode:04X}]")
        if parts:
            return f"{' '.join(parts)}: {self.message}"
        return self.message


class UnsupportedOpcodeError(VMError):
    """
    Decoded instruction does not match any defined form or sub-form.

    Examples:
        - 5xy1 (5-family requires a zero low nibble)
        - 8xy8 (no ALU operation 8)
        - Fx99 (no F-family operation 99)
    """

    def __init__(self, opcode: int, address: Optional[int] = None):
        super().__init__("unsupported opcode", address=address, opcode=opcode)


class StackOverflowError(VMError):
    """
    Subroutine call with a full call stack.

    The call has no effect and execution continues after it, which may
    livelock a program that expects the call to succeed.
    """

    def __init__(self, depth: int, address: Optional[int] = None,
                 opcode: Optional[int] = None):
        self.depth = depth
        super().__init__(
            f"too many nested subroutine calls (depth {depth})",
            address=address,
            opcode=opcode,
        )


class StackUnderflowError(VMError):
    """Return with nothing to pop from the call stack."""

    def __init__(self, address: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__("nothing to pop from the stack", address=address, opcode=opcode)


class OutOfBoundsAccessError(VMError):
    """
    Memory, display or key-latch access outside its declared bounds.

    Attributes:
        target: What was accessed ("memory", "display" or "keypad")
        location: The offending address, (x, y) pixel or key index
    """

    def __init__(
        self,
        target: str,
        location,
        address: Optional[int] = None,
        opcode: Optional[int] = None,
    ):
        self.target = target
        self.location = location
        if isinstance(location, tuple):
            where = f"({location[0]}, {location[1]})"
        elif target == "memory":
            where = f"${location:04X}"
        else:
            where = str(location)
        super().__init__(
            f"{target} access out of bounds at {where}",
            address=address,
            opcode=opcode,
        )
