"""
chip8-vm - CHIP-8 Virtual Machine Core
======================================

This package provides a complete interpreter for the base CHIP-8
instruction set together with the tooling around it.

CHIP-8 is a 1970s interpreted language for 8-bit microcomputers: 4KB of
memory, sixteen 8-bit registers, a 64 × 32 monochrome display, a 16-key
hexadecimal keypad and two 60 Hz timers. Programs are distributed as raw
big-endian instruction images loaded at $200.

Main Components
---------------
- **machine**: The virtual machine (c8run)
    Engine, memory, display, keypad, timers, breakpoints and host loop

- **disassembler**: Program image disassembler (c8disasm)
    Converts program images to Cowgod-style mnemonics

Quick Start
-----------
Run a program headless:
    >>> from chip8_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_file("maze.ch8")
    >>> emu.run(2_000)
    >>> print(emu.display_text())

Disassemble it:
    >>> from chip8_vm import Chip8Disassembler
    >>> print(Chip8Disassembler().disassemble_to_text(rom))

Or use the command-line tools:
    $ c8run maze.ch8 --max-steps 2000
    $ c8disasm maze.ch8

Copyright (c) 2026 chip8-vm Contributors
"""

__version__ = "1.0.0"
__author__ = "chip8-vm Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.errors import (
    Chip8Error,
    InvalidProgramError,
    ConfigError,
    VMError,
    UnsupportedOpcodeError,
    StackOverflowError,
    StackUnderflowError,
    OutOfBoundsAccessError,
)

from chip8_vm.machine import (
    Emulator,
    EmulatorConfig,
    BoundsPolicy,
    BreakEvent,
    BreakReason,
    CollectingObserver,
    LoggingObserver,
    HostLoop,
)

from chip8_vm.disassembler import Chip8Disassembler, DisassembledInstruction

__all__ = [
    "__version__",
    # Errors
    "Chip8Error",
    "InvalidProgramError",
    "ConfigError",
    "VMError",
    "UnsupportedOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "OutOfBoundsAccessError",
    # Machine
    "Emulator",
    "EmulatorConfig",
    "BoundsPolicy",
    "BreakEvent",
    "BreakReason",
    "CollectingObserver",
    "LoggingObserver",
    "HostLoop",
    # Disassembler
    "Chip8Disassembler",
    "DisassembledInstruction",
]
