"""
CHIP-8 Virtual Machine
======================

An interpreter for the base CHIP-8 instruction set.

This package provides:

- **Engine**: All 35 base instructions with decode-after-advance semantics
- **Memory**: 4KB with the built-in hex font at $000 and programs at $200
- **Display**: 64 × 32 monochrome XOR framebuffer with text/image APIs
- **Keypad**: 16-key input latch with a host key map
- **Timers**: 60 Hz delay and sound timers on an injectable clock
- **Debugging**: Breakpoints, tracing, snapshots and error observers

Quick Start
-----------

Basic usage::

    >>> from chip8_vm.machine import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=42))
    >>> emu.load_file("maze.ch8")
    >>> emu.run(5_000)
    >>> print(emu.display_text())

With debugging::

    >>> emu.add_breakpoint(0x20A)
    >>> event = emu.run()
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(emu.snapshot())

Module Structure
----------------

- `emulator.py`: Emulator and EmulatorConfig (high-level API)
- `cpu.py`: Instruction engine
- `state.py`: Machine state aggregate and snapshots
- `memory.py`: Memory and glyph font
- `display.py`: Framebuffer
- `keyboard.py`: Keypad latch and host key map
- `timers.py`: Delay and sound timers
- `bounds.py`: Out-of-bounds access policies
- `observer.py`: Recovered-error observers
- `breakpoints.py`: Debugging support
- `host.py`: Fixed-step host loop

Copyright (c) 2026 chip8-vm Contributors
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# Engine and state
from .cpu import Chip8CPU
from .state import MachineState, MachineSnapshot, DEFAULT_STACK_DEPTH

# Components
from .memory import Memory, FONT
from .display import Display
from .keyboard import Keypad, DEFAULT_KEY_MAP, KEY_COUNT
from .timers import Timers, DEFAULT_TIMER_HZ

# Policies and observers
from .bounds import BoundsPolicy, default_policy
from .observer import ErrorObserver, LoggingObserver, CollectingObserver

# Debugging support
from .breakpoints import BreakpointManager, BreakEvent, BreakReason

# Host driver
from .host import HostLoop, InputSource, Renderer, StaticInput, NullRenderer, TextRenderer

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # Engine
    "Chip8CPU",
    "MachineState",
    "MachineSnapshot",
    "DEFAULT_STACK_DEPTH",

    # Components
    "Memory",
    "FONT",
    "Display",
    "Keypad",
    "DEFAULT_KEY_MAP",
    "KEY_COUNT",
    "Timers",
    "DEFAULT_TIMER_HZ",

    # Policies
    "BoundsPolicy",
    "default_policy",
    "ErrorObserver",
    "LoggingObserver",
    "CollectingObserver",

    # Debugging
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",

    # Host
    "HostLoop",
    "InputSource",
    "Renderer",
    "StaticInput",
    "NullRenderer",
    "TextRenderer",
]
