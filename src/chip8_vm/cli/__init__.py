"""
chip8-vm Command-Line Interface
===============================

This package provides command-line tools for chip8-vm:

- **c8run**: Run a program image headless and print the final screen
- **c8disasm**: Disassemble a program image

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c8run", "c8disasm"]
