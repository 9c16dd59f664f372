"""
CHIP-8 Disassembler Module
==========================

Turns program images back into readable mnemonics, for ROM inspection and
for annotating traces and breakpoint stops.

Usage:
    from chip8_vm.disassembler import Chip8Disassembler

    disasm = Chip8Disassembler()
    print(disasm.disassemble_to_text(rom_bytes, start_address=0x200))

Copyright (c) 2026 chip8-vm Contributors
"""

from .chip8 import Chip8Disassembler, DisassembledInstruction, decode

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
    "decode",
]
