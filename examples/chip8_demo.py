#!/usr/bin/env python3
"""
CHIP-8 Virtual Machine Demo
===========================

This script demonstrates how to use chip8-vm to:
1. Build a small program image in memory
2. Disassemble it
3. Run it to a breakpoint and inspect the registers
4. Answer a key wait
5. Print and save the screen

Usage:
    source .venv/bin/activate
    python examples/chip8_demo.py

Copyright (c) 2026 chip8-vm Contributors
"""

from pathlib import Path

from chip8_vm import Chip8Disassembler
from chip8_vm.machine import BreakReason, Emulator, EmulatorConfig


# Draws the digits 0-F across two rows, then waits for a key and
# draws the pressed digit underneath.
PROGRAM = bytes([
    0x60, 0x00,  # $200 LD V0, $00     digit
    0x61, 0x02,  # $202 LD V1, $02     x
    0x62, 0x02,  # $204 LD V2, $02     y
    0xF0, 0x29,  # $206 LD F, V0       loop:
    0xD1, 0x25,  # $208 DRW V1, V2, 5
    0x70, 0x01,  # $20A ADD V0, $01
    0x71, 0x06,  # $20C ADD V1, $06
    0x30, 0x08,  # $20E SE V0, $08
    0x12, 0x16,  # $210 JP $216
    0x61, 0x02,  # $212 LD V1, $02     second row
    0x62, 0x09,  # $214 LD V2, $09
    0x30, 0x10,  # $216 SE V0, $10
    0x12, 0x06,  # $218 JP loop
    0xF3, 0x0A,  # $21A LD V3, K
    0xF3, 0x29,  # $21C LD F, V3
    0x64, 0x14,  # $21E LD V4, $14
    0xD4, 0x45,  # $220 DRW V4, V4, 5
    0x12, 0x22,  # $222 JP $222
])


def main():
    output_dir = Path("trash")
    output_dir.mkdir(exist_ok=True)

    # ==========================================================================
    # 1. Create an emulator instance
    # ==========================================================================
    emu = Emulator(EmulatorConfig(seed=1))
    emu.load(PROGRAM)
    print(f"Loaded {len(emu.program)} bytes at $200")

    # ==========================================================================
    # 2. Disassemble the program
    # ==========================================================================
    print("\nDisassembly:")
    print(Chip8Disassembler().disassemble_to_text(PROGRAM))

    # ==========================================================================
    # 3. Run to the key wait via a breakpoint
    # ==========================================================================
    emu.add_breakpoint(0x21A)
    event = emu.run(10_000)
    if event.reason == BreakReason.PC_BREAKPOINT:
        print(f"\n{event}")
        print(emu.snapshot())

    emu.remove_breakpoint(0x21A)
    if emu.run_until_waiting(10):
        print("\nWaiting for a key, pressing 'D' (keypad A)")

    # ==========================================================================
    # 4. Answer the key wait
    # ==========================================================================
    emu.key_down("D")
    emu.run(10)

    # ==========================================================================
    # 5. Show the screen
    # ==========================================================================
    print()
    print(emu.display_text(on="#", off=" "))

    png = emu.state.display.render_image(scale=8)
    if png:
        path = output_dir / "chip8_demo.png"
        path.write_bytes(png)
        print(f"\nScreenshot: {path}")
    else:
        print("\nInstall Pillow for PNG screenshots")


if __name__ == "__main__":
    main()
