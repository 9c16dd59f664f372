"""
Memory Subsystem for the CHIP-8 Virtual Machine
================================================

Memory Map:
    $000-$04F  Built-in hexadecimal glyph font (16 glyphs × 5 bytes)
    $050-$1FF  Unused (historically the interpreter itself)
    $200-$FFF  Program image and program data

The font is four pixels wide and five pixels tall; each glyph row is one
byte with the pixels in the high nibble.

Copyright (c) 2026 chip8-vm Contributors
"""

import logging

from ..errors import InvalidProgramError

logger = logging.getLogger(__name__)


# =============================================================================
# GLYPH FONT
# =============================================================================
# Hexadecimal digits 0-F, five rows each, MSB = leftmost pixel.

FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class Memory:
    """
    Flat 4KB byte-addressable memory.

    Accessors take in-range addresses only; the engine resolves
    out-of-range addresses through the bounds policy before calling them.

    Example:
        >>> mem = Memory()
        >>> mem.load_program(bytes([0x60, 0x2A]))
        >>> hex(mem.read_word(0x200))
        '0x602a'
    """

    SIZE = 4096
    FONT_BASE = 0x000
    GLYPH_HEIGHT = 5
    PROGRAM_BASE = 0x200
    MAX_PROGRAM_SIZE = SIZE - PROGRAM_BASE

    def __init__(self):
        self._data = bytearray(self.SIZE)
        self.load_font()

    def __len__(self) -> int:
        return self.SIZE

    def read(self, address: int) -> int:
        """Read byte at an in-range address."""
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        """Write byte at an in-range address (value masked to 8 bits)."""
        self._data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read big-endian 16-bit word."""
        return (self._data[address] << 8) | self._data[address + 1]

    def dump(self, start: int = 0, length: int = SIZE) -> bytes:
        """Copy of ``length`` bytes starting at ``start``."""
        return bytes(self._data[start:start + length])

    def clear(self) -> None:
        """Zero all memory and reload the font."""
        self._data[:] = bytes(self.SIZE)
        self.load_font()

    def load_font(self) -> None:
        """Copy the built-in glyph font to FONT_BASE."""
        self._data[self.FONT_BASE:self.FONT_BASE + len(FONT)] = FONT

    def glyph_address(self, digit: int) -> int:
        """Address of the glyph for the low nibble of ``digit``."""
        return self.FONT_BASE + (digit & 0xF) * self.GLYPH_HEIGHT

    def load_program(self, program: bytes) -> None:
        """
        Copy a program image to PROGRAM_BASE.

        Args:
            program: Raw program bytes

        Raises:
            InvalidProgramError: If the byte count is odd or the image
                does not fit in memory
        """
        size = len(program)
        if size % 2 == 1:
            raise InvalidProgramError(
                f"Invalid program, need even number of bytes. Found {size}",
                size=size,
            )
        if size > self.MAX_PROGRAM_SIZE:
            raise InvalidProgramError(
                f"Program too large: {size} bytes (maximum {self.MAX_PROGRAM_SIZE})",
                size=size,
            )

        self._data[self.PROGRAM_BASE:self.PROGRAM_BASE + size] = program
        logger.debug(f"Loaded {size} byte program at ${self.PROGRAM_BASE:03X}")
