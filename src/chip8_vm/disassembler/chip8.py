"""
CHIP-8 Disassembler
===================

Disassembles CHIP-8 program images into Cowgod-style assembly mnemonics.

Every instruction is one big-endian 16-bit word, so decoding is a table
of patterns over the four nibbles:

    00E0 CLS             8xy0 LD Vx, Vy     Dxyn DRW Vx, Vy, n
    00EE RET             8xy1 OR Vx, Vy     Ex9E SKP Vx
    0nnn SYS nnn         8xy2 AND Vx, Vy    ExA1 SKNP Vx
    1nnn JP nnn          8xy3 XOR Vx, Vy    Fx07 LD Vx, DT
    2nnn CALL nnn        8xy4 ADD Vx, Vy    Fx0A LD Vx, K
    3xnn SE Vx, nn       8xy5 SUB Vx, Vy    Fx15 LD DT, Vx
    4xnn SNE Vx, nn      8xy6 SHR Vx        Fx18 LD ST, Vx
    5xy0 SE Vx, Vy       8xy7 SUBN Vx, Vy   Fx1E ADD I, Vx
    6xnn LD Vx, nn       8xyE SHL Vx        Fx29 LD F, Vx
    7xnn ADD Vx, nn      9xy0 SNE Vx, Vy    Fx33 LD B, Vx
    Annn LD I, nnn       Bnnn JP V0, nnn    Fx55 LD [I], Vx
    Cxnn RND Vx, nn                         Fx65 LD Vx, [I]

Words that match no pattern (sprite data, usually) are emitted as
``DW $xxxx``; a trailing odd byte is emitted as ``DB $xx``.

Usage:
    disasm = Chip8Disassembler()
    for instr in disasm.disassemble(rom, start_address=0x200):
        print(instr)

Copyright (c) 2026 chip8-vm Contributors
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled CHIP-8 instruction.

    Attributes:
        address: Memory address of the instruction
        opcode: The instruction word (or the single byte for DB)
        mnemonic: The instruction mnemonic (e.g., "LD", "DRW", "DW")
        operand_str: Formatted operand string for display
        size: Instruction size in bytes (2, or 1 for a trailing DB)
        raw_bytes: All bytes comprising this instruction
        comment: Optional comment (e.g., "unknown opcode")
    """
    address: int
    opcode: int
    mnemonic: str
    operand_str: str
    size: int
    raw_bytes: bytes
    comment: str = ""

    @property
    def is_data(self) -> bool:
        """True for DW/DB entries that did not decode."""
        return self.mnemonic in ("DW", "DB")

    def __str__(self) -> str:
        """Format as assembly line: ADDRESS: BYTES  MNEMONIC OPERAND"""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)
        asm = self.text
        if self.comment:
            return f"${self.address:03X}: {hex_bytes}  {asm:<16} ; {self.comment}"
        return f"${self.address:03X}: {hex_bytes}  {asm}"

    @property
    def text(self) -> str:
        """Mnemonic and operands without address or bytes."""
        if self.operand_str:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:03X}",
            "address_int": self.address,
            "opcode": f"${self.opcode:04X}" if self.size == 2 else f"${self.opcode:02X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "size": self.size,
            "bytes": [f"${b:02X}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# Decoding
# =============================================================================

def decode(opcode: int) -> Optional[tuple]:
    """
    Decode one instruction word.

    Returns:
        (mnemonic, operand_str), or None if the word is not an instruction
    """
    x = (opcode >> 8) & 0xF
    y = (opcode >> 4) & 0xF
    n = opcode & 0xF
    nn = opcode & 0xFF
    nnn = opcode & 0xFFF
    vx = f"V{x:X}"
    vy = f"V{y:X}"

    match opcode >> 12:
        case 0x0:
            if opcode == 0x00E0:
                return "CLS", ""
            if opcode == 0x00EE:
                return "RET", ""
            return "SYS", f"${nnn:03X}"
        case 0x1:
            return "JP", f"${nnn:03X}"
        case 0x2:
            return "CALL", f"${nnn:03X}"
        case 0x3:
            return "SE", f"{vx}, ${nn:02X}"
        case 0x4:
            return "SNE", f"{vx}, ${nn:02X}"
        case 0x5:
            return ("SE", f"{vx}, {vy}") if n == 0 else None
        case 0x6:
            return "LD", f"{vx}, ${nn:02X}"
        case 0x7:
            return "ADD", f"{vx}, ${nn:02X}"
        case 0x8:
            match n:
                case 0x0:
                    return "LD", f"{vx}, {vy}"
                case 0x1:
                    return "OR", f"{vx}, {vy}"
                case 0x2:
                    return "AND", f"{vx}, {vy}"
                case 0x3:
                    return "XOR", f"{vx}, {vy}"
                case 0x4:
                    return "ADD", f"{vx}, {vy}"
                case 0x5:
                    return "SUB", f"{vx}, {vy}"
                case 0x6:
                    return "SHR", vx
                case 0x7:
                    return "SUBN", f"{vx}, {vy}"
                case 0xE:
                    return "SHL", vx
            return None
        case 0x9:
            return ("SNE", f"{vx}, {vy}") if n == 0 else None
        case 0xA:
            return "LD", f"I, ${nnn:03X}"
        case 0xB:
            return "JP", f"V0, ${nnn:03X}"
        case 0xC:
            return "RND", f"{vx}, ${nn:02X}"
        case 0xD:
            return "DRW", f"{vx}, {vy}, {n}"
        case 0xE:
            if nn == 0x9E:
                return "SKP", vx
            if nn == 0xA1:
                return "SKNP", vx
            return None
        case 0xF:
            forms = {
                0x07: ("LD", f"{vx}, DT"),
                0x0A: ("LD", f"{vx}, K"),
                0x15: ("LD", f"DT, {vx}"),
                0x18: ("LD", f"ST, {vx}"),
                0x1E: ("ADD", f"I, {vx}"),
                0x29: ("LD", f"F, {vx}"),
                0x33: ("LD", f"B, {vx}"),
                0x55: ("LD", f"[I], {vx}"),
                0x65: ("LD", f"{vx}, [I]"),
            }
            return forms.get(nn)
    return None


# =============================================================================
# CHIP-8 Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Linear-sweep disassembler for CHIP-8 program images.

    Sprite data embedded in a program is indistinguishable from code, so
    words that happen to decode are shown as instructions.
    """

    def disassemble_one(
        self,
        data: bytes,
        address: int = 0x200,
        offset: int = 0
    ) -> DisassembledInstruction:
        """
        Disassemble a single instruction.

        Args:
            data: Byte buffer containing the instruction
            address: Memory address of the instruction
            offset: Offset into data buffer where instruction starts

        Raises:
            ValueError: If offset is beyond the data
        """
        if offset >= len(data):
            raise ValueError(f"Offset {offset} beyond data length {len(data)}")

        if offset + 2 > len(data):
            byte = data[offset]
            return DisassembledInstruction(
                address=address,
                opcode=byte,
                mnemonic="DB",
                operand_str=f"${byte:02X}",
                size=1,
                raw_bytes=bytes([byte]),
                comment="odd trailing byte",
            )

        raw = bytes(data[offset:offset + 2])
        opcode = (raw[0] << 8) | raw[1]
        decoded = decode(opcode)
        if decoded is None:
            return DisassembledInstruction(
                address=address,
                opcode=opcode,
                mnemonic="DW",
                operand_str=f"${opcode:04X}",
                size=2,
                raw_bytes=raw,
                comment="unknown opcode",
            )

        mnemonic, operand_str = decoded
        return DisassembledInstruction(
            address=address,
            opcode=opcode,
            mnemonic=mnemonic,
            operand_str=operand_str,
            size=2,
            raw_bytes=raw,
        )

    def disassemble(
        self,
        data: bytes,
        start_address: int = 0x200,
        count: Optional[int] = None
    ) -> List[DisassembledInstruction]:
        """
        Disassemble multiple instructions.

        Args:
            data: Program image
            start_address: Memory address of the first byte
            count: Maximum number of instructions (None = all)
        """
        result = []
        offset = 0
        address = start_address

        while offset < len(data):
            if count is not None and len(result) >= count:
                break
            instr = self.disassemble_one(data, address, offset)
            result.append(instr)
            offset += instr.size
            address += instr.size

        return result

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: int = 0x200,
        count: Optional[int] = None
    ) -> str:
        """Disassemble and return a multi-line listing."""
        return "\n".join(str(instr) for instr in self.disassemble(data, start_address, count))
