"""
CHIP-8 Execution Engine
=======================

Fetches, decodes and executes base CHIP-8 instructions against a
MachineState.

Every instruction is two bytes, big-endian. The program counter is
advanced by 2 *before* the instruction takes effect, so skips add a
further 2 and jumps/calls overwrite the advanced value.

Instruction fields:
    15..12  family (high nibble)
    11..8   x   register index
     7..4   y   register index
     3..0   n   4-bit immediate
     7..0   nn  8-bit immediate
    11..0   nnn 12-bit address

Flag conventions (VF):
    8xy4  carry      VF = 1 on unsigned overflow
    8xy5  Vx - Vy    VF = 1 when NO borrow
    8xy7  Vy - Vx    VF = 1 when NO borrow
    8xy6  shift R    VF = old bit 0 of Vx
    8xyE  shift L    VF = old bit 7 of Vx
    Dxyn  collision  VF reset to 0, set to 1 if a set pixel is turned off

Atomicity: every memory, display and key access an instruction needs is
resolved through the bounds policy before the instruction mutates
anything. A FAULT raises with no state changed and the program counter
pointing back at the faulting instruction.

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
import random
from typing import Callable, List, Optional

from ..errors import (
    OutOfBoundsAccessError,
    StackOverflowError,
    StackUnderflowError,
    UnsupportedOpcodeError,
    VMError,
)
from .bounds import BoundsPolicy, default_policy, resolve_index
from .display import Display
from .keyboard import KEY_COUNT
from .memory import Memory
from .observer import ErrorObserver, LoggingObserver
from .state import FLAG_REGISTER, MachineState

logger = logging.getLogger(__name__)


class Chip8CPU:
    """
    CHIP-8 instruction engine with instrumentation support.

    Instrumentation hooks allow:
    - Tracing every instruction before execution
    - Implementing breakpoints

    Example:
        >>> state = MachineState.create()
        >>> state.memory.load_program(bytes([0x60, 0x2A]))  # LD V0, $2A
        >>> cpu = Chip8CPU(state)
        >>> cpu.step()
        False
        >>> state.v[0]
        42
    """

    def __init__(
        self,
        state: MachineState,
        bounds_policy: Optional[BoundsPolicy] = None,
        rng: Optional[random.Random] = None,
        observer: Optional[ErrorObserver] = None,
    ):
        """
        Initialize the engine over a machine state.

        Args:
            state: The machine state this engine mutates
            bounds_policy: Out-of-range access policy (default: by interpreter mode)
            rng: Random source for Cxnn (default: OS-seeded random.Random)
            observer: Sink for recovered errors (default: LoggingObserver)
        """
        self.state = state
        self.bounds_policy = bounds_policy or default_policy()
        self.rng = rng or random.Random()
        self.observer: ErrorObserver = observer or LoggingObserver()

        # on_instruction(pc, opcode) -> bool: return False to stop execution
        self.on_instruction: Optional[Callable[[int, int], bool]] = None

        # Address and word of the instruction being executed (error context)
        self._pc = 0
        self._opcode: Optional[int] = None

    # ========================================
    # Bounds Resolution
    # ========================================

    def _out_of_bounds(self, target: str, location) -> None:
        """Raise under FAULT, report under CLIP."""
        error = OutOfBoundsAccessError(
            target, location, address=self._pc, opcode=self._opcode
        )
        if self.bounds_policy is BoundsPolicy.FAULT:
            raise error
        self._report(error)

    def _memory_span(self, start: int, count: int) -> List[Optional[int]]:
        """Resolve ``count`` consecutive addresses; None marks a clipped byte."""
        addresses = [
            resolve_index(start + k, Memory.SIZE, self.bounds_policy) for k in range(count)
        ]
        if None in addresses:
            self._out_of_bounds("memory", start + addresses.index(None))
        return addresses

    def _read_span(self, start: int, count: int) -> List[int]:
        memory = self.state.memory
        return [
            memory.read(a) if a is not None else 0
            for a in self._memory_span(start, count)
        ]

    def _report(self, error: VMError) -> None:
        self.observer.report(error)

    def _unsupported(self) -> None:
        self._report(UnsupportedOpcodeError(self._opcode, address=self._pc))

    # ========================================
    # Fetch / Execute
    # ========================================

    def peek_opcode(self, address: Optional[int] = None) -> int:
        """Instruction word at ``address`` (default pc) without side effects; 0 if out of range."""
        if address is None:
            address = self.state.pc
        memory = self.state.memory
        hi = resolve_index(address, Memory.SIZE, self.bounds_policy)
        lo = resolve_index(address + 1, Memory.SIZE, self.bounds_policy)
        return ((memory.read(hi) if hi is not None else 0) << 8) | (
            memory.read(lo) if lo is not None else 0
        )

    def step(self) -> bool:
        """
        Execute exactly one instruction, or poll the key wait.

        Returns:
            True if the display buffer was modified

        Raises:
            OutOfBoundsAccessError: Under the FAULT policy
        """
        state = self.state
        if state.blocking:
            self.resolve_blocking_wait()
            return False

        pc = state.pc
        self._pc = pc
        self._opcode = None
        upper, lower = self._read_span(pc, 2)
        opcode = (upper << 8) | lower
        self._opcode = opcode

        # Decode after advance: jumps and calls overwrite this value
        state.pc = (pc + 2) & 0xFFFF
        try:
            return self._execute_instruction(opcode)
        except OutOfBoundsAccessError:
            state.pc = pc
            raise

    def execute(self, max_steps: int) -> int:
        """
        Execute up to ``max_steps`` instructions.

        Execution stops early if:
        - The instruction hook returns False (breakpoint hit)
        - The machine enters a key wait

        Returns:
            Number of instructions executed
        """
        executed = 0
        while executed < max_steps and not self.state.blocking:
            if self.on_instruction:
                if not self.on_instruction(self.state.pc, self.peek_opcode()):
                    break
            self.step()
            executed += 1
        return executed

    def resolve_blocking_wait(self) -> bool:
        """
        Complete an Fx0A key wait if any key is down.

        The lowest pressed key index is written to the target register.

        Returns:
            True if the wait was resolved
        """
        state = self.state
        key = state.keypad.first_pressed()
        if key is None:
            return False
        state.v[state.target_register] = key
        state.blocking = False
        logger.debug(f"Key wait resolved: V{state.target_register:X} = {key:X}")
        return True

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.state.pc = (self.state.pc + 2) & 0xFFFF

    def _execute_instruction(self, opcode: int) -> bool:
        """
        Execute a single decoded instruction.

        Args:
            opcode: The 16-bit instruction word

        Returns:
            True if the display changed
        """
        state = self.state
        v = state.v
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        n = opcode & 0xF
        nn = opcode & 0xFF
        nnn = opcode & 0xFFF

        match opcode >> 12:
            case 0x0:
                if opcode == 0x00E0:  # CLS
                    state.display.clear()
                    return True
                elif opcode == 0x00EE:  # RET
                    if not state.stack:
                        self._report(StackUnderflowError(address=self._pc, opcode=opcode))
                    else:
                        state.pc = state.stack.pop()
                else:  # SYS nnn (RCA 1802 machine code)
                    logger.info(f"SYS ${nnn:03X} at ${self._pc:03X} ignored")
            case 0x1:  # JP nnn
                state.pc = nnn
            case 0x2:  # CALL nnn
                if len(state.stack) >= state.stack_depth:
                    self._report(
                        StackOverflowError(state.stack_depth, address=self._pc, opcode=opcode)
                    )
                else:
                    state.stack.append(state.pc)
                    state.pc = nnn
            case 0x3:  # SE Vx, nn
                self._skip_if(v[x] == nn)
            case 0x4:  # SNE Vx, nn
                self._skip_if(v[x] != nn)
            case 0x5:  # SE Vx, Vy
                if n != 0:
                    self._unsupported()
                else:
                    self._skip_if(v[x] == v[y])
            case 0x6:  # LD Vx, nn
                v[x] = nn
            case 0x7:  # ADD Vx, nn (no carry)
                v[x] = (v[x] + nn) & 0xFF
            case 0x8:
                self._execute_alu(x, y, n)
            case 0x9:  # SNE Vx, Vy
                if n != 0:
                    self._unsupported()
                else:
                    self._skip_if(v[x] != v[y])
            case 0xA:  # LD I, nnn
                state.i = nnn
            case 0xB:  # JP V0, nnn
                state.pc = v[0] + nnn
            case 0xC:  # RND Vx, nn
                v[x] = self.rng.getrandbits(8) & nn
            case 0xD:  # DRW Vx, Vy, n
                self._draw_sprite(v[x], v[y], n)
                return True
            case 0xE:
                self._execute_key_skip(x, nn)
            case 0xF:
                self._execute_misc(x, nn)
        return False

    # ========================================
    # Instruction Groups
    # ========================================

    def _execute_alu(self, x: int, y: int, op: int) -> None:
        """8xyN register-register operations."""
        v = self.state.v
        vx = v[x]
        vy = v[y]

        # VF is written before Vx, so with x == F the result wins
        match op:
            case 0x0:  # LD Vx, Vy
                v[x] = vy
            case 0x1:  # OR
                v[x] = vx | vy
            case 0x2:  # AND
                v[x] = vx & vy
            case 0x3:  # XOR
                v[x] = vx ^ vy
            case 0x4:  # ADD with carry
                result = vx + vy
                v[FLAG_REGISTER] = 1 if result > 0xFF else 0
                v[x] = result & 0xFF
            case 0x5:  # SUB Vx - Vy
                v[FLAG_REGISTER] = 1 if vx >= vy else 0
                v[x] = (vx - vy) & 0xFF
            case 0x6:  # SHR
                v[FLAG_REGISTER] = vx & 1
                v[x] = vx >> 1
            case 0x7:  # SUBN Vy - Vx
                v[FLAG_REGISTER] = 1 if vy >= vx else 0
                v[x] = (vy - vx) & 0xFF
            case 0xE:  # SHL
                v[FLAG_REGISTER] = vx >> 7
                v[x] = (vx << 1) & 0xFF
            case _:
                self._unsupported()

    def _draw_sprite(self, vx: int, vy: int, height: int) -> None:
        """
        XOR an 8 × height sprite from memory[I] onto the display at (vx, vy).

        VF is reset to 0 for every draw and set to 1 on any collision.
        """
        state = self.state
        rows = self._read_span(state.i, height)

        pixels = []
        first_outside = None
        for px, py in Display.sprite_pixels(vx, vy, rows):
            rx = resolve_index(px, Display.WIDTH, self.bounds_policy)
            ry = resolve_index(py, Display.HEIGHT, self.bounds_policy)
            if rx is None or ry is None:
                if first_outside is None:
                    first_outside = (px, py)
                continue
            pixels.append((rx, ry))
        if first_outside is not None:
            self._out_of_bounds("display", first_outside)

        state.v[FLAG_REGISTER] = 0
        display = state.display
        collision = False
        for rx, ry in pixels:
            if display.xor_pixel(rx, ry):
                collision = True
        if collision:
            state.v[FLAG_REGISTER] = 1

    def _key_pressed(self, key: int) -> bool:
        """Latch lookup through the bounds policy; clipped keys read as released."""
        index = resolve_index(key, KEY_COUNT, self.bounds_policy)
        if index is None:
            self._out_of_bounds("keypad", key)
            return False
        return self.state.keypad.is_pressed(index)

    def _execute_key_skip(self, x: int, nn: int) -> None:
        """Ex9E / ExA1."""
        match nn:
            case 0x9E:  # SKP Vx
                self._skip_if(self._key_pressed(self.state.v[x]))
            case 0xA1:  # SKNP Vx
                self._skip_if(not self._key_pressed(self.state.v[x]))
            case _:
                self._unsupported()

    def _execute_misc(self, x: int, nn: int) -> None:
        """FxNN timer, key-wait, index and memory operations."""
        state = self.state
        v = state.v
        memory = state.memory

        match nn:
            case 0x07:  # LD Vx, DT
                v[x] = state.timers.delay
            case 0x0A:  # LD Vx, K
                state.blocking = True
                state.target_register = x
                logger.debug(f"Waiting for key into V{x:X}")
            case 0x15:  # LD DT, Vx
                state.timers.set_delay(v[x])
            case 0x18:  # LD ST, Vx
                state.timers.set_sound(v[x])
            case 0x1E:  # ADD I, Vx (no flag)
                state.i = (state.i + v[x]) & 0xFFFF
            case 0x29:  # LD F, Vx
                state.i = memory.glyph_address(v[x])
            case 0x33:  # LD B, Vx
                value = v[x]
                digits = (value // 100, (value // 10) % 10, value % 10)
                for address, digit in zip(self._memory_span(state.i, 3), digits):
                    if address is not None:
                        memory.write(address, digit)
            case 0x55:  # LD [I], Vx
                for r, address in enumerate(self._memory_span(state.i, x + 1)):
                    if address is not None:
                        memory.write(address, v[r])
            case 0x65:  # LD Vx, [I]
                for r, value in enumerate(self._read_span(state.i, x + 1)):
                    v[r] = value
            case _:
                self._unsupported()
