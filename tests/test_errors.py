"""
Error Hierarchy, Bounds Policy and Observer Tests
=================================================

Copyright (c) 2026 chip8-vm Contributors
"""

import logging

import pytest

from chip8_vm.errors import (
    Chip8Error,
    ConfigError,
    InvalidProgramError,
    OutOfBoundsAccessError,
    StackOverflowError,
    StackUnderflowError,
    UnsupportedOpcodeError,
    VMError,
)
from chip8_vm.machine import (
    BoundsPolicy,
    CollectingObserver,
    LoggingObserver,
    default_policy,
)
from chip8_vm.machine.bounds import resolve_index


# =============================================================================
# Error Hierarchy Tests
# =============================================================================

class TestErrorHierarchy:
    """Test inheritance and message formatting."""

    @pytest.mark.parametrize("cls", [
        InvalidProgramError, ConfigError, VMError,
        UnsupportedOpcodeError, StackOverflowError,
        StackUnderflowError, OutOfBoundsAccessError,
    ])
    def test_all_are_chip8_errors(self, cls):
        assert issubclass(cls, Chip8Error)

    def test_runtime_errors_are_vm_errors(self):
        for cls in (UnsupportedOpcodeError, StackOverflowError,
                    StackUnderflowError, OutOfBoundsAccessError):
            assert issubclass(cls, VMError)

    def test_vm_error_format(self):
        """Runtime errors carry address and opcode in the message."""
        error = UnsupportedOpcodeError(0x5121, address=0x204)
        assert str(error) == "$0204 [5121]: unsupported opcode"

    def test_vm_error_without_context(self):
        assert str(VMError("boom")) == "boom"

    def test_stack_overflow_message(self):
        error = StackOverflowError(16, address=0x200, opcode=0x2200)
        assert error.depth == 16
        assert "depth 16" in str(error)

    def test_out_of_bounds_memory_location(self):
        error = OutOfBoundsAccessError("memory", 0x1000, address=0x206, opcode=0xF155)
        assert "memory access out of bounds at $1000" in str(error)

    def test_out_of_bounds_display_location(self):
        error = OutOfBoundsAccessError("display", (64, 3))
        assert str(error) == "display access out of bounds at (64, 3)"


# =============================================================================
# Bounds Policy Tests
# =============================================================================

class TestBoundsPolicy:
    """Test policy parsing and index resolution."""

    @pytest.mark.parametrize("name,policy", [
        ("fault", BoundsPolicy.FAULT),
        ("CLIP", BoundsPolicy.CLIP),
        (" Wrap ", BoundsPolicy.WRAP),
    ])
    def test_parse(self, name, policy):
        assert BoundsPolicy.parse(name) is policy

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown bounds policy"):
            BoundsPolicy.parse("ignore")

    def test_default_follows_debug_mode(self):
        expected = BoundsPolicy.FAULT if __debug__ else BoundsPolicy.CLIP
        assert default_policy() is expected

    def test_in_range_unchanged(self):
        for policy in BoundsPolicy:
            assert resolve_index(5, 16, policy) == 5

    def test_out_of_range(self):
        assert resolve_index(16, 16, BoundsPolicy.FAULT) is None
        assert resolve_index(16, 16, BoundsPolicy.CLIP) is None
        assert resolve_index(18, 16, BoundsPolicy.WRAP) == 2
        assert resolve_index(-1, 16, BoundsPolicy.WRAP) == 15


# =============================================================================
# Observer Tests
# =============================================================================

class TestObservers:
    """Test the built-in error observers."""

    def test_collecting_observer(self):
        observer = CollectingObserver()
        observer.report(StackUnderflowError(address=0x200, opcode=0x00EE))
        observer.report(UnsupportedOpcodeError(0x5AB1, address=0x202))
        assert len(observer) == 2
        assert len(observer.of_type(UnsupportedOpcodeError)) == 1
        observer.clear()
        assert len(observer) == 0

    def test_collecting_observer_forwards(self):
        inner = CollectingObserver()
        outer = CollectingObserver(forward=inner)
        outer.report(StackUnderflowError())
        assert len(inner) == 1

    def test_logging_observer(self, caplog):
        observer = LoggingObserver()
        with caplog.at_level(logging.WARNING, logger="chip8_vm.machine.observer"):
            observer.report(UnsupportedOpcodeError(0x5AB1, address=0x200))
        assert "UnsupportedOpcodeError: $0200 [5AB1]: unsupported opcode" in caplog.text

    def test_engine_logs_by_default(self, caplog):
        """Without an observer, recovered errors are logged at WARNING."""
        from chip8_vm.machine import Emulator, EmulatorConfig

        emu = Emulator(EmulatorConfig(bounds_policy=BoundsPolicy.FAULT))
        emu.load(bytes([0x5A, 0xB1]))
        with caplog.at_level(logging.WARNING):
            emu.step()
        assert "unsupported opcode" in caplog.text
