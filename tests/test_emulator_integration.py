"""
Emulator Integration Tests
==========================

Tests for the complete emulator, verifying that all components work
together correctly:

- Configuration (defaults, validation, environment)
- Program loading and reset
- Run control, breakpoints and key waits
- Timers aged during runs
- Tracing, snapshots and the host contract

Copyright (c) 2026 chip8-vm Contributors
"""

import logging

import pytest

from chip8_vm.errors import ConfigError, InvalidProgramError
from chip8_vm.machine import (
    BoundsPolicy,
    BreakReason,
    Emulator,
    EmulatorConfig,
)


# =============================================================================
# Configuration Tests
# =============================================================================

class TestEmulatorConfig:
    """Test EmulatorConfig defaults, validation and from_env."""

    def test_defaults(self):
        config = EmulatorConfig()
        assert config.stack_depth == 24
        assert config.timer_hz == 60
        assert config.seed is None
        assert config.trace is False

    def test_frozen(self):
        config = EmulatorConfig()
        with pytest.raises(AttributeError):
            config.stack_depth = 16

    @pytest.mark.parametrize("kwargs", [{"stack_depth": 0}, {"timer_hz": 0}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            EmulatorConfig(**kwargs)

    def test_from_env(self):
        config = EmulatorConfig.from_env({
            "CHIP8_STACK_DEPTH": "16",
            "CHIP8_BOUNDS_POLICY": "wrap",
            "CHIP8_SEED": "0x10",
            "CHIP8_TIMER_HZ": "30",
            "CHIP8_TRACE": "yes",
        })
        assert config.stack_depth == 16
        assert config.bounds_policy is BoundsPolicy.WRAP
        assert config.seed == 16
        assert config.timer_hz == 30.0
        assert config.trace is True

    def test_from_env_empty(self):
        assert EmulatorConfig.from_env({}) == EmulatorConfig()

    @pytest.mark.parametrize("env", [
        {"CHIP8_STACK_DEPTH": "deep"},
        {"CHIP8_BOUNDS_POLICY": "ignore"},
        {"CHIP8_SEED": "x"},
        {"CHIP8_STACK_DEPTH": "0"},
    ])
    def test_from_env_invalid(self, env):
        with pytest.raises(ConfigError):
            EmulatorConfig.from_env(env)

    def test_from_process_environment(self, monkeypatch):
        monkeypatch.setenv("CHIP8_STACK_DEPTH", "12")
        assert EmulatorConfig.from_env().stack_depth == 12


# =============================================================================
# Loading Tests
# =============================================================================

class TestLoading:
    """Test load, load_file and reset."""

    def test_load_resets_machine(self, emu, assemble):
        """Loading clears registers, stack and display."""
        emu.load(assemble(0x6042, 0x2206, 0x0000, 0xA000, 0xD015))
        emu.step()
        emu.step()
        emu.load(assemble(0x6000))
        assert emu.state.v[0] == 0
        assert emu.state.stack == []
        assert emu.state.pc == 0x200
        assert emu.total_steps == 0

    def test_odd_program_rejected(self, emu):
        with pytest.raises(InvalidProgramError):
            emu.load(bytes([0x60, 0x2A, 0x12]))

    def test_load_file(self, emu, assemble, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(assemble(0x632A))
        emu.load_file(rom)
        assert emu.program == assemble(0x632A)
        emu.step()
        assert emu.state.v[3] == 0x2A

    def test_load_file_missing(self, emu, tmp_path):
        with pytest.raises(FileNotFoundError):
            emu.load_file(tmp_path / "missing.ch8")

    def test_reset_reloads_program(self, emu, assemble):
        """reset() restores the power-on state with the same program."""
        emu.load(assemble(0x7001, 0x1200))
        emu.run(10)
        assert emu.state.v[0] > 0
        emu.reset()
        assert emu.state.v[0] == 0
        assert emu.state.pc == 0x200
        assert emu.state.memory.read_word(0x200) == 0x7001


# =============================================================================
# Run Control Tests
# =============================================================================

class TestRunControl:
    """Test run(), breakpoints and key waits."""

    def test_max_steps(self, emu, assemble):
        emu.load(assemble(0x1200))
        event = emu.run(50)
        assert event.reason == BreakReason.MAX_STEPS
        assert emu.total_steps == 50

    def test_breakpoint_and_resume(self, emu, assemble):
        """run() stops before a breakpoint and resumes past it."""
        # $200 ADD V0,1 / $202 JP $200
        emu.load(assemble(0x7001, 0x1200))
        emu.add_breakpoint(0x202)
        event = emu.run(100)
        assert event.reason == BreakReason.PC_BREAKPOINT
        assert event.address == 0x202
        assert emu.state.v[0] == 1
        event = emu.run(100)
        assert event.reason == BreakReason.PC_BREAKPOINT
        assert emu.state.v[0] == 2

    def test_remove_breakpoint(self, emu, assemble):
        emu.load(assemble(0x7001, 0x1200))
        emu.add_breakpoint(0x202)
        assert emu.remove_breakpoint(0x202) is True
        assert emu.run(10).reason == BreakReason.MAX_STEPS

    def test_run_until_pc(self, emu, assemble):
        emu.load(assemble(0x6001, 0x6102, 0x1204))
        assert emu.run_until_pc(0x204) is True
        assert emu.state.v[1] == 2
        assert emu.state.pc == 0x204
        assert not emu.breakpoints.has_breakpoint(0x204)

    def test_run_until_pc_not_reached(self, emu, assemble):
        emu.load(assemble(0x1200))
        assert emu.run_until_pc(0x300, max_steps=20) is False

    def test_run_until_waiting(self, emu, assemble):
        """run() stops when the program blocks on a key."""
        emu.load(assemble(0x6001, 0xF50A, 0x1204))
        assert emu.run_until_waiting(100) is True
        assert emu.is_waiting_for_key
        event = emu.run(100)
        assert event.reason == BreakReason.WAITING_FOR_KEY

    def test_key_resolves_wait_during_run(self, emu, assemble):
        emu.load(assemble(0xF50A, 0x1202))
        emu.run_until_waiting(10)
        emu.set_inputs([k == 7 for k in range(16)])
        event = emu.run(5)
        assert event.reason == BreakReason.MAX_STEPS
        assert emu.state.v[5] == 7
        assert not emu.is_waiting_for_key

    def test_hard_fault_becomes_error_event(self, emu, assemble):
        """Under FAULT, an out-of-bounds access ends run() with ERROR."""
        emu.load(assemble(0x1FFF))
        event = emu.run(10)
        assert event.reason == BreakReason.ERROR
        assert event.address == 0xFFF
        assert "out of bounds" in event.message

    def test_run_ages_timers(self, emu, clock, assemble):
        """Timers are aged after every instruction in run()."""
        emu.load(assemble(0x6005, 0xF015, 0x1204))
        emu.run(3)
        assert emu.state.timers.delay == 5
        clock.advance(1 / 60)
        emu.run(1)
        assert emu.state.timers.delay == 4


# =============================================================================
# Host Contract Tests
# =============================================================================

class TestHostContract:
    """Test the host-facing API."""

    def test_display_snapshot(self, emu, assemble):
        emu.load(assemble(0xA000, 0xD015))
        emu.run(2)
        screen = emu.display()
        assert len(screen) == 32
        assert len(screen[0]) == 64
        assert screen[0][:5] == (1, 1, 1, 1, 0)

    def test_display_text(self, emu, assemble):
        emu.load(assemble(0xA000, 0xD015))
        emu.run(2)
        assert emu.display_text().splitlines()[1].startswith("#..#.")

    def test_key_down_up(self, emu, assemble):
        emu.load(assemble(0xF00A))
        emu.step()
        emu.key_down("E")
        emu.step()
        assert emu.state.v[0] == 0x6
        emu.key_up("E")
        assert not emu.state.keypad.is_pressed(0x6)

    def test_age_timers_elapsed(self, emu, assemble):
        emu.load(assemble(0x6003, 0xF015))
        emu.run(2)
        assert emu.age_timers(elapsed=1 / 60) is True
        assert emu.state.timers.delay == 2

    def test_tick(self, emu, clock, assemble):
        """tick() steps then ages timers."""
        emu.load(assemble(0x6002, 0xF015, 0xA000, 0xD015))
        assert emu.tick() is False
        assert emu.tick() is False
        clock.advance(1 / 60)
        assert emu.tick() is False
        assert emu.state.timers.delay == 1
        assert emu.tick() is True

    def test_snapshot(self, emu, assemble):
        emu.load(assemble(0x6A12, 0xA345, 0x2208, 0x0000, 0x6000))
        emu.run(3)
        snap = emu.snapshot()
        assert snap.v[0xA] == 0x12
        assert snap.i == 0x345
        assert snap.pc == 0x208
        assert snap.stack == (0x206,)
        assert snap.sp == 1
        assert "PC=$208" in str(snap)

    def test_snapshot_is_immutable(self, emu, assemble):
        emu.load(assemble(0x6001))
        snap = emu.snapshot()
        emu.step()
        assert snap.v[0] == 0
        with pytest.raises(AttributeError):
            snap.pc = 0


# =============================================================================
# Tracing Tests
# =============================================================================

class TestTracing:
    """Test instruction tracing through logging."""

    def test_trace_logs_instructions(self, make_emulator, assemble, caplog):
        emu = make_emulator(trace=True)
        emu.load(assemble(0x6001, 0x1202))
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.machine.emulator"):
            emu.run(2)
        assert "$200\t6001" in caplog.text
        assert "$202\t1202" in caplog.text

    def test_run_logs_each_instruction_once(self, make_emulator, assemble, caplog):
        emu = make_emulator(trace=True)
        emu.load(assemble(0x6001, 0x1202))
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.machine.emulator"):
            emu.run(2)
        assert caplog.text.count("$200\t6001") == 1

    def test_trace_through_step_and_tick(self, make_emulator, assemble, caplog):
        """step() and tick() trace too; key-wait polls are not logged."""
        emu = make_emulator(trace=True)
        emu.load(assemble(0x6001, 0xF00A))
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.machine.emulator"):
            emu.step()
            emu.tick()
            emu.tick()
        assert "$200\t6001" in caplog.text
        assert caplog.text.count("$202\tF00A") == 1

    def test_no_trace_by_default(self, emu, assemble, caplog):
        emu.load(assemble(0x6001, 0x1202))
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.machine.emulator"):
            emu.run(2)
        assert "$200\t6001" not in caplog.text
