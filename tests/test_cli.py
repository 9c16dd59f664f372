"""
c8run CLI Tests
===============

Tests for the headless program runner.

Copyright (c) 2026 chip8-vm Contributors
"""

import logging

import pytest
from click.testing import CliRunner

from chip8_vm.cli.c8run import main
from chip8_vm.cli.errors import ExitCode


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def rom(tmp_path, assemble):
    """Fixture: writes a program image and returns its path."""
    def write(*words, name="test.ch8"):
        path = tmp_path / name
        path.write_bytes(assemble(*words))
        return path
    return write


# $200 LD I,$000 / $202 DRW V0,V1,5 / $204 JP $204
DRAW_ZERO = (0xA000, 0xD015, 0x1204)


class TestRunCommand:
    """Test normal runs."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Run a CHIP-8 program image" in result.output

    def test_prints_final_screen(self, runner, rom):
        result = runner.invoke(main, [str(rom(*DRAW_ZERO)), "--max-steps", "10"])
        assert result.exit_code == ExitCode.SUCCESS
        lines = result.output.splitlines()
        assert lines[0].startswith("####.")
        assert lines[1].startswith("#..#.")
        assert "stopped after 10 iterations" in result.output

    def test_stops_when_waiting_without_keys(self, runner, rom):
        result = runner.invoke(main, [str(rom(0xF00A)), "--max-steps", "1000"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "waiting for key after 1 iterations" in result.output

    def test_held_key_resolves_wait(self, runner, rom):
        # $200 LD V0,K / $202 LD F,V0 / $204 DRW V1,V1,5 / $206 JP $206
        path = rom(0xF00A, 0xF029, 0xD115, 0x1206)
        result = runner.invoke(main, [str(path), "--keys", "1", "--max-steps", "10"])
        assert result.exit_code == ExitCode.SUCCESS
        lines = result.output.splitlines()
        # Key "1" is keypad 0: glyph "0"
        assert lines[0].startswith("####.")
        assert lines[1].startswith("#..#.")

    def test_verbose(self, runner, rom):
        result = runner.invoke(main, [str(rom(*DRAW_ZERO)), "-n", "5", "-v"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Bounds policy:" in result.output
        assert "PC=$204" in result.output

    def test_trace(self, runner, rom, caplog):
        """--trace logs the pc and opcode of every executed instruction."""
        path = rom(0x6001, 0x1202)
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.machine.emulator"):
            result = runner.invoke(main, [str(path), "--trace", "-n", "3"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "$200\t6001" in caplog.text
        assert caplog.text.count("$202\t1202") == 2

    def test_png(self, runner, rom, tmp_path):
        pytest.importorskip("PIL")
        png = tmp_path / "screen.png"
        result = runner.invoke(main, [str(rom(*DRAW_ZERO)), "-n", "5", "--png", str(png)])
        assert result.exit_code == ExitCode.SUCCESS
        assert png.read_bytes()[:4] == b"\x89PNG"


class TestRunErrors:
    """Test exit codes for failures."""

    def test_odd_rom(self, runner, tmp_path):
        path = tmp_path / "odd.ch8"
        path.write_bytes(bytes([0x60, 0x2A, 0x12]))
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.RUN_ERROR
        assert "even number of bytes" in result.output

    def test_hard_fault(self, runner, rom):
        result = runner.invoke(main, [str(rom(0x1FFF)), "--bounds", "fault"])
        assert result.exit_code == ExitCode.RUN_ERROR
        assert "out of bounds" in result.output

    def test_missing_rom(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "missing.ch8")])
        assert result.exit_code == 2

    def test_unknown_key(self, runner, rom):
        result = runner.invoke(main, [str(rom(*DRAW_ZERO)), "--keys", "P"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Unknown key" in result.output

    def test_bad_bounds_choice(self, runner, rom):
        result = runner.invoke(main, [str(rom(*DRAW_ZERO)), "--bounds", "ignore"])
        assert result.exit_code == 2

    def test_bad_environment(self, runner, rom):
        result = runner.invoke(
            main, [str(rom(*DRAW_ZERO))], env={"CHIP8_STACK_DEPTH": "deep"}
        )
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Configuration error" in result.output


class TestRunOptions:
    """Test options that change machine configuration."""

    def test_stack_depth(self, runner, rom):
        # $200 CALL $200, recursing until the stack is full
        result = runner.invoke(
            main, [str(rom(0x2200)), "--stack-depth", "4", "-n", "4", "-v"]
        )
        assert result.exit_code == ExitCode.SUCCESS
        assert "Stack depth: 4" in result.output

    def test_wrap_policy(self, runner, rom):
        # $200 LD I,$000 / $202 LD V0,62 / $204 DRW V0,V1,5 / $206 JP $206
        path = rom(0xA000, 0x603E, 0xD015, 0x1206)
        result = runner.invoke(main, [str(path), "--bounds", "wrap", "-n", "5"])
        assert result.exit_code == ExitCode.SUCCESS
        first = result.output.splitlines()[0]
        assert first.startswith("##")
        assert first.endswith("##")

    def test_seed_is_reproducible(self, runner, rom):
        # $200 RND V0,$FF / $202 LD F,V0 / $204 DRW V1,V1,5 / $206 JP $206
        path = rom(0xC0FF, 0xF029, 0xD115, 0x1206)
        first = runner.invoke(main, [str(path), "--seed", "5", "-n", "5"])
        second = runner.invoke(main, [str(path), "--seed", "5", "-n", "5"])
        assert first.exit_code == ExitCode.SUCCESS
        assert first.output == second.output
