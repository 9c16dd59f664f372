"""
CHIP-8 VM Test Configuration
============================

Shared fixtures for the machine, host loop and CLI tests:

- A manually advanced clock so timer behavior is deterministic
- A collecting error observer
- An emulator wired to both, with a seeded random source and FAULT policy
- An ``assemble`` helper that packs instruction words into a program image

Copyright (c) 2026 chip8-vm Contributors
"""

import pytest

from chip8_vm.machine import (
    BoundsPolicy,
    CollectingObserver,
    Emulator,
    EmulatorConfig,
)


class FakeClock:
    """Clock callable that only moves when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _assemble(*words: int) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


@pytest.fixture
def assemble():
    """Fixture: pack 16-bit instruction words into big-endian bytes."""
    return _assemble


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def observer() -> CollectingObserver:
    return CollectingObserver()


@pytest.fixture
def make_emulator(clock, observer):
    """
    Fixture: factory for emulators sharing the fake clock and observer.

    Keyword arguments override EmulatorConfig fields.
    """
    def factory(**overrides) -> Emulator:
        settings = {
            "seed": 1234,
            "clock": clock,
            "bounds_policy": BoundsPolicy.FAULT,
        }
        settings.update(overrides)
        return Emulator(EmulatorConfig(**settings), observer=observer)
    return factory


@pytest.fixture
def emu(make_emulator) -> Emulator:
    """Fixture: emulator with FAULT policy, seed 1234 and the fake clock."""
    return make_emulator()
