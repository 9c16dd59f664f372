"""
Delay and Sound Timers for the CHIP-8 Virtual Machine
=====================================================

Both timers are 8-bit counters that count down towards zero at 60 Hz of
wall-clock time, independent of how fast instructions execute.

Each timer remembers the instant it was last set or decremented. When the
host ages the timers, a timer decrements by exactly one if at least one
cadence interval has passed since that instant, and the instant is reset
to "now". A host that stalls for several intervals therefore loses ticks
instead of catching up.

The clock is injectable so tests can drive time explicitly:

    >>> now = [0.0]
    >>> timers = Timers(clock=lambda: now[0])
    >>> timers.set_delay(3)
    >>> now[0] = 0.5
    >>> timers.age()
    True
    >>> timers.delay
    2

The sound timer is aged the same way; no audio is produced, hosts can
poll ``sound_active`` to drive a buzzer.

Copyright (c) 2026 chip8-vm Contributors
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional


DEFAULT_TIMER_HZ = 60

# Float slack for "elapsed >= one interval" comparisons
_EPSILON = 1e-9

Clock = Callable[[], float]


@dataclass
class _Countdown:
    """One 8-bit counter and the instant it was last set or decremented."""
    value: int = 0
    reference: float = 0.0


class Timers:
    """
    Delay (DT) and sound (ST) timers aged against a wall clock.

    Attributes:
        clock: Callable returning the current time in seconds
        interval: Seconds per decrement (1 / hz)
    """

    def __init__(self, clock: Optional[Clock] = None, hz: float = DEFAULT_TIMER_HZ):
        """
        Args:
            clock: Time source in seconds. Defaults to time.monotonic.
            hz: Decrement rate

        Raises:
            ValueError: If hz is not positive
        """
        if hz <= 0:
            raise ValueError(f"Timer rate must be positive, got {hz}")
        self.clock: Clock = clock or time.monotonic
        self.interval = 1.0 / hz
        start = self.clock()
        self._delay = _Countdown(reference=start)
        self._sound = _Countdown(reference=start)

    @property
    def delay(self) -> int:
        """Delay timer value."""
        return self._delay.value

    @property
    def sound(self) -> int:
        """Sound timer value."""
        return self._sound.value

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is non-zero."""
        return self._sound.value > 0

    def set_delay(self, value: int) -> None:
        """Set DT and restart its aging reference at the current instant."""
        self._delay.value = value & 0xFF
        self._delay.reference = self.clock()

    def set_sound(self, value: int) -> None:
        """Set ST and restart its aging reference at the current instant."""
        self._sound.value = value & 0xFF
        self._sound.reference = self.clock()

    def reset(self) -> None:
        """Zero both timers."""
        start = self.clock()
        self._delay = _Countdown(reference=start)
        self._sound = _Countdown(reference=start)

    def age(self, elapsed: Optional[float] = None) -> bool:
        """
        Decrement each non-zero timer whose cadence interval has passed.

        Args:
            elapsed: Seconds elapsed since each timer's reference instant.
                     If None, measured with the clock.

        Returns:
            True if either timer was decremented
        """
        delay_ticked = self._age_one(self._delay, elapsed)
        sound_ticked = self._age_one(self._sound, elapsed)
        return delay_ticked or sound_ticked

    def _age_one(self, countdown: _Countdown, elapsed: Optional[float]) -> bool:
        if countdown.value == 0:
            return False

        if elapsed is None:
            now = self.clock()
            since = now - countdown.reference
        else:
            since = elapsed
            now = countdown.reference + elapsed

        if since + _EPSILON < self.interval:
            return False

        # One step per check, then resync to now
        countdown.value -= 1
        countdown.reference = now
        return True
