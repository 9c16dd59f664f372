"""
Hexadecimal Keypad (Input Latch) for the CHIP-8 Virtual Machine
===============================================================

The CHIP-8 keypad has sixteen keys, 0 through F. The machine only sees
a latch of sixteen booleans that the host refreshes once per loop
iteration; it never reads host keyboard events directly.

Default host key mapping, row by row onto keys 0-F:

    1 2 3 4        0 1 2 3
    Q W E R   ->   4 5 6 7
    A S D F        8 9 A B
    Z X C V        C D E F

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple


KEY_COUNT = 16


# =============================================================================
# HOST KEY NAME TO KEYPAD INDEX
# =============================================================================

DEFAULT_KEY_MAP: Dict[str, int] = {
    "1": 0x0, "2": 0x1, "3": 0x2, "4": 0x3,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0x7,
    "A": 0x8, "S": 0x9, "D": 0xA, "F": 0xB,
    "Z": 0xC, "X": 0xD, "C": 0xE, "V": 0xF,
}


class Keypad:
    """
    Sixteen-key input latch.

    The host either replaces the whole latch with ``set_inputs`` or presses
    and releases individual host keys with ``key_down``/``key_up``.

    Example:
        >>> pad = Keypad()
        >>> pad.key_down("W")
        >>> pad.is_pressed(0x5)
        True
        >>> pad.first_pressed()
        5
    """

    def __init__(self, key_map: Optional[Dict[str, int]] = None):
        """
        Args:
            key_map: Host key name to keypad index mapping.
                     Defaults to DEFAULT_KEY_MAP.
        """
        self._key_map = dict(key_map or DEFAULT_KEY_MAP)
        self._latch = [False] * KEY_COUNT

    @property
    def states(self) -> Tuple[bool, ...]:
        """Current latch contents, index 0 to F."""
        return tuple(self._latch)

    def set_inputs(self, states: Sequence[bool]) -> None:
        """
        Replace the whole latch.

        Raises:
            ValueError: If ``states`` does not hold exactly 16 entries
        """
        if len(states) != KEY_COUNT:
            raise ValueError(f"Expected {KEY_COUNT} key states, got {len(states)}")
        self._latch = [bool(s) for s in states]

    def clear(self) -> None:
        """Release every key."""
        self._latch = [False] * KEY_COUNT

    def is_pressed(self, key: int) -> bool:
        """State of keypad key ``key`` (0-15)."""
        return self._latch[key]

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed key index, or None if nothing is pressed."""
        for key, down in enumerate(self._latch):
            if down:
                return key
        return None

    # =========================================================================
    # Host Key API
    # =========================================================================

    def lookup(self, name: str) -> Optional[int]:
        """Keypad index for a host key name (case-insensitive), or None."""
        return self._key_map.get(name.upper())

    def key_down(self, name: str) -> None:
        """Press the keypad key mapped to host key ``name``; unknown names are ignored."""
        key = self.lookup(name)
        if key is not None:
            self._latch[key] = True

    def key_up(self, name: str) -> None:
        """Release the keypad key mapped to host key ``name``."""
        key = self.lookup(name)
        if key is not None:
            self._latch[key] = False

    def pressed_from_names(self, names: Iterable[str]) -> List[bool]:
        """
        Build a full latch from the host keys currently held down.

        Unmapped names are ignored. The result can be passed to set_inputs.
        """
        latch = [False] * KEY_COUNT
        for name in names:
            key = self.lookup(name)
            if key is not None:
                latch[key] = True
        return latch
