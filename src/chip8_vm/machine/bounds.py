"""
Out-of-Bounds Access Policy
===========================

CHIP-8 programs can address past the end of memory (Fx33/Fx55/Fx65 with I
near $FFF, Bnnn jumps, sprite data) and draw past the screen edge. The
machine resolves every such access through one of three policies:

- FAULT: raise OutOfBoundsAccessError and terminate the run
- CLIP:  ignore out-of-range writes, read out-of-range bytes as 0,
         report the access to the error observer
- WRAP:  modulo addressing (memory mod 4096, x mod 64, y mod 32, key mod 16)

The default follows the interpreter mode: FAULT while assertions are
enabled, CLIP under ``python -O``.

Copyright (c) 2026 chip8-vm Contributors
"""

from enum import Enum
from typing import Optional


class BoundsPolicy(Enum):
    """How out-of-range memory, display and key accesses are resolved."""
    FAULT = "fault"
    CLIP = "clip"
    WRAP = "wrap"

    @classmethod
    def parse(cls, name: str) -> "BoundsPolicy":
        """
        Look up a policy by case-insensitive name.

        Raises:
            ValueError: If name is not fault, clip or wrap
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown bounds policy '{name}' (expected one of: {choices})") from None


def default_policy() -> BoundsPolicy:
    """FAULT in debug runs, CLIP when Python runs optimised."""
    return BoundsPolicy.FAULT if __debug__ else BoundsPolicy.CLIP


def resolve_index(index: int, size: int, policy: BoundsPolicy) -> Optional[int]:
    """
    Map an index into ``range(size)`` under the given policy.

    Returns:
        The usable index, or None if the access is out of range and the
        policy does not wrap. The caller decides between raising (FAULT)
        and reporting (CLIP).
    """
    if 0 <= index < size:
        return index
    if policy is BoundsPolicy.WRAP:
        return index % size
    return None
