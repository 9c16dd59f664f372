"""
Error Observers
===============

Recovered runtime errors (unsupported opcodes, stack overflow/underflow,
clipped out-of-bounds accesses) are not raised. The engine hands them to
an observer and keeps running. Hosts pick the observer:

- LoggingObserver: log each error at WARNING (the default)
- CollectingObserver: keep every error in a list for later inspection

Any object with a ``report(error)`` method can be used.

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
from typing import List, Optional, Protocol, Type

from ..errors import VMError

logger = logging.getLogger(__name__)


class ErrorObserver(Protocol):
    """Sink for errors the engine recovers from."""

    def report(self, error: VMError) -> None:
        """Receive one recovered error."""
        ...


class LoggingObserver:
    """Log recovered errors through the ``logging`` module."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.WARNING):
        self._log = log or logger
        self._level = level

    def report(self, error: VMError) -> None:
        self._log.log(self._level, f"{type(error).__name__}: {error}")


class CollectingObserver:
    """
    Record recovered errors in order.

    Example:
        >>> observer = CollectingObserver()
        >>> emu = Emulator(observer=observer)
        >>> emu.load(bytes([0x5A, 0xB1]))
        >>> emu.step()
        False
        >>> observer.errors[0].opcode == 0x5AB1
        True
    """

    def __init__(self, forward: Optional[ErrorObserver] = None):
        """
        Args:
            forward: Optional observer that also receives every error
        """
        self.errors: List[VMError] = []
        self._forward = forward

    def report(self, error: VMError) -> None:
        self.errors.append(error)
        if self._forward is not None:
            self._forward.report(error)

    def of_type(self, kind: Type[VMError]) -> List[VMError]:
        """Errors that are instances of ``kind``."""
        return [e for e in self.errors if isinstance(e, kind)]

    def clear(self) -> None:
        self.errors.clear()

    def __len__(self) -> int:
        return len(self.errors)
