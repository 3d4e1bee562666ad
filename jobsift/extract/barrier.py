"""
Counting completion barrier.

Gates the move from concurrent extraction to sequential assembly: every
match callback brackets its work with begin()/end(), and the driver blocks
in wait() until the count drops back to zero.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class CompletionBarrier:

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._count = 0

    def begin(self) -> None:
        """Register one unit of in-flight work."""
        with self._cond:
            self._count += 1

    def end(self) -> None:
        """Mark one unit of work complete."""
        with self._cond:
            if self._count <= 0:
                raise RuntimeError("CompletionBarrier.end() called without matching begin()")
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no work is in flight.

        Returns False if `timeout` (seconds) expires first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)

    @property
    def pending(self) -> int:
        with self._cond:
            return self._count

    @contextmanager
    def track(self) -> Iterator[None]:
        """begin() on entry, end() on exit, including on exceptions."""
        self.begin()
        try:
            yield
        finally:
            self.end()
