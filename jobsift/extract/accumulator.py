"""
Shared, lock-guarded accumulator for concurrently extracted text fragments.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Mapping

from jobsift.errors import AccumulatorSealedError


class Accumulator(Mapping):
    """
    Column-oriented store: field name -> fragments in callback order.

    Every append runs under a single mutex. Once sealed the accumulator is
    read-only; reads are safe from any thread.
    """

    def __init__(self, field_names: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._sealed = False
        self._fragments: Dict[str, List[str]] = {name: [] for name in field_names}

    def append(self, field: str, text: str) -> None:
        """Append one fragment under `field`."""
        with self._lock:
            if self._sealed:
                raise AccumulatorSealedError(field)
            self._fragments.setdefault(field, []).append(text)

    def seal(self) -> None:
        """Forbid further appends."""
        with self._lock:
            self._sealed = True

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    @property
    def field_names(self) -> List[str]:
        with self._lock:
            return list(self._fragments)

    def counts(self) -> Dict[str, int]:
        """Fragment count per field."""
        with self._lock:
            return {k: len(v) for k, v in self._fragments.items()}

    def snapshot(self) -> Dict[str, List[str]]:
        """Copy of the current contents, field order preserved."""
        with self._lock:
            return {k: list(v) for k, v in self._fragments.items()}

    def __getitem__(self, field: str) -> List[str]:
        with self._lock:
            return list(self._fragments[field])

    def __iter__(self) -> Iterator[str]:
        return iter(self.field_names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._fragments)

    def __repr__(self) -> str:
        return f"Accumulator({self.counts()!r}, sealed={self._sealed})"
