"""
Storage provider selection: where a run's records and tags end up.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional, Sequence

from jobsift.models import TaggedRecord
from jobsift.storage.json_store import write_json, write_records_json
from jobsift.storage.sqlite import RecordDatabase


class StorageProvider(str, Enum):
    """Where a run's records are persisted."""
    JSON = "json"
    SQLITE = "sqlite"
    MEMORY = "memory"

    @classmethod
    def from_text(cls, text: str) -> "StorageProvider":
        t = (text or "").strip().lower()
        for provider in cls:
            if provider.value == t:
                return provider
        if t in ("in_memory", "inmemory", "none"):
            return cls.MEMORY
        raise ValueError(f"unknown storage provider {text!r}")


def save_records(
    provider: StorageProvider,
    records: Sequence[Mapping],
    output_path: str = "",
    db: Optional[RecordDatabase] = None,
    run_id: int = 0,
) -> int:
    """
    Persist a record set. Returns the number stored (0 for memory).

    JSON writes the whole set to `output_path`; SQLite appends it to `run_id`.
    """
    if provider == StorageProvider.JSON:
        return write_records_json(output_path, records)
    if provider == StorageProvider.SQLITE:
        if db is None:
            raise ValueError("sqlite storage needs an open RecordDatabase")
        return db.save_records(run_id, records)
    return 0


def save_tags(
    provider: StorageProvider,
    tagged: Sequence[TaggedRecord],
    tags_path: str = "",
    db: Optional[RecordDatabase] = None,
    run_id: int = 0,
) -> int:
    """
    Persist tagging results. Returns the number of tag sets stored.

    SQLite matches tags to records by position within the run, so `tagged`
    must be a prefix of the saved record set.
    """
    if provider == StorageProvider.JSON:
        write_json(tags_path, [t.to_dict() for t in tagged])
        return sum(1 for t in tagged if t.ok)
    if provider == StorageProvider.SQLITE:
        if db is None:
            raise ValueError("sqlite storage needs an open RecordDatabase")
        stored = 0
        for position, t in enumerate(tagged):
            if t.tags is not None:
                db.set_tags(run_id, position, t.tags)
                stored += 1
        return stored
    return 0
