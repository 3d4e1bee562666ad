"""
JSON persistence for record sets.

The file is a JSON array of objects whose keys are the field schema's field
names, mapped to string values.
"""

from __future__ import annotations

import json
import os
from typing import Any, List, Mapping, Sequence

from jobsift.models import Record, records_from_dicts


def records_to_json(records: Sequence[Mapping]) -> str:
    return json.dumps([dict(r) for r in records], ensure_ascii=False)


def write_records_json(path: str, records: Sequence[Mapping]) -> int:
    """Write records as a JSON array; returns the number written."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(records_to_json(records))
    return len(records)


def read_records_json(path: str) -> List[Record]:
    """Load a JSON array written by write_records_json()."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValueError(f"{path} does not contain a JSON array of objects")
    return records_from_dicts(data)


def write_json(path: str, data: Any) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
