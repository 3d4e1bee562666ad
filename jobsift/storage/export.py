"""
Tabular export of record sets (CSV / Excel) via pandas.
"""

from __future__ import annotations

import os
from typing import List, Mapping, Optional, Sequence

import pandas as pd


def _frame(records: Sequence[Mapping], columns: Optional[List[str]] = None) -> pd.DataFrame:
    df = pd.DataFrame([dict(r) for r in records])
    if columns:
        for col in columns:
            if col not in df.columns:
                df[col] = ""
        df = df[columns]
    return df


def export_records_csv(records: Sequence[Mapping], path: str, columns: Optional[List[str]] = None) -> int:
    """Export records to CSV. Returns number of rows exported."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    df = _frame(records, columns)
    df.to_csv(path, index=False, encoding="utf-8")
    return len(df)


def export_records_excel(records: Sequence[Mapping], path: str, columns: Optional[List[str]] = None) -> int:
    """Export records to Excel. Returns number of rows exported."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    df = _frame(records, columns)
    df.to_excel(path, index=False)
    return len(df)
