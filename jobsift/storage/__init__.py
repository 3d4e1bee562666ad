"""
Storage layer for jobsift.

Provides:
- JSON array persistence of record sets
- SQLite persistence with run tracking
- Export to CSV/Excel
"""

from jobsift.storage.export import export_records_csv, export_records_excel
from jobsift.storage.json_store import read_records_json, write_records_json
from jobsift.storage.providers import StorageProvider, save_records, save_tags
from jobsift.storage.sqlite import RecordDatabase, RunStats

__all__ = [
    "RecordDatabase",
    "RunStats",
    "StorageProvider",
    "export_records_csv",
    "export_records_excel",
    "read_records_json",
    "save_records",
    "save_tags",
    "write_records_json",
]
