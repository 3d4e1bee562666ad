"""
SQLite-based record storage with run tracking.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from jobsift.models import Record, TagSet, now_utc_iso


@dataclass
class RunStats:
    """Statistics for a pipeline run."""
    run_id: int
    started_at: str
    finished_at: Optional[str] = None
    records_extracted: int = 0
    records_kept: int = 0
    records_tagged: int = 0
    tag_errors: int = 0
    status: str = "running"
    error: str = ""


class RecordDatabase:
    """
    SQLite database for storing extracted records per run.
    """

    def __init__(self, db_path: str):
        """
        Initialize the database.

        Args:
            db_path: Path to SQLite database file (":memory:" for in-memory)
        """
        self.db_path = db_path
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (creating if needed)."""
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._lock:
            conn = self._get_conn()
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS runs (
                    run_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    started_at TEXT NOT NULL,
                    finished_at TEXT,
                    status TEXT,
                    error TEXT,
                    records_extracted INTEGER DEFAULT 0,
                    records_kept INTEGER DEFAULT 0,
                    records_tagged INTEGER DEFAULT 0,
                    tag_errors INTEGER DEFAULT 0,
                    options TEXT  -- JSON
                );

                CREATE TABLE IF NOT EXISTS records (
                    run_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    data TEXT NOT NULL,  -- JSON object
                    tags TEXT,  -- JSON object
                    PRIMARY KEY (run_id, position),
                    FOREIGN KEY (run_id) REFERENCES runs(run_id)
                );

                CREATE INDEX IF NOT EXISTS idx_records_run ON records(run_id);
            """)
            conn.commit()

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "RecordDatabase":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ----------------------------- Runs -----------------------------

    def start_run(self, options_json: str = "") -> int:
        """Record the start of a run and return its id."""
        with self._lock:
            conn = self._get_conn()
            cur = conn.execute(
                "INSERT INTO runs (started_at, status, options) VALUES (?, ?, ?)",
                (now_utc_iso(), "running", options_json),
            )
            conn.commit()
            return int(cur.lastrowid)

    def finish_run(self, run_id: int, stats: RunStats) -> None:
        """Record final statistics for a run."""
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                """
                UPDATE runs SET
                    finished_at = ?,
                    status = ?,
                    error = ?,
                    records_extracted = ?,
                    records_kept = ?,
                    records_tagged = ?,
                    tag_errors = ?
                WHERE run_id = ?
                """,
                (
                    stats.finished_at or now_utc_iso(),
                    stats.status,
                    stats.error,
                    stats.records_extracted,
                    stats.records_kept,
                    stats.records_tagged,
                    stats.tag_errors,
                    run_id,
                ),
            )
            conn.commit()

    def get_run(self, run_id: int) -> Optional[Dict]:
        with self._lock:
            row = self._get_conn().execute("SELECT * FROM runs WHERE run_id = ?", (run_id,)).fetchone()
        return dict(row) if row else None

    # ----------------------------- Records -----------------------------

    def save_records(self, run_id: int, records: Sequence[Record]) -> int:
        """Store a run's records in order. Returns number stored."""
        with self._lock:
            conn = self._get_conn()
            conn.executemany(
                "INSERT OR REPLACE INTO records (run_id, position, data) VALUES (?, ?, ?)",
                [
                    (run_id, i, json.dumps(dict(r), ensure_ascii=False))
                    for i, r in enumerate(records)
                ],
            )
            conn.commit()
        return len(records)

    def set_tags(self, run_id: int, position: int, tags: TagSet) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                "UPDATE records SET tags = ? WHERE run_id = ? AND position = ?",
                (json.dumps(tags.to_dict()), run_id, position),
            )
            conn.commit()

    def get_records(self, run_id: int) -> List[Record]:
        """Records of a run, in their original order."""
        with self._lock:
            rows = self._get_conn().execute(
                "SELECT data FROM records WHERE run_id = ? ORDER BY position", (run_id,)
            ).fetchall()
        return [Record(json.loads(row["data"])) for row in rows]

    def get_tags(self, run_id: int) -> List[Optional[TagSet]]:
        with self._lock:
            rows = self._get_conn().execute(
                "SELECT tags FROM records WHERE run_id = ? ORDER BY position", (run_id,)
            ).fetchall()
        return [TagSet.from_json(json.loads(row["tags"])) if row["tags"] else None for row in rows]

    def get_record_count(self, run_id: Optional[int] = None) -> int:
        with self._lock:
            conn = self._get_conn()
            if run_id is None:
                row = conn.execute("SELECT COUNT(*) AS n FROM records").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) AS n FROM records WHERE run_id = ?", (run_id,)).fetchone()
        return int(row["n"])
