"""SQLite-based run and step state tracker.

Records each pipeline run and the status of each of its steps (pending,
running, completed, failed), with timestamps, error messages and the
outputs a step produced.
"""

import json
import sqlite3
import logging
import threading
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

VALID_STATUSES = ('pending', 'running', 'completed', 'failed')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RunTracker:
    """Tracks pipeline runs and their steps.

    **Database Schema:**

    SQLite table `pipeline_runs`:

    - run_id: Unique run identifier
    - pipeline: Pipeline name
    - prefix_name: Prefix of the output tables
    - status: running, completed, failed
    - failed_step, error_message: Set when the run failed
    - outputs: JSON of the final result tables
    - started_at, finished_at: ISO timestamps

    SQLite table `step_runs`, one row per (run_id, step):

    - status: pending, running, completed, failed
    - error_message, outputs (JSON), started_at, finished_at

    **Thread Safety:**

    All methods are thread-safe via internal locking, so steps of
    concurrent branches can report progress at the same time.

    **Typical Usage:**

        tracker = RunTracker(db_path)
        context = RunContext(tracker=tracker)
        orchestrator.run(inputs, context)
        tracker.get_steps(context.run_id)
        tracker.close()
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        """Initialize tracker.

        Parameters
        ----------
        db_path : Path or str
            Path to SQLite database file. Created if it doesn't exist.
            ``":memory:"`` keeps the records in memory.
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = None
        self._lock = threading.Lock()

        self._init_database()
        logger.info("Run tracker initialized: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        conn = self._get_connection()

        with self._lock:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pipeline_runs (
                    run_id TEXT PRIMARY KEY,
                    pipeline TEXT NOT NULL,
                    prefix_name TEXT,
                    status TEXT DEFAULT 'running',
                    failed_step TEXT,
                    error_message TEXT,
                    outputs TEXT,
                    started_at TEXT,
                    finished_at TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS step_runs (
                    run_id TEXT NOT NULL,
                    step TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    status TEXT DEFAULT 'pending',
                    error_message TEXT,
                    outputs TEXT,
                    started_at TEXT,
                    finished_at TEXT,
                    PRIMARY KEY (run_id, step)
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_run_status ON pipeline_runs(status)")
            conn.commit()

    def start_run(self, run_id: str, pipeline: str, steps: List[str],
                  prefix_name: Optional[str] = None) -> None:
        """Register a run and its steps as pending.

        Raises
        ------
        ValueError
            If ``run_id`` is already registered.
        """
        conn = self._get_connection()

        with self._lock:
            cursor = conn.execute("SELECT run_id FROM pipeline_runs WHERE run_id = ?", (run_id,))
            if cursor.fetchone():
                raise ValueError(f"Run already registered: {run_id}")

            conn.execute("""
                INSERT INTO pipeline_runs (run_id, pipeline, prefix_name, status, started_at)
                VALUES (?, ?, ?, 'running', ?)
            """, (run_id, pipeline, prefix_name, _now()))
            conn.executemany("""
                INSERT INTO step_runs (run_id, step, position, status)
                VALUES (?, ?, ?, 'pending')
            """, [(run_id, step, i) for i, step in enumerate(steps)])
            conn.commit()

        logger.debug("Registered run %s (%d steps)", run_id, len(steps))

    def mark_step(self, run_id: str, step: str, status: str,
                  outputs: Optional[Mapping[str, Any]] = None,
                  error: Optional[str] = None) -> None:
        """Record a step status change.

        Raises
        ------
        ValueError
            If ``status`` is not a valid step status.
        """
        if status not in VALID_STATUSES:
            raise ValueError(f"Invalid status: {status}. Must be one of {VALID_STATUSES}")

        conn = self._get_connection()
        timestamp_col = "started_at" if status == "running" else "finished_at"

        with self._lock:
            conn.execute(f"""
                UPDATE step_runs
                SET status = ?,
                    {timestamp_col} = ?,
                    outputs = COALESCE(?, outputs),
                    error_message = ?
                WHERE run_id = ? AND step = ?
            """, (
                status,
                _now(),
                json.dumps(dict(outputs), default=str) if outputs is not None else None,
                error,
                run_id,
                step,
            ))
            conn.commit()

        logger.debug("Step %s of run %s: %s", step, run_id, status)

    def finish_run(self, run_id: str, ok: bool,
                   outputs: Optional[Mapping[str, Any]] = None,
                   failed_step: Optional[str] = None,
                   error: Optional[str] = None) -> None:
        """Close a run as completed or failed."""
        conn = self._get_connection()

        with self._lock:
            conn.execute("""
                UPDATE pipeline_runs
                SET status = ?,
                    outputs = ?,
                    failed_step = ?,
                    error_message = ?,
                    finished_at = ?
                WHERE run_id = ?
            """, (
                'completed' if ok else 'failed',
                json.dumps(dict(outputs)) if outputs is not None else None,
                failed_step,
                error,
                _now(),
                run_id,
            ))
            conn.commit()

    def get_run(self, run_id: str) -> Optional[Dict]:
        """Run record as a dict, with ``outputs`` decoded, or None."""
        conn = self._get_connection()

        with self._lock:
            row = conn.execute("SELECT * FROM pipeline_runs WHERE run_id = ?", (run_id,)).fetchone()

        if row is None:
            return None
        record = dict(row)
        if record["outputs"]:
            record["outputs"] = json.loads(record["outputs"])
        return record

    def get_steps(self, run_id: str) -> List[Dict]:
        """Step records of a run in declared order."""
        conn = self._get_connection()

        with self._lock:
            rows = conn.execute(
                "SELECT * FROM step_runs WHERE run_id = ? ORDER BY position", (run_id,)
            ).fetchall()

        steps = []
        for row in rows:
            record = dict(row)
            if record["outputs"]:
                record["outputs"] = json.loads(record["outputs"])
            steps.append(record)
        return steps

    def get_statistics(self) -> Dict[str, int]:
        """Count runs by status.

        Returns
        -------
        dict
            ``total``, ``completed``, ``failed``, ``running``
        """
        conn = self._get_connection()

        with self._lock:
            rows = conn.execute(
                "SELECT status, COUNT(*) AS n FROM pipeline_runs GROUP BY status"
            ).fetchall()

        stats = {"total": 0, "completed": 0, "failed": 0, "running": 0}
        for row in rows:
            stats[row["status"]] = row["n"]
            stats["total"] += row["n"]
        return stats

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.debug("Run tracker closed")
