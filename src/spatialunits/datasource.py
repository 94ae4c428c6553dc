"""SQLite-backed datastore handle shared by every step of a run.

The orchestrator never looks inside the handle: it is passed by reference to
each Process. Processes and contract checks use it to create, inspect and
read tables.
"""

import sqlite3
import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


def output_table_name(prefix: Optional[str], base_name: str) -> str:
    """Build an output table name from a naming prefix.

    Parameters
    ----------
    prefix : str or None
        Run prefix. Empty or None yields ``base_name`` unchanged.
    base_name : str
        Base name of the table created by a step (e.g. ``"rsu"``).

    Examples
    --------
    >>> output_table_name("p1", "rsu")
    'p1_rsu'
    >>> output_table_name("", "block")
    'block'
    """
    if not prefix:
        return base_name
    return f"{prefix}_{base_name}"


class DataSource:
    """Connection wrapper around a SQLite database.

    Parameters
    ----------
    path : str or Path, optional
        Database file. ``":memory:"`` (default) keeps everything in memory.

    Notes
    -----
    The connection is opened with ``check_same_thread=False`` so steps run
    in parallel mode can share it. Every access goes through an internal
    lock; each step writes only to the tables it creates.
    """

    def __init__(self, path: Union[str, Path] = ":memory:"):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        logger.debug("Datastore opened: %s", self.path)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> None:
        """Execute one statement and commit."""
        with self._lock:
            self._conn.execute(sql, params)
            self._conn.commit()

    def executescript(self, script: str) -> None:
        with self._lock:
            self._conn.executescript(script)
            self._conn.commit()

    def query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Run a SELECT and return all rows."""
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def table_exists(self, table: str) -> bool:
        rows = self.query(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        )
        return bool(rows)

    def column_names(self, table: str) -> List[str]:
        """Return the column names of ``table`` in declaration order."""
        with self._lock:
            if not self.table_exists(table):
                raise KeyError(f"Table not found: {table}")
            return [row["name"] for row in self.query(f'PRAGMA table_info("{table}")')]

    def row_count(self, table: str) -> int:
        return self.query(f'SELECT COUNT(*) FROM "{table}"')[0][0]

    def read_table(self, table: str) -> pd.DataFrame:
        """Load a whole table into a DataFrame."""
        with self._lock:
            if not self.table_exists(table):
                raise KeyError(f"Table not found: {table}")
            return pd.read_sql_query(f'SELECT * FROM "{table}"', self._conn)

    def drop_tables(self, *tables: str) -> None:
        with self._lock:
            for table in tables:
                self._conn.execute(f'DROP TABLE IF EXISTS "{table}"')
            self._conn.commit()

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Datastore closed: %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"DataSource({self.path!r})"
