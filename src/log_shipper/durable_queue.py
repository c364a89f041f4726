import sqlite3
import threading
from pathlib import Path


class DurableQueue:
    """On-disk FIFO of byte records backed by a SQLite file.

    Every append is committed before it returns, so records survive a crash
    or restart. One connection is shared across threads behind a lock.
    """

    def __init__(self, directory: str | Path, name: str = "log-shipper"):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path = self.directory / f"{name}.db"
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=FULL;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                payload BLOB NOT NULL
            )
            """
        )
        self._conn.commit()

    def append(self, record: bytes) -> None:
        with self._lock:
            self._conn.execute("INSERT INTO records (payload) VALUES (?)", (sqlite3.Binary(record),))
            self._conn.commit()

    def pop_front(self) -> bytes | None:
        """Remove and return the oldest record, or None if the queue is empty."""
        with self._lock:
            row = self._conn.execute(
                "SELECT id, payload FROM records ORDER BY id LIMIT 1"
            ).fetchone()
            if row is None:
                return None
            self._conn.execute("DELETE FROM records WHERE id = ?", (row[0],))
            self._conn.commit()
            return bytes(row[1])

    def is_empty(self) -> bool:
        with self._lock:
            return self._conn.execute("SELECT 1 FROM records LIMIT 1").fetchone() is None

    def __len__(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM records").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
