"""BlobStore — asynchronous binary store for floor-plan images.

One image per project id in a single ``images`` table.  The schema is
created on first open.  Blocking sqlite3 calls run in a worker thread via
:func:`asyncio.to_thread`, so image I/O never blocks graph editing.

No operation raises: failures are logged and reported as ``False`` (writes)
or ``None`` (reads).
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path

from floormap.config import IMAGE_TABLE

logger = logging.getLogger(__name__)

_SCHEMA_SQL = f"""\
CREATE TABLE IF NOT EXISTS {IMAGE_TABLE} (
    project_id TEXT PRIMARY KEY,
    data BLOB NOT NULL
);
"""


class BlobStore:
    """Async, idempotent put/get/delete of image bytes keyed by project id.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file, or ``':memory:'``.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    # -- Blocking helpers (run in a worker thread) -----------------------------

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.executescript(_SCHEMA_SQL)
            conn.commit()
            self._conn = conn
            logger.debug("Opened blob store at %s", self._db_path)
        return self._conn

    def _put_sync(self, project_id: str, data: bytes) -> None:
        with self._lock:
            conn = self._connect()
            conn.execute(
                f"INSERT INTO {IMAGE_TABLE} (project_id, data) VALUES (?, ?) "
                "ON CONFLICT(project_id) DO UPDATE SET data = excluded.data",
                (project_id, sqlite3.Binary(data)),
            )
            conn.commit()

    def _get_sync(self, project_id: str) -> bytes | None:
        with self._lock:
            cur = self._connect().execute(
                f"SELECT data FROM {IMAGE_TABLE} WHERE project_id = ?",
                (project_id,),
            )
            row = cur.fetchone()
        return None if row is None else bytes(row[0])

    def _delete_sync(self, project_id: str) -> None:
        with self._lock:
            conn = self._connect()
            conn.execute(f"DELETE FROM {IMAGE_TABLE} WHERE project_id = ?", (project_id,))
            conn.commit()

    def _open_sync(self) -> None:
        with self._lock:
            self._connect()

    # -- Public async API ------------------------------------------------------

    async def open(self) -> bool:
        """Open the database, creating the schema if needed."""
        try:
            await asyncio.to_thread(self._open_sync)
            return True
        except Exception:
            logger.error("Error opening blob store %s", self._db_path, exc_info=True)
            return False

    async def put(self, project_id: str, data: bytes | str) -> bool:
        """Store *data* for *project_id*, replacing any previous image.

        Text (e.g. a ``data:`` URL) is stored as its UTF-8 bytes.
        """
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        try:
            await asyncio.to_thread(self._put_sync, project_id, payload)
            return True
        except Exception:
            logger.error("Error saving image for project %s", project_id, exc_info=True)
            return False

    async def get(self, project_id: str) -> bytes | None:
        try:
            return await asyncio.to_thread(self._get_sync, project_id)
        except Exception:
            logger.error("Error loading image for project %s", project_id, exc_info=True)
            return None

    async def delete(self, project_id: str) -> bool:
        try:
            await asyncio.to_thread(self._delete_sync, project_id)
            return True
        except Exception:
            logger.error("Error deleting image for project %s", project_id, exc_info=True)
            return False

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
