# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-30
# Description: StatusRepository
# -----------------------------------------------------------------------------
import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from status.EmbeddingStatusRecord import EmbeddingStatus, EmbeddingStatusRecord
from utility.logging_utils import get_class_logger


@runtime_checkable
class StatusRepository(Protocol):
    def upsert(self, record: EmbeddingStatusRecord) -> None:
        ...

    def get(self, business_id: str, version: str) -> Optional[EmbeddingStatusRecord]:
        ...

    def list_by_version(self, version: str) -> List[EmbeddingStatusRecord]:
        ...


class InMemoryStatusRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[Tuple[str, str], EmbeddingStatusRecord] = {}

    def upsert(self, record: EmbeddingStatusRecord) -> None:
        with self._lock:
            self._rows[(record.business_id, record.version)] = record

    def get(self, business_id: str, version: str) -> Optional[EmbeddingStatusRecord]:
        with self._lock:
            return self._rows.get((business_id, version))

    def list_by_version(self, version: str) -> List[EmbeddingStatusRecord]:
        with self._lock:
            return [r for (_, v), r in self._rows.items() if v == version]


_SCHEMA = """
CREATE TABLE IF NOT EXISTS embedding_status (
    business_id    TEXT    NOT NULL,
    version        TEXT    NOT NULL,
    status         TEXT    NOT NULL,
    has_embedding  INTEGER NOT NULL DEFAULT 0,
    last_generated REAL,
    last_updated   REAL    NOT NULL,
    error          TEXT,
    attempts       INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (business_id, version)
)
"""

_COLUMNS = "business_id, version, status, has_embedding, last_generated, last_updated, error, attempts"


class SqliteStatusRepository:
    """Status rows in a local SQLite file (or ':memory:')."""

    def __init__(self, path: str, *, logger=None):
        self.path = path
        self.logger = logger or get_class_logger(self.__class__)
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(_SCHEMA)
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_embedding_status_version ON embedding_status (version, status)"
            )
        self.logger.info("Embedding status repository ready at %s", path)

    @staticmethod
    def _row_to_record(row) -> EmbeddingStatusRecord:
        return EmbeddingStatusRecord(
            business_id=row[0],
            version=row[1],
            status=EmbeddingStatus(row[2]),
            has_embedding=bool(row[3]),
            last_generated=row[4],
            last_updated=row[5],
            error=row[6],
            attempts=row[7],
        )

    def upsert(self, record: EmbeddingStatusRecord) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT OR REPLACE INTO embedding_status ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.business_id,
                    record.version,
                    record.status.value,
                    int(record.has_embedding),
                    record.last_generated,
                    record.last_updated,
                    record.error,
                    record.attempts,
                ),
            )

    def get(self, business_id: str, version: str) -> Optional[EmbeddingStatusRecord]:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM embedding_status WHERE business_id = ? AND version = ?",
                (business_id, version),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_by_version(self, version: str) -> List[EmbeddingStatusRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM embedding_status WHERE version = ?",
                (version,),
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
