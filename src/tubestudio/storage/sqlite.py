"""SQLite implementation of the shorts history repository."""

import sqlite3

from tubestudio.config import settings
from tubestudio.models import ShortsAnalysis, ShortsStats, ShortsTrainingEntry
from tubestudio.storage.repository import ShortsHistoryRepository


class SQLiteShortsHistoryRepository(ShortsHistoryRepository):
    """SQLite-backed shorts history.

    Analysis and stats are stored as JSON columns; the engagement score is
    stored alongside so ranking happens in SQL.
    """

    _CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS shorts_history (
            id         TEXT PRIMARY KEY,
            file_uri   TEXT NOT NULL,
            analysis   TEXT NOT NULL,
            stats      TEXT NOT NULL,
            score      INTEGER NOT NULL DEFAULT 0,
            timestamp  TEXT NOT NULL
        )
    """

    def __init__(self, db_path: str | None = None) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file. Defaults to settings.db_path.
                     Use ":memory:" for testing.
        """
        self._db_path = db_path or str(settings.db_path)
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute(self._CREATE_TABLE)
        self._conn.commit()

    def save(self, entry: ShortsTrainingEntry) -> None:
        sql = """
            INSERT INTO shorts_history (id, file_uri, analysis, stats, score, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                file_uri = excluded.file_uri,
                analysis = excluded.analysis,
                stats = excluded.stats,
                score = excluded.score
        """
        self._conn.execute(sql, (
            entry.id,
            entry.file_uri,
            entry.analysis.model_dump_json(),
            entry.stats.model_dump_json(exclude={"score"}),
            entry.stats.score,
            entry.timestamp.isoformat(),
        ))
        self._conn.commit()

    def get(self, entry_id: str) -> ShortsTrainingEntry | None:
        row = self._conn.execute(
            "SELECT * FROM shorts_history WHERE id = ?", (entry_id,)
        ).fetchone()
        return self._row_to_entry(row) if row else None

    def list_all(self) -> list[ShortsTrainingEntry]:
        rows = self._conn.execute(
            "SELECT * FROM shorts_history ORDER BY timestamp DESC"
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def top_performers(self, limit: int = 5) -> list[ShortsTrainingEntry]:
        rows = self._conn.execute(
            "SELECT * FROM shorts_history ORDER BY score DESC, timestamp DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def delete(self, entry_id: str) -> None:
        self._conn.execute("DELETE FROM shorts_history WHERE id = ?", (entry_id,))
        self._conn.commit()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> ShortsTrainingEntry:
        return ShortsTrainingEntry(
            id=row["id"],
            file_uri=row["file_uri"],
            analysis=ShortsAnalysis.model_validate_json(row["analysis"]),
            stats=ShortsStats.model_validate_json(row["stats"]),
            timestamp=row["timestamp"],
        )
