import asyncio
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from shared.errors import PersistenceError, QueryLogUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import Feedback, QueryLogEntry, QueryLogStats
from shared.stores.query_log.QueryLogStoreInterface import RECENT_LIMIT, QueryLogStoreInterface

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS query_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    question TEXT NOT NULL,
    answer TEXT,
    confidence TEXT,
    verdict TEXT,
    quality_score REAL DEFAULT 0,
    category TEXT,
    complexity TEXT,
    citation_count INTEGER DEFAULT 0,
    routing TEXT,
    processing_time_s REAL,
    feedback TEXT,
    created_at TEXT NOT NULL,
    stale INTEGER NOT NULL DEFAULT 0,
    stale_reason TEXT
)
"""

INDEX_SQL = "CREATE INDEX IF NOT EXISTS idx_query_log_question ON query_log(question)"

INSERT_SQL = """
INSERT INTO query_log (question, answer, confidence, verdict, quality_score, category,
                       complexity, citation_count, routing, processing_time_s, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

MARK_STALE_SQL = "UPDATE query_log SET stale = 1, stale_reason = ? WHERE stale = 0"

ATTACH_FEEDBACK_SQL = """
UPDATE query_log SET feedback = ?
WHERE id = (
    SELECT id FROM query_log
    WHERE question = ? AND feedback IS NULL
    ORDER BY created_at DESC, id DESC
    LIMIT 1
)
"""

RECENT_SQL = """
SELECT id, question, answer, confidence, verdict, quality_score, category, complexity,
       citation_count, routing, processing_time_s, feedback, stale, stale_reason, created_at
FROM query_log
ORDER BY created_at DESC, id DESC
LIMIT ?
"""

STATS_SQL = """
SELECT COUNT(*) AS total,
       COUNT(CASE WHEN stale = 1 THEN 1 END) AS stale_count,
       COUNT(CASE WHEN feedback = 'up' THEN 1 END) AS thumbs_up,
       COUNT(CASE WHEN feedback = 'down' THEN 1 END) AS thumbs_down,
       AVG(quality_score) AS avg_quality,
       AVG(processing_time_s) AS avg_time
FROM query_log
"""


def _path_from_url(database_url: str) -> Path:
    """sqlite:///relative/app.db → relative/app.db, sqlite:////abs/app.db → /abs/app.db"""
    prefix = "sqlite:///"
    if not database_url.lower().startswith(prefix):
        raise ValueError(f"Not a SQLite database URL: '{database_url}'. Expected 'sqlite:///<path>'.")
    return Path(database_url[len(prefix):])


class QueryLogStoreSqlite(QueryLogStoreInterface):
    """Query log in a local SQLite file, for development and tests.

    sqlite3 is blocking, so every statement runs in a worker thread on its
    own short-lived connection. SQLite serializes the writes.
    """

    def __init__(self, helper_config: HelperConfig, database_url: str):
        super().__init__(helper_config=helper_config, database_url=database_url)
        self.db_path = _path_from_url(database_url)
        self._schema_ready = False
        self._lock = asyncio.Lock()

    def _get_engine_name(self) -> str:
        return "Sqlite"

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._open()
        try:
            conn.execute(SCHEMA_SQL)
            conn.execute(INDEX_SQL)
            conn.commit()
        finally:
            conn.close()

    async def _connect(self) -> None:
        if self._schema_ready:
            return
        async with self._lock:
            if self._schema_ready:
                return
            try:
                await asyncio.to_thread(self._init_db)
            except (sqlite3.Error, OSError) as e:
                raise QueryLogUnavailable("Database not connected", cause=e) from e
            self._schema_ready = True
            self.logging.info("Query log ready in SQLite file %s.", self.db_path)

    async def _run(self, operation: str, statement: Callable[[sqlite3.Connection], Any]) -> Any:
        await self._connect()

        def _in_thread() -> Any:
            conn = self._open()
            try:
                result = statement(conn)
                conn.commit()
                return result
            finally:
                conn.close()

        try:
            return await asyncio.to_thread(_in_thread)
        except sqlite3.Error as e:
            raise PersistenceError(f"Query log {operation} failed: {e}", cause=e) from e

    ##########################################
    ############### OPERATIONS ###############
    ##########################################

    async def append(self, entry: QueryLogEntry) -> int:
        created_at = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        params = (
            entry.question,
            entry.answer,
            entry.confidence,
            entry.verdict,
            entry.quality_score,
            entry.category,
            entry.complexity,
            entry.citation_count,
            entry.routing,
            entry.processing_time_s,
            created_at,
        )
        return await self._run("insert", lambda conn: conn.execute(INSERT_SQL, params).lastrowid)

    async def mark_all_fresh_as_stale(self, reason: str) -> int:
        return await self._run("stale-mark", lambda conn: conn.execute(MARK_STALE_SQL, (reason,)).rowcount)

    async def attach_feedback(self, question: str, feedback: Feedback) -> bool:
        value = Feedback(feedback).value
        updated = await self._run("feedback", lambda conn: conn.execute(ATTACH_FEEDBACK_SQL, (value, question)).rowcount)
        return updated > 0

    async def recent(self, limit: int = RECENT_LIMIT) -> list[QueryLogEntry]:
        rows = await self._run("listing", lambda conn: conn.execute(RECENT_SQL, (limit,)).fetchall())
        return [QueryLogEntry(**dict(row)) for row in rows]

    async def summary_stats(self) -> QueryLogStats:
        row = await self._run("stats", lambda conn: conn.execute(STATS_SQL).fetchone())
        return QueryLogStats(**dict(row))
