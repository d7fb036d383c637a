import asyncio
import time
from typing import Any, Awaitable, Callable

import asyncpg

from shared.errors import PersistenceError, QueryLogUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import Feedback, QueryLogEntry, QueryLogStats
from shared.stores.query_log.QueryLogStoreInterface import RECENT_LIMIT, QueryLogStoreInterface

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS query_log (
    id SERIAL PRIMARY KEY,
    question TEXT NOT NULL,
    answer TEXT,
    confidence TEXT,
    verdict TEXT,
    quality_score REAL DEFAULT 0,
    category TEXT,
    complexity TEXT,
    citation_count INT DEFAULT 0,
    routing TEXT,
    processing_time_s REAL,
    feedback TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    stale BOOLEAN DEFAULT FALSE,
    stale_reason TEXT
)
"""

INSERT_SQL = """
INSERT INTO query_log (question, answer, confidence, verdict, quality_score, category,
                       complexity, citation_count, routing, processing_time_s)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
RETURNING id
"""

MARK_STALE_SQL = "UPDATE query_log SET stale = TRUE, stale_reason = $1 WHERE stale = FALSE"

# UPDATE has no ORDER BY/LIMIT in PostgreSQL, so the target row is picked in a subquery
ATTACH_FEEDBACK_SQL = """
UPDATE query_log SET feedback = $1
WHERE id = (
    SELECT id FROM query_log
    WHERE question = $2 AND feedback IS NULL
    ORDER BY created_at DESC, id DESC
    LIMIT 1
)
"""

RECENT_SQL = """
SELECT id, question, answer, confidence, verdict, quality_score, category, complexity,
       citation_count, routing, processing_time_s, feedback, stale, stale_reason, created_at
FROM query_log
ORDER BY created_at DESC, id DESC
LIMIT $1
"""

STATS_SQL = """
SELECT COUNT(*) AS total,
       COUNT(*) FILTER (WHERE stale = TRUE) AS stale_count,
       COUNT(*) FILTER (WHERE feedback = 'up') AS thumbs_up,
       COUNT(*) FILTER (WHERE feedback = 'down') AS thumbs_down,
       AVG(quality_score) AS avg_quality,
       AVG(processing_time_s) AS avg_time
FROM query_log
"""

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def _affected_rows(status: str) -> int:
    """Parse the row count out of a command tag such as "UPDATE 3"."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class QueryLogStorePostgres(QueryLogStoreInterface):
    """Query log on PostgreSQL through a lazily created asyncpg pool.

    The pool is the single long-lived handle. It is created on first use;
    a failed attempt is not memoized, but for DATABASE_RETRY_BACKOFF seconds
    afterwards calls fail fast with QueryLogUnavailable instead of retrying.
    Callers queued behind a failing attempt get the same fast failure. Broken
    connections inside the pool are replaced by asyncpg on the next acquire.
    """

    def __init__(self, helper_config: HelperConfig, database_url: str):
        super().__init__(helper_config=helper_config, database_url=database_url)
        self._ssl = helper_config.get_string_val("DATABASE_SSL", default="prefer")
        self._pool_size = int(helper_config.get_number_val("DATABASE_POOL_SIZE", default=5))
        self._command_timeout = helper_config.get_number_val("DATABASE_COMMAND_TIMEOUT", default=30)
        self._connect_timeout = helper_config.get_number_val("DATABASE_CONNECT_TIMEOUT", default=5)
        self._retry_backoff = helper_config.get_number_val("DATABASE_RETRY_BACKOFF", default=10)
        self._failed_at: float | None = None
        self._pool: asyncpg.Pool | None = None
        self._lock = asyncio.Lock()

    def _get_engine_name(self) -> str:
        return "Postgres"

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def _connect(self) -> None:
        await self._acquire_pool()

    def _check_backoff(self) -> None:
        if self._failed_at is None:
            return
        if time.monotonic() - self._failed_at < self._retry_backoff:
            raise QueryLogUnavailable("Database not connected")

    async def _acquire_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        self._check_backoff()
        async with self._lock:
            if self._pool is not None:
                return self._pool
            self._check_backoff()
            pool: asyncpg.Pool | None = None
            try:
                pool = await asyncpg.create_pool(
                    dsn=self._database_url,
                    ssl=self._ssl,
                    min_size=1,
                    max_size=self._pool_size,
                    timeout=self._connect_timeout,
                    command_timeout=self._command_timeout,
                )
                async with pool.acquire() as conn:
                    await conn.execute(SCHEMA_SQL)
            except _DB_ERRORS as e:
                self._failed_at = time.monotonic()
                if pool is not None:
                    await pool.close()
                self.logging.warning(
                    "Query log could not connect to PostgreSQL, next attempt in %ss: %s", self._retry_backoff, e
                )
                raise QueryLogUnavailable("Database not connected", cause=e) from e
            self._pool = pool
            self._failed_at = None
            self.logging.info("Query log connected to PostgreSQL, schema ensured.")
            return pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self.logging.info("PostgreSQL query log pool closed.")

    async def _with_connection(self, operation: str, callback: Callable[[asyncpg.Connection], Awaitable[Any]]) -> Any:
        pool = await self._acquire_pool()
        try:
            async with pool.acquire() as conn:
                return await callback(conn)
        except _DB_ERRORS as e:
            raise PersistenceError(f"Query log {operation} failed: {e}", cause=e) from e

    ##########################################
    ############### OPERATIONS ###############
    ##########################################

    async def append(self, entry: QueryLogEntry) -> int:
        return await self._with_connection(
            "insert",
            lambda conn: conn.fetchval(
                INSERT_SQL,
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
            ),
        )

    async def mark_all_fresh_as_stale(self, reason: str) -> int:
        status = await self._with_connection("stale-mark", lambda conn: conn.execute(MARK_STALE_SQL, reason))
        return _affected_rows(status)

    async def attach_feedback(self, question: str, feedback: Feedback) -> bool:
        status = await self._with_connection(
            "feedback", lambda conn: conn.execute(ATTACH_FEEDBACK_SQL, Feedback(feedback).value, question)
        )
        return _affected_rows(status) > 0

    async def recent(self, limit: int = RECENT_LIMIT) -> list[QueryLogEntry]:
        rows = await self._with_connection("listing", lambda conn: conn.fetch(RECENT_SQL, limit))
        return [QueryLogEntry(**dict(row)) for row in rows]

    async def summary_stats(self) -> QueryLogStats:
        row = await self._with_connection("stats", lambda conn: conn.fetchrow(STATS_SQL))
        return QueryLogStats(**dict(row))
