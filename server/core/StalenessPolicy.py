from datetime import datetime, timezone

from shared.errors import PersistenceError
from shared.helper.HelperConfig import HelperConfig
from shared.stores.query_log.QueryLogStoreInterface import QueryLogStoreInterface


class StalenessPolicy:
    """Invalidates the query log whenever the knowledge base changes.

    Every successful ingestion marks all fresh log entries as stale. Which past
    answers the new document actually affects cannot be known without
    re-running retrieval, so the whole log is invalidated.
    """

    def __init__(self, helper_config: HelperConfig, query_log_store: QueryLogStoreInterface) -> None:
        self.logging = helper_config.get_logger()
        self._store = query_log_store

    @staticmethod
    def build_reason(title: str, ingested_at: datetime) -> str:
        timestamp = ingested_at.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return f"KB updated: {title} ingested at {timestamp}"

    async def on_ingested(self, title: str, ingested_at: datetime | None = None) -> int:
        """Mark every fresh entry stale after the given document was ingested.

        Persistence failures are logged and swallowed; the ingestion itself has
        already succeeded.

        Args:
            title (str): Title of the ingested document.
            ingested_at (datetime | None): Ingestion time, now when omitted.

        Returns:
            int: Number of entries that became stale.
        """
        reason = self.build_reason(title, ingested_at or datetime.now(timezone.utc))
        try:
            count = await self._store.mark_all_fresh_as_stale(reason)
        except PersistenceError as e:
            self.logging.error("DB stale-mark error: %s", e.message)
            return 0
        self.logging.info("Marked %d query log entries stale after ingesting %r.", count, title)
        return count
