from shared.errors import QueryLogUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import Feedback, QueryLogEntry, QueryLogStats
from shared.stores.query_log.QueryLogStoreInterface import RECENT_LIMIT, QueryLogStoreInterface


class QueryLogStoreDisabled(QueryLogStoreInterface):
    """Stand-in used when DATABASE_URL is not set.

    Writes are silently dropped so asking and ingesting keep working; reads
    report the store as unavailable.
    """

    def __init__(self, helper_config: HelperConfig, database_url: str = ""):
        super().__init__(helper_config=helper_config, database_url=database_url)

    def _get_engine_name(self) -> str:
        return "Disabled"

    def is_available(self) -> bool:
        return False

    async def _connect(self) -> None:
        return None

    async def append(self, entry: QueryLogEntry) -> int:
        return 0

    async def mark_all_fresh_as_stale(self, reason: str) -> int:
        return 0

    async def attach_feedback(self, question: str, feedback: Feedback) -> bool:
        return False

    async def recent(self, limit: int = RECENT_LIMIT) -> list[QueryLogEntry]:
        raise QueryLogUnavailable("Database not connected")

    async def summary_stats(self) -> QueryLogStats:
        raise QueryLogUnavailable("Database not connected")
