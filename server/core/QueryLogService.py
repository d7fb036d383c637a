"""Query log service: feedback and the memory view over the logged answers."""

from typing import Any

from shared.errors import QueryLogUnavailable, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import Feedback
from shared.stores.query_log.QueryLogStoreInterface import RECENT_LIMIT, QueryLogStoreInterface


class QueryLogService:
    def __init__(self, helper_config: HelperConfig, query_log_store: QueryLogStoreInterface) -> None:
        self.logging = helper_config.get_logger()
        self._store = query_log_store

    async def submit_feedback(self, question: str | None, feedback: str | None) -> bool:
        """Attach a thumbs up/down to the latest matching answer.

        Returns:
            bool: Whether a log entry was updated.

        Raises:
            ValidationError: If feedback is not "up" or "down".
            PersistenceError: If the backend fails while reachable.
        """
        try:
            verdict = Feedback(feedback)
        except ValueError:
            raise ValidationError("Feedback must be 'up' or 'down'")
        if not question:
            return False
        try:
            updated = await self._store.attach_feedback(question, verdict)
        except QueryLogUnavailable as e:
            self.logging.warning("Feedback not stored: %s", e.message)
            return False
        if not updated:
            self.logging.debug("No feedback-less entry for question %r", question[:80])
        return updated

    async def get_memory(self, limit: int = RECENT_LIMIT) -> dict[str, Any]:
        """Latest entries plus statistics, or a degraded body when the store is unavailable.

        Raises:
            PersistenceError: If the backend fails while reachable.
        """
        try:
            entries = await self._store.recent(limit)
            stats = await self._store.summary_stats()
        except QueryLogUnavailable as e:
            return {"entries": [], "total": 0, "message": e.message}
        return {
            "entries": [entry.model_dump(mode="json") for entry in entries],
            "stats": stats.model_dump(),
            "total": stats.total,
        }
