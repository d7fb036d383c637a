from abc import ABC, abstractmethod

from shared.errors import QueryLogUnavailable
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import Feedback, QueryLogEntry, QueryLogStats

RECENT_LIMIT = 100


class QueryLogStoreInterface(ABC):
    """Persisted log of question/answer transactions.

    Rows are only ever inserted and updated, never deleted. The stale flag
    moves from false to true and never back.
    """

    def __init__(self, helper_config: HelperConfig, database_url: str):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._database_url = database_url

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        """
        Returns the name of the storage engine in lowercase. E.g. "postgres"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    def is_available(self) -> bool:
        """Whether a backend is configured at all. Reachability is only known after a call."""
        return True

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Try to connect and migrate the schema up front.

        A failure here is not fatal: the store stays uninitialised and the next
        operation tries again.
        """
        try:
            await self._connect()
        except QueryLogUnavailable as e:
            self.logging.warning(
                "Query log backend '%s' not reachable at startup, logging degraded: %s",
                self.get_engine_name(), e.message,
            )

    @abstractmethod
    async def _connect(self) -> None:
        """
        Establishes the backend handle and creates the schema if absent. Success is memoized.

        Raises:
            QueryLogUnavailable: If the backend cannot be reached.
        """
        pass

    async def close(self) -> None:
        """Release the backend handle."""
        pass

    ##########################################
    ############### OPERATIONS ###############
    ##########################################

    @abstractmethod
    async def append(self, entry: QueryLogEntry) -> int:
        """Insert a new row. Never overwrites.

        Args:
            entry (QueryLogEntry): The entry to persist; id and created_at are ignored.

        Returns:
            int: The id assigned to the new row.

        Raises:
            PersistenceError: On connectivity problems or constraint violations.
        """
        pass

    @abstractmethod
    async def mark_all_fresh_as_stale(self, reason: str) -> int:
        """Flag every fresh row as stale with the given reason in one statement.

        Rows that are already stale keep their original reason.

        Args:
            reason (str): Human-readable explanation stored on each row.

        Returns:
            int: Number of rows that were fresh and are now stale.

        Raises:
            PersistenceError: If the update fails.
        """
        pass

    @abstractmethod
    async def attach_feedback(self, question: str, feedback: Feedback) -> bool:
        """Set feedback on the most recent feedback-less row with exactly this question.

        Args:
            question (str): The question text to match.
            feedback (Feedback): The verdict to store.

        Returns:
            bool: True if a row was updated, False if no matching row exists.

        Raises:
            PersistenceError: If the update fails.
        """
        pass

    @abstractmethod
    async def recent(self, limit: int = RECENT_LIMIT) -> list[QueryLogEntry]:
        """Return the latest rows, newest first.

        Raises:
            QueryLogUnavailable: If no backend is configured or reachable.
            PersistenceError: If the query fails.
        """
        pass

    @abstractmethod
    async def summary_stats(self) -> QueryLogStats:
        """Return counts and averages over all rows.

        Raises:
            QueryLogUnavailable: If no backend is configured or reachable.
            PersistenceError: If the query fails.
        """
        pass
