"""Query service: forwards questions to the answering workflow and logs each answer."""

from typing import Any

from shared.clients.workflow.WorkflowClientInterface import WorkflowClientInterface
from shared.errors import PersistenceError, UpstreamProtocolError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.query_log import QueryLogEntry
from shared.stores.query_log.QueryLogStoreInterface import QueryLogStoreInterface

MIN_QUESTION_LENGTH = 5


class QueryService:
    """Handles questions: validate → ask the workflow → log the answer."""

    def __init__(
        self,
        helper_config: HelperConfig,
        workflow_client: WorkflowClientInterface,
        query_log_store: QueryLogStoreInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._workflow = workflow_client
        self._store = query_log_store

    ##########################################
    ############### CORE #####################
    ##########################################

    async def ask(self, question: str | None) -> dict[str, Any]:
        """Answer a question through the workflow.

        The answer is returned even when it cannot be logged.

        Args:
            question (str | None): The raw question from the form.

        Returns:
            dict[str, Any]: The workflow's answer fields, unmodified.

        Raises:
            ValidationError: If the trimmed question is shorter than MIN_QUESTION_LENGTH.
            UpstreamError: If the workflow call fails or answers with something other than an object.
        """
        question = (question or "").strip()
        if len(question) < MIN_QUESTION_LENGTH:
            raise ValidationError("Question too short")

        self.logging.info("QueryService.ask: question=%r", question[:80])
        result = await self._workflow.do_ask(question)
        if not isinstance(result, dict):
            raise UpstreamProtocolError("Invalid response from upstream")

        await self._log_answer(question, result)
        return result

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _log_answer(self, question: str, result: dict[str, Any]) -> None:
        try:
            entry_id = await self._store.append(QueryLogEntry.from_answer(question, result))
        except PersistenceError as e:
            self.logging.error("DB log error: %s", e.message)
            return
        self.logging.debug("Logged answer as query_log id=%s", entry_id)
