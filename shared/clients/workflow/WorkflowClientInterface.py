from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.ingest import IngestDocument


class WorkflowClientInterface(ClientInterface):
    """Client for the automation workflows that answer questions and ingest documents."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.query_timeout = helper_config.get_number_val("WORKFLOW_QUERY_TIMEOUT", default=300)
        self.ingest_timeout = helper_config.get_number_val("WORKFLOW_INGEST_TIMEOUT", default=180)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "workflow"
        """
        return "workflow"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_query(self) -> str:
        """
        Returns the endpoint (absolute URL or path) of the question-answering workflow.
        """
        pass

    @abstractmethod
    def _get_endpoint_ingest(self) -> str:
        """
        Returns the endpoint (absolute URL or path) of the ingestion workflow.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_query_payload(self, question: str) -> dict:
        """
        Builds the request body for a question.

        Args:
            question (str): The trimmed question text.

        Returns:
            dict: The payload for the query workflow.
        """
        pass

    @abstractmethod
    def get_ingest_payload(self, document: IngestDocument) -> dict:
        """
        Builds the request body for an ingestion.

        Args:
            document (IngestDocument): The validated document.

        Returns:
            dict: The payload for the ingestion workflow.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_ask(self, question: str) -> Any:
        """Send a question to the answering workflow.

        Args:
            question (str): The trimmed question text.

        Returns:
            Any: The normalized workflow answer, normally a dict of answer fields.

        Raises:
            UpstreamError: If the workflow call fails in any way.
        """
        return await self.do_json_request(
            endpoint=self._get_endpoint_query(),
            payload=self.get_query_payload(question),
            timeout=self.query_timeout,
        )

    async def do_ingest(self, document: IngestDocument) -> Any:
        """Hand a document to the ingestion workflow.

        Args:
            document (IngestDocument): The validated document.

        Returns:
            Any: The normalized workflow response, passed through to the caller.

        Raises:
            UpstreamError: If the workflow call fails in any way.
        """
        return await self.do_json_request(
            endpoint=self._get_endpoint_ingest(),
            payload=self.get_ingest_payload(document),
            timeout=self.ingest_timeout,
        )
