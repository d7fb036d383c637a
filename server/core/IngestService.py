"""Ingest service: hands form submissions to the ingestion workflow."""

from typing import Any

from server.core.StalenessPolicy import StalenessPolicy
from shared.clients.workflow.WorkflowClientInterface import WorkflowClientInterface
from shared.errors import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.ingest import IngestDocument


class IngestService:
    """Handles ingestion: validate → ingest via the workflow → invalidate the query log."""

    def __init__(
        self,
        helper_config: HelperConfig,
        workflow_client: WorkflowClientInterface,
        staleness_policy: StalenessPolicy,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._workflow = workflow_client
        self._staleness = staleness_policy

    async def ingest(
        self,
        title: str | None,
        content: str | None,
        document_type: str | None = None,
        repo: str | None = None,
    ) -> Any:
        """Ingest one document and mark the query log stale.

        The log is invalidated before this returns, so the caller only
        acknowledges once no fresh entry predates the new document.

        Args:
            title (str | None): Document title.
            content (str | None): Full document text.
            document_type (str | None): Classification, "policy" when omitted.
            repo (str | None): Target repository, "general" when omitted.

        Returns:
            Any: The workflow's response, passed through unmodified.

        Raises:
            ValidationError: If title or content is missing or blank.
            UpstreamError: If the workflow call fails.
        """
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            raise ValidationError("Title and content required")

        document = IngestDocument(
            title=title,
            content=content,
            document_type=(document_type or "").strip() or "policy",
            repo=(repo or "").strip() or "general",
        )
        self.logging.info(
            "IngestService.ingest: title=%r repo=%r type=%r chars=%d",
            document.title, document.repo, document.document_type, len(document.content),
        )
        result = await self._workflow.do_ingest(document)

        await self._staleness.on_ingested(document.title)
        return result
