"""Catalog service: groups the chunks stored in the vector index into logical documents.

The vector store only knows chunks. A logical document is every chunk sharing
a (repo, title) key; repositories are folded on top of that. Grouping is a
pure function of the scanned point set.
"""

from typing import Any

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.errors import CatalogUnavailable, UpstreamError
from shared.helper.HelperConfig import HelperConfig
from shared.models.catalog import Catalog, DocumentChunkPayload, LogicalDocument, RepoSummary

FORM_MARKER = "form://"
DRIVE_MARKER = "gdrive://"
DEFAULT_TITLE = "Untitled"


def derive_repo(payload: DocumentChunkPayload) -> str:
    """Decide which repository a chunk belongs to.

    Precedence: form submissions carry the repo as first path segment of their
    source_url, Drive imports all land in "google-drive", then an explicit repo
    field, and "ungrouped" for everything else. Never returns None.

    Args:
        payload (DocumentChunkPayload): The point payload.

    Returns:
        str: The repository name.
    """
    source_url = payload.source_url or ""
    if source_url.startswith(FORM_MARKER):
        first_segment = source_url[len(FORM_MARKER):].split("/", 1)[0]
        return first_segment or "general"
    if source_url.startswith(DRIVE_MARKER):
        return "google-drive"
    if payload.repo:
        return payload.repo
    return "ungrouped"


def group_points(points: list[Any]) -> tuple[list[LogicalDocument], list[RepoSummary]]:
    """Group scanned points into logical documents and repository summaries.

    The first point seen for a (repo, title) key seeds the descriptive fields;
    later points only add to chunk_count. A point or payload that is not a
    JSON object counts as an empty payload. Repositories are sorted by
    document count, descending, keeping first-seen order on ties.

    Args:
        points (list[Any]): Raw points as returned by the scroll endpoint.

    Returns:
        tuple[list[LogicalDocument], list[RepoSummary]]: Documents in first-seen order, and sorted repos.
    """
    documents: dict[tuple[str, str], LogicalDocument] = {}
    for point in points:
        raw = point.get("payload") if isinstance(point, dict) else None
        payload = DocumentChunkPayload.model_validate(raw if isinstance(raw, dict) else {})
        title = payload.title or DEFAULT_TITLE
        repo = derive_repo(payload)
        document = documents.get((repo, title))
        if document is None:
            document = LogicalDocument(
                title=title,
                repo=repo,
                document_type=payload.document_type or "unknown",
                jurisdictions=payload.jurisdictions,
                topics=payload.topics,
            )
            documents[document.key] = document
        document.chunk_count += 1

    repos: dict[str, RepoSummary] = {}
    for document in documents.values():
        summary = repos.setdefault(document.repo, RepoSummary(name=document.repo))
        summary.doc_count += 1
        summary.total_chunks += document.chunk_count

    # sorted() is stable, so ties keep first-seen order
    sorted_repos = sorted(repos.values(), key=lambda r: r.doc_count, reverse=True)
    return list(documents.values()), sorted_repos


class CatalogService:
    """Builds the document catalog from a full scroll of the collection."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._page_size = int(helper_config.get_number_val("CATALOG_PAGE_SIZE", default=100))
        self._max_pages = int(helper_config.get_number_val("CATALOG_MAX_PAGES", default=20))

    ##########################################
    ################ CORE ####################
    ##########################################

    async def list_catalog(self) -> Catalog:
        """Scan the collection and return the grouped catalog.

        Returns:
            Catalog: Repositories, documents and totals for this snapshot.

        Raises:
            CatalogUnavailable: If any page fetch fails. No partial catalog is returned.
        """
        try:
            scroll_result = await self._rag_client.do_scroll_all(
                page_size=self._page_size,
                max_pages=self._max_pages,
                with_payload=True,
                with_vector=False,
            )
        except UpstreamError as e:
            self.logging.error("Documents error: %s", e.message)
            raise CatalogUnavailable(e.message, cause=e) from e

        documents, repos = group_points(scroll_result.result)
        self.logging.info(
            "Catalog built: %d chunks, %d documents, %d repos over %d page(s)%s",
            len(scroll_result.result),
            len(documents),
            len(repos),
            scroll_result.pages_fetched,
            " (truncated)" if scroll_result.truncated else "",
        )
        return Catalog(
            repos=repos,
            documents=documents,
            total_chunks=len(scroll_result.result),
            pages_fetched=scroll_result.pages_fetched,
            truncated=scroll_result.truncated,
        )
