from pydantic import BaseModel

from shared.models.catalog import Catalog, LogicalDocument, RepoSummary


class DocumentsResponse(BaseModel):
    repos: list[RepoSummary]
    documents: list[LogicalDocument]
    total_documents: int
    total_chunks: int
    truncated: bool = False

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "DocumentsResponse":
        return cls(
            repos=catalog.repos,
            documents=catalog.documents,
            total_documents=len(catalog.documents),
            total_chunks=catalog.total_chunks,
            truncated=catalog.truncated,
        )


class FeedbackResponse(BaseModel):
    ok: bool = True


class HealthResponse(BaseModel):
    status: str = "ok"
