"""Pydantic models for the document catalog built from the vector store."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentChunkPayload(BaseModel):
    """Payload the ingestion workflow stores on every chunk in the vector index.

    Written by an external service, so every field is optional and scalars are
    coerced to text instead of rejected. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    document_type: str | None = None
    jurisdictions: list[str] = []
    topics: list[str] = []
    source_url: str | None = None
    repo: str | None = None
    chunk_index: int | None = None
    total_chunks: int | None = None

    @field_validator("title", "document_type", "source_url", "repo", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("jurisdictions", "topics", mode="before")
    @classmethod
    def _as_text_list(cls, value: Any) -> list[str]:
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value]
        if isinstance(value, str) and value:
            return [value]
        return []

    @field_validator("chunk_index", "total_chunks", mode="before")
    @classmethod
    def _as_optional_int(cls, value: Any) -> int | None:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class LogicalDocument(BaseModel):
    """All chunks sharing a (repo, title) key, i.e. one ingested document."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    repo: str
    document_type: str = "unknown"
    jurisdictions: list[str] = []
    topics: list[str] = []
    chunk_count: int = Field(default=0, alias="chunks")

    @property
    def key(self) -> tuple[str, str]:
        return (self.repo, self.title)


class RepoSummary(BaseModel):
    """Per-repository totals over the logical documents of one catalog snapshot."""

    name: str
    doc_count: int = 0
    total_chunks: int = 0


class Catalog(BaseModel):
    """Grouped view of one scan of the collection.

    total_chunks counts every scanned point. truncated is set when the scan
    stopped at the page ceiling, in which case the figures are lower bounds.
    """

    repos: list[RepoSummary]
    documents: list[LogicalDocument]
    total_chunks: int
    pages_fetched: int = 0
    truncated: bool = False
