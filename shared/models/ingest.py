"""Pydantic models describing a document handed to the ingestion workflow."""

from pydantic import BaseModel


class IngestDocument(BaseModel):
    """A validated document submitted through the form."""

    title: str
    content: str
    document_type: str = "policy"
    repo: str = "general"

    @property
    def source_url(self) -> str:
        """Origin marker stored on every chunk; the catalog derives the repo from it."""
        return f"form://{self.repo}/{self.title}"
