from pydantic import BaseModel


class AskRequest(BaseModel):
    question: str | None = None


class IngestRequest(BaseModel):
    title: str | None = None
    type: str | None = None
    repo: str | None = None
    content: str | None = None


class FeedbackRequest(BaseModel):
    question: str | None = None
    feedback: str | None = None
