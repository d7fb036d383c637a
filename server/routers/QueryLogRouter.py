from fastapi import APIRouter, Request

from server.models.requests import FeedbackRequest
from server.models.responses import FeedbackResponse

router = APIRouter(prefix="/api", tags=["query-log"])


@router.post("/feedback")
async def submit_feedback(request: Request, body: FeedbackRequest) -> FeedbackResponse:
    """Record a thumbs up/down for the most recent answer to a question.

    A missing question or an unavailable query log is acknowledged without effect.

    Args:
        request (Request): FastAPI request (provides app.state.query_log_service).
        body (FeedbackRequest): JSON body with question text and "up" or "down".

    Returns:
        FeedbackResponse: Always {"ok": true} on success.
    """
    query_log_service = request.app.state.query_log_service
    await query_log_service.submit_feedback(body.question, body.feedback)
    return FeedbackResponse()


@router.get("/memory")
async def get_memory(request: Request) -> dict:
    """Return the latest logged answers and summary statistics.

    Args:
        request (Request): FastAPI request (provides app.state.query_log_service).

    Returns:
        dict: {entries, stats, total}, or {entries: [], total: 0, message} without a database.
    """
    query_log_service = request.app.state.query_log_service
    return await query_log_service.get_memory()
