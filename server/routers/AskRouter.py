from fastapi import APIRouter, Request

from server.models.requests import AskRequest

router = APIRouter(prefix="/api", tags=["ask"])


@router.post("/ask")
async def ask_question(request: Request, body: AskRequest) -> dict:
    """Forward a question to the answering workflow and log the answer.

    Args:
        request (Request): FastAPI request (provides app.state.query_service).
        body (AskRequest): JSON body with the question.

    Returns:
        dict: The workflow's answer, unmodified.
    """
    query_service = request.app.state.query_service
    return await query_service.ask(body.question)
