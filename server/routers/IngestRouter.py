from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.models.requests import IngestRequest

router = APIRouter(prefix="/api", tags=["ingest"])


@router.post("/ingest")
async def ingest_document(request: Request, body: IngestRequest) -> JSONResponse:
    """Hand a document to the ingestion workflow.

    Responds only after every fresh query log entry has been marked stale.

    Args:
        request (Request): FastAPI request (provides app.state.ingest_service).
        body (IngestRequest): JSON body with title, content and optional type and repo.

    Returns:
        JSONResponse: The workflow's response, passed through.
    """
    ingest_service = request.app.state.ingest_service
    result = await ingest_service.ingest(
        title=body.title,
        content=body.content,
        document_type=body.type,
        repo=body.repo,
    )
    return JSONResponse(content=result)
