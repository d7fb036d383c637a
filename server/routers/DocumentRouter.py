from fastapi import APIRouter, Request

from server.models.responses import DocumentsResponse

router = APIRouter(prefix="/api", tags=["documents"])


@router.get("/documents")
async def list_documents(request: Request) -> DocumentsResponse:
    """Browse the knowledge base as repositories and logical documents.

    Args:
        request (Request): FastAPI request (provides app.state.catalog_service).

    Returns:
        DocumentsResponse: Grouped catalog of the vector store.
    """
    catalog_service = request.app.state.catalog_service
    catalog = await catalog_service.list_catalog()
    return DocumentsResponse.from_catalog(catalog)
