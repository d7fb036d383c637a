"""FastAPI application entry point for the legal QA gateway."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.errors import GatewayError
from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.workflow.WorkflowClientManager import WorkflowClientManager
from shared.stores.query_log.QueryLogStoreManager import QueryLogStoreManager
from server.core.CatalogService import CatalogService
from server.core.IngestService import IngestService
from server.core.QueryLogService import QueryLogService
from server.core.QueryService import QueryService
from server.core.StalenessPolicy import StalenessPolicy
from server.routers.AskRouter import router as ask_router
from server.routers.DocumentRouter import router as document_router
from server.routers.HealthRouter import router as health_router
from server.routers.IngestRouter import router as ingest_router
from server.routers.QueryLogRouter import router as query_log_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")
public_dir = os.getenv("PUBLIC_DIR", os.path.join(os.getcwd(), "public"))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    workflow_client = WorkflowClientManager(helper_config=app.state.helper_config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.helper_config).get_client()
    query_log_store = QueryLogStoreManager(helper_config=app.state.helper_config).get_store()

    logging.info("Booting all clients...")
    for client in [workflow_client, rag_client]:
        await client.boot()
    await query_log_store.boot()
    logging.info("All clients booted successfully.")

    app.state.workflow_client = workflow_client
    app.state.rag_client = rag_client
    app.state.query_log_store = query_log_store

    staleness_policy = StalenessPolicy(
        helper_config=app.state.helper_config,
        query_log_store=query_log_store,
    )
    app.state.query_service = QueryService(
        helper_config=app.state.helper_config,
        workflow_client=workflow_client,
        query_log_store=query_log_store,
    )
    app.state.ingest_service = IngestService(
        helper_config=app.state.helper_config,
        workflow_client=workflow_client,
        staleness_policy=staleness_policy,
    )
    app.state.query_log_service = QueryLogService(
        helper_config=app.state.helper_config,
        query_log_store=query_log_store,
    )
    app.state.catalog_service = CatalogService(
        helper_config=app.state.helper_config,
        rag_client=rag_client,
    )

    await check_connections([workflow_client, rag_client])

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in [workflow_client, rag_client]:
        await client.close()
    await query_log_store.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="legal_qa_gateway",
    description=(
        "Gateway between the legal QA form and its backends. "
        "Questions and documents are forwarded to the n8n workflows via POST /api/ask and POST /api/ingest, "
        "every answer is kept in a query log that is invalidated on each ingestion, "
        "and GET /api/documents browses the Qdrant knowledge base."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.http_status >= 500:
        logging.error("%s %s failed: %s", request.method, request.url.path, exc.to_log_dict())
    else:
        logging.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logging.warning("%s %s invalid body: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


app.include_router(ask_router)
app.include_router(ingest_router)
app.include_router(query_log_router)
app.include_router(document_router)
app.include_router(health_router)

# mounted last so the API routes take precedence over static files
if os.path.isdir(public_dir):
    app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")


async def check_connections(clients: list[ClientInterface]) -> None:
    """Check connectivity to the workflow and vector backends on startup.

    All failures are non-fatal: the gateway stays up and the affected endpoints
    answer 502 until the backend is back.
    """
    for client in clients:
        name = client.__class__.__name__
        try:
            result: httpx.Response = await client.do_healthcheck()
        except httpx.HTTPError as e:
            logging.warning("Client '%s' is not reachable: %s", name, e)
            continue
        if not result.is_success:
            logging.warning("Client '%s' is not healthy (status %d).", name, result.status_code)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "3000"))
    logging.info(
        "Starting legal_qa_gateway API Server v%s from root dir: %s on port %d...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
        port,
    )
    uvicorn.run(app, host="0.0.0.0", port=port)
