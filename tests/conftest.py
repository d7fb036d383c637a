"""
Pytest configuration and shared fixtures.
"""

import logging
import os
import tempfile

import pytest

# importing server.api_server configures logging into $ROOT_DIR/logs
os.environ.setdefault("ROOT_DIR", tempfile.mkdtemp(prefix="legal_qa_gateway_"))

from shared.helper.HelperConfig import HelperConfig  # noqa: E402
from shared.logging.logging_setup import ColorLogger  # noqa: E402
from shared.stores.query_log.sqlite.QueryLogStoreSqlite import QueryLogStoreSqlite  # noqa: E402

QUERY_URL = "http://n8n.local/webhook/legal-query"
INGEST_URL = "http://n8n.local/webhook/legal-ingest"
QDRANT_URL = "http://qdrant.local:6333"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: HTTP surface tests against the FastAPI app")


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("legal_qa_gateway.tests")))


@pytest.fixture
def workflow_env(monkeypatch):
    """Minimal n8n workflow configuration."""
    monkeypatch.setenv("WORKFLOW_N8N_QUERY_URL", QUERY_URL)
    monkeypatch.setenv("WORKFLOW_N8N_INGEST_URL", INGEST_URL)
    for key in ("WORKFLOW_N8N_API_KEY", "WORKFLOW_N8N_API_KEY_HOSTS", "WORKFLOW_QUERY_TIMEOUT", "WORKFLOW_INGEST_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def qdrant_env(monkeypatch):
    """Minimal Qdrant configuration."""
    monkeypatch.setenv("RAG_QDRANT_BASE_URL", QDRANT_URL)
    for key in ("RAG_QDRANT_API_KEY", "RAG_QDRANT_API_KEY_HOSTS", "RAG_QDRANT_COLLECTION"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sqlite_store(tmp_path, helper_config) -> QueryLogStoreSqlite:
    return QueryLogStoreSqlite(helper_config=helper_config, database_url=f"sqlite:///{tmp_path / 'query_log.db'}")
