"""Unit tests for paginated Qdrant scrolling."""

import json

import httpx
import pytest

from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.errors import UpstreamError

SCROLL_URL = "http://qdrant.local:6333/collections/legal_docs/points/scroll"


def _point(point_id: int, title: str = "Policy A") -> dict:
    return {"id": point_id, "payload": {"title": title, "source_url": "form://acme/Policy A"}}


async def _booted_client(helper_config, handler) -> RAGClientQdrant:
    client = RAGClientQdrant(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))
    return client


@pytest.mark.unit
@pytest.mark.asyncio
async def test_follows_offsets_until_exhausted(helper_config, qdrant_env):
    pages = {
        None: {"result": {"points": [_point(1), _point(2)], "next_page_offset": 3}, "status": "ok", "time": 0.01},
        3: {"result": {"points": [_point(3)], "next_page_offset": None}, "status": "ok", "time": 0.01},
    }
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        bodies.append(body)
        return httpx.Response(200, json=pages[body.get("offset")])

    client = await _booted_client(helper_config, handler)
    result = await client.do_scroll_all(page_size=2, max_pages=20)

    assert [p["id"] for p in result.result] == [1, 2, 3]
    assert result.pages_fetched == 2
    assert result.truncated is False
    assert result.next_page_offset is None
    assert bodies[0] == {"limit": 2, "with_payload": True, "with_vector": False}
    assert bodies[1] == {"limit": 2, "with_payload": True, "with_vector": False, "offset": 3}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accepts_unwrapped_response_shape(helper_config, qdrant_env):
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == SCROLL_URL
        return httpx.Response(200, json={"points": [_point(1)], "next_page_offset": None})

    client = await _booted_client(helper_config, handler)
    result = await client.do_scroll_all(page_size=100, max_pages=20)

    assert len(result.result) == 1
    assert result.pages_fetched == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_points_are_passed_through(helper_config, qdrant_env):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"points": ["garbage", {"id": 2, "payload": 7}], "next_page_offset": None})

    client = await _booted_client(helper_config, handler)
    result = await client.do_scroll_all(page_size=100, max_pages=20)

    assert result.result == ["garbage", {"id": 2, "payload": 7}]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stops_on_empty_page_even_with_cursor(helper_config, qdrant_env):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json={"result": {"points": [], "next_page_offset": "abc"}})

    client = await _booted_client(helper_config, handler)
    result = await client.do_scroll_all(page_size=100, max_pages=20)

    assert calls == 1
    assert result.result == []
    assert result.truncated is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_page_ceiling_marks_result_truncated(helper_config, qdrant_env):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json={"result": {"points": [_point(calls)], "next_page_offset": calls + 1}})

    client = await _booted_client(helper_config, handler)
    result = await client.do_scroll_all(page_size=1, max_pages=3)

    assert calls == 3
    assert result.pages_fetched == 3
    assert result.truncated is True
    assert result.next_page_offset == 4


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_page_discards_collected_points(helper_config, qdrant_env):
    def handler(request: httpx.Request) -> httpx.Response:
        if "offset" in json.loads(request.content):
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json={"result": {"points": [_point(1)], "next_page_offset": 2}})

    client = await _booted_client(helper_config, handler)
    with pytest.raises(UpstreamError):
        await client.do_scroll_all(page_size=1, max_pages=20)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_api_key_header_and_custom_collection(helper_config, qdrant_env, monkeypatch):
    monkeypatch.setenv("RAG_QDRANT_API_KEY", "qdrant-key")
    monkeypatch.setenv("RAG_QDRANT_COLLECTION", "contracts")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": {"points": [], "next_page_offset": None}})

    client = await _booted_client(helper_config, handler)
    await client.do_scroll(limit=10)

    assert seen[0].url.path == "/collections/contracts/points/scroll"
    assert seen[0].headers["api-key"] == "qdrant-key"


@pytest.mark.unit
def test_manager_builds_qdrant_client_by_default(helper_config, qdrant_env, monkeypatch):
    monkeypatch.delenv("RAG_ENGINE", raising=False)

    assert isinstance(RAGClientManager(helper_config=helper_config).get_client(), RAGClientQdrant)


@pytest.mark.unit
def test_manager_rejects_unknown_engine(helper_config, qdrant_env, monkeypatch):
    monkeypatch.setenv("RAG_ENGINE", "pinecone")

    with pytest.raises(ValueError, match="Unsupported RAG engine"):
        RAGClientManager(helper_config=helper_config)
