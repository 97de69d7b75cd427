import pytest

from infinite_chat.domain.exceptions import ApiError, RateLimitError, ValidationError
from infinite_chat.infrastructure.memory.supermemory_client import SupermemoryClient
from infinite_chat.tests.fakes import FakeResponse


def test_add_memory_payload(http):
    http.queue(FakeResponse(payload={"id": "mem_123", "status": "queued"}))
    client = SupermemoryClient(api_key="sm-test-key-0001")
    record = client.add_memory("likes tea", container_tags=["user-1"], metadata={"source": "agent"})
    assert record.id == "mem_123"
    assert record.status == "queued"
    call = http.calls[0]
    assert call["url"] == "https://api.supermemory.ai/v3/memories"
    assert call["headers"]["Authorization"] == "Bearer sm-test-key-0001"
    assert call["json"] == {"content": "likes tea", "containerTags": ["user-1"], "metadata": {"source": "agent"}}


def test_add_memory_missing_id(http):
    http.queue(FakeResponse(payload={"status": "queued"}))
    with pytest.raises(ApiError):
        SupermemoryClient(api_key="sm-test-key-0001").add_memory("x")


def test_search_memories(http):
    http.queue(FakeResponse(payload={"results": [{"documentId": "d1", "score": 0.9, "chunks": [{"content": "likes tea"}]}], "total": 1}))
    hits = SupermemoryClient(api_key="sm-test-key-0001").search_memories("drinks", container_tags=["user-1"], limit=3)
    assert hits[0]["documentId"] == "d1"
    assert http.calls[0]["url"].endswith("/search")
    assert http.calls[0]["json"] == {"q": "drinks", "limit": 3, "containerTags": ["user-1"]}


def test_rate_limit(http):
    http.queue(FakeResponse(status_code=429, text="too many"))
    with pytest.raises(RateLimitError):
        SupermemoryClient(api_key="sm-test-key-0001").add_memory("x")


def test_requires_api_key():
    with pytest.raises(ValidationError):
        SupermemoryClient(api_key="")
