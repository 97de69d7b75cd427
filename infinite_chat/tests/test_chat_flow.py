import json

import pytest

from infinite_chat.domain.exceptions import ApiError
from infinite_chat.domain.models import ChatMessage
from infinite_chat.flows.runner import run_chat
from infinite_chat.tests.fakes import FakeResponse, anthropic_text, anthropic_tool_use


def test_run_chat_plain_reply(http, test_settings):
    http.queue(anthropic_text("Hello!"))
    history = [ChatMessage(role="user", content="hi")]
    reply = run_chat(history, "conv-1", "user-1", settings=test_settings)
    assert reply.text == "Hello!"
    assert reply.tool_rounds == 0
    assert reply.strategy.use_supermemory_proxy is True
    assert reply.usage.input_tokens == 10
    assert [m.role for m in reply.messages] == ["user", "assistant"]
    # 调用方的列表不被修改
    assert len(history) == 1
    payload = http.calls[0]["json"]
    assert {t["name"] for t in payload["tools"]} == {"addMemory", "searchMemories"}
    assert payload["model"] == "claude-sonnet-4-5-20250929"


def test_run_chat_with_memory_tool_round(http, test_settings):
    http.queue(
        anthropic_tool_use("addMemory", {"memory": "User likes green tea"}),
        FakeResponse(payload={"id": "mem_7", "status": "queued"}),
        anthropic_text("Got it, I'll remember that."),
    )
    reply = run_chat([ChatMessage(role="user", content="I like green tea")], "conv-1", "user-1", settings=test_settings)
    assert reply.text == "Got it, I'll remember that."
    assert reply.tool_rounds == 1
    assert reply.usage.input_tokens == 30
    assert [m.role for m in reply.messages] == ["user", "assistant", "tool", "assistant"]
    tool_msg = reply.messages[2]
    assert json.loads(tool_msg.content)["memoryId"] == "mem_7"

    memory_call = http.calls[1]
    assert memory_call["url"] == "https://api.supermemory.ai/v3/memories"
    assert memory_call["json"]["containerTags"] == ["user-1"]

    second_model_call = http.calls[2]["json"]["messages"]
    assert second_model_call[-1]["content"][0]["type"] == "tool_result"
    assert http.calls[2]["headers"]["x-sm-user-id"] == "user-1"


def test_run_chat_memory_failure_does_not_break_loop(http, test_settings):
    http.queue(
        anthropic_tool_use("addMemory", {"memory": "x"}),
        FakeResponse(status_code=503, text="unavailable"),
        anthropic_text("Sorry, I could not save that."),
    )
    reply = run_chat([ChatMessage(role="user", content="remember x")], "conv-1", "user-1", settings=test_settings)
    assert reply.text == "Sorry, I could not save that."
    assert json.loads(reply.messages[2].content) == {"success": False, "error": "unavailable"}


def test_run_chat_stops_after_max_tool_rounds(http, test_settings):
    rounds = test_settings.max_tool_rounds
    for i in range(rounds):
        http.queue(anthropic_tool_use("addMemory", {"memory": f"m{i}"}, call_id=f"t{i}"))
        http.queue(FakeResponse(payload={"id": f"mem_{i}", "status": "queued"}))
    http.queue(anthropic_tool_use("addMemory", {"memory": "one more"}, call_id="last"))
    reply = run_chat([ChatMessage(role="user", content="loop")], "conv-1", "user-1", settings=test_settings)
    assert reply.tool_rounds == rounds
    assert reply.text == "Let me remember that."
    assert http.responses == []


def test_run_chat_without_tools(http, test_settings):
    http.queue(anthropic_text("plain"))
    reply = run_chat([ChatMessage(role="user", content="hi")], "c", "u", settings=test_settings, enable_memory_tools=False)
    assert reply.text == "plain"
    assert "tools" not in http.calls[0]["json"]


def test_run_chat_propagates_model_errors(http, test_settings):
    http.queue(FakeResponse(status_code=500, text="boom"))
    with pytest.raises(ApiError):
        run_chat([ChatMessage(role="user", content="hi")], "c", "u", settings=test_settings)
