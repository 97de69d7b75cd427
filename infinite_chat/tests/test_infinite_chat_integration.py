"""Live check that the Supermemory proxy accepts conversations above Claude's
200k-token window and still answers coherently.

Skipped unless SUPERMEMORY_API_KEY and ANTHROPIC_API_KEY are set.
"""

import os

import pytest

from infinite_chat.config.settings import load_settings
from infinite_chat.domain.models import ChatMessage, ChatRequest
from infinite_chat.providers.anthropic_client import AnthropicClient
from infinite_chat.providers.configurator import setup_model_provider

MODEL = "claude-3-5-sonnet-20241022"
CLAUDE_LIMIT = 200_000

pytestmark = pytest.mark.skipif(
    not (os.getenv("SUPERMEMORY_API_KEY") and os.getenv("ANTHROPIC_API_KEY")),
    reason="requires SUPERMEMORY_API_KEY and ANTHROPIC_API_KEY",
)


def _huge_conversation():
    # ~5k tokens per message, 170 messages
    large_text = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 1000
    messages = []
    for i in range(85):
        messages.append(ChatMessage(role="user", content=f"Message {i}: {large_text}"))
        messages.append(ChatMessage(role="assistant", content=f"Response {i}: I understand. {large_text}"))
    messages.append(ChatMessage(role="user", content="Based on all the context above, what is the sum of 2+2?"))
    return messages


@pytest.mark.timeout(60)
def test_handles_conversation_over_claude_limit():
    cfg = load_settings()
    messages = _huge_conversation()

    counter = AnthropicClient.from_settings(cfg)
    input_tokens = counter.count_tokens(ChatRequest(model=MODEL, messages=messages))
    assert input_tokens > CLAUDE_LIMIT

    setup = setup_model_provider(messages, "test-infinite-chat", "test-user", MODEL, settings=cfg)
    assert len(setup.processed_messages) == len(messages)

    result = setup.model.chat(setup.processed_messages, max_tokens=100)
    text = result.choices[0].message.text
    assert text
    assert "4" in text.lower()
