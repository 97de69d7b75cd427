"""
Rough token estimates for a message history.

Only used for logging/telemetry: nothing branches on these numbers. The
exact count comes from the upstream `count_tokens` endpoint when needed.
"""

import json
from typing import Any, Iterable

from infinite_chat.domain.models import ChatMessage

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD = 4  # role marker etc.


def estimate_tokens(text: str) -> int:
    """~4 chars per token for English text."""
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)


def _estimate_block(block: Any) -> int:
    if isinstance(block, str):
        return estimate_tokens(block)
    if not isinstance(block, dict):
        return 0
    btype = block.get("type", "")
    if btype == "text":
        return estimate_tokens(block.get("text", ""))
    if btype in ("thinking", "redacted_thinking"):
        return estimate_tokens(block.get("thinking", "") or block.get("data", ""))
    if btype == "tool_use":
        args = block.get("input") or {}
        return estimate_tokens(json.dumps(args, ensure_ascii=False)) + 10
    if btype == "tool_result":
        inner = block.get("content")
        if isinstance(inner, list):
            return sum(_estimate_block(b) for b in inner)
        return estimate_tokens(str(inner or ""))
    return 0


def estimate_message_tokens(msg: ChatMessage) -> int:
    total = MESSAGE_OVERHEAD
    if isinstance(msg.content, str):
        total += estimate_tokens(msg.content)
    else:
        total += sum(_estimate_block(b) for b in msg.content)
    for call in msg.tool_calls or []:
        total += estimate_tokens(call.name) + estimate_tokens(json.dumps(call.arguments, ensure_ascii=False)) + 10
    return total


def estimate_total_tokens(messages: Iterable[ChatMessage]) -> int:
    return sum(estimate_message_tokens(m) for m in messages)
