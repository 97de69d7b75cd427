"""State definition for the chat graph."""

from __future__ import annotations

from typing import List, Optional, TypedDict

from infinite_chat.domain.models import ChatMessage, ChatUsage
from infinite_chat.tools.definitions import ToolCall


class ChatState(TypedDict, total=False):
    """State shared across graph nodes."""

    messages: List[ChatMessage]
    pending_tool_calls: Optional[List[ToolCall]]
    final_response: Optional[str]
    usage: Optional[ChatUsage]
    tool_rounds: int
