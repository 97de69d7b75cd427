"""High-level entry point for one chat turn through the Supermemory proxy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from infinite_chat.config.settings import Settings, load_settings
from infinite_chat.domain.models import ChatMessage, ChatUsage, StrategyDescriptor
from infinite_chat.flows.graph import build_graph
from infinite_chat.flows.state import ChatState
from infinite_chat.providers.configurator import setup_model_provider
from infinite_chat.tools.executor import ToolExecutor
from infinite_chat.tools.memory_tools import create_memory_tools

# langgraph counts every node visit; two per tool round plus the final model call
_STEPS_PER_ROUND = 2


@dataclass
class ChatReply:
    text: str
    messages: List[ChatMessage]
    strategy: StrategyDescriptor
    usage: Optional[ChatUsage]
    tool_rounds: int


def run_chat(
    messages: Sequence[ChatMessage],
    conversation_id: str,
    user_id: str,
    model_name: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    enable_memory_tools: bool = True,
) -> ChatReply:
    """Run one chat turn with the full history and return the final reply.

    Args:
        messages: full conversation history, forwarded untouched
        conversation_id: scopes proxy-side conversation state
        user_id: scopes proxy-side and memory-tool user data
        model_name: Claude model, defaults to ``settings.default_model``
        settings: optional settings, re-read from the environment otherwise
        enable_memory_tools: expose addMemory/searchMemories to the model
    """

    cfg = settings if settings is not None else load_settings()
    setup = setup_model_provider(
        messages,
        conversation_id,
        user_id,
        model_name or cfg.default_model,
        settings=cfg,
    )
    if enable_memory_tools:
        memory_tools = create_memory_tools(cfg.supermemory_api_key, user_id, settings=cfg)
        tool_defs = memory_tools.tool_defs()
        executor = ToolExecutor(memory_tools.tool_funcs())
    else:
        tool_defs = []
        executor = ToolExecutor({})

    graph = build_graph(
        setup.model,
        executor,
        tool_defs,
        max_tool_rounds=cfg.max_tool_rounds,
        max_tokens=cfg.max_output_tokens,
    )
    state: ChatState = {
        "messages": list(setup.processed_messages),
        "pending_tool_calls": None,
        "final_response": None,
        "usage": None,
        "tool_rounds": 0,
    }
    result = graph.invoke(
        state,
        config={"recursion_limit": _STEPS_PER_ROUND * (cfg.max_tool_rounds + 1) + 1},
    )
    return ChatReply(
        text=result.get("final_response") or "",
        messages=result["messages"],
        strategy=setup.strategy,
        usage=result.get("usage"),
        tool_rounds=result.get("tool_rounds", 0),
    )
