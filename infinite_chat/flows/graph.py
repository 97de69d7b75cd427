"""LangGraph construction and node implementations for one chat turn."""

from __future__ import annotations

from typing import List, Optional

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from infinite_chat.domain.models import ChatMessage, ChatUsage
from infinite_chat.flows.state import ChatState
from infinite_chat.infrastructure.logging.logger import logger
from infinite_chat.providers.configurator import ProxyModel
from infinite_chat.tools.definitions import ToolDef
from infinite_chat.tools.executor import ToolExecutor


def _add_usage(total: Optional[ChatUsage], usage: Optional[ChatUsage]) -> Optional[ChatUsage]:
    if usage is None:
        return total
    if total is None:
        return ChatUsage(input_tokens=usage.input_tokens, output_tokens=usage.output_tokens)
    return ChatUsage(
        input_tokens=total.input_tokens + usage.input_tokens,
        output_tokens=total.output_tokens + usage.output_tokens,
    )


def model_node(
    state: ChatState,
    model: ProxyModel,
    tool_defs: List[ToolDef],
    max_tool_rounds: int,
    max_tokens: Optional[int] = None,
) -> ChatState:
    messages = state["messages"]
    logger.info("model_node.start", extra={"extra": {"messages": len(messages), "model": model.model}})
    result = model.chat(messages, tools=tool_defs or None, max_tokens=max_tokens)
    reply = result.choices[0].message
    state["messages"] = list(messages) + [reply]
    state["usage"] = _add_usage(state.get("usage"), result.usage)
    rounds = state.get("tool_rounds", 0)
    if reply.tool_calls and rounds < max_tool_rounds:
        state["pending_tool_calls"] = list(reply.tool_calls)
        logger.info(
            "model_node.tool_decision",
            extra={"extra": {"tools": [c.name for c in reply.tool_calls], "round": rounds + 1}},
        )
    else:
        if reply.tool_calls:
            logger.warning("model_node.tool_rounds_exhausted", extra={"extra": {"max_tool_rounds": max_tool_rounds}})
        state["pending_tool_calls"] = None
        state["final_response"] = reply.text
        logger.info("model_node.final", extra={"extra": {"finish_reason": result.choices[0].finish_reason}})
    return state


def tool_node(state: ChatState, executor: ToolExecutor) -> ChatState:
    pending = state.get("pending_tool_calls") or []
    results: List[ChatMessage] = []
    for call in pending:
        logger.info("tool_node.execute", extra={"extra": {"tool": call.name, "call_id": call.id}})
        res = executor.execute(call)
        results.append(ChatMessage(role="tool", content=res.content, tool_call_id=res.call_id))
    state["messages"] = list(state["messages"]) + results
    state["pending_tool_calls"] = None
    state["tool_rounds"] = state.get("tool_rounds", 0) + 1
    return state


def chat_router(state: ChatState) -> str:
    if state.get("pending_tool_calls"):
        return "tools"
    return "end"


def build_graph(
    model: ProxyModel,
    executor: ToolExecutor,
    tool_defs: List[ToolDef],
    max_tool_rounds: int,
    max_tokens: Optional[int] = None,
) -> CompiledStateGraph:
    graph = StateGraph(ChatState)
    graph.add_node("model", lambda s: model_node(s, model, tool_defs, max_tool_rounds, max_tokens))
    graph.add_node("tools", lambda s: tool_node(s, executor))
    graph.set_entry_point("model")
    graph.add_conditional_edges("model", chat_router, {"tools": "tools", "end": END})
    graph.add_edge("tools", "model")
    return graph.compile()
