"""LangGraph chat flow (model <-> memory tools loop)."""

from infinite_chat.flows.runner import ChatReply, run_chat

__all__ = ["ChatReply", "run_chat"]
