"""Infinite Chat 顶层包。

聊天服务与 Supermemory 的集成层：把完整对话经由 Supermemory
代理转发给 Claude（上下文压缩由代理完成），并为 Agent 提供
用户记忆工具。
"""

from infinite_chat.providers.configurator import setup_model_provider
from infinite_chat.tools.memory_tools import create_memory_tools

__all__ = ["create_memory_tools", "setup_model_provider"]
