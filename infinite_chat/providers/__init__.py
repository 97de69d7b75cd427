"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护模型配置与代理 URL 规则 (registry)。
- Anthropic Messages API 实现 (anthropic_client)。
- 经由 Supermemory 代理的模型句柄构造 (configurator)。
"""

from infinite_chat.providers.anthropic_client import AnthropicClient
from infinite_chat.providers.base import ProviderClient
from infinite_chat.providers.configurator import ProviderSetup, ProxyModel, setup_model_provider

__all__ = [
    "AnthropicClient",
    "ProviderClient",
    "ProviderSetup",
    "ProxyModel",
    "setup_model_provider",
]
