"""Supermemory 代理模型配置。

所有上下文管理（压缩、摘要、检索、用户画像）都由 Supermemory 代理完成，
这里不做任何截断或窗口裁剪：完整对话原样转发。

请求链路：

    ProxyModel.chat -> AnthropicClient -> https://api.supermemory.ai/v3/https://api.anthropic.com/v1/messages

代理通过三个请求头区分数据归属：
- x-supermemory-api-key: 代理访问凭据
- x-sm-conversation-id: 会话维度
- x-sm-user-id: 用户维度（用于读取该用户的记忆）
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

from infinite_chat.config.settings import Settings, load_settings
from infinite_chat.domain.exceptions import ConfigurationError
from infinite_chat.domain.models import ChatMessage, ChatRequest, ChatResult, StrategyDescriptor
from infinite_chat.infrastructure.logging.logger import logger
from infinite_chat.providers.anthropic_client import AnthropicClient
from infinite_chat.providers.base import ProviderClient
from infinite_chat.providers.registry import proxy_base_url
from infinite_chat.providers.token_count import estimate_total_tokens
from infinite_chat.tools.definitions import ToolDef

HEADER_PROXY_KEY = "x-supermemory-api-key"
HEADER_CONVERSATION_ID = "x-sm-conversation-id"
HEADER_USER_ID = "x-sm-user-id"

STRATEGY_REASON = "Supermemory Memory Router handles all context management"


@dataclass
class ProxyModel:
    """绑定到某个模型名的调用句柄。"""

    client: ProviderClient
    model: str

    def chat(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[ToolDef]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> ChatResult:
        req = ChatRequest(
            model=self.model,
            messages=list(messages),
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tools,
        )
        return self.client.chat(req)


class ProviderSetup(NamedTuple):
    model: ProxyModel
    processed_messages: Sequence[ChatMessage]
    strategy: StrategyDescriptor


def setup_model_provider(
    messages: Sequence[ChatMessage],
    conversation_id: str,
    user_id: str,
    model_name: str,
    settings: Optional[Settings] = None,
) -> ProviderSetup:
    """构造经由 Supermemory 代理的模型句柄。

    Args:
        messages: 完整对话历史（不截断，可以为空）
        conversation_id: 会话 ID，作为 x-sm-conversation-id 发送（不校验格式）
        user_id: 用户 ID，作为 x-sm-user-id 发送（不校验格式）
        model_name: Claude 模型名
        settings: 可选配置；默认每次调用重新读取进程配置

    Returns:
        ProviderSetup(model, processed_messages, strategy)，其中
        processed_messages 就是传入的 messages 本身。

    Raises:
        ConfigurationError: SUPERMEMORY_API_KEY 或 ANTHROPIC_API_KEY 未配置。
    """

    cfg = settings if settings is not None else load_settings()
    if not cfg.supermemory_api_key:
        raise ConfigurationError(message="SUPERMEMORY_API_KEY is required but not configured")
    if not cfg.anthropic_api_key:
        raise ConfigurationError(message="ANTHROPIC_API_KEY is required but not configured")

    estimated_tokens = estimate_total_tokens(messages)

    logger.info(
        "Conversation metrics",
        extra={"extra": {
            "total_messages": len(messages),
            "estimated_tokens": estimated_tokens,
            "conversation_id": conversation_id,
            "user_id": user_id,
        }},
    )

    client = AnthropicClient.from_settings(
        cfg,
        base_url=proxy_base_url(cfg.supermemory_base_url, cfg.anthropic_base_url),
        headers={
            HEADER_PROXY_KEY: cfg.supermemory_api_key,
            HEADER_CONVERSATION_ID: conversation_id,
            HEADER_USER_ID: user_id,
        },
    )
    model = ProxyModel(client=client, model=model_name)

    logger.info(
        "Sending full conversation to Supermemory proxy",
        extra={"extra": {
            "message_count": len(messages),
            "estimated_tokens": estimated_tokens,
            "model": model_name,
            "base_url": client.base_url,
        }},
    )

    return ProviderSetup(
        model=model,
        processed_messages=messages,
        strategy=StrategyDescriptor(
            use_extended_thinking=True,
            use_supermemory_proxy=True,
            estimated_tokens=estimated_tokens,
            reason=STRATEGY_REASON,
        ),
    )
