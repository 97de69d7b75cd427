"""对外 API 服务模块。

提供简化的函数接口供上层 HTTP 路由调用：入参/出参都是普通 dict，
异常记录日志后原样抛出，由上层请求处理器统一转换为 HTTP 响应。
"""

from typing import Any, Dict, List, Optional

from infinite_chat.config.settings import Settings
from infinite_chat.domain.exceptions import ValidationError
from infinite_chat.domain.models import ROLES, ChatMessage
from infinite_chat.flows.runner import run_chat
from infinite_chat.infrastructure.logging.logger import logger


def to_chat_messages(raw_messages: List[Dict[str, Any]]) -> List[ChatMessage]:
    """把 {"role", "content"} 形式的 dict 列表转换为 ChatMessage。"""

    messages: List[ChatMessage] = []
    for idx, item in enumerate(raw_messages):
        role = item.get("role")
        if role not in ROLES:
            raise ValidationError(code="INVALID_ROLE", message=f"message {idx} has invalid role {role!r}")
        content = item.get("content")
        if content is None:
            content = ""
        messages.append(
            ChatMessage(
                role=role,
                content=content,
                tool_call_id=item.get("tool_call_id"),
            )
        )
    return messages


def handle_chat(
    raw_messages: List[Dict[str, Any]],
    conversation_id: str,
    user_id: str,
    model: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """运行一轮对话。

    Args:
        raw_messages: 完整对话历史
        conversation_id: 会话ID
        user_id: 用户ID
        model: Claude 模型名（可选）

    Returns:
        包含会话ID、回复、策略描述、使用统计与工具轮数的字典

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    try:
        messages = to_chat_messages(raw_messages)
        reply = run_chat(messages, conversation_id, user_id, model, settings=settings)
    except Exception as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {
            "conversation_id": conversation_id,
            "user_id": user_id,
            "error": str(e),
            "error_code": getattr(e, "code", None),
        }})
        raise

    usage = None
    if reply.usage is not None:
        usage = {
            "input_tokens": reply.usage.input_tokens,
            "output_tokens": reply.usage.output_tokens,
            "total_tokens": reply.usage.total_tokens,
        }
    return {
        "conversation_id": conversation_id,
        "reply": reply.text,
        "strategy": reply.strategy.to_dict(),
        "usage": usage,
        "tool_rounds": reply.tool_rounds,
    }
