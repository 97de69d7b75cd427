"""统一的对话与结果数据模型。

- ChatMessage: 一条对话消息（system/user/assistant/tool）。
- ChatRequest: 发给上游模型的完整请求。
- ChatResult: 解析后的统一响应结果。
- StrategyDescriptor: 一次路由决策的只读摘要，仅用于日志/遥测。

Provider 适配器（如 AnthropicClient）只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Any, Dict, List, Union, TYPE_CHECKING

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from infinite_chat.tools.definitions import ToolCall, ToolDef


Role = Literal["system", "user", "assistant", "tool"]
ROLES = ("system", "user", "assistant", "tool")

# 纯文本，或 Anthropic 风格的内容块列表（text / tool_use / tool_result ...）
Content = Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，构造后不可变。

    - role: 消息角色。
    - content: 文本或结构化内容块。
    - meta: 附加元数据，不发给上游，仅用于日志。
    - tool_calls: role 为 "assistant" 且模型触发工具调用时的调用列表。
    - tool_call_id: role 为 "tool" 时，关联的工具调用 ID。
    """

    role: Role
    content: Content
    meta: Dict[str, Any] = field(default_factory=dict)
    tool_calls: Optional[List["ToolCall"]] = None
    tool_call_id: Optional[str] = None

    @property
    def text(self) -> str:
        """拼接后的纯文本内容（结构化内容只取 text 块）。"""

        if isinstance(self.content, str):
            return self.content
        parts = []
        for block in self.content:
            if isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)


@dataclass
class ChatRequest:
    """一次完整的聊天请求。"""

    model: str  # 上游模型名，如 "claude-sonnet-4-5-20250929"
    messages: List[ChatMessage]
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    tools: Optional[List["ToolDef"]] = None
    tool_choice: Literal["auto", "any", "none"] = "auto"


@dataclass
class ChatUsage:
    """上游返回的 token 统计信息。"""

    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class ChatChoice:
    """单个候选回答。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次对话调用的最终结果。

    - provider: Provider 名（如 "anthropic"）。
    - model: 实际使用的模型名。
    - choices: 候选回答（Anthropic 只会返回一条）。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None


@dataclass(frozen=True)
class StrategyDescriptor:
    """路由策略摘要。字段只读，不参与任何后续分支逻辑。"""

    use_extended_thinking: bool
    use_supermemory_proxy: bool
    estimated_tokens: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "useExtendedThinking": self.use_extended_thinking,
            "useSupermemoryProxy": self.use_supermemory_proxy,
            "estimatedTokens": self.estimated_tokens,
            "reason": self.reason,
        }
