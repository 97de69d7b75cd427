from typing import Callable, Dict, Any

from .definitions import ToolCall, ToolResult


ToolFunc = Callable[[Dict[str, Any]], str]


class ToolExecutor:
    """按名称分发工具调用。

    不缓存结果：addMemory 这类工具有副作用，同参数重复调用也要真正执行。
    """

    def __init__(self, tools: Dict[str, ToolFunc]):
        self._tools = dict(tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def execute(self, call: ToolCall) -> ToolResult:
        func = self._tools.get(call.name)
        if not func:
            return ToolResult(call_id=call.id, content="Tool not registered")
        return ToolResult(call_id=call.id, content=func(call.arguments))
