"""Anthropic Messages API 适配器。

本模块负责：

1. 接收统一的 ChatRequest。
2. 将其转换为 Anthropic Messages API 的请求格式（system 单独成字段、
   工具调用使用 tool_use / tool_result 内容块）。
3. 调用 HTTP 接口并把网络/API 异常包装为 CollaboratorError。
4. 将响应 JSON 解析为统一的 ChatResult / ChatMessage 结构（含工具调用）。

base_url 可以是官方地址，也可以是嵌入了官方地址的代理地址；
代理需要的额外请求头通过 headers 参数传入，原样附加在每个请求上。
"""

from typing import Any, Dict, List, Mapping, Optional

import httpx

from infinite_chat.domain.exceptions import ApiError, NetworkError, RateLimitError
from infinite_chat.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatRequest,
    ChatResult,
    ChatUsage,
)
from infinite_chat.providers.registry import ANTHROPIC_CONFIG, get_model_config
from infinite_chat.tools.definitions import ToolCall, ToolDef


class AnthropicClient:
    """Anthropic 客户端实现。

    - name: Provider 名称（供日志使用）。
    - chat: 对外统一调用入口，返回 ChatResult。
    - count_tokens: 调用官方 token 计数接口。
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        base_url: str = ANTHROPIC_CONFIG.base_url,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 60.0,
        anthropic_version: str = "2023-06-01",
    ):
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.extra_headers: Dict[str, str] = dict(headers or {})
        self._timeout = timeout
        self._version = anthropic_version

    @classmethod
    def from_settings(cls, cfg, base_url: Optional[str] = None, headers: Optional[Mapping[str, str]] = None) -> "AnthropicClient":
        return cls(
            api_key=cfg.anthropic_api_key,
            base_url=base_url or cfg.anthropic_base_url,
            headers=headers,
            timeout=cfg.http_timeout,
            anthropic_version=cfg.anthropic_version,
        )

    def chat(self, req: ChatRequest) -> ChatResult:
        """执行一次非流式对话调用。"""

        payload = self._build_payload(req)
        data = self._post("/messages", payload)
        return self._parse_response(data, req)

    def count_tokens(self, req: ChatRequest) -> int:
        """返回上游计算的输入 token 数。"""

        payload = self._build_payload(req)
        payload.pop("max_tokens", None)
        payload.pop("temperature", None)
        data = self._post("/messages/count_tokens", payload)
        try:
            return int(data["input_tokens"])
        except (KeyError, TypeError, ValueError):
            raise ApiError(code="MALFORMED_RESPONSE", message=f"missing input_tokens in {data!r}")

    def _headers(self) -> Dict[str, str]:
        headers = {
            "x-api-key": self._api_key or "",
            "anthropic-version": self._version,
            "content-type": "application/json",
        }
        headers.update(self.extra_headers)
        return headers

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.post(f"{self.base_url}{path}", json=payload, headers=self._headers())
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Anthropic rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="MALFORMED_RESPONSE", message=f"invalid JSON: {e}")
        if not isinstance(data, dict):
            raise ApiError(code="MALFORMED_RESPONSE", message="response is not a JSON object")
        return data

    def _build_payload(self, req: ChatRequest) -> Dict[str, Any]:
        """将 ChatRequest 转成 Messages API 请求 JSON。"""

        model_cfg = get_model_config(req.model)
        system_parts = [m.text for m in req.messages if m.role == "system" and m.text]
        msgs: List[Dict[str, Any]] = []
        for message in req.messages:
            if message.role == "system":
                continue
            self._append_message(msgs, message)
        payload: Dict[str, Any] = {
            "model": req.model,
            "messages": msgs,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        if req.temperature is not None:
            payload["temperature"] = req.temperature
        if req.tools:
            payload["tools"] = [self._serialize_tool(tool) for tool in req.tools]
            payload["tool_choice"] = {"type": req.tool_choice}
        return payload

    @staticmethod
    def _append_message(msgs: List[Dict[str, Any]], message: ChatMessage) -> None:
        if message.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id or "",
                "content": list(message.content) if isinstance(message.content, list) else message.content,
            }
            # 同一轮的多个工具结果必须放在同一条 user 消息里
            prev = msgs[-1] if msgs else None
            if (
                prev
                and prev["role"] == "user"
                and isinstance(prev["content"], list)
                and prev["content"]
                and all(b.get("type") == "tool_result" for b in prev["content"])
            ):
                prev["content"].append(block)
            else:
                msgs.append({"role": "user", "content": [block]})
            return
        if message.role == "assistant" and message.tool_calls:
            blocks: List[Dict[str, Any]] = []
            if isinstance(message.content, list):
                blocks.extend(message.content)
            elif message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                blocks.append({"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments})
            msgs.append({"role": "assistant", "content": blocks})
            return
        # 列表内容要复制一份：后续 tool_result 会合并进同一条 user 消息
        content = list(message.content) if isinstance(message.content, list) else message.content
        msgs.append({"role": message.role, "content": content})

    @staticmethod
    def _serialize_tool(tool: ToolDef) -> Dict[str, Any]:
        """把内部的 ToolDef 转成 Anthropic 工具描述。"""

        return {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.input_schema(),
        }

    def _parse_response(self, data: Dict[str, Any], req: ChatRequest) -> ChatResult:
        """将原始响应 JSON 解析为统一的 ChatResult。"""

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ApiError(code="MALFORMED_RESPONSE", message="missing content blocks")
        texts: List[str] = []
        tool_calls: List[ToolCall] = []
        for idx, block in enumerate(blocks):
            btype = block.get("type")
            if btype == "text":
                texts.append(block.get("text") or "")
            elif btype == "tool_use":
                args = block.get("input")
                tool_calls.append(
                    ToolCall(
                        id=block.get("id") or f"tool_call_{idx}",
                        name=block.get("name") or "",
                        arguments=args if isinstance(args, dict) else {},
                    )
                )
        message = ChatMessage(
            role="assistant",
            content="".join(texts),
            tool_calls=tool_calls or None,
        )
        usage_raw = data.get("usage") or {}
        usage = ChatUsage(
            input_tokens=usage_raw.get("input_tokens", 0),
            output_tokens=usage_raw.get("output_tokens", 0),
        )
        return ChatResult(
            provider=self.name,
            model=data.get("model") or req.model,
            choices=[ChatChoice(index=0, message=message, finish_reason=data.get("stop_reason"))],
            usage=usage,
            raw=data,
        )
