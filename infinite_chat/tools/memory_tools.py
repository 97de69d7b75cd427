"""Supermemory 用户记忆工具。

让 Agent 在对话中保存 / 检索用户的长期信息（偏好、目标、事实）。
所有记忆都以 user_id 作为 containerTag 存储；用户画像由服务端根据
这些记忆自动维护。

工具边界不向调用方抛异常：任何失败都会转成 success=False 的结果，
Agent 循环可以继续执行。
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from infinite_chat.config.settings import Settings, load_settings
from infinite_chat.infrastructure.logging.logger import logger
from infinite_chat.infrastructure.memory.supermemory_client import SupermemoryClient
from infinite_chat.tools.definitions import ToolDef, ToolParam
from infinite_chat.tools.executor import ToolFunc

MEMORY_SOURCE = "agent"
DEFAULT_SEARCH_LIMIT = 5
MAX_SEARCH_LIMIT = 20


def _error_text(exc: Exception) -> str:
    return str(exc) or "Unknown error"


@dataclass
class AddMemoryResult:
    success: bool
    memory_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "memoryId": self.memory_id, "status": self.status}
        return {"success": False, "error": self.error}


@dataclass
class SearchMemoryResult:
    success: bool
    results: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "results": self.results}
        return {"success": False, "error": self.error}


def _simplify_hit(hit: Dict[str, Any]) -> Dict[str, Any]:
    chunks = hit.get("chunks") or []
    content = "\n".join(str(c.get("content", "")) for c in chunks if isinstance(c, dict))
    return {
        "documentId": hit.get("documentId") or hit.get("id"),
        "content": content or hit.get("memory") or hit.get("content") or "",
        "score": hit.get("score"),
    }


class MemoryTools:
    """绑定到单个用户的记忆工具集。"""

    def __init__(self, client: SupermemoryClient, user_id: str):
        self._client = client
        self.user_id = user_id

    def add_memory(self, memory: str) -> AddMemoryResult:
        """保存一条用户记忆，失败时返回 success=False 而不是抛异常。"""

        ctx = {"user_id": self.user_id}
        logger.info("Adding memory", extra={"extra": {**ctx, "memory": memory}})
        try:
            record = self._client.add_memory(
                content=memory,
                container_tags=[self.user_id],
                metadata={
                    "source": MEMORY_SOURCE,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
        except Exception as exc:
            logger.error("Add memory failed", exc_info=True, extra={"extra": {**ctx, "error": _error_text(exc)}})
            return AddMemoryResult(success=False, error=_error_text(exc))
        logger.info("Memory added", extra={"extra": {**ctx, "memory_id": record.id, "status": record.status}})
        return AddMemoryResult(success=True, memory_id=record.id, status=record.status)

    def search_memories(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> SearchMemoryResult:
        """按语义检索该用户的记忆，失败时返回 success=False。"""

        ctx = {"user_id": self.user_id}
        try:
            hits = self._client.search_memories(query=query, container_tags=[self.user_id], limit=limit)
        except Exception as exc:
            logger.error("Search memories failed", exc_info=True, extra={"extra": {**ctx, "error": _error_text(exc)}})
            return SearchMemoryResult(success=False, error=_error_text(exc))
        results = [_simplify_hit(h) for h in hits if isinstance(h, dict)]
        logger.info("Memories found", extra={"extra": {**ctx, "count": len(results)}})
        return SearchMemoryResult(success=True, results=results)

    def tool_defs(self) -> List[ToolDef]:
        return [
            ToolDef(
                name="addMemory",
                description=(
                    "Store important information about the user for future conversations. "
                    "Memories automatically build the user profile. Use when user shares "
                    "preferences, goals, or facts that should be remembered long-term."
                ),
                params={
                    "memory": ToolParam(
                        name="memory",
                        description='Information to remember (e.g., "User prefers on-chain metrics over price action")',
                        required=True,
                        schema={"type": "string"},
                    )
                },
            ),
            ToolDef(
                name="searchMemories",
                description="Search what is already known about the user from earlier conversations.",
                params={
                    "query": ToolParam(
                        name="query",
                        description="What to look for",
                        required=True,
                        schema={"type": "string"},
                    ),
                    "limit": ToolParam(
                        name="limit",
                        description=f"Maximum number of results, default {DEFAULT_SEARCH_LIMIT}",
                        required=False,
                        schema={"type": "integer", "minimum": 1, "maximum": MAX_SEARCH_LIMIT},
                    ),
                },
            ),
        ]

    def tool_funcs(self) -> Dict[str, ToolFunc]:
        def _add(args: Dict[str, Any]) -> str:
            memory = args.get("memory")
            if not isinstance(memory, str) or not memory.strip():
                result = AddMemoryResult(success=False, error="memory must be a non-empty string")
            else:
                result = self.add_memory(memory)
            return json.dumps(result.to_dict(), ensure_ascii=False)

        def _search(args: Dict[str, Any]) -> str:
            query = str(args.get("query") or "").strip()
            if not query:
                return json.dumps({"success": False, "error": "empty query"})
            try:
                limit = int(args.get("limit") or DEFAULT_SEARCH_LIMIT)
            except (TypeError, ValueError):
                limit = DEFAULT_SEARCH_LIMIT
            limit = max(1, min(limit, MAX_SEARCH_LIMIT))
            return json.dumps(self.search_memories(query, limit).to_dict(), ensure_ascii=False)

        return {"addMemory": _add, "searchMemories": _search}


def create_memory_tools(api_key: str, user_id: str, settings: Optional[Settings] = None) -> MemoryTools:
    """创建绑定到 user_id 的记忆工具。"""

    cfg = settings if settings is not None else load_settings()
    client = SupermemoryClient(api_key=api_key, base_url=cfg.supermemory_base_url, timeout=cfg.http_timeout)
    return MemoryTools(client, user_id)
