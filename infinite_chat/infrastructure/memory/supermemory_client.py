"""Supermemory 记忆服务 HTTP 客户端。

只封装两个接口：
- POST {base}/memories  写入一条记忆
- POST {base}/search    按 containerTags 检索记忆

记忆的存储、切分与排序全部由服务端完成。
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from infinite_chat.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError


@dataclass
class MemoryRecord:
    """写入成功后服务端返回的记录。"""

    id: str
    status: str


class SupermemoryClient:
    name = "supermemory"

    def __init__(self, api_key: str, base_url: str = "https://api.supermemory.ai/v3", timeout: float = 30.0):
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message="SUPERMEMORY_API_KEY not set")
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    def add_memory(
        self,
        content: str,
        container_tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> MemoryRecord:
        payload: Dict[str, Any] = {"content": content}
        if container_tags:
            payload["containerTags"] = list(container_tags)
        if metadata:
            payload["metadata"] = dict(metadata)
        data = self._post("/memories", payload)
        memory_id = data.get("id")
        if not memory_id:
            raise ApiError(code="MALFORMED_RESPONSE", message="memory id missing in response")
        return MemoryRecord(id=str(memory_id), status=str(data.get("status") or "unknown"))

    def search_memories(
        self,
        query: str,
        container_tags: Optional[List[str]] = None,
        limit: int = 5,
    ) -> List[Dict[str, Any]]:
        payload: Dict[str, Any] = {"q": query, "limit": limit}
        if container_tags:
            payload["containerTags"] = list(container_tags)
        data = self._post("/search", payload)
        results = data.get("results")
        if not isinstance(results, list):
            raise ApiError(code="MALFORMED_RESPONSE", message="results missing in search response")
        return results

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self.base_url}{path}",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Supermemory rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text or f"HTTP {resp.status_code}", http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="MALFORMED_RESPONSE", message=f"invalid JSON: {e}")
        if not isinstance(data, dict):
            raise ApiError(code="MALFORMED_RESPONSE", message="response is not a JSON object")
        return data
