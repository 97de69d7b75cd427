"""Provider 与模型配置。

Claude 模型名直接透传给上游；这里只集中维护每个模型的默认输出上限，
以及 Supermemory 代理 URL 的拼接规则：

    https://api.supermemory.ai/v3/https://api.anthropic.com/v1

即代理前缀后面直接拼接真实的上游 base URL。"""

from dataclasses import dataclass
from typing import Dict


SUPERMEMORY_PROXY_BASE = "https://api.supermemory.ai/v3"


@dataclass
class ModelConfig:
    """单个模型的配置。"""

    name: str
    max_tokens: int


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]


ANTHROPIC_CONFIG = ProviderConfig(
    name="anthropic",
    base_url="https://api.anthropic.com/v1",
    models={
        "claude-sonnet-4-5-20250929": ModelConfig(name="claude-sonnet-4-5-20250929", max_tokens=64_000),
        "claude-sonnet-4-20250514": ModelConfig(name="claude-sonnet-4-20250514", max_tokens=64_000),
        "claude-opus-4-1-20250805": ModelConfig(name="claude-opus-4-1-20250805", max_tokens=32_000),
        "claude-3-7-sonnet-20250219": ModelConfig(name="claude-3-7-sonnet-20250219", max_tokens=64_000),
        "claude-3-5-sonnet-20241022": ModelConfig(name="claude-3-5-sonnet-20241022", max_tokens=8192),
        "claude-3-5-haiku-20241022": ModelConfig(name="claude-3-5-haiku-20241022", max_tokens=8192),
    },
)

DEFAULT_MAX_TOKENS = 4096


def get_model_config(name: str) -> ModelConfig:
    """按模型名查找配置；未登记的模型返回保守的默认值。"""

    cfg = ANTHROPIC_CONFIG.models.get(name)
    if cfg is not None:
        return cfg
    for key, known in ANTHROPIC_CONFIG.models.items():
        if name.startswith(key):
            return known
    return ModelConfig(name=name, max_tokens=DEFAULT_MAX_TOKENS)


def proxy_base_url(proxy_base: str = SUPERMEMORY_PROXY_BASE, upstream_base: str = ANTHROPIC_CONFIG.base_url) -> str:
    """把上游 base URL 作为后缀拼到代理前缀上。"""

    return f"{proxy_base.rstrip('/')}/{upstream_base.rstrip('/')}"
