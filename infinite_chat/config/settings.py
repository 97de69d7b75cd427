"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
优先级：显式参数 > 环境变量 > .env > config.yaml。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("INFINITE_CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """进程级配置。

    两个凭据是必需的：代理访问凭据（SUPERMEMORY_API_KEY）与上游模型凭据
    （ANTHROPIC_API_KEY）。缺失时由调用方抛出 ConfigurationError，
    这里只负责读取，不做强制校验。
    """

    # ---- 凭据 ----
    supermemory_api_key: Optional[str] = Field(default=None, description="Supermemory API 密钥")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API 密钥")

    # ---- 端点 ----
    supermemory_base_url: str = Field(
        default="https://api.supermemory.ai/v3",
        description="Supermemory API 基础URL（同时作为代理前缀）",
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        description="上游 Anthropic API 基础URL，会被嵌入代理 URL",
    )
    anthropic_version: str = Field(default="2023-06-01", description="anthropic-version 请求头")

    # ---- 模型 ----
    default_model: str = Field(default="claude-sonnet-4-5-20250929", description="默认 Claude 模型")
    max_output_tokens: int = Field(default=4096, ge=1, description="单次回复最大输出 token 数")
    max_tool_rounds: int = Field(
        default=5,
        ge=1,
        le=20,
        description="单轮对话内工具调用最大轮数（硬上限 20）",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("supermemory_api_key", "anthropic_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("supermemory_base_url", "anthropic_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


def load_settings(**overrides: Any) -> Settings:
    """重新读取一次配置（每次调用都会重新解析环境变量）。"""

    return Settings(**overrides)


settings = load_settings()
