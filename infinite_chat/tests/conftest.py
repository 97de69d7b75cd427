import pytest

from infinite_chat.config.settings import Settings
from infinite_chat.infrastructure.logging.logger import setup_logger
from infinite_chat.tests.fakes import HttpRecorder


@pytest.fixture(scope="session", autouse=True)
def log_dir(tmp_path_factory):
    path = tmp_path_factory.mktemp("logs")
    setup_logger(log_dir=path, redact_content=False)
    return path


@pytest.fixture
def http(monkeypatch):
    recorder = HttpRecorder()
    monkeypatch.setattr("httpx.Client", recorder.client_class())
    return recorder


@pytest.fixture
def test_settings(tmp_path):
    # 所有字段显式给出，且不读 .env，避免开发机环境泄漏进来
    return Settings(
        _env_file=None,
        supermemory_api_key="sm-test-key-0001",
        anthropic_api_key="sk-ant-test-key-0001",
        supermemory_base_url="https://api.supermemory.ai/v3",
        anthropic_base_url="https://api.anthropic.com/v1",
        anthropic_version="2023-06-01",
        default_model="claude-sonnet-4-5-20250929",
        max_output_tokens=4096,
        max_tool_rounds=3,
        http_timeout=60.0,
        log_dir=str(tmp_path / "logs"),
        log_redact_content=False,
    )
