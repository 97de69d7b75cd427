import pytest

from infinite_chat.api.service import handle_chat, to_chat_messages
from infinite_chat.config.settings import Settings
from infinite_chat.domain.exceptions import ConfigurationError, ValidationError
from infinite_chat.tests.fakes import anthropic_text


def test_handle_chat(http, test_settings):
    http.queue(anthropic_text("4", usage=(100, 1)))
    out = handle_chat(
        [{"role": "system", "content": "math tutor"}, {"role": "user", "content": "2+2?"}],
        conversation_id="conv-1",
        user_id="user-1",
        settings=test_settings,
    )
    assert out["reply"] == "4"
    assert out["conversation_id"] == "conv-1"
    assert out["strategy"]["useSupermemoryProxy"] is True
    assert out["usage"] == {"input_tokens": 100, "output_tokens": 1, "total_tokens": 101}
    assert http.calls[0]["json"]["system"] == "math tutor"


def test_handle_chat_reraises_configuration_error(http, tmp_path):
    cfg = Settings(supermemory_api_key=None, anthropic_api_key="sk-ant-test-key-0001", log_dir=str(tmp_path))
    with pytest.raises(ConfigurationError):
        handle_chat([{"role": "user", "content": "hi"}], "conv-1", "user-1", settings=cfg)
    assert http.calls == []


def test_to_chat_messages_rejects_unknown_role():
    with pytest.raises(ValidationError):
        to_chat_messages([{"role": "robot", "content": "beep"}])


def test_to_chat_messages_keeps_structured_content():
    blocks = [{"type": "text", "text": "look"}, {"type": "image", "source": {"type": "url", "url": "https://x"}}]
    msgs = to_chat_messages([{"role": "user", "content": blocks}])
    assert msgs[0].content == blocks
    assert msgs[0].text == "look"
