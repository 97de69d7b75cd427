"""In-memory stand-ins for ``httpx.Client`` and canned upstream payloads."""

import json as jsonlib


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else jsonlib.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class HttpRecorder:
    """Records every POST and answers from a queue of responses."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.clients_opened = 0
        self.error = None

    def queue(self, *responses):
        self.responses.extend(responses)

    def client_class(self):
        recorder = self

        class Client:
            def __init__(self, *a, **kw):
                recorder.clients_opened += 1

            def __enter__(self):
                return self

            def __exit__(self, *a):
                return False

            def post(self, url, json=None, headers=None, **_):
                recorder.calls.append({"url": url, "json": json, "headers": dict(headers or {})})
                if recorder.error is not None:
                    raise recorder.error
                if not recorder.responses:
                    raise AssertionError(f"unexpected POST {url}")
                return recorder.responses.pop(0)

        return Client


def anthropic_text(text, usage=(10, 5), model="claude-sonnet-4-5-20250929"):
    return FakeResponse(payload={
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": usage[0], "output_tokens": usage[1]},
    })


def anthropic_tool_use(name, arguments, call_id="toolu_1"):
    return FakeResponse(payload={
        "id": "msg_2",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-5-20250929",
        "content": [
            {"type": "text", "text": "Let me remember that."},
            {"type": "tool_use", "id": call_id, "name": name, "input": arguments},
        ],
        "stop_reason": "tool_use",
        "usage": {"input_tokens": 20, "output_tokens": 8},
    })
