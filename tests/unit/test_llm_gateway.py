from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest
from pydantic import BaseModel

from config import LlmRoute
from llm_gateway import LlmGatewayError, call, chat, complete, speak, strip_code_fences, transcribe


class _Resp:
    def __init__(self, status_code: int = 200, body: Any = None, content: bytes = b"") -> None:
        self.status_code = status_code
        self._body = body
        self.content = content

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    @property
    def text(self) -> str:
        return json.dumps(self._body)


class FakeClient:
    def __init__(self, responses: List[_Resp]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _Resp:
        self.calls.append({"url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class Verdict(BaseModel):
    score: int
    note: str


def _route(**overrides: Any) -> LlmRoute:
    data = {
        "name": "test",
        "base_url": "http://llm.local",
        "endpoint": "/v1/chat",
        "model": "m",
        "timeout_s": 5,
        "max_retries": 1,
    }
    data.update(overrides)
    return LlmRoute(**data)


def _completion(content: str) -> _Resp:
    return _Resp(body={"choices": [{"message": {"content": content}}]})


def test_chat_validates_against_schema():
    client = FakeClient([_completion('{"score": 4, "note": "fine"}')])
    result = chat([{"role": "user", "content": "rate"}], Verdict, cfg=_route(), client=client)
    assert result == Verdict(score=4, note="fine")
    sent = client.calls[0]
    assert sent["url"] == "http://llm.local/v1/chat"
    assert sent["json"]["messages"][0]["role"] == "system"
    assert "schema" in sent["json"]["messages"][0]["content"]


def test_chat_retries_after_invalid_output():
    client = FakeClient([_completion("not json at all"), _completion('```json\n{"score": 2, "note": "ok"}\n```')])
    result = chat([{"role": "user", "content": "rate"}], Verdict, cfg=_route(), client=client)
    assert result.score == 2
    assert len(client.calls) == 2
    retry_messages = client.calls[1]["json"]["messages"]
    assert retry_messages[-1]["role"] == "system"


def test_chat_gives_up_after_retries():
    client = FakeClient([_completion("nope"), _completion("still nope")])
    with pytest.raises(LlmGatewayError):
        chat([{"role": "user", "content": "rate"}], Verdict, cfg=_route(), client=client)


def test_chat_extracts_embedded_object():
    client = FakeClient([_completion('Sure! {"score": 9, "note": "great"} Hope that helps.')])
    assert call("rate", Verdict, cfg=_route(max_retries=0), client=client).score == 9


def test_error_status_becomes_gateway_error():
    client = FakeClient([_Resp(status_code=500, body={"error": "boom"})])
    with pytest.raises(LlmGatewayError):
        complete([{"role": "user", "content": "hi"}], cfg=_route(), client=client)


def test_transport_failure_becomes_gateway_error():
    client = FakeClient([httpx.ConnectError("refused")])
    with pytest.raises(LlmGatewayError):
        complete([{"role": "user", "content": "hi"}], cfg=_route(), client=client)


def test_complete_returns_stripped_text_and_rejects_empty():
    client = FakeClient([_completion("  What is your name?  "), _completion("   ")])
    route = _route(enforce_json=False, temperature=0.7)
    assert complete([{"role": "user", "content": "hi"}], cfg=route, client=client) == "What is your name?"
    assert client.calls[0]["json"]["temperature"] == 0.7
    with pytest.raises(LlmGatewayError):
        complete([{"role": "user", "content": "hi"}], cfg=route, client=client)


def test_transcribe_uploads_audio_and_reads_text():
    client = FakeClient([_Resp(body={"text": " namaste everyone \n"})])
    text = transcribe(b"RIFF", filename="clip.webm", cfg=_route(model="whisper-1"), prompt="hint", client=client)
    assert text == "namaste everyone"
    sent = client.calls[0]
    assert sent["data"] == {"model": "whisper-1", "prompt": "hint"}
    assert sent["files"]["file"][0] == "clip.webm"


def test_transcribe_requires_text_field():
    client = FakeClient([_Resp(body={"segments": []})])
    with pytest.raises(LlmGatewayError):
        transcribe(b"RIFF", filename="clip.webm", cfg=_route(), client=client)


def test_speak_returns_audio_bytes():
    client = FakeClient([_Resp(content=b"ID3audio"), _Resp(content=b"")])
    route = _route(voice="alloy")
    assert speak("hello", cfg=route, client=client) == b"ID3audio"
    assert client.calls[0]["json"]["voice"] == "alloy"
    with pytest.raises(LlmGatewayError):
        speak("hello", cfg=route, client=client)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'
