from __future__ import annotations  # AI collaborator request gateway

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...

    @property
    def content(self) -> bytes: ...


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, **kwargs: Any) -> HttpResponse: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _ROUTE_LOCKS[key] = lock
    return lock


def _serialized(cfg: LlmRoute, fn: Callable[[], Any]) -> Any:  # Honour per-route sequential flag
    if cfg.sequential:
        with _lock_for(cfg):
            return fn()
    return fn()


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Single-prompt structured call
    return chat(
        [{"role": "user", "content": task}],
        schema,
        cfg=cfg,
        client=client,
        options=options,
    )


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Chat completion validated against a pydantic schema
    def _execute() -> T:
        base_messages: list[Dict[str, str]] = []
        if cfg.enforce_json:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            base_messages.append(
                {
                    "role": "system",
                    "content": "Reply with a single JSON object matching this schema:\n" + schema_json,
                }
            )
        base_messages.extend(_normalize_messages(messages))
        attempts = cfg.max_retries + 1
        last_error: Optional[Exception] = None
        last_error_text: Optional[str] = None
        logger.info(
            "LLM request start route=%s model=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            attempts,
            _preview(base_messages),
        )
        for attempt in range(attempts):
            attempt_messages = list(base_messages)
            if attempt > 0:
                attempt_messages.append(
                    {"role": "system", "content": _retry_hint(last_error_text, cfg.enforce_json)}
                )
            payload = _chat_payload(cfg, attempt_messages, options)
            if cfg.response_format:
                payload["response_format"] = {"type": cfg.response_format}
            content = _extract_content(_post_json(cfg, payload, client))
            try:
                parsed = _validate(schema, content)
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("LLM output validation failed route=%s: %s", cfg.name, exc)
                last_error = exc
                last_error_text = str(exc)
                continue
            logger.info("LLM request done route=%s attempt=%d", cfg.name, attempt + 1)
            return parsed
        raise LlmGatewayError("LLM output validation failed") from last_error

    return _serialized(cfg, _execute)


def complete(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:  # Plain-text chat completion
    def _execute() -> str:
        payload = _chat_payload(cfg, _normalize_messages(messages), options)
        text = _extract_content(_post_json(cfg, payload, client)).strip()
        if not text:
            raise LlmGatewayError("LLM returned empty content")
        return text

    return _serialized(cfg, _execute)


def stream(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    options: Optional[Dict[str, Any]] = None,
) -> Iterator[str]:  # Yield content tokens from a server-sent-events completion
    payload = _chat_payload(cfg, _normalize_messages(messages), options)
    payload["stream"] = True
    url = f"{cfg.base_url}{cfg.endpoint}"
    try:
        with httpx.Client(timeout=cfg.timeout_s) as http_client:
            with http_client.stream("POST", url, json=payload, headers=_headers(cfg)) as response:
                if response.status_code >= 400:
                    raise LlmGatewayError(f"LLM returned status {response.status_code}")
                for line in response.iter_lines():
                    token = _sse_token(line)
                    if not token:
                        continue
                    yield token
    except httpx.HTTPError as exc:
        logger.error("LLM stream failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM stream failed") from exc


def transcribe(
    audio: bytes,
    *,
    filename: str,
    cfg: LlmRoute,
    prompt: Optional[str] = None,
    client: Optional[HttpClient] = None,
) -> str:  # Multipart audio upload returning plain text
    data: Dict[str, str] = {"model": cfg.model}
    if prompt:
        data["prompt"] = prompt
    files = {"file": (filename or "audio.webm", audio, "application/octet-stream")}
    response = _send(cfg, client, data=data, files=files, headers=_headers(cfg, content_type=None))
    try:
        body = response.json()
    except ValueError as exc:
        raise LlmGatewayError("Transcription payload was not JSON") from exc
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        raise LlmGatewayError("Transcription response missing text")
    return text.strip()


def speak(
    text: str,
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> bytes:  # Text-to-speech returning audio bytes
    payload = {"model": cfg.model, "input": text, "voice": cfg.voice or "nova"}
    response = _send(cfg, client, json=payload, headers=_headers(cfg))
    audio = response.content
    if not audio:
        raise LlmGatewayError("Speech response was empty")
    return audio


def _chat_payload(
    cfg: LlmRoute, messages: Sequence[Dict[str, str]], options: Optional[Dict[str, Any]]
) -> Dict[str, Any]:  # Assemble chat completion body
    payload: Dict[str, Any] = {"model": cfg.model, "messages": list(messages)}
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    if cfg.max_tokens is not None:
        payload["max_tokens"] = cfg.max_tokens
    if options:
        payload.update(options)
    return payload


def _headers(cfg: LlmRoute, content_type: Optional[str] = "application/json") -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if content_type:
        headers["Content-Type"] = content_type
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post_json(cfg: LlmRoute, payload: Dict[str, Any], client: Optional[HttpClient]) -> Any:
    response = _send(cfg, client, json=payload, headers=_headers(cfg))
    try:
        return response.json()
    except ValueError as exc:
        logger.error("Invalid JSON payload from route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM payload was not JSON") from exc


def _send(cfg: LlmRoute, client: Optional[HttpClient], **kwargs: Any) -> HttpResponse:  # Dispatch HTTP request
    url = f"{cfg.base_url}{cfg.endpoint}"
    try:
        response, close_cb = _post(url, cfg.timeout_s, client, **kwargs)
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc
    try:
        if response.status_code >= 400:
            logger.error("LLM error status route=%s: %s", cfg.name, response.status_code)
            raise LlmGatewayError(f"LLM returned status {response.status_code}")
        return response
    finally:
        _close_safely(close_cb)


def _post(
    url: str, timeout: float, client: Optional[HttpClient], **kwargs: Any
) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:
    if client is not None:
        return client.post(url, timeout=timeout, **kwargs), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, **kwargs)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:
    if close_cb is not None:
        close_cb()


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # First non-empty line, trimmed for logs
    for message in messages:
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Pull message content out of a chat completion
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _sse_token(line: str) -> Optional[str]:  # Decode one SSE line into a content delta
    line = line.strip()
    if not line.startswith("data:"):
        return None
    body = line[len("data:"):].strip()
    if body == "[DONE]":
        return None
    try:
        chunk = json.loads(body)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed stream chunk: %s", body[:80])
        return None
    choices = chunk.get("choices") if isinstance(chunk, dict) else None
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    content = delta.get("content")
    return content if isinstance(content, str) else None


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    cleaned = strip_code_fences(content)
    try:
        return schema.model_validate_json(cleaned)
    except (json.JSONDecodeError, ValidationError):
        embedded = _embedded_object(cleaned)
        if embedded is None:
            raise
        return schema.model_validate_json(embedded)


def _embedded_object(text: str) -> Optional[str]:  # Outermost {...} span inside chatty output
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        while lines and not lines[0].strip():
            lines = lines[1:]
        while lines and not lines[-1].strip():
            lines = lines[:-1]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _retry_hint(error_text: Optional[str], enforce_json: bool) -> str:  # Retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    if enforce_json:
        return base + " Return a single JSON object that matches the schema."
    return base + " Follow the requested format precisely."
