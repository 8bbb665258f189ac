"""OpenAI-compatible chat completion client returning structured JSON."""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol

import httpx

from .retry import RateLimiter, is_retriable_status, select_retry_delay

logger = logging.getLogger(__name__)

_RESPONSE_FORMATS = ("json_schema", "json_object")
_FENCED_JSON = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that works with meeting transcripts."
    " Always respond with valid JSON matching the requested schema."
)


@dataclass(slots=True)
class OpenAIChatConfig:
    """Configuration for invoking the chat completion API."""

    api_key: str
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    request_timeout_seconds: float = 240.0
    max_attempts: int = 3
    retry_backoff_seconds: float = 2.0
    max_retry_backoff_seconds: float | None = 60.0
    temperature: float = 0.2
    max_output_tokens: int = 4096
    requests_per_minute: int | None = None
    user_agent: str | None = "MinutesAI/0.1"
    response_format: str = "json_schema"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key must be provided for chat completions.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive.")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.retry_backoff_seconds <= 0:
            raise ValueError("retry_backoff_seconds must be positive.")
        if (
            self.max_retry_backoff_seconds is not None
            and self.max_retry_backoff_seconds <= 0
        ):
            raise ValueError(
                "max_retry_backoff_seconds must be positive when provided."
            )
        if self.max_output_tokens <= 0:
            raise ValueError("max_output_tokens must be positive.")
        if self.requests_per_minute is not None and self.requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive when provided.")
        if self.response_format not in _RESPONSE_FORMATS:
            raise ValueError(
                f"response_format must be one of {', '.join(_RESPONSE_FORMATS)}."
            )


class LLMRequestError(RuntimeError):
    """Raised when the remote model call fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.timed_out = timed_out


class LLMResponseError(RuntimeError):
    """Raised when the remote model answers with unusable content."""


class StructuredRequestFn(Protocol):  # pragma: no cover - Protocol runtime helper
    def __call__(
        self,
        *,
        prompt: str,
        schema_name: str,
        schema: Mapping[str, Any],
        config: OpenAIChatConfig,
    ) -> Mapping[str, Any]: ...


def request_structured_output(
    *,
    prompt: str,
    schema_name: str,
    schema: Mapping[str, Any],
    config: OpenAIChatConfig,
    request_fn: StructuredRequestFn | None = None,
    sleep: Callable[[float], None] | None = None,
    rate_limiter: RateLimiter | None = None,
) -> dict[str, Any]:
    """Send ``prompt`` to the model and return its JSON object answer."""
    if not prompt.strip():
        raise ValueError("prompt must not be empty")

    caller = request_fn or _call_openai_chat_api
    sleep_fn = sleep or time.sleep

    attempt = 0
    last_exception: Exception | None = None
    while attempt < config.max_attempts:
        attempt += 1
        if rate_limiter is not None:
            rate_limiter.acquire()

        logger.debug(
            "Requesting structured output %s (model=%s, attempt=%d/%d)",
            schema_name,
            config.model,
            attempt,
            config.max_attempts,
        )
        try:
            raw_payload = caller(
                prompt=prompt,
                schema_name=schema_name,
                schema=schema,
                config=config,
            )
            break
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if is_retriable_status(status) and attempt < config.max_attempts:
                delay = select_retry_delay(
                    attempt=attempt,
                    backoff_seconds=config.retry_backoff_seconds,
                    max_backoff_seconds=config.max_retry_backoff_seconds,
                    response=exc.response,
                )
                logger.warning(
                    "Model call for %s failed with status %s; retrying in %.1fs",
                    schema_name,
                    status,
                    delay,
                )
                sleep_fn(delay)
                last_exception = exc
                continue
            raise LLMRequestError(
                f"Model call failed with status {status}",
                status_code=status,
            ) from exc
        except httpx.RequestError as exc:
            if attempt < config.max_attempts:
                delay = select_retry_delay(
                    attempt=attempt,
                    backoff_seconds=config.retry_backoff_seconds,
                    max_backoff_seconds=config.max_retry_backoff_seconds,
                    response=None,
                )
                logger.warning(
                    "Model call for %s hit a network error (%s); retrying in %.1fs",
                    schema_name,
                    exc,
                    delay,
                )
                sleep_fn(delay)
                last_exception = exc
                continue
            raise LLMRequestError(
                "Model request failed due to network error",
                timed_out=isinstance(exc, httpx.TimeoutException),
            ) from exc
        except (LLMRequestError, LLMResponseError):
            raise
        except Exception as exc:
            raise LLMRequestError("Unexpected error while calling the model") from exc
    else:  # pragma: no cover - loop always breaks or raises
        raise LLMRequestError(
            "Exhausted retries while calling the model."
        ) from last_exception

    if not isinstance(raw_payload, Mapping):
        raise LLMResponseError("Model response must be a JSON object.")
    return dict(raw_payload)


def build_chat_payload(
    *,
    prompt: str,
    schema_name: str,
    schema: Mapping[str, Any],
    config: OpenAIChatConfig,
) -> dict[str, Any]:
    """Build the chat completion request body for a structured output call."""
    schema_text = json.dumps(schema, ensure_ascii=False)
    user_content = (
        f"{prompt.strip()}\n\n"
        f"Respond with a JSON object matching this JSON schema:\n{schema_text}"
    )

    if config.response_format == "json_schema":
        response_format: dict[str, Any] = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": dict(schema)},
        }
    else:
        response_format = {"type": "json_object"}

    return {
        "model": config.model,
        "messages": [
            {"role": "system", "content": DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ],
        "temperature": config.temperature,
        "response_format": response_format,
        "max_tokens": config.max_output_tokens,
    }


def _call_openai_chat_api(
    *,
    prompt: str,
    schema_name: str,
    schema: Mapping[str, Any],
    config: OpenAIChatConfig,
) -> Mapping[str, Any]:
    url = f"{config.base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {config.api_key}",
    }
    if config.user_agent:
        headers["User-Agent"] = config.user_agent

    payload = build_chat_payload(
        prompt=prompt, schema_name=schema_name, schema=schema, config=config
    )

    response = httpx.post(
        url,
        headers=headers,
        json=payload,
        timeout=config.request_timeout_seconds,
    )
    response.raise_for_status()

    data = response.json()
    if not isinstance(data, Mapping):
        raise LLMResponseError("Unexpected response payload from the model API.")

    logger.debug(
        "Chat completion %s (model=%s) usage=%s",
        data.get("id"),
        data.get("model"),
        data.get("usage"),
    )

    content = extract_message_content(data)
    return decode_json_object(content)


def extract_message_content(payload: Mapping[str, Any]) -> str:
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise LLMResponseError("Model response did not include any choices.")

    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    if isinstance(message, Mapping):
        refusal = message.get("refusal")
        if isinstance(refusal, str) and refusal:
            raise LLMResponseError(f"Model refused the request: {refusal}")

        content = message.get("content")
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            joined = "".join(
                chunk.get("text", "")
                for chunk in content
                if isinstance(chunk, Mapping) and isinstance(chunk.get("text"), str)
            )
            if joined:
                return joined
    raise LLMResponseError("Model response missing textual content.")


def decode_json_object(content: str) -> dict[str, Any]:
    text = content.strip()
    fenced = _FENCED_JSON.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LLMResponseError("Model returned invalid JSON content.") from exc

    if not isinstance(decoded, dict):
        raise LLMResponseError("Decoded model payload must be a JSON object.")
    return decoded


__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "LLMRequestError",
    "LLMResponseError",
    "OpenAIChatConfig",
    "StructuredRequestFn",
    "build_chat_payload",
    "decode_json_object",
    "extract_message_content",
    "request_structured_output",
]
