"""Helpers for calling the OpenAI transcription API with in-memory media."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol

import httpx

from ..media import MediaPayload
from .retry import RateLimiter, is_retriable_status, select_retry_delay

logger = logging.getLogger(__name__)


class TranscriptionError(RuntimeError):
    """Raised when a transcription request ultimately fails."""

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


@dataclass(slots=True)
class OpenAITranscriptionConfig:
    """Configuration for interacting with the OpenAI transcription endpoint."""

    api_key: str
    model: str = "gpt-4o-transcribe"
    base_url: str = "https://api.openai.com/v1"
    request_timeout_seconds: float = 300.0
    max_attempts: int = 3
    retry_backoff_seconds: float = 1.0
    max_retry_backoff_seconds: float | None = 30.0
    user_agent: str | None = "MinutesAI/0.1"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key must be provided for OpenAI transcription.")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive.")
        if self.retry_backoff_seconds <= 0:
            raise ValueError("retry_backoff_seconds must be positive.")
        if (
            self.max_retry_backoff_seconds is not None
            and self.max_retry_backoff_seconds <= 0
        ):
            raise ValueError(
                "max_retry_backoff_seconds must be positive when provided."
            )


class TranscriptionRequestFn(Protocol):
    """Callable responsible for executing a single transcription request."""

    def __call__(
        self,
        *,
        media: MediaPayload,
        config: OpenAITranscriptionConfig,
        prompt: str | None,
    ) -> Mapping[str, Any]: ...


def transcribe_media(
    media: MediaPayload,
    *,
    config: OpenAITranscriptionConfig,
    prompt: str | None = None,
    request_fn: TranscriptionRequestFn | None = None,
    sleep: Callable[[float], None] = time.sleep,
    rate_limiter: RateLimiter | None = None,
) -> str:
    """Transcribe a recording with retries and return the transcribed text."""
    perform_request = request_fn or _call_openai_transcription_api

    attempt = 0
    last_exception: Exception | None = None
    while attempt < config.max_attempts:
        attempt += 1
        if rate_limiter is not None:
            rate_limiter.acquire()

        logger.info(
            "Transcribing %s recording (%d bytes, attempt=%d/%d)",
            media.mime_type,
            media.size_bytes,
            attempt,
            config.max_attempts,
        )
        request_start = time.monotonic()

        try:
            payload = perform_request(media=media, config=config, prompt=prompt)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code if exc.response is not None else None
            error_text = None
            if exc.response is not None:
                try:
                    error_text = exc.response.text
                except (AttributeError, UnicodeDecodeError) as read_exc:
                    logger.warning("Could not read error response text: %s", read_exc)
            if is_retriable_status(status) and attempt < config.max_attempts:
                delay = select_retry_delay(
                    attempt=attempt,
                    backoff_seconds=config.retry_backoff_seconds,
                    max_backoff_seconds=config.max_retry_backoff_seconds,
                    response=exc.response,
                )
                sleep(delay)
                last_exception = exc
                continue

            raise TranscriptionError(
                f"transcription failed with status {status}: {error_text}",
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
                sleep(delay)
                last_exception = exc
                continue

            raise TranscriptionError(
                "transcription request failed due to network error",
                timed_out=isinstance(exc, httpx.TimeoutException),
            ) from exc
        except TranscriptionError:
            raise
        except Exception as exc:
            raise TranscriptionError("unexpected error during transcription") from exc

        logger.info(
            "Recording transcribed in %.1fs", time.monotonic() - request_start
        )
        return _extract_transcript_text(payload)

    raise TranscriptionError(  # pragma: no cover - loop always returns or raises
        "exhausted retries while transcribing recording"
    ) from last_exception


def _response_format_for(model: str) -> str:
    normalized = model.lower()
    if normalized.endswith("-diarize"):
        return "diarized_json"
    if normalized.startswith("gpt-4o"):
        # gpt-4o transcription models only offer json or text responses.
        return "json"
    return "verbose_json"


def _call_openai_transcription_api(
    *,
    media: MediaPayload,
    config: OpenAITranscriptionConfig,
    prompt: str | None,
) -> Mapping[str, Any]:
    url = f"{config.base_url.rstrip('/')}/audio/transcriptions"
    headers = {
        "Authorization": f"Bearer {config.api_key}",
    }
    if config.user_agent:
        headers["User-Agent"] = config.user_agent

    response_format = _response_format_for(config.model)
    data: dict[str, str] = {
        "model": config.model,
        "response_format": response_format,
    }
    if response_format == "diarized_json":
        data["chunking_strategy"] = "auto"
    elif prompt:
        data["prompt"] = prompt

    response = httpx.post(
        url,
        headers=headers,
        data=data,
        files={"file": (media.filename, media.data, media.mime_type)},
        timeout=config.request_timeout_seconds,
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise TranscriptionError(
            "OpenAI transcription API returned unexpected response format."
        )
    return payload


def _extract_transcript_text(payload: Mapping[str, Any]) -> str:
    text = payload.get("text")
    if isinstance(text, str) and text.strip():
        return text.strip()

    segments = payload.get("segments")
    if isinstance(segments, list):
        collected = [
            entry["text"].strip()
            for entry in segments
            if isinstance(entry, Mapping) and isinstance(entry.get("text"), str)
        ]
        collected = [item for item in collected if item]
        if collected:
            return " ".join(collected)

    if isinstance(text, str):
        # Silent recordings come back with an empty transcript.
        return ""
    raise TranscriptionError("transcription response did not contain text field")


__all__ = [
    "OpenAITranscriptionConfig",
    "TranscriptionError",
    "TranscriptionRequestFn",
    "transcribe_media",
]
