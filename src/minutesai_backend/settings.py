# Application-wide configuration helpers.

from __future__ import annotations

import os
from dataclasses import dataclass

_SETTINGS_CACHE: Settings | None = None

_UNSET_VALUES = (None, "", "none", "None")


@dataclass(slots=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    openai_api_key: str | None = None
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.2
    llm_request_timeout_seconds: float = 240.0
    llm_max_attempts: int = 3
    llm_retry_backoff_seconds: float = 2.0
    llm_max_retry_backoff_seconds: float | None = 60.0
    llm_requests_per_minute: int | None = None
    llm_max_output_tokens: int = 4096
    llm_response_format: str = "json_schema"
    transcription_model: str = "gpt-4o-transcribe"
    # None falls back to the chat endpoint and key.
    transcription_base_url: str | None = None
    transcription_api_key: str | None = None
    transcription_request_timeout_seconds: float = 300.0
    max_media_bytes: int = 25 * 1024 * 1024
    user_agent: str | None = "MinutesAI/0.1"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables with sensible defaults."""
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        base_url = os.getenv("MINUTESAI_LLM_BASE_URL", "https://api.openai.com/v1")
        model = os.getenv("MINUTESAI_LLM_MODEL", "gpt-4o-mini")
        response_format = os.getenv("MINUTESAI_LLM_RESPONSE_FORMAT", "json_schema")
        if response_format not in ("json_schema", "json_object"):
            raise ValueError(
                "MINUTESAI_LLM_RESPONSE_FORMAT must be 'json_schema' or 'json_object'."
            )

        temperature = _read_float("MINUTESAI_LLM_TEMPERATURE", "0.2")
        timeout = _read_float("MINUTESAI_LLM_TIMEOUT", "240")
        max_attempts = _read_int("MINUTESAI_LLM_MAX_ATTEMPTS", "3")
        backoff = _read_float("MINUTESAI_LLM_BACKOFF_SECONDS", "2.0")

        max_backoff_raw = os.getenv("MINUTESAI_LLM_MAX_BACKOFF_SECONDS", "60.0")
        max_backoff: float | None
        if max_backoff_raw in _UNSET_VALUES:
            max_backoff = None
        else:
            try:
                max_backoff = float(max_backoff_raw)
            except ValueError as exc:
                raise ValueError(
                    "MINUTESAI_LLM_MAX_BACKOFF_SECONDS must be numeric or empty."
                ) from exc

        requests_per_minute_raw = os.getenv("MINUTESAI_LLM_REQUESTS_PER_MINUTE")
        requests_per_minute: int | None
        if requests_per_minute_raw in _UNSET_VALUES:
            requests_per_minute = None
        else:
            try:
                requests_per_minute = int(requests_per_minute_raw)
            except ValueError as exc:
                raise ValueError(
                    "MINUTESAI_LLM_REQUESTS_PER_MINUTE must be an integer."
                ) from exc

        max_output_tokens = _read_int("MINUTESAI_LLM_MAX_OUTPUT_TOKENS", "4096")

        transcription_model = os.getenv(
            "MINUTESAI_TRANSCRIBE_MODEL", "gpt-4o-transcribe"
        )
        transcription_timeout = _read_float("MINUTESAI_TRANSCRIBE_TIMEOUT", "300")
        transcription_base_url = os.getenv("MINUTESAI_TRANSCRIBE_BASE_URL") or None
        transcription_api_key = os.getenv("MINUTESAI_TRANSCRIBE_API_KEY") or None
        max_media_bytes = _read_int("MINUTESAI_MAX_MEDIA_BYTES", str(25 * 1024 * 1024))

        user_agent = os.getenv("MINUTESAI_USER_AGENT", "MinutesAI/0.1") or None
        log_level = os.getenv("MINUTESAI_LOG_LEVEL", "INFO").upper()

        return cls(
            openai_api_key=openai_api_key,
            llm_base_url=base_url,
            llm_model=model,
            llm_temperature=temperature,
            llm_request_timeout_seconds=timeout,
            llm_max_attempts=max_attempts,
            llm_retry_backoff_seconds=backoff,
            llm_max_retry_backoff_seconds=max_backoff,
            llm_requests_per_minute=requests_per_minute,
            llm_max_output_tokens=max_output_tokens,
            llm_response_format=response_format,
            transcription_model=transcription_model,
            transcription_base_url=transcription_base_url,
            transcription_api_key=transcription_api_key,
            transcription_request_timeout_seconds=transcription_timeout,
            max_media_bytes=max_media_bytes,
            user_agent=user_agent,
            log_level=log_level,
        )


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be numeric.") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc


def get_settings() -> Settings:
    """Return cached settings instance, constructing it on first access."""
    global _SETTINGS_CACHE

    if _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = Settings.from_env()

    return _SETTINGS_CACHE


def set_settings(settings: Settings | None) -> None:
    """Override the cached settings value (mainly intended for tests)."""
    global _SETTINGS_CACHE
    _SETTINGS_CACHE = settings


__all__ = ["Settings", "get_settings", "set_settings"]
