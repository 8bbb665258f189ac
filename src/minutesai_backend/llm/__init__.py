"""Clients for the hosted model API."""

from .openai import (
    LLMRequestError,
    LLMResponseError,
    OpenAIChatConfig,
    StructuredRequestFn,
    request_structured_output,
)
from .retry import RateLimiter
from .transcription import (
    OpenAITranscriptionConfig,
    TranscriptionError,
    TranscriptionRequestFn,
    transcribe_media,
)

__all__ = [
    "LLMRequestError",
    "LLMResponseError",
    "OpenAIChatConfig",
    "OpenAITranscriptionConfig",
    "RateLimiter",
    "StructuredRequestFn",
    "TranscriptionError",
    "TranscriptionRequestFn",
    "request_structured_output",
    "transcribe_media",
]
