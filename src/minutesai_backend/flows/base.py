"""Flow definitions: a prompt template plus input and output contracts."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Generic, Mapping, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..llm import (
    LLMResponseError,
    OpenAIChatConfig,
    OpenAITranscriptionConfig,
    RateLimiter,
    StructuredRequestFn,
    TranscriptionRequestFn,
    request_structured_output,
    transcribe_media,
)
from ..media import MediaPayload
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

_FLOW_RUNTIME: FlowRuntime | None = None


class FlowModel(BaseModel):
    """Base for flow contracts; camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _reject_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


RequiredText = Annotated[str, AfterValidator(_reject_blank)]
OptionalText = Annotated[str | None, AfterValidator(_blank_to_none)]

InputT = TypeVar("InputT", bound=FlowModel)
OutputT = TypeVar("OutputT", bound=FlowModel)


class FlowError(RuntimeError):
    """Base class for flow failures that are not remote call errors."""

    def __init__(
        self,
        message: str,
        *,
        flow_name: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.flow_name = flow_name
        self.errors = list(errors or [])


class FlowInputError(FlowError):
    """Raised when the caller's payload violates the flow's input contract."""


class FlowOutputError(FlowError):
    """Raised when the model's answer violates the flow's output contract."""


class FlowConfigurationError(RuntimeError):
    """Raised when flows cannot run because the model API is not configured."""


@dataclass(slots=True)
class FlowRuntime:
    """Everything a flow needs to reach the remote model."""

    chat_config: OpenAIChatConfig
    transcription_config: OpenAITranscriptionConfig
    max_media_bytes: int | None = None
    chat_request_fn: StructuredRequestFn | None = None
    transcription_request_fn: TranscriptionRequestFn | None = None
    sleep: Callable[[float], None] = time.sleep
    rate_limiter: RateLimiter | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "FlowRuntime":
        if not settings.openai_api_key:
            raise FlowConfigurationError(
                "OPENAI_API_KEY is not configured; cannot call the model API."
            )

        chat_config = OpenAIChatConfig(
            api_key=settings.openai_api_key,
            model=settings.llm_model,
            base_url=settings.llm_base_url,
            request_timeout_seconds=settings.llm_request_timeout_seconds,
            max_attempts=settings.llm_max_attempts,
            retry_backoff_seconds=settings.llm_retry_backoff_seconds,
            max_retry_backoff_seconds=settings.llm_max_retry_backoff_seconds,
            temperature=settings.llm_temperature,
            max_output_tokens=settings.llm_max_output_tokens,
            requests_per_minute=settings.llm_requests_per_minute,
            user_agent=settings.user_agent,
            response_format=settings.llm_response_format,
        )
        transcription_config = OpenAITranscriptionConfig(
            api_key=settings.transcription_api_key or settings.openai_api_key,
            model=settings.transcription_model,
            base_url=settings.transcription_base_url or settings.llm_base_url,
            request_timeout_seconds=settings.transcription_request_timeout_seconds,
            max_attempts=settings.llm_max_attempts,
            retry_backoff_seconds=settings.llm_retry_backoff_seconds,
            max_retry_backoff_seconds=settings.llm_max_retry_backoff_seconds,
            user_agent=settings.user_agent,
        )
        return cls(
            chat_config=chat_config,
            transcription_config=transcription_config,
            max_media_bytes=settings.max_media_bytes,
            rate_limiter=RateLimiter.per_minute(settings.llm_requests_per_minute),
        )

    def request_structured_output(
        self, *, prompt: str, schema_name: str, schema: Mapping[str, Any]
    ) -> dict[str, Any]:
        return request_structured_output(
            prompt=prompt,
            schema_name=schema_name,
            schema=schema,
            config=self.chat_config,
            request_fn=self.chat_request_fn,
            sleep=self.sleep,
            rate_limiter=self.rate_limiter,
        )

    def transcribe(self, media: MediaPayload, *, prompt: str | None) -> str:
        return transcribe_media(
            media,
            config=self.transcription_config,
            prompt=prompt,
            request_fn=self.transcription_request_fn,
            sleep=self.sleep,
            rate_limiter=self.rate_limiter,
        )


def get_flow_runtime(settings: Settings | None = None) -> FlowRuntime:
    """Return the cached flow runtime, building it from settings on first use."""
    global _FLOW_RUNTIME

    if _FLOW_RUNTIME is None:
        _FLOW_RUNTIME = FlowRuntime.from_settings(settings or get_settings())

    return _FLOW_RUNTIME


def set_flow_runtime(runtime: FlowRuntime | None) -> None:
    """Override the cached runtime, mainly for testing."""
    global _FLOW_RUNTIME
    _FLOW_RUNTIME = runtime


FlowHandler = Callable[[Any, FlowRuntime], Any]


@dataclass(frozen=True)
class FlowDefinition(Generic[InputT, OutputT]):
    """A named request/response adapter around a remote model call."""

    name: str
    input_model: type[InputT]
    output_model: type[OutputT]
    handler: FlowHandler
    description: str = ""

    def parse_input(self, payload: InputT | Mapping[str, Any]) -> InputT:
        if isinstance(payload, self.input_model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(by_alias=True)
        if not isinstance(payload, Mapping):
            raise FlowInputError(
                f"{self.name} expects a JSON object as input",
                flow_name=self.name,
            )
        try:
            return self.input_model.model_validate(payload)
        except ValidationError as exc:
            raise FlowInputError(
                f"{self.name} input does not match {self.input_model.__name__}",
                flow_name=self.name,
                errors=_summarize_errors(exc),
            ) from exc

    def parse_output(self, raw: Any) -> OutputT:
        if isinstance(raw, self.output_model):
            return raw
        try:
            return self.output_model.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Flow %s returned output violating %s: %s",
                self.name,
                self.output_model.__name__,
                exc,
            )
            raise FlowOutputError(
                f"{self.name} output does not match {self.output_model.__name__}",
                flow_name=self.name,
                errors=_summarize_errors(exc),
            ) from exc

    def run(
        self,
        payload: InputT | Mapping[str, Any],
        *,
        runtime: FlowRuntime | None = None,
    ) -> OutputT:
        """Validate ``payload``, call the model and return validated output."""
        model_input = self.parse_input(payload)
        active_runtime = runtime or get_flow_runtime()

        logger.info("Running flow %s", self.name)
        started = time.monotonic()
        outcome = "failed"
        try:
            raw = self.handler(model_input, active_runtime)
            output = self.parse_output(raw)
            outcome = "finished"
        except LLMResponseError as exc:
            raise FlowOutputError(
                f"{self.name} received an unusable model response: {exc}",
                flow_name=self.name,
            ) from exc
        finally:
            logger.log(
                logging.INFO if outcome == "finished" else logging.WARNING,
                "Flow %s %s in %.1fs",
                self.name,
                outcome,
                time.monotonic() - started,
            )
        return output

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)

    def output_schema(self) -> dict[str, Any]:
        return self.output_model.model_json_schema(by_alias=True)


def define_prompt_flow(
    name: str,
    *,
    input_model: type[InputT],
    output_model: type[OutputT],
    prompt: Callable[[InputT], str],
    description: str = "",
) -> FlowDefinition[InputT, OutputT]:
    """Build a flow that renders ``prompt`` and asks for ``output_model`` JSON."""
    schema = output_model.model_json_schema(by_alias=True)

    def _handler(model_input: InputT, runtime: FlowRuntime) -> dict[str, Any]:
        return runtime.request_structured_output(
            prompt=prompt(model_input),
            schema_name=output_model.__name__,
            schema=schema,
        )

    return FlowDefinition(
        name=name,
        input_model=input_model,
        output_model=output_model,
        handler=_handler,
        description=description,
    )


def _summarize_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": [str(part) for part in error["loc"]],
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


__all__ = [
    "FlowConfigurationError",
    "FlowDefinition",
    "FlowError",
    "FlowInputError",
    "FlowModel",
    "FlowOutputError",
    "FlowRuntime",
    "OptionalText",
    "RequiredText",
    "define_prompt_flow",
    "get_flow_runtime",
    "set_flow_runtime",
]
