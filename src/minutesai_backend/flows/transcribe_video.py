"""Transcribes the audio track of a meeting recording passed as a data URI."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import Field, field_validator

from ..media import DataURIError, parse_data_uri, read_data_uri_mime_type
from .base import FlowDefinition, FlowInputError, FlowModel, FlowRuntime
from .registry import register_flow

TRANSCRIBE_INSTRUCTION = (
    "Transcribe the audio from this video. Only return the transcribed text."
)


class TranscribeVideoInput(FlowModel):
    video_data_uri: str = Field(
        description=(
            "A video of a meeting, as a data URI that must include a MIME type and"
            " use Base64 encoding. Expected format:"
            " 'data:<mimetype>;base64,<encoded_data>'."
        )
    )

    @field_validator("video_data_uri")
    @classmethod
    def _check_header(cls, value: str) -> str:
        read_data_uri_mime_type(value)
        return value


class TranscribeVideoOutput(FlowModel):
    transcript: str = Field(description="The transcription of the video.")


def _transcribe(
    model_input: TranscribeVideoInput, runtime: FlowRuntime
) -> dict[str, Any]:
    try:
        media = parse_data_uri(
            model_input.video_data_uri, max_bytes=runtime.max_media_bytes
        )
    except DataURIError as exc:
        raise FlowInputError(str(exc), flow_name=transcribe_video_flow.name) from exc

    transcript = runtime.transcribe(media, prompt=TRANSCRIBE_INSTRUCTION)
    return {"transcript": transcript}


transcribe_video_flow = register_flow(
    FlowDefinition(
        name="transcribeVideoFlow",
        input_model=TranscribeVideoInput,
        output_model=TranscribeVideoOutput,
        handler=_transcribe,
        description="Transcribe the audio of a meeting recording.",
    )
)


def transcribe_video(
    payload: TranscribeVideoInput | Mapping[str, Any],
    *,
    runtime: FlowRuntime | None = None,
) -> TranscribeVideoOutput:
    return transcribe_video_flow.run(payload, runtime=runtime)


__all__ = [
    "TRANSCRIBE_INSTRUCTION",
    "TranscribeVideoInput",
    "TranscribeVideoOutput",
    "transcribe_video",
    "transcribe_video_flow",
]
