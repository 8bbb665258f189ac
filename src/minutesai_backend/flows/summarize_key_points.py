"""Summarizes the key discussion points and decisions of a meeting.

The caller may pass the previous Minutes of Meeting so the summary is written
as a continuation of the meeting series.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import Field

from .base import (
    FlowModel,
    FlowRuntime,
    OptionalText,
    RequiredText,
    define_prompt_flow,
)
from .registry import register_flow


class SummarizeMeetingKeyPointsInput(FlowModel):
    transcription: RequiredText = Field(
        description="The transcription of the meeting to summarize."
    )
    previous_mom: OptionalText = Field(
        default=None, description="The content of the previous MoM, if available."
    )


class SummarizeMeetingKeyPointsOutput(FlowModel):
    summary: str = Field(description="A concise summary of the meeting.")


def build_key_points_prompt(model_input: SummarizeMeetingKeyPointsInput) -> str:
    previous_block = ""
    if model_input.previous_mom:
        previous_block = f"\nPrevious MoM: {model_input.previous_mom}\n"

    return (
        "You are an AI assistant specialized in creating meeting minutes.\n\n"
        "Your task is to summarize the key discussion points and decisions from a"
        " meeting transcription.\n"
        "If a previous MoM is provided, take it as the continuation of the meeting"
        " series and update the summary accordingly.\n\n"
        f"Transcription: {model_input.transcription}\n"
        f"{previous_block}\n"
        "Please provide a concise summary of the meeting's key discussion points"
        " and decisions.\n"
        "Focus on the main topics covered and the outcomes achieved.\n"
        "The summary should be easily understandable and highlight the most"
        " important information."
    )


summarize_meeting_key_points_flow = register_flow(
    define_prompt_flow(
        "summarizeMeetingKeyPointsFlow",
        input_model=SummarizeMeetingKeyPointsInput,
        output_model=SummarizeMeetingKeyPointsOutput,
        prompt=build_key_points_prompt,
        description="Summarize the key discussion points and decisions of a meeting.",
    )
)


def summarize_meeting_key_points(
    payload: SummarizeMeetingKeyPointsInput | Mapping[str, Any],
    *,
    runtime: FlowRuntime | None = None,
) -> SummarizeMeetingKeyPointsOutput:
    return summarize_meeting_key_points_flow.run(payload, runtime=runtime)


__all__ = [
    "SummarizeMeetingKeyPointsInput",
    "SummarizeMeetingKeyPointsOutput",
    "build_key_points_prompt",
    "summarize_meeting_key_points",
    "summarize_meeting_key_points_flow",
]
