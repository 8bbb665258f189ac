"""Generates Minutes of Meeting from a transcription.

When the minutes of the previous meeting are supplied, the new document is
written as their continuation and updates items carried over from it.
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


class GenerateMinutesOfMeetingInput(FlowModel):
    transcription: RequiredText = Field(
        description="The transcription of the online meeting."
    )
    previous_mom: OptionalText = Field(
        default=None,
        description="The content of the previous Minutes of Meeting, if any.",
    )


class GenerateMinutesOfMeetingOutput(FlowModel):
    minutes_of_meeting: str = Field(
        description="The generated Minutes of Meeting document."
    )
    action_items: str = Field(
        description=(
            "A list of identified action items with assigned owners and deadlines."
        )
    )
    summary: str = Field(
        description=(
            "A concise summary of the meeting key discussion points and decisions."
        )
    )


def build_minutes_prompt(model_input: GenerateMinutesOfMeetingInput) -> str:
    if model_input.previous_mom:
        history = f"Previous Minutes of Meeting: {model_input.previous_mom}"
    else:
        history = "This is the first meeting, so generate the MoM accordingly."

    return (
        "You are an AI assistant specialized in generating Minutes of Meeting (MoM)"
        " documents from meeting transcriptions.\n\n"
        "Your task is to create a comprehensive MoM, identifying key discussion"
        " points, decisions made, and specific action items. If a previous MoM is"
        " available, consider it as context and create the new MoM as a"
        " continuation, updating existing items where necessary.\n\n"
        f"Transcription: {model_input.transcription}\n\n"
        f"{history}\n\n"
        "Output the minutes of meeting in a well structured format including:\n"
        "- A concise summary of the meeting's key discussion points and decisions.\n"
        "- A detailed list of Action Items, including the assigned owner and"
        " deadline for each item.\n\n"
        "Ensure that the output is clear, concise, and well-organized for easy"
        " readability.\n\n"
        "Follow the output schema strictly, especially the Action Items format."
    )


generate_minutes_of_meeting_flow = register_flow(
    define_prompt_flow(
        "generateMinutesOfMeetingFlow",
        input_model=GenerateMinutesOfMeetingInput,
        output_model=GenerateMinutesOfMeetingOutput,
        prompt=build_minutes_prompt,
        description=(
            "Generate Minutes of Meeting, action items and a summary,"
            " continuing from the previous MoM when given."
        ),
    )
)


def generate_minutes_of_meeting(
    payload: GenerateMinutesOfMeetingInput | Mapping[str, Any],
    *,
    runtime: FlowRuntime | None = None,
) -> GenerateMinutesOfMeetingOutput:
    return generate_minutes_of_meeting_flow.run(payload, runtime=runtime)


__all__ = [
    "GenerateMinutesOfMeetingInput",
    "GenerateMinutesOfMeetingOutput",
    "build_minutes_prompt",
    "generate_minutes_of_meeting",
    "generate_minutes_of_meeting_flow",
]
