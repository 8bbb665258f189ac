"""Extracts action items (task, owner, deadline) from meeting transcripts."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import Field

from .base import FlowModel, FlowRuntime, RequiredText, define_prompt_flow
from .registry import register_flow

UNASSIGNED_OWNER = "Unassigned"
UNSPECIFIED_DEADLINE = "Not specified"


class ExtractActionItemsInput(FlowModel):
    transcript: RequiredText = Field(description="The transcript of the meeting.")


class ActionItem(FlowModel):
    task: str = Field(description="The action item task.")
    owner: str = Field(description="The person responsible for the action item.")
    deadline: str = Field(description="The deadline for the action item.")


class ExtractActionItemsOutput(FlowModel):
    action_items: list[ActionItem] = Field(
        description="A list of action items extracted from the transcript."
    )


def build_action_items_prompt(model_input: ExtractActionItemsInput) -> str:
    return (
        "You are an AI assistant tasked with extracting action items from meeting"
        " transcripts.\n\n"
        "Analyze the following transcript and identify all action items, including"
        " the task, assigned owner, and deadline.\n"
        "Present the action items in a structured format.\n"
        f"When no owner is named use \"{UNASSIGNED_OWNER}\"; when no deadline is"
        f" named use \"{UNSPECIFIED_DEADLINE}\".\n\n"
        f"Transcript: {model_input.transcript}\n\n"
        "If no action items are found, return an empty list."
    )


extract_action_items_flow = register_flow(
    define_prompt_flow(
        "extractActionItemsFlow",
        input_model=ExtractActionItemsInput,
        output_model=ExtractActionItemsOutput,
        prompt=build_action_items_prompt,
        description="Extract action items with owners and deadlines from a transcript.",
    )
)


def extract_action_items(
    payload: ExtractActionItemsInput | Mapping[str, Any],
    *,
    runtime: FlowRuntime | None = None,
) -> ExtractActionItemsOutput:
    return extract_action_items_flow.run(payload, runtime=runtime)


__all__ = [
    "ActionItem",
    "ExtractActionItemsInput",
    "ExtractActionItemsOutput",
    "UNASSIGNED_OWNER",
    "UNSPECIFIED_DEADLINE",
    "build_action_items_prompt",
    "extract_action_items",
    "extract_action_items_flow",
]
