"""Meeting flows: prompt templates and data contracts for remote model calls."""

from .action_items import (
    ActionItem,
    ExtractActionItemsInput,
    ExtractActionItemsOutput,
    extract_action_items,
    extract_action_items_flow,
)
from .base import (
    FlowConfigurationError,
    FlowDefinition,
    FlowError,
    FlowInputError,
    FlowOutputError,
    FlowRuntime,
    define_prompt_flow,
    get_flow_runtime,
    set_flow_runtime,
)
from .minutes_of_meeting import (
    GenerateMinutesOfMeetingInput,
    GenerateMinutesOfMeetingOutput,
    generate_minutes_of_meeting,
    generate_minutes_of_meeting_flow,
)
from .registry import get_flow, list_flows, register_flow
from .summarize_key_points import (
    SummarizeMeetingKeyPointsInput,
    SummarizeMeetingKeyPointsOutput,
    summarize_meeting_key_points,
    summarize_meeting_key_points_flow,
)
from .transcribe_video import (
    TranscribeVideoInput,
    TranscribeVideoOutput,
    transcribe_video,
    transcribe_video_flow,
)

__all__ = [
    "ActionItem",
    "ExtractActionItemsInput",
    "ExtractActionItemsOutput",
    "FlowConfigurationError",
    "FlowDefinition",
    "FlowError",
    "FlowInputError",
    "FlowOutputError",
    "FlowRuntime",
    "GenerateMinutesOfMeetingInput",
    "GenerateMinutesOfMeetingOutput",
    "SummarizeMeetingKeyPointsInput",
    "SummarizeMeetingKeyPointsOutput",
    "TranscribeVideoInput",
    "TranscribeVideoOutput",
    "define_prompt_flow",
    "extract_action_items",
    "extract_action_items_flow",
    "generate_minutes_of_meeting",
    "generate_minutes_of_meeting_flow",
    "get_flow",
    "get_flow_runtime",
    "list_flows",
    "register_flow",
    "set_flow_runtime",
    "summarize_meeting_key_points",
    "summarize_meeting_key_points_flow",
    "transcribe_video",
    "transcribe_video_flow",
]
