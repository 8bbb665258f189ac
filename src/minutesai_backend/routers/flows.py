"""Endpoints exposing the meeting flows over HTTP."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel

from ..flows import (
    ExtractActionItemsInput,
    ExtractActionItemsOutput,
    FlowConfigurationError,
    FlowDefinition,
    FlowInputError,
    FlowOutputError,
    FlowRuntime,
    GenerateMinutesOfMeetingInput,
    GenerateMinutesOfMeetingOutput,
    SummarizeMeetingKeyPointsInput,
    SummarizeMeetingKeyPointsOutput,
    TranscribeVideoInput,
    TranscribeVideoOutput,
    extract_action_items_flow,
    generate_minutes_of_meeting_flow,
    get_flow,
    get_flow_runtime,
    list_flows,
    summarize_meeting_key_points_flow,
    transcribe_video_flow,
)
from ..llm import LLMRequestError, TranscriptionError
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/flows", tags=["flows"])


class FlowInfoResponse(BaseModel):
    name: str
    description: str
    input_schema: dict[str, Any]
    output_schema: dict[str, Any]

    @classmethod
    def from_flow(cls, flow: FlowDefinition) -> "FlowInfoResponse":
        return cls(
            name=flow.name,
            description=flow.description,
            input_schema=flow.input_schema(),
            output_schema=flow.output_schema(),
        )


def get_runtime(settings: Settings = Depends(get_settings)) -> FlowRuntime:
    try:
        return get_flow_runtime(settings)
    except FlowConfigurationError as exc:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc


def execute_flow(
    flow: FlowDefinition,
    payload: BaseModel | Mapping[str, Any],
    runtime: FlowRuntime,
) -> BaseModel:
    """Run ``flow`` and translate its failures into HTTP errors."""
    try:
        return flow.run(payload, runtime=runtime)
    except FlowInputError as exc:
        # Literal code: Starlette renamed the 422 status constant.
        raise HTTPException(
            422,
            detail={"message": str(exc), "errors": exc.errors},
        ) from exc
    except FlowOutputError as exc:
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc), "errors": exc.errors},
        ) from exc
    except (LLMRequestError, TranscriptionError) as exc:
        logger.error("Flow %s failed calling the model: %s", flow.name, exc)
        status_code = (
            status.HTTP_504_GATEWAY_TIMEOUT
            if exc.timed_out
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(
            status_code,
            detail={"message": str(exc), "upstream_status": exc.status_code},
        ) from exc


@router.get("", response_model=list[FlowInfoResponse])
def read_flows() -> list[FlowInfoResponse]:
    """List the registered flows with their data contracts."""
    return [FlowInfoResponse.from_flow(flow) for flow in list_flows()]


@router.post(
    "/summarize-meeting-key-points",
    response_model=SummarizeMeetingKeyPointsOutput,
)
def summarize_meeting_key_points(
    payload: SummarizeMeetingKeyPointsInput,
    runtime: FlowRuntime = Depends(get_runtime),
) -> BaseModel:
    return execute_flow(summarize_meeting_key_points_flow, payload, runtime)


@router.post(
    "/generate-minutes-of-meeting",
    response_model=GenerateMinutesOfMeetingOutput,
)
def generate_minutes_of_meeting(
    payload: GenerateMinutesOfMeetingInput,
    runtime: FlowRuntime = Depends(get_runtime),
) -> BaseModel:
    return execute_flow(generate_minutes_of_meeting_flow, payload, runtime)


@router.post("/extract-action-items", response_model=ExtractActionItemsOutput)
def extract_action_items(
    payload: ExtractActionItemsInput,
    runtime: FlowRuntime = Depends(get_runtime),
) -> BaseModel:
    return execute_flow(extract_action_items_flow, payload, runtime)


@router.post("/transcribe-video", response_model=TranscribeVideoOutput)
def transcribe_video(
    payload: TranscribeVideoInput,
    runtime: FlowRuntime = Depends(get_runtime),
) -> BaseModel:
    return execute_flow(transcribe_video_flow, payload, runtime)


@router.post("/{flow_name}")
def run_flow(
    flow_name: str,
    payload: dict[str, Any] = Body(...),
    runtime: FlowRuntime = Depends(get_runtime),
) -> dict[str, Any]:
    """Run any registered flow by name with a JSON body."""
    try:
        flow = get_flow(flow_name)
    except KeyError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "flow not found") from exc

    output = execute_flow(flow, payload, runtime)
    return output.model_dump(by_alias=True)


__all__ = ["execute_flow", "get_runtime", "router"]
