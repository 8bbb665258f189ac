# Recording upload endpoints (video and audio).

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool

from ..flows import (
    FlowRuntime,
    GenerateMinutesOfMeetingOutput,
    generate_minutes_of_meeting_flow,
    transcribe_video_flow,
)
from ..flows.base import FlowModel
from ..media import encode_data_uri, is_supported_mime_type
from ..settings import Settings, get_settings
from .flows import execute_flow, get_runtime

router = APIRouter(prefix="/api/videos", tags=["videos"])

_ALLOWED_FALLBACK_CONTENT_TYPES = {"application/octet-stream"}
_CHUNK_SIZE = 1024 * 1024


class VideoTranscriptionResponse(FlowModel):
    transcript: str
    minutes: GenerateMinutesOfMeetingOutput | None = None


def _resolve_media_type(file: UploadFile) -> str | None:
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type.startswith(("video/", "audio/")):
        return content_type
    if not content_type or content_type in _ALLOWED_FALLBACK_CONTENT_TYPES:
        guessed, _ = mimetypes.guess_type(Path(file.filename or "").name)
        if guessed and guessed.startswith(("video/", "audio/")):
            return guessed
    return None


async def _read_upload(file: UploadFile, *, max_bytes: int) -> bytes:
    """Read the upload into memory, refusing files above ``max_bytes``."""
    buffer = bytearray()
    try:
        while chunk := await file.read(_CHUNK_SIZE):
            buffer.extend(chunk)
            if len(buffer) > max_bytes:
                raise HTTPException(
                    413,
                    detail=f"Uploaded file exceeds the {max_bytes} byte limit.",
                )
    finally:
        await file.close()
    return bytes(buffer)


async def transcribe_upload(
    file: UploadFile = File(...),
    generate_minutes: bool = Form(False),
    previous_mom: str | None = Form(None),
    settings: Settings = Depends(get_settings),
    runtime: FlowRuntime = Depends(get_runtime),
) -> VideoTranscriptionResponse:
    """Transcribe an uploaded recording, optionally generating minutes from it."""
    if not file.filename:
        await file.close()
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file must include a filename.",
        )

    media_type = _resolve_media_type(file)
    if media_type is None or not is_supported_mime_type(media_type):
        await file.close()
        raise HTTPException(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Unsupported media type. Please upload a video or audio file.",
        )

    data = await _read_upload(file, max_bytes=settings.max_media_bytes)
    if not data:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )

    transcription = await run_in_threadpool(
        execute_flow,
        transcribe_video_flow,
        {"videoDataUri": encode_data_uri(media_type, data)},
        runtime,
    )

    # Silent recordings transcribe to "", which has nothing to summarize.
    minutes = None
    if generate_minutes and transcription.transcript.strip():
        minutes = await run_in_threadpool(
            execute_flow,
            generate_minutes_of_meeting_flow,
            {
                "transcription": transcription.transcript,
                "previousMom": previous_mom,
            },
            runtime,
        )

    return VideoTranscriptionResponse(
        transcript=transcription.transcript,
        minutes=minutes,
    )


router.add_api_route(
    "/transcriptions",
    transcribe_upload,
    methods=["POST"],
    status_code=status.HTTP_200_OK,
    response_model=VideoTranscriptionResponse,
    summary="Upload a meeting recording for transcription",
)

__all__ = ["router"]
