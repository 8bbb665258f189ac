from collections.abc import Iterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from minutesai_backend.app import create_app
from minutesai_backend.flows import FlowRuntime, set_flow_runtime
from minutesai_backend.llm import OpenAIChatConfig, OpenAITranscriptionConfig
from minutesai_backend.settings import Settings, set_settings


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Ensure settings cache is cleared before and after each test."""
    set_settings(None)
    yield
    set_settings(None)


class _StubModels:
    def __init__(self) -> None:
        self.transcriptions: list[dict[str, Any]] = []
        self.prompts: list[str] = []
        self.transcript = "Maya: I will finish the blog draft by Friday."

    def transcribe(self, *, media, config, prompt):
        self.transcriptions.append(
            {"mime_type": media.mime_type, "data": media.data, "prompt": prompt}
        )
        return {"text": self.transcript}

    def chat(self, *, prompt, schema_name, schema, config):
        self.prompts.append(prompt)
        return {
            "minutesOfMeeting": "Blog draft discussed.",
            "actionItems": "- Maya: finish blog draft (Friday)",
            "summary": "Blog work assigned.",
        }


@pytest.fixture(autouse=True)
def stub_models() -> Iterator[_StubModels]:
    """Provide stubbed model calls so handlers never reach the network."""
    models = _StubModels()
    set_flow_runtime(
        FlowRuntime(
            chat_config=OpenAIChatConfig(api_key="test-key"),
            transcription_config=OpenAITranscriptionConfig(api_key="test-key"),
            chat_request_fn=models.chat,
            transcription_request_fn=models.transcribe,
            sleep=lambda _: None,
        )
    )
    yield models
    set_flow_runtime(None)


def _create_test_client() -> AsyncClient:
    app = create_app()
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://testserver")


@pytest.mark.asyncio
async def test_upload_video_returns_transcript(stub_models: _StubModels) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("meeting.mp4", b"sample-bytes", "video/mp4")},
        )

    assert response.status_code == 200
    assert response.json() == {
        "transcript": "Maya: I will finish the blog draft by Friday.",
        "minutes": None,
    }
    call = stub_models.transcriptions[0]
    assert call["mime_type"] == "video/mp4"
    assert call["data"] == b"sample-bytes"
    assert stub_models.prompts == []


@pytest.mark.asyncio
async def test_upload_octet_stream_uses_filename(stub_models: _StubModels) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={
                "file": ("recording.mp3", b"binary-data", "application/octet-stream")
            },
        )

    assert response.status_code == 200
    assert stub_models.transcriptions[0]["mime_type"] == "audio/mpeg"


@pytest.mark.asyncio
async def test_upload_rejects_non_media_content() -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

    assert response.status_code == 415
    assert (
        response.json()["detail"]
        == "Unsupported media type. Please upload a video or audio file."
    )


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_container() -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("recording.mov", b"mov-bytes", "video/quicktime")},
        )

    assert response.status_code == 415


@pytest.mark.asyncio
async def test_upload_rejects_empty_file(stub_models: _StubModels) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("meeting.webm", b"", "video/webm")},
        )

    assert response.status_code == 400
    assert stub_models.transcriptions == []


@pytest.mark.asyncio
async def test_upload_enforces_size_limit(
    stub_models: _StubModels, recwarn
) -> None:
    set_settings(Settings(openai_api_key="test-key", max_media_bytes=8))

    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("recording.wav", b"0123456789", "audio/wav")},
        )

    assert response.status_code == 413
    assert stub_models.transcriptions == []
    assert not [w for w in recwarn if "HTTP_413" in str(w.message)]


@pytest.mark.asyncio
async def test_upload_can_generate_minutes(stub_models: _StubModels) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("recording.m4a", b"m4a-bytes", "audio/x-m4a")},
            data={"generate_minutes": "true", "previous_mom": "Blog kickoff held."},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["minutes"] == {
        "minutesOfMeeting": "Blog draft discussed.",
        "actionItems": "- Maya: finish blog draft (Friday)",
        "summary": "Blog work assigned.",
    }
    prompt = stub_models.prompts[0]
    assert "Maya: I will finish the blog draft by Friday." in prompt
    assert "Previous Minutes of Meeting: Blog kickoff held." in prompt


@pytest.mark.asyncio
async def test_silent_recording_skips_minutes(stub_models: _StubModels) -> None:
    stub_models.transcript = ""

    async with _create_test_client() as client:
        response = await client.post(
            "/api/videos/transcriptions",
            files={"file": ("meeting.mp4", b"silence", "video/mp4")},
            data={"generate_minutes": "true"},
        )

    assert response.status_code == 200
    assert response.json() == {"transcript": "", "minutes": None}
    assert stub_models.prompts == []
