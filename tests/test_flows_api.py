from __future__ import annotations

import base64
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from minutesai_backend.app import create_app
from minutesai_backend.flows import FlowRuntime, set_flow_runtime
from minutesai_backend.llm import (
    LLMRequestError,
    OpenAIChatConfig,
    OpenAITranscriptionConfig,
)
from minutesai_backend.settings import set_settings


class _StubModel:
    """Answers chat requests by output schema name and records prompts."""

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.prompts: list[str] = []
        self.error: Exception | None = None

    def __call__(self, *, prompt, schema_name, schema, config):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.responses[schema_name]


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture()
def stub_model() -> Iterator[_StubModel]:
    model = _StubModel()
    set_flow_runtime(
        FlowRuntime(
            chat_config=OpenAIChatConfig(api_key="test-key", max_attempts=1),
            transcription_config=OpenAITranscriptionConfig(api_key="test-key"),
            max_media_bytes=1024,
            chat_request_fn=model,
            transcription_request_fn=lambda **_: {"text": "Hello from the recording."},
            sleep=lambda _: None,
        )
    )
    yield model
    set_flow_runtime(None)


def _create_test_client() -> AsyncClient:
    app = create_app()
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://testserver")


@pytest.mark.asyncio
async def test_list_flows_returns_contracts(stub_model: _StubModel) -> None:
    async with _create_test_client() as client:
        response = await client.get("/api/flows")

    assert response.status_code == 200
    flows = {entry["name"]: entry for entry in response.json()}
    assert set(flows) == {
        "extractActionItemsFlow",
        "generateMinutesOfMeetingFlow",
        "summarizeMeetingKeyPointsFlow",
        "transcribeVideoFlow",
    }
    minutes = flows["generateMinutesOfMeetingFlow"]
    assert "previousMom" in minutes["input_schema"]["properties"]
    assert "minutesOfMeeting" in minutes["output_schema"]["properties"]


@pytest.mark.asyncio
async def test_summarize_endpoint_returns_summary(stub_model: _StubModel) -> None:
    stub_model.responses["SummarizeMeetingKeyPointsOutput"] = {
        "summary": "Launch date agreed."
    }

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/summarize-meeting-key-points",
            json={"transcription": "We agreed on the launch date.", "previousMom": ""},
        )

    assert response.status_code == 200
    assert response.json() == {"summary": "Launch date agreed."}
    assert "Previous MoM" not in stub_model.prompts[0]


@pytest.mark.asyncio
async def test_minutes_endpoint_serializes_camel_case(stub_model: _StubModel) -> None:
    stub_model.responses["GenerateMinutesOfMeetingOutput"] = {
        "minutes_of_meeting": "Minutes body",
        "action_items": "- Maya: blog draft (Friday)",
        "summary": "Blog and campaign updates.",
    }

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/generate-minutes-of-meeting",
            json={"transcription": "Maya: I will finish the blog draft by Friday."},
        )

    assert response.status_code == 200
    assert response.json() == {
        "minutesOfMeeting": "Minutes body",
        "actionItems": "- Maya: blog draft (Friday)",
        "summary": "Blog and campaign updates.",
    }


@pytest.mark.asyncio
async def test_action_items_endpoint(stub_model: _StubModel) -> None:
    stub_model.responses["ExtractActionItemsOutput"] = {
        "actionItems": [{"task": "Finish blog draft", "owner": "Maya", "deadline": "Friday"}]
    }

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/extract-action-items",
            json={"transcript": "Maya: I will finish the blog draft by Friday."},
        )

    assert response.status_code == 200
    assert response.json()["actionItems"][0]["owner"] == "Maya"


@pytest.mark.asyncio
async def test_transcribe_endpoint(stub_model: _StubModel) -> None:
    encoded = base64.b64encode(b"clip").decode("ascii")

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/transcribe-video",
            json={"videoDataUri": f"data:video/webm;base64,{encoded}"},
        )

    assert response.status_code == 200
    assert response.json() == {"transcript": "Hello from the recording."}


@pytest.mark.asyncio
async def test_typed_endpoint_rejects_blank_transcript(stub_model: _StubModel) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/extract-action-items", json={"transcript": "  "}
        )

    assert response.status_code == 422
    assert stub_model.prompts == []


@pytest.mark.asyncio
async def test_generic_endpoint_runs_flow_by_name(stub_model: _StubModel) -> None:
    stub_model.responses["SummarizeMeetingKeyPointsOutput"] = {"summary": "Short."}

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/summarizeMeetingKeyPointsFlow",
            json={"transcription": "A short meeting."},
        )

    assert response.status_code == 200
    assert response.json() == {"summary": "Short."}


@pytest.mark.asyncio
async def test_generic_endpoint_unknown_flow(stub_model: _StubModel) -> None:
    async with _create_test_client() as client:
        response = await client.post("/api/flows/translateFlow", json={"text": "x"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_generic_endpoint_input_violation(
    stub_model: _StubModel, recwarn
) -> None:
    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/extractActionItemsFlow", json={"transcription": "wrong key"}
        )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["errors"][0]["loc"] == ["transcript"]
    assert not [w for w in recwarn if "HTTP_422" in str(w.message)]


@pytest.mark.asyncio
async def test_output_violation_maps_to_bad_gateway(stub_model: _StubModel) -> None:
    stub_model.responses["ExtractActionItemsOutput"] = {"actionItems": "not-a-list"}

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/extract-action-items", json={"transcript": "Some transcript."}
        )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_remote_failure_maps_to_bad_gateway(stub_model: _StubModel) -> None:
    stub_model.error = LLMRequestError("quota exceeded", status_code=429)

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/summarize-meeting-key-points",
            json={"transcription": "Some transcript."},
        )

    assert response.status_code == 502
    assert response.json()["detail"]["upstream_status"] == 429


@pytest.mark.asyncio
async def test_remote_timeout_maps_to_gateway_timeout(stub_model: _StubModel) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    stub_model.error = httpx.ReadTimeout("timed out", request=request)

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/summarize-meeting-key-points",
            json={"transcription": "Some transcript."},
        )

    assert response.status_code == 504


@pytest.mark.asyncio
async def test_missing_api_key_returns_service_unavailable(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    set_flow_runtime(None)

    async with _create_test_client() as client:
        response = await client.post(
            "/api/flows/summarize-meeting-key-points",
            json={"transcription": "Some transcript."},
        )

    assert response.status_code == 503
    assert "OPENAI_API_KEY" in response.json()["detail"]
