import pytest
from httpx import ASGITransport, AsyncClient

from minutesai_backend.app import create_app


@pytest.mark.asyncio
async def test_health_endpoint_returns_ok(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    app = create_app()
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_flows_lists_registered_flows() -> None:
    app = create_app()
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/health/flows")

    assert response.status_code == 200
    assert response.json() == {
        "flows": [
            "extractActionItemsFlow",
            "generateMinutesOfMeetingFlow",
            "summarizeMeetingKeyPointsFlow",
            "transcribeVideoFlow",
        ]
    }
