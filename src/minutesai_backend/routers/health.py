# Health-check endpoints.

from fastapi import APIRouter, status

from ..flows import list_flows

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def read_health() -> dict[str, str]:
    """Readiness probe; does not require the model API to be configured."""
    return {"status": "ok"}


@router.get("/flows", status_code=status.HTTP_200_OK)
async def read_registered_flows() -> dict[str, list[str]]:
    """Names of the flows this instance serves."""
    return {"flows": [flow.name for flow in list_flows()]}
