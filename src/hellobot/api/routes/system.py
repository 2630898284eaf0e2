from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["system"])


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    """Plain-text health check polled by the status tool."""
    return "OK"


@router.get("/healthz")
def healthz() -> dict[str, str]:
    """Liveness probe used by orchestrators."""
    return {"status": "ok"}
