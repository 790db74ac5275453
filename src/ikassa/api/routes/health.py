"""Health and readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

router = APIRouter()

__all__ = ["router"]


@router.get("/health", summary="Liveness probe", operation_id="health")
async def health() -> dict[str, str]:
    """Liveness: app process is running."""
    return {"status": "ok"}


@router.get("/ready", summary="Readiness probe", operation_id="ready")
async def ready(request: Request) -> JSONResponse:
    """Readiness: a checkout is configured and able to sign.

    Returns 200 when configured, 503 otherwise.
    """
    checkout = getattr(request.app.state, "checkout", None)
    configured = checkout is not None
    checks = {"checkout": configured}
    if configured:
        checks["algorithm"] = checkout.signer.algorithm.value  # type: ignore[assignment]

    return JSONResponse(
        status_code=200 if configured else 503,
        content={"ready": configured, "checks": checks},
    )
