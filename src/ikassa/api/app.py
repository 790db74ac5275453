"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from ikassa.api.routes import health, notifications, payments
from ikassa.checkout import Checkout
from ikassa.errors import BadSignature, DecodeError, EncodeError, MissingSignature, UnknownCheckout
from ikassa.logging import configure_logging, new_correlation_id, set_correlation_id
from ikassa.settings import Settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

__all__ = ["create_app"]

logger = logging.getLogger(__name__)

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    401: "SIGNATURE_INVALID",
    403: "UNKNOWN_CHECKOUT",
}


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Inject correlation_id and report request duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        header_cid = request.headers.get("x-correlation-id")
        cid = set_correlation_id(header_cid) if header_cid else new_correlation_id()
        request.state.request_id = cid

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        response.headers["x-correlation-id"] = cid
        response.headers["x-request-duration-ms"] = f"{duration * 1000:.1f}"
        return response


def _resolve_request_id(request: Request) -> str:
    state_request_id = getattr(request.state, "request_id", "")
    if state_request_id:
        return state_request_id
    header_request_id = request.headers.get("x-correlation-id", "")
    if header_request_id:
        request.state.request_id = header_request_id
        return header_request_id
    generated = new_correlation_id()
    request.state.request_id = generated
    return generated


def _error_payload(error_code: str, message: str, request_id: str, *, details: Any = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
        "request_id": request_id,
    }
    if details is not None:
        payload["details"] = details
    return payload


def _error_response(request: Request, status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=_error_payload(error_code, message, _resolve_request_id(request)),
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status_code = exc.status_code

    if status_code in _ERROR_CODE_BY_STATUS:
        error_code = _ERROR_CODE_BY_STATUS[status_code]
    elif 400 <= status_code < 500:
        error_code = "INVALID_REQUEST"
    else:
        error_code = "INTERNAL_ERROR"

    if isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = "Request failed"

    return _error_response(request, status_code, error_code, message)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = _resolve_request_id(request)
    return JSONResponse(
        status_code=422,
        content=_error_payload(
            "INVALID_REQUEST",
            "Request validation failed",
            request_id,
            details=exc.errors(),
        ),
    )


async def _signature_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Claimed/expected signatures stay in the log, not in the response.
    return _error_response(request, 401, "SIGNATURE_INVALID", "Invalid signature")


async def _unknown_checkout_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, 403, "UNKNOWN_CHECKOUT", "Notification is not for this checkout")


async def _value_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, 400, "INVALID_REQUEST", str(exc))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _resolve_request_id(request)
    logger.exception("Unhandled application exception", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_payload("INTERNAL_ERROR", "Internal server error", request_id),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = Settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)

    # Missing checkout id or keys abort startup here.
    app.state.settings = settings
    app.state.checkout = Checkout(settings.checkout_config())
    logger.info("Checkout %s ready", settings.checkout_id)

    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Interkassa Checkout",
        version="0.1.0",
        description="Signed payment forms and verified payment notifications for Interkassa SCI.",
        lifespan=lifespan,
    )
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(MissingSignature, _signature_exception_handler)
    app.add_exception_handler(BadSignature, _signature_exception_handler)
    app.add_exception_handler(UnknownCheckout, _unknown_checkout_handler)
    app.add_exception_handler(DecodeError, _value_exception_handler)
    app.add_exception_handler(EncodeError, _value_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
    app.add_middleware(ObservabilityMiddleware)
    app.include_router(health.router, tags=["health"])
    app.include_router(payments.router, tags=["payments"])
    app.include_router(notifications.router, tags=["notifications"])
    return app


app = create_app()
