"""Interkassa notification webhook: verifies and decodes payment notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request
from starlette.responses import JSONResponse

from ikassa.logging import get_logger
from ikassa.values import Present

if TYPE_CHECKING:
    from ikassa.checkout import Checkout

__all__ = ["router"]

log = get_logger(component="notifications")
router = APIRouter()


@router.api_route(
    "/notifications",
    methods=["GET", "POST"],
    summary="Interkassa payment notification",
    operation_id="payment_notification",
)
async def payment_notification(request: Request) -> JSONResponse:
    """Receive a payment notification.

    The gateway posts ``application/x-www-form-urlencoded`` fields, or sends
    them in the query string when configured for GET. Verification failures
    propagate to the app's exception handlers (401 / 403 / 400).
    """
    checkout: Checkout | None = getattr(request.app.state, "checkout", None)
    if checkout is None:
        raise HTTPException(status_code=503, detail="Checkout not configured")

    if request.method == "POST":
        form = await request.form()
        items = list(form.multi_items())
    else:
        items = list(request.query_params.multi_items())

    notification = checkout.parse_notification([(k, str(v)) for k, v in items])

    payment_id = notification.payment_id.value if isinstance(notification.payment_id, Present) else None
    log.info(
        "notification_accepted",
        payment_id=payment_id,
        invoice_state=notification.invoice_state,
        test=notification.is_test,
    )

    return JSONResponse(
        status_code=200,
        content={
            "accepted": True,
            "payment_id": payment_id,
            "invoice_state": notification.invoice_state,
            "test": notification.is_test,
        },
    )
