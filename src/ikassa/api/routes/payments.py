"""Payment form endpoint: returns the signed SCI form for a payment."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from ikassa.payments import PaymentParameters
from ikassa.values import ABSENT, Present

if TYPE_CHECKING:
    from ikassa.checkout import Checkout

__all__ = ["router"]

router = APIRouter()


class PaymentRequest(BaseModel):
    """Null or missing optional fields are omitted from the form; "" is sent as is."""

    payment_id: str = Field(min_length=1)
    amount: str = Field(min_length=1)
    description: str
    currency: str | None = None
    expired_at: datetime | None = None
    lifetime: int | None = Field(default=None, ge=-(2**31), le=2**31 - 1)
    payer_contact: str | None = None
    pay_way_on: str | None = None
    pay_way_off: str | None = None
    pay_way_via: str | None = None
    locale: str | None = None
    interaction_url: str | None = None
    interaction_method: str | None = None
    success_url: str | None = None
    success_method: str | None = None
    pending_url: str | None = None
    pending_method: str | None = None
    fail_url: str | None = None
    fail_method: str | None = None
    action: str | None = None
    interface: str | None = None
    additional_fields: dict[str, str] = Field(default_factory=dict)

    def to_parameters(self) -> PaymentParameters:
        values: dict[str, Any] = {}
        for name, value in self.model_dump(exclude={"payment_id", "amount", "description", "additional_fields"}).items():
            values[name] = ABSENT if value is None else Present(value)
        return PaymentParameters(
            payment_id=self.payment_id,
            amount=self.amount,
            description=self.description,
            additional_fields=dict(self.additional_fields),
            **values,
        )


class FormResponse(BaseModel):
    method: str
    action: str
    fields: dict[str, str]


@router.post(
    "/payments",
    response_model=FormResponse,
    summary="Build a signed payment form",
    operation_id="create_payment_form",
)
async def create_payment_form(body: PaymentRequest, request: Request) -> dict[str, Any]:
    checkout: Checkout | None = getattr(request.app.state, "checkout", None)
    if checkout is None:
        raise HTTPException(status_code=503, detail="Checkout not configured")

    payment = checkout.new_payment(body.to_parameters())
    return payment.form.to_dict()
