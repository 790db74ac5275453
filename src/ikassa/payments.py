"""Payment-initiation requests: parameters, signed field set, SCI form."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ikassa.binding import FieldSpec, to_field_map
from ikassa.protocol import ADDITIONAL_FIELD_PREFIX, CHECKOUT_ID_FIELD, FORM_METHOD, SCI_URL, SIGNATURE_FIELD
from ikassa.values import ABSENT, Opt

if TYPE_CHECKING:
    from datetime import datetime

    from ikassa.signing.digest import Signer

__all__ = [
    "PAYMENT_FIELDS",
    "Form",
    "Payment",
    "PaymentParameters",
    "build_signed_field_set",
    "new_payment",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentParameters:
    """Business fields of a payment. Optional fields take ``Present(...)`` or ``ABSENT``.

    ``payment_id`` is stored in the gateway billing and links the payment to
    the merchant's order. ``lifetime`` (seconds) is ignored by the gateway
    when ``expired_at`` is set. ``pay_way_via`` only applies when ``action``
    is "process" or "payway".
    """

    payment_id: str
    amount: str
    description: str
    currency: Opt[str] = ABSENT
    expired_at: Opt[datetime] = ABSENT
    lifetime: Opt[int] = ABSENT
    payer_contact: Opt[str] = ABSENT
    pay_way_on: Opt[str] = ABSENT
    pay_way_off: Opt[str] = ABSENT
    pay_way_via: Opt[str] = ABSENT
    locale: Opt[str] = ABSENT
    interaction_url: Opt[str] = ABSENT
    interaction_method: Opt[str] = ABSENT
    success_url: Opt[str] = ABSENT
    success_method: Opt[str] = ABSENT
    pending_url: Opt[str] = ABSENT
    pending_method: Opt[str] = ABSENT
    fail_url: Opt[str] = ABSENT
    fail_method: Opt[str] = ABSENT
    action: Opt[str] = ABSENT
    interface: Opt[str] = ABSENT
    additional_fields: Mapping[str, str] = field(default_factory=dict)

    def to_field_map(self) -> dict[str, str]:
        return to_field_map(self, PAYMENT_FIELDS)


PAYMENT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("payment_id", "ik_pm_no", required=True),
    FieldSpec("amount", "ik_am", required=True),
    FieldSpec("description", "ik_desc", required=True),
    FieldSpec("currency", "ik_cur"),
    FieldSpec("expired_at", "ik_exp", "time"),
    FieldSpec("lifetime", "ik_ltm", "int"),
    FieldSpec("payer_contact", "ik_cli"),
    FieldSpec("pay_way_on", "ik_pw_on"),
    FieldSpec("pay_way_off", "ik_pw_off"),
    FieldSpec("pay_way_via", "ik_pw_via"),
    FieldSpec("locale", "ik_loc"),
    FieldSpec("interaction_url", "ik_ia_u"),
    FieldSpec("interaction_method", "ik_ia_m"),
    FieldSpec("success_url", "ik_suc_u"),
    FieldSpec("success_method", "ik_suc_m"),
    FieldSpec("pending_url", "ik_pnd_u"),
    FieldSpec("pending_method", "ik_pnd_m"),
    FieldSpec("fail_url", "ik_fal_u"),
    FieldSpec("fail_method", "ik_fal_m"),
    FieldSpec("action", "ik_act"),
    FieldSpec("interface", "ik_int"),
)


@dataclass(frozen=True)
class Form:
    """HTML form the customer's browser submits to the gateway."""

    method: str
    action: str
    fields: dict[str, str]

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "action": self.action, "fields": dict(self.fields)}


@dataclass(frozen=True)
class Payment:
    form: Form
    parameters: PaymentParameters


def build_signed_field_set(
    signer: Signer,
    business_fields: Mapping[str, str],
    additional_fields: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Assemble the outbound field set and attach its signature.

    Order: business fields, ``ik_x_``-prefixed additional fields, checkout id,
    then ``ik_sign`` computed over everything before it.
    """
    fields = dict(business_fields)
    for name, value in (additional_fields or {}).items():
        fields[ADDITIONAL_FIELD_PREFIX + name] = value
    fields[CHECKOUT_ID_FIELD] = signer.checkout_id
    fields[SIGNATURE_FIELD] = signer.sign(fields)
    return fields


def new_payment(signer: Signer, parameters: PaymentParameters) -> Payment:
    fields = build_signed_field_set(signer, parameters.to_field_map(), parameters.additional_fields)
    logger.info("Payment form built: payment_id=%s fields=%d", parameters.payment_id, len(fields))
    return Payment(
        form=Form(method=FORM_METHOD, action=SCI_URL, fields=fields),
        parameters=parameters,
    )
