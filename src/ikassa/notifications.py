"""Payment notifications: form collapsing and decoding of verified field sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Union

from ikassa.binding import FieldSpec, from_field_map
from ikassa.protocol import ADDITIONAL_FIELD_PREFIX
from ikassa.values import ABSENT, Opt

if TYPE_CHECKING:
    from datetime import datetime

    from ikassa.signing.digest import Verification

__all__ = [
    "NOTIFICATION_FIELDS",
    "Notification",
    "collapse_form",
    "decode_notification",
    "extract_additional_fields",
]

logger = logging.getLogger(__name__)

FormInput = Union[Mapping[str, Sequence[str]], Iterable[tuple[str, str]]]


@dataclass(frozen=True)
class Notification:
    """Verified payment notification. Only built after a successful signature check.

    ``fields`` and ``additional_fields`` are read-only views over private copies.
    """

    checkout_id: str
    amount: str
    currency: str
    action: str
    invoice_state: str
    payment_id: Opt[str] = ABSENT
    description: Opt[str] = ABSENT
    pay_way_via: Opt[str] = ABSENT
    invoice_id: Opt[str] = ABSENT
    checkout_purse_id: Opt[str] = ABSENT
    transaction_id: Opt[str] = ABSENT
    invoice_created_at: Opt[datetime] = ABSENT
    invoice_processed_at: Opt[datetime] = ABSENT
    pay_system_price: Opt[str] = ABSENT
    checkout_refund: Opt[str] = ABSENT
    payer_contact: Opt[str] = ABSENT
    card_mask: Opt[str] = ABSENT
    card_token: Opt[str] = ABSENT

    additional_fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    signature: str = ""
    is_test: bool = False
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), repr=False)


NOTIFICATION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("checkout_id", "ik_co_id", required=True),
    FieldSpec("amount", "ik_am", required=True),
    FieldSpec("currency", "ik_cur", required=True),
    FieldSpec("action", "ik_act", required=True),
    FieldSpec("invoice_state", "ik_inv_st", required=True),
    FieldSpec("payment_id", "ik_pm_no"),
    FieldSpec("description", "ik_desc"),
    FieldSpec("pay_way_via", "ik_pw_via"),
    FieldSpec("invoice_id", "ik_inv_id"),
    FieldSpec("checkout_purse_id", "ik_co_prs_id"),
    FieldSpec("transaction_id", "ik_trn_id"),
    FieldSpec("invoice_created_at", "ik_inv_crt", "time"),
    FieldSpec("invoice_processed_at", "ik_inv_prc", "time"),
    FieldSpec("pay_system_price", "ik_ps_price"),
    FieldSpec("checkout_refund", "ik_co_rfn"),
    FieldSpec("payer_contact", "ik_cli"),
    FieldSpec("card_mask", "ik_p_card_mask"),
    FieldSpec("card_token", "ik_p_card_token"),
)


def collapse_form(form: FormInput) -> dict[str, str]:
    """Reduce a multi-valued form to a field set.

    Accepts ``{name: [values]}`` or ``(name, value)`` pairs. Fields that
    carry more than one value are skipped, not treated as an error.
    """
    grouped: dict[str, list[str]] = {}
    if isinstance(form, Mapping):
        for key, values in form.items():
            grouped.setdefault(key, []).extend([values] if isinstance(values, str) else values)
    else:
        for key, value in form:
            grouped.setdefault(key, []).append(value)

    fields: dict[str, str] = {}
    for key, values in grouped.items():
        if len(values) != 1:
            logger.debug("Skipping form field %s with %d values", key, len(values))
            continue
        fields[key] = values[0]
    return fields


def extract_additional_fields(fields: Mapping[str, str]) -> dict[str, str]:
    """Strip ``ik_x_`` from prefixed keys. Colliding names resolve in sorted key order."""
    additional: dict[str, str] = {}
    for key in sorted(fields):
        if key.startswith(ADDITIONAL_FIELD_PREFIX) and len(key) > len(ADDITIONAL_FIELD_PREFIX):
            additional[key[len(ADDITIONAL_FIELD_PREFIX) :]] = fields[key]
    return additional


def decode_notification(verification: Verification) -> Notification:
    """Hydrate a Notification from a verified field set.

    Raises:
        DecodeError: a known field has a malformed value (e.g. a timestamp).
    """
    values = from_field_map(verification.fields, NOTIFICATION_FIELDS)
    return Notification(
        **values,
        additional_fields=MappingProxyType(extract_additional_fields(verification.fields)),
        signature=verification.signature,
        is_test=verification.is_test,
        fields=MappingProxyType(dict(verification.fields)),
    )
