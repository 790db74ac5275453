"""Wire constants of the Interkassa SCI protocol."""

from __future__ import annotations

__all__ = [
    "ADDITIONAL_FIELD_PREFIX",
    "CHECKOUT_ID_FIELD",
    "FORM_METHOD",
    "PAY_WAY_VIA_FIELD",
    "SCI_URL",
    "SIGNATURE_FIELD",
    "TEST_PAY_WAY",
    "TIME_FORMAT",
]

SCI_URL = "https://sci.interkassa.com/"
FORM_METHOD = "POST"

SIGNATURE_FIELD = "ik_sign"
CHECKOUT_ID_FIELD = "ik_co_id"
PAY_WAY_VIA_FIELD = "ik_pw_via"
ADDITIONAL_FIELD_PREFIX = "ik_x_"

# Payment method the gateway reports for sandbox payments; signed with the test key.
TEST_PAY_WAY = "test_interkassa_test_xts"

# YYYY-MM-DD HH:MM:SS, no timezone, no fractional seconds
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
