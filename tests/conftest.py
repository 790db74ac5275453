"""Shared fixtures for unit and contract tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi import FastAPI

from ikassa.api.app import create_app
from ikassa.checkout import Checkout, CheckoutConfig
from ikassa.protocol import SIGNATURE_FIELD
from ikassa.settings import Settings
from ikassa.signing.digest import HashAlgorithm, Signer

CHECKOUT_ID = "5f1a2b3c4d5e6f7a8b9c0d1e"
SIGN_KEY = "live-key-do-not-use-in-production"
SIGN_TEST_KEY = "test-key-do-not-use-in-production"


def _signed(signer: Signer, fields: dict[str, str], *, test: bool = False) -> dict[str, str]:
    """Return ``fields`` plus the ``ik_sign`` the gateway would attach."""
    return {**fields, SIGNATURE_FIELD: signer.sign(fields, test=test)}


@pytest.fixture()
def sign() -> Callable[..., dict[str, str]]:
    """Helper that attaches a valid signature to a field set."""
    return _signed


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def checkout_config() -> CheckoutConfig:
    return CheckoutConfig(
        checkout_id=CHECKOUT_ID,
        sign_key=SIGN_KEY,
        sign_test_key=SIGN_TEST_KEY,
        sign_algorithm=HashAlgorithm.SHA256,
    )


@pytest.fixture()
def checkout(checkout_config: CheckoutConfig) -> Checkout:
    return Checkout(checkout_config)


@pytest.fixture()
def signer(checkout: Checkout) -> Signer:
    return checkout.signer


@pytest.fixture()
def notification_fields() -> dict[str, str]:
    """Unsigned notification as the gateway sends it for a successful payment."""
    return {
        "ik_co_id": CHECKOUT_ID,
        "ik_co_prs_id": "307447812424",
        "ik_inv_id": "33416223",
        "ik_inv_st": "success",
        "ik_inv_crt": "2026-03-15 09:00:00",
        "ik_inv_prc": "2026-03-15 09:01:30",
        "ik_trn_id": "TRN-1",
        "ik_pm_no": "ID_4233",
        "ik_pw_via": "visa_cpaytrz_merchant_usd",
        "ik_am": "100.00",
        "ik_co_rfn": "97.0000",
        "ik_ps_price": "103.00",
        "ik_cur": "USD",
        "ik_desc": "Event Description",
        "ik_act": "process",
        "ik_x_user_id": "222",
    }


@pytest.fixture()
def app(checkout: Checkout) -> FastAPI:
    """App with an injected checkout; the lifespan (env settings) is not run."""
    a = create_app()
    a.state.settings = Settings(
        checkout_id=CHECKOUT_ID,
        sign_key=SIGN_KEY,
        sign_test_key=SIGN_TEST_KEY,
    )
    a.state.checkout = checkout
    return a


@pytest.fixture()
def payment_body() -> dict[str, Any]:
    return {
        "payment_id": "1",
        "amount": "100.0",
        "description": "sample description",
        "currency": "RUB",
        "payer_contact": "sample@sample.ru",
        "success_url": "http://localhost:5000/donation/success",
        "success_method": "GET",
        "additional_fields": {"userID": "222"},
    }
