"""Tests for the Interkassa notification webhook."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ikassa.checkout import Checkout

SignFn = Callable[..., dict[str, str]]


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio()
async def test_post_accepted(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    async with _client(app) as c:
        resp = await c.post("/notifications", data=sign(checkout.signer, notification_fields))

    assert resp.status_code == 200
    assert resp.json() == {
        "accepted": True,
        "payment_id": "ID_4233",
        "invoice_state": "success",
        "test": False,
    }


@pytest.mark.anyio()
async def test_get_accepted(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    async with _client(app) as c:
        resp = await c.get("/notifications", params=sign(checkout.signer, notification_fields))

    assert resp.status_code == 200
    assert resp.json()["accepted"] is True


@pytest.mark.anyio()
async def test_signature_with_plus_and_slash_survives_form_encoding(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    # Try payment ids until the base64 signature contains a character that
    # needs percent-encoding.
    for n in range(64):
        notification_fields["ik_pm_no"] = f"ID_{n}"
        payload = sign(checkout.signer, notification_fields)
        if "+" in payload["ik_sign"] or "/" in payload["ik_sign"]:
            break
    async with _client(app) as c:
        resp = await c.post("/notifications", data=payload)

    assert resp.status_code == 200


@pytest.mark.anyio()
async def test_test_payment_flagged(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    notification_fields["ik_pw_via"] = "test_interkassa_test_xts"
    async with _client(app) as c:
        resp = await c.post("/notifications", data=sign(checkout.signer, notification_fields, test=True))

    assert resp.status_code == 200
    assert resp.json()["test"] is True


@pytest.mark.anyio()
async def test_missing_signature_rejected(app: FastAPI, notification_fields: dict[str, str]) -> None:
    async with _client(app) as c:
        resp = await c.post("/notifications", data=notification_fields)

    assert resp.status_code == 401
    assert resp.json()["error_code"] == "SIGNATURE_INVALID"


@pytest.mark.anyio()
async def test_bad_signature_rejected_without_leaking(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    payload = sign(checkout.signer, notification_fields)
    payload["ik_am"] = "1000.00"
    async with _client(app) as c:
        resp = await c.post("/notifications", data=payload)

    assert resp.status_code == 401
    body = resp.json()
    assert body["error_code"] == "SIGNATURE_INVALID"
    assert checkout.signer.sign(notification_fields) not in resp.text
    assert checkout.config.sign_key not in resp.text


@pytest.mark.anyio()
async def test_unknown_checkout_rejected(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    notification_fields["ik_co_id"] = "another-checkout"
    async with _client(app) as c:
        resp = await c.post("/notifications", data=sign(checkout.signer, notification_fields))

    assert resp.status_code == 403
    assert resp.json()["error_code"] == "UNKNOWN_CHECKOUT"


@pytest.mark.anyio()
async def test_malformed_timestamp_rejected(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    notification_fields["ik_inv_crt"] = "2026-03-15T09:00:00Z"
    async with _client(app) as c:
        resp = await c.post("/notifications", data=sign(checkout.signer, notification_fields))

    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVALID_REQUEST"


@pytest.mark.anyio()
async def test_correlation_id_echoed(
    app: FastAPI, checkout: Checkout, sign: SignFn, notification_fields: dict[str, str]
) -> None:
    async with _client(app) as c:
        resp = await c.post(
            "/notifications",
            data=sign(checkout.signer, notification_fields),
            headers={"x-correlation-id": "cid-123"},
        )

    assert resp.headers["x-correlation-id"] == "cid-123"
