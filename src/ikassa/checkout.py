"""Checkout facade: builds payment forms and parses notifications for one checkout."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ikassa.errors import ConfigurationError, VerificationError
from ikassa.notifications import collapse_form, decode_notification
from ikassa.payments import new_payment
from ikassa.signing.digest import HashAlgorithm, Signer

if TYPE_CHECKING:
    from ikassa.notifications import FormInput, Notification
    from ikassa.payments import Payment, PaymentParameters

__all__ = ["Checkout", "CheckoutConfig"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutConfig:
    """Checkout identity and signing keys. Validated on construction."""

    checkout_id: str
    sign_key: str = field(repr=False)
    sign_test_key: str = field(repr=False)
    sign_algorithm: HashAlgorithm | str | None = HashAlgorithm.SHA256

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("checkout_id", "sign_key", "sign_test_key")
            if not getattr(self, name)
        ]
        if missing:
            msg = f"checkout configuration incomplete: {', '.join(missing)} not set"
            raise ConfigurationError(msg)
        object.__setattr__(self, "sign_algorithm", HashAlgorithm.parse(self.sign_algorithm))


class Checkout:
    """Entry point for merchant code. Stateless apart from its configuration."""

    def __init__(self, config: CheckoutConfig) -> None:
        self.config = config
        self.signer = Signer(
            checkout_id=config.checkout_id,
            live_secret=config.sign_key,
            test_secret=config.sign_test_key,
            algorithm=config.sign_algorithm,  # type: ignore[arg-type]
        )

    def new_payment(self, parameters: PaymentParameters) -> Payment:
        """Flatten and sign ``parameters`` into a form ready for the gateway."""
        return new_payment(self.signer, parameters)

    def parse_notification(self, form: FormInput) -> Notification:
        """Verify and decode a notification form.

        Raises:
            MissingSignature, UnknownCheckout, BadSignature: verification failed.
            DecodeError: signature valid but a known field is malformed.
        """
        fields = collapse_form(form)
        try:
            verification = self.signer.verify(fields)
        except VerificationError as exc:
            logger.warning("Notification rejected: %s", exc)
            raise
        notification = decode_notification(verification)
        logger.info(
            "Notification accepted: payment_id=%s state=%s test=%s",
            fields.get("ik_pm_no", ""),
            notification.invoice_state,
            notification.is_test,
        )
        return notification
