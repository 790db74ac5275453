"""Error taxonomy for payment signing and notification handling."""

from __future__ import annotations

__all__ = [
    "BadSignature",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "IkassaError",
    "MissingSignature",
    "UnknownCheckout",
    "VerificationError",
]


class IkassaError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(IkassaError):
    """Invalid checkout configuration. Raised at startup, never per call."""


class VerificationError(IkassaError):
    """An inbound notification failed verification."""


class MissingSignature(VerificationError):
    def __init__(self) -> None:
        super().__init__("notification carries no signature field")


class UnknownCheckout(VerificationError):
    """The notification was issued for a checkout other than ours."""

    def __init__(self, received: str) -> None:
        self.received = received
        super().__init__(f"unknown checkout id: {received!r}")


class BadSignature(VerificationError):
    """Claimed signature does not match the recomputed one.

    Both values are kept for diagnostics. Neither reveals the secret.
    """

    def __init__(self, claimed: str, expected: str) -> None:
        self.claimed = claimed
        self.expected = expected
        super().__init__(f"bad signature: {claimed} != {expected}")


class DecodeError(IkassaError, ValueError):
    """A verified field set could not be hydrated into a notification."""


class EncodeError(IkassaError, ValueError):
    """A payment record could not be flattened into form fields."""
