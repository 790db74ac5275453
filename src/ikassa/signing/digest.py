"""Gateway signing and verification (md5 / sha256, base64 encoded)."""

from __future__ import annotations

import base64
import hashlib
import hmac as hmac_mod
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from ikassa.errors import BadSignature, MissingSignature, UnknownCheckout
from ikassa.protocol import CHECKOUT_ID_FIELD, PAY_WAY_VIA_FIELD, SIGNATURE_FIELD, TEST_PAY_WAY
from ikassa.signing.canonical import canonicalise

__all__ = ["HashAlgorithm", "Signer", "Verification"]

logger = logging.getLogger(__name__)

_EXCLUDE = frozenset({SIGNATURE_FIELD})


class HashAlgorithm(str, Enum):
    MD5 = "md5"
    SHA256 = "sha256"

    @classmethod
    def default(cls) -> HashAlgorithm:
        return cls.SHA256

    @classmethod
    def parse(cls, value: str | HashAlgorithm | None) -> HashAlgorithm:
        """Resolve a configured algorithm name.

        Unknown or empty names fall back to the default instead of failing,
        so a checkout configured with an unexpected value keeps signing.
        """
        if isinstance(value, HashAlgorithm):
            return value
        if not value:
            return cls.default()
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown sign algorithm %r, falling back to %s", value, cls.default().value)
            return cls.default()

    def digest(self, payload: bytes) -> bytes:
        if self is HashAlgorithm.MD5:
            return hashlib.md5(payload).digest()  # noqa: S324
        return hashlib.sha256(payload).digest()


@dataclass(frozen=True)
class Verification:
    """A field set whose signature checked out. The signature field is removed."""

    fields: dict[str, str]
    is_test: bool
    signature: str


@dataclass(frozen=True)
class Signer:
    """Signs outgoing field sets and verifies incoming ones for one checkout."""

    checkout_id: str
    live_secret: str = field(repr=False)
    test_secret: str = field(repr=False)
    algorithm: HashAlgorithm = HashAlgorithm.SHA256

    def _signature(self, fields: Mapping[str, str], secret: str) -> str:
        payload = canonicalise(fields, secret=secret, exclude_keys=_EXCLUDE)
        return base64.b64encode(self.algorithm.digest(payload)).decode("ascii")

    def sign(self, fields: Mapping[str, str], *, test: bool = False) -> str:
        """Return the base64 signature of ``fields`` under the live (or test) secret.

        An ``ik_sign`` already present in ``fields`` is not part of the payload.
        """
        return self._signature(fields, self.test_secret if test else self.live_secret)

    def verify(self, fields: Mapping[str, str]) -> Verification:
        """Check the ``ik_sign`` field of an inbound field set.

        Raises:
            MissingSignature: no signature field.
            UnknownCheckout: checkout id differs from ours (checked before the signature).
            BadSignature: recomputed signature differs from the claimed one.
        """
        if SIGNATURE_FIELD not in fields:
            raise MissingSignature
        remaining = {k: v for k, v in fields.items() if k != SIGNATURE_FIELD}
        claimed = fields[SIGNATURE_FIELD]

        received_checkout = remaining.get(CHECKOUT_ID_FIELD, "")
        if received_checkout != self.checkout_id:
            raise UnknownCheckout(received_checkout)

        is_test = remaining.get(PAY_WAY_VIA_FIELD) == TEST_PAY_WAY
        expected = self.sign(remaining, test=is_test)

        if not hmac_mod.compare_digest(claimed.encode("utf-8"), expected.encode("utf-8")):
            raise BadSignature(claimed, expected)

        return Verification(fields=remaining, is_test=is_test, signature=claimed)
