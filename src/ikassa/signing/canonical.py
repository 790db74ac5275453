"""Canonical byte payload for gateway signatures."""

from __future__ import annotations

from collections.abc import Collection, Mapping

__all__ = ["canonicalise"]

_DELIMITER = ":"


def canonicalise(
    fields: Mapping[str, str],
    secret: str | None = None,
    exclude_keys: Collection[str] | None = None,
) -> bytes:
    """Produce the canonical payload: values sorted by key, each followed by a colon.

    Args:
        fields: The field set to serialise. Key names themselves are not emitted.
        secret: Appended raw after the last delimiter, with no trailing colon.
        exclude_keys: Keys to remove before serialisation (e.g. {"ik_sign"}).

    Returns:
        UTF-8 bytes, identical for any insertion order of the same fields.

    Values are not escaped; a colon inside a value is indistinguishable
    from a field boundary. The gateway computes signatures the same way.
    """
    parts = [
        fields[key] + _DELIMITER
        for key in sorted(fields)
        if not exclude_keys or key not in exclude_keys
    ]
    if secret is not None:
        parts.append(secret)
    return "".join(parts).encode("utf-8")
