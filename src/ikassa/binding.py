"""Explicit record <-> field-set binding driven by per-record field tables."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from ikassa.errors import DecodeError, EncodeError
from ikassa.values import ABSENT, Absent, Present, encode_value, parse_time

__all__ = ["FieldSpec", "from_field_map", "to_field_map"]

Kind = Literal["str", "int", "bool", "time"]

_INT_SHAPE = re.compile(r"-?\d+", re.ASCII)


@dataclass(frozen=True)
class FieldSpec:
    """One record attribute and the wire field it maps to.

    Optional specs hold ``Present`` / ``ABSENT`` on the record side.
    """

    attr: str
    wire: str
    kind: Kind = "str"
    required: bool = False


def to_field_map(record: Any, table: Sequence[FieldSpec]) -> dict[str, str]:
    """Flatten ``record`` into wire fields, omitting absent optionals."""
    fields: dict[str, str] = {}
    for spec in table:
        value = getattr(record, spec.attr)
        if not spec.required:
            if isinstance(value, Absent):
                continue
            if not isinstance(value, Present):
                msg = f"{spec.attr}: optional field must be Present(...) or ABSENT, got {type(value).__name__}"
                raise EncodeError(msg)
            value = value.value
        fields[spec.wire] = encode_value(value)
    return fields


def _decode(spec: FieldSpec, raw: str) -> Any:
    if spec.kind == "str":
        return raw
    if spec.kind == "time":
        return parse_time(raw)
    if spec.kind == "int":
        if not _INT_SHAPE.fullmatch(raw):
            msg = f"{spec.wire}: invalid integer {raw!r}"
            raise DecodeError(msg)
        return int(raw)
    if raw in ("true", "false"):
        return raw == "true"
    msg = f"{spec.wire}: invalid boolean {raw!r}"
    raise DecodeError(msg)


def from_field_map(fields: Mapping[str, str], table: Sequence[FieldSpec]) -> dict[str, Any]:
    """Hydrate record attributes from wire fields. Unknown wire fields are ignored.

    Missing required string fields decode to ``""``; missing optionals to ``ABSENT``.
    """
    values: dict[str, Any] = {}
    for spec in table:
        if spec.wire not in fields:
            if spec.required:
                if spec.kind != "str":
                    msg = f"missing required field {spec.wire}"
                    raise DecodeError(msg)
                values[spec.attr] = ""
            else:
                values[spec.attr] = ABSENT
            continue
        decoded = _decode(spec, fields[spec.wire])
        values[spec.attr] = decoded if spec.required else Present(decoded)
    return values
