"""Optional values and exact string rendering of gateway field values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final, Generic, TypeVar, Union

from ikassa.errors import DecodeError, EncodeError
from ikassa.protocol import TIME_FORMAT

__all__ = [
    "ABSENT",
    "Absent",
    "Opt",
    "Present",
    "encode_value",
    "format_time",
    "optional_bool",
    "optional_int32",
    "optional_string",
    "optional_time",
    "parse_time",
]

T = TypeVar("T")

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_TIME_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", re.ASCII)


class Absent:
    """Marker for an optional field that is not set at all.

    Distinct from ``Present("")``: an absent field never reaches the form.
    """

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Final = Absent()


@dataclass(frozen=True)
class Present(Generic[T]):
    """An optional field that carries a value (possibly an empty string)."""

    value: T


Opt = Union[Present[T], Absent]


def optional_string(value: str) -> Present[str]:
    return Present(value)


def optional_int32(value: int) -> Present[int]:
    if not _INT32_MIN <= value <= _INT32_MAX:
        msg = f"{value} does not fit in a signed 32-bit integer"
        raise ValueError(msg)
    return Present(value)


def optional_bool(value: bool) -> Present[bool]:
    return Present(value)


def optional_time(value: datetime) -> Present[datetime]:
    return Present(value)


def format_time(value: datetime) -> str:
    """Render a datetime in the gateway format. tzinfo and microseconds are dropped."""
    return value.strftime(TIME_FORMAT)


def parse_time(raw: str) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM:SS``; any other shape is a DecodeError."""
    msg = f"invalid gateway time {raw!r}"
    # strptime alone accepts single-digit and space-padded parts
    if not _TIME_SHAPE.fullmatch(raw):
        raise DecodeError(msg)
    try:
        return datetime.strptime(raw, TIME_FORMAT)
    except ValueError as exc:
        raise DecodeError(msg) from exc


def encode_value(value: Any) -> str:
    """Render a single field value exactly as the gateway expects it."""
    # bool before int: bool is an int subclass
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, datetime):
        return format_time(value)
    msg = f"unsupported field value type: {type(value).__name__}"
    raise EncodeError(msg)
