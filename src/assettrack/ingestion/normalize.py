"""Normalization helpers.

Centralizes parsing of loosely shaped webhook values.
Every helper returns ``None`` for "absent / unrepresentable" so callers can
fall back to the previous stored value or a default.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

TEnum = TypeVar("TEnum", bound=StrEnum)

_SLUG_RE = re.compile(r"[^a-z0-9]+")

# Threshold to distinguish epoch seconds from epoch milliseconds.
_MS_THRESHOLD = 1e11


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value in ("", "--"):
            return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    return text if text else None


def slugify(text: str) -> str:
    """Lower-case *text* and collapse every run outside ``[a-z0-9]`` into one hyphen.

    >>> slugify("Delivery Truck #1")
    'delivery-truck-1'
    """
    return _SLUG_RE.sub("-", text.strip().lower()).strip("-")


def derive_identifier(explicit_id: Any, name: Any) -> str | None:
    """Return a stable record identifier, or ``None`` if none can be derived.

    An explicit id that is non-empty after trimming is used verbatim.
    Otherwise a non-empty name is slugified. Different names that slugify
    to the same value map to the same record.
    """
    id_text = safe_str(explicit_id)
    if id_text is not None and id_text.strip():
        return id_text

    name_text = safe_str(name)
    if name_text is None or not name_text.strip():
        return None
    slug = slugify(name_text)
    return slug or None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_percent_battery(value: Any) -> int | None:
    """Coerce a battery reading of unknown scale to an integer percentage.

    - ``<= 1``: fraction, multiplied by 100
    - ``1 < v <= 100``: already a percentage
    - ``> 100``: clamped to 100

    Negative readings clamp to 0.
    """
    num = safe_float(value)
    if num is None:
        return None
    if num <= 1:
        percent = round_half_up(num * 100)
    elif num <= 100:
        percent = round_half_up(num)
    else:
        percent = 100
    return max(0, min(100, percent))


def to_enum(enum_cls: type[TEnum], value: Any) -> TEnum | None:
    """Match *value* case-insensitively against the values of *enum_cls*.

    Unknown values return ``None`` so they are treated as absent.
    """
    text = safe_str(value)
    if text is None:
        return None
    wanted = text.strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member
    return None


def normalize_received_at(value: Any, now_ms: int) -> int:
    """Normalize a payload timestamp to epoch milliseconds.

    - Positive numbers below 1e11 are epoch seconds, larger ones milliseconds.
    - ISO 8601 strings are parsed; naive values are taken as UTC.
    - Anything else (absent, zero, negative, unparseable) -> *now_ms*.
    """
    numeric = safe_float(value)
    if numeric is not None:
        if numeric <= 0:
            return now_ms
        if numeric < _MS_THRESHOLD:
            numeric *= 1000
        return int(numeric)

    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return now_ms
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return int(parsed.timestamp() * 1000)

    return now_ms
