"""Helpers for safe debug logging.

Webhook payloads may carry credentials next to the tracking data: API keys
under header-like names (``x-api-key``), bearer tokens, or signed URLs whose
query string holds the signature. This module redacts such values and
truncates long strings before a payload is emitted in DEBUG logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_PLACEHOLDER = "<redacted>"

# Matched as substrings of the key with separators removed, so
# "x-api-key", "API_KEY" and "apiKey" all hit "apikey".
_SENSITIVE_FRAGMENTS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "apikey",
    "authorization",
    "cookie",
    "signature",
    "signedurl",
    "credential",
)

_KEY_SEPARATORS = re.compile(r"[^a-z0-9]")


def is_sensitive_key(key: str) -> bool:
    folded = _KEY_SEPARATORS.sub("", key.lower())
    return any(fragment in folded for fragment in _SENSITIVE_FRAGMENTS)


def _redact_url_query(text: str) -> str:
    """Blank out sensitive query parameters of an http(s) URL."""
    parts = urlsplit(text)
    if parts.scheme not in ("http", "https") or not parts.query:
        return text
    params = parse_qsl(parts.query, keep_blank_values=True)
    if not any(is_sensitive_key(name) for name, _ in params):
        return text
    cleaned = [(name, _PLACEHOLDER if is_sensitive_key(name) else value) for name, value in params]
    return urlunsplit(parts._replace(query=urlencode(cleaned, safe="<>")))


def _redact_text(text: str, max_string: int) -> str:
    text = _redact_url_query(text)
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with credentials replaced, suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    match value:
        case None | bool() | int() | float():
            return value
        case str():
            return _redact_text(value, max_string)
        case bytes() | bytearray():
            return f"<bytes:{len(value)}b>"
        case Mapping():
            return {
                str(key): (
                    _PLACEHOLDER
                    if is_sensitive_key(str(key))
                    else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
                )
                for key, item in value.items()
            }
        case Sequence():
            return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
        case _:
            return repr(value)
