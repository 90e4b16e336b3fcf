"""Helpers shared by the classifier adapters."""

from __future__ import annotations

import httpx

_MIN_CREDENTIAL_LENGTH = 20
_PLACEHOLDER_MARKER = "YOUR_"


def credential_configured(value: str | None) -> bool:
    """True when *value* looks like a real key rather than a blank or placeholder."""
    return bool(value) and len(value) > _MIN_CREDENTIAL_LENGTH and _PLACEHOLDER_MARKER not in value


def error_message(resp: httpx.Response, prefix: str) -> str:
    """Best error text from a failed response body, else ``"<prefix> <status>"``."""
    try:
        data = resp.json()
    except ValueError:
        data = {}
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return f"{prefix} {resp.status_code}"
