"""Validation of user-supplied keys and of the encryption-session endpoint.

Key checks are plain regular expressions.  ``-`` is accepted for every key
so a value can be skipped and filled in later by hand.
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx
from pydantic import BaseModel, Field

SKIP_VALUE = "-"

UUID_V4_PATTERN = r"[\da-f]{8}-[\da-f]{4}-[\da-f]{4}-[\da-f]{4}-[\da-f]{12}"
_KEY_PATTERN = rf"(test|live)_{UUID_V4_PATTERN}"

SECRET_KEY_RE = re.compile(rf"^sk_{_KEY_PATTERN}$")
PUBLISHABLE_KEY_RE = re.compile(rf"^pk_{_KEY_PATTERN}$")
UUID_V4_RE = re.compile(rf"^{UUID_V4_PATTERN}$")
ENCRYPTION_SHARE_RE = re.compile(r"^.{44}$")


def validate_input(value: str, pattern: re.Pattern[str], name: str, enabled: bool = True) -> str | None:
    """Return an error message for *value*, or ``None`` when it is acceptable.

    Examples::

        validate_input("", PUBLISHABLE_KEY_RE, "Key")   -> "Key is required"
        validate_input("pk", PUBLISHABLE_KEY_RE, "Key") -> "Key is invalid"
        validate_input("-", PUBLISHABLE_KEY_RE, "Key")  -> None
    """
    if not enabled or value == SKIP_VALUE:
        return None
    if not value:
        return f"{name} is required"
    if not pattern.fullmatch(value):
        return f"{name} is invalid"
    return None


def validate_required(value: str, name: str, enabled: bool = True) -> str | None:
    if enabled and not value:
        return f"{name} is required"
    return None


class EndpointCheck(BaseModel):
    """Result of probing an encryption-session endpoint."""

    valid: bool = Field(default=False)
    error: str | None = Field(default=None)
    body: Any = Field(default=None, description="Decoded JSON response, if any")


async def check_session_endpoint(url: str, timeout: float = 10.0) -> EndpointCheck:
    """POST to *url* and check the JSON response carries a ``session``.

    Never raises; connection and decoding failures are reported in the
    returned ``EndpointCheck``.
    """
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as client:
            response = await client.post(url, headers={"Content-Type": "application/json"})
            body = response.json()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError):
        return EndpointCheck(
            error="Invalid API endpoint. Ensure you have a backend running and the endpoint is correct."
        )

    if isinstance(body, dict) and body.get("session"):
        return EndpointCheck(valid=True, body=body)

    return EndpointCheck(
        body=body,
        error=(
            "Invalid API endpoint:\n\n"
            "Response must be:\n"
            '{\n  "session": "<session>"\n}\n\n'
            "But got:\n"
            f"{json.dumps(body, indent=2)}\n"
        ),
    )
