"""Anonymous usage reporting.

Sends one PostHog ``capture`` event per lifecycle status (``started``,
``completed``, ``error``).  Reporting is best effort: it is skipped when
disabled or unconfigured, and network failures never interrupt scaffolding.
"""

from __future__ import annotations

import getpass
import hashlib
import platform
import secrets
import socket
from typing import Any, Literal

import httpx

from create_openfort import __version__
from create_openfort.config import TelemetryConfig
from create_openfort.utils import console, print_error

Status = Literal["started", "completed", "error"]

EVENT_NAME = "cli_tool_used"


def anonymous_id() -> str:
    """Stable, non-reversible identifier for this user on this machine."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    identifier = f"{socket.gethostname()}-{user}"
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()[:16]


class Telemetry:
    """PostHog event sender bound to one CLI session."""

    def __init__(self, config: TelemetryConfig, debug: bool = False) -> None:
        self.config = config
        self.debug = debug
        self.anonymous_id = anonymous_id()
        self.session_id = secrets.token_hex(6)
        self.project_id: str | None = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled and self.config.configured

    def build_payload(self, status: Status, properties: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the JSON body of a capture request."""
        return {
            "api_key": self.config.posthog_key,
            "event": EVENT_NAME,
            "distinct_id": self.anonymous_id,
            "properties": {
                "session_id": self.session_id,
                "cli_version": __version__,
                "python_version": platform.python_version(),
                "platform": platform.system().lower(),
                "projectId": self.project_id,
                "cli_status": status,
                **(properties or {}),
            },
        }

    async def send(self, status: Status, properties: dict[str, Any] | None = None) -> bool:
        """Send an event.

        Returns:
            ``True`` if the event was accepted, ``False`` if it was skipped or
            failed.
        """
        if not self.enabled:
            return False

        payload = self.build_payload(status, properties)
        url = f"{str(self.config.posthog_host).rstrip('/')}/capture/"
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout)) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            if self.debug:
                print_error(f"Failed to send telemetry: {exc}")
            return False

        if self.debug:
            console.print_json(data=payload["properties"])
        return True
