"""Tests for key and endpoint validation (create_openfort.validation).

Tests cover:
- Key regular expressions
- validate_input: required, invalid, skip value, disabled validation
- check_session_endpoint (mock httpx)
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from create_openfort.validation import (
    ENCRYPTION_SHARE_RE,
    PUBLISHABLE_KEY_RE,
    SECRET_KEY_RE,
    UUID_V4_RE,
    check_session_endpoint,
    validate_input,
    validate_required,
)

UUID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


class TestPatterns:
    @pytest.mark.unit
    def test_publishable_key(self):
        assert PUBLISHABLE_KEY_RE.match(f"pk_test_{UUID}")
        assert PUBLISHABLE_KEY_RE.match(f"pk_live_{UUID}")
        assert not PUBLISHABLE_KEY_RE.match(f"pk_prod_{UUID}")
        assert not PUBLISHABLE_KEY_RE.match(f"sk_test_{UUID}")

    @pytest.mark.unit
    def test_secret_key(self):
        assert SECRET_KEY_RE.match(f"sk_test_{UUID}")
        assert not SECRET_KEY_RE.match(f"sk_test_{UUID}x")

    @pytest.mark.unit
    def test_uuid(self):
        assert UUID_V4_RE.match(UUID)
        assert not UUID_V4_RE.match(UUID.upper())

    @pytest.mark.unit
    def test_encryption_share(self):
        assert ENCRYPTION_SHARE_RE.match("a" * 44)
        assert not ENCRYPTION_SHARE_RE.match("a" * 43)
        assert not ENCRYPTION_SHARE_RE.match("a" * 45)


# ---------------------------------------------------------------------------
# validate_input
# ---------------------------------------------------------------------------


class TestValidateInput:
    @pytest.mark.unit
    def test_valid(self):
        assert validate_input(UUID, UUID_V4_RE, "Shield Secret Key") is None

    @pytest.mark.unit
    def test_required(self):
        assert validate_input("", UUID_V4_RE, "Shield Secret Key") == "Shield Secret Key is required"

    @pytest.mark.unit
    def test_invalid(self):
        assert validate_input("nope", UUID_V4_RE, "Shield Secret Key") == "Shield Secret Key is invalid"

    @pytest.mark.unit
    def test_trailing_newline_is_invalid(self):
        assert validate_input(UUID + "\n", UUID_V4_RE, "Shield Secret Key") == "Shield Secret Key is invalid"

    @pytest.mark.unit
    def test_dash_skips(self):
        assert validate_input("-", PUBLISHABLE_KEY_RE, "Openfort Publishable Key") is None

    @pytest.mark.unit
    def test_disabled(self):
        assert validate_input("", UUID_V4_RE, "X", enabled=False) is None
        assert validate_input("nope", UUID_V4_RE, "X", enabled=False) is None

    @pytest.mark.unit
    def test_validate_required(self):
        assert validate_required("", "API endpoint") == "API endpoint is required"
        assert validate_required("http://x", "API endpoint") is None
        assert validate_required("", "API endpoint", enabled=False) is None


# ---------------------------------------------------------------------------
# check_session_endpoint
# ---------------------------------------------------------------------------


def _mock_client(response=None, error: Exception | None = None) -> AsyncMock:
    mock_client = AsyncMock()
    if error is not None:
        mock_client.post = AsyncMock(side_effect=error)
    else:
        mock_client.post = AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _json_response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    return response


class TestCheckSessionEndpoint:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_valid_session(self):
        client = _mock_client(_json_response({"session": "abc"}))
        with patch("httpx.AsyncClient", return_value=client):
            result = await check_session_endpoint("http://localhost:3110/api")

        assert result.valid is True
        assert result.error is None
        client.post.assert_awaited_once()
        assert client.post.await_args.args[0] == "http://localhost:3110/api"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_session(self):
        client = _mock_client(_json_response({"error": "unauthorized"}))
        with patch("httpx.AsyncClient", return_value=client):
            result = await check_session_endpoint("http://localhost:3110/api")

        assert result.valid is False
        assert '"session": "<session>"' in result.error
        assert json.dumps({"error": "unauthorized"}, indent=2) in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = _mock_client(error=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient", return_value=client):
            result = await check_session_endpoint("http://localhost:1/api")

        assert result.valid is False
        assert "Ensure you have a backend running" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_json_body(self):
        response = MagicMock()
        response.json.side_effect = json.JSONDecodeError("bad", "doc", 0)
        with patch("httpx.AsyncClient", return_value=_mock_client(response)):
            result = await check_session_endpoint("http://localhost:3110/api")

        assert result.valid is False
        assert "Ensure you have a backend running" in result.error
