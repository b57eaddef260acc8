import ipaddress
from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request

from accounts.core.exceptions.access import (
    ClientAddressMalformedError,
    ClientAddressUnavailableError,
)
from accounts.core.identity import (
    client_address_from_request,
    parse_address,
    resolve_client_address,
)


class TestParseAddress:
    """Test parsing of IP and socket addresses."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("203.0.113.5", "203.0.113.5"),
            ("203.0.113.5:443", "203.0.113.5"),
            (" 203.0.113.5 ", "203.0.113.5"),
            ("2001:db8::1", "2001:db8::1"),
            ("[2001:db8::1]:443", "2001:db8::1"),
        ],
    )
    def test_valid_addresses(self, value: str, expected: str):
        """Test that IPs and socket addresses yield their IP."""
        assert parse_address(value) == ipaddress.ip_address(expected)

    @pytest.mark.parametrize(
        "value",
        ["", "unknown", "203.0.113.5:", "203.0.113.5:http", "203.0.113.5:70000", "[2001:db8::1]", "2001:db8::1]:443", "example.com:80"],
    )
    def test_invalid_addresses(self, value: str):
        """Test that anything else is rejected."""
        with pytest.raises(ValueError):
            parse_address(value)


class TestResolveClientAddress:
    """Test client address resolution order and failures."""

    def test_header_socket_address(self):
        """Test that a header with a port yields its IP."""
        address = resolve_client_address("10.0.0.1", "203.0.113.5:443")

        assert address == ipaddress.ip_address("203.0.113.5")

    def test_falls_back_to_peer(self):
        """Test that without a header the peer address is used."""
        address = resolve_client_address("198.51.100.7", None)

        assert address == ipaddress.ip_address("198.51.100.7")

    def test_uses_first_forwarded_entry(self):
        """Test that the first entry of a proxy chain is the client."""
        address = resolve_client_address("10.0.0.1", "203.0.113.5, 10.0.0.2, 10.0.0.3")

        assert address == ipaddress.ip_address("203.0.113.5")

    def test_malformed_header_does_not_fall_back(self):
        """Test that an unparseable header fails instead of using the peer."""
        with pytest.raises(ClientAddressMalformedError):
            resolve_client_address("198.51.100.7", "not-an-address")

    def test_no_address_available(self):
        """Test that having neither source fails with Unavailable."""
        with pytest.raises(ClientAddressUnavailableError):
            resolve_client_address(None, None)

    def test_unparseable_peer(self):
        """Test that a peer that is not an IP (e.g. a test client name) is unavailable."""
        with pytest.raises(ClientAddressUnavailableError):
            resolve_client_address("testclient", None)


class TestClientAddressFromRequest:
    """Test resolving addresses from Starlette requests."""

    def _request(self, host: str | None, headers: dict[str, str]) -> MagicMock:
        request = MagicMock(spec=Request)
        request.client = MagicMock(host=host) if host is not None else None
        request.headers = headers

        return request

    def test_reads_configured_header(self):
        """Test that the configured forwarded header is used."""
        request = self._request("10.0.0.1", {"X-Real-IP": "203.0.113.9"})

        with patch("accounts.core.identity.settings.forwarded_address_header", "X-Real-IP"):
            address = client_address_from_request(request)

        assert address == ipaddress.ip_address("203.0.113.9")

    def test_ignores_header_when_disabled(self):
        """Test that the header is ignored when no trusted header is configured."""
        request = self._request("10.0.0.1", {"X-Forwarded-For": "203.0.113.9"})

        with patch("accounts.core.identity.settings.forwarded_address_header", None):
            address = client_address_from_request(request)

        assert address == ipaddress.ip_address("10.0.0.1")

    def test_no_client(self):
        """Test that a request without peer or header is unavailable."""
        request = self._request(None, {})

        with pytest.raises(ClientAddressUnavailableError):
            client_address_from_request(request)
