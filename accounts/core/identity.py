"""
Client address resolution.

The forwarded address header is trusted blindly. Only enable it
(`settings.forwarded_address_header`) when the service runs behind a reverse
proxy that strips or overwrites that header for every incoming request;
otherwise any client can pick the address it is rate limited by.
"""

import ipaddress

from fastapi import Request

from accounts.core.config import settings
from accounts.core.exceptions.access import (
    ClientAddressMalformedError,
    ClientAddressUnavailableError,
)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def parse_address(value: str) -> IPAddress:
    """
    Parse an IP address or a socket address into an IP address.

    Accepts "203.0.113.5", "203.0.113.5:443", "2001:db8::1" and "[2001:db8::1]:443".

    Raises:
        ValueError: If the value is neither form
    """
    value = value.strip()

    try:
        return ipaddress.ip_address(value)
    except ValueError:
        pass

    if value.startswith("["):
        host, separator, port = value[1:].partition("]:")
    else:
        host, separator, port = value.rpartition(":")

    if not separator or not port.isdigit() or int(port) > 65535:
        raise ValueError(f"'{value}' is not an IP or socket address")

    address = ipaddress.ip_address(host)

    # IPv6 with a port must be bracketed
    if isinstance(address, ipaddress.IPv6Address) and not value.startswith("["):
        raise ValueError(f"'{value}' is not an IP or socket address")

    return address


def resolve_client_address(
    peer_address: str | None,
    forwarded_header: str | None,
) -> IPAddress:
    """
    Resolve the caller's network address.

    The forwarded header wins when present. Its first comma separated entry
    is the original client as seen by the outermost proxy.

    Args:
        peer_address: Address of the connection peer, if the transport knows it
        forwarded_header: Value of the trusted forwarded address header, if any

    Returns:
        IPv4Address | IPv6Address: The client address

    Raises:
        ClientAddressMalformedError: If the header is present but unparseable
        ClientAddressUnavailableError: If neither source yields an address
    """
    if forwarded_header is not None:
        first = forwarded_header.split(",")[0]

        try:
            return parse_address(first)
        except ValueError as e:
            raise ClientAddressMalformedError(
                f"Failed to parse client address '{first.strip()}'", exception=e
            )

    if peer_address is None:
        raise ClientAddressUnavailableError()

    try:
        return parse_address(peer_address)
    except ValueError as e:
        raise ClientAddressUnavailableError(exception=e)


def client_address_from_request(request: Request) -> IPAddress:
    """
    Resolve the client address of a request.

    Args:
        request: FastAPI request object

    Returns:
        IPv4Address | IPv6Address: The client address
    """
    forwarded = None

    if settings.forwarded_address_header:
        forwarded = request.headers.get(settings.forwarded_address_header)

    peer = request.client.host if request.client else None

    return resolve_client_address(peer, forwarded)
