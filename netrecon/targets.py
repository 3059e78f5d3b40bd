from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Optional

from .errors import ResolutionError
from .models import ScanTarget

logger = logging.getLogger(__name__)


def reverse_lookup(address: str) -> Optional[str]:
    """Best-effort PTR lookup; any failure just means no name."""
    try:
        name, _aliases, _addrs = socket.gethostbyaddr(address)
    except (OSError, UnicodeError) as e:
        logger.debug("Reverse lookup for %s failed: %s", address, e)
        return None
    return name or None


def resolve_address(host: str) -> str:
    """
    Supports:
      - IPv4 / IPv6 literal: "172.20.0.10", "::1" (no lookup)
      - Hostname: "webapp" (first address in resolver order)
    """
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(host, str(e)) from e
    if not infos:
        raise ResolutionError(host, "no addresses returned")

    _family, _type, _proto, _canon, sockaddr = infos[0]
    return sockaddr[0]


def resolve_target(host: str, reverse: bool = True) -> ScanTarget:
    host = host.strip()
    if not host:
        raise ResolutionError(host, "empty target")

    address = resolve_address(host)
    logger.debug("Resolved %s -> %s", host, address)

    reverse_name = reverse_lookup(address) if reverse else None
    return ScanTarget(host=host, address=address, reverse_name=reverse_name)
