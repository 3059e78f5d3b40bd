from __future__ import annotations

import socket
import time
from typing import Optional

from .banner import read_banner
from .models import ProbeResult


def _family_for(address: str) -> int:
    return socket.AF_INET6 if ":" in address else socket.AF_INET


def probe_port(address: str, port: int, timeout_ms: int) -> ProbeResult:
    """
    Connect to (address, port), then try one short read for a greeting.

    Never raises for network conditions: refused, reset, unreachable and
    timed-out connects all come back as is_open=False. The connect and the
    banner read share one deadline, and the socket is closed on every path.
    """
    timeout_s = timeout_ms / 1000.0
    deadline = time.monotonic() + timeout_s
    sock: Optional[socket.socket] = None
    try:
        sock = socket.socket(_family_for(address), socket.SOCK_STREAM)
        sock.settimeout(timeout_s)
        sock.connect((address, port))
    except OSError:
        if sock is not None:
            sock.close()
        return ProbeResult(port=port, is_open=False)

    try:
        banner = read_banner(sock, deadline)
    finally:
        sock.close()
    return ProbeResult(port=port, is_open=True, banner=banner)
