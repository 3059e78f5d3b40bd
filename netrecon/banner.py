from __future__ import annotations

import socket
import time
from typing import Optional

from .config import BANNER_LIMIT


def clean_banner(data: bytes, limit: int = BANNER_LIMIT) -> Optional[str]:
    """
    Decode a greeting into text.
    Undecodable bytes become U+FFFD rather than failing; carriage returns are
    dropped so multi-line greetings split cleanly on "\n".
    """
    text = data[:limit].decode("utf-8", errors="replace").replace("\r", "")
    return text or None


def _try_recv(sock: socket.socket, n: int, timeout: float) -> bytes:
    sock.settimeout(timeout)
    try:
        return sock.recv(n)
    except OSError:
        return b""


def read_banner(sock: socket.socket, deadline: float, limit: int = BANNER_LIMIT) -> Optional[str]:
    """
    Called only after connect() succeeds.
    One read, bounded by whatever is left of the probe deadline
    (time.monotonic() based). Silence, EOF and read errors all mean no banner.
    """
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        return None

    data = _try_recv(sock, n=limit, timeout=remaining)
    if not data:
        return None
    return clean_banner(data, limit)
