from __future__ import annotations

import logging
from typing import List, Optional, Set

from .config import DEFAULT_PORT_SPEC

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535


def _to_int(s: str) -> Optional[int]:
    s = s.strip()
    try:
        return int(s)
    except ValueError:
        return None


def parse_ports(spec: Optional[str]) -> List[int]:
    """
    Parses a port specification string into a sorted, de-duplicated list.
    Supports:
    - Single ports: "80"
    - Ranges: "1-1024" (clamped to 1-65535)
    - Comma-separated: "22,80,443"
    - Mixed: "1-1024,8080,9000-9005"

    Malformed or out-of-range tokens are dropped, not reported.
    An empty or missing spec means 1-1024.
    """
    if spec is None or not spec.strip():
        spec = DEFAULT_PORT_SPEC

    ports: Set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start = _to_int(start_s)
            end = _to_int(end_s)
            if start is None or end is None:
                logger.debug("Dropping malformed port range %r", part)
                continue
            ports.update(range(max(MIN_PORT, start), min(MAX_PORT, end) + 1))
        else:
            p = _to_int(part)
            if p is None or p < MIN_PORT or p > MAX_PORT:
                logger.debug("Dropping invalid port %r", part)
                continue
            ports.add(p)

    return sorted(ports)
