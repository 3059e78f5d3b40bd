from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ScanTarget:
    host: str
    address: str
    reverse_name: Optional[str] = None


@dataclass(frozen=True)
class ProbeResult:
    port: int
    is_open: bool
    banner: Optional[str] = None
    service: Optional[str] = None


@dataclass(frozen=True)
class ScanSummary:
    target: str
    address: str
    reverse_name: Optional[str]
    ports_scanned: int
    open_results: Tuple[ProbeResult, ...] = ()
