from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ScanSummary


class ScanError(Exception):
    pass


class ResolutionError(ScanError):
    """Target could not be resolved. Raised before any port is probed."""

    def __init__(self, host: str, reason: str):
        super().__init__(f"Could not resolve target '{host}': {reason}")
        self.host = host
        self.reason = reason


class ConfigError(ScanError, ValueError):
    pass


class ScanCancelled(ScanError):
    """
    Raised when the cancel token fires mid-scan.
    `summary` holds whatever was probed before the scan stopped (None when
    raised from the gate itself).
    """

    def __init__(self, summary: Optional["ScanSummary"] = None):
        super().__init__("scan cancelled")
        self.summary = summary
